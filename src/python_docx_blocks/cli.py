"""Command-line interface for python-docx-blocks.

Provides commands for inspecting and structurally editing Word documents from
the terminal.
"""

import logging
from pathlib import Path
from typing import Annotated

import typer

from . import Document, __version__
from .errors import DocxBlocksError, DuplicateIdError
from .models.paragraph import Paragraph
from .models.table import Table

app = typer.Typer(
    name="docx-blocks",
    help="Inspect and edit the block structure of Word documents.",
    no_args_is_help=True,
)

# Errors reported as "Error: ..." with exit code 1
_CLI_ERRORS = (DocxBlocksError, OSError, ValueError)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"docx-blocks version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Log debug output to stderr.")
    ] = False,
) -> None:
    """Inspect and edit the block structure of Word documents."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


def _preview(text: str, width: int = 40) -> str:
    text = text.replace("\n", " ")
    return text[:width] + "..." if len(text) > width else text


@app.command()
def info(
    file: Annotated[Path, typer.Argument(help="Path to the .docx file")],
) -> None:
    """Show document information."""
    try:
        doc = Document(file, validate_ids=False)
        typer.echo(f"File: {file}")
        typer.echo(f"Blocks: {len(doc.blocks)}")
        typer.echo(f"Paragraphs: {len(doc.paragraphs)}")
        typer.echo(f"Tables: {len(doc.tables)}")
        typer.echo(f"Sections: {len(doc.sections)}")
        typer.echo(f"Text length: {doc.body.text_length()}")
        typer.echo(f"Headers: {len(doc.headers)}")
        typer.echo(f"Footers: {len(doc.footers)}")
        typer.echo(f"Comments: {len(doc.comments)}")
        typer.echo(f"Parts: {len(doc.package)}")
    except _CLI_ERRORS as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def outline(
    file: Annotated[Path, typer.Argument(help="Path to the .docx file")],
) -> None:
    """List every body block with its kind, start offset and a text preview."""
    try:
        doc = Document(file, validate_ids=False)
        offset = 0
        for index, block in enumerate(doc.body.blocks()):
            if isinstance(block, Paragraph):
                style = f" [{block.style}]" if block.style else ""
                typer.echo(f"{index:4d} p    @{offset:<6d}{style} {_preview(block.text)!r}")
                offset += block.text_length()
            elif isinstance(block, Table):
                typer.echo(f"{index:4d} tbl  {block.row_count}x{block.col_count}")
            else:
                typer.echo(f"{index:4d} {block!r}")
    except _CLI_ERRORS as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def insert(
    file: Annotated[Path, typer.Argument(help="Path to the .docx file")],
    text: Annotated[str, typer.Option("--text", "-t", help="Paragraph text")],
    offset: Annotated[
        int | None, typer.Option("--offset", help="Body text offset to insert at")
    ] = None,
    bookmark: Annotated[
        str | None, typer.Option("--bookmark", "-b", help="Insert where this bookmark starts")
    ] = None,
    style: Annotated[str | None, typer.Option("--style", "-s", help="Paragraph style id")] = None,
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Output file path")] = None,
) -> None:
    """Insert a paragraph at a character offset of the body text or at a bookmark."""
    if (offset is None) == (bookmark is None):
        typer.echo("Error: give exactly one of --offset or --bookmark", err=True)
        raise typer.Exit(1)
    try:
        doc = Document(file)
        if bookmark is not None:
            doc.insert_at_bookmark(bookmark, Paragraph.create(text, style))
            where = f"bookmark {bookmark!r}"
        else:
            doc.insert_paragraph_at(offset, text, style)
            where = f"offset {offset}"
        output_path = output or file
        doc.save(output_path)
        typer.echo(f"Inserted paragraph at {where} and saved to {output_path}")
    except _CLI_ERRORS as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command("check-ids")
def check_ids(
    file: Annotated[Path, typer.Argument(help="Path to the .docx file")],
) -> None:
    """Check that paragraph ids are unique across the document."""
    try:
        doc = Document(file, validate_ids=False)
        doc.validate_ids()
        typer.echo("All paragraph ids are unique")
    except DuplicateIdError as e:
        typer.echo(str(e).rstrip(), err=True)
        raise typer.Exit(1)
    except _CLI_ERRORS as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def apply(
    file: Annotated[Path, typer.Argument(help="Path to the .docx file")],
    edits: Annotated[Path, typer.Argument(help="Path to YAML/JSON edits file")],
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Output file path")] = None,
    stop_on_error: Annotated[
        bool, typer.Option("--stop-on-error", help="Stop at the first failed edit")
    ] = False,
) -> None:
    """Apply edits from a YAML or JSON file."""
    try:
        doc = Document(file)
        file_format = "json" if edits.suffix.lower() == ".json" else "yaml"
        results = doc.apply_edit_file(edits, format=file_format, stop_on_error=stop_on_error)
        output_path = output or file
        doc.save(output_path)

        success_count = sum(1 for r in results if r.success)
        fail_count = len(results) - success_count
        typer.echo(f"Applied {success_count} edits ({fail_count} failed), saved to {output_path}")

        if fail_count > 0:
            for r in results:
                if not r.success:
                    typer.echo(f"  Failed: {r.message}", err=True)
    except _CLI_ERRORS as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
