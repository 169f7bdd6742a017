"""Database setup and CSV imports."""

from pathlib import Path

import typer

from stockline.db import init_db, reset_db
from stockline.errors import IngestionError
from stockline.services.ingestion import IMPORTERS, import_packing_list

from .shared import console, logger, print_import_result


def init_database(
    reset: bool = typer.Option(False, "--reset", help="Drop and recreate all tables"),
) -> None:
    """Create the database tables (DATABASE_URL)."""
    log = logger.bind(command="init-db")
    if reset:
        reset_db()
        console.print("[yellow]Database reset.[/yellow]")
        log.warning("init_db.reset")
    else:
        init_db()
        console.print("[green]Database ready.[/green]")
        log.info("init_db.complete")


def import_csv(
    kind: str = typer.Argument(..., help=f"One of: {', '.join(IMPORTERS)}"),
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="CSV file"),
    uploaded_by: str = typer.Option("cli", "--by", help="Recorded as uploader (packing lists)"),
) -> None:
    """Import a CSV file into the catalog, batches or inventory."""
    log = logger.bind(command="import", kind=kind, path=str(path))
    importer = IMPORTERS.get(kind)
    if importer is None:
        console.print(f"[red]Unknown import kind {kind!r}. Use one of: {', '.join(IMPORTERS)}[/red]")
        raise typer.Exit(1)

    text = path.read_text(encoding="utf-8")
    try:
        if importer is import_packing_list:
            result = import_packing_list(text, uploaded_by=uploaded_by)
        else:
            result = importer(text)
    except IngestionError as e:
        console.print(f"[red]{e}[/red]")
        log.error("import.rejected", error=str(e))
        raise typer.Exit(1) from e
    print_import_result(kind, result)
    log.info("import.complete", imported=result.success, skipped=result.stats.skipped_rows)
