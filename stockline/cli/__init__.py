"""CLI commands: one module per area (data, batches, reports, server)."""

from typer import Typer

from stockline.cli import batch_commands, data_commands, report_commands, serve_mode
from stockline.utils.tracing import init_tracing

init_tracing()

app = Typer(help="Batch-constrained inventory allocation and health")


def register_commands() -> None:
    """Register all CLI commands on the global app."""
    app.command(name="init-db")(data_commands.init_database)
    app.command(name="import")(data_commands.import_csv)
    app.command()(batch_commands.activate)
    app.command()(batch_commands.complete)
    app.command()(batch_commands.transfer)
    app.command(name="zero-stock")(batch_commands.zero_stock)
    app.command(name="vin-health")(report_commands.vin_health)
    app.command(name="batch-health")(report_commands.batch_health)
    app.command(name="global-health")(report_commands.global_health)
    app.command()(report_commands.gaps)
    app.command()(serve_mode.serve)


register_commands()
