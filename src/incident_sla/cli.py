"""
Command line interface for incident SLA reporting
"""

from pathlib import Path
from typing import Optional

import click

from incident_sla.config import settings
from incident_sla.core.exceptions import ApplicationException
from incident_sla.shared.infrastructure.logging import get_logger, setup_logging
from incident_sla.sla.application import IncidentReportService, IncidentReport
from incident_sla.sla.infrastructure import SLAConfigManager, WorkbookReader, WorkbookWriter

logger = get_logger(__name__)


def default_output_path(input_path: Path) -> Path:
    """``report.xlsx`` -> ``report-processed.xlsx`` next to the input."""
    return input_path.with_name(f"{input_path.stem}-processed.xlsx")


def _echo_summary(report: IncidentReport, output: Path) -> None:
    summary = report.compliance
    click.echo(f"Incidents: {len(report.incidents)}")
    click.echo(f"Interval slots: {report.max_width}")
    click.echo(summary.title)
    for row in summary.rows:
        click.echo(
            f"  {row.label:<24} total={row.total:<5} within={row.within:<5} "
            f"exceeding={row.exceeding:<5} {row.percentage_display:>7} {row.flag.value}".rstrip()
        )
    click.echo(f"Written: {output}")


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Logging level (defaults to LOG_LEVEL setting)",
)
def main(log_level: Optional[str]):
    """Incident interval and SLA compliance reporting

    Build the 'Incident Intervals' and 'Compliance and Credit' report from
    a raw incident export.
    """
    setup_logging(log_level or settings.log_level, settings.environment)


@main.command(name="process")
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Output workbook (default: <input>-processed.xlsx)",
)
@click.option("--sheet", default=None, help="Input sheet name (default: first sheet)")
@click.option(
    "--config", "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="SLA threshold YAML (default: SLA_CONFIG_PATH setting)",
)
def process(input_path: Path, output: Optional[Path], sheet: Optional[str], config_path: Optional[Path]):
    """Process an incident export into the report workbook

    Examples:
        incident-sla process incidents.xlsx
        incident-sla process incidents.xlsx -o report.xlsx --sheet "Page 1"
    """
    output = output or default_output_path(input_path)

    try:
        config_manager = SLAConfigManager()
        config_manager.load(config_path or settings.sla_config_path)

        records = WorkbookReader.read_records(input_path, sheet_name=sheet)
        report = IncidentReportService(config_manager).build_report(records)
        if report.is_empty:
            raise click.ClickException(
                "Processed output is empty - check input columns (Number/Priority/Opened/Updated)"
            )

        WorkbookWriter().write(report, output)
    except ApplicationException as e:
        logger.error("Processing failed", extra={"input": str(input_path), "error": e.message})
        raise click.ClickException(e.message) from e

    _echo_summary(report, output)


@main.command(name="serve")
@click.option("--host", default=None, help="Bind host (default: HOST setting)")
@click.option("--port", type=int, default=None, help="Bind port (default: PORT setting)")
@click.option("--reload", is_flag=True, help="Reload on code changes")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the HTTP API"""
    import uvicorn

    uvicorn.run(
        "incident_sla.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_level="info",
    )


if __name__ == "__main__":
    main()
