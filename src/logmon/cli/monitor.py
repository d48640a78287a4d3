"""CLI command for real-time log monitoring."""

import sys

import click
from prometheus_client import start_http_server

from logmon.dialects import dialect_names
from logmon.errors import SourceUnavailableError
from logmon.report import write_export
from logmon.session import create_session, start_monitor


@click.command('monitor')
@click.argument('path', type=click.Path(dir_okay=False))
@click.option(
    '--format',
    '-f',
    'dialect',
    type=click.Choice(dialect_names(), case_sensitive=False),
    default='apache',
    show_default=True,
    help='Log format',
)
@click.option('--interval', type=click.IntRange(min=0), default=None, help='Poll interval in ms (default: 1000)')
@click.option('--output', '-o', type=click.Path(dir_okay=False), default=None, help='Write the export document on exit')
@click.option('--error-threshold', type=click.IntRange(min=1), default=None, help='Errors per IP before blacklisting (default: 10)')
@click.option('--high-alert-threshold', type=click.IntRange(min=1), default=None, help='Alerts per minute before HighAlertRate (default: 5)')
@click.option('--metrics-port', type=int, default=None, help='Expose Prometheus metrics on this port')
def monitor_command(
    path: str,
    dialect: str,
    interval: int | None,
    output: str | None,
    error_threshold: int | None,
    high_alert_threshold: int | None,
    metrics_port: int | None,
):
    """Follow a growing log file, raising alerts as lines arrive.

    Starts at the current end of the file and runs until Ctrl+C, then prints
    the report for everything seen.

    \b
    Examples:
        logmon monitor /var/log/nginx/access.log -f nginx
        logmon monitor app.log -f application --interval 250 -o alerts.json
    """
    session = create_session(dialect, error_threshold=error_threshold, high_alert_threshold=high_alert_threshold)

    try:
        handle = start_monitor(session, path, poll_interval_ms=interval)
    except SourceUnavailableError as e:
        click.echo(f'Error: {e}', err=True)
        sys.exit(1)

    if metrics_port is not None:
        start_http_server(metrics_port)
        click.echo(f'Serving metrics on :{metrics_port}/metrics', err=True)

    click.echo(f'Monitoring {path} (press Ctrl+C to stop)', err=True)
    report = handle.run()

    click.echo('')
    click.echo(report.to_cli(colorize=sys.stdout.isatty()))
    if output:
        target = write_export(session, output)
        click.echo(f'Analysis exported to: {target}')
