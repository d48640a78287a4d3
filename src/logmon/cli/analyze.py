"""CLI command for batch log analysis."""

import json
import sys

import click

from logmon.dialects import dialect_names
from logmon.errors import SourceUnavailableError
from logmon.report import export_document, write_export
from logmon.session import analyze_batch, create_session


@click.command('analyze')
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
@click.option('--json', 'json_output', is_flag=True, help='Print the export document as JSON instead of the report')
@click.option('--output', '-o', type=click.Path(dir_okay=False), default=None, help='Also write the export document here')
@click.option('--error-threshold', type=click.IntRange(min=1), default=None, help='Errors per IP before blacklisting (default: 10)')
@click.option('--no-color', is_flag=True, help='Disable colored output')
def analyze_command(
    path: str,
    dialect: str,
    json_output: bool,
    output: str | None,
    error_threshold: int | None,
    no_color: bool,
):
    """Analyze a complete log file and print a report.

    \b
    Examples:
        logmon analyze access.log
        logmon analyze access.log -f nginx --json
        logmon analyze app.log -f application -o analysis.json
    """
    session = create_session(dialect, error_threshold=error_threshold)

    try:
        report = analyze_batch(session, path)
    except SourceUnavailableError as e:
        click.echo(f'Error: {e}', err=True)
        sys.exit(1)

    if json_output:
        click.echo(json.dumps(export_document(session).model_dump(), indent=2))
    else:
        colorize = not no_color and sys.stdout.isatty()
        click.echo(report.to_cli(colorize=colorize))

    if output:
        target = write_export(session, output)
        click.echo(f'Analysis exported to: {target}', err=json_output)
