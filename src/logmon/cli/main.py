"""Main CLI entry point with command groups"""

import click

from logmon.__version__ import __version__
from logmon.cli.analyze import analyze_command
from logmon.cli.monitor import monitor_command
from logmon.cli.sample import sample_command
from logmon.utils import setup_logging


class DefaultCommandGroup(click.Group):
    """Custom Click Group that allows a default command"""

    def parse_args(self, ctx, args):
        # During shell completion, don't redirect to default command
        if ctx.resilient_parsing:
            return super().parse_args(ctx, args)

        # Group-level options (--help, --version, --log-level) are handled by the group
        if not args or args[0].startswith('-'):
            return super().parse_args(ctx, args)

        # Check if first arg is a known command
        if args[0] in self.commands:
            return super().parse_args(ctx, args)

        # Otherwise, treat as analyze command (default)
        return super().parse_args(ctx, ['analyze'] + args)


@click.group(cls=DefaultCommandGroup, invoke_without_command=True)
@click.version_option(version=__version__, prog_name='logmon')
@click.option(
    '--log-level',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
    default=None,
    help='Logging level (default: LOGMON_LOG_LEVEL or WARNING)',
)
@click.pass_context
def cli(ctx, log_level):
    """
    logmon - Log analyzer and security monitor.

    \b
    Commands:
      logmon <path>                 Analyze a log file (default command)
      logmon monitor <path>         Follow a growing log file until Ctrl+C
      logmon sample [path]          Write a sample Apache log

    \b
    Examples:
      logmon /var/log/apache2/access.log
      logmon analyze access.log -f nginx --json
      logmon analyze app.log -f application -o report.json
      logmon monitor /var/log/nginx/access.log -f nginx --metrics-port 9100
    """
    setup_logging(log_level)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit(0)


cli.add_command(analyze_command, name='analyze')
cli.add_command(monitor_command, name='monitor')
cli.add_command(sample_command, name='sample')


def main():
    """Entry point for the CLI"""
    cli()


if __name__ == '__main__':
    main()
