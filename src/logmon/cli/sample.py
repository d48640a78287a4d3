"""CLI command for generating a sample log."""

import click

from logmon.sample import write_sample_log


@click.command('sample')
@click.argument('path', type=click.Path(dir_okay=False), default='sample.log')
def sample_command(path: str):
    """Write a sample Apache access log (default: sample.log)."""
    target = write_sample_log(path)
    click.echo(f'Sample log created: {target}')
