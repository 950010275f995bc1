"""Main CLI for es-setup"""

import sys
import logging
import click
import yaml
from es_client.exceptions import FailedValidation
from es_client.helpers.schemacheck import SchemaCheck
from rich.console import Console
from rich.table import Table
from es_setup._version import __version__
from es_setup.classdef import Descriptor
from es_setup.debug import set_level
from es_setup.defaults.settings import (
    CLICK_DRYRUN,
    NO_MAX_WAIT,
    RATE_LIMIT_WAIT_INTERVAL,
    TASK_WAIT_INTERVAL,
    footer,
)
from es_setup.exceptions import EsSetupException
from es_setup.logtools import set_logging
from es_setup.orchestrator import deploy
from es_setup.validators.logconfig import config_logging


def configure_logging(loglevel, logfile, logformat):
    """
    Validate the logging options and attach the handler.

    :rtype: :py:class:`~.es_setup.logtools.LogInfo`
    """
    cfg = {'loglevel': loglevel, 'logfile': logfile, 'logformat': logformat}
    cfg = {key: value for key, value in cfg.items() if value is not None}
    try:
        cfg = SchemaCheck(cfg, config_logging(), 'Logging settings', 'logging').result()
    except FailedValidation as err:
        raise click.BadParameter(str(err)) from err
    return set_logging(cfg)


def swap_table(swaps):
    """
    :param swaps: Swap records

    :returns: A table of the alias swaps performed
    :rtype: :py:class:`~.rich.table.Table`
    """
    table = Table(title='Alias swaps')
    table.add_column('Alias', style='cyan')
    table.add_column('Old index')
    table.add_column('New index', style='green')
    for swap in swaps:
        table.add_row(swap['alias'], swap['oldIndex'], swap['newIndex'])
    return table


def write_output(data, output):
    """Write the substituted descriptor as YAML to ``output`` (``-`` is STDOUT)"""
    text = yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
    if output == '-':
        click.echo(text, nl=False)
        return
    with open(output, 'w', encoding='utf-8') as fhandle:
        fhandle.write(text)


@click.command(epilog=footer(__version__))
@click.argument('descriptor_file', type=click.Path(exists=True, dir_okay=False), nargs=1)
@click.option('--region', help='Region being deployed to. Default: provider.region')
@click.option('--profile', help='AWS profile. Default: provider.profile')
@click.option(
    '--output', type=click.Path(dir_okay=False, allow_dash=True),
    help='Write the descriptor with placeholders replaced here ("-" for STDOUT)',
)
@click.option(
    '--placeholder-style', type=click.Choice(['braces', 'dollar']), default='braces',
    show_default=True, help='{{esSetup.path: key}} or ${esSetup.path: key}',
)
@click.option(
    '--wait-interval', type=click.IntRange(min=1), default=TASK_WAIT_INTERVAL,
    show_default=True, help='Seconds between reindex task checks',
)
@click.option(
    '--rate-limit-interval', type=click.IntRange(min=1), default=RATE_LIMIT_WAIT_INTERVAL,
    show_default=True, help='Seconds to back off after being rate limited',
)
@click.option(
    '--max-wait', type=int, default=NO_MAX_WAIT, show_default=True,
    help='Seconds to wait for each reindex. -1 waits forever',
)
@click.option(
    '--request-timeout', type=click.IntRange(min=1), default=30, show_default=True,
    help='Request timeout in seconds',
)
@click.option(
    '--max-workers', type=click.IntRange(min=1), default=None,
    help='How many templates, indices, pipelines or repositories to deploy at once',
)
@click.option('--dry-run', **CLICK_DRYRUN['dry-run'])
@click.option(
    '--loglevel', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    default=None, help='Log level',
)
@click.option('--logfile', default=None, help='Log file')
@click.option(
    '--logformat', type=click.Choice(['default', 'json', 'logstash', 'ecs']),
    default=None, help='Log output format',
)
@click.option(
    '--debug-level', type=click.IntRange(1, 5), default=1, show_default=True,
    help='Tiered debug detail, when --loglevel is DEBUG',
)
@click.version_option(__version__, '-v', '--version', prog_name='es_setup')
def cli(
    descriptor_file,
    region,
    profile,
    output,
    placeholder_style,
    wait_interval,
    rate_limit_interval,
    max_wait,
    request_timeout,
    max_workers,
    dry_run,
    loglevel,
    logfile,
    logformat,
    debug_level,
):
    """
    Deploy Elasticsearch ingest pipelines, templates, indices and snapshot
    repositories from the custom.elasticsearch section of DESCRIPTOR_FILE.

    Templates with shouldSwapIndicesOfAliases set move the indices behind their
    aliases to new versions when their mappings change. The new index names are
    written into the descriptor's placeholders.
    """
    configure_logging(loglevel, logfile, logformat)
    set_level(debug_level)
    logger = logging.getLogger(__name__)
    logger.debug('descriptor_file: %s', descriptor_file)
    try:
        descriptor = Descriptor.from_file(
            descriptor_file, env_vars=placeholder_style != 'dollar'
        )
        swaps = deploy(
            descriptor,
            region=region,
            profile=profile,
            placeholder_style=placeholder_style,
            dry_run=dry_run,
            wait_interval=wait_interval,
            rate_limit_interval=rate_limit_interval,
            max_wait=max_wait,
            request_timeout=request_timeout,
            max_workers=max_workers,
        )
    except EsSetupException as err:
        logger.critical('Deployment failed: %s', err)
        click.echo(f'Deployment failed: {err}', err=True)
        sys.exit(1)
    if swaps:
        Console(stderr=True).print(swap_table(swaps))
    if output:
        write_output(descriptor.data, output)
    logger.info('All targets completed.')
