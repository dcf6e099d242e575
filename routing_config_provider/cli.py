"""Command-line interface for the file configuration provider."""

import json
import queue
import sys
from dataclasses import asdict
from typing import Optional

import click
import yaml

from .errors import ProviderError
from .logging import initialize_logging, get_logger
from .pool import WorkerPool
from .provider import FileProvider
from .settings import ProviderSettings, SettingsValidationError
from .types import Configuration


def _load_settings(settings_path: Optional[str], directory: Optional[str], filename: Optional[str],
                   fallback_file: Optional[str], watch: bool) -> ProviderSettings:
    if settings_path:
        settings = ProviderSettings.from_yaml(settings_path)
    else:
        settings = ProviderSettings.from_env()

    if directory:
        settings.directory = directory
    if filename:
        settings.filename = filename
    if fallback_file:
        settings.fallback_file = fallback_file
    if watch:
        settings.watch = True
    return settings


def configuration_to_dict(configuration: Configuration) -> dict:
    data = asdict(configuration)
    for tls in data['tls']:
        tls.pop('identity', None)
    return data


def _source_options(command):
    command = click.option('--settings', 'settings_path', type=click.Path(dir_okay=False),
                           help='YAML file with provider settings')(command)
    command = click.option('--directory', '-d', type=click.Path(), help='Directory of configuration fragments')(command)
    command = click.option('--filename', '-f', type=click.Path(), help='Single (templated) configuration file')(command)
    command = click.option('--fallback-file', type=click.Path(), help='Raw configuration file used as last resort')(command)
    command = click.option('--log-level', default=None, help='Log level (DEBUG, INFO, ...)')(command)
    return command


def _prepare(settings_path, directory, filename, fallback_file, log_level, watch=False) -> ProviderSettings:
    try:
        settings = _load_settings(settings_path, directory, filename, fallback_file, watch)
    except SettingsValidationError as e:
        click.echo(click.style("✗ Invalid provider settings:", fg='red'), err=True)
        click.echo(f"  Error: {e.message}", err=True)
        if e.field_path:
            click.echo(f"  Field: {e.field_path}", err=True)
        sys.exit(1)

    initialize_logging(
        log_dir=settings.log_dir,
        log_level=log_level or settings.log_level,
        structured_format=settings.structured_logs
    )
    return settings


@click.group()
def cli():
    """File-based routing configuration provider."""
    pass


@cli.command()
@_source_options
@click.option('--json', 'as_json', is_flag=True, help='Print JSON instead of YAML')
def build(settings_path, directory, filename, fallback_file, log_level, as_json):
    """Build one configuration snapshot and print it."""
    settings = _prepare(settings_path, directory, filename, fallback_file, log_level)

    try:
        configuration = FileProvider(settings).build_configuration()
    except ProviderError as e:
        click.echo(click.style(f"✗ {e}", fg='red'), err=True)
        sys.exit(1)

    data = configuration_to_dict(configuration)
    if as_json:
        click.echo(json.dumps(data, indent=2, sort_keys=True))
    else:
        click.echo(yaml.safe_dump(data, default_flow_style=False, sort_keys=True), nl=False)


@cli.command()
@_source_options
def validate(settings_path, directory, filename, fallback_file, log_level):
    """Check that the configuration builds and show a summary."""
    settings = _prepare(settings_path, directory, filename, fallback_file, log_level)

    try:
        configuration = FileProvider(settings).build_configuration()
    except ProviderError as e:
        click.echo(click.style("✗ Configuration build failed:", fg='red'))
        click.echo(f"  Error: {e}")
        if e.path:
            click.echo(f"  Path: {e.path}")
        sys.exit(1)

    click.echo(click.style("✓ Configuration is valid", fg='green'))
    summary = configuration.summary()
    click.echo(f"  Backends: {summary['backends']}")
    click.echo(f"  Frontends: {summary['frontends']}")
    click.echo(f"  TLS configurations: {summary['tls']}")


@cli.command()
@_source_options
def watch(settings_path, directory, filename, fallback_file, log_level):
    """Publish snapshots on every change until interrupted."""
    settings = _prepare(settings_path, directory, filename, fallback_file, log_level, watch=True)
    logger = get_logger(__name__)

    configuration_queue = queue.Queue()
    pool = WorkerPool()
    try:
        FileProvider(settings).provide(configuration_queue, pool)
    except ProviderError as e:
        click.echo(click.style(f"✗ {e}", fg='red'), err=True)
        pool.stop()
        sys.exit(1)

    try:
        while True:
            message = configuration_queue.get()
            summary = message.configuration.summary()
            click.echo(
                f"[{message.provider_name}] backends={summary['backends']} "
                f"frontends={summary['frontends']} tls={summary['tls']}"
            )
    except KeyboardInterrupt:
        logger.info("Interrupted, stopping provider")
    finally:
        pool.stop()


def main():
    cli()


if __name__ == '__main__':
    main()
