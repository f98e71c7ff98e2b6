#!/usr/bin/env python3
"""
Command-line interface for route-api-graph.
"""

import json
import logging
import sys
from pathlib import Path

import click
import yaml

from route_api_graph.export.csv_writer import write_component_rows, write_route_log, write_route_rows
from route_api_graph.pipeline.config import ConfigurationError, load_analyzer_config, write_example_config
from route_api_graph.pipeline.indexer import RouteApiAnalyzer, route_overview, summarize


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@click.group()
@click.option('--config', '-c', default=None, type=click.Path(dir_okay=False), help='Configuration file')
@click.option('--verbose', '-v', is_flag=True, help='Verbose output')
@click.pass_context
def cli(ctx, config, verbose):
    """Route API Graph - map routes and components to the API calls they make"""
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


def _load_config(ctx):
    try:
        return load_analyzer_config(ctx.obj.get('config_path'))
    except ConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _check_source(path):
    if not Path(path).exists():
        click.echo(f"Error: Path {path} does not exist", err=True)
        sys.exit(1)


def _print_summary(stats):
    click.echo("\n✓ Analysis complete!")
    for line in summarize(stats):
        click.echo(line)


@cli.command()
@click.argument('path')
@click.option('--output', '-o', default=None, help='CSV output file')
@click.option('--route-log', default=None, help='Write the route table and parent relations as JSON')
@click.option('--progress/--no-progress', default=True, help='Show progress bars')
@click.pass_context
def routes(ctx, path, output, route_log, progress):
    """Analyze routes and the API calls their components make"""
    _check_source(path)
    config = _load_config(ctx)

    analyzer = RouteApiAnalyzer(path, config=config, progress=progress)
    click.echo(f"Analyzing {analyzer.context.src_root}...")
    result = analyzer.analyze_routes()

    output = output or config.output.filename('routes', analyzer.project_name)
    write_route_rows(output, result.route_rows)
    click.echo(f"CSV report written to {output}")

    if route_log:
        write_route_log(route_log, result.context)
        click.echo(f"Route log written to {route_log}")

    _print_summary(result.stats)
    for line in route_overview(result.context, result.route_rows):
        click.echo(line)


@cli.command()
@click.argument('path')
@click.option('--output', '-o', default=None, help='CSV output file')
@click.option('--progress/--no-progress', default=True, help='Show progress bars')
@click.pass_context
def components(ctx, path, output, progress):
    """Analyze every component and the API calls it makes"""
    _check_source(path)
    config = _load_config(ctx)

    analyzer = RouteApiAnalyzer(path, config=config, progress=progress)
    click.echo(f"Analyzing {analyzer.context.src_root}...")
    result = analyzer.analyze_components()

    output = output or config.output.filename('components', analyzer.project_name)
    write_component_rows(output, result.component_rows)
    click.echo(f"CSV report written to {output}")

    _print_summary(result.stats)


@cli.command('init-config')
@click.argument('target', default='route-api-graph.yaml')
@click.option('--force', '-f', is_flag=True, help='Overwrite an existing file')
def init_config(target, force):
    """Write an example project configuration"""
    target_path = Path(target)
    if target_path.exists() and not force:
        click.echo(f"Error: {target} already exists (use --force to overwrite)", err=True)
        sys.exit(1)
    write_example_config(target_path)
    click.echo(f"✓ Example configuration written to {target_path}")


@cli.command('show-config')
@click.option('--format', '-F', 'fmt', type=click.Choice(['yaml', 'json']), default='yaml')
@click.pass_context
def show_config(ctx, fmt):
    """Print the effective configuration"""
    config = _load_config(ctx)
    click.echo(f"# source: {config.source}")
    if fmt == 'json':
        click.echo(json.dumps(config.to_dict(), indent=2, ensure_ascii=False))
    else:
        click.echo(yaml.safe_dump(config.to_dict(), sort_keys=False, allow_unicode=True))


def main():
    cli(obj={})


if __name__ == '__main__':
    main()
