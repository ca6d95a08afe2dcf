import click
import functools
import logging
import traceback

from .config import Config
from .pipeline import CachePipeline
from .scanner import DirectoryScanner
from .cache import CacheStore
from .io import create_fs
from .utils import setup_logger
from .utils.logger import parse_module_levels
from .constants import CacheMode
from . import constants
from .exceptions import (
    DepCacheError,
    FatalError,
    ConfigurationError,
    CollaboratorMissingError,
    RestoreError,
)
from . import __version__


def setup_logging(debug: bool, log_levels: str = None, log_file: str = None):
    """Setup logger with debug and module-level configuration"""
    setup_logger(debug=debug, module_levels=parse_module_levels(log_levels), log_file=log_file)


def _fail(category: str, e: Exception, exit_code: int):
    logging.error(f"{category}: {e}")
    ctx = click.get_current_context()
    if ctx.obj and ctx.obj.get('debug'):
        traceback.print_exc()
    raise click.exceptions.Exit(exit_code)


def handle_errors(func):
    """Decorator to handle common exceptions and propagate their exit codes"""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ConfigurationError as e:
            _fail("Configuration error", e, e.exit_code)
        except CollaboratorMissingError as e:
            _fail("Missing collaborator", e, e.exit_code)
        except RestoreError as e:
            _fail("Restore error", e, e.exit_code)
        except FatalError as e:
            _fail("Build failed", e, e.exit_code)
        except DepCacheError as e:
            _fail("An unexpected application error occurred", e, 1)
    return wrapper


@handle_errors
def do_build(build_dir: str, cache_dir: str, env_file: str, mode: str, report_file: str, build_tool: bool):
    """Execute build command"""
    config = Config(build_dir, cache_dir, env_file, mode=mode)
    pipeline = CachePipeline(config, run_build_tool=build_tool)
    report = pipeline.run()
    if report_file:
        config.fs.write_text(report_file, report.model_dump_json(indent=2))
        logging.info(f"Build report written to '{report_file}'")
    for warning in report.warnings:
        click.echo(f"warning: [{warning.step}] {warning.path or '-'}: {warning.message}", err=True)


@handle_errors
def do_scan(directory: str, links: bool, dependency_dir: str, exclude: tuple):
    """Execute scan command"""
    fs = create_fs()
    excludes = list(exclude) if exclude else list(constants.VENDOR_RUNTIME_PATHS)
    scanner = DirectoryScanner(fs, dependency_dir, excludes)
    for rel in scanner.scan(directory, include_links=links):
        click.echo(rel)


@handle_errors
def do_clean(cache_dir: str, paths: tuple):
    """Execute clean command"""
    store = CacheStore(create_fs(), cache_dir)
    targets = list(paths) if paths else store.entries()
    if not targets:
        logging.info("Cache is empty, nothing to clean.")
        return
    removed = sum(1 for rel in targets if store.delete(rel))
    logging.info(f"Removed {removed}/{len(targets)} cache entries.")


@click.group()
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.option('-l', '--log-levels', help="Comma-separated per-module log levels (e.g., 'scan=DEBUG,sync=INFO')")
@click.option('-f', '--log-file', help='Path to log file')
@click.version_option(version=__version__, prog_name='depcache')
@click.pass_context
def cli(ctx, debug, log_levels, log_file):
    """depcache - Restore and save dependency directories around a build

    \b
    Examples:
      depcache build ./app /cache ./app.env    Build with the cache
      depcache scan ./app --links              List dependency directories
      depcache clean /cache                    Empty the cache
    """
    ctx.ensure_object(dict)
    ctx.obj['debug'] = debug
    setup_logging(debug, log_levels, log_file)


@cli.command()
@click.argument('build_dir', type=click.Path(file_okay=False))
@click.argument('cache_dir', type=click.Path(file_okay=False))
@click.argument('env_file', required=False, type=click.Path(dir_okay=False))
@click.option('-m', '--mode', type=click.Choice([m.value for m in CacheMode]),
              help=f'Cache strategy, overrides ${constants.MODE_ENV}')
@click.option('-r', '--report', 'report_file', type=click.Path(dir_okay=False),
              help='Write the JSON build report to this file')
@click.option('--no-build-tool', 'build_tool', is_flag=True, flag_value=False, default=True,
              help='Skip the secondary build tool')
@click.pass_context
def build(ctx, build_dir, cache_dir, env_file, mode, report_file, build_tool):
    """Restore cached dependencies, install, and save them back

    \b
    This command will:
      1. Rebuild dependency directories checked into BUILD_DIR
      2. Restore the others from CACHE_DIR and prune them
      3. Install with variables from ENV_FILE
      4. Run the secondary build tool, if present
      5. Save every dependency directory back to CACHE_DIR

    \b
    Examples:
      depcache build ./app /cache ./app.env
      depcache build ./app /cache --mode link
    """
    do_build(build_dir, cache_dir, env_file, mode, report_file, build_tool)


@cli.command()
@click.argument('directory', type=click.Path(file_okay=False))
@click.option('--links', is_flag=True, help='Also report symbolic links')
@click.option('-n', '--name', 'dependency_dir', default=constants.DEPENDENCY_DIR_NAME,
              show_default=True, help='Dependency directory name')
@click.option('-x', '--exclude', multiple=True, help='Relative path to exclude (repeatable)')
@click.pass_context
def scan(ctx, directory, links, dependency_dir, exclude):
    """List dependency directories below DIRECTORY

    \b
    Examples:
      depcache scan ./app
      depcache scan /cache -x .aux
    """
    do_scan(directory, links, dependency_dir, exclude)


@cli.command()
@click.argument('cache_dir', type=click.Path(file_okay=False))
@click.argument('paths', nargs=-1)
@click.pass_context
def clean(ctx, cache_dir, paths):
    """Delete cache entries (all of them when no PATHS are given)

    \b
    Examples:
      depcache clean /cache
      depcache clean /cache node_modules web/node_modules
    """
    do_clean(cache_dir, paths)
