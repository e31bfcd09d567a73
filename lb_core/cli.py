"""Click entry point for ``lb``."""

from pathlib import Path

import click

from lb_core import __version__
from lb_core import config as config_mod
from lb_core.beads import BeadsClient, find_bd
from lb_core.paths import configure_logger, set_debug

_log = configure_logger("lb.cli")

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])


@click.command(context_settings=CONTEXT_SETTINGS)
@click.option("--config", "config_path", default=None,
              type=click.Path(dir_okay=False, path_type=Path),
              help="Config file (default: $XDG_CONFIG_HOME/lazybeads/config.yml)")
@click.option("--debug", is_flag=True, default=False,
              help="Verbose logging to the state dir (or set LAZYBEADS_DEBUG=1)")
@click.option("-C", "project_dir", default=None,
              type=click.Path(exists=True, file_okay=False, path_type=Path),
              help="Run bd in this directory instead of the current one")
@click.version_option(__version__, prog_name="lazybeads")
def main(config_path: Path | None, debug: bool, project_dir: Path | None):
    """lazybeads: a terminal UI for beads issues."""
    if debug:
        set_debug(True)

    try:
        config = config_mod.load(config_path)
    except config_mod.ConfigError as e:
        raise click.ClickException(str(e))

    bd = find_bd()
    if bd is None:
        raise click.ClickException("bd not found on PATH; install beads first")

    cwd = project_dir.resolve() if project_dir else None
    _log.info("starting (bd=%s, cwd=%s, %d custom commands)",
              bd, cwd or Path.cwd(), len(config.custom_commands))

    # Late import: keep Textual out of --help/--version
    from lb_core.tui.app import LazyBeadsApp
    LazyBeadsApp(BeadsClient(bd=bd, cwd=cwd), config).run()
