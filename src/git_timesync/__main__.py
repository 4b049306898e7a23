import logging
import os
import sys

import click
from dotenv import load_dotenv

from git_timesync.config import SyncConfig, resolve_os_name
from git_timesync.errors import UnsupportedPlatformError
from git_timesync.synchronizer import TimestampSynchronizer
from git_timesync.timestamps.setters import select_timestamp_setter

logger = logging.getLogger(__name__)


def configure_logging(debug: bool) -> None:
    # Report lines go to stdout; keep log records out of the way unless debugging
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


# Options end at the first path: "git-timesync a.txt -f" names a file called "-f"
@click.command(context_settings={"help_option_names": ["-h", "--help"], "allow_interspersed_args": False})
@click.option("-f", "--force", "force", is_flag=True, envvar="GIT_TIMESYNC_FORCE", help="Apply timestamp changes.")
@click.option("-n", "--dryrun", "--dry-run", "dry_run", is_flag=True, help="Only report, never change anything.")
@click.option(
    "--verbose/--quiet",
    "-v/-q",
    "verbose",
    default=True,
    envvar="GIT_TIMESYNC_VERBOSE",
    help="Print ok/untracked/deleted lines.",
)
@click.option("--debug", "debug", is_flag=True, envvar="GIT_TIMESYNC_DEBUG", help="Print raw time deltas on stderr.")
@click.argument("paths", nargs=-1, type=click.Path())
def cli(force, dry_run, verbose, debug, paths):
    """Sync file mtimes to the time of their last git revision.

    Without PATHS the whole working copy of the current directory is processed.
    Directories given as PATHS are recursed. Dry-run unless -f is given.
    """
    config = SyncConfig(
        force=force,
        dry_run_flag=dry_run,
        verbose=verbose,
        debug=debug,
        os_name=resolve_os_name(),
    )
    configure_logging(config.debug)

    try:
        setter = select_timestamp_setter(config.os_name)
    except UnsupportedPlatformError as e:
        click.echo(str(e), err=True)
        sys.exit(1)

    logger.debug(f"Using {setter.name} timestamp strategy for {config.os_name} (dry_run={config.dry_run})")

    synchronizer = TimestampSynchronizer(config=config, setter=setter)
    summary = synchronizer.synchronize(paths)
    sys.exit(summary.exit_code)


def main():
    # Load .env from current working directory before click reads GIT_TIMESYNC_* variables
    load_dotenv(os.path.join(os.getcwd(), ".env"))
    cli()


if __name__ == "__main__":
    main()
