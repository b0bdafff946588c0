"""CLI entrypoint for liskov-semver."""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from . import __version__
from .config import ENV_PREFIX, Settings, TagPolicy
from .versioning import is_valid_version


def _configure_logging(verbose: int, silent: bool) -> None:
    """Route library logging to stderr; -v for stage progress, -vv for commands."""
    if silent:
        level = logging.ERROR
    elif verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False, markup=False)],
        force=True,
    )


def _validate_semver(ctx: click.Context, param: click.Parameter, value: str | None) -> str | None:
    if value is not None and not is_valid_version(value):
        raise click.BadParameter(f"'{value}' is not a valid SemVer string.")
    return value


class BumpCommand(click.Command):
    """Command whose usage errors exit 1 with a single `error:` line, like every other failure."""

    def main(self, *args, **kwargs):
        kwargs.pop("standalone_mode", None)
        try:
            return super().main(*args, standalone_mode=False, **kwargs)
        except click.ClickException as e:
            Console(stderr=True).print(
                f"error: {escape(e.format_message())}", style="bold red", highlight=False, soft_wrap=True
            )
            sys.exit(1)
        except click.Abort:
            click.echo("Aborted!", err=True)
            sys.exit(1)


EPILOG = (
    'Boolean options have "opposites" starting with a "--no-" prefix, eg. "--no-update". '
    f"Every option can also be set through {ENV_PREFIX}_<OPTION> environment variables."
)


@click.command(
    cls=BumpCommand,
    epilog=EPILOG,
    context_settings={"help_option_names": ["-h", "--help"], "auto_envvar_prefix": ENV_PREFIX},
)
@click.version_option(__version__, "-V", "--version", prog_name="liskov-semver")
@click.argument(
    "directory",
    type=click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path),
    default=".",
)
@click.argument("expected", metavar="[SEMVER]", required=False, callback=_validate_semver)
@click.option(
    "--from",
    "-f",
    "from_ref",
    type=str,
    default=None,
    metavar="REF",
    help='Ref to use as "old" version (default: highest SemVer tag)',
)
@click.option(
    "--to",
    "-t",
    "to_ref",
    type=str,
    default=None,
    metavar="REF",
    help='Ref to use as "new" version (default: current branch)',
)
@click.option("--update/--no-update", default=False, help="Update package.json with the new version")
@click.option("--tag/--no-tag", default=False, help="Create a git tag with the new version")
@click.option("--write", "-w", is_flag=True, help="Update package.json and create a git tag")
@click.option(
    "--error-on-dirty/--no-error-on-dirty",
    default=True,
    help="Fail if the working directory is not clean",
)
@click.option(
    "--error-on-unreachable/--no-error-on-unreachable",
    default=True,
    help='Fail if the "from" ref cannot reach the "to" ref',
)
@click.option(
    "--all-tags",
    is_flag=True,
    help="Consider every SemVer tag for the old version, not only those reachable from the new one",
)
@click.option("--tsc", default="tsc", show_default=True, help="TypeScript compiler executable")
@click.option(
    "--silent",
    "--quiet",
    "-q",
    "-s",
    is_flag=True,
    help="Don't show output, simply use the exit status",
)
@click.option("--verbose", "-v", count=True, help="Show detailed output, may be repeated")
def cli(
    directory: Path,
    expected: str | None,
    from_ref: str | None,
    to_ref: str | None,
    update: bool,
    tag: bool,
    write: bool,
    error_on_dirty: bool,
    error_on_unreachable: bool,
    all_tags: bool,
    tsc: str,
    silent: bool,
    verbose: int,
) -> None:
    """Generate the next package version, or validate SEMVER against it.

    Compares the public API of the highest SemVer tag with the current
    branch by asking the TypeScript compiler whether each version can
    substitute for the other.

    Examples:

        liskov-semver

        liskov-semver some/package --no-error-on-dirty

        liskov-semver some/package v1.2.3 --write
    """
    from .commands.bump import run_bump

    _configure_logging(verbose, silent)

    settings = Settings(
        error_on_dirty=error_on_dirty,
        error_on_unreachable=error_on_unreachable,
        tag_policy=TagPolicy.ALL if all_tags else TagPolicy.REACHABLE,
        from_ref=from_ref or None,
        to_ref=to_ref or None,
        tsc=tsc,
    )
    exit_code = run_bump(
        directory,
        settings,
        expected=expected,
        update=update or write,
        tag=tag or write,
        silent=silent,
    )
    sys.exit(exit_code)


def main() -> None:
    """Main entrypoint."""
    cli()


if __name__ == "__main__":
    main()
