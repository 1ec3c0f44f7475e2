"""Command line interface for led-migrate."""

import sys
from typing import Dict, List, Optional, Sequence, Tuple

import click

from led_migrate.checks import check_options, validate
from led_migrate.config import EXAMPLE_VOLUMES, VOLUME_PREFIX
from led_migrate.engine import ContainerEngine, DockerEngine
from led_migrate.errors import MigrateError, UsageError
from led_migrate.request import (
    EXPORT_OPTIONS,
    IMPORT_OPTIONS,
    OPTION_NAMES,
    OperationKind,
    OperationRequest,
)
from led_migrate.runtime import RuntimeHandle, detect
from led_migrate.transfer import execute

PROG_NAME = "led-migrate"

CONTEXT_SETTINGS = dict(help_option_names=['-h', '--help'])

# (option name, metavar, help)
OPTION_SPECS = [
    ('from-dir', 'PATH', 'Import from a directory on this host'),
    ('from-tar-gz', 'PATH', 'Import from a .tar.gz archive'),
    ('from-volume', 'NAME', 'Import from an existing Docker volume'),
    ('to-led-volume', 'NAME', 'Lemmy-Easy-Deploy volume to import into*'),
    ('from-led-volume', 'NAME', 'Lemmy-Easy-Deploy volume to export from*'),
    ('to-tar-gz', 'PATH', 'Export to a new .tar.gz archive'),
    ('to-volume', 'NAME', 'Export to a new Docker volume'),
]

VOLUME_NAMES_EPILOG = "\n".join([
    "\b",
    "*Lemmy-Easy-Deploy Volume Names",
    "  Give the name of a volume as it appears in docker-compose.yml,",
    f"  in other words *without* the {VOLUME_PREFIX} prefix.",
    "  Examples:",
] + [f"    {name}" for name in EXAMPLE_VOLUMES])


def transfer_options(shown: Tuple[str, ...] = OPTION_NAMES):
    """Attach every transfer option to a command.

    The group and both subcommands accept all of them, so a misplaced
    option is reported by the precondition checks rather than by click.
    Options not in ``shown`` are left out of the help text.
    """
    def decorator(f):
        for name, metavar, help_text in reversed(OPTION_SPECS):
            f = click.option(f'--{name}', name.replace('-', '_'), metavar=metavar,
                             default=None, help=help_text,
                             hidden=name not in shown)(f)
        return f
    return decorator


def _given(options: Dict[str, Optional[str]]) -> Dict[str, str]:
    return {
        key.replace('_', '-'): value
        for key, value in options.items()
        if value is not None
    }


def _request(kind: OperationKind, group_options: Dict[str, str], options: Dict[str, Optional[str]]) -> OperationRequest:
    # Options after the operation word override those before it
    merged = dict(group_options or {})
    merged.update(_given(options))
    return OperationRequest(kind, merged)


@click.group(invoke_without_command=True, context_settings=CONTEXT_SETTINGS,
             epilog=VOLUME_NAMES_EPILOG)
@transfer_options()
@click.pass_context
def cli(ctx, **options):
    """Lemmy-Easy-Deploy data migration - Move volume data in and out of a deployment.

    Copies a directory, a .tar.gz archive or a Docker volume into a new
    volume of the lemmy-easy-deploy Docker Compose project, or copies such
    a volume out to an archive or a plain Docker volume. All copying is done
    by short-lived alpine containers.

    \b
    Examples:
        led-migrate import --from-dir ./pictrs --to-led-volume pictrs_data
        led-migrate import --from-tar-gz pg.tar.gz --to-led-volume postgres_data
        led-migrate import --from-volume old_pg --to-led-volume postgres_data
        led-migrate export --from-led-volume postgres_data --to-tar-gz pg.tar.gz
        led-migrate export --from-led-volume postgres_data --to-volume pg_copy
    """
    ctx.obj = _given(options)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        if ctx.obj:
            return OperationRequest(OperationKind.NONE, ctx.obj)
        return OperationRequest.help()


@cli.command(name='import', epilog=VOLUME_NAMES_EPILOG)
@transfer_options(IMPORT_OPTIONS)
@click.pass_obj
def import_(group_options, **options):
    """Import data into a new Lemmy-Easy-Deploy volume.

    Give exactly one source (--from-dir, --from-tar-gz or --from-volume)
    and the destination with --to-led-volume. The destination volume must
    not exist yet; it is created and labeled as part of the compose project.

    \b
    Examples:
        led-migrate import --from-dir ./pictrs --to-led-volume pictrs_data
        led-migrate import --from-tar-gz pg.tar.gz --to-led-volume postgres_data
    """
    return _request(OperationKind.IMPORT, group_options, options)


@cli.command(name='export', epilog=VOLUME_NAMES_EPILOG)
@transfer_options(EXPORT_OPTIONS)
@click.pass_obj
def export(group_options, **options):
    """Export data out of a Lemmy-Easy-Deploy volume.

    Give the source with --from-led-volume and exactly one destination
    (--to-tar-gz or --to-volume). The destination must not exist yet.

    \b
    Examples:
        led-migrate export --from-led-volume postgres_data --to-tar-gz pg.tar.gz
        led-migrate export --from-led-volume postgres_data --to-volume pg_copy
    """
    return _request(OperationKind.EXPORT, group_options, options)


HELP_TOKENS = CONTEXT_SETTINGS["help_option_names"]
VALUE_OPTIONS = tuple(f"--{name}" for name in OPTION_NAMES)


def _help_requested(args: List[str]) -> Tuple[bool, Optional[str]]:
    """Look for a help flag before click parses anything.

    Returns whether one was found and the operation word preceding it.
    Values of the transfer options and everything after ``--`` are skipped;
    a stray positional word stops the search so click can report it.
    """
    command = None
    tokens = iter(args)
    for token in tokens:
        if token == "--":
            break
        if token in HELP_TOKENS:
            return True, command
        if token in VALUE_OPTIONS:
            next(tokens, None)
        elif not token.startswith("-"):
            if command is not None or token not in cli.commands:
                break
            command = token
    return False, None


def _print_help(command: Optional[str]) -> None:
    ctx = cli.make_context(PROG_NAME, [], resilient_parsing=True)
    if command is not None:
        ctx = cli.commands[command].make_context(command, [], parent=ctx,
                                                 resilient_parsing=True)
    click.echo(ctx.get_help())


def parse(args: Sequence[str]) -> OperationRequest:
    """Turn command line arguments into an OperationRequest.

    Usage is printed for ``-h``/``--help``, for an empty argument list and
    when options are given without an operation.

    Raises:
        UsageError: On unknown commands or options, or a missing option value
    """
    args = list(args)
    # Help wins over anything else on the line, valid or not
    found, command = _help_requested(args)
    if found:
        _print_help(command)
        return OperationRequest.help()

    try:
        result = cli.main(args=args, prog_name=PROG_NAME,
                          standalone_mode=False)
    except click.UsageError as e:
        # Some parser errors carry no context, fall back to the top level usage
        ctx = e.ctx or cli.make_context(PROG_NAME, [], resilient_parsing=True)
        raise UsageError(e.format_message(), ctx.get_help()) from e

    if isinstance(result, OperationRequest):
        return result
    # click handled --help itself and stopped parsing
    return OperationRequest.help()


def run(
    request: OperationRequest,
    engine: Optional[ContainerEngine] = None,
    runtime: Optional[RuntimeHandle] = None
) -> None:
    """Check and carry out an import or export request.

    The runtime is detected and the engine connected only once the options
    themselves are known to be valid.
    """
    check_options(request)
    if runtime is None:
        runtime = detect()
    if engine is None:
        engine = DockerEngine.for_runtime(runtime)
    validate(request, engine)
    execute(request, engine, runtime)


def main(args: Optional[Sequence[str]] = None) -> None:
    """Console entry point; exits with status 1 on any error."""
    if args is None:
        args = sys.argv[1:]

    try:
        request = parse(args)
        if request.kind in (OperationKind.HELP, OperationKind.NONE):
            return
        run(request)
    except UsageError as e:
        click.echo(f"ERROR: {str(e)}", err=True)
        if e.usage:
            click.echo("", err=True)
            click.echo(e.usage, err=True)
        sys.exit(e.exit_code)
    except MigrateError as e:
        click.echo(f"ERROR: {str(e)}", err=True)
        sys.exit(e.exit_code)


if __name__ == '__main__':
    main()
