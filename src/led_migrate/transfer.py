"""Module for copying volume data with throwaway helper containers."""

import os
import shlex
from typing import Dict, List, Optional, Tuple

import click
from tabulate import tabulate

from .config import HELPER_IMAGE, IMPORT_TYPE_LABEL, PROJECT_NAME
from .engine import ContainerEngine, Mount
from .errors import TransferError
from .request import (
    FROM_DIR,
    FROM_LED_VOLUME,
    FROM_TAR_GZ,
    FROM_VOLUME,
    TO_LED_VOLUME,
    TO_TAR_GZ,
    TO_VOLUME,
    OperationKind,
    OperationRequest,
    managed_volume_name,
)
from .runtime import RuntimeHandle

COPY_SCRIPT = "cd /from ; cp -av . /to"
EXTRACT_SCRIPT = "tar -xzvf /from.tar.gz -C /to"


def managed_volume_labels(short_name: str, import_type: str, compose_version: str) -> Dict[str, str]:
    """Labels that make an imported volume look like one compose created."""
    return {
        'com.docker.compose.project': PROJECT_NAME,
        'com.docker.compose.version': compose_version,
        'com.docker.compose.volume': short_name,
        IMPORT_TYPE_LABEL: import_type,
    }


def _show_plan(source: str, destination: str) -> None:
    table = [[source, destination, HELPER_IMAGE]]
    click.echo(tabulate(table, headers=["Source", "Destination", "Helper image"],
                        tablefmt="grid"))


def _run_helper(engine: ContainerEngine, mounts: List[Mount], script: str) -> None:
    status = engine.run_ephemeral(HELPER_IMAGE, mounts, ["ash", "-c", script])
    if status != 0:
        raise TransferError(f"Helper container exited with status {status}")


def create_led_volume(
    engine: ContainerEngine,
    short_name: str,
    import_type: str,
    runtime: RuntimeHandle
) -> str:
    """Create an empty volume in the Lemmy-Easy-Deploy project.

    Returns:
        The engine-level name of the new volume
    """
    click.echo("--> Creating destination volume...")
    name = managed_volume_name(short_name)
    engine.create_volume(
        name,
        managed_volume_labels(short_name, import_type, runtime.compose_label_version)
    )
    return name


def dir_import(engine: ContainerEngine, runtime: RuntimeHandle, from_dir: str, short_name: str) -> None:
    """Import the contents of a host directory into a new managed volume."""
    real_path = os.path.realpath(from_dir)
    target = managed_volume_name(short_name)
    click.echo(f"--> Importing from directory: {real_path}")
    click.echo(f"--> Importing to: {target}")
    _show_plan(real_path, target)

    create_led_volume(engine, short_name, "directory", runtime)
    _run_helper(engine, [
        Mount(real_path, '/from'),
        Mount(target, '/to', read_only=False),
    ], COPY_SCRIPT)
    click.echo("--> SUCCESS: Import complete.")


def tar_import(engine: ContainerEngine, runtime: RuntimeHandle, from_tar_gz: str, short_name: str) -> None:
    """Extract a .tar.gz archive into a new managed volume."""
    real_path = os.path.realpath(from_tar_gz)
    target = managed_volume_name(short_name)
    click.echo(f"--> Importing from archive: {real_path}")
    click.echo(f"--> Importing to: {target}")
    _show_plan(real_path, target)

    create_led_volume(engine, short_name, "tar", runtime)
    _run_helper(engine, [
        Mount(real_path, '/from.tar.gz'),
        Mount(target, '/to', read_only=False),
    ], EXTRACT_SCRIPT)
    click.echo("--> SUCCESS: Import complete.")


def volume_import(engine: ContainerEngine, runtime: RuntimeHandle, from_volume: str, short_name: str) -> None:
    """Copy an existing engine volume into a new managed volume."""
    target = managed_volume_name(short_name)
    click.echo(f"--> Importing from Docker volume: {from_volume}")
    click.echo(f"--> Importing to: {target}")
    _show_plan(from_volume, target)

    create_led_volume(engine, short_name, "volume", runtime)
    _run_helper(engine, [
        Mount(from_volume, '/from'),
        Mount(target, '/to', read_only=False),
    ], COPY_SCRIPT)
    click.echo("--> SUCCESS: Import complete.")


def archive_script(archive_name: str, owner: Optional[Tuple[int, int]] = None) -> str:
    """Shell script writing a gzip archive of /from to /to/<archive_name>.

    When ``owner`` is given the archive is handed over to that uid:gid,
    since the helper runs as root.
    """
    path = shlex.quote(f"/to/{archive_name}")
    script = f"tar -czvf {path} -C /from ."
    if owner is not None:
        script += f" && chown {owner[0]}:{owner[1]} {path}"
    return script


def tar_export(engine: ContainerEngine, runtime: RuntimeHandle, short_name: str, to_tar_gz: str) -> None:
    """Write the contents of a managed volume to a .tar.gz on the host."""
    source = managed_volume_name(short_name)
    archive = os.path.abspath(to_tar_gz)
    click.echo(f"--> Exporting from Docker volume: {source}")
    click.echo(f"--> Exporting to archive: {to_tar_gz}")
    _show_plan(source, archive)

    # Rootless engines already map container root to the invoking user
    owner = None
    if not (runtime.is_podman or engine.is_rootless()) and hasattr(os, 'getuid'):
        owner = (os.getuid(), os.getgid())

    _run_helper(engine, [
        Mount(source, '/from'),
        Mount(os.path.dirname(archive), '/to', read_only=False),
    ], archive_script(os.path.basename(archive), owner))
    click.echo("--> SUCCESS: Export complete.")


def volume_export(engine: ContainerEngine, runtime: RuntimeHandle, short_name: str, to_volume: str) -> None:
    """Copy a managed volume into a plain engine volume."""
    source = managed_volume_name(short_name)
    click.echo(f"--> Exporting from Docker volume: {source}")
    click.echo(f"--> Exporting to Docker volume: {to_volume}")
    _show_plan(source, to_volume)

    click.echo("--> Creating destination volume...")
    engine.create_volume(to_volume)
    _run_helper(engine, [
        Mount(source, '/from'),
        Mount(to_volume, '/to', read_only=False),
    ], COPY_SCRIPT)
    click.echo("--> SUCCESS: Export complete.")


IMPORTERS = {
    FROM_DIR: dir_import,
    FROM_TAR_GZ: tar_import,
    FROM_VOLUME: volume_import,
}

EXPORTERS = {
    TO_TAR_GZ: tar_export,
    TO_VOLUME: volume_export,
}


def execute(request: OperationRequest, engine: ContainerEngine, runtime: RuntimeHandle) -> None:
    """Run the transfer described by an already validated request.

    Nothing is rolled back on failure: an import that fails part way leaves
    the new volume behind.

    Raises:
        TransferError: If the helper container or the engine fails
    """
    if request.kind is OperationKind.IMPORT:
        click.echo("--> Operation: import")
        source = request.source_option
        IMPORTERS[source](engine, runtime, request.get(source), request.get(TO_LED_VOLUME))
    elif request.kind is OperationKind.EXPORT:
        click.echo("--> Operation: export")
        destination = request.destination_option
        EXPORTERS[destination](engine, runtime, request.get(FROM_LED_VOLUME), request.get(destination))
    else:
        raise ValueError(f"Nothing to transfer for a {request.kind.value} request")
