"""Precondition checks run before anything is created or copied."""

import os
from typing import Tuple

from .config import PROJECT_NAME, VOLUME_PREFIX
from .engine import ContainerEngine
from .errors import (
    BadSuffix,
    DestinationExists,
    IncompatibleOptions,
    InvalidOptions,
    MissingDestination,
    MissingSource,
    RedundantPrefix,
    SourceMissing,
)
from .request import (
    EXPORT_DESTINATIONS,
    EXPORT_OPTIONS,
    FROM_DIR,
    FROM_LED_VOLUME,
    FROM_TAR_GZ,
    FROM_VOLUME,
    IMPORT_OPTIONS,
    IMPORT_SOURCES,
    TO_LED_VOLUME,
    TO_TAR_GZ,
    TO_VOLUME,
    OperationKind,
    OperationRequest,
    has_project_prefix,
    managed_volume_name,
    strip_project_prefix,
)

ARCHIVE_SUFFIX = ".tar.gz"


def _flags(names: Tuple[str, ...]) -> str:
    return ", ".join(f"--{name}" for name in names)


def _check_import_options(request: OperationRequest) -> None:
    misplaced = request.given(EXPORT_OPTIONS)
    if misplaced:
        raise InvalidOptions(f"Invalid options for import: {_flags(misplaced)}")

    sources = request.given(IMPORT_SOURCES)
    if not sources:
        raise MissingSource("Missing a source to import from")
    if len(sources) > 1:
        raise IncompatibleOptions(
            f"Incompatible arguments: only one of {_flags(sources)} can be used"
        )

    destination = request.get(TO_LED_VOLUME)
    if destination is None:
        raise MissingDestination(
            "Missing a Lemmy-Easy-Deploy volume name to import as"
        )
    if has_project_prefix(destination):
        raise RedundantPrefix(
            "destination", TO_LED_VOLUME, VOLUME_PREFIX,
            strip_project_prefix(destination)
        )


def _check_export_options(request: OperationRequest) -> None:
    misplaced = request.given(IMPORT_OPTIONS)
    if misplaced:
        raise InvalidOptions(f"Invalid options for export: {_flags(misplaced)}")

    destinations = request.given(EXPORT_DESTINATIONS)
    if not destinations:
        raise MissingDestination("Missing a destination to export to")
    if len(destinations) > 1:
        raise IncompatibleOptions(
            f"Incompatible arguments: only one of {_flags(destinations)} can be used"
        )

    source = request.get(FROM_LED_VOLUME)
    if source is None:
        raise MissingSource(
            "Missing a Lemmy-Easy-Deploy volume name to export from"
        )
    if has_project_prefix(source):
        raise RedundantPrefix(
            "source", FROM_LED_VOLUME, VOLUME_PREFIX,
            strip_project_prefix(source)
        )

    archive = request.get(TO_TAR_GZ)
    if archive is not None and not archive.endswith(ARCHIVE_SUFFIX):
        raise BadSuffix(
            f"Destination archive '{archive}' does not end in {ARCHIVE_SUFFIX}"
        )


def check_options(request: OperationRequest) -> None:
    """Check the option combination of a request without touching the engine.

    Raises:
        ValidationError: The subclass naming the first rule that is violated
    """
    if request.kind is OperationKind.IMPORT:
        _check_import_options(request)
    elif request.kind is OperationKind.EXPORT:
        _check_export_options(request)


def _validate_import(request: OperationRequest, engine: ContainerEngine) -> None:
    from_dir = request.get(FROM_DIR)
    from_tar_gz = request.get(FROM_TAR_GZ)
    from_volume = request.get(FROM_VOLUME)
    if from_dir is not None and not os.path.isdir(from_dir):
        raise SourceMissing(f"Source directory '{from_dir}' does not exist")
    if from_tar_gz is not None and not os.path.isfile(from_tar_gz):
        raise SourceMissing(f"Source archive '{from_tar_gz}' does not exist")
    if from_volume is not None and not engine.volume_exists(from_volume):
        raise SourceMissing(f"Source volume '{from_volume}' does not exist")

    short_name = request.get(TO_LED_VOLUME)
    volume_name = managed_volume_name(short_name)
    if engine.volume_exists(volume_name):
        raise DestinationExists(
            f"The destination volume '{short_name}' in Docker Compose project "
            f"'{PROJECT_NAME}' already exists:\n"
            f"          {volume_name}\n\n"
            "If you are 100% certain you no longer need this volume, "
            "delete it first, then try again."
        )


def _validate_export(request: OperationRequest, engine: ContainerEngine) -> None:
    short_name = request.get(FROM_LED_VOLUME)
    if not engine.volume_exists(managed_volume_name(short_name)):
        raise SourceMissing(
            f"The source volume '{short_name}' in Docker Compose project "
            f"'{PROJECT_NAME}' does not exist."
        )

    archive = request.get(TO_TAR_GZ)
    if archive is not None:
        if os.path.exists(archive):
            raise DestinationExists(
                f"Destination archive '{archive}' already exists"
            )
        parent = os.path.dirname(os.path.abspath(archive))
        if not os.path.isdir(parent):
            raise MissingDestination(
                f"Directory '{parent}' for destination archive does not exist"
            )

    volume = request.get(TO_VOLUME)
    if volume is not None and engine.volume_exists(volume):
        raise DestinationExists(
            f"Destination Docker volume '{volume}' already exists"
        )


def validate(request: OperationRequest, engine: ContainerEngine) -> None:
    """Check every precondition of a request.

    Option combinations are checked first, so a malformed request never
    reaches the engine.

    Raises:
        ValidationError: The subclass naming the first rule that is violated
        EngineError: If the engine could not be queried
    """
    check_options(request)
    if request.kind is OperationKind.IMPORT:
        _validate_import(request, engine)
    elif request.kind is OperationKind.EXPORT:
        _validate_export(request, engine)
