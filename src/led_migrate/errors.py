"""Errors raised while preparing or running a migration."""

from typing import Optional

from .config import DOCKER_SERVER_INSTALL_URL


class MigrateError(Exception):
    """Base class for every error that aborts a migration."""
    exit_code = 1


class EngineEnvironmentError(MigrateError):
    """No usable container engine or compose tool on this host."""

    def __init__(self, message: str):
        super().__init__(
            f"{message}\n"
            "Please click on your server distribution in the list here, "
            "then follow the installation instructions:\n"
            f"     {DOCKER_SERVER_INSTALL_URL}"
        )


class NoRuntimeFound(EngineEnvironmentError):
    """Neither podman nor docker responded."""
    pass


class NoComposeFound(EngineEnvironmentError):
    """The engine was found but its compose tool was not."""
    pass


class UsageError(MigrateError):
    """Bad, missing or unrecognized command line arguments."""

    def __init__(self, message: str, usage: Optional[str] = None):
        super().__init__(message)
        self.usage = usage


class ValidationError(MigrateError):
    """A precondition of the requested operation does not hold."""
    pass


class InvalidOptions(ValidationError):
    pass


class IncompatibleOptions(ValidationError):
    pass


class MissingSource(ValidationError):
    pass


class MissingDestination(ValidationError):
    pass


class RedundantPrefix(ValidationError):
    """A managed volume name was given with the project prefix attached."""

    def __init__(self, role: str, option: str, prefix: str, suggestion: str):
        super().__init__(
            f"The {role} Lemmy-Easy-Deploy volume name cannot be prefixed "
            f"with '{prefix}'\n"
            "    This prefix will be added automatically as needed. Try using:\n"
            f"        --{option} {suggestion}"
        )
        self.option = option
        self.suggestion = suggestion


class DestinationExists(ValidationError):
    pass


class SourceMissing(ValidationError):
    pass


class BadSuffix(ValidationError):
    pass


class TransferError(MigrateError):
    """The helper container or the engine failed mid-transfer."""
    pass


class EngineError(TransferError):
    """The container engine API returned an error."""
    pass
