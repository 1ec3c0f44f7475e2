"""The parsed form of a command line: which operation, with which options."""

import enum
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from .config import VOLUME_PREFIX

FROM_DIR = "from-dir"
FROM_TAR_GZ = "from-tar-gz"
FROM_VOLUME = "from-volume"
TO_LED_VOLUME = "to-led-volume"
FROM_LED_VOLUME = "from-led-volume"
TO_TAR_GZ = "to-tar-gz"
TO_VOLUME = "to-volume"

# Order matters: it is the order in which sources and destinations are
# looked up when picking the transfer to run.
IMPORT_SOURCES = (FROM_DIR, FROM_TAR_GZ, FROM_VOLUME)
EXPORT_DESTINATIONS = (TO_TAR_GZ, TO_VOLUME)

IMPORT_OPTIONS = IMPORT_SOURCES + (TO_LED_VOLUME,)
EXPORT_OPTIONS = (FROM_LED_VOLUME,) + EXPORT_DESTINATIONS
OPTION_NAMES = IMPORT_OPTIONS + EXPORT_OPTIONS


class OperationKind(enum.Enum):
    IMPORT = "import"
    EXPORT = "export"
    HELP = "help"
    NONE = "none"


@dataclass(frozen=True)
class OperationRequest:
    """An operation plus the options given for it.

    Options are keyed by their command line name without the leading
    dashes (``from-dir``, ``to-led-volume``...). An option holding an empty
    string counts as not given.
    """
    kind: OperationKind
    options: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        unknown = set(self.options) - set(OPTION_NAMES)
        if unknown:
            raise ValueError(f"Unknown options: {', '.join(sorted(unknown))}")
        object.__setattr__(self, "options", MappingProxyType(dict(self.options)))

    @classmethod
    def help(cls) -> "OperationRequest":
        return cls(OperationKind.HELP)

    def get(self, name: str) -> Optional[str]:
        return self.options.get(name) or None

    def is_set(self, name: str) -> bool:
        return self.get(name) is not None

    def given(self, names: Tuple[str, ...]) -> Tuple[str, ...]:
        """Return which of ``names`` were given, keeping their order."""
        return tuple(name for name in names if self.is_set(name))

    @property
    def source_option(self) -> Optional[str]:
        """Option selecting the import source, first match wins."""
        given = self.given(IMPORT_SOURCES)
        return given[0] if given else None

    @property
    def destination_option(self) -> Optional[str]:
        """Option selecting the export destination, first match wins."""
        given = self.given(EXPORT_DESTINATIONS)
        return given[0] if given else None


def managed_volume_name(short_name: str) -> str:
    """Engine-level name of a volume belonging to the deployment."""
    return f"{VOLUME_PREFIX}{short_name}"


def has_project_prefix(name: str) -> bool:
    return name.startswith(VOLUME_PREFIX)


def strip_project_prefix(name: str) -> str:
    if has_project_prefix(name):
        return name[len(VOLUME_PREFIX):]
    return name
