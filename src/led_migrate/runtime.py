"""Detection of the container engine and compose tool installed on the host."""

import os
import string
import subprocess
from dataclasses import dataclass
from typing import List, Optional, Tuple

import click

from .config import (
    DOCKER_COMPOSE_COMMANDS,
    DOCKER_EOL_URL,
    DOCKER_INSTALL_URL,
    ENGINE_CANDIDATES,
    MIN_SUPPORTED_ENGINE_MAJOR,
    PODMAN_COMPOSE_COMMAND,
    SMOKE_TEST_IMAGE,
)
from .errors import NoComposeFound, NoRuntimeFound


@dataclass(frozen=True)
class RuntimeHandle:
    """What was found on the host, built once per run."""
    engine_command: str
    compose_command: str
    engine_version: str
    compose_version: str
    compose_label_version: str
    engine_major: int
    compose_major: int
    healthy: bool

    @property
    def is_podman(self) -> bool:
        return self.engine_command == "podman"

    @property
    def is_outdated(self) -> bool:
        return self.engine_major < MIN_SUPPORTED_ENGINE_MAJOR


def parse_major_version(banner: str) -> int:
    """Extract the major version from a ``--version`` banner.

    The text after the first ``"version "`` is cut at the first period and
    stripped of anything that is not a digit, so ``"Docker version 19.03.1,
    build 9ff628d"`` gives 19 and ``"Docker Compose version v2.20.2"`` gives
    2. A banner without digits gives 0.
    """
    _, sep, rest = banner.partition("version ")
    text = rest if sep else banner
    digits = "".join(c for c in text.split(".", 1)[0] if c in string.digits)
    return int(digits) if digits else 0


def parse_label_version(banner: str) -> str:
    """Extract the version string used for compose labels.

    ``"Docker Compose version v2.20.2"`` gives ``"v2.20.2"`` and
    ``"docker-compose version 1.29.2, build 5becea4c"`` gives ``"1.29.2"``.
    """
    index = banner.rfind("version")
    words = (banner[index:] if index >= 0 else banner).split()
    if len(words) < 2:
        return ""
    return words[1].replace(",", "")


def _probe(command: List[str]) -> Optional[str]:
    """Run ``command`` and return the first line it printed.

    Returns None when the command is missing or exits non-zero.
    """
    try:
        result = subprocess.run(command, capture_output=True, text=True)
    except OSError:
        return None
    if result.returncode != 0:
        return None
    lines = result.stdout.strip().splitlines()
    return lines[0].strip() if lines else ""


def find_engine() -> Tuple[str, str]:
    """Return the first responding engine command and its version banner."""
    for command in ENGINE_CANDIDATES:
        banner = _probe([command, "--version"])
        if banner is not None:
            return command, banner
    raise NoRuntimeFound(
        "Could not find a container runtime. Did you install Docker?"
    )


def find_compose(engine: str) -> Tuple[str, str]:
    """Return the compose command matching ``engine`` and its version banner."""
    if engine == "podman":
        click.echo(
            "WARNING: podman will probably work, but it has not been tested "
            "much. It's up to you to make sure all the permissions for podman "
            "are correct!"
        )
        banner = _probe([PODMAN_COMPOSE_COMMAND, "version"])
        if banner is None:
            raise NoComposeFound(
                "podman detected, but podman-compose is not installed. "
                "Please install podman-compose!"
            )
        return PODMAN_COMPOSE_COMMAND, banner

    for command in DOCKER_COMPOSE_COMMANDS:
        banner = _probe(command.split() + ["version"])
        if banner is not None:
            return command, banner
    raise NoComposeFound(
        "Could not find Docker Compose. Is Docker Compose installed?"
    )


def smoke_test(engine: str, cwd: Optional[str] = None) -> bool:
    """Check that the engine can pull and run a trivial container."""
    cwd = cwd or os.getcwd()
    command = [engine, "run", "--rm", "-v", f"{cwd}:/host:ro", SMOKE_TEST_IMAGE]
    try:
        result = subprocess.run(
            command, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL
        )
    except OSError:
        return False
    return result.returncode == 0


def print_outdated_warning() -> None:
    rule = "-" * 71
    click.echo(rule)
    click.echo("WARNING: Your version of Docker is outdated and unsupported.")
    click.echo("")
    click.echo(
        f"Only Docker Engine versions {MIN_SUPPORTED_ENGINE_MAJOR} and up "
        "are supported by Docker Inc:"
    )
    click.echo(f"    {DOCKER_EOL_URL}")
    click.echo("")
    click.echo("This data migration may still work, but if you run into issues,")
    click.echo("please install the official version of Docker before filing an issue:")
    click.echo(f"    {DOCKER_INSTALL_URL}")
    click.echo("")
    click.echo(rule)


def detect(cwd: Optional[str] = None) -> RuntimeHandle:
    """Find the container engine and compose tool to use.

    Prints what was found along with the result of a smoke test. A failing
    smoke test or an old engine only produce warnings.

    Raises:
        NoRuntimeFound: If neither podman nor docker responds
        NoComposeFound: If the engine's compose tool is missing
    """
    engine, engine_version = find_engine()
    compose, compose_version = find_compose(engine)

    click.echo(f"Detected runtime: {engine} ({engine_version})")
    click.echo(f"Detected compose: {compose} ({compose_version})")

    healthy = smoke_test(engine, cwd)
    click.echo(f"   Runtime state: {'OK' if healthy else 'ERROR'}")
    click.echo("")

    handle = RuntimeHandle(
        engine_command=engine,
        compose_command=compose,
        engine_version=engine_version,
        compose_version=compose_version,
        compose_label_version=parse_label_version(compose_version),
        engine_major=parse_major_version(engine_version),
        compose_major=parse_major_version(compose_version),
        healthy=healthy,
    )

    if handle.is_outdated:
        print_outdated_warning()

    return handle
