"""Access to the container engine: volumes and throwaway helper containers."""

import abc
import os
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Union

import click
import docker
from docker.errors import DockerException, NotFound

from .config import PODMAN_SOCKETS
from .errors import EngineError
from .runtime import RuntimeHandle


@dataclass(frozen=True)
class Mount:
    """A host path or volume mounted into a helper container."""
    source: str
    target: str
    read_only: bool = True

    @property
    def mode(self) -> str:
        return 'ro' if self.read_only else 'rw'


class ContainerEngine(abc.ABC):
    """The few engine operations a migration needs."""

    @abc.abstractmethod
    def list_volumes(self) -> List[str]:
        """Names of all volumes known to the engine."""

    def volume_exists(self, name: str) -> bool:
        return name in self.list_volumes()

    @abc.abstractmethod
    def create_volume(self, name: str, labels: Optional[Dict[str, str]] = None) -> None:
        """Create an empty volume."""

    @abc.abstractmethod
    def run_ephemeral(
        self,
        image: str,
        mounts: Sequence[Mount],
        command: Union[str, List[str]],
    ) -> int:
        """Run ``command`` in a new container and remove it afterwards.

        Blocks until the container exits and returns its exit status.
        """

    def is_rootless(self) -> bool:
        """Whether container root maps to the invoking user rather than uid 0."""
        return False


def podman_base_url() -> Optional[str]:
    """Return the URL of the first podman API socket present, if any."""
    runtime_dir = os.environ.get('XDG_RUNTIME_DIR', f"/run/user/{os.getuid()}")
    for pattern in PODMAN_SOCKETS:
        path = pattern.format(runtime_dir=runtime_dir)
        if os.path.exists(path):
            return f"unix://{path}"
    return None


class DockerEngine(ContainerEngine):
    """ContainerEngine backed by the Docker SDK.

    Podman is reached through its Docker-compatible API socket.
    """

    def __init__(self, client: docker.DockerClient):
        self.client = client

    @classmethod
    def for_runtime(cls, runtime: RuntimeHandle) -> "DockerEngine":
        """Connect to the engine that was detected on the host."""
        base_url = None
        if runtime.is_podman and 'DOCKER_HOST' not in os.environ:
            base_url = podman_base_url()
            if base_url is None:
                raise EngineError(
                    "podman detected, but its API socket is not running. "
                    "Enable it with:\n"
                    "    systemctl --user enable --now podman.socket"
                )
        try:
            if base_url:
                client = docker.DockerClient(base_url=base_url)
            else:
                client = docker.from_env()
        except DockerException as e:
            raise EngineError(
                f"Could not connect to {runtime.engine_command}: {str(e)}"
            ) from e
        return cls(client)

    def is_rootless(self) -> bool:
        try:
            options = self.client.info().get('SecurityOptions') or []
        except DockerException as e:
            raise EngineError(f"Failed to query engine info: {str(e)}") from e
        return any('name=rootless' in option for option in options)

    def list_volumes(self) -> List[str]:
        try:
            return [volume.name for volume in self.client.volumes.list()]
        except DockerException as e:
            raise EngineError(f"Failed to list volumes: {str(e)}") from e

    def volume_exists(self, name: str) -> bool:
        try:
            self.client.volumes.get(name)
        except NotFound:
            return False
        except DockerException as e:
            raise EngineError(f"Failed to inspect volume {name}: {str(e)}") from e
        return True

    def create_volume(self, name: str, labels: Optional[Dict[str, str]] = None) -> None:
        try:
            self.client.volumes.create(name=name, labels=labels or {})
        except DockerException as e:
            raise EngineError(f"Failed to create volume {name}: {str(e)}") from e

    def run_ephemeral(
        self,
        image: str,
        mounts: Sequence[Mount],
        command: Union[str, List[str]],
    ) -> int:
        volumes = {
            m.source: {'bind': m.target, 'mode': m.mode}
            for m in mounts
        }
        try:
            container = self.client.containers.run(
                image,
                command=command,
                volumes=volumes,
                detach=True
            )
        except DockerException as e:
            raise EngineError(f"Failed to start helper container: {str(e)}") from e

        try:
            # Relay the helper's own output (cp -v / tar -v) as it runs
            for chunk in container.logs(stream=True, follow=True):
                click.echo(chunk, nl=False)
            result = container.wait()
        except DockerException as e:
            raise EngineError(f"Helper container failed: {str(e)}") from e
        finally:
            try:
                container.remove(force=True)
            except DockerException as e:
                click.echo(f"Warning: could not remove helper container "
                           f"{container.short_id}: {str(e)}", err=True)

        return result.get('StatusCode', 1)
