"""Configuration for pytest."""

import pytest

from led_migrate.engine import ContainerEngine
from led_migrate.runtime import RuntimeHandle


class FakeEngine(ContainerEngine):
    """In-memory engine recording what it was asked to do."""

    def __init__(self, volumes=None, exit_status=0, rootless=False):
        self.rootless = rootless
        self.volumes = {name: {} for name in (volumes or [])}
        self.exit_status = exit_status
        self.queries = 0
        self.runs = []

    def list_volumes(self):
        self.queries += 1
        return list(self.volumes)

    def create_volume(self, name, labels=None):
        self.volumes[name] = dict(labels or {})

    def run_ephemeral(self, image, mounts, command):
        self.runs.append((image, list(mounts), command))
        return self.exit_status

    def is_rootless(self):
        return self.rootless


@pytest.fixture(autouse=True)
def mock_env_home(monkeypatch, tmp_path):
    """Mock HOME environment to avoid touching real home directory."""
    monkeypatch.setenv("HOME", str(tmp_path))


@pytest.fixture
def engine():
    return FakeEngine()


@pytest.fixture
def runtime():
    return RuntimeHandle(
        engine_command="docker",
        compose_command="docker compose",
        engine_version="Docker version 24.0.2, build cb74dfc",
        compose_version="Docker Compose version v2.20.2",
        compose_label_version="v2.20.2",
        engine_major=24,
        compose_major=2,
        healthy=True,
    )
