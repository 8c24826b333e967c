"""
Pytest configuration and shared fixtures for Templar tests.
"""

import tempfile
from pathlib import Path
from typing import Generator

import pytest

from templar.core.config import TemplarConfig, RunnerConfig
from templar.core.models import Environment
from templar.workspace.workspace import Workspace


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def test_config(temp_dir: Path) -> TemplarConfig:
    """Provide a test configuration."""
    return TemplarConfig(
        storage={"workspace_path": str(temp_dir / "workspace.json")},
        runner={"timeout": 5.0},
        logging={"level": "DEBUG"}
    )


@pytest.fixture
def runner_config() -> RunnerConfig:
    """Provide a runner configuration with short timeouts."""
    return RunnerConfig(timeout=5.0, max_connections=10, max_connections_per_host=5)


@pytest.fixture
def dev_environment() -> Environment:
    """Provide an environment pointing at a local service."""
    return Environment(
        id=1,
        name="Dev",
        variables={"host": "http://localhost:8080", "id": "7"}
    )


@pytest.fixture
def sample_workspace() -> Workspace:
    """Provide a workspace with two requests and one environment."""
    workspace = Workspace(name="Sample")
    ping = workspace.create_request("Ping")
    workspace.set_request_template(ping.id, "GET {{host}}/ping")
    create = workspace.create_request("Create item")
    workspace.set_request_template(
        create.id,
        'POST {{host}}/items\nContent-Type: application/json\n\n{"id":{{id}}}'
    )
    env = workspace.create_environment("Dev")
    env.set("host", "http://localhost:8080")
    env.set("id", "7")
    workspace.set_environ(env.id, env)
    return workspace
