"""Shared fixtures for Triport tests."""

import os
import tempfile
from pathlib import Path

# Point logs at a throwaway directory before triport is imported anywhere
os.environ.setdefault("TRIPORT_DATA_DIR", tempfile.mkdtemp(prefix="triport-tests-"))

import pytest  # noqa: E402
from pydantic import BaseModel, Field  # noqa: E402

from triport.core.operation import make_operation  # noqa: E402
from triport.core.registry import OperationRegistry  # noqa: E402


class EchoIn(BaseModel):
    message: str = Field(..., min_length=1)


class EchoOut(BaseModel):
    echoed: str


def build_echo(name="echo", summary="Echo endpoint", description="Echoes back the message"):
    return make_operation(
        name=name,
        summary=summary,
        description=description,
        input=EchoIn,
        output=EchoOut,
        handler=lambda call: {"echoed": call.input.message},
    )


@pytest.fixture
def echo_operation():
    return build_echo()


@pytest.fixture
def registry(echo_operation):
    """A fresh registry holding only `echo`."""
    reg = OperationRegistry()
    reg.register(echo_operation)
    return reg


@pytest.fixture
def tmp_triport_dir(tmp_path):
    """Point Config at a temp directory for isolated tests."""
    data_dir = tmp_path / ".triport"
    data_dir.mkdir()
    (data_dir / "logs").mkdir()

    from triport import config
    original = (config.Config.DATA_DIR, config.Config.LOG_DIR)
    config.Config.DATA_DIR = data_dir
    config.Config.LOG_DIR = data_dir / "logs"

    yield data_dir

    config.Config.DATA_DIR, config.Config.LOG_DIR = original


def pytest_configure(config):
    Path(os.environ["TRIPORT_DATA_DIR"]).mkdir(parents=True, exist_ok=True)
