"""Shared fixtures for the BOOTKERNEL test suite."""

from pathlib import Path

import pytest

from tests.helpers.layers import make_app, write_layer

APP_LAYER = """\
parameters:
  greeting: hello
services:
  app:
    class: tests.fakes.EchoApp
    arguments: ["%greeting%"]
"""


@pytest.fixture
def app_path(tmp_path: Path) -> Path:
    """An application root with an empty config directory."""
    return make_app(tmp_path)


@pytest.fixture
def echo_app_path(app_path: Path) -> Path:
    """An application root whose ``test`` environment defines an EchoApp."""
    write_layer(app_path, "test.yml", APP_LAYER)
    return app_path
