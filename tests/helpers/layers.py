"""Helpers for writing application trees and config layers in tests."""

from pathlib import Path
from textwrap import dedent


def make_app(root: Path, name: str = "app") -> Path:
    """Create ``root/project/<name>/config`` and return the app path."""
    app_path = root / "project" / name
    (app_path / "config").mkdir(parents=True)
    return app_path


def write_layer(app_path: Path, filename: str, content: str) -> Path:
    """Write a YAML layer into ``app_path/config`` and return its path."""
    path = app_path / "config" / filename
    path.write_text(dedent(content), encoding="utf-8")
    return path
