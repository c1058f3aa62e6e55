"""Pytest configuration and shared fixtures for cargo_remote tests."""

import textwrap
from pathlib import Path

import pytest


def _write_crate(directory: Path, body: str = "", *, package: bool = True) -> Path:
    """Create *directory* with a ``Cargo.toml`` and return the manifest path.

    Args:
        directory: Crate directory, created if missing.
        body: Extra TOML appended after the ``[package]`` table.
        package: Emit a ``[package]`` table named after the directory.
            Disable for virtual workspace manifests.
    """
    directory.mkdir(parents=True, exist_ok=True)
    text = ""
    if package:
        text += (
            "[package]\n"
            f'name = "{directory.name}"\n'
            'version = "0.1.0"\n'
            'edition = "2021"\n\n'
        )
    text += textwrap.dedent(body)
    manifest = directory / "Cargo.toml"
    manifest.write_text(text)
    return manifest


@pytest.fixture
def write_crate():
    """Return the crate writer helper."""
    return _write_crate


@pytest.fixture
def root(tmp_path: Path) -> Path:
    """Canonical scratch directory holding a project and its neighbours."""
    return tmp_path.resolve()


@pytest.fixture
def project(root: Path) -> Path:
    """Directory of the primary project (manifest not yet written)."""
    path = root / "app"
    path.mkdir()
    return path
