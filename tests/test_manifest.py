from pathlib import Path

import pytest

from cargo_remote.errors import (
    ManifestMalformed,
    ManifestUnreadable,
    PrimaryManifestMalformed,
    PrimaryManifestUnreadable,
)
from cargo_remote.patches.manifest import read_manifest, read_primary_manifest


def test_read_manifest_collects_patch_and_dependency_tables(project, write_crate):
    """Verify manifest reader keeps dependencies, patches and workspace info."""
    write_crate(
        project,
        """
        [dependencies]
        serde = "1"

        [dev-dependencies]
        tempfile = { version = "3" }

        [workspace]
        members = ["crates/*"]

        [patch.crates-io]
        foo = { path = "../foo-fork" }
        bar = { version = "2" }
        """,
    )

    manifest = read_manifest(project / "Cargo.toml")

    assert manifest.path == project / "Cargo.toml"
    assert manifest.directory == project
    assert set(manifest.dependencies) == {"serde", "tempfile"}
    assert list(manifest.patches) == ["crates-io"]
    assert list(manifest.patches["crates-io"]) == ["foo", "bar"]
    assert manifest.workspace == {"members": ["crates/*"]}
    assert manifest.package_workspace is None


def test_read_manifest_accepts_directory(project, write_crate):
    """Verify a crate directory resolves to its Cargo.toml."""
    write_crate(project)
    assert read_manifest(project).path == project / "Cargo.toml"


def test_read_manifest_package_workspace_pointer(project, write_crate):
    """Verify the explicit package.workspace pointer is recorded."""
    manifest_path = write_crate(project, "")
    manifest_path.write_text(manifest_path.read_text().replace(
        'edition = "2021"', 'edition = "2021"\nworkspace = ".."'
    ))
    assert read_manifest(manifest_path).package_workspace == ".."


def test_missing_manifest_is_unreadable(tmp_path: Path):
    """Verify a missing file raises ManifestUnreadable with path and cause."""
    missing = tmp_path / "Cargo.toml"
    with pytest.raises(ManifestUnreadable) as info:
        read_manifest(missing)
    assert info.value.path == missing
    assert isinstance(info.value.cause, FileNotFoundError)


def test_invalid_toml_is_malformed(tmp_path: Path):
    """Verify TOML syntax errors raise ManifestMalformed."""
    manifest = tmp_path / "Cargo.toml"
    manifest.write_text("[package\nname = ")
    with pytest.raises(ManifestMalformed):
        read_manifest(manifest)


def test_non_table_patch_root_is_malformed(tmp_path: Path):
    """Verify `patch = "x"` is rejected as malformed."""
    manifest = tmp_path / "Cargo.toml"
    manifest.write_text('patch = "nope"\n')
    with pytest.raises(ManifestMalformed):
        read_manifest(manifest)


def test_primary_variants(tmp_path: Path):
    """Verify the primary reader re-raises the primary error types."""
    with pytest.raises(PrimaryManifestUnreadable):
        read_primary_manifest(tmp_path / "Cargo.toml")

    broken = tmp_path / "broken" / "Cargo.toml"
    broken.parent.mkdir()
    broken.write_text("= =")
    with pytest.raises(PrimaryManifestMalformed) as info:
        read_primary_manifest(broken)
    # Still catchable through the generic type.
    assert isinstance(info.value, ManifestMalformed)
