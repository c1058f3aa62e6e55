"""Pull path-based ``[patch]`` declarations out of a manifest."""

from __future__ import annotations

from typing import List, Tuple

import structlog

from ..models import Manifest, OverrideEntry, PatchWarning

log = structlog.get_logger()


def _malformed(manifest: Manifest, message: str, name: str | None = None) -> PatchWarning:
    log.warning("patch.malformed", manifest=str(manifest.path), dependency=name, reason=message)
    return PatchWarning(
        kind="malformed-override",
        message=message,
        dependency=name,
        manifest_path=manifest.path,
    )


def extract_overrides(
    manifest: Manifest, *, depth: int = 0
) -> Tuple[List[OverrideEntry], List[PatchWarning]]:
    """Return the path overrides declared in *manifest*.

    Entries appear in declaration order (sources first, then names within a
    source).  Overrides that point at a registry, a version or a git URL are
    dropped silently.  Structurally broken entries are skipped with a
    ``malformed-override`` warning so one bad line does not hide the others.

    Args:
        manifest: Parsed manifest.
        depth: Number of chained manifests between the primary manifest and
            *manifest*; copied onto each entry.

    Returns:
        ``(entries, warnings)``.
    """
    entries: List[OverrideEntry] = []
    warnings: List[PatchWarning] = []

    for source, table in manifest.patches.items():
        if not isinstance(table, dict):
            warnings.append(
                _malformed(manifest, f"[patch.{source}] must be a table of dependencies")
            )
            continue

        for name, spec in table.items():
            if not isinstance(spec, dict):
                warnings.append(
                    _malformed(
                        manifest,
                        f"patch '{name}' in [patch.{source}] must be an inline table",
                        name,
                    )
                )
                continue
            if "path" not in spec:
                log.debug("patch.not_path", dependency=name, source=source)
                continue

            declared = spec["path"]
            if not isinstance(declared, str) or not declared.strip():
                warnings.append(
                    _malformed(
                        manifest,
                        f"patch '{name}' in [patch.{source}] has an invalid path {declared!r}",
                        name,
                    )
                )
                continue

            entries.append(
                OverrideEntry(
                    name=name,
                    source=source,
                    declared_path=declared,
                    manifest_path=manifest.path,
                    depth=depth,
                )
            )

    log.debug("patch.extracted", manifest=str(manifest.path), count=len(entries))
    return entries, warnings


__all__ = ["extract_overrides"]
