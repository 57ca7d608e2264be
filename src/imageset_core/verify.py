# src/imageset_core/verify.py
"""
Catalog verification for manifest authors.

Purpose:
- Catch broken catalogs before they reach the selection engine
- Report, never repair: the manifest is owned by the authoring process
- The engine itself degrades silently; this is the loud counterpart
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from .config import DEFAULT_SOURCE, EngineConfig, resolve_config
from .imagefiles import check_image_file
from .manifest import load_manifest
from .model import VIEWS
from .paths import DelegationError, PathResolver

logger = logging.getLogger(__name__)


class CatalogError(RuntimeError):
    """Raised when catalog verification fails."""


@dataclass(frozen=True)
class CatalogReport:
    source: str
    ok: bool
    set_count: int = 0
    errors: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()

    def to_dict(self):
        return {
            'source': self.source,
            'ok': self.ok,
            'setCount': self.set_count,
            'errors': list(self.errors),
            'warnings': list(self.warnings),
        }


def _public_to_file(public_path: str, source: str, config: EngineConfig) -> Optional[Path]:
    """Map a resolved public path back to a file under the source folder."""
    source_dir = config.source_dir(source)
    prefix = config.public_path(source) + "/"
    if source_dir is None or not public_path.startswith(prefix):
        return None
    return source_dir / public_path[len(prefix):]


def _check_file(public_path: str, label: str, source: str, config: EngineConfig,
                errors: List[str], warnings: List[str]) -> None:
    file_path = _public_to_file(public_path, source, config)
    if file_path is None:
        return
    if not file_path.is_file():
        errors.append(f"{label}: missing image file {file_path}")
        return
    problem = check_image_file(file_path)
    if problem:
        warnings.append(f"{label}: {problem} at {file_path}")


def verify_catalog(source: str = DEFAULT_SOURCE, *, config: Optional[EngineConfig] = None) -> CatalogReport:
    """
    Verify one source's catalog.

    Errors: unavailable manifest, duplicate ids, broken delegations,
    missing image files. Warnings: unreadable images, no selectable sets.
    """
    cfg = resolve_config(config)
    errors: List[str] = []
    warnings: List[str] = []

    manifest = load_manifest(source, config=cfg)
    if manifest is None:
        errors.append(f"Manifest unavailable for source {source!r}")
        return CatalogReport(source=source, ok=False, errors=tuple(errors))

    counts = Counter(s.id for s in manifest.sets)
    for set_id, count in sorted(counts.items()):
        if count > 1:
            errors.append(f"Duplicate set id {set_id!r} ({count} records)")

    if not any(not s.disabled for s in manifest.sets):
        warnings.append(f"Source {source!r} has no selectable sets")

    resolver = PathResolver(manifest, cfg)
    for image_set in manifest.sets:
        if image_set.annotations_from and manifest.get(image_set.annotations_from) is None:
            errors.append(
                f"Set {image_set.id}: annotations borrowed from unknown set {image_set.annotations_from!r}"
            )

        for view in VIEWS:
            label = f"Set {image_set.id} view {view}"
            if image_set.views is not None and view not in image_set.views:
                continue
            try:
                resolved = resolver.resolve_view_or_raise(image_set, view)
            except DelegationError as e:
                errors.append(f"{label}: {e}")
                continue
            if resolved is None:
                continue
            for public_path in (resolved if isinstance(resolved, list) else [resolved]):
                _check_file(public_path, label, source, cfg, errors, warnings)

    report = CatalogReport(
        source=source,
        ok=not errors,
        set_count=len(manifest.sets),
        errors=tuple(errors),
        warnings=tuple(warnings),
    )
    logger.info("Verified %s catalog: %d sets, %d errors, %d warnings",
                source, report.set_count, len(errors), len(warnings))
    return report


def raise_if_failed(report: CatalogReport) -> None:
    """Raise CatalogError if verification failed."""
    if not report.ok:
        msg = f"Catalog {report.source!r} failed verification:\n- " + "\n- ".join(report.errors)
        raise CatalogError(msg)
