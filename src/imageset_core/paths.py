# src/imageset_core/paths.py
"""
Resolve an image set into per-view image paths.

Standard sets keep their images in a folder named after the set:
    <url_prefix>/<source folder>/<set id>/<view>.<ext>

Composite sets list their views explicitly. Each view is a library image,
a delegation to the same view of another set, or a list of those (oldest
first). Delegations are followed recursively and always yield the
referenced view's latest image.

Delegation chains are bounded by config.max_delegation_depth. A missing
target or a chain over the bound makes that view unavailable; it is
dropped from the result rather than raising.
"""
from __future__ import annotations

import logging
from typing import Dict, FrozenSet, List, Optional, Tuple

from .config import DEFAULT_SOURCE, EngineConfig, resolve_config
from .imagefiles import detect_extension
from .manifest import load_manifest
from .model import Delegation, ImageSet, Manifest, ViewPath, ViewReference, VIEWS

logger = logging.getLogger(__name__)


class DelegationError(LookupError):
    """A delegated view could not be resolved (missing target, cycle, or too deep)."""


def standard_set_paths(set_id: str, source: str, config: EngineConfig) -> Dict[str, str]:
    """Paths for a set stored in its own folder, one file per view."""
    source_dir = config.source_dir(source)
    extension = config.default_extension
    if source_dir is not None:
        extension = detect_extension(source_dir / set_id, VIEWS, config.default_extension)

    return {
        view: config.public_path(source, set_id, f"{view}.{extension}")
        for view in VIEWS
    }


def latest(value: ViewPath) -> str:
    """Collapse a resolved view to its most recent path."""
    if isinstance(value, list):
        return value[-1]
    return value


class PathResolver:
    """
    Resolves views against one loaded manifest.

    Holds the manifest for the duration of a single query so a recursive
    resolution sees one consistent document.
    """

    def __init__(self, manifest: Manifest, config: EngineConfig):
        self.manifest = manifest
        self.config = config
        self._standard_cache: Dict[str, Dict[str, str]] = {}

    def _standard_paths(self, set_id: str) -> Dict[str, str]:
        if set_id not in self._standard_cache:
            self._standard_cache[set_id] = standard_set_paths(
                set_id, self.manifest.source, self.config
            )
        return self._standard_cache[set_id]

    def _resolve_reference(
        self,
        reference: ViewReference,
        view: str,
        depth: int,
        visiting: FrozenSet[Tuple[str, str]],
    ) -> str:
        if not isinstance(reference, Delegation):
            return self.config.public_path(
                self.manifest.source, self.config.library_folder, reference.image
            )

        target_id = reference.set_id
        if depth >= self.config.max_delegation_depth:
            raise DelegationError(
                f"delegation for view {view!r} exceeds depth {self.config.max_delegation_depth}"
            )
        if (target_id, view) in visiting:
            raise DelegationError(f"delegation cycle through set {target_id!r} view {view!r}")

        target = self.manifest.get(target_id)
        if target is None:
            raise DelegationError(f"delegation to unknown set {target_id!r}")

        resolved = self._resolve_view(target, view, depth + 1, visiting | {(target_id, view)})
        if resolved is None:
            raise DelegationError(f"set {target_id!r} does not define view {view!r}")
        return latest(resolved)

    def _resolve_view(
        self,
        image_set: ImageSet,
        view: str,
        depth: int,
        visiting: FrozenSet[Tuple[str, str]],
    ) -> Optional[ViewPath]:
        if image_set.views is None:
            return self._standard_paths(image_set.id).get(view)

        view_images = image_set.views.get(view)
        if view_images is None:
            return None

        paths: List[str] = [
            self._resolve_reference(ref, view, depth, visiting)
            for ref in view_images.references
        ]
        if view_images.is_sequence:
            return paths
        return paths[0]

    def resolve_view_or_raise(self, image_set: ImageSet, view: str) -> Optional[ViewPath]:
        """Resolve one view; raises DelegationError for broken delegations."""
        return self._resolve_view(image_set, view, 0, frozenset({(image_set.id, view)}))

    def resolve_view(self, image_set: ImageSet, view: str) -> Optional[ViewPath]:
        """Resolve one view, returning None if it is undefined or unresolvable."""
        try:
            return self.resolve_view_or_raise(image_set, view)
        except DelegationError as e:
            logger.warning("Set %s (%s): %s", image_set.id, self.manifest.source, e)
            return None

    def resolve(self, image_set: ImageSet) -> Dict[str, ViewPath]:
        """Resolve every available view of a set."""
        if image_set.views is None:
            return dict(self._standard_paths(image_set.id))

        paths: Dict[str, ViewPath] = {}
        for view in VIEWS:
            if view not in image_set.views:
                continue
            resolved = self.resolve_view(image_set, view)
            if resolved is not None:
                paths[view] = resolved
        return paths


def get_image_paths(
    set_id: str,
    source: str = DEFAULT_SOURCE,
    *,
    config: Optional[EngineConfig] = None,
) -> Optional[Dict[str, ViewPath]]:
    """
    Get image paths for a set.

    Returns:
        Dict of view code -> path (or list of paths, oldest first), or None
        if the source or set is unknown
    """
    cfg = resolve_config(config)
    if cfg.source_folder(source) is None:
        return None

    manifest = load_manifest(source, config=cfg)
    if manifest is None:
        return None

    image_set = manifest.get(set_id)
    if image_set is None:
        return None

    return PathResolver(manifest, cfg).resolve(image_set)


resolve_paths = get_image_paths
