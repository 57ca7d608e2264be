# src/imageset_core/manifest.py
"""
Manifest loading for image set catalogs.

Each source has one manifest.json document, authored outside this package.
Manifests are re-read on every call: there is no cache, so an edited
document is picked up immediately and selection stays a pure function of
the document contents.

A missing or unparseable manifest is "unavailable" and is treated exactly
like an empty catalog by every caller.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Tuple

from .config import DEFAULT_SOURCE, EngineConfig, resolve_config
from .model import (
    Annotation,
    BreastDescriptor,
    Delegation,
    DirectImage,
    ImageSet,
    Manifest,
    Tag,
    ViewImages,
    ViewReference,
    VIEWS,
)

logger = logging.getLogger(__name__)

TRUTHY_STRINGS = {"yes", "true", "1", "y"}


class ManifestFormatError(ValueError):
    """Raised by the strict parser when a document cannot be a manifest."""


def as_flag(value: Any) -> bool:
    """
    Normalize a support flag.

    Flags arrive as scalars (True, "yes") or as one-element collections
    (["yes"]) depending on how the record was captured.
    """
    if isinstance(value, (list, tuple, set, frozenset)):
        return any(as_flag(item) for item in value)
    if isinstance(value, str):
        return value.strip().lower() in TRUTHY_STRINGS
    return bool(value)


def _parse_reference(raw: Any, set_id: str, view: str) -> ViewReference:
    if isinstance(raw, str) and raw:
        return DirectImage(image=raw)
    if isinstance(raw, dict):
        if raw.get('from'):
            return Delegation(set_id=str(raw['from']))
        if raw.get('image'):
            return DirectImage(image=str(raw['image']))
    raise ManifestFormatError(f"Set {set_id!r}: invalid reference for view {view!r}: {raw!r}")


def _parse_view(raw: Any, set_id: str, view: str) -> ViewImages:
    if isinstance(raw, list):
        if not raw:
            raise ManifestFormatError(f"Set {set_id!r}: empty image list for view {view!r}")
        refs = tuple(_parse_reference(item, set_id, view) for item in raw)
    else:
        refs = (_parse_reference(raw, set_id, view),)
    return ViewImages(references=refs)


def _parse_views(raw: Any, set_id: str) -> Optional[Dict[str, ViewImages]]:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ManifestFormatError(f"Set {set_id!r}: 'views' must be an object")

    views = {}
    for key, value in raw.items():
        view = str(key).lower()
        if view not in VIEWS:
            logger.warning("Set %s: ignoring unknown view code %r", set_id, key)
            continue
        views[view] = _parse_view(value, set_id, view)
    return views


def _parse_breast(raw: Any) -> BreastDescriptor:
    if not isinstance(raw, dict):
        return BreastDescriptor()
    return BreastDescriptor(status=raw.get('status'), finding=raw.get('finding'))


def _parse_positions(raw: Any) -> Dict[str, Tuple[float, float]]:
    positions = {}
    if not isinstance(raw, dict):
        return positions
    for view, point in raw.items():
        if not (isinstance(point, dict) and 'x' in point and 'y' in point):
            continue
        try:
            positions[str(view).lower()] = (float(point['x']), float(point['y']))
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid annotation position for view %r: %r", view, point)
    return positions


def _parse_annotation(raw: Dict[str, Any]) -> Annotation:
    types = raw.get('abnormalityType')
    if isinstance(types, list):
        abnormality_type = tuple(str(t) for t in types)
    elif types:
        abnormality_type = (str(types),)
    else:
        abnormality_type = ()

    level = raw.get('levelOfConcern')
    return Annotation(
        side=str(raw.get('side', '')),
        abnormality_type=abnormality_type,
        level_of_concern=str(level) if level is not None else None,
        positions=_parse_positions(raw.get('positions')),
        notes=str(raw.get('notes') or raw.get('comment') or ''),
        location=raw.get('location'),
        other_details=raw.get('otherDetails'),
    )


def _parse_annotations(raw: Any, set_id: str) -> Tuple[Tuple[Annotation, ...], Optional[str]]:
    if raw is None:
        return (), None
    if isinstance(raw, dict):
        if raw.get('from'):
            return (), str(raw['from'])
        raise ManifestFormatError(f"Set {set_id!r}: 'annotations' object needs a 'from' key")
    if isinstance(raw, list):
        return tuple(_parse_annotation(item) for item in raw if isinstance(item, dict)), None
    raise ManifestFormatError(f"Set {set_id!r}: 'annotations' must be a list or a 'from' reference")


def parse_set(raw: Dict[str, Any], source: str) -> ImageSet:
    """Parse one set record. Raises ManifestFormatError on invalid records."""
    if not isinstance(raw, dict):
        raise ManifestFormatError(f"Set record must be an object, got {type(raw).__name__}")

    set_id = raw.get('id')
    if not set_id:
        raise ManifestFormatError("Set record has no id")
    set_id = str(set_id)

    try:
        tag = Tag(raw.get('tag'))
    except ValueError:
        raise ManifestFormatError(f"Set {set_id!r}: unknown tag {raw.get('tag')!r}")

    annotations, annotations_from = _parse_annotations(raw.get('annotations'), set_id)

    return ImageSet(
        id=set_id,
        tag=tag,
        source=source,
        disabled=as_flag(raw.get('disabled', False)),
        has_implants=as_flag(raw.get('hasImplants', False)),
        has_extra_images=as_flag(raw.get('hasExtraImages', False)),
        has_repeat=as_flag(raw.get('hasRepeat', False)),
        description=str(raw.get('description') or ''),
        left=_parse_breast(raw.get('left')),
        right=_parse_breast(raw.get('right')),
        views=_parse_views(raw.get('views'), set_id),
        annotations=annotations,
        annotations_from=annotations_from,
    )


def parse_manifest(data: Any, source: str) -> Manifest:
    """
    Parse a manifest document.

    Malformed set records are skipped with a warning so one bad entry does
    not take down the whole catalog. A document without a `sets` list
    raises ManifestFormatError.
    """
    if not isinstance(data, dict) or not isinstance(data.get('sets'), list):
        raise ManifestFormatError("Manifest must be an object with a 'sets' list")

    sets: List[ImageSet] = []
    for index, raw in enumerate(data['sets']):
        try:
            sets.append(parse_set(raw, source))
        except ManifestFormatError as e:
            logger.warning("Skipping set record %d in %s manifest: %s", index, source, e)

    return Manifest(source=source, sets=tuple(sets))


def load_manifest(source: str = DEFAULT_SOURCE, *, config: Optional[EngineConfig] = None) -> Optional[Manifest]:
    """
    Read and parse the manifest for a source.

    Returns None (unavailable) for unknown sources, missing files, and
    unreadable or invalid documents. Never cached.
    """
    cfg = resolve_config(config)
    manifest_path = cfg.manifest_path(source)
    if manifest_path is None:
        logger.debug("Unknown image source %r", source)
        return None

    try:
        data = json.loads(manifest_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        logger.debug("No manifest for source %r at %s", source, manifest_path)
        return None
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning("Could not read manifest for source %r (%s)", source, e.__class__.__name__)
        return None

    try:
        return parse_manifest(data, source)
    except ManifestFormatError as e:
        logger.warning("Invalid manifest for source %r: %s", source, e)
        return None


def get_available_sets(
    source: str = DEFAULT_SOURCE,
    *,
    include_disabled: bool = False,
    config: Optional[EngineConfig] = None,
) -> List[ImageSet]:
    """List the sets for a source, excluding disabled sets unless asked."""
    manifest = load_manifest(source, config=config)
    if manifest is None:
        return []
    if include_disabled:
        return list(manifest.sets)
    return [s for s in manifest.sets if not s.disabled]


def get_set_by_id(
    set_id: str,
    source: str = DEFAULT_SOURCE,
    *,
    config: Optional[EngineConfig] = None,
) -> Optional[ImageSet]:
    """Look up a set by id, including disabled sets."""
    manifest = load_manifest(source, config=config)
    if manifest is None:
        return None
    return manifest.get(set_id)


def has_image_sets(source: str = DEFAULT_SOURCE, *, config: Optional[EngineConfig] = None) -> bool:
    """Check if a source has any selectable sets."""
    return len(get_available_sets(source, config=config)) > 0
