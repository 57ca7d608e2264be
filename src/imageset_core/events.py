# src/imageset_core/events.py
"""
Event image assembly: selection + path resolution + the event's own views.
"""
from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from .config import DEFAULT_SOURCE, EngineConfig, resolve_config
from .context import extract_event_context
from .manifest import as_flag, load_manifest
from .model import EventImages, SelectionOptions
from .paths import PathResolver, latest
from .selection import select_from_manifest

logger = logging.getLogger(__name__)


def _event_flags_retake(event: Mapping[str, Any]) -> bool:
    mammogram = event.get('mammogramData')
    if not isinstance(mammogram, Mapping):
        return False
    metadata = mammogram.get('metadata')
    if not isinstance(metadata, Mapping):
        return False
    return as_flag(metadata.get('hasRepeat', False)) or as_flag(metadata.get('hasAdditionalImages', False))


def get_images_for_event(
    event_id: str,
    source: str = DEFAULT_SOURCE,
    options=None,
    *,
    config: Optional[EngineConfig] = None,
) -> Optional[EventImages]:
    """
    Select a set for an event and resolve the paths to display.

    When options carry the event record, only the views the event actually
    captured are returned. `paths` holds the latest image per view;
    `all_paths` keeps every image (oldest first) for retaken views.

    The manifest is read once; selection and resolution see the same document.

    Returns:
        EventImages, or None if no set could be selected
    """
    cfg = resolve_config(config)
    opts = SelectionOptions.coerce(options)

    manifest = load_manifest(source, config=cfg)
    if manifest is None:
        return None

    image_set = select_from_manifest(manifest, event_id, opts, config=cfg)
    if image_set is None:
        return None

    all_paths = PathResolver(manifest, cfg).resolve(image_set)

    # Anything other than a mapping is treated as an event with no details
    event: Mapping[str, Any] = opts.event if isinstance(opts.event, Mapping) else {}
    if opts.event is not None:
        captured = extract_event_context(event).captured_views
        if captured is not None:
            all_paths = {view: value for view, value in all_paths.items() if view in captured}

    has_sequences = any(isinstance(value, list) for value in all_paths.values())

    return EventImages(
        set=image_set,
        paths={view: latest(value) for view, value in all_paths.items()},
        all_paths=all_paths,
        has_additional_images=has_sequences or _event_flags_retake(event),
    )
