# src/imageset_core/selection.py
"""
Deterministic image set selection for events.

NO WEB OR UI IMPORTS ALLOWED IN THIS MODULE.

Selection is a pure function of (event id, catalog, options): the same
event always gets the same set, with no stored state.

Steps:
1. Forced tag: uniform pick among sets carrying it (if any)
2. Weighted tag pick over tags that have sets and positive weight
3. Soft preferences within the tag (symptomatic side, repeat views)
4. Uniform pick within the narrowed list, seeded by event id + tag
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .config import DEFAULT_SOURCE, EngineConfig, resolve_config
from .context import extract_event_context
from .filters import filter_with_fallback, prefer_repeat_matches, prefer_symptomatic_side
from .manifest import load_manifest
from .model import EventContext, ImageSet, Manifest, SelectionOptions, Tag
from .seeding import seeded_index, seeded_random
from .weights import resolve_weights

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TagRange:
    """Cumulative probability range for one tag."""
    tag: str
    start: float
    end: float


def group_by_tag(sets: Sequence[ImageSet]) -> Dict[str, List[ImageSet]]:
    groups: Dict[str, List[ImageSet]] = {}
    for image_set in sets:
        groups.setdefault(image_set.tag.value, []).append(image_set)
    return groups


def build_tag_ranges(
    groups: Mapping[str, Sequence[ImageSet]],
    weights: Mapping[str, float],
) -> List[TagRange]:
    """
    Build normalized cumulative ranges, in weight-table order.

    Only tags with at least one set and a positive weight take part, so the
    ranges always cover [0, 1) whatever the table's total.
    """
    active: List[Tuple[str, float]] = [
        (tag, float(weight)) for tag, weight in weights.items()
        if groups.get(tag) and weight and weight > 0
    ]
    total = sum(weight for _, weight in active)
    if total <= 0:
        return []

    ranges = []
    cumulative = 0.0
    for tag, weight in active:
        start = cumulative
        cumulative += weight / total
        ranges.append(TagRange(tag=tag, start=start, end=cumulative))
    return ranges


def pick_tag(ranges: Sequence[TagRange], value: float) -> str:
    for tag_range in ranges:
        if tag_range.start <= value < tag_range.end:
            return tag_range.tag
    # Floating point can leave a value just past the last range end
    return ranges[0].tag


def select_set(
    eligible_sets: Sequence[ImageSet],
    weights: Mapping[str, float],
    event_id: str,
    forced_tag: Optional[str] = None,
    context: Optional[EventContext] = None,
) -> Optional[ImageSet]:
    """
    Pick one set for an event from an already-filtered pool.

    Args:
        eligible_sets: Candidate sets (after hard filtering)
        weights: Tag -> weight table (any total)
        event_id: Seed for every random draw
        forced_tag: Optional tag to pick from uniformly, if any set has it
        context: Event context for the soft preferences

    Returns:
        The chosen ImageSet, or None if there are no candidates
    """
    if not eligible_sets:
        return None
    context = context or EventContext()

    if forced_tag:
        tagged = [s for s in eligible_sets if s.tag.value == forced_tag]
        if tagged:
            return tagged[seeded_index(event_id, len(tagged))]

    groups = group_by_tag(eligible_sets)
    ranges = build_tag_ranges(groups, weights)
    if not ranges:
        # No tag with positive weight has sets; pick from the whole pool
        logger.debug("No weighted tag available for event %s; picking uniformly", event_id)
        return eligible_sets[seeded_index(event_id, len(eligible_sets))]

    tag = pick_tag(ranges, seeded_random(event_id))
    candidates = list(groups[tag])

    if tag == Tag.ABNORMAL.value:
        candidates = prefer_symptomatic_side(candidates, context, event_id)
    candidates = prefer_repeat_matches(candidates, context, event_id)

    return candidates[seeded_index(event_id + tag, len(candidates))]


def get_image_set_for_event(
    event_id: str,
    source: str = DEFAULT_SOURCE,
    options=None,
    *,
    config: Optional[EngineConfig] = None,
) -> Optional[ImageSet]:
    """
    Select an image set for an event.

    Returns the same set for the same event id, source and options, or
    None when the source has no sets.
    """
    cfg = resolve_config(config)
    manifest = load_manifest(source, config=cfg)
    if manifest is None:
        return None
    return select_from_manifest(manifest, event_id, options, config=cfg)


def select_from_manifest(
    manifest: Manifest,
    event_id: str,
    options=None,
    *,
    config: Optional[EngineConfig] = None,
) -> Optional[ImageSet]:
    """Select an image set for an event from an already loaded manifest."""
    cfg = resolve_config(config)
    opts = SelectionOptions.coerce(options)

    sets = [s for s in manifest.sets if not s.disabled]
    if not sets:
        return None

    context = extract_event_context(opts.event) if opts.event else EventContext()
    eligible = filter_with_fallback(sets, context)
    weights = resolve_weights(
        context,
        cfg.tag_weights,
        override=opts.weights,
        profile=cfg.profile,
    )

    selected = select_set(eligible, weights, event_id, forced_tag=opts.tag, context=context)
    if selected is not None:
        logger.debug("Event %s -> set %s (%s)", event_id, selected.id, selected.tag.value)
    return selected
