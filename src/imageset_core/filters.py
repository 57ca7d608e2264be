# src/imageset_core/filters.py
"""
Contextual filtering and soft scoring of candidate sets.

Hard filters remove sets that contradict the event (implants, extra
images, repeats). Soft preferences narrow a tag's candidates towards the
event's symptomatic side or retaken views, but only on some events.
"""
from __future__ import annotations

import logging
from typing import List, Sequence

from .model import EventContext, ImageSet
from .seeding import seeded_random

logger = logging.getLogger(__name__)

# Probability of ignoring a soft preference and keeping the full pool
SIDE_PREFERENCE_SKIP_PROBABILITY = 0.7
# Probability of applying the repeat-view preference when it has matches
REPEAT_PREFERENCE_PROBABILITY = 0.7

SIDE_SEED_SUFFIX = "side"
REPEAT_SEED_SUFFIX = "repeat"


def passes_hard_filters(image_set: ImageSet, context: EventContext) -> bool:
    return (
        image_set.has_implants == context.has_implants
        and image_set.has_extra_images == context.has_extra_images
        and image_set.has_repeat == context.has_repeat
    )


def filter_eligible(sets: Sequence[ImageSet], context: EventContext) -> List[ImageSet]:
    """
    Keep only sets whose implant, extra-image and repeat flags match the event.

    May return an empty list; see filter_with_fallback.
    """
    return [s for s in sets if passes_hard_filters(s, context)]


def filter_with_fallback(sets: Sequence[ImageSet], context: EventContext) -> List[ImageSet]:
    """Hard-filter, falling back to the unfiltered pool if nothing survives."""
    eligible = filter_eligible(sets, context)
    if eligible:
        return eligible
    if sets:
        logger.debug("No set matches event context; using all %d sets", len(sets))
    return list(sets)


def prefer_symptomatic_side(
    candidates: Sequence[ImageSet],
    context: EventContext,
    event_id: str,
) -> List[ImageSet]:
    """
    Narrow abnormal candidates to those abnormal on a symptomatic side.

    Applied 30% of the time (seeded by event id); falls back to the full
    candidate list when no set matches.
    """
    candidates = list(candidates)
    if not context.symptom_sides:
        return candidates

    if seeded_random(event_id + SIDE_SEED_SUFFIX) < SIDE_PREFERENCE_SKIP_PROBABILITY:
        return candidates

    matching = [
        s for s in candidates
        if any(s.breast(side).status == 'abnormal' for side in context.symptom_sides)
    ]
    return matching or candidates


def repeat_match_score(image_set: ImageSet, repeat_views) -> int:
    """Count the event's repeated views that this set also defines as retakes."""
    if not image_set.views:
        return 0
    return sum(
        1 for view in repeat_views
        if view in image_set.views and image_set.views[view].is_sequence
    )


def prefer_repeat_matches(
    candidates: Sequence[ImageSet],
    context: EventContext,
    event_id: str,
) -> List[ImageSet]:
    """
    Narrow candidates to the sets best matching the event's retaken views.

    Applied 70% of the time (seeded by event id) and only when at least one
    candidate scores above zero.
    """
    candidates = list(candidates)
    if not context.has_repeat or not context.repeat_views:
        return candidates

    scores = [repeat_match_score(s, context.repeat_views) for s in candidates]
    best = max(scores, default=0)

    if seeded_random(event_id + REPEAT_SEED_SUFFIX) < REPEAT_PREFERENCE_PROBABILITY and best > 0:
        return [s for s, score in zip(candidates, scores) if score == best]
    return candidates
