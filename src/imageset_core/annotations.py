# src/imageset_core/annotations.py
"""
Annotation lookup and one-line summaries.

Composite sets may borrow annotations from another set with
`"annotations": {"from": "<set id>"}`; get_resolved_annotations follows
those references (bounded by config.max_delegation_depth).
"""
from __future__ import annotations

import logging
import re
from typing import Iterable, List, Optional

from .config import EngineConfig, resolve_config
from .manifest import load_manifest
from .model import Annotation, ImageSet

logger = logging.getLogger(__name__)

# Set tag -> reading outcome the set is meant to produce
TAG_TO_READ_RESULT = {
    'normal': 'normal',
    'abnormal': 'recall_for_assessment',
    'technical': 'technical_recall',
    'indeterminate': 'recall_for_assessment',
}

LEVEL_LABELS = {
    1: 'normal',
    2: 'benign',
    3: 'probably benign',
    4: 'probably cancerous',
    5: 'likely cancerous',
}

LEVEL_WORDS = {
    'normal': 'Level 1 (normal)',
    'benign': 'Level 2 (benign)',
    'indeterminate': 'Level 3 (probably benign)',
    'suspicious': 'Level 4 (probably cancerous)',
    'highly suspicious': 'Level 5 (likely cancerous)',
}

# "4", "4.0" and "3.5" all read as their leading integer
LEADING_INTEGER = re.compile(r"[+-]?\d+")


def read_result_for(image_set: Optional[ImageSet]) -> Optional[str]:
    """Reading outcome a set is meant to produce, or None for no set."""
    if image_set is None:
        return None
    return TAG_TO_READ_RESULT.get(image_set.tag.value)


def get_resolved_annotations(
    image_set: Optional[ImageSet],
    *,
    config: Optional[EngineConfig] = None,
) -> List[Annotation]:
    """
    Return a set's annotations, following `from` references.

    Returns an empty list when the set has none, the reference target is
    missing, or the chain loops or runs too deep.
    """
    if image_set is None:
        return []
    cfg = resolve_config(config)

    current = image_set
    seen = {current.id}
    manifest = None
    for _ in range(cfg.max_delegation_depth + 1):
        if current.annotations:
            return list(current.annotations)
        if not current.annotations_from:
            return []

        if manifest is None:
            manifest = load_manifest(current.source, config=cfg)
            if manifest is None:
                return []

        target_id = current.annotations_from
        if target_id in seen:
            logger.warning("Annotation reference cycle through set %s", target_id)
            return []
        target = manifest.get(target_id)
        if target is None:
            logger.warning("Set %s borrows annotations from unknown set %s", current.id, target_id)
            return []
        seen.add(target_id)
        current = target

    logger.warning("Annotation references from set %s exceed depth %d",
                   image_set.id, cfg.max_delegation_depth)
    return []


def level_of_concern_text(level: Optional[str]) -> str:
    if not level:
        return ''

    text = str(level).strip()
    match = LEADING_INTEGER.match(text)
    if match is None:
        normalised = text.lower()
        return LEVEL_WORDS.get(normalised, f"Level of concern: {normalised}")

    value = int(match.group(0))
    label = LEVEL_LABELS.get(value)
    if label:
        return f"Level {value} ({label})"
    return f"Level {value}"


def abnormality_type_text(annotation: Annotation) -> str:
    if not annotation.abnormality_type:
        return 'Abnormality'
    return ', '.join(
        annotation.other_details if t == 'Other' and annotation.other_details else t
        for t in annotation.abnormality_type
    )


def summarise_annotation(annotation: Optional[Annotation]) -> str:
    """One-line summary, e.g. 'Mass well-defined – Level 4 (probably cancerous)'."""
    if annotation is None:
        return ''

    parts = []
    concern = level_of_concern_text(annotation.level_of_concern)
    if concern:
        parts.append(concern)
    if annotation.location:
        parts.append(annotation.location)
    if annotation.notes:
        parts.append(f"Comment: {annotation.notes}")

    type_text = abnormality_type_text(annotation)
    if parts:
        return f"{type_text} – {' – '.join(parts)}"
    return type_text


def summarise_annotations(annotations: Optional[Iterable[Annotation]]) -> List[str]:
    if not annotations:
        return []
    return [s for s in (summarise_annotation(a) for a in annotations) if s]
