# src/imageset_core/weights.py
"""
Tag weight tables and the precedence rule that picks one for an event.

Tables need not sum to 1; the selector normalizes over the tags that are
actually available.
"""
from __future__ import annotations

from typing import Dict, Mapping, Optional

from .model import EventContext

DEFAULT_PROFILE = 'medium'

# Contextual tag weights per seed-data profile
WEIGHT_PROFILES: Dict[str, Dict[str, Dict[str, float]]] = {
    'low': {
        'default': {'normal': 0.8, 'abnormal': 0.12, 'indeterminate': 0.04, 'technical': 0.04},
        'symptoms': {'normal': 0.5, 'abnormal': 0.35, 'indeterminate': 0.08, 'technical': 0.07},
        'imperfect': {'normal': 0.2, 'abnormal': 0.1, 'indeterminate': 0.0, 'technical': 0.7},
        'symptomsAndImperfect': {'normal': 0.2, 'abnormal': 0.3, 'indeterminate': 0.05, 'technical': 0.45},
    },
    'medium': {
        'default': {'normal': 0.7, 'abnormal': 0.15, 'indeterminate': 0.1, 'technical': 0.05},
        'symptoms': {'normal': 0.3, 'abnormal': 0.5, 'indeterminate': 0.1, 'technical': 0.1},
        'imperfect': {'normal': 0.1, 'abnormal': 0.1, 'indeterminate': 0.0, 'technical': 0.8},
        'symptomsAndImperfect': {'normal': 0.15, 'abnormal': 0.35, 'indeterminate': 0.05, 'technical': 0.45},
    },
    'high': {
        'default': {'normal': 0.55, 'abnormal': 0.2, 'indeterminate': 0.15, 'technical': 0.1},
        'symptoms': {'normal': 0.15, 'abnormal': 0.6, 'indeterminate': 0.1, 'technical': 0.15},
        'imperfect': {'normal': 0.05, 'abnormal': 0.1, 'indeterminate': 0.0, 'technical': 0.85},
        'symptomsAndImperfect': {'normal': 0.08, 'abnormal': 0.42, 'indeterminate': 0.05, 'technical': 0.45},
    },
}

# Fixed tables used when no profile is configured
DEFAULT_WEIGHTS = WEIGHT_PROFILES[DEFAULT_PROFILE]['default']
SYMPTOMS_WEIGHTS = WEIGHT_PROFILES[DEFAULT_PROFILE]['symptoms']
IMPERFECT_WEIGHTS = WEIGHT_PROFILES[DEFAULT_PROFILE]['imperfect']
SYMPTOMS_AND_IMPERFECT_WEIGHTS = WEIGHT_PROFILES[DEFAULT_PROFILE]['symptomsAndImperfect']


def get_weight_profile(name: Optional[str] = None) -> Dict[str, Dict[str, float]]:
    """Return the contextual tables for a profile, falling back to medium."""
    return WEIGHT_PROFILES.get(name or DEFAULT_PROFILE, WEIGHT_PROFILES[DEFAULT_PROFILE])


def resolve_weights(
    context: EventContext,
    configured_weights: Optional[Mapping[str, float]] = None,
    *,
    override: Optional[Mapping[str, float]] = None,
    profile: Optional[str] = None,
) -> Dict[str, float]:
    """
    Pick the tag weight table for an event.

    Precedence, highest first:
    1. explicit caller override
    2. symptoms and imperfect capture
    3. symptoms only
    4. imperfect capture only
    5. configured weights, else the profile default
    """
    if override:
        return dict(override)

    tables = get_weight_profile(profile)

    if context.has_symptoms and context.is_imperfect:
        return dict(tables['symptomsAndImperfect'])
    if context.has_symptoms:
        return dict(tables['symptoms'])
    if context.is_imperfect:
        return dict(tables['imperfect'])

    if configured_weights:
        return dict(configured_weights)
    return dict(tables['default'])
