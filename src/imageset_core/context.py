# src/imageset_core/context.py
"""
Event context extraction.

Derives the selection signals (symptoms, implants, imperfect capture,
repeats, extra images) from an event record. Total over any input: missing
or oddly shaped fields simply produce False / empty values.
"""
from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Optional, Set

from .manifest import as_flag
from .model import EventContext, VIEWS

# mammogramData.views keys -> view codes
VIEW_KEYS = {
    'rightCraniocaudal': 'rcc',
    'leftCraniocaudal': 'lcc',
    'rightMediolateralOblique': 'rmlo',
    'leftMediolateralOblique': 'lmlo',
}


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _sequence(value: Any) -> list:
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def sides_from_location(location: Any) -> Set[str]:
    """
    Map a free-text location to breast sides.

    "right breast" -> {right}, "left nipple" -> {left},
    "both breasts" / "both nipples" -> {left, right}.
    """
    if not isinstance(location, str):
        return set()
    text = location.lower()
    if 'both' in text:
        return {'left', 'right'}
    sides = set()
    if 'right' in text:
        sides.add('right')
    if 'left' in text:
        sides.add('left')
    return sides


def _symptom_sides(symptoms: Iterable[Any]) -> Set[str]:
    sides: Set[str] = set()
    for symptom in symptoms:
        symptom = _mapping(symptom)
        sides |= sides_from_location(symptom.get('location'))

        nipple_locations = symptom.get('nippleChangeLocation')
        if isinstance(nipple_locations, str):
            nipple_locations = [nipple_locations]
        for location in _sequence(nipple_locations):
            sides |= sides_from_location(location)
    return sides


NOT_REMOVED_VALUES = {"", "no", "false", "n", "0"}


def _removed_value(value: Any) -> bool:
    """'Yes', True or a checkbox label such as 'Implants have been removed'."""
    if isinstance(value, (list, tuple)):
        return any(_removed_value(item) for item in value)
    if isinstance(value, str):
        return value.strip().lower() not in NOT_REMOVED_VALUES
    return bool(value)


def implants_removed(entry: Mapping[str, Any]) -> bool:
    """An implant entry is removed if it has a removal year or a removed answer."""
    return bool(entry.get('yearRemoved')) or _removed_value(entry.get('implantsRemoved'))


def _has_current_implants(medical_history: Mapping[str, Any]) -> bool:
    entries = _sequence(medical_history.get('breastImplantsAugmentation'))
    return any(not implants_removed(_mapping(entry)) for entry in entries)


def view_code_for(key: str, view_data: Mapping[str, Any]) -> Optional[str]:
    """Resolve a mammogramData.views entry to a view code."""
    short = view_data.get('viewShortWithSide')
    if isinstance(short, str) and short.lower() in VIEWS:
        return short.lower()
    if key in VIEW_KEYS:
        return VIEW_KEYS[key]
    if key.lower() in VIEWS:
        return key.lower()
    return None


def extract_event_context(event: Optional[Dict[str, Any]]) -> EventContext:
    """Derive selection signals from an event record."""
    event = _mapping(event)
    medical_info = _mapping(event.get('medicalInformation'))
    mammogram = _mapping(event.get('mammogramData'))
    metadata = _mapping(mammogram.get('metadata'))

    symptoms = _sequence(medical_info.get('symptoms'))
    has_implants = _has_current_implants(_mapping(medical_info.get('medicalHistory')))

    captured = None
    repeat_views = set()
    if isinstance(mammogram.get('views'), Mapping):
        captured = set()
        for key, view_data in mammogram['views'].items():
            view_data = _mapping(view_data)
            code = view_code_for(str(key), view_data)
            if code is None:
                continue
            captured.add(code)
            repeat_count = view_data.get('repeatCount') or 0
            if isinstance(repeat_count, (int, float)) and repeat_count > 0:
                repeat_views.add(code)

    has_repeat = as_flag(metadata.get('hasRepeat', False)) or bool(repeat_views)

    return EventContext(
        has_symptoms=len(symptoms) > 0,
        symptom_sides=frozenset(_symptom_sides(symptoms)),
        has_implants=has_implants,
        is_imperfect=as_flag(mammogram.get('isImperfectButBestPossible', False)),
        has_repeat=has_repeat,
        has_extra_images=as_flag(metadata.get('hasExtraImages', False)),
        repeat_views=frozenset(repeat_views),
        captured_views=frozenset(captured) if captured is not None else None,
    )
