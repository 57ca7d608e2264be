# src/imageset_core/model.py
"""
Catalog and selection models for the image set engine.

NO WEB OR UI IMPORTS ALLOWED IN THIS MODULE.

Model Categories:
-----------------
1. Catalog records (read-only, parsed from a manifest document)
   - ImageSet, ViewImages, BreastDescriptor, Annotation
   - View references are a tagged union: DirectImage | Delegation

2. EventContext: derived per-event signals (never stored; computed each call)

3. Results: EventImages returned by the event image assembler
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union


class Tag(Enum):
    """Clinical category of an image set."""
    NORMAL = "normal"
    ABNORMAL = "abnormal"
    INDETERMINATE = "indeterminate"
    TECHNICAL = "technical"


# Order matters: rcc is checked first when detecting file extensions
VIEWS = ("rcc", "lcc", "rmlo", "lmlo")

SIDES = ("left", "right")

VIEW_SIDES = {
    'rcc': 'right',
    'rmlo': 'right',
    'lcc': 'left',
    'lmlo': 'left',
}


@dataclass(frozen=True)
class DirectImage:
    """A reference to an image in the source's library folder."""
    image: str


@dataclass(frozen=True)
class Delegation:
    """A reference to the same view of another set in the same source."""
    set_id: str


ViewReference = Union[DirectImage, Delegation]


@dataclass(frozen=True)
class ViewImages:
    """
    All images defined for one view of a set.

    Always normalized to a tuple, oldest first. A view with more than one
    reference was retaken; the last reference is the latest image.
    """
    references: Tuple[ViewReference, ...]

    @property
    def is_sequence(self) -> bool:
        return len(self.references) > 1

    @property
    def latest(self) -> ViewReference:
        return self.references[-1]


@dataclass(frozen=True)
class BreastDescriptor:
    """Per-breast status and finding for a set."""
    status: Optional[str] = None    # normal | abnormal | technical
    finding: Optional[str] = None   # mass, calcification, distortion, ...


@dataclass(frozen=True)
class Annotation:
    """A single reader annotation stored with a set."""
    side: str
    abnormality_type: Tuple[str, ...] = ()
    level_of_concern: Optional[str] = None
    positions: Dict[str, Tuple[float, float]] = field(default_factory=dict)
    notes: str = ""
    location: Optional[str] = None
    other_details: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'side': self.side,
            'abnormalityType': list(self.abnormality_type),
            'levelOfConcern': self.level_of_concern,
            'positions': {
                view: {'x': x, 'y': y} for view, (x, y) in self.positions.items()
            },
            'notes': self.notes,
        }


@dataclass(frozen=True)
class ImageSet:
    """
    One catalogued image set.

    `views` is None for standard sets, whose images live in a folder named
    after the set id. Disabled sets are never picked by fresh selection but
    remain addressable by id.
    """
    id: str
    tag: Tag
    source: str
    disabled: bool = False
    has_implants: bool = False
    has_extra_images: bool = False
    has_repeat: bool = False
    description: str = ""
    left: BreastDescriptor = field(default_factory=BreastDescriptor)
    right: BreastDescriptor = field(default_factory=BreastDescriptor)
    views: Optional[Dict[str, ViewImages]] = None
    annotations: Tuple[Annotation, ...] = ()
    annotations_from: Optional[str] = None

    @property
    def is_composite(self) -> bool:
        return self.views is not None

    def breast(self, side: str) -> BreastDescriptor:
        return self.left if side == 'left' else self.right

    def to_dict(self) -> Dict[str, Any]:
        """Summary suitable for JSON output."""
        return {
            'id': self.id,
            'tag': self.tag.value,
            'source': self.source,
            'disabled': self.disabled,
            'hasImplants': self.has_implants,
            'hasExtraImages': self.has_extra_images,
            'hasRepeat': self.has_repeat,
            'description': self.description,
            'left': {'status': self.left.status, 'finding': self.left.finding},
            'right': {'status': self.right.status, 'finding': self.right.finding},
        }


@dataclass(frozen=True)
class Manifest:
    """All sets catalogued for one source."""
    source: str
    sets: Tuple[ImageSet, ...] = ()

    def get(self, set_id: str) -> Optional[ImageSet]:
        for image_set in self.sets:
            if image_set.id == set_id:
                return image_set
        return None


@dataclass(frozen=True)
class EventContext:
    """
    Selection-relevant signals derived from one event.

    NEVER store this; always recompute from the event record.
    `captured_views` is None when the event carries no view record at all.
    """
    has_symptoms: bool = False
    symptom_sides: frozenset = frozenset()
    has_implants: bool = False
    is_imperfect: bool = False
    has_repeat: bool = False
    has_extra_images: bool = False
    repeat_views: frozenset = frozenset()
    captured_views: Optional[frozenset] = None


@dataclass
class SelectionOptions:
    """Caller options for event-driven selection."""
    tag: Optional[str] = None
    event: Optional[Dict[str, Any]] = None
    weights: Optional[Dict[str, float]] = None

    @classmethod
    def coerce(cls, options: Union['SelectionOptions', Dict[str, Any], None]) -> 'SelectionOptions':
        """Accept an options object, a plain dict, or None."""
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        return cls(
            tag=options.get('tag'),
            event=options.get('event'),
            weights=options.get('weights'),
        )


# A resolved view is a single path, or a list of paths oldest -> newest
ViewPath = Union[str, List[str]]


@dataclass
class EventImages:
    """Selected set plus the paths to show for an event."""
    set: ImageSet
    paths: Dict[str, str] = field(default_factory=dict)
    all_paths: Dict[str, ViewPath] = field(default_factory=dict)
    has_additional_images: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'set': self.set.to_dict(),
            'paths': dict(self.paths),
            'allPaths': {
                view: list(value) if isinstance(value, list) else value
                for view, value in self.all_paths.items()
            },
            'hasAdditionalImages': self.has_additional_images,
        }
