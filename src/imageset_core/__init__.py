# src/imageset_core/__init__.py
"""
Image Set Core - deterministic mammogram image set selection.

This package contains pure Python logic with ZERO web framework dependencies.
All modules here accept/return plain Python objects and file paths.

Architecture:
- model.py: Dataclasses for catalog records, event context and results
- config.py: EngineConfig - where catalogs live and how selection is tuned
- manifest.py: load_manifest() and catalog lookups (never cached)
- context.py: extract_event_context() - selection signals from an event
- weights.py: Tag weight tables and resolve_weights()
- seeding.py: seeded_random() - stateless string-seeded values
- filters.py: Hard filters and soft preferences
- selection.py: select_set(), select_from_manifest() and get_image_set_for_event()
- paths.py: get_image_paths() - per-view paths, following delegations
- events.py: get_images_for_event() - selection + paths + captured views
- annotations.py: get_resolved_annotations() and one-line summaries
- verify.py: verify_catalog() for manifest authors
- imagefiles.py: Image file recognition (Pillow, pydicom)

HARD RULE: Failures degrade to empty results; nothing here raises for a
missing catalog, an unknown id or a broken delegation.
"""

# Model types
from .model import (
    Annotation,
    BreastDescriptor,
    Delegation,
    DirectImage,
    EventContext,
    EventImages,
    ImageSet,
    Manifest,
    SelectionOptions,
    Tag,
    ViewImages,
    VIEWS,
)

# Configuration
from .config import (
    DEFAULT_CONFIG,
    DEFAULT_SOURCE,
    IMAGE_SOURCES,
    EngineConfig,
)

# Manifest
from .manifest import (
    ManifestFormatError,
    get_available_sets,
    get_set_by_id,
    has_image_sets,
    load_manifest,
    parse_manifest,
)

# Context and weights
from .context import extract_event_context
from .weights import get_weight_profile, resolve_weights

# Selection
from .seeding import seeded_random
from .filters import filter_eligible
from .selection import get_image_set_for_event, select_from_manifest, select_set

# Paths and assembly
from .paths import get_image_paths, resolve_paths
from .events import get_images_for_event

# Annotations
from .annotations import (
    TAG_TO_READ_RESULT,
    get_resolved_annotations,
    read_result_for,
    summarise_annotation,
    summarise_annotations,
)

# Verification
from .verify import CatalogError, CatalogReport, raise_if_failed, verify_catalog

__version__ = "1.0.0"

__all__ = [
    # Model
    'Annotation',
    'BreastDescriptor',
    'Delegation',
    'DirectImage',
    'EventContext',
    'EventImages',
    'ImageSet',
    'Manifest',
    'SelectionOptions',
    'Tag',
    'ViewImages',
    'VIEWS',

    # Config
    'DEFAULT_CONFIG',
    'DEFAULT_SOURCE',
    'IMAGE_SOURCES',
    'EngineConfig',

    # Manifest
    'ManifestFormatError',
    'get_available_sets',
    'get_set_by_id',
    'has_image_sets',
    'load_manifest',
    'parse_manifest',

    # Context and weights
    'extract_event_context',
    'get_weight_profile',
    'resolve_weights',

    # Selection
    'seeded_random',
    'filter_eligible',
    'get_image_set_for_event',
    'select_from_manifest',
    'select_set',

    # Paths and assembly
    'get_image_paths',
    'resolve_paths',
    'get_images_for_event',

    # Annotations
    'TAG_TO_READ_RESULT',
    'get_resolved_annotations',
    'read_result_for',
    'summarise_annotation',
    'summarise_annotations',

    # Verification
    'CatalogError',
    'CatalogReport',
    'raise_if_failed',
    'verify_catalog',
]
