# src/imageset_core/config.py
"""
Deployment configuration for the image set engine.

The engine holds no global mutable state: every public operation takes an
optional `config` and falls back to DEFAULT_CONFIG.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional


# Source key -> folder name under assets_root
IMAGE_SOURCES = {
    'diagrams': 'mammogram-diagrams',
    'real': 'mammogram-sets',
}

DEFAULT_SOURCE = 'diagrams'

# Delegation chains longer than this are treated as unavailable
MAX_DELEGATION_DEPTH = 8


@dataclass(frozen=True)
class EngineConfig:
    """Where the catalogs live and how selection is tuned."""
    assets_root: Path = Path("assets") / "images"
    url_prefix: str = "/images"
    sources: Mapping[str, str] = field(default_factory=lambda: dict(IMAGE_SOURCES))
    manifest_filename: str = "manifest.json"
    library_folder: str = "library"
    default_extension: str = "png"
    max_delegation_depth: int = MAX_DELEGATION_DEPTH

    # Weight profile name (low | medium | high)
    profile: str = "medium"

    # Deployment-configured tag weights, used when no contextual table applies
    tag_weights: Optional[Mapping[str, float]] = None

    def source_folder(self, source: str) -> Optional[str]:
        return self.sources.get(source)

    def source_dir(self, source: str) -> Optional[Path]:
        folder = self.source_folder(source)
        if folder is None:
            return None
        return Path(self.assets_root) / folder

    def manifest_path(self, source: str) -> Optional[Path]:
        source_dir = self.source_dir(source)
        if source_dir is None:
            return None
        return source_dir / self.manifest_filename

    def public_path(self, source: str, *parts: str) -> str:
        """Build a public URL path under url_prefix for a source."""
        folder = self.source_folder(source) or source
        prefix = self.url_prefix.rstrip("/")
        return "/".join([prefix, folder, *parts])

    def with_overrides(self, **changes: Any) -> 'EngineConfig':
        return replace(self, **changes)

    @classmethod
    def from_mapping(cls, settings: Mapping[str, Any]) -> 'EngineConfig':
        """
        Build a config from plain settings (e.g. a parsed JSON file).

        Accepts snake_case or camelCase keys; unknown keys are ignored.
        """
        def pick(*keys: str, default: Any = None) -> Any:
            for key in keys:
                if key in settings:
                    return settings[key]
            return default

        base = cls()
        assets_root = pick('assets_root', 'assetsRoot')
        sources = pick('sources')
        tag_weights = pick('tag_weights', 'tagWeights')

        return cls(
            assets_root=Path(assets_root) if assets_root else base.assets_root,
            url_prefix=pick('url_prefix', 'urlPrefix', default=base.url_prefix),
            sources=dict(sources) if sources else dict(IMAGE_SOURCES),
            manifest_filename=pick('manifest_filename', 'manifestFilename', default=base.manifest_filename),
            library_folder=pick('library_folder', 'libraryFolder', default=base.library_folder),
            default_extension=pick('default_extension', 'defaultExtension', default=base.default_extension),
            max_delegation_depth=int(pick('max_delegation_depth', 'maxDelegationDepth',
                                          default=base.max_delegation_depth)),
            profile=pick('profile', default=base.profile),
            tag_weights={k: float(v) for k, v in tag_weights.items()} if tag_weights else None,
        )

    @classmethod
    def from_file(cls, path: Path) -> 'EngineConfig':
        """Load settings from a JSON file. Raises on unreadable files."""
        return cls.from_mapping(json.loads(Path(path).read_text(encoding="utf-8")))


DEFAULT_CONFIG = EngineConfig()


def resolve_config(config: Optional[EngineConfig]) -> EngineConfig:
    return config if config is not None else DEFAULT_CONFIG
