#!/usr/bin/env python3
"""
Image Set Engine CLI

Command-line access to catalog listing, event selection, path resolution
and catalog verification. All output is JSON on stdout.

Usage:
    python -m imageset_core.cli sets diagrams
    python -m imageset_core.cli select EVENT_ID --source real --event event.json
    python -m imageset_core.cli verify diagrams --assets-root app/assets/images
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from .annotations import get_resolved_annotations, read_result_for, summarise_annotations
from .config import DEFAULT_CONFIG, DEFAULT_SOURCE, EngineConfig
from .events import get_images_for_event
from .manifest import get_available_sets
from .model import SelectionOptions
from .paths import get_image_paths
from .selection import get_image_set_for_event
from .verify import verify_catalog

logger = logging.getLogger(__name__)


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2))


def _load_event(path: Optional[Path]) -> Optional[Dict[str, Any]]:
    if path is None:
        return None
    return json.loads(path.read_text(encoding="utf-8"))


def _build_config(args) -> EngineConfig:
    config = EngineConfig.from_file(args.config) if args.config else DEFAULT_CONFIG
    if args.assets_root:
        config = config.with_overrides(assets_root=args.assets_root)
    return config


def cmd_sets(args, config: EngineConfig) -> int:
    sets = get_available_sets(args.source, include_disabled=args.include_disabled, config=config)
    _print_json([s.to_dict() for s in sets])
    return 0 if sets else 1


def cmd_select(args, config: EngineConfig) -> int:
    options = SelectionOptions(tag=args.tag, event=_load_event(args.event))
    image_set = get_image_set_for_event(args.event_id, args.source, options, config=config)
    if image_set is None:
        print(f"Error: No image sets available for source: {args.source}", file=sys.stderr)
        return 1

    output = image_set.to_dict()
    output['readResult'] = read_result_for(image_set)
    annotations = get_resolved_annotations(image_set, config=config)
    output['annotations'] = [a.to_dict() for a in annotations]
    output['annotationSummaries'] = summarise_annotations(annotations)
    _print_json(output)
    return 0


def cmd_paths(args, config: EngineConfig) -> int:
    paths = get_image_paths(args.set_id, args.source, config=config)
    if paths is None:
        print(f"Error: Unknown set {args.set_id!r} in source {args.source!r}", file=sys.stderr)
        return 1
    _print_json(paths)
    return 0


def cmd_images(args, config: EngineConfig) -> int:
    options = SelectionOptions(tag=args.tag, event=_load_event(args.event))
    result = get_images_for_event(args.event_id, args.source, options, config=config)
    if result is None:
        print(f"Error: No image sets available for source: {args.source}", file=sys.stderr)
        return 1
    _print_json(result.to_dict())
    return 0


def cmd_verify(args, config: EngineConfig) -> int:
    report = verify_catalog(args.source, config=config)
    _print_json(report.to_dict())
    return 0 if report.ok else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Deterministic mammogram image set selection',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List selectable sets
  imageset-core sets diagrams

  # Pick the set for an event, using its clinical record
  imageset-core select evt_123 --event event.json

  # Resolve paths for a composite set
  imageset-core paths set-07 --source real

  # Check a catalog before publishing it
  imageset-core verify real --assets-root app/assets/images
        """
    )

    parser.add_argument(
        '--assets-root',
        type=Path,
        help='Directory holding one folder per image source'
    )

    parser.add_argument(
        '--config',
        type=Path,
        help='JSON settings file (assetsRoot, urlPrefix, profile, tagWeights, ...)'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Verbose logging'
    )

    sub = parser.add_subparsers(dest='command', required=True)

    p_sets = sub.add_parser('sets', help='List sets for a source')
    p_sets.add_argument('source', nargs='?', default=DEFAULT_SOURCE)
    p_sets.add_argument('--include-disabled', action='store_true',
                        help='Include disabled sets')
    p_sets.set_defaults(func=cmd_sets)

    for name, func, help_text in (
        ('select', cmd_select, 'Select the image set for an event'),
        ('images', cmd_images, 'Resolve the images to show for an event'),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument('event_id')
        p.add_argument('--source', default=DEFAULT_SOURCE)
        p.add_argument('--tag', help='Force a tag (normal/abnormal/indeterminate/technical)')
        p.add_argument('--event', type=Path, help='Event record JSON file')
        p.set_defaults(func=func)

    p_paths = sub.add_parser('paths', help='Resolve image paths for a set')
    p_paths.add_argument('set_id')
    p_paths.add_argument('--source', default=DEFAULT_SOURCE)
    p_paths.set_defaults(func=cmd_paths)

    p_verify = sub.add_parser('verify', help='Verify a catalog')
    p_verify.add_argument('source', nargs='?', default=DEFAULT_SOURCE)
    p_verify.set_defaults(func=cmd_verify)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = _build_config(args)
        event_path = getattr(args, 'event', None)
        if event_path is not None and not event_path.exists():
            print(f"Error: Event file does not exist: {event_path}", file=sys.stderr)
            return 1
        return args.func(args, config)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
