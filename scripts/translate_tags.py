#!/usr/bin/env python3
"""
Classify or back-map the OSM tags of a single way from the command line.

This script:
1. Reads OSM tags from key=value arguments or a JSON object file
2. classify: prints the detailed and simplified infrastructure category
3. backmap:  prints the OSM tag delta that moves the way to another
             simplified category (empty value = remove the key), split
             into the keys to set and the keys to remove

Output is JSON on stdout.  Exit code 1 on failure, with the failure kind.

Environment (a .env file is loaded if present):
  RADSIM_MAX_BACK_MAP_HOPS, RADSIM_ENFORCE_OSM_FORMAT

Usage:
    python scripts/translate_tags.py classify highway=cycleway segregated=yes
    python scripts/translate_tags.py backmap --to BicycleLane highway=residential
    python scripts/translate_tags.py backmap --to MixedWay --json way.json --trace
"""

import argparse
import json
import logging
import os
import sys

from dotenv import load_dotenv

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from back_mapper import BackMapper
from bike_infrastructure import SimplifiedInfrastructure
from bm_trace import BackMapTrace, clear_trace, set_trace
from osm_tags import removals, upserts
from radsim_mapper import to_radsim_tags, try_compute_delta
from translation_config import load_translation_model
from translation_errors import TranslationError

logger = logging.getLogger(__name__)


def parse_tag_args(pairs):
    """Turn ``["highway=path", "foot=yes"]`` into a dict."""
    tags = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Expected key=value, got {pair!r}")
        tags[key] = value
    return tags


def load_tags(args):
    tags = {}
    if args.json:
        with open(args.json) as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{args.json} must contain a JSON object")
        tags.update(data)
    tags.update(parse_tag_args(args.tags))
    return tags


def build_parser():
    parser = argparse.ArgumentParser(description="Classify or back-map OSM bike infrastructure tags")
    sub = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("classify", "Print the infrastructure category of the tags."),
        ("backmap", "Print the tag delta to reach another simplified category."),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("tags", nargs="*", help="OSM tags as key=value.")
        cmd.add_argument("--json", type=str, default="", help="Read tags from a JSON object file.")
        if name == "backmap":
            cmd.add_argument(
                "--to", required=True,
                choices=[c.value for c in SimplifiedInfrastructure],
                help="Target simplified category.",
            )
            cmd.add_argument(
                "--trace", action="store_true",
                help="Include the per-hop trace in the output.",
            )
    return parser


def main(argv=None):
    load_dotenv()
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
    args = build_parser().parse_args(argv)
    model = load_translation_model()

    try:
        tags = load_tags(args)
    except (OSError, ValueError) as e:
        logger.error("Could not read tags: %s", e)
        return 1

    if args.command == "classify":
        try:
            result = to_radsim_tags(tags, model=model)
        except TranslationError as e:
            print(json.dumps(e.to_dict(), indent=2, sort_keys=True))
            return 1
        print(json.dumps(result, indent=2, sort_keys=True))
        return 0

    back_mapper = BackMapper(max_hops=model.limits.max_hops)
    trace = BackMapTrace(trace_id="cli", rule_matrix_version=model.rule_matrix_version)
    set_trace(trace)
    try:
        result = try_compute_delta(
            tags, model.simulation_tags.simplified, args.to,
            model=model, back_mapper=back_mapper,
        )
        trace.log_summary()
    finally:
        clear_trace()

    if result.ok:
        output = {
            "delta": result.delta,
            "set": upserts(result.delta),
            "remove": removals(result.delta),
        }
    else:
        output = {
            "failure": result.failure.value,
            "message": result.message,
            "context": result.context,
        }
    if args.trace:
        output["trace"] = trace.full_trace_dict()
    print(json.dumps(output, indent=2, sort_keys=True, default=str))
    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main())
