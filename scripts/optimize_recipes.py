#!/usr/bin/env python3
"""Compute the cheapest cost and nutrition summary for recipes."""

from __future__ import annotations

import argparse
import json
import logging
import os
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))
from scripts import ensure_repo_root_on_path

ROOT = ensure_repo_root_on_path()

from recipe_engine.catalog import RECIPES_FILE, load_recipes, parse_recipes
from recipe_engine.config import EngineConfig, load_engine_config
from recipe_engine.optimizer import default_optimizer
from recipe_engine.report import compare_summaries, format_comparison, summarize_recipes
from recipe_engine.units import parse_unit
from recipe_engine.utils import DATA_ENV, load_data, normalize_key
from recipe_engine.validators import MalformedReferenceDataError

_LOGGER = logging.getLogger("optimize_recipes")


def _canonical_override(value: str) -> tuple[str, str]:
    ingredient, sep, unit = value.partition("=")
    if not sep or not ingredient.strip() or not unit.strip():
        raise argparse.ArgumentTypeError(f"expected INGREDIENT=UNIT, got '{value}'")
    try:
        parse_unit(unit)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc
    return ingredient.strip(), unit.strip()


def build_config(args: argparse.Namespace) -> EngineConfig:
    """Return the dataset config with command line overrides applied."""

    base = load_engine_config()
    canonical = dict(base.canonical_units)
    canonical.update(dict(args.canonical_unit or []))
    return EngineConfig(
        precision=base.precision if args.precision is None else args.precision,
        canonical_units=canonical,
        nutrient_units=base.nutrient_units,
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Find the cheapest sourcing and per-100g nutrition for recipes"
    )
    parser.add_argument(
        "recipes",
        nargs="?",
        type=Path,
        help=f"Optional JSON/YAML recipe file (defaults to the {RECIPES_FILE} dataset)",
    )
    parser.add_argument(
        "--recipe",
        action="append",
        help="Only optimize the named recipe (may be repeated)",
    )
    parser.add_argument("--data-dir", type=Path, help="Reference dataset directory")
    parser.add_argument("--precision", type=int, help="Decimals kept for nutrient amounts")
    parser.add_argument(
        "--canonical-unit",
        action="append",
        type=_canonical_override,
        metavar="INGREDIENT=UNIT",
        help="Override the canonical unit of an ingredient class",
    )
    parser.add_argument(
        "--expected",
        type=Path,
        help="JSON file with expected summaries to check the results against",
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="Optional path to write the summaries JSON",
    )
    parser.add_argument("--log-level", default="WARNING", help="Logging level")
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.WARNING))
    if args.data_dir:
        os.environ[DATA_ENV] = str(args.data_dir)

    try:
        config = build_config(args)
        if args.recipes:
            recipes = parse_recipes(load_data(args.recipes), str(args.recipes))
        else:
            recipes = load_recipes()
        if args.recipe:
            wanted = {normalize_key(name) for name in args.recipe}
            recipes = tuple(r for r in recipes if normalize_key(r.name) in wanted)
        expected = json.loads(args.expected.read_text()) if args.expected else None
        optimizer = default_optimizer(config)
        summaries = summarize_recipes(recipes, optimizer.optimize, config.precision)
    except (MalformedReferenceDataError, FileNotFoundError, ValueError) as exc:
        _LOGGER.error("%s", exc)
        return 1

    text = json.dumps(summaries, indent=2)
    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(text)
    else:
        print(text)

    if expected is not None:
        outcome = compare_summaries(expected, summaries, tolerance=10 ** -config.precision)
        for line in format_comparison(outcome):
            print(line, file=sys.stderr)
        if not all(outcome.values()):
            return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
