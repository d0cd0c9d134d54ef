#!/usr/bin/env python3
"""Validate the reference datasets against their JSON schemas."""

from __future__ import annotations

import argparse
import os
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))
from scripts import ensure_repo_root_on_path

ROOT = ensure_repo_root_on_path()

from recipe_engine.catalog import (OFFERS_FILE, PRODUCTS_FILE, RECIPES_FILE,
                                   UNITS_FILE, DatasetCatalog,
                                   parse_conversions, parse_products,
                                   parse_recipes)
from recipe_engine.profiles import PROFILE_FILE, ProfileRegistry
from recipe_engine.utils import DATA_ENV, dataset_file, load_dataset
from recipe_engine.validators import MalformedReferenceDataError

# Dataset file -> parser raising MalformedReferenceDataError.
DATASETS = {
    UNITS_FILE: parse_conversions,
    PRODUCTS_FILE: parse_products,
    RECIPES_FILE: parse_recipes,
    PROFILE_FILE: ProfileRegistry.from_dict,
}


def collect_issues() -> dict[str, list[str]]:
    """Return issues keyed by dataset file (only failing files)."""

    failures: dict[str, list[str]] = {}
    for filename, parse in DATASETS.items():
        if dataset_file(filename) is None:
            failures[filename] = ["dataset not found"]
            continue
        try:
            parse(load_dataset(filename))
        except MalformedReferenceDataError as exc:
            failures[filename] = exc.issues

    if PRODUCTS_FILE not in failures and dataset_file(OFFERS_FILE) is not None:
        try:
            DatasetCatalog().all_products()
        except MalformedReferenceDataError as exc:
            failures[exc.source] = exc.issues
    return failures


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--data-dir", type=Path, help="Reference dataset directory")
    args = parser.parse_args(argv)

    if args.data_dir:
        os.environ[DATA_ENV] = str(args.data_dir)

    failures = collect_issues()
    if failures:
        print("Reference data validation failed:")
        for filename, issues in failures.items():
            print(f"\n# {filename}")
            for issue in issues:
                print(f"  - {issue}")
        return 1

    print("All reference datasets conform to their schemas.")
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
