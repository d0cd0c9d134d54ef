"""Reference dataset lookup shared by the unit, catalog, profile and config loaders.

Datasets are looked up by file name in a search path built from environment
variables:

* ``RECIPE_ENGINE_DATA_DIR`` replaces the bundled ``data`` directory.
* ``RECIPE_ENGINE_EXTRA_DATA_DIRS`` (``os.pathsep`` separated) adds
  directories merged after it, e.g. a regional supplier catalog.
* ``RECIPE_ENGINE_OVERLAY_DIR`` is merged last so one price sheet or unit
  table can be swapped without copying the whole directory.
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from os import PathLike
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Union

import yaml

__all__ = [
    "load_data",
    "load_dataset",
    "load_dataset_df",
    "clear_dataset_cache",
    "register_cache",
    "dataset_file",
    "dataset_paths",
    "normalize_key",
    "deep_update",
]

PathType = Union[str, PathLike]

DEFAULT_DATA_DIR = Path(__file__).resolve().parents[1] / "data"
DATA_ENV = "RECIPE_ENGINE_DATA_DIR"
OVERLAY_ENV = "RECIPE_ENGINE_OVERLAY_DIR"
EXTRA_ENV = "RECIPE_ENGINE_EXTRA_DATA_DIRS"

_YAML_SUFFIXES = {".yaml", ".yml"}

# Loaders caching objects built from datasets; cleared with the datasets.
_DEPENDENT_CACHES: List[Callable[[], None]] = []


def load_data(path: PathType) -> Any:
    """Return the parsed JSON or YAML document at ``path``.

    Missing files raise :class:`FileNotFoundError`; undecodable content raises
    ``ValueError`` naming the file. An empty YAML document yields ``{}``.
    """

    p = Path(path)
    if not p.is_file():
        raise FileNotFoundError(p)

    text = p.read_text(encoding="utf-8")
    if p.suffix.lower() in _YAML_SUFFIXES:
        try:
            return yaml.safe_load(text) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {p}: {exc}") from exc
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {p}: {exc}") from exc


def deep_update(base: Dict[str, Any], other: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge ``other`` into ``base`` in place, descending into nested dicts."""

    for key, value in other.items():
        current = base.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            deep_update(current, value)
        else:
            base[key] = value
    return base


def _env_dir(name: str) -> Path | None:
    value = os.getenv(name)
    return Path(value).expanduser() if value else None


def dataset_paths() -> tuple[Path, ...]:
    """Return the data directory followed by any existing extra directories."""

    extras = os.getenv(EXTRA_ENV, "")
    extra_dirs = tuple(
        Path(part).expanduser()
        for part in extras.split(os.pathsep)
        if part and Path(part).expanduser().is_dir()
    )
    return (_env_dir(DATA_ENV) or DEFAULT_DATA_DIR, *extra_dirs)


@lru_cache(maxsize=None)
def dataset_file(filename: str) -> Path | None:
    """Return the file that wins for ``filename``, the overlay checked first."""

    overlay = _env_dir(OVERLAY_ENV)
    candidates = ((overlay,) if overlay else ()) + dataset_paths()
    return next((base / filename for base in candidates if (base / filename).exists()), None)


@lru_cache(maxsize=None)
def load_dataset(filename: str) -> Any:
    """Return ``filename`` merged across the search path.

    Mappings are deep merged in search order with the overlay last; any other
    payload replaces what came before it. A dataset found nowhere is ``{}``.
    """

    overlay = _env_dir(OVERLAY_ENV)
    data: Any = {}
    for base in dataset_paths() + ((overlay,) if overlay else ()):
        path = base / filename
        if not path.exists():
            continue
        layer = load_data(path)
        if isinstance(data, dict) and isinstance(layer, dict):
            deep_update(data, layer)
        else:
            data = layer
    return data


def load_dataset_df(filename: str) -> "pd.DataFrame":
    """Return dataset ``filename`` as a :class:`pandas.DataFrame`.

    CSV/TSV sheets are read with :func:`pandas.read_csv`. JSON/YAML datasets
    become one row per mapping entry (index = key) or per list item.
    """

    import pandas as pd

    path = dataset_file(filename)
    suffix = path.suffix.lower() if path else ""
    if suffix in {".csv", ".tsv"}:
        return pd.read_csv(path, sep="\t" if suffix == ".tsv" else ",")

    data = load_dataset(filename)
    if isinstance(data, Mapping):
        return pd.DataFrame.from_dict(data, orient="index")
    if isinstance(data, list):
        return pd.DataFrame(data)
    raise ValueError(f"Dataset {filename} is not tabular")


def register_cache(cache_clear: Callable[[], None]) -> Callable[[], None]:
    """Have :func:`clear_dataset_cache` also call ``cache_clear``."""

    _DEPENDENT_CACHES.append(cache_clear)
    return cache_clear


def clear_dataset_cache() -> None:
    """Forget every cached dataset and the objects registered as built from them."""

    load_dataset.cache_clear()
    dataset_file.cache_clear()
    for cache_clear in _DEPENDENT_CACHES:
        cache_clear()


def normalize_key(key: str) -> str:
    """Return ``key`` casefolded with spaces, hyphens and underscores as ``_``."""

    words = str(key).casefold().replace("-", " ").replace("_", " ").split()
    return "_".join(words)
