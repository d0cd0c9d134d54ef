"""Engine settings and their dataset-backed defaults."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

from .units import Unit, parse_unit
from .utils import load_dataset, normalize_key

CONFIG_FILE = "engine_config.yaml"

DEFAULT_PRECISION = 3
# Nutrient facts for these nutrients are stated in milligrams.
DEFAULT_NUTRIENT_UNITS: Dict[str, Unit] = {"Sodium": Unit.MILLIGRAMS}

_LOGGER = logging.getLogger(__name__)

__all__ = ["EngineConfig", "load_engine_config", "CONFIG_FILE"]


@dataclass(frozen=True)
class EngineConfig:
    """Tunable behaviour of the optimizer.

    ``precision`` is the number of decimals kept for per-100g nutrient
    amounts. ``canonical_units`` overrides the canonical unit of an ingredient
    class (keys are normalized with :func:`normalize_key`). ``nutrient_units``
    pins the unit in which a nutrient's stated amounts are expressed,
    regardless of the unit recorded on the fact.
    """

    precision: int = DEFAULT_PRECISION
    canonical_units: Mapping[str, Unit] = field(default_factory=dict)
    nutrient_units: Mapping[str, Unit] = field(
        default_factory=lambda: dict(DEFAULT_NUTRIENT_UNITS)
    )

    def __post_init__(self) -> None:
        if self.precision < 0:
            raise ValueError("precision must be non-negative")
        object.__setattr__(
            self,
            "canonical_units",
            {normalize_key(k): parse_unit(v) for k, v in self.canonical_units.items()},
        )
        object.__setattr__(
            self,
            "nutrient_units",
            {str(k): parse_unit(v) for k, v in self.nutrient_units.items()},
        )

    def canonical_unit_for(self, ingredient: str) -> Unit | None:
        return self.canonical_units.get(normalize_key(ingredient))

    def nutrient_unit_for(self, nutrient: str) -> Unit | None:
        return self.nutrient_units.get(nutrient)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EngineConfig":
        """Return a config built from a plain mapping (dataset or CLI)."""

        kwargs: Dict[str, Any] = {}
        if data.get("precision") is not None:
            kwargs["precision"] = int(data["precision"])
        if isinstance(data.get("canonical_units"), Mapping):
            kwargs["canonical_units"] = dict(data["canonical_units"])
        if isinstance(data.get("nutrient_units"), Mapping):
            kwargs["nutrient_units"] = dict(data["nutrient_units"])
        return cls(**kwargs)


def load_engine_config(filename: str = CONFIG_FILE) -> EngineConfig:
    """Return :class:`EngineConfig` from ``filename`` in the dataset paths.

    A missing or empty dataset yields the defaults.
    """

    data = load_dataset(filename)
    if not isinstance(data, Mapping) or not data:
        _LOGGER.debug("No engine configuration in %s; using defaults", filename)
        return EngineConfig()
    return EngineConfig.from_dict(data)
