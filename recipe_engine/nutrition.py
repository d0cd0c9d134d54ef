"""Nutrition aggregation at the chosen sourcing.

The aggregation runs in two passes. The first weighs every sourced ingredient
and scales its nutrient facts to the amount used, folding the per-ingredient
results into recipe totals expressed in grams. The second normalizes those
totals to an amount per 100 grams of finished recipe.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import reduce
from typing import Dict, Iterable, Mapping, Sequence

from .config import EngineConfig
from .models import NutrientFact, NutritionLine, SourcingChoice
from .profiles import IngredientProfile
from .units import UnconvertibleUnitError, Unit, UnitTable

_LOGGER = logging.getLogger(__name__)

__all__ = [
    "ZeroTotalWeightError",
    "NutrientTotals",
    "nutrient_amount",
    "ingredient_totals",
    "total_nutrients",
    "per_100g",
    "aggregate_nutrition",
]


class ZeroTotalWeightError(ValueError):
    """Raised when the recipe weighs nothing so per-100g values are undefined."""

    def __init__(self, unmet: Iterable[str] = ()) -> None:
        self.unmet_ingredients = tuple(unmet)
        message = "Total recipe weight is zero; cannot normalize nutrients per 100 g"
        if self.unmet_ingredients:
            message += f" (unmet ingredients: {', '.join(self.unmet_ingredients)})"
        super().__init__(message)


@dataclass(frozen=True)
class NutrientTotals:
    """Recipe weight and raw nutrient totals, both in grams."""

    weight_g: float = 0.0
    nutrients_g: Mapping[str, float] = field(default_factory=dict)

    def merged(self, other: "NutrientTotals") -> "NutrientTotals":
        """Return a new total combining ``self`` and ``other``."""

        nutrients = dict(self.nutrients_g)
        for name, grams in other.nutrients_g.items():
            nutrients[name] = nutrients.get(name, 0.0) + grams
        return NutrientTotals(self.weight_g + other.weight_g, nutrients)


def _to_grams(amount: float, unit: Unit, table: UnitTable, nutrient: str) -> float:
    try:
        return table.convert(amount, unit, Unit.GRAMS)
    except UnconvertibleUnitError:
        _LOGGER.warning("Cannot convert %s from %s to grams; counting as grams", nutrient, unit)
        return amount


def nutrient_amount(
    fact: NutrientFact,
    choice: SourcingChoice,
    weight_g: float,
    conversions: UnitTable,
    config: EngineConfig,
) -> float:
    """Return grams of ``fact``'s nutrient contributed by ``choice``.

    The fact is scaled by the amount used when its reference quantity is in
    (or converts to) the ingredient's canonical unit, otherwise by the
    ingredient weight.
    """

    per = fact.per
    canonical = choice.canonical_unit
    if per.unit == canonical:
        scale = choice.amount_used / per.amount
    elif conversions.can_convert(per.unit, canonical):
        scale = choice.amount_used / conversions.convert(per.amount, per.unit, canonical)
    elif conversions.can_convert(per.unit, Unit.GRAMS):
        scale = weight_g / conversions.convert(per.amount, per.unit, Unit.GRAMS)
    else:
        scale = weight_g / per.amount

    unit = config.nutrient_unit_for(fact.nutrient_name) or fact.amount.unit
    return _to_grams(fact.amount.amount * scale, unit, conversions, fact.nutrient_name)


def ingredient_totals(
    choice: SourcingChoice,
    profile: IngredientProfile,
    table: UnitTable,
    config: EngineConfig,
) -> NutrientTotals:
    """Return weight and nutrient grams for one sourced ingredient."""

    conversions = profile.conversion_table(table)
    weight = profile.weight_in_grams(choice.amount_used, table)
    contributions = (
        NutrientTotals(0.0, {fact.nutrient_name: nutrient_amount(fact, choice, weight, conversions, config)})
        for fact in choice.product.nutrient_facts
    )
    return reduce(NutrientTotals.merged, contributions, NutrientTotals(weight, {}))


def total_nutrients(
    sourced: Sequence[tuple[SourcingChoice, IngredientProfile]],
    table: UnitTable,
    config: EngineConfig,
) -> NutrientTotals:
    """First pass: fold every ingredient into recipe totals."""

    return reduce(
        NutrientTotals.merged,
        (ingredient_totals(choice, profile, table, config) for choice, profile in sourced),
        NutrientTotals(),
    )


def per_100g(
    totals: NutrientTotals,
    precision: int,
    unmet: Iterable[str] = (),
) -> Dict[str, NutritionLine]:
    """Second pass: express each nutrient total per 100 g of recipe."""

    if totals.weight_g <= 0:
        raise ZeroTotalWeightError(unmet)
    return {
        name: NutritionLine(name, round(grams / totals.weight_g * 100, precision))
        for name, grams in totals.nutrients_g.items()
    }


def aggregate_nutrition(
    sourced: Sequence[tuple[SourcingChoice, IngredientProfile]],
    table: UnitTable,
    config: EngineConfig | None = None,
    unmet: Iterable[str] = (),
) -> Dict[str, NutritionLine]:
    """Return the per-100g nutrition profile for the sourced ingredients."""

    config = config or EngineConfig()
    totals = total_nutrients(sourced, table, config)
    return per_100g(totals, config.precision, unmet)
