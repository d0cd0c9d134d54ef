"""Recipe summaries and expected-output comparison.

Summaries use the camel-cased recipe summary layout consumed by downstream
tools::

    {
      "cheapestCost": 6.29,
      "nutrientsAtCheapestCost": {
        "Fat": {
          "nutrientName": "Fat",
          "quantityAmount": {"uomAmount": 22.857, "uomName": "grams", "uomType": "mass"},
          "quantityPer": {"uomAmount": 100, "uomName": "grams", "uomType": "mass"}
        }
      },
      "costBreakdown": {...},
      "unmetIngredients": []
    }
"""

from __future__ import annotations

import logging
import math
from typing import Any, Callable, Dict, Iterable, Mapping

from .models import NutritionLine, OptimizationResult, Recipe
from .nutrition import ZeroTotalWeightError

_LOGGER = logging.getLogger(__name__)

# Keys compared by :func:`compare_summaries`; extras are informational only.
COMPARED_KEYS = ("cheapestCost", "nutrientsAtCheapestCost")

__all__ = [
    "COMPARED_KEYS",
    "summarize_result",
    "summarize_recipes",
    "compare_summaries",
    "format_comparison",
]


def _uom(amount: float, line: NutritionLine) -> Dict[str, Any]:
    unit = line.reference_unit
    return {"uomAmount": amount, "uomName": str(unit), "uomType": str(unit.kind)}


def _nutrient_entry(line: NutritionLine) -> Dict[str, Any]:
    return {
        "nutrientName": line.nutrient_name,
        "quantityAmount": _uom(line.amount_per_100g, line),
        "quantityPer": _uom(line.reference_amount, line),
    }


def summarize_result(result: OptimizationResult, precision: int | None = None) -> Dict[str, Any]:
    """Return ``result`` in the recipe summary layout.

    ``precision`` rounds the cost figures; nutrient amounts are already
    rounded by the optimizer.
    """

    def _cost(value: float) -> float:
        return round(value, precision) if precision is not None else value

    return {
        "cheapestCost": _cost(result.total_cost),
        "nutrientsAtCheapestCost": {
            name: _nutrient_entry(line) for name, line in result.nutrition_profile.items()
        },
        "costBreakdown": {name: _cost(cost) for name, cost in result.cost_breakdown().items()},
        "unmetIngredients": list(getattr(result, "unmet_ingredients", ())),
    }


def summarize_recipes(
    recipes: Iterable[Recipe],
    optimize: Callable[[Recipe], OptimizationResult],
    precision: int | None = None,
) -> Dict[str, Dict[str, Any]]:
    """Return a summary per recipe name.

    Recipes whose sourced ingredients weigh nothing are reported with an
    ``error`` entry instead of aborting the whole run.
    """

    summaries: Dict[str, Dict[str, Any]] = {}
    for recipe in recipes:
        try:
            summaries[recipe.name] = summarize_result(optimize(recipe), precision)
        except ZeroTotalWeightError as exc:
            _LOGGER.error("Cannot summarize '%s': %s", recipe.name, exc)
            summaries[recipe.name] = {
                "error": str(exc),
                "unmetIngredients": list(exc.unmet_ingredients),
            }
    return summaries


def _same(expected: Any, received: Any, tolerance: float) -> bool:
    if isinstance(expected, Mapping) and isinstance(received, Mapping):
        if set(expected) != set(received):
            return False
        return all(_same(expected[k], received[k], tolerance) for k in expected)
    if isinstance(expected, bool) or isinstance(received, bool):
        return expected == received
    if isinstance(expected, (int, float)) and isinstance(received, (int, float)):
        return math.isclose(expected, received, rel_tol=0.0, abs_tol=tolerance)
    return expected == received


def compare_summaries(
    expected: Mapping[str, Mapping[str, Any]],
    received: Mapping[str, Mapping[str, Any]],
    tolerance: float = 1e-9,
) -> Dict[str, bool]:
    """Return ``{recipe: matches}`` for every recipe in ``expected``.

    Only :data:`COMPARED_KEYS` are compared. Numbers match when they differ by
    at most ``tolerance``.
    """

    outcome: Dict[str, bool] = {}
    for name, want in expected.items():
        got = received.get(name)
        if got is None:
            outcome[name] = False
            continue
        outcome[name] = all(
            _same(want.get(key), got.get(key), tolerance) for key in COMPARED_KEYS
        )
    return outcome


def format_comparison(outcome: Mapping[str, bool]) -> list[str]:
    """Return one report line per compared recipe."""

    return [
        f'CHECKING RECIPE "{name}" --- {"CORRECT" if ok else "INCORRECT"} ANSWER'
        for name, ok in outcome.items()
    ]
