"""Recipe cost and nutrition optimizer.

:class:`RecipeOptimizer` wires the stages together: each line item is
standardized to its ingredient's canonical unit, the cheapest matching supplier
offer is selected per ingredient and the nutrition profile is evaluated on
exactly those offers. Reference data comes from the injected providers and is
never modified, so one optimizer can serve many recipes, also concurrently.
"""

from __future__ import annotations

import logging
from typing import Mapping

from .catalog import CatalogProvider, DatasetCatalog, DatasetUnits, UnitsProvider
from .config import EngineConfig, load_engine_config
from .models import CompleteResult, NutritionLine, OptimizationResult, PartialResult, Recipe
from .nutrition import aggregate_nutrition
from .profiles import ProfileRegistry, load_profile_registry, standardize_line_item
from .sourcing import SourcingPlan, collect_products, select_suppliers
from .units import UnitTable

_LOGGER = logging.getLogger(__name__)

__all__ = ["RecipeOptimizer", "optimize", "assemble_result", "default_optimizer"]


def assemble_result(
    plan: SourcingPlan,
    nutrition_profile: Mapping[str, NutritionLine],
) -> OptimizationResult:
    """Package the sourcing plan and nutrition profile into a result."""

    if plan.unmet:
        return PartialResult(plan.total_cost, nutrition_profile, plan.choices, plan.unmet)
    return CompleteResult(plan.total_cost, nutrition_profile, plan.choices)


class RecipeOptimizer:
    """Compute cheapest cost and per-100g nutrition for recipes."""

    def __init__(
        self,
        units: UnitsProvider,
        catalog: CatalogProvider,
        *,
        profiles: ProfileRegistry | None = None,
        config: EngineConfig | None = None,
    ) -> None:
        self.units = units
        self.catalog = catalog
        self.profiles = profiles if profiles is not None else ProfileRegistry()
        self.config = config or EngineConfig()

    def optimize(self, recipe: Recipe) -> OptimizationResult:
        """Return the cheapest sourcing result for ``recipe``.

        Ingredients without a matching offer make the result a
        :class:`PartialResult`. A :class:`ZeroTotalWeightError` is raised when
        nothing with a weight could be sourced.
        """

        table = UnitTable(self.units.conversions())

        requirements = []
        for item in recipe.line_items:
            profile = self.profiles.resolve(item.ingredient_name, item.quantity.unit, self.config)
            requirements.append((standardize_line_item(item, profile, table), profile))

        products = collect_products((profile.name for _, profile in requirements), self.catalog)
        plan = select_suppliers(requirements, products, table)

        nutrition = aggregate_nutrition(plan.sourced(), table, self.config, plan.unmet)

        _LOGGER.debug(
            "Optimized '%s': cost %.4f, %d nutrients, %d unmet",
            recipe.name,
            plan.total_cost,
            len(nutrition),
            len(plan.unmet),
        )
        return assemble_result(plan, nutrition)


def default_optimizer(config: EngineConfig | None = None) -> RecipeOptimizer:
    """Return an optimizer backed by the bundled datasets."""

    return RecipeOptimizer(
        DatasetUnits(),
        DatasetCatalog(),
        profiles=load_profile_registry(),
        config=config or load_engine_config(),
    )


def optimize(
    recipe: Recipe,
    *,
    units: UnitsProvider | None = None,
    catalog: CatalogProvider | None = None,
    profiles: ProfileRegistry | None = None,
    config: EngineConfig | None = None,
) -> OptimizationResult:
    """Return the optimization result for ``recipe``.

    Providers that are not given fall back to the bundled datasets.
    """

    optimizer = RecipeOptimizer(
        units if units is not None else DatasetUnits(),
        catalog if catalog is not None else DatasetCatalog(),
        profiles=profiles if profiles is not None else load_profile_registry(),
        config=config or load_engine_config(),
    )
    return optimizer.optimize(recipe)
