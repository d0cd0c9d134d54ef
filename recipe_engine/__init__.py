"""Convenient access to the recipe cost and nutrition engine."""

from __future__ import annotations

from . import catalog, models, units, utils
from .catalog import *  # noqa: F401,F403
from .config import EngineConfig, load_engine_config
from .models import *  # noqa: F401,F403
from .nutrition import ZeroTotalWeightError, aggregate_nutrition
from .optimizer import RecipeOptimizer, default_optimizer, optimize
from .pricing import UnitPrice, price_per_unit
from .profiles import (IngredientProfile, ProfileRegistry,
                       load_profile_registry, standardize_line_item)
from .report import compare_summaries, summarize_recipes, summarize_result
from .sourcing import SourcingPlan, select_cheapest, select_suppliers
from .units import *  # noqa: F401,F403
from .validators import MalformedReferenceDataError, validate_records

__all__ = sorted(
    set(catalog.__all__)
    | set(models.__all__)
    | set(units.__all__)
    | {"EngineConfig", "load_engine_config"}
    | {"ZeroTotalWeightError", "aggregate_nutrition"}
    | {"RecipeOptimizer", "default_optimizer", "optimize"}
    | {"UnitPrice", "price_per_unit"}
    | {
        "IngredientProfile",
        "ProfileRegistry",
        "load_profile_registry",
        "standardize_line_item",
    }
    | {"compare_summaries", "summarize_recipes", "summarize_result"}
    | {"SourcingPlan", "select_cheapest", "select_suppliers"}
    | {"MalformedReferenceDataError", "validate_records"}
    | {"utils"}
)
