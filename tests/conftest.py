import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from recipe_engine.catalog import StaticCatalog, StaticUnits, parse_conversions, parse_products
from recipe_engine.models import LineItem, Recipe
from recipe_engine.optimizer import RecipeOptimizer
from recipe_engine.profiles import ProfileRegistry
from recipe_engine.units import Quantity, Unit, UnitTable
from recipe_engine.utils import DATA_ENV, EXTRA_ENV, OVERLAY_ENV, clear_dataset_cache, load_data

DATA_DIR = ROOT / "data"


@pytest.fixture(autouse=True)
def _fresh_datasets(monkeypatch):
    """Run every test against the bundled datasets with empty caches."""
    for name in (DATA_ENV, EXTRA_ENV, OVERLAY_ENV):
        monkeypatch.delenv(name, raising=False)
    clear_dataset_cache()
    yield
    clear_dataset_cache()


@pytest.fixture
def units():
    return StaticUnits(parse_conversions(load_data(DATA_DIR / "units.json")))


@pytest.fixture
def table(units):
    return UnitTable(units.conversions())


@pytest.fixture
def catalog():
    return StaticCatalog(parse_products(load_data(DATA_DIR / "products.json")))


@pytest.fixture
def profiles():
    return ProfileRegistry.from_dict(load_data(DATA_DIR / "ingredient_profiles.json"))


@pytest.fixture
def optimizer(units, catalog, profiles):
    return RecipeOptimizer(units, catalog, profiles=profiles)


def make_recipe(name, *items):
    """Build a recipe from ``(ingredient, amount, unit)`` tuples."""
    return Recipe(
        name,
        tuple(LineItem(ingredient, Quantity(amount, Unit(unit))) for ingredient, amount, unit in items),
    )


@pytest.fixture
def creme_brulee():
    return make_recipe(
        "Creme Brulee",
        ("Cream", 2, "cups"),
        ("Sugar", 0.5, "cups"),
        ("Eggs", 5, "whole"),
    )
