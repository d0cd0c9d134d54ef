"""Reference data providers: unit conversions, supplier catalog and recipes.

The optimizer only depends on the two small protocols defined here. Dataset
backed implementations read the bundled JSON/YAML files (and an optional CSV
supplier price sheet) through :mod:`recipe_engine.utils`; the static
implementations wrap already built objects and are handy for tests or callers
that load reference data themselves.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from functools import cached_property
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Mapping, Protocol, Sequence

from .models import LineItem, NutrientFact, Product, Recipe, SupplierOffer
from .units import ConversionEntry, Quantity, parse_unit
from .utils import dataset_file, load_dataset, load_dataset_df, normalize_key
from .validators import MalformedReferenceDataError, validate_records

if TYPE_CHECKING:
    import pandas as pd

UNITS_FILE = "units.json"
PRODUCTS_FILE = "products.json"
OFFERS_FILE = "supplier_offers.csv"
RECIPES_FILE = "recipes.json"

OFFER_SHEET_COLUMNS = ("product", "supplier", "price", "package_amount", "package_unit")

_LOGGER = logging.getLogger(__name__)

__all__ = [
    "UnitsProvider",
    "CatalogProvider",
    "StaticUnits",
    "StaticCatalog",
    "DatasetUnits",
    "DatasetCatalog",
    "parse_conversions",
    "parse_products",
    "parse_recipes",
    "parse_offer_sheet",
    "load_recipes",
    "get_recipe",
]


class UnitsProvider(Protocol):
    def conversions(self) -> Sequence[ConversionEntry]:
        """Return every available conversion entry."""


class CatalogProvider(Protocol):
    def products_for(self, ingredient: str) -> Sequence[Product]:
        """Return catalog products for the ingredient class ``ingredient``."""


def _quantity(raw: Mapping[str, Any]) -> Quantity:
    return Quantity(float(raw["amount"]), parse_unit(raw["unit"]))


def _checked(data: Any, schema: str, source: str) -> None:
    issues = validate_records(data, schema)
    if issues:
        raise MalformedReferenceDataError(source, issues)


def parse_conversions(data: Any, source: str = UNITS_FILE) -> tuple[ConversionEntry, ...]:
    """Return conversion entries from a ``{"conversions": [...]}`` payload."""

    _checked(data, "units", source)
    try:
        return tuple(
            ConversionEntry(parse_unit(c["from"]), parse_unit(c["to"]), float(c["factor"]))
            for c in data["conversions"]
        )
    except ValueError as exc:
        raise MalformedReferenceDataError(source, [str(exc)]) from exc


def _parse_offer(raw: Mapping[str, Any]) -> SupplierOffer:
    return SupplierOffer(
        supplier_name=str(raw["supplier"]),
        price=float(raw["price"]),
        package=_quantity(raw["package"]),
        product_name=raw.get("product_name"),
    )


def parse_products(data: Any, source: str = PRODUCTS_FILE) -> tuple[Product, ...]:
    """Return catalog products from a ``{"products": [...]}`` payload."""

    _checked(data, "products", source)
    products: List[Product] = []
    try:
        for raw in data["products"]:
            facts = tuple(
                NutrientFact(
                    nutrient_name=str(f["nutrient"]),
                    amount=_quantity(f["amount"]),
                    per=_quantity(f["per"]),
                )
                for f in raw.get("nutrient_facts", [])
            )
            offers = tuple(_parse_offer(o) for o in raw.get("offers", []))
            products.append(
                Product(
                    name=str(raw["name"]),
                    ingredient_class=str(raw["ingredient_class"]),
                    nutrient_facts=facts,
                    offers=offers,
                )
            )
    except ValueError as exc:
        raise MalformedReferenceDataError(source, [str(exc)]) from exc
    return tuple(products)


def parse_recipes(data: Any, source: str = RECIPES_FILE) -> tuple[Recipe, ...]:
    """Return recipes from a ``{"recipes": [...]}`` payload."""

    _checked(data, "recipes", source)
    try:
        return tuple(
            Recipe(
                name=str(raw["name"]),
                line_items=tuple(
                    LineItem(str(item["ingredient"]), _quantity(item["quantity"]))
                    for item in raw["line_items"]
                ),
            )
            for raw in data["recipes"]
        )
    except ValueError as exc:
        raise MalformedReferenceDataError(source, [str(exc)]) from exc


def parse_offer_sheet(frame: "pd.DataFrame", source: str = OFFERS_FILE) -> Dict[str, List[SupplierOffer]]:
    """Return supplier offers from a price sheet keyed by normalized product name.

    The sheet needs the columns listed in :data:`OFFER_SHEET_COLUMNS`; an
    optional ``product_name`` column holds the supplier's own label. Rows keep
    their sheet order.
    """

    missing = [c for c in OFFER_SHEET_COLUMNS if c not in frame.columns]
    if missing:
        raise MalformedReferenceDataError(source, [f"missing column '{c}'" for c in missing])

    offers: Dict[str, List[SupplierOffer]] = {}
    issues: List[str] = []
    for row_no, row in enumerate(frame.to_dict(orient="records"), start=1):
        try:
            price = float(row["price"])
            amount = float(row["package_amount"])
            unit = parse_unit(row["package_unit"])
        except (TypeError, ValueError) as exc:
            issues.append(f"row {row_no}: {exc}")
            continue
        if math.isnan(price) or price <= 0:
            issues.append(f"row {row_no}: price must be positive")
            continue
        if math.isnan(amount) or amount <= 0:
            issues.append(f"row {row_no}: package_amount must be positive")
            continue
        label = row.get("product_name")
        offer = SupplierOffer(
            supplier_name=str(row["supplier"]),
            price=price,
            package=Quantity(amount, unit),
            product_name=label if isinstance(label, str) else None,
        )
        offers.setdefault(normalize_key(row["product"]), []).append(offer)

    if issues:
        raise MalformedReferenceDataError(source, issues)
    return offers


class StaticUnits:
    """Units provider over a fixed list of entries."""

    def __init__(self, entries: Iterable[ConversionEntry]) -> None:
        self._entries = tuple(entries)

    def conversions(self) -> Sequence[ConversionEntry]:
        return self._entries


class StaticCatalog:
    """Catalog provider over a fixed list of products."""

    def __init__(self, products: Iterable[Product]) -> None:
        self._products = tuple(products)

    def all_products(self) -> tuple[Product, ...]:
        return self._products

    def products_for(self, ingredient: str) -> Sequence[Product]:
        key = normalize_key(ingredient)
        return tuple(p for p in self._products if normalize_key(p.ingredient_class) == key)


@dataclass(frozen=True)
class DatasetUnits:
    """Units provider reading the conversion table dataset."""

    filename: str = UNITS_FILE

    @cached_property
    def _entries(self) -> tuple[ConversionEntry, ...]:
        return parse_conversions(load_dataset(self.filename), self.filename)

    def conversions(self) -> tuple[ConversionEntry, ...]:
        return self._entries


@dataclass(frozen=True)
class DatasetCatalog:
    """Catalog provider reading the products dataset and supplier price sheet.

    Offers from the optional CSV sheet are appended after the offers listed
    in the products dataset, in sheet order.
    """

    products_file: str = PRODUCTS_FILE
    offers_file: str | None = OFFERS_FILE

    def all_products(self) -> tuple[Product, ...]:
        return self._products

    @cached_property
    def _products(self) -> tuple[Product, ...]:
        products = parse_products(load_dataset(self.products_file), self.products_file)
        if not self.offers_file or dataset_file(self.offers_file) is None:
            return products

        sheet = parse_offer_sheet(load_dataset_df(self.offers_file), self.offers_file)
        known = {normalize_key(p.name) for p in products}
        unknown = sorted(set(sheet) - known)
        if unknown:
            raise MalformedReferenceDataError(
                self.offers_file, [f"unknown product '{name}'" for name in unknown]
            )
        _LOGGER.debug("Merged %d price sheet products from %s", len(sheet), self.offers_file)
        return tuple(
            Product(
                name=p.name,
                ingredient_class=p.ingredient_class,
                nutrient_facts=p.nutrient_facts,
                offers=p.offers + tuple(sheet.get(normalize_key(p.name), ())),
            )
            for p in products
        )

    def products_for(self, ingredient: str) -> Sequence[Product]:
        key = normalize_key(ingredient)
        return tuple(p for p in self.all_products() if normalize_key(p.ingredient_class) == key)


def load_recipes(filename: str = RECIPES_FILE) -> tuple[Recipe, ...]:
    """Return every recipe in the ``filename`` dataset."""

    return parse_recipes(load_dataset(filename), filename)


def get_recipe(name: str, filename: str = RECIPES_FILE) -> Recipe:
    """Return the recipe called ``name`` (case-insensitive)."""

    key = normalize_key(name)
    for recipe in load_recipes(filename):
        if normalize_key(recipe.name) == key:
            return recipe
    raise KeyError(f"Unknown recipe '{name}'")
