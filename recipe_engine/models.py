"""Data model shared by the sourcing and nutrition stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

from .units import Quantity, Unit

__all__ = [
    "LineItem",
    "Recipe",
    "NutrientFact",
    "SupplierOffer",
    "Product",
    "StandardizedRequirement",
    "SourcingChoice",
    "NutritionLine",
    "OptimizationResult",
    "CompleteResult",
    "PartialResult",
]


@dataclass(frozen=True, slots=True)
class LineItem:
    """One ingredient line of a recipe."""

    ingredient_name: str
    quantity: Quantity


@dataclass(frozen=True, slots=True)
class Recipe:
    name: str
    line_items: tuple[LineItem, ...]


@dataclass(frozen=True, slots=True)
class NutrientFact:
    """Nutrient amount stated relative to a reference quantity.

    ``amount`` of ``nutrient_name`` is contained in ``per`` of the product,
    e.g. 35 grams of fat per 100 millilitres.
    """

    nutrient_name: str
    amount: Quantity
    per: Quantity


@dataclass(frozen=True, slots=True)
class SupplierOffer:
    """A supplier's price for one package of a product."""

    supplier_name: str
    price: float
    package: Quantity
    product_name: str | None = None


@dataclass(frozen=True, slots=True)
class Product:
    """Catalog product with its nutrient facts and supplier offers."""

    name: str
    ingredient_class: str
    nutrient_facts: tuple[NutrientFact, ...] = ()
    offers: tuple[SupplierOffer, ...] = ()


@dataclass(frozen=True, slots=True)
class StandardizedRequirement:
    """Required amount of an ingredient in its canonical unit."""

    ingredient_name: str
    required_amount: float
    canonical_unit: Unit
    original_amount: float
    original_unit: Unit
    converted: bool = True


@dataclass(frozen=True, slots=True)
class SourcingChoice:
    """Cheapest offer selected for one ingredient."""

    ingredient_name: str
    product: Product
    offer: SupplierOffer
    price_per_canonical_unit: float
    total_cost: float
    amount_used: float
    canonical_unit: Unit

    def as_dict(self) -> Dict[str, Any]:
        return {
            "ingredient": self.ingredient_name,
            "product": self.product.name,
            "supplier": self.offer.supplier_name,
            "price_per_unit": self.price_per_canonical_unit,
            "unit": str(self.canonical_unit),
            "amount_used": self.amount_used,
            "cost": self.total_cost,
        }


@dataclass(frozen=True, slots=True)
class NutritionLine:
    """Nutrient amount per 100 grams of finished recipe."""

    nutrient_name: str
    amount_per_100g: float
    reference_amount: float = 100
    reference_unit: Unit = Unit.GRAMS


@dataclass(frozen=True)
class OptimizationResult:
    """Cheapest total cost and the nutrition evaluated at that sourcing."""

    total_cost: float
    nutrition_profile: Mapping[str, NutritionLine]
    choices: tuple[SourcingChoice, ...] = ()

    @property
    def is_complete(self) -> bool:
        return True

    def cost_breakdown(self) -> Dict[str, float]:
        """Return cost per ingredient; repeated ingredients are summed."""

        breakdown: Dict[str, float] = {}
        for choice in self.choices:
            key = choice.ingredient_name
            breakdown[key] = breakdown.get(key, 0.0) + choice.total_cost
        return breakdown

    def as_dict(self) -> Dict[str, Any]:
        return {
            "total_cost": self.total_cost,
            "nutrition_profile": {
                name: line.amount_per_100g for name, line in self.nutrition_profile.items()
            },
            "choices": [c.as_dict() for c in self.choices],
            "unmet_ingredients": [],
        }


@dataclass(frozen=True)
class CompleteResult(OptimizationResult):
    """Every ingredient was matched by at least one supplier offer."""


@dataclass(frozen=True)
class PartialResult(OptimizationResult):
    """Some ingredients had no matching offer and are left out of the totals."""

    unmet_ingredients: tuple[str, ...] = field(default=())

    @property
    def is_complete(self) -> bool:
        return False

    def as_dict(self) -> Dict[str, Any]:
        data = OptimizationResult.as_dict(self)
        data["unmet_ingredients"] = list(self.unmet_ingredients)
        return data
