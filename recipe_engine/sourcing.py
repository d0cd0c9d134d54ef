"""Cheapest supplier selection.

Each ingredient is sourced independently: every offer of every catalog product
matching the ingredient is priced for the full required amount and the
cheapest one wins. Ties keep the offer seen first, scanning products in catalog
order and offers in listing order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence

from .catalog import CatalogProvider
from .models import Product, SourcingChoice, StandardizedRequirement
from .pricing import price_per_unit
from .profiles import IngredientProfile
from .units import UnitTable

_LOGGER = logging.getLogger(__name__)

__all__ = [
    "SourcingPlan",
    "collect_products",
    "select_cheapest",
    "select_suppliers",
]


@dataclass(frozen=True)
class SourcingPlan:
    """Chosen offers plus the ingredients no offer could satisfy."""

    choices: tuple[SourcingChoice, ...]
    unmet: tuple[str, ...] = ()
    profiles: tuple[IngredientProfile, ...] = ()

    def sourced(self) -> list[tuple[SourcingChoice, IngredientProfile]]:
        """Return each choice paired with the profile it was sourced under."""

        return list(zip(self.choices, self.profiles))

    @property
    def total_cost(self) -> float:
        return sum(choice.total_cost for choice in self.choices)


def collect_products(ingredients: Iterable[str], catalog: CatalogProvider) -> tuple[Product, ...]:
    """Return the products the catalog lists for ``ingredients``.

    Products are concatenated in ingredient order; a product returned for
    more than one ingredient is kept at its first position.
    """

    seen: set[Product] = set()
    products: list[Product] = []
    for ingredient in ingredients:
        for product in catalog.products_for(ingredient):
            if product in seen:
                continue
            seen.add(product)
            products.append(product)
    return tuple(products)


def select_cheapest(
    requirement: StandardizedRequirement,
    profile: IngredientProfile,
    products: Sequence[Product],
    table: UnitTable,
) -> SourcingChoice | None:
    """Return the cheapest offer for ``requirement`` or ``None`` if none match."""

    conversions = profile.conversion_table(table)
    best: SourcingChoice | None = None
    for product in products:
        if not profile.matches(product.name):
            continue
        for offer in product.offers:
            unit_price = price_per_unit(offer, requirement.canonical_unit, conversions)
            cost = requirement.required_amount * unit_price.value
            if best is None or cost < best.total_cost:
                best = SourcingChoice(
                    ingredient_name=requirement.ingredient_name,
                    product=product,
                    offer=offer,
                    price_per_canonical_unit=unit_price.value,
                    total_cost=cost,
                    amount_used=requirement.required_amount,
                    canonical_unit=requirement.canonical_unit,
                )
    return best


def select_suppliers(
    requirements: Sequence[tuple[StandardizedRequirement, IngredientProfile]],
    products: Sequence[Product],
    table: UnitTable,
) -> SourcingPlan:
    """Return the cheapest sourcing for every requirement.

    Ingredients without a matching offer are listed in
    :attr:`SourcingPlan.unmet` and contribute neither cost nor nutrients.
    """

    choices: list[SourcingChoice] = []
    profiles: list[IngredientProfile] = []
    unmet: list[str] = []
    for requirement, profile in requirements:
        choice = select_cheapest(requirement, profile, products, table)
        if choice is None:
            _LOGGER.info("No supplier offer matches '%s'", requirement.ingredient_name)
            if requirement.ingredient_name not in unmet:
                unmet.append(requirement.ingredient_name)
            continue
        _LOGGER.debug(
            "Sourcing %s %s of '%s' from %s at %.4f",
            requirement.required_amount,
            requirement.canonical_unit,
            requirement.ingredient_name,
            choice.offer.supplier_name,
            choice.total_cost,
        )
        choices.append(choice)
        profiles.append(profile)
    return SourcingPlan(tuple(choices), tuple(unmet), tuple(profiles))
