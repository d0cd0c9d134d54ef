"""Supplier price normalization."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .models import SupplierOffer
from .units import UnconvertibleUnitError, Unit, UnitTable

_LOGGER = logging.getLogger(__name__)

__all__ = ["UnitPrice", "price_per_unit"]


@dataclass(frozen=True, slots=True)
class UnitPrice:
    """Price of one canonical unit of an offer.

    ``reconciled`` is ``False`` when the package unit could not be converted
    and the raw package amount was used instead.
    """

    value: float
    unit: Unit
    reconciled: bool = True


def price_per_unit(offer: SupplierOffer, canonical_unit: Unit, table: UnitTable) -> UnitPrice:
    """Return the price of one ``canonical_unit`` bought through ``offer``.

    The package amount is converted to ``canonical_unit`` through ``table``
    before dividing, e.g. a 1 kilogram package of a gram measured ingredient
    counts as 1000 grams. Without a conversion entry the raw package amount
    is used and a warning is logged.
    """

    amount = offer.package.amount
    if amount <= 0:
        raise ValueError(f"package amount must be positive for supplier '{offer.supplier_name}'")

    try:
        package_amount = table.convert(amount, offer.package.unit, canonical_unit)
    except UnconvertibleUnitError as exc:
        _LOGGER.warning(
            "%s for offer from '%s'; pricing by raw package amount",
            exc,
            offer.supplier_name,
        )
        return UnitPrice(offer.price / amount, canonical_unit, reconciled=False)

    return UnitPrice(offer.price / package_amount, canonical_unit)
