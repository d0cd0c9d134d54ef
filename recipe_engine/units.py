"""Units of measure and the directed conversion table."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Dict, Iterable, Iterator

__all__ = [
    "Unit",
    "UnitKind",
    "Quantity",
    "ConversionEntry",
    "UnitTable",
    "UnconvertibleUnitError",
    "parse_unit",
]


class UnitKind(StrEnum):
    """Physical dimension of a unit."""

    VOLUME = "volume"
    MASS = "mass"
    COUNT = "count"


class Unit(StrEnum):
    """Units understood by the engine."""

    CUPS = "cups"
    TABLESPOONS = "tablespoons"
    TEASPOONS = "teaspoons"
    MILLILITRES = "millilitres"
    LITRES = "litres"
    GRAMS = "grams"
    KILOGRAM = "kilogram"
    MILLIGRAMS = "milligrams"
    WHOLE = "whole"

    @property
    def kind(self) -> UnitKind:
        return _KINDS[self]


_KINDS: Dict[Unit, UnitKind] = {
    Unit.CUPS: UnitKind.VOLUME,
    Unit.TABLESPOONS: UnitKind.VOLUME,
    Unit.TEASPOONS: UnitKind.VOLUME,
    Unit.MILLILITRES: UnitKind.VOLUME,
    Unit.LITRES: UnitKind.VOLUME,
    Unit.GRAMS: UnitKind.MASS,
    Unit.KILOGRAM: UnitKind.MASS,
    Unit.MILLIGRAMS: UnitKind.MASS,
    Unit.WHOLE: UnitKind.COUNT,
}

# Spellings seen in supplier price lists and recipe sources.
_ALIASES: Dict[str, Unit] = {
    "cup": Unit.CUPS,
    "tbsp": Unit.TABLESPOONS,
    "tablespoon": Unit.TABLESPOONS,
    "tsp": Unit.TEASPOONS,
    "teaspoon": Unit.TEASPOONS,
    "ml": Unit.MILLILITRES,
    "millilitre": Unit.MILLILITRES,
    "milliliter": Unit.MILLILITRES,
    "milliliters": Unit.MILLILITRES,
    "l": Unit.LITRES,
    "litre": Unit.LITRES,
    "liter": Unit.LITRES,
    "liters": Unit.LITRES,
    "g": Unit.GRAMS,
    "gram": Unit.GRAMS,
    "kg": Unit.KILOGRAM,
    "kilograms": Unit.KILOGRAM,
    "mg": Unit.MILLIGRAMS,
    "milligram": Unit.MILLIGRAMS,
    "each": Unit.WHOLE,
}


def parse_unit(value: str | Unit) -> Unit:
    """Return the :class:`Unit` for ``value``.

    Matching is case-insensitive and accepts common abbreviations such as
    ``ml`` or ``kg``. A ``ValueError`` is raised for unknown units.
    """

    if isinstance(value, Unit):
        return value
    key = str(value).strip().casefold()
    try:
        return Unit(key)
    except ValueError:
        pass
    if key in _ALIASES:
        return _ALIASES[key]
    raise ValueError(f"Unknown unit '{value}'")


@dataclass(frozen=True, slots=True)
class Quantity:
    """An amount expressed in a unit."""

    amount: float
    unit: Unit

    def as_dict(self) -> Dict[str, object]:
        return {"amount": self.amount, "unit": str(self.unit)}


@dataclass(frozen=True, slots=True)
class ConversionEntry:
    """Directed conversion factor ``from_unit`` -> ``to_unit``."""

    from_unit: Unit
    to_unit: Unit
    factor: float


class UnconvertibleUnitError(ValueError):
    """Raised when no direct conversion entry exists for a unit pair."""

    def __init__(self, from_unit: Unit, to_unit: Unit) -> None:
        super().__init__(f"No conversion from '{from_unit}' to '{to_unit}'")
        self.from_unit = from_unit
        self.to_unit = to_unit


class UnitTable:
    """Read-only lookup over :class:`ConversionEntry` records.

    Only listed pairs convert. The table never inverts an entry or chains
    two entries together. When the same pair is listed more than once the
    first entry wins.
    """

    __slots__ = ("_entries", "_index")

    def __init__(self, entries: Iterable[ConversionEntry] = ()) -> None:
        self._entries = tuple(entries)
        index: Dict[tuple[Unit, Unit], float] = {}
        for entry in self._entries:
            index.setdefault((entry.from_unit, entry.to_unit), entry.factor)
        self._index = index

    def __iter__(self) -> Iterator[ConversionEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def factor(self, from_unit: Unit, to_unit: Unit) -> float | None:
        """Return the factor for ``from_unit`` -> ``to_unit`` or ``None``."""

        if from_unit == to_unit:
            return 1.0
        return self._index.get((from_unit, to_unit))

    def can_convert(self, from_unit: Unit, to_unit: Unit) -> bool:
        return self.factor(from_unit, to_unit) is not None

    def convert(self, amount: float, from_unit: Unit, to_unit: Unit) -> float:
        """Return ``amount`` of ``from_unit`` expressed in ``to_unit``.

        Converting a unit to itself returns ``amount`` untouched. A missing
        entry raises :class:`UnconvertibleUnitError`.
        """

        if from_unit == to_unit:
            return amount
        factor = self._index.get((from_unit, to_unit))
        if factor is None:
            raise UnconvertibleUnitError(from_unit, to_unit)
        return amount * factor

    def extended(self, entries: Iterable[ConversionEntry]) -> "UnitTable":
        """Return a new table where ``entries`` take precedence over this one."""

        extra = tuple(entries)
        if not extra:
            return self
        return UnitTable((*extra, *self._entries))
