"""Ingredient profiles and the unit standardizer.

An :class:`IngredientProfile` captures everything ingredient specific the
engine needs: the canonical unit used for cost and nutrient math, the keywords
used to match catalog products, ingredient specific conversion entries (for
example kilograms of sugar to millilitres) and the mass equivalence used to
weigh the finished recipe. Profiles are loaded from
``ingredient_profiles.json`` so new ingredients need no code changes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from functools import cache
from typing import Any, Dict, Mapping

from .config import EngineConfig
from .models import LineItem, StandardizedRequirement
from .units import ConversionEntry, UnconvertibleUnitError, Unit, UnitTable, parse_unit
from .utils import load_dataset, normalize_key, register_cache
from .validators import MalformedReferenceDataError, validate_records

PROFILE_FILE = "ingredient_profiles.json"

_LOGGER = logging.getLogger(__name__)

__all__ = [
    "IngredientProfile",
    "ProfileRegistry",
    "load_profile_registry",
    "standardize_line_item",
    "PROFILE_FILE",
]


def _keyword(text: str) -> str:
    return " ".join(str(text).casefold().split())


@dataclass(frozen=True, slots=True)
class IngredientProfile:
    """Profile describing how an ingredient class is measured and matched."""

    name: str
    canonical_unit: Unit
    match_keywords: tuple[str, ...] = ()
    grams_per_unit: float | None = None
    grams_per_unit_basis: Unit | None = None
    conversions: tuple[ConversionEntry, ...] = ()
    aliases: tuple[str, ...] = ()
    known: bool = True

    @classmethod
    def passthrough(cls, ingredient: str, unit: Unit) -> "IngredientProfile":
        """Return the profile used for ingredient classes without data."""

        return cls(
            name=normalize_key(ingredient),
            canonical_unit=unit,
            match_keywords=(_keyword(ingredient),),
            known=False,
        )

    def with_canonical_unit(self, unit: Unit) -> "IngredientProfile":
        return replace(self, canonical_unit=unit)

    def matches(self, product_name: str) -> bool:
        """Return ``True`` if ``product_name`` contains any match keyword."""

        name = str(product_name).casefold()
        return any(keyword in name for keyword in self.match_keywords)

    def conversion_table(self, table: UnitTable) -> UnitTable:
        """Return ``table`` with this ingredient's own entries taking precedence."""

        return table.extended(self.conversions)

    def weight_in_grams(self, amount: float, table: UnitTable) -> float:
        """Return the mass equivalent of ``amount`` canonical units."""

        if self.canonical_unit == Unit.GRAMS:
            return amount
        factor = self.conversion_table(table).factor(self.canonical_unit, Unit.GRAMS)
        if factor is not None:
            return amount * factor
        if self.grams_per_unit is not None and self.grams_per_unit_basis == self.canonical_unit:
            return amount * self.grams_per_unit
        _LOGGER.warning(
            "No mass equivalence for '%s' measured in %s; weight counted as 0 g",
            self.name,
            self.canonical_unit,
        )
        return 0.0


class ProfileRegistry:
    """Lookup of :class:`IngredientProfile` by ingredient class or alias."""

    def __init__(self, profiles: Mapping[str, IngredientProfile] | None = None) -> None:
        self._profiles: Dict[str, IngredientProfile] = {}
        self._aliases: Dict[str, str] = {}
        for profile in (profiles or {}).values():
            self._profiles[profile.name] = profile
            for alias in profile.aliases:
                self._aliases[normalize_key(alias)] = profile.name

    def __contains__(self, ingredient: object) -> bool:
        return self.get(str(ingredient)) is not None

    def names(self) -> list[str]:
        return sorted(self._profiles)

    def get(self, ingredient: str) -> IngredientProfile | None:
        key = normalize_key(ingredient)
        return self._profiles.get(self._aliases.get(key, key))

    def resolve(
        self,
        ingredient: str,
        declared_unit: Unit,
        config: EngineConfig | None = None,
    ) -> IngredientProfile:
        """Return the effective profile for ``ingredient``.

        Unknown ingredient classes get a pass-through profile whose canonical
        unit is ``declared_unit``. Canonical unit overrides from ``config`` are
        applied last.
        """

        profile = self.get(ingredient)
        if profile is None:
            _LOGGER.debug("No profile for '%s'; amounts pass through unconverted", ingredient)
            profile = IngredientProfile.passthrough(ingredient, declared_unit)
        if config is not None:
            override = config.canonical_unit_for(profile.name) or config.canonical_unit_for(ingredient)
            if override is not None and override != profile.canonical_unit:
                profile = profile.with_canonical_unit(override)
        return profile

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProfileRegistry":
        """Return a registry built from raw dataset records.

        A :class:`MalformedReferenceDataError` is raised when ``data`` does not
        satisfy the profile schema.
        """

        issues = validate_records(data, "ingredient_profiles")
        if issues:
            raise MalformedReferenceDataError(PROFILE_FILE, issues)

        try:
            return cls(dict(_parse_profiles(data)))
        except ValueError as exc:
            raise MalformedReferenceDataError(PROFILE_FILE, [str(exc)]) from exc


def _parse_profiles(data: Mapping[str, Any]):
    for name, info in data.items():
        canonical = parse_unit(info["canonical_unit"])
        key = normalize_key(name)
        keywords = info.get("match_keywords") or [name]
        grams = info.get("grams_per_unit")
        yield key, IngredientProfile(
            name=key,
            canonical_unit=canonical,
            match_keywords=tuple(_keyword(k) for k in keywords),
            grams_per_unit=float(grams) if grams is not None else None,
            grams_per_unit_basis=canonical if grams is not None else None,
            conversions=tuple(
                ConversionEntry(
                    parse_unit(entry["from"]),
                    parse_unit(entry["to"]),
                    float(entry["factor"]),
                )
                for entry in info.get("conversions", [])
            ),
            aliases=tuple(info.get("aliases", [])),
        )


@cache
def load_profile_registry(filename: str = PROFILE_FILE) -> ProfileRegistry:
    """Return the profile registry for ``filename`` in the dataset paths."""

    data = load_dataset(filename)
    if not isinstance(data, Mapping):
        raise MalformedReferenceDataError(filename, ["<root>: expected an object"])
    return ProfileRegistry.from_dict(data)


register_cache(load_profile_registry.cache_clear)


def standardize_line_item(
    item: LineItem,
    profile: IngredientProfile,
    table: UnitTable,
) -> StandardizedRequirement:
    """Return the requirement for ``item`` in the canonical unit of ``profile``.

    Only a direct conversion entry is used. When none exists the amount is
    returned unconverted and the requirement is flagged ``converted=False``.
    """

    amount = item.quantity.amount
    unit = item.quantity.unit
    canonical = profile.canonical_unit
    converted = True
    if unit != canonical:
        try:
            amount = profile.conversion_table(table).convert(amount, unit, canonical)
        except UnconvertibleUnitError as exc:
            _LOGGER.warning("%s for '%s'; using the declared amount", exc, item.ingredient_name)
            converted = False

    return StandardizedRequirement(
        ingredient_name=item.ingredient_name,
        required_amount=amount,
        canonical_unit=canonical,
        original_amount=item.quantity.amount,
        original_unit=unit,
        converted=converted,
    )
