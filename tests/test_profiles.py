import logging

import pytest

from recipe_engine.config import EngineConfig
from recipe_engine.models import LineItem
from recipe_engine.profiles import (
    IngredientProfile,
    ProfileRegistry,
    load_profile_registry,
    standardize_line_item,
)
from recipe_engine.units import Quantity, Unit
from recipe_engine.utils import clear_dataset_cache
from recipe_engine.validators import MalformedReferenceDataError


def test_registry_lookup_by_name_and_alias(profiles):
    assert profiles.names() == ["cream", "egg", "sugar"]
    assert profiles.get("Eggs").name == "egg"
    assert profiles.get("SUGAR").canonical_unit is Unit.MILLILITRES
    assert "cream" in profiles
    assert "saffron" not in profiles


def test_resolve_unknown_ingredient_passes_through(profiles):
    profile = profiles.resolve("Vanilla Bean", Unit.WHOLE)
    assert profile.known is False
    assert profile.name == "vanilla_bean"
    assert profile.canonical_unit is Unit.WHOLE
    assert profile.matches("Madagascar Vanilla Bean Pod")


def test_resolve_applies_canonical_unit_override(profiles):
    config = EngineConfig(canonical_units={"Sugar": "grams"})
    profile = profiles.resolve("Sugar", Unit.CUPS, config)
    assert profile.canonical_unit is Unit.GRAMS
    assert profiles.get("sugar").canonical_unit is Unit.MILLILITRES


def test_matches_is_case_insensitive(profiles):
    cream = profiles.get("cream")
    assert cream.matches("Thickened CREAM")
    assert not cream.matches("Granulated Sugar")


def test_weight_in_grams(profiles, table):
    assert profiles.get("egg").weight_in_grams(5, table) == 250
    assert profiles.get("cream").weight_in_grams(500, table) == 500
    flour = IngredientProfile("flour", Unit.GRAMS)
    assert flour.weight_in_grams(120, table) == 120
    rice = IngredientProfile("rice", Unit.KILOGRAM)
    assert rice.weight_in_grams(2, table) == 2000


def test_weight_without_mass_equivalence_is_zero(table, caplog):
    profile = IngredientProfile.passthrough("Saffron", Unit.TEASPOONS)
    with caplog.at_level(logging.WARNING):
        assert profile.weight_in_grams(1, table) == 0.0
    assert "saffron" in caplog.text


def test_weight_of_gram_measured_ingredient(profiles, table):
    sugar = profiles.get("sugar").with_canonical_unit(Unit.GRAMS)
    assert sugar.weight_in_grams(100, table) == 100


def test_standardize_converts_to_canonical(profiles, table):
    item = LineItem("Cream", Quantity(2, Unit.CUPS))
    req = standardize_line_item(item, profiles.get("cream"), table)
    assert req.required_amount == 500
    assert req.canonical_unit is Unit.MILLILITRES
    assert req.original_amount == 2
    assert req.original_unit is Unit.CUPS
    assert req.converted


def test_standardize_prefers_ingredient_conversions(profiles, table):
    item = LineItem("Sugar", Quantity(0.5, Unit.CUPS))
    by_volume = standardize_line_item(item, profiles.get("sugar"), table)
    assert by_volume.required_amount == 125
    by_weight = standardize_line_item(
        item, profiles.get("sugar").with_canonical_unit(Unit.GRAMS), table
    )
    assert by_weight.required_amount == 100
    assert by_weight.canonical_unit is Unit.GRAMS


def test_standardize_canonical_unit_passes_through(profiles, table):
    item = LineItem("Eggs", Quantity(5, Unit.WHOLE))
    req = standardize_line_item(item, profiles.get("egg"), table)
    assert req.required_amount == 5
    assert req.converted


def test_standardize_unconvertible_keeps_amount(profiles, table, caplog):
    item = LineItem("Eggs", Quantity(2, Unit.CUPS))
    with caplog.at_level(logging.WARNING):
        req = standardize_line_item(item, profiles.get("egg"), table)
    assert req.required_amount == 2
    assert req.canonical_unit is Unit.WHOLE
    assert req.converted is False
    assert "Eggs" in caplog.text


def test_from_dict_requires_canonical_unit():
    with pytest.raises(MalformedReferenceDataError) as err:
        ProfileRegistry.from_dict({"flour": {"match_keywords": ["flour"]}})
    assert any("canonical_unit" in issue for issue in err.value.issues)


def test_from_dict_rejects_unknown_unit():
    with pytest.raises(MalformedReferenceDataError, match="bushels"):
        ProfileRegistry.from_dict({"flour": {"canonical_unit": "bushels"}})


def test_from_dict_defaults_keyword_to_name():
    registry = ProfileRegistry.from_dict({"Brown Sugar": {"canonical_unit": "grams"}})
    profile = registry.get("brown sugar")
    assert profile.name == "brown_sugar"
    assert profile.match_keywords == ("brown sugar",)
    assert profile.grams_per_unit is None


def test_load_profile_registry_from_dataset_dir(tmp_path, monkeypatch):
    (tmp_path / "ingredient_profiles.json").write_text(
        '{"butter": {"canonical_unit": "grams", "aliases": ["unsalted butter"]}}'
    )
    monkeypatch.setenv("RECIPE_ENGINE_DATA_DIR", str(tmp_path))
    registry = load_profile_registry()
    assert registry.names() == ["butter"]
    assert registry.get("Unsalted Butter").name == "butter"


def test_clear_dataset_cache_refreshes_registry(tmp_path, monkeypatch):
    first = tmp_path / "first"
    second = tmp_path / "second"
    first.mkdir()
    second.mkdir()
    (first / "ingredient_profiles.json").write_text('{"butter": {"canonical_unit": "grams"}}')
    (second / "ingredient_profiles.json").write_text('{"honey": {"canonical_unit": "millilitres"}}')

    monkeypatch.setenv("RECIPE_ENGINE_DATA_DIR", str(first))
    assert load_profile_registry().names() == ["butter"]

    monkeypatch.setenv("RECIPE_ENGINE_DATA_DIR", str(second))
    clear_dataset_cache()
    assert load_profile_registry().names() == ["honey"]
