import json

import pytest

from recipe_engine import utils
from recipe_engine.utils import (
    clear_dataset_cache,
    dataset_file,
    dataset_paths,
    deep_update,
    load_data,
    load_dataset,
    load_dataset_df,
    normalize_key,
)


def test_normalize_key():
    assert normalize_key("Hello") == "hello"
    assert normalize_key("Granulated  Sugar") == "granulated_sugar"
    assert normalize_key("free-range_eggs") == "free_range_eggs"
    assert normalize_key(123) == "123"


def test_load_data_json(tmp_path):
    path = tmp_path / "data.json"
    path.write_text('{"a":1}')
    assert load_data(path) == {"a": 1}


def test_load_data_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_data(tmp_path / "missing.json")


def test_load_data_invalid_json(tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text("{oops}")
    with pytest.raises(ValueError, match="bad.json"):
        load_data(bad)


def test_load_data_yaml(tmp_path):
    path = tmp_path / "data.yaml"
    path.write_text("precision: 2\nitems:\n  - a\n")
    assert load_data(path) == {"precision": 2, "items": ["a"]}
    empty = tmp_path / "empty.yml"
    empty.write_text("")
    assert load_data(empty) == {}


def test_load_data_invalid_yaml(tmp_path):
    bad = tmp_path / "bad.yaml"
    bad.write_text("a: [1, 2\n")
    with pytest.raises(ValueError, match="Invalid YAML"):
        load_data(bad)


def test_deep_update():
    base = {"a": {"x": 1, "y": 2}, "b": [1]}
    deep_update(base, {"a": {"y": 3}, "b": [2]})
    assert base == {"a": {"x": 1, "y": 3}, "b": [2]}


def test_dataset_paths_env(monkeypatch, tmp_path):
    base = tmp_path / "data"
    extra = tmp_path / "extra"
    base.mkdir()
    extra.mkdir()
    monkeypatch.setenv("RECIPE_ENGINE_DATA_DIR", str(base))
    monkeypatch.setenv("RECIPE_ENGINE_EXTRA_DATA_DIRS", str(extra))
    paths = dataset_paths()
    assert paths == (base, extra)


def test_default_data_dir():
    assert dataset_paths() == (utils.DEFAULT_DATA_DIR,)
    assert dataset_file("units.json") == utils.DEFAULT_DATA_DIR / "units.json"
    assert dataset_file("missing.json") is None


def test_load_dataset_merges_extra_and_overlay(monkeypatch, tmp_path):
    base = tmp_path / "data"
    extra = tmp_path / "extra"
    overlay = tmp_path / "overlay"
    for d in (base, extra, overlay):
        d.mkdir()
    (base / "sample.json").write_text(json.dumps({"a": {"x": 1, "y": 1}, "b": 1}))
    (extra / "sample.json").write_text(json.dumps({"a": {"y": 2}}))
    (overlay / "sample.yaml").write_text("c: 3\n")
    (overlay / "sample.json").write_text(json.dumps({"b": 4}))
    monkeypatch.setenv("RECIPE_ENGINE_DATA_DIR", str(base))
    monkeypatch.setenv("RECIPE_ENGINE_EXTRA_DATA_DIRS", str(extra))
    monkeypatch.setenv("RECIPE_ENGINE_OVERLAY_DIR", str(overlay))
    assert load_dataset("sample.json") == {"a": {"x": 1, "y": 2}, "b": 4}
    assert dataset_file("sample.json") == overlay / "sample.json"


def test_load_dataset_missing_is_empty(monkeypatch, tmp_path):
    monkeypatch.setenv("RECIPE_ENGINE_DATA_DIR", str(tmp_path))
    assert load_dataset("nothing.json") == {}


def test_clear_dataset_cache(monkeypatch, tmp_path):
    base1 = tmp_path / "d1"
    base1.mkdir()
    (base1 / "sample.json").write_text('{"a":1}')
    monkeypatch.setenv("RECIPE_ENGINE_DATA_DIR", str(base1))
    assert load_dataset("sample.json") == {"a": 1}

    base2 = tmp_path / "d2"
    base2.mkdir()
    (base2 / "sample.json").write_text('{"a":2}')
    monkeypatch.setenv("RECIPE_ENGINE_DATA_DIR", str(base2))
    assert load_dataset("sample.json") == {"a": 1}
    clear_dataset_cache()
    assert load_dataset("sample.json") == {"a": 2}


def test_load_dataset_df_csv(monkeypatch, tmp_path):
    (tmp_path / "offers.csv").write_text("product,price\nCream,4.0\nSugar,1.5\n")
    monkeypatch.setenv("RECIPE_ENGINE_DATA_DIR", str(tmp_path))
    df = load_dataset_df("offers.csv")
    assert list(df.columns) == ["product", "price"]
    assert df.shape == (2, 2)


def test_load_dataset_df_dict_and_list(monkeypatch, tmp_path):
    (tmp_path / "rows.json").write_text(json.dumps({"a": {"x": 1}, "b": {"x": 2}}))
    (tmp_path / "list.json").write_text(json.dumps([{"a": 1}, {"a": 2}]))
    (tmp_path / "scalar.json").write_text("5")
    monkeypatch.setenv("RECIPE_ENGINE_DATA_DIR", str(tmp_path))
    df = load_dataset_df("rows.json")
    assert list(df.index) == ["a", "b"]
    assert list(df.columns) == ["x"]
    assert load_dataset_df("list.json").shape == (2, 1)
    with pytest.raises(ValueError):
        load_dataset_df("scalar.json")


def test_clear_dataset_cache_runs_registered_caches(monkeypatch):
    monkeypatch.setattr(utils, "_DEPENDENT_CACHES", [])
    calls = []
    utils.register_cache(lambda: calls.append("cleared"))
    clear_dataset_cache()
    assert calls == ["cleared"]
