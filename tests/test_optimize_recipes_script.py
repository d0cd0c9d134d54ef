import json
from pathlib import Path
import subprocess
import sys

import pytest

ROOT = Path(__file__).resolve().parents[1]
SCRIPT = ROOT / "scripts/optimize_recipes.py"


def _run(*args, check=True):
    return subprocess.run(
        [sys.executable, str(SCRIPT), *map(str, args)],
        capture_output=True,
        text=True,
        check=check,
    )


def test_optimize_all_recipes():
    result = _run()
    data = json.loads(result.stdout)
    assert list(data) == ["Creme Brulee", "Whipped Cream"]
    brulee = data["Creme Brulee"]
    assert brulee["cheapestCost"] == pytest.approx(6.2875, abs=1e-3)
    nutrients = brulee["nutrientsAtCheapestCost"]
    assert nutrients["Sodium"]["quantityAmount"]["uomAmount"] == 0.063
    assert nutrients["Carbohydrates"]["quantityPer"]["uomAmount"] == 100


def test_precision_and_canonical_unit_options():
    result = _run("--recipe", "creme brulee", "--precision", "1", "--canonical-unit", "sugar=g")
    data = json.loads(result.stdout)
    assert list(data) == ["Creme Brulee"]
    nutrients = data["Creme Brulee"]["nutrientsAtCheapestCost"]
    assert nutrients["Fat"]["quantityAmount"]["uomAmount"] == 23.5


def test_bad_canonical_unit_option():
    result = _run("--canonical-unit", "sugar", check=False)
    assert result.returncode == 2
    assert "INGREDIENT=UNIT" in result.stderr


def test_recipe_file_and_output(tmp_path):
    recipes = tmp_path / "recipes.yaml"
    recipes.write_text(
        "recipes:\n"
        "  - name: Sweet Cream\n"
        "    line_items:\n"
        "      - ingredient: Cream\n"
        "        quantity: {amount: 1, unit: cups}\n"
        "      - ingredient: Vanilla\n"
        "        quantity: {amount: 1, unit: teaspoons}\n"
    )
    out = tmp_path / "out" / "summary.json"
    _run(recipes, "--output", out)
    data = json.loads(out.read_text())
    assert data["Sweet Cream"]["unmetIngredients"] == ["Vanilla"]
    assert data["Sweet Cream"]["cheapestCost"] == pytest.approx(1.8)


def test_expected_comparison(tmp_path):
    summary = json.loads(_run().stdout)
    expected = tmp_path / "expected.json"
    expected.write_text(json.dumps({"Creme Brulee": summary["Creme Brulee"]}))
    result = _run("--expected", expected)
    assert 'CHECKING RECIPE "Creme Brulee" --- CORRECT ANSWER' in result.stderr

    summary["Creme Brulee"]["cheapestCost"] = 7.131585
    expected.write_text(json.dumps({"Creme Brulee": summary["Creme Brulee"]}))
    result = _run("--expected", expected, check=False)
    assert result.returncode == 1
    assert "INCORRECT ANSWER" in result.stderr


def test_malformed_recipe_file(tmp_path):
    recipes = tmp_path / "recipes.json"
    recipes.write_text(json.dumps({"recipes": [{"name": "Toast"}]}))
    result = _run(recipes, check=False)
    assert result.returncode == 1
    assert "line_items" in result.stderr


def test_missing_expected_file(tmp_path):
    missing = tmp_path / "nope.json"
    result = _run("--expected", missing, check=False)
    assert result.returncode == 1
    assert "nope.json" in result.stderr
    assert "Traceback" not in result.stderr
    assert result.stdout == ""


def test_invalid_expected_file(tmp_path):
    expected = tmp_path / "expected.json"
    expected.write_text("{not json")
    result = _run("--expected", expected, check=False)
    assert result.returncode == 1
    assert "Traceback" not in result.stderr
