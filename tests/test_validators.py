from recipe_engine.validators import (
    SCHEMA_FILES,
    MalformedReferenceDataError,
    load_schema,
    validate_records,
)


def test_bundled_schemas_load():
    for name in SCHEMA_FILES:
        schema = load_schema(name)
        assert schema["$schema"].endswith("2020-12/schema")


def test_valid_units_payload():
    payload = {"conversions": [{"from": "cups", "to": "millilitres", "factor": 250}]}
    assert validate_records(payload, "units") == []


def test_issue_locations():
    payload = {"conversions": [{"from": "cups", "to": "millilitres", "factor": 0}]}
    issues = validate_records(payload, "units")
    assert len(issues) == 1
    assert issues[0].startswith("conversions.0.factor:")


def test_root_issue_location():
    issues = validate_records([], "units")
    assert issues == ["<root>: [] is not of type 'object'"]


def test_inline_schema():
    schema = {"type": "object", "required": ["name"]}
    assert validate_records({"name": "x"}, schema) == []
    assert validate_records({}, schema) == ["<root>: 'name' is a required property"]


def test_malformed_error_message():
    err = MalformedReferenceDataError("units.json", ["a: bad", "b: worse"])
    assert err.source == "units.json"
    assert err.issues == ["a: bad", "b: worse"]
    assert str(err) == "Malformed reference data in units.json: a: bad; b: worse"
    assert isinstance(err, ValueError)
