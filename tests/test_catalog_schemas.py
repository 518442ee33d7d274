import json

import pytest
from pydantic import TypeAdapter, ValidationError

from fastfood_mcp.app.schemas.catalog import ErrorCatalog, ErrorEntry, FeatureFlag, FlagsData, SystemData


def test_error_entry_accepts_any_key_case_and_ignores_extras():
    entry = ErrorEntry.model_validate(
        {
            "TITLE": "Order total mismatch",
            "Severity": "high",
            "messagepatterns": ["total mismatch"],
            "Fix": ["Re-price the cart"],
            "owner": "not part of the shape",
        }
    )
    assert entry.title == "Order total mismatch"
    assert entry.message_patterns == ("total mismatch",)
    assert entry.fix == ("Re-price the cart",)
    assert entry.causes == ()
    assert entry.links == ()


def test_first_spelling_wins_for_duplicate_keys():
    entry = ErrorEntry.model_validate({"title": "first", "Title": "second", "severity": "low"})
    assert entry.title == "first"


def test_python_field_names_are_accepted():
    svc = SystemData.model_validate({"services": {"menu": {"depends_on": ["inventory"]}}}).services["menu"]
    assert svc.depends_on == ("inventory",)


def test_models_are_frozen():
    entry = ErrorEntry(title="t", severity="low")
    with pytest.raises(ValidationError):
        entry.title = "changed"


def test_missing_required_field_is_rejected():
    with pytest.raises(ValidationError):
        TypeAdapter(ErrorCatalog).validate_python({"ORD-1": {"title": "no severity"}})


def test_error_catalog_keeps_codes_verbatim():
    catalog = TypeAdapter(ErrorCatalog).validate_python({"ord-1": {"title": "t", "severity": "low"}})
    assert list(catalog) == ["ord-1"]


def test_flag_values_keep_their_json_types():
    data = FlagsData.model_validate(
        {
            "flags": [
                {"key": "a", "type": "boolean", "default": False, "environments": {"prod": True}},
                {"key": "b", "type": "number", "default": 0, "environments": {"prod": 2.5}},
                {"key": "c", "type": "string", "default": "x", "variants": ["x", "y"]},
            ]
        }
    )
    a, b, c = data.flags
    assert a.default is False and a.environments["prod"] is True
    assert b.environments["prod"] == 2.5
    assert c.variants == ("x", "y")
    assert a.variants is None


def test_feature_flag_requires_key_and_type():
    with pytest.raises(ValidationError):
        FeatureFlag.model_validate({"key": "a"})


def test_sample_system_round_trips_owners(data_dir):
    system = SystemData.model_validate(json.loads((data_dir / "system.json").read_text(encoding="utf-8")))
    assert system.owners["team-payments"].pager == "payments-oncall"
    assert system.services["inventory"].owners == ()
    assert [e.path for e in system.services["orders"].api][0] == "/v1/orders"
