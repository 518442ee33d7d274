import pytest

from fastfood_mcp.mcp.errors import InvalidParamsError, NotFoundError
from fastfood_mcp.mcp.tools.errors import explain_error, search_errors, suggest_fix

from conftest import write_json


def test_explain_error_is_case_insensitive(stores):
    result = explain_error(stores.errors, "ord-1001", service="orders", trace_id="abc")
    assert result["code"] == "ORD-1001"
    assert result["title"] == "Order total mismatch"
    assert result["severity"] == "high"
    assert result["services"] == ["orders", "payments"]
    assert len(result["likelyCauses"]) == 2
    assert result["recommendedSteps"][0].startswith("Re-price")
    assert result["references"] == [
        {"label": "Pricing runbook", "url": "https://runbooks.example.com/orders/pricing"}
    ]


def test_explain_error_unknown_code_suggests_near_misses(stores):
    with pytest.raises(NotFoundError) as excinfo:
        explain_error(stores.errors, "ORD-1003")

    err = excinfo.value
    assert err.kind == "Error code"
    assert err.suggestions[:2] == ["ORD-1001", "ORD-1002"]
    assert len(err.suggestions) <= 3
    assert str(err).startswith("Error code 'ORD-1003' not found. Did you mean: ORD-1001, ORD-1002")


def test_explain_error_without_close_matches_has_no_hint(stores):
    with pytest.raises(NotFoundError) as excinfo:
        explain_error(stores.errors, "zzzzzzzzzzzzzzzzzzzz")
    assert excinfo.value.suggestions == []
    assert str(excinfo.value) == "Error code 'zzzzzzzzzzzzzzzzzzzz' not found."


def test_blank_code_is_rejected(stores):
    with pytest.raises(InvalidParamsError):
        explain_error(stores.errors, "   ")


def test_search_matches_titles_codes_and_patterns(stores):
    assert [r["code"] for r in search_errors(stores.errors, "payment")] == ["PAY-2001", "PAY-2002"]
    assert [r["code"] for r in search_errors(stores.errors, "timeout")] == ["ORD-1002", "PAY-2002"]
    assert [r["code"] for r in search_errors(stores.errors, "menu-")] == ["MENU-3001"]
    assert search_errors(stores.errors, "PAY-2001") == [
        {"code": "PAY-2001", "title": "Payment authorization declined", "severity": "low"}
    ]


def test_search_tolerates_typos_in_title_words(stores):
    assert [r["code"] for r in search_errors(stores.errors, "mismach")] == ["ORD-1001"]


def test_search_results_are_sorted_and_limited(stores):
    codes = [r["code"] for r in search_errors(stores.errors, "-")]
    assert codes == sorted(codes)
    assert len(codes) == 5

    assert [r["code"] for r in search_errors(stores.errors, "-", limit=2)] == ["MENU-3001", "ORD-1001"]
    assert len(search_errors(stores.errors, "-", limit=0)) == 1
    assert len(search_errors(stores.errors, "-", limit=100, limit_cap=3)) == 3


def test_search_requires_a_query(stores):
    with pytest.raises(InvalidParamsError):
        search_errors(stores.errors, "  ")


def test_suggest_fix_returns_steps(stores):
    assert suggest_fix(stores.errors, "pay-2002") == [
        {"step": "Check the provider status page"},
        {"step": "Fail over to the secondary provider via the payments.failover flag"},
    ]


def test_suggest_fix_unknown_code(stores):
    with pytest.raises(NotFoundError):
        suggest_fix(stores.errors, "PAY-9999")


def test_tools_see_reloaded_catalog(stores, data_dir, notifiers, scheduler):
    write_json(
        data_dir / "errors.json",
        {"KIT-4001": {"title": "Printer offline", "severity": "low", "fix": ["Power cycle the printer"]}},
    )
    notifiers["errors.json"].fire()
    scheduler.run_pending()

    assert suggest_fix(stores.errors, "kit-4001") == [{"step": "Power cycle the printer"}]
    with pytest.raises(NotFoundError):
        explain_error(stores.errors, "ORD-1001")
