import pytest

from leadhub.errors import ValidationError
from leadhub.models.lead import merge_form_data
from leadhub.services.ingestion import (
    build_lead,
    collect_errors,
    extract_dynamic_fields,
    ingest_lead,
    normalize_value,
)

BUDGET_FIELD = {
    "name": "budget",
    "label": "Budget",
    "type": "select",
    "required": True,
    "options": [{"value": "10k_25k", "label": "$10k - $25k"}],
    "order": 0,
}


def _page(**overrides):
    page = {
        "id": 7,
        "status": "active",
        "form_fields": [BUDGET_FIELD],
        "include_default_fields": {"firstName": True, "lastName": True, "email": True},
    }
    page.update(overrides)
    return page


def test_normalize_value_trims_and_drops_blanks():
    assert normalize_value("  hello ") == "hello"
    assert normalize_value("   ") is None
    assert normalize_value(None) is None
    assert normalize_value(42) == "42"
    assert normalize_value(True) == "true"
    assert normalize_value(False) == "false"


def test_normalize_value_keeps_lists():
    assert normalize_value([" a ", "", "b"]) == ["a", "b"]
    assert normalize_value(["", "  "]) is None


def test_extract_dynamic_fields_skips_standard_keys():
    form = {
        "firstName": "Jane",
        "lastName": "Doe",
        "email": "jane@example.com",
        "phone": "5551234",
        "landingPageId": "7",
        "company": " Acme ",
        "budget": "10k_25k",
        "empty": "  ",
    }
    assert extract_dynamic_fields(form) == {"company": "Acme", "budget": "10k_25k"}


def test_missing_required_declared_field_is_reported_by_label():
    form = {"firstName": "J", "lastName": "D", "email": "j@d.com"}
    assert collect_errors(_page(), form) == ["Budget is required"]


def test_collect_errors_reports_every_failure_in_order():
    errors = collect_errors(_page(), {"firstName": "  ", "email": "not-an-email"})
    assert errors == [
        "First name is required",
        "Last name is required",
        "Valid email is required",
        "Budget is required",
    ]


def test_disabled_default_fields_are_not_checked():
    page = _page(form_fields=[], include_default_fields={"firstName": False, "lastName": False})
    assert collect_errors(page, {"email": "a@b.co"}) == []


def test_build_lead_fails_fast_with_first_error():
    with pytest.raises(ValidationError) as exc_info:
        build_lead(_page(), {"firstName": "", "lastName": "D", "email": "j@d.com"})
    assert exc_info.value.message == "First name is required"


def test_build_lead_accepts_undeclared_fields():
    form = {
        "firstName": "Jane",
        "lastName": "Doe",
        "email": "JANE@Example.com",
        "budget": "10k_25k",
        "referral": "friend",
    }
    lead = build_lead(_page(), form, ip_address="10.0.0.1", user_agent="pytest")

    assert lead["email"] == "jane@example.com"
    assert lead["dynamic_fields"] == {"budget": "10k_25k", "referral": "friend"}
    assert lead["landing_page_id"] == 7
    assert lead["ip_address"] == "10.0.0.1"
    assert lead["user_agent"] == "pytest"
    assert lead["status"] == "new"


def test_phone_is_kept_even_when_not_enabled():
    form = {"firstName": "Jane", "lastName": "Doe", "email": "j@d.com", "budget": "x", "phone": " 555 "}
    assert build_lead(_page(), form)["phone"] == "555"


def test_company_is_fixed_only_when_enabled():
    form = {"firstName": "Jane", "lastName": "Doe", "email": "j@d.com", "budget": "x", "company": "Acme"}

    disabled = build_lead(_page(), form)
    assert "company" not in disabled
    assert disabled["dynamic_fields"]["company"] == "Acme"

    toggles = {"firstName": True, "lastName": True, "email": True, "company": True}
    enabled = build_lead(_page(include_default_fields=toggles), form)
    assert enabled["company"] == "Acme"


def test_ingest_lead_rejects_inactive_or_unknown_page(store, cur):
    page = store.add_landing_page(status="inactive")
    payload = {"landingPageId": page["id"], "firstName": "Jane", "lastName": "Doe", "email": "j@d.com"}

    with pytest.raises(ValidationError, match="Invalid landing page"):
        ingest_lead(cur, payload)
    with pytest.raises(ValidationError, match="Invalid landing page"):
        ingest_lead(cur, dict(payload, landingPageId="nope"))
    assert store.leads == {}


def test_ingest_lead_persists_nothing_on_failure(store, cur):
    page = store.add_landing_page(form_fields=[BUDGET_FIELD])
    payload = {"landingPageId": str(page["id"]), "firstName": "J", "lastName": "D", "email": "j@d.com"}

    with pytest.raises(ValidationError, match="First name"):
        ingest_lead(cur, payload)
    assert store.leads == {}


def test_ingest_lead_stores_dynamic_fields(store, cur):
    page = store.add_landing_page(form_fields=[BUDGET_FIELD])
    payload = {
        "landingPageId": page["id"],
        "firstName": "Jane",
        "lastName": "Doe",
        "email": "j@d.com",
        "budget": "10k_25k",
        "referral": "friend",
    }

    lead = ingest_lead(cur, payload, ip_address="1.2.3.4")

    assert lead["dynamic_fields"] == {"budget": "10k_25k", "referral": "friend"}
    assert lead["landing_page_name"] == page["name"]
    assert len(store.leads) == 1


def test_merge_form_data_prefers_fixed_attributes():
    row = {"first_name": "Jane", "last_name": None, "email": "j@d.com"}
    merged = merge_form_data(row, {"firstName": "ignored", "lastName": "Kept", "budget": "x"})

    assert merged["firstName"] == "Jane"
    assert merged["lastName"] == "Kept"
    assert merged["budget"] == "x"
    assert merged["email"] == "j@d.com"
