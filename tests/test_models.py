import pytest
from pydantic import ValidationError

from leadhub.errors import error_message
from leadhub.models.access import AccessRequestCreate, AccessRequestReject
from leadhub.models.landing_page import LandingPageCreate
from leadhub.models.lead import LeadDetailsUpdate, LeadStatusUpdate
from leadhub.models.user import RegisterRequest, UpdateSubAdminRequest

REGISTRATION = {
    "name": "Alice Agent",
    "email": "a@b.com",
    "password": "secret1",
    "companyName": "Acme",
    "phone": "5551234567",
}


def messages(exc_info):
    return {err["loc"][0]: error_message(err) for err in exc_info.value.errors()}


def test_register_normalizes_email_and_strips_text():
    request = RegisterRequest(**dict(REGISTRATION, name="  Alice  ", email=" Alice@B.COM "))
    assert request.name == "Alice"
    assert request.email == "alice@b.com"
    assert request.password == "secret1"


def test_register_reports_readable_messages():
    with pytest.raises(ValidationError) as exc_info:
        RegisterRequest(name="A", email="broken", password="12345", companyName="A", phone="12")

    assert messages(exc_info) == {
        "name": "Name must be at least 2 characters",
        "email": "Please provide a valid email",
        "password": "Password must be at least 6 characters",
        "companyName": "Company name must be at least 2 characters",
        "phone": "Please provide a valid phone number",
    }


def test_email_must_be_a_string():
    with pytest.raises(ValidationError) as exc_info:
        RegisterRequest(**dict(REGISTRATION, email=123))
    assert messages(exc_info) == {"email": "Please provide a valid email"}


def test_passwords_keep_surrounding_whitespace():
    assert RegisterRequest(**dict(REGISTRATION, password=" pass1 ")).password == " pass1 "


def test_landing_page_url_is_validated_but_kept_verbatim():
    page = LandingPageCreate(name="X", url=" https://x.com ")
    assert page.url == "https://x.com"
    assert page.status == "active"

    with pytest.raises(ValidationError) as exc_info:
        LandingPageCreate(name="  ", url="ftp://x.com", status="paused")
    assert set(messages(exc_info)) == {"name", "url", "status"}
    assert messages(exc_info)["url"] == "Please provide a valid URL"


def test_lead_status_is_restricted():
    assert LeadStatusUpdate(status="lost").status == "lost"
    with pytest.raises(ValidationError):
        LeadStatusUpdate(status="archived")


def test_lead_details_reject_blank_names():
    assert LeadDetailsUpdate(email="NEW@example.com").email == "new@example.com"
    with pytest.raises(ValidationError) as exc_info:
        LeadDetailsUpdate(firstName=" ")
    assert messages(exc_info) == {"firstName": "First name cannot be empty"}


def test_access_request_text_limits():
    with pytest.raises(ValidationError) as exc_info:
        AccessRequestCreate(landingPageId=1, message="x" * 501)
    assert messages(exc_info) == {"message": "Message must be less than 500 characters"}

    with pytest.raises(ValidationError) as exc_info:
        AccessRequestReject(reason="no")
    assert messages(exc_info) == {"reason": "Rejection reason must be at least 5 characters"}


def test_sub_admin_update_treats_blank_assignment_as_clear():
    update = UpdateSubAdminRequest(landingPageId="")
    assert update.landing_page_id is None
    assert "landing_page_id" in update.model_fields_set

    assert "landing_page_id" not in UpdateSubAdminRequest(name="Sam").model_fields_set
    assert UpdateSubAdminRequest(landingPageId="7").landing_page_id == 7
