"""Lead ingestion: validate a public submission against its landing page.

Validation is driven by the landing page's live configuration (default
field toggles plus declared ``formFields``) but is not closed over it: keys
the page never declared are still stored in ``dynamic_fields``. Pages change
their forms over time and older clients keep posting fields that are no
longer listed, so those submissions must keep being accepted.
"""

import json
import re
from typing import Any, Dict, List, Mapping, Optional

from leadhub.db import landing_pages as landing_pages_db
from leadhub.db import leads as leads_db
from leadhub.errors import ValidationError
from leadhub.models.landing_page import default_toggles, sorted_fields
from leadhub.models.lead import DynamicValue
from leadhub.utils.logger import get_logger

logger = get_logger(__name__)

# local@domain.tld, the shape public forms are held to
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# Submitted keys that never land in dynamic_fields.
STANDARD_FIELDS = frozenset({"firstName", "lastName", "email", "phone", "landingPageId"})

INVALID_LANDING_PAGE = "Invalid landing page"


def normalize_value(value: Any) -> Optional[DynamicValue]:
    """Trimmed string form of a submitted value, or None when it is blank.

    Lists (multi-select, checkbox groups) keep their shape as lists of
    trimmed non-blank strings.
    """
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        items = [normalize_value(item) for item in value]
        flat = [item for item in items if isinstance(item, str)]
        return flat or None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, dict):
        text = json.dumps(value, sort_keys=True)
    else:
        text = str(value).strip()
    return text or None


def _text(value: Any) -> str:
    normalized = normalize_value(value)
    return normalized if isinstance(normalized, str) else ""


def collect_errors(landing_page: Mapping[str, Any], form_data: Mapping[str, Any]) -> List[str]:
    """Every validation failure for ``form_data``, in a stable order."""
    errors: List[str] = []
    toggles = default_toggles(landing_page.get("include_default_fields"))

    if toggles["firstName"] and not _text(form_data.get("firstName")):
        errors.append("First name is required")
    if toggles["lastName"] and not _text(form_data.get("lastName")):
        errors.append("Last name is required")
    if toggles["email"] and not EMAIL_RE.match(_text(form_data.get("email"))):
        errors.append("Valid email is required")

    for field in sorted_fields(landing_page.get("form_fields")):
        if field.required and normalize_value(form_data.get(field.name)) is None:
            errors.append(f"{field.label} is required")
    return errors


def extract_dynamic_fields(form_data: Mapping[str, Any]) -> Dict[str, DynamicValue]:
    dynamic: Dict[str, DynamicValue] = {}
    for key, value in form_data.items():
        if key in STANDARD_FIELDS:
            continue
        normalized = normalize_value(value)
        if normalized is None:
            continue
        dynamic[key] = normalized
    return dynamic


def build_lead(
    landing_page: Mapping[str, Any],
    form_data: Mapping[str, Any],
    *,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> Dict[str, Any]:
    """Validate ``form_data`` and shape it into a lead row; nothing is stored."""
    errors = collect_errors(landing_page, form_data)
    if errors:
        raise ValidationError(errors[0])

    toggles = default_toggles(landing_page.get("include_default_fields"))
    lead: Dict[str, Any] = {
        "landing_page_id": landing_page["id"],
        "status": "new",
        "source": "landing_page",
        "ip_address": ip_address,
        "user_agent": user_agent,
        "dynamic_fields": extract_dynamic_fields(form_data),
    }
    if toggles["firstName"]:
        lead["first_name"] = _text(form_data.get("firstName"))
    if toggles["lastName"]:
        lead["last_name"] = _text(form_data.get("lastName"))
    if toggles["email"]:
        lead["email"] = _text(form_data.get("email")).lower()
    # phone is kept whenever submitted, toggle or not
    phone = _text(form_data.get("phone"))
    if phone:
        lead["phone"] = phone
    for key in ("company", "message"):
        value = _text(form_data.get(key))
        if toggles[key] and value:
            lead[key] = value
    return lead


def _parse_id(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def load_active_landing_page(cur, landing_page_id: Any) -> Dict[str, Any]:
    parsed = _parse_id(landing_page_id)
    landing_page = landing_pages_db.get_landing_page(cur, parsed) if parsed else None
    if not landing_page or landing_page["status"] != "active":
        raise ValidationError(INVALID_LANDING_PAGE)
    return landing_page


def ingest_lead(
    cur,
    payload: Mapping[str, Any],
    *,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> Dict[str, Any]:
    landing_page = load_active_landing_page(cur, payload.get("landingPageId"))
    try:
        lead = build_lead(
            landing_page, payload, ip_address=ip_address, user_agent=user_agent
        )
    except ValidationError as exc:
        logger.info(
            "Rejected submission for landing page id=%s: %s", landing_page["id"], exc.message
        )
        raise
    return leads_db.create_lead(cur, lead)
