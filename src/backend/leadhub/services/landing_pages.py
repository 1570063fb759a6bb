"""Landing page configuration and its dynamic form schema."""

from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from leadhub import policy
from leadhub.db import landing_pages as landing_pages_db
from leadhub.db import leads as leads_db
from leadhub.errors import Conflict, NotFound, ValidationError
from leadhub.models.landing_page import (
    DEFAULT_FIELD_NAMES,
    FIELD_TYPES,
    FormConfigOut,
    FormFieldDefinition,
    default_toggles,
    sorted_fields,
)
from leadhub.models.lead import LeadFilters
from leadhub.services import ingestion
from leadhub.services.leads import stats_window_start, summarize_statuses
from leadhub.utils.logger import get_logger

logger = get_logger(__name__)

DUPLICATE_LANDING_PAGE = "Landing page with this name or URL already exists"
REQUIRED_FIELD_KEYS = ("name", "label", "type")


def _option(option: Any) -> Dict[str, str]:
    if isinstance(option, dict):
        value = str(option.get("value", ""))
        return {"value": value, "label": str(option.get("label", value))}
    return {"value": str(option), "label": str(option)}


def normalize_form_fields(raw_fields: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Validate submitted field definitions and return them in storage shape.

    Each entry needs ``name``, ``label`` and ``type``; a missing ``order``
    becomes the entry's index. The whole list is rejected on the first bad
    entry.
    """
    normalized: List[Dict[str, Any]] = []
    seen = set()
    for index, raw in enumerate(raw_fields):
        if not isinstance(raw, dict) or not all(
            isinstance(raw.get(key), str) and raw[key].strip() for key in REQUIRED_FIELD_KEYS
        ):
            raise ValidationError(
                f"Form field at index {index} is missing required properties (name, label, type)"
            )
        if raw["type"] not in FIELD_TYPES:
            raise ValidationError(f"Invalid type for form field {raw['name']}: {raw['type']}")
        if raw["name"] in seen:
            raise ValidationError(f"Duplicate form field name: {raw['name']}")
        seen.add(raw["name"])

        entry = dict(raw)
        if entry.get("order") is None:
            entry["order"] = index
        entry["options"] = [_option(option) for option in entry.get("options") or []]
        try:
            field = FormFieldDefinition.model_validate(entry)
        except PydanticValidationError as exc:
            raise ValidationError(
                f"Form field at index {index} is invalid",
                errors=[
                    {"field": ".".join(map(str, err["loc"])), "message": err["msg"]}
                    for err in exc.errors()
                ],
            )
        normalized.append(field.to_json(exclude_none=True))
    return normalized


def normalize_default_fields(raw: Dict[str, Any]) -> Dict[str, bool]:
    for key in raw:
        if key not in DEFAULT_FIELD_NAMES:
            raise ValidationError(f"Invalid default field: {key}")
    return default_toggles(raw)


def _ensure_unique(
    cur, *, name: Optional[str], url: Optional[str], exclude_id: Optional[int] = None
) -> None:
    conflict = landing_pages_db.find_conflicting_landing_page(
        cur, name=name, url=url, exclude_id=exclude_id
    )
    if conflict:
        raise Conflict(DUPLICATE_LANDING_PAGE)


def create_landing_page(
    cur,
    creator: Dict[str, Any],
    *,
    name: str,
    url: str,
    description: Optional[str] = None,
    status: str = "active",
    form_fields: Optional[List[Dict[str, Any]]] = None,
    include_default_fields: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    fields = normalize_form_fields(form_fields or [])
    toggles = normalize_default_fields(include_default_fields or {})
    _ensure_unique(cur, name=name, url=url)

    return landing_pages_db.create_landing_page(
        cur,
        name=name,
        url=url,
        description=description or None,
        status=status,
        form_fields=fields,
        include_default_fields=toggles,
        created_by=creator["id"],
    )


def list_landing_pages(
    cur,
    *,
    status: Optional[str] = None,
    search: Optional[str] = None,
    limit: Optional[int] = None,
    offset: int = 0,
) -> Tuple[List[Dict[str, Any]], int]:
    return landing_pages_db.list_landing_pages(
        cur, status=status, search=search, limit=limit, offset=offset
    )


def get_landing_page(cur, landing_page_id: int) -> Dict[str, Any]:
    landing_page = landing_pages_db.get_landing_page(cur, landing_page_id)
    if not landing_page:
        raise NotFound("Landing page not found")
    return landing_page


def update_landing_page(cur, landing_page_id: int, changes: Dict[str, Any]) -> Dict[str, Any]:
    """Apply the keys present in ``changes``; absent keys are left alone."""
    get_landing_page(cur, landing_page_id)

    name, url = changes.get("name"), changes.get("url")
    updates: Dict[str, Any] = {}
    if name is not None:
        updates["name"] = name
    if url is not None:
        updates["url"] = url
    if "description" in changes:
        updates["description"] = changes["description"] or None
    if changes.get("status") is not None:
        updates["status"] = changes["status"]
    if changes.get("form_fields") is not None:
        updates["form_fields"] = normalize_form_fields(changes["form_fields"])
    if changes.get("include_default_fields") is not None:
        updates["include_default_fields"] = normalize_default_fields(
            changes["include_default_fields"]
        )

    if name or url:
        _ensure_unique(cur, name=name, url=url, exclude_id=landing_page_id)
    return landing_pages_db.update_landing_page(cur, landing_page_id, updates)


def update_form_fields(
    cur,
    landing_page_id: int,
    form_fields: List[Dict[str, Any]],
    include_default_fields: Dict[str, Any],
) -> Dict[str, Any]:
    get_landing_page(cur, landing_page_id)
    updates = {
        "form_fields": normalize_form_fields(form_fields),
        "include_default_fields": normalize_default_fields(include_default_fields),
    }
    return landing_pages_db.update_landing_page(cur, landing_page_id, updates)


def delete_landing_page(cur, landing_page_id: int) -> None:
    get_landing_page(cur, landing_page_id)
    lead_count = leads_db.count_leads(cur, [landing_page_id])
    if lead_count > 0:
        raise Conflict(
            f"Cannot delete landing page. There are {lead_count} leads associated with it."
        )
    landing_pages_db.delete_landing_page(cur, landing_page_id)
    logger.info("Deleted landing page id=%s", landing_page_id)


def form_config(cur, landing_page_id: int) -> FormConfigOut:
    landing_page = get_landing_page(cur, landing_page_id)
    return FormConfigOut(
        name=landing_page["name"],
        form_fields=sorted_fields(landing_page.get("form_fields")),
        include_default_fields=default_toggles(landing_page.get("include_default_fields")),
    )


def validate_submission(
    cur, landing_page_id: int, form_data: Optional[Dict[str, Any]]
) -> Dict[str, Any]:
    """Dry-run the ingestion checks against ``form_data`` without storing a lead.

    Inactive pages are accepted so a form can be checked before going live.
    """
    landing_page = get_landing_page(cur, landing_page_id)
    form_data = form_data or {}
    errors = ingestion.collect_errors(landing_page, form_data)
    if errors:
        raise ValidationError("Form validation failed", errors=errors)
    config = form_config(cur, landing_page_id).to_json(exclude={"name"})
    return {"formData": form_data, "formConfig": config}


def landing_page_stats(cur, user: Dict[str, Any], landing_page_id: int) -> Dict[str, Any]:
    landing_page = get_landing_page(cur, landing_page_id)
    policy.ensure_landing_page_access(
        cur, user, landing_page_id, "Not authorized to access this landing page"
    )
    filters = LeadFilters(landing_page_ids=[landing_page_id])
    result: Dict[str, Any] = {
        "landingPage": {
            "id": landing_page["id"],
            "name": landing_page["name"],
            "url": landing_page["url"],
        }
    }
    result.update(summarize_statuses(leads_db.count_by_status(cur, filters)))
    result["leadsByDate"] = leads_db.count_by_day(cur, filters, stats_window_start())
    return result
