import itertools
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from leadhub.config import settings
from leadhub.db import access_requests as requests_db
from leadhub.db import admin_access as access_db
from leadhub.db import landing_pages as landing_pages_db
from leadhub.db import leads as leads_db
from leadhub.db import users as users_db
from leadhub.db.postgres import get_db
from leadhub.models.common import SUB_ADMIN, SUPER_ADMIN
from leadhub.utils.security import create_token, hash_password

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


class FakeStore:
    """In-memory stand-in for the ``leadhub.db`` query functions.

    Rows come back shaped like the SQL joins (``landing_page_name``,
    ``sub_admin_email`` ...) so services and models see what Postgres returns.
    """

    def __init__(self):
        self.users = {}
        self.landing_pages = {}
        self.access = {}
        self.requests = {}
        self.leads = {}
        self.lead_queries = 0
        self._ids = itertools.count(1)
        self._ticks = itertools.count(1)

    def _next_id(self):
        return next(self._ids)

    def _stamp(self):
        return BASE_TIME + timedelta(minutes=next(self._ticks))

    def _user_ref(self, row, prefix, user_id):
        user = self.users.get(user_id) if user_id is not None else None
        row[f"{prefix}_name"] = user["name"] if user else None
        row[f"{prefix}_email"] = user["email"] if user else None
        row[f"{prefix}_company_name"] = user.get("company_name") if user else None

    def _page_ref(self, row, landing_page_id):
        page = self.landing_pages.get(landing_page_id)
        row["landing_page_name"] = page["name"] if page else None
        row["landing_page_url"] = page["url"] if page else None
        row["landing_page_description"] = page["description"] if page else None
        row["landing_page_status"] = page["status"] if page else None

    @staticmethod
    def _paginate(rows, limit, offset):
        if limit is None:
            return rows[offset:]
        return rows[offset:offset + limit]

    # --- users ---------------------------------------------------------------------------

    def get_user(self, cur, user_id):
        user = self.users.get(user_id)
        return dict(user) if user else None

    def get_user_by_email(self, cur, email):
        for user in self.users.values():
            if user["email"] == email.lower():
                return dict(user)
        return None

    def create_user(self, cur, *, name, email, password_hash, role, status,
                    company_name=None, phone=None, approved_by=None, approved_at=None):
        user_id = self._next_id()
        stamp = self._stamp()
        self.users[user_id] = {
            "id": user_id,
            "name": name,
            "email": email.lower(),
            "password_hash": password_hash,
            "role": role,
            "status": status,
            "company_name": company_name,
            "phone": phone,
            "approved_by": approved_by,
            "approved_at": approved_at,
            "rejected_by": None,
            "rejected_at": None,
            "rejection_reason": None,
            "created_at": stamp,
            "updated_at": stamp,
        }
        return dict(self.users[user_id])

    def update_user(self, cur, user_id, updates):
        allowed = {k: v for k, v in updates.items() if k in users_db.USER_FIELDS}
        self.users[user_id].update(allowed)
        return dict(self.users[user_id])

    def delete_user(self, cur, user_id):
        return self.users.pop(user_id, None) is not None

    def list_users(self, cur, *, role=None, status=None, search=None, since=None,
                   until=None, limit=None, offset=0):
        rows = [u for u in self.users.values() if not role or u["role"] == role]
        if status:
            rows = [u for u in rows if u["status"] == status]
        if search:
            needle = search.lower()
            rows = [
                u for u in rows
                if any(needle in (u.get(key) or "").lower() for key in ("name", "email", "company_name"))
            ]
        if since:
            rows = [u for u in rows if u["created_at"] >= since]
        if until:
            rows = [u for u in rows if u["created_at"] <= until]
        rows.sort(key=lambda u: u["created_at"], reverse=True)
        return [dict(u) for u in self._paginate(rows, limit, offset)], len(rows)

    # --- landing pages -------------------------------------------------------------------

    def _landing_page_row(self, page):
        row = dict(page)
        creator = self.users.get(page["created_by"])
        row["created_by_name"] = creator["name"] if creator else None
        row["created_by_email"] = creator["email"] if creator else None
        return row

    def get_landing_page(self, cur, landing_page_id):
        page = self.landing_pages.get(landing_page_id)
        return self._landing_page_row(page) if page else None

    def find_conflicting_landing_page(self, cur, *, name=None, url=None, exclude_id=None):
        for page in self.landing_pages.values():
            if page["id"] == exclude_id:
                continue
            if (name and page["name"] == name) or (url and page["url"] == url):
                return self._landing_page_row(page)
        return None

    def create_landing_page(self, cur, *, name, url, description, status, form_fields,
                            include_default_fields, created_by):
        page_id = self._next_id()
        stamp = self._stamp()
        self.landing_pages[page_id] = {
            "id": page_id,
            "name": name,
            "url": url,
            "description": description,
            "status": status,
            "form_fields": form_fields,
            "include_default_fields": include_default_fields,
            "created_by": created_by,
            "created_at": stamp,
            "updated_at": stamp,
        }
        return self.get_landing_page(cur, page_id)

    def update_landing_page(self, cur, landing_page_id, updates):
        allowed = {k: v for k, v in updates.items() if k in landing_pages_db.LANDING_PAGE_FIELDS}
        self.landing_pages[landing_page_id].update(allowed)
        return self.get_landing_page(cur, landing_page_id)

    def delete_landing_page(self, cur, landing_page_id):
        return self.landing_pages.pop(landing_page_id, None) is not None

    def list_landing_pages(self, cur, *, status=None, search=None, limit=None, offset=0):
        rows = list(self.landing_pages.values())
        if status:
            rows = [p for p in rows if p["status"] == status]
        if search:
            rows = [p for p in rows if search.lower() in p["name"].lower()]
        rows.sort(key=lambda p: p["created_at"], reverse=True)
        page = self._paginate(rows, limit, offset)
        return [self._landing_page_row(p) for p in page], len(rows)

    # --- admin access --------------------------------------------------------------------

    def _access_row(self, record):
        row = dict(record)
        self._user_ref(row, "sub_admin", record["sub_admin_id"])
        self._page_ref(row, record["landing_page_id"])
        self._user_ref(row, "granted_by", record["granted_by"])
        self._user_ref(row, "revoked_by", record["revoked_by"])
        return row

    def get_access(self, cur, access_id):
        record = self.access.get(access_id)
        return self._access_row(record) if record else None

    def find_access(self, cur, sub_admin_id, landing_page_id):
        for record in self.access.values():
            if record["sub_admin_id"] == sub_admin_id and record["landing_page_id"] == landing_page_id:
                return self._access_row(record)
        return None

    def create_access(self, cur, *, sub_admin_id, landing_page_id, granted_by):
        if self.find_access(cur, sub_admin_id, landing_page_id):
            raise AssertionError("duplicate admin_access row")
        access_id = self._next_id()
        self.access[access_id] = {
            "id": access_id,
            "sub_admin_id": sub_admin_id,
            "landing_page_id": landing_page_id,
            "granted_by": granted_by,
            "status": "active",
            "granted_at": self._stamp(),
            "revoked_at": None,
            "revoked_by": None,
        }
        return self.get_access(cur, access_id)

    def update_access(self, cur, access_id, updates):
        allowed = {k: v for k, v in updates.items() if k in access_db.ACCESS_FIELDS}
        self.access[access_id].update(allowed)
        return self.get_access(cur, access_id)

    def list_access(self, cur, *, sub_admin_id=None, landing_page_id=None, status=None):
        rows = list(self.access.values())
        if sub_admin_id is not None:
            rows = [r for r in rows if r["sub_admin_id"] == sub_admin_id]
        if landing_page_id is not None:
            rows = [r for r in rows if r["landing_page_id"] == landing_page_id]
        if status:
            rows = [r for r in rows if r["status"] == status]
        rows.sort(key=lambda r: r["granted_at"], reverse=True)
        return [self._access_row(r) for r in rows]

    def active_landing_page_ids(self, cur, sub_admin_id):
        return [
            r["landing_page_id"] for r in self.access.values()
            if r["sub_admin_id"] == sub_admin_id and r["status"] == "active"
        ]

    def all_landing_page_ids(self, cur, sub_admin_id):
        return sorted({
            r["landing_page_id"] for r in self.access.values() if r["sub_admin_id"] == sub_admin_id
        })

    def deactivate_access_for_sub_admin(self, cur, sub_admin_id):
        changed = 0
        for record in self.access.values():
            if record["sub_admin_id"] == sub_admin_id and record["status"] == "active":
                record["status"] = "inactive"
                changed += 1
        return changed

    def delete_access_for_sub_admin(self, cur, sub_admin_id):
        doomed = [k for k, r in self.access.items() if r["sub_admin_id"] == sub_admin_id]
        for key in doomed:
            del self.access[key]
        return len(doomed)

    # --- access requests -----------------------------------------------------------------

    def _request_row(self, record):
        row = dict(record)
        self._user_ref(row, "sub_admin", record["sub_admin_id"])
        self._page_ref(row, record["landing_page_id"])
        self._user_ref(row, "approved_by", record["approved_by"])
        self._user_ref(row, "rejected_by", record["rejected_by"])
        return row

    def get_access_request(self, cur, request_id):
        record = self.requests.get(request_id)
        return self._request_row(record) if record else None

    def find_open_request(self, cur, sub_admin_id, landing_page_id):
        for record in sorted(self.requests.values(), key=lambda r: r["created_at"], reverse=True):
            if (
                record["sub_admin_id"] == sub_admin_id
                and record["landing_page_id"] == landing_page_id
                and record["status"] in ("pending", "approved")
            ):
                return self._request_row(record)
        return None

    def create_access_request(self, cur, *, sub_admin_id, landing_page_id, message):
        request_id = self._next_id()
        stamp = self._stamp()
        self.requests[request_id] = {
            "id": request_id,
            "sub_admin_id": sub_admin_id,
            "landing_page_id": landing_page_id,
            "status": "pending",
            "message": message,
            "approved_by": None,
            "approved_at": None,
            "rejected_by": None,
            "rejected_at": None,
            "rejection_reason": None,
            "created_at": stamp,
            "updated_at": stamp,
        }
        return self.get_access_request(cur, request_id)

    def update_access_request(self, cur, request_id, updates):
        allowed = {k: v for k, v in updates.items() if k in requests_db.REQUEST_FIELDS}
        self.requests[request_id].update(allowed)
        return self.get_access_request(cur, request_id)

    def delete_access_request(self, cur, request_id):
        return self.requests.pop(request_id, None) is not None

    def list_access_requests(self, cur, *, status=None, sub_admin_id=None, limit=None, offset=0):
        rows = list(self.requests.values())
        if status:
            rows = [r for r in rows if r["status"] == status]
        if sub_admin_id is not None:
            rows = [r for r in rows if r["sub_admin_id"] == sub_admin_id]
        rows.sort(key=lambda r: r["created_at"], reverse=True)
        return [self._request_row(r) for r in self._paginate(rows, limit, offset)], len(rows)

    def requests_count_by_status(self, cur):
        counts = {}
        for record in self.requests.values():
            counts[record["status"]] = counts.get(record["status"], 0) + 1
        return counts

    # --- leads ---------------------------------------------------------------------------

    def _lead_row(self, record):
        row = dict(record)
        page = self.landing_pages.get(record["landing_page_id"])
        row["landing_page_name"] = page["name"] if page else None
        row["landing_page_url"] = page["url"] if page else None
        return row

    def _matching_leads(self, filters):
        rows = list(self.leads.values())
        if filters.landing_page_ids is not None:
            rows = [r for r in rows if r["landing_page_id"] in filters.landing_page_ids]
        if filters.status:
            rows = [r for r in rows if r["status"] == filters.status]
        if filters.search:
            needle = filters.search.lower()
            rows = [
                r for r in rows
                if any(needle in (r.get(key) or "").lower() for key in ("first_name", "last_name", "email"))
            ]
        if filters.start_date:
            rows = [r for r in rows if r["created_at"] >= filters.start_date]
        if filters.end_date:
            rows = [r for r in rows if r["created_at"] <= filters.end_date]
        rows.sort(key=lambda r: (r["created_at"], r["id"]), reverse=True)
        return rows

    def create_lead(self, cur, lead):
        lead_id = self._next_id()
        stamp = self._stamp()
        record = {
            "id": lead_id,
            "first_name": lead.get("first_name"),
            "last_name": lead.get("last_name"),
            "email": lead.get("email"),
            "phone": lead.get("phone"),
            "company": lead.get("company"),
            "message": lead.get("message"),
            "dynamic_fields": dict(lead.get("dynamic_fields") or {}),
            "landing_page_id": lead["landing_page_id"],
            "status": lead.get("status", "new"),
            "source": lead.get("source", "landing_page"),
            "ip_address": lead.get("ip_address"),
            "user_agent": lead.get("user_agent"),
            "created_at": stamp,
            "updated_at": stamp,
        }
        self.leads[lead_id] = record
        return self._lead_row(record)

    def get_lead(self, cur, lead_id):
        record = self.leads.get(lead_id)
        return self._lead_row(record) if record else None

    def update_lead(self, cur, lead_id, updates):
        allowed = {k: v for k, v in updates.items() if k in leads_db.LEAD_FIELDS}
        self.leads[lead_id].update(allowed)
        return self.get_lead(cur, lead_id)

    def delete_lead(self, cur, lead_id):
        return self.leads.pop(lead_id, None) is not None

    def count_leads(self, cur, landing_page_ids):
        return sum(1 for r in self.leads.values() if r["landing_page_id"] in landing_page_ids)

    def list_leads(self, cur, filters, limit=None, offset=0):
        self.lead_queries += 1
        rows = self._matching_leads(filters)
        return [self._lead_row(r) for r in self._paginate(rows, limit, offset)], len(rows)

    def leads_count_by_status(self, cur, filters):
        self.lead_queries += 1
        counts = {}
        for record in self._matching_leads(filters):
            counts[record["status"]] = counts.get(record["status"], 0) + 1
        return counts

    def count_by_day(self, cur, filters, since):
        self.lead_queries += 1
        days = {}
        for record in self._matching_leads(filters):
            if record["created_at"] >= since:
                day = record["created_at"].strftime("%Y-%m-%d")
                days[day] = days.get(day, 0) + 1
        return [{"date": day, "count": days[day]} for day in sorted(days)]

    # --- wiring --------------------------------------------------------------------------

    def install(self, monkeypatch):
        bindings = {
            users_db: [
                "get_user", "get_user_by_email", "create_user", "update_user",
                "delete_user", "list_users",
            ],
            landing_pages_db: [
                "get_landing_page", "find_conflicting_landing_page", "create_landing_page",
                "update_landing_page", "delete_landing_page", "list_landing_pages",
            ],
            access_db: [
                "get_access", "find_access", "create_access", "update_access", "list_access",
                "active_landing_page_ids", "all_landing_page_ids",
                "deactivate_access_for_sub_admin", "delete_access_for_sub_admin",
            ],
            requests_db: [
                "get_access_request", "find_open_request", "create_access_request",
                "update_access_request", "delete_access_request", "list_access_requests",
            ],
            leads_db: [
                "create_lead", "get_lead", "update_lead", "delete_lead", "count_leads",
                "list_leads", "count_by_day",
            ],
        }
        for module, names in bindings.items():
            for name in names:
                monkeypatch.setattr(module, name, getattr(self, name))
        monkeypatch.setattr(requests_db, "count_by_status", self.requests_count_by_status)
        monkeypatch.setattr(leads_db, "count_by_status", self.leads_count_by_status)

    # --- seed helpers --------------------------------------------------------------------

    def add_user(self, *, role=SUB_ADMIN, status="approved", email=None, password="secret1",
                 name="Test User", company_name="Acme Corp"):
        email = email or f"user{len(self.users) + 1}@example.com"
        return self.create_user(
            None,
            name=name,
            email=email,
            password_hash=hash_password(password),
            role=role,
            status=status,
            company_name=company_name,
        )

    def add_landing_page(self, *, name=None, url=None, status="active", form_fields=None,
                         include_default_fields=None, created_by=None):
        number = len(self.landing_pages) + 1
        return self.create_landing_page(
            None,
            name=name or f"Page {number}",
            url=url or f"https://page{number}.example.com",
            description=None,
            status=status,
            form_fields=form_fields or [],
            include_default_fields=include_default_fields
            or {"firstName": True, "lastName": True, "email": True},
            created_by=created_by,
        )

    def add_lead(self, landing_page_id, **fields):
        lead = {"first_name": "Jane", "last_name": "Doe", "email": "jane@example.com"}
        lead.update(fields)
        lead["landing_page_id"] = landing_page_id
        return self.create_lead(None, lead)

    def grant(self, sub_admin_id, landing_page_id, granted_by=None):
        return self.create_access(
            None, sub_admin_id=sub_admin_id, landing_page_id=landing_page_id, granted_by=granted_by
        )


@pytest.fixture
def store(monkeypatch):
    fake = FakeStore()
    fake.install(monkeypatch)
    return fake


@pytest.fixture
def cur():
    # services pass the cursor straight through to the (patched) db functions
    return object()


@pytest.fixture
def super_admin(store):
    return store.add_user(role=SUPER_ADMIN, email="root@example.com", name="Root Admin")


@pytest.fixture
def sub_admin(store):
    return store.add_user(email="sub@example.com", name="Sam Sub")


@pytest.fixture
def client(store, monkeypatch):
    from leadhub.main import app

    monkeypatch.setattr(settings, "init_schema_on_startup", False)

    def fake_db():
        yield object()

    app.dependency_overrides[get_db] = fake_db
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()


def auth_header(user):
    return {"Authorization": f"Bearer {create_token(user)}"}


@pytest.fixture
def auth_headers():
    return auth_header
