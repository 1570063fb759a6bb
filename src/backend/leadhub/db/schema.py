from leadhub.db.postgres import get_cursor
from leadhub.utils.logger import get_logger

logger = get_logger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS users (
    id SERIAL PRIMARY KEY,
    name TEXT NOT NULL,
    email TEXT NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    role TEXT NOT NULL DEFAULT 'sub_admin',
    status TEXT NOT NULL DEFAULT 'pending',
    company_name TEXT,
    phone TEXT,
    approved_by INTEGER REFERENCES users (id) ON DELETE SET NULL,
    approved_at TIMESTAMPTZ,
    rejected_by INTEGER REFERENCES users (id) ON DELETE SET NULL,
    rejected_at TIMESTAMPTZ,
    rejection_reason TEXT,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS users_role_status_idx ON users (role, status);

CREATE TABLE IF NOT EXISTS landing_pages (
    id SERIAL PRIMARY KEY,
    name TEXT NOT NULL UNIQUE,
    url TEXT NOT NULL UNIQUE,
    description TEXT,
    status TEXT NOT NULL DEFAULT 'active',
    form_fields JSONB NOT NULL DEFAULT '[]'::jsonb,
    include_default_fields JSONB NOT NULL DEFAULT '{}'::jsonb,
    created_by INTEGER REFERENCES users (id) ON DELETE SET NULL,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE TABLE IF NOT EXISTS admin_access (
    id SERIAL PRIMARY KEY,
    sub_admin_id INTEGER NOT NULL REFERENCES users (id) ON DELETE CASCADE,
    landing_page_id INTEGER NOT NULL REFERENCES landing_pages (id) ON DELETE CASCADE,
    granted_by INTEGER REFERENCES users (id) ON DELETE SET NULL,
    status TEXT NOT NULL DEFAULT 'active',
    granted_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    revoked_at TIMESTAMPTZ,
    revoked_by INTEGER REFERENCES users (id) ON DELETE SET NULL,
    UNIQUE (sub_admin_id, landing_page_id)
);

CREATE INDEX IF NOT EXISTS admin_access_sub_admin_idx ON admin_access (sub_admin_id, status);
CREATE INDEX IF NOT EXISTS admin_access_landing_page_idx ON admin_access (landing_page_id, status);

CREATE TABLE IF NOT EXISTS access_requests (
    id SERIAL PRIMARY KEY,
    sub_admin_id INTEGER NOT NULL REFERENCES users (id) ON DELETE CASCADE,
    landing_page_id INTEGER NOT NULL REFERENCES landing_pages (id) ON DELETE CASCADE,
    status TEXT NOT NULL DEFAULT 'pending',
    message TEXT,
    approved_by INTEGER REFERENCES users (id) ON DELETE SET NULL,
    approved_at TIMESTAMPTZ,
    rejected_by INTEGER REFERENCES users (id) ON DELETE SET NULL,
    rejected_at TIMESTAMPTZ,
    rejection_reason TEXT,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS access_requests_pair_idx ON access_requests (sub_admin_id, landing_page_id);
CREATE INDEX IF NOT EXISTS access_requests_status_idx ON access_requests (status);

CREATE TABLE IF NOT EXISTS leads (
    id SERIAL PRIMARY KEY,
    first_name TEXT,
    last_name TEXT,
    email TEXT,
    phone TEXT,
    company TEXT,
    message TEXT,
    dynamic_fields JSONB NOT NULL DEFAULT '{}'::jsonb,
    landing_page_id INTEGER NOT NULL REFERENCES landing_pages (id),
    status TEXT NOT NULL DEFAULT 'new',
    source TEXT NOT NULL DEFAULT 'landing_page',
    ip_address TEXT,
    user_agent TEXT,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS leads_landing_page_created_idx ON leads (landing_page_id, created_at DESC);
CREATE INDEX IF NOT EXISTS leads_email_idx ON leads (email);
CREATE INDEX IF NOT EXISTS leads_status_idx ON leads (status);
"""


def init_schema() -> None:
    with get_cursor() as (_, cur):
        cur.execute(SCHEMA_SQL)
        logger.info("Database schema ensured.")
