import argparse
import os
import sys
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

ROOT_DIR = Path(__file__).resolve().parents[1] / "src" / "backend"
if str(ROOT_DIR) not in sys.path:
    sys.path.append(str(ROOT_DIR))

from leadhub.db import users as users_db
from leadhub.db.postgres import get_cursor
from leadhub.db.schema import init_schema
from leadhub.errors import error_message
from leadhub.models.common import SUPER_ADMIN, Email, Password
from leadhub.utils.security import hash_password


def main() -> None:
    parser = argparse.ArgumentParser(description="Create the first super admin account")
    parser.add_argument("--name", default=os.getenv("SUPER_ADMIN_NAME", "Super Admin"))
    parser.add_argument("--email", default=os.getenv("SUPER_ADMIN_EMAIL"))
    parser.add_argument("--password", default=os.getenv("SUPER_ADMIN_PASSWORD"))
    parser.add_argument(
        "--skip-schema",
        action="store_true",
        help="Do not create missing tables before inserting the account.",
    )
    args = parser.parse_args()

    if not args.email or not args.password:
        raise SystemExit("Provide --email/--password or SUPER_ADMIN_EMAIL/SUPER_ADMIN_PASSWORD.")
    try:
        email = TypeAdapter(Email).validate_python(args.email)
        password = TypeAdapter(Password).validate_python(args.password)
    except ValidationError as exc:
        raise SystemExit(error_message(exc.errors()[0]))

    if not args.skip_schema:
        init_schema()

    with get_cursor() as (_, cur):
        existing = users_db.get_user_by_email(cur, email)
        if existing:
            raise SystemExit(
                f"A user with email {email} already exists (role={existing['role']})."
            )
        user = users_db.create_user(
            cur,
            name=args.name,
            email=email,
            password_hash=hash_password(password),
            role=SUPER_ADMIN,
            status="approved",
        )
    print(f"Super admin created: id={user['id']} email={user['email']}")


if __name__ == "__main__":
    main()
