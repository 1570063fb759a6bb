import argparse
import os
import sys
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

ROOT_DIR = Path(__file__).resolve().parents[1] / "src" / "backend"
if str(ROOT_DIR) not in sys.path:
    sys.path.append(str(ROOT_DIR))

from leadhub.db.postgres import get_cursor
from leadhub.errors import NotFound, error_message
from leadhub.models.common import Email, Password
from leadhub.services import auth as auth_service


def main() -> None:
    parser = argparse.ArgumentParser(description="Set a new password for an existing account")
    parser.add_argument("--email", default=os.getenv("SUPER_ADMIN_EMAIL"))
    parser.add_argument("--password", default=os.getenv("RESET_PASSWORD"))
    args = parser.parse_args()

    if not args.email or not args.password:
        raise SystemExit("Provide --email/--password or SUPER_ADMIN_EMAIL/RESET_PASSWORD.")
    try:
        email = TypeAdapter(Email).validate_python(args.email)
        password = TypeAdapter(Password).validate_python(args.password)
    except ValidationError as exc:
        raise SystemExit(error_message(exc.errors()[0]))

    with get_cursor() as (_, cur):
        try:
            user = auth_service.reset_password(cur, email, password)
        except NotFound:
            raise SystemExit(f"No user with email {email}.")
    print(f"Password reset: id={user['id']} email={user['email']} role={user['role']}")


if __name__ == "__main__":
    main()
