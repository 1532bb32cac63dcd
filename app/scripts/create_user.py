"""
Create an account (e.g. the first admin) without going through the API. Run from project root:
  python -m app.scripts.create_user FIRSTNAME LASTNAME USERNAME PASSWORD [role]
Example:
  python -m app.scripts.create_user Ada Lovelace ada_admin 'S3cure-password' ADMIN
"""
import argparse
import logging
import sys

from pydantic import ValidationError

from app.core.database import SessionLocal
from app.core.security import hash_password
from app.models import Role
from app.schemas.auth import SignupRequest
from app.services.store import StoreError
from app.services.users import DuplicateUsernameError, Profile, create_user

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a blog account.")
    parser.add_argument("firstname")
    parser.add_argument("lastname")
    parser.add_argument("username", help="3-20 letters, digits, '_' or '.'")
    parser.add_argument("password", help="8-64 chars with upper, lower and a digit")
    parser.add_argument(
        "role",
        nargs="?",
        default=Role.USER.value,
        choices=[r.value for r in Role],
        type=str.upper,
    )
    args = parser.parse_args(argv)

    try:
        body = SignupRequest(
            firstname=args.firstname,
            lastname=args.lastname,
            username=args.username,
            password=args.password,
            confirmpassword=args.password,
        )
    except ValidationError as e:
        for err in e.errors():
            print(err["msg"].removeprefix("Value error, "), file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        profile = Profile(firstname=body.firstname, lastname=body.lastname, username=body.username)
        create_user(db, profile, hash_password(body.password), Role(args.role))
    except DuplicateUsernameError:
        print(f"User '{body.username}' already exists.", file=sys.stderr)
        return 1
    except StoreError:
        return 1
    finally:
        db.close()
    print(f"Created user '{body.username}' with role '{args.role}'.")
    return 0


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )
    sys.exit(main())
