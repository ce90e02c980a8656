"""Create an admin account, or promote an existing user to admin.

Usage:
    python -m backend.create_admin EMAIL [--name NAME] [--password PASSWORD] [--phone PHONE]
"""
import argparse
import sys

from backend.auth.passwords import hash_password
from backend.database import Base, SessionLocal, engine
from backend.models import coworking_space, reservation  # noqa: F401
from backend.models.user import ROLE_ADMIN, User


def promote_or_create_admin(db, email: str, name: str | None, password: str | None, phone: str | None) -> User:
    normalized_email = email.strip().lower()
    user = db.query(User).filter(User.email == normalized_email).first()
    if user is None:
        if not password:
            raise ValueError("A password is required to create a new admin account.")
        user = User(
            name=name or normalized_email.split("@", 1)[0],
            email=normalized_email,
            hashed_password=hash_password(password),
            telephone_number=phone,
        )
        db.add(user)
    user.role = ROLE_ADMIN
    db.commit()
    db.refresh(user)
    return user


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Create or promote an admin account.")
    parser.add_argument("email")
    parser.add_argument("--name")
    parser.add_argument("--password")
    parser.add_argument("--phone")
    args = parser.parse_args(argv)

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        user = promote_or_create_admin(db, args.email, args.name, args.password, args.phone)
    except ValueError as exc:
        print(exc, file=sys.stderr)
        sys.exit(1)
    finally:
        db.close()
    print(f"{user.email} is now an admin (id {user.id}).")


if __name__ == "__main__":
    main()
