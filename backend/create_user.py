#!/usr/bin/env python
"""Create or reset a staff login.

    python create_user.py staff@kbstractors.com --name "Office"

The password is asked for interactively and never echoed.
"""
import argparse
import getpass
import sys

from sqlalchemy.orm import Session

from app.core.security import get_password_hash
from app.db.base import Base
from app.db.session import SessionLocal, engine
from app.models.user import User

MIN_PASSWORD_LENGTH = 8


def create_or_reset_user(db: Session, email: str, password: str, name: str = None) -> User:
    """Insert the user, or set a new password (and reactivate) when the email exists."""
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    email = email.strip().lower()
    user = db.query(User).filter(User.email == email).first()
    if user is None:
        user = User(email=email, name=name)
        db.add(user)
    elif name:
        user.name = name
    user.hashed_password = get_password_hash(password)
    user.is_active = True
    db.commit()
    db.refresh(user)
    return user


def main(argv=None):
    parser = argparse.ArgumentParser(description="Create or reset a staff login")
    parser.add_argument("email")
    parser.add_argument("--name", default=None)
    args = parser.parse_args(argv)

    password = getpass.getpass("Password: ")
    if password != getpass.getpass("Repeat password: "):
        print("Passwords do not match")
        return 1

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        user = create_or_reset_user(db, args.email, password, args.name)
    except ValueError as e:
        print(e)
        return 1
    finally:
        db.close()

    print(f"{'='*60}")
    print(f"  ✓ ID: {user.id} | Email: {user.email}")
    print(f"{'='*60}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
