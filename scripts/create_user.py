# scripts/create_user.py
import sys, os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import argparse
from hr_round.db.init_db import init_db
from hr_round.db.session import SessionLocal
from hr_round.db import models as db_models
from hr_round.core.security import get_password_hash


def main():
    parser = argparse.ArgumentParser(description="Create a candidate account or reset its password")
    parser.add_argument("email")
    parser.add_argument("password")
    parser.add_argument("--name", default=None)
    parser.add_argument("--resume-file", default=None, help="plain-text resume used for question generation")
    parser.add_argument("--superuser", action="store_true")
    args = parser.parse_args()

    resume = None
    if args.resume_file:
        with open(args.resume_file, encoding="utf-8") as fh:
            resume = fh.read()

    init_db()
    db = SessionLocal()
    try:
        user = db.query(db_models.User).filter(db_models.User.email == args.email).one_or_none()
        if user:
            # reset password
            user.hashed_password = get_password_hash(args.password)
            user.is_active = True
            if args.name:
                user.full_name = args.name
            if resume is not None:
                user.resume = resume
            if args.superuser:
                user.is_superuser = True
            db.add(user)
            db.commit()
            print(f"Updated user {user.email} (id={user.id})")
        else:
            user = db_models.User(
                email=args.email,
                full_name=args.name,
                resume=resume,
                hashed_password=get_password_hash(args.password),
                is_active=True,
                is_superuser=bool(args.superuser),
            )
            db.add(user)
            db.commit()
            db.refresh(user)
            print(f"Created user {user.email} (id={user.id})")
    finally:
        db.close()


if __name__ == "__main__":
    main()
