import argparse
import os
import sys

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from eventcrm.core.db import SessionLocal
from eventcrm.core.permissions import Role
from eventcrm.core.security import hash_password
from eventcrm.models import User


def run(email: str, password: str, full_name: str, role: str):
    db = SessionLocal()
    try:
        email = email.lower().strip()
        user = db.query(User).filter(User.email == email).first()
        if not user:
            user = User(email=email, full_name=full_name, password_hash=hash_password(password))
            db.add(user)
        user.role = role
        db.commit()
        print(f"User ready: {email} ({role})")
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--name", default="Admin User")
    parser.add_argument("--role", default=Role.ADMIN.value, choices=[r.value for r in Role])
    args = parser.parse_args()
    run(args.email, args.password, args.name, args.role)
