"""Seed script: creates the first admin user with the full admin template."""

import os
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from crm_access.core.auth import hash_password
from crm_access.core.database import Base, SessionLocal, engine
from crm_access.models.user import User
from crm_access.services.permission_codec import encode_grant, unflatten
from crm_access.services.permission_templates import defaults_for

ADMIN_EMAIL = os.environ.get("SEED_ADMIN_EMAIL", "admin@crm.local")
ADMIN_PASSWORD = os.environ.get("SEED_ADMIN_PASSWORD", "admin123")


def seed() -> None:
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        existing = db.query(User).filter(User.email == ADMIN_EMAIL).first()
        if existing:
            print(f"Admin '{ADMIN_EMAIL}' already exists: id={existing.id}")
            return

        user = User(
            nome="Administrador",
            email=ADMIN_EMAIL,
            funcao="admin",
            password_hash=hash_password(ADMIN_PASSWORD),
            permissoes=encode_grant(unflatten(defaults_for("admin"))),
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        print(f"Admin created: id={user.id}, email={user.email}")
    finally:
        db.close()


if __name__ == "__main__":
    seed()
