"""
Seed a small demo hierarchy: one director, one manager, a team lead and staff.

    python scripts/seed_users.py
"""
import sys
import os
import logging
from datetime import date

# Ensure we can import hrportal modules
sys.path.append(os.getcwd())

from hrportal.core.roles import UserRole
from hrportal.database import SessionLocal, init_db
from hrportal.models.user import User
from hrportal.services.auth import get_password_hash

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)

# (email, name, role, manager email, department)
DEMO_PEOPLE = [
    ("director@nts-tech.com", "Dana Director", UserRole.ENGINEERING_DIRECTOR, None, "engineering"),
    ("manager@nts-tech.com", "Morgan Manager", UserRole.SOFTWARE_DEVELOPMENT_MANAGER, "director@nts-tech.com", "engineering"),
    ("lead@nts-tech.com", "Lee Lead", UserRole.TEAM_LEAD, "manager@nts-tech.com", "engineering"),
    ("employee@nts-tech.com", "Emery Employee", UserRole.EMPLOYEE, "manager@nts-tech.com", "engineering"),
    ("intern@nts-tech.com", "Indy Intern", UserRole.INTERN, "manager@nts-tech.com", "engineering"),
]

DEMO_PASSWORD = "Password123!"


def create_user(db, email, name, role, manager_email, department):
    # Check if user already exists to avoid unique constraint errors
    existing_user = db.query(User).filter(User.email == email).first()
    if existing_user:
        logger.info(f"User {email} already exists. Skipping.")
        return existing_user

    manager = None
    if manager_email:
        manager = db.query(User).filter(User.email == manager_email).first()

    user = User(
        email=email,
        hashed_password=get_password_hash(DEMO_PASSWORD),
        name=name,
        role=role.value,
        manager_id=manager.id if manager else None,
        department=department,
        join_date=date.today(),
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"Created {role.value} -> {email}")
    return user


def main():
    init_db()
    db = SessionLocal()
    try:
        for email, name, role, manager_email, department in DEMO_PEOPLE:
            create_user(db, email, name, role, manager_email, department)
    finally:
        db.close()


if __name__ == "__main__":
    main()
