"""
Directory provider: materializes the person graph the access rules run on.
"""
from typing import Dict
from sqlalchemy.orm import Session

from hrportal.models.user import User
from hrportal.schemas.person import PersonSnapshot


def load_directory(db: Session) -> Dict[str, PersonSnapshot]:
    """
    Snapshot of every active person keyed by id. Inactive users are left out,
    so references to them behave as dangling manager ids.
    """
    users = db.query(User).filter(User.is_active == True).all()  # noqa: E712
    return {u.id: PersonSnapshot.model_validate(u) for u in users}
