from typing import Optional
from pydantic import BaseModel, ConfigDict


class PersonSnapshot(BaseModel):
    """
    Immutable view of a person used by the access-control rules.
    Built from ORM users once per request by the directory provider.
    """
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    name: str
    email: str
    role: str
    manager_id: Optional[str] = None
    department: Optional[str] = None
