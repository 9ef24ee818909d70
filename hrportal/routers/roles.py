from typing import List
from fastapi import APIRouter
from hrportal.core import roles
from hrportal.core.roles import UserRole
from hrportal.schemas.employee import RoleInfo

router = APIRouter(prefix="/roles", tags=["roles"])


@router.get("/", response_model=List[RoleInfo])
def list_roles():
    """
    The role table, so clients classify roles with the same rules as the server.
    """
    return [
        RoleInfo(
            role=role.value,
            tier=roles.tier_of(role).value,
            access_level=roles.access_level(role).value,
            display_name=roles.display_name(role),
            designation=roles.simple_designation(role),
            can_approve=roles.can_hold_approvals(role),
        )
        for role in UserRole
    ]
