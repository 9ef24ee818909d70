"""
Role hierarchy.

Single source of truth for role tags, their tiers and the capability
checks derived from them. Routers, services and the /roles endpoint all
call into this module instead of comparing role strings themselves.
"""
import enum
import logging
import re
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


class UserRole(str, enum.Enum):
    """
    Closed set of role tags.

    Hierarchy (most to least permissions):
    - Directors: top of the approval chain
    - Managers: supervise staff, first approval stage
    - TEAM_LEAD: approves leave for direct reports, sees them like a manager
    - Staff: self-service only
    """
    GLOBAL_HR_DIRECTOR = "global_hr_director"
    GLOBAL_OPERATIONS_DIRECTOR = "global_operations_director"
    ENGINEERING_DIRECTOR = "engineering_director"
    DIRECTOR_TECH_TEAM = "director_tech_team"
    DIRECTOR_BUSINESS_DEVELOPMENT = "director_business_development"

    TALENT_ACQUISITION_MANAGER = "talent_acquisition_manager"
    PROJECT_TECH_MANAGER = "project_tech_manager"
    QUALITY_ASSURANCE_MANAGER = "quality_assurance_manager"
    SOFTWARE_DEVELOPMENT_MANAGER = "software_development_manager"
    SYSTEMS_INTEGRATION_MANAGER = "systems_integration_manager"
    CLIENT_RELATIONS_MANAGER = "client_relations_manager"

    TEAM_LEAD = "team_lead"

    SENIOR_EMPLOYEE = "senior_employee"
    EMPLOYEE = "employee"
    INTERN = "intern"


class RoleTier(str, enum.Enum):
    DIRECTOR = "director"
    MANAGER = "manager"
    TEAM_LEAD = "team_lead"
    STAFF = "staff"


class AccessLevel(str, enum.Enum):
    """Visibility class used when scoping dashboards."""
    DIRECTOR = "director"
    MANAGER = "manager"
    EMPLOYEE = "employee"


DIRECTOR_ROLES = frozenset({
    UserRole.GLOBAL_HR_DIRECTOR,
    UserRole.GLOBAL_OPERATIONS_DIRECTOR,
    UserRole.ENGINEERING_DIRECTOR,
    UserRole.DIRECTOR_TECH_TEAM,
    UserRole.DIRECTOR_BUSINESS_DEVELOPMENT,
})

MANAGER_ROLES = frozenset({
    UserRole.TALENT_ACQUISITION_MANAGER,
    UserRole.PROJECT_TECH_MANAGER,
    UserRole.QUALITY_ASSURANCE_MANAGER,
    UserRole.SOFTWARE_DEVELOPMENT_MANAGER,
    UserRole.SYSTEMS_INTEGRATION_MANAGER,
    UserRole.CLIENT_RELATIONS_MANAGER,
})

STAFF_ROLES = frozenset({
    UserRole.SENIOR_EMPLOYEE,
    UserRole.EMPLOYEE,
    UserRole.INTERN,
})

_TIER_BY_ROLE: Dict[str, RoleTier] = {
    **{r.value: RoleTier.DIRECTOR for r in DIRECTOR_ROLES},
    **{r.value: RoleTier.MANAGER for r in MANAGER_ROLES},
    UserRole.TEAM_LEAD.value: RoleTier.TEAM_LEAD,
    **{r.value: RoleTier.STAFF for r in STAFF_ROLES},
}

ROLE_DISPLAY_NAMES: Dict[str, str] = {
    UserRole.GLOBAL_HR_DIRECTOR.value: "Global HR Director",
    UserRole.GLOBAL_OPERATIONS_DIRECTOR.value: "Global Operations Director",
    UserRole.ENGINEERING_DIRECTOR.value: "Engineering Director",
    UserRole.DIRECTOR_TECH_TEAM.value: "Director – Tech Team",
    UserRole.DIRECTOR_BUSINESS_DEVELOPMENT.value: "Director – Business Development",
    UserRole.TALENT_ACQUISITION_MANAGER.value: "Talent Acquisition Manager",
    UserRole.PROJECT_TECH_MANAGER.value: "Project/Tech Manager",
    UserRole.QUALITY_ASSURANCE_MANAGER.value: "Quality Assurance Manager",
    UserRole.SOFTWARE_DEVELOPMENT_MANAGER.value: "Software Development Manager",
    UserRole.SYSTEMS_INTEGRATION_MANAGER.value: "Systems Integration Manager",
    UserRole.CLIENT_RELATIONS_MANAGER.value: "Client Relations Manager",
    UserRole.TEAM_LEAD.value: "Team Lead",
    UserRole.SENIOR_EMPLOYEE.value: "Senior Employee",
    UserRole.EMPLOYEE.value: "Employee",
    UserRole.INTERN.value: "Intern",
}

# Display names sometimes arrive where a tag is expected (older tokens, imports)
_ROLE_BY_DISPLAY_NAME: Dict[str, str] = {
    name.lower(): tag for tag, name in ROLE_DISPLAY_NAMES.items()
}

_WHITESPACE = re.compile(r"\s+")


def _value(role) -> str:
    if isinstance(role, enum.Enum):
        return str(role.value)
    return "" if role is None else str(role)


def normalize_role(role) -> str:
    """
    Canonical form of a role string.

    "Team Lead" -> "team_lead", "Director – Tech Team" -> "director_tech_team".
    Unknown strings are lower-cased and underscored but otherwise kept.
    """
    raw = _value(role).strip()
    by_display = _ROLE_BY_DISPLAY_NAME.get(raw.lower())
    if by_display:
        return by_display
    return _WHITESPACE.sub("_", raw.lower())


def is_known_role(role) -> bool:
    return normalize_role(role) in _TIER_BY_ROLE


def tier_of(role) -> RoleTier:
    """
    Classify a role tag. Tags outside the closed set fall back to the staff
    tier; an unrecognised role never gains access.
    """
    tag = normalize_role(role)
    tier = _TIER_BY_ROLE.get(tag)
    if tier is None:
        logger.debug(f"Unknown role '{tag}', treating as staff tier")
        return RoleTier.STAFF
    return tier


def is_director(role) -> bool:
    return tier_of(role) == RoleTier.DIRECTOR


def is_manager(role) -> bool:
    return tier_of(role) == RoleTier.MANAGER


def is_team_lead(role) -> bool:
    return tier_of(role) == RoleTier.TEAM_LEAD


def is_employee_or_intern(role) -> bool:
    return normalize_role(role) in (UserRole.EMPLOYEE.value, UserRole.INTERN.value)


def can_hold_approvals(role) -> bool:
    """Director, manager and team-lead tiers may approve for their direct reports."""
    return tier_of(role) in (RoleTier.DIRECTOR, RoleTier.MANAGER, RoleTier.TEAM_LEAD)


def access_level(role) -> AccessLevel:
    """
    Visibility class of a role. Team leads see their direct reports the same
    way managers do; everything else below manager is employee level.
    """
    tier = tier_of(role)
    if tier == RoleTier.DIRECTOR:
        return AccessLevel.DIRECTOR
    if tier in (RoleTier.MANAGER, RoleTier.TEAM_LEAD):
        return AccessLevel.MANAGER
    return AccessLevel.EMPLOYEE


def display_name(role) -> str:
    """Human readable role name; unknown tags are returned unchanged."""
    raw = _value(role)
    return ROLE_DISPLAY_NAMES.get(normalize_role(raw), raw)


def simple_designation(role) -> str:
    tier = tier_of(role)
    if tier == RoleTier.DIRECTOR:
        return "Director"
    if tier == RoleTier.MANAGER:
        return "Manager"
    if tier == RoleTier.TEAM_LEAD:
        return "Team Lead"
    tag = normalize_role(role)
    if tag == UserRole.INTERN.value:
        return "Intern"
    if tag in (UserRole.EMPLOYEE.value, UserRole.SENIOR_EMPLOYEE.value):
        return "Employee"
    return "Staff"


def roles_in_tier(tier: RoleTier) -> List[UserRole]:
    return [role for role in UserRole if _TIER_BY_ROLE[role.value] == tier]


def roles_addable_by(role) -> List[UserRole]:
    """
    Roles a person may create accounts for.
    Directors add managers and staff; managers and team leads add staff only.
    """
    tier = tier_of(role)
    staff = roles_in_tier(RoleTier.TEAM_LEAD) + roles_in_tier(RoleTier.STAFF)
    if tier == RoleTier.DIRECTOR:
        return roles_in_tier(RoleTier.MANAGER) + staff
    if tier in (RoleTier.MANAGER, RoleTier.TEAM_LEAD):
        return staff
    return []


def parse_role(role) -> Optional[UserRole]:
    """UserRole for a tag or display name, None when outside the closed set."""
    tag = normalize_role(role)
    try:
        return UserRole(tag)
    except ValueError:
        return None
