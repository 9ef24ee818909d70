"""
Approval chains and access scoping.

Pure functions over an already loaded directory (person id -> person).
A person is anything exposing ``id``, ``role`` and ``manager_id``: ORM users
and PersonSnapshot records both qualify. Nothing here performs I/O and no
lookup failure raises; a missing id simply yields an empty or False result.
"""
from typing import Dict, Iterable, List, Mapping, Optional, Set, TypeVar

from hrportal.core.roles import (
    AccessLevel,
    access_level,
    can_hold_approvals,
    is_director,
)

P = TypeVar("P")

# staff -> manager -> director; deeper hierarchies are truncated here
MAX_APPROVAL_DEPTH = 2


def build_directory(people: Iterable[P]) -> Dict[str, P]:
    return {person.id: person for person in people}


def resolve_approval_chain(person_id: str, directory: Mapping[str, P]) -> List[str]:
    """
    Ordered approvers of a person: direct manager, then that manager's manager.

    The walk stops after two hops, which also bounds manager cycles
    (A -> B -> A yields [B, A]). A manager_id pointing outside the directory
    ends the chain without being included.
    """
    chain: List[str] = []
    current = directory.get(person_id)
    while current is not None and len(chain) < MAX_APPROVAL_DEPTH:
        manager_id = getattr(current, "manager_id", None)
        if not manager_id or manager_id not in directory:
            break
        chain.append(manager_id)
        current = directory[manager_id]
    return chain


def can_approve(approver_id: str, requester_id: str, directory: Mapping[str, P]) -> bool:
    """
    First-stage approval: only the requester's direct manager, and only if
    that manager holds an approving role. A director two hops up is NOT
    authorized here; see can_finalize for the director stage.
    """
    requester = directory.get(requester_id)
    approver = directory.get(approver_id)
    if requester is None or approver is None:
        return False
    return requester.manager_id == approver_id and can_hold_approvals(approver.role)


def can_finalize(approver_id: str, requester_id: str, directory: Mapping[str, P]) -> bool:
    """Second-stage approval: the director sitting at position two of the chain."""
    approver = directory.get(approver_id)
    if approver is None or not is_director(approver.role):
        return False
    chain = resolve_approval_chain(requester_id, directory)
    return len(chain) == MAX_APPROVAL_DEPTH and chain[1] == approver_id


def required_approvals(person_id: str, directory: Mapping[str, P]) -> int:
    """
    Stages a request by this person must clear. The second stage only counts
    when a director sits at position two of the chain, since can_finalize
    accepts nobody else.
    """
    chain = resolve_approval_chain(person_id, directory)
    if not chain:
        return 0
    if len(chain) == MAX_APPROVAL_DEPTH and is_director(directory[chain[1]].role):
        return MAX_APPROVAL_DEPTH
    return 1


def direct_reports(manager_id: str, directory: Mapping[str, P]) -> List[P]:
    return [p for p in directory.values() if p.manager_id == manager_id]


def access_scope(viewer_id: str, directory: Mapping[str, P]) -> Dict[str, P]:
    """
    People a viewer may see, keyed by id.

    - employee level: only themselves
    - manager level (managers, team leads): themselves and direct reports
    - director: themselves, manager-level people reporting to them, and
      employee-level people reporting to those
    A viewer missing from the directory sees nobody.
    """
    viewer = directory.get(viewer_id)
    if viewer is None:
        return {}

    scope: Dict[str, P] = {viewer_id: viewer}
    level = access_level(viewer.role)

    if level == AccessLevel.MANAGER:
        for person in direct_reports(viewer_id, directory):
            scope.setdefault(person.id, person)

    elif level == AccessLevel.DIRECTOR:
        managers = [
            p for p in direct_reports(viewer_id, directory)
            if access_level(p.role) == AccessLevel.MANAGER
        ]
        manager_ids = {m.id for m in managers}
        for person in managers:
            scope.setdefault(person.id, person)
        for person in directory.values():
            if person.manager_id in manager_ids and access_level(person.role) == AccessLevel.EMPLOYEE:
                scope.setdefault(person.id, person)

    return scope


def scope_ids(viewer_id: str, directory: Mapping[str, P]) -> Set[str]:
    return set(access_scope(viewer_id, directory))


def is_in_scope(viewer_id: str, target_id: Optional[str], directory: Mapping[str, P]) -> bool:
    if not target_id:
        return False
    return target_id in access_scope(viewer_id, directory)
