import copy
import pytest
from hrportal.schemas.person import PersonSnapshot
from hrportal.services import access_control as ac


def person(pid, role, manager_id=None):
    return PersonSnapshot(id=pid, name=pid.upper(), email=f"{pid}@nts-tech.com", role=role, manager_id=manager_id)


@pytest.fixture
def org():
    """
    D (director)
    └── M (manager)
        ├── S (employee)
        ├── I (intern)
        └── L (team lead)
            └── X (employee reporting to the lead)
    D2 (second director) with manager M2 and employee S2
    """
    return ac.build_directory([
        person("d", "engineering_director"),
        person("m", "software_development_manager", "d"),
        person("s", "employee", "m"),
        person("i", "intern", "m"),
        person("l", "team_lead", "m"),
        person("x", "employee", "l"),
        person("d2", "global_hr_director"),
        person("m2", "talent_acquisition_manager", "d2"),
        person("s2", "employee", "m2"),
    ])


class TestApprovalChain:
    def test_three_level_chain(self, org):
        assert ac.resolve_approval_chain("s", org) == ["m", "d"]
        assert ac.resolve_approval_chain("m", org) == ["d"]
        assert ac.resolve_approval_chain("d", org) == []

    def test_unknown_person_has_empty_chain(self, org):
        assert ac.resolve_approval_chain("nobody", org) == []

    def test_chain_is_capped_at_two_hops(self, org):
        # x -> l -> m -> d is truncated after m
        assert ac.resolve_approval_chain("x", org) == ["l", "m"]

    def test_two_cycle_terminates(self):
        directory = ac.build_directory([
            person("a", "employee", "b"),
            person("b", "project_tech_manager", "a"),
        ])
        assert ac.resolve_approval_chain("a", directory) == ["b", "a"]
        assert ac.resolve_approval_chain("b", directory) == ["a", "b"]

    def test_self_cycle_terminates(self):
        directory = ac.build_directory([person("a", "team_lead", "a")])
        assert ac.resolve_approval_chain("a", directory) == ["a", "a"]

    def test_dangling_manager_ends_chain(self):
        directory = ac.build_directory([
            person("a", "employee", "b"),
            person("b", "project_tech_manager", "ghost"),
            person("c", "employee", "ghost"),
        ])
        assert ac.resolve_approval_chain("a", directory) == ["b"]
        assert ac.resolve_approval_chain("c", directory) == []


class TestCanApprove:
    def test_direct_manager_may_approve(self, org):
        assert ac.can_approve("m", "s", org)
        assert ac.can_approve("d", "m", org)
        assert ac.can_approve("l", "x", org)

    def test_director_two_hops_up_may_not(self, org):
        assert not ac.can_approve("d", "s", org)

    def test_peer_and_self_may_not(self, org):
        assert not ac.can_approve("s", "i", org)
        assert not ac.can_approve("s", "s", org)
        assert not ac.can_approve("m2", "s", org)

    def test_staff_manager_lacks_capability(self):
        directory = ac.build_directory([
            person("senior", "senior_employee"),
            person("junior", "intern", "senior"),
        ])
        assert not ac.can_approve("senior", "junior", directory)

    def test_unknown_ids(self, org):
        assert not ac.can_approve("ghost", "s", org)
        assert not ac.can_approve("m", "ghost", org)

    def test_director_finalizes_second_stage(self, org):
        assert ac.can_finalize("d", "s", org)
        assert not ac.can_finalize("m", "s", org)
        assert not ac.can_finalize("d", "m", org)
        assert not ac.can_finalize("d2", "s", org)
        # Second hop is a manager, not a director
        assert not ac.can_finalize("m", "x", org)

    def test_required_approvals_counts_decidable_stages(self, org):
        assert ac.required_approvals("s", org) == 2
        assert ac.required_approvals("m", org) == 1
        assert ac.required_approvals("d", org) == 0
        # x -> l -> m: nobody can finalize, so the lead's approval completes it
        assert ac.required_approvals("x", org) == 1
        assert ac.required_approvals("ghost", org) == 0


class TestAccessScope:
    def test_director_manager_staff(self, org):
        assert set(ac.access_scope("d", org)) == {"d", "m", "s", "i"}
        assert set(ac.access_scope("m", org)) == {"m", "s", "i", "l"}
        assert set(ac.access_scope("s", org)) == {"s"}

    def test_minimal_hierarchy(self):
        directory = ac.build_directory([
            person("D", "director_tech_team"),
            person("M", "quality_assurance_manager", "D"),
            person("S", "employee", "M"),
        ])
        assert set(ac.access_scope("D", directory)) == {"D", "M", "S"}
        assert set(ac.access_scope("M", directory)) == {"M", "S"}
        assert set(ac.access_scope("S", directory)) == {"S"}

    def test_team_lead_sees_direct_reports(self, org):
        assert set(ac.access_scope("l", org)) == {"l", "x"}

    def test_branches_are_isolated(self, org):
        assert "s2" not in ac.access_scope("d", org)
        assert not ac.is_in_scope("m", "s2", org)
        assert ac.is_in_scope("d2", "s2", org)

    def test_unknown_viewer_sees_nobody(self, org):
        assert ac.access_scope("ghost", org) == {}
        assert ac.scope_ids("ghost", org) == set()
        assert not ac.is_in_scope("d", None, org)

    def test_unknown_role_is_self_only(self):
        directory = ac.build_directory([
            person("boss", "chief_vibes_officer"),
            person("s", "employee", "boss"),
        ])
        assert ac.scope_ids("boss", directory) == {"boss"}


def test_rules_are_idempotent_and_pure(org):
    snapshot = copy.deepcopy(org)
    for _ in range(2):
        assert ac.resolve_approval_chain("s", org) == ["m", "d"]
        assert ac.can_approve("m", "s", org) is True
        assert ac.scope_ids("d", org) == {"d", "m", "s", "i"}
    assert ac.access_scope("m", org) == ac.access_scope("m", org)
    assert org == snapshot


def test_direct_reports(org):
    assert {p.id for p in ac.direct_reports("m", org)} == {"s", "i", "l"}
    assert ac.direct_reports("s", org) == []
