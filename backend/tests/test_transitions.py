"""
Tests for sitestaff/services/statuses/transitions.py - pure transition planning.

Plans are checked both by their resulting snapshot and by the ordered step
tags, since several actions depend on the order of their steps.
"""
import pytest

from sitestaff.services.statuses import names as S
from sitestaff.services.statuses.transitions import (
    ActiveStatus,
    StatusSnapshot,
    StepKind,
    plan_activate,
    plan_clear_activity_flags,
    plan_completeness,
    plan_deactivate,
    plan_fire,
    plan_hr_edit_coupling,
    plan_initialization,
    plan_mark_edited,
    plan_profile_activity,
    plan_recompute_on_edit,
    plan_reinstate,
    plan_set_status,
)


def snapshot(**groups):
    """snapshot(status_hr=[("status_hr_edited", True)], status_active="status_active_fired")"""
    active = {}
    for group, value in groups.items():
        if isinstance(value, str):
            active[group] = (ActiveStatus(value),)
        else:
            active[group] = tuple(ActiveStatus(name, upload) for name, upload in value)
    return StatusSnapshot(active)


def assert_single_active(snap: StatusSnapshot):
    for group in S.ALL_GROUPS:
        assert len(snap.active_in(group)) <= 1, f"{group}: {snap.active_in(group)}"


FRESH = snapshot(
    status=S.STATUS_DRAFT,
    status_card=S.CARD_DRAFT,
    status_active=S.ACTIVE_EMPLOYED,
    status_secure=S.SECURE_ALLOW,
)


class TestInitialization:

    def test_initial_statuses(self):
        plan = plan_initialization()
        assert plan.after == FRESH
        assert all(step.upload is False for step in plan.steps)
        assert plan.status_names == [S.STATUS_DRAFT, S.CARD_DRAFT, S.ACTIVE_EMPLOYED, S.SECURE_ALLOW]


class TestCompleteness:

    def test_complete_card_promotes_drafts(self):
        plan = plan_completeness(FRESH, complete=True)
        assert plan.after.name(S.GROUP_STATUS) == S.STATUS_NEW
        assert plan.after.name(S.GROUP_CARD) == S.CARD_COMPLETED
        assert plan.tags == ["status_draft_to_new", "card_draft_to_completed"]

    def test_incomplete_card_never_demotes(self):
        promoted = snapshot(status=S.STATUS_NEW, status_card=S.CARD_COMPLETED)
        plan = plan_completeness(promoted, complete=False)
        assert plan.is_noop
        assert plan.after == promoted

    def test_later_statuses_are_not_touched(self):
        snap = snapshot(status=S.STATUS_TB_PASSED, status_card=S.CARD_COMPLETED)
        assert plan_completeness(snap, complete=True).is_noop


class TestHrEditCoupling:

    def test_new_compl_becomes_edited(self):
        """Scenario B at the planner level."""
        plan = plan_hr_edit_coupling(snapshot(status_hr=S.HR_NEW_COMPL))
        assert plan.after.name(S.GROUP_HR) == S.HR_EDITED
        assert plan.tags == ["hr_new_compl_to_edited"]

    def test_pending_upload_is_reset_to_edited(self):
        snap = snapshot(status_hr=[(S.HR_EDITED_COMPL, True)])
        plan = plan_hr_edit_coupling(snap)
        assert plan.after.current(S.GROUP_HR) == ActiveStatus(S.HR_EDITED, False)
        assert plan.tags == ["hr_pending_upload_reset", "hr_edited_after_pending_upload"]

    def test_pending_new_compl_is_reset_once(self):
        """The second rule reads the state left by the first one."""
        plan = plan_hr_edit_coupling(snapshot(status_hr=[(S.HR_NEW_COMPL, True)]))
        assert plan.after.current(S.GROUP_HR) == ActiveStatus(S.HR_EDITED, False)
        assert "hr_new_compl_to_edited" not in plan.tags

    @pytest.mark.parametrize("hr", [S.HR_EDITED, S.HR_FIRED_OFF, S.HR_EDITED_COMPL])
    def test_other_hr_statuses_without_pending_upload_are_kept(self, hr):
        assert plan_hr_edit_coupling(snapshot(status_hr=hr)).is_noop

    def test_no_hr_status(self):
        assert plan_hr_edit_coupling(FRESH).is_noop


class TestRecomputeOnEdit:

    def test_second_run_is_noop(self):
        snap = snapshot(
            status=S.STATUS_DRAFT,
            status_card=S.CARD_DRAFT,
            status_hr=[(S.HR_NEW_COMPL, True)],
        )
        first = plan_recompute_on_edit(snap, complete=True)
        second = plan_recompute_on_edit(first.after, complete=True)
        assert not first.is_noop
        assert second.is_noop
        assert second.after == first.after


class TestExplicitActions:

    def test_fire(self):
        """Scenario C at the planner level."""
        snap = snapshot(status_active=S.ACTIVE_EMPLOYED, status_hr=[(S.HR_EDITED, True)])
        plan = plan_fire(snap)
        assert plan.after.current(S.GROUP_ACTIVE) == ActiveStatus(S.ACTIVE_FIRED, False)
        assert plan.after.current(S.GROUP_HR) is None
        assert plan.steps[0].kind is StepKind.DEACTIVATE_GROUP

    def test_reinstate_fired_employee(self):
        snap = snapshot(status_active=S.ACTIVE_FIRED, status_hr=S.HR_EDITED)
        plan = plan_reinstate(snap)
        assert plan.after.name(S.GROUP_ACTIVE) == S.ACTIVE_EMPLOYED
        assert plan.after.current(S.GROUP_HR) == ActiveStatus(S.HR_FIRED_OFF, False)
        assert_single_active(plan.after)

    def test_reinstate_keeps_non_fired_activity(self):
        plan = plan_reinstate(snapshot(status_active=S.ACTIVE_INACTIVE))
        assert plan.after.name(S.GROUP_ACTIVE) == S.ACTIVE_INACTIVE
        assert plan.after.name(S.GROUP_HR) == S.HR_FIRED_OFF

    def test_reinstate_references_fired_off_status(self):
        plan = plan_reinstate(snapshot(status_active=S.ACTIVE_FIRED))
        assert S.HR_FIRED_OFF in plan.status_names
        assert S.ACTIVE_EMPLOYED in plan.status_names

    def test_deactivate(self):
        plan = plan_deactivate(FRESH)
        assert plan.after.name(S.GROUP_ACTIVE) == S.ACTIVE_INACTIVE

    def test_activate(self):
        plan = plan_activate(snapshot(status_active=S.ACTIVE_INACTIVE))
        assert plan.after.name(S.GROUP_ACTIVE) == S.ACTIVE_EMPLOYED
        assert plan.tags == ["activate_deactivate_current", "activate_activate_employed"]

    def test_activate_without_activity_status(self):
        plan = plan_activate(StatusSnapshot())
        assert plan.after.name(S.GROUP_ACTIVE) == S.ACTIVE_EMPLOYED
        assert plan.tags == ["activate_activate_employed"]

    def test_mark_edited_sets_upload(self):
        plan = plan_mark_edited(FRESH)
        assert plan.after.current(S.GROUP_HR) == ActiveStatus(S.HR_EDITED, True)

    def test_mark_edited_skips_reinstated_employee(self):
        plan = plan_mark_edited(snapshot(status_hr=S.HR_FIRED_OFF))
        assert plan.is_noop
        assert plan.skipped_reason

    def test_set_status_secure(self):
        plan = plan_set_status(FRESH, S.SECURE_BLOCK)
        assert plan.after.name(S.GROUP_SECURE) == S.SECURE_BLOCK
        assert plan.tags == ["set_status_secure"]


class TestClearActivityFlags:

    def test_undo_pending_fire(self):
        """Scenario D at the planner level: order of sub-steps is part of the contract."""
        snap = snapshot(
            status_active=[(S.ACTIVE_FIRED, True)],
            status_hr=S.HR_EDITED,
        )
        plan = plan_clear_activity_flags(snap)

        assert plan.tags == [
            "undo_fire.deactivate_fired",
            "undo_fire.deactivate_hr_edited",
            "undo_fire.activate_hr_fired_off",
            "undo_fire.activate_employed",
        ]
        assert plan.after.current(S.GROUP_ACTIVE) == ActiveStatus(S.ACTIVE_EMPLOYED, False)
        assert plan.after.current(S.GROUP_HR) == ActiveStatus(S.HR_FIRED_OFF, False)
        assert_single_active(plan.after)

    def test_undo_pending_fire_reconciles_other_hr_rows(self):
        snap = snapshot(
            status_active=[(S.ACTIVE_FIRED, True)],
            status_hr=S.HR_EDITED_COMPL,
        )
        plan = plan_clear_activity_flags(snap)
        assert "undo_fire.reconcile_hr" in plan.tags
        assert plan.after.active_in(S.GROUP_HR) == (ActiveStatus(S.HR_FIRED_OFF, False),)

    def test_fired_without_pending_upload_is_activated(self):
        plan = plan_clear_activity_flags(snapshot(status_active=S.ACTIVE_FIRED, status_hr=S.HR_EDITED))
        assert plan.after.name(S.GROUP_ACTIVE) == S.ACTIVE_EMPLOYED
        assert plan.after.name(S.GROUP_HR) == S.HR_EDITED

    def test_inactive_is_activated(self):
        plan = plan_clear_activity_flags(snapshot(status_active=S.ACTIVE_INACTIVE))
        assert plan.after.name(S.GROUP_ACTIVE) == S.ACTIVE_EMPLOYED

    def test_employed_is_noop(self):
        assert plan_clear_activity_flags(FRESH).is_noop


class TestProfileActivity:

    def test_fired_flag(self):
        assert plan_profile_activity(FRESH, fired=True, inactive=False).action == "fire"

    def test_fired_flag_when_already_fired(self):
        plan = plan_profile_activity(snapshot(status_active=S.ACTIVE_FIRED), fired=True, inactive=False)
        assert plan.is_noop
        assert plan.skipped_reason == "already fired"

    def test_inactive_flag(self):
        plan = plan_profile_activity(FRESH, fired=False, inactive=True)
        assert plan.after.name(S.GROUP_ACTIVE) == S.ACTIVE_INACTIVE

    def test_no_flags_clears(self):
        plan = plan_profile_activity(snapshot(status_active=S.ACTIVE_INACTIVE), fired=False, inactive=False)
        assert plan.action == "clear_activity_flags"
        assert plan.after.name(S.GROUP_ACTIVE) == S.ACTIVE_EMPLOYED
