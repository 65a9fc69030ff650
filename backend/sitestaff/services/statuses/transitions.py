"""
Status transition planning.

Every action is a pure function of the employee's current active statuses
(a StatusSnapshot) that returns an ordered TransitionPlan. Steps are folded
into a working snapshot as they are added, so a later step can depend on
state written by an earlier step of the same action. The plan is executed
by EmployeeStatusService inside a single transaction.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from sitestaff.services.statuses import names as S


class StepKind(str, Enum):
    # Deactivate the other rows of the group, then activate (or insert) this status
    SET_ACTIVE = "set_active"
    # Activate (or insert) this status, leaving sibling rows untouched
    ACTIVATE_ONLY = "activate_only"
    # Deactivate the active row(s) holding this status
    DEACTIVATE = "deactivate"
    # Deactivate every active row of the group except `keep`
    DEACTIVATE_GROUP = "deactivate_group"


@dataclass(frozen=True)
class ActiveStatus:
    name: str
    is_upload: bool = False


@dataclass(frozen=True)
class TransitionStep:
    kind: StepKind
    group: str
    status_name: Optional[str] = None
    # None keeps the row's current flag (False for a new row)
    upload: Optional[bool] = None
    keep: Optional[str] = None
    tag: str = ""


class StatusSnapshot:
    """
    Active statuses of one employee, keyed by group.

    A group normally holds at most one active status; more than one only
    appears transiently inside a plan or in legacy data.
    """

    def __init__(self, active: Optional[Dict[str, Tuple[ActiveStatus, ...]]] = None):
        self._active: Dict[str, Tuple[ActiveStatus, ...]] = {
            group: tuple(entries) for group, entries in (active or {}).items() if entries
        }

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[str, str, bool]]) -> "StatusSnapshot":
        """Build from (group, status_name, is_upload) triples, most recent first."""
        active: Dict[str, List[ActiveStatus]] = {}
        for group, name, is_upload in pairs:
            active.setdefault(group, []).append(ActiveStatus(name, bool(is_upload)))
        return cls({g: tuple(v) for g, v in active.items()})

    @classmethod
    def of(cls, **by_group: str) -> "StatusSnapshot":
        """Convenience constructor: StatusSnapshot.of(status_hr="status_hr_edited")."""
        return cls({g: (ActiveStatus(n),) for g, n in by_group.items()})

    def current(self, group: str) -> Optional[ActiveStatus]:
        entries = self._active.get(group)
        return entries[0] if entries else None

    def name(self, group: str) -> Optional[str]:
        current = self.current(group)
        return current.name if current else None

    def active_in(self, group: str) -> Tuple[ActiveStatus, ...]:
        return self._active.get(group, ())

    def as_dict(self) -> Dict[str, List[Tuple[str, bool]]]:
        return {g: [(a.name, a.is_upload) for a in v] for g, v in self._active.items()}

    def apply(self, step: TransitionStep) -> "StatusSnapshot":
        active = dict(self._active)
        entries = active.get(step.group, ())

        if step.kind is StepKind.SET_ACTIVE:
            previous = next((e for e in entries if e.name == step.status_name), None)
            upload = step.upload if step.upload is not None else (previous.is_upload if previous else False)
            active[step.group] = (ActiveStatus(step.status_name, upload),)
        elif step.kind is StepKind.ACTIVATE_ONLY:
            previous = next((e for e in entries if e.name == step.status_name), None)
            upload = step.upload if step.upload is not None else (previous.is_upload if previous else False)
            others = tuple(e for e in entries if e.name != step.status_name)
            active[step.group] = (ActiveStatus(step.status_name, upload),) + others
        elif step.kind is StepKind.DEACTIVATE:
            active[step.group] = tuple(e for e in entries if e.name != step.status_name)
        elif step.kind is StepKind.DEACTIVATE_GROUP:
            active[step.group] = tuple(e for e in entries if e.name == step.keep)

        return StatusSnapshot(active)

    def __eq__(self, other) -> bool:
        return isinstance(other, StatusSnapshot) and self._active == other._active

    def __repr__(self) -> str:
        return f"StatusSnapshot({self.as_dict()})"


@dataclass
class TransitionPlan:
    action: str
    before: StatusSnapshot
    after: StatusSnapshot
    steps: List[TransitionStep] = field(default_factory=list)
    skipped_reason: Optional[str] = None

    @property
    def is_noop(self) -> bool:
        return not self.steps

    @property
    def status_names(self) -> List[str]:
        """Every catalog name the plan touches (must all exist before executing)."""
        referenced: List[str] = []
        for step in self.steps:
            for name in (step.status_name, step.keep):
                if name and name not in referenced:
                    referenced.append(name)
        return referenced

    @property
    def tags(self) -> List[str]:
        return [step.tag for step in self.steps]


class _PlanBuilder:
    def __init__(self, action: str, snapshot: StatusSnapshot):
        self.action = action
        self.before = snapshot
        self.snapshot = snapshot
        self.steps: List[TransitionStep] = []

    def _add(self, step: TransitionStep) -> None:
        self.steps.append(step)
        self.snapshot = self.snapshot.apply(step)

    def set_active(self, status_name: str, upload: Optional[bool] = None, tag: str = "") -> None:
        self._add(TransitionStep(StepKind.SET_ACTIVE, S.group_of(status_name), status_name, upload, tag=tag))

    def activate_only(self, status_name: str, upload: Optional[bool] = None, tag: str = "") -> None:
        self._add(TransitionStep(StepKind.ACTIVATE_ONLY, S.group_of(status_name), status_name, upload, tag=tag))

    def deactivate(self, status_name: str, tag: str = "") -> None:
        self._add(TransitionStep(StepKind.DEACTIVATE, S.group_of(status_name), status_name, tag=tag))

    def deactivate_group(self, group: str, keep: Optional[str] = None, tag: str = "") -> None:
        self._add(TransitionStep(StepKind.DEACTIVATE_GROUP, group, keep=keep, tag=tag))

    def build(self, skipped_reason: Optional[str] = None) -> TransitionPlan:
        return TransitionPlan(
            action=self.action,
            before=self.before,
            after=self.snapshot,
            steps=list(self.steps),
            skipped_reason=skipped_reason,
        )


# ---------------------------------------------------------------------------
# Creation and completeness
# ---------------------------------------------------------------------------

INITIAL_STATUSES: Tuple[str, ...] = (
    S.STATUS_DRAFT,
    S.CARD_DRAFT,
    S.ACTIVE_EMPLOYED,
    S.SECURE_ALLOW,
)


def plan_initialization(snapshot: Optional[StatusSnapshot] = None) -> TransitionPlan:
    b = _PlanBuilder("initialize", snapshot or StatusSnapshot())
    for status_name in INITIAL_STATUSES:
        b.set_active(status_name, upload=False, tag=f"init_{S.group_of(status_name)}")
    return b.build()


def _completeness_steps(b: _PlanBuilder, complete: bool) -> None:
    # One-directional: a complete card promotes drafts, an incomplete one never demotes
    if not complete:
        return
    if b.snapshot.name(S.GROUP_STATUS) == S.STATUS_DRAFT:
        b.set_active(S.STATUS_NEW, tag="status_draft_to_new")
    if b.snapshot.name(S.GROUP_CARD) == S.CARD_DRAFT:
        b.set_active(S.CARD_COMPLETED, tag="card_draft_to_completed")


def _hr_edit_coupling_steps(b: _PlanBuilder) -> None:
    hr = b.snapshot.current(S.GROUP_HR)
    if hr is not None and hr.is_upload:
        b.deactivate_group(S.GROUP_HR, tag="hr_pending_upload_reset")
        b.set_active(S.HR_EDITED, upload=False, tag="hr_edited_after_pending_upload")

    # Reads the snapshot written above: a reset already left hr at edited
    if b.snapshot.name(S.GROUP_HR) == S.HR_NEW_COMPL:
        b.set_active(S.HR_EDITED, tag="hr_new_compl_to_edited")


def plan_completeness(snapshot: StatusSnapshot, complete: bool) -> TransitionPlan:
    b = _PlanBuilder("recompute_completeness", snapshot)
    _completeness_steps(b, complete)
    return b.build()


def plan_hr_edit_coupling(snapshot: StatusSnapshot) -> TransitionPlan:
    b = _PlanBuilder("hr_edit_coupling", snapshot)
    _hr_edit_coupling_steps(b)
    return b.build()


def plan_recompute_on_edit(snapshot: StatusSnapshot, complete: bool) -> TransitionPlan:
    b = _PlanBuilder("recompute_on_edit", snapshot)
    _completeness_steps(b, complete)
    _hr_edit_coupling_steps(b)
    return b.build()


# ---------------------------------------------------------------------------
# Explicit actions
# ---------------------------------------------------------------------------

def _fire_steps(b: _PlanBuilder) -> None:
    b.deactivate_group(S.GROUP_HR, tag="fire_clear_hr")
    # Firing is recorded but not itself an export trigger
    b.set_active(S.ACTIVE_FIRED, upload=False, tag="fire_activate_fired")


def _deactivate_steps(b: _PlanBuilder) -> None:
    b.set_active(S.ACTIVE_INACTIVE, tag="deactivate_activate_inactive")


def _activate_steps(b: _PlanBuilder) -> None:
    current = b.snapshot.current(S.GROUP_ACTIVE)
    if current is not None:
        b.deactivate(current.name, tag="activate_deactivate_current")
    b.set_active(S.ACTIVE_EMPLOYED, tag="activate_activate_employed")


def plan_fire(snapshot: StatusSnapshot) -> TransitionPlan:
    b = _PlanBuilder("fire", snapshot)
    _fire_steps(b)
    return b.build()


def plan_reinstate(snapshot: StatusSnapshot) -> TransitionPlan:
    b = _PlanBuilder("reinstate", snapshot)
    b.deactivate_group(S.GROUP_HR, keep=S.HR_FIRED_OFF, tag="reinstate_clear_hr")
    b.activate_only(S.HR_FIRED_OFF, upload=False, tag="reinstate_activate_hr_fired_off")
    if b.snapshot.name(S.GROUP_ACTIVE) == S.ACTIVE_FIRED:
        b.deactivate(S.ACTIVE_FIRED, tag="reinstate_deactivate_fired")
        b.set_active(S.ACTIVE_EMPLOYED, tag="reinstate_activate_employed")
    return b.build()


def plan_deactivate(snapshot: StatusSnapshot) -> TransitionPlan:
    b = _PlanBuilder("deactivate", snapshot)
    _deactivate_steps(b)
    return b.build()


def plan_activate(snapshot: StatusSnapshot) -> TransitionPlan:
    b = _PlanBuilder("activate", snapshot)
    _activate_steps(b)
    return b.build()


def plan_mark_edited(snapshot: StatusSnapshot, upload: bool = True) -> TransitionPlan:
    b = _PlanBuilder("mark_edited", snapshot)
    if snapshot.name(S.GROUP_HR) == S.HR_FIRED_OFF:
        return b.build(skipped_reason="reinstated employees are not re-marked as edited")
    b.set_active(S.HR_EDITED, upload=upload, tag="mark_edited")
    return b.build()


def plan_set_status(snapshot: StatusSnapshot, status_name: str) -> TransitionPlan:
    """Administrative override of a single group (the only way status_secure changes)."""
    b = _PlanBuilder("set_status", snapshot)
    b.set_active(status_name, tag=f"set_{S.group_of(status_name)}")
    return b.build()


def _undo_pending_fire_steps(b: _PlanBuilder) -> None:
    """
    Fired and still pending HR export, then un-fired before the export ran:
    recorded as a retroactive reinstatement. Order matters, each step reads
    the snapshot left by the previous ones.
    """
    b.deactivate(S.ACTIVE_FIRED, tag="undo_fire.deactivate_fired")

    if b.snapshot.name(S.GROUP_HR) == S.HR_EDITED:
        b.deactivate(S.HR_EDITED, tag="undo_fire.deactivate_hr_edited")

    b.activate_only(S.HR_FIRED_OFF, upload=False, tag="undo_fire.activate_hr_fired_off")

    if any(e.name != S.HR_FIRED_OFF for e in b.snapshot.active_in(S.GROUP_HR)):
        b.deactivate_group(S.GROUP_HR, keep=S.HR_FIRED_OFF, tag="undo_fire.reconcile_hr")

    b.set_active(S.ACTIVE_EMPLOYED, tag="undo_fire.activate_employed")


def plan_clear_activity_flags(snapshot: StatusSnapshot) -> TransitionPlan:
    """Profile saved with neither the fired nor the inactive checkbox selected."""
    b = _PlanBuilder("clear_activity_flags", snapshot)
    current = snapshot.current(S.GROUP_ACTIVE)
    if current is None or current.name == S.ACTIVE_EMPLOYED:
        return b.build()

    if current.name == S.ACTIVE_FIRED and current.is_upload:
        _undo_pending_fire_steps(b)
    elif current.name in (S.ACTIVE_FIRED, S.ACTIVE_INACTIVE):
        _activate_steps(b)
    return b.build()


def plan_profile_activity(snapshot: StatusSnapshot, fired: bool, inactive: bool) -> TransitionPlan:
    """Dispatch the fired / inactive checkboxes of a profile update."""
    current = snapshot.name(S.GROUP_ACTIVE)
    if fired:
        if current == S.ACTIVE_FIRED:
            return _PlanBuilder("fire", snapshot).build(skipped_reason="already fired")
        return plan_fire(snapshot)
    if inactive:
        if current == S.ACTIVE_INACTIVE:
            return _PlanBuilder("deactivate", snapshot).build(skipped_reason="already inactive")
        return plan_deactivate(snapshot)
    return plan_clear_activity_flags(snapshot)
