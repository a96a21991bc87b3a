# rollover/services/transition.py
"""
Year-end session transition: plan per-student moves, then submit them in one batch.

Flow:
    TransitionService.open()  -> fresh classes/sessions/students -> TransitionPlanner
    administrator edits       -> TransitionPlan.change_action / change_target
    TransitionService.submit() -> BatchTransitionExecutor (validate, one POST)

Plans are throwaway: built on open, edited in memory, discarded after submit.
Students already recorded in the target session are left out of the plan, so
re-opening after a partial run only shows who is still pending.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar, List, Optional, Sequence, Tuple, Union

from rollover.core.errors import PlanValidationError, server_message
from rollover.core.http import CoreHTTP
from rollover.core.logging import log
from rollover.schemas.class_schema import ClassOut
from rollover.schemas.session import SessionOut
from rollover.schemas.student import StudentOut
from rollover.schemas.transition import SessionTransitionRequest, TransitionAction, TransitionUpdateIn
from rollover.services.classes import ClassService
from rollover.services.grades import first_id, promotion_candidates, retention_candidates
from rollover.services.sessions import SessionService
from rollover.services.students import StudentService


# === decisions ===

@dataclass(frozen=True)
class Promote:
    target_class_id: str = ""
    action: ClassVar[TransitionAction] = TransitionAction.PROMOTE


@dataclass(frozen=True)
class Retain:
    target_class_id: str = ""
    action: ClassVar[TransitionAction] = TransitionAction.RETAIN


@dataclass(frozen=True)
class Transfer:
    """Leaves the source class without a new class in this run."""
    action: ClassVar[TransitionAction] = TransitionAction.TRANSFER


Decision = Union[Promote, Retain, Transfer]


def decision_for(action: Union[TransitionAction, str], target_class_id: Optional[str] = None) -> Decision:
    action = TransitionAction(action)
    if action is TransitionAction.TRANSFER:
        return Transfer()
    if action is TransitionAction.RETAIN:
        return Retain(target_class_id or "")
    return Promote(target_class_id or "")


@dataclass
class PlanEntry:
    student_id: str
    decision: Decision
    student_name: str = ""
    scholar_number: str = ""

    @property
    def action(self) -> TransitionAction:
        return self.decision.action

    @property
    def target_class_id(self) -> Optional[str]:
        return getattr(self.decision, "target_class_id", None) or None

    def to_dict(self) -> dict:
        data = {
            "studentId": self.student_id,
            "name": self.student_name,
            "scholarNumber": self.scholar_number,
            "action": self.action.value,
        }
        if self.target_class_id:
            data["targetClassId"] = self.target_class_id
        return data


# === plan ===

@dataclass
class TransitionPlan:
    source_class_id: str
    target_session_id: str
    entries: List[PlanEntry] = field(default_factory=list)
    classes: List[ClassOut] = field(default_factory=list, repr=False, compare=False)

    @property
    def source_class(self) -> Optional[ClassOut]:
        return next((c for c in self.classes if c.id == self.source_class_id), None)

    def entry(self, student_id: str) -> PlanEntry:
        for entry in self.entries:
            if entry.student_id == student_id:
                return entry
        raise PlanValidationError(f"Student {student_id} is not part of this transition.")

    def target_options(self, action: Union[TransitionAction, str]) -> List[ClassOut]:
        action = TransitionAction(action)
        if action is TransitionAction.PROMOTE:
            return promotion_candidates(self.classes, self.source_class)
        if action is TransitionAction.RETAIN:
            return retention_candidates(self.classes, self.source_class)
        return []

    def change_action(self, student_id: str, action: Union[TransitionAction, str]) -> PlanEntry:
        """Switch an entry's action, keeping its target when it is still a valid option."""
        entry = self.entry(student_id)
        action = TransitionAction(action)
        if action is TransitionAction.TRANSFER:
            entry.decision = Transfer()
            return entry

        option_ids = [c.id for c in self.target_options(action)]
        current = entry.target_class_id
        if current and current in option_ids:
            target = current
        else:
            target = (option_ids[0] if option_ids else "") or self.source_class_id
        entry.decision = decision_for(action, target)
        return entry

    def change_target(self, student_id: str, class_id: str) -> PlanEntry:
        entry = self.entry(student_id)
        if isinstance(entry.decision, Transfer):
            raise PlanValidationError("Transferred students do not take a target class.")
        entry.decision = decision_for(entry.action, class_id)
        return entry

    def to_dict(self) -> dict:
        return {
            "sourceClassId": self.source_class_id,
            "sessionId": self.target_session_id,
            "updates": [entry.to_dict() for entry in self.entries],
        }

    @classmethod
    def from_request(cls, request: SessionTransitionRequest, classes: Sequence[ClassOut] = ()) -> "TransitionPlan":
        return cls(
            source_class_id=request.source_class_id,
            target_session_id=request.session_id,
            entries=[
                PlanEntry(student_id=u.student_id, decision=decision_for(u.action, u.target_class_id))
                for u in request.updates
            ],
            classes=list(classes),
        )


def pick_default_session(sessions: Sequence[SessionOut], now: Optional[datetime] = None) -> str:
    """
    Guess the session a rollover is heading into.

    Earliest session starting after `now`, else the first inactive session,
    else the first session listed. Returns "" when there are none.
    """
    now = now or datetime.now(timezone.utc)
    known = [s for s in sessions if s.id]
    upcoming = [s for s in known if s.starts_at and s.starts_at > now]
    if upcoming:
        return min(upcoming, key=lambda s: s.starts_at).id
    inactive = next((s for s in known if not s.is_active), None)
    if inactive:
        return inactive.id
    return known[0].id if known else ""


class TransitionPlanner:
    def eligible_students(self, students: Sequence[StudentOut], target_session_id: Optional[str]) -> List[StudentOut]:
        if not target_session_id:
            return [s for s in students if s.id]
        return [s for s in students if s.id and not s.in_session(target_session_id)]

    def build_default_plan(
        self,
        source_class_id: str,
        target_session_id: str,
        all_classes: Sequence[ClassOut],
        all_students: Sequence[StudentOut],
    ) -> TransitionPlan:
        plan = TransitionPlan(
            source_class_id=source_class_id,
            target_session_id=target_session_id or "",
            classes=list(all_classes),
        )
        default_target = first_id(promotion_candidates(plan.classes, plan.source_class))
        students = self.eligible_students(all_students, target_session_id)
        plan.entries = [
            PlanEntry(
                student_id=s.id,
                decision=Promote(default_target),
                student_name=s.name,
                scholar_number=s.scholar_number,
            )
            for s in students
        ]

        log.info(
            "transition_plan_built",
            source_class_id=source_class_id,
            session_id=target_session_id,
            students=len(all_students),
            entries=len(plan.entries),
            skipped=len(all_students) - len(plan.entries),
            default_target=default_target or None,
        )
        return plan


# === submission ===

@dataclass
class TransitionResult:
    success: bool
    submitted: int
    dropped: List[str] = field(default_factory=list)
    message: str = ""
    response: Any = None


class BatchTransitionExecutor:
    def __init__(self, students: StudentService):
        self.students = students

    def validate(self, plan: TransitionPlan) -> SessionTransitionRequest:
        request, _ = self.prepare(plan)
        return request

    def prepare(self, plan: TransitionPlan) -> Tuple[SessionTransitionRequest, List[str]]:
        """Validated batch body plus the ids of entries skipped for lacking a target class."""
        if not plan.target_session_id:
            raise PlanValidationError("Please select target session.")
        if not plan.source_class_id:
            raise PlanValidationError("Please select source class.")
        if not plan.entries:
            raise PlanValidationError("No students available in selected class.")

        seen = set()
        duplicates = []
        for entry in plan.entries:
            if entry.student_id in seen and entry.student_id not in duplicates:
                duplicates.append(entry.student_id)
            seen.add(entry.student_id)
        if duplicates:
            raise PlanValidationError(f"Each student can only have one update: {', '.join(duplicates)}.")

        updates: List[TransitionUpdateIn] = []
        dropped: List[str] = []
        for entry in plan.entries:
            if entry.action is not TransitionAction.TRANSFER and not entry.target_class_id:
                dropped.append(entry.student_id)
                continue
            updates.append(TransitionUpdateIn(
                student_id=entry.student_id,
                action=entry.action,
                target_class_id=entry.target_class_id,
            ))

        if not updates:
            raise PlanValidationError("No valid student updates prepared.")

        request = SessionTransitionRequest(
            session_id=plan.target_session_id,
            source_class_id=plan.source_class_id,
            updates=updates,
        )
        return request, dropped

    async def submit(self, plan: TransitionPlan) -> TransitionResult:
        request, dropped = self.prepare(plan)
        if dropped:
            log.warning("transition_entries_dropped", count=len(dropped), student_ids=dropped)

        response = await self.students.submit_session_transition(request)
        success = bool(response.get("success", True)) if isinstance(response, dict) else True
        message = server_message(response) or (
            "Session upgrade applied successfully." if success else "Unable to apply session transition."
        )
        log.info("transition_submitted", success=success, submitted=len(request.updates), dropped=len(dropped))
        return TransitionResult(
            success=success,
            submitted=len(request.updates),
            dropped=dropped,
            message=message,
            response=response,
        )


class TransitionService:
    """Wires the planner and executor to live data; every open() re-reads the API."""

    def __init__(self, http: CoreHTTP):
        self.classes = ClassService(http)
        self.sessions = SessionService(http)
        self.students = StudentService(http)
        self.planner = TransitionPlanner()
        self.executor = BatchTransitionExecutor(self.students)

    async def open(self, source_class_id: str, target_session_id: Optional[str] = None) -> TransitionPlan:
        if not source_class_id:
            raise PlanValidationError("Please select source class.")
        classes = await self.classes.list_all_classes()
        if not target_session_id:
            target_session_id = pick_default_session(await self.sessions.list_all_sessions())
        students = await self.students.list_all_students(class_id=source_class_id)
        return self.planner.build_default_plan(source_class_id, target_session_id, classes, students)

    async def submit(self, plan: TransitionPlan) -> TransitionResult:
        return await self.executor.submit(plan)
