"""Schema Migration State — per-step state machine and the ordered upgrade plan.

Invariants:
    - Step lifecycle: PENDING -> IN_PROGRESS -> COMPLETED | FAILED
    - A no-op step may go PENDING -> COMPLETED directly; no other step may
    - COMPLETED and FAILED are terminal; there is no rollback state
    - A plan lists steps oldest first, from the stored revision (exclusive)
      to the target revision (inclusive)

Design Decisions:
    - Illegal transitions raise InvalidMigrationTransition instead of being ignored
    - Pure dataclasses: the Alembic-driven runner in infrastructure/ owns all IO
"""

from dataclasses import dataclass, field

from usermanagement.core.domain_types import MigrationState, Revision
from usermanagement.core.errors import InvalidMigrationTransition


_TRANSITIONS: dict[MigrationState, set[MigrationState]] = {
    MigrationState.PENDING: {MigrationState.IN_PROGRESS},
    MigrationState.IN_PROGRESS: {MigrationState.COMPLETED, MigrationState.FAILED},
    MigrationState.COMPLETED: set(),
    MigrationState.FAILED: set(),
}


@dataclass
class MigrationStep:
    """One revision of the schema history."""
    revision: Revision
    description: str = ""
    is_noop: bool = False
    state: MigrationState = MigrationState.PENDING
    error: str | None = None

    def _move(self, target: MigrationState) -> None:
        allowed = _TRANSITIONS[self.state]
        if self.is_noop and self.state is MigrationState.PENDING:
            allowed = allowed | {MigrationState.COMPLETED}
        if target not in allowed:
            raise InvalidMigrationTransition(
                self.revision, self.state.value, target.value,
            )
        self.state = target

    def start(self) -> None:
        self._move(MigrationState.IN_PROGRESS)

    def complete(self) -> None:
        self._move(MigrationState.COMPLETED)

    def fail(self, reason: str) -> None:
        self._move(MigrationState.FAILED)
        self.error = reason


@dataclass
class MigrationPlan:
    """Ordered steps needed to bring a store from `current` to `target`."""
    current: Revision | None
    target: Revision
    steps: list[MigrationStep] = field(default_factory=list)

    @property
    def is_up_to_date(self) -> bool:
        return not self.steps

    @property
    def pending(self) -> list[MigrationStep]:
        return [s for s in self.steps if s.state is MigrationState.PENDING]

    @property
    def completed(self) -> list[MigrationStep]:
        return [s for s in self.steps if s.state is MigrationState.COMPLETED]

    @property
    def failed(self) -> list[MigrationStep]:
        return [s for s in self.steps if s.state is MigrationState.FAILED]

    def step_for(self, revision: str) -> MigrationStep | None:
        for step in self.steps:
            if step.revision == revision:
                return step
        return None

    def running_step(self) -> MigrationStep | None:
        for step in self.steps:
            if step.state is MigrationState.IN_PROGRESS:
                return step
        return None
