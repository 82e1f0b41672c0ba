"""Schema Migrator — runs pending Alembic revisions at startup, all-or-nothing.

Invariants:
    - Already at target: run() returns an empty plan without writing anything (idempotent)
    - All pending revisions run inside ONE transaction on one connection; any failure
      rolls everything back, leaving tables, data and alembic_version untouched
    - Forward only: a stored revision that is not an ancestor of the target is an error
    - Step states follow core.schema_migration: each step is in_progress while it runs,
      completed when Alembic reports it applied, failed if it raised
    - Concurrent run() calls on one migrator are serialized (asyncio.Lock)

Design Decisions:
    - Alembic revisions are the migration steps; this class only sequences them and
      tracks state, using Alembic's connection-sharing entry point
    - Callers must serialize migration against all other storage access; the FastAPI
      lifespan runs it before the app accepts requests
"""

import asyncio
import logging
from pathlib import Path

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from alembic.util import CommandError
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import AsyncEngine

from usermanagement.core.domain_types import MigrationState, Revision
from usermanagement.core.errors import MigrationError
from usermanagement.core.schema_migration import MigrationPlan, MigrationStep

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent.parent / "migrations"


def alembic_config() -> Config:
    """Alembic config pointing at the packaged migrations, no ini file."""
    cfg = Config()
    cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
    return cfg


class SchemaMigrator:
    """Brings a store to a target Alembic revision."""

    def __init__(self, engine: AsyncEngine):
        self._engine = engine
        self._lock = asyncio.Lock()

    async def current_revision(self) -> str | None:
        async with self._engine.connect() as conn:
            return await conn.run_sync(_current_revision)

    async def plan(self, target: str = "head") -> MigrationPlan:
        async with self._engine.connect() as conn:
            return await conn.run_sync(_build_plan, target)

    async def is_up_to_date(self, target: str = "head") -> bool:
        return (await self.plan(target)).is_up_to_date

    async def run(self, target: str = "head") -> MigrationPlan:
        """Apply every pending revision up to target in a single transaction."""
        async with self._lock:
            plan: MigrationPlan | None = None
            try:
                async with self._engine.begin() as conn:
                    plan = await conn.run_sync(_build_plan, target)
                    if plan.is_up_to_date:
                        logger.info(
                            f"Schema already at {plan.target}",
                            extra={"revision": plan.target},
                        )
                        return plan
                    logger.info(
                        f"Migrating schema {plan.current} -> {plan.target} "
                        f"({len(plan.steps)} steps)",
                        extra={"revision": plan.target},
                    )
                    await conn.run_sync(_upgrade, plan)
            except MigrationError as e:
                _record_failure(plan, e)
                raise
            except Exception as e:
                revision = _record_failure(plan, e)
                raise MigrationError(str(e), revision) from e
            logger.info(
                f"Schema migrated to {plan.target}",
                extra={"revision": plan.target, "migration_state": "completed"},
            )
            return plan


def _current_revision(conn: Connection) -> str | None:
    return MigrationContext.configure(conn).get_current_revision()


def _build_plan(conn: Connection, target: str) -> MigrationPlan:
    """Walk down_revision links from target until the stored revision."""
    script = ScriptDirectory.from_config(alembic_config())
    current = _current_revision(conn)
    try:
        target_rev = (
            script.get_current_head() if target == "head"
            else script.get_revision(target).revision
        )
        steps: list[MigrationStep] = []
        rev = script.get_revision(target_rev)
        while rev is not None and rev.revision != current:
            steps.append(MigrationStep(
                revision=Revision(rev.revision),
                description=rev.doc or "",
                is_noop=getattr(rev.module, "is_noop", False),
            ))
            rev = script.get_revision(rev.down_revision) if rev.down_revision else None
    except CommandError as e:
        raise MigrationError(str(e), target) from e

    if current is not None and rev is None:
        raise MigrationError(
            f"stored revision {current} is not an ancestor of {target_rev}; "
            "only forward migrations are defined",
            current,
        )
    steps.reverse()
    return MigrationPlan(
        current=Revision(current) if current else None,
        target=Revision(target_rev),
        steps=steps,
    )


def _start_next(plan: MigrationPlan) -> None:
    """Mark the next pending step in progress; no-op steps wait for their apply."""
    nxt = next(iter(plan.pending), None)
    if nxt is not None and not nxt.is_noop:
        nxt.start()
        logger.info(
            f"Migration {nxt.revision} started",
            extra={"revision": nxt.revision, "migration_state": nxt.state.value},
        )


def _upgrade(conn: Connection, plan: MigrationPlan) -> None:
    def on_version_apply(*, ctx, step, heads, run_args) -> None:
        for revision in step.up_revision_ids:
            applied = plan.step_for(revision)
            if applied is None or applied.state is MigrationState.COMPLETED:
                continue
            applied.complete()
            logger.info(
                f"Migration {revision} completed",
                extra={"revision": revision, "migration_state": applied.state.value},
            )
        _start_next(plan)

    cfg = alembic_config()
    cfg.attributes["connection"] = conn
    cfg.attributes["on_version_apply"] = on_version_apply
    _start_next(plan)
    command.upgrade(cfg, plan.target)


def _record_failure(plan: MigrationPlan | None, exc: Exception) -> str | None:
    """Mark the running step failed and log; returns the revision to blame."""
    if plan is None:
        logger.error(f"Schema migration could not be planned: {exc}")
        return getattr(exc, "revision", None)
    running = plan.running_step()
    revision = running.revision if running else plan.target
    if running is not None:
        running.fail(str(exc))
    logger.error(
        f"Schema migration failed at {revision}; transaction rolled back: {exc}",
        extra={"revision": revision, "migration_state": MigrationState.FAILED.value},
    )
    return revision
