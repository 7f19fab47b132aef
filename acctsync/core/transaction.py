"""Rename transaction: four dependent mutations committed together or reverted.

The identity store and the filesystem have no shared transaction primitive,
so each step carries its own compensating action. Compensations inspect the
current state first and succeed without acting when the forward action never
took effect, which makes rollback safe to run after a partial commit.

Commit order:
    MoveHome -> SetDisplayName -> SetRecordKey -> SetHomeAttribute

Rollback runs over the committed steps in reverse order and stops at the first
compensation that fails. A step that raises counts as a failed step.
"""
from __future__ import annotations
import errno
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Sequence

from .directory import HOME_DIRECTORY, REAL_NAME, RECORD_NAME, IdentityStore
from .exceptions import (
    CompensationError,
    DirectoryReadError,
    HomeCollisionError,
    RenameError,
    StepCommitError,
)
from .filesystem import Filesystem
from .identity import AccountIdentitySnapshot, CanonicalIdentity, home_path_for
from .results import OpResult

logger = logging.getLogger(__name__)


class TransactionState(str, Enum):
    PENDING = "pending"
    COMMITTING = "committing"
    COMMITTED = "committed"
    ROLLING_BACK = "rolling_back"
    ROLLED_BACK = "rolled_back"
    ROLLBACK_FAILED = "rollback_failed"


@dataclass(frozen=True)
class RenameContext:
    """Everything a step needs, passed explicitly instead of shared globals."""

    snapshot: AccountIdentitySnapshot
    target: CanonicalIdentity
    store: IdentityStore
    fs: Filesystem
    users_root: str = "/Users"

    @property
    def new_home(self) -> str:
        return home_path_for(self.users_root, self.target.target_login_name)


class RenameStep:
    """One mutation with a forward action and an idempotent compensation."""

    name = "step"

    def commit(self, ctx: RenameContext) -> OpResult:
        raise NotImplementedError

    def compensate(self, ctx: RenameContext) -> OpResult:
        raise NotImplementedError

    def commit_error(self, ctx: RenameContext, result: OpResult) -> RenameError:
        return StepCommitError(self.name, result)

    def __repr__(self) -> str:
        return f"<{type(self).__name__}>"


def _current_record_key(ctx: RenameContext) -> str:
    """Key the record is addressed by right now, whichever side of SetRecordKey we are on."""
    if ctx.store.has_record(ctx.snapshot.record_key):
        return ctx.snapshot.record_key
    return ctx.target.target_login_name


def _revert_attribute(ctx: RenameContext, record_key: str, attribute: str, original: str) -> OpResult:
    """Write ``original`` back unless the store already holds it."""
    try:
        current = ctx.store.read_attribute(record_key, attribute)
    except DirectoryReadError as e:
        logger.warning("Could not inspect %s before reverting: %s", attribute, e)
        current = None
    if current == original:
        return OpResult.success(f"{attribute} already {original}")
    return ctx.store.write_attribute(record_key, attribute, original)


class MoveHome(RenameStep):
    name = "MoveHome"

    def commit(self, ctx: RenameContext) -> OpResult:
        if ctx.fs.exists(ctx.new_home):
            logger.error("There is already a home directory %s. Exiting without making changes", ctx.new_home)
            return OpResult.failure(f"{ctx.new_home} already exists", errno.EEXIST)
        logger.info("Changing the users home path from %s to %s", ctx.snapshot.home_path, ctx.new_home)
        return ctx.fs.move(ctx.snapshot.home_path, ctx.new_home)

    def compensate(self, ctx: RenameContext) -> OpResult:
        original = ctx.snapshot.home_path
        if ctx.fs.exists(original):
            logger.info("The home directory %s is in place, nothing to move back", original)
            return OpResult.success(f"{original} already exists")
        if not ctx.fs.exists(ctx.new_home):
            return OpResult.failure(f"neither {original} nor {ctx.new_home} exists", errno.ENOENT)
        logger.info("Changing back the home directory to %s", original)
        return ctx.fs.move(ctx.new_home, original)

    def commit_error(self, ctx: RenameContext, result: OpResult) -> RenameError:
        if result.status_code == errno.EEXIST:
            return HomeCollisionError(ctx.new_home)
        return super().commit_error(ctx, result)


class SetDisplayName(RenameStep):
    name = "SetDisplayName"

    def commit(self, ctx: RenameContext) -> OpResult:
        logger.info("Updating the computer RealName to %s", ctx.target.target_display_name)
        return ctx.store.write_attribute(ctx.snapshot.record_key, REAL_NAME, ctx.target.target_display_name)

    def compensate(self, ctx: RenameContext) -> OpResult:
        logger.info("Changing back the RealName to %s", ctx.snapshot.display_name)
        return _revert_attribute(ctx, _current_record_key(ctx), REAL_NAME, ctx.snapshot.display_name)


class SetRecordKey(RenameStep):
    name = "SetRecordKey"

    def commit(self, ctx: RenameContext) -> OpResult:
        logger.info("Updating the computer RecordName to %s", ctx.target.target_login_name)
        return ctx.store.write_attribute(ctx.snapshot.record_key, RECORD_NAME, ctx.target.target_login_name)

    def compensate(self, ctx: RenameContext) -> OpResult:
        original = ctx.snapshot.record_key
        if ctx.store.has_record(original):
            return OpResult.success(f"RecordName already {original}")
        logger.info("Changing back the RecordName to %s", original)
        return ctx.store.write_attribute(ctx.target.target_login_name, RECORD_NAME, original)


class SetHomeAttribute(RenameStep):
    name = "SetHomeAttribute"

    # Runs after SetRecordKey, so the record is addressed by the new login name.
    def commit(self, ctx: RenameContext) -> OpResult:
        logger.info("Updating the user NFSHomeDirectory to %s", ctx.new_home)
        return ctx.store.write_attribute(ctx.target.target_login_name, HOME_DIRECTORY, ctx.new_home)

    def compensate(self, ctx: RenameContext) -> OpResult:
        logger.info("Changing back the NFSHomeDirectory to %s", ctx.snapshot.home_path)
        return _revert_attribute(ctx, _current_record_key(ctx), HOME_DIRECTORY, ctx.snapshot.home_path)


def _guarded(action: Callable[[RenameContext], OpResult], ctx: RenameContext) -> OpResult:
    """Run a step direction, turning an unexpected exception into a failed result."""
    try:
        return action(ctx)
    except Exception as e:
        logger.exception("Unexpected error in %s", getattr(action, "__qualname__", action))
        return OpResult.failure(f"{type(e).__name__}: {e}", getattr(e, "errno", None))


DEFAULT_STEPS: Sequence[RenameStep] = (MoveHome(), SetDisplayName(), SetRecordKey(), SetHomeAttribute())


@dataclass
class TransactionOutcome:
    """Final state of a transaction run.

    Attributes:
        state: COMMITTED, ROLLED_BACK or ROLLBACK_FAILED
        committed: Names of steps whose forward action succeeded, in order
        compensated: Names of steps reverted during rollback, in order
        failure: The commit failure that started the rollback
        compensation_failure: The compensation that could not be applied
    """

    state: TransactionState
    committed: List[str] = field(default_factory=list)
    compensated: List[str] = field(default_factory=list)
    failure: Optional[RenameError] = None
    compensation_failure: Optional[CompensationError] = None

    @property
    def ok(self) -> bool:
        return self.state == TransactionState.COMMITTED

    def to_dict(self) -> dict:
        return {
            "state": self.state.value,
            "committed": list(self.committed),
            "compensated": list(self.compensated),
            "failure": str(self.failure) if self.failure else None,
            "compensation_failure": str(self.compensation_failure) if self.compensation_failure else None,
        }


class RenameTransaction:
    """Run the rename steps in order and compensate on the first failure."""

    def __init__(
        self,
        store: IdentityStore,
        fs: Filesystem,
        users_root: str = "/Users",
        steps: Optional[Sequence[RenameStep]] = None,
    ):
        self.store = store
        self.fs = fs
        self.users_root = users_root
        self.steps = list(steps if steps is not None else DEFAULT_STEPS)
        self.state = TransactionState.PENDING
        self.step_index = 0

    def run(self, snapshot: AccountIdentitySnapshot, target: CanonicalIdentity) -> TransactionOutcome:
        ctx = RenameContext(snapshot, target, self.store, self.fs, self.users_root)
        committed: List[RenameStep] = []

        self.state = TransactionState.COMMITTING
        for index, step in enumerate(self.steps):
            self.step_index = index
            result = _guarded(step.commit, ctx)
            if not result.ok:
                failure = step.commit_error(ctx, result)
                logger.error("%s", failure)
                return self._rollback(ctx, committed, failure)
            committed.append(step)
            logger.debug("%s committed", step.name)

        self.state = TransactionState.COMMITTED
        return TransactionOutcome(self.state, committed=[s.name for s in committed])

    def _rollback(self, ctx: RenameContext, committed: List[RenameStep], failure: RenameError) -> TransactionOutcome:
        self.state = TransactionState.ROLLING_BACK
        outcome = TransactionOutcome(self.state, committed=[s.name for s in committed], failure=failure)
        if committed:
            logger.info("Reverting %d committed step(s)", len(committed))

        for step in reversed(committed):
            result = _guarded(step.compensate, ctx)
            if not result.ok:
                outcome.compensation_failure = CompensationError(step.name, result)
                self.state = outcome.state = TransactionState.ROLLBACK_FAILED
                logger.critical("%s; the account is left in a mixed state", outcome.compensation_failure)
                return outcome
            outcome.compensated.append(step.name)

        self.state = outcome.state = TransactionState.ROLLED_BACK
        return outcome
