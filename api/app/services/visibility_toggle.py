"""Owner-gated public/private toggle for a single query.

States:
- read-only: the viewer does not own the query. Only a label is offered and
  toggle() never writes anything.
- idle: the viewer owns the query and may flip it.
- updating: a flip is in flight; the control is disabled.

A flip tries the remote endpoint first and falls back to the storage
manager. The displayed value and the change callback only move once one of
the two writes has succeeded.
"""
import enum
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from app.schemas.query import Query, QueryId, Visibility
from app.storage.exceptions import RemoteStorageError
from app.storage.manager import StorageManager

logger = logging.getLogger(__name__)

UPDATING_LABEL = "Updating..."
VISIBILITY_LABELS = {
    Visibility.PUBLIC: "Public",
    Visibility.PRIVATE: "Private",
}

RemoteSetter = Callable[[QueryId, Visibility], Any]
ChangeHandler = Callable[[QueryId, Visibility], None]


class ToggleState(str, enum.Enum):
    READ_ONLY = "read-only"
    IDLE = "idle"
    UPDATING = "updating"


class ToggleOutcome(str, enum.Enum):
    """Result of one toggle() call."""
    SUCCESS = "success"
    FALLBACK_SUCCEEDED = "remote-failed-fallback-succeeded"
    BOTH_FAILED = "both-failed"
    READ_ONLY = "read-only"
    BUSY = "busy"


@dataclass(frozen=True)
class ToggleView:
    """What a front end should draw for the control."""
    label: str
    visibility: Visibility
    actionable: bool
    disabled: bool


class VisibilityToggle:
    """
    Controller for a query's visibility control.

    Args:
        query: The query being displayed.
        current_user_id: Id of the viewer.
        storage: Manager used when the remote endpoint fails.
        on_visibility_change: Called as (query_id, new_visibility) after a
            successful write. Never called when both paths fail.
        remote: Remote-first setter, usually NotebookClient.set_visibility.
            When None the remote step counts as failed.
    """

    def __init__(
        self,
        query: Query,
        current_user_id: str,
        storage: StorageManager,
        on_visibility_change: ChangeHandler,
        remote: Optional[RemoteSetter] = None,
    ):
        self.query = query
        self.current_user_id = current_user_id
        self.storage = storage
        self.on_visibility_change = on_visibility_change
        self.remote = remote
        self.visibility = Visibility.resolve(query.visibility)
        self._state = ToggleState.READ_ONLY if not self.is_owner else ToggleState.IDLE

    @property
    def is_owner(self) -> bool:
        return self.query.user_id == self.current_user_id

    @property
    def state(self) -> ToggleState:
        return self._state

    def render(self) -> ToggleView:
        if self._state is ToggleState.READ_ONLY:
            return ToggleView(
                label=VISIBILITY_LABELS[self.visibility],
                visibility=self.visibility,
                actionable=False,
                disabled=True,
            )
        if self._state is ToggleState.UPDATING:
            return ToggleView(
                label=UPDATING_LABEL,
                visibility=self.visibility,
                actionable=True,
                disabled=True,
            )
        return ToggleView(
            label=VISIBILITY_LABELS[self.visibility],
            visibility=self.visibility,
            actionable=True,
            disabled=False,
        )

    def toggle(self) -> ToggleOutcome:
        """
        Flip visibility. Never raises; failures are logged and reported as BOTH_FAILED.

        FALLBACK_SUCCEEDED only means the storage call returned. Adapters skip
        writes for unknown ids or other owners without an error, so re-read
        the query if the stored value matters.
        """
        if self._state is ToggleState.READ_ONLY:
            return ToggleOutcome.READ_ONLY
        if self._state is ToggleState.UPDATING:
            return ToggleOutcome.BUSY

        target = self.visibility.opposite()
        self._state = ToggleState.UPDATING
        try:
            outcome = self._write(target)
        finally:
            self._state = ToggleState.IDLE

        if outcome is ToggleOutcome.BOTH_FAILED:
            return outcome

        self.visibility = target
        try:
            self.on_visibility_change(self.query.id, target)
        except Exception:
            logger.exception("Visibility change handler failed for query %s", self.query.id)
        return outcome

    def _write(self, target: Visibility) -> ToggleOutcome:
        try:
            if self.remote is None:
                raise RemoteStorageError("No remote visibility endpoint configured")
            self.remote(self.query.id, target)
            return ToggleOutcome.SUCCESS
        except Exception as exc:
            logger.info(
                "Remote visibility update for query %s failed, using storage directly: %s",
                self.query.id, exc,
            )

        try:
            self.storage.set_query_visibility(self.query.id, target, self.current_user_id)
            return ToggleOutcome.FALLBACK_SUCCEEDED
        except Exception as exc:
            logger.error("Failed to update visibility: %s", exc)
            return ToggleOutcome.BOTH_FAILED
