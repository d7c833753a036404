"""Tests for the owner-gated visibility toggle."""
import logging
from unittest import mock

import pytest

from app.schemas.query import Visibility
from app.services.notebook_client import NotebookClient
from app.services.visibility_toggle import ToggleOutcome, ToggleState, VisibilityToggle
from app.storage.exceptions import RemoteStorageError
from app.storage.manager import StorageManager
from tests.fakes import FakeResponse


@pytest.fixture
def storage(kv_store):
    return StorageManager(local_store=kv_store)


@pytest.fixture
def saved(storage, make_query):
    query = make_query(1, "u1")
    storage.save_query(query)
    return query


def build(query, user_id, storage, remote=None):
    on_change = mock.Mock()
    toggle = VisibilityToggle(query, user_id, storage, on_change, remote=remote)
    return toggle, on_change


def test_owner_sees_idle_control(saved, storage):
    toggle, _ = build(saved, "u1", storage)
    view = toggle.render()
    assert toggle.state is ToggleState.IDLE
    assert view.label == "Private"
    assert view.actionable is True
    assert view.disabled is False


def test_remote_success(saved, storage):
    remote = mock.Mock()
    toggle, on_change = build(saved, "u1", storage, remote=remote)

    assert toggle.toggle() is ToggleOutcome.SUCCESS
    remote.assert_called_once_with(1, Visibility.PUBLIC)
    on_change.assert_called_once_with(1, Visibility.PUBLIC)
    assert toggle.render().label == "Public"
    # the remote path did the write, storage was not touched
    assert storage.list_public_queries() == []


def test_remote_failure_falls_back_to_storage(saved, storage):
    remote = mock.Mock(side_effect=RemoteStorageError("boom", status_code=500))
    toggle, on_change = build(saved, "u1", storage, remote=remote)

    assert toggle.toggle() is ToggleOutcome.FALLBACK_SUCCEEDED
    on_change.assert_called_once_with(1, Visibility.PUBLIC)
    assert [q.id for q in storage.list_public_queries()] == [1]


def test_missing_remote_uses_storage(saved, storage):
    toggle, on_change = build(saved, "u1", storage)
    assert toggle.toggle() is ToggleOutcome.FALLBACK_SUCCEEDED
    assert [q.id for q in storage.list_public_queries()] == [1]


def test_both_paths_fail(saved, caplog):
    storage = mock.Mock()
    storage.set_query_visibility.side_effect = RemoteStorageError("network down")
    remote = mock.Mock(side_effect=RemoteStorageError("boom"))
    toggle, on_change = build(saved, "u1", storage, remote=remote)

    with caplog.at_level(logging.ERROR, logger="app.services.visibility_toggle"):
        outcome = toggle.toggle()

    assert outcome is ToggleOutcome.BOTH_FAILED
    on_change.assert_not_called()
    assert toggle.visibility == Visibility.PRIVATE
    assert toggle.state is ToggleState.IDLE
    assert "Failed to update visibility" in caplog.text


def test_control_disabled_while_updating(saved, storage):
    seen = []

    def remote(query_id, visibility):
        seen.append((toggle.state, toggle.render()))
        assert toggle.toggle() is ToggleOutcome.BUSY

    toggle, on_change = build(saved, "u1", storage, remote=remote)
    toggle.toggle()

    state, view = seen[0]
    assert state is ToggleState.UPDATING
    assert view.label == "Updating..."
    assert view.disabled is True
    on_change.assert_called_once()
    assert toggle.state is ToggleState.IDLE


def test_non_owner_is_read_only(saved, storage):
    remote = mock.Mock()
    toggle, on_change = build(saved, "u2", storage, remote=remote)

    view = toggle.render()
    assert toggle.state is ToggleState.READ_ONLY
    assert view.label == "Private"
    assert view.actionable is False

    assert toggle.toggle() is ToggleOutcome.READ_ONLY
    remote.assert_not_called()
    on_change.assert_not_called()
    assert storage.list_public_queries() == []


def test_public_to_private(storage, make_query):
    query = make_query(5, "u1", "public")
    storage.save_query(query)
    toggle, on_change = build(query, "u1", storage)

    assert toggle.render().label == "Public"
    toggle.toggle()
    on_change.assert_called_once_with(5, Visibility.PRIVATE)
    assert storage.list_public_queries() == []


def test_flips_back_and_forth(saved, storage):
    toggle, on_change = build(saved, "u1", storage)
    toggle.toggle()
    toggle.toggle()
    assert on_change.call_args_list == [
        mock.call(1, Visibility.PUBLIC),
        mock.call(1, Visibility.PRIVATE),
    ]


def test_handler_error_does_not_escape(saved, storage):
    toggle = VisibilityToggle(saved, "u1", storage, mock.Mock(side_effect=RuntimeError("ui gone")))
    assert toggle.toggle() is ToggleOutcome.FALLBACK_SUCCEEDED
    assert toggle.visibility == Visibility.PUBLIC


def test_with_api_client(saved, storage):
    session = mock.Mock()
    session.headers = {}
    session.request.return_value = FakeResponse(200, {"success": True, "visibility": "public"})
    client = NotebookClient("http://localhost:8000", token="jwt", session=session)
    toggle, on_change = build(saved, "u1", storage, remote=client.set_visibility)

    assert toggle.toggle() is ToggleOutcome.SUCCESS
    on_change.assert_called_once_with(1, Visibility.PUBLIC)


def test_fallback_reports_success_for_unstored_query(storage, make_query):
    query = make_query(99, "u1")
    toggle, on_change = build(query, "u1", storage)

    assert toggle.toggle() is ToggleOutcome.FALLBACK_SUCCEEDED
    on_change.assert_called_once_with(99, Visibility.PUBLIC)
    assert storage.get_all_queries() == []
