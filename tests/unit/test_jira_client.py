"""Unit tests for the Jira REST client (mocked session)."""

from __future__ import annotations

from typing import Any
from unittest.mock import Mock

import pytest
import requests

from jira_git_branch.jira.client import JiraClient, JiraResponseError
from jira_git_branch.jira.models import IssueRecord


def _response(payload: Any = None, *, status_code: int = 200) -> Mock:
    resp = Mock()
    resp.status_code = status_code
    resp.json.return_value = payload
    if status_code >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(
            f"{status_code} Error", response=resp
        )
    else:
        resp.raise_for_status.return_value = None
    return resp


def _client(session: Mock, base_url: str = "https://example.atlassian.net/") -> JiraClient:
    return JiraClient(
        base_url=base_url,
        email="dev@example.com",
        api_token="test-token",
        timeout=12.5,
        session=session,
    )


@pytest.fixture
def session() -> Mock:
    mock_session = Mock()
    mock_session.headers = {}
    return mock_session


def test_client_configures_basic_auth_and_json_accept(session: Mock) -> None:
    _client(session)

    assert session.auth == ("dev@example.com", "test-token")
    assert session.headers["Accept"] == "application/json"
    assert session.headers["User-Agent"].startswith("jira-git-branch/")


def test_client_requires_credentials(session: Mock) -> None:
    with pytest.raises(ValueError):
        JiraClient(base_url="", email="a", api_token="b", session=session)
    with pytest.raises(ValueError):
        JiraClient(base_url="https://x", email="", api_token="b", session=session)


def test_get_active_sprint_id_requests_one_active_sprint(session: Mock) -> None:
    session.get.return_value = _response({"values": [{"id": 77, "state": "active"}]})

    sprint_id = _client(session).get_active_sprint_id(board_id="206")

    assert sprint_id == 77
    session.get.assert_called_once_with(
        "https://example.atlassian.net/rest/agile/1.0/board/206/sprint",
        params={"state": "active", "maxResults": 1},
        timeout=12.5,
    )


@pytest.mark.parametrize(
    "payload",
    [{"values": []}, {}, {"values": [{"name": "no id"}]}, {"values": [{"id": "77"}]}],
)
def test_get_active_sprint_id_returns_none_without_sprint(session: Mock, payload: Any) -> None:
    session.get.return_value = _response(payload)

    assert _client(session).get_active_sprint_id(board_id="206") is None


def test_get_active_sprint_id_treats_client_error_as_no_sprint(session: Mock) -> None:
    # Kanban boards answer 400 "The board does not support sprints".
    session.get.return_value = _response({"errorMessages": ["no sprints"]}, status_code=400)

    assert _client(session).get_active_sprint_id(board_id="206") is None


def test_get_active_sprint_id_propagates_server_error(session: Mock) -> None:
    session.get.return_value = _response({}, status_code=503)

    with pytest.raises(requests.HTTPError):
        _client(session).get_active_sprint_id(board_id="206")


def test_get_active_sprint_id_propagates_connection_error(session: Mock) -> None:
    session.get.side_effect = requests.ConnectionError("unreachable")

    with pytest.raises(requests.ConnectionError):
        _client(session).get_active_sprint_id(board_id="206")


def test_get_sprint_issues_normalizes_records(session: Mock) -> None:
    session.get.return_value = _response(
        {
            "issues": [
                {
                    "key": "AB-12",
                    "fields": {"summary": "Fix Login Bug!!", "status": {"name": "In Progress"}},
                },
                {"key": "AB-13", "fields": {"summary": None, "status": None}},
                {"key": "AB-14"},
                {"fields": {"summary": "no key"}},
                "garbage",
            ]
        }
    )

    issues = _client(session).get_sprint_issues(sprint_id=77, max_results=200)

    assert issues == [
        IssueRecord(key="AB-12", summary="Fix Login Bug!!", status="In Progress"),
        IssueRecord(key="AB-13", summary="", status=""),
        IssueRecord(key="AB-14", summary="", status=""),
    ]
    session.get.assert_called_once_with(
        "https://example.atlassian.net/rest/agile/1.0/sprint/77/issue",
        params={"fields": "summary,status", "maxResults": 200},
        timeout=12.5,
    )


def test_get_board_issues_uses_board_endpoint(session: Mock) -> None:
    session.get.return_value = _response(
        {"issues": [{"key": "K-1", "fields": {"summary": "S", "status": {"name": "Done"}}}]}
    )

    issues = _client(session).get_board_issues(board_id="206", max_results=5)

    assert issues == [IssueRecord(key="K-1", summary="S", status="Done")]
    session.get.assert_called_once_with(
        "https://example.atlassian.net/rest/agile/1.0/board/206/issue",
        params={"fields": "summary,status", "maxResults": 5},
        timeout=12.5,
    )


def test_issue_listing_propagates_http_errors(session: Mock) -> None:
    session.get.return_value = _response({}, status_code=401)

    with pytest.raises(requests.HTTPError):
        _client(session).get_board_issues(board_id="206", max_results=5)


def test_issue_listing_rejects_unexpected_body(session: Mock) -> None:
    session.get.return_value = _response({"values": []})

    with pytest.raises(JiraResponseError):
        _client(session).get_board_issues(board_id="206", max_results=5)


def test_non_json_body_is_a_response_error(session: Mock) -> None:
    resp = _response()
    resp.json.side_effect = ValueError("Expecting value")
    session.get.return_value = resp

    with pytest.raises(JiraResponseError):
        _client(session).get_sprint_issues(sprint_id=1, max_results=5)


def test_client_closes_session_on_exit(session: Mock) -> None:
    with _client(session):
        pass

    session.close.assert_called_once_with()
