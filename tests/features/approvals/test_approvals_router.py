# (c) Copyright Datacraft, 2026
"""Tests for the approvals endpoints."""
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from fastapi.testclient import TestClient

from docportal.app import app
from docportal.core.exceptions import AuthExpired
from docportal.core.features.approvals import (
    ActionResult,
    ApprovalItem,
    ApprovalService,
    BulkUpdateResult,
    SiteRole,
)
from docportal.core.features.approvals.queue import ApprovalQueue
from docportal.core.features.approvals.router import get_approval_service
from docportal.core.sharepoint import SharePointClient
from docportal.core.types import ModerationStatus

HEADERS = {"X-Forwarded-User": "jane"}
SITE = "https://contoso.sharepoint.com/sites/alpha"
ITEM = {
    "item_id": 5,
    "file_ref": "/sites/alpha/Shared Documents/plan.pdf",
    "file_dir_ref": "/sites/alpha/Shared Documents",
}


@pytest.fixture
def service(settings):
    service = MagicMock()
    service.settings = settings
    service.registry.wait = AsyncMock()
    return service


@pytest.fixture
def client(service):
    app.dependency_overrides[get_approval_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_list_waits_for_every_page(client, service):
    service.load = AsyncMock(return_value=SiteRole(user_id=1, is_owner=True))
    service.queue = ApprovalQueue().extend([ApprovalItem(**ITEM, moderation_status=ModerationStatus.PENDING)])

    response = client.get("/approvals", params={"site_url": SITE, "site_name": "alpha"}, headers=HEADERS)

    assert response.status_code == 200
    data = response.json()
    assert data["can_moderate"] is True
    assert data["auto_approval"] is True
    assert [i["item_id"] for i in data["items"]] == [5]
    service.load.assert_awaited_once_with(SITE, "alpha")
    service.registry.wait.assert_awaited_once()


def test_reject_passes_reason(client, service):
    service.reject = AsyncMock(return_value=ActionResult(item_id=5, success=True, status=ModerationStatus.DENIED))

    response = client.post(
        "/approvals/reject",
        json={"site_url": SITE, "site_name": "alpha", "item": ITEM, "reason": "Wrong area"},
        headers=HEADERS,
    )

    assert response.status_code == 200
    assert response.json()["status"] == ModerationStatus.DENIED
    args = service.reject.await_args.args
    assert args[0] == SITE and args[3] == "Wrong area"


def test_bulk_status_lists_failures(client, service):
    service.set_status = AsyncMock(return_value=BulkUpdateResult(succeeded=[1], failed={2: "Locked"}))

    response = client.post(
        "/approvals/status",
        json={"site_url": SITE, "file_dir_ref": ITEM["file_dir_ref"], "item_ids": [1, 2], "status": 0},
        headers=HEADERS,
    )

    assert response.status_code == 200
    assert response.json() == {"succeeded": [1], "failed": {"2": "Locked"}}


def test_bulk_status_needs_items(client):
    response = client.post(
        "/approvals/status",
        json={"site_url": SITE, "file_dir_ref": "/x", "item_ids": [], "status": 0},
        headers=HEADERS,
    )

    assert response.status_code == 422


def test_expired_session_is_401(client, service):
    service.approve = AsyncMock(side_effect=AuthExpired())

    response = client.post(
        "/approvals/approve",
        json={"site_url": SITE, "site_name": "alpha", "item": ITEM},
        headers=HEADERS,
    )

    assert response.status_code == 401
    assert response.json() == {"detail": "Authentication expired, sign in again."}


@pytest.mark.parametrize("status", [401, 503])
def test_list_reports_a_failed_page(settings, status):
    """A page request that fails upstream fails the whole listing."""
    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.endswith("/currentuser/groups"):
            return httpx.Response(200, json={"value": []})
        if path.endswith("/currentuser"):
            return httpx.Response(200, json={"Id": 1, "IsSiteAdmin": True})
        return httpx.Response(status, json={"error": {"message": {"value": "Page failed"}}})

    client = SharePointClient(access_token="t", transport=httpx.MockTransport(handler))
    app.dependency_overrides[get_approval_service] = lambda: ApprovalService(
        client, organizer=MagicMock(), settings=settings,
    )
    try:
        response = TestClient(app).get(
            "/approvals", params={"site_url": SITE, "site_name": "alpha"}, headers=HEADERS,
        )
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == status
