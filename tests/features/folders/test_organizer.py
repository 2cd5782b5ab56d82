# (c) Copyright Datacraft, 2026
"""Tests for drawing folder filing."""
import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from docportal.core.config import Settings
from docportal.core.exceptions import FILE_NAME_TOO_LONG_MESSAGE, ResourceNotFound
from docportal.core.features.folders import FilingRequest, FolderOrganizer

SITE = "https://contoso.sharepoint.com/sites/alpha"
LIBRARY = "/sites/alpha/Shared Documents"
FOLDER_ITEM = {"d": {
    "ID": 3,
    "__metadata": {"uri": f"{SITE}/_api/Web/Lists(guid'g-2')/Items(3)"},
}}


def _client():
    client = MagicMock()
    client.get = AsyncMock(return_value=FOLDER_ITEM)
    client.post = AsyncMock(return_value=None)
    client.bulk_validate_update = AsyncMock(return_value=[])
    return client


def _request(**kwargs):
    values = {
        "site_url": SITE,
        "file_ref": f"{LIBRARY}/plan.pdf",
        "file_dir_ref": LIBRARY,
        "document_type": "Drawing",
        "drawing_area": "Pool",
        "list_item_id": 5,
        "list_guid": "g-1",
    }
    values.update(kwargs)
    return FilingRequest(**values)


@pytest.mark.asyncio
async def test_ensure_folder_creates_missing_chain_once(settings):
    client = _client()
    client.get.side_effect = ResourceNotFound("File Not Found.")
    organizer = FolderOrganizer(client, settings)

    created = await organizer.ensure_folder(SITE, "alpha", ["Drawings", "Pool"])
    again = await organizer.ensure_folder(SITE, "alpha", ["Drawings", "Pool"])

    assert created is True
    assert again is False
    assert client.get.await_count == 1
    paths = [call.kwargs["json"]["ServerRelativeUrl"] for call in client.post.await_args_list]
    assert paths == [f"{LIBRARY}/Drawings", f"{LIBRARY}/Drawings/Pool"]


@pytest.mark.asyncio
async def test_ensure_folder_skips_known_parents(settings):
    client = _client()
    organizer = FolderOrganizer(client, settings)
    await organizer.ensure_folder(SITE, "alpha", ["Drawings"])
    client.get.side_effect = ResourceNotFound()

    await organizer.ensure_folder(SITE, "alpha", ["Drawings", "Club"])

    paths = [call.kwargs["json"]["ServerRelativeUrl"] for call in client.post.await_args_list]
    assert paths == [f"{LIBRARY}/Drawings/Club"]


@pytest.mark.asyncio
async def test_non_drawings_are_left_alone(settings):
    client = _client()
    organizer = FolderOrganizer(client, settings)

    report = await organizer.auto_file(_request(document_type="Report"), True)
    no_area = await organizer.auto_file(_request(drawing_area=None), True)

    assert not report.moved and report.target_folder is None
    assert not no_area.moved
    client.get.assert_not_awaited()


@pytest.mark.asyncio
async def test_already_filed_drawing_is_not_moved(settings):
    client = _client()
    organizer = FolderOrganizer(client, settings)

    outcome = await organizer.auto_file(_request(file_dir_ref=f"{LIBRARY}/Drawings/Pool"), True)

    assert outcome.target_folder == f"{LIBRARY}/Drawings/Pool"
    assert not outcome.moved
    client.get.assert_not_awaited()
    client.post.assert_not_awaited()


@pytest.mark.asyncio
async def test_without_auto_approval_only_the_folder_is_ensured(settings):
    client = _client()
    organizer = FolderOrganizer(client, settings)

    outcome = await organizer.auto_file(_request(), False)

    assert not outcome.moved
    client.bulk_validate_update.assert_not_awaited()
    client.post.assert_not_awaited()


@pytest.mark.asyncio
async def test_auto_approved_drawing_is_moved(settings):
    client = _client()
    organizer = FolderOrganizer(client, settings)

    outcome = await organizer.auto_file(_request(), True)

    assert outcome.moved
    assert outcome.message is None
    assert client.bulk_validate_update.await_count == 2
    list_url, item_ids, form_values = client.bulk_validate_update.await_args.args
    assert list_url == f"{SITE}/_api/web/lists(guid'g-2')"
    assert item_ids == [3]
    assert form_values == {"_ModerationStatus": "0", "_ModerationComments": "Approved (Auto)"}
    move_url = client.post.await_args.args[0]
    assert move_url == (
        f"{SITE}/_api/web/getfilebyserverrelativeurl('{LIBRARY}/plan.pdf')"
        f"/moveto(newurl='{LIBRARY}/Drawings/Pool/plan.pdf', flags=1)"
    )


@pytest.mark.asyncio
async def test_folder_without_list_item_uses_document_item(settings):
    client = _client()
    client.get.return_value = {"d": {}}
    organizer = FolderOrganizer(client, settings)

    await organizer.auto_approve_folder(SITE, f"{LIBRARY}/Drawings", _request())

    list_url, item_ids, _ = client.bulk_validate_update.await_args.args
    assert list_url == f"{SITE}/_api/web/lists(guid'g-1')"
    assert item_ids == [5]


@pytest.mark.asyncio
async def test_copy_job_warnings_surface_as_message():
    settings = Settings(move_with_copy_jobs=True, _env_file=None)
    client = _client()
    client.post.side_effect = [
        {"d": {"CreateCopyJobs": {"results": [
            {"JobId": "job-1", "EncryptionKey": "key", "JobQueueUri": "queue"},
        ]}}},
        {"d": {"GetCopyJobProgress": {"Logs": {"results": [
            json.dumps({"Event": "JobStart"}),
            json.dumps({"Event": "JobWarning", "Message": "Path too long", "Time": "12:00"}),
        ]}}}},
    ]
    organizer = FolderOrganizer(client, settings)

    outcome = await organizer.auto_file(_request(), True)

    assert not outcome.moved
    assert outcome.message == FILE_NAME_TOO_LONG_MESSAGE
    assert [w.event for w in outcome.warnings] == ["JobWarning"]
    copy_payload = client.post.await_args_list[0].kwargs["json"]
    assert copy_payload["exportObjectUris"] == [f"https://contoso.sharepoint.com{LIBRARY}/plan.pdf"]
    assert copy_payload["options"]["IsMoveMode"] is True
