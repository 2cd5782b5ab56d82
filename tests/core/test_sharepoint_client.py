# (c) Copyright Datacraft, 2026
"""Tests for SharePoint error mapping and OData helpers."""
import httpx
import pytest

from docportal.core.exceptions import (
    AuthExpired,
    Forbidden,
    FORBIDDEN_MESSAGE,
    ResourceNotFound,
    TransientNetwork,
    UpstreamError,
)
from docportal.core.sharepoint import (
    SharePointClient,
    list_guid_from_uri,
    odata_next,
    odata_results,
)

URL = "https://contoso.sharepoint.com/sites/a/_api/web"


def _client(handler):
    return SharePointClient(access_token="token", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
@pytest.mark.parametrize("status,error", [
    (401, AuthExpired),
    (403, Forbidden),
    (404, ResourceNotFound),
    (400, UpstreamError),
    (500, TransientNetwork),
    (503, TransientNetwork),
])
async def test_status_codes_map_to_errors(status, error):
    client = _client(lambda request: httpx.Response(status, json={"error": {"message": {"value": "boom"}}}))

    with pytest.raises(error):
        await client.get(URL)


@pytest.mark.asyncio
async def test_forbidden_carries_user_facing_message():
    client = _client(lambda request: httpx.Response(403))

    with pytest.raises(Forbidden) as exc:
        await client.get(URL)

    assert exc.value.message == FORBIDDEN_MESSAGE


@pytest.mark.asyncio
async def test_upstream_message_is_kept():
    client = _client(lambda request: httpx.Response(404, json={"error": {"message": {"value": "File Not Found."}}}))

    with pytest.raises(ResourceNotFound) as exc:
        await client.get(URL)

    assert exc.value.message == "File Not Found."


@pytest.mark.asyncio
async def test_timeout_is_transient():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(TransientNetwork):
        await _client(handler).get(URL)


@pytest.mark.asyncio
async def test_bearer_token_and_empty_body():
    seen = {}

    def handler(request):
        seen["auth"] = request.headers["Authorization"]
        return httpx.Response(204)

    assert await _client(handler).delete(URL) is None
    assert seen["auth"] == "Bearer token"


@pytest.mark.asyncio
async def test_bulk_validate_update_unwraps_results():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        return httpx.Response(200, json={"d": {"BulkValidateUpdateListItems": {"results": [
            {"ItemId": 1, "ErrorMessage": None},
        ]}}})

    results = await _client(handler).bulk_validate_update(
        f"{URL}/lists(guid'abc')", [1], {"_ModerationStatus": "0"},
    )

    assert seen["url"] == f"{URL}/lists(guid'abc')/BulkValidateUpdateListItems()"
    assert results == [{"ItemId": 1, "ErrorMessage": None}]


def test_odata_helpers():
    assert odata_results({"d": {"results": [{"Id": 1}]}}) == [{"Id": 1}]
    assert odata_results({"value": [{"Id": 2}]}) == [{"Id": 2}]
    assert odata_results(None) == []
    assert odata_next({"d": {"results": [], "__next": "next-url"}}) == "next-url"
    assert odata_next({"d": {"results": []}}) is None
    assert list_guid_from_uri("https://x/_api/Web/Lists(guid'1234-ab')/Items(5)") == "1234-ab"
    assert list_guid_from_uri(None) is None
