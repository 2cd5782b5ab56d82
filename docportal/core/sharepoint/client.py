# (c) Copyright Datacraft, 2026
"""Async SharePoint REST client."""
import logging
import re
from typing import Any

import httpx

from docportal.core.config import get_settings
from docportal.core.exceptions import (
	AuthExpired,
	Forbidden,
	FORBIDDEN_MESSAGE,
	ResourceNotFound,
	TransientNetwork,
	UpstreamError,
)

logger = logging.getLogger(__name__)

ODATA_VERBOSE = "application/json;odata=verbose"
ODATA_NOMETADATA = "application/json;odata=nometadata"

_LIST_GUID_RE = re.compile(r"guid'([^']+)'")


def odata_results(data: dict | None) -> list[dict]:
	"""Extract the row list from a verbose or nometadata OData payload."""
	if not data:
		return []
	if "d" in data:
		d = data["d"]
		if isinstance(d, dict) and "results" in d:
			return d["results"] or []
		return [d] if d else []
	return data.get("value") or []


def odata_entity(data: dict | None) -> dict:
	"""Extract a single entity from a verbose or nometadata OData payload."""
	if not data:
		return {}
	return data.get("d", data) or {}


def odata_next(data: dict | None) -> str | None:
	"""Return the `__next` continuation link of a verbose OData page."""
	if not data:
		return None
	d = data.get("d")
	if isinstance(d, dict):
		return d.get("__next")
	return data.get("odata.nextLink")


def list_guid_from_uri(uri: str | None) -> str | None:
	"""Pull the list GUID out of an item's `__metadata.uri`."""
	if not uri:
		return None
	match = _LIST_GUID_RE.search(uri)
	return match.group(1) if match else None


def _error_message(response: httpx.Response) -> str | None:
	try:
		payload = response.json()
	except ValueError:
		return response.text or None
	error = payload.get("error") if isinstance(payload, dict) else None
	if isinstance(error, dict):
		message = error.get("message")
		if isinstance(message, dict):
			return message.get("value")
		return message
	if isinstance(payload, dict):
		return payload.get("detail") or payload.get("errorMessage")
	return None


class SharePointClient:
	"""
	Thin wrapper over httpx for SharePoint and DMS API calls.

	HTTP failures are mapped onto the portal error taxonomy so callers never
	see raw httpx exceptions.
	"""

	def __init__(
		self,
		access_token: str | None = None,
		timeout: float | None = None,
		transport: httpx.AsyncBaseTransport | None = None,
	):
		settings = get_settings()
		self.access_token = access_token
		self.timeout = timeout or settings.request_timeout
		self._transport = transport

	def _headers(self, accept: str, extra: dict[str, str] | None) -> dict[str, str]:
		headers = {
			"Accept": accept,
			"Content-Type": f"{ODATA_VERBOSE};charset=utf-8",
		}
		if self.access_token:
			headers["Authorization"] = f"Bearer {self.access_token}"
		if extra:
			headers.update(extra)
		return headers

	async def request(
		self,
		method: str,
		url: str,
		json: Any = None,
		params: dict[str, Any] | None = None,
		headers: dict[str, str] | None = None,
		accept: str = ODATA_VERBOSE,
	) -> dict | None:
		"""Send a request and return the decoded JSON body (None when empty)."""
		logger.debug(f"SharePoint {method} {url}")
		try:
			async with httpx.AsyncClient(
				timeout=self.timeout,
				transport=self._transport,
			) as client:
				response = await client.request(
					method,
					url,
					json=json,
					params=params,
					headers=self._headers(accept, headers),
				)
		except httpx.TimeoutException as e:
			raise TransientNetwork(f"Request to {url} timed out") from e
		except httpx.TransportError as e:
			raise TransientNetwork(f"Request to {url} failed: {e}") from e

		self._raise_for_status(response)

		if response.status_code == 204 or not response.content:
			return None
		try:
			return response.json()
		except ValueError:
			logger.warning(f"Non-JSON response from {url}")
			return None

	def _raise_for_status(self, response: httpx.Response) -> None:
		status = response.status_code
		if status < 400:
			return
		message = _error_message(response)
		if status == 401:
			raise AuthExpired(message)
		if status == 403:
			raise Forbidden(FORBIDDEN_MESSAGE)
		if status == 404:
			raise ResourceNotFound(message)
		if status >= 500:
			raise TransientNetwork(message or f"Upstream returned {status}")
		raise UpstreamError(message or f"Upstream returned {status}")

	async def get(self, url: str, **kwargs) -> dict | None:
		return await self.request("GET", url, **kwargs)

	async def post(self, url: str, json: Any = None, **kwargs) -> dict | None:
		return await self.request("POST", url, json=json, **kwargs)

	async def delete(self, url: str, **kwargs) -> dict | None:
		return await self.request("DELETE", url, **kwargs)

	async def merge(self, url: str, json: Any, **kwargs) -> dict | None:
		"""MERGE an entity (POST with the X-HTTP-Method override)."""
		headers = {"IF-MATCH": "*", "X-HTTP-Method": "MERGE"}
		headers.update(kwargs.pop("headers", None) or {})
		return await self.request("POST", url, json=json, headers=headers, **kwargs)

	async def bulk_validate_update(
		self,
		list_url: str,
		item_ids: list[int],
		form_values: dict[str, str],
		query: str = "",
	) -> list[dict]:
		"""
		Set field values on several list items in one call.

		Returns one result entry per updated field; entries with a non-null
		`ErrorMessage` are per-item failures.
		"""
		data = await self.post(
			f"{list_url}/BulkValidateUpdateListItems(){query}",
			json={
				"itemIds": item_ids,
				"formValues": [
					{"FieldName": name, "FieldValue": value}
					for name, value in form_values.items()
				],
				"folderPath": "",
			},
		)
		entity = odata_entity(data)
		if isinstance(entity, dict) and "BulkValidateUpdateListItems" in entity:
			entity = entity["BulkValidateUpdateListItems"]
		if isinstance(entity, dict):
			return entity.get("results") or entity.get("value") or []
		return entity or []

	async def form_digest(self, site_url: str) -> str | None:
		"""Fetch a request digest for write operations on a site."""
		data = await self.post(f"{site_url}/_api/contextinfo")
		info = odata_entity(data).get("GetContextWebInformation") or {}
		value = info.get("FormDigestValue")
		return value.split(",")[0] if value else None
