# (c) Copyright Datacraft, 2026
"""
Bulk transfer coordinator.

Individual downloads are handed to a trigger one at a time, spaced by a
fixed delay so the browser does not drop any of them. Zip and merged PDF
downloads are submitted as one job to the bulk download API.
"""
import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Sequence
from urllib.parse import quote, unquote, urlencode, urlsplit

from docportal.core.config import Settings, get_settings
from docportal.core.exceptions import ValidationError
from docportal.core.features.classifier import DocumentRecord
from docportal.core.sharepoint import SharePointClient
from docportal.core.types import DownloadStyle

from .schema import DownloadJobAccepted, DownloadLink

logger = logging.getLogger(__name__)

ROOT_PARENT_PATH = "/Forms/AllItems.aspx"
BULK_DOWNLOAD_PATH = "/v1/async-bulk-download"

Trigger = Callable[[DownloadLink], Awaitable[Any] | Any]
Sleep = Callable[[float], Awaitable[Any]]


def source_path(parent_link: str, filename: str) -> str:
	"""Decoded server relative path of a file given its parent folder link."""
	if ROOT_PARENT_PATH in parent_link:
		base = parent_link.split(ROOT_PARENT_PATH)[0]
	else:
		base = parent_link
	return unquote(urlsplit(f"{base}/{quote(filename, safe='')}").path)


def build_download_url(record: DocumentRecord) -> str:
	"""SharePoint `download.aspx` URL forcing a download of one file."""
	if not record.site_name_url or not record.parent_link or not record.filename:
		raise ValidationError(f"Cannot build a download link for {record.filename or record.title}")
	query = urlencode({"SourceUrl": source_path(record.parent_link, record.filename)})
	return f"{record.site_name_url}/_layouts/15/download.aspx?{query}"


def parse_style(style: str | DownloadStyle) -> DownloadStyle:
	try:
		return DownloadStyle(style)
	except ValueError:
		raise ValidationError(f"Unsupported download type: {style}")


class BulkTransferCoordinator:
	def __init__(
		self,
		client: SharePointClient,
		settings: Settings | None = None,
		sleep: Sleep = asyncio.sleep,
	):
		self.client = client
		self.settings = settings or get_settings()
		self._sleep = sleep

	@property
	def stagger_ms(self) -> int:
		return self.settings.download_stagger_ms

	def plan_individual(self, records: Sequence[DocumentRecord]) -> list[DownloadLink]:
		"""One link per file, each scheduled a fixed delay after the previous."""
		return [
			DownloadLink(
				filename=record.filename,
				url=build_download_url(record),
				delay_ms=index * self.stagger_ms,
			)
			for index, record in enumerate(records)
		]

	async def download_individual(self, records: Sequence[DocumentRecord], trigger: Trigger) -> list[DownloadLink]:
		"""
		Fire `trigger` once per file, serialized.

		The delay is applied between triggers, so trigger N starts at least
		`stagger_ms` after trigger N-1 started.
		"""
		links = self.plan_individual(records)
		for index, link in enumerate(links):
			if index:
				await self._sleep(self.stagger_ms / 1000)
			result = trigger(link)
			if inspect.isawaitable(result):
				await result
		logger.info(f"Triggered {len(links)} individual downloads")
		return links

	async def submit_batch(
		self,
		records: Sequence[DocumentRecord],
		style: DownloadStyle,
		output_filename: str | None = None,
	) -> DownloadJobAccepted:
		"""Submit a zip or merged PDF job; the API answers before the job runs."""
		if not style.is_batch:
			raise ValidationError(f"Unsupported download type: {style.value}")
		payload = {
			"output_filename": output_filename or self.settings.default_download_filename,
			"style": style.value,
			"files": {str(i): record.path for i, record in enumerate(records, start=1)},
		}
		data = await self.client.post(
			f"{self.settings.dms_api_url.rstrip('/')}{BULK_DOWNLOAD_PATH}",
			json=payload,
			headers={"Content-Type": "application/json"},
			accept="application/json",
		)
		download_url = (data or {}).get("download_url")
		logger.info(f"Bulk {style.value} download of {len(records)} files submitted")
		return DownloadJobAccepted(download_url=download_url)

	async def download(
		self,
		records: Sequence[DocumentRecord],
		style: str | DownloadStyle,
		output_filename: str | None = None,
		trigger: Trigger | None = None,
	) -> list[DownloadLink] | DownloadJobAccepted:
		"""Dispatch to the strategy matching `style`."""
		style = parse_style(style)
		if style.is_batch:
			return await self.submit_batch(records, style, output_filename)
		if trigger is None:
			return self.plan_individual(records)
		return await self.download_individual(records, trigger)
