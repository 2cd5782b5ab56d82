# (c) Copyright Datacraft, 2026
"""
Folder organizer.

Files drawing documents into `<library>/Drawings/<drawing area>` on their
own site, creating and auto-approving the folders on the way.
"""
import json
import logging

from docportal.core.config import Settings, get_settings
from docportal.core.exceptions import FILE_NAME_TOO_LONG_MESSAGE, ResourceNotFound
from docportal.core.sharepoint import SharePointClient, list_guid_from_uri, odata_entity
from docportal.core.types import ModerationStatus

from .schema import FilingOutcome, FilingRequest, MoveWarning

logger = logging.getLogger(__name__)

AUTO_APPROVED_COMMENT = "Approved (Auto)"
WARNING_EVENTS = frozenset({"JobWarning", "JobError"})


class FolderOrganizer:
	"""Keeps drawings in per-area folders."""

	def __init__(self, client: SharePointClient, settings: Settings | None = None):
		self.client = client
		self.settings = settings or get_settings()
		# Server relative folder paths known to exist
		self._known: set[str] = set()

	def library_root(self, base_site: str) -> str:
		return f"/sites/{base_site}/{self.settings.library_path}"

	def folder_path(self, base_site: str, segments: list[str]) -> str:
		return "/".join([self.library_root(base_site), *segments])

	def drawing_segments(self, drawing_area: str) -> list[str]:
		return [self.settings.drawings_folder, drawing_area]

	async def ensure_folder(self, site_url: str, base_site: str, segments: list[str]) -> bool:
		"""
		Make sure a folder chain exists under the document library.

		Returns True when folders had to be created. Repeated calls for the
		same path are answered from the cache.
		"""
		target = self.folder_path(base_site, segments)
		if target in self._known:
			return False

		try:
			await self.client.get(
				f"{site_url}/_api/web/getfolderbyserverrelativeurl('{target}')"
			)
			self._known.add(target)
			return False
		except ResourceNotFound:
			logger.info(f"Folder {target} not found, creating it")

		for depth in range(1, len(segments) + 1):
			path = self.folder_path(base_site, segments[:depth])
			if path in self._known:
				continue
			await self.client.post(
				f"{site_url}/_api/web/folders",
				json={
					"__metadata": {"type": "SP.Folder"},
					"ServerRelativeUrl": path,
				},
			)
			self._known.add(path)
		return True

	async def auto_approve_folder(self, site_url: str, folder_url: str, request: FilingRequest) -> None:
		"""Approve the list item behind a folder so its content is visible."""
		data = await self.client.get(
			f"{site_url}/_api/web/getfolderbyserverrelativeurl('{folder_url}')"
			f"/ListItemAllFields?$select=*,FileDirRef,FileLeafRef"
		)
		entity = odata_entity(data)
		item_id = entity.get("ID") or entity.get("Id")
		list_guid = list_guid_from_uri((entity.get("__metadata") or {}).get("uri"))
		if item_id is None or list_guid is None:
			item_id, list_guid = request.list_item_id, request.list_guid
		if item_id is None or list_guid is None:
			logger.warning(f"No list item found for folder {folder_url}, skipping approval")
			return

		results = await self.client.bulk_validate_update(
			f"{site_url}/_api/web/lists(guid'{list_guid}')",
			[item_id],
			{
				"_ModerationStatus": str(int(ModerationStatus.APPROVED)),
				"_ModerationComments": AUTO_APPROVED_COMMENT,
			},
		)
		for result in results:
			if result.get("ErrorMessage"):
				logger.warning(f"Approving folder {folder_url} failed: {result['ErrorMessage']}")

	async def move_file(self, site_url: str, source_url: str, target_url: str) -> list[MoveWarning]:
		"""
		Move a file to a new server relative URL.

		Copy job warnings and errors are returned instead of raised.
		"""
		if not self.settings.move_with_copy_jobs:
			await self.client.post(
				f"{site_url}/_api/web/getfilebyserverrelativeurl('{source_url}')"
				f"/moveto(newurl='{target_url}', flags=1)"
			)
			return []

		source_dir = source_url.rsplit("/", 1)[0]
		target_dir = target_url.rsplit("/", 1)[0]
		if source_dir == target_dir:
			return []

		tenant = site_url.split("/sites/")[0]
		data = await self.client.post(
			f"{site_url}/_api/site/CreateCopyJobs",
			json={
				"exportObjectUris": [f"{tenant}{source_url}"],
				"destinationUri": f"{tenant}{target_dir}",
				"options": {"IgnoreVersionHistory": True, "IsMoveMode": True},
			},
		)
		jobs = (odata_entity(data).get("CreateCopyJobs") or {}).get("results") or []
		if not jobs:
			logger.warning(f"Copy job for {source_url} was not created")
			return []
		job = jobs[0]

		progress = await self.client.post(
			f"{site_url}/_api/site/GetCopyJobProgress",
			json={
				"copyJobInfo": {
					"__metadata": {"type": "SP.CopyMigrationInfo"},
					"EncryptionKey": job.get("EncryptionKey"),
					"JobId": job.get("JobId"),
					"JobQueueUri": job.get("JobQueueUri"),
				}
			},
		)
		logs = ((odata_entity(progress).get("GetCopyJobProgress") or {}).get("Logs") or {}).get("results") or []
		warnings = []
		for raw in logs:
			try:
				entry = json.loads(raw) if isinstance(raw, str) else raw
			except ValueError:
				continue
			if entry.get("Event") in WARNING_EVENTS:
				warnings.append(MoveWarning(
					event=entry["Event"],
					message=entry.get("Message"),
					time=entry.get("Time"),
				))
		if warnings:
			logger.warning(f"Moving {source_url} reported {len(warnings)} warnings")
		return warnings

	async def auto_file(self, request: FilingRequest, auto_approve: bool) -> FilingOutcome:
		"""
		File a drawing under its drawing area folder.

		Non-drawings and drawings without an area are left alone. The move
		only happens for auto-approved documents; move warnings come back
		as a message on the outcome.
		"""
		outcome = FilingOutcome()
		if not request.is_drawing or not request.drawing_area:
			return outcome

		base_site = request.base_site
		segments = self.drawing_segments(request.drawing_area)
		root_url = self.folder_path(base_site, segments[:1])
		folder_url = self.folder_path(base_site, segments)
		outcome.target_folder = folder_url

		if "/".join(segments) in request.file_dir_ref:
			return outcome

		await self.ensure_folder(request.site_url, base_site, segments)
		if not auto_approve:
			return outcome

		await self.auto_approve_folder(request.site_url, root_url, request)
		await self.auto_approve_folder(request.site_url, folder_url, request)

		warnings = await self.move_file(
			request.site_url,
			f"{request.file_dir_ref}/{request.file_name}",
			f"{folder_url}/{request.file_name}",
		)
		outcome.moved = not warnings
		outcome.warnings = warnings
		if warnings:
			outcome.message = FILE_NAME_TOO_LONG_MESSAGE
		return outcome
