# (c) Copyright Datacraft, 2026
"""
Approval state machine.

Draft (3) -> Pending (2) -> Approved (0) or Denied (1). Approved items
leave the queue; everything the user may act on is kept in an
ApprovalQueue that is refilled by a chain of long-poll page requests.
"""
import logging
from urllib.parse import quote

from docportal.core.config import Settings, get_settings
from docportal.core.exceptions import (
	AlreadyResolved,
	AuthExpired,
	Forbidden,
	PortalError,
	ResourceNotFound,
)
from docportal.core.features.folders import FilingRequest, FolderOrganizer
from docportal.core.sharepoint import (
	SharePointClient,
	list_guid_from_uri,
	odata_entity,
	odata_next,
	odata_results,
)
from docportal.core.sharepoint.client import ODATA_NOMETADATA
from docportal.core.types import ModerationStatus

from .polling import PollRegistry
from .queue import ApprovalQueue, is_visible, visibility_filter
from .schema import ActionResult, ApprovalItem, BulkUpdateResult, SiteRole

logger = logging.getLogger(__name__)

NO_COMMENT = "<no comment>"
APPROVED_COMMENT = "Approved"
DENIED_COMMENT = "Denied"
AUTO_APPROVED_COMMENT = "Approved (Auto)"
AUTOMATED_PUBLISH_COMMENT = "For Approval (automated)"

ITEM_SELECT = (
	"*,Author/Title,Editor/Title,FileDirRef,UniqueId,FileRef,"
	"OData__ModerationStatus,Editor/EMail"
)


def _odata_literal(value: str) -> str:
	return value.replace("'", "''")


def _field_value(values: dict[str, str], label: str) -> str | None:
	value = values.get(label) or values.get(label.replace(" ", ""))
	return value.split("|")[0] if value else None


def parse_bulk_results(item_ids: list[int], results: list[dict]) -> BulkUpdateResult:
	"""Split a BulkValidateUpdateListItems response into successes and failures."""
	failed: dict[int, str] = {}
	for entry in results:
		message = entry.get("ErrorMessage")
		if message is None:
			continue
		item_id = entry.get("ItemId")
		if item_id is None and len(item_ids) == 1:
			item_id = item_ids[0]
		failed.setdefault(int(item_id) if item_id is not None else -1, message)
	return BulkUpdateResult(
		succeeded=[i for i in item_ids if i not in failed],
		failed=failed,
	)


class ApprovalService:
	"""Moderation actions for one resort site."""

	def __init__(
		self,
		client: SharePointClient,
		organizer: FolderOrganizer | None = None,
		settings: Settings | None = None,
		registry: PollRegistry | None = None,
	):
		self.client = client
		self.settings = settings or get_settings()
		self.organizer = organizer or FolderOrganizer(client, self.settings)
		self.registry = registry or PollRegistry()
		self.queue = ApprovalQueue()
		self.role: SiteRole | None = None

	# ----- Roles -----

	async def site_role(self, site_url: str, site_name: str) -> SiteRole:
		user = await self.client.get(
			f"{site_url}/_api/web/currentuser?$select=*,IsShareByEmailGuestUser",
			accept=ODATA_NOMETADATA,
		)
		user = odata_entity(user)
		groups = await self.client.get(
			f"{site_url}/_api/web/currentuser/groups",
			accept=ODATA_NOMETADATA,
		)
		owners_group = f"{site_name.lower()} owners"
		is_owner = any(
			(g.get("Title") or "").lower() == owners_group
			for g in odata_results(groups)
		)
		return SiteRole(
			user_id=user.get("Id"),
			is_site_admin=user.get("IsSiteAdmin") is True,
			is_owner=is_owner,
		)

	async def check_auto_approval(self, site_url: str, site_name: str) -> bool:
		"""Site admins and members of the site owners group auto-approve."""
		if not self.settings.auto_approval_enabled:
			return False
		try:
			role = await self.site_role(site_url, site_name)
		except (Forbidden, ResourceNotFound) as e:
			logger.info(f"Auto approval unavailable on {site_url}: {e.message}")
			return False
		return role.can_moderate

	# ----- Retrieval -----

	def items_url(self, site_url: str, role: SiteRole) -> str:
		return (
			f"{site_url}/_api/web/lists/getbytitle('{self.settings.library_name}')/items"
			f"?$filter=(Modified ge datetime'{self.settings.approval_modified_since}')"
			f" and ({visibility_filter(role)})"
			f"&$select={ITEM_SELECT}"
			f"&$expand=Author,Editor"
			f"&$orderby=Modified desc"
			f"&$top={self.settings.approval_page_size}"
		)

	def cancel_all(self) -> int:
		return self.registry.cancel_all()

	async def load(self, site_url: str, site_name: str) -> SiteRole:
		"""Reset the queue and start fetching the first page for a site."""
		self.cancel_all()
		self.queue = ApprovalQueue()
		self.role = await self.site_role(site_url, site_name)
		self.start_poll(self.items_url(site_url, self.role))
		return self.role

	def start_poll(self, url: str):
		return self.registry.start(url, lambda: self.fetch_page(url))

	async def fetch_page(self, url: str) -> list[ApprovalItem]:
		"""Fetch one page, queue the visible items and chain the next page."""
		data = await self.client.get(url)
		rows = odata_results(data)
		page = ApprovalQueue(tuple(ApprovalItem.from_list_item(raw) for raw in rows))
		if self.role is not None:
			page = page.visible_to(self.role)
		items = list(page)
		self.queue = self.queue.extend(items)

		next_url = odata_next(data)
		if next_url and rows:
			self.start_poll(next_url)
		logger.debug(f"Approval page {url} queued {len(items)} items")
		return items

	async def refetch(self, site_url: str, item: ApprovalItem) -> dict:
		"""Current list item fields of a queued document."""
		try:
			data = await self.client.get(
				f"{site_url}/_api/web/GetFileById('{item.unique_id}')"
				f"/ListItemAllFields?$select=*,FileDirRef,FileRef"
			)
		except ResourceNotFound as e:
			raise AlreadyResolved() from e
		return odata_entity(data)

	# ----- Transitions -----

	def _dequeue(self, item_id: int) -> None:
		self.queue = self.queue.remove(item_id)

	def _resolved(self, item: ApprovalItem) -> ActionResult:
		self._dequeue(item.item_id)
		logger.info(f"Item {item.item_id} was already resolved, dropping it from the queue")
		return ActionResult(
			item_id=item.item_id,
			success=True,
			resolved=True,
		)

	def _settle(self, item: ApprovalItem) -> None:
		if self.role is not None and is_visible(item, self.role):
			self.queue = self.queue.replace(item)
		else:
			self._dequeue(item.item_id)

	async def request_approval(self, site_url: str, item: ApprovalItem, comment: str | None = None) -> ActionResult:
		"""Publish a draft so it becomes pending."""
		comment = comment or NO_COMMENT
		try:
			await self.client.post(
				f"{site_url}/_api/web/GetFileByServerRelativePath(DecodedUrl=@a1)/Publish(@a2)"
				f"?@a1='{quote(_odata_literal(item.file_ref))}'"
				f"&@a2='{quote(_odata_literal(comment))}'"
			)
		except ResourceNotFound:
			return self._resolved(item)

		updated = item.model_copy(update={"moderation_status": ModerationStatus.PENDING})
		self._settle(updated)
		return ActionResult(
			item_id=item.item_id,
			success=True,
			status=ModerationStatus.PENDING,
			message=(
				f"Request Approval Sent for File {item.title or '<not specified>'}"
				f" with version v{item.version}."
			),
		)

	async def set_status(
		self,
		site_url: str,
		file_dir_ref: str,
		item_ids: list[int],
		status: ModerationStatus,
		comment: str | None = None,
	) -> BulkUpdateResult:
		"""
		Write a moderation status to several items of one folder.

		Per-item errors do not abort the rest of the batch.
		"""
		if comment is None:
			comment = APPROVED_COMMENT if status == ModerationStatus.APPROVED else DENIED_COMMENT
		results = await self.client.bulk_validate_update(
			f"{site_url}/_api/web/GetListUsingPath(DecodedUrl=@a1)",
			item_ids,
			{
				"_ModerationStatus": str(int(status)),
				"_ModerationComments": comment,
			},
			query=f"?@a1='{quote(_odata_literal(file_dir_ref))}'",
		)
		outcome = parse_bulk_results(item_ids, results)
		for item_id in outcome.succeeded:
			self._dequeue(item_id)
		if outcome.failed:
			logger.warning(f"Status update failed for items {sorted(outcome.failed)}")
		return outcome

	async def auto_approve(self, site_url: str, list_guid: str, item_ids: list[int]) -> BulkUpdateResult:
		results = await self.client.bulk_validate_update(
			f"{site_url}/_api/web/lists(guid'{list_guid}')",
			item_ids,
			{
				"_ModerationStatus": str(int(ModerationStatus.APPROVED)),
				"_ModerationComments": AUTO_APPROVED_COMMENT,
			},
		)
		return parse_bulk_results(item_ids, results)

	async def _file(self, site_url: str, item: ApprovalItem, fields: dict, auto_approve: bool) -> str | None:
		"""Run folder filing; problems come back as a message, never as a rollback."""
		request = FilingRequest(
			site_url=site_url,
			file_ref=fields.get("FileRef") or item.file_ref,
			file_dir_ref=fields.get("FileDirRef") or item.file_dir_ref,
			document_type=item.document_type,
			drawing_area=item.drawing_area,
			list_item_id=fields.get("ID") or fields.get("Id") or item.item_id,
			list_guid=list_guid_from_uri((fields.get("__metadata") or {}).get("uri")) or item.list_guid,
		)
		try:
			outcome = await self.organizer.auto_file(request, auto_approve)
		except AuthExpired:
			raise
		except PortalError as e:
			logger.warning(f"Filing item {item.item_id} failed: {e.message}")
			return e.message
		return outcome.message

	async def decide(
		self,
		site_url: str,
		site_name: str,
		item: ApprovalItem,
		status: ModerationStatus,
		reason: str | None = None,
	) -> ActionResult:
		"""Approve or reject one item, then file it when it is a drawing."""
		comment = APPROVED_COMMENT if status == ModerationStatus.APPROVED else (reason or DENIED_COMMENT)
		try:
			outcome = await self.set_status(site_url, item.file_dir_ref, [item.item_id], status, comment)
		except ResourceNotFound:
			return self._resolved(item)
		if not outcome.ok:
			return ActionResult(
				item_id=item.item_id,
				success=False,
				status=item.moderation_status,
				message=outcome.first_error,
			)

		auto_approve = await self.check_auto_approval(site_url, site_name)
		try:
			fields = await self.refetch(site_url, item)
		except AlreadyResolved:
			return self._resolved(item)
		notice = await self._file(site_url, item, fields, auto_approve)

		verb = "approved" if status == ModerationStatus.APPROVED else "declined"
		return ActionResult(
			item_id=item.item_id,
			success=True,
			status=status,
			message=f"File {item.display_name} with version v{item.version} was {verb}.",
			notice=notice,
		)

	async def approve(self, site_url: str, site_name: str, item: ApprovalItem) -> ActionResult:
		return await self.decide(site_url, site_name, item, ModerationStatus.APPROVED)

	async def reject(self, site_url: str, site_name: str, item: ApprovalItem, reason: str | None = None) -> ActionResult:
		return await self.decide(site_url, site_name, item, ModerationStatus.DENIED, reason)

	async def save_metadata(
		self,
		site_url: str,
		site_name: str,
		item: ApprovalItem,
		values: dict[str, str],
	) -> ActionResult:
		"""
		Update classification fields of a draft and send it for approval.

		The document is auto-approved right away when the user may do so.
		"""
		digest = await self.client.form_digest(site_url)
		headers = {"IF-MATCH": "*"}
		if digest:
			headers["X-RequestDigest"] = digest

		try:
			data = await self.client.post(
				f"{site_url}/_api/web/lists/GetByTitle('{self.settings.library_name}')"
				f"/items({item.item_id})/validateUpdateListItem",
				json={
					"formValues": [
						{"FieldName": name, "FieldValue": value}
						for name, value in values.items()
					],
					"bNewDocumentUpdate": False,
				},
				headers=headers,
			)
		except ResourceNotFound:
			return self._resolved(item)

		field_results = odata_entity(data).get("ValidateUpdateListItem") or {}
		if isinstance(field_results, dict):
			field_results = field_results.get("results") or []
		errors = [r.get("ErrorMessage") for r in field_results if r.get("HasException")]
		if errors:
			return ActionResult(item_id=item.item_id, success=False, message=errors[0])

		await self.client.post(
			f"{site_url}/_api/web/GetFileById('{item.unique_id}')"
			f"/Publish('{AUTOMATED_PUBLISH_COMMENT}')",
			headers=headers,
		)
		status = ModerationStatus.PENDING

		auto_approve = await self.check_auto_approval(site_url, site_name)
		if auto_approve and item.list_guid:
			outcome = await self.auto_approve(site_url, item.list_guid, [item.item_id])
			if outcome.ok:
				status = ModerationStatus.APPROVED

		try:
			fields = await self.refetch(site_url, item)
		except AlreadyResolved:
			return self._resolved(item)

		updated = item.model_copy(update={
			"moderation_status": status,
			"document_type": _field_value(values, "Document Type") or item.document_type,
			"drawing_area": _field_value(values, "Drawing Area") or item.drawing_area,
		})
		self._settle(updated)
		notice = await self._file(site_url, updated, fields, auto_approve)
		return ActionResult(
			item_id=item.item_id,
			success=True,
			status=status,
			message=f"Metadata saved for {item.display_name}.",
			notice=notice,
		)
