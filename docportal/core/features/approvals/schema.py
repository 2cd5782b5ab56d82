# (c) Copyright Datacraft, 2026
"""Approval workflow models."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from docportal.core.features.classifier import TermsMap, get_terms_map
from docportal.core.sharepoint import list_guid_from_uri
from docportal.core.types import ModerationStatus


def _term_value(item: dict[str, Any], label: str, terms: TermsMap) -> str | None:
	"""Read a taxonomy column by managed property name or label."""
	candidates = [terms.key_for_label(label), label.replace(" ", ""), label]
	for name in candidates:
		if not name or name not in item:
			continue
		value = item[name]
		if isinstance(value, dict):
			value = value.get("Label")
		if value:
			return str(value).split("|")[0]
	return None


class ApprovalItem(BaseModel):
	"""A document version awaiting an approval decision."""
	item_id: int
	unique_id: str | None = None
	title: str | None = None
	version: str | None = None
	file_ref: str
	file_dir_ref: str
	editor_id: int | None = None
	editor_name: str | None = None
	resort: str | None = None
	document_type: str | None = None
	drawing_area: str | None = None
	modified_at: datetime | None = None
	moderation_status: ModerationStatus = ModerationStatus.DRAFT
	list_guid: str | None = None

	@property
	def file_name(self) -> str:
		return self.file_ref.rstrip("/").split("/")[-1]

	@property
	def display_name(self) -> str:
		return self.title or self.file_name

	@classmethod
	def from_list_item(cls, item: dict[str, Any], terms: TermsMap | None = None) -> "ApprovalItem":
		"""Build from a document library list item (verbose OData)."""
		terms = terms or get_terms_map()
		editor = item.get("Editor") or {}
		status = item.get("OData__ModerationStatus", item.get("_ModerationStatus"))
		return cls(
			item_id=item.get("Id", item.get("ID")),
			unique_id=item.get("UniqueId"),
			title=item.get("Title"),
			version=item.get("OData__UIVersionString") or item.get("Version"),
			file_ref=item.get("FileRef") or "",
			file_dir_ref=item.get("FileDirRef") or "",
			editor_id=item.get("EditorId"),
			editor_name=editor.get("Title") if isinstance(editor, dict) else None,
			resort=_term_value(item, "Resort", terms),
			document_type=_term_value(item, "Document Type", terms),
			drawing_area=_term_value(item, "Drawing Area", terms),
			modified_at=item.get("Modified"),
			moderation_status=ModerationStatus(int(status)) if status is not None else ModerationStatus.DRAFT,
			list_guid=list_guid_from_uri((item.get("__metadata") or {}).get("uri")),
		)


@dataclass(frozen=True)
class SiteRole:
	"""What the current user may do on one resort site."""
	user_id: int | None
	is_site_admin: bool = False
	is_owner: bool = False

	@property
	def can_moderate(self) -> bool:
		return self.is_site_admin or self.is_owner


@dataclass
class BulkUpdateResult:
	"""Per-item outcome of a bulk status update."""
	succeeded: list[int] = field(default_factory=list)
	failed: dict[int, str] = field(default_factory=dict)

	@property
	def ok(self) -> bool:
		return not self.failed

	@property
	def first_error(self) -> str | None:
		return next(iter(self.failed.values()), None)


class ActionResult(BaseModel):
	item_id: int
	success: bool
	status: ModerationStatus | None = None
	message: str | None = None
	notice: str | None = None
	resolved: bool = False


class ApprovalQueueOut(BaseModel):
	site_url: str
	can_moderate: bool
	auto_approval: bool
	items: list[ApprovalItem]


class SiteRequest(BaseModel):
	site_url: str
	site_name: str


class RequestApprovalRequest(SiteRequest):
	item: ApprovalItem
	comment: str | None = None


class DecisionRequest(SiteRequest):
	item: ApprovalItem
	reason: str | None = None


class BulkStatusRequest(BaseModel):
	site_url: str
	file_dir_ref: str
	item_ids: list[int] = Field(min_length=1)
	status: ModerationStatus
	comment: str | None = None


class BulkUpdateOut(BaseModel):
	succeeded: list[int]
	failed: dict[int, str]


class SaveMetadataRequest(SiteRequest):
	item: ApprovalItem
	values: dict[str, str]
