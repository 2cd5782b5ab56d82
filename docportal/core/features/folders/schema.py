# (c) Copyright Datacraft, 2026
"""Folder filing data types."""
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class MoveWarning:
	"""Warning or error event reported by a copy/move job."""
	event: str
	message: str | None = None
	time: str | None = None


@dataclass(frozen=True)
class FilingRequest:
	"""Location and classification of a document to be filed."""
	site_url: str
	file_ref: str
	file_dir_ref: str
	document_type: str | None = None
	drawing_area: str | None = None
	# List item of the document, used when a folder has no item of its own
	list_item_id: int | None = None
	list_guid: str | None = None

	@property
	def file_name(self) -> str:
		return self.file_ref.rstrip("/").split("/")[-1]

	@property
	def base_site(self) -> str:
		return self.site_url.rstrip("/").split("/")[-1]

	@property
	def is_drawing(self) -> bool:
		return (self.document_type or "").strip().lower() == "drawing"


@dataclass
class FilingOutcome:
	moved: bool = False
	target_folder: str | None = None
	warnings: list[MoveWarning] = field(default_factory=list)
	message: str | None = None
