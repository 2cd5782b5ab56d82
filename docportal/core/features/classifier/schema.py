# (c) Copyright Datacraft, 2026
"""Canonical document record produced from search result cells."""
from dataclasses import dataclass, fields
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Cell(BaseModel):
	"""Single key/value cell of a search result row."""
	model_config = ConfigDict(extra="allow", populate_by_name=True)

	key: str | None = Field(default=None, alias="Key")
	value: Any = Field(default=None, alias="Value")


class SearchRow(BaseModel):
	"""Search API row: an ordered list of cells."""
	model_config = ConfigDict(extra="allow", populate_by_name=True)

	cells: list[Cell | None] = Field(default_factory=list, alias="Cells")


@dataclass(frozen=True, slots=True)
class DocumentRecord:
	"""
	Normalized metadata of one document.

	Every field defaults to None when the search row did not carry it.
	"""
	business: str | None = None
	resort: str | None = None
	department: str | None = None
	building: str | None = None
	villa: str | None = None
	document_type: str | None = None
	drawing_number: str | None = None
	drawing_area: str | None = None
	discipline: str | None = None
	revision_number: str | None = None
	title: str | None = None
	short_description: str | None = None
	park_stage: str | None = None
	moderation_status: int | None = None
	editor_id: str | None = None
	file_ref: str | None = None
	file_dir_ref: str | None = None
	unique_id: str | None = None
	modified_at: datetime | None = None

	author: str | None = None
	site_name_url: str | None = None
	path: str | None = None
	filename: str | None = None
	parent_link: str | None = None

	@property
	def is_drawing(self) -> bool:
		return (self.document_type or "").strip().lower() == "drawing"

	def get(self, field_name: str) -> Any:
		return getattr(self, field_name, None)

	def to_dict(self) -> dict[str, Any]:
		return {f.name: getattr(self, f.name) for f in fields(self)}


RECORD_FIELDS: tuple[str, ...] = tuple(f.name for f in fields(DocumentRecord))
