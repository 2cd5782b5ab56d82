# (c) Copyright Datacraft, 2026
"""Grouping request/response models."""
from typing import Any

from pydantic import BaseModel, Field

from docportal.core.features.classifier import SearchRow


class GroupRequest(BaseModel):
	rows: list[SearchRow] = Field(default_factory=list)
	group_by: str = "Resort"


class SearchGroupRequest(BaseModel):
	filter_map: dict[str, list[str]] = Field(default_factory=dict)
	file_name: str | None = None
	group_by: str = "Resort"


class GroupedRecord(BaseModel):
	index: int
	display_title: str
	record: dict[str, Any]


class GroupedResultsOut(BaseModel):
	group_by: str
	total: int
	groups: dict[str, dict[str, list[int]]]
	# Records without a value for the grouping field, shown after every group
	null_group: dict[str, list[int]] = Field(default_factory=dict)
	records: list[GroupedRecord]
	notice: str | None = None
