# (c) Copyright Datacraft, 2026
"""Saved search configuration models."""
import json
import logging
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from docportal.core.types import ConfigType

logger = logging.getLogger(__name__)

GLOBAL_FILE_SEARCH_ID = "globalfilesearch"
MODIFIED_ID_SUFFIX = "#modified"
MODIFIED_TITLE_SUFFIX = " [Modified] (Unsaved Search)"
TITLE_MAX_LENGTH = 50


class FilterConfig(BaseModel):
	"""A named filter + grouping combination."""
	model_config = ConfigDict(frozen=True)

	id: str
	title: str
	config_type: ConfigType | None = None
	filter_map: dict[str, list[str]] = Field(default_factory=dict)
	group_by_field: str | None = None
	default: datetime | None = None
	author: str | None = None
	modified: bool = False

	@property
	def base_id(self) -> str:
		"""Id of the persisted config this one shadows (itself if not a fork)."""
		if self.id.endswith(MODIFIED_ID_SUFFIX):
			return self.id[: -len(MODIFIED_ID_SUFFIX)]
		return self.id

	@property
	def is_pseudo(self) -> bool:
		return self.id == GLOBAL_FILE_SEARCH_ID

	def fork(self, filter_map: dict[str, list[str]]) -> "FilterConfig":
		"""In-memory "Modified" copy carrying a changed filter."""
		return self.model_copy(update={
			"id": f"{self.base_id}{MODIFIED_ID_SUFFIX}",
			"title": f"{self.title}{MODIFIED_TITLE_SUFFIX}",
			"config_type": None,
			"filter_map": {k: list(v) for k, v in filter_map.items()},
			"modified": True,
		})

	@classmethod
	def from_list_item(cls, item: dict[str, Any]) -> "FilterConfig":
		"""Build from a reference-data list item."""
		raw_config = item.get("Config")
		filter_map: dict[str, list[str]] = {}
		if raw_config:
			try:
				parsed = json.loads(raw_config)
			except (TypeError, ValueError):
				logger.warning(f"Saved config {item.get('Id')} has an unreadable Config payload")
				parsed = {}
			if isinstance(parsed, dict):
				filter_map = {
					k: [str(v) for v in values]
					for k, values in parsed.items()
					if isinstance(values, list)
				}

		config_type = item.get("ConfigType")
		author = item.get("Author")
		if isinstance(author, dict):
			author = author.get("Title")

		return cls(
			id=str(item.get("Id", item.get("ID"))),
			title=item.get("Title") or "",
			config_type=ConfigType(config_type) if config_type in ConfigType._value2member_map_ else None,
			filter_map=filter_map,
			group_by_field=item.get("Groupby"),
			default=item.get("default"),
			author=author,
		)

	def to_list_item(self) -> dict[str, Any]:
		"""Fields persisted on the reference-data list."""
		return {
			"Title": self.title,
			"Config": json.dumps(self.filter_map),
			"ConfigType": self.config_type.value if self.config_type else None,
			"Groupby": self.group_by_field,
		}


GLOBAL_FILE_SEARCH = FilterConfig(id=GLOBAL_FILE_SEARCH_ID, title=GLOBAL_FILE_SEARCH_ID)


class DriftState(BaseModel):
	"""Outcome of comparing the live filter against the selected config."""
	modified: bool
	selected: FilterConfig | None = None
	fork: FilterConfig | None = None


class SavedViewOut(BaseModel):
	id: str
	title: str
	config_type: ConfigType | None = None
	group_by_field: str | None = None
	filter_map: dict[str, list[str]]
	is_default: bool = False
	is_selected: bool = False
	modified: bool = False


class SaveViewRequest(BaseModel):
	title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
	config_type: ConfigType = ConfigType.PERSONAL
	filter_map: dict[str, list[str]]
	group_by_field: str | None = None


class UpdateViewRequest(BaseModel):
	title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
	filter_map: dict[str, list[str]]
	group_by_field: str | None = None


class DriftRequest(BaseModel):
	selected_id: str
	filter_map: dict[str, list[str]]
