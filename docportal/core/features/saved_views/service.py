# (c) Copyright Datacraft, 2026
"""
Saved view manager.

Holds the configs visible to one user together with the active selection,
filter and grouping field. Every command replaces state instead of
mutating it in place.
"""
import logging
from typing import Iterable, Mapping

from docportal.core.auth import User
from docportal.core.exceptions import Forbidden, ResourceNotFound, ValidationError
from docportal.core.types import ConfigType

from .filters import RESORT_LABEL, FilterMap
from .schema import (
	GLOBAL_FILE_SEARCH,
	GLOBAL_FILE_SEARCH_ID,
	DriftState,
	FilterConfig,
)
from .store import SavedConfigStore

logger = logging.getLogger(__name__)

DEFAULT_GROUP_BY = "Resort"
NO_FILTER_MESSAGE = "No filter is selected"


def can_view(config: FilterConfig, user: User) -> bool:
	if config.config_type == ConfigType.GLOBAL:
		return True
	if config.config_type == ConfigType.INTERNAL:
		return not user.is_guest
	return config.author == user.name


def can_create(config_type: ConfigType, user: User) -> bool:
	return user.is_admin or config_type == ConfigType.PERSONAL


def can_modify(config: FilterConfig, user: User) -> bool:
	"""Owner of a Personal config, or an admin, may change or delete it."""
	if config.is_pseudo or config.modified:
		return False
	if user.is_admin:
		return True
	return config.config_type == ConfigType.PERSONAL and config.author == user.name


def _default_sort_key(config: FilterConfig):
	if config.default is None:
		return (False, 0.0)
	return (True, config.default.timestamp())


class SavedViewManager:
	"""Per-user saved view state driven by explicit commands."""

	def __init__(self, store: SavedConfigStore, user: User, group_by_field: str = DEFAULT_GROUP_BY):
		self.store = store
		self.user = user
		self.configs: tuple[FilterConfig, ...] = ()
		self.selected: FilterConfig | None = None
		self.filter = FilterMap()
		self.group_by_field = group_by_field

	@property
	def persisted(self) -> tuple[FilterConfig, ...]:
		return tuple(c for c in self.configs if not c.modified)

	@property
	def fork(self) -> FilterConfig | None:
		return next((c for c in self.configs if c.modified), None)

	def find(self, config_id: str) -> FilterConfig:
		if config_id == GLOBAL_FILE_SEARCH_ID:
			return GLOBAL_FILE_SEARCH
		for config in self.configs:
			if config.id == config_id:
				return config
		raise ResourceNotFound(f"Saved view {config_id} not found")

	def default_config(self) -> FilterConfig | None:
		"""Config with the most recent default timestamp, else the last one."""
		persisted = self.persisted
		if not persisted:
			return None
		latest = max(persisted, key=_default_sort_key)
		if latest.default is not None:
			return latest
		return persisted[-1]

	async def load(self, accessible_resorts: Iterable[str] | None = None) -> tuple[FilterConfig, ...]:
		configs = await self.store.list_for(self.user)
		self.configs = tuple(c for c in configs if can_view(c, self.user))
		self.selected = None
		default = self.default_config()
		if default is not None:
			self.select(default.id, accessible_resorts)
		return self.configs

	def select(self, config_id: str, accessible_resorts: Iterable[str] | None = None) -> FilterConfig:
		"""Apply a config's filter and grouping together and drop any fork."""
		config = self.find(config_id)
		if config.modified:
			return config

		self.configs = self.persisted
		self.selected = config

		if config.is_pseudo:
			self.filter = FilterMap()
			return config

		live = FilterMap.from_dict(config.filter_map)
		if accessible_resorts is not None and RESORT_LABEL in live:
			live = live.restrict(RESORT_LABEL, accessible_resorts)
		self.filter = live
		if config.group_by_field:
			self.group_by_field = config.group_by_field
		logger.debug(f"Selected saved view {config.id} for {self.user.name}")
		return config

	def _base(self) -> FilterConfig | None:
		if self.selected is None:
			return None
		try:
			return self.find(self.selected.base_id)
		except ResourceNotFound:
			return None

	def check_drift(self, live_filter: FilterMap | Mapping[str, Iterable[str]]) -> DriftState:
		"""
		Compare the live filter with the selected config.

		A mismatch keeps exactly one "Modified" fork in the list and selects
		it; a match removes the fork and reselects the saved config.
		"""
		if not isinstance(live_filter, FilterMap):
			live_filter = FilterMap.from_dict(live_filter)
		self.filter = live_filter

		base = self._base()
		if base is None or base.is_pseudo:
			return DriftState(modified=False, selected=self.selected)

		if FilterMap.from_dict(base.filter_map).to_dict() == live_filter.to_dict():
			self.configs = self.persisted
			self.selected = base
			return DriftState(modified=False, selected=base)

		fork = base.fork(live_filter.to_dict())
		self.configs = self.persisted + (fork,)
		self.selected = fork
		return DriftState(modified=True, selected=fork, fork=fork)

	async def save_as_new(
		self,
		title: str,
		config_type: ConfigType,
		filter_map: Mapping[str, Iterable[str]] | None = None,
		group_by_field: str | None = None,
	) -> FilterConfig:
		if not can_create(config_type, self.user):
			raise Forbidden(f"Only administrators can create {config_type.value} views")
		live = FilterMap.from_dict(filter_map) if filter_map is not None else self.filter
		if not live:
			raise ValidationError(NO_FILTER_MESSAGE)

		created = await self.store.create(FilterConfig(
			id="",
			title=title,
			config_type=config_type,
			filter_map=live.to_dict(),
			group_by_field=group_by_field or self.group_by_field,
			author=self.user.name,
		))
		self.configs = self.persisted + (created,)
		self.selected = created
		self.filter = live
		return created

	async def update(
		self,
		config_id: str,
		title: str,
		filter_map: Mapping[str, Iterable[str]] | None = None,
		group_by_field: str | None = None,
	) -> FilterConfig:
		config = self.find(config_id)
		if config.modified:
			config = self.find(config.base_id)
		if config.is_pseudo:
			raise ValidationError("The global file search view cannot be updated")
		if not can_modify(config, self.user):
			raise Forbidden("You can only update your own personal views")

		live = FilterMap.from_dict(filter_map) if filter_map is not None else self.filter
		if not live:
			raise ValidationError(NO_FILTER_MESSAGE)

		updated = config.model_copy(update={
			"title": title,
			"filter_map": live.to_dict(),
			"group_by_field": group_by_field or self.group_by_field,
		})
		await self.store.update(updated)
		self.configs = tuple(updated if c.id == updated.id else c for c in self.persisted)
		self.selected = updated
		return updated

	async def set_default(self, config_id: str) -> FilterConfig:
		config = self.find(config_id)
		if config.is_pseudo or config.modified:
			raise ValidationError("Only saved views can be made the default")
		when = await self.store.set_default(config.id)
		updated = config.model_copy(update={"default": when})
		self.configs = tuple(updated if c.id == updated.id else c for c in self.configs)
		if self.selected is not None and self.selected.id == updated.id:
			self.selected = updated
		return updated

	async def delete(self, config_id: str) -> None:
		config = self.find(config_id)
		if not can_modify(config, self.user):
			raise Forbidden("You can only delete your own personal views")
		await self.store.recycle(config.id)
		self.configs = tuple(c for c in self.configs if c.base_id != config.id)
		if self.selected is not None and self.selected.base_id == config.id:
			self.selected = None
