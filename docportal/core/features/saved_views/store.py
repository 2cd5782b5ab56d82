# (c) Copyright Datacraft, 2026
"""Persistence of saved search configurations on the reference-data list."""
import logging
from datetime import datetime, timezone

from docportal.core.auth import User
from docportal.core.config import Settings, get_settings
from docportal.core.sharepoint import SharePointClient, odata_entity, odata_results

from .schema import FilterConfig

logger = logging.getLogger(__name__)


def _odata_literal(value: str) -> str:
	return value.replace("'", "''")


def visibility_filter(user: User) -> str:
	"""OData `$filter` selecting the configs a user may see."""
	clauses = [
		f"Author/Title eq '{_odata_literal(user.name)}'",
		"ConfigType eq 'Global'",
	]
	if not user.is_guest:
		clauses.append("ConfigType eq 'Internal'")
	return " or ".join(clauses)


class SavedConfigStore:
	"""CRUD over the list that stores saved search configurations."""

	def __init__(self, client: SharePointClient, settings: Settings | None = None):
		self.client = client
		self.settings = settings or get_settings()

	@property
	def items_url(self) -> str:
		return (
			f"{self.settings.refdata_base_url}/web/lists/"
			f"getbytitle('{self.settings.refdata_list_name}')/items"
		)

	def item_url(self, item_id: str) -> str:
		return f"{self.items_url}({item_id})"

	@property
	def entity_type(self) -> str:
		return f"SP.Data.{self.settings.refdata_list_name}ListItem"

	def _payload(self, fields: dict) -> dict:
		return {"__metadata": {"type": self.entity_type}, **fields}

	async def list_for(self, user: User) -> list[FilterConfig]:
		data = await self.client.get(
			self.items_url,
			params={
				"$select": "Id,Title,Config,ConfigType,Groupby,default,Author/Title",
				"$expand": "Author",
				"$filter": visibility_filter(user),
			},
		)
		configs = [FilterConfig.from_list_item(item) for item in odata_results(data)]
		logger.debug(f"Loaded {len(configs)} saved configs for {user.name}")
		return configs

	async def create(self, config: FilterConfig) -> FilterConfig:
		data = await self.client.post(
			self.items_url,
			json=self._payload(config.to_list_item()),
		)
		entity = odata_entity(data)
		if not entity:
			return config
		created = FilterConfig.from_list_item(entity)
		if created.author is None:
			created = created.model_copy(update={"author": config.author})
		logger.info(f"Saved config '{created.title}' created with id {created.id}")
		return created

	async def update(self, config: FilterConfig) -> None:
		await self.client.merge(
			self.item_url(config.id),
			json=self._payload(config.to_list_item()),
		)
		logger.info(f"Saved config {config.id} updated")

	async def set_default(self, item_id: str, when: datetime | None = None) -> datetime:
		when = when or datetime.now(timezone.utc)
		await self.client.merge(
			self.item_url(item_id),
			json=self._payload({"default": when.isoformat().replace("+00:00", "Z")}),
		)
		return when

	async def recycle(self, item_id: str) -> None:
		await self.client.delete(
			f"{self.item_url(item_id)}/recycle",
			headers={"IF-MATCH": "*"},
		)
		logger.info(f"Saved config {item_id} moved to the recycle bin")
