# (c) Copyright Datacraft, 2026
"""Search API access returning normalized document records."""
import logging

from docportal.core.config import Settings, get_settings
from docportal.core.exceptions import ValidationError
from docportal.core.sharepoint import SharePointClient
from docportal.core.sharepoint.client import ODATA_NOMETADATA

from .schema import DocumentRecord
from .service import format_unique_id, get_key_value, normalize_rows
from .terms import TermsMap

logger = logging.getLogger(__name__)

EMPTY_FILTER_MESSAGE = "Please select the metadata filter to search for documents."
TOO_MANY_RESULTS_MESSAGE = "Please add more filters to refine your search."


def scope_suffix(settings: Settings) -> str:
	"""Restrict a query to DMS documents of the hub's associated sites."""
	hub_site = settings.related_hub_site or settings.hub_name
	return (
		f" ContentType:'Document' ContentType:'{settings.content_type_name}'"
		f"  contentclass:STS_ListItem_DocumentLibrary"
		f" (RelatedHubSites:{hub_site}) (-SiteId:{hub_site})"
	)


def build_querytext(
	filter_query: str | None = None,
	file_name: str | None = None,
	settings: Settings | None = None,
) -> str:
	"""
	Full KQL query text for the search endpoint.

	A file name search takes precedence over the metadata filter.
	"""
	settings = settings or get_settings()
	if file_name:
		return f"Title:({file_name}*){scope_suffix(settings)}"
	if not filter_query:
		raise ValidationError(EMPTY_FILTER_MESSAGE)
	return f"{filter_query}{scope_suffix(settings)}"


class DocumentSearch:
	"""Runs search queries against the hub and normalizes the rows."""

	def __init__(self, client: SharePointClient, settings: Settings | None = None, terms: TermsMap | None = None):
		self.client = client
		self.settings = settings or get_settings()
		self.terms = terms

	@property
	def select_properties(self) -> list[str]:
		return [p.strip() for p in self.settings.select_properties.split(",") if p.strip()]

	async def query_rows(self, querytext: str) -> list[dict]:
		payload = {
			"request": {
				"Querytext": querytext,
				"SelectProperties": {"results": self.select_properties},
				"StartRow": 0,
				"RowLimit": self.settings.max_search_results,
				"TrimDuplicates": False,
				"ClientType": "PnPModernSearch",
				"__metadata": {"type": "Microsoft.Office.Server.Search.REST.SearchRequest"},
			}
		}
		data = await self.client.post(
			f"{self.settings.hub_url}/_api/search/postquery",
			json=payload,
			accept=ODATA_NOMETADATA,
		)
		try:
			rows = data["PrimaryQueryResult"]["RelevantResults"]["Table"]["Rows"]
		except (KeyError, TypeError):
			logger.warning("Search response carried no result table")
			return []
		return rows or []

	async def search(
		self,
		filter_query: str | None = None,
		file_name: str | None = None,
	) -> tuple[list[DocumentRecord], str | None]:
		"""
		Search documents by metadata filter or file name.

		Returns the records and an optional notice shown when the result
		set hit the configured maximum.
		"""
		querytext = build_querytext(filter_query, file_name, self.settings)
		rows = await self.query_rows(querytext)
		records = normalize_rows(rows, self.terms)
		notice = None
		if len(records) >= self.settings.max_search_results:
			notice = TOO_MANY_RESULTS_MESSAGE
		logger.info(f"Search returned {len(records)} documents")
		return records, notice

	async def find_by_unique_id(self, unique_id: str) -> DocumentRecord | None:
		doc_id = format_unique_id(unique_id)
		rows = await self.query_rows(f"UniqueId:{doc_id}{scope_suffix(self.settings)}")
		for row in rows:
			cells = row.get("Cells") if isinstance(row, dict) else None
			if format_unique_id(get_key_value(cells, "UniqueId")) == doc_id:
				return normalize_rows([row], self.terms)[0]
		return None
