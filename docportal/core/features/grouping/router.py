# (c) Copyright Datacraft, 2026
"""Grouped results tree endpoints."""
import logging
from typing import Annotated, Sequence

from fastapi import APIRouter, Depends

from docportal.core.auth import User, get_current_user
from docportal.core.config import Settings, get_settings
from docportal.core.exceptions import ResourceNotFound
from docportal.core.features.classifier import (
	DocumentRecord,
	DocumentSearch,
	format_title,
	normalize_rows,
)
from docportal.core.features.saved_views import FilterMap
from docportal.core.sharepoint import SharePointClient

from .engine import group_documents
from .schema import GroupRequest, GroupedRecord, GroupedResultsOut, SearchGroupRequest

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/grouping", tags=["Grouping"])


def get_document_search(
	user: Annotated[User, Depends(get_current_user)],
	settings: Annotated[Settings, Depends(get_settings)],
) -> DocumentSearch:
	return DocumentSearch(SharePointClient(access_token=user.access_token), settings)


def _grouped_out(
	records: Sequence[DocumentRecord],
	group_by: str,
	notice: str | None = None,
) -> GroupedResultsOut:
	grouped = group_documents(records, group_by)
	return GroupedResultsOut(
		group_by=grouped.group_by,
		total=len(records),
		groups=grouped.to_dict(),
		null_group=grouped.null_group(),
		records=[
			GroupedRecord(index=i, display_title=format_title(r), record=r.to_dict())
			for i, r in enumerate(records)
		],
		notice=notice,
	)


@router.post("", response_model=GroupedResultsOut)
async def group_results(
	data: GroupRequest,
	user: Annotated[User, Depends(get_current_user)],
):
	"""Normalize a search result table and return it grouped for display."""
	return _grouped_out(normalize_rows(data.rows), data.group_by)


@router.post("/search", response_model=GroupedResultsOut)
async def search_and_group(
	data: SearchGroupRequest,
	search: Annotated[DocumentSearch, Depends(get_document_search)],
):
	"""Run a metadata or file name search and group the hits."""
	filter_query = FilterMap.from_dict(data.filter_map).to_query()
	records, notice = await search.search(filter_query, data.file_name)
	return _grouped_out(records, data.group_by, notice)


@router.get("/documents/{unique_id}", response_model=GroupedRecord)
async def get_document(
	unique_id: str,
	search: Annotated[DocumentSearch, Depends(get_document_search)],
):
	"""Look up one document by its UniqueId, e.g. from a shared link."""
	record = await search.find_by_unique_id(unique_id)
	if record is None:
		raise ResourceNotFound(f"Document {unique_id} not found")
	return GroupedRecord(index=0, display_title=format_title(record), record=record.to_dict())
