# (c) Copyright Datacraft, 2026
"""Bulk download API router."""
import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from docportal.core.auth import User, get_current_user
from docportal.core.config import Settings, get_settings
from docportal.core.features.classifier import normalize_rows
from docportal.core.sharepoint import SharePointClient

from .schema import DownloadJob, DownloadPlan
from .service import BulkTransferCoordinator

logger = logging.getLogger(__name__)

router = APIRouter(
	prefix="/bulk-downloads",
	tags=["Bulk Downloads"],
)


def get_transfer_coordinator(
	user: Annotated[User, Depends(get_current_user)],
	settings: Annotated[Settings, Depends(get_settings)],
) -> BulkTransferCoordinator:
	return BulkTransferCoordinator(SharePointClient(access_token=user.access_token), settings)


@router.post("", response_model=DownloadPlan)
async def create_download(
	data: DownloadJob,
	coordinator: Annotated[BulkTransferCoordinator, Depends(get_transfer_coordinator)],
):
	"""
	Start a bulk download.

	Individual downloads come back as staggered links for the browser to
	open; zip and merged PDF jobs are submitted and answered right away.
	"""
	records = normalize_rows(data.file_sources)
	outcome = await coordinator.download(records, data.style, data.output_filename)
	if isinstance(outcome, list):
		return DownloadPlan(style=data.style, links=outcome)
	return DownloadPlan(style=data.style, accepted=outcome)
