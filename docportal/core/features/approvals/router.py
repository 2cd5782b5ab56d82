# (c) Copyright Datacraft, 2026
"""Approvals API router."""
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from docportal.core.auth import User, get_current_user
from docportal.core.config import Settings, get_settings
from docportal.core.sharepoint import SharePointClient

from .schema import (
	ActionResult,
	ApprovalQueueOut,
	BulkStatusRequest,
	BulkUpdateOut,
	DecisionRequest,
	RequestApprovalRequest,
	SaveMetadataRequest,
)
from .service import ApprovalService

logger = logging.getLogger(__name__)

router = APIRouter(
	prefix="/approvals",
	tags=["Approvals"],
)


def get_approval_service(
	user: Annotated[User, Depends(get_current_user)],
	settings: Annotated[Settings, Depends(get_settings)],
) -> ApprovalService:
	return ApprovalService(SharePointClient(access_token=user.access_token), settings=settings)


Service = Annotated[ApprovalService, Depends(get_approval_service)]


@router.get("", response_model=ApprovalQueueOut)
async def list_approvals(
	service: Service,
	site_url: str = Query(...),
	site_name: str = Query(...),
):
	"""
	Items awaiting a decision on one resort site.

	Follows the page chain to the end before answering.
	"""
	role = await service.load(site_url, site_name)
	await service.registry.wait()
	auto_approval = service.settings.auto_approval_enabled and role.can_moderate
	return ApprovalQueueOut(
		site_url=site_url,
		can_moderate=role.can_moderate,
		auto_approval=auto_approval,
		items=list(service.queue),
	)


@router.post("/request-approval", response_model=ActionResult)
async def request_approval(data: RequestApprovalRequest, service: Service):
	return await service.request_approval(data.site_url, data.item, data.comment)


@router.post("/approve", response_model=ActionResult)
async def approve(data: DecisionRequest, service: Service):
	return await service.approve(data.site_url, data.site_name, data.item)


@router.post("/reject", response_model=ActionResult)
async def reject(data: DecisionRequest, service: Service):
	return await service.reject(data.site_url, data.site_name, data.item, data.reason)


@router.post("/status", response_model=BulkUpdateOut)
async def set_status(data: BulkStatusRequest, service: Service):
	"""Bulk moderation status change; failed items are listed, not raised."""
	outcome = await service.set_status(
		data.site_url,
		data.file_dir_ref,
		data.item_ids,
		data.status,
		data.comment,
	)
	return BulkUpdateOut(succeeded=outcome.succeeded, failed=outcome.failed)


@router.post("/metadata", response_model=ActionResult)
async def save_metadata(data: SaveMetadataRequest, service: Service):
	return await service.save_metadata(data.site_url, data.site_name, data.item, data.values)
