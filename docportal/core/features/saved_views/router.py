# (c) Copyright Datacraft, 2026
"""Saved views API router."""
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status

from docportal.core.auth import User, get_current_user
from docportal.core.config import Settings, get_settings
from docportal.core.sharepoint import SharePointClient

from .schema import (
	MODIFIED_ID_SUFFIX,
	DriftRequest,
	DriftState,
	FilterConfig,
	SavedViewOut,
	SaveViewRequest,
	UpdateViewRequest,
)
from .service import SavedViewManager
from .store import SavedConfigStore

logger = logging.getLogger(__name__)

router = APIRouter(
	prefix="/saved-views",
	tags=["Saved Views"],
)


def get_saved_view_manager(
	user: Annotated[User, Depends(get_current_user)],
	settings: Annotated[Settings, Depends(get_settings)],
) -> SavedViewManager:
	client = SharePointClient(access_token=user.access_token)
	return SavedViewManager(SavedConfigStore(client, settings), user)


Manager = Annotated[SavedViewManager, Depends(get_saved_view_manager)]


def _view_out(manager: SavedViewManager, config: FilterConfig) -> SavedViewOut:
	default = manager.default_config()
	return SavedViewOut(
		id=config.id,
		title=config.title,
		config_type=config.config_type,
		group_by_field=config.group_by_field,
		filter_map=config.filter_map,
		is_default=default is not None and default.id == config.id,
		is_selected=manager.selected is not None and manager.selected.id == config.id,
		modified=config.modified,
	)


@router.get("", response_model=list[SavedViewOut])
async def list_saved_views(manager: Manager):
	"""Saved views visible to the current user, default one selected."""
	configs = await manager.load()
	return [_view_out(manager, c) for c in configs]


@router.post("", response_model=SavedViewOut, status_code=status.HTTP_201_CREATED)
async def create_saved_view(data: SaveViewRequest, manager: Manager):
	await manager.load()
	created = await manager.save_as_new(
		data.title,
		data.config_type,
		filter_map=data.filter_map,
		group_by_field=data.group_by_field,
	)
	return _view_out(manager, created)


@router.put("/{view_id}", response_model=SavedViewOut)
async def update_saved_view(view_id: str, data: UpdateViewRequest, manager: Manager):
	await manager.load()
	updated = await manager.update(
		view_id,
		data.title,
		filter_map=data.filter_map,
		group_by_field=data.group_by_field,
	)
	return _view_out(manager, updated)


@router.post("/{view_id}/default", response_model=SavedViewOut)
async def set_default_saved_view(view_id: str, manager: Manager):
	await manager.load()
	updated = await manager.set_default(view_id)
	return _view_out(manager, updated)


@router.delete("/{view_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_saved_view(view_id: str, manager: Manager):
	await manager.load()
	await manager.delete(view_id)


@router.post("/drift", response_model=DriftState)
async def check_saved_view_drift(data: DriftRequest, manager: Manager):
	"""Tell whether the live filter still matches the selected view."""
	await manager.load()
	# A fork id handed out by an earlier drift check resolves to its saved view
	manager.select(data.selected_id.removesuffix(MODIFIED_ID_SUFFIX))
	return manager.check_drift(data.filter_map)
