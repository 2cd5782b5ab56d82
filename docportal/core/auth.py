# (c) Copyright Datacraft, 2026
"""Request user resolved from reverse-proxy headers."""
import logging
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request, status
from pydantic import BaseModel

from docportal.core.config import Settings, get_settings
from docportal.core.types import UserRole

logger = logging.getLogger(__name__)


class User(BaseModel):
	"""Signed-in portal user."""
	id: str
	name: str
	email: str | None = None
	role: UserRole = UserRole.USER
	access_token: str | None = None

	@property
	def is_admin(self) -> bool:
		return self.role == UserRole.ADMIN

	@property
	def is_guest(self) -> bool:
		return self.role == UserRole.GUEST


def parse_role(raw: str | None) -> UserRole:
	"""Map a comma separated role header onto the highest matching role."""
	if not raw:
		return UserRole.USER
	roles = {r.strip().lower() for r in raw.split(",") if r.strip()}
	if "admin" in roles:
		return UserRole.ADMIN
	if roles and roles <= {"guest"}:
		return UserRole.GUEST
	return UserRole.USER


def get_current_user(
	request: Request,
	settings: Annotated[Settings, Depends(get_settings)],
	authorization: Annotated[str | None, Header()] = None,
) -> User:
	username = request.headers.get(settings.remote_user_header)
	if not username:
		raise HTTPException(
			status_code=status.HTTP_401_UNAUTHORIZED,
			detail="Not authenticated",
		)

	token = None
	if authorization and authorization.lower().startswith("bearer "):
		token = authorization[7:]

	return User(
		id=request.headers.get(settings.remote_user_id_header) or username,
		name=request.headers.get(settings.remote_name_header) or username,
		email=request.headers.get(settings.remote_email_header),
		role=parse_role(request.headers.get(settings.remote_roles_header)),
		access_token=token,
	)
