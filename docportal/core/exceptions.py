# (c) Copyright Datacraft, 2026
"""Error taxonomy shared by the portal services."""


FILE_NAME_TOO_LONG_MESSAGE = (
	"Something went wrong. Your file name has more than 400 characters."
)
FORBIDDEN_MESSAGE = (
	"You do not have access rights to any resort, please contact your "
	"administrator and copy your resort representative in the email."
)


class PortalError(Exception):
	"""Base class for portal errors."""
	status_code: int = 500

	def __init__(self, message: str | None = None):
		self.message = message or self.__class__.__doc__ or "Portal error"
		super().__init__(self.message)


class AuthExpired(PortalError):
	"""Authentication expired, sign in again."""
	status_code = 401


class Forbidden(PortalError):
	"""Operation not permitted for the current role."""
	status_code = 403


class ValidationError(PortalError):
	"""Request failed validation."""
	status_code = 422


class ResourceNotFound(PortalError):
	"""Requested resource does not exist."""
	status_code = 404


class AlreadyResolved(ResourceNotFound):
	"""This document is either already approved or removed."""


class TransientNetwork(PortalError):
	"""Upstream service unavailable, try again."""
	status_code = 503


class UpstreamError(PortalError):
	"""Upstream service rejected the request."""
	status_code = 502
