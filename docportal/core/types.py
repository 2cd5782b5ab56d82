# (c) Copyright Datacraft, 2026
"""Shared enumerations."""
from enum import Enum, IntEnum


class UserRole(IntEnum):
	"""Portal role of the signed-in user."""
	GUEST = 0
	USER = 1
	ADMIN = 2


class ModerationStatus(IntEnum):
	"""SharePoint `_ModerationStatus` codes."""
	APPROVED = 0
	DENIED = 1
	PENDING = 2
	DRAFT = 3
	SCHEDULED = 4


class ConfigType(str, Enum):
	"""Visibility scope of a saved search configuration."""
	PERSONAL = "Personal"
	GLOBAL = "Global"
	INTERNAL = "Internal"


class DownloadStyle(str, Enum):
	"""Bulk download strategies."""
	INDIVIDUAL = "individual"
	ZIP = "zip"
	MERGED_PDF = "pdf"

	@property
	def is_batch(self) -> bool:
		return self is not DownloadStyle.INDIVIDUAL
