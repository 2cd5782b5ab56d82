# (c) Copyright Datacraft, 2026
"""Drawing folder filing."""
from .schema import FilingOutcome, FilingRequest, MoveWarning
from .service import FolderOrganizer

__all__ = [
	'FilingOutcome',
	'FilingRequest',
	'FolderOrganizer',
	'MoveWarning',
]
