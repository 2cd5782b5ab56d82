# (c) Copyright Datacraft, 2026
"""SharePoint REST transport."""
from .client import (
	SharePointClient,
	list_guid_from_uri,
	odata_entity,
	odata_next,
	odata_results,
)

__all__ = [
	'SharePointClient',
	'list_guid_from_uri',
	'odata_entity',
	'odata_next',
	'odata_results',
]
