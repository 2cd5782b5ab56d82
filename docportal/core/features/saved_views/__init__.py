# (c) Copyright Datacraft, 2026
"""Saved search views and the metadata filter they carry."""
from .filters import TO_BE_TAGGED, FilterMap
from .schema import DriftState, FilterConfig
from .service import SavedViewManager
from .store import SavedConfigStore

__all__ = [
	'DriftState',
	'FilterConfig',
	'FilterMap',
	'SavedConfigStore',
	'SavedViewManager',
	'TO_BE_TAGGED',
]
