# (c) Copyright Datacraft, 2026
"""Metadata classifier: search cells to canonical document records."""
from .schema import Cell, DocumentRecord, SearchRow
from .search import DocumentSearch, build_querytext
from .service import (
	format_title,
	format_unique_id,
	get_key_value,
	normalize_cells,
	normalize_rows,
)
from .terms import TermsMap, get_terms_map, resolve_field

__all__ = [
	'Cell',
	'DocumentRecord',
	'DocumentSearch',
	'SearchRow',
	'TermsMap',
	'build_querytext',
	'format_title',
	'format_unique_id',
	'get_key_value',
	'get_terms_map',
	'normalize_cells',
	'normalize_rows',
	'resolve_field',
]
