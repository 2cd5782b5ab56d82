# (c) Copyright Datacraft, 2026
"""Grouping engine: primary buckets, composite sub-groups, natural order."""
from .engine import (
	NULL_GROUP,
	GroupedResults,
	composite_key,
	group_documents,
)
from .natural import natural_compare, natural_key

__all__ = [
	'NULL_GROUP',
	'GroupedResults',
	'composite_key',
	'group_documents',
	'natural_compare',
	'natural_key',
]
