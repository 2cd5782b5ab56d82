# (c) Copyright Datacraft, 2026
"""Natural ("human") ordering of strings with embedded numbers."""
import re
from typing import Any

_DIGIT_RUN = re.compile(r"(\d+)")

NaturalKey = tuple[tuple[tuple[int, Any], ...], str]


def natural_key(value: Any) -> NaturalKey:
	"""
	Sort key comparing digit runs numerically and text case-insensitively.

	"D-2" < "D-10" < "D-100". The raw string breaks ties so that keys
	stay total for values differing only by case or leading zeros.
	"""
	text = "" if value is None else str(value)
	parts: list[tuple[int, Any]] = []
	for chunk in _DIGIT_RUN.split(text):
		if not chunk:
			continue
		if chunk.isdecimal():
			parts.append((0, int(chunk)))
		else:
			parts.append((1, chunk.casefold()))
	return tuple(parts), text


def natural_compare(a: Any, b: Any) -> int:
	"""Three-way natural comparison; None sorts after every value."""
	if a is None and b is None:
		return 0
	if a is None:
		return 1
	if b is None:
		return -1
	ka, kb = natural_key(a), natural_key(b)
	if ka < kb:
		return -1
	if ka > kb:
		return 1
	return 0


def null_last(value: Any) -> tuple[bool, Any]:
	"""Plain sort key placing None after all non-null values."""
	return (value is None, "" if value is None else value)


def natural_null_last(value: Any) -> tuple[bool, NaturalKey]:
	"""Natural sort key placing None after all non-null values."""
	return (value is None, natural_key(value))
