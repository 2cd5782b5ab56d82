# (c) Copyright Datacraft, 2026
"""Normalize search API cells into DocumentRecord instances."""
import logging
from datetime import datetime
from typing import Any, Iterable, Mapping

from .schema import DocumentRecord, SearchRow
from .terms import FIXED_KEYS, LABEL_TO_FIELD, TermsMap, get_terms_map

logger = logging.getLogger(__name__)

TITLE_SEPARATOR = " – "


def _cell_parts(cell: Any) -> tuple[str | None, Any]:
	if cell is None:
		return None, None
	if isinstance(cell, Mapping):
		return cell.get("Key", cell.get("key")), cell.get("Value", cell.get("value"))
	return getattr(cell, "key", None), getattr(cell, "value", None)


def cells_to_dict(cells: Iterable[Any] | None) -> dict[str, Any]:
	"""
	Index a cell list by key.

	Unknown shapes and None cells are skipped. The first occurrence of a
	key wins, matching a linear find over the list.
	"""
	indexed: dict[str, Any] = {}
	if not cells:
		return indexed
	for cell in cells:
		key, value = _cell_parts(cell)
		if key is None or key in indexed:
			continue
		indexed[key] = value
	return indexed


def get_key_value(cells: Iterable[Any] | None, key: str) -> Any:
	"""Value of the first cell with `key`, or None."""
	return cells_to_dict(cells).get(key)


def split_term_label(value: Any) -> Any:
	"""Strip the `|<term guid>` suffix from a taxonomy value."""
	if isinstance(value, str) and "|" in value:
		return value.split("|")[0]
	return value


def format_unique_id(unique_id: str | None) -> str | None:
	if unique_id is None:
		return None
	return unique_id.replace("{", "").replace("}", "")


def _as_text(value: Any) -> str | None:
	if value is None:
		return None
	if isinstance(value, str):
		return value if value != "" else None
	return str(value)


def _as_int(value: Any) -> int | None:
	if value is None or value == "":
		return None
	try:
		return int(value)
	except (TypeError, ValueError):
		return None


def _as_datetime(value: Any) -> datetime | None:
	if isinstance(value, datetime):
		return value
	if not isinstance(value, str) or not value:
		return None
	try:
		return datetime.fromisoformat(value.replace("Z", "+00:00"))
	except ValueError:
		return None


def normalize_cells(cells: Iterable[Any] | None, terms: TermsMap | None = None) -> DocumentRecord:
	"""
	Build a DocumentRecord from a raw cell list.

	Never raises for unknown, missing or out-of-order cells.
	"""
	terms = terms or get_terms_map()
	indexed = cells_to_dict(cells)
	values: dict[str, Any] = {}

	for label, attr in LABEL_TO_FIELD.items():
		key = terms.key_for_label(label)
		raw = indexed.get(key) if key else None
		values[attr] = _as_text(split_term_label(raw))

	for attr, key in FIXED_KEYS.items():
		raw = indexed.get(key)
		if attr == "moderation_status":
			values[attr] = _as_int(raw)
		elif attr == "modified_at":
			values[attr] = _as_datetime(raw)
		else:
			values[attr] = _as_text(raw)

	return DocumentRecord(**values)


def normalize_rows(rows: Iterable[Any], terms: TermsMap | None = None) -> list[DocumentRecord]:
	"""Normalize every row of a search result table, preserving order."""
	terms = terms or get_terms_map()
	records = []
	for row in rows:
		if isinstance(row, SearchRow):
			cells = row.cells
		elif isinstance(row, Mapping):
			cells = row.get("Cells") or row.get("cells")
		else:
			cells = row
		records.append(normalize_cells(cells, terms))
	return records


def format_title(record: DocumentRecord) -> str:
	"""Display title assembled from the record's classification fields."""
	parts: list[str | None] = [
		record.business,
		record.resort,
		record.department,
		record.building,
		record.document_type,
	]
	if record.document_type == "Drawing":
		parts.append(record.drawing_number)
	parts.extend([record.title, record.revision_number])
	return TITLE_SEPARATOR.join(p for p in parts if p)
