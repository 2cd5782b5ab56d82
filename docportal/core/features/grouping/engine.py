# (c) Copyright Datacraft, 2026
"""
Grouping engine for search results.

Records are addressed by their index in the result set. A grouping pass
reads the records as an immutable snapshot and returns a fresh structure,
so a newer pass simply replaces an older one.
"""
import logging
from dataclasses import dataclass, field
from functools import cmp_to_key
from typing import Iterator, Sequence

from docportal.core.features.classifier import DocumentRecord, resolve_field

from .natural import natural_compare, natural_null_last, null_last

logger = logging.getLogger(__name__)

# Key of the bucket holding records without a value; no field value can equal it
NULL_GROUP = None
NULL_PART = "null"

DRAWING_KEY_FIELDS: tuple[str, ...] = (
	"business",
	"resort",
	"department",
	"drawing_area",
	"drawing_number",
	"park_stage",
)
DOCUMENT_KEY_FIELDS: tuple[str, ...] = (
	"business",
	"resort",
	"department",
	"building",
	"document_type",
	"title",
	"drawing_number",
)
ORDER_FIELDS: tuple[str, ...] = (
	"business",
	"resort",
	"department",
	"building",
	"document_type",
	"drawing_area",
	"discipline",
)


@dataclass
class GroupedResults:
	"""Two-level grouping: primary bucket -> composite key -> record indices."""
	group_by: str
	partition: dict[str | None, list[int]] = field(default_factory=dict)
	groups: dict[str | None, dict[str, list[int]]] = field(default_factory=dict)

	@property
	def primary_keys(self) -> list[str | None]:
		return list(self.groups.keys())

	def bucket(self, key: str | None) -> list[int]:
		"""Indices of one primary bucket in display order."""
		return [i for indices in self.groups.get(key, {}).values() for i in indices]

	def flatten(self) -> Iterator[int]:
		"""Every index in display order."""
		for key in self.groups:
			yield from self.bucket(key)

	def __len__(self) -> int:
		return sum(len(v) for v in self.partition.values())

	def to_dict(self) -> dict[str, dict[str, list[int]]]:
		"""Keyed buckets in display order; the null bucket is left out."""
		return {
			k: {sk: list(v) for sk, v in sub.items()}
			for k, sub in self.groups.items()
			if k is not NULL_GROUP
		}

	def null_group(self) -> dict[str, list[int]]:
		return {sk: list(v) for sk, v in self.groups.get(NULL_GROUP, {}).items()}


def _value_key(value) -> str | None:
	if value is None or value == "":
		return NULL_GROUP
	return str(value)


def partition_by_field(records: Sequence[DocumentRecord], field_name: str | None) -> dict[str | None, list[int]]:
	"""Bucket record indices by field value; null values go to NULL_GROUP."""
	buckets: dict[str | None, list[int]] = {}
	for index, record in enumerate(records):
		value = record.get(field_name) if field_name else None
		buckets.setdefault(_value_key(value), []).append(index)
	return buckets


def composite_key(record: DocumentRecord) -> str:
	"""Sub-group key; drawings and other documents use different fields."""
	key_fields = DRAWING_KEY_FIELDS if record.is_drawing else DOCUMENT_KEY_FIELDS
	return "-".join(
		NULL_PART if record.get(f) is None else str(record.get(f))
		for f in key_fields
	)


def order_bucket(records: Sequence[DocumentRecord], indices: Sequence[int]) -> list[int]:
	"""Natural drawing number order, then a stable multi-key null-last order."""
	by_number = sorted(
		indices,
		key=lambda i: natural_null_last(records[i].drawing_number),
	)
	return sorted(
		by_number,
		key=lambda i: tuple(null_last(records[i].get(f)) for f in ORDER_FIELDS),
	)


def collate(records: Sequence[DocumentRecord], indices: Sequence[int]) -> dict[str, list[int]]:
	"""Group already ordered indices by composite key, keeping their order."""
	collated: dict[str, list[int]] = {}
	for index in indices:
		collated.setdefault(composite_key(records[index]), []).append(index)
	return collated


def order_by_revision(records: Sequence[DocumentRecord], indices: Sequence[int]) -> list[int]:
	"""Newest revision first; records without a revision go last."""
	def newest_first(a: int, b: int) -> int:
		ra, rb = records[a].revision_number, records[b].revision_number
		if ra is None or rb is None:
			return natural_compare(ra, rb)
		return natural_compare(rb, ra)

	return sorted(indices, key=cmp_to_key(newest_first))


def sort_primary_keys(keys: Sequence[str | None]) -> list[str | None]:
	"""Alphabetical, with the null bucket always last."""
	return sorted(keys, key=lambda k: (k is NULL_GROUP, k or ""))


def group_documents(records: Sequence[DocumentRecord], group_by: str) -> GroupedResults:
	"""
	Partition and order records for display.

	Args:
		records: Normalized records, indexed by result position
		group_by: Grouping field, attribute name or display label

	Returns:
		GroupedResults with primary buckets sorted null-last and composite
		sub-groups ordered by revision, newest first
	"""
	field_name = resolve_field(group_by)
	if field_name is None:
		logger.warning(f"Unknown grouping field '{group_by}', placing all records in the null bucket")

	partition = partition_by_field(records, field_name)

	collated: dict[str | None, dict[str, list[int]]] = {}
	for key, indices in partition.items():
		collated[key] = collate(records, order_bucket(records, indices))

	groups: dict[str | None, dict[str, list[int]]] = {}
	for key in sort_primary_keys(list(collated.keys())):
		groups[key] = {
			sub_key: order_by_revision(records, indices)
			for sub_key, indices in collated[key].items()
		}

	logger.debug(
		f"Grouped {len(records)} records by '{group_by}' into {len(groups)} buckets"
	)
	return GroupedResults(group_by=group_by, partition=partition, groups=groups)
