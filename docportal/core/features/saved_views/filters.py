# (c) Copyright Datacraft, 2026
"""
Metadata filter state and KQL query text builder.

A FilterMap is immutable: every command returns a new instance so the
previous filter can still be compared against for drift detection.
"""
import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, Mapping

from docportal.core.exceptions import ValidationError
from docportal.core.features.classifier import TermsMap, get_terms_map

logger = logging.getLogger(__name__)

TO_BE_TAGGED = "to be tagged"
TO_BE_TAGGED_NOTICE = 'Please select a resort to search for "to be tagged".'
RESORT_LABEL = "Resort"
# Bookkeeping key the UI stores alongside the filter; never part of a query
IGNORED_KEYS = frozenset({"prevFilter"})

_WHITESPACE = re.compile(r"\s+")


def _term_label(value: str) -> str:
	return value.split("|")[0]


def _quote(value: str) -> str:
	label = _term_label(value)
	return f'"{label}"' if " " in label else label


@dataclass(frozen=True)
class FilterMap:
	"""Selected taxonomy values per metadata label."""
	values: Mapping[str, tuple[str, ...]] = field(default_factory=dict)

	@classmethod
	def from_dict(cls, data: Mapping[str, Iterable[str]] | None) -> "FilterMap":
		if not data:
			return cls()
		return cls({
			k: tuple(v)
			for k, v in data.items()
			if k not in IGNORED_KEYS and v
		})

	def to_dict(self) -> dict[str, list[str]]:
		return {k: list(v) for k, v in self.values.items()}

	def __bool__(self) -> bool:
		return bool(self.values)

	def __contains__(self, label: str) -> bool:
		return label in self.values

	def get(self, label: str) -> tuple[str, ...]:
		return tuple(self.values.get(label, ()))

	def _replace(self, label: str, selected: Iterable[str]) -> "FilterMap":
		updated = {k: v for k, v in self.values.items() if k != label}
		selected = tuple(selected)
		if selected:
			updated[label] = selected
		return FilterMap(updated)

	def toggle_value(self, label: str, value: str) -> "FilterMap":
		"""
		Add or remove one value of a metadata label.

		"to be tagged" needs a resort in the filter and replaces every other
		value of its label; picking a regular value drops "to be tagged".
		"""
		current = self.get(label)

		if value == TO_BE_TAGGED:
			if TO_BE_TAGGED in current:
				return self._replace(label, ())
			if RESORT_LABEL not in self:
				raise ValidationError(TO_BE_TAGGED_NOTICE)
			return self._replace(label, (TO_BE_TAGGED,))

		if value in current:
			return self._replace(label, (v for v in current if v != value))
		return self._replace(
			label,
			[v for v in current if v != TO_BE_TAGGED] + [value],
		)

	def toggle_all(self, label: str, options: Iterable[str], selected: bool) -> "FilterMap":
		"""Select every option of a label, or clear the label."""
		if not selected:
			return self._replace(label, ())
		return self._replace(label, (o for o in options if o != TO_BE_TAGGED))

	def restrict(self, label: str, allowed: Iterable[str]) -> "FilterMap":
		"""Drop values of `label` that are not in `allowed`."""
		allowed = {_term_label(a) for a in allowed}
		return self._replace(
			label,
			(v for v in self.get(label) if _term_label(v) in allowed),
		)

	def to_query(self, terms: TermsMap | None = None) -> str:
		"""KQL fragment such as `Resort:(Alpha OR "Blue Bay") -Building:*`."""
		terms = terms or get_terms_map()
		query = ""
		for label, selected in self.values.items():
			if label in IGNORED_KEYS or not selected:
				continue
			managed_property = terms.key_for_label(label)
			if managed_property is None:
				managed_property = label.replace(" ", "")
				logger.warning(f"No managed property mapped for '{label}', using '{managed_property}'")
			if TO_BE_TAGGED in selected:
				query += f" -{managed_property}:*"
			else:
				query += f" {managed_property}:({' OR '.join(_quote(v) for v in selected)})"
		return _WHITESPACE.sub(" ", query).strip()
