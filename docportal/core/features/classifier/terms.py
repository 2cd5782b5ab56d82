# (c) Copyright Datacraft, 2026
"""Mapping between metadata display labels and search managed properties."""
import json
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

logger = logging.getLogger(__name__)

# Display label -> DocumentRecord attribute
LABEL_TO_FIELD: dict[str, str] = {
	"Business": "business",
	"Resort": "resort",
	"Department": "department",
	"Building": "building",
	"Villa": "villa",
	"Document Type": "document_type",
	"Drawing Number": "drawing_number",
	"Drawing Area": "drawing_area",
	"Discipline": "discipline",
	"Revision Number": "revision_number",
	"Short Description": "short_description",
	"Park Stage": "park_stage",
}

DEFAULT_MANAGED_PROPERTIES: dict[str, str] = {
	"Business": "Business",
	"Resort": "Resort",
	"Department": "Department",
	"Building": "Building",
	"Villa": "Villa",
	"Document Type": "DocumentType",
	"Drawing Number": "DrawingNumber",
	"Drawing Area": "DrawingArea",
	"Discipline": "Discipline",
	"Revision Number": "RevisionNumber",
	"Short Description": "ShortDescription",
	"Park Stage": "ParkStage",
}

# Search keys that are not taxonomy terms and never change per environment
FIXED_KEYS: dict[str, str] = {
	"title": "Title",
	"author": "Author",
	"site_name_url": "SiteName",
	"path": "Path",
	"filename": "Filename",
	"parent_link": "ParentLink",
	"unique_id": "UniqueId",
	"moderation_status": "ModerationStatus",
	"editor_id": "EditorId",
	"file_ref": "FileRef",
	"file_dir_ref": "FileDirRef",
	"modified_at": "LastModifiedTime",
}


@dataclass(frozen=True)
class TermsMap:
	"""Label to managed-property mapping for one environment."""
	managed_properties: dict[str, str] = field(
		default_factory=lambda: dict(DEFAULT_MANAGED_PROPERTIES)
	)

	def key_for_label(self, label: str) -> str | None:
		"""Search key for a display label such as "Drawing Area"."""
		return self.managed_properties.get(label)

	def key_for_field(self, field_name: str) -> str | None:
		"""Search key for a DocumentRecord attribute."""
		if field_name in FIXED_KEYS:
			return FIXED_KEYS[field_name]
		for label, attr in LABEL_TO_FIELD.items():
			if attr == field_name:
				return self.managed_properties.get(label)
		return None

	def labels(self) -> list[str]:
		return list(self.managed_properties.keys())


def resolve_field(name: str) -> str | None:
	"""
	Resolve a grouping field given as an attribute or a display label.

	Returns the DocumentRecord attribute name, or None if unknown.
	"""
	if name in LABEL_TO_FIELD:
		return LABEL_TO_FIELD[name]
	if name in LABEL_TO_FIELD.values() or name in FIXED_KEYS:
		return name
	normalized = name.strip().lower().replace(" ", "_")
	if normalized in LABEL_TO_FIELD.values() or normalized in FIXED_KEYS:
		return normalized
	return None


def load_terms_map(path: Path) -> TermsMap:
	"""Load an environment specific mapping, falling back to defaults per key."""
	with open(path, "r", encoding="utf-8") as stream:
		overrides = json.load(stream)

	mapping = dict(DEFAULT_MANAGED_PROPERTIES)
	mapping.update({k: v for k, v in overrides.items() if isinstance(v, str)})
	logger.info(f"Loaded {len(overrides)} managed property mappings from {path}")
	return TermsMap(managed_properties=mapping)


@lru_cache(maxsize=1)
def get_terms_map() -> TermsMap:
	from docportal.core.config import get_settings

	settings = get_settings()
	if settings.terms_map_path and settings.terms_map_path.is_file():
		return load_terms_map(settings.terms_map_path)
	return TermsMap()
