# (c) Copyright Datacraft, 2026
"""Tests for search cell normalization."""
import json
from datetime import datetime, timezone

from docportal.core.features.classifier import (
    DocumentRecord,
    SearchRow,
    TermsMap,
    format_title,
    format_unique_id,
    get_key_value,
    normalize_cells,
    normalize_rows,
    resolve_field,
)
from docportal.core.features.classifier.terms import load_terms_map


def test_normalize_maps_known_keys(make_cells):
    """Managed properties land on their record attributes."""
    cells = make_cells(
        Resort="Alpha|1d0c-guid",
        DocumentType="Drawing",
        DrawingNumber="D-10",
        DrawingArea="Clubhouse",
        RevisionNumber="3",
        Title="Site plan",
        ModerationStatus="2",
        FileRef="/sites/alpha/Shared Documents/plan.pdf",
        LastModifiedTime="2025-04-01T10:00:00Z",
    )

    record = normalize_cells(cells)

    assert record.resort == "Alpha"
    assert record.document_type == "Drawing"
    assert record.drawing_number == "D-10"
    assert record.drawing_area == "Clubhouse"
    assert record.revision_number == "3"
    assert record.title == "Site plan"
    assert record.moderation_status == 2
    assert record.file_ref == "/sites/alpha/Shared Documents/plan.pdf"
    assert record.modified_at == datetime(2025, 4, 1, 10, 0, tzinfo=timezone.utc)
    assert record.is_drawing


def test_normalize_tolerates_missing_unknown_and_null_cells(make_cells):
    """Unknown keys are ignored, missing keys default to None, None cells are skipped."""
    cells = [None, *make_cells(Unknown="x", Resort="Beta"), {"Value": "orphan"}]

    record = normalize_cells(cells)

    assert record.resort == "Beta"
    assert record.business is None
    assert record.drawing_number is None
    assert record.moderation_status is None


def test_normalize_empty_input():
    """No cells at all still gives a record."""
    assert normalize_cells(None) == DocumentRecord()
    assert normalize_cells([]) == DocumentRecord()


def test_normalize_is_order_independent(make_cells):
    """Shuffling cells does not change the result."""
    cells = make_cells(Resort="Alpha", Building="B1", Title="Plan")

    assert normalize_cells(cells) == normalize_cells(list(reversed(cells)))


def test_first_occurrence_of_a_key_wins(make_cells):
    """Duplicate keys resolve to the first cell."""
    cells = make_cells(Resort="Alpha") + make_cells(Resort="Beta")

    assert get_key_value(cells, "Resort") == "Alpha"
    assert normalize_cells(cells).resort == "Alpha"


def test_empty_string_values_become_none(make_cells):
    record = normalize_cells(make_cells(Resort="", ModerationStatus="", RevisionNumber=""))

    assert record.resort is None
    assert record.moderation_status is None
    assert record.revision_number is None


def test_drawing_detection_is_case_insensitive(make_cells):
    assert normalize_cells(make_cells(DocumentType="DRAWING")).is_drawing
    assert not normalize_cells(make_cells(DocumentType="Report")).is_drawing
    assert not normalize_cells([]).is_drawing


def test_custom_terms_map(make_cells):
    """An environment mapping renames managed properties."""
    terms = TermsMap(managed_properties={"Resort": "owstaxIdResort"})
    cells = make_cells(owstaxIdResort="Gamma", Resort="ignored")

    assert normalize_cells(cells, terms).resort == "Gamma"


def test_load_terms_map_merges_with_defaults(tmp_path):
    path = tmp_path / "terms.json"
    path.write_text(json.dumps({"Resort": "RefinableString01", "Bad": 3}))

    terms = load_terms_map(path)

    assert terms.key_for_label("Resort") == "RefinableString01"
    assert terms.key_for_label("Document Type") == "DocumentType"
    assert terms.key_for_label("Bad") is None
    assert terms.key_for_field("drawing_area") == "DrawingArea"
    assert terms.key_for_field("file_ref") == "FileRef"


def test_normalize_rows_accepts_models_and_dicts(make_row):
    rows = [
        make_row(Resort="Alpha"),
        SearchRow.model_validate(make_row(Resort="Beta")),
    ]

    records = normalize_rows(rows)

    assert [r.resort for r in records] == ["Alpha", "Beta"]


def test_format_unique_id():
    assert format_unique_id("{ABC-123}") == "ABC-123"
    assert format_unique_id(None) is None


def test_format_title_skips_empty_parts():
    drawing = DocumentRecord(
        business="Parks",
        resort="Alpha",
        document_type="Drawing",
        drawing_number="D-2",
        title="Site plan",
        revision_number="B",
    )
    report = DocumentRecord(resort="Alpha", document_type="Report", drawing_number="D-2", title="Audit")

    assert format_title(drawing) == "Parks – Alpha – Drawing – D-2 – Site plan – B"
    assert format_title(report) == "Alpha – Report – Audit"


def test_resolve_field_accepts_labels_and_attributes():
    assert resolve_field("Drawing Area") == "drawing_area"
    assert resolve_field("drawing_area") == "drawing_area"
    assert resolve_field("document type") == "document_type"
    assert resolve_field("Nonexistent") is None
