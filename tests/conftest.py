# (c) Copyright Datacraft, 2026
"""Shared fixtures for portal tests."""
import pytest

from docportal.core.config import Settings


@pytest.fixture
def make_cells():
    """Factory building a search API cell list from managed property values."""
    def _make(**values):
        return [{"Key": key, "Value": value} for key, value in values.items()]
    return _make


@pytest.fixture
def make_row(make_cells):
    def _make(**values):
        return {"Cells": make_cells(**values)}
    return _make


@pytest.fixture
def settings():
    return Settings(
        tenant_name="contoso",
        hub_name="dms-hub",
        related_hub_site="hub-guid",
        refdata_url="https://contoso.sharepoint.com/sites/refdata/_api",
        dms_api_url="https://dms.example.com",
        terms_map_path=None,
        log_config=None,
        _env_file=None,
    )
