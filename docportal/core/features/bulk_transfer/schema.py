# (c) Copyright Datacraft, 2026
"""Bulk download models."""
from pydantic import BaseModel, Field

from docportal.core.config import get_settings
from docportal.core.features.classifier import SearchRow
from docportal.core.types import DownloadStyle

PREPARING_MESSAGE = "Your download is being prepared and will arrive in your email soon."


def _default_filename() -> str:
	return get_settings().default_download_filename


class DownloadJob(BaseModel):
	"""A selection of search rows to download with one strategy."""
	style: DownloadStyle
	file_sources: list[SearchRow] = Field(default_factory=list)
	output_filename: str = Field(default_factory=_default_filename)


class DownloadLink(BaseModel):
	"""Browser download of one file, triggered `delay_ms` after the first."""
	filename: str | None
	url: str
	delay_ms: int = 0


class DownloadJobAccepted(BaseModel):
	"""Batch job accepted by the bulk download API."""
	download_url: str | None = None
	message: str = PREPARING_MESSAGE


class DownloadPlan(BaseModel):
	style: DownloadStyle
	links: list[DownloadLink] = Field(default_factory=list)
	accepted: DownloadJobAccepted | None = None
