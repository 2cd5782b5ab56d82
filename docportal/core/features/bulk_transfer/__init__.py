# (c) Copyright Datacraft, 2026
"""Bulk file downloads."""
from .schema import DownloadJob, DownloadJobAccepted, DownloadLink
from .service import BulkTransferCoordinator, build_download_url, source_path

__all__ = [
	'BulkTransferCoordinator',
	'DownloadJob',
	'DownloadJobAccepted',
	'DownloadLink',
	'build_download_url',
	'source_path',
]
