# (c) Copyright Datacraft, 2026
"""Application settings configuration."""
from pathlib import Path

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
	log_config: Path | None = Path("/app/log_config.yaml")
	api_prefix: str = ''

	# SharePoint tenant
	tenant_name: str = 'contoso'
	hub_name: str = 'dms-hub'
	related_hub_site: str | None = None
	content_type_name: str = 'DMS Document'
	library_name: str = 'Documents'
	library_path: str = 'Shared Documents'

	# Search
	max_search_results: int = Field(gt=0, default=500)
	select_properties: str = ''
	terms_map_path: Path | None = None

	# Saved configs (reference data list)
	refdata_url: str | None = None
	refdata_list_name: str = 'DMSSearchConfigs'

	# Approvals
	approval_page_size: int = Field(gt=0, default=100)
	approval_modified_since: str = '2025-03-24T00:00:00.000Z'
	auto_approval_enabled: bool = True

	# Folder filing
	drawings_folder: str = 'Drawings'
	move_with_copy_jobs: bool = False

	# Bulk downloads
	dms_api_url: str = 'http://localhost:8000'
	download_stagger_ms: int = Field(ge=200, default=200)
	default_download_filename: str = 'download'

	request_timeout: float = Field(gt=0, default=30.0)

	# Remote user config
	remote_user_header: str = "X-Forwarded-User"
	remote_user_id_header: str = "X-Forwarded-User-Id"
	remote_roles_header: str = "X-Forwarded-Roles"
	remote_name_header: str = "X-Forwarded-Name"
	remote_email_header: str = "X-Forwarded-Email"

	@computed_field
	@property
	def tenant_url(self) -> str:
		return f"https://{self.tenant_name}.sharepoint.com"

	@computed_field
	@property
	def hub_url(self) -> str:
		return f"{self.tenant_url}/sites/{self.hub_name}"

	@computed_field
	@property
	def refdata_base_url(self) -> str:
		if self.refdata_url:
			return self.refdata_url.rstrip('/')
		return f"{self.hub_url}/_api"

	model_config = SettingsConfigDict(
		env_prefix='dp_',
		env_file='.env',
		env_file_encoding='utf-8',
		extra='ignore',
	)


_settings: Settings | None = None


def get_settings() -> Settings:
	global _settings
	if _settings is None:
		_settings = Settings()
	return _settings
