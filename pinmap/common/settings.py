# pinmap/common/settings.py
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional
from pydantic import Field, AliasChoices, field_validator, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

from pinmap.domain.dataclasses.processing import RateLimitConfig
from pinmap.domain.enums.error_code import ErrorCode
from pinmap.domain.errors import ConfigurationError

MAX_CONCURRENT_LIMIT = 10
MIN_UPLOAD_SPACING_MS = 100


def _blank_to_none(v: str | None) -> str | None:
    if v is None:
        return None
    s = str(v).strip()
    return s or None


class Settings(BaseSettings):
    # -------- App / Env --------
    app_name: str = "pinmap"
    app_env: str = "development"  # development|test|production
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    # -------- Pinata --------
    pinata_api_key: Optional[str] = None
    pinata_api_secret: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("PINATA_API_SECRET", "PINATA_SECRET_API_KEY"),
    )
    pinata_jwt: Optional[str] = None
    pinata_api_url: str = "https://api.pinata.cloud"
    pinata_timeout_sec: int = Field(120, ge=1)
    pin_list_page_limit: int = Field(1000, ge=1, le=1000)

    # -------- Rate limiting --------
    # local digesting (hash, cid)
    max_concurrent: int = Field(5, ge=1, le=MAX_CONCURRENT_LIMIT, alias="RATE_LIMIT_MAX_CONCURRENT")
    min_time_ms: int = Field(0, ge=0, alias="RATE_LIMIT_MIN_TIME")
    # remote uploads; 1 / 3000ms stays under Pinata's ~180 req/min
    upload_max_concurrent: int = Field(1, ge=1, le=MAX_CONCURRENT_LIMIT, alias="UPLOAD_MAX_CONCURRENT")
    upload_min_time_ms: int = Field(3000, ge=MIN_UPLOAD_SPACING_MS, alias="UPLOAD_MIN_TIME")

    # -------- Retry --------
    max_retries: int = Field(3, ge=1)
    retry_base_delay_ms: int = Field(1000, ge=0)

    # -------- Paths & layout --------
    input_folder: Path = Field(Path("files"), alias="DEFAULT_INPUT_FOLDER")
    metadata_folder: Path = Field(Path("metadata"), alias="DEFAULT_METADATA_FOLDER")
    output_root: Path = Field(Path("./output"), alias="DEFAULT_OUTPUT_FOLDER")

    # Optional absolute override (leave empty to use OUTPUT_ROOT/downloaded-cids.json)
    existing_cids_override: Optional[Path] = Field(default=None, alias="EXISTING_CIDS_PATH")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("pinata_api_key", "pinata_api_secret", "pinata_jwt", mode="before")
    @classmethod
    def _strip_credentials(cls, v):
        return _blank_to_none(v)

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, v):
        return str(v or "INFO").strip().upper()

    # ===== Derived output paths =====
    @computed_field  # type: ignore[misc]
    @property
    def hashes_output(self) -> Path:
        return self.output_root / "file-hashes.json"

    @computed_field  # type: ignore[misc]
    @property
    def hash_of_hashes_output(self) -> Path:
        return self.output_root / "file-hashOfHashes.json"

    @computed_field  # type: ignore[misc]
    @property
    def cids_output(self) -> Path:
        return self.output_root / "file-cids.json"

    @computed_field  # type: ignore[misc]
    @property
    def uploaded_files_output(self) -> Path:
        return self.output_root / "uploaded-files.json"

    @computed_field  # type: ignore[misc]
    @property
    def folder_cid_output(self) -> Path:
        return self.output_root / "folder-cid.json"

    @computed_field  # type: ignore[misc]
    @property
    def downloaded_cids_output(self) -> Path:
        return self.output_root / "downloaded-cids.json"

    @computed_field  # type: ignore[misc]
    @property
    def existing_cids_path(self) -> Path:
        if self.existing_cids_override:
            return Path(self.existing_cids_override)
        return self.downloaded_cids_output

    # ===== Convenience =====
    def hash_rate_limit(self, max_concurrent: Optional[int] = None) -> RateLimitConfig:
        return RateLimitConfig(
            max_concurrent=max_concurrent or self.max_concurrent,
            min_time_ms=self.min_time_ms,
        )

    def upload_rate_limit(
        self, max_concurrent: Optional[int] = None, min_time_ms: Optional[int] = None
    ) -> RateLimitConfig:
        return RateLimitConfig(
            max_concurrent=max_concurrent or self.upload_max_concurrent,
            min_time_ms=self.upload_min_time_ms if min_time_ms is None else min_time_ms,
        )

    @property
    def has_pinata_credentials(self) -> bool:
        if self.pinata_jwt:
            return True
        return bool(self.pinata_api_key and self.pinata_api_secret)

    def require_pinata_credentials(self) -> None:
        if not self.has_pinata_credentials:
            raise ConfigurationError(
                "PINATA_API_KEY and PINATA_API_SECRET (or PINATA_JWT) environment variables are required",
                ErrorCode.CONFIG_MISSING,
                context={"metadata": {"keys": ["PINATA_API_KEY", "PINATA_API_SECRET", "PINATA_JWT"]}},
            )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Cached settings accessor for the CLI layer:
        from pinmap.common.settings import get_settings
        cfg = get_settings()
    Services and processors receive a Settings instance explicitly.
    """
    return Settings()  # pydantic_settings will read from .env automatically
