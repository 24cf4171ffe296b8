from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from labelsplit.pdf.classifier import (
    DEFAULT_INVOICE_KEYWORDS,
    DEFAULT_LABEL_KEYWORDS,
    DEFAULT_MIN_TEXT_LENGTH,
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    app_name: str = Field(default="Labelsplit API", alias="APP_NAME")
    app_env: str = Field(default="local", alias="APP_ENV")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    upload_max_file_size_mb: int = Field(default=25, alias="UPLOAD_MAX_FILE_SIZE_MB")
    output_dir: str = Field(default="/tmp/labelsplit_outputs", alias="OUTPUT_DIR")
    output_ttl_seconds: int = Field(default=60 * 60, alias="OUTPUT_TTL_SECONDS")

    # [x, y, width, height] in points, origin bottom-left.  None → half page.
    label_crop: list[float] | None = Field(default=None, alias="LABEL_CROP")
    invoice_crop: list[float] | None = Field(default=None, alias="INVOICE_CROP")
    split_axis: str = Field(default="horizontal", alias="SPLIT_AXIS")
    # [width, height] in points; None keeps crops at 1:1.
    target_size: list[float] | None = Field(default=None, alias="TARGET_SIZE")

    min_text_length: int = Field(default=DEFAULT_MIN_TEXT_LENGTH, alias="MIN_TEXT_LENGTH")
    label_keywords: list[str] = Field(
        default_factory=lambda: sorted(DEFAULT_LABEL_KEYWORDS), alias="LABEL_KEYWORDS"
    )
    invoice_keywords: list[str] = Field(
        default_factory=lambda: sorted(DEFAULT_INVOICE_KEYWORDS), alias="INVOICE_KEYWORDS"
    )
    strict_merge: bool = Field(default=False, alias="STRICT_MERGE")

    @field_validator("label_crop", "invoice_crop")
    @classmethod
    def _four_values(cls, value: list[float] | None) -> list[float] | None:
        if value is not None and len(value) != 4:
            raise ValueError("crop must be [x, y, width, height]")
        return value

    @field_validator("target_size")
    @classmethod
    def _two_values(cls, value: list[float] | None) -> list[float] | None:
        if value is not None and len(value) != 2:
            raise ValueError("target size must be [width, height]")
        return value

    @field_validator("split_axis")
    @classmethod
    def _known_axis(cls, value: str) -> str:
        value = value.lower()
        if value not in ("horizontal", "vertical"):
            raise ValueError("split axis must be 'horizontal' or 'vertical'")
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
