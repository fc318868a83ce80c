from __future__ import annotations

from functools import lru_cache

from pydantic import Field

try:
    from pydantic_settings import BaseSettings, SettingsConfigDict
except Exception as e:  # pragma: no cover
    raise RuntimeError(
        "pydantic-settings is required. Install with: pip install pydantic-settings"
    ) from e


class TanaSchemaSettings(BaseSettings):
    """Configuration for schema recovery.

    Environment variables are prefixed with TANA_SCHEMA_.
    """

    model_config = SettingsConfigDict(env_prefix="TANA_SCHEMA_", extra="ignore")

    # --- Core ---
    log_level: str = Field(default="INFO", description="Python logging level")

    # --- Export structure ---
    trash_marker: str = Field(default="TRASH", description="Substring identifying the trash root id")
    system_marker: str = Field(default="SYS", description="Substring identifying system ids/markers")
    owner_chain_max_depth: int = Field(default=20, ge=1)

    # --- Field schema ---
    extra_field_markers: dict[str, str] = Field(
        default_factory=dict,
        description="Additional raw marker -> canonical field name entries (JSON)",
    )

    # --- Type inference ---
    value_sample_size: int = Field(default=100, ge=1, description="Value rows sampled per field")


@lru_cache(maxsize=1)
def get_settings() -> TanaSchemaSettings:
    return TanaSchemaSettings()
