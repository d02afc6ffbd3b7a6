"""Root `Settings` model.

Precedence, highest first: constructor arguments, `PADI_*` environment
variables (``__`` separates nested keys, e.g. ``PADI_LEDGER__INITIAL_POINTS``),
the merged TOML files, then field defaults.
"""

from typing import Any

from pydantic import Field
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from padi.config.models.ledger import LedgerConfig
from padi.config.models.observability import ObservabilityConfig
from padi.config.models.profile import ProfileConfig
from padi.config.models.storage import StorageConfig
from padi.config.models.transcript import TranscriptConfig

_toml_values: dict[str, Any] = {}


def set_toml_config(config: dict[str, Any]) -> None:
    """Install the merged TOML tree read by every new `Settings()`."""
    global _toml_values
    _toml_values = dict(config)


class TomlConfigSettingsSource(PydanticBaseSettingsSource):
    """Feeds the installed TOML tree to pydantic-settings."""

    def get_field_value(
        self, field: FieldInfo, field_name: str  # noqa: ARG002
    ) -> tuple[Any, str, bool]:
        present = field_name in _toml_values
        return _toml_values.get(field_name), field_name, present

    def __call__(self) -> dict[str, Any]:
        return {
            name: _toml_values[name]
            for name in self.settings_cls.model_fields
            if name in _toml_values
        }


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="PADI_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="padi", description="Name bound to log events")
    debug: bool = Field(default=False, description="Development mode")

    ledger: LedgerConfig = Field(default_factory=LedgerConfig)
    profile: ProfileConfig = Field(default_factory=ProfileConfig)
    transcript: TranscriptConfig = Field(default_factory=TranscriptConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        toml_settings = TomlConfigSettingsSource(settings_cls)
        return init_settings, env_settings, toml_settings
