from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class EnginesSettings(BaseSettings):
    # Application settings
    app_name: str = "Engines"
    debug: bool = False

    # Host application root; plugin roots and the public directory hang off it
    root: Path = Field(default_factory=Path.cwd)

    # Where plugin assets get mirrored to, defaults to <root>/public/plugin_assets
    public_directory: Path | None = None

    # Ordered plugin search roots, defaults to [<root>/plugins]
    plugin_paths: list[Path] = []

    # Plugins to load, in order. A trailing "*" loads every remaining plugin.
    plugins: list[str] = []

    # Behaviour of the engines extensions
    disable_application_view_loading: bool = False
    disable_application_code_loading: bool = False
    disable_code_mixing: bool = False

    # Abort startup on the first plugin that fails to load
    fail_fast: bool = False

    # Plugin migrations
    database_url: str = "sqlite:///./plugins.db"
    schema_info_table: str = "plugin_schema_info"

    model_config = SettingsConfigDict(
        env_prefix="ENGINES_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode="after")
    def _fill_root_relative_defaults(self) -> "EnginesSettings":
        if self.public_directory is None:
            self.public_directory = self.root / "public" / "plugin_assets"
        if not self.plugin_paths:
            self.plugin_paths = [self.root / "plugins"]
        return self


@lru_cache
def get_settings() -> EnginesSettings:
    return EnginesSettings()
