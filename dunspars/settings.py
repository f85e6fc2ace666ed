"""ABOUTME: Configuration logic and path settings for the project.
ABOUTME: Provides paths for the database, API cache, user config and bundled configs."""

from pathlib import Path

from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

from dunspars import __version__


PACKAGE_ROOT = Path(__file__).resolve().parent


class Settings(BaseSettings):
    """Contains settings for this project.

    Every field can be overridden through a ``DUNSPARS_`` prefixed environment
    variable, e.g. ``DUNSPARS_DATA_DIR=/tmp/dunspars``.
    """

    model_config = SettingsConfigDict(env_prefix="DUNSPARS_")

    VERSION: str = __version__
    """Project version."""

    DATA_DIR: Path = Path.home() / ".local" / "share" / "dunspars"
    """Directory holding the database and the API response cache."""

    CONFIG_DIR: Path = Path.home() / ".config" / "dunspars"
    """Directory holding the user config and custom Pokemon files."""

    @computed_field  # type: ignore[prop-decorator]
    @property
    def db_path(self) -> Path:
        """Path to the SQLite database file."""
        return self.DATA_DIR / "dunspars.sqlite"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def cache_dir(self) -> Path:
        """Directory for cached PokeAPI JSON responses."""
        return self.DATA_DIR / "cache"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def config_path(self) -> Path:
        """Path to the user key/value config file."""
        return self.CONFIG_DIR / "config.yml"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def custom_path(self) -> Path:
        """Path to the custom Pokemon collection file."""
        return self.CONFIG_DIR / "custom.yml"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def configs_dir(self) -> Path:
        """Directory containing the configuration files shipped inside the package."""
        return PACKAGE_ROOT / "configs"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def logging_config_path(self) -> Path:
        """Path to the logging.yml configuration file."""
        return self.configs_dir / "logging.yml"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def pokeapi_config_path(self) -> Path:
        """Path to the pokeapi.yml configuration file."""
        return self.configs_dir / "pokeapi.yml"


settings = Settings()
