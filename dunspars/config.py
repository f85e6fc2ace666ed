"""ABOUTME: Configuration loaders for the PokeAPI source and the user's own files.
ABOUTME: Handles pokeapi.yml, the key/value user config and the custom Pokemon collection."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from dunspars.settings import settings


class PokeApiConfig(BaseModel):
    """Configuration for the PokeAPI data source."""

    base_url: str
    timeout: float = 60.0
    chunk_size: int = 100
    max_retries: int = 3
    resources: dict[str, str]

    def get_endpoint(self, resource: str) -> str:
        """Return the API path segment for a configured resource.

        Args:
            resource: Resource name as defined in the config (e.g. "moves").

        Returns:
            The API path segment (e.g. "move").

        Raises:
            KeyError: If resource is not configured.
        """
        if resource not in self.resources:
            raise KeyError(f"Resource '{resource}' not found in configuration")
        return self.resources[resource]


def load_pokeapi_config(config_path: Path | None = None) -> PokeApiConfig:
    """Load PokeAPI configuration from YAML file.

    Args:
        config_path: Path to the config file. Defaults to settings.pokeapi_config_path.

    Returns:
        Parsed PokeApiConfig object.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config file is invalid.
    """
    if config_path is None:
        config_path = settings.pokeapi_config_path

    if not config_path.exists():
        raise FileNotFoundError(f"PokeAPI config not found: {config_path}")

    with config_path.open() as f:
        raw_config = yaml.safe_load(f)

    return PokeApiConfig.model_validate(raw_config)


def _read_yaml(path: Path) -> Any:
    if not path.exists():
        return None
    with path.open() as f:
        return yaml.safe_load(f)


def _write_yaml(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w") as f:
        yaml.safe_dump(data, f, sort_keys=False)


class UserConfig(BaseModel):
    """Persistent user preferences set through ``dunspars config``.

    Attributes:
        game: Version group used when no --game option is given.
        color: Whether output is colored when neither --color nor --no-color is given.
    """

    game: str | None = None
    color: bool | None = None

    @classmethod
    def keys(cls) -> list[str]:
        """Return the names of the settable keys."""
        return list(cls.model_fields)


def load_user_config(config_path: Path | None = None) -> UserConfig:
    """Load the user config, returning defaults when the file doesn't exist."""
    if config_path is None:
        config_path = settings.config_path
    raw_config = _read_yaml(config_path) or {}
    return UserConfig.model_validate(raw_config)


def save_user_config(config: UserConfig, config_path: Path | None = None) -> None:
    """Write the user config, leaving out unset keys."""
    if config_path is None:
        config_path = settings.config_path
    _write_yaml(config_path, config.model_dump(exclude_none=True))


def _check_key(key: str) -> None:
    if key not in UserConfig.keys():
        raise KeyError(f"Unknown config key '{key}'. Valid keys: {', '.join(UserConfig.keys())}")


def set_config_value(key: str, value: str, config_path: Path | None = None) -> UserConfig:
    """Set a single config key and persist the result.

    Args:
        key: Config key to set.
        value: Raw string value from the command line.
        config_path: Path to the config file. Defaults to settings.config_path.

    Returns:
        The updated config.

    Raises:
        KeyError: If key is not a known config key.
        ValueError: If value cannot be converted to the key's type.
    """
    _check_key(key)
    config = load_user_config(config_path)
    data = config.model_dump()
    data[key] = value
    try:
        updated = UserConfig.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid value '{value}' for config key '{key}'") from e
    save_user_config(updated, config_path)
    return updated


def unset_config_value(key: str, config_path: Path | None = None) -> UserConfig:
    """Remove a config key and persist the result.

    Raises:
        KeyError: If key is not a known config key.
    """
    _check_key(key)
    config = load_user_config(config_path)
    updated = config.model_copy(update={key: None})
    save_user_config(updated, config_path)
    return updated


class CustomPokemon(BaseModel):
    """A user-defined Pokemon: an existing Pokemon with a nickname, fixed moves and optional types.

    Attributes:
        nickname: Name the Pokemon is looked up by.
        base: Name of the Pokemon in the database.
        generation: Generation the Pokemon is resolved at.
        moves: Up to four chosen moves, replacing the learnable move list in matchups.
        types: Optional one or two types replacing the Pokemon's own.
    """

    nickname: str
    base: str
    generation: int = Field(ge=1)
    moves: list[str] = Field(default_factory=list, max_length=4)
    types: list[str] | None = None

    @field_validator("types")
    @classmethod
    def _one_or_two_types(cls, value: list[str] | None) -> list[str] | None:
        if value is not None and not 1 <= len(value) <= 2:
            raise ValueError("a custom Pokemon has one or two types")
        return value


class CustomCollection(BaseModel):
    """The user's list of custom Pokemon."""

    pokemon: list[CustomPokemon] = Field(default_factory=list)

    def find(self, nickname: str) -> CustomPokemon | None:
        """Find a custom Pokemon by nickname, ignoring case."""
        wanted = nickname.lower()
        return next((p for p in self.pokemon if p.nickname.lower() == wanted), None)

    def add(self, custom: CustomPokemon) -> None:
        """Add a custom Pokemon, replacing any entry with the same nickname."""
        self.remove(custom.nickname)
        self.pokemon.append(custom)

    def remove(self, nickname: str) -> bool:
        """Remove a custom Pokemon by nickname. Returns whether one was removed."""
        existing = self.find(nickname)
        if existing is None:
            return False
        self.pokemon.remove(existing)
        return True


def load_custom_collection(custom_path: Path | None = None) -> CustomCollection:
    """Load the custom Pokemon collection, returning an empty one when the file doesn't exist."""
    if custom_path is None:
        custom_path = settings.custom_path
    raw = _read_yaml(custom_path) or {}
    return CustomCollection.model_validate(raw)


def save_custom_collection(collection: CustomCollection, custom_path: Path | None = None) -> None:
    """Write the custom Pokemon collection."""
    if custom_path is None:
        custom_path = settings.custom_path
    _write_yaml(custom_path, collection.model_dump(exclude_none=True))
