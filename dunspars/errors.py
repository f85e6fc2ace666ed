"""ABOUTME: Typed failures raised while resolving entities from the local database.
ABOUTME: The CLI prints these verbatim and exits non-zero."""


class DunsparsError(Exception):
    """Base class for all errors raised by dunspars."""


class ResolutionError(DunsparsError):
    """An entity could not be resolved at the requested generation."""


class NotFoundError(ResolutionError):
    """A name has no matching base record at all.

    Attributes:
        resource: Kind of record that was looked up (e.g. "pokemon", "move").
        name: The attempted name.
    """

    def __init__(self, resource: str, name: str, message: str | None = None) -> None:
        self.resource = resource
        self.name = name
        super().__init__(message or f"{resource.capitalize()} '{name}' not found.")


class NotPresentInGenerationError(ResolutionError):
    """An entity exists but not in the requested generation."""

    def __init__(self, name: str, generation: int) -> None:
        self.name = name
        self.generation = generation
        super().__init__(f"'{name}' is not present in generation {generation}.")


class MalformedOverrideError(ResolutionError):
    """A stored change record cannot be reconciled with its base record."""


class DatabaseVersionError(DunsparsError):
    """The local database was built by an incompatible dunspars version."""
