"""Conversion failure taxonomy.

Fatal conditions are exceptions rooted at ConversionError and abort the run
before any generator is invoked. Non-fatal conditions (DanglingReference,
GeneratorFailure) are plain records collected into the conversion result.
"""

from dataclasses import dataclass


class ConversionError(Exception):
    """Base class for every fatal conversion condition.

    Attributes:
        identifier: The offending file, entity or member name.
    """

    def __init__(self, message: str, identifier: str = ""):
        super().__init__(message)
        self.identifier = identifier


class ConfigError(ConversionError):
    """Raised when the resolved configuration cannot drive a conversion."""


class ExtractionError(ConversionError):
    """Raised when the doxygen run fails, times out or cannot be started."""


class MalformedInput(ConversionError):
    """Raised when a raw markup document cannot be read or parsed."""

    def __init__(self, filename: str, reason: str):
        super().__init__(f"Malformed input {filename}: {reason}", identifier=filename)
        self.filename = filename
        self.reason = reason


class DuplicateEntity(ConversionError):
    """Raised when two documents declare the same entity name."""

    def __init__(self, name: str, first_source: str = "", second_source: str = ""):
        message = f"Duplicate entity '{name}'"
        if first_source and second_source:
            message += f" (declared by {first_source} and {second_source})"
        super().__init__(message, identifier=name)
        self.name = name


class DuplicateMember(ConversionError):
    """Raised when one entity declares the same member name twice."""

    def __init__(self, entity: str, member: str):
        super().__init__(f"Duplicate member '{member}' in entity '{entity}'", identifier=f"{entity}.{member}")
        self.entity = entity
        self.member = member


@dataclass(frozen=True)
class DanglingReference:
    """A cross-reference whose target entity or member is unknown.

    The marker is left untouched when the entity is unknown; when only the
    member is unknown the entity-level link is still emitted.
    """

    source: str
    marker: str
    entity: str
    member: str | None = None
    member_only: bool = False

    def __str__(self) -> str:
        if self.member_only:
            return f"{self.source}: unknown member '{self.member}' in '{self.entity}' ({self.marker})"
        return f"{self.source}: unknown entity '{self.entity}' ({self.marker})"


class GeneratorFailure(Exception):
    """Wraps an exception raised by an output generator."""

    def __init__(self, generator: str, cause: BaseException):
        super().__init__(f"Generator '{generator}' failed: {type(cause).__name__}: {cause}")
        self.generator = generator
        self.cause = cause
