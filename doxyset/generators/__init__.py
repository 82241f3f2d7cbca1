"""Output generators and their registry."""

from doxyset.exceptions import ConfigError

from .base import OutputGenerator
from .dispatch import DispatchReport, GeneratorDispatcher, GeneratorOutcome
from .docset import DocSetGenerator
from .xhtml import XhtmlGenerator

GENERATORS: dict[str, type[OutputGenerator]] = {
    XhtmlGenerator.name: XhtmlGenerator,
    DocSetGenerator.name: DocSetGenerator,
}


def create_generators(config) -> list[OutputGenerator]:
    """Instantiate the generators named in config, in the configured order."""
    unknown = [name for name in config.generators if name not in GENERATORS]
    if unknown:
        raise ConfigError(
            f"Unknown generator(s): {', '.join(unknown)} (available: {', '.join(GENERATORS)})",
            identifier=unknown[0],
        )
    return [GENERATORS[name](config) for name in config.generators]


__all__ = [
    "GENERATORS",
    "DispatchReport",
    "DocSetGenerator",
    "GeneratorDispatcher",
    "GeneratorOutcome",
    "OutputGenerator",
    "XhtmlGenerator",
    "create_generators",
]
