"""Output generator capability."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from doxyset.config_runtime import ConversionConfig
    from doxyset.database.models import Database


class OutputGenerator(ABC):
    """Consumes a finished Database and produces output files.

    Subclasses declare a unique ``name`` and the names of generators whose
    output they read (``requires``). Failure is signalled by raising; the
    dispatcher records it and skips every generator that requires this one.
    """

    name: ClassVar[str] = ""
    requires: ClassVar[tuple[str, ...]] = ()

    def __init__(self, config: "ConversionConfig"):
        self.config = config

    @abstractmethod
    def generate(self, database: "Database") -> list[Path]:
        """Produce this generator's output.

        Returns:
            Paths of the files or directories written
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
