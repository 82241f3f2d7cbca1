"""Cleaned markup document container."""

from dataclasses import dataclass
from xml.etree import ElementTree as ET

from .config import CLEAN_REF


@dataclass(eq=False)
class CleanedDocument:
    """A cleaned markup tree plus the raw file it was produced from.

    The tree is mutated in place by the reference resolver; every other
    stage treats it as read-only.
    """

    source: str
    root: ET.Element

    @property
    def kind(self) -> str | None:
        return self.root.get("kind")

    @property
    def name(self) -> str | None:
        return self.root.get("name")

    def markers(self) -> list[ET.Element]:
        """Return the unresolved cross-reference markers in document order."""
        return [el for el in self.root.iter(CLEAN_REF) if el.get("id")]

    def to_bytes(self) -> bytes:
        """Serialize deterministically as UTF-8 XML with a declaration."""
        return ET.tostring(self.root, encoding="utf-8", xml_declaration=True)

    def __repr__(self) -> str:
        return f"CleanedDocument(source={self.source!r}, root=<{self.root.tag}>)"
