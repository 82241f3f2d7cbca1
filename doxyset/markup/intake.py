"""Raw markup intake - reads the doxygen XML output directory."""

from dataclasses import dataclass, field
from pathlib import Path
from xml.etree import ElementTree as ET

from doxyset.exceptions import MalformedInput
from doxyset.utils.logging import logger

from .config import DOCUMENTED_KINDS, HIERARCHY_FILE, INDEX_FILE


@dataclass(frozen=True)
class RawDocument:
    """One raw markup file as read from disk."""

    filename: str
    content: bytes

    def parse(self) -> ET.Element:
        """Parse the document, raising MalformedInput on syntax errors."""
        try:
            return ET.fromstring(self.content)
        except ET.ParseError as e:
            raise MalformedInput(self.filename, str(e)) from e


@dataclass
class RawMarkupSet:
    """Everything the extractor produced for one conversion run.

    Entity documents are kept in discovery order (the order of compounds in
    the index document).
    """

    index: RawDocument
    entities: list[RawDocument] = field(default_factory=list)
    hierarchy: RawDocument | None = None


def _read(path: Path) -> RawDocument:
    try:
        return RawDocument(path.name, path.read_bytes())
    except OSError as e:
        raise MalformedInput(path.name, f"cannot read file: {e.strerror or e}") from e


def read_raw_documents(input_dir: Path) -> RawMarkupSet:
    """Read the index, per-entity and optional hierarchy documents.

    Only compounds whose kind is a documented entity kind are read; the
    remaining compounds (files, directories, pages) are extractor noise.
    """
    input_dir = Path(input_dir)
    if not input_dir.is_dir():
        raise MalformedInput(str(input_dir), "input directory does not exist")

    index_path = input_dir / INDEX_FILE
    if not index_path.exists():
        raise MalformedInput(INDEX_FILE, f"not found in {input_dir}")

    index = _read(index_path)
    root = index.parse()

    entities = []
    seen = set()
    for compound in root.iter("compound"):
        if compound.get("kind") not in DOCUMENTED_KINDS:
            continue
        refid = compound.get("refid")
        if not refid:
            raise MalformedInput(INDEX_FILE, "compound without refid")
        if refid in seen:
            continue
        seen.add(refid)
        entity_path = input_dir / f"{refid}.xml"
        if not entity_path.exists():
            raise MalformedInput(entity_path.name, "referenced by index but missing")
        entities.append(_read(entity_path))

    hierarchy_path = input_dir / HIERARCHY_FILE
    hierarchy = _read(hierarchy_path) if hierarchy_path.exists() else None

    logger.info(
        f"Read {len(entities)} entity documents from {input_dir}"
        + (" (with hierarchy document)" if hierarchy else "")
    )

    return RawMarkupSet(index=index, entities=entities, hierarchy=hierarchy)
