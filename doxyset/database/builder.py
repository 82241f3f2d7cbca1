"""Object database builder."""

from concurrent.futures import ThreadPoolExecutor
from xml.etree import ElementTree as ET

from doxyset.exceptions import DuplicateEntity, MalformedInput
from doxyset.markup.config import CLEAN_MEMBER, CLEAN_OBJECT
from doxyset.markup.document import CleanedDocument
from doxyset.markup.normalizer import NormalizedMarkup
from doxyset.utils.logging import logger

from .models import Database, DirectoryIndex, Entity, HierarchyNode, Member, ObjectKind, safe_filename


class DatabaseBuilder:
    """Assembles a Database from cleaned documents.

    Entities (with their member indexes) are created concurrently since none
    depends on another. Insertion into the shared entity index and directory
    buckets happens on the calling thread only, in discovery order. No
    Database is returned unless every insertion succeeded.
    """

    def __init__(self, file_extension: str = ".html", workers: int = 1):
        self.file_extension = file_extension
        self.workers = workers

    def build(self, normalized: NormalizedMarkup) -> Database:
        if self.workers > 1 and len(normalized.entities) > 1:
            with ThreadPoolExecutor(max_workers=self.workers) as executor:
                entities = list(executor.map(self.create_entity, normalized.entities))
        else:
            entities = [self.create_entity(doc) for doc in normalized.entities]

        objects: dict[str, Entity] = {}
        directories = DirectoryIndex()
        for entity in entities:
            existing = objects.get(entity.name)
            if existing is not None:
                raise DuplicateEntity(entity.name, existing.source_file, entity.source_file)
            objects[entity.name] = entity
            directories.add(entity)

        hierarchy = [
            self._hierarchy_node(node, objects)
            for node in normalized.hierarchy.root.findall("node")
        ]

        database = Database(
            index_document=normalized.index,
            hierarchy_document=normalized.hierarchy,
            objects=objects,
            hierarchy=hierarchy,
            directories=directories,
        )

        logger.info(
            f"Built database: {len(objects)} entities, {database.member_count()} members, "
            f"{len(hierarchy)} hierarchy roots"
        )
        return database

    def relative_path(self, kind: ObjectKind, name: str) -> str:
        return f"{kind.directory}/{safe_filename(name)}{self.file_extension}"

    def create_entity(self, document: CleanedDocument) -> Entity:
        """Create one Entity, including its member index, from a cleaned document."""
        root = document.root
        if root.tag != CLEAN_OBJECT:
            raise MalformedInput(document.source, f"expected <{CLEAN_OBJECT}>, found <{root.tag}>")

        name = root.get("name")
        if not name:
            raise MalformedInput(document.source, "object without name")
        try:
            kind = ObjectKind(root.get("kind"))
        except ValueError as e:
            raise MalformedInput(document.source, f"unknown object kind {root.get('kind')!r}") from e

        entity = Entity(
            name=name,
            kind=kind,
            document=document,
            source_file=document.source,
            relative_directory=kind.directory,
            relative_path=self.relative_path(kind, name),
            owning_class=_text(root, "class") if kind is ObjectKind.CATEGORY else None,
            parent=_text(root, "base") if kind is ObjectKind.CLASS else None,
        )

        for member_el in root.iter(CLEAN_MEMBER):
            entity.add_member(
                Member(
                    name=member_el.get("name", ""),
                    prefix=member_el.get("prefix", ""),
                    kind=member_el.get("kind", "method"),
                )
            )

        logger.debug(f"Created {entity!r} with {len(entity.members)} members")
        return entity

    def _hierarchy_node(self, element: ET.Element, objects: dict[str, Entity]) -> HierarchyNode:
        name = element.get("name", "")
        return HierarchyNode(
            name=name,
            entity=objects.get(name),
            children=[self._hierarchy_node(child, objects) for child in element.findall("node")],
        )


def _text(root: ET.Element, tag: str) -> str | None:
    value = root.findtext(tag)
    if value is None:
        return None
    return value.strip() or None
