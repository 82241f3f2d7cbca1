"""Typed object database.

The Database owns every Entity through its name-keyed ``objects`` mapping.
HierarchyNode and DirectoryIndex only hold references into that mapping, and
an Entity never points back at its hierarchy node, so the tree and the index
never form reference cycles.
"""

import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum

from doxyset.exceptions import DuplicateMember
from doxyset.markup.document import CleanedDocument

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_.+()\-]")


def safe_filename(name: str) -> str:
    """Sanitize a name for use as a path segment.

    This is the only rule used wherever a name becomes part of a path.
    """
    return _UNSAFE_FILENAME_CHARS.sub("_", name)


class ObjectKind(Enum):
    """Kind of a documented entity."""
    CLASS = "class"
    CATEGORY = "category"
    PROTOCOL = "protocol"

    @property
    def directory(self) -> str:
        """Relative output directory bucket for this kind."""
        return _DIRECTORIES[self]

    @property
    def title(self) -> str:
        return self.value.capitalize()


_DIRECTORIES = {
    ObjectKind.CLASS: "Classes",
    ObjectKind.CATEGORY: "Categories",
    ObjectKind.PROTOCOL: "Protocols",
}

RELATIVE_DIRECTORIES: tuple[str, ...] = tuple(_DIRECTORIES.values())


@dataclass(frozen=True)
class Member:
    """A method or property of an entity."""
    name: str
    prefix: str
    kind: str = "method"

    @property
    def selector(self) -> str:
        """Fully formatted selector used as the member's anchor."""
        return f"{self.prefix}{self.name}"


@dataclass(eq=False)
class Entity:
    """A documented class, category or protocol."""
    name: str
    kind: ObjectKind
    document: CleanedDocument
    source_file: str
    relative_directory: str
    relative_path: str
    owning_class: str | None = None
    parent: str | None = None
    members: dict[str, Member] = field(default_factory=dict)

    def add_member(self, member: Member) -> None:
        if member.name in self.members:
            raise DuplicateMember(self.name, member.name)
        self.members[member.name] = member

    def member(self, name: str) -> Member | None:
        return self.members.get(name)

    def __repr__(self) -> str:
        return f"Entity({self.kind.value} {self.name!r} -> {self.relative_path})"


@dataclass(eq=False)
class HierarchyNode:
    """Inheritance tree node; ``entity`` is None for undocumented ancestors."""
    name: str
    entity: Entity | None = None
    children: list["HierarchyNode"] = field(default_factory=list)

    @property
    def documented(self) -> bool:
        return self.entity is not None

    def walk(self, depth: int = 0) -> Iterator[tuple[int, "HierarchyNode"]]:
        """Yield (depth, node) pairs in pre-order."""
        yield depth, self
        for child in self.children:
            yield from child.walk(depth + 1)


class DirectoryIndex:
    """Relative output directory -> entities stored there, in insertion order."""

    def __init__(self):
        self._buckets: dict[str, list[Entity]] = {}

    def add(self, entity: Entity) -> None:
        bucket = self._buckets.setdefault(entity.relative_directory, [])
        if any(existing is entity for existing in bucket):
            raise ValueError(f"{entity.name} already stored under {entity.relative_directory}")
        bucket.append(entity)

    def __getitem__(self, directory: str) -> list[Entity]:
        return self._buckets[directory]

    def __contains__(self, directory: object) -> bool:
        return directory in self._buckets

    def __iter__(self) -> Iterator[str]:
        return iter(self._buckets)

    def __len__(self) -> int:
        return len(self._buckets)

    def items(self) -> Iterator[tuple[str, list[Entity]]]:
        return iter(self._buckets.items())


@dataclass(eq=False)
class Database:
    """Aggregate root of one conversion run."""
    index_document: CleanedDocument
    hierarchy_document: CleanedDocument
    objects: dict[str, Entity] = field(default_factory=dict)
    hierarchy: list[HierarchyNode] = field(default_factory=list)
    directories: DirectoryIndex = field(default_factory=DirectoryIndex)

    def entity(self, name: str) -> Entity | None:
        return self.objects.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self.objects

    def __len__(self) -> int:
        return len(self.objects)

    def documents(self) -> Iterator[tuple[str, CleanedDocument]]:
        """Yield (label, document) for the index, the hierarchy and every entity."""
        yield "index", self.index_document
        yield "hierarchy", self.hierarchy_document
        for name, entity in self.objects.items():
            yield name, entity.document

    def walk_hierarchy(self) -> Iterator[tuple[int, HierarchyNode]]:
        for root in self.hierarchy:
            yield from root.walk()

    def member_count(self) -> int:
        return sum(len(entity.members) for entity in self.objects.values())
