"""Object database: typed models, builder, reference resolver and export."""

from .builder import DatabaseBuilder
from .export import write_cleaned_documents
from .models import (
    RELATIVE_DIRECTORIES,
    Database,
    DirectoryIndex,
    Entity,
    HierarchyNode,
    Member,
    ObjectKind,
    safe_filename,
)
from .resolver import ReferenceResolver, ResolutionReport, parse_marker

__all__ = [
    "RELATIVE_DIRECTORIES",
    "Database",
    "DatabaseBuilder",
    "DirectoryIndex",
    "Entity",
    "HierarchyNode",
    "Member",
    "ObjectKind",
    "ReferenceResolver",
    "ResolutionReport",
    "parse_marker",
    "safe_filename",
    "write_cleaned_documents",
]
