"""Intermediate retention - writes cleaned documents to disk."""

from pathlib import Path

from doxyset.utils.logging import logger

from .models import Database, safe_filename


def write_cleaned_documents(database: Database, target_dir: Path) -> list[Path]:
    """Write the index, the hierarchy and every entity document.

    Entity documents land in subdirectories named after the DirectoryIndex
    buckets, so the layout mirrors the rendered output.
    """
    target_dir.mkdir(parents=True, exist_ok=True)
    written = []

    for filename, document in (
        ("index.xml", database.index_document),
        ("hierarchy.xml", database.hierarchy_document),
    ):
        path = target_dir / filename
        path.write_bytes(document.to_bytes())
        written.append(path)

    for directory, entities in database.directories.items():
        bucket = target_dir / directory
        bucket.mkdir(parents=True, exist_ok=True)
        for entity in entities:
            path = bucket / f"{safe_filename(entity.name)}.xml"
            path.write_bytes(entity.document.to_bytes())
            written.append(path)

    logger.info(f"Wrote {len(written)} cleaned documents to {target_dir}")
    return written
