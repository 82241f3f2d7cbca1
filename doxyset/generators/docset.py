"""DocSet generator - packages rendered HTML into a searchable bundle."""

import plistlib
import shutil
import sqlite3
from pathlib import Path

from doxyset.database.models import Database, ObjectKind, safe_filename
from doxyset.utils.logging import logger

from .base import OutputGenerator
from .xhtml import HTML_OUTPUT_DIR

INDEX_DB_NAME = "docSet.dsidx"

# entity kind / member kind -> search index entry type
ENTRY_TYPES = {
    ObjectKind.CLASS: "Class",
    ObjectKind.CATEGORY: "Category",
    ObjectKind.PROTOCOL: "Protocol",
    "method": "Method",
    "property": "Property",
}

SEARCH_INDEX_SCHEMA = [
    "CREATE TABLE IF NOT EXISTS searchIndex(id INTEGER PRIMARY KEY, name TEXT, type TEXT, path TEXT)",
    "CREATE UNIQUE INDEX IF NOT EXISTS anchor ON searchIndex (name, type, path)",
]


class DocSetGenerator(OutputGenerator):
    """Copies the html output into a .docset bundle and indexes it.

    Reads the html generator's files, so it must run after it.
    """

    name = "docset"
    requires = ("html",)

    @property
    def bundle_dir(self) -> Path:
        return self.config.output_dir / f"{safe_filename(self.config.project_name)}.docset"

    @property
    def documents_dir(self) -> Path:
        return self.bundle_dir / "Contents" / "Resources" / "Documents"

    def generate(self, database: Database) -> list[Path]:
        html_dir = self.config.output_dir / HTML_OUTPUT_DIR
        if not html_dir.is_dir():
            raise FileNotFoundError(f"HTML output not found: {html_dir}")

        if self.bundle_dir.exists():
            shutil.rmtree(self.bundle_dir)
        shutil.copytree(html_dir, self.documents_dir)

        plist_path = self.write_info_plist()
        index_path = self.write_search_index(database)

        logger.info(f"Packaged docset {self.bundle_dir}")
        return [self.bundle_dir, plist_path, index_path]

    def write_info_plist(self) -> Path:
        path = self.bundle_dir / "Contents" / "Info.plist"
        info = {
            "CFBundleIdentifier": self.config.bundle_id,
            "CFBundleName": self.config.project_name,
            "DocSetPlatformFamily": safe_filename(self.config.project_name).lower(),
            "isDashDocset": True,
            "dashIndexFilePath": "index.html",
        }
        with open(path, "wb") as f:
            plistlib.dump(info, f)
        return path

    def write_search_index(self, database: Database) -> Path:
        path = self.bundle_dir / "Contents" / "Resources" / INDEX_DB_NAME

        conn = sqlite3.connect(str(path))
        try:
            cursor = conn.cursor()
            for statement in SEARCH_INDEX_SCHEMA:
                cursor.execute(statement)
            cursor.executemany(
                "INSERT OR IGNORE INTO searchIndex(name, type, path) VALUES (?, ?, ?)",
                list(search_entries(database)),
            )
            conn.commit()
        finally:
            conn.close()

        return path


def search_entries(database: Database):
    """Yield (name, type, path) rows for every entity and member."""
    for entity in database.objects.values():
        yield entity.name, ENTRY_TYPES[entity.kind], entity.relative_path
        for member in entity.members.values():
            yield (
                member.name,
                ENTRY_TYPES.get(member.kind, "Method"),
                f"{entity.relative_path}#{member.selector}",
            )
