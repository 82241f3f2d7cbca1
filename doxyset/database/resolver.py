"""Reference resolver - rewrites cross-reference markers into links.

Markers look like ``<ref id="Entity">`` or ``<ref id="Entity.member">``. A
resolved marker becomes ``<link href="Dir/Entity.html">`` (plus
``#selector`` when the member exists). A marker whose entity is unknown is
left byte-identical and reported as a DanglingReference.

Links always carry the prefix-inclusive selector, never the bare member name,
because renderers may place the prefix anywhere in their anchor templates.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from doxyset.exceptions import DanglingReference
from doxyset.markup.config import CLEAN_LINK, CLEAN_OBJECT, MARKER_SEPARATOR
from doxyset.markup.document import CleanedDocument
from doxyset.utils.logging import logger

from .models import Database


def parse_marker(marker: str) -> tuple[str, str | None]:
    """Split a marker id into (entity name, member name or None)."""
    entity, separator, member = marker.partition(MARKER_SEPARATOR)
    if not separator or not member:
        return entity, None
    return entity, member


@dataclass
class ResolutionReport:
    """Outcome of one resolver pass."""
    resolved: int = 0
    warnings: list[DanglingReference] = field(default_factory=list)

    @property
    def clean(self) -> bool:
        return not self.warnings


class ReferenceResolver:
    """Resolves every marker of a populated Database in place.

    The database is read-only here apart from the cleaned documents, so
    documents are rewritten concurrently without locking. Warnings are
    merged in document order (index, hierarchy, then entities in discovery
    order).
    """

    def __init__(self, database: Database, workers: int = 1):
        self.database = database
        self.workers = workers

    def link_for(self, marker: str) -> tuple[str | None, DanglingReference | None]:
        """Compute the link for one marker without touching any document.

        Returns:
            (href, warning). href is None when the entity is unknown; the
            warning is None when both entity and member resolved.
        """
        entity_name, member_name = parse_marker(marker)
        entity = self.database.entity(entity_name)
        if entity is None:
            return None, DanglingReference("", marker, entity_name, member_name)

        href = entity.relative_path
        if member_name is None:
            return href, None

        member = entity.member(member_name)
        if member is None:
            return href, DanglingReference("", marker, entity_name, member_name, member_only=True)
        return f"{href}#{member.selector}", None

    def resolve(self) -> ResolutionReport:
        jobs = list(self.database.documents())

        if self.workers > 1 and len(jobs) > 1:
            with ThreadPoolExecutor(max_workers=self.workers) as executor:
                results = list(executor.map(lambda job: self.resolve_document(*job), jobs))
        else:
            results = [self.resolve_document(label, doc) for label, doc in jobs]

        report = ResolutionReport()
        for resolved, warnings in results:
            report.resolved += resolved
            report.warnings.extend(warnings)

        for warning in report.warnings:
            logger.warning(f"Dangling reference {warning}")
        logger.info(
            f"Resolved {report.resolved} references, {len(report.warnings)} dangling"
        )
        return report

    def resolve_document(
        self, source: str, document: CleanedDocument
    ) -> tuple[int, list[DanglingReference]]:
        """Rewrite the markers of one document in place."""
        resolved = 0
        warnings: list[DanglingReference] = []

        for element in document.markers():
            marker = element.get("id")
            href, warning = self.link_for(marker)
            if warning is not None:
                warnings.append(
                    DanglingReference(
                        source, marker, warning.entity, warning.member, warning.member_only
                    )
                )
            if href is None:
                continue
            element.tag = CLEAN_LINK
            element.attrib.clear()
            element.set("href", href)
            resolved += 1

        if document.root.tag == CLEAN_OBJECT:
            self._link_declarations(document)

        return resolved, warnings

    def _link_declarations(self, document: CleanedDocument) -> None:
        """Attach hrefs to superclass, owning class and adopted protocols when documented.

        Undocumented targets (framework classes) stay plain text and are not warnings.
        """
        root = document.root
        candidates = [root.find("base"), root.find("class"), *root.findall("protocols/protocol")]
        for element in candidates:
            if element is None:
                continue
            target = self.database.entity((element.text or "").strip())
            if target is not None:
                element.set("href", target.relative_path)
