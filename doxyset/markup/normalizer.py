"""Markup normalizer - converts raw doxygen XML into the cleaned vocabulary.

Every function here is a pure transformation: raw documents are parsed from
their bytes on each call, so the raw input is never mutated, and the same raw
input always serializes to byte-identical cleaned output.

Per-entity normalization does not depend on any other entity, so the entity
documents are normalized on a thread pool and collected in discovery order.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from xml.etree import ElementTree as ET

from doxyset.exceptions import MalformedInput
from doxyset.utils.logging import logger

from .config import (
    ADMONITIONS,
    CATEGORY_NAME_RE,
    CLASS_MEMBER_PREFIX,
    CLEAN_MEMBER,
    CLEAN_OBJECT,
    CLEAN_REF,
    DEFAULT_SECTION_TITLE,
    DOCUMENTED_KINDS,
    DROPPED_TAGS,
    HIDDEN_PROTECTIONS,
    HIERARCHY_FILE,
    INLINE_TAGS,
    INSTANCE_MEMBER_PREFIX,
    MARKER_SEPARATOR,
    MEMBER_KINDS,
    MEMBER_REFID_SEPARATOR,
    PROTOCOL_SUFFIX,
    SECTION_TITLES,
)
from .document import CleanedDocument
from .intake import RawDocument, RawMarkupSet

# Cleaned containers holding block content; whitespace between their children is noise
BLOCK_TAGS = frozenset({
    "brief", "details", "description", "list", "item", "parameter",
    "return", "exception", "seealso", "note", "warning", "bug",
})


@dataclass(frozen=True)
class RefTarget:
    """Entity (and optional member) a doxygen refid points at."""

    entity: str
    member: str | None = None

    @property
    def marker(self) -> str:
        if self.member is None:
            return self.entity
        return f"{self.entity}{MARKER_SEPARATOR}{self.member}"


@dataclass
class _Extracted:
    """Block sections lifted out of a description."""

    parameters: list[ET.Element] = field(default_factory=list)
    exceptions: list[ET.Element] = field(default_factory=list)
    returns: ET.Element | None = None
    seealso: ET.Element | None = None


@dataclass
class NormalizedMarkup:
    """Cleaned index, hierarchy and entity documents (discovery order)."""

    index: CleanedDocument
    hierarchy: CleanedDocument
    entities: list[CleanedDocument]


def entity_name(compound_name: str, kind: str | None = None) -> str:
    """Normalize a doxygen compound name into the entity name."""
    name = compound_name.strip()
    if name.startswith("<") and name.endswith(">"):
        name = name[1:-1].strip()
    if (kind in (None, "protocol")) and name.endswith(PROTOCOL_SUFFIX):
        name = name[: -len(PROTOCOL_SUFFIX)]
    return name


def category_owner(name: str) -> str | None:
    """Return the class a category extends, or None if it cannot be determined."""
    match = CATEGORY_NAME_RE.match(name)
    return match.group(1) if match else None


def _append_text(dst: ET.Element, text: str | None) -> None:
    if not text:
        return
    if len(dst):
        last = dst[-1]
        last.tail = (last.tail or "") + text
    else:
        dst.text = (dst.text or "") + text


def _plain_text(src: ET.Element) -> str:
    """Flatten an element to text, honoring doxygen's <sp/> and <linebreak/>."""
    parts = [src.text or ""]
    for child in src:
        if child.tag == "sp":
            parts.append(" ")
        elif child.tag == "linebreak":
            parts.append("\n")
        else:
            parts.append(_plain_text(child))
        parts.append(child.tail or "")
    return "".join(parts)


def _tidy(el: ET.Element) -> None:
    """Drop whitespace-only text between block children and empty paragraphs."""
    for child in list(el):
        _tidy(child)
    if el.tag not in BLOCK_TAGS:
        return
    for child in list(el):
        if child.tag == "para" and not len(child) and not (child.text or "").strip():
            if child.tail and child.tail.strip():
                _append_text_before(el, child, child.tail)
            el.remove(child)
    if el.text is not None and not el.text.strip():
        el.text = None
    for child in el:
        if child.tail is not None and not child.tail.strip():
            child.tail = None


def _append_text_before(parent: ET.Element, child: ET.Element, text: str) -> None:
    index = list(parent).index(child)
    if index == 0:
        parent.text = (parent.text or "") + text
    else:
        prev = parent[index - 1]
        prev.tail = (prev.tail or "") + text


def normalize_index(raw: RawDocument) -> tuple[CleanedDocument, dict[str, RefTarget | None]]:
    """Clean the index document and build the refid lookup table.

    Returns:
        The cleaned index document and a mapping of every compound/member
        refid to its entity (and member) name. Refids of compounds that are
        not entities (files, pages, plain C symbols) and of their members map
        to None.
    """
    root = raw.parse()
    if root.tag != "doxygenindex":
        raise MalformedInput(raw.filename, f"expected <doxygenindex>, found <{root.tag}>")

    refids: dict[str, RefTarget | None] = {}
    index = ET.Element("index")

    for compound in root.iter("compound"):
        kind = compound.get("kind")
        refid = compound.get("refid")
        if kind not in DOCUMENTED_KINDS:
            if refid:
                refids.setdefault(refid, None)
                for member in compound.iter("member"):
                    if member.get("refid"):
                        refids.setdefault(member.get("refid"), None)
            continue
        raw_name = compound.findtext("name")
        if not refid or not raw_name or not raw_name.strip():
            raise MalformedInput(raw.filename, "documented compound without refid or name")
        if refids.get(refid) is not None:
            continue

        name = entity_name(raw_name, kind)
        refids[refid] = RefTarget(name)

        for member in compound.iter("member"):
            member_refid = member.get("refid")
            member_name = (member.findtext("name") or "").strip()
            if member_refid and member_name and refids.get(member_refid) is None:
                refids[member_refid] = RefTarget(name, member_name)

        obj = ET.SubElement(index, CLEAN_OBJECT, kind=kind, name=name, source=f"{refid}.xml")
        marker = ET.SubElement(obj, CLEAN_REF, id=name)
        marker.text = name

    return CleanedDocument(raw.filename, index), refids


class MarkupNormalizer:
    """Cleans entity and hierarchy documents against one refid table."""

    def __init__(self, refids: dict[str, RefTarget | None]):
        self.refids = refids
        self.documented = {
            target.entity for target in refids.values() if target is not None and target.member is None
        }

    # ------------------------------------------------------------------
    # Entity documents
    # ------------------------------------------------------------------

    def normalize_entity(self, raw: RawDocument) -> CleanedDocument:
        """Clean one per-entity document."""
        root = raw.parse()
        compound = root if root.tag == "compounddef" else root.find("compounddef")
        if compound is None:
            raise MalformedInput(raw.filename, "no <compounddef> element")

        kind = compound.get("kind")
        if kind not in DOCUMENTED_KINDS:
            raise MalformedInput(raw.filename, f"unsupported compound kind {kind!r}")

        compound_name = compound.findtext("compoundname")
        if not compound_name or not compound_name.strip():
            raise MalformedInput(raw.filename, "missing <compoundname>")

        name = entity_name(compound_name, kind)
        obj = ET.Element(CLEAN_OBJECT, kind=kind, name=name)

        if kind == "category":
            owner = category_owner(name)
            if owner:
                ET.SubElement(obj, "class").text = owner

        base, protocols = self._split_bases(compound, kind)
        if base:
            ET.SubElement(obj, "base").text = base
        if protocols:
            adopted = ET.SubElement(obj, "protocols")
            for protocol in protocols:
                ET.SubElement(adopted, "protocol").text = protocol

        location = compound.find("location")
        if location is not None and location.get("file"):
            ET.SubElement(obj, "file").text = location.get("file")

        description, extracted = self._description(
            compound.find("briefdescription"), compound.find("detaileddescription")
        )
        obj.append(description)
        if extracted.seealso is not None:
            obj.append(extracted.seealso)

        sections = self._sections(compound, raw.filename)
        if len(sections):
            obj.append(sections)

        _tidy(obj)
        logger.debug(f"Normalized {raw.filename} -> {kind} {name}")
        return CleanedDocument(raw.filename, obj)

    def _split_bases(self, compound: ET.Element, kind: str) -> tuple[str | None, list[str]]:
        """Separate the superclass from adopted protocols."""
        base = None
        protocols = []
        for ref in compound.findall("basecompoundref"):
            text = (ref.text or "").strip()
            if not text:
                continue
            refid = ref.get("refid") or ""
            is_protocol = (
                kind != "class"
                or (text.startswith("<") and text.endswith(">"))
                or text.endswith(PROTOCOL_SUFFIX)
                or refid.endswith(PROTOCOL_SUFFIX)
            )
            if is_protocol:
                name = entity_name(text, "protocol")
                if name not in protocols:
                    protocols.append(name)
            elif base is None:
                base = entity_name(text, "class")
        return base, protocols

    def _sections(self, compound: ET.Element, filename: str) -> ET.Element:
        sections = ET.Element("sections")
        by_title: dict[str, ET.Element] = {}

        for sectiondef in compound.findall("sectiondef"):
            header = (sectiondef.findtext("header") or "").strip()
            title = header or SECTION_TITLES.get(sectiondef.get("kind", ""), DEFAULT_SECTION_TITLE)

            members = [
                self._member(memberdef, filename)
                for memberdef in sectiondef.findall("memberdef")
                if memberdef.get("kind") in MEMBER_KINDS
                and memberdef.get("prot", "public") not in HIDDEN_PROTECTIONS
            ]
            if not members:
                continue

            section = by_title.get(title)
            if section is None:
                section = ET.SubElement(sections, "section", name=title)
                by_title[title] = section
            section.extend(members)

        return sections

    def _member(self, memberdef: ET.Element, filename: str) -> ET.Element:
        name = (memberdef.findtext("name") or "").strip()
        if not name:
            raise MalformedInput(filename, f"member {memberdef.get('id', '?')} has no name")

        prefix = CLASS_MEMBER_PREFIX if memberdef.get("static") == "yes" else INSTANCE_MEMBER_PREFIX
        member = ET.Element(
            CLEAN_MEMBER, kind=MEMBER_KINDS[memberdef.get("kind")], prefix=prefix, name=name
        )

        type_el = memberdef.find("type")
        member_type = ET.SubElement(member, "type")
        if type_el is not None:
            self._copy_content(type_el, member_type, _Extracted())
        type_text = "".join(member_type.itertext()).strip()

        definition = memberdef.find("definition")
        args = memberdef.find("argsstring")
        prototype = "".join(
            _plain_text(el).strip() for el in (definition, args) if el is not None
        )
        if not prototype:
            prototype = f"{prefix} ({type_text}) {name}" if type_text else f"{prefix} {name}"
        ET.SubElement(member, "prototype").text = prototype

        description, extracted = self._description(
            memberdef.find("briefdescription"), memberdef.find("detaileddescription")
        )
        member.append(description)

        if extracted.parameters:
            parameters = ET.SubElement(member, "parameters")
            parameters.extend(extracted.parameters)
        if extracted.returns is not None:
            member.append(extracted.returns)
        if extracted.exceptions:
            exceptions = ET.SubElement(member, "exceptions")
            exceptions.extend(extracted.exceptions)
        if extracted.seealso is not None:
            member.append(extracted.seealso)

        return member

    # ------------------------------------------------------------------
    # Descriptions and inline content
    # ------------------------------------------------------------------

    def _description(
        self, brief: ET.Element | None, detailed: ET.Element | None
    ) -> tuple[ET.Element, _Extracted]:
        extracted = _Extracted()
        description = ET.Element("description")

        if brief is not None:
            brief_el = ET.SubElement(description, "brief")
            self._copy_content(brief, brief_el, extracted)
        if detailed is not None:
            details_el = ET.SubElement(description, "details")
            self._copy_content(detailed, details_el, extracted)

        for child in list(description):
            _tidy(child)
            if not len(child) and not (child.text or "").strip():
                description.remove(child)

        return description, extracted

    def _copy_content(self, src: ET.Element, dst: ET.Element, extracted: _Extracted) -> None:
        _append_text(dst, src.text)
        for child in src:
            self._convert_node(child, dst, extracted)
            _append_text(dst, child.tail)

    def _ref_marker(self, refid: str, text: str) -> str | None:
        """Marker id for a doxygen <ref>, or None when it should stay plain text.

        Members missing from the index (private, package) are still attributed
        to their compound through doxygen's member refid layout. Only a refid
        doxygen never indexed falls back to the reference text.
        """
        if refid in self.refids:
            target = self.refids[refid]
            return target.marker if target is not None else None

        compound, separator, _ = refid.rpartition(MEMBER_REFID_SEPARATOR)
        if separator and compound in self.refids:
            owner = self.refids[compound]
            if owner is None or owner.member is not None:
                return None
            member = text.strip()
            return RefTarget(owner.entity, member or None).marker

        return entity_name(text)

    def _convert_node(self, node: ET.Element, dst: ET.Element, extracted: _Extracted) -> None:
        tag = node.tag

        if tag in DROPPED_TAGS:
            return

        if tag == "ref":
            text = "".join(node.itertext())
            marker = self._ref_marker(node.get("refid", ""), text)
            if not marker:
                _append_text(dst, text)
                return
            ref = ET.SubElement(dst, CLEAN_REF, id=marker)
            ref.text = text
            return

        if tag == "ulink":
            url = ET.SubElement(dst, "url", href=node.get("url", ""))
            self._copy_content(node, url, extracted)
            return

        if tag == "sp":
            _append_text(dst, " ")
            return

        if tag == "linebreak":
            _append_text(dst, "\n")
            return

        if tag == "parameterlist":
            self._extract_parameters(node, extracted)
            return

        if tag == "simplesect":
            self._convert_simplesect(node, dst, extracted)
            return

        if tag == "programlisting":
            lines = [_plain_text(line) for line in node.findall("codeline")]
            example = ET.SubElement(dst, "example")
            example.text = "\n".join(lines) if lines else _plain_text(node)
            return

        if tag in INLINE_TAGS:
            converted = ET.SubElement(dst, INLINE_TAGS[tag])
            if tag == "orderedlist":
                converted.set("ordered", "yes")
            self._copy_content(node, converted, extracted)
            return

        # Unknown wrapper: keep the content, drop the element
        self._copy_content(node, dst, extracted)

    def _extract_parameters(self, node: ET.Element, extracted: _Extracted) -> None:
        kind = node.get("kind", "param")
        if kind not in ("param", "exception", "retval"):
            return
        for item in node.findall("parameteritem"):
            names = [
                _plain_text(n).strip()
                for n in item.iter("parametername")
                if _plain_text(n).strip()
            ]
            description = item.find("parameterdescription")
            for name in names:
                tag = "exception" if kind == "exception" else "parameter"
                el = ET.Element(tag, name=name)
                if description is not None:
                    self._copy_content(description, el, extracted)
                _tidy(el)
                if kind == "exception":
                    extracted.exceptions.append(el)
                else:
                    extracted.parameters.append(el)

    def _convert_simplesect(self, node: ET.Element, dst: ET.Element, extracted: _Extracted) -> None:
        kind = node.get("kind", "")
        if kind == "return":
            if extracted.returns is None:
                extracted.returns = ET.Element("return")
            self._copy_content(node, extracted.returns, extracted)
            _tidy(extracted.returns)
        elif kind == "see":
            if extracted.seealso is None:
                extracted.seealso = ET.Element("seealso")
            self._copy_content(node, extracted.seealso, extracted)
            _tidy(extracted.seealso)
        elif kind in ADMONITIONS:
            admonition = ET.SubElement(dst, ADMONITIONS[kind])
            self._copy_content(node, admonition, extracted)
        else:
            title = node.find("title")
            if title is not None:
                node = _without_title(node)
            self._copy_content(node, dst, extracted)

    # ------------------------------------------------------------------
    # Hierarchy document
    # ------------------------------------------------------------------

    def normalize_hierarchy(
        self, raw: RawDocument | None, entities: list[CleanedDocument]
    ) -> CleanedDocument:
        """Build the cleaned inheritance tree.

        The raw hierarchy document is a flat <class name base> edge list; when
        it is missing the edges come from the cleaned class documents.
        """
        source = raw.filename if raw is not None else HIERARCHY_FILE
        edges: dict[str, str | None] = {}

        if raw is not None:
            root = raw.parse()
            for cls in root.iter("class"):
                name = (cls.get("name") or "").strip()
                if not name:
                    raise MalformedInput(raw.filename, "<class> without name")
                if name in edges:
                    raise MalformedInput(raw.filename, f"class {name} listed twice")
                edges[name] = (cls.get("base") or "").strip() or None
        else:
            for doc in entities:
                if doc.kind == "class":
                    edges[doc.name] = (doc.root.findtext("base") or "").strip() or None

        children: dict[str, list[str]] = {}
        names = set(edges)
        for name, base in edges.items():
            if base is not None:
                names.add(base)
                children.setdefault(base, []).append(name)

        for name in sorted(edges):
            seen = {name}
            current = edges.get(name)
            while current is not None:
                if current in seen:
                    raise MalformedInput(source, f"inheritance cycle through {current}")
                seen.add(current)
                current = edges.get(current)

        hierarchy = ET.Element("hierarchy")
        roots = sorted(name for name in names if edges.get(name) is None)
        for name in roots:
            hierarchy.append(self._hierarchy_node(name, children))

        return CleanedDocument(source, hierarchy)

    def _hierarchy_node(self, name: str, children: dict[str, list[str]]) -> ET.Element:
        node = ET.Element("node", name=name)
        if name in self.documented:
            marker = ET.SubElement(node, CLEAN_REF, id=name)
            marker.text = name
        for child in sorted(children.get(name, ())):
            node.append(self._hierarchy_node(child, children))
        return node


def _without_title(node: ET.Element) -> ET.Element:
    """Shallow copy of a simplesect without its <title> child."""
    copy = ET.Element(node.tag, node.attrib)
    copy.text = node.text
    for child in node:
        if child.tag == "title":
            _append_text(copy, child.tail)
        else:
            copy.append(child)
    return copy


def normalize_markup(raw_set: RawMarkupSet, workers: int = 1) -> NormalizedMarkup:
    """Normalize the whole raw markup set.

    Entity documents are cleaned concurrently; results keep discovery order.
    The first MalformedInput (in discovery order) aborts the stage.
    """
    index, refids = normalize_index(raw_set.index)
    normalizer = MarkupNormalizer(refids)

    if workers > 1 and len(raw_set.entities) > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            entities = list(executor.map(normalizer.normalize_entity, raw_set.entities))
    else:
        entities = [normalizer.normalize_entity(raw) for raw in raw_set.entities]

    hierarchy = normalizer.normalize_hierarchy(raw_set.hierarchy, entities)

    logger.info(f"Normalized {len(entities)} entity documents ({len(refids)} refids indexed)")
    return NormalizedMarkup(index=index, hierarchy=hierarchy, entities=entities)
