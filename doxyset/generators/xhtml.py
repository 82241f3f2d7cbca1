"""XHTML generator - renders cleaned documents through jinja2 templates."""

import shutil
from pathlib import Path
from typing import Any
from xml.etree import ElementTree as ET

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape
from markupsafe import Markup, escape

from doxyset.database.models import Database, Entity
from doxyset.markup.config import CLEAN_LINK, CLEAN_MEMBER, CLEAN_REF
from doxyset.utils.logging import logger

from .base import OutputGenerator

TEMPLATES_DIR = Path(__file__).parent / "templates"

HTML_OUTPUT_DIR = "html"

# cleaned inline tag -> html tag
SIMPLE_TAGS = {
    "para": "p",
    "code": "code",
    "emphasis": "em",
    "strong": "strong",
    "item": "li",
}

ADMONITION_TAGS = frozenset({"note", "warning", "bug"})


def relative_href(href: str, root: str) -> str:
    """Prefix a root-relative href with the page's path back to the root."""
    if not href or "://" in href or href.startswith(("#", "/", "mailto:")):
        return href
    return f"{root}{href}"


def render_markup(element: ET.Element | None, root: str = "") -> Markup:
    """Render the content of a cleaned element as an HTML fragment."""
    if element is None:
        return Markup("")
    return Markup(_render_content(element, root))


def _render_content(element: ET.Element, root: str) -> str:
    parts = [str(escape(element.text or ""))]
    for child in element:
        parts.append(_render_element(child, root))
        parts.append(str(escape(child.tail or "")))
    return "".join(parts)


def _render_element(element: ET.Element, root: str) -> str:
    tag = element.tag

    if tag == "example":
        return f"<pre><code>{escape(''.join(element.itertext()))}</code></pre>"

    inner = _render_content(element, root)

    if tag == CLEAN_LINK:
        href = relative_href(element.get("href", ""), root)
        return f'<a href="{escape(href)}">{inner}</a>'
    if tag == CLEAN_REF:
        return f'<code class="unresolved">{inner}</code>'
    if tag == "url":
        return f'<a href="{escape(element.get("href", ""))}">{inner}</a>'
    if tag == "list":
        list_tag = "ol" if element.get("ordered") == "yes" else "ul"
        return f"<{list_tag}>{inner}</{list_tag}>"
    if tag in ADMONITION_TAGS:
        return f'<div class="{tag}"><strong>{tag.capitalize()}:</strong> {inner}</div>'
    if tag in SIMPLE_TAGS:
        html_tag = SIMPLE_TAGS[tag]
        return f"<{html_tag}>{inner}</{html_tag}>"
    return inner


def _declaration(element: ET.Element | None, root: str) -> dict[str, str] | None:
    if element is None or not (element.text or "").strip():
        return None
    href = element.get("href")
    return {
        "name": element.text.strip(),
        "href": relative_href(href, root) if href else "",
    }


class XhtmlGenerator(OutputGenerator):
    """Writes one page per entity plus index and hierarchy pages."""

    name = "html"

    def __init__(self, config):
        super().__init__(config)
        self.env = Environment(
            loader=FileSystemLoader(str(TEMPLATES_DIR)),
            autoescape=select_autoescape(["html", "htm", "xml"]),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    @property
    def output_dir(self) -> Path:
        return self.config.output_dir / HTML_OUTPUT_DIR

    def generate(self, database: Database) -> list[Path]:
        if self.output_dir.exists():
            shutil.rmtree(self.output_dir)
        written = []

        for entity in database.objects.values():
            root = "../" * entity.relative_path.count("/")
            written.append(self._write(entity.relative_path, "object.html", self.object_context(entity, root)))

        directories = [
            {
                "name": directory,
                "entities": [
                    {"name": e.name, "href": e.relative_path, "brief": self._brief(e, "")}
                    for e in entities
                ],
            }
            for directory, entities in database.directories.items()
        ]
        written.append(self._write("index.html", "index.html", {"directories": directories, "root": ""}))
        written.append(
            self._write("hierarchy.html", "hierarchy.html", {"roots": database.hierarchy, "root": ""})
        )

        logger.info(f"Rendered {len(written)} pages into {self.output_dir}")
        return written

    def object_context(self, entity: Entity, root: str) -> dict[str, Any]:
        """Template context for one entity page."""
        doc = entity.document.root
        description = doc.find("description")

        sections = []
        for section in doc.iter("section"):
            members = [self._member_context(entity, m, root) for m in section.findall(CLEAN_MEMBER)]
            sections.append({"name": section.get("name", ""), "members": members})

        return {
            "root": root,
            "entity": entity,
            "kind_title": entity.kind.title,
            "base": _declaration(doc.find("base"), root),
            "owner": _declaration(doc.find("class"), root),
            "protocols": [
                _declaration(p, root) for p in doc.findall("protocols/protocol") if (p.text or "").strip()
            ],
            "header": doc.findtext("file") or "",
            "brief": render_markup(description.find("brief") if description is not None else None, root),
            "details": render_markup(description.find("details") if description is not None else None, root),
            "seealso": render_markup(doc.find("seealso"), root),
            "sections": sections,
        }

    def _member_context(self, entity: Entity, member: ET.Element, root: str) -> dict[str, Any]:
        description = member.find("description")
        return {
            "anchor": entity.members[member.get("name", "")].selector,
            "name": member.get("name", ""),
            "kind": member.get("kind", "method"),
            "prototype": member.findtext("prototype") or "",
            "brief": render_markup(description.find("brief") if description is not None else None, root),
            "details": render_markup(description.find("details") if description is not None else None, root),
            "parameters": [
                {"name": p.get("name", ""), "description": render_markup(p, root)}
                for p in member.findall("parameters/parameter")
            ],
            "returns": render_markup(member.find("return"), root),
            "exceptions": [
                {"name": e.get("name", ""), "description": render_markup(e, root)}
                for e in member.findall("exceptions/exception")
            ],
            "seealso": render_markup(member.find("seealso"), root),
        }

    def _brief(self, entity: Entity, root: str) -> Markup:
        return render_markup(entity.document.root.find("description/brief"), root)

    def _write(self, relative: str, template_name: str, context: dict[str, Any]) -> Path:
        template = self.env.get_template(template_name)
        html = template.render(project=self.config.project_name, **context)

        path = self.output_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(html, encoding="utf-8")
        return path
