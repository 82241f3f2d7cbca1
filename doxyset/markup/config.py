"""Markup configuration - raw and cleaned vocabulary constants.

This module contains ONLY constants shared by the intake, the normalizer and
the database builder. NO parsing logic.
"""

import re

# =============================================================================
# RAW (DOXYGEN) VOCABULARY
# =============================================================================

INDEX_FILE = "index.xml"
HIERARCHY_FILE = "hierarchy.xml"

# Compound kinds that become database entities
DOCUMENTED_KINDS: frozenset[str] = frozenset({"class", "category", "protocol"})

# Doxygen appends this to Objective-C protocol names
PROTOCOL_SUFFIX = "-p"

# Member refids are "<compound refid>_1<anchor>"
MEMBER_REFID_SEPARATOR = "_1"

# memberdef kind -> cleaned member kind
MEMBER_KINDS: dict[str, str] = {
    "function": "method",
    "property": "property",
}

# Members with these protections are not part of the public API
HIDDEN_PROTECTIONS: frozenset[str] = frozenset({"private", "package"})

# sectiondef kind -> section title when no user-defined header is present
SECTION_TITLES: dict[str, str] = {
    "public-func": "Instance methods",
    "protected-func": "Instance methods",
    "public-static-func": "Class methods",
    "protected-static-func": "Class methods",
    "property": "Properties",
    "public-attrib": "Properties",
}
DEFAULT_SECTION_TITLE = "Other members"

# Inline element renames (raw tag -> cleaned tag)
INLINE_TAGS: dict[str, str] = {
    "para": "para",
    "computeroutput": "code",
    "emphasis": "emphasis",
    "bold": "strong",
    "itemizedlist": "list",
    "orderedlist": "list",
    "listitem": "item",
    "programlisting": "example",
}

# simplesect kinds kept inline as admonitions
ADMONITIONS: dict[str, str] = {
    "note": "note",
    "remark": "note",
    "attention": "warning",
    "warning": "warning",
    "bug": "bug",
}

# Raw elements dropped entirely, text included
DROPPED_TAGS: frozenset[str] = frozenset({
    "location",
    "listofallmembers",
    "inbodydescription",
    "includes",
    "templateparamlist",
    "reimplements",
    "reimplementedby",
    "references",
    "referencedby",
    "anchor",
    "xrefsect",
})

# =============================================================================
# CLEANED VOCABULARY
# =============================================================================

CLEAN_OBJECT = "object"
CLEAN_MEMBER = "member"
CLEAN_REF = "ref"
CLEAN_LINK = "link"

# Separator between entity and member name inside a marker id
MARKER_SEPARATOR = "."

# Category compound names: Owner(CategoryName)
CATEGORY_NAME_RE = re.compile(r"^\s*([A-Za-z_][A-Za-z0-9_]*)\s*\((.*)\)\s*$")

# Class/static member prefixes
CLASS_MEMBER_PREFIX = "+"
INSTANCE_MEMBER_PREFIX = "-"
