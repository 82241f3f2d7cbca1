"""Tests for the markup normalizer.

Covers the cleaned vocabulary, doxygen naming conventions, determinism and
the hierarchy document.
"""

import pytest

from doxyset.exceptions import MalformedInput
from doxyset.markup import normalize_markup, read_raw_documents
from doxyset.markup.intake import RawDocument
from doxyset.markup.normalizer import category_owner, entity_name

from conftest import write_xml_tree


@pytest.fixture
def normalized(xml_dir):
    return normalize_markup(read_raw_documents(xml_dir))


def _by_name(normalized, name):
    for doc in normalized.entities:
        if doc.name == name:
            return doc
    raise AssertionError(f"{name} not normalized")


class TestNamingConventions:

    def test_protocol_suffix_removed(self):
        assert entity_name("Fooing-p", "protocol") == "Fooing"
        assert entity_name("<Fooing>", "protocol") == "Fooing"

    def test_class_names_untouched(self):
        assert entity_name("Some-p", "class") == "Some-p"

    def test_category_owner(self):
        assert category_owner("Foo(Extras)") == "Foo"
        assert category_owner("NSString (Additions)") == "NSString"

    def test_category_owner_absent_when_unparsable(self):
        """VERIFY: an owner that cannot be parsed is None, not a sentinel."""
        assert category_owner("Extras") is None
        assert category_owner("(Anonymous)") is None


class TestEntityDocuments:
    """Cleaned vocabulary produced for entity documents."""

    def test_object_root(self, normalized):
        foo = _by_name(normalized, "Foo")
        assert foo.root.tag == "object"
        assert foo.kind == "class"
        assert foo.source == "interface_foo.xml"

    def test_base_and_protocols_split(self, normalized):
        foo = _by_name(normalized, "Foo").root
        assert foo.findtext("base") == "NSObject"
        assert [p.text for p in foo.findall("protocols/protocol")] == ["Fooing"]
        assert foo.findtext("file") == "Foo.h"

    def test_category_owner_recorded(self, normalized):
        category = _by_name(normalized, "Foo(Extras)").root
        assert category.get("kind") == "category"
        assert category.findtext("class") == "Foo"
        assert category.find("base") is None

    def test_protocol_name_normalized(self, normalized):
        assert _by_name(normalized, "Fooing").kind == "protocol"

    def test_sections_and_members(self, normalized):
        """VERIFY: private members and non-method/property members are dropped."""
        foo = _by_name(normalized, "Foo").root
        sections = {
            s.get("name"): [(m.get("prefix"), m.get("name"), m.get("kind")) for m in s.findall("member")]
            for s in foo.iter("section")
        }
        assert sections == {
            "Instance methods": [("-", "bar", "method")],
            "Class methods": [("+", "create", "method")],
            "Properties": [("-", "name", "property")],
        }

    def test_member_content(self, normalized):
        foo = _by_name(normalized, "Foo").root
        bar = next(m for m in foo.iter("member") if m.get("name") == "bar")

        assert bar.findtext("type") == "void"
        assert bar.findtext("prototype") == "- (void) bar:(NSInteger)count"
        assert "".join(bar.find("description/brief").itertext()).strip() == "Does the bar thing."

        parameter = bar.find("parameters/parameter")
        assert parameter.get("name") == "count"
        assert "How many times." in "".join(parameter.itertext())
        assert "Nothing." in "".join(bar.find("return").itertext())

    def test_ref_becomes_member_marker(self, normalized):
        foo = _by_name(normalized, "Foo").root
        bar = next(m for m in foo.iter("member") if m.get("name") == "bar")
        markers = [(r.get("id"), r.text) for r in bar.iter("ref")]
        assert markers == [("Qux.run", "run")]

    def test_inline_markup_renamed(self, normalized):
        foo = _by_name(normalized, "Foo").root
        create = next(m for m in foo.iter("member") if m.get("name") == "create")
        assert create.find("description/brief/para/code").text == "Foo"
        assert foo.find("description/details/para/note") is not None

    def test_extractor_noise_dropped(self, normalized):
        foo = _by_name(normalized, "Foo").root
        assert foo.find(".//listofallmembers") is None
        assert foo.find(".//location") is None
        assert foo.find(".//compoundname") is None

    def test_empty_details_removed(self, normalized):
        category = _by_name(normalized, "Foo(Extras)").root
        assert category.find("description/details") is None
        assert category.find("description/brief") is not None

    def test_deterministic_output(self, xml_dir):
        """VERIFY: normalizing the same raw input twice gives identical bytes."""
        first = normalize_markup(read_raw_documents(xml_dir))
        second = normalize_markup(read_raw_documents(xml_dir), workers=4)

        assert first.index.to_bytes() == second.index.to_bytes()
        assert first.hierarchy.to_bytes() == second.hierarchy.to_bytes()
        assert [d.to_bytes() for d in first.entities] == [d.to_bytes() for d in second.entities]

    def test_raw_input_not_mutated(self, xml_dir):
        raw = read_raw_documents(xml_dir)
        before = [doc.content for doc in raw.entities]
        normalize_markup(raw)
        assert [doc.content for doc in raw.entities] == before

    def test_malformed_entity_names_file(self, tmp_path, sample_files):
        sample_files["interface_qux.xml"] = "<doxygen><compounddef kind='class'>"
        raw = read_raw_documents(write_xml_tree(tmp_path / "xml", sample_files))
        with pytest.raises(MalformedInput) as exc_info:
            normalize_markup(raw, workers=4)
        assert exc_info.value.filename == "interface_qux.xml"

    def test_missing_compounddef(self, tmp_path, sample_files):
        sample_files["interface_qux.xml"] = "<doxygen/>"
        raw = read_raw_documents(write_xml_tree(tmp_path / "xml", sample_files))
        with pytest.raises(MalformedInput, match="compounddef"):
            normalize_markup(raw)


class TestReferenceMarkers:
    """Markers produced for doxygen refs that do not name an indexed entity member."""

    @pytest.fixture
    def qux_brief(self, foreign_ref_dir):
        normalized = normalize_markup(read_raw_documents(foreign_ref_dir))
        return _by_name(normalized, "Qux").root.find("description/brief/para")

    def test_file_and_file_member_refs_become_plain_text(self, qux_brief):
        text = "".join(qux_brief.itertext())
        assert text.startswith("See Foo.h, FooMake, ")
        assert "Foo.h" not in [r.text for r in qux_brief.iter("ref")]
        assert "FooMake" not in [r.text for r in qux_brief.iter("ref")]

    def test_filtered_members_keep_their_entity(self, qux_brief):
        """VERIFY: enum and private members of Foo still name Foo in their marker."""
        markers = [(r.get("id"), r.text) for r in qux_brief.iter("ref")]
        assert markers[:2] == [("Foo.Kind", "Kind"), ("Foo.secret", "secret")]

    def test_unindexed_refid_falls_back_to_text(self, qux_brief):
        markers = [r.get("id") for r in qux_brief.iter("ref")]
        assert markers[-1] == "Zap"
        assert len(markers) == 3


class TestIndexDocument:

    def test_index_lists_documented_entities(self, normalized):
        objects = [(o.get("kind"), o.get("name")) for o in normalized.index.root.findall("object")]
        assert objects == [
            ("class", "Foo"),
            ("category", "Foo(Extras)"),
            ("protocol", "Fooing"),
            ("class", "Qux"),
        ]
        assert [r.get("id") for r in normalized.index.root.iter("ref")] == [
            "Foo", "Foo(Extras)", "Fooing", "Qux",
        ]

    def test_wrong_root(self):
        from doxyset.markup.normalizer import normalize_index

        with pytest.raises(MalformedInput):
            normalize_index(RawDocument("index.xml", b"<hierarchy/>"))


class TestHierarchyDocument:

    def test_derived_from_class_bases(self, normalized):
        """VERIFY: without hierarchy.xml the tree comes from class <base> elements."""
        root = normalized.hierarchy.root
        [nsobject] = root.findall("node")
        assert nsobject.get("name") == "NSObject"
        assert nsobject.find("ref") is None
        children = [n.get("name") for n in nsobject.findall("node")]
        assert children == ["Foo", "Qux"]
        assert [n.find("ref").get("id") for n in nsobject.findall("node")] == ["Foo", "Qux"]

    def test_explicit_edge_list_sorted(self, tmp_path, sample_files):
        sample_files["hierarchy.xml"] = (
            "<hierarchy>"
            '<class name="Qux" base="Foo"/>'
            '<class name="Foo" base="NSObject"/>'
            '<class name="Alpha"/>'
            "</hierarchy>"
        )
        normalized = normalize_markup(read_raw_documents(write_xml_tree(tmp_path / "xml", sample_files)))

        roots = [n.get("name") for n in normalized.hierarchy.root.findall("node")]
        assert roots == ["Alpha", "NSObject"]
        assert normalized.hierarchy.root.find("node[@name='NSObject']/node[@name='Foo']/node").get("name") == "Qux"

    def test_cycle_is_malformed(self, tmp_path, sample_files):
        sample_files["hierarchy.xml"] = (
            '<hierarchy><class name="Foo" base="Qux"/><class name="Qux" base="Foo"/></hierarchy>'
        )
        raw = read_raw_documents(write_xml_tree(tmp_path / "xml", sample_files))
        with pytest.raises(MalformedInput, match="cycle"):
            normalize_markup(raw)
