"""Tests for the object database builder."""

import pytest

from doxyset.database import RELATIVE_DIRECTORIES, DatabaseBuilder, ObjectKind, safe_filename
from doxyset.exceptions import DuplicateEntity, DuplicateMember, MalformedInput
from doxyset.markup import normalize_markup, read_raw_documents

from conftest import build_database


@pytest.fixture
def database(xml_dir):
    return DatabaseBuilder(".html", workers=4).build(normalize_markup(read_raw_documents(xml_dir)))


class TestSafeFilename:

    def test_keeps_allowed_characters(self):
        assert safe_filename("Foo(Extras)") == "Foo(Extras)"
        assert safe_filename("NSString+Additions-v2.1") == "NSString+Additions-v2.1"

    def test_replaces_everything_else(self):
        assert safe_filename("a b/c:d*e") == "a_b_c_d_e"
        assert safe_filename("Ünïcode") == "_n_code"


class TestDatabaseBuilder:

    def test_entities_keyed_by_name(self, database):
        assert list(database.objects) == ["Foo", "Foo(Extras)", "Fooing", "Qux"]
        assert database.entity("Foo").kind is ObjectKind.CLASS
        assert database.entity("Foo(Extras)").kind is ObjectKind.CATEGORY
        assert database.entity("Fooing").kind is ObjectKind.PROTOCOL
        assert "Missing" not in database

    def test_relative_paths(self, database):
        assert database.entity("Foo").relative_path == "Classes/Foo.html"
        assert database.entity("Foo(Extras)").relative_path == "Categories/Foo(Extras).html"
        assert database.entity("Fooing").relative_path == "Protocols/Fooing.html"

    def test_custom_extension(self, xml_dir):
        database = DatabaseBuilder(".xhtml").build(normalize_markup(read_raw_documents(xml_dir)))
        assert database.entity("Qux").relative_path == "Classes/Qux.xhtml"

    def test_directory_index_contains_each_entity_once(self, database):
        """VERIFY: every entity sits exactly once in its kind's bucket."""
        for entity in database.objects.values():
            assert entity.relative_directory in RELATIVE_DIRECTORIES
            assert entity.relative_directory == entity.kind.directory
            bucket = database.directories[entity.relative_directory]
            assert sum(1 for e in bucket if e is entity) == 1

        assert [e.name for e in database.directories["Classes"]] == ["Foo", "Qux"]

    def test_owner_and_parent(self, database):
        assert database.entity("Foo").parent == "NSObject"
        assert database.entity("Foo(Extras)").owning_class == "Foo"
        assert database.entity("Fooing").owning_class is None

    def test_member_selectors(self, database):
        """VERIFY: selector is prefix + name and unique within the entity."""
        foo = database.entity("Foo")
        assert {name: m.selector for name, m in foo.members.items()} == {
            "bar": "-bar",
            "create": "+create",
            "name": "-name",
        }
        for entity in database.objects.values():
            selectors = [m.selector for m in entity.members.values()]
            assert len(selectors) == len(set(selectors))
            for member in entity.members.values():
                assert member.selector == member.prefix + member.name

        assert database.member_count() == 6

    def test_hierarchy_links_documented_nodes(self, database):
        [root] = database.hierarchy
        assert root.name == "NSObject"
        assert root.entity is None
        assert [child.name for child in root.children] == ["Foo", "Qux"]
        assert root.children[0].entity is database.entity("Foo")
        assert root.children[0].children == []

    def test_walk_hierarchy(self, database):
        walked = [(depth, node.name) for depth, node in database.walk_hierarchy()]
        assert walked == [(0, "NSObject"), (1, "Foo"), (1, "Qux")]

    def test_entity_without_members(self):
        database = build_database('<object kind="protocol" name="Empty"/>')
        assert database.entity("Empty").members == {}


class TestBuildFailures:

    def test_duplicate_entity(self):
        """VERIFY: two entities named Baz fail the build and no Database is returned."""
        database = None
        with pytest.raises(DuplicateEntity) as exc_info:
            database = build_database(
                '<object kind="class" name="Baz"/>',
                '<object kind="class" name="Baz"/>',
            )
        assert database is None
        assert exc_info.value.identifier == "Baz"
        assert "object0.xml" in str(exc_info.value)
        assert "object1.xml" in str(exc_info.value)

    def test_duplicate_entity_across_kinds(self):
        with pytest.raises(DuplicateEntity):
            build_database(
                '<object kind="class" name="Baz"/>',
                '<object kind="protocol" name="Baz"/>',
            )

    def test_duplicate_member(self):
        """VERIFY: +foo and -foo collide on the member name."""
        with pytest.raises(DuplicateMember) as exc_info:
            build_database(
                '<object kind="class" name="Baz"><sections><section name="Methods">'
                '<member kind="method" prefix="-" name="foo"/>'
                '<member kind="method" prefix="+" name="foo"/>'
                "</section></sections></object>"
            )
        assert exc_info.value.identifier == "Baz.foo"

    def test_unknown_kind(self):
        with pytest.raises(MalformedInput):
            build_database('<object kind="union" name="Baz"/>')

    def test_not_an_object(self):
        with pytest.raises(MalformedInput):
            build_database('<index/>')
