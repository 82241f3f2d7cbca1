"""Tests for raw markup intake."""

import pytest

from doxyset.exceptions import MalformedInput
from doxyset.markup import RawDocument, read_raw_documents

from conftest import write_xml_tree


class TestReadRawDocuments:
    """Reading the doxygen XML output directory."""

    def test_reads_documented_compounds_in_index_order(self, xml_dir):
        """VERIFY: entity documents follow compound order; file compounds are skipped."""
        raw = read_raw_documents(xml_dir)

        assert raw.index.filename == "index.xml"
        assert [doc.filename for doc in raw.entities] == [
            "interface_foo.xml",
            "category_foo_07_extras_08.xml",
            "protocol_fooing-p.xml",
            "interface_qux.xml",
        ]
        assert raw.hierarchy is None

    def test_hierarchy_document_is_optional(self, tmp_path, sample_files):
        """VERIFY: hierarchy.xml is picked up when present."""
        sample_files["hierarchy.xml"] = '<hierarchy><class name="Foo" base="NSObject"/></hierarchy>'
        raw = read_raw_documents(write_xml_tree(tmp_path / "xml", sample_files))

        assert raw.hierarchy is not None
        assert raw.hierarchy.filename == "hierarchy.xml"

    def test_missing_input_directory(self, tmp_path):
        with pytest.raises(MalformedInput) as exc_info:
            read_raw_documents(tmp_path / "nowhere")
        assert "nowhere" in exc_info.value.identifier

    def test_missing_index(self, tmp_path, sample_files):
        del sample_files["index.xml"]
        with pytest.raises(MalformedInput) as exc_info:
            read_raw_documents(write_xml_tree(tmp_path / "xml", sample_files))
        assert exc_info.value.identifier == "index.xml"

    def test_missing_compound_file_names_the_file(self, tmp_path, sample_files):
        """VERIFY: a compound listed in the index but absent on disk is fatal."""
        del sample_files["interface_qux.xml"]
        with pytest.raises(MalformedInput) as exc_info:
            read_raw_documents(write_xml_tree(tmp_path / "xml", sample_files))
        assert exc_info.value.filename == "interface_qux.xml"

    def test_unparsable_index(self, tmp_path, sample_files):
        sample_files["index.xml"] = "<doxygenindex><compound"
        with pytest.raises(MalformedInput) as exc_info:
            read_raw_documents(write_xml_tree(tmp_path / "xml", sample_files))
        assert exc_info.value.filename == "index.xml"

    def test_raw_document_parse_reports_filename(self):
        broken = RawDocument("broken.xml", b"<a><b></a>")
        with pytest.raises(MalformedInput) as exc_info:
            broken.parse()
        assert exc_info.value.filename == "broken.xml"
