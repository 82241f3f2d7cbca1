"""Pytest configuration and fixtures.

The sample project mirrors what doxygen writes for a small Objective-C
library: a class Foo adopting protocol Fooing, a category Foo(Extras) that
links to Foo.bar, and a second class Qux. Every reference in it resolves.
"""
import os
from pathlib import Path
from xml.etree import ElementTree as ET

import pytest

from doxyset.config_runtime import ConversionConfig
from doxyset.database import DatabaseBuilder
from doxyset.markup import CleanedDocument
from doxyset.markup.normalizer import NormalizedMarkup

INDEX_XML = """<?xml version="1.0" encoding="UTF-8"?>
<doxygenindex version="1.9.8">
  <compound refid="interface_foo" kind="class"><name>Foo</name>
    <member refid="interface_foo_1abar" kind="function"><name>bar</name></member>
    <member refid="interface_foo_1acreate" kind="function"><name>create</name></member>
    <member refid="interface_foo_1aname" kind="property"><name>name</name></member>
  </compound>
  <compound refid="category_foo_07_extras_08" kind="category"><name>Foo(Extras)</name>
    <member refid="category_foo_07_extras_08_1abaz" kind="function"><name>baz</name></member>
  </compound>
  <compound refid="protocol_fooing-p" kind="protocol"><name>Fooing-p</name>
    <member refid="protocol_fooing-p_1afoo" kind="function"><name>foo</name></member>
  </compound>
  <compound refid="interface_qux" kind="class"><name>Qux</name>
    <member refid="interface_qux_1arun" kind="function"><name>run</name></member>
  </compound>
  <compound refid="_foo_8h" kind="file"><name>Foo.h</name></compound>
</doxygenindex>
"""

FOO_XML = """<?xml version="1.0" encoding="UTF-8"?>
<doxygen version="1.9.8">
  <compounddef id="interface_foo" kind="class" language="Objective-C" prot="public">
    <compoundname>Foo</compoundname>
    <basecompoundref prot="public" virt="non-virtual">NSObject</basecompoundref>
    <basecompoundref refid="protocol_fooing-p" prot="public" virt="non-virtual">&lt;Fooing&gt;</basecompoundref>
    <sectiondef kind="public-func">
      <memberdef kind="function" id="interface_foo_1abar" prot="public" static="no">
        <type>void</type>
        <definition>- (void) bar</definition>
        <argsstring>:(NSInteger)count</argsstring>
        <name>bar</name>
        <briefdescription><para>Does the bar thing.</para></briefdescription>
        <detaileddescription>
          <para>Hands the work to <ref refid="interface_qux_1arun" kindref="member">run</ref>.
            <parameterlist kind="param"><parameteritem>
              <parameternamelist><parametername>count</parametername></parameternamelist>
              <parameterdescription><para>How many times.</para></parameterdescription>
            </parameteritem></parameterlist>
            <simplesect kind="return"><para>Nothing.</para></simplesect>
          </para>
        </detaileddescription>
        <location file="Foo.h" line="12"/>
      </memberdef>
      <memberdef kind="function" id="interface_foo_1asecret" prot="private" static="no">
        <type>void</type>
        <definition>- (void) secret</definition>
        <argsstring></argsstring>
        <name>secret</name>
      </memberdef>
    </sectiondef>
    <sectiondef kind="public-static-func">
      <memberdef kind="function" id="interface_foo_1acreate" prot="public" static="yes">
        <type>instancetype</type>
        <definition>+ (instancetype) create</definition>
        <argsstring></argsstring>
        <name>create</name>
        <briefdescription><para>Creates a <computeroutput>Foo</computeroutput>.</para></briefdescription>
      </memberdef>
    </sectiondef>
    <sectiondef kind="property">
      <memberdef kind="property" id="interface_foo_1aname" prot="public" static="no">
        <type>NSString *</type>
        <definition>NSString* Foo::name</definition>
        <argsstring></argsstring>
        <name>name</name>
      </memberdef>
      <memberdef kind="variable" id="interface_foo_1a_name" prot="protected" static="no">
        <type>NSString *</type>
        <name>_name</name>
      </memberdef>
    </sectiondef>
    <briefdescription><para>A foo.</para></briefdescription>
    <detaileddescription>
      <para>Works together with <ref refid="interface_qux" kindref="compound">Qux</ref>.</para>
      <para><simplesect kind="note"><para>Not thread safe.</para></simplesect></para>
    </detaileddescription>
    <location file="Foo.h" line="5"/>
    <listofallmembers>
      <member refid="interface_foo_1abar" prot="public" virt="non-virtual"><scope>Foo</scope><name>bar</name></member>
    </listofallmembers>
  </compounddef>
</doxygen>
"""

CATEGORY_XML = """<?xml version="1.0" encoding="UTF-8"?>
<doxygen version="1.9.8">
  <compounddef id="category_foo_07_extras_08" kind="category" language="Objective-C" prot="public">
    <compoundname>Foo(Extras)</compoundname>
    <sectiondef kind="public-func">
      <memberdef kind="function" id="category_foo_07_extras_08_1abaz" prot="public" static="no">
        <type>void</type>
        <definition>- (void) baz</definition>
        <argsstring></argsstring>
        <name>baz</name>
        <briefdescription><para>Calls <ref refid="interface_foo_1abar" kindref="member">bar</ref> twice.</para></briefdescription>
      </memberdef>
    </sectiondef>
    <briefdescription><para>Extra Foo behavior.</para></briefdescription>
    <detaileddescription></detaileddescription>
    <location file="Foo+Extras.h" line="3"/>
  </compounddef>
</doxygen>
"""

PROTOCOL_XML = """<?xml version="1.0" encoding="UTF-8"?>
<doxygen version="1.9.8">
  <compounddef id="protocol_fooing-p" kind="protocol" language="Objective-C" prot="public">
    <compoundname>Fooing-p</compoundname>
    <sectiondef kind="public-func">
      <memberdef kind="function" id="protocol_fooing-p_1afoo" prot="public" static="no">
        <type>void</type>
        <definition>- (void) foo</definition>
        <argsstring></argsstring>
        <name>foo</name>
        <briefdescription><para>Foos.</para></briefdescription>
      </memberdef>
    </sectiondef>
    <briefdescription><para>Things that foo.</para></briefdescription>
    <location file="Fooing.h" line="3"/>
  </compounddef>
</doxygen>
"""

QUX_XML = """<?xml version="1.0" encoding="UTF-8"?>
<doxygen version="1.9.8">
  <compounddef id="interface_qux" kind="class" language="Objective-C" prot="public">
    <compoundname>Qux</compoundname>
    <basecompoundref prot="public" virt="non-virtual">NSObject</basecompoundref>
    <sectiondef kind="public-func">
      <memberdef kind="function" id="interface_qux_1arun" prot="public" static="no">
        <type>void</type>
        <definition>- (void) run</definition>
        <argsstring></argsstring>
        <name>run</name>
        <briefdescription><para>Runs.</para></briefdescription>
      </memberdef>
    </sectiondef>
    <briefdescription><para>A qux.</para></briefdescription>
    <location file="Qux.h" line="3"/>
  </compounddef>
</doxygen>
"""

SAMPLE_FILES = {
    "index.xml": INDEX_XML,
    "interface_foo.xml": FOO_XML,
    "category_foo_07_extras_08.xml": CATEGORY_XML,
    "protocol_fooing-p.xml": PROTOCOL_XML,
    "interface_qux.xml": QUX_XML,
}


def write_xml_tree(directory: Path, files: dict[str, str]) -> Path:
    """Write raw doxygen XML files into directory and return it."""
    directory.mkdir(parents=True, exist_ok=True)
    for filename, content in files.items():
        (directory / filename).write_text(content, encoding="utf-8")
    return directory


def cleaned(xml: str, source: str = "test.xml") -> CleanedDocument:
    """Parse a cleaned-vocabulary snippet into a CleanedDocument."""
    return CleanedDocument(source, ET.fromstring(xml))


def build_database(*objects: str, hierarchy: str = "<hierarchy/>", index: str = "<index/>"):
    """Build a Database straight from cleaned object snippets (discovery order)."""
    normalized = NormalizedMarkup(
        index=cleaned(index, "index.xml"),
        hierarchy=cleaned(hierarchy, "hierarchy.xml"),
        entities=[cleaned(obj, f"object{i}.xml") for i, obj in enumerate(objects)],
    )
    return DatabaseBuilder(".html").build(normalized)


@pytest.fixture
def sample_files():
    """Copy of the sample file mapping, safe to modify per test."""
    return dict(SAMPLE_FILES)


@pytest.fixture
def xml_dir(tmp_path):
    """Raw doxygen XML directory for the sample project."""
    return write_xml_tree(tmp_path / "xml", SAMPLE_FILES)


@pytest.fixture
def make_config(tmp_path):
    """Factory for ConversionConfig rooted in tmp_path."""
    def _make(input_dir=None, **overrides):
        values = {
            "input_dir": input_dir or tmp_path / "xml",
            "output_dir": tmp_path / "docs",
            "workers": 1,
            "project_name": "Sample",
            "bundle_id": "org.example.sample",
        }
        values.update(overrides)
        return ConversionConfig(**values)
    return _make


@pytest.fixture
def isolated_cwd(tmp_path, monkeypatch):
    """Run in tmp_path with no DOXYSET_* configuration leaking in."""
    for key in list(os.environ):
        if key.startswith("DOXYSET_") and not key.startswith("DOXYSET_LOG"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def foreign_ref_dir(tmp_path, sample_files):
    """Sample project whose Qux brief references things that are not entity members.

    The targets are a header file, a C function declared in it, an enum of Foo,
    a private method of Foo missing from the index and an unindexed class.
    """
    sample_files["index.xml"] = sample_files["index.xml"].replace(
        '<member refid="interface_foo_1aname" kind="property"><name>name</name></member>',
        '<member refid="interface_foo_1aname" kind="property"><name>name</name></member>\n'
        '    <member refid="interface_foo_1akind" kind="enum"><name>Kind</name></member>',
    ).replace(
        '<compound refid="_foo_8h" kind="file"><name>Foo.h</name></compound>',
        '<compound refid="_foo_8h" kind="file"><name>Foo.h</name>\n'
        '    <member refid="_foo_8h_1afoomake" kind="function"><name>FooMake</name></member>\n'
        "  </compound>",
    )
    sample_files["interface_qux.xml"] = sample_files["interface_qux.xml"].replace(
        "<para>A qux.</para>",
        '<para>See <ref refid="_foo_8h" kindref="compound">Foo.h</ref>, '
        '<ref refid="_foo_8h_1afoomake" kindref="member">FooMake</ref>, '
        '<ref refid="interface_foo_1akind" kindref="member">Kind</ref>, '
        '<ref refid="interface_foo_1asecret" kindref="member">secret</ref> and '
        '<ref refid="interface_zap" kindref="compound">Zap</ref>.</para>',
    )
    return write_xml_tree(tmp_path / "xml", sample_files)
