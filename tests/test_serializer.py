import os
import sys
import unittest

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

from wrangler.errors import IncompleteExtensionError
from wrangler.records import (
    CommandRecord, ExtensionRecord, MemberRecord, OffsetEnumRecord, TypeRecord,
    ValueEnumRecord,
)
from wrangler.serializer import (
    COMMANDS_MARKER, EXTENSIONS_MARKER, TYPES_MARKER, render_command,
    render_enum, render_extension, render_sections, render_type,
)


def make_record(path="/work/XR_ACME_thing.h", name="XR_ACME_thing", ext=123):
    record = ExtensionRecord(header_path=path)
    record.add_enum(ValueEnumRecord(value="1", name=f"{name}_SPEC_VERSION"))
    record.set_extension_name(name)
    record.adopt_extension_id(ext)
    record.add_enum(OffsetEnumRecord(offset=0, extends="XrStructureType", name="XR_TYPE_THING_ACME"))
    record.add_command(CommandRecord(
        name="xrGetThingACME", return_type="XrResult",
        params=[MemberRecord(type_markup="<type>XrSession</type>", name="session")],
    ))
    record.add_type(TypeRecord(
        name="XrThingACME",
        members=[MemberRecord(type_markup="<type>uint32_t</type>", name="count")],
    ))
    return record


class TestRenderers(unittest.TestCase):

    def test_render_command(self):
        command = CommandRecord(name="xrDoACME", return_type="XrResult", params=[
            MemberRecord(type_markup="<type>XrSession</type>", name="session"),
            MemberRecord(type_markup="const <type>char</type>*", name="label"),
        ])
        self.assertEqual(render_command(command), [
            '<command successcodes="XR_SUCCESS" errorcodes="XR_ERROR_FUNCTION_UNSUPPORTED">',
            "<proto><type>XrResult</type><name>xrDoACME</name></proto>",
            "<param><type>XrSession</type><name>session</name></param>",
            "<param>const <type>char</type>*<name>label</name></param>",
            "</command>",
        ])

    def test_render_type(self):
        type_record = TypeRecord(name="XrThingACME", members=[
            MemberRecord(type_markup="<type>void</type>*", name="next"),
        ])
        self.assertEqual(render_type(type_record), [
            '<type category="struct" name="XrThingACME">',
            "<member><type>void</type>* <name>next</name></member>",
            "</type>",
        ])

    def test_render_enums(self):
        self.assertEqual(
            render_enum(OffsetEnumRecord(offset=4, extends="XrResult", name="XR_ERROR_X")),
            '<enum offset="4" extends="XrResult" name="XR_ERROR_X"/>',
        )
        self.assertEqual(
            render_enum(ValueEnumRecord(value="2", name="XR_X_SPEC_VERSION")),
            '<enum value="2" name="XR_X_SPEC_VERSION"/>',
        )

    def test_render_extension(self):
        self.assertEqual(render_extension(make_record()), [
            '<extension name="XR_ACME_thing" number="123" type="instance" supported="openxr">',
            "<require>",
            '<enum value="1" name="XR_ACME_thing_SPEC_VERSION"/>',
            '<enum offset="0" extends="XrStructureType" name="XR_TYPE_THING_ACME"/>',
            '<command name="xrGetThingACME"/>',
            '<type name="XrThingACME"/>',
            "</require>",
            "</extension>",
        ])

    def test_incomplete_extension_not_rendered(self):
        record = ExtensionRecord(header_path="/work/XR_X.h")
        record.set_extension_name("XR_X")
        with self.assertRaises(IncompleteExtensionError):
            render_extension(record)


class TestRenderSections(unittest.TestCase):

    def test_section_order_and_separators(self):
        first = make_record()
        second = make_record("/work/XR_ACME_other.h", "XR_ACME_other", 124)
        text = render_sections([first, second])
        lines = text.splitlines()

        self.assertTrue(text.endswith("</extension>\n"))
        self.assertEqual(lines[0], COMMANDS_MARKER)
        self.assertLess(lines.index(COMMANDS_MARKER), lines.index(TYPES_MARKER))
        self.assertLess(lines.index(TYPES_MARKER), lines.index(EXTENSIONS_MARKER))
        self.assertEqual(lines[lines.index(TYPES_MARKER) - 1], "")
        self.assertEqual(lines[lines.index(EXTENSIONS_MARKER) - 1], "")
        self.assertEqual(lines.count("<!-- XR_ACME_thing.h -->"), 3)
        self.assertEqual(lines.count("<!-- XR_ACME_other.h -->"), 3)
        self.assertLess(text.index('name="XR_ACME_thing"'), text.index('name="XR_ACME_other"'))

    def test_empty_file_still_has_separators(self):
        record = ExtensionRecord(header_path="/work/XR_ACME_bare.h")
        record.set_extension_name("XR_ACME_bare")
        record.adopt_extension_id(5)
        self.assertEqual(render_sections([record]), "\n".join([
            COMMANDS_MARKER,
            "<!-- XR_ACME_bare.h -->",
            "",
            TYPES_MARKER,
            "<!-- XR_ACME_bare.h -->",
            "",
            EXTENSIONS_MARKER,
            "<!-- XR_ACME_bare.h -->",
            '<extension name="XR_ACME_bare" number="5" type="instance" supported="openxr">',
            "<require>",
            "</require>",
            "</extension>",
        ]) + "\n")


if __name__ == "__main__":
    unittest.main()
