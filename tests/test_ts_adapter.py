"""
Tree-sitter adapter tests:
  1. Macro tokenisation
  2. Constant folding over parsed initializers
  3. Entity shapes produced for a real extension header
"""

import os
import sys
import unittest

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

from wrangler.ast_model import EntityKind, ResultKind, TypeKind
from wrangler.config import WranglerConfig
from wrangler.ts_adapter import (
    ConstantEvaluator, TreeSitterHeaderParser, _parser, tokenize_macro,
)

MOCK_HEADERS = os.path.join(PROJECT_ROOT, "tests", "mock_headers")
THING_H = os.path.join(MOCK_HEADERS, "XR_ACME_thing.h")


class TestTokenizeMacro(unittest.TestCase):

    def test_number(self):
        self.assertEqual(tokenize_macro("XR_FOO_SPEC_VERSION 3\n"), ["XR_FOO_SPEC_VERSION", "3"])

    def test_string_literal_is_one_token(self):
        self.assertEqual(
            tokenize_macro('XR_FOO_EXTENSION_NAME "XR_FOO bar"'),
            ["XR_FOO_EXTENSION_NAME", '"XR_FOO bar"'],
        )

    def test_comments_dropped(self):
        self.assertEqual(tokenize_macro("A 1 /* one */ // trailing"), ["A", "1"])

    def test_line_continuation(self):
        self.assertEqual(tokenize_macro("A \\\n  (1 + 2)"), ["A", "(", "1", "+", "2", ")"])

    def test_function_like(self):
        self.assertEqual(
            tokenize_macro("XR_MAKE_VERSION(a, b) ((a) << 16)"),
            ["XR_MAKE_VERSION", "(", "a", ",", "b", ")", "(", "(", "a", ")", "<<", "16", ")"],
        )

    def test_suffixed_number(self):
        self.assertEqual(tokenize_macro("X 0x1000ULL"), ["X", "0x1000ULL"])


class TestConstantEvaluator(unittest.TestCase):

    def evaluate(self, expression, known=None):
        source = f"int probe = {expression};\n".encode("utf-8")
        tree = _parser.parse(source)
        declaration = tree.root_node.named_children[0]
        init = declaration.child_by_field_name("declarator")
        evaluator = ConstantEvaluator(source)
        evaluator.known.update(known or {})
        return evaluator.evaluate(init.child_by_field_name("value"))

    def assertSigned(self, expression, value):
        result = self.evaluate(expression)
        self.assertIsNotNone(result, expression)
        self.assertIs(result.kind, ResultKind.SIGNED_INTEGER, expression)
        self.assertEqual(result.value, value, expression)

    def test_decimal_literal(self):
        self.assertSigned("1000123000", 1000123000)

    def test_cast_is_transparent(self):
        self.assertSigned("(XrStructureType) 1000123000", 1000123000)

    def test_arithmetic(self):
        self.assertSigned("1000000000 + 123 * 1000 + 4", 1000123004)
        self.assertSigned("(1 << 4) | 1", 17)
        self.assertSigned("-(5)", -5)

    def test_division_truncates(self):
        self.assertSigned("-7 / 2", -3)
        self.assertSigned("-7 % 2", -1)

    def test_conditional(self):
        self.assertSigned("1 ? 2 : 3", 2)
        self.assertSigned("0 ? 2 : 3", 3)

    def test_char_literal(self):
        self.assertSigned("'A'", 65)

    def test_hex_above_int_max_is_unsigned(self):
        result = self.evaluate("0x80000000")
        self.assertIs(result.kind, ResultKind.UNSIGNED_INTEGER)
        self.assertEqual(result.value, 0x80000000)

    def test_unsigned_suffix(self):
        self.assertIs(self.evaluate("5u").kind, ResultKind.UNSIGNED_INTEGER)
        self.assertIs(self.evaluate("5ULL").kind, ResultKind.UNSIGNED_INTEGER)

    def test_float_not_evaluated(self):
        self.assertIsNone(self.evaluate("1.5f"))

    def test_division_by_zero_not_evaluated(self):
        self.assertIsNone(self.evaluate("1 / 0"))

    def test_identifier_lookup(self):
        from wrangler.ast_model import EvaluationResult
        known = {"XR_BASE": EvaluationResult(ResultKind.SIGNED_INTEGER, 1000123000)}
        result = self.evaluate("XR_BASE + 2", known)
        self.assertEqual(result.value, 1000123002)
        self.assertIsNone(self.evaluate("UNKNOWN + 2"))


class TestHeaderParser(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.entities = TreeSitterHeaderParser(WranglerConfig()).parse(THING_H)
        cls.own = [
            e for e in cls.entities
            if e.location is not None
            and os.path.realpath(e.location.file) == os.path.realpath(THING_H)
        ]

    def by_name(self, name):
        for entity in self.entities:
            if entity.display_name == name:
                return entity
        self.fail(f"no entity named {name}")

    def test_included_declarations_are_located_in_included_file(self):
        common = self.by_name("XR_TYPE_ACME_COMMON_ACME")
        self.assertEqual(os.path.basename(common.location.file), "acme_common.h")
        self.assertNotIn(common, self.own)

    def test_macros_from_header_only(self):
        macros = [e.display_name for e in self.entities if e.kind is EntityKind.MACRO]
        self.assertIn("XR_ACME_thing_SPEC_VERSION", macros)
        self.assertIn("XR_ACME_THING_EXTENSION_NAME", macros)
        self.assertNotIn("XR_ACME_common_SPEC_VERSION", macros)

    def test_inactive_macro_skipped(self):
        macros = [e.display_name for e in self.entities if e.kind is EntityKind.MACRO]
        self.assertNotIn("XR_ACME_DEAD_EXTENSION_NAME", macros)

    def test_macro_entity(self):
        macro = self.by_name("XR_ACME_THING_EXTENSION_NAME")
        self.assertEqual(macro.location.line, 9)
        self.assertEqual(macro.get_tokens(), ["XR_ACME_THING_EXTENSION_NAME", '"XR_ACME_thing"'])

    def test_header_order(self):
        names = [e.display_name for e in self.own
                 if e.kind in (EntityKind.MACRO, EntityKind.VARIABLE)]
        self.assertLess(names.index("XR_ACME_thing_SPEC_VERSION"),
                        names.index("XR_TYPE_ACME_THING_PROPERTIES_ACME"))
        self.assertLess(names.index("XR_TYPE_ACME_THING_PROPERTIES_ACME"),
                        names.index("XR_TYPE_ACME_THING_INFO_ACME"))

    def test_variable_shape(self):
        var = self.by_name("XR_TYPE_ACME_THING_PROPERTIES_ACME")
        self.assertIs(var.kind, EntityKind.VARIABLE)
        type_ref, initializer = var.get_children()
        self.assertIs(type_ref.kind, EntityKind.TYPE_REF)
        self.assertEqual(type_ref.display_name, "XrStructureType")
        self.assertIs(initializer.kind, EntityKind.EXPRESSION)
        result = initializer.get_children()[-1].evaluate()
        self.assertEqual(result.kind, ResultKind.SIGNED_INTEGER)
        self.assertEqual(result.value, 1000123000)

    def test_bare_literal_initializer(self):
        var = self.by_name("XR_TYPE_ACME_THING_INFO_ACME")
        result = var.get_children()[-1].get_children()[-1].evaluate()
        self.assertEqual(result.value, 1000123001)

    def test_float_initializer_does_not_evaluate(self):
        var = self.by_name("XR_ACME_THING_SCALE")
        self.assertIsNone(var.get_children()[-1].get_children()[-1].evaluate())

    def test_struct_typedef(self):
        typedef = self.by_name("XrAcmeThingPropertiesACME")
        self.assertIs(typedef.kind, EntityKind.TYPEDEF)
        ty = typedef.get_underlying_type()
        self.assertIs(ty.kind, TypeKind.ELABORATED)
        self.assertEqual(ty.display_name, "struct XrAcmeThingPropertiesACME")
        fields = ty.get_fields()
        self.assertEqual([f.display_name for f in fields],
                         ["type", "next", "thingCount", "thingNames", "weights"])
        self.assertTrue(all(f.kind is EntityKind.FIELD for f in fields))

    def test_const_pointer_field(self):
        fields = self.by_name("XrAcmeThingPropertiesACME").get_underlying_type().get_fields()
        thing_names = fields[3].get_type()
        self.assertIs(thing_names.kind, TypeKind.POINTER)
        self.assertFalse(thing_names.is_const)
        inner = thing_names.get_pointee()
        self.assertIs(inner.kind, TypeKind.POINTER)
        self.assertTrue(inner.is_const)
        self.assertTrue(inner.get_pointee().is_const)
        self.assertEqual(inner.get_pointee().display_name, "const char")

    def test_anonymous_struct_takes_typedef_name(self):
        ty = self.by_name("XrAcmeVector2fACME").get_underlying_type()
        self.assertEqual(ty.display_name, "struct XrAcmeVector2fACME")
        self.assertEqual([f.display_name for f in ty.get_fields()], ["x", "y"])

    def test_scalar_typedef(self):
        ty = self.by_name("XrAcmeThingFlagsACME").get_underlying_type()
        self.assertIs(ty.kind, TypeKind.SCALAR)
        self.assertEqual(ty.display_name, "uint64_t")

    def test_function_pointer_typedef(self):
        typedef = self.by_name("PFN_xrEnumerateAcmeThingsACME")
        ty = typedef.get_underlying_type()
        self.assertIs(ty.kind, TypeKind.POINTER)
        proto = ty.get_pointee()
        self.assertIs(proto.kind, TypeKind.FUNCTION_PROTO)
        self.assertEqual(proto.get_result_type().display_name, "XrResult")
        self.assertEqual(len(proto.get_argument_types()), 4)

        children = typedef.get_children()
        self.assertIs(children[0].kind, EntityKind.TYPE_REF)
        self.assertEqual(children[0].display_name, "XrResult")
        self.assertEqual([c.display_name for c in children[1:]],
                         ["session", "capacityInput", "countOutput", "names"])
        self.assertTrue(all(c.kind is EntityKind.PARAMETER for c in children[1:]))

    def test_inactive_prototype_absent(self):
        names = [e.display_name for e in self.entities]
        self.assertNotIn("xrGetAcmeThingPropertiesACME", names)

    def test_missing_header_raises(self):
        from wrangler.errors import HeaderParseError
        with self.assertRaises(HeaderParseError):
            TreeSitterHeaderParser().parse(os.path.join(MOCK_HEADERS, "nope.h"))


if __name__ == "__main__":
    unittest.main()
