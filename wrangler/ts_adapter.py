"""
Tree-sitter AST provider — turns one C header into ``Entity`` objects.

Pipeline per header:
  • pcpp expands the header (includes, conditionals, calling-convention
    macros) and records where every expanded line came from
  • tree-sitter-c parses the expanded text; each top-level typedef and
    variable declaration becomes an Entity located via the pcpp line map
  • the raw header is parsed a second time for its ``#define``s, since
    pcpp consumes them; only macros pcpp left defined are kept
  • macros are merged into the declaration stream by line, so entities
    come out in header order

Types are rebuilt from declarators (pointer / function / array nesting and
const qualifiers) and integer constant expressions are folded by
``ConstantEvaluator``.
"""

import os
import re
import logging
from typing import Callable, Dict, List, Optional, Tuple

import tree_sitter_c as tsc
from tree_sitter import Language, Parser, Node

from .ast_model import (
    Entity, EntityKind, EvaluationResult, ResultKind, SourceLocation,
    TypeKind, TypeRef,
)
from .config import WranglerConfig
from .errors import HeaderParseError
from .preprocessor import PreprocessorEngine

logger = logging.getLogger(__name__)

C_LANGUAGE = Language(tsc.language())
_parser = Parser(C_LANGUAGE)

# Node types that are preprocessor / linkage containers we recurse into
_CONTAINERS = {
    "translation_unit", "preproc_ifdef", "preproc_if", "preproc_elif",
    "preproc_elifdef", "preproc_else", "linkage_specification",
    "declaration_list",
}

_TAG_SPECIFIERS = {
    "struct_specifier": "struct",
    "union_specifier": "union",
    "enum_specifier": "enum",
}

_IDENTIFIER_TYPES = {"identifier", "type_identifier", "field_identifier"}
_DECLARATOR_ROLES = ("pointer", "function", "array", "parenthesized", "attributed")

_TOKEN_RE = re.compile(r'''
    (?P<comment>//[^\n]*|/\*.*?\*/)
  | (?P<token>
        [uUL]?"(?:\\.|[^"\\])*"          # string literal
      | [uUL]?'(?:\\.|[^'\\])*'          # character literal
      | \.?\d(?:[eEpP][+-]|[\w.])*       # pp-number
      | [A-Za-z_]\w*                     # identifier
      | \.\.\.|<<=|>>=|->|\+\+|--|<<|>>|<=|>=|==|!=|&&|\|\||\#\#
      | [-+*/%&|^!~<>=?:;,.()\[\]{}\#]
    )
''', re.VERBOSE | re.DOTALL)


def _node_text(node: Node, source: bytes) -> str:
    return source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")


def _squash(text: str) -> str:
    return " ".join(text.split())


def _walk_type(node: Node, type_name: str):
    """Yield all descendant nodes of a given type."""
    cursor = node.walk()
    visited = False
    while True:
        if not visited and cursor.node.type == type_name:
            yield cursor.node
        if not visited and cursor.goto_first_child():
            visited = False
            continue
        if cursor.goto_next_sibling():
            visited = False
            continue
        if cursor.goto_parent():
            visited = True
            continue
        break


def tokenize_macro(text: str) -> List[str]:
    """Split macro definition text into C token spellings (comments dropped)."""
    text = re.sub(r"\\\r?\n", " ", text)
    return [m.group("token") for m in _TOKEN_RE.finditer(text) if m.group("token")]


def _declarator_role(node_type: str) -> Optional[str]:
    # pointer_declarator, pointer_type_declarator, abstract_pointer_declarator, ...
    if node_type in _IDENTIFIER_TYPES:
        return "identifier"
    for role in _DECLARATOR_ROLES:
        if node_type.startswith(role + "_") or node_type.startswith("abstract_" + role + "_"):
            return role
    return None


def _has_const(node: Node, source: bytes) -> bool:
    return any(
        c.type == "type_qualifier" and _node_text(c, source) == "const"
        for c in node.children
    )


# ═══════════════════════════════════════════════════════════════════════
#  Types
# ═══════════════════════════════════════════════════════════════════════

class TSType(TypeRef):
    """A C type rebuilt from tree-sitter declaration specifiers and declarators."""

    def __init__(self, kind: TypeKind, display_name: str, is_const: bool = False,
                 pointee: Optional["TSType"] = None,
                 result: Optional["TSType"] = None,
                 parameters: Optional[List[Tuple[Optional[str], "TSType"]]] = None,
                 fields: Optional[List["TSEntity"]] = None):
        self._kind = kind
        self._display_name = display_name
        self._is_const = is_const
        self._pointee = pointee
        self._result = result
        self._parameters = parameters
        self._fields = fields

    @classmethod
    def scalar(cls, name: str, is_const: bool = False) -> "TSType":
        return cls(TypeKind.SCALAR, ("const " if is_const else "") + name, is_const)

    @classmethod
    def elaborated(cls, spelling: str, is_const: bool = False,
                   fields: Optional[List["TSEntity"]] = None) -> "TSType":
        return cls(TypeKind.ELABORATED, ("const " if is_const else "") + spelling,
                   is_const, fields=fields)

    @classmethod
    def pointer(cls, pointee: "TSType", is_const: bool = False) -> "TSType":
        if pointee.kind is TypeKind.FUNCTION_PROTO:
            args = ", ".join(t.display_name for t in pointee.get_argument_types())
            name = f"{pointee.get_result_type().display_name} (*)({args})"
        else:
            base = pointee.display_name
            name = base + ("*" if base.endswith("*") else " *")
        if is_const:
            name += "const"
        return cls(TypeKind.POINTER, name, is_const, pointee=pointee)

    @classmethod
    def function(cls, result: "TSType",
                 parameters: List[Tuple[Optional[str], "TSType"]]) -> "TSType":
        args = ", ".join(t.display_name for _, t in parameters)
        return cls(TypeKind.FUNCTION_PROTO, f"{result.display_name} ({args})",
                   result=result, parameters=parameters)

    @classmethod
    def array(cls, element: "TSType", size: str) -> "TSType":
        return cls(TypeKind.OTHER, f"{element.display_name}[{size}]", element.is_const)

    @property
    def kind(self) -> TypeKind:
        return self._kind

    @property
    def display_name(self) -> str:
        return self._display_name

    @property
    def is_const(self) -> bool:
        return self._is_const

    @property
    def parameter_names(self) -> List[Optional[str]]:
        return [name for name, _ in (self._parameters or [])]

    def get_pointee(self) -> Optional[TypeRef]:
        return self._pointee

    def get_result_type(self) -> Optional[TypeRef]:
        return self._result

    def get_argument_types(self) -> Optional[List[TypeRef]]:
        if self._parameters is None:
            return None
        return [t for _, t in self._parameters]

    def get_fields(self) -> Optional[List[Entity]]:
        return self._fields

    def __repr__(self):
        return f"TSType({self._kind.value}, {self._display_name!r})"


# ═══════════════════════════════════════════════════════════════════════
#  Entities
# ═══════════════════════════════════════════════════════════════════════

class TSEntity(Entity):
    """A declaration, expression or macro produced by the tree-sitter adapter."""

    def __init__(self, kind: EntityKind, display_name: Optional[str] = None,
                 location: Optional[SourceLocation] = None,
                 children: Optional[List[Entity]] = None,
                 type_: Optional[TypeRef] = None,
                 underlying_type: Optional[TypeRef] = None,
                 tokens: Optional[List[str]] = None,
                 evaluator: Optional[Callable[[], Optional[EvaluationResult]]] = None):
        self._kind = kind
        self._display_name = display_name
        self._location = location
        self._children = children or []
        self._type = type_
        self._underlying_type = underlying_type
        self._tokens = tokens or []
        self._evaluator = evaluator

    @property
    def kind(self) -> EntityKind:
        return self._kind

    @property
    def display_name(self) -> Optional[str]:
        return self._display_name

    @property
    def location(self) -> Optional[SourceLocation]:
        return self._location

    def get_children(self) -> List[Entity]:
        return list(self._children)

    def get_type(self) -> Optional[TypeRef]:
        return self._type

    def get_underlying_type(self) -> Optional[TypeRef]:
        return self._underlying_type

    def evaluate(self) -> Optional[EvaluationResult]:
        if self._evaluator is None:
            return None
        return self._evaluator()

    def get_tokens(self) -> List[str]:
        return list(self._tokens)

    def __repr__(self):
        return f"TSEntity({self._kind.value}, {self._display_name!r}, {self._location})"


# ═══════════════════════════════════════════════════════════════════════
#  Constant folding
# ═══════════════════════════════════════════════════════════════════════

_INT_MAX = 2 ** 31 - 1
_UINT_MAX = 2 ** 32 - 1
_LONG_MAX = 2 ** 63 - 1
_ULONG_MASK = 2 ** 64 - 1

_INT_LITERAL_RE = re.compile(
    r"(0[xX][0-9a-fA-F]+|0[bB][01]+|0[0-7]*|[1-9][0-9]*)([uUlL]*)"
)

_SIMPLE_ESCAPES = {
    "n": 10, "t": 9, "r": 13, "0": 0, "\\": 92, "'": 39, '"': 34,
    "a": 7, "b": 8, "f": 12, "v": 11, "?": 63,
}


class ConstantEvaluator:
    """
    Folds C integer constant expressions over a tree-sitter tree.

    Identifiers resolve against ``known`` — constants and enumerators the
    adapter has already evaluated in the same translation unit.
    """

    def __init__(self, source: bytes):
        self.source = source
        self.known: Dict[str, EvaluationResult] = {}

    def evaluate(self, node: Node) -> Optional[EvaluationResult]:
        result = self._eval(node)
        if result is None:
            return None
        value, unsigned = result
        if unsigned:
            return EvaluationResult(ResultKind.UNSIGNED_INTEGER, value & _ULONG_MASK)
        return EvaluationResult(ResultKind.SIGNED_INTEGER, value)

    def _eval(self, node: Optional[Node]) -> Optional[Tuple[int, bool]]:
        if node is None:
            return None
        kind = node.type

        if kind == "number_literal":
            return self._parse_number(_node_text(node, self.source))

        if kind == "char_literal":
            return self._parse_char(_node_text(node, self.source))

        if kind == "identifier":
            known = self.known.get(_node_text(node, self.source))
            if known is None:
                return None
            return known.value, known.kind is ResultKind.UNSIGNED_INTEGER

        if kind == "parenthesized_expression":
            inner = [c for c in node.named_children if c.type != "comment"]
            return self._eval(inner[0]) if len(inner) == 1 else None

        if kind == "cast_expression":
            # The target type is not modelled; a cast is transparent.
            return self._eval(node.child_by_field_name("value"))

        if kind == "unary_expression":
            operand = self._eval(node.child_by_field_name("argument"))
            if operand is None:
                return None
            op = _node_text(node.child_by_field_name("operator"), self.source)
            value, unsigned = operand
            if op == "-":
                return -value, unsigned
            if op == "+":
                return value, unsigned
            if op == "~":
                return ~value, unsigned
            if op == "!":
                return int(not value), False
            return None

        if kind == "binary_expression":
            return self._eval_binary(node)

        if kind == "conditional_expression":
            cond = self._eval(node.child_by_field_name("condition"))
            if cond is None:
                return None
            branch = "consequence" if cond[0] else "alternative"
            return self._eval(node.child_by_field_name(branch))

        return None

    def _eval_binary(self, node: Node) -> Optional[Tuple[int, bool]]:
        left = self._eval(node.child_by_field_name("left"))
        right = self._eval(node.child_by_field_name("right"))
        if left is None or right is None:
            return None
        op = _node_text(node.child_by_field_name("operator"), self.source)
        a, b = left[0], right[0]
        unsigned = left[1] or right[1]

        if op in ("/", "%"):
            if b == 0:
                return None
            q = abs(a) // abs(b)
            if (a < 0) != (b < 0):
                q = -q
            return (q if op == "/" else a - q * b), unsigned

        arithmetic = {
            "+": lambda: a + b,
            "-": lambda: a - b,
            "*": lambda: a * b,
            "&": lambda: a & b,
            "|": lambda: a | b,
            "^": lambda: a ^ b,
        }
        if op in arithmetic:
            return arithmetic[op](), unsigned
        if op in ("<<", ">>"):
            if b < 0:
                return None
            return (a << b if op == "<<" else a >> b), left[1]

        logical = {
            "==": lambda: a == b,
            "!=": lambda: a != b,
            "<": lambda: a < b,
            ">": lambda: a > b,
            "<=": lambda: a <= b,
            ">=": lambda: a >= b,
            "&&": lambda: bool(a) and bool(b),
            "||": lambda: bool(a) or bool(b),
        }
        if op in logical:
            return int(logical[op]()), False
        return None

    @classmethod
    def _parse_number(cls, text: str) -> Optional[Tuple[int, bool]]:
        text = text.replace("'", "")
        # tree-sitter-c lexes a sign directly before digits into the literal
        if text[:1] in ("-", "+"):
            parsed = cls._parse_number(text[1:])
            if parsed is None or text[0] == "+":
                return parsed
            return -parsed[0], parsed[1]
        m = _INT_LITERAL_RE.fullmatch(text)
        if m is None:
            return None  # floating point or malformed
        digits, suffix = m.group(1), m.group(2).lower()
        if suffix.count("u") > 1 or suffix.replace("u", "") not in ("", "l", "ll"):
            return None

        decimal = not digits.startswith("0") or digits == "0"
        if digits[:2].lower() == "0x":
            value = int(digits[2:], 16)
        elif digits[:2].lower() == "0b":
            value = int(digits[2:], 2)
        elif decimal:
            value = int(digits, 10)
        else:
            value = int(digits, 8)

        if "u" in suffix:
            return value, True
        if decimal:
            return value, value > _LONG_MAX
        # Hex/octal literals take the first of int, unsigned int, long,
        # unsigned long that can hold them.
        if value <= _INT_MAX and "l" not in suffix:
            return value, False
        if value <= _UINT_MAX and "l" not in suffix:
            return value, True
        return value, value > _LONG_MAX

    @staticmethod
    def _parse_char(text: str) -> Optional[Tuple[int, bool]]:
        if len(text) < 3 or not text.startswith("'") or not text.endswith("'"):
            return None
        body = text[1:-1]
        if len(body) == 1:
            return ord(body), False
        if len(body) == 2 and body[0] == "\\" and body[1] in _SIMPLE_ESCAPES:
            return _SIMPLE_ESCAPES[body[1]], False
        return None


# ═══════════════════════════════════════════════════════════════════════
#  Header parser
# ═══════════════════════════════════════════════════════════════════════

class TreeSitterHeaderParser:
    """
    AST provider built on pcpp + tree-sitter-c.

    The tree-sitter parser is shared by every header; preprocessing state
    is rebuilt per header.

    Usage:
        provider = TreeSitterHeaderParser(WranglerConfig())
        for entity in provider.parse("XR_ACME_thing.h"):
            ...
    """

    def __init__(self, config: Optional[WranglerConfig] = None):
        self.config = config or WranglerConfig()

    def _new_preprocessor(self) -> PreprocessorEngine:
        return PreprocessorEngine(self.config.include_dirs, self.config.defines)

    def parse(self, file_path: str) -> List[Entity]:
        """Return the top-level entities of a header, in declaration order.

        Entities that originate from included headers are returned too; their
        location names the included file.
        """
        header = os.path.realpath(file_path)
        preprocessor = self._new_preprocessor()
        expanded, _ = preprocessor.preprocess(header)
        tree = _parser.parse(expanded)
        if tree.root_node.has_error:
            logger.warning("%s: syntax errors after preprocessing; unparsable "
                           "declarations are ignored", file_path)

        builder = _EntityBuilder(expanded, header, preprocessor)
        declarations = builder.build(tree.root_node)
        macros = self._macros(header, preprocessor.get_defined_macros(header))
        entities = self._merge(declarations, macros, header)
        logger.info("%s: %d declarations, %d macros", file_path,
                    len(declarations), len(macros))
        return entities

    def _macros(self, header: str, defined: Dict[str, str]) -> List[TSEntity]:
        try:
            with open(header, "rb") as f:
                source = f.read()
        except OSError as e:
            raise HeaderParseError(f"Cannot read {header}: {e}") from e

        tree = _parser.parse(source)
        nodes = list(_walk_type(tree.root_node, "preproc_def"))
        nodes += list(_walk_type(tree.root_node, "preproc_function_def"))
        nodes.sort(key=lambda n: n.start_byte)

        macros = []
        for node in nodes:
            name_node = node.child_by_field_name("name")
            if name_node is None:
                continue
            name = _node_text(name_node, source)
            # Definitions in inactive #if branches never reach pcpp's table.
            if name not in defined:
                logger.debug("Skipping inactive macro %s", name)
                continue
            text = source[name_node.start_byte:node.end_byte].decode("utf-8", errors="replace")
            macros.append(TSEntity(
                EntityKind.MACRO, name,
                SourceLocation(header, node.start_point[0] + 1, node.start_point[1] + 1),
                tokens=tokenize_macro(text),
            ))
        return macros

    @staticmethod
    def _merge(declarations: List[TSEntity], macros: List[TSEntity], header: str) -> List[Entity]:
        """Interleave macros with the header's own declarations by line."""
        merged: List[Entity] = []
        pending = list(macros)
        for decl in declarations:
            loc = decl.location
            if loc is not None and os.path.realpath(loc.file) == header:
                while pending and pending[0].location.line <= loc.line:
                    merged.append(pending.pop(0))
            merged.append(decl)
        merged.extend(pending)
        return merged


class _EntityBuilder:
    """Builds entities for the top-level declarations of one expanded tree."""

    def __init__(self, source: bytes, header: str, preprocessor: PreprocessorEngine):
        self.source = source
        self.header = header
        self.preprocessor = preprocessor
        self.evaluator = ConstantEvaluator(source)

    def build(self, root: Node) -> List[TSEntity]:
        self._collect_enumerators(root)
        entities: List[TSEntity] = []
        self._walk(root, entities)
        return entities

    def _walk(self, node: Node, out: List[TSEntity]):
        for child in node.children:
            if child.type in _CONTAINERS:
                self._walk(child, out)
            elif child.type == "type_definition":
                out.extend(self._typedefs(child))
            elif child.type == "declaration":
                out.extend(self._declarations(child))
            elif child.is_named and child.type != "comment":
                out.append(TSEntity(EntityKind.OTHER, child.type, self._location(child)))

    def _text(self, node: Node) -> str:
        return _node_text(node, self.source)

    def _location(self, node: Node) -> SourceLocation:
        orig_file, orig_line = self.preprocessor.get_original_location(
            self.header, node.start_point[0] + 1
        )
        return SourceLocation(orig_file, orig_line, node.start_point[1] + 1)

    # ── Enumerators ──

    def _collect_enumerators(self, root: Node):
        """Record enumerator values so initializers may refer to them."""
        for body in _walk_type(root, "enumerator_list"):
            next_value: Optional[EvaluationResult] = EvaluationResult(ResultKind.SIGNED_INTEGER, 0)
            for child in body.named_children:
                if child.type != "enumerator":
                    continue
                name_node = child.child_by_field_name("name")
                value_node = child.child_by_field_name("value")
                value = self.evaluator.evaluate(value_node) if value_node is not None else next_value
                if name_node is not None and value is not None:
                    self.evaluator.known[self._text(name_node)] = value
                next_value = (
                    EvaluationResult(value.kind, value.value + 1) if value is not None else None
                )

    # ── Types ──

    def _base_type(self, decl: Node) -> TSType:
        """Type named by the declaration specifiers of ``decl``."""
        spec = decl.child_by_field_name("type")
        is_const = _has_const(decl, self.source)
        if spec is None:
            return TSType.scalar("int", is_const)

        keyword = _TAG_SPECIFIERS.get(spec.type)
        if keyword is None:
            return TSType.scalar(_squash(self._text(spec)), is_const)

        name_node = spec.child_by_field_name("name")
        body = spec.child_by_field_name("body")
        tag = self._text(name_node) if name_node is not None else self._anonymous_tag(decl)
        fields = None
        if keyword != "enum" and body is not None:
            fields = self._fields(body)
        return TSType.elaborated(f"{keyword} {tag}", is_const, fields)

    def _anonymous_tag(self, decl: Node) -> str:
        # An unnamed struct in a typedef takes the typedef's name.
        if decl.type == "type_definition":
            declarator = decl.child_by_field_name("declarator")
            if declarator is not None:
                name, _ = self._apply_declarator(declarator, TSType.scalar("int"))
                if name:
                    return name
        return "(anonymous)"

    def _apply_declarator(self, node: Optional[Node], ty: TSType) -> Tuple[Optional[str], TSType]:
        """Wrap ``ty`` by the declarator chain, outermost first; return (name, type)."""
        while node is not None:
            role = _declarator_role(node.type)
            if role == "identifier":
                return self._text(node), ty
            if role == "pointer":
                ty = TSType.pointer(ty, _has_const(node, self.source))
                node = node.child_by_field_name("declarator")
            elif role == "function":
                ty = TSType.function(ty, self._parameters(node.child_by_field_name("parameters")))
                node = node.child_by_field_name("declarator")
            elif role == "array":
                size = node.child_by_field_name("size")
                ty = TSType.array(ty, _squash(self._text(size)) if size is not None else "")
                node = node.child_by_field_name("declarator")
            elif role == "parenthesized":
                inner = [c for c in node.named_children if _declarator_role(c.type)]
                node = inner[0] if inner else None
            elif role == "attributed":
                node = node.child_by_field_name("declarator")
            else:
                break
        return None, ty

    def _parameters(self, param_list: Optional[Node]) -> List[Tuple[Optional[str], TSType]]:
        if param_list is None:
            return []
        params = []
        for child in param_list.named_children:
            if child.type != "parameter_declaration":
                continue
            declarator = child.child_by_field_name("declarator")
            params.append(self._apply_declarator(declarator, self._base_type(child)))
        # f(void) declares no parameters
        if len(params) == 1 and params[0][0] is None and params[0][1].display_name == "void":
            return []
        return params

    def _fields(self, body: Node) -> List[TSEntity]:
        fields: List[TSEntity] = []
        for child in body.named_children:
            if child.type in _CONTAINERS:
                fields.extend(self._fields(child))
            elif child.type == "field_declaration":
                base = self._base_type(child)
                for declarator in child.children_by_field_name("declarator"):
                    name, ty = self._apply_declarator(declarator, base)
                    if name is None:
                        continue
                    fields.append(TSEntity(
                        EntityKind.FIELD, name, self._location(declarator), type_=ty,
                    ))
        return fields

    # ── Declarations ──

    def _typedefs(self, node: Node) -> List[TSEntity]:
        base = self._base_type(node)
        entities = []
        for declarator in node.children_by_field_name("declarator"):
            name, underlying = self._apply_declarator(declarator, base)
            if name is None:
                continue
            location = self._location(node)
            children: List[Entity] = []
            pointee = underlying.get_pointee()
            if pointee is not None and pointee.kind is TypeKind.FUNCTION_PROTO:
                # Return-type reference first, then one entity per parameter.
                children.append(TSEntity(
                    EntityKind.TYPE_REF, pointee.get_result_type().display_name, location,
                ))
                for param_name, param_type in zip(pointee.parameter_names,
                                                  pointee.get_argument_types()):
                    children.append(TSEntity(
                        EntityKind.PARAMETER, param_name, location, type_=param_type,
                    ))
            else:
                children.append(TSEntity(EntityKind.TYPE_REF, base.display_name, location))
            entities.append(TSEntity(
                EntityKind.TYPEDEF, name, location,
                children=children, underlying_type=underlying,
            ))
        return entities

    def _declarations(self, node: Node) -> List[TSEntity]:
        base = self._base_type(node)
        spec = node.child_by_field_name("type")
        type_name = _squash(self._text(spec)) if spec is not None else base.display_name
        location = self._location(node)
        entities = []
        for declarator in node.children_by_field_name("declarator"):
            value = None
            if declarator.type == "init_declarator":
                value = declarator.child_by_field_name("value")
                declarator = declarator.child_by_field_name("declarator")
            name, ty = self._apply_declarator(declarator, base)
            if ty.kind is TypeKind.FUNCTION_PROTO:
                entities.append(TSEntity(EntityKind.OTHER, name, location, type_=ty))
                continue

            children: List[Entity] = [TSEntity(EntityKind.TYPE_REF, type_name, location)]
            if value is not None:
                children.append(self._initializer(value, location))
                result = self.evaluator.evaluate(value)
                if name and result is not None:
                    self.evaluator.known[name] = result
            entities.append(TSEntity(
                EntityKind.VARIABLE, name, location, children=children, type_=ty,
            ))
        return entities

    def _initializer(self, value: Node, location: SourceLocation) -> TSEntity:
        """Wrap the initializer value in an expression entity, as a conversion node."""
        return TSEntity(
            EntityKind.EXPRESSION, self._text(value), location,
            children=[self._expression(value, location)],
        )

    def _expression(self, node: Node, location: SourceLocation) -> TSEntity:
        children: List[Entity] = []
        if node.type == "cast_expression":
            type_node = node.child_by_field_name("type")
            if type_node is not None:
                children.append(TSEntity(EntityKind.TYPE_REF, _squash(self._text(type_node)), location))
            operand = node.child_by_field_name("value")
            if operand is not None:
                children.append(self._expression(operand, location))
        else:
            children = [
                self._expression(c, location) for c in node.named_children
                if c.type != "comment" and c.type.endswith(("expression", "literal", "identifier"))
            ]
        return TSEntity(
            EntityKind.EXPRESSION, self._text(node), location, children=children,
            evaluator=lambda: self.evaluator.evaluate(node),
        )
