"""
Declaration classifier and handlers.

``HeaderWrangler`` walks the top-level entities of one header and feeds the
four recognised shapes into an ``ExtensionRecord``:

  • function-pointer typedef  → CommandRecord
  • struct typedef            → TypeRecord
  • offset-encoded constant   → OffsetEnumRecord (+ extension id)
  • *_SPEC_VERSION macro      → ValueEnumRecord
  • *_EXTENSION_NAME macro    → extension name

Everything else is ignored.
"""

import os
import logging
from typing import Iterable

from .ast_model import Entity, EntityKind, ResultKind, TypeKind
from .enum_codec import decode_enum_value
from .errors import MalformedDeclarationError
from .records import (
    CommandRecord, ExtensionRecord, MemberRecord, OffsetEnumRecord,
    TypeRecord, ValueEnumRecord,
)
from .type_renderer import format_type

logger = logging.getLogger(__name__)

# PFN_xrCreateFoo -> xrCreateFoo
COMMAND_PREFIX_LEN = 4
SPEC_VERSION_SUFFIX = "_SPEC_VERSION"
EXTENSION_NAME_SUFFIX = "_EXTENSION_NAME"
_TAG_KEYWORDS = ("struct ", "union ")


def strip_tag_keyword(name: str) -> str:
    """``struct XrFoo`` -> ``XrFoo``."""
    stripped = True
    while stripped:
        stripped = False
        for keyword in _TAG_KEYWORDS:
            if name.startswith(keyword):
                name = name[len(keyword):]
                stripped = True
    return name


class HeaderWrangler:
    """Per-header aggregator: classifies entities and accumulates records."""

    def __init__(self, header_path: str):
        self.header_path = os.path.realpath(header_path)
        self.record = ExtensionRecord(header_path=header_path)
        self._handlers = {
            EntityKind.TYPEDEF: self.handle_typedef,
            EntityKind.VARIABLE: self.handle_variable,
            EntityKind.MACRO: self.handle_macro,
        }

    def belongs_to_header(self, entity: Entity) -> bool:
        loc = entity.location
        if loc is None or not loc.file:
            return False
        return os.path.realpath(loc.file) == self.header_path

    def wrangle(self, entities: Iterable[Entity]) -> ExtensionRecord:
        for entity in entities:
            if not self.belongs_to_header(entity):
                continue
            self.classify(entity)
        return self.record

    def classify(self, entity: Entity):
        handler = self._handlers.get(entity.kind)
        if handler is not None:
            handler(entity)

    # ────────────────────────────────────────────────────────────────
    #  Typedefs
    # ────────────────────────────────────────────────────────────────

    def handle_typedef(self, entity: Entity):
        ty = entity.get_underlying_type()
        if ty is None:
            raise MalformedDeclarationError(
                f"typedef {entity.display_name} has no underlying type", entity.location
            )

        pointee = ty.get_pointee() if ty.kind is TypeKind.POINTER else None
        if pointee is not None and pointee.kind is TypeKind.FUNCTION_PROTO:
            self._handle_command(entity, pointee)
        elif ty.kind is TypeKind.ELABORATED:
            self._handle_struct(entity, ty)
        else:
            logger.debug("Ignoring typedef %s (%s)", entity.display_name, ty.display_name)

    def _handle_command(self, entity: Entity, func):
        name = entity.display_name[COMMAND_PREFIX_LEN:]
        arg_types = func.get_argument_types() or []
        arg_names = [child.display_name for child in entity.get_children()[1:]]

        if any(n is None for n in arg_names):
            raise MalformedDeclarationError(
                f"{entity.display_name}: every parameter must be named", entity.location
            )
        if len(arg_names) != len(arg_types):
            raise MalformedDeclarationError(
                f"{entity.display_name}: {len(arg_types)} parameter types but "
                f"{len(arg_names)} parameter names", entity.location
            )

        self.record.add_command(CommandRecord(
            name=name,
            return_type=func.get_result_type().display_name,
            params=[
                MemberRecord(type_markup=format_type(t), name=n)
                for t, n in zip(arg_types, arg_names)
            ],
        ))

    def _handle_struct(self, entity: Entity, ty):
        fields = ty.get_fields()
        if fields is None:
            # enums and opaque forward declarations carry no field list
            logger.debug("Ignoring typedef %s: %s has no fields", entity.display_name, ty.display_name)
            return

        self.record.add_type(TypeRecord(
            name=strip_tag_keyword(ty.display_name),
            members=[
                MemberRecord(type_markup=format_type(f.get_type()), name=f.display_name)
                for f in fields
            ],
        ))

    # ────────────────────────────────────────────────────────────────
    #  Offset-encoded enum constants
    # ────────────────────────────────────────────────────────────────

    def handle_variable(self, entity: Entity):
        children = entity.get_children()
        if len(children) < 2:
            raise MalformedDeclarationError(
                f"variable {entity.display_name} needs a type and an initializer",
                entity.location,
            )
        type_ref, initializer = children[0], children[-1]

        operands = initializer.get_children()
        if not operands:
            raise MalformedDeclarationError(
                f"initializer of {entity.display_name} has no expression", entity.location
            )

        result = operands[-1].evaluate()
        if result is None or result.kind is not ResultKind.SIGNED_INTEGER:
            logger.debug("Skipping %s: initializer is not a signed integer constant",
                         entity.display_name)
            return

        extension_id, offset = decode_enum_value(result.value)
        self.record.adopt_extension_id(extension_id, entity.display_name)
        self.record.add_enum(OffsetEnumRecord(
            offset=offset, extends=type_ref.display_name, name=entity.display_name,
        ))

    # ────────────────────────────────────────────────────────────────
    #  Macros
    # ────────────────────────────────────────────────────────────────

    def handle_macro(self, entity: Entity):
        name = entity.display_name
        tokens = entity.get_tokens()
        if not tokens:
            raise MalformedDeclarationError(f"macro {name} has no tokens", entity.location)
        # Only the final token is kept; multi-token bodies are not supported.
        value = tokens[-1]

        if name.endswith(SPEC_VERSION_SUFFIX):
            self.record.add_enum(ValueEnumRecord(value=value, name=name))
        elif name.endswith(EXTENSION_NAME_SUFFIX):
            self.record.set_extension_name(value.strip('"'))
