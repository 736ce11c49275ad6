"""
AST model — the capability interface the declaration handlers consume.

The handlers never talk to a parsing engine directly.  An AST provider
(see ``wrangler.ts_adapter``) turns a header into ``Entity`` objects whose
types are exposed as ``TypeRef`` objects:

  • Entity   — declaration / expression node: kind, display name,
               location, children, constant evaluation, macro tokens
  • TypeRef  — type node: kind, display name, const flag, pointee,
               function result/arguments, struct fields
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional


class EntityKind(Enum):
    TYPEDEF = "typedef"
    VARIABLE = "variable"
    MACRO = "macro"
    PARAMETER = "parameter"
    FIELD = "field"
    TYPE_REF = "type_ref"
    EXPRESSION = "expression"
    OTHER = "other"


class TypeKind(Enum):
    POINTER = "pointer"
    FUNCTION_PROTO = "function_proto"
    ELABORATED = "elaborated"
    SCALAR = "scalar"
    OTHER = "other"


class ResultKind(Enum):
    SIGNED_INTEGER = "signed"
    UNSIGNED_INTEGER = "unsigned"


@dataclass(frozen=True)
class SourceLocation:
    """Where an entity was declared (file as reported by the provider)."""
    file: str
    line: int               # 1-indexed
    column: int = 1

    def __str__(self):
        return f"{self.file}:{self.line}:{self.column}"


@dataclass(frozen=True)
class EvaluationResult:
    """A compile-time constant produced by ``Entity.evaluate()``."""
    kind: ResultKind
    value: int


# ═══════════════════════════════════════════════════════════════════════
#  Interfaces
# ═══════════════════════════════════════════════════════════════════════

class TypeRef(ABC):
    """A C type as seen by the handlers."""

    @property
    @abstractmethod
    def kind(self) -> TypeKind: ...

    @property
    @abstractmethod
    def display_name(self) -> str: ...

    @property
    @abstractmethod
    def is_const(self) -> bool: ...

    def get_pointee(self) -> Optional["TypeRef"]:
        return None

    def get_result_type(self) -> Optional["TypeRef"]:
        return None

    def get_argument_types(self) -> Optional[List["TypeRef"]]:
        return None

    def get_fields(self) -> Optional[List["Entity"]]:
        """Member entities of a struct/union, or None for non-record types."""
        return None


class Entity(ABC):
    """A node of the declaration tree."""

    @property
    @abstractmethod
    def kind(self) -> EntityKind: ...

    @property
    @abstractmethod
    def display_name(self) -> Optional[str]: ...

    @property
    @abstractmethod
    def location(self) -> Optional[SourceLocation]: ...

    @abstractmethod
    def get_children(self) -> List["Entity"]: ...

    def get_type(self) -> Optional[TypeRef]:
        return None

    def get_underlying_type(self) -> Optional[TypeRef]:
        """The aliased type of a typedef."""
        return None

    def evaluate(self) -> Optional[EvaluationResult]:
        return None

    def get_tokens(self) -> List[str]:
        """Token spellings of a macro definition, starting at its name."""
        return []
