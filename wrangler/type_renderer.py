"""Render C types in the registry's inline type-reference markup."""

from .ast_model import TypeKind, TypeRef

_CONST_PREFIX = "const "


def _strip_leading(text: str, prefix: str) -> str:
    while text.startswith(prefix):
        text = text[len(prefix):]
    return text


def format_type(ty: TypeRef) -> str:
    """
    Render ``ty`` as registry markup, e.g. ``const <type>char</type>*``.

    Pointer levels are rendered recursively; ``const `` is emitted in front
    of a level only when that level's pointee is const-qualified.  A leaf's
    own qualification is not represented.
    """
    if ty.kind is TypeKind.POINTER:
        pointee = ty.get_pointee()
        qualifier = _CONST_PREFIX if pointee.is_const else ""
        return f"{qualifier}{format_type(pointee)}*"
    return f"<type>{_strip_leading(ty.display_name, _CONST_PREFIX)}</type>"
