"""
OpenXR Header Wrangler — MCP Server

Exposes the header-to-registry conversion via the Model Context Protocol:

  1. convert_headers    — registry paste sections for one or more headers
  2. decode_enum_value  — extension id / offset of an offset-encoded value
  3. list_declarations  — how each top-level declaration of a header is read
"""

from mcp.server.fastmcp import FastMCP
import os
import sys

# Ensure the wrangler package is importable
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from wrangler.ast_model import EntityKind, TypeKind
from wrangler.config import WranglerConfig, split_list
from wrangler.driver import convert_headers as _convert_headers
from wrangler.enum_codec import ENUM_BASE, decode_enum_value as _decode_enum_value
from wrangler.errors import WranglerError
from wrangler.handlers import HeaderWrangler
from wrangler.ts_adapter import TreeSitterHeaderParser

# ═══════════════════════════════════════════════════════════════════════
#  Server Setup
# ═══════════════════════════════════════════════════════════════════════

mcp = FastMCP("OpenXR Header Wrangler")


def _make_config(include_dirs: str, extra_defines: str) -> WranglerConfig:
    config = WranglerConfig(include_dirs=split_list(include_dirs))
    for define in split_list(extra_defines):
        config.add_define(define)
    return config


def _describe(entity) -> str:
    """One-word reading of a top-level entity, as the handlers see it."""
    if entity.kind is EntityKind.TYPEDEF:
        ty = entity.get_underlying_type()
        pointee = ty.get_pointee() if ty is not None else None
        if pointee is not None and pointee.kind is TypeKind.FUNCTION_PROTO:
            return "command"
        if ty is not None and ty.kind is TypeKind.ELABORATED and ty.get_fields() is not None:
            return "struct"
        return "ignored typedef"
    if entity.kind is EntityKind.VARIABLE:
        return "enum constant"
    if entity.kind is EntityKind.MACRO:
        return "macro"
    return "ignored"


# ═══════════════════════════════════════════════════════════════════════
#  Tool 1: Convert Headers
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def convert_headers(header_paths: str, include_dirs: str = "", extra_defines: str = "") -> str:
    """
    Converts OpenXR vendor extension headers into registry XML fragments.

    Args:
        header_paths:  Comma-separated list of header files, one extension each.
        include_dirs:  Comma-separated list of extra include directories.
                       Example: "third_party/OpenXR-SDK/include"
        extra_defines: Comma-separated preprocessor defines (NAME=VALUE or NAME).
                       Example: "XR_USE_GRAPHICS_API_VULKAN,XR_USE_PLATFORM_WIN32"
    """
    paths = split_list(header_paths)
    if not paths:
        return "Error: No header paths given."
    missing = [p for p in paths if not os.path.isfile(p)]
    if missing:
        return f"Error: Header file(s) not found: {', '.join(missing)}"

    try:
        return _convert_headers(paths, _make_config(include_dirs, extra_defines))
    except WranglerError as e:
        return f"Error: {e}"


# ═══════════════════════════════════════════════════════════════════════
#  Tool 2: Decode Enum Value
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def decode_enum_value(value: int) -> str:
    """
    Splits an offset-encoded enum value into extension id and offset.

    Args:
        value: The integer value of an extension enum constant, e.g. 1000123004.
    """
    extension_id, offset = _decode_enum_value(value)
    note = ""
    if value < ENUM_BASE:
        note = f"\n\nNote: {value} is below the extension base {ENUM_BASE}; it is not an extension value."
    return f"Value {value}: extension id **{extension_id}**, offset **{offset}**.{note}"


# ═══════════════════════════════════════════════════════════════════════
#  Tool 3: List Declarations
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def list_declarations(header_path: str, include_dirs: str = "", extra_defines: str = "") -> str:
    """
    Lists the top-level declarations of a header and how each is classified.

    Declarations that come from included headers are skipped, exactly as in
    convert_headers.

    Args:
        header_path:   Path of the extension header.
        include_dirs:  Comma-separated list of extra include directories.
        extra_defines: Comma-separated preprocessor defines (NAME=VALUE or NAME).
    """
    if not os.path.isfile(header_path):
        return f"Error: Header file not found at {header_path}"

    try:
        provider = TreeSitterHeaderParser(_make_config(include_dirs, extra_defines))
        entities = provider.parse(header_path)
    except WranglerError as e:
        return f"Error: {e}"

    wrangler = HeaderWrangler(header_path)
    rows = [e for e in entities if wrangler.belongs_to_header(e)
            and e.kind in (EntityKind.TYPEDEF, EntityKind.VARIABLE, EntityKind.MACRO)]
    if not rows:
        return f"No typedefs, variables or macros found in {header_path}"

    out = f"## Declarations in `{os.path.basename(header_path)}`\n\n"
    out += "| Line | Kind | Name | Reading |\n"
    out += "|------|------|------|---------|\n"
    for entity in rows:
        out += (f"| {entity.location.line} | {entity.kind.value} | "
                f"`{entity.display_name}` | {_describe(entity)} |\n")
    return out


if __name__ == "__main__":
    mcp.run()
