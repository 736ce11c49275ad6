"""Registry XML rendering for collected extension records."""

import os
from typing import List, Sequence

from .records import (
    CommandRecord, EnumRecord, ExtensionRecord, OffsetEnumRecord, TypeRecord,
)

COMMANDS_MARKER = "--- Paste this before the </commands> closer ---"
TYPES_MARKER = "--- Paste this before the </types> closer ---"
EXTENSIONS_MARKER = "--- Paste this before the </extensions> closer ---"

SUCCESS_CODES = "XR_SUCCESS"
ERROR_CODES = "XR_ERROR_FUNCTION_UNSUPPORTED"


def render_command(command: CommandRecord) -> List[str]:
    lines = [
        f'<command successcodes="{SUCCESS_CODES}" errorcodes="{ERROR_CODES}">',
        f"<proto><type>{command.return_type}</type><name>{command.name}</name></proto>",
    ]
    for param in command.params:
        lines.append(f"<param>{param.type_markup}<name>{param.name}</name></param>")
    lines.append("</command>")
    return lines


def render_type(type_record: TypeRecord) -> List[str]:
    lines = [f'<type category="struct" name="{type_record.name}">']
    for member in type_record.members:
        lines.append(f"<member>{member.type_markup} <name>{member.name}</name></member>")
    lines.append("</type>")
    return lines


def render_enum(enum: EnumRecord) -> str:
    if isinstance(enum, OffsetEnumRecord):
        return f'<enum offset="{enum.offset}" extends="{enum.extends}" name="{enum.name}"/>'
    return f'<enum value="{enum.value}" name="{enum.name}"/>'


def render_extension(record: ExtensionRecord) -> List[str]:
    """The ``<extension>`` block; the record must be complete."""
    record.ensure_complete()
    lines = [
        f'<extension name="{record.extension_name}" number="{record.extension_id}" '
        f'type="instance" supported="openxr">',
        "<require>",
    ]
    lines.extend(render_enum(e) for e in record.enums)
    lines.extend(f'<command name="{name}"/>' for name in record.command_names)
    lines.extend(f'<type name="{name}"/>' for name in record.type_names)
    lines.append("</require>")
    lines.append("</extension>")
    return lines


def separator(record: ExtensionRecord) -> str:
    return f"<!-- {os.path.basename(record.header_path)} -->"


def render_sections(records: Sequence[ExtensionRecord]) -> str:
    """Render the three paste sections for all headers, in input order."""
    lines: List[str] = [COMMANDS_MARKER]
    for record in records:
        lines.append(separator(record))
        for command in record.commands:
            lines.extend(render_command(command))
    lines.append("")

    lines.append(TYPES_MARKER)
    for record in records:
        lines.append(separator(record))
        for type_record in record.types:
            lines.extend(render_type(type_record))
    lines.append("")

    lines.append(EXTENSIONS_MARKER)
    for record in records:
        lines.append(separator(record))
        lines.extend(render_extension(record))
    return "\n".join(lines) + "\n"
