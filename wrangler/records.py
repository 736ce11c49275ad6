"""
Registry records collected from one header.

The handlers build these typed records; ``wrangler.serializer`` turns them
into registry XML in a single pass.  ``ExtensionRecord`` is the per-header
accumulator and guards the one-extension-per-header invariant.
"""

import logging
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .errors import ExtensionIdMismatchError, IncompleteExtensionError

logger = logging.getLogger(__name__)


class MemberRecord(BaseModel):
    """A ``(type markup, name)`` pair — a command parameter or struct member."""
    model_config = ConfigDict(frozen=True)

    type_markup: str
    name: str


class CommandRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    return_type: str
    params: List[MemberRecord] = Field(default_factory=list)


class TypeRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    members: List[MemberRecord] = Field(default_factory=list)


class OffsetEnumRecord(BaseModel):
    """``<enum offset=.. extends=.. name=..>`` decoded from a constant."""
    model_config = ConfigDict(frozen=True)

    offset: int
    extends: str
    name: str


class ValueEnumRecord(BaseModel):
    """``<enum value=.. name=..>`` taken from a spec-version macro."""
    model_config = ConfigDict(frozen=True)

    value: str
    name: str


EnumRecord = Union[OffsetEnumRecord, ValueEnumRecord]


class ExtensionRecord(BaseModel):
    header_path: str
    extension_id: Optional[int] = None
    extension_name: Optional[str] = None
    commands: List[CommandRecord] = Field(default_factory=list)
    types: List[TypeRecord] = Field(default_factory=list)
    enums: List[EnumRecord] = Field(default_factory=list)
    command_names: List[str] = Field(default_factory=list)
    type_names: List[str] = Field(default_factory=list)

    def add_command(self, command: CommandRecord):
        self.commands.append(command)
        self.command_names.append(command.name)

    def add_type(self, type_record: TypeRecord):
        self.types.append(type_record)
        self.type_names.append(type_record.name)

    def add_enum(self, enum: EnumRecord):
        self.enums.append(enum)

    def adopt_extension_id(self, extension_id: int, constant: Optional[str] = None):
        """Fix the extension id on first use; any later disagreement is fatal."""
        if self.extension_id is None:
            self.extension_id = extension_id
            logger.debug("%s: extension id %d (from %s)", self.header_path, extension_id, constant)
        elif self.extension_id != extension_id:
            raise ExtensionIdMismatchError(
                self.header_path, self.extension_id, extension_id, constant
            )

    def set_extension_name(self, name: str):
        if self.extension_name is not None and self.extension_name != name:
            logger.warning(
                "%s: extension name %r replaced by %r",
                self.header_path, self.extension_name, name,
            )
        self.extension_name = name

    def ensure_complete(self):
        """Raise unless both an extension name and an extension id were found."""
        missing = []
        if self.extension_name is None:
            missing.append("an *_EXTENSION_NAME macro")
        if self.extension_id is None:
            missing.append("an offset-encoded enum constant")
        if missing:
            raise IncompleteExtensionError(
                f"{self.header_path}: cannot build <extension>: no "
                + " and no ".join(missing)
            )
