"""Run configuration shared by the CLI and the MCP server."""

from typing import Dict, List, Tuple

from pydantic import BaseModel, Field

# OpenXR calling-convention / aliasing macros.  They normally come from
# openxr_platform_defines.h; defining them empty keeps declarations parseable
# when that header is not on the include path.  The handle and atom
# generators use the SDK's 64-bit expansion; openxr.h only defines them
# when they are not already defined.
DEFAULT_DEFINES: Dict[str, str] = {
    "XRAPI_ATTR": "",
    "XRAPI_CALL": "",
    "XRAPI_PTR": "",
    "XR_MAY_ALIAS": "",
    "XR_DEFINE_HANDLE(object)": "typedef struct object##_T* object;",
    "XR_DEFINE_ATOM(object)": "typedef uint64_t object;",
}


def parse_define(define: str) -> Tuple[str, str]:
    """Split ``NAME=VALUE`` (or bare ``NAME``, meaning ``1``)."""
    define = define.strip()
    if "=" in define:
        name, value = define.split("=", 1)
        return name.strip(), value.strip()
    return define, "1"


def split_list(text: str) -> List[str]:
    """Comma-separated tool argument → list of non-empty entries."""
    return [part.strip() for part in text.split(",") if part.strip()]


class WranglerConfig(BaseModel):
    include_dirs: List[str] = Field(default_factory=list)
    defines: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_DEFINES))

    def add_define(self, define: str):
        name, value = parse_define(define)
        if name:
            self.defines[name] = value
