"""
Multi-file driver.

Each header is converted independently into its own ``ExtensionRecord``;
the run only produces text once every header has succeeded.
"""

import logging
from typing import List, Optional, Sequence

from .config import WranglerConfig
from .handlers import HeaderWrangler
from .records import ExtensionRecord
from .serializer import render_sections
from .ts_adapter import TreeSitterHeaderParser

logger = logging.getLogger(__name__)


def wrangle_header(header_path: str, provider: TreeSitterHeaderParser) -> ExtensionRecord:
    """Classify one header's declarations into a fresh ``ExtensionRecord``."""
    wrangler = HeaderWrangler(header_path)
    record = wrangler.wrangle(provider.parse(header_path))
    logger.info(
        "%s: extension %s (#%s): %d commands, %d types, %d enums",
        header_path, record.extension_name, record.extension_id,
        len(record.commands), len(record.types), len(record.enums),
    )
    return record


def wrangle_headers(header_paths: Sequence[str],
                    config: Optional[WranglerConfig] = None) -> List[ExtensionRecord]:
    """Convert every header, in order, and check each has a name and an id."""
    provider = TreeSitterHeaderParser(config)
    records = [wrangle_header(path, provider) for path in header_paths]
    for record in records:
        record.ensure_complete()
    return records


def convert_headers(header_paths: Sequence[str],
                    config: Optional[WranglerConfig] = None) -> str:
    """Headers in, the three registry paste sections out."""
    return render_sections(wrangle_headers(header_paths, config))
