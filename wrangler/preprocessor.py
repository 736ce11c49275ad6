import os
import io
import re
import logging
from typing import List, Dict, Optional, Tuple

from pcpp import Preprocessor, OutputDirective, Action

from .errors import HeaderParseError

logger = logging.getLogger(__name__)

_LINE_DIRECTIVE_RE = re.compile(r'^#line\s+(\d+)\s+"([^"]+)"')


class _QuietPreprocessor(Preprocessor):
    """A pcpp Preprocessor that keeps its diagnostics out of stdout/stderr.

    Vendor headers include ``<openxr/openxr.h>``, which is usually not on
    the include path.  Missing includes are passed through untouched and
    every pcpp complaint is redirected to ``logging`` at DEBUG level, so the
    registry fragments on stdout stay clean.
    """

    def on_include_not_found(self, is_malformed, is_system_include, curdir, includepath):
        logger.debug("pcpp: include not found: %s (system=%s)", includepath, is_system_include)
        raise OutputDirective(Action.IgnoreAndPassThrough)

    def on_error(self, file, line, msg):
        logger.debug("pcpp: %s:%s: %s", file, line, msg)


class PreprocessorEngine:
    """
    A C preprocessor wrapper using 'pcpp'.

    Expands macros and conditional compilation for one header at a time and
    parses the ``#line`` directives pcpp emits, so every line of the expanded
    text can be traced back to the (file, line) it came from.  That mapping
    is what separates declarations physically present in a header from
    those pulled in by ``#include``.
    """

    def __init__(self, include_dirs: Optional[List[str]] = None,
                 defines: Optional[Dict[str, str]] = None):
        self.include_dirs = [os.path.abspath(d) for d in (include_dirs or [])]
        self.defines: Dict[str, str] = dict(defines or {})
        # Cache: real path -> (expanded_source_bytes, line_map, defined_macros)
        self._cache: Dict[str, Tuple[bytes, List[Tuple[int, str]], Dict[str, str]]] = {}

    def preprocess(self, file_path: str) -> Tuple[bytes, List[Tuple[int, str]]]:
        """
        Preprocess a header and return (expanded_source, line_map).

        ``line_map[i]`` is the ``(original_line, original_file)`` of line
        ``i + 1`` of the expanded source.  Raises ``HeaderParseError`` when
        the file cannot be read or pcpp fails.
        """
        key = os.path.realpath(file_path)
        if key in self._cache:
            return self._cache[key][0], self._cache[key][1]

        if not os.path.isfile(key):
            raise HeaderParseError(f"Header not found: {file_path}")

        # Fresh pcpp instance per header: nothing defined by one header
        # may leak into the next.
        pp = _QuietPreprocessor()
        pp.add_path(os.path.dirname(key))
        for d in self.include_dirs:
            pp.add_path(d)
        for k, v in self.defines.items():
            pp.define(f"{k} {v}")

        output_buffer = io.StringIO()
        try:
            with open(key, "r", encoding="utf-8", errors="replace") as f:
                pp.parse(f.read(), source=key)
            pp.write(output_buffer)
        except OSError as e:
            raise HeaderParseError(f"Cannot read {file_path}: {e}") from e
        except Exception as e:
            logger.error("Preprocessing failed for %s: %s", file_path, e)
            raise HeaderParseError(f"Preprocessing failed for {file_path}: {e}") from e

        expanded_text = output_buffer.getvalue()
        line_map = self._build_line_map(expanded_text.splitlines(), key)

        defined_macros: Dict[str, str] = {}
        for k, v in pp.macros.items():
            if hasattr(v, 'value'):
                if isinstance(v.value, list):
                    defined_macros[k] = "".join(tok.value for tok in v.value)
                else:
                    defined_macros[k] = str(v.value)
            else:
                defined_macros[k] = ""

        self._cache[key] = (expanded_text.encode("utf-8"), line_map, defined_macros)
        logger.debug("Preprocessed %s: %d expanded lines, %d macros",
                     file_path, len(line_map), len(defined_macros))
        return self._cache[key][0], self._cache[key][1]

    @staticmethod
    def _build_line_map(lines: List[str], main_file: str) -> List[Tuple[int, str]]:
        line_map: List[Tuple[int, str]] = []
        current_line = 1
        current_file = main_file

        for line in lines:
            m = _LINE_DIRECTIVE_RE.match(line)
            if m:
                # Directive: #line N "file" -> the *next* line is N
                next_line_num = int(m.group(1))
                line_map.append((next_line_num - 1, m.group(2)))
                current_line = next_line_num
                current_file = m.group(2)
            else:
                line_map.append((current_line, current_file))
                current_line += 1
        return line_map

    def get_original_location(self, file_path: str, expanded_line: int) -> Tuple[str, int]:
        """
        Convert a 1-indexed line of the expanded source to (file, line).

        Lines outside the map fall back to the header itself.
        """
        key = os.path.realpath(file_path)
        if key not in self._cache:
            return key, expanded_line

        _, line_map, _ = self._cache[key]
        if expanded_line < 1 or expanded_line > len(line_map):
            return key, expanded_line

        orig_line, orig_file = line_map[expanded_line - 1]
        return orig_file, orig_line

    def get_defined_macros(self, file_path: str) -> Dict[str, str]:
        """Get all macros still defined after preprocessing the header."""
        key = os.path.realpath(file_path)
        if key not in self._cache:
            return {}
        return self._cache[key][2]
