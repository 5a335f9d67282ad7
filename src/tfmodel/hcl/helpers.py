import bisect
import re
from typing import Any

from tfmodel.models import Position, Range

_IDENTIFIER = r"[A-Za-z_][0-9A-Za-z_-]*"
_TRAVERSAL_RE = re.compile(rf"{_IDENTIFIER}(?:\.{_IDENTIFIER})*")

_HCL_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", '"': '"', "\\": "\\"}
_JSON_ESCAPES = {
    ord('"'): b'"',
    ord("\\"): b"\\",
    ord("/"): b"/",
    ord("b"): b"\b",
    ord("f"): b"\f",
    ord("n"): b"\n",
    ord("r"): b"\r",
    ord("t"): b"\t",
}


class SourceText:
    """Raw bytes of one document plus byte-offset to line/column conversion."""

    def __init__(self, filename: str, data: bytes) -> None:
        self.filename = filename
        self.data = data
        self._line_starts = [0, *(m.end() for m in re.finditer(b"\n", data))]

    def position(self, offset: int) -> Position:
        index = bisect.bisect_right(self._line_starts, offset) - 1
        line_start = self._line_starts[index]
        column = len(self.data[line_start:offset].decode("utf-8", errors="replace")) + 1
        return Position(line=index + 1, column=column, byte=offset)

    def range(self, start: int, end: int) -> Range:
        return Range(filename=self.filename, start=self.position(start), end=self.position(end))

    def node_range(self, node: Any) -> Range:
        return self.range(node.start_byte, node.end_byte)

    def text(self, start: int, end: int) -> str:
        return self.data[start:end].decode("utf-8", errors="replace")

    def node_text(self, node: Any) -> str:
        return self.text(node.start_byte, node.end_byte)


def unescape_hcl_string(text: str) -> str:
    """Decode the body of a native quoted string that contains no interpolation."""
    out: list[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            if i + 1 >= len(text):
                raise ValueError("unterminated escape sequence")
            esc = text[i + 1]
            if esc in _HCL_ESCAPES:
                out.append(_HCL_ESCAPES[esc])
                i += 2
                continue
            width = {"u": 4, "U": 8}.get(esc)
            if width is None:
                raise ValueError(f"invalid escape sequence \\{esc}")
            digits = text[i + 2 : i + 2 + width]
            if len(digits) != width or not all(c in "0123456789abcdefABCDEF" for c in digits):
                raise ValueError(f"invalid unicode escape \\{esc}{digits}")
            out.append(chr(int(digits, 16)))
            i += 2 + width
            continue
        if text.startswith(("$${", "%%{"), i):
            out.append(text[i + 1 : i + 3])
            i += 3
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def has_template_sequence(text: str) -> bool:
    return literal_template_value(text) is None


def literal_template_value(text: str) -> str | None:
    """Return the literal value of a template, or None if it interpolates.

    ``$${`` and ``%%{`` are escapes for a literal ``${`` / ``%{``.
    """
    out: list[str] = []
    i = 0
    while i < len(text):
        if text.startswith(("$${", "%%{"), i):
            out.append(text[i + 1 : i + 3])
            i += 3
            continue
        if text.startswith(("${", "%{"), i):
            return None
        out.append(text[i])
        i += 1
    return "".join(out)


def parse_traversal(text: str) -> list[str] | None:
    candidate = "".join(text.split())
    if not _TRAVERSAL_RE.fullmatch(candidate):
        return None
    return candidate.split(".")


def decode_json_string(raw: bytes, base: int) -> tuple[bytes, list[int]]:
    """Decode the inside of a JSON string literal (without its quotes).

    Returns the UTF-8 bytes of the decoded value and, for every decoded byte,
    the document offset of the raw byte or escape sequence that produced it.
    The offset list has one trailing entry for the end of the string.
    """
    out = bytearray()
    offsets: list[int] = []
    i = 0
    while i < len(raw):
        if raw[i] != 0x5C:
            out.append(raw[i])
            offsets.append(base + i)
            i += 1
            continue
        if i + 1 >= len(raw):
            raise ValueError("unterminated escape sequence")
        esc = raw[i + 1]
        if esc in _JSON_ESCAPES:
            encoded, width = _JSON_ESCAPES[esc], 2
        elif esc == ord("u"):
            code = _hex(raw[i + 2 : i + 6])
            width = 6
            if 0xD800 <= code < 0xDC00 and raw[i + 6 : i + 8] == b"\\u":
                low = _hex(raw[i + 8 : i + 12])
                code = 0x10000 + ((code - 0xD800) << 10) + (low - 0xDC00)
                width = 12
            encoded = chr(code).encode("utf-8", errors="surrogatepass")
        else:
            raise ValueError(f"invalid escape sequence \\{chr(esc)}")
        out.extend(encoded)
        offsets.extend([base + i] * len(encoded))
        i += width
    offsets.append(base + len(raw))
    return bytes(out), offsets


def _hex(digits: bytes) -> int:
    if len(digits) != 4:
        raise ValueError("truncated unicode escape")
    try:
        return int(digits, 16)
    except ValueError:
        raise ValueError(f"invalid unicode escape \\u{digits.decode('ascii', errors='replace')}") from None
