"""Script tag location and JSON-LD payload extraction on raw source text."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Callable, Iterator

from sitekit_migrate.rewrite.braces import match_balanced_braces

LD_JSON_MIME = "application/ld+json"
REVIEW_NOTE = "Schema extracted from JS object - review in Portal"

_SCRIPT_OPEN_RE = re.compile(r"<(script|Script)\b")
_TYPE_ATTR_RE = re.compile(r"""\btype\s*=\s*(?:\{\s*)?["'`]application/ld\+json["'`]""")
_INNER_HTML_RE = re.compile(r"dangerouslySetInnerHTML\s*=\s*\{\{\s*__html\s*:\s*")
_STRINGIFY_RE = re.compile(r"^JSON\.stringify\(([\s\S]*)\)$")
_IDENT_RE = re.compile(r"^[A-Za-z_$][\w$]*$")
_TRAILING_COMMA_RE = re.compile(r",(\s*[}\]])")
_TYPE_RE = re.compile(r"""@type['"]?\s*:\s*['"]([^'"]+)['"]""")
_SCHEMA_CONST_RE = re.compile(r"""(?:const|let|var)\s+\w*[sS]chema\w*(?:\s*:\s*[^=]+)?\s*=\s*(?=\{)""")


@dataclass
class ScriptTag:
    start: int
    end: int
    name: str
    attrs: str
    body: str

    @property
    def is_ld_json(self) -> bool:
        return bool(_TYPE_ATTR_RE.search(self.attrs))

    @property
    def source(self) -> str:
        return self.attrs + self.body


def iter_script_tags(content: str) -> Iterator[ScriptTag]:
    """Yield every ``<script>``/``<Script>`` element in source order.

    Attribute text is scanned with quote and brace tracking, so ``>`` inside
    ``{...}`` expressions or strings does not end the tag.
    """
    pos = 0
    while True:
        m = _SCRIPT_OPEN_RE.search(content, pos)
        if m is None:
            return
        name = m.group(1)
        tag_end = end_of_open_tag(content, m.end())
        if tag_end is None:
            return
        self_closing = content[tag_end - 2] == "/"
        attrs = content[m.end():tag_end - (2 if self_closing else 1)]
        if self_closing:
            yield ScriptTag(m.start(), tag_end, name, attrs, "")
            pos = tag_end
            continue
        close = re.compile(r"</" + name + r"\s*>").search(content, tag_end)
        if close is None:
            pos = tag_end
            continue
        yield ScriptTag(m.start(), close.end(), name, attrs, content[tag_end:close.start()])
        pos = close.end()


def end_of_open_tag(content: str, i: int) -> int | None:
    depth = 0
    quote = ""
    while i < len(content):
        ch = content[i]
        if quote:
            if ch == quote:
                quote = ""
        elif ch in "\"'`":
            quote = ch
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
        elif ch == ">" and depth == 0:
            return i + 1
        i += 1
    return None


def replace_script_tags(
    content: str,
    predicate: Callable[[ScriptTag], bool],
    replacement: Callable[[ScriptTag, int], str],
) -> tuple[str, int]:
    """Replace each matching script tag; ``replacement`` gets the tag and its
    0-based index among the matches. Returns ``(content, count)``."""
    out: list[str] = []
    last = 0
    count = 0
    for tag in iter_script_tags(content):
        if not predicate(tag):
            continue
        out.append(content[last:tag.start])
        out.append(replacement(tag, count))
        last = tag.end
        count += 1
    if not count:
        return content, 0
    out.append(content[last:])
    return "".join(out), count


# ── JSON-LD extraction ──────────────────────────────────────


def extract_schema_json(content: str) -> tuple[str, dict] | None:
    """``(schema_type, schema)`` from the first JSON-LD script in content.

    Template-literal, ``JSON.stringify(...)`` and ``dangerouslySetInnerHTML``
    wrapping is peeled off before parsing, and a bare identifier is resolved
    to its ``const`` object in the same file. When the payload is not valid
    JSON the ``@type`` name alone is returned with a review note.
    """
    for tag in iter_script_tags(content):
        if not tag.is_ld_json:
            continue
        payload = _script_payload(tag)
        data = _parse_payload(payload, content)
        if isinstance(data, dict):
            return str(data.get("@type", "Unknown")), data
        m = _TYPE_RE.search(payload) or _TYPE_RE.search(content)
        if m:
            return m.group(1), _type_only(m.group(1))
        return None

    m = _SCHEMA_CONST_RE.search(content)
    if m:
        body = match_balanced_braces(content, m.end())
        if body and "@context" in body:
            data = _loads(body)
            if isinstance(data, dict):
                return str(data.get("@type", "Unknown")), data
            t = _TYPE_RE.search(body)
            if t:
                return t.group(1), _type_only(t.group(1))
    return None


def _type_only(schema_type: str) -> dict:
    return {"@type": schema_type, "_note": REVIEW_NOTE}


def _script_payload(tag: ScriptTag) -> str:
    m = _INNER_HTML_RE.search(tag.attrs)
    if m:
        rest = tag.attrs[m.end():].rstrip()
        # Drop the closing "}}" of the attribute expression
        if rest.endswith("}}"):
            rest = rest[:-2]
        else:
            rest = rest[:rest.rfind("}}")] if "}}" in rest else rest
        return rest.strip().rstrip(",").strip()
    return tag.body.strip()


def _parse_payload(payload: str, content: str, depth: int = 0):
    text = payload.strip()
    if not text or depth > 6:
        return None

    data = _loads(text)
    if isinstance(data, dict):
        return data
    if isinstance(data, str):
        return _parse_payload(data, content, depth + 1)

    if text[0] == "{" and text[-1] == "}":
        inner = text[1:-1].strip()
        if inner[:1] in ("`", '"', "'", "{") or inner.startswith("JSON.stringify") or _IDENT_RE.match(inner):
            return _parse_payload(inner, content, depth + 1)

    if len(text) >= 2 and text[0] in "`'\"" and text[-1] == text[0]:
        return _parse_payload(text[1:-1], content, depth + 1)

    m = _STRINGIFY_RE.match(text)
    if m:
        arg = m.group(1).strip()
        if arg.startswith("{"):
            arg = match_balanced_braces(arg, 0) or arg
        else:
            arg = arg.split(",", 1)[0]
        return _parse_payload(arg, content, depth + 1)

    if _IDENT_RE.match(text):
        decl = re.search(
            r"(?:const|let|var)\s+" + re.escape(text) + r"(?:\s*:\s*[^=]+)?\s*=\s*(?=\{)", content
        )
        if decl:
            body = match_balanced_braces(content, decl.end())
            if body:
                return _parse_payload(body, content, depth + 1)
    return None


def _loads(text: str):
    for candidate in (text, _TRAILING_COMMA_RE.sub(r"\1", text)):
        try:
            return json.loads(candidate)
        except ValueError:
            continue
    return None
