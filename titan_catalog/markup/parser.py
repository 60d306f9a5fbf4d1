"""Tolerant markup parser for catalog `.cat`/`.gst` documents.

Turns raw catalog text into a tree of :class:`Node` objects. Purely
syntactic: there is no schema, no namespace handling and no validation.
Malformed input never raises; the parser returns whatever tree it could
build from the well-formed prefix.

Handled subset:
  - start, end and self-closing tags with single, double or bare values
  - the five named entities (&lt; &gt; &quot; &apos; &amp;)
  - CDATA sections (kept literally, not entity-decoded)
  - comments, processing instructions and doctype declarations (skipped)
"""

from dataclasses import dataclass, field

DOCUMENT_NODE = "#document"

_ENTITIES = (
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&apos;", "'"),
    # &amp; last so "&amp;lt;" decodes to "&lt;" and not "<"
    ("&amp;", "&"),
)


@dataclass
class Node:
    """A node in the parsed tree.

    ``text`` holds only this node's own character content, never that of
    its descendants.
    """
    name: str
    attributes: dict[str, str] = field(default_factory=dict)
    children: list["Node"] = field(default_factory=list)
    text: str = ""

    def attr(self, key: str, default: str = "") -> str:
        """Attribute value stripped of surrounding whitespace."""
        return (self.attributes.get(key) or default).strip()


def decode_entities(text: str) -> str:
    """Decode the five standard named character entities."""
    if "&" not in text:
        return text
    for entity, char in _ENTITIES:
        text = text.replace(entity, char)
    return text


def parse_attributes(attr_text: str) -> dict[str, str]:
    """Parse the attribute portion of a start tag.

    Keys without ``=`` are ignored. Duplicate keys: last one wins.
    """
    attrs: dict[str, str] = {}
    i = 0
    n = len(attr_text)

    while i < n:
        while i < n and attr_text[i].isspace():
            i += 1
        if i >= n:
            break

        start = i
        while i < n and attr_text[i] != "=" and not attr_text[i].isspace():
            i += 1
        key = attr_text[start:i]

        while i < n and attr_text[i].isspace():
            i += 1
        if i >= n or attr_text[i] != "=":
            # valueless attribute; i already sits on the next key
            continue

        i += 1  # '='
        while i < n and attr_text[i].isspace():
            i += 1
        if i >= n:
            break

        quote = attr_text[i] if attr_text[i] in ("'", '"') else None
        if quote:
            i += 1
            end = attr_text.find(quote, i)
            if end == -1:
                end = n
            value = attr_text[i:end]
            i = end + 1
        else:
            start = i
            while i < n and not attr_text[i].isspace():
                i += 1
            value = attr_text[start:i]

        if key:
            attrs[key] = decode_entities(value)

    return attrs


def _skip_past(text: str, start: int, marker: str) -> int:
    end = text.find(marker, start)
    return len(text) if end == -1 else end + len(marker)


def _append_text(node: Node, raw: str) -> None:
    if raw.strip():
        node.text += decode_entities(raw)


def parse(text: str) -> Node:
    """Parse catalog text into a tree rooted at a synthetic document node.

    End tags pop the open-element stack down to (and including) the
    nearest open element with the same name; end tags with no matching
    open element are ignored.
    """
    if text.startswith("\ufeff"):
        text = text[1:]

    root = Node(DOCUMENT_NODE)
    stack = [root]
    i = 0
    n = len(text)

    while i < n:
        lt = text.find("<", i)
        if lt == -1:
            _append_text(stack[-1], text[i:])
            break
        if lt > i:
            _append_text(stack[-1], text[i:lt])

        if text.startswith("<!--", lt):
            i = _skip_past(text, lt + 4, "-->")
            continue
        if text.startswith("<?", lt):
            i = _skip_past(text, lt + 2, "?>")
            continue
        if text.startswith("<![CDATA[", lt):
            end = text.find("]]>", lt + 9)
            cdata = text[lt + 9:] if end == -1 else text[lt + 9:end]
            if cdata.strip():
                stack[-1].text += cdata
            i = n if end == -1 else end + 3
            continue
        if text[lt:lt + 9].upper() == "<!DOCTYPE":
            i = _skip_past(text, lt + 9, ">")
            continue

        gt = text.find(">", lt + 1)
        if gt == -1:
            break

        raw_tag = text[lt + 1:gt].strip()
        i = gt + 1

        if raw_tag.startswith("/"):
            parts = raw_tag[1:].split()
            name = parts[0] if parts else ""
            for depth in range(len(stack) - 1, 0, -1):
                if stack[depth].name == name:
                    del stack[depth:]
                    break
            continue

        self_closing = raw_tag.endswith("/")
        body = raw_tag[:-1].strip() if self_closing else raw_tag
        parts = body.split(None, 1)
        if not parts:
            continue

        node = Node(
            name=parts[0],
            attributes=parse_attributes(parts[1]) if len(parts) > 1 else {},
        )
        stack[-1].children.append(node)
        if not self_closing:
            stack.append(node)

    return root
