"""Turns a raw comment block into a domain entity.

Parsing happens in two steps. ``to_draft`` reads the markup into plain
dicts, lists and strings without judging their content; the domain models
then validate that draft. Only the first violation of a block is reported.
"""

import re
import xml.etree.ElementTree as ET

from pydantic import ValidationError

from api_doc_extractor.doc.api import API
from api_doc_extractor.doc.apidoc import APIDoc
from api_doc_extractor.doc.base import TEXT
from api_doc_extractor.input.pipeline import RawBlock
from api_doc_extractor.message import AnnotationSyntaxError

KIND_APIDOC = "apidoc"
KIND_API = "api"

_KIND_RE = re.compile(r"<(apidoc|api)[\s/>]")

# tags that appear at most once under their parent
SINGLE_TAGS = frozenset({"path", "description", "title", "contact", "license"})

_MODELS = {KIND_APIDOC: APIDoc, KIND_API: API}


def classify(data: str) -> str | None:
    """Return ``"apidoc"``, ``"api"`` or ``None`` for unrelated comments."""
    m = _KIND_RE.match(data.lstrip())
    return m.group(1) if m else None


def to_draft(data: str, line: int = 0) -> tuple[str, dict]:
    """Read the first element of ``data`` into a draft.

    Text after the root element is ignored. Returns the root tag and its
    draft; malformed markup raises ``AnnotationSyntaxError``.
    """
    stripped = data.lstrip()
    offset = data[: len(data) - len(stripped)].count("\n")
    root = _read_root(stripped, line + offset)
    draft = _draft(root)
    if isinstance(draft, str):
        draft = {TEXT: draft} if draft else {}
    return root.tag, draft


def _read_root(data: str, line: int) -> ET.Element:
    parser = ET.XMLPullParser(events=("start", "end"))
    depth = 0
    try:
        parser.feed(data)
        for event, elem in parser.read_events():
            if event == "start":
                depth += 1
                continue
            depth -= 1
            if depth == 0:
                return elem
    except ET.ParseError as e:
        row = e.position[0] if e.position else 1
        raise AnnotationSyntaxError(f"malformed markup: {e}", line=line + row - 1)
    raise AnnotationSyntaxError("malformed markup: unclosed element", line=line)


def _draft(elem: ET.Element) -> str | dict:
    children = list(elem)
    text = (elem.text or "").strip()
    if not elem.attrib and not children:
        return text

    draft: dict = dict(elem.attrib)
    if text:
        draft[TEXT] = text
    for child in children:
        value = _draft(child)
        existing = draft.get(child.tag)
        if child.tag in SINGLE_TAGS:
            if existing is not None:
                raise AnnotationSyntaxError(f"duplicate <{child.tag}>", field=f"{elem.tag}.{child.tag}")
            draft[child.tag] = value
        elif existing is None:
            draft[child.tag] = [value]
        elif isinstance(existing, list):
            existing.append(value)
        else:
            raise AnnotationSyntaxError(
                f"<{child.tag}> conflicts with the {child.tag!r} attribute", field=f"{elem.tag}.{child.tag}"
            )
    return draft


def parse_block(block: RawBlock) -> API | APIDoc | None:
    """Deserialize one block; ``None`` if it holds no annotation."""
    kind = classify(block.data)
    if kind is None:
        return None

    try:
        tag, draft = to_draft(block.data, block.line)
        if tag != kind:
            raise AnnotationSyntaxError(f"unexpected root element <{tag}>", field=tag)
        entity = _MODELS[kind].model_validate(draft)
    except AnnotationSyntaxError as e:
        e.file = block.file
        e.line = e.line or block.line
        raise
    except ValidationError as e:
        raise _first_error(e, kind, block) from e

    entity.file = block.file
    entity.line = block.line
    return entity


def _first_error(exc: ValidationError, kind: str, block: RawBlock) -> AnnotationSyntaxError:
    first = exc.errors(include_url=False)[0]
    return AnnotationSyntaxError(
        first["msg"],
        file=block.file,
        field=field_path(kind, first["loc"]),
        line=block.line,
    )


def field_path(root: str, loc: tuple) -> str:
    """Format a validation location, e.g. ``api.response[0].param[1].type``."""
    parts = [root]
    for item in loc:
        if isinstance(item, int):
            parts[-1] += f"[{item}]"
        else:
            parts.append(str(item))
    return ".".join(parts)
