"""The per-group document and its final whole-document pass."""

import logging
import threading
from typing import Iterator

from api_doc_extractor.doc.api import API
from api_doc_extractor.doc.apidoc import APIDoc
from api_doc_extractor.doc.base import Type
from api_doc_extractor.doc.param import Param, TypedModel
from api_doc_extractor.doc.request import Request
from api_doc_extractor.message import (
    AnnotationSyntaxError,
    ApidocError,
    MessageHandler,
    SchemaMismatchError,
    UnresolvedReferenceError,
)
from api_doc_extractor.mock.json import validate

logger = logging.getLogger(__name__)

DEFAULT_GROUP = "default"


class Document:
    """All entries of one group.

    ``set_apidoc`` and ``add_api`` may be called from several threads;
    ``sanitize`` runs once, after every block has been added.
    """

    def __init__(self, group: str = DEFAULT_GROUP):
        self.group = group
        self.apidoc: APIDoc | None = None
        self.apis: list[API] = []
        self.valid = True
        self._lock = threading.Lock()

    def set_apidoc(self, apidoc: APIDoc) -> None:
        with self._lock:
            if self.apidoc is not None:
                raise AnnotationSyntaxError(
                    f"duplicate <apidoc> for group {self.group!r}, first declared at "
                    f"{self.apidoc.file}:{self.apidoc.line}",
                    file=apidoc.file,
                    field="apidoc",
                    line=apidoc.line,
                )
            self.apidoc = apidoc

    def add_api(self, api: API) -> None:
        with self._lock:
            self.apis.append(api)

    @property
    def definitions(self) -> dict[str, Param]:
        if self.apidoc is None:
            return {}
        return {d.name: d for d in self.apidoc.definitions}

    def sanitize(self, handler: MessageHandler) -> bool:
        """Resolve references and run the checks that need the whole group.

        Problems are reported to ``handler``; the document is marked invalid
        if any error was found. Returns ``valid``.
        """
        resolver = _Resolver(self.definitions, self._report(handler))

        if self.apidoc is None:
            handler.warning(ApidocError(f"group {self.group!r} has no <apidoc> block", field="apidoc"))
        else:
            for index, definition in enumerate(self.apidoc.definitions):
                field = f"apidoc.definition[{index}]"
                resolver.resolve_definition(definition, field, self.apidoc.file, self.apidoc.line)

        tags = {t.name for t in self.apidoc.tags} if self.apidoc is not None else set()
        seen: dict[str, API] = {}
        for api in self.apis:
            first = seen.setdefault(api.key, api)
            if first is not api:
                self._report(handler)(
                    AnnotationSyntaxError(
                        f"duplicate api {api.key!r}, first declared at {first.file}:{first.line}",
                        file=api.file,
                        field="api",
                        line=api.line,
                    )
                )

            for index, tag in enumerate(api.tags):
                if tags and tag not in tags:
                    self._report(handler)(
                        UnresolvedReferenceError(
                            f"undeclared tag {tag!r}", file=api.file, field=f"api.tags[{index}]", line=api.line
                        )
                    )

            for field, node in _typed_nodes(api):
                resolver.resolve(node, f"api.{field}", api.file, api.line, set())
                if isinstance(node, Request):
                    self._check_examples(node, f"api.{field}", api, handler)

        logger.debug("group %s: %d apis, valid=%s", self.group, len(self.apis), self.valid)
        return self.valid

    def _check_examples(self, request: Request, field: str, api: API, handler: MessageHandler) -> None:
        for index, example in enumerate(request.examples):
            mimetype = example.mimetype.lower()
            if "json" not in mimetype:
                continue
            try:
                validate(request.to_param(), example.content)
            except SchemaMismatchError as e:
                e.file, e.line = api.file, api.line
                self._report(handler)(e.prefix_field(f"{field}.example[{index}]"))

    def _report(self, handler: MessageHandler):
        def report(err: ApidocError) -> None:
            self.valid = False
            handler.error(err)

        return report


class _Resolver:
    """Fills nodes carrying a ``ref`` from the named definition."""

    def __init__(self, definitions: dict[str, Param], report):
        self.definitions = definitions
        self.report = report
        self._done: set[str] = set()

    def resolve_definition(self, definition: Param, field: str, file: str, line: int) -> None:
        if definition.name not in self._done:
            self.resolve(definition, field, file, line, {definition.name})
            self._done.add(definition.name)

    def resolve(self, node: TypedModel, field: str, file: str, line: int, stack: set[str]) -> None:
        if node.ref and self._fill(node, field, file, line, stack):
            if node.type is Type.OBJECT and not node.items:
                self.report(
                    AnnotationSyntaxError(
                        "object type requires at least one param", file=file, field=f"{field}.param", line=line
                    )
                )

        for index, item in enumerate(node.items):
            self.resolve(item, f"{field}.param[{index}]", file, line, stack)

    def _fill(self, node: TypedModel, field: str, file: str, line: int, stack: set[str]) -> bool:
        """Take from the definition whatever ``node`` does not declare itself."""
        target = self.definitions.get(node.ref)
        if target is None:
            self.report(UnresolvedReferenceError(f"unknown reference {node.ref!r}", file=file, field=f"{field}.ref", line=line))
            return False
        if node.ref in stack:
            self.report(UnresolvedReferenceError(f"circular reference {node.ref!r}", file=file, field=f"{field}.ref", line=line))
            return False

        if node.ref not in self._done:
            self.resolve(target, f"apidoc.definition[{node.ref}]", file, line, stack | {node.ref})
            self._done.add(node.ref)
        if target.type is None:
            self.report(UnresolvedReferenceError(f"unresolved reference {node.ref!r}", file=file, field=f"{field}.ref", line=line))
            return False

        if node.type is None:
            node.type = target.type
        elif node.type is not target.type:
            self.report(
                UnresolvedReferenceError(
                    f"type {node.type.value!r} conflicts with {target.type.value!r} of reference {node.ref!r}",
                    file=file,
                    field=f"{field}.type",
                    line=line,
                )
            )
            return False

        node.array = node.array or target.array
        if not node.items:
            node.items = [item.model_copy(deep=True) for item in target.items]
        if not node.enums:
            node.enums = [enum.model_copy(deep=True) for enum in target.enums]
        return True


def _typed_nodes(api: API) -> Iterator[tuple[str, TypedModel]]:
    """Top-level typed nodes of an API with their field paths."""
    for index, param in enumerate(api.path.params):
        yield f"path.param[{index}]", param
    for index, query in enumerate(api.path.queries):
        yield f"path.query[{index}]", query
    for index, header in enumerate(api.headers):
        yield f"header[{index}]", header
    yield from _bodies("request", api.requests)
    yield from _bodies("response", api.responses)
    for index, callback in enumerate(api.callbacks):
        prefix = f"callback[{index}]"
        for qi, query in enumerate(callback.queries):
            yield f"{prefix}.query[{qi}]", query
        yield from _bodies(f"{prefix}.request", callback.requests)
        yield from _bodies(f"{prefix}.response", callback.responses)


def _bodies(name: str, bodies: list[Request]) -> Iterator[tuple[str, TypedModel]]:
    for index, body in enumerate(bodies):
        field = f"{name}[{index}]"
        yield field, body
        for hi, header in enumerate(body.headers):
            yield f"{field}.header[{hi}]", header
