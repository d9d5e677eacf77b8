"""Builds one document per group from every block of the inputs."""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor

from api_doc_extractor.doc.apidoc import APIDoc
from api_doc_extractor.doc.document import DEFAULT_GROUP, Document
from api_doc_extractor.input.options import InputOptions
from api_doc_extractor.input.pipeline import DEFAULT_QUEUE_SIZE, Extractor, RawBlock
from api_doc_extractor.lang.registry import LanguageRegistry
from api_doc_extractor.message import AnnotationSyntaxError, MessageHandler
from api_doc_extractor.parser.annotation import parse_block

logger = logging.getLogger(__name__)


class Builder:
    """Parses extracted blocks in parallel and aggregates them by group.

    At most ``queue_size`` blocks wait in the parse pool at any time; the
    extraction stream is not drained faster than blocks are parsed.
    """

    def __init__(
        self,
        registry: LanguageRegistry | None = None,
        max_workers: int | None = None,
        queue_size: int = DEFAULT_QUEUE_SIZE,
    ):
        self.extractor = Extractor(registry, max_workers=max_workers, queue_size=queue_size)
        self.max_workers = max_workers
        self.queue_size = queue_size

    def build(self, options: list[InputOptions], handler: MessageHandler) -> dict[str, Document]:
        """Extract, parse and check every annotation of ``options``.

        ``ConfigurationError`` is raised before any file is read. All other
        problems are reported to ``handler``; documents are returned even
        when some of their blocks failed.
        """
        blocks = self.extractor.extract(options, handler)
        groups = _Groups()
        slots = threading.BoundedSemaphore(max(self.queue_size, 1))
        failures: list[BaseException] = []

        def done(future: Future) -> None:
            slots.release()
            exc = future.exception()
            if exc is not None:
                failures.append(exc)

        count = 0
        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="apidoc-parse") as executor:
            for block in blocks:
                slots.acquire()
                executor.submit(self._handle, block, groups, handler).add_done_callback(done)
                count += 1
        if failures:
            raise failures[0]
        logger.debug("parsed %d blocks into %d groups", count, len(groups.docs))

        docs = dict(sorted(groups.docs.items()))
        for doc in docs.values():
            doc.sanitize(handler)
        return docs

    def _handle(self, block: RawBlock, groups: "_Groups", handler: MessageHandler) -> None:
        try:
            entity = parse_block(block)
            if entity is None:
                return
            if isinstance(entity, APIDoc):
                groups.get(entity.group).set_apidoc(entity)
            else:
                groups.get(entity.group).add_api(entity)
        except AnnotationSyntaxError as e:
            handler.error(e)


class _Groups:
    """Documents of one build, keyed by group."""

    def __init__(self):
        self.docs: dict[str, Document] = {}
        self._lock = threading.Lock()

    def get(self, group: str) -> Document:
        group = group or DEFAULT_GROUP
        with self._lock:
            doc = self.docs.get(group)
            if doc is None:
                doc = self.docs[group] = Document(group)
            return doc


def build(
    options: list[InputOptions],
    handler: MessageHandler,
    registry: LanguageRegistry | None = None,
    max_workers: int | None = None,
) -> dict[str, Document]:
    """Shortcut for ``Builder(registry, max_workers).build(options, handler)``."""
    return Builder(registry, max_workers=max_workers).build(options, handler)
