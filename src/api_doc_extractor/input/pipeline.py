"""Concurrent extraction of raw comment blocks from many source files.

Every file is read and scanned in its own worker task; the scan of a single
file is sequential. Blocks from all files flow through one bounded queue, so
producers block while the consumer is behind. The stream ends only after
every scan task has finished.
"""

import logging
import queue
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Iterator

from pydantic import BaseModel, ConfigDict

from api_doc_extractor.input.options import InputOptions, SourceSet
from api_doc_extractor.input.reader import read_source
from api_doc_extractor.lang.block import BlockRule, UnterminatedBlock, scan
from api_doc_extractor.lang.registry import LanguageRegistry, build_registry
from api_doc_extractor.message import ApidocError, ConfigurationError, MessageHandler, SourceIOError

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 500

_DONE = object()


class RawBlock(BaseModel):
    """Filtered text of one comment block and where it came from."""

    model_config = ConfigDict(frozen=True)

    file: str
    line: int
    data: str
    raw: str


def scan_source(
    path: str,
    text: str,
    rules: tuple[BlockRule, ...] | list[BlockRule],
    handler: MessageHandler,
) -> Iterator[RawBlock]:
    """Yield the comment blocks of one decoded buffer.

    An unterminated string or comment is reported as a warning; blocks found
    before it are still yielded.
    """
    try:
        for line, data, raw in scan(text, list(rules)):
            yield RawBlock(file=path, line=line, data=data, raw=raw)
    except UnterminatedBlock as e:
        e.file = path
        handler.warning(e)


class Extractor:
    """Fans file scans out to a thread pool and funnels their blocks."""

    def __init__(
        self,
        registry: LanguageRegistry | None = None,
        max_workers: int | None = None,
        queue_size: int = DEFAULT_QUEUE_SIZE,
    ):
        self.registry = registry or build_registry()
        self.max_workers = max_workers
        self.queue_size = queue_size

    def sanitize(self, options: list[InputOptions]) -> list[SourceSet]:
        """Resolve all options or raise ``ConfigurationError``."""
        if not options:
            raise ConfigurationError("at least one input is required", field="opt")

        sources = []
        for index, item in enumerate(options):
            field = f"opt[{index}]"
            if item is None:
                raise ConfigurationError("input is required", field=field)
            try:
                sources.append(item.sanitize(self.registry))
            except ConfigurationError as e:
                raise e.prefix_field(field)
        return sources

    def extract(self, options: list[InputOptions], handler: MessageHandler) -> Iterator[RawBlock]:
        """Start scanning and return the block stream.

        Options are checked before any task is scheduled, so configuration
        errors are raised here rather than while iterating.
        """
        sources = self.sanitize(options)
        return self._stream(sources, handler)

    def extract_all(self, options: list[InputOptions], handler: MessageHandler) -> list[RawBlock]:
        return list(self.extract(options, handler))

    def _stream(self, sources: list[SourceSet], handler: MessageHandler) -> Iterator[RawBlock]:
        blocks: queue.Queue = queue.Queue(maxsize=self.queue_size)
        stop = threading.Event()
        executor = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="apidoc-scan")
        futures = {
            executor.submit(self._scan_file, blocks, stop, handler, path, src): path
            for src in sources
            for path in src.paths
        }
        logger.debug("scanning %d files", len(futures))

        def barrier() -> None:
            wait(futures)
            for future, path in futures.items():
                exc = None if future.cancelled() else future.exception()
                if exc is not None:
                    logger.error("scan of %s failed: %s", path, exc)
                    handler.error(ApidocError(str(exc), file=path))
            executor.shutdown()
            self._put(blocks, stop, _DONE)

        threading.Thread(target=barrier, name="apidoc-scan-barrier", daemon=True).start()

        try:
            while True:
                item = blocks.get()
                if item is _DONE:
                    break
                yield item
        finally:
            stop.set()
            executor.shutdown(wait=False, cancel_futures=True)

    def _scan_file(
        self,
        blocks: queue.Queue,
        stop: threading.Event,
        handler: MessageHandler,
        path: str,
        source: SourceSet,
    ) -> None:
        try:
            text = read_source(path, source.encoding)
        except SourceIOError as e:
            handler.error(e)
            return

        count = 0
        for block in scan_source(path, text, source.rules, handler):
            if not self._put(blocks, stop, block):
                return
            count += 1
        logger.debug("%s: %d blocks", path, count)

    @staticmethod
    def _put(blocks: queue.Queue, stop: threading.Event, item: object) -> bool:
        while not stop.is_set():
            try:
                blocks.put(item, timeout=0.1)
                return True
            except queue.Full:
                continue
        return False
