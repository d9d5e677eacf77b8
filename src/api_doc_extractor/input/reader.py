"""Reads local or remote source files into decoded text."""

import logging
from pathlib import Path

import requests

from api_doc_extractor.message import SourceIOError

logger = logging.getLogger(__name__)

REMOTE_TIMEOUT = 30


def is_remote(path: str) -> bool:
    return path.startswith(("http://", "https://"))


def read_source(path: str, encoding: str = "utf-8") -> str:
    """Return the content of ``path`` decoded with ``encoding``.

    Paths starting with ``http://`` or ``https://`` are fetched with requests.
    Any read or decode failure is raised as ``SourceIOError``.
    """
    try:
        data = _read_remote(path) if is_remote(path) else Path(path).read_bytes()
        return data.decode(encoding)
    except (OSError, UnicodeDecodeError, LookupError, requests.RequestException) as e:
        raise SourceIOError(str(e), file=path) from e


def _read_remote(url: str) -> bytes:
    logger.debug("fetching %s", url)
    resp = requests.get(url, timeout=REMOTE_TIMEOUT)
    if resp.status_code >= 300:
        raise SourceIOError(f"failed to fetch remote file: HTTP {resp.status_code}", file=url)
    return resp.content
