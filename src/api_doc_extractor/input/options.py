"""Input options: which sources to scan and with which language rules."""

import codecs
from pathlib import Path
from typing import NamedTuple

from pydantic import BaseModel, Field

from api_doc_extractor.lang.block import BlockRule
from api_doc_extractor.lang.registry import LanguageRegistry
from api_doc_extractor.input.reader import is_remote
from api_doc_extractor.message import ConfigurationError


class SourceSet(NamedTuple):
    """Resolved input: concrete file paths plus the rules to scan them with."""

    paths: list[str]
    rules: tuple[BlockRule, ...]
    encoding: str


class InputOptions(BaseModel):
    """One input entry.

    Either ``dir`` (scanned for files with ``exts``) or explicit ``paths``
    must be given. ``paths`` may contain http(s) URLs.
    """

    lang: str
    dir: Path | None = None
    paths: list[str] = Field(default_factory=list)
    exts: list[str] = Field(default_factory=list)
    recursive: bool = False
    encoding: str = "utf-8"

    def sanitize(self, registry: LanguageRegistry) -> SourceSet:
        """Check the options and resolve them; raises ``ConfigurationError``."""
        lang = registry.get(self.lang) if self.lang else None
        if lang is None:
            raise ConfigurationError(f"unsupported language: {self.lang!r}", field="lang")

        try:
            codecs.lookup(self.encoding)
        except LookupError:
            raise ConfigurationError(f"unknown encoding: {self.encoding!r}", field="encoding")

        exts = [e if e.startswith(".") else "." + e for e in (self.exts or lang.exts)]
        if any(e == "." for e in exts):
            raise ConfigurationError("empty extension", field="exts")

        paths = list(self.paths)
        for index, path in enumerate(paths):
            if not is_remote(path) and not Path(path).is_file():
                raise ConfigurationError(f"file does not exist: {path}", field=f"paths[{index}]")

        if self.dir is not None:
            if not self.dir.is_dir():
                raise ConfigurationError(f"directory does not exist: {self.dir}", field="dir")
            paths.extend(str(p) for p in _collect(self.dir, exts, self.recursive))
        elif not paths:
            raise ConfigurationError("one of dir or paths is required", field="dir")

        if not paths:
            raise ConfigurationError(f"no source files found in {self.dir}", field="dir")

        return SourceSet(paths=paths, rules=lang.rules, encoding=self.encoding)


def _collect(directory: Path, exts: list[str], recursive: bool) -> list[Path]:
    pattern = "**/*" if recursive else "*"
    wanted = {e.lower() for e in exts}
    return sorted(p for p in directory.glob(pattern) if p.is_file() and p.suffix.lower() in wanted)
