"""Language rule registry.

Maps a language id to the ordered block rules used to scan its sources. The
registry is built once with ``build_registry()`` and handed to whoever needs
it; there is no module-level mutable table.
"""

import logging
from collections import Counter
from pathlib import Path
from typing import Iterator

from pydantic import BaseModel, ConfigDict

from api_doc_extractor.lang.block import BlockKind, BlockRule

logger = logging.getLogger(__name__)


class Language(BaseModel):
    """A supported language and its lexical rules."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    exts: tuple[str, ...]
    rules: tuple[BlockRule, ...]


def _string(begin: str, end: str | None = None, escape: str = "\\") -> BlockRule:
    return BlockRule(kind=BlockKind.STRING, begin=begin, end=end or begin, escape=escape)


def _single(begin: str, escape: str = "") -> BlockRule:
    return BlockRule(kind=BlockKind.SINGLE_COMMENT, begin=begin, escape=escape)


def _multi(begin: str, end: str, escape: str = "", line_start: bool = False) -> BlockRule:
    return BlockRule(kind=BlockKind.MULTI_COMMENT, begin=begin, end=end, escape=escape, line_start=line_start)


# Rule sets shared by the C family
_C_STRINGS = (_string('"'), _string("'"))
_C_COMMENTS = (_single("//"), _multi("/*", "*/", "*"))

_BUILTIN = (
    Language(id="c#", name="C#", exts=(".cs",), rules=(_string('@"', '"', '""'), *_C_STRINGS, *_C_COMMENTS)),
    Language(
        id="c++",
        name="C/C++",
        exts=(".h", ".c", ".cpp", ".cxx", ".hpp"),
        rules=(*_C_STRINGS, *_C_COMMENTS),
    ),
    Language(
        id="d",
        name="D",
        exts=(".d",),
        rules=(*_C_STRINGS, _string("`", escape=""), *_C_COMMENTS, _multi("/+", "+/", "+")),
    ),
    Language(id="erlang", name="Erlang", exts=(".erl", ".hrl"), rules=(_string('"'), _single("%", "%"))),
    Language(id="go", name="Go", exts=(".go",), rules=(*_C_STRINGS, _string("`", escape=""), *_C_COMMENTS)),
    Language(
        id="groovy",
        name="Groovy",
        exts=(".groovy",),
        rules=(_string('"""'), _string("'''"), *_C_STRINGS, *_C_COMMENTS),
    ),
    Language(id="java", name="Java", exts=(".java",), rules=(*_C_STRINGS, *_C_COMMENTS)),
    Language(
        id="javascript",
        name="JavaScript",
        exts=(".js", ".mjs", ".jsx"),
        rules=(*_C_STRINGS, _string("`"), *_C_COMMENTS),
    ),
    Language(id="kotlin", name="Kotlin", exts=(".kt", ".kts"), rules=(_string('"""', escape=""), *_C_STRINGS, *_C_COMMENTS)),
    Language(
        id="lua",
        name="Lua",
        exts=(".lua",),
        rules=(_string('"'), _string("'"), _multi("--[[", "]]"), _single("--")),
    ),
    Language(
        id="pascal",
        name="Pascal/Delphi",
        exts=(".pas", ".pp"),
        rules=(_string("'", escape="''"), _single("//"), _multi("{", "}"), _multi("(*", "*)", "*")),
    ),
    Language(
        id="perl",
        name="Perl",
        exts=(".perl", ".prl", ".pl", ".pm"),
        rules=(*_C_STRINGS, _single("#"), _multi("=pod\n", "=cut", line_start=True)),
    ),
    Language(id="php", name="PHP", exts=(".php",), rules=(*_C_STRINGS, _single("#"), *_C_COMMENTS)),
    Language(
        id="python",
        name="Python",
        exts=(".py",),
        rules=(_multi('"""', '"""'), _multi("'''", "'''"), *_C_STRINGS, _single("#")),
    ),
    Language(
        id="ruby",
        name="Ruby",
        exts=(".rb",),
        rules=(*_C_STRINGS, _single("#"), _multi("=begin\n", "=end", line_start=True)),
    ),
    Language(id="rust", name="Rust", exts=(".rs",), rules=(_string('"'), *_C_COMMENTS)),
    Language(id="scala", name="Scala", exts=(".scala",), rules=(_string('"""', escape=""), *_C_STRINGS, *_C_COMMENTS)),
    Language(id="swift", name="Swift", exts=(".swift",), rules=(_string('"'), _single("//"), _multi("/*", "*/", "*"))),
    Language(
        id="typescript",
        name="TypeScript",
        exts=(".ts", ".tsx"),
        rules=(*_C_STRINGS, _string("`"), *_C_COMMENTS),
    ),
)


class LanguageRegistry:
    """Read-only lookup of languages by id and by file extension."""

    def __init__(self, languages: tuple[Language, ...] | list[Language]):
        self._langs: dict[str, Language] = {}
        self._exts: dict[str, Language] = {}
        for lang in languages:
            if lang.id in self._langs:
                raise ValueError(f"duplicate language id {lang.id!r}")
            self._langs[lang.id] = lang
            for ext in lang.exts:
                self._exts.setdefault(ext.lower(), lang)

    def get(self, lang_id: str) -> Language | None:
        return self._langs.get(lang_id.lower())

    def by_ext(self, ext: str) -> Language | None:
        if ext and not ext.startswith("."):
            ext = "." + ext
        return self._exts.get(ext.lower())

    def ids(self) -> list[str]:
        return list(self._langs)

    def __iter__(self) -> Iterator[Language]:
        return iter(self._langs.values())

    def __len__(self) -> int:
        return len(self._langs)

    def detect(self, directory: Path, recursive: bool = True) -> Language | None:
        """Return the language with the most source files under ``directory``."""
        pattern = "**/*" if recursive else "*"
        counts: Counter[str] = Counter()
        for path in directory.glob(pattern):
            if not path.is_file():
                continue
            lang = self.by_ext(path.suffix)
            if lang is not None:
                counts[lang.id] += 1

        if not counts:
            return None
        lang_id, count = counts.most_common(1)[0]
        logger.debug("detected %s (%d files) in %s", lang_id, count, directory)
        return self._langs[lang_id]


def build_registry(extra: list[Language] | None = None) -> LanguageRegistry:
    """Create a registry holding the built-in languages plus ``extra``."""
    return LanguageRegistry([*_BUILTIN, *(extra or [])])
