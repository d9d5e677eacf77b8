"""Per-language lexical extraction of comment blocks."""

from api_doc_extractor.lang.block import BlockKind, BlockRule, ScannedBlock, UnterminatedBlock, filter_symbols, scan
from api_doc_extractor.lang.lexer import Lexer
from api_doc_extractor.lang.registry import Language, LanguageRegistry, build_registry

__all__ = [
    "BlockKind",
    "BlockRule",
    "Language",
    "LanguageRegistry",
    "Lexer",
    "ScannedBlock",
    "UnterminatedBlock",
    "build_registry",
    "filter_symbols",
    "scan",
]
