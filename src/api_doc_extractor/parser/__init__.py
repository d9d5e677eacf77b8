"""Annotation parsing and document building."""

from api_doc_extractor.parser.annotation import classify, parse_block, to_draft
from api_doc_extractor.parser.builder import Builder, build

__all__ = ["Builder", "build", "classify", "parse_block", "to_draft"]
