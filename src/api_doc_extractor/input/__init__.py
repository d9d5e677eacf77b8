"""Reading source inputs and extracting their comment blocks."""

from api_doc_extractor.input.options import InputOptions, SourceSet
from api_doc_extractor.input.pipeline import Extractor, RawBlock, scan_source
from api_doc_extractor.input.reader import read_source

__all__ = ["Extractor", "InputOptions", "RawBlock", "SourceSet", "read_source", "scan_source"]
