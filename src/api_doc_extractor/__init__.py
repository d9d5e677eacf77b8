"""Extracts API documentation annotations from source-code comments."""

__version__ = "6.0.0"

from api_doc_extractor.input.options import InputOptions
from api_doc_extractor.message import Message, MessageHandler, Severity
from api_doc_extractor.parser.builder import Builder, build

__all__ = ["Builder", "InputOptions", "Message", "MessageHandler", "Severity", "__version__", "build"]
