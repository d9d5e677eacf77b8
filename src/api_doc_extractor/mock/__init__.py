"""Example payload checking and synthesis."""

from api_doc_extractor.mock.json import ARRAY_SIZE, build_json, find, synthesize, validate, validate_value

__all__ = ["ARRAY_SIZE", "build_json", "find", "synthesize", "validate", "validate_value"]
