"""Domain model of an API document.

``Document`` lives in ``api_doc_extractor.doc.document``; it depends on the
example validator and is not re-exported here.
"""

from api_doc_extractor.doc.api import API, SCHEMA_HTTP, SCHEMA_HTTPS, Callback, Path
from api_doc_extractor.doc.apidoc import APIDoc, Contact, License, Server, Tag
from api_doc_extractor.doc.base import METHODS, Type
from api_doc_extractor.doc.param import Enum, Param, TypedModel
from api_doc_extractor.doc.request import Example, Request

__all__ = [
    "API",
    "APIDoc",
    "Callback",
    "Contact",
    "Enum",
    "Example",
    "License",
    "METHODS",
    "Param",
    "Path",
    "Request",
    "SCHEMA_HTTP",
    "SCHEMA_HTTPS",
    "Server",
    "Tag",
    "Type",
    "TypedModel",
]
