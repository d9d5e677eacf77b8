"""API entries, their paths and callbacks."""

import re

from pydantic import Field, field_validator, model_validator
from pydantic_core import PydanticCustomError

from api_doc_extractor.doc.base import TEXT, CommaList, Method, Version, XmlModel, check_unique
from api_doc_extractor.doc.param import Param
from api_doc_extractor.doc.request import Request

SCHEMA_HTTP = "HTTP"
SCHEMA_HTTPS = "HTTPS"

_PLACEHOLDER_RE = re.compile(r"\{([^{}/]+)\}")


class Path(XmlModel):
    """Request path with its path and query parameters.

        <path>/users/{id}<param name="id" type="number" /></path>
    """

    path: str = Field(alias=TEXT, min_length=1)
    params: list[Param] = Field(default_factory=list, alias="param")
    queries: list[Param] = Field(default_factory=list, alias="query")

    @field_validator("path")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip()

    @field_validator("params")
    @classmethod
    def _check_params(cls, value: list[Param]) -> list[Param]:
        check_unique((p.name for p in value), "param name")
        return value

    @field_validator("queries")
    @classmethod
    def _check_queries(cls, value: list[Param]) -> list[Param]:
        check_unique((q.name for q in value), "query name")
        return value

    @model_validator(mode="after")
    def _match_params(self) -> "Path":
        placeholders = set(_PLACEHOLDER_RE.findall(self.path))
        declared = {p.name for p in self.params}
        if placeholders != declared:
            missing = sorted(placeholders ^ declared)
            raise PydanticCustomError(
                "path_params",
                "path parameters do not match the path: {names}",
                {"names": ", ".join(missing)},
            )
        return self


class Callback(XmlModel):
    """A request the server sends back to the client.

        <callback method="POST" schema="https">
            <request mimetype="json" type="object">
                <param name="name" type="string" />
            </request>
        </callback>
    """

    method: Method
    scheme: str = Field(alias="schema")
    ref: str = ""
    summary: str = ""
    description: str = ""
    deprecated: Version = ""
    queries: list[Param] = Field(default_factory=list, alias="query")
    responses: list[Request] = Field(default_factory=list, alias="response")
    requests: list[Request] = Field(alias="request", min_length=1)

    @field_validator("scheme")
    @classmethod
    def _check_scheme(cls, value: str) -> str:
        scheme = value.strip().upper()
        if scheme not in (SCHEMA_HTTP, SCHEMA_HTTPS):
            raise PydanticCustomError("invalid_value", "schema must be HTTP or HTTPS, got '{value}'", {"value": value})
        return scheme

    @field_validator("queries")
    @classmethod
    def _check_queries(cls, value: list[Param]) -> list[Param]:
        check_unique((q.name for q in value), "query name")
        return value


class API(XmlModel):
    """One API entry.

        <api method="GET" summary="list users" group="admin">
            <path>/users</path>
            <response status="200" mimetype="json" type="object">
                <param name="id" type="number" />
            </response>
        </api>
    """

    method: Method
    id: str = ""
    group: str = ""
    summary: str = ""
    description: str = ""
    deprecated: Version = ""
    tags: CommaList = Field(default_factory=list)
    path: Path
    headers: list[Param] = Field(default_factory=list, alias="header")
    requests: list[Request] = Field(default_factory=list, alias="request")
    responses: list[Request] = Field(alias="response", min_length=1)
    callbacks: list[Callback] = Field(default_factory=list, alias="callback")

    # location of the annotation block, set by the builder
    file: str = Field("", exclude=True)
    line: int = Field(0, exclude=True)

    @field_validator("headers")
    @classmethod
    def _check_headers(cls, value: list[Param]) -> list[Param]:
        check_unique((h.name for h in value), "header")
        return value

    @property
    def key(self) -> str:
        return f"{self.method} {self.path.path}"
