"""Top-level document metadata declared once per group."""

from pydantic import Field, field_validator

from api_doc_extractor.doc.base import TEXT, Version, XmlModel, check_unique
from api_doc_extractor.doc.param import Param


class Tag(XmlModel):
    name: str = Field(min_length=1)
    title: str = ""
    deprecated: Version = ""


class Server(XmlModel):
    name: str = Field(min_length=1)
    url: str = Field(min_length=1)
    summary: str = ""
    deprecated: Version = ""


class Contact(XmlModel):
    name: str = Field(min_length=1)
    url: str = ""
    email: str = ""


class License(XmlModel):
    text: str = Field(alias=TEXT, min_length=1)
    url: str = ""


class APIDoc(XmlModel):
    """Document metadata and the reusable definitions that ``ref`` points to.

        <apidoc version="1.0.0">
            <title>User service</title>
            <tag name="user" title="Users" />
            <server name="live" url="https://api.example.com" />
            <definition name="user" type="object">
                <param name="id" type="number" />
            </definition>
        </apidoc>
    """

    version: Version = ""
    group: str = ""
    lang: str = ""
    title: str = Field(min_length=1)
    description: str = ""
    contact: Contact | None = None
    license: License | None = None
    tags: list[Tag] = Field(default_factory=list, alias="tag")
    servers: list[Server] = Field(default_factory=list, alias="server")
    definitions: list[Param] = Field(default_factory=list, alias="definition")

    file: str = Field("", exclude=True)
    line: int = Field(0, exclude=True)

    @field_validator("tags")
    @classmethod
    def _check_tags(cls, value: list[Tag]) -> list[Tag]:
        check_unique((t.name for t in value), "tag")
        return value

    @field_validator("servers")
    @classmethod
    def _check_servers(cls, value: list[Server]) -> list[Server]:
        check_unique((s.name for s in value), "server")
        return value

    @field_validator("definitions")
    @classmethod
    def _check_definitions(cls, value: list[Param]) -> list[Param]:
        check_unique((d.name for d in value), "definition")
        return value
