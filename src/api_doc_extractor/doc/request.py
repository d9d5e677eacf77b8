"""Request and response bodies."""

from pydantic import Field, field_validator

from api_doc_extractor.doc.base import TEXT, Version, XmlModel, check_unique
from api_doc_extractor.doc.param import Param, TypedModel


class Example(XmlModel):
    """An example payload; JSON examples are checked against their body."""

    mimetype: str = Field(min_length=1)
    summary: str = ""
    content: str = Field("", alias=TEXT)


class Request(TypedModel):
    """A request or response body.

        <response status="200" mimetype="json" type="object">
            <param name="id" type="number" />
        </response>
    """

    mimetype: str = Field(min_length=1)
    status: int | None = Field(None, ge=100, le=599)
    summary: str = ""
    description: str = ""
    deprecated: Version = ""
    headers: list[Param] = Field(default_factory=list, alias="header")
    examples: list[Example] = Field(default_factory=list, alias="example")

    @field_validator("headers")
    @classmethod
    def _check_headers(cls, value: list[Param]) -> list[Param]:
        check_unique((h.name for h in value), "header")
        return value

    def to_param(self) -> Param:
        """Root parameter describing this body, for the example validator."""
        return Param.model_construct(
            name="",
            ref=self.ref,
            type=self.type,
            array=self.array,
            items=self.items,
            enums=self.enums,
        )
