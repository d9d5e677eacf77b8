"""Parameters, enums and the typed-value fields they share with requests."""

from pydantic import Field, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

from api_doc_extractor.doc.base import TEXT, Type, Version, XmlModel, check_unique


class Enum(XmlModel):
    """One allowed value of an enum-valued parameter.

        <enum value="male">Male</enum>
    """

    value: str = Field(min_length=1)
    summary: str = ""
    description: str = Field("", alias=TEXT)
    deprecated: Version = ""


class TypedModel(XmlModel):
    """Type description shared by ``Param`` and ``Request``.

    ``type`` may be left out only when ``ref`` names a definition that will
    supply it once the whole document is known.
    """

    ref: str = ""
    type: Type | None = Field(None, validate_default=True)
    array: bool = False
    items: list["Param"] = Field(default_factory=list, alias="param", validate_default=True)
    enums: list[Enum] = Field(default_factory=list, alias="enum")

    @field_validator("type")
    @classmethod
    def _check_type(cls, value: Type | None, info: ValidationInfo) -> Type | None:
        if value is None and not info.data.get("ref"):
            raise PydanticCustomError("required", "type is required")
        return value

    @field_validator("items")
    @classmethod
    def _check_items(cls, value: list["Param"], info: ValidationInfo) -> list["Param"]:
        if info.data.get("type") is Type.OBJECT and not value and not info.data.get("ref"):
            raise PydanticCustomError("required", "object type requires at least one param")
        check_unique((p.name for p in value), "param name")
        return value

    @field_validator("enums")
    @classmethod
    def _check_enums(cls, value: list[Enum]) -> list[Enum]:
        check_unique((e.value for e in value), "enum value")
        return value

    @property
    def is_enum(self) -> bool:
        return bool(self.enums)


class Param(TypedModel):
    """A named, possibly nested value description.

        <param name="sex" type="string" summary="gender">
            <enum value="male">Male</enum>
            <enum value="female">Female</enum>
        </param>
    """

    name: str = Field(min_length=1)
    optional: bool = False
    default: str = ""
    summary: str = ""
    description: str = ""
    deprecated: Version = ""


TypedModel.model_rebuild()
Param.model_rebuild()
