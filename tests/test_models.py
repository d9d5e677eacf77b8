import pytest
from pydantic import ValidationError

from api_doc_extractor.doc import API, APIDoc, Callback, Param, Request
from api_doc_extractor.doc.base import TEXT, Type
from api_doc_extractor.doc.api import Path


def _first(exc: pytest.ExceptionInfo) -> dict:
    return exc.value.errors(include_url=False)[0]


def _api(**overrides) -> dict:
    draft = {
        "method": "get",
        "path": "/users",
        "response": [{"status": "200", "mimetype": "json", "type": "object", "param": [{"name": "id", "type": "number"}]}],
    }
    draft.update(overrides)
    return draft


class TestParam:
    def test_simple(self):
        param = Param.model_validate({"name": "id", "type": "number", "optional": "true"})
        assert param.type is Type.NUMBER
        assert param.optional is True
        assert not param.is_enum

    def test_type_required(self):
        with pytest.raises(ValidationError) as exc:
            Param.model_validate({"name": "id"})
        assert _first(exc)["loc"] == ("type",)
        assert _first(exc)["msg"] == "type is required"

    def test_ref_without_type(self):
        param = Param.model_validate({"name": "user", "ref": "user"})
        assert param.type is None

    def test_object_needs_params(self):
        with pytest.raises(ValidationError) as exc:
            Param.model_validate({"name": "user", "type": "object"})
        assert _first(exc)["loc"] == ("param",)

    def test_object_with_ref_may_omit_params(self):
        Param.model_validate({"name": "user", "type": "object", "ref": "user"})

    def test_duplicate_names(self):
        with pytest.raises(ValidationError) as exc:
            Param.model_validate(
                {"name": "u", "type": "object", "param": [{"name": "id", "type": "number"}, {"name": "id", "type": "string"}]}
            )
        assert _first(exc)["loc"] == ("param",)
        assert _first(exc)["msg"] == "duplicate param name 'id'"

    def test_duplicate_enums(self):
        with pytest.raises(ValidationError) as exc:
            Param.model_validate({"name": "sex", "type": "string", "enum": [{"value": "m"}, {"value": "m"}]})
        assert _first(exc)["loc"] == ("enum",)

    def test_enum_description(self):
        param = Param.model_validate({"name": "sex", "type": "string", "enum": [{"value": "m", TEXT: "Male"}]})
        assert param.is_enum
        assert param.enums[0].description == "Male"

    def test_unknown_type(self):
        with pytest.raises(ValidationError) as exc:
            Param.model_validate({"name": "id", "type": "int"})
        assert _first(exc)["loc"] == ("type",)

    def test_deprecated_must_be_version(self):
        with pytest.raises(ValidationError) as exc:
            Param.model_validate({"name": "id", "type": "number", "deprecated": "soon"})
        assert _first(exc)["loc"] == ("deprecated",)
        Param.model_validate({"name": "id", "type": "number", "deprecated": "1.2.0"})

    def test_unknown_attribute(self):
        with pytest.raises(ValidationError) as exc:
            Param.model_validate({"name": "id", "type": "number", "color": "red"})
        assert _first(exc)["loc"] == ("color",)


class TestRequest:
    def test_mimetype_required(self):
        with pytest.raises(ValidationError) as exc:
            Request.model_validate({"type": "none"})
        assert _first(exc)["loc"] == ("mimetype",)

    def test_status_range(self):
        with pytest.raises(ValidationError) as exc:
            Request.model_validate({"mimetype": "json", "type": "none", "status": "700"})
        assert _first(exc)["loc"] == ("status",)

    def test_duplicate_headers(self):
        with pytest.raises(ValidationError) as exc:
            Request.model_validate(
                {
                    "mimetype": "json",
                    "type": "none",
                    "header": [{"name": "x", "type": "string"}, {"name": "x", "type": "string"}],
                }
            )
        assert _first(exc)["loc"] == ("header",)

    def test_to_param(self):
        request = Request.model_validate(
            {"mimetype": "json", "type": "object", "array": "true", "param": [{"name": "id", "type": "number"}]}
        )
        param = request.to_param()
        assert param.name == ""
        assert param.type is Type.OBJECT
        assert param.array is True
        assert [p.name for p in param.items] == ["id"]

    def test_example_text(self):
        request = Request.model_validate(
            {"mimetype": "json", "type": "number", "example": [{"mimetype": "json", TEXT: "1"}]}
        )
        assert request.examples[0].content == "1"


class TestPath:
    def test_text_only(self):
        assert Path.model_validate("  /users ").path == "/users"

    def test_params_match(self):
        path = Path.model_validate({TEXT: "/users/{id}", "param": [{"name": "id", "type": "number"}]})
        assert [p.name for p in path.params] == ["id"]

    def test_undeclared_placeholder(self):
        with pytest.raises(ValidationError) as exc:
            Path.model_validate("/users/{id}")
        assert "id" in _first(exc)["msg"]

    def test_unused_param(self):
        with pytest.raises(ValidationError):
            Path.model_validate({TEXT: "/users", "param": [{"name": "id", "type": "number"}]})


class TestAPI:
    def test_minimal(self):
        api = API.model_validate(_api(tags="user, admin,"))
        assert api.method == "GET"
        assert api.key == "GET /users"
        assert api.tags == ["user", "admin"]
        assert api.responses[0].status == 200

    def test_invalid_method(self):
        with pytest.raises(ValidationError) as exc:
            API.model_validate(_api(method="FETCH"))
        assert _first(exc)["loc"] == ("method",)
        assert _first(exc)["msg"] == "invalid method 'FETCH'"

    def test_empty_method(self):
        with pytest.raises(ValidationError) as exc:
            API.model_validate(_api(method=""))
        assert _first(exc)["msg"] == "method is required"

    def test_response_required(self):
        draft = _api()
        del draft["response"]
        with pytest.raises(ValidationError) as exc:
            API.model_validate(draft)
        assert _first(exc)["loc"] == ("response",)

    def test_nested_location(self):
        draft = _api(response=[{"mimetype": "json", "type": "object", "param": [{"name": "a", "type": "number"}, {"name": "b"}]}])
        with pytest.raises(ValidationError) as exc:
            API.model_validate(draft)
        assert _first(exc)["loc"] == ("response", 0, "param", 1, "type")

    def test_location_is_excluded_from_dump(self):
        api = API.model_validate(_api())
        api.file, api.line = "a.go", 3
        dumped = api.model_dump(by_alias=True)
        assert "file" not in dumped
        assert "line" not in dumped


class TestCallback:
    def _callback(self, **overrides) -> dict:
        draft = {"method": "post", "schema": "https", "request": [{"mimetype": "json", "type": "none"}]}
        draft.update(overrides)
        return draft

    def test_scheme_is_normalized(self):
        assert Callback.model_validate(self._callback()).scheme == "HTTPS"

    def test_invalid_scheme(self):
        with pytest.raises(ValidationError) as exc:
            Callback.model_validate(self._callback(schema="ftp"))
        assert _first(exc)["loc"] == ("schema",)

    def test_method_required(self):
        draft = self._callback()
        del draft["method"]
        with pytest.raises(ValidationError) as exc:
            Callback.model_validate(draft)
        assert _first(exc)["loc"] == ("method",)

    def test_empty_method(self):
        with pytest.raises(ValidationError) as exc:
            Callback.model_validate(self._callback(method=""))
        assert _first(exc)["loc"] == ("method",)
        assert _first(exc)["msg"] == "method is required"

    def test_request_required(self):
        draft = self._callback()
        del draft["request"]
        with pytest.raises(ValidationError) as exc:
            Callback.model_validate(draft)
        assert _first(exc)["loc"] == ("request",)


class TestAPIDoc:
    def test_minimal(self):
        doc = APIDoc.model_validate({"version": "1.0.0", "title": "svc", "license": {TEXT: "MIT", "url": "https://x"}})
        assert doc.license.text == "MIT"

    def test_title_required(self):
        with pytest.raises(ValidationError) as exc:
            APIDoc.model_validate({"version": "1.0.0"})
        assert _first(exc)["loc"] == ("title",)

    def test_duplicate_tags(self):
        with pytest.raises(ValidationError) as exc:
            APIDoc.model_validate({"title": "svc", "tag": [{"name": "a"}, {"name": "a"}]})
        assert _first(exc)["loc"] == ("tag",)

    def test_duplicate_definitions(self):
        definition = {"name": "user", "type": "number"}
        with pytest.raises(ValidationError) as exc:
            APIDoc.model_validate({"title": "svc", "definition": [definition, definition]})
        assert _first(exc)["loc"] == ("definition",)

    def test_invalid_version(self):
        with pytest.raises(ValidationError) as exc:
            APIDoc.model_validate({"title": "svc", "version": "v1"})
        assert _first(exc)["loc"] == ("version",)
