import threading
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from unittest.mock import patch

import pytest

from api_doc_extractor import InputOptions, MessageHandler, build
from api_doc_extractor.doc.base import Type
from api_doc_extractor.doc.document import DEFAULT_GROUP, Document
from api_doc_extractor.message import ConfigurationError
from api_doc_extractor.parser.annotation import parse_block
from api_doc_extractor.parser.builder import Builder

FIXTURES = Path(__file__).parent / "fixtures"

APIDOC = """<apidoc version="1.0.0" {attrs}>
    <title>svc</title>
    <tag name="user" />
    <definition name="user" type="object">
        <param name="id" type="number" />
        <param name="name" type="string" />
    </definition>
</apidoc>"""

API = """<api method="{method}" tags="{tags}" {attrs}>
    <path>{path}</path>
    {body}
    <response status="200" mimetype="json" {response} />
</api>"""


def _apidoc(attrs: str = "") -> str:
    return APIDOC.format(attrs=attrs)


def _api(method="GET", path="/users", tags="user", attrs="", body="", response='type="none"') -> str:
    return API.format(method=method, path=path, tags=tags, attrs=attrs, body=body, response=response)


def _write(directory: Path, name: str, *blocks: str) -> None:
    parts = ["package users\n"]
    for index, block in enumerate(blocks):
        parts.append(f"/*\n{block}\n*/\nfunc f{index}() {{}}\n")
    (directory / name).write_text("\n".join(parts))


def _build(directory: Path) -> tuple[dict[str, Document], MessageHandler]:
    handler = MessageHandler()
    docs = Builder(max_workers=4).build([InputOptions(lang="go", dir=directory)], handler)
    return docs, handler


class TestFixtures:
    def test_go_and_python(self):
        handler = MessageHandler()
        options = [
            InputOptions(lang="go", dir=FIXTURES / "go"),
            InputOptions(lang="python", dir=FIXTURES / "python"),
        ]
        docs = build(options, handler)

        assert handler.messages == []
        assert list(docs) == [DEFAULT_GROUP]
        doc = docs[DEFAULT_GROUP]
        assert doc.valid
        assert doc.apidoc.title == "User service"
        assert sorted(api.key for api in doc.apis) == ["DELETE /users/{id}", "GET /users", "POST /users"]

    def test_references_are_resolved(self):
        docs = build([InputOptions(lang="go", dir=FIXTURES / "go")], MessageHandler())
        apis = {api.key: api for api in docs[DEFAULT_GROUP].apis}

        listed = apis["GET /users"].responses[0]
        assert listed.type is Type.OBJECT
        assert listed.array is True
        assert [p.name for p in listed.items] == ["id", "name"]

        created = apis["POST /users"].requests[0]
        assert created.type is Type.OBJECT
        assert [p.name for p in created.items] == ["id", "name"]

    def test_location(self):
        docs = build([InputOptions(lang="go", dir=FIXTURES / "go")], MessageHandler())
        doc = docs[DEFAULT_GROUP]
        assert doc.apidoc.file.endswith("users.go")
        assert doc.apidoc.line == 3


class TestGroups:
    def test_grouped_documents(self, tmp_path):
        _write(
            tmp_path,
            "a.go",
            _apidoc(),
            _apidoc('group="admin"'),
            _api(),
            _api(method="DELETE", attrs='group="admin"'),
        )
        docs, handler = _build(tmp_path)
        assert handler.messages == []
        assert list(docs) == ["admin", DEFAULT_GROUP]
        assert [api.key for api in docs["admin"].apis] == ["DELETE /users"]
        assert [api.key for api in docs[DEFAULT_GROUP].apis] == ["GET /users"]

    def test_group_without_apidoc(self, tmp_path):
        _write(tmp_path, "a.go", _api(attrs='group="orphan"'))
        docs, handler = _build(tmp_path)
        assert docs["orphan"].valid
        assert len(handler.warnings) == 1
        assert handler.warnings[0].field == "apidoc"

    def test_builder_can_be_reused(self, tmp_path):
        _write(tmp_path, "a.go", _apidoc(), _api())
        builder = Builder()
        first = builder.build([InputOptions(lang="go", dir=tmp_path)], MessageHandler())
        second = builder.build([InputOptions(lang="go", dir=tmp_path)], MessageHandler())
        assert len(first[DEFAULT_GROUP].apis) == 1
        assert len(second[DEFAULT_GROUP].apis) == 1


class TestErrors:
    def test_configuration_error_is_raised(self):
        with pytest.raises(ConfigurationError):
            build([], MessageHandler())

    def test_syntax_error_is_isolated(self, tmp_path):
        _write(tmp_path, "a.go", _apidoc(), _api(), _api(method="FETCH", path="/other"))
        docs, handler = _build(tmp_path)

        assert len(handler.errors) == 1
        error = handler.errors[0]
        assert error.field == "api.method"
        assert error.file.endswith("a.go")
        assert [api.key for api in docs[DEFAULT_GROUP].apis] == ["GET /users"]

    def test_unresolved_reference(self, tmp_path):
        _write(tmp_path, "a.go", _apidoc(), _api(response='ref="nope"'))
        docs, handler = _build(tmp_path)

        assert not docs[DEFAULT_GROUP].valid
        assert [e.field for e in handler.errors] == ["api.response[0].ref"]

    def test_conflicting_reference_type(self, tmp_path):
        _write(tmp_path, "a.go", _apidoc(), _api(response='type="string" ref="user"'))
        docs, handler = _build(tmp_path)
        assert not docs[DEFAULT_GROUP].valid
        assert [e.field for e in handler.errors] == ["api.response[0].type"]

    def test_example_mismatch(self, tmp_path):
        body = '<request mimetype="json" ref="user"><example mimetype="json">{"id": "x"}</example></request>'
        _write(tmp_path, "a.go", _apidoc(), _api(method="POST", body=body))
        docs, handler = _build(tmp_path)

        assert not docs[DEFAULT_GROUP].valid
        assert [e.field for e in handler.errors] == ["api.request[0].example[0].id"]

    def test_non_json_example_is_not_checked(self, tmp_path):
        body = '<request mimetype="xml" ref="user"><example mimetype="xml">&lt;user /&gt;</example></request>'
        _write(tmp_path, "a.go", _apidoc(), _api(method="POST", body=body))
        docs, handler = _build(tmp_path)
        assert handler.errors == []
        assert docs[DEFAULT_GROUP].valid

    def test_duplicate_apidoc(self, tmp_path):
        _write(tmp_path, "a.go", _apidoc(), _apidoc())
        _, handler = _build(tmp_path)
        assert [e.field for e in handler.errors] == ["apidoc"]

    def test_duplicate_api(self, tmp_path):
        _write(tmp_path, "a.go", _apidoc(), _api())
        _write(tmp_path, "b.go", _api())
        docs, handler = _build(tmp_path)
        assert not docs[DEFAULT_GROUP].valid
        assert [e.field for e in handler.errors] == ["api"]

    def test_undeclared_tag(self, tmp_path):
        _write(tmp_path, "a.go", _apidoc(), _api(tags="user,admin"))
        docs, handler = _build(tmp_path)
        assert not docs[DEFAULT_GROUP].valid
        assert [e.field for e in handler.errors] == ["api.tags[1]"]

    def test_circular_definitions(self, tmp_path):
        apidoc = """<apidoc version="1.0.0">
    <title>svc</title>
    <definition name="a" ref="b" />
    <definition name="b" ref="a" />
</apidoc>"""
        _write(tmp_path, "a.go", apidoc, _api(tags="", response='ref="a"'))
        docs, handler = _build(tmp_path)
        assert not docs[DEFAULT_GROUP].valid
        assert any("circular reference" in e.message for e in handler.errors)


class TestConcurrency:
    def test_pending_parse_work_is_bounded(self, tmp_path):
        for index in range(20):
            _write(tmp_path, f"f{index:02d}.go", *[f"plain comment {n}" for n in range(10)])

        state = {"pending": 0, "peak": 0}
        lock = threading.Lock()

        def finished(future):
            with lock:
                state["pending"] -= 1

        class CountingExecutor(ThreadPoolExecutor):
            def submit(self, fn, *args, **kwargs):
                future = super().submit(fn, *args, **kwargs)
                with lock:
                    state["pending"] += 1
                    state["peak"] = max(state["peak"], state["pending"])
                future.add_done_callback(finished)
                return future

        def slow_parse(block):
            time.sleep(0.002)
            return parse_block(block)

        with patch("api_doc_extractor.parser.builder.ThreadPoolExecutor", CountingExecutor), patch(
            "api_doc_extractor.parser.builder.parse_block", side_effect=slow_parse
        ) as parse:
            Builder(max_workers=1, queue_size=2).build([InputOptions(lang="go", dir=tmp_path)], MessageHandler())

        assert parse.call_count == 200
        assert 1 <= state["peak"] <= 2

    def test_parallel_builds_on_one_builder(self, tmp_path):
        first, second = tmp_path / "first", tmp_path / "second"
        first.mkdir()
        second.mkdir()
        _write(first, "a.go", _apidoc(), *[_api(path=f"/first/{n}") for n in range(20)])
        _write(second, "a.go", _apidoc(), *[_api(path=f"/second/{n}") for n in range(20)])

        builder = Builder(max_workers=2)
        results = {}

        def run(name, directory):
            results[name] = builder.build([InputOptions(lang="go", dir=directory)], MessageHandler())

        threads = [threading.Thread(target=run, args=(n, d)) for n, d in (("first", first), ("second", second))]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        for name in ("first", "second"):
            keys = [api.key for api in results[name][DEFAULT_GROUP].apis]
            assert len(keys) == 20
            assert all(key.startswith(f"GET /{name}/") for key in keys)
