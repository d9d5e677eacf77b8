"""CLI entry point for api-doc-extractor."""

import logging
import sys
from pathlib import Path

import click

from api_doc_extractor import __version__
from api_doc_extractor.config import load_config, write_config
from api_doc_extractor.doc.document import DEFAULT_GROUP, Document
from api_doc_extractor.input.options import InputOptions
from api_doc_extractor.lang.registry import build_registry
from api_doc_extractor.message import ApidocError, Message, MessageHandler, Severity
from api_doc_extractor.mock.json import build_json
from api_doc_extractor.parser.builder import Builder

_COLORS = {
    Severity.ERROR: "red",
    Severity.WARNING: "cyan",
    Severity.INFO: None,
    Severity.SUCCESS: "green",
}


def _echo(message: Message) -> None:
    err = message.severity in (Severity.ERROR, Severity.WARNING)
    click.secho(f"[{message.severity.value.upper()}] {message}", fg=_COLORS[message.severity], err=err)


def _build(options: list[InputOptions], workers: int | None) -> tuple[dict[str, Document], MessageHandler]:
    handler = MessageHandler(callback=_echo)
    docs = Builder(build_registry(), max_workers=workers).build(options, handler)
    return docs, handler


def _summary(docs: dict[str, Document], handler: MessageHandler) -> None:
    for group, doc in docs.items():
        state = "ok" if doc.valid else "invalid"
        click.echo(f"  {group}: {len(doc.apis)} apis ({state})")
    click.echo(f"{len(handler.errors)} errors, {len(handler.warnings)} warnings")


@click.group()
@click.version_option(__version__, prog_name="api-doc-extractor")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose: bool):
    """api-doc-extractor: build API documentation from source-code comments."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("paths", nargs=-1, type=click.Path(exists=True, path_type=Path))
@click.option("-j", "--workers", default=None, type=int, help="Number of worker threads.")
def check(paths: tuple[Path, ...], workers: int | None):
    """Check the annotations of projects configured by .apidoc.yaml files."""
    failed = False
    for path in paths or (Path("."),):
        try:
            cfg = load_config(path)
            click.echo(f"Checking {path}...")
            docs, handler = _build(cfg.inputs, workers)
        except ApidocError as e:
            _echo(e.to_message())
            failed = True
            continue
        _summary(docs, handler)
        failed = failed or handler.has_errors
    if failed:
        sys.exit(1)


@main.command()
@click.argument("directory", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("-l", "--lang", default=None, help="Language id; detected when omitted.")
@click.option("-r", "--recursive", is_flag=True, help="Scan sub-directories.")
@click.option("--encoding", default="utf-8", help="Encoding of the source files.")
@click.option("-j", "--workers", default=None, type=int, help="Number of worker threads.")
def scan(directory: Path, lang: str | None, recursive: bool, encoding: str, workers: int | None):
    """Check the annotations of a directory without a config file."""
    if lang is None:
        detected = build_registry().detect(directory, recursive=recursive)
        if detected is None:
            raise click.ClickException(f"no supported source files in {directory}")
        lang = detected.id
        click.echo(f"Detected language: {lang}")

    options = [InputOptions(lang=lang, dir=directory, recursive=recursive, encoding=encoding)]
    try:
        docs, handler = _build(options, workers)
    except ApidocError as e:
        raise click.ClickException(str(e))
    _summary(docs, handler)
    if handler.has_errors:
        sys.exit(1)


@main.command()
@click.argument("directory", default=".", type=click.Path(exists=True, file_okay=False, path_type=Path))
def init(directory: Path):
    """Write a default .apidoc.yaml for the sources under DIRECTORY."""
    try:
        path = write_config(directory, build_registry())
    except ApidocError as e:
        raise click.ClickException(str(e))
    click.echo(f"Config saved to {path}")


@main.command()
def langs():
    """List the supported languages."""
    for lang in build_registry():
        click.echo(f"{lang.id:<12} {lang.name:<14} {' '.join(lang.exts)}")


@main.command()
@click.argument("config_path", type=click.Path(exists=True, path_type=Path))
@click.option("-m", "--method", required=True, help="HTTP method of the API.")
@click.option("-p", "--path", "api_path", required=True, help="Path of the API, e.g. /users/{id}.")
@click.option("-s", "--status", default=None, type=int, help="Response status; the first response when omitted.")
@click.option("-g", "--group", default=DEFAULT_GROUP, help="Document group.")
def mock(config_path: Path, method: str, api_path: str, status: int | None, group: str):
    """Print a sample JSON response of one API."""
    try:
        cfg = load_config(config_path)
        handler = MessageHandler()
        docs = Builder(build_registry()).build(cfg.inputs, handler)
    except ApidocError as e:
        raise click.ClickException(str(e))

    doc = docs.get(group)
    if doc is None:
        raise click.ClickException(f"unknown group {group!r}")

    key = f"{method.upper()} {api_path}"
    api = next((a for a in doc.apis if a.key == key), None)
    if api is None:
        raise click.ClickException(f"no api {key!r} in group {group!r}")

    responses = [r for r in api.responses if status is None or r.status == status]
    if not responses:
        raise click.ClickException(f"no response with status {status} for {key!r}")
    click.echo(build_json(responses[0].to_param()).decode("utf-8"))
