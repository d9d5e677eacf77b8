"""Project configuration stored as YAML next to the sources."""

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from api_doc_extractor import __version__
from api_doc_extractor.input.options import InputOptions
from api_doc_extractor.lang.registry import LanguageRegistry
from api_doc_extractor.message import ConfigurationError
from api_doc_extractor.parser.annotation import field_path

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".apidoc.yaml"


def _major(version: str) -> str:
    return version.split(".", 1)[0]


class Config(BaseModel):
    version: str
    inputs: list[InputOptions] = Field(min_length=1)

    @field_validator("version")
    @classmethod
    def _check_version(cls, value: str) -> str:
        if not value or not value.split(".", 1)[0].isdigit():
            raise ValueError(f"invalid version {value!r}")
        if _major(value) != _major(__version__):
            raise ValueError(f"version {value} is not compatible with {__version__}")
        return value


def load_config(path: Path) -> Config:
    """Load ``path``, or ``path/.apidoc.yaml`` when ``path`` is a directory.

    Relative input directories are resolved against the config file's
    directory. Every failure raises ``ConfigurationError``.
    """
    if path.is_dir():
        path = path / CONFIG_FILENAME

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigurationError(f"cannot read config: {e}", file=str(path))
    except yaml.YAMLError as e:
        raise ConfigurationError(f"invalid YAML: {e}", file=str(path))

    if not isinstance(data, dict):
        raise ConfigurationError("config must be a mapping", file=str(path))

    try:
        cfg = Config.model_validate(data)
    except ValidationError as e:
        first = e.errors(include_url=False)[0]
        field = field_path("", first["loc"]).lstrip(".")
        raise ConfigurationError(first["msg"], file=str(path), field=field)

    base = path.parent
    for item in cfg.inputs:
        if item.dir is not None and not item.dir.is_absolute():
            item.dir = (base / item.dir).resolve()
    logger.debug("loaded %s with %d inputs", path, len(cfg.inputs))
    return cfg


def write_config(directory: Path, registry: LanguageRegistry) -> Path:
    """Detect the language used under ``directory`` and write a default config."""
    lang = registry.detect(directory, recursive=True)
    if lang is None:
        raise ConfigurationError("no supported source files found", file=str(directory), field="lang")

    cfg = Config(
        version=__version__,
        inputs=[InputOptions(lang=lang.id, dir=Path("."), exts=list(lang.exts), recursive=True)],
    )
    data = cfg.model_dump(mode="json", exclude_defaults=False)
    for item in data["inputs"]:
        if not item["paths"]:
            del item["paths"]

    path = directory / CONFIG_FILENAME
    path.write_text(yaml.safe_dump(data, sort_keys=False, allow_unicode=True), encoding="utf-8")
    logger.info("wrote %s", path)
    return path
