"""Error records and the message sink shared by every stage.

Failures are raised as ``ApidocError`` subclasses where they happen and turned
into ``Message`` records by whoever isolates them (a file scan, a block parse,
the final document pass). The core never prints; the CLI decides how messages
are shown.
"""

import logging
import threading
from enum import Enum
from typing import Callable

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    SUCCESS = "success"


class Message(BaseModel):
    """A single reported problem or notice, located in the source."""

    severity: Severity
    message: str
    file: str = ""
    field: str = ""
    line: int = 0

    def __str__(self) -> str:
        location = self.file
        if self.line:
            location = f"{location}:{self.line}"
        if self.field:
            location = f"{location} [{self.field}]" if location else self.field
        return f"{location}: {self.message}" if location else self.message


class ApidocError(Exception):
    """Base error carrying file, dotted field path and line."""

    def __init__(self, message: str, file: str = "", field: str = "", line: int = 0):
        super().__init__(message)
        self.message = message
        self.file = file
        self.field = field
        self.line = line

    def prefix_field(self, prefix: str) -> "ApidocError":
        """Prepend a parent segment to the field path and return self."""
        if self.field:
            sep = "" if self.field.startswith("[") else "."
            self.field = f"{prefix}{sep}{self.field}"
        else:
            self.field = prefix
        return self

    def to_message(self, severity: Severity = Severity.ERROR) -> Message:
        return Message(
            severity=severity,
            message=self.message,
            file=self.file,
            field=self.field,
            line=self.line,
        )

    def __str__(self) -> str:
        return str(self.to_message())


class ConfigurationError(ApidocError):
    """Input options are missing or invalid; nothing is scheduled."""


class SourceIOError(ApidocError):
    """A source file could not be read or decoded."""


class AnnotationSyntaxError(ApidocError):
    """An annotation block breaks a structural rule of the domain model."""


class UnresolvedReferenceError(ApidocError):
    """A ``ref`` attribute names a definition that does not exist."""


class SchemaMismatchError(ApidocError):
    """A JSON value does not match its declared parameter tree."""


class MessageHandler:
    """Thread-safe collector for messages reported from worker threads."""

    def __init__(self, callback: Callable[[Message], None] | None = None):
        self._lock = threading.Lock()
        self._messages: list[Message] = []
        self._callback = callback

    def report(self, message: Message) -> None:
        with self._lock:
            self._messages.append(message)
            if self._callback is not None:
                self._callback(message)
        logger.debug("%s %s", message.severity.value, message)

    def error(self, err: ApidocError) -> None:
        self.report(err.to_message(Severity.ERROR))

    def warning(self, err: ApidocError) -> None:
        self.report(err.to_message(Severity.WARNING))

    def info(self, text: str, file: str = "") -> None:
        self.report(Message(severity=Severity.INFO, message=text, file=file))

    @property
    def messages(self) -> list[Message]:
        with self._lock:
            return list(self._messages)

    @property
    def errors(self) -> list[Message]:
        return [m for m in self.messages if m.severity is Severity.ERROR]

    @property
    def warnings(self) -> list[Message]:
        return [m for m in self.messages if m.severity is Severity.WARNING]

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)
