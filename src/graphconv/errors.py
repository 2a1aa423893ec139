"""Error hierarchy for graphconv."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Optional, Union


class GraphConvError(Exception):
    """Base exception for graphconv failures."""

    def __init__(
        self,
        message: str,
        *,
        user_message: Optional[str] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.user_message = message if user_message is None else user_message
        self.context = dict(context) if context else {}

    def log_message(self) -> str:
        if not self.context:
            return str(self)
        return f"{self}: {self.context}"


class UsageError(GraphConvError):
    """Invalid command line arguments or option combination."""


class ConfigError(GraphConvError):
    """Configuration loading or validation error."""


class GraphIOError(GraphConvError):
    """Input graph could not be read or output could not be written."""


class DirectionModeError(GraphConvError):
    """Direction value outside the recognized modes."""


class AsymmetricGraphError(GraphConvError):
    """Degree-based re-direction requested on a non-symmetric edge set."""


class MalformedRecordError(GraphConvError):
    """A data line that does not parse into a valid record."""

    def __init__(
        self,
        path: Union[str, Path],
        line_no: int,
        line: str,
        reason: str,
    ) -> None:
        text = line.rstrip("\r\n")
        super().__init__(
            f"Malformed record in {path} at line {line_no}: {reason} ({text!r})",
            context={"path": str(path), "line_no": line_no, "line": text},
        )
        self.path = Path(path)
        self.line_no = line_no
        self.line = text
        self.reason = reason


__all__ = [
    "GraphConvError",
    "UsageError",
    "ConfigError",
    "GraphIOError",
    "DirectionModeError",
    "AsymmetricGraphError",
    "MalformedRecordError",
]
