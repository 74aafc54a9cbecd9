# gostrictenum/config.py
"""Run configuration for the command-line driver."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

from gostrictenum.errors import ConfigurationError, ErrorCodes, SourceSpan

logger = logging.getLogger(__name__)

DEFAULT_FORMAT = "gcc"


@dataclass
class RunConfig:
    """Options for one command-line run.

    Checker settings are not part of this: they are decoded by the plugin
    factory from the payload in ``settings_path``.
    """
    patterns: List[str] = field(default_factory=lambda: ["."])
    include_tests: bool = True
    jobs: int = 1
    output_format: str = DEFAULT_FORMAT
    output: Optional[str] = None
    suppress: List[str] = field(default_factory=list)
    settings_path: Optional[str] = None

    def __post_init__(self) -> None:
        if self.jobs < 1:
            raise ConfigurationError(
                f"--jobs must be at least 1, got {self.jobs}",
                code=ErrorCodes.INVALID_SETTINGS,
            )
        if not self.patterns:
            self.patterns = ["."]

    @classmethod
    def from_args(cls, args: Any) -> "RunConfig":
        return cls(
            patterns=list(args.patterns),
            include_tests=args.tests,
            jobs=args.jobs,
            output_format=args.format,
            output=args.output,
            suppress=[s for group in args.suppress for s in group.split(",") if s],
            settings_path=args.settings,
        )


def load_settings_payload(path: Optional[str]) -> Any:
    """Read the JSON settings payload at *path*; ``None`` when no file is given."""
    if path is None:
        return None
    try:
        with open(path, encoding="utf-8") as fh:
            payload = json.load(fh)
    except OSError as exc:
        raise ConfigurationError(
            f"cannot read settings file: {exc.strerror}",
            span=SourceSpan(path),
            cause=exc,
        ) from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(
            f"invalid JSON in settings file: {exc.msg}",
            span=SourceSpan(path, exc.lineno, exc.colno),
            cause=exc,
        ) from exc
    logger.debug("Loaded settings payload from %s", path)
    return payload


__all__ = ["DEFAULT_FORMAT", "RunConfig", "load_settings_payload"]
