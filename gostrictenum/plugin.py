# gostrictenum/plugin.py
"""
Plugin registration for linter hosts.

A host discovers linters by name in a process-wide table of factories.
Each factory takes the raw settings payload from the host's configuration
and returns a plugin object that can describe its analyzers and the load
mode it needs:

    >>> plugin = get_plugin("gostrictenum")(None)
    >>> [a.name for a in plugin.build_analyzers()]
    ['gostrictenum']
    >>> plugin.load_mode()
    'syntax'

Importing :mod:`gostrictenum` registers the strict-enum plugin.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Type

from gostrictenum.checkers import (
    Checker,
    CheckerRegistry,
    CheckerRunner,
    Diagnostic,
    SuppressionManager,
)
from gostrictenum.errors import ConfigurationError, ErrorCodes
from gostrictenum.loader import Unit
from gostrictenum.strict_enum import StrictEnumChecker

logger = logging.getLogger(__name__)

PLUGIN_NAME = "gostrictenum"

LOAD_MODE_SYNTAX = "syntax"

PluginFactory = Callable[[Any], "StrictEnumPlugin"]

_plugins: Dict[str, PluginFactory] = {}
_plugins_lock = threading.Lock()


# ─────────────────────────────────────────────────────────────────────────
#  Registration
# ─────────────────────────────────────────────────────────────────────────

def register_plugin(name: str, factory: PluginFactory) -> None:
    """Register *factory* under *name*; re-registering the same factory is a no-op."""
    with _plugins_lock:
        existing = _plugins.get(name)
        if existing is not None and existing is not factory:
            raise ConfigurationError(
                f"plugin '{name}' is already registered",
                code=ErrorCodes.DUPLICATE_PLUGIN,
            )
        _plugins[name] = factory
    logger.debug("Registered plugin '%s'", name)


def get_plugin(name: str) -> PluginFactory:
    with _plugins_lock:
        factory = _plugins.get(name)
    if factory is None:
        raise ConfigurationError(
            f"unknown plugin '{name}'",
            code=ErrorCodes.UNKNOWN_PLUGIN,
            hint=f"registered plugins: {', '.join(plugin_names()) or '(none)'}",
        )
    return factory


def plugin_names() -> List[str]:
    with _plugins_lock:
        return sorted(_plugins)


# ─────────────────────────────────────────────────────────────────────────
#  Settings
# ─────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Settings:
    """Checker settings.  The strict-enum checker has no options."""


def decode_settings(payload: Any) -> Settings:
    """Decode a host settings payload (``None`` or a mapping) into Settings.

    Unknown keys are accepted and ignored.
    """
    if payload is None:
        return Settings()
    if not isinstance(payload, Mapping):
        raise ConfigurationError(
            f"settings must be a mapping, got {type(payload).__name__}",
            code=ErrorCodes.INVALID_SETTINGS,
        )
    if payload:
        logger.debug("Ignoring unrecognised settings: %s", ", ".join(map(str, payload)))
    return Settings()


# ─────────────────────────────────────────────────────────────────────────
#  Plugin
# ─────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Analyzer:
    """Description of one analyzer a plugin provides."""
    name: str
    doc: str
    checker: Type[Checker]

    def run(
        self,
        unit: Unit,
        suppressions: Optional[SuppressionManager] = None,
    ) -> List[Diagnostic]:
        """Analyse one unit with this analyzer only."""
        registry = CheckerRegistry()
        registry.register(self.checker)
        runner = CheckerRunner(registry=registry, suppressions=suppressions)
        return runner.run(unit).diagnostics


@dataclass
class StrictEnumPlugin:
    settings: Settings = field(default_factory=Settings)

    def build_analyzers(self) -> List[Analyzer]:
        return [
            Analyzer(
                name=StrictEnumChecker.name,
                doc=StrictEnumChecker.description,
                checker=StrictEnumChecker,
            )
        ]

    def load_mode(self) -> str:
        return LOAD_MODE_SYNTAX


def new(settings: Any = None) -> StrictEnumPlugin:
    """Plugin factory: decode *settings* and build the plugin."""
    return StrictEnumPlugin(decode_settings(settings))


register_plugin(PLUGIN_NAME, new)


__all__ = [
    "PLUGIN_NAME",
    "LOAD_MODE_SYNTAX",
    "register_plugin",
    "get_plugin",
    "plugin_names",
    "Settings",
    "decode_settings",
    "Analyzer",
    "StrictEnumPlugin",
    "new",
]
