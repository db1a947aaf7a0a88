# sway_analyzer/config.py
"""
Analyzer configuration.

An :class:`AnalyzerConfig` can be built in code, from a mapping, or from
a JSON file::

    {
        "detectors": ["unprotected_storage_variables"],
        "excluded_detectors": [],
        "identity_accessor": "std::auth::msg_sender",
        "storage_write_methods": ["write", "insert"],
        "sorting": "severity"
    }

Command-line options override file values (see :mod:`sway_analyzer.main`).
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, List, Mapping, Optional, Tuple, Union

from sway_analyzer.errors import ConfigError
from sway_analyzer.report import SORTINGS

__all__ = ["AnalyzerConfig", "DISPLAY_FORMATS", "load_config"]

logger = logging.getLogger(__name__)

DISPLAY_FORMATS = ("text", "json")


@dataclass(frozen=True)
class AnalyzerConfig:
    """Knobs shared by the project loader, the detectors and the CLI."""

    detectors: Optional[Tuple[str, ...]] = None
    excluded_detectors: Tuple[str, ...] = ()
    identity_accessor: str = "std::auth::msg_sender"
    storage_write_methods: Tuple[str, ...] = ("write", "insert")
    source_suffix: str = ".sw"
    excluded_dirs: Tuple[str, ...] = ("out",)
    sorting: str = "line"
    display_format: str = "text"

    @property
    def identity_accessor_name(self) -> str:
        """The unqualified accessor name, always visible via the prelude."""
        return self.identity_accessor.rsplit("::", 1)[-1]

    def selected_detectors(self) -> List[str]:
        """Registered detector names that this configuration enables, in
        registry order."""
        from sway_analyzer.detectors import detector_names, get_detector

        if self.detectors is None:
            names = detector_names()
        else:
            names = [get_detector(name)[0] for name in self.detectors]
        return [n for n in names if n not in self.excluded_detectors]

    def validate(self) -> List[str]:
        """Return a list of validation warnings (empty if valid)."""
        from sway_analyzer.detectors import detector_names

        warnings: List[str] = []
        known = set(detector_names())
        for name in (self.detectors or ()) + self.excluded_detectors:
            if name not in known:
                warnings.append(f"unknown detector '{name}'")
        if self.detectors is not None and not set(self.detectors) - set(self.excluded_detectors):
            warnings.append("no detectors are enabled")
        if self.sorting not in SORTINGS:
            warnings.append(f"sorting must be one of {', '.join(SORTINGS)}")
        if self.display_format not in DISPLAY_FORMATS:
            warnings.append(f"display_format must be one of {', '.join(DISPLAY_FORMATS)}")
        if not self.storage_write_methods:
            warnings.append("storage_write_methods is empty; no storage writes will be detected")
        if not self.identity_accessor or self.identity_accessor.endswith("::"):
            warnings.append("identity_accessor must be a path such as std::auth::msg_sender")
        if not self.source_suffix.startswith("."):
            warnings.append("source_suffix should start with '.'")
        return warnings

    def merged(self, **overrides: Any) -> "AnalyzerConfig":
        """Copy with every non-``None`` override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], path: Optional[str] = None) -> "AnalyzerConfig":
        if not isinstance(data, Mapping):
            raise ConfigError("configuration must be a JSON object", path)
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"unknown configuration key(s): {', '.join(unknown)}", path)

        values = {}
        for key, value in data.items():
            default = getattr(cls, key, None)
            if key == "detectors" and value is None:
                values[key] = None
            elif isinstance(default, tuple) or key == "detectors":
                if isinstance(value, str) or not isinstance(value, (list, tuple)):
                    raise ConfigError(f"'{key}' must be a list of strings", path)
                values[key] = tuple(str(v) for v in value)
            else:
                if not isinstance(value, str):
                    raise ConfigError(f"'{key}' must be a string", path)
                values[key] = value
        return cls(**values)


def load_config(path: Union[str, Path]) -> AnalyzerConfig:
    """Read an :class:`AnalyzerConfig` from a JSON file."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"cannot read configuration: {exc.strerror}", str(path), exc) from exc
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"invalid JSON at line {exc.lineno}: {exc.msg}", str(path), exc) from exc

    config = AnalyzerConfig.from_mapping(data, str(path))
    for warning in config.validate():
        logger.warning("%s: %s", path, warning)
    return config
