"""Logging configuration sources.

Every source yields the flat ``logging`` settings section: files are read
and narrowed to that section, environment variables map one-to-one onto
its keys. :func:`load_settings` merges sections in order into a
:class:`LoggingSettings`.
"""

import json
import logging
import os
from dataclasses import dataclass, fields
from typing import IO, Any, Dict, Mapping, Optional

from .exceptions import ConfigurationError

ENV_PREFIX = "AOPLOG_"
SECTION = "logging"

_VALID_WHEN = {"S", "M", "H", "D", "MIDNIGHT", "W0", "W1", "W2", "W3", "W4", "W5", "W6"}
_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


class SettingsSource:
    """Base class for sources of logging settings.

    Subclasses implement :meth:`read_section`, returning a flat mapping of
    :class:`LoggingSettings` field names to raw values.
    """

    def read_section(self) -> Mapping[str, Any]:
        raise NotImplementedError


class DictSource(SettingsSource):
    """In-memory settings, typically command-line overrides.

    Example:
        >>> DictSource({"level": "DEBUG"}).read_section()["level"]
        'DEBUG'
    """

    def __init__(self, section: Mapping[str, Any]):
        self._section = section

    def read_section(self) -> Mapping[str, Any]:
        return self._section


class _FileSource(SettingsSource):
    format_name = ""

    def __init__(self, path: str, section: str = SECTION):
        self._path = path
        self._section = section

    def _parse(self, f: IO[str]) -> Any:
        raise NotImplementedError

    def read_section(self) -> Mapping[str, Any]:
        try:
            with open(self._path, encoding="utf-8") as f:
                doc = self._parse(f)
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Failed to load {self.format_name} config {self._path}: {e}")
        doc = doc or {}
        if not isinstance(doc, Mapping):
            raise ConfigurationError(f"{self._path}: top level must be a mapping")
        section = doc.get(self._section, {})
        if not isinstance(section, Mapping):
            raise ConfigurationError(f"{self._path}: '{self._section}' section must be a mapping")
        return section


class JsonFileSource(_FileSource):
    """Reads the ``logging`` section of a JSON document.

    Raises:
        ConfigurationError: If the file cannot be read or parsed, or the
            section is not an object.
    """

    format_name = "JSON"

    def _parse(self, f: IO[str]) -> Any:
        return json.load(f)


class YamlFileSource(_FileSource):
    """Reads the ``logging`` section of a YAML document.

    Requires ``PyYAML`` (``pip install aoplog[yaml]``).
    """

    format_name = "YAML"

    def _parse(self, f: IO[str]) -> Any:
        try:
            import yaml
        except Exception:
            raise ConfigurationError("PyYAML not installed")
        return yaml.safe_load(f)


def file_source(path: str) -> SettingsSource:
    """Pick the file source matching *path*'s extension (JSON unless ``.yaml``/``.yml``)."""
    if path.endswith((".yaml", ".yml")):
        return YamlFileSource(path)
    return JsonFileSource(path)


class EnvSource(SettingsSource):
    """Settings from prefixed environment variables.

    ``AOPLOG_LOG_FILE=calc.log`` sets ``log_file``.

    Args:
        prefix: Variable prefix, ``"AOPLOG_"`` by default.
        environ: Mapping to read instead of :data:`os.environ`.
    """

    def __init__(self, prefix: str = ENV_PREFIX, environ: Optional[Mapping[str, str]] = None):
        self.prefix = prefix
        self._environ = environ

    def read_section(self) -> Mapping[str, Any]:
        env = os.environ if self._environ is None else self._environ
        section: Dict[str, Any] = {}
        for f in fields(LoggingSettings):
            v = env.get(self.prefix + f.name.upper())
            if v is not None:
                section[f.name] = v
        return section


def _coerce_bool(name: str, v: Any) -> bool:
    if isinstance(v, bool):
        return v
    s = str(v).strip().lower()
    if s in _TRUE:
        return True
    if s in _FALSE:
        return False
    raise ConfigurationError(f"Invalid boolean for '{name}': {v!r}")


def _coerce_int(name: str, v: Any) -> int:
    if isinstance(v, bool):
        raise ConfigurationError(f"Invalid integer for '{name}': {v!r}")
    try:
        return int(v)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid integer for '{name}': {v!r}")


@dataclass(frozen=True)
class LoggingSettings:
    """Settings for the structured call log.

    Attributes:
        log_file: Path of the rolling log file; empty disables the file.
        level: Minimum level name (``"DEBUG"`` also records timings).
        when: Roll-over interval accepted by
            :class:`logging.handlers.TimedRotatingFileHandler`.
        backup_count: Number of rolled files to keep.
        console: Whether the call log is echoed to stderr as well.
    """

    log_file: str = "RateCalculator.log"
    level: str = "INFO"
    when: str = "midnight"
    backup_count: int = 7
    console: bool = False

    def __post_init__(self):
        level = str(self.level).upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ConfigurationError(f"Unknown log level: {self.level!r}")
        object.__setattr__(self, "level", level)
        if str(self.when).upper() not in _VALID_WHEN:
            raise ConfigurationError(f"Invalid roll-over interval: {self.when!r}")
        if self.backup_count < 0:
            raise ConfigurationError("backup_count must be >= 0")

    @property
    def level_no(self) -> int:
        return logging.getLevelName(self.level)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "LoggingSettings":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"Unknown logging settings: {sorted(unknown)}")
        kwargs: Dict[str, Any] = {}
        for name, v in data.items():
            if name == "backup_count":
                kwargs[name] = _coerce_int(name, v)
            elif name == "console":
                kwargs[name] = _coerce_bool(name, v)
            else:
                kwargs[name] = "" if v is None else str(v)
        return cls(**kwargs)


def load_settings(*sources: SettingsSource) -> LoggingSettings:
    """Merge the sections of *sources* left to right.

    Later sources win key by key. With no sources the defaults are returned.

    Raises:
        ConfigurationError: On unreadable sources, unknown keys or
            invalid values.
    """
    merged: Dict[str, Any] = {}
    for s in sources:
        section = s.read_section()
        if not isinstance(section, Mapping):
            raise ConfigurationError(f"{type(s).__name__} did not produce a mapping")
        merged.update(section)
    return LoggingSettings.from_mapping(merged)
