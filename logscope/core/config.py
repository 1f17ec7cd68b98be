"""Configuration loading and parsing for logscope.

Settings come from TOML files, merged in order of precedence, and are
validated up front. Custom critical patterns are compiled here, so a bad
regex stops the program at startup rather than mid-stream.
"""

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import tomli
from pydantic import ValidationError

from logscope.core.buffer import DEFAULT_MAX_ENTRIES, DEFAULT_MAX_EVENTS
from logscope.core.stream import DEFAULT_INTERVAL
from logscope.models.criteria import TIME_RANGES
from logscope.models.entry import DEFAULT_LEVELS, LEVELS
from logscope.models.pattern import CriticalPattern
from logscope.utils.git import find_git_root

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "logscope.toml"

OUTPUT_FORMATS = ("text", "json", "count")


class ConfigError(Exception):
    """Exception raised for configuration errors.

    Attributes:
        line: Line number where the error occurred (if available)
        path: Path to the config file (if available)
    """

    def __init__(
        self,
        message: str,
        line: Optional[int] = None,
        path: Optional[Path] = None
    ):
        self.line = line
        self.path = path

        parts = []
        if path:
            parts.append(f"Error in {path}")
        if line is not None:
            parts.append(f"at line {line}")
        if parts:
            full_message = f"{' '.join(parts)}: {message}"
        else:
            full_message = message

        super().__init__(full_message)


@dataclass
class StreamConfig:
    """Ingestion settings."""

    interval: float = DEFAULT_INTERVAL
    producer: Optional[str] = None
    scenario: str = "generic"
    event_probability: float = 0.3

    @classmethod
    def from_dict(cls, data: dict) -> "StreamConfig":
        interval = float(data.get("interval", DEFAULT_INTERVAL))
        if interval <= 0:
            raise ConfigError(f"stream.interval must be positive, got {interval}")
        probability = float(data.get("event_probability", 0.3))
        if not 0.0 <= probability <= 1.0:
            raise ConfigError(
                f"stream.event_probability must be between 0 and 1, got {probability}"
            )
        return cls(
            interval=interval,
            producer=data.get("producer"),
            scenario=data.get("scenario", "generic"),
            event_probability=probability,
        )


@dataclass
class BufferConfig:
    """Retention caps for the in-memory buffers."""

    max_entries: int = DEFAULT_MAX_ENTRIES
    max_events: int = DEFAULT_MAX_EVENTS

    @classmethod
    def from_dict(cls, data: dict) -> "BufferConfig":
        config = cls(
            max_entries=int(data.get("max_entries", DEFAULT_MAX_ENTRIES)),
            max_events=int(data.get("max_events", DEFAULT_MAX_EVENTS)),
        )
        if config.max_entries < 1 or config.max_events < 1:
            raise ConfigError("buffer sizes must be at least 1")
        return config


@dataclass
class FilterConfig:
    """Initial view settings."""

    levels: list[str] = field(default_factory=lambda: sorted(DEFAULT_LEVELS))
    time_range: str = "1h"

    @classmethod
    def from_dict(cls, data: dict) -> "FilterConfig":
        levels = [str(level).upper() for level in data.get("levels", sorted(DEFAULT_LEVELS))]
        unknown = [level for level in levels if level not in LEVELS]
        if unknown:
            raise ConfigError(
                f"Unknown level(s) in filter.levels: {', '.join(unknown)}. "
                f"Valid levels: {', '.join(LEVELS)}"
            )
        time_range = data.get("time_range", "1h")
        if time_range not in TIME_RANGES:
            raise ConfigError(
                f"Unknown filter.time_range '{time_range}'. "
                f"Valid ranges: {', '.join(TIME_RANGES)}"
            )
        return cls(levels=levels, time_range=time_range)


@dataclass
class OutputConfig:
    """Output configuration settings."""

    color: bool = True
    format: str = "text"

    @classmethod
    def from_dict(cls, data: dict) -> "OutputConfig":
        output_format = data.get("format", "text")
        if output_format not in OUTPUT_FORMATS:
            raise ConfigError(
                f"Unknown output.format '{output_format}'. "
                f"Valid formats: {', '.join(OUTPUT_FORMATS)}"
            )
        return cls(color=data.get("color", True), format=output_format)


@dataclass
class PatternsConfig:
    """Critical patterns appended after the canonical list."""

    custom: list[CriticalPattern] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "PatternsConfig":
        patterns = []
        for index, raw in enumerate(data.get("custom", []), start=1):
            try:
                patterns.append(CriticalPattern.model_validate(raw))
            except ValidationError as e:
                raise ConfigError(f"Invalid custom pattern #{index}: {e}") from e
        return cls(custom=patterns)


@dataclass
class Config:
    """Complete logscope configuration."""

    stream: StreamConfig = field(default_factory=StreamConfig)
    buffer: BufferConfig = field(default_factory=BufferConfig)
    filter: FilterConfig = field(default_factory=FilterConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    patterns: PatternsConfig = field(default_factory=PatternsConfig)

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        """Create Config from a dictionary parsed from TOML.

        Raises:
            ConfigError: If a value is invalid.
        """
        try:
            return cls(
                stream=StreamConfig.from_dict(data.get("stream", {})),
                buffer=BufferConfig.from_dict(data.get("buffer", {})),
                filter=FilterConfig.from_dict(data.get("filter", {})),
                output=OutputConfig.from_dict(data.get("output", {})),
                patterns=PatternsConfig.from_dict(data.get("patterns", {})),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(str(e)) from e


class ConfigLoader:
    """Loader for logscope TOML configuration files.

    Example usage:
        loader = ConfigLoader()
        config = loader.load(Path("logscope.toml"))

        # Merge every discovered file
        config = loader.load_merged()
    """

    def load(self, path: Optional[Path]) -> Config:
        """Load configuration from one TOML file.

        Args:
            path: Path to the file, or None to use defaults

        Raises:
            ConfigError: If the file contains invalid TOML or values
            FileNotFoundError: If the path is given but doesn't exist
        """
        if path is None:
            return Config()

        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        data = self._read(path)
        try:
            return Config.from_dict(data)
        except ConfigError as e:
            raise ConfigError(str(e), path=path) from e

    def _read(self, path: Path) -> dict:
        try:
            data = tomli.loads(path.read_text(encoding="utf-8"))
        except tomli.TOMLDecodeError as e:
            line = self._extract_line_number(str(e))
            raise ConfigError(str(e), line=line, path=path) from e
        logger.debug("Loaded config from %s", path)
        return data

    def _extract_line_number(self, error_message: str) -> Optional[int]:
        """Pull "line N" out of a tomli error message, if present."""
        match = re.search(r"(?:at )?line (\d+)", error_message, re.IGNORECASE)
        if match:
            return int(match.group(1))
        return None

    def discover_configs(self, start_path: Optional[Path] = None) -> list[Path]:
        """Find configuration files, lowest precedence first.

        1. User config: ~/.config/logscope/config.toml
        2. Git root: <git_root>/logscope.toml
        3. Local: <start_path>/logscope.toml

        Args:
            start_path: Directory for the local lookup; defaults to the
                current working directory.
        """
        if start_path is None:
            start_path = Path.cwd()
        else:
            start_path = Path(start_path).resolve()

        candidates = [Path(os.path.expanduser("~")) / ".config" / "logscope" / "config.toml"]

        git_root = find_git_root(start_path)
        if git_root:
            candidates.append(git_root / CONFIG_FILENAME)

        candidates.append(start_path / CONFIG_FILENAME)

        configs: list[Path] = []
        seen: set[Path] = set()
        for candidate in candidates:
            if not candidate.exists():
                continue
            resolved = candidate.resolve()
            if resolved in seen:
                continue
            seen.add(resolved)
            configs.append(candidate)
        return configs

    def load_merged(
        self,
        start_path: Optional[Path] = None,
        extra: Optional[Path] = None,
    ) -> Config:
        """Load and deep-merge every discovered config file.

        Later files override earlier ones; an ``extra`` file (from
        --config) overrides them all. CLI flags are applied by the caller.

        Raises:
            ConfigError: If any file contains invalid TOML or values.
            FileNotFoundError: If ``extra`` is given but doesn't exist.
        """
        paths = self.discover_configs(start_path)
        if extra is not None:
            if not extra.exists():
                raise FileNotFoundError(f"Config file not found: {extra}")
            paths.append(extra)

        merged_data: dict = {}
        for config_path in paths:
            merged_data = self._deep_merge(merged_data, self._read(config_path))

        return Config.from_dict(merged_data)

    def _deep_merge(self, base: dict, override: dict) -> dict:
        """Merge nested dicts; lists and scalars in ``override`` replace."""
        result = base.copy()

        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
