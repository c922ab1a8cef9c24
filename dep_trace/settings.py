"""Settings manager for dep-trace settings.yaml files.

Two scopes, merged with later overriding earlier:
- User global (~/.dep-trace/settings.yaml)
- Project (.dep-trace/settings.yaml in the entry directory)

Environment variables (DEP_TRACE_MAX_DEPTH, DEP_TRACE_CACHE_TTL) override
both, and explicit CLI overrides win over everything.
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .models import TraceConfig

logger = logging.getLogger(__name__)

ENV_OVERRIDES = {
    "DEP_TRACE_MAX_DEPTH": "max_depth",
    "DEP_TRACE_CACHE_TTL": "cache_ttl",
}


class SettingsManager:
    """Builds a TraceConfig from settings files, environment and overrides."""

    def __init__(self, project_dir: Path | None = None, user_dir: Path | None = None):
        """Initialize settings manager with standard paths.

        Args:
            project_dir: Directory holding .dep-trace/ (default: current directory)
            user_dir: User settings directory (default: ~/.dep-trace)
        """
        if project_dir is None:
            project_dir = Path.cwd()
        if user_dir is None:
            user_dir = Path.home() / ".dep-trace"

        self.user_settings_file = user_dir / "settings.yaml"
        self.project_settings_file = project_dir / ".dep-trace" / "settings.yaml"

    def get_trace_settings(self) -> dict[str, Any]:
        """Merged `trace:` sections from user then project settings."""
        merged: dict[str, Any] = {}
        for path in (self.user_settings_file, self.project_settings_file):
            settings = self._read_settings(path)
            if not settings:
                continue
            section = settings.get("trace")
            if section is None:
                continue
            if not isinstance(section, dict):
                logger.warning(f"Ignoring 'trace' section in {path}: expected a mapping")
                continue
            merged.update(section)
        return merged

    def get_env_settings(self) -> dict[str, Any]:
        """Settings taken from DEP_TRACE_* environment variables."""
        return {field: os.environ[var] for var, field in ENV_OVERRIDES.items() if os.environ.get(var)}

    def build_config(self, **overrides: Any) -> TraceConfig:
        """Build the effective TraceConfig.

        Args:
            **overrides: Explicit values (e.g. from CLI flags); None values are ignored

        Returns:
            Validated TraceConfig

        Raises:
            pydantic.ValidationError: Explicit overrides are invalid
        """
        values: dict[str, Any] = {}
        for source, layer in (
            ("settings", self.get_trace_settings()),
            ("environment", self.get_env_settings()),
        ):
            candidate = {**values, **layer}
            try:
                TraceConfig(**candidate)
            except ValidationError as e:
                logger.warning(f"Ignoring invalid {source} values: {_summarize(e)}")
                continue
            values = candidate

        values.update({k: v for k, v in overrides.items() if v is not None})
        return TraceConfig(**values)

    def _read_settings(self, path: Path) -> dict[str, Any] | None:
        """Read settings from YAML file.

        Returns:
            Settings dict or None if file doesn't exist or can't be read
        """
        if not path.exists():
            return None

        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to read settings from {path}: {e}")
            return None

        if data is None:
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring {path}: top-level value is not a mapping")
            return None
        return data


def _summarize(error: ValidationError) -> str:
    return "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in error.errors())
