"""Data models for dependency tracing.

- PackageDescriptor: one installed package's manifest, bound to its directory
- SearchResult: one discovered location plus the chain that reaches it
- TraceConfig: immutable, validated search configuration
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
from pathlib import Path
from typing import Any

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field

DEFAULT_MAX_DEPTH = 5
DEFAULT_CACHE_TTL = 4.0


@dataclass(frozen=True)
class PackageDescriptor:
    """An installed package's manifest.

    Attributes:
        name: Declared package name ("" when the manifest has none)
        context: Absolute directory containing the manifest (node identity)
        dependencies: Declared runtime dependencies, manifest order preserved
        dev_dependencies: Declared dev dependencies (only used at the entry)
        version: Declared version, informational
    """

    name: str
    context: Path
    dependencies: Mapping[str, str] = field(default_factory=dict)
    dev_dependencies: Mapping[str, str] = field(default_factory=dict)
    version: str | None = None

    @classmethod
    def from_manifest(cls, data: dict[str, Any], context: Path) -> PackageDescriptor:
        """Build a descriptor from parsed package.json content."""
        version = data.get("version")
        return cls(
            name=data.get("name") or "",
            context=context,
            dependencies=_dependency_map(data.get("dependencies")),
            dev_dependencies=_dependency_map(data.get("devDependencies")),
            version=version if isinstance(version, str) else None,
        )

    def dependency_set(self, include_dev: bool = False) -> dict[str, str]:
        """Declared dependencies, plus dev dependencies when requested.

        Runtime entries come first and win when a name is in both sets.
        """
        deps = dict(self.dependencies)
        if include_dev:
            for name, spec in self.dev_dependencies.items():
                deps.setdefault(name, spec)
        return deps


def _dependency_map(value: Any) -> dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {str(k): str(v) for k, v in value.items()}


@dataclass
class SearchResult:
    """One location where the target resolves.

    ``chain`` is built leaf-to-root while the search unwinds: the match site
    creates it empty and each enclosing frame appends the name it resolved
    through.
    """

    location: Path
    chain: list[str] = field(default_factory=list)

    @property
    def through(self) -> list[str]:
        """Chain in root-to-leaf order."""
        return list(reversed(self.chain))

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {"location": str(self.location), "chain": self.through}


class TraceConfig(BaseModel):
    """Search configuration, built once per invocation."""

    model_config = ConfigDict(frozen=True)

    max_depth: int = Field(default=DEFAULT_MAX_DEPTH, ge=0, description="Maximum fan-out scan depth")
    cache_ttl: float = Field(default=DEFAULT_CACHE_TTL, ge=0, description="Filesystem cache TTL in seconds")
    condition_names: tuple[str, ...] = Field(
        default=("node", "require", "default"), description="Conditions honored in package exports"
    )
    extensions: tuple[str, ...] = Field(
        default=(".js", ".json", ".node"), description="Extensions tried when resolving files"
    )
    main_fields: tuple[str, ...] = Field(default=("main",), description="package.json fields naming the entry file")
    prefer_relative: bool = Field(default=True, description="Try bare requests as relative paths first")
