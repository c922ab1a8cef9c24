"""Node-style module resolution.

NodeModuleResolver maps (context directory, request) to a concrete file
following node_modules lookup rules:

1. Relative/absolute requests: file, file + extension, then directory
2. Bare requests: relative first (prefer_relative), then node_modules in
   the context directory and each ancestor
3. Packages with an "exports" field only expose what it maps
4. Directories: main fields, then index + extension

Results are symlink-resolved.
"""

import logging
import os
from pathlib import Path
from typing import Any

from ..errors import ModuleResolutionError
from ..models import TraceConfig
from .filesystem import CachedFileSystem

logger = logging.getLogger(__name__)

MANIFEST_NAME = "package.json"


def is_relative_request(request: str) -> bool:
    """Check if request is a relative or absolute path rather than a package name."""
    return (
        request in (".", "..")
        or request.startswith("./")
        or request.startswith("../")
        or request.startswith("/")
    )


def split_package_request(request: str) -> tuple[str, str]:
    """Split a bare request into (package name, subpath).

    Examples:
        >>> split_package_request("lodash/fp/map")
        ('lodash', 'fp/map')
        >>> split_package_request("@babel/core/package.json")
        ('@babel/core', 'package.json')
    """
    parts = request.split("/")
    if request.startswith("@") and len(parts) >= 2:
        return "/".join(parts[:2]), "/".join(parts[2:])
    return parts[0], "/".join(parts[1:])


def node_modules_paths(context: Path) -> list[Path]:
    """node_modules directories searched from context, nearest first."""
    paths = []
    for directory in (context, *context.parents):
        if directory.name == "node_modules":
            continue
        paths.append(directory / "node_modules")
    return paths


class NodeModuleResolver:
    """Resolve module requests against a node_modules layout."""

    def __init__(self, fs: CachedFileSystem | None = None, config: TraceConfig | None = None):
        self.config = config or TraceConfig()
        self.fs = fs or CachedFileSystem(ttl=self.config.cache_ttl)

    async def resolve_module(self, context: Path | str, request: str) -> Path:
        """Resolve request from context.

        Args:
            context: Directory the request is made from
            request: Relative path, absolute path, or package request

        Returns:
            Absolute real path of the resolved file

        Raises:
            ModuleResolutionError: Request cannot be resolved
        """
        context = Path(context)
        if not request:
            raise ModuleResolutionError(context, request, "empty request")

        if is_relative_request(request):
            resolved = await self._resolve_path(Path(os.path.normpath(context / request)))
            if resolved is None:
                raise ModuleResolutionError(context, request)
            logger.debug(f"[resolve] {request} in {context} -> {resolved}")
            return resolved

        if self.config.prefer_relative:
            resolved = await self._resolve_path(context / request)
            if resolved is not None:
                logger.debug(f"[resolve] {request} in {context} -> {resolved} (relative)")
                return resolved

        name, subpath = split_package_request(request)
        for modules_dir in node_modules_paths(context):
            package_dir = modules_dir / name
            if not await self.fs.is_dir(package_dir):
                continue

            resolved = await self._resolve_in_package(context, request, package_dir, subpath)
            if resolved is not None:
                logger.debug(f"[resolve] {request} in {context} -> {resolved}")
                return resolved

        raise ModuleResolutionError(context, request)

    async def _resolve_in_package(self, context: Path, request: str, package_dir: Path, subpath: str) -> Path | None:
        manifest = await self._read_manifest(package_dir)
        exports = manifest.get("exports")

        if exports is None:
            if subpath:
                return await self._resolve_path(package_dir / subpath)
            return await self._resolve_directory(package_dir)

        # Once a package declares exports, nothing outside them is reachable
        target = self.match_exports(exports, f"./{subpath}" if subpath else ".")
        if target is None:
            raise ModuleResolutionError(
                context, request, f"package subpath '{subpath or '.'}' is not defined by \"exports\" in {package_dir}"
            )
        candidate = package_dir / target
        if await self.fs.is_file(candidate):
            return await self.fs.realpath(candidate)
        raise ModuleResolutionError(context, request, f"exported target {target} does not exist")

    def match_exports(self, exports: Any, subpath: str) -> str | None:
        """Map a subpath ("." or "./x") through an exports field.

        Returns:
            Package-relative target ("./...") or None when not exported
        """
        if isinstance(exports, (str, list)) or (
            isinstance(exports, dict) and not any(key.startswith(".") for key in exports)
        ):
            exports = {".": exports}
        if not isinstance(exports, dict):
            return None

        if subpath in exports:
            return self._conditional_target(exports[subpath])

        best_key = None
        best_match = ""
        for key in exports:
            if "*" in key:
                prefix, suffix = key.split("*", 1)
                if (
                    subpath.startswith(prefix)
                    and subpath.endswith(suffix)
                    and len(subpath) >= len(prefix) + len(suffix)
                    and (best_key is None or len(prefix) > len(best_key.split("*", 1)[0]))
                ):
                    best_key = key
                    best_match = subpath[len(prefix) : len(subpath) - len(suffix)]
            elif key.endswith("/") and subpath.startswith(key) and best_key is None:
                best_key = key
                best_match = subpath[len(key) :]

        if best_key is None:
            return None

        target = self._conditional_target(exports[best_key])
        if target is None:
            return None
        if "*" in best_key:
            return target.replace("*", best_match)
        return target + best_match

    def _conditional_target(self, value: Any) -> str | None:
        if isinstance(value, str):
            return value if value.startswith("./") else None
        if isinstance(value, list):
            for item in value:
                target = self._conditional_target(item)
                if target is not None:
                    return target
            return None
        if isinstance(value, dict):
            for condition, nested in value.items():
                if condition in self.config.condition_names:
                    target = self._conditional_target(nested)
                    if target is not None:
                        return target
        return None

    async def _resolve_path(self, path: Path) -> Path | None:
        """Resolve a path as a file, then as a directory."""
        if resolved := await self._resolve_file(path):
            return resolved
        if await self.fs.is_dir(path):
            return await self._resolve_directory(path)
        return None

    async def _resolve_file(self, path: Path) -> Path | None:
        if await self.fs.is_file(path):
            return await self.fs.realpath(path)
        if not path.name:
            return None
        for extension in self.config.extensions:
            candidate = path.with_name(path.name + extension)
            if await self.fs.is_file(candidate):
                return await self.fs.realpath(candidate)
        return None

    async def _resolve_directory(self, directory: Path) -> Path | None:
        manifest = await self._read_manifest(directory)
        for field in self.config.main_fields:
            main = manifest.get(field)
            if not isinstance(main, str) or not main:
                continue
            target = directory / main
            if resolved := await self._resolve_file(target):
                return resolved
            if await self.fs.is_dir(target) and (resolved := await self._resolve_index(target)):
                return resolved
        return await self._resolve_index(directory)

    async def _resolve_index(self, directory: Path) -> Path | None:
        return await self._resolve_file(directory / "index")

    async def _read_manifest(self, directory: Path) -> dict[str, Any]:
        manifest_path = directory / MANIFEST_NAME
        if not await self.fs.is_file(manifest_path):
            return {}
        try:
            data = await self.fs.read_json(manifest_path)
        except (OSError, ValueError) as e:
            logger.debug(f"[resolve] ignoring unreadable {manifest_path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def __repr__(self) -> str:
        return f"NodeModuleResolver(ttl={self.fs.ttl})"
