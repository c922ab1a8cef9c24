"""Manifest loading, walking and resolution.

- load_manifest: parse one package.json into a PackageDescriptor
- find_manifest: walk up from a directory to the package that owns it
- ManifestResolver: request name + base directory -> installed package

Resolution failures are normal outcomes here: ManifestResolver.resolve
returns None instead of raising.
"""

import logging
from pathlib import Path

from .errors import ManifestError
from .errors import ModuleResolutionError
from .models import PackageDescriptor
from .module_resolution import MANIFEST_NAME
from .module_resolution import CachedFileSystem
from .module_resolution import NodeModuleResolver

logger = logging.getLogger(__name__)


async def load_manifest(path: Path | str, fs: CachedFileSystem | None = None) -> PackageDescriptor:
    """Load a package.json file.

    Args:
        path: Path to the manifest file
        fs: Filesystem cache to read through (a fresh one if omitted)

    Returns:
        PackageDescriptor whose context is the manifest's directory

    Raises:
        ManifestError: File unreadable, not JSON, or structurally invalid
    """
    path = Path(path)
    fs = fs or CachedFileSystem()

    try:
        data = await fs.read_json(path)
    except OSError as e:
        raise ManifestError(path, f"cannot read file ({e})") from e
    except ValueError as e:
        raise ManifestError(path, f"invalid JSON ({e})") from e

    if not isinstance(data, dict):
        raise ManifestError(path, "top-level value is not an object")
    if "name" in data and data["name"] is not None and not isinstance(data["name"], str):
        raise ManifestError(path, "'name' is not a string")

    return PackageDescriptor.from_manifest(data, context=path.parent)


async def find_manifest(pkg_name: str | None, start_dir: Path | str, fs: CachedFileSystem | None = None) -> PackageDescriptor | None:
    """Find the nearest enclosing manifest declaring pkg_name.

    Manifests with a different name (nested sub-packages) are walked past.

    Args:
        pkg_name: Expected package name, or None to accept the first
            readable manifest
        start_dir: Directory to start from
        fs: Filesystem cache

    Returns:
        PackageDescriptor or None when the filesystem root is reached
    """
    fs = fs or CachedFileSystem()
    directory = Path(start_dir)

    while True:
        manifest_path = directory / MANIFEST_NAME
        if await fs.is_file(manifest_path):
            try:
                pkg = await load_manifest(manifest_path, fs)
            except ManifestError as e:
                logger.debug(f"[manifest] skipping {e}")
            else:
                if pkg_name is None or pkg.name == pkg_name:
                    return pkg
                logger.debug(f"[manifest] {manifest_path} declares '{pkg.name}', not '{pkg_name}', continuing")

        parent = directory.parent
        if parent == directory:
            return None
        directory = parent


class ManifestResolver:
    """Resolve a request from a base directory to its installed package."""

    def __init__(self, resolver: NodeModuleResolver):
        self.resolver = resolver

    @property
    def fs(self) -> CachedFileSystem:
        return self.resolver.fs

    async def resolve(self, context: Path | str, request: str) -> PackageDescriptor | None:
        """Resolve request to a PackageDescriptor, or None if it is not installed.

        Tries the package's package.json first; packages whose exports hide it
        fall back to resolving the entry file and walking up to its manifest.
        """
        try:
            manifest_path = await self.resolver.resolve_module(context, f"{request}/{MANIFEST_NAME}")
        except (ModuleResolutionError, OSError) as e:
            logger.debug(f"[manifest:resolve] {e}")
        else:
            try:
                return await load_manifest(manifest_path, self.fs)
            except ManifestError as e:
                logger.debug(f"[manifest:resolve] {e}")

        try:
            entry = await self.resolver.resolve_module(context, request)
        except (ModuleResolutionError, OSError) as e:
            logger.debug(f"[manifest:resolve] {e}")
            return None

        return await find_manifest(request, entry.parent, self.fs)
