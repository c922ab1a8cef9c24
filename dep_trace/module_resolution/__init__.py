"""Module resolution for node_modules layouts.

The search engine consumes this as a capability: it maps a package name and
a base directory to a concrete installed path. Failures are reported as
ModuleResolutionError and never escape the Manifest Resolver.
"""

from .filesystem import CachedFileSystem
from .resolvers import MANIFEST_NAME
from .resolvers import NodeModuleResolver
from .resolvers import node_modules_paths
from .resolvers import split_package_request

__all__ = [
    "CachedFileSystem",
    "MANIFEST_NAME",
    "NodeModuleResolver",
    "node_modules_paths",
    "split_package_request",
]
