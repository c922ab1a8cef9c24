"""dep-trace - explain why a package is installed in a node_modules tree."""

from .errors import DepTraceError
from .errors import EntryPackageNotFoundError
from .errors import ManifestError
from .errors import ModuleResolutionError
from .models import PackageDescriptor
from .models import SearchResult
from .models import TraceConfig
from .search import find
from .search import find_sync
from .search import trace

__all__ = [
    "DepTraceError",
    "EntryPackageNotFoundError",
    "ManifestError",
    "ModuleResolutionError",
    "PackageDescriptor",
    "SearchResult",
    "TraceConfig",
    "find",
    "find_sync",
    "trace",
]
