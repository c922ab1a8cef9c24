"""Exception hierarchy for dep-trace.

None of these escape the search engine: resolution and manifest failures
are converted to "absence" at the Manifest Resolver boundary. They exist so
the resolution layer can report failures distinctly from success, and so
the CLI can tell "not inside a package" apart from "not found".
"""


class DepTraceError(Exception):
    """Base class for all dep-trace errors."""


class ModuleResolutionError(DepTraceError):
    """A request could not be resolved from a context directory."""

    def __init__(self, context, request: str, reason: str = "module not found"):
        self.context = context
        self.request = request
        self.reason = reason
        super().__init__(f"Can't resolve '{request}' in '{context}': {reason}")


class ManifestError(DepTraceError):
    """A package.json could not be read or is malformed."""

    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid manifest {path}: {reason}")


class EntryPackageNotFoundError(DepTraceError):
    """The entry directory is not inside any recognizable package."""

    def __init__(self, entry_dir):
        self.entry_dir = entry_dir
        super().__init__(f"No package.json found for '{entry_dir}' or any of its parent directories")
