"""Chain search over the installed dependency graph.

find() resolves the entry package and runs search(), a depth-first
traversal over package.json manifests:

- Directed mode: the name being looked for (next expected chain tip, or the
  target) is declared by the current package, so only that dependency is
  followed and the fan-out depth resets.
- Fan-out mode: otherwise the name is first probed directly from the current
  package's directory (hoisted/phantom installs), then every declared
  dependency is explored one level deeper, stopping at the first branch that
  reports an exact match.

Every package directory is visited at most once per find() call, and fan-out
stops past TraceConfig.max_depth, so the search terminates on cyclic graphs.
"""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from dataclasses import field
from pathlib import Path

from .errors import EntryPackageNotFoundError
from .manifest import ManifestResolver
from .manifest import find_manifest
from .matcher import match_dependency
from .models import PackageDescriptor
from .models import SearchResult
from .models import TraceConfig
from .module_resolution import CachedFileSystem
from .module_resolution import NodeModuleResolver

logger = logging.getLogger(__name__)


@dataclass
class SearchContext:
    """State shared by every frame of one search.

    ``memo`` holds visited package directories; entries are only ever added.
    """

    resolver: ManifestResolver
    config: TraceConfig
    memo: set[Path] = field(default_factory=set)

    @classmethod
    def create(cls, config: TraceConfig | None = None) -> "SearchContext":
        """Build a context with its own filesystem cache and resolver."""
        config = config or TraceConfig()
        fs = CachedFileSystem(ttl=config.cache_ttl)
        return cls(resolver=ManifestResolver(NodeModuleResolver(fs, config)), config=config)


async def search(
    pkg: PackageDescriptor,
    target: str,
    tips: Sequence[str],
    ctx: SearchContext,
    depth: int = 0,
    is_entry: bool = False,
) -> tuple[list[SearchResult], bool]:
    """Search for target below pkg.

    Args:
        pkg: Package to search from
        target: Name of the package to locate
        tips: Expected intermediate names still to pass through; the last
            element is consumed next
        ctx: Shared search state
        depth: Fan-out depth of this branch
        is_entry: True only for the entry package (enables devDependencies)

    Returns:
        (results, stop). Each result's chain lists names from the match back
        toward pkg, excluding pkg itself. stop is True when an exact match
        was found and siblings need not be explored.
    """
    if pkg.context in ctx.memo or depth > ctx.config.max_depth:
        return [], False
    ctx.memo.add(pkg.context)

    if not tips and pkg.name == target:
        logger.debug(f"[search] match {target} at {pkg.context}")
        return [SearchResult(location=pkg.context)], True

    current = tips[-1] if tips else target
    deps = pkg.dependency_set(include_dev=is_entry)

    declared = match_dependency(current, deps)
    if declared is not None:
        child = await ctx.resolver.resolve(pkg.context, declared)
        if child is None:
            # Not a stop signal, so sibling fan-out keeps looking for other installs
            logger.debug(f"[search] {pkg.name} declares {declared} but it is not installed")
            return [], False
        return await _descend(child, target, tips[:-1], ctx, 0)

    results: list[SearchResult] = []
    stop = False

    phantom = await ctx.resolver.resolve(pkg.context, current)
    if phantom is not None:
        logger.debug(f"[search] {current} reachable from {pkg.name} without being declared")
        found, stop = await _descend(phantom, target, tips[:-1], ctx, 0)
        results.extend(found)

    for name in deps:
        child = await ctx.resolver.resolve(pkg.context, name)
        if child is None:
            continue
        found, child_stop = await _descend(child, target, tips, ctx, depth + 1)
        results.extend(found)
        if child_stop:
            stop = True
            break

    return results, stop


async def _descend(
    child: PackageDescriptor,
    target: str,
    tips: Sequence[str],
    ctx: SearchContext,
    depth: int,
) -> tuple[list[SearchResult], bool]:
    results, stop = await search(child, target, tips, ctx, depth)
    for result in results:
        result.chain.append(child.name)
    return results, stop


async def locate_entry(entry_dir: Path | str, ctx: SearchContext) -> PackageDescriptor | None:
    """Resolve the package that owns entry_dir.

    Subdirectories of a package (src/, lib/) fall back to the nearest
    enclosing package.json.
    """
    entry_dir = Path(entry_dir).resolve()
    pkg = await ctx.resolver.resolve(entry_dir, ".")
    if pkg is None:
        pkg = await find_manifest(None, entry_dir, ctx.resolver.fs)
    return pkg


async def trace(
    entry_dir: Path | str,
    chain_names: Sequence[str],
    config: TraceConfig | None = None,
) -> list[SearchResult]:
    """Like find(), but fail loudly when entry_dir is not inside a package.

    Raises:
        EntryPackageNotFoundError: "." cannot be resolved from entry_dir
    """
    if not chain_names:
        return []

    *rest, target = chain_names
    tips = tuple(reversed(rest))

    ctx = SearchContext.create(config)
    entry = await locate_entry(entry_dir, ctx)
    if entry is None:
        raise EntryPackageNotFoundError(entry_dir)

    logger.debug(f"[search] entry {entry.name or '<unnamed>'} at {entry.context}, target {target}, tips {list(tips)}")
    results, _stop = await search(entry, target, tips, ctx, depth=0, is_entry=True)
    logger.debug(f"[search] visited {len(ctx.memo)} package directories, {len(results)} result(s)")
    return results


async def find(
    entry_dir: Path | str,
    chain_names: Sequence[str],
    config: TraceConfig | None = None,
) -> list[SearchResult]:
    """Find every location where the last name of chain_names is installed.

    Args:
        entry_dir: Directory inside the package to search from
        chain_names: Expected chain from the entry package; the last name is
            the target, earlier names must be passed through in order
        config: Search configuration (defaults when omitted)

    Returns:
        Results whose chains run leaf-to-root (see SearchResult.through).
        Empty when nothing is found or entry_dir is not inside a package.
    """
    try:
        return await trace(entry_dir, chain_names, config)
    except EntryPackageNotFoundError as e:
        logger.info(str(e))
        return []


def find_sync(
    entry_dir: Path | str,
    chain_names: Sequence[str],
    config: TraceConfig | None = None,
) -> list[SearchResult]:
    """Blocking wrapper around find()."""
    return asyncio.run(find(entry_dir, chain_names, config))
