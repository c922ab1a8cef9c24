"""Match a requested package name against a declared dependency set."""

import logging
import re
from collections.abc import Mapping

logger = logging.getLogger(__name__)


def match_dependency(query: str, deps: Mapping[str, str]) -> str | None:
    """Find a dependency key satisfying query.

    An exact key wins. Otherwise query is used as a regular expression and
    searched in each key, in the mapping's iteration order. Callers should
    treat the result as "any satisfying key", not "the first textually".

    Args:
        query: Package name or pattern (e.g. "babel-plugin-.*")
        deps: Declared dependencies (name -> version range)

    Returns:
        Matching key, or None
    """
    if query in deps:
        return query

    try:
        pattern = re.compile(query)
    except re.error as e:
        logger.debug(f"[match] '{query}' is not a valid pattern ({e}), exact match only")
        return None

    for key in deps:
        if pattern.search(key):
            return key
    return None
