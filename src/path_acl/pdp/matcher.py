"""Pattern matching for policy rule paths.

This module provides the three layers used to test a rule pattern
against a request path:
- Normalization: canonical form for both pattern and path
- Variables: ${name} substitution from context, and the inverse extraction
- Globs: compile a resolved pattern to an anchored regex

Pattern syntax:
- /a/b       : literal, matches only /a/b
- /a/*       : exactly one more segment (/a/b, not /a/b/c)
- /a/**      : /a itself and any number of following segments
- /a/**/b    : zero or more segments between /a and /b
- /a/${id}/b : id substituted from context; matched literally if unresolved

Matching is always whole-string. Partial matches never count.
"""

from __future__ import annotations

__all__ = [
    "PathMatcher",
    "extract_path_variables",
    "extract_variables",
    "match_path",
    "normalize_path",
    "resolve_variables",
    "string_context",
    "validate_path",
]

import functools
import re
from collections.abc import Mapping
from typing import Any

from path_acl.exceptions import InvalidPathError, VariableResolutionError

# Runs of separators collapse to one
_SEPARATOR_RUN = re.compile(r"/+")

# ${identifier}: ASCII letter/underscore, then letters/digits/underscores
_VARIABLE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")

# Same placeholder after re.escape() has turned it into \$\{name\}
_ESCAPED_VARIABLE = re.compile(r"\\\$\\\{([A-Za-z_][A-Za-z0-9_]*)\\\}")

# Characters rejected in request paths
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")

# Compiled-pattern memo size (pure function of the pattern string)
_PATTERN_CACHE_SIZE = 2048


# =============================================================================
# Normalization
# =============================================================================


def normalize_path(path: str) -> str:
    """Canonicalize a path or pattern.

    Guarantees a leading slash, no trailing slash (except for the root),
    and no repeated separators. The empty string normalizes to "/".
    Idempotent: normalize_path(normalize_path(p)) == normalize_path(p).

    Args:
        path: Raw path or pattern.

    Returns:
        Normalized path.
    """
    if not path:
        return "/"

    normalized = _SEPARATOR_RUN.sub("/", path)

    if not normalized.startswith("/"):
        normalized = "/" + normalized

    if normalized != "/" and normalized.endswith("/"):
        normalized = normalized.rstrip("/")

    return normalized


def validate_path(path: object) -> str:
    """Reject request paths that are structurally unusable.

    Runs before normalization. Only request paths are validated; rule
    patterns are trusted configuration.

    Args:
        path: Candidate request path.

    Returns:
        The path unchanged, typed as str.

    Raises:
        InvalidPathError: If path is not a string or contains control characters.
    """
    if not isinstance(path, str):
        raise InvalidPathError(path, f"expected str, got {type(path).__name__}")

    if _CONTROL_CHARS.search(path):
        raise InvalidPathError(path, "contains control characters")

    return path


# =============================================================================
# Variables
# =============================================================================


def string_context(context: Mapping[str, Any] | None) -> dict[str, str]:
    """Keep only context values usable for substitution.

    Strings pass through, ints and floats are stringified, everything
    else (including bools, None, containers) is dropped.

    Args:
        context: Request context, may be None.

    Returns:
        New dict of string values.
    """
    if not context:
        return {}

    result: dict[str, str] = {}
    for key, value in context.items():
        if isinstance(value, bool):
            continue
        if isinstance(value, str):
            result[key] = value
        elif isinstance(value, (int, float)):
            result[key] = str(value)
    return result


def resolve_variables(pattern: str, context: Mapping[str, str]) -> str:
    """Substitute ${name} placeholders from context.

    Placeholders whose name is absent from context are left verbatim.

    Args:
        pattern: Pattern that may contain placeholders.
        context: String-valued substitution map.

    Returns:
        Pattern with known placeholders replaced.

    Raises:
        VariableResolutionError: If the regex engine fails (internal error).
    """

    def _substitute(match: re.Match[str]) -> str:
        value = context.get(match.group(1))
        return match.group(0) if value is None else value

    try:
        return _VARIABLE.sub(_substitute, pattern)
    except (re.error, TypeError) as e:
        raise VariableResolutionError(
            f"Failed to resolve variables in {pattern!r}: {type(e).__name__}: {e}"
        ) from e


def extract_path_variables(pattern: str, path: str) -> dict[str, str]:
    """Recover placeholder values from a concrete path.

    Inverse of resolve_variables(). Each ${name} becomes a capture group
    that cannot span a separator. A name used twice must capture the same
    value both times. Glob tokens in the pattern keep their meaning.

    Args:
        pattern: Pattern containing placeholders.
        path: Concrete path to match.

    Returns:
        Mapping of placeholder name to captured value. Empty if the path
        does not match the pattern.

    Raises:
        VariableResolutionError: If the pattern cannot be compiled (internal error).
    """
    match = _compile_extractor(pattern).fullmatch(path)
    if match is None:
        return {}
    return dict(match.groupdict())


# =============================================================================
# Glob compilation
# =============================================================================


def _glob_to_regex(escaped: str) -> str:
    """Translate glob tokens in an re.escape()d pattern.

    Order matters: each step consumes tokens the later ones would
    otherwise misread.
    1. **/  -> zero or more whole segments, each ending in /
    2. /**  -> optional / plus anything (so /a/** matches /a)
    3. **   -> anything
    4. *    -> exactly one segment
    """
    regex = escaped.replace(r"\*\*/", "(?:[^/]+/)*")
    regex = regex.replace(r"/\*\*", "(?:/.*)?")
    regex = regex.replace(r"\*\*", ".*")
    return regex.replace(r"\*", "[^/]+")


@functools.lru_cache(maxsize=_PATTERN_CACHE_SIZE)
def _compile_pattern(resolved_pattern: str) -> re.Pattern[str]:
    """Compile a variable-resolved pattern to an anchored regex."""
    return re.compile(_glob_to_regex(re.escape(resolved_pattern)))


@functools.lru_cache(maxsize=_PATTERN_CACHE_SIZE)
def _compile_extractor(pattern: str) -> re.Pattern[str]:
    """Compile a pattern with named groups for each placeholder."""
    seen: set[str] = set()

    def _group(match: re.Match[str]) -> str:
        name = match.group(1)
        if name in seen:
            return f"(?P={name})"
        seen.add(name)
        return f"(?P<{name}>[^/]+)"

    try:
        regex = _ESCAPED_VARIABLE.sub(_group, re.escape(pattern))
        return re.compile(_glob_to_regex(regex))
    except re.error as e:
        raise VariableResolutionError(f"Failed to compile variable extractor for {pattern!r}: {e}") from e


# =============================================================================
# Public matching API
# =============================================================================


def match_path(
    pattern: str,
    path: str,
    context: Mapping[str, Any] | None = None,
) -> bool:
    """Match a request path against a rule pattern.

    Both inputs are normalized, placeholders are resolved from the string
    and numeric values of context, then the pattern is compiled and tested
    against the whole path.

    Args:
        pattern: Rule pattern (e.g., "/users/${id}/**").
        path: Request path.
        context: Request context for variable substitution.

    Returns:
        True if the whole path matches.
    """
    resolved = resolve_variables(normalize_path(pattern), string_context(context))
    return _compile_pattern(resolved).fullmatch(normalize_path(path)) is not None


def extract_variables(pattern: str, path: str) -> dict[str, str]:
    """Normalize pattern and path, then extract placeholder values.

    Example:
        >>> extract_variables("/customers/${id}/settings", "/customers/42/settings")
        {'id': '42'}
    """
    return extract_path_variables(normalize_path(pattern), normalize_path(path))


class PathMatcher:
    """Injectable bundle of the matching functions.

    Stateless; the compiled-pattern memo is module level and shared.
    EvaluationService takes one so tests or hosts can substitute their own.
    """

    def normalize(self, path: str) -> str:
        """Normalize a path or pattern."""
        return normalize_path(path)

    def resolve_variables(self, pattern: str, context: Mapping[str, Any] | None) -> str:
        """Resolve placeholders from the usable subset of context."""
        return resolve_variables(pattern, string_context(context))

    def matches(
        self,
        pattern: str,
        path: str,
        context: Mapping[str, Any] | None = None,
    ) -> bool:
        """Return True if path fully matches pattern under context."""
        return match_path(pattern, path, context)

    def extract_variables(self, pattern: str, path: str) -> dict[str, str]:
        """Extract placeholder values after normalizing both inputs."""
        return extract_variables(pattern, path)
