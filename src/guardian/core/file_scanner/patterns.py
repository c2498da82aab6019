"""
Include/exclude glob matching for workspace discovery.

Patterns use gitignore syntax (via pathspec) extended with ``{a,b}`` brace
alternatives, so ``**/*.{js,ts}`` expands to ``**/*.js`` and ``**/*.ts``.
"""

import re
from collections.abc import Iterable

import pathspec

_BRACE_GROUP = re.compile(r"\{([^{}]*)\}")


def expand_braces(pattern: str) -> list[str]:
    """
    Expand ``{a,b}`` alternatives in a glob pattern.

    Args:
        pattern: Glob pattern, possibly containing brace groups

    Returns:
        Every alternative spelled out, in left-to-right order
    """
    match = _BRACE_GROUP.search(pattern)
    if match is None:
        return [pattern]

    head, tail = pattern[: match.start()], pattern[match.end() :]
    expanded: list[str] = []
    for option in match.group(1).split(","):
        expanded.extend(expand_braces(head + option + tail))
    return expanded


def compile_patterns(patterns: Iterable[str]) -> pathspec.PathSpec:
    """Compile glob patterns into a gitwildmatch PathSpec."""
    lines: list[str] = []
    for pattern in patterns:
        pattern = pattern.strip()
        if pattern:
            lines.extend(expand_braces(pattern))
    return pathspec.PathSpec.from_lines(pathspec.patterns.GitWildMatchPattern, lines)


class PathMatcher:
    """
    Decides whether a root-relative path is eligible for scanning.

    An empty or missing include list means every file is included. Exclude
    patterns apply to both directories and files and always win.
    """

    def __init__(
        self,
        include_patterns: Iterable[str] | None = None,
        exclude_patterns: Iterable[str] | None = None,
    ):
        include = list(include_patterns or [])
        self._include_spec = compile_patterns(include) if include else None
        self._exclude_spec = compile_patterns(exclude_patterns or [])

    def is_excluded(self, rel_path: str, is_dir: bool = False) -> bool:
        """Check a POSIX-style relative path against the exclude patterns."""
        if is_dir:
            return self._exclude_spec.match_file(rel_path.rstrip("/") + "/")
        return self._exclude_spec.match_file(rel_path)

    def is_included(self, rel_path: str) -> bool:
        """Check a POSIX-style relative file path against the include patterns."""
        if self._include_spec is None:
            return True
        return self._include_spec.match_file(rel_path)

    def matches_file(self, rel_path: str) -> bool:
        """
        Check a file path, including exclusion of any of its parent directories.
        """
        parts = rel_path.split("/")
        for index in range(1, len(parts)):
            if self.is_excluded("/".join(parts[:index]), is_dir=True):
                return False
        if self.is_excluded(rel_path):
            return False
        return self.is_included(rel_path)
