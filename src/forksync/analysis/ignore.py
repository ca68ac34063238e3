"""Path patterns for boilerplate files that are ignored or pinned."""

from collections.abc import Iterable

import pathspec

_GLOB_CHARS = set("*?")


def _matcher(pattern: str):
    """Build a match function for one pattern.

    Patterns are anchored at the repository root. `*` and `?` stay
    within one directory; `**` and a trailing `/` match at any depth.
    """
    if not pattern.endswith("/") and not _GLOB_CHARS & set(pattern):
        return pattern.__eq__

    spec = pathspec.PathSpec.from_lines(
        "gitwildmatch", ["/" + pattern.lstrip("/")]
    )
    if pattern.endswith("/") or "**" in pattern:
        return spec.match_file

    # gitwildmatch also matches everything below a matching directory
    depth = pattern.count("/")
    return lambda path: path.count("/") == depth and spec.match_file(path)


class PathRules:
    """Ordered patterns matched against boilerplate-relative paths.

    - `docs/README.md`: exact path
    - `config/*`: files directly under config/
    - `config/**`, `**/*.lock`: any depth
    - `vendor/`: the whole vendor/ subtree
    """

    def __init__(self, patterns: Iterable[str] = ()):
        self.patterns = [p.strip() for p in patterns if p and p.strip()]
        self._matchers = [
            _matcher(pattern.removeprefix("./")) for pattern in self.patterns
        ]

    def matches(self, path: str) -> bool:
        return any(match(path) for match in self._matchers)

    def __bool__(self) -> bool:
        return bool(self.patterns)

    def __repr__(self) -> str:
        return f"PathRules({self.patterns!r})"
