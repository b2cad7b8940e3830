"""Exclusion matching for compiled-class paths and class names."""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import cache
from pathlib import Path
from typing import TYPE_CHECKING

from pathspec import PathSpec

from covgate._meta import logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

CLASS_SUFFIX = ".class"


@dataclass(frozen=True, slots=True)
class ClassFile:
    """A compiled class file and the class directory it was found under."""

    root: Path
    path: Path

    @property
    def relative(self) -> str:
        return self.path.relative_to(self.root).as_posix()

    @property
    def class_name(self) -> str:
        """Dotted class name (``com.example.Foo$Inner``)."""
        return self.relative.removesuffix(CLASS_SUFFIX).replace("/", ".")


class ClassDirectoryFilter:
    """Select class files under class directories, minus excluded globs.

    Patterns are gitignore-style and matched against the path relative to the
    class directory, so ``**/dto/**`` excludes every package segment named
    ``dto`` and ``**/*Config*`` every file whose name contains ``Config``.
    """

    def __init__(self, excludes: Sequence[str] = ()) -> None:
        self.excludes = tuple(excludes)
        self._spec = PathSpec.from_lines("gitwildmatch", self.excludes)

    def excluded(self, relative: str | Path) -> bool:
        rel = Path(relative).as_posix()
        return self._spec.match_file(rel)

    def select(self, class_dirs: Iterable[Path]) -> list[ClassFile]:
        """Return every non-excluded class file, sorted per directory."""
        out: list[ClassFile] = []
        for root in class_dirs:
            if not root.is_dir():
                logger.debug("skipping missing class directory %s", root)
                continue
            kept = 0
            dropped = 0
            for path in sorted(root.rglob(f"*{CLASS_SUFFIX}")):
                if not path.is_file():
                    continue
                cf = ClassFile(root=root, path=path)
                if self.excluded(cf.relative):
                    dropped += 1
                    continue
                kept += 1
                out.append(cf)
            logger.debug("class directory %s: %d kept, %d excluded", root, kept, dropped)
        return out


@cache
def _wildcard_regex(pattern: str) -> re.Pattern[str]:
    parts: list[str] = []
    for ch in pattern:
        if ch == "*":
            parts.append(".*")
        elif ch == "?":
            parts.append(".")
        else:
            parts.append(re.escape(ch))
    return re.compile("".join(parts))


class WildcardMatcher:
    """Class-name matcher: ``*`` spans any characters (dots included), ``?`` one."""

    def __init__(self, patterns: Sequence[str]) -> None:
        self.patterns = tuple(patterns)
        self._regexes = tuple(_wildcard_regex(p) for p in self.patterns)

    def matches(self, name: str) -> bool:
        return any(rx.fullmatch(name) for rx in self._regexes)


def qualified_class_name(name: str) -> str:
    """Name used by class rules: nested classes join with a dot (``com.x.Outer.Inner``)."""
    return name.replace("/", ".").replace("$", ".")


def class_selected(name: str, *, includes: Sequence[str], excludes: Sequence[str]) -> bool:
    """Return ``True`` when *name* matches an include and no exclude."""
    return WildcardMatcher(includes).matches(name) and not WildcardMatcher(excludes).matches(name)


__all__ = [
    "ClassDirectoryFilter",
    "ClassFile",
    "WildcardMatcher",
    "class_selected",
    "qualified_class_name",
]
