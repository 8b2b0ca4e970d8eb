"""Module versions with numeric-aware ordering.

Follows the module version grammar ``sequence[-pre][+build]`` where each
part is a dot-separated list of tokens.  Numeric tokens compare
numerically (``9 < 10``), all other tokens compare as text, and a
version with a pre-release part sorts before the same version without
one (``1-ea < 1``).
"""

from __future__ import annotations

import functools
import re

_TOKEN = re.compile(r"\d+|[^\d.]+")


def _tokens(text: str) -> tuple[int | str, ...]:
    out: list[int | str] = []
    for part in text.split("."):
        if not part:
            raise ValueError(f"Empty version token in {text!r}")
        for match in _TOKEN.findall(part):
            out.append(int(match) if match.isdigit() else match)
    return tuple(out)


def _compare_tokens(a: tuple[int | str, ...], b: tuple[int | str, ...]) -> int:
    for x, y in zip(a, b):
        if isinstance(x, int) and isinstance(y, int):
            if x != y:
                return -1 if x < y else 1
            continue
        sx, sy = str(x), str(y)
        if sx != sy:
            return -1 if sx < sy else 1
    return (len(a) > len(b)) - (len(a) < len(b))


@functools.total_ordering
class Version:
    """A structured module version such as ``1-ea``, ``47.11`` or ``2.0+b7``."""

    __slots__ = ("_text", "_sequence", "_pre", "_build")

    def __init__(self, text: str) -> None:
        text = text.strip()
        if not text or not text[0].isdigit():
            raise ValueError(f"Version must start with a digit: {text!r}")
        rest, _, build = text.partition("+")
        sequence, _, pre = rest.partition("-")
        self._text = text
        self._sequence = _tokens(sequence)
        self._pre = _tokens(pre) if pre else ()
        self._build = _tokens(build) if build else ()

    @classmethod
    def parse(cls, text: str | Version) -> Version:
        if isinstance(text, Version):
            return text
        return cls(text)

    @property
    def sequence(self) -> tuple[int | str, ...]:
        return self._sequence

    @property
    def pre(self) -> tuple[int | str, ...]:
        return self._pre

    @property
    def build(self) -> tuple[int | str, ...]:
        return self._build

    def _compare(self, other: Version) -> int:
        c = _compare_tokens(self._sequence, other._sequence)
        if c:
            return c
        if not self._pre and other._pre:
            return 1
        if self._pre and not other._pre:
            return -1
        c = _compare_tokens(self._pre, other._pre)
        if c:
            return c
        return _compare_tokens(self._build, other._build)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._compare(other) == 0

    def __lt__(self, other: Version) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._compare(other) < 0

    def __hash__(self) -> int:
        return hash((self._sequence, self._pre, self._build))

    def __str__(self) -> str:
        return self._text

    def __repr__(self) -> str:
        return f"Version({self._text!r})"
