"""Module descriptor parsing.

Reads the module name and ``requires`` directives from a
``module-info.java`` compilation unit, and the same information back out
of ``jar --describe-module`` output so archived modules can be checked
against their declaration.
"""

from __future__ import annotations

import re
from pathlib import Path

from pydantic import BaseModel, ConfigDict

DESCRIPTOR = "module-info.java"

_BLOCK_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)
_LINE_COMMENT = re.compile(r"//[^\n]*")
_ANNOTATION = re.compile(r"@[\w.]+(\s*\([^)]*\))?")
_MODULE = re.compile(r"\b(?:open\s+)?module\s+([\w.]+)\s*\{")
_REQUIRES = re.compile(r"\brequires\s+((?:(?:static|transitive)\s+)*)([\w.]+)\s*;")


class ModuleDescriptor(BaseModel):
    """Name and directly required modules of one module."""

    model_config = ConfigDict(frozen=True)

    name: str
    requires: frozenset[str] = frozenset()


def parse_source(text: str) -> ModuleDescriptor:
    """Parse the text of a ``module-info.java`` file.

    Raises ``ValueError`` when no module declaration is present.
    """
    text = _LINE_COMMENT.sub("", _BLOCK_COMMENT.sub("", text))
    text = _ANNOTATION.sub("", text)
    match = _MODULE.search(text)
    if match is None:
        raise ValueError("No module declaration found")
    requires = frozenset(
        m.group(2)
        for m in _REQUIRES.finditer(text, match.end())
        if m.group(2) != "java.base"
    )
    return ModuleDescriptor(name=match.group(1), requires=requires)


def read_descriptor(path: Path) -> ModuleDescriptor:
    return parse_source(path.read_text(encoding="utf-8"))


def parse_describe_output(text: str) -> ModuleDescriptor:
    """Parse ``jar --describe-module`` output.

    Example::

        com.greetings@1.0 jar:file:///.../com.greetings-1.0.jar!/module-info.class
        requires java.base mandated
        requires org.astro
        contains com.greetings

    ``java.base`` is implicit in every module and is not reported.
    """
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    if not lines:
        raise ValueError("Empty module description")
    head = lines[0].split()[0]
    name = head.split("@", 1)[0]
    requires: set[str] = set()
    for line in lines[1:]:
        parts = line.split()
        if parts[0] != "requires" or len(parts) < 2:
            continue
        if parts[1] in ("static", "transitive") and len(parts) > 2:
            module = parts[2]
        else:
            module = parts[1]
        if module != "java.base":
            requires.add(module)
    return ModuleDescriptor(name=name, requires=frozenset(requires))
