"""Task graph: tool calls and named plans of calls.

A ``Call`` is a leaf: a tool name plus its ordered arguments.  A ``Plan``
is itself a call whose children run either in order or concurrently.
Both are frozen; a plan without children is a valid no-op.
"""

from __future__ import annotations

from typing import Callable, Iterable

from pydantic import BaseModel, ConfigDict, field_validator

# Names of the built-in actions, see ``modmake.actions``.
CREATE_DIRECTORIES = "create-directories"
DELETE_TREE = "delete-tree"
WRITE_SUMMARY = "write-summary"
MULTI_RELEASE_MODULE = "multi-release-module"


class Call(BaseModel):
    """Invocation of a named tool with ordered arguments."""

    model_config = ConfigDict(frozen=True)

    name: str
    args: tuple[str, ...] = ()

    @field_validator("args", mode="before")
    @classmethod
    def _stringify(cls, value: object) -> object:
        if isinstance(value, (list, tuple)):
            return tuple(str(v) for v in value)
        return value

    @classmethod
    def of(cls, name: str, *args: object) -> Call:
        return cls(name=name, args=tuple(str(a) for a in args))

    def __str__(self) -> str:
        return " ".join((self.name, *self.args))


class Plan(Call):
    """Named composite of calls, run sequentially or in parallel."""

    parallel: bool = False
    calls: tuple[Call, ...] = ()

    @classmethod
    def of(cls, name: str, *calls: Call, parallel: bool = False) -> Plan:
        return cls(name=name, parallel=parallel, calls=calls)

    def __str__(self) -> str:
        return self.name


class Args(list):
    """Argument list builder.

    Usage::

        args = Args().add("-d", out).add_if(module_path, "--module-path", module_path)
    """

    def add(self, *values: object) -> Args:
        self.extend(str(v) for v in values)
        return self

    def add_if(self, condition: object, *values: object) -> Args:
        if condition:
            self.add(*values)
        return self

    def add_each(self, values: Iterable[object]) -> Args:
        return self.add(*values)


def walk(call: Call, sink: Callable[[str], None], indent: str = "", step: str = "  ") -> None:
    """Feed one line per task of the tree rooted at *call* into *sink*."""
    if isinstance(call, Plan):
        marker = " (parallel)" if call.parallel else ""
        sink(f"{indent}{call.name}{marker}")
        for child in call.calls:
            walk(child, sink, indent + step, step)
        return
    sink(f"{indent}{call}")


def render(call: Call) -> list[str]:
    lines: list[str] = []
    walk(call, lines.append)
    return lines


def leaves(call: Call) -> list[Call]:
    """All leaf calls below *call* in declaration order."""
    if isinstance(call, Plan):
        return [leaf for child in call.calls for leaf in leaves(child)]
    return [call]
