"""Well-known paths of a project directory."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict

SRC = "src"
LIB = "lib"
OUT = ".modmake"


class Folder(BaseModel):
    """Maps a base directory to its source, library, and output roots.

    Only ``base`` is stored; every other path is derived from it by a
    fixed suffix.
    """

    model_config = ConfigDict(frozen=True)

    base: Path = Path("")

    @classmethod
    def of(cls, base: Path | str = Path("")) -> Folder:
        return cls(base=Path(base))

    @property
    def src(self) -> Path:
        return self.base / SRC

    @property
    def lib(self) -> Path:
        return self.base / LIB

    @property
    def out(self) -> Path:
        return self.base / OUT

    def base_path(self, *more: str) -> Path:
        return self.base.joinpath(*more)

    def src_path(self, *more: str) -> Path:
        return self.src.joinpath(*more)

    def out_path(self, *more: str) -> Path:
        return self.out.joinpath(*more)

    # -- produced conventions --------------------------------------------

    def classes(self, realm: str, *more: str) -> Path:
        return self.out_path("classes", realm, *more)

    def modules(self, realm: str) -> Path:
        return self.out_path("modules", realm)

    def sources(self, realm: str) -> Path:
        return self.out_path("sources", realm)

    def documentation(self, *more: str) -> Path:
        return self.out_path("documentation", *more)

    def summary(self) -> Path:
        return self.out_path("summary.md")
