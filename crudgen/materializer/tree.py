"""Read-only template trees.

A ``TemplateTree`` is a fully loaded, immutable snapshot of a skeleton
project: relative POSIX paths mapped to raw bytes.  Trees are loaded once and
shared; materialization never mutates them.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from types import MappingProxyType

from crudgen.errors import FileIOError, TemplateNotFoundError


@dataclass(frozen=True)
class TemplateFile:
    """One file of a template tree."""

    path: str  # relative, POSIX separators, e.g. "internal/model/userExample.go"
    data: bytes

    @property
    def name(self) -> str:
        return PurePosixPath(self.path).name

    @property
    def directory(self) -> str:
        """Parent directory (``""`` for files at the tree root)."""
        parent = str(PurePosixPath(self.path).parent)
        return "" if parent == "." else parent

    @property
    def is_text(self) -> bool:
        try:
            self.data.decode("utf-8")
        except UnicodeDecodeError:
            return False
        return True

    @property
    def text(self) -> str:
        return self.data.decode("utf-8")


class TemplateTree:
    """An immutable, named collection of template files."""

    def __init__(self, name: str, files: list[TemplateFile] | tuple[TemplateFile, ...] = ()) -> None:
        self.name = name
        self._files: tuple[TemplateFile, ...] = tuple(sorted(files, key=lambda f: f.path))

    @classmethod
    def from_directory(cls, name: str, root: str | Path) -> "TemplateTree":
        """Load every regular file under *root* into memory.

        Raises:
            TemplateNotFoundError: If *root* is not a directory.
            FileIOError: If a file cannot be read.
        """
        root_path = Path(root)
        if not root_path.is_dir():
            raise TemplateNotFoundError(name)

        files: list[TemplateFile] = []
        for file_path in sorted(root_path.rglob("*")):
            if not file_path.is_file():
                continue
            try:
                data = file_path.read_bytes()
            except OSError as exc:
                raise FileIOError(file_path, str(exc)) from exc
            rel = file_path.relative_to(root_path).as_posix()
            files.append(TemplateFile(path=rel, data=data))
        return cls(name, files)

    @classmethod
    def from_mapping(cls, name: str, contents: Mapping[str, str | bytes]) -> "TemplateTree":
        """Build a tree from ``{relative_path: content}``; text is UTF-8 encoded."""
        files = [
            TemplateFile(
                path=PurePosixPath(path).as_posix(),
                data=content.encode("utf-8") if isinstance(content, str) else content,
            )
            for path, content in contents.items()
        ]
        return cls(name, files)

    @property
    def files(self) -> tuple[TemplateFile, ...]:
        return self._files

    def get(self, path: str) -> TemplateFile | None:
        for f in self._files:
            if f.path == path:
                return f
        return None

    def __iter__(self) -> Iterator[TemplateFile]:
        return iter(self._files)

    def __len__(self) -> int:
        return len(self._files)

    def __repr__(self) -> str:
        return f"TemplateTree(name={self.name!r}, files={len(self._files)})"


def load_registry(templates_dir: str | Path) -> Mapping[str, TemplateTree]:
    """Load each sub-directory of *templates_dir* as a named template tree.

    Returns a read-only mapping suitable for injecting into
    ``MaterializationEngine``.
    """
    base = Path(templates_dir)
    if not base.is_dir():
        raise FileIOError(base, "templates directory does not exist")
    registry = {
        child.name: TemplateTree.from_directory(child.name, child)
        for child in sorted(base.iterdir())
        if child.is_dir()
    }
    return MappingProxyType(registry)
