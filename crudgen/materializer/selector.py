"""Choose which template files take part in a materialization."""

from __future__ import annotations

from collections.abc import Iterable

from crudgen.materializer.tree import TemplateFile, TemplateTree


def select_files(
    tree: TemplateTree | Iterable[TemplateFile],
    include_dirs: list[str] | None = None,
    exclude_dirs: list[str] | None = None,
    exclude_files: list[str] | None = None,
) -> list[TemplateFile]:
    """Filter a template tree down to the files to materialize.

    Args:
        tree: The template tree (or any iterable of its files).
        include_dirs: Directories, relative to the tree root, whose files are
            candidates.  Empty or ``None`` means every file is a candidate.
        exclude_dirs: Directories to drop.  An entry containing ``/`` is a
            root-relative path; a bare name matches any directory component.
        exclude_files: File names to drop.  An entry containing ``/`` must
            match the whole relative path; a bare name matches the base name
            in any directory.

    Returns:
        Selected files in lexical path order.
    """
    includes = [_norm(d) for d in include_dirs or [] if _norm(d)]
    excl_dirs = [_norm(d) for d in exclude_dirs or [] if _norm(d)]
    excl_files = [_norm(f) for f in exclude_files or [] if _norm(f)]

    selected = [
        f
        for f in tree
        if (not includes or any(_under(f.directory, d) for d in includes))
        and not any(_dir_matches(f.directory, d) for d in excl_dirs)
        and not any(_file_matches(f, name) for name in excl_files)
    ]
    return sorted(selected, key=lambda f: f.path)


def _norm(path: str) -> str:
    return path.replace("\\", "/").strip().strip("/")


def _under(directory: str, parent: str) -> bool:
    return directory == parent or directory.startswith(parent + "/")


def _dir_matches(directory: str, pattern: str) -> bool:
    if "/" in pattern:
        return _under(directory, pattern)
    return pattern in directory.split("/")


def _file_matches(f: TemplateFile, pattern: str) -> bool:
    if "/" in pattern:
        return f.path == pattern
    return f.name == pattern
