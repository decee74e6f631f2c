"""Persist materialized files to a fresh or caller-chosen output directory."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime
from pathlib import Path, PurePosixPath

from crudgen.errors import FileIOError, OutputExistsError


class OutputWriter:
    """Writes ``(relative_path, content)`` pairs below an output directory.

    The writer refuses to overwrite: if any target file already exists with
    content, nothing is written.  Once writing has started a failure leaves
    the partially written directory in place and raises; callers should
    delete the output path before retrying.
    """

    def __init__(
        self,
        base_dir: str | Path = ".",
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.base_dir = Path(base_dir)
        self.clock = clock or datetime.now

    def allocate(self, kind: str) -> Path:
        """Return a not-yet-existing ``<base_dir>/<kind>_<timestamp>`` path."""
        stamp = self.clock().strftime("%y%m%d%H%M%S")
        candidate = self.base_dir / f"{kind}_{stamp}"
        counter = 1
        while candidate.exists():
            candidate = self.base_dir / f"{kind}_{stamp}_{counter}"
            counter += 1
        return candidate

    def write(
        self,
        files: Iterable[tuple[str, str | bytes]],
        output_path: str | Path | None = None,
        kind: str = "output",
    ) -> Path:
        """Write *files* and return the output directory actually used.

        Args:
            files: ``(relative_path, content)`` pairs; text is UTF-8 encoded.
            output_path: Target directory.  When empty a fresh directory is
                allocated from *kind* and the current time.
            kind: Artifact kind used to name an allocated directory.

        Raises:
            OutputExistsError: A target file already exists and is non-empty.
            FileIOError: A write failed; earlier files stay on disk.
        """
        pending = [(_safe_relative(rel), content) for rel, content in files]

        if output_path:
            out_dir = Path(output_path)
            for rel, _ in pending:
                target = out_dir / rel
                if target.is_dir() or (target.exists() and target.stat().st_size > 0):
                    raise OutputExistsError(target)
        else:
            out_dir = self.allocate(kind)

        try:
            out_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise FileIOError(out_dir, str(exc)) from exc

        for rel, content in pending:
            target = out_dir / rel
            data = content.encode("utf-8") if isinstance(content, str) else content
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_bytes(data)
            except OSError as exc:
                raise FileIOError(target, str(exc)) from exc

        return out_dir


def _safe_relative(rel: str) -> str:
    path = PurePosixPath(rel.replace("\\", "/"))
    if path.is_absolute() or ".." in path.parts or not path.parts:
        raise FileIOError(rel, "output paths must be relative and stay inside the output directory")
    return path.as_posix()
