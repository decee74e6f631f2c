"""Materialization engine: select, transform and write a template tree.

The registry of template trees is injected at construction; the engine keeps
no other state, so one engine can serve any number of sequential runs.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path

from crudgen.errors import TemplateNotFoundError
from crudgen.materializer.selector import select_files
from crudgen.materializer.substitution import Rule, transform, transform_path
from crudgen.materializer.tree import TemplateTree
from crudgen.materializer.writer import OutputWriter


class MaterializationEngine:
    """Produces concrete output trees from named template trees."""

    def __init__(
        self,
        templates: Mapping[str, TemplateTree],
        writer: OutputWriter | None = None,
    ) -> None:
        self.templates = templates
        self.writer = writer or OutputWriter()

    def tree(self, name: str) -> TemplateTree:
        try:
            return self.templates[name]
        except KeyError:
            raise TemplateNotFoundError(name) from None

    def render_files(
        self,
        template_name: str,
        include_dirs: list[str] | None = None,
        exclude_dirs: list[str] | None = None,
        exclude_files: list[str] | None = None,
        rules: Sequence[Rule] = (),
    ) -> list[tuple[str, str | bytes]]:
        """Select and transform files without writing them.

        Text files have *rules* applied to both their path and content;
        binary files are passed through with only their path rewritten.
        The first failing file aborts the walk.
        """
        tree = self.tree(template_name)
        rendered: list[tuple[str, str | bytes]] = []
        for f in select_files(tree, include_dirs, exclude_dirs, exclude_files):
            out_path = transform_path(f.path, rules)
            if f.is_text:
                rendered.append((out_path, transform(f.text, rules, f.path)))
            else:
                rendered.append((out_path, f.data))
        return rendered

    def materialize(
        self,
        template_name: str,
        include_dirs: list[str] | None = None,
        exclude_dirs: list[str] | None = None,
        exclude_files: list[str] | None = None,
        rules: Sequence[Rule] = (),
        output_path: str | Path | None = None,
        kind: str | None = None,
    ) -> Path:
        """Materialize *template_name* and return the output directory.

        Args:
            template_name: Registry key of the template tree.
            include_dirs: Directories to take files from (all when empty).
            exclude_dirs: Directories to skip.
            exclude_files: File names to skip.
            rules: Ordered substitution rules.
            output_path: Destination directory; allocated when empty.
            kind: Artifact kind naming an allocated directory (defaults to
                *template_name*).

        Raises:
            TemplateNotFoundError, UnbalancedMarkerError, OutputExistsError,
            FileIOError.
        """
        files = self.render_files(template_name, include_dirs, exclude_dirs, exclude_files, rules)
        return self.writer.write(files, output_path, kind or template_name)
