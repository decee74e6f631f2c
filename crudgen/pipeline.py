"""crudgen orchestrator.

Wires table schemas, the synthesizer and the materialization engine together
for the two scaffolding commands:

dao      -- model, cache and DAO layers for one or more tables.
handler  -- everything ``dao`` produces plus error codes, HTTP handlers,
            routers and request/response types.

Usage::

    python -m crudgen.pipeline dao --schema schema.sql --db-table order_items \\
        --module-name github.com/acme/shop --template-dir ./templates \\
        --template-module github.com/acme/skeleton --placeholder-type UserExample
"""

from __future__ import annotations

import random
import re
import sys
import time
from collections.abc import Mapping, Sequence
from pathlib import Path

from crudgen.config import Config, GenerationOptions, SkeletonConfig
from crudgen.errors import (
    CrudGenError,
    DuplicateTypeNameError,
    FileIOError,
    OutputExistsError,
    SchemaNotFoundError,
)
from crudgen.materializer import (
    MarkerBlockRule,
    MaterializationEngine,
    OutputWriter,
    Rule,
    SubstitutionRule,
    load_registry,
)
from crudgen.schema import TableSchema, load_schemas
from crudgen.synthesizer import ArtifactKind, Synthesizer
from crudgen.synthesizer.naming import to_lower_camel
from crudgen.utils import (
    console,
    create_progress,
    format_duration,
    print_error,
    print_success,
    print_summary_table,
    print_warning,
)

COMMANDS = ("dao", "handler")

_MODULE_RE = re.compile(r"^\s*module\s+(\S+)", re.MULTILINE)


# ---------------------------------------------------------------------------
# Rule construction
# ---------------------------------------------------------------------------


def module_name_from_out_dir(out_dir: str | Path | None) -> str:
    """Read the module name from ``<out_dir>/go.mod``; ``""`` when absent."""
    if not out_dir:
        return ""
    go_mod = Path(out_dir) / "go.mod"
    if not go_mod.is_file():
        return ""
    try:
        content = go_mod.read_text(encoding="utf-8")
    except OSError as exc:
        raise FileIOError(go_mod, str(exc)) from exc
    match = _MODULE_RE.search(content)
    return match.group(1).strip('"') if match else ""


def _module_rules(module_name: str, skeleton: SkeletonConfig) -> list[Rule]:
    if not module_name or not skeleton.module_path or module_name == skeleton.module_path:
        return []
    rules: list[Rule] = [SubstitutionRule(skeleton.module_path, module_name)]
    # shared library imports go back to the skeleton's module
    for sub in skeleton.shared_subpaths:
        rules.append(
            SubstitutionRule(f"{module_name}/{sub}", f"{skeleton.module_path}/{sub}")
        )
    return rules


def _rename_rules(skeleton: SkeletonConfig, type_name: str) -> list[Rule]:
    if not skeleton.placeholder_type:
        return []
    return [
        SubstitutionRule(skeleton.placeholder_type, type_name, case_sensitive=True),
        SubstitutionRule(
            to_lower_camel(skeleton.placeholder_type),
            to_lower_camel(type_name),
            case_sensitive=True,
        ),
    ]


def build_dao_rules(
    module_name: str,
    skeleton: SkeletonConfig,
    codes: Mapping[ArtifactKind, str],
) -> list[Rule]:
    """Ordered rules that turn the skeleton's example entity into a table's DAO."""
    rules: list[Rule] = [MarkerBlockRule(skeleton.start_mark, skeleton.end_mark)]
    rules.append(SubstitutionRule(skeleton.model_mark, codes[ArtifactKind.MODEL]))
    rules.append(SubstitutionRule(skeleton.dao_mark, codes[ArtifactKind.DAO]))
    rules.extend(_module_rules(module_name, skeleton))
    rules.extend(_rename_rules(skeleton, codes[ArtifactKind.TYPE_NAME]))
    return rules


def build_handler_rules(
    module_name: str,
    skeleton: SkeletonConfig,
    codes: Mapping[ArtifactKind, str],
    rng: random.Random | None = None,
) -> list[Rule]:
    """Ordered rules for the handler command.

    Seed constants get a random value so that tests generated for different
    tables do not share fixture IDs.
    """
    rng = rng or random.Random()
    rules: list[Rule] = [MarkerBlockRule(skeleton.start_mark, skeleton.end_mark)]
    rules.append(SubstitutionRule(skeleton.model_mark, codes[ArtifactKind.MODEL]))
    rules.append(SubstitutionRule(skeleton.dao_mark, codes[ArtifactKind.DAO]))
    rules.append(SubstitutionRule(skeleton.handler_mark, codes[ArtifactKind.HANDLER]))
    rules.extend(_module_rules(module_name, skeleton))
    for constant in skeleton.seed_constants:
        name = constant.split("=", 1)[0].strip()
        rules.append(SubstitutionRule(constant, f"{name} = {rng.randint(0, 99)}"))
    rules.extend(_rename_rules(skeleton, codes[ArtifactKind.TYPE_NAME]))
    return rules


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


class ScaffoldPipeline:
    """Runs Generate + Materialize for each requested table, in order.

    Attributes:
        config: Global configuration.
        engine: Materialization engine holding the template registry.
        synthesizer: Code synthesizer built from ``config.generation``.
    """

    def __init__(
        self,
        config: Config,
        engine: MaterializationEngine,
        synthesizer: Synthesizer | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.config = config
        self.engine = engine
        self.synthesizer = synthesizer or Synthesizer(config.generation)
        self.rng = rng or random.Random()

    def run(
        self,
        command: str,
        schemas: Sequence[TableSchema],
        module_name: str,
        out_path: str | Path | None = None,
        include_init_db: bool = False,
    ) -> Path:
        """Scaffold *schemas* one table at a time and return the output directory.

        Every table is synthesized before anything is written.  The directory
        used for the first table receives the following ones; files whose
        path does not depend on the table are written only for the first
        table.  The first failing table stops the run.

        Raises:
            DuplicateTypeNameError: Two tables map to the same Go type name.
            OutputExistsError: A table would overwrite a file written earlier
                in the run with different content.
        """
        if command not in COMMANDS:
            raise ValueError(f"Unknown command: {command}")
        if not schemas:
            raise ValueError("No tables to generate")

        layout = self.config.layout_for(command)
        exclude_files = layout.exclude_files
        if command == "dao" and include_init_db:
            exclude_files = []

        generated = [(schema, self.synthesizer.generate(schema)) for schema in schemas]
        owners: dict[str, list[str]] = {}
        for schema, codes in generated:
            owners.setdefault(codes[ArtifactKind.TYPE_NAME], []).append(schema.table_name)
        for type_name, tables in owners.items():
            if len(tables) > 1:
                raise DuplicateTypeNameError(type_name, tables)

        out = Path(out_path) if out_path else self.engine.writer.allocate(command)
        written: dict[str, str | bytes] = {}
        for _, codes in generated:
            if command == "dao":
                rules = build_dao_rules(module_name, self.config.skeleton, codes)
            else:
                rules = build_handler_rules(module_name, self.config.skeleton, codes, self.rng)
            files = self.engine.render_files(
                self.config.template_name,
                include_dirs=layout.include_dirs,
                exclude_dirs=layout.exclude_dirs,
                exclude_files=exclude_files,
                rules=rules,
            )
            pending = []
            for path, content in files:
                if path not in written:
                    pending.append((path, content))
                elif written[path] != content:
                    raise OutputExistsError(out / path)
            self.engine.writer.write(pending, out, kind=command)
            written.update(pending)
        return out


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def _build_parser():
    import argparse

    parser = argparse.ArgumentParser(
        prog="crudgen",
        description="Generate CRUD code for database tables from a template skeleton",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  crudgen dao --schema schema.sql --db-table user -m github.com/acme/shop\n"
            "  crudgen dao --schema schema.sql --db-table t1,t2 -m github.com/acme/shop --no-embed\n"
            "  crudgen handler --schema schema.sql --db-table user --out ./yourServerDir\n"
        ),
    )
    sub = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("dao", "generate model, cache and dao code"),
        ("handler", "generate dao code plus http handler code"),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("--module-name", "-m", default="", help="module name in go.mod")
        cmd.add_argument("--schema", "-s", required=True, help="schema file (.sql, .json, .yaml)")
        cmd.add_argument(
            "--db-table", "-t", required=True, help="table name, multiple names separated by commas"
        )
        cmd.add_argument(
            "--embed",
            action=argparse.BooleanOptionalAction,
            default=None,
            help="embed the common audit-fields struct (default: on)",
        )
        cmd.add_argument(
            "--out",
            "-o",
            default="",
            help=f"output directory, default is ./{name}_<time>",
        )
        cmd.add_argument("--template-dir", default=None, help="directory holding template skeletons")
        cmd.add_argument("--template-name", default=None, help="skeleton to use under --template-dir")
        cmd.add_argument("--template-module", default=None, help="module path used inside the skeleton")
        cmd.add_argument("--placeholder-type", default=None, help="example type name in the skeleton")
        cmd.add_argument("--config", default=None, help="JSON config file (overrides environment)")
        if name == "dao":
            cmd.add_argument(
                "--include-init-db",
                "-i",
                action="store_true",
                help="include database and cache initialization code",
            )
    return parser


def _config_from_args(args) -> Config:
    config = Config.load(Path(args.config)) if args.config else Config.from_env()
    updates: dict = {}
    if args.template_dir:
        updates["templates_dir"] = Path(args.template_dir)
    if args.template_name:
        updates["template_name"] = args.template_name
    if args.embed is not None:
        updates["generation"] = GenerationOptions(
            **{**config.generation.model_dump(), "embed_base_model": args.embed}
        )
    skeleton_updates = {}
    if args.template_module:
        skeleton_updates["module_path"] = args.template_module
    if args.placeholder_type:
        skeleton_updates["placeholder_type"] = args.placeholder_type
    if skeleton_updates:
        updates["skeleton"] = config.skeleton.model_copy(update=skeleton_updates)
    return config.model_copy(update=updates)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``crudgen`` / ``python -m crudgen.pipeline``."""
    args = _build_parser().parse_args(argv)
    started = time.monotonic()

    module_name = module_name_from_out_dir(args.out) or args.module_name
    if not module_name:
        print_error(f"required flag --module-name not set, use 'crudgen {args.command} -h' for help")
        sys.exit(1)

    tables: list[str] = []
    for table in (t.strip() for t in args.db_table.split(",")):
        if not table:
            continue
        if table in tables:
            print_warning(f"table '{table}' requested more than once, generating it once")
            continue
        tables.append(table)

    try:
        config = _config_from_args(args)
        available = load_schemas(args.schema)
        schemas = []
        for table in tables:
            if table not in available:
                raise SchemaNotFoundError(table, args.schema)
            schemas.append(available[table])

        engine = MaterializationEngine(
            load_registry(config.templates_dir),
            OutputWriter(base_dir=config.output_dir),
        )
        pipeline = ScaffoldPipeline(config, engine)

        with create_progress() as progress:
            task = progress.add_task(f"Generating '{args.command}' code", total=None)
            out = pipeline.run(
                args.command,
                schemas,
                module_name,
                out_path=args.out or None,
                include_init_db=getattr(args, "include_init_db", False),
            )
            progress.update(task, completed=1)
    except CrudGenError as exc:
        print_error(str(exc))
        sys.exit(1)

    console.print()
    print_summary_table(
        {
            "Command": args.command,
            "Tables": ", ".join(tables),
            "Module": module_name,
            "Output": str(out),
            "Elapsed": format_duration(time.monotonic() - started),
        },
        title="crudgen",
    )
    print_success(f"generate '{args.command}' codes successfully, out = {out}")


if __name__ == "__main__":
    main()
