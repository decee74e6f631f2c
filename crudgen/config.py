"""crudgen configuration.

Centralised, typed configuration for synthesis and materialization.  All
settings use Pydantic v2 models so they are validated at construction time
and can be serialised to/from JSON or read from environment variables.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class GenerationOptions(BaseModel):
    """Options that shape the synthesized code artifacts."""

    model_config = ConfigDict(frozen=True)

    embed_base_model: bool = Field(
        default=True,
        description="Embed the common id/created/updated/deleted audit struct in the model",
    )
    include_json_tags: bool = Field(default=True, description="Emit json struct tags on model fields")
    include_orm_tags: bool = Field(default=True, description="Emit gorm struct tags on model fields")
    output_package_name: str = Field(
        default="model", description="Go package that holds the generated model type"
    )

    @field_validator("output_package_name")
    @classmethod
    def _check_package_name(cls, value: str) -> str:
        if not re.fullmatch(r"[a-z][a-z0-9]*", value):
            raise ValueError(f"'{value}' is not a valid Go package name")
        return value


class SkeletonConfig(BaseModel):
    """The textual contract between crudgen and a template skeleton.

    Describes which literals inside the skeleton are rewritten when it is
    materialized for a table.
    """

    module_path: str = Field(
        default="",
        description="Module identity used by the skeleton's own imports; rewritten to the caller's module",
    )
    placeholder_type: str = Field(
        default="",
        description="PascalCase name of the skeleton's example entity, renamed to the table's type name",
    )
    shared_subpaths: list[str] = Field(
        default_factory=lambda: ["pkg"],
        description="Sub-paths of module_path that stay imported from the skeleton's module",
    )
    start_mark: str = Field(default="// delete the templates code start")
    end_mark: str = Field(default="// delete the templates code end")
    model_mark: str = Field(default="// todo generate model code to here")
    dao_mark: str = Field(default="// todo generate the update fields code to here")
    handler_mark: str = Field(default="// todo generate the request and response struct to here")
    seed_constants: list[str] = Field(
        default_factory=list,
        description="Literal 'NAME = N' lines whose number is randomized by the handler command",
    )


class CommandLayout(BaseModel):
    """Which part of the skeleton a command materializes."""

    include_dirs: list[str] = Field(default_factory=list)
    exclude_dirs: list[str] = Field(default_factory=list)
    exclude_files: list[str] = Field(default_factory=list)


def _default_dao_layout() -> CommandLayout:
    return CommandLayout(
        include_dirs=["internal/model", "internal/cache", "internal/dao"],
        exclude_files=["init.go", "init_test.go"],
    )


def _default_handler_layout() -> CommandLayout:
    return CommandLayout(
        include_dirs=[
            "internal/model",
            "internal/cache",
            "internal/dao",
            "internal/ecode",
            "internal/handler",
            "internal/routers",
            "internal/types",
        ],
        exclude_files=[
            "systemCode_http.go",
            "systemCode_rpc.go",
            "init.go",
            "init_test.go",
            "routers.go",
            "routers_test.go",
            "routers_pbExample.go",
            "routers_pbExample_test.go",
            "swagger_types.go",
        ],
    )


class Config(BaseModel):
    """Global crudgen configuration.

    Instances are typically created once by the CLI entry point and passed
    to ``ScaffoldPipeline``.
    """

    templates_dir: Path = Field(default=Path("./templates"), description="Directory holding template skeletons")
    template_name: str = Field(default="sponge", description="Skeleton directory name under templates_dir")
    output_dir: Path = Field(default=Path("."), description="Parent of auto-named output directories")
    generation: GenerationOptions = Field(default_factory=GenerationOptions)
    skeleton: SkeletonConfig = Field(default_factory=SkeletonConfig)
    dao: CommandLayout = Field(default_factory=_default_dao_layout)
    handler: CommandLayout = Field(default_factory=_default_handler_layout)

    def layout_for(self, command: str) -> CommandLayout:
        """Return the include/exclude layout of ``"dao"`` or ``"handler"``.

        The handler layout also drops the skeleton's gRPC example files,
        which are named after the placeholder type.
        """
        if command == "dao":
            return self.dao
        if command == "handler":
            placeholder = self.skeleton.placeholder_type
            if not placeholder:
                return self.handler
            stem = placeholder[:1].lower() + placeholder[1:]
            excluded = list(self.handler.exclude_files)
            for name in (f"{stem}_rpc.go", f"{stem}_service.pb.go"):
                if name not in excluded:
                    excluded.append(name)
            return self.handler.model_copy(update={"exclude_files": excluded})
        raise ValueError(f"Unknown command: {command}")

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file and return its path."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            CRUDGEN_TEMPLATES_DIR, CRUDGEN_TEMPLATE_NAME, CRUDGEN_OUTPUT_DIR,
            CRUDGEN_EMBED, CRUDGEN_PACKAGE, CRUDGEN_TEMPLATE_MODULE,
            CRUDGEN_PLACEHOLDER_TYPE.
        """
        generation_kwargs: dict[str, Any] = {}
        if os.environ.get("CRUDGEN_EMBED"):
            generation_kwargs["embed_base_model"] = _env_bool(os.environ["CRUDGEN_EMBED"])
        if os.environ.get("CRUDGEN_PACKAGE"):
            generation_kwargs["output_package_name"] = os.environ["CRUDGEN_PACKAGE"]

        skeleton_kwargs: dict[str, Any] = {}
        if os.environ.get("CRUDGEN_TEMPLATE_MODULE"):
            skeleton_kwargs["module_path"] = os.environ["CRUDGEN_TEMPLATE_MODULE"]
        if os.environ.get("CRUDGEN_PLACEHOLDER_TYPE"):
            skeleton_kwargs["placeholder_type"] = os.environ["CRUDGEN_PLACEHOLDER_TYPE"]

        return cls(
            templates_dir=Path(os.environ.get("CRUDGEN_TEMPLATES_DIR", "./templates")),
            template_name=os.environ.get("CRUDGEN_TEMPLATE_NAME", "sponge"),
            output_dir=Path(os.environ.get("CRUDGEN_OUTPUT_DIR", ".")),
            generation=GenerationOptions(**generation_kwargs),
            skeleton=SkeletonConfig(**skeleton_kwargs),
        )


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")
