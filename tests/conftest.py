"""Shared pytest fixtures for the crudgen test suite.

Provides reusable fixtures for:
- Sample table schemas and DDL text
- A miniature template skeleton (in memory and on disk)
- Skeleton-aware configuration
"""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from crudgen.config import Config, SkeletonConfig
from crudgen.materializer import TemplateTree
from crudgen.schema import Column, TableSchema


SKELETON_MODULE = "github.com/zhufuyi/sponge"
TARGET_MODULE = "github.com/acme/shop"


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------


ORDER_ITEMS_DDL = textwrap.dedent("""\
    -- shop schema
    CREATE TABLE `order_items` (
      `id` bigint(20) unsigned NOT NULL AUTO_INCREMENT,
      `sku` varchar(64) NOT NULL COMMENT 'stock keeping unit',
      `qty` int(11) NOT NULL DEFAULT '0' COMMENT 'quantity',
      `created_at` datetime DEFAULT NULL,
      `updated_at` datetime DEFAULT NULL,
      `deleted_at` datetime DEFAULT NULL,
      PRIMARY KEY (`id`),
      KEY `idx_sku` (`sku`)
    ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COMMENT='order line items';

    CREATE TABLE IF NOT EXISTS users (
      id bigint unsigned NOT NULL PRIMARY KEY,
      name varchar(32) NOT NULL,
      email varchar(128) DEFAULT NULL COMMENT 'login email',
      created_at datetime,
      updated_at datetime,
      deleted_at datetime
    );
""")


@pytest.fixture
def order_items_ddl() -> str:
    """DDL defining ``order_items`` and ``users``."""
    return ORDER_ITEMS_DDL


@pytest.fixture
def order_items_schema() -> TableSchema:
    """The ``order_items`` table with audit columns and two data columns."""
    return TableSchema(
        table_name="order_items",
        comment="order line items",
        columns=(
            Column(name="id", sql_type="bigint(20) unsigned", is_primary_key=True, is_nullable=False, ordinal=1),
            Column(name="sku", sql_type="varchar(64)", is_nullable=False, comment="stock keeping unit", ordinal=2),
            Column(name="qty", sql_type="int(11)", is_nullable=False, comment="quantity", ordinal=3),
            Column(name="created_at", sql_type="datetime", ordinal=4),
            Column(name="updated_at", sql_type="datetime", ordinal=5),
            Column(name="deleted_at", sql_type="datetime", ordinal=6),
        ),
    )


@pytest.fixture
def users_schema() -> TableSchema:
    return TableSchema(
        table_name="users",
        columns=(
            Column(name="id", sql_type="bigint unsigned", is_primary_key=True, is_nullable=False, ordinal=1),
            Column(name="name", sql_type="varchar(32)", is_nullable=False, ordinal=2),
            Column(name="email", sql_type="varchar(128)", comment="login email", ordinal=3),
        ),
    )


@pytest.fixture
def schema_file(tmp_path: Path, order_items_ddl: str) -> Path:
    path = tmp_path / "schema.sql"
    path.write_text(order_items_ddl, encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Template skeleton
# ---------------------------------------------------------------------------


SKELETON_FILES: dict[str, str] = {
    "go.mod": f"module {SKELETON_MODULE}\n\ngo 1.19\n",
    "cmd/serverNameExample/main.go": "package main\n\nfunc main() {}\n",
    "internal/model/init.go": "package model\n\n// InitMysql connect mysql\nfunc InitMysql() {}\n",
    "internal/model/common.go": "package model\n\n// shared model helpers\n",
    "internal/model/userExample.go": textwrap.dedent(f"""\
        package model

        import (
        \t"{SKELETON_MODULE}/pkg/mysql"
        )

        // delete the templates code start
        type UserExample struct {{
        \tmysql.Model `gorm:"embedded"`

        \tName string `gorm:"column:name" json:"name"`
        }}
        // delete the templates code end

        // todo generate model code to here
    """),
    "internal/cache/userExample.go": textwrap.dedent(f"""\
        package cache

        import (
        \t"{SKELETON_MODULE}/internal/model"
        \t"{SKELETON_MODULE}/pkg/cache"
        )

        // UserExampleCache cache for userExample
        type UserExampleCache struct {{
        \tcache cache.Cache
        }}

        func (c *UserExampleCache) Get(id uint64) (*model.UserExample, error) {{
        \treturn nil, nil
        }}
    """),
    "internal/dao/userExample.go": textwrap.dedent(f"""\
        package dao

        import (
        \t"{SKELETON_MODULE}/internal/cache"
        \t"{SKELETON_MODULE}/internal/model"
        )

        type userExampleDao struct {{
        \tcache *cache.UserExampleCache
        }}

        // UpdateByID update a record by id
        func (d *userExampleDao) UpdateByID(table *model.UserExample) error {{
        \tupdate := updateUserExampleColumns(table)
        \treturn d.db.Updates(update).Error
        }}

        // delete the templates code start
        func updateUserExampleColumns(table *model.UserExample) map[string]interface{{}} {{
        \treturn nil
        }}
        // delete the templates code end

        // todo generate the update fields code to here
    """),
    "internal/ecode/systemCode_http.go": "package ecode\n",
    "internal/ecode/userExample_rpc.go": "package ecode\n\n// userExample grpc error codes\n",
    "internal/ecode/userExample_http.go": "package ecode\n\n// userExample business-level http error codes\nvar userExampleNO = 1\n",
    "internal/handler/userExample.go": textwrap.dedent(f"""\
        package handler

        import (
        \t"{SKELETON_MODULE}/internal/dao"
        \t"{SKELETON_MODULE}/internal/types"
        )

        type userExampleHandler struct {{
        \tiDao dao.UserExampleDao
        }}

        func (h *userExampleHandler) Create(form *types.CreateUserExampleRequest) {{}}
    """),
    "internal/handler/userExample_test.go": textwrap.dedent("""\
        package handler

        const (
        \tuserExampleNO       = 1
        )
    """),
    "internal/routers/routers.go": "package routers\n",
    "internal/routers/routers_pbExample.go": "package routers\n\nfunc pbExampleRouter() {}\n",
    "internal/routers/userExample_service.pb.go": "package routers\n\nfunc registerUserExampleService() {}\n",
    "internal/routers/userExample.go": "package routers\n\nfunc userExampleRouter() {}\n",
    "internal/types/swagger_types.go": "package types\n",
    "internal/types/userExample_types.go": textwrap.dedent("""\
        package types

        import (
        \t"github.com/zhufuyi/sponge/pkg/ggorm/query"
        )

        var _ query.Params

        // todo generate the request and response struct to here
    """),
}


@pytest.fixture
def skeleton_files() -> dict[str, str]:
    return dict(SKELETON_FILES)


@pytest.fixture
def skeleton_tree(skeleton_files: dict[str, str]) -> TemplateTree:
    """The miniature skeleton as an in-memory tree named ``sponge``."""
    return TemplateTree.from_mapping("sponge", skeleton_files)


@pytest.fixture
def templates_dir(tmp_path: Path, skeleton_files: dict[str, str]) -> Path:
    """A templates directory holding the skeleton under ``sponge/``."""
    base = tmp_path / "templates"
    for rel, content in skeleton_files.items():
        target = base / "sponge" / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    return base


@pytest.fixture
def skeleton_config() -> SkeletonConfig:
    return SkeletonConfig(
        module_path=SKELETON_MODULE,
        placeholder_type="UserExample",
        seed_constants=["userExampleNO       = 1"],
    )


@pytest.fixture
def config(tmp_path: Path, templates_dir: Path, skeleton_config: SkeletonConfig) -> Config:
    return Config(
        templates_dir=templates_dir,
        output_dir=tmp_path / "generated",
        skeleton=skeleton_config,
    )
