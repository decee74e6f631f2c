"""crudgen materializer -- turns a template tree into a generated source tree.

Quick usage::

    from crudgen.materializer import MaterializationEngine, SubstitutionRule, load_registry

    engine = MaterializationEngine(load_registry("./templates"))
    out = engine.materialize(
        "sponge",
        include_dirs=["internal/model"],
        rules=[SubstitutionRule("UserExample", "OrderItem")],
    )
"""

from crudgen.materializer.engine import MaterializationEngine
from crudgen.materializer.selector import select_files
from crudgen.materializer.substitution import (
    MarkerBlockRule,
    Rule,
    Segment,
    SubstitutionRule,
    scan_marker_blocks,
    transform,
    transform_path,
)
from crudgen.materializer.tree import TemplateFile, TemplateTree, load_registry
from crudgen.materializer.writer import OutputWriter

__all__ = [
    "MarkerBlockRule",
    "MaterializationEngine",
    "OutputWriter",
    "Rule",
    "Segment",
    "SubstitutionRule",
    "TemplateFile",
    "TemplateTree",
    "load_registry",
    "scan_marker_blocks",
    "select_files",
    "transform",
    "transform_path",
]
