"""crudgen synthesizer -- renders Go code artifacts from a table schema.

Quick usage::

    from crudgen.synthesizer import ArtifactKind, Synthesizer

    codes = Synthesizer().generate(schema)
    print(codes[ArtifactKind.MODEL])
"""

from crudgen.synthesizer.generator import (
    ArtifactKind,
    FieldSpec,
    Synthesizer,
    TableSpec,
    adjust_id_type,
    synthesize,
)
from crudgen.synthesizer.templates import TemplateRenderer
from crudgen.synthesizer.types import GoType, map_type

__all__ = [
    "ArtifactKind",
    "FieldSpec",
    "GoType",
    "Synthesizer",
    "TableSpec",
    "TemplateRenderer",
    "adjust_id_type",
    "map_type",
    "synthesize",
]
