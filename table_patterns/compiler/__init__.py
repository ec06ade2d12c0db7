"""Compiler layer - key templates, index derivation, access patterns, validation."""

from table_patterns.compiler.access_patterns import (
    AccessPatternGenerator,
    AccessPatternReport,
)
from table_patterns.compiler.gsi import (
    GsiDerivationResult,
    GsiDeriver,
    GsiOptimization,
    GsiUsage,
)
from table_patterns.compiler.keys import (
    KeyPatternGenerator,
    KeyPatternValidation,
    resolve_template,
)
from table_patterns.compiler.lsi import LsiDerivationResult, LsiDeriver
from table_patterns.compiler.pipeline import (
    CompiledSchema,
    SchemaCompiler,
    compile_directory,
    compile_models,
)
from table_patterns.compiler.sparse import (
    SparseDerivationResult,
    SparseIndexDeriver,
    SparseKind,
)

__all__ = [
    "AccessPatternGenerator",
    "AccessPatternReport",
    "CompiledSchema",
    "GsiDerivationResult",
    "GsiDeriver",
    "GsiOptimization",
    "GsiUsage",
    "KeyPatternGenerator",
    "KeyPatternValidation",
    "LsiDerivationResult",
    "LsiDeriver",
    "SchemaCompiler",
    "SparseDerivationResult",
    "SparseIndexDeriver",
    "SparseKind",
    "compile_directory",
    "compile_models",
    "resolve_template",
]
