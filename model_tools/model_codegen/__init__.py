"""Model Code Generator - Generates Go model structs from a database schema."""

from .main import (
    DEFAULT_GO_TYPES,
    BaseModelDescriptor,
    Field,
    GenerationResult,
    GeneratorConfig,
    GeneratorContext,
    ModelDescriptor,
    SchemaModels,
    UnitResult,
    assemble,
    emit,
    generate,
    map_type,
    render_base_model,
    render_model,
)

__all__ = [
    "DEFAULT_GO_TYPES",
    "BaseModelDescriptor",
    "Field",
    "GenerationResult",
    "GeneratorConfig",
    "GeneratorContext",
    "ModelDescriptor",
    "SchemaModels",
    "UnitResult",
    "assemble",
    "emit",
    "generate",
    "map_type",
    "render_base_model",
    "render_model",
]
