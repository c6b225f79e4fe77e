"""Decorator generator for Go interfaces."""

__version__ = "0.1.0"

from decgen.config import GeneratorConfig
from decgen.errors import (
    DecgenError,
    ExtractionError,
    NotAnInterfaceError,
    NotFoundError,
    PatternConfigurationError,
    RenderError,
    TypeResolutionError,
    ValidationError,
    WriteError,
    ZeroValueError,
)
from decgen.generator import GenerationRequest, GenerationResult, Generator
from decgen.models import DecoratorKind, DecoratorSpec, InterfaceModel, MethodSignature

__all__ = [
    "__version__",
    "DecgenError",
    "DecoratorKind",
    "DecoratorSpec",
    "ExtractionError",
    "GenerationRequest",
    "GenerationResult",
    "Generator",
    "GeneratorConfig",
    "InterfaceModel",
    "MethodSignature",
    "NotAnInterfaceError",
    "NotFoundError",
    "PatternConfigurationError",
    "RenderError",
    "TypeResolutionError",
    "ValidationError",
    "WriteError",
    "ZeroValueError",
]
