"""Fluent builder generation for TypeScript type declarations."""

from tsbuilder.config import Config
from tsbuilder.pipeline import BuilderGenerator, GenerationError, GenerationResult, generate_builders

__all__ = [
    "BuilderGenerator",
    "Config",
    "GenerationError",
    "GenerationResult",
    "generate_builders",
]

__version__ = "0.1.0"
