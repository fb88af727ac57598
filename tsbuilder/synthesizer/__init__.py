"""Builder synthesis from structural declarations."""

from tsbuilder.synthesizer.builder import synthesize
from tsbuilder.synthesizer.models import BuilderSpec, MethodKind, MethodSpec, Skip, SkipReason
from tsbuilder.synthesizer.runtime import RuntimeBuilder, build_class, build_factory
from tsbuilder.synthesizer.type_mapper import accepted_type, map_parameter_type

__all__ = [
    "BuilderSpec",
    "MethodKind",
    "MethodSpec",
    "RuntimeBuilder",
    "Skip",
    "SkipReason",
    "accepted_type",
    "build_class",
    "build_factory",
    "map_parameter_type",
    "synthesize",
]
