"""Live Python builders made from a :class:`BuilderSpec`.

The generated class has the same method names as the emitted TypeScript
and the same accumulator semantics: one mutable dict per instance, written
in place by every setter, returned as-is by the accessor.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from tsbuilder.synthesizer.models import BuilderSpec, MethodKind, MethodSpec


class RuntimeBuilder:
    """Base class for builders produced by :func:`build_class`."""

    spec: BuilderSpec

    def __init__(self, obj: Optional[dict[str, Any]] = None) -> None:
        self._obj = obj if obj is not None else {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._obj!r})"


def _setter(key: str) -> Callable[..., RuntimeBuilder]:
    def setter(self: RuntimeBuilder, val: Any) -> RuntimeBuilder:
        self._obj[key] = val
        return self
    return setter


def _tagger(key: str, value: str) -> Callable[..., RuntimeBuilder]:
    def tagger(self: RuntimeBuilder) -> RuntimeBuilder:
        self._obj[key] = value
        return self
    return tagger


def _accessor(self: RuntimeBuilder) -> dict[str, Any]:
    return self._obj


def _method(method: MethodSpec) -> Callable[..., Any]:
    if method.kind == MethodKind.SETTER:
        func = _setter(method.field_name or "")
    elif method.kind == MethodKind.TYPENAME:
        func = _tagger(method.field_name or "", method.value or "")
    else:
        return _accessor
    func.__name__ = method.name
    return func


def build_class(spec: BuilderSpec) -> type[RuntimeBuilder]:
    """Create a :class:`RuntimeBuilder` subclass with one method per spec method."""
    namespace: dict[str, Any] = {"spec": spec}
    for method in spec.builder_class.methods:
        namespace[method.name] = _method(method)
    return type(spec.class_name, (RuntimeBuilder,), namespace)


def build_factory(
    spec: BuilderSpec, cls: Optional[type[RuntimeBuilder]] = None
) -> Callable[[Optional[dict[str, Any]]], RuntimeBuilder]:
    """Return the factory for *spec*; the seed dict is wrapped, not copied."""
    builder_cls = cls or build_class(spec)

    def factory(base_obj: Optional[dict[str, Any]] = None) -> RuntimeBuilder:
        return builder_cls(base_obj if base_obj is not None else {})

    factory.__name__ = spec.factory.name
    return factory
