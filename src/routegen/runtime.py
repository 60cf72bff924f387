"""
Base classes imported by generated route modules.

A generated route set looks like:

    class Api(RouteSet):
        __slots__ = ()

        def resolve(self) -> tuple[Method, str]: ...

    @Api.variant("GetUser")
    class _Api_GetUser(Api, TupleVariant):
        __slots__ = ()

        def __new__(cls, _0: int):
            return tuple.__new__(cls, (_0,))

so that ``Api.GetUser(42).resolve()`` works.
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar

_T = TypeVar("_T", bound=type)


class UnroutedVariantError(LookupError):
    """resolve() was called on a variant that declares no route."""


class RouteSet:
    __slots__ = ()

    @classmethod
    def variant(cls, name: str) -> Callable[[_T], _T]:
        """Register the decorated class as ``cls.<name>``."""

        def register(variant_cls: _T) -> _T:
            variant_cls.__name__ = name
            variant_cls.__qualname__ = f"{cls.__qualname__}.{name}"
            setattr(cls, name, variant_cls)
            return variant_cls

        return register

    def resolve(self) -> tuple[Any, str]:
        raise self.unrouted()

    def unrouted(self) -> UnroutedVariantError:
        return UnroutedVariantError(f"no route declared for {self!r}")


class UnitVariant:
    __slots__ = ()

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other)

    def __hash__(self) -> int:
        return hash(type(self))

    def __repr__(self) -> str:
        return f"{type(self).__qualname__}()"


class TupleVariant(tuple):
    __slots__ = ()

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and tuple.__eq__(self, other)

    # tuple defines its own __ne__, which would ignore the variant type
    def __ne__(self, other: object) -> bool:
        return not self == other

    def __hash__(self) -> int:
        return hash((type(self), tuple(self)))

    def __repr__(self) -> str:
        return f"{type(self).__qualname__}({', '.join(repr(v) for v in self)})"
