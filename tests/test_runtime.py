import pytest

from routegen.runtime import RouteSet, TupleVariant, UnitVariant, UnroutedVariantError


class Api(RouteSet):
    __slots__ = ()

    def resolve(self):
        if isinstance(self, Api.Ping):
            return ("GET", "/ping")
        raise self.unrouted()


@Api.variant("Ping")
class _Api_Ping(Api, UnitVariant):
    __slots__ = ()


@Api.variant("Pair")
class _Api_Pair(Api, TupleVariant):
    __slots__ = ()

    def __new__(cls, _0: int, _1: int):
        return tuple.__new__(cls, (_0, _1))


@Api.variant("Other")
class _Api_Other(Api, TupleVariant):
    __slots__ = ()

    def __new__(cls, _0: int, _1: int):
        return tuple.__new__(cls, (_0, _1))


def test_variant_registers_on_route_set():
    assert Api.Ping is _Api_Ping
    assert Api.Ping.__name__ == "Ping"
    assert Api.Ping.__qualname__ == "Api.Ping"


def test_unit_variant_equality_and_hash():
    assert Api.Ping() == Api.Ping()
    assert hash(Api.Ping()) == hash(Api.Ping())
    assert Api.Ping() != Api.Pair(1, 2)
    assert repr(Api.Ping()) == "Api.Ping()"


def test_tuple_variant_equality_requires_same_variant():
    assert Api.Pair(1, 2) == Api.Pair(1, 2)
    assert Api.Pair(1, 2) != Api.Pair(2, 1)
    assert Api.Pair(1, 2) != Api.Other(1, 2)
    assert Api.Pair(1, 2) != (1, 2)
    assert len({Api.Pair(1, 2), Api.Pair(1, 2), Api.Other(1, 2)}) == 2
    assert repr(Api.Pair(1, "x")) == "Api.Pair(1, 'x')"


def test_unrouted_error():
    assert Api.Ping().resolve() == ("GET", "/ping")
    with pytest.raises(UnroutedVariantError, match="Api.Pair"):
        Api.Pair(1, 2).resolve()
    assert issubclass(UnroutedVariantError, LookupError)


class Bare(RouteSet):
    __slots__ = ()


@Bare.variant("Only")
class _Bare_Only(Bare, UnitVariant):
    __slots__ = ()


def test_route_set_without_resolver_reports_unrouted():
    with pytest.raises(UnroutedVariantError, match="Bare.Only"):
        Bare.Only().resolve()


def test_inequality_follows_variant_type():
    assert not (Api.Ping() != Api.Ping())
    assert Api.Ping() != Bare.Only()
    # same payload, different variant: tuple.__ne__ alone would say equal
    assert not (Api.Pair(1, 2) != Api.Pair(1, 2))
    assert Api.Pair(1, 2) != Api.Other(1, 2)
