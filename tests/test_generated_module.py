import textwrap
from http import HTTPMethod

import pytest

from routegen.config import RouteGenConfig
from routegen.extractors.declarations import read_declarations
from routegen.orchestrator.pipeline import generate_source
from routegen.runtime import UnroutedVariantError

API_SRC = '''
"""Declarations for the example API."""

from enum import Enum


class Method(Enum):
    Get = "GET"
    Post = "POST"


# keep me
@routes
class Api:
    """Example API."""

    @route(Get, "/ping")
    class Ping: ...

    @route(Get, "/users/{id}")
    class GetUser(tuple[int]): ...

    @route(Get, "/search/{query}/{page}")
    class Search(tuple[str, int]):
        """Full text search."""

    @route(Post, "/literal/{id}")
    class Literal: ...

    class Internal(tuple[int]): ...


def helper():
    return Api.Ping()
'''


def render(src: str, config: RouteGenConfig | None = None) -> str:
    decl = read_declarations(textwrap.dedent(src), filename="api.routes.py", config=config)
    _, text = generate_source(decl, config)
    return text


def load(text: str) -> dict:
    ns: dict = {"__name__": "generated_api"}
    exec(compile(text, "api.py", "exec"), ns)
    return ns


def test_generated_module_resolves_scenarios():
    ns = load(render(API_SRC))
    Api, Method = ns["Api"], ns["Method"]

    assert Api.Ping().resolve() == (Method.Get, "/ping")
    assert Api.GetUser(42).resolve() == (Method.Get, "/users/42")
    assert Api.Search("rust", 2).resolve() == (Method.Get, "/search/rust/2")


def test_unit_variant_template_is_not_substituted():
    ns = load(render(API_SRC))
    assert ns["Api"].Literal().resolve() == (ns["Method"].Post, "/literal/{id}")


def test_unrouted_variant_raises_at_call_time():
    ns = load(render(API_SRC))
    with pytest.raises(UnroutedVariantError):
        ns["Api"].Internal(1).resolve()


def test_generated_module_keeps_surrounding_code():
    text = render(API_SRC)
    assert text.startswith("# Code generated by routegen from api.routes.py. DO NOT EDIT.\n")
    assert '"""Declarations for the example API."""' in text
    assert "# keep me" in text
    assert "@routes" not in text
    assert "@route(" not in text
    assert "from enum import Enum\nfrom routegen.runtime import RouteSet, TupleVariant, UnitVariant\n" in text

    ns = load(text)
    assert ns["helper"]() == ns["Api"].Ping()


def test_generated_variants_are_members_of_the_route_set():
    ns = load(render(API_SRC))
    Api = ns["Api"]

    user = Api.GetUser(7)
    assert isinstance(user, Api)
    assert isinstance(user, tuple)
    assert repr(user) == "Api.GetUser(7)"
    assert repr(Api.Ping()) == "Api.Ping()"
    assert Api.Search.__doc__ == "Full text search."
    assert Api.__doc__ == "Example API."


def test_generated_constructor_checks_arity():
    ns = load(render(API_SRC))
    with pytest.raises(TypeError):
        ns["Api"].Search("rust")


def test_field_textual_form_is_format():
    src = """
    from enum import Enum

    class Method(Enum):
        Get = "GET"

    @routes
    class Files:
        @route(Get, "/files/{path}/v{version}")
        class Read(tuple[str, float]): ...
    """
    ns = load(render(src))
    assert ns["Files"].Read("a/b", 1.5).resolve() == (ns["Method"].Get, "/files/a/b/v1.5")


def test_placeholder_names_do_not_need_to_match_field_types():
    # binding is positional: the first field fills the first placeholder
    src = """
    from enum import Enum

    class Method(Enum):
        Get = "GET"

    @routes
    class Api:
        @route(Get, "/{b}/{a}")
        class Swap(tuple[int, int]): ...
    """
    ns = load(render(src))
    assert ns["Api"].Swap(1, 2).resolve()[1] == "/1/2"


@pytest.mark.parametrize(
    "template, expected",
    [
        ("/a/{x-y}/{id}", "/a/{x-y}/42"),
        ("/a/{{id}}", "/a/{42}"),
        ("/a/{id}/{}/{0", "/a/42/{}/{0"),
        ("/a/{id}/}{", "/a/42/}{"),
        ("/a/{ id }/{id}", "/a/{ id }/42"),
    ],
)
def test_braces_outside_placeholders_are_literal(template, expected):
    src = f"""
    from http import HTTPMethod as Method

    @routes
    class Api:
        @route(GET, "{template}")
        class Item(tuple[int]): ...
    """
    ns = load(render(src))
    assert ns["Api"].Item(42).resolve() == (HTTPMethod.GET, expected)


def test_field_values_with_braces_are_not_reinterpreted():
    src = """
    from http import HTTPMethod as Method

    @routes
    class Api:
        @route(GET, "/q/{query}/{page}")
        class Search(tuple[str, int]): ...
    """
    ns = load(render(src))
    assert ns["Api"].Search("{page}", 3).resolve()[1] == "/q/{page}/3"


def test_placeholder_named_like_generated_identifiers():
    src = """
    from http import HTTPMethod as Method

    @routes
    class Api:
        @route(GET, "/ping")
        class Ping: ...

        @route(GET, "/m/{Method}/{Api}/{self}")
        class ByMethod(tuple[str, str, str]): ...

        @route(GET, "/f/{format}/{isinstance}")
        class Builtins(tuple[str, int]): ...
    """
    ns = load(render(src))
    Api = ns["Api"]

    assert Api.Ping().resolve() == (HTTPMethod.GET, "/ping")
    assert Api.ByMethod("post", "v1", "me").resolve() == (HTTPMethod.GET, "/m/post/v1/me")
    assert Api.Builtins("json", 2).resolve() == (HTTPMethod.GET, "/f/json/2")


def test_external_method_enum_from_import():
    src = """
    from http import HTTPMethod

    @routes
    class Api:
        @route(DELETE, "/users/{id}")
        class DeleteUser(tuple[int]): ...
    """
    ns = load(render(src, RouteGenConfig(method_type="HTTPMethod")))
    assert ns["Api"].DeleteUser(3).resolve() == (HTTPMethod.DELETE, "/users/3")


def test_multiple_route_sets_in_one_file():
    src = """
    from http import HTTPMethod as Method

    @routes
    class Users:
        @route(GET, "/users")
        class List: ...

    @routes
    class Items:
        @route(GET, "/items/{id}")
        class Get(tuple[int]): ...
    """
    ns = load(render(src))
    assert ns["Users"].List().resolve() == (HTTPMethod.GET, "/users")
    assert ns["Items"].Get(5).resolve() == (HTTPMethod.GET, "/items/5")


def test_unknown_method_surfaces_when_called():
    src = """
    from http import HTTPMethod as Method

    @routes
    class Api:
        @route(Fetch, "/ping")
        class Ping: ...
    """
    ns = load(render(src))
    with pytest.raises(AttributeError):
        ns["Api"].Ping().resolve()


def test_module_without_imports_gets_runtime_import_on_top():
    src = """
    @routes
    class Api:
        class Ping: ...
    """
    text = render(src)
    assert text.splitlines()[1] == "from routegen.runtime import RouteSet, UnitVariant"
