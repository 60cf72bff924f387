from __future__ import annotations

import ast
import io
import keyword
import tokenize
from typing import Optional

from routegen.domain.declarations import RouteSpec, SourceLocation
from routegen.errors import MalformedAnnotation

_TRIVIA = {
    tokenize.NL,
    tokenize.NEWLINE,
    tokenize.COMMENT,
    tokenize.INDENT,
    tokenize.DEDENT,
    tokenize.ENDMARKER,
}

_EXPECTED = 'expected `method, "url/template"`'


def parse_route_annotation(text: str, location: Optional[SourceLocation] = None) -> RouteSpec:
    """
    Parse the argument text of one route annotation:
      Get, "/users/{id}"
    into RouteSpec(method="Get", url_template="/users/{id}").

    Anything else (missing comma, keyword or literal as method, bytes or
    f-string template, trailing tokens including a trailing comma) raises
    MalformedAnnotation at `location`.
    """
    tokens = _significant_tokens(text, location)

    if len(tokens) != 3:
        raise MalformedAnnotation(f"{_EXPECTED}, got {text.strip()!r}", location)

    method_tok, comma_tok, url_tok = tokens

    if method_tok.type != tokenize.NAME or keyword.iskeyword(method_tok.string):
        raise MalformedAnnotation(
            f"method must be an identifier, got {method_tok.string!r}", location
        )
    if comma_tok.type != tokenize.OP or comma_tok.string != ",":
        raise MalformedAnnotation(f"{_EXPECTED}, missing comma after method", location)

    url = _string_literal(url_tok)
    if url is None:
        raise MalformedAnnotation(
            f"url template must be a string literal, got {url_tok.string!r}", location
        )

    return RouteSpec(method=method_tok.string, url_template=url, location=location)


def _significant_tokens(text: str, location: Optional[SourceLocation]) -> list[tokenize.TokenInfo]:
    # Wrapped in parentheses so multi-line argument text tokenizes without
    # INDENT/DEDENT bookkeeping; the wrapper tokens are stripped again below.
    wrapped = f"({text})"
    try:
        tokens = [
            t
            for t in tokenize.generate_tokens(io.StringIO(wrapped).readline)
            if t.type not in _TRIVIA
        ]
    except (tokenize.TokenError, SyntaxError) as exc:
        raise MalformedAnnotation(f"{_EXPECTED}: {exc}", location) from exc

    if len(tokens) < 2 or tokens[0].string != "(" or tokens[-1].string != ")":
        raise MalformedAnnotation(_EXPECTED, location)
    return tokens[1:-1]


def _string_literal(tok: tokenize.TokenInfo) -> Optional[str]:
    if tok.type != tokenize.STRING:
        return None
    try:
        value = ast.literal_eval(tok.string)
    except (ValueError, SyntaxError):
        # f-strings on interpreters that still emit them as STRING tokens
        return None
    if not isinstance(value, str):
        return None
    return value
