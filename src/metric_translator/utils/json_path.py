from typing import Any

import jsonpath_ng.ext as jsonpath
from jsonpath_ng.exceptions import JsonPathLexerError, JsonPathParserError


class PathNotFound(LookupError):
    pass


def find_first(doc: Any, expression: str) -> Any:
    """Return the first value matching a JSONPath expression in doc"""
    try:
        matches = jsonpath.parse(expression).find(doc)
    except (JsonPathLexerError, JsonPathParserError) as e:
        raise PathNotFound(f"invalid JSONPath {expression!r}: {e}") from e
    if not matches:
        raise PathNotFound(f"nothing found at {expression!r}")
    return matches[0].value
