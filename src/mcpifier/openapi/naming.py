"""Tool name generation for OpenAPI operations.

Names are tried in order: the operation id, then a short summary, then a
name derived from the HTTP method and path.  All results are snake_case::

    from_operation_id("GetUserById")       # get_user_by_id
    from_summary("Create a new user")      # create_new_user
    from_path_and_method("/users/{id}", "GET")  # get_user
"""

from __future__ import annotations

import re

MAX_SUMMARY_LENGTH = 50

_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_NON_IDENTIFIER = re.compile(r"[^a-z0-9_]")
_UNDERSCORES = re.compile(r"_+")
# Only these filler words are dropped; "by", "to", "for" etc. carry meaning.
_FILLER_WORDS = re.compile(r"\b(a|an|the|on|at)\b", re.IGNORECASE)
_WORD = re.compile(r"\b\w+\b")

_ACTIONS = {
    "POST": "create",
    "PUT": "update",
    "PATCH": "update",
    "DELETE": "delete",
}


def to_snake_case(text: str) -> str:
    if not text or not text.strip():
        return text
    result = _CAMEL_BOUNDARY.sub(r"\1_\2", text).lower()
    result = _NON_IDENTIFIER.sub("_", result)
    result = _UNDERSCORES.sub("_", result)
    return result.strip("_")


def from_operation_id(operation_id: str) -> str:
    return to_snake_case(operation_id)


def from_summary(summary: str | None) -> str | None:
    """Name from a short summary, or ``None`` if it is blank, long or all filler."""
    if not summary or not summary.strip() or len(summary) > MAX_SUMMARY_LENGTH:
        return None

    words = _WORD.findall(_FILLER_WORDS.sub("", summary))
    if not words:
        return None
    return to_snake_case(" ".join(words)) or None


def from_path_and_method(path: str, method: str) -> str:
    """Name from the path's literal segments and an action verb for *method*.

    ``GET`` becomes ``list`` (or ``get`` for a parameterized path); a
    parameterized ``GET`` singularizes the first segment, while ``POST``,
    ``PUT``, ``PATCH`` and ``DELETE`` singularize the last one.
    """
    method = method.upper()
    segments = [
        s for s in path.split("/") if s and not s.startswith("{") and not s.endswith("}")
    ]
    if not segments:
        return to_snake_case(method.lower())

    has_parameters = "{" in path
    if method == "GET":
        action = "get" if has_parameters else "list"
    else:
        action = _ACTIONS.get(method, method.lower())

    if method == "GET" and has_parameters:
        segments[0] = singularize(segments[0])
    elif method in _ACTIONS:
        segments[-1] = singularize(segments[-1])

    return to_snake_case(f"{action}_{'_'.join(segments)}")


def singularize(word: str) -> str:
    """Lowercase and singularize *word* with basic English plural rules."""
    if not word or not word.strip():
        return word

    word = word.lower()
    if len(word) > 3:
        if word.endswith("ies"):
            return word[:-3] + "y"
        if word.endswith("ves"):
            # knives -> knife, wolves -> wolf
            return word[:-3] + ("fe" if word[-4] == "i" else "f")
        if word.endswith("ses"):
            return word[:-2]
        if word.endswith(("xes", "ches", "shes")):
            return word[:-2]
    if word.endswith("s") and not word.endswith("ss") and len(word) > 1:
        return word[:-1]
    return word


def generate_tool_name(
    path: str,
    method: str,
    operation_id: str | None = None,
    summary: str | None = None,
) -> str:
    """Pick the best available name for an operation."""
    if operation_id and operation_id.strip():
        return from_operation_id(operation_id)
    return from_summary(summary) or from_path_and_method(path, method)
