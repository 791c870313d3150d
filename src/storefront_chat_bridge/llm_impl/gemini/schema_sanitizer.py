"""
A module for sanitizing tool schemas for the Google Gemini API.

This module centralizes the logic for turning canonical tool declarations
(``input_schema`` in JSON-schema form) into the function declaration shape
Gemini accepts: ``parameters`` with unsupported keywords stripped.
"""

from typing import Any, Dict, Iterable, List, Mapping, Set, Union, cast
from functools import singledispatch

import jsonref  # type: ignore

from storefront_chat_bridge.llm_core import SchemaError, ToolDeclaration, get_logger

logger = get_logger(__name__)

# Gemini's schema language has no notion of these keys.
_UNSUPPORTED_KEYS = frozenset({"additional_properties", "additionalProperties"})
# String formats Gemini accepts; any other format on a string schema is rejected.
_SUPPORTED_STRING_FORMATS = frozenset({"enum", "date-time"})
_DEFINITION_KEYS = ("$defs", "definitions", "$schema")


def normalize_tools(tools: Iterable[Union[ToolDeclaration, Mapping[str, Any]]]) -> List[Dict[str, Any]]:
    """
    Converts canonical tool declarations into Gemini function declarations.

    ``input_schema`` is renamed to ``parameters`` and sanitized; every other key
    of the declaration is kept as-is.

    Args:
        tools: Canonical declarations, as models or plain dictionaries.

    Returns:
        Function declaration dictionaries in input order.
    """
    declarations = []
    for tool in tools:
        data = tool.model_dump(exclude_none=True) if isinstance(tool, ToolDeclaration) else dict(tool)
        schema = data.pop("input_schema", None)
        if schema:
            data["parameters"] = sanitize(schema)
        declarations.append(data)
    return declarations


def sanitize(schema: Dict[str, Any]) -> Dict[str, Any]:
    """
    Performs all necessary, recursive sanitization steps on a tool schema.

    Args:
        schema: The tool parameter schema to sanitize.

    Returns:
        A sanitized schema dictionary ready for the Gemini API.

    Raises:
        SchemaError: If the schema holds recursive or unresolvable references.
    """
    resolved = _inline_refs(schema)
    # We can safely cast the result because we know the top-level input is a dict,
    # and our dispatch function for dicts returns a dict.
    return cast(Dict[str, Any], _recursive_sanitize(resolved, set()))


@singledispatch
def _recursive_sanitize(schema: Any, seen: Set[int]) -> Any:
    """
    Recursively sanitizes a schema object. The implementation is chosen
    based on the object's type (dict, list, or other).
    """
    # Base case for non-dict and non-list types.
    return schema


@_recursive_sanitize.register(dict)
def _(schema: dict, seen: Set[int]) -> dict:
    """
    Sanitizes a dictionary. It first checks for circular references,
    then sanitizes the current level, and finally recurses on its values.
    """
    obj_id = id(schema)
    if obj_id in seen:
        raise SchemaError("Tool schema contains a circular structure, which Gemini cannot represent.")
    seen.add(obj_id)

    # 1. Sanitize the current dictionary level.
    sanitized_at_level = _ensure_required_params(_collapse_type_list(schema))

    # 2. Recursively sanitize all values, dropping keys Gemini rejects.
    result = {
        key: _recursive_sanitize(value, seen)
        for key, value in sanitized_at_level.items()
        if not _is_unsupported(key, value, sanitized_at_level)
    }

    seen.remove(obj_id)
    return result


@_recursive_sanitize.register(list)
def _(schema: list, seen: Set[int]) -> list:
    """Sanitizes a list by recursively sanitizing all of its items."""
    obj_id = id(schema)
    if obj_id in seen:
        raise SchemaError("Tool schema contains a circular structure, which Gemini cannot represent.")
    seen.add(obj_id)

    result = [_recursive_sanitize(item, seen) for item in schema]

    seen.remove(obj_id)
    return result


def _is_unsupported(key: str, value: Any, schema: Dict[str, Any]) -> bool:
    if key in _UNSUPPORTED_KEYS:
        return True
    if key != "format" or schema.get("type") != "string":
        return False
    return not isinstance(value, str) or value not in _SUPPORTED_STRING_FORMATS


def _collapse_type_list(params: Dict[str, Any]) -> Dict[str, Any]:
    """
    Rewrites a JSON-schema type list (e.g. ``["string", "null"]``) into the
    single ``type`` plus ``nullable`` form Gemini understands. Several
    non-null types become an ``anyOf`` of single-type schemas.
    """
    types_ = params.get("type")
    if not isinstance(types_, list):
        return params

    _params = params.copy()
    non_null = [t for t in types_ if t != "null"]
    if len(non_null) < len(types_):
        _params["nullable"] = True

    if len(non_null) == 1:
        _params["type"] = non_null[0]
    else:
        _params.pop("type")
        if non_null:
            _params["anyOf"] = [{"type": t} for t in non_null]
    return _params


def _ensure_required_params(params: Dict[str, Any]) -> Dict[str, Any]:
    """
    Ensures all required parameters in a dictionary are defined in its
    'properties'. This operates on a single dictionary level.
    """
    if "required" not in params or not isinstance(params.get("properties"), dict):
        return params

    _params = params.copy()
    defined_properties = set(_params["properties"].keys())
    valid_required = [name for name in _params["required"] if name in defined_properties]

    if valid_required:
        _params["required"] = valid_required
    else:
        _params.pop("required", None)

    return _params


def _inline_refs(schema: Dict[str, Any]) -> Dict[str, Any]:
    """Replaces local ``$ref`` pointers with the definitions they point to."""
    if not _contains_ref(schema):
        return schema

    _assert_no_recursive_refs(schema)
    try:
        # proxies=False ensures we get a plain dict back, not JsonRef objects
        resolved = jsonref.replace_refs(schema, proxies=False, lazy_load=False, loader=_refuse_remote_refs)
    except jsonref.JsonRefError as e:
        msg = f"Could not resolve tool schema reference: {e.message}"
        logger.error(msg)
        raise SchemaError(msg) from e

    return {key: value for key, value in resolved.items() if key not in _DEFINITION_KEYS}


def _contains_ref(node: Any) -> bool:
    if isinstance(node, dict):
        return "$ref" in node or any(_contains_ref(v) for v in node.values())
    if isinstance(node, list):
        return any(_contains_ref(item) for item in node)
    return False


def _assert_no_recursive_refs(schema: Dict[str, Any]) -> None:
    """Follows local references and raises on the first cycle."""
    defs = schema.get("$defs", {}) or schema.get("definitions", {})

    def check(node: Any, path: Set[str]) -> None:
        if isinstance(node, dict):
            ref = node.get("$ref")
            if isinstance(ref, str):
                if ref in path:
                    msg = f"Recursive structure detected: {ref}. Gemini tool parameters cannot be recursive."
                    logger.error(msg)
                    raise SchemaError(msg)
                # e.g. #/$defs/Address
                def_name = ref.rsplit("/", 1)[-1]
                if ref.startswith("#") and def_name in defs:
                    check(defs[def_name], path | {ref})
            for key, value in node.items():
                if key not in ("$defs", "definitions"):
                    check(value, path)
        elif isinstance(node, list):
            for item in node:
                check(item, path)

    check(schema, set())


def _refuse_remote_refs(uri: str, **kwargs: Any) -> Any:
    raise SchemaError(f"Remote schema references are not supported: {uri}")
