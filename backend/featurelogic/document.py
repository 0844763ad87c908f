"""
YAML document adapter.

Turns text into plain mappings, lists and scalars and back. Nothing here
knows about expressions.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, TextIO, Union

import yaml

from .errors import DecodeError


def decode(source: Union[str, TextIO]) -> Dict[Any, Any]:
    """
    Decode a YAML document whose root is a mapping.

    Args:
        source: YAML text or a readable stream.

    Returns:
        The decoded mapping.

    Raises:
        DecodeError: If the YAML is malformed, too deeply nested, empty,
            or not a mapping.
    """
    try:
        data = yaml.safe_load(source)
    except yaml.YAMLError as e:
        raise DecodeError(str(e)) from e
    except RecursionError as e:
        # PyYAML composes recursively, so very deep nesting exhausts the stack
        raise DecodeError("document nesting is too deep to decode") from e

    if data is None:
        raise DecodeError("empty document")
    if not isinstance(data, dict):
        raise DecodeError(
            f"document root must be a mapping, got {type(data).__name__}"
        )
    return data


def encode(node: Any, stream: Optional[TextIO] = None) -> Optional[str]:
    """Encode a node as block-style YAML, returning the text when no stream is given."""
    return yaml.safe_dump(
        node,
        stream,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )
