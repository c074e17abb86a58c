"""
Recursive fallback merge for configuration values.

The merge never mutates its inputs. Rules, for a key present on both
sides:

- object + object: merged recursively, key by key
- anything else (lists, scalars, None, type mismatch): the higher-priority
  value wins wholesale

Keys present on only one side are carried through unchanged.
"""

from __future__ import annotations

import typing as _typing


def merge_dicts(
    high: dict[str, _typing.Any],
    low: dict[str, _typing.Any],
) -> dict[str, _typing.Any]:
    """
    Deep merge two plain dicts, with high taking priority.

    Both arguments must be plain dicts the caller owns (e.g. from
    thaw()); the result may reuse their nested values.

    Key order: keys of high first, in high's order, then keys only
    present in low, in low's order.
    """
    result: dict[str, _typing.Any] = {}
    for key, value in high.items():
        if key in low and isinstance(value, dict) and isinstance(low[key], dict):
            result[key] = merge_dicts(value, low[key])
        else:
            result[key] = value
    for key, value in low.items():
        if key not in result:
            result[key] = value
    return result
