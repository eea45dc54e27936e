"""Placeholder substitution for catalog templates.

Provides substitute_vars() for replacing $var and ${var} placeholders with
ambient parameter values.
"""

from __future__ import annotations

import re
from typing import Any, Mapping

__all__ = ["substitute_vars"]

# Pattern to match $var or ${var} placeholders
_VAR_PATTERN = re.compile(r"\$\{([a-zA-Z_][a-zA-Z0-9_]*)\}|\$([a-zA-Z_][a-zA-Z0-9_]*)")


def substitute_vars(template: str, var_dict: Mapping[str, Any]) -> str:
    """Substitute $var and ${var} placeholders in a template string.

    Args:
        template: String containing $var or ${var} placeholders.
        var_dict: Mapping of variable names to values.

    Returns:
        Template with variables substituted.

    Raises:
        KeyError: If a referenced variable is not in var_dict.
    """

    def replace(match: re.Match[str]) -> str:
        var_name = match.group(1) or match.group(2)
        if var_name not in var_dict:
            raise KeyError(var_name)
        return str(var_dict[var_name])

    return _VAR_PATTERN.sub(replace, template)
