"""
Input configuration for rtxkit.
"""

from .inputs import (
    LATEST,
    ActionInputs,
    load_inputs,
    load_yaml_inputs,
    env_inputs,
)

__all__ = [
    "LATEST",
    "ActionInputs",
    "load_inputs",
    "load_yaml_inputs",
    "env_inputs",
]
