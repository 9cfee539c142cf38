"""Shared test helpers for docforge.

Helpers defined here have no runtime side effects and are imported by test
modules directly.
"""

from __future__ import annotations

from tests.helpers.immutability import assert_frozen_attribute, assert_frozen_attributes
from tests.helpers.trees import read_tree, write_tree

__all__ = [
    "assert_frozen_attribute",
    "assert_frozen_attributes",
    "read_tree",
    "write_tree",
]
