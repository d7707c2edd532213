"""
Versioning 子模块 - 语义化版本比较与范围匹配
"""
from .semver_range import (
    compare_versions,
    is_valid_range,
    parse_version,
    satisfies,
    to_specifier_set,
)

__all__ = [
    "compare_versions",
    "is_valid_range",
    "parse_version",
    "satisfies",
    "to_specifier_set",
]
