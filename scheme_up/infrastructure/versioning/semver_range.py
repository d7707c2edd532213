"""
semver_range.py - 语义化版本比较与范围匹配

基于 packaging.version / packaging.specifiers 实现，范围语法与 npm semver 对齐:

| 范围写法          | 等价的 SpecifierSet             |
|------------------|--------------------------------|
| 1.2.3 / =1.2.3   | ==1.2.3                        |
| ^1.2.3           | >=1.2.3, <2.0.0                |
| ^0.2.3           | >=0.2.3, <0.3.0                |
| ^0.0.3           | >=0.0.3, <0.0.4                |
| ~1.2.3           | >=1.2.3, <1.3.0                |
| >=1.2.3 <2.0.0   | >=1.2.3, <2.0.0 (空格表示且)     |

非法版本或非法范围在 satisfies 中视为不匹配，不抛出异常。
"""

import re
from functools import lru_cache
from typing import List, Tuple

from packaging.specifiers import SpecifierSet
from packaging.version import InvalidVersion, Version

_COMPARATOR_RE = re.compile(r"^(\^|~|>=|<=|>|<|=)?\s*(\S+)$")
# ">= 1.0.0" 这类带空格的写法先合并
_OPERATOR_SPACE_RE = re.compile(r"(\^|~|>=|<=|>|<|=)\s+")
# 只接受 MAJOR.MINOR.PATCH[-预发布][+构建元数据]，拒绝 PEP 440 的 "1.0"、"1.0.0.post1" 等写法
_SEMVER_RE = re.compile(r"^\d+\.\d+\.\d+(?:-[0-9A-Za-z.-]+)?(?:\+[0-9A-Za-z.-]+)?$")


def parse_version(version: str) -> Version:
    """解析版本号，允许带前缀 v (如 v1.2.3)"""
    if not isinstance(version, str):
        raise InvalidVersion(f"Invalid version: {version!r}")
    text = version.strip()
    if text[:1] in ("v", "V"):
        text = text[1:]
    if not _SEMVER_RE.match(text):
        raise InvalidVersion(f"Invalid version: {version!r}")
    return Version(text)


def _release_triple(version: Version) -> Tuple[int, int, int]:
    release = tuple(version.release) + (0, 0, 0)
    return release[0], release[1], release[2]


def _comparator_to_specifiers(operator: str, version: Version) -> List[str]:
    major, minor, patch = _release_triple(version)

    if operator in ("", "="):
        return [f"=={version}"]

    if operator == "~":
        return [f">={version}", f"<{major}.{minor + 1}.0"]

    if operator == "^":
        if major > 0:
            upper = f"{major + 1}.0.0"
        elif minor > 0:
            upper = f"0.{minor + 1}.0"
        else:
            upper = f"0.0.{patch + 1}"
        return [f">={version}", f"<{upper}"]

    return [f"{operator}{version}"]


@lru_cache(maxsize=256)
def to_specifier_set(range_expr: str) -> SpecifierSet:
    """
    将 npm 风格的范围表达式转换为 SpecifierSet

    Raises:
        ValueError: 范围表达式为空或无法解析（InvalidVersion / InvalidSpecifier 均为其子类）
    """
    if not isinstance(range_expr, str) or not range_expr.strip():
        raise ValueError(f"Invalid range: {range_expr!r}")

    specifiers: List[str] = []
    for part in _OPERATOR_SPACE_RE.sub(r"\1", range_expr.strip()).split():
        match = _COMPARATOR_RE.match(part)
        if match is None:
            raise ValueError(f"Invalid comparator {part!r} in range {range_expr!r}")
        operator, version_text = match.group(1) or "", match.group(2)
        specifiers.extend(
            _comparator_to_specifiers(operator, parse_version(version_text))
        )

    return SpecifierSet(",".join(specifiers))


def is_valid_range(range_expr: str) -> bool:
    try:
        to_specifier_set(range_expr)
    except (TypeError, ValueError):
        return False
    return True


def satisfies(version: str, range_expr: str) -> bool:
    """版本是否落在范围内；非法版本或非法范围返回 False"""
    try:
        parsed = parse_version(version)
        specifier_set = to_specifier_set(range_expr)
    except (TypeError, ValueError):
        return False
    return specifier_set.contains(parsed)


def compare_versions(version_a: str, version_b: str) -> int:
    """
    比较两个版本号

    Returns:
        -1 / 0 / 1

    Raises:
        InvalidVersion: 任一版本号无法解析
    """
    parsed_a = parse_version(version_a)
    parsed_b = parse_version(version_b)
    if parsed_a < parsed_b:
        return -1
    if parsed_a > parsed_b:
        return 1
    return 0
