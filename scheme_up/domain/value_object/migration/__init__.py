"""
Migration 子模块 - 迁移节点与迁移结果
"""
from .migration_node import MigrationNode, TransformFn, ValidateFn
from .flow_result import FlowResult

__all__ = [
    "MigrationNode",
    "TransformFn",
    "ValidateFn",
    "FlowResult",
]
