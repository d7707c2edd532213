"""
Value Object Module

领域层值对象定义。

子模块分类:
- migration/: 迁移节点、迁移结果
- config/: 配置相关 (迁移流程默认值)
"""

from .migration.migration_node import MigrationNode, TransformFn, ValidateFn
from .migration.flow_result import FlowResult
from .config.flow_config import FlowConfig

__all__ = [
    # 迁移相关
    "MigrationNode",
    "TransformFn",
    "ValidateFn",
    "FlowResult",
    # 配置相关
    "FlowConfig",
]
