"""
Flow 子模块 - 迁移节点构建、迁移链与流程编排
"""
from .node_builder import NodeBuilder
from .migration_chain import MigrationChain
from .version_flow import CatchCallback, ConfigureFn, VersionFlow

__all__ = [
    "NodeBuilder",
    "MigrationChain",
    "VersionFlow",
    "CatchCallback",
    "ConfigureFn",
]
