"""
scheme-up - 版本化对象迁移引擎

按语义化版本逐级升级输入对象，每一级都校验结构，最终得到最新结构。
"""

from .domain.exceptions import ERROR_MESSAGES, ErrorCode, FlowError
from .domain.value_object import FlowConfig, FlowResult, MigrationNode
from .domain.domain_service.flow import (
    CatchCallback,
    MigrationChain,
    NodeBuilder,
    VersionFlow,
)
from .infrastructure.versioning import compare_versions, satisfies

__version__ = "0.1.0"

__all__ = [
    # 编排与构建
    "VersionFlow",
    "NodeBuilder",
    "MigrationChain",
    "CatchCallback",
    # 值对象
    "MigrationNode",
    "FlowResult",
    "FlowConfig",
    # 错误
    "ErrorCode",
    "ERROR_MESSAGES",
    "FlowError",
    # 版本工具
    "compare_versions",
    "satisfies",
    "__version__",
]
