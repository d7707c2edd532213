"""Config 子模块 - 配置相关值对象"""
from .flow_config import FlowConfig

__all__ = [
    "FlowConfig",
]
