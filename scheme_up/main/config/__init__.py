"""Config 子模块 - 配置加载"""
from .config_loader import load_flow_config, validate_flow_config

__all__ = [
    "load_flow_config",
    "validate_flow_config",
]
