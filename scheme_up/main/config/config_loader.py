"""
config_loader.py - 迁移流程配置加载器

支持:
1. TOML / YAML 配置文件 ([flow] 表或 flow: 节)
2. 环境变量 (.env)
3. 配置验证

优先级: overrides > 环境变量 > 配置文件 > dataclass 默认值
"""
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from dotenv import load_dotenv

# Python 3.11+ 内置 tomllib，之前版本使用 tomli
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from scheme_up.domain.value_object.config.flow_config import FlowConfig
from scheme_up.infrastructure.versioning import is_valid_range, parse_version

# 配置键 -> 环境变量名
ENV_KEYS: Dict[str, str] = {
    "default_version": "SCHEME_UP_DEFAULT_VERSION",
    "default_range": "SCHEME_UP_DEFAULT_RANGE",
    "version_field": "SCHEME_UP_VERSION_FIELD",
}

_YAML_SUFFIXES = (".yaml", ".yml")


def load_toml(path: Union[str, Path]) -> Dict[str, Any]:
    """加载 TOML 配置文件"""
    with open(path, "rb") as f:
        return tomllib.load(f)


def load_yaml(path: Union[str, Path]) -> Dict[str, Any]:
    """加载 YAML 配置文件，空文件返回空字典"""
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _load_file(path: Optional[Union[str, Path]]) -> Dict[str, Any]:
    """按后缀加载配置文件，未指定或文件不存在时返回空字典"""
    if path is None:
        return {}
    path = Path(path)
    if not path.exists():
        return {}
    if path.suffix.lower() in _YAML_SUFFIXES:
        data = load_yaml(path)
    else:
        data = load_toml(path)
    return data.get("flow", {}) or {}


def _load_env(env_file: Optional[Union[str, Path]] = None) -> Dict[str, str]:
    """从环境变量读取配置，先加载 .env（不覆盖已有环境变量）"""
    if env_file is not None and Path(env_file).exists():
        load_dotenv(dotenv_path=env_file)
    else:
        load_dotenv()

    values = {}
    for key, env_name in ENV_KEYS.items():
        val = os.getenv(env_name)
        if val:
            values[key] = val
    return values


def load_flow_config(
    path: Optional[Union[str, Path]] = None,
    overrides: Optional[Dict[str, Any]] = None,
    env_file: Optional[Union[str, Path]] = None,
) -> FlowConfig:
    """
    加载迁移流程配置

    Args:
        path: TOML / YAML 配置文件路径
        overrides: 运行时覆盖值
        env_file: .env 文件路径，不指定时按 python-dotenv 默认规则查找

    Raises:
        ValueError: 配置无效
    """
    file_values = _load_file(path)
    env_values = _load_env(env_file)
    overrides = overrides or {}

    kwargs = {}
    for key in ENV_KEYS:
        if key in overrides:
            kwargs[key] = overrides[key]
        elif key in env_values:
            kwargs[key] = env_values[key]
        elif key in file_values:
            kwargs[key] = file_values[key]

    config = FlowConfig(**kwargs)
    validate_flow_config(config)
    return config


def validate_flow_config(config: FlowConfig) -> bool:
    """
    验证迁移流程配置

    Returns:
        True 如果配置有效
    """
    if not isinstance(config.version_field, str) or not config.version_field:
        raise ValueError("version_field 不能为空")

    try:
        parse_version(config.default_version)
    except ValueError as e:
        raise ValueError(f"default_version 无法解析: {config.default_version!r}") from e

    if not is_valid_range(config.default_range):
        raise ValueError(f"default_range 无法解析: {config.default_range!r}")

    return True
