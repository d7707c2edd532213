"""FlowConfig 配置值对象"""

from dataclasses import dataclass


@dataclass(frozen=True)
class FlowConfig:
    """迁移流程配置"""

    default_version: str = "1.0.0"  # 节点未设置 version 时的默认值
    default_range: str = "~1.0.0"  # 节点未设置 range 时的默认值
    version_field: str = "version"  # 输入对象上携带版本号的字段名
