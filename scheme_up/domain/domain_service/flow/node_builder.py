"""
NodeBuilder - 迁移节点构建器

逐项设置节点字段（顺序任意，均返回自身以便链式调用），build() 时做完整性校验:

    node = (
        NodeBuilder()
        .set_version("1.0.0")
        .set_range("^1.0.0")
        .set_validate(validate_v1)
        .set_transform(migrate_v1_to_v2)
        .build()
    )
"""

import logging
from typing import Optional

from scheme_up.domain.exceptions import ErrorCode, FlowError
from scheme_up.domain.value_object.config.flow_config import FlowConfig
from scheme_up.domain.value_object.migration.migration_node import (
    MigrationNode,
    TransformFn,
    ValidateFn,
)

logger = logging.getLogger(__name__)


class NodeBuilder:
    """迁移节点构建器（一次性使用）"""

    def __init__(self, config: Optional[FlowConfig] = None) -> None:
        config = config or FlowConfig()
        self._version: str = config.default_version
        self._range: str = config.default_range
        self._validate: Optional[ValidateFn] = None
        self._transform: Optional[TransformFn] = None

    @property
    def version(self) -> str:
        return self._version

    @property
    def range(self) -> str:
        return self._range

    def set_version(self, version: str) -> "NodeBuilder":
        """设置节点版本号，不做语法校验"""
        self._version = version
        return self

    def set_range(self, range_expr: str) -> "NodeBuilder":
        """设置节点接受的输入版本范围，如 ^1.0.0、~2.1.0、>=1.0.0"""
        self._range = range_expr
        return self

    def set_transform(self, transform: TransformFn) -> "NodeBuilder":
        self._transform = transform
        return self

    def set_validate(self, validate: ValidateFn) -> "NodeBuilder":
        self._validate = validate
        return self

    def build(self) -> MigrationNode:
        """
        构建迁移节点

        Raises:
            FlowError: NO_ASSERT_FUNCTION，data 为 {"version": 当前版本号}
        """
        if self._validate is None:
            raise FlowError(ErrorCode.NO_ASSERT_FUNCTION, {"version": self._version})

        logger.debug("构建迁移节点: version=%s, range=%s", self._version, self._range)
        return MigrationNode(
            version=self._version,
            range=self._range,
            validate=self._validate,
            transform=self._transform,
        )
