"""
MigrationChain - 迁移链

节点按版本升序排列，升级流程:
1. 读取输入的版本号，缺失或不是字符串 → MISSING_VERSION
2. 迁移链为空 → NODES_NOT_REGISTERED
3. 按顺序找到第一个 range 匹配输入版本的节点 → 找不到则 UNSUPPORTED_VERSION
4. 从该节点走到链尾: 先 validate，再 transform（如有）
5. 用链尾节点再校验一次最终结果
任何一步抛出的异常都会被统一转换为 FlowError 并以失败结果返回，不重试。
"""

import logging
from collections.abc import Mapping
from typing import Any, Optional, Sequence, Tuple

from scheme_up.domain.exceptions import ErrorCode, FlowError
from scheme_up.domain.value_object.config.flow_config import FlowConfig
from scheme_up.domain.value_object.migration.flow_result import FlowResult
from scheme_up.domain.value_object.migration.migration_node import MigrationNode
from scheme_up.infrastructure.versioning import satisfies

_logger = logging.getLogger(__name__)


class MigrationChain:
    """
    迁移链

    职责:
    1. 持有按版本升序排列的迁移节点（构造后不再变化）
    2. 按 range 首个匹配原则定位起始节点
    3. 逐个节点校验、转换，并用最终节点断言输出结构
    """

    def __init__(
        self,
        nodes: Sequence[MigrationNode],
        config: Optional[FlowConfig] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._nodes: Tuple[MigrationNode, ...] = tuple(nodes)
        self._config = config or FlowConfig()
        self._logger = logger or _logger

    @property
    def nodes(self) -> Tuple[MigrationNode, ...]:
        return self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def upgrade_to_latest(self, data: Any) -> FlowResult:
        """
        将输入对象升级到最新结构

        Args:
            data: 携带版本号字段的对象（dict 或任意带属性的对象）

        Returns:
            FlowResult: 成功为 (True, 最终对象)，失败为 (False, FlowError)
        """
        try:
            version = self._read_version(data)

            if not isinstance(version, str) or not version:
                raise FlowError(ErrorCode.MISSING_VERSION, {"version": version})

            if not self._nodes:
                raise FlowError(ErrorCode.NODES_NOT_REGISTERED)

            start_index = self._find_start_index(version)
            if start_index is None:
                raise FlowError(ErrorCode.UNSUPPORTED_VERSION, {"version": version})

            self._logger.debug(
                "开始迁移: 输入版本 %s, 起始节点 %s",
                version,
                self._nodes[start_index].version,
            )

            current = data
            for index in range(start_index, len(self._nodes)):
                node = self._nodes[index]
                if node is None:
                    raise FlowError(ErrorCode.NO_MIGRATION_NODE_FOUND)

                node.validate(current)
                if not node.is_terminal:
                    migrated = node.transform(current)
                    # transform 返回 None 时沿用当前对象
                    if migrated is not None:
                        current = migrated
                    self._logger.debug("已应用迁移节点: %s", node.version)

            final_node = self._nodes[-1]
            if final_node is None:
                raise FlowError(ErrorCode.NO_MIGRATION_NODE_FOUND)
            final_node.validate(current)

            return FlowResult.success(current)
        except Exception as e:
            error = FlowError.from_error(e)
            self._logger.warning(f"迁移失败: {error.code.value} {error.message}")
            return FlowResult.failure(error)

    def _read_version(self, data: Any) -> Any:
        field = self._config.version_field
        if isinstance(data, Mapping):
            return data.get(field)
        return getattr(data, field, None)

    def _find_start_index(self, version: str) -> Optional[int]:
        """首个 range 满足输入版本的节点下标（范围重叠时靠前的节点优先）"""
        for index, node in enumerate(self._nodes):
            if satisfies(version, node.range):
                return index
        return None
