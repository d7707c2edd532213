"""
VersionFlow - 迁移流程编排

收集节点定义，每次 execute 时重新构建并排序迁移链，执行升级，
失败时交给可选的恢复回调处理。

    flow = (
        VersionFlow()
        .add(lambda b: b.set_version("1.0.0").set_range("^1.0.0")
             .set_validate(validate_v1).set_transform(v1_to_v2))
        .add(lambda b: b.set_version("2.0.0").set_range("^2.0.0")
             .set_validate(validate_v2))
    )
    ok, result = flow.execute({"version": "1.0.0", ...})
"""

import logging
from functools import cmp_to_key
from typing import Any, Callable, List, Optional

from scheme_up.domain.exceptions import FlowError
from scheme_up.domain.value_object.config.flow_config import FlowConfig
from scheme_up.domain.value_object.migration.flow_result import FlowResult
from scheme_up.domain.domain_service.flow.migration_chain import MigrationChain
from scheme_up.domain.domain_service.flow.node_builder import NodeBuilder
from scheme_up.infrastructure.versioning import compare_versions

_logger = logging.getLogger(__name__)

CatchCallback = Callable[[FlowError], Any]
ConfigureFn = Callable[[NodeBuilder], Any]

_by_version = cmp_to_key(lambda a, b: compare_versions(a.version, b.version))


class VersionFlow:
    """
    迁移流程编排器

    职责:
    1. 按添加顺序保存节点构建器（延迟到 build 时才构建节点）
    2. 构建并按版本升序排列迁移链
    3. 执行迁移，失败时调用恢复回调
    """

    def __init__(
        self,
        config: Optional[FlowConfig] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._config = config or FlowConfig()
        self._logger = logger or _logger
        self._builders: List[NodeBuilder] = []
        self._catch: Optional[CatchCallback] = None

    @property
    def node_count(self) -> int:
        return len(self._builders)

    def add(self, configure: ConfigureFn) -> "VersionFlow":
        """
        添加一个迁移节点

        Args:
            configure: 接收新建的 NodeBuilder，通过其 set_* 方法配置节点
        """
        builder = NodeBuilder(self._config)
        configure(builder)
        self._builders.append(builder)
        return self

    def set_catch(self, callback: CatchCallback) -> "VersionFlow":
        """设置恢复回调（后设置的覆盖先设置的）"""
        self._catch = callback
        return self

    def build(self) -> MigrationChain:
        """
        构建全部节点并按版本升序排列

        Raises:
            FlowError: 某个节点缺少校验函数 (NO_ASSERT_FUNCTION)
            InvalidVersion: 节点版本号无法解析
        """
        nodes = sorted((builder.build() for builder in self._builders), key=_by_version)
        return MigrationChain(nodes, config=self._config, logger=self._logger)

    def execute(self, data: Any) -> FlowResult:
        """
        执行迁移

        - 成功: 返回迁移链的结果
        - 失败且未设置恢复回调: 原样返回失败结果
        - 失败且回调返回非空值: 以该值作为成功结果
        - 失败且回调抛出异常: 返回回调异常转换后的失败结果
        - 失败且回调返回空值: 返回原失败结果
        """
        result = self.build().upgrade_to_latest(data)

        if result.ok or self._catch is None:
            return result

        try:
            recovered = self._catch(result.value)
        except Exception as e:
            error = FlowError.from_error(e)
            self._logger.warning(f"恢复回调失败: {error.code.value} {error.message}")
            return FlowResult.failure(error)

        if recovered:
            self._logger.info(f"迁移失败已由恢复回调兜底: {result.value.code.value}")
            return FlowResult.success(recovered)

        return result
