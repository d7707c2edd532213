"""
MigrationNode - 迁移节点值对象

一个节点描述 schema 的一个版本:
- version: 节点代表的版本号，迁移链按它升序排列
- range: 节点接受的输入版本范围，用于定位起始节点
- validate: 校验函数，输入不符合该版本结构时抛出异常，不修改输入
- transform: 可选的转换函数，产出下一个版本的结构；缺省表示终端节点
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional

ValidateFn = Callable[[Any], None]
TransformFn = Callable[[Any], Any]


@dataclass(frozen=True)
class MigrationNode:
    """迁移节点（由 NodeBuilder 构建，构建后不可修改）"""

    version: str
    range: str
    validate: ValidateFn
    transform: Optional[TransformFn] = None

    @property
    def is_terminal(self) -> bool:
        """没有转换函数的节点只做校验"""
        return self.transform is None
