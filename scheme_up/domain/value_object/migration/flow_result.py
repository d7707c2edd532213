"""FlowResult - 迁移结果值对象"""

from dataclasses import dataclass
from typing import Any, Iterator, Optional

from scheme_up.domain.exceptions import FlowError


@dataclass(frozen=True)
class FlowResult:
    """
    迁移结果，成功时 value 为最终对象，失败时 value 为 FlowError

    可按二元组解包:
        ok, value = flow.execute(data)
    """

    ok: bool
    value: Any = None

    def __iter__(self) -> Iterator[Any]:
        return iter((self.ok, self.value))

    @classmethod
    def success(cls, value: Any) -> "FlowResult":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: FlowError) -> "FlowResult":
        return cls(ok=False, value=error)

    @property
    def error(self) -> Optional[FlowError]:
        return None if self.ok else self.value

    def unwrap(self) -> Any:
        """返回成功值，失败时抛出携带的 FlowError"""
        if not self.ok:
            raise self.value
        return self.value
