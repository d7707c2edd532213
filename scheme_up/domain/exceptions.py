"""
exceptions.py - 迁移流程错误码与统一错误类型

错误码一览:
| 错误码                     | 值          | 触发场景                               |
|---------------------------|-------------|---------------------------------------|
| NODES_NOT_REGISTERED      | FLOW-0001   | 迁移链中没有任何节点                      |
| UNSUPPORTED_VERSION       | FLOW-0002   | 输入版本不满足任何节点的 range            |
| MISSING_VERSION           | FLOW-0003   | 输入缺少 version 字段或不是字符串          |
| NO_MIGRATION_NODE_FOUND   | FLOW-0004   | 迁移链内部位置上的节点缺失（实现缺陷）       |
| UNKNOWN                   | FLOW-0005   | 其余所有异常（含校验/转换函数抛出的异常）     |
| NO_ASSERT_FUNCTION        | FLOW-0006   | 节点构建时未设置校验函数                   |

所有捕获点都通过 FlowError.from_error 统一转换，不在调用处临时拼装。
"""

from collections.abc import Mapping
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class ErrorCode(Enum):
    """迁移流程错误码（封闭集合）"""

    NODES_NOT_REGISTERED = "FLOW-0001"
    UNSUPPORTED_VERSION = "FLOW-0002"
    MISSING_VERSION = "FLOW-0003"
    NO_MIGRATION_NODE_FOUND = "FLOW-0004"
    UNKNOWN = "FLOW-0005"
    NO_ASSERT_FUNCTION = "FLOW-0006"
    # 别名: 校验函数缺失
    NO_VALIDATE_FUNCTION = "FLOW-0006"


ERROR_MESSAGES: Dict[ErrorCode, str] = {
    ErrorCode.NODES_NOT_REGISTERED: "No nodes are registered in the VersionFlow.",
    ErrorCode.UNSUPPORTED_VERSION: "Unsupported input version.",
    ErrorCode.MISSING_VERSION: "Missing or invalid version in input object.",
    ErrorCode.NO_MIGRATION_NODE_FOUND: "No migration node found.",
    ErrorCode.UNKNOWN: "Unknown error during validation.",
    ErrorCode.NO_ASSERT_FUNCTION: "No assert function provided for validation node.",
}

_NO_DATA = object()


def _resolve_code(raw: Any) -> Optional[ErrorCode]:
    """将 ErrorCode / "FLOW-xxxx" 字符串解析为 ErrorCode，无法识别时返回 None"""
    if isinstance(raw, ErrorCode):
        return raw
    if isinstance(raw, str):
        try:
            return ErrorCode(raw)
        except ValueError:
            return None
    return None


def _extract_kind(err: BaseException) -> Tuple[bool, Any, Any]:
    """
    从普通异常上提取已有的 (code, data) 信息

    支持两种携带方式:
    - err.cause = {"code": ..., "data": ...}  (嵌套迁移重新抛出的错误)
    - err.code = ErrorCode / "FLOW-xxxx"

    Returns:
        (是否携带 code, 原始 code, data 或 _NO_DATA)
    """
    cause = getattr(err, "cause", None)
    if isinstance(cause, Mapping) and "code" in cause:
        return True, cause["code"], cause.get("data", _NO_DATA)

    code = getattr(err, "code", None)
    if _resolve_code(code) is not None:
        return True, code, getattr(err, "data", _NO_DATA)

    return False, None, _NO_DATA


class FlowError(Exception):
    """
    迁移流程统一错误

    Attributes:
        code: 错误码
        data: 附带的数据（触发错误的版本号、原始异常文本或任意抛出值）
        message: 由错误码查得的可读信息
    """

    def __init__(self, code: ErrorCode, data: Any = _NO_DATA) -> None:
        self.code = code
        self.message = ERROR_MESSAGES[code]
        self._has_data = data is not _NO_DATA
        self.data = data if self._has_data else None
        super().__init__(self.message)

    @property
    def has_data(self) -> bool:
        return self._has_data

    @property
    def cause(self) -> Dict[str, Any]:
        """{"code": ..., "data": ...}，未携带 data 时只有 code"""
        if self._has_data:
            return {"code": self.code, "data": self.data}
        return {"code": self.code}

    def __reduce__(self):
        # args 中是 message 而不是 code，copy / pickle 需按 code 重建
        if self._has_data:
            return type(self), (self.code, self.data)
        return type(self), (self.code,)

    def __repr__(self) -> str:
        if self._has_data:
            return f"FlowError({self.code.value}, data={self.data!r})"
        return f"FlowError({self.code.value})"

    @classmethod
    def from_error(cls, err: Any) -> "FlowError":
        """
        将任意捕获到的值转换为 FlowError

        - FlowError: 原样返回
        - 携带 code 的异常: 保留 code 与 data（缺少 data 时使用异常文本）；
          code 无法识别时降级为 UNKNOWN，data 为异常文本
        - 其他异常: UNKNOWN，data 为异常文本（空字符串也保留）
        - 非异常值: UNKNOWN，data 为原值
        """
        if isinstance(err, FlowError):
            return err

        if isinstance(err, BaseException):
            text = str(err)
            has_kind, raw_code, data = _extract_kind(err)
            code = _resolve_code(raw_code) if has_kind else None

            if code is None:
                flow_error = cls(ErrorCode.UNKNOWN, text)
            else:
                flow_error = cls(code, text if data is _NO_DATA or data is None else data)

            flow_error.__cause__ = err
            return flow_error.with_traceback(err.__traceback__)

        return cls(ErrorCode.UNKNOWN, err)
