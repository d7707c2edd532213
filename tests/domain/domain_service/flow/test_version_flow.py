"""
VersionFlow 单元测试

测试节点添加、构建排序、执行迁移以及恢复回调的各种分支。
以 person 文档的三个版本为例:
- 1.0.0: {"name": str, "age": int}
- 2.0.0: {"fullName": str, "birthYear": int}
- 3.0.0: {"name": str, "age": int, "isAdult": bool}
"""
import logging
from datetime import datetime

import pytest
from packaging.version import InvalidVersion

from scheme_up import (
    ErrorCode,
    FlowConfig,
    FlowError,
    FlowResult,
    MigrationChain,
    NodeBuilder,
    VersionFlow,
)

_CURRENT_YEAR = datetime.now().year


def _require_object(data, version):
    if not isinstance(data, dict):
        raise TypeError("Input must be an object")
    if data.get("version") != version:
        raise ValueError(f"Expected version {version}")
    if not isinstance(data.get("data"), dict):
        raise TypeError("Data must be an object")
    return data["data"]


def validate_v1(data):
    body = _require_object(data, "1.0.0")
    if not isinstance(body.get("name"), str):
        raise TypeError("Data.name must be a string")
    if not isinstance(body.get("age"), int):
        raise TypeError("Data.age must be a number")


def validate_v2(data):
    body = _require_object(data, "2.0.0")
    if not isinstance(body.get("fullName"), str):
        raise TypeError("Data.fullName must be a string")
    if not isinstance(body.get("birthYear"), int):
        raise TypeError("Data.birthYear must be a number")


def validate_v3(data):
    body = _require_object(data, "3.0.0")
    if not isinstance(body.get("name"), str):
        raise TypeError("Data.name must be a string")
    if not isinstance(body.get("age"), int):
        raise TypeError("Data.age must be a number")
    if not isinstance(body.get("isAdult"), bool):
        raise TypeError("Data.isAdult must be a boolean")


def migrate_v1_to_v2(v1):
    return {
        "version": "2.0.0",
        "data": {
            "fullName": v1["data"]["name"],
            "birthYear": _CURRENT_YEAR - v1["data"]["age"],
        },
    }


def migrate_v2_to_v3(v2):
    age = _CURRENT_YEAR - v2["data"]["birthYear"]
    return {
        "version": "3.0.0",
        "data": {"name": v2["data"]["fullName"], "age": age, "isAdult": age >= 18},
    }


def _v1_node(builder: NodeBuilder):
    builder.set_version("1.0.0").set_range("^1.0.0").set_validate(validate_v1).set_transform(migrate_v1_to_v2)


def _v2_node(builder: NodeBuilder):
    builder.set_version("2.0.0").set_range("^2.0.0").set_validate(validate_v2).set_transform(migrate_v2_to_v3)


def _v3_node(builder: NodeBuilder):
    builder.set_version("3.0.0").set_range("^3.0.0").set_validate(validate_v3)


def _person_flow() -> VersionFlow:
    return VersionFlow().add(_v1_node).add(_v2_node).add(_v3_node)


def _failing_validate(data):
    raise ValueError("Assertion failed")


class TestVersionFlowAdd:
    """测试节点添加"""

    def test_add_returns_flow(self):
        flow = VersionFlow()

        assert flow.add(_v1_node) is flow
        assert flow.node_count == 1

    def test_configure_receives_fresh_builder(self):
        received = []
        flow = VersionFlow()

        flow.add(received.append).add(received.append)

        assert len(received) == 2
        assert received[0] is not received[1]
        assert all(isinstance(b, NodeBuilder) for b in received)

    def test_builder_uses_flow_config_defaults(self):
        received = []
        VersionFlow(config=FlowConfig(default_version="5.0.0", default_range="^5.0.0")).add(received.append)

        assert received[0].version == "5.0.0"
        assert received[0].range == "^5.0.0"

    def test_builders_are_built_lazily(self):
        """添加后仍可修改 builder，build 时才生效"""
        captured = []
        flow = VersionFlow().add(captured.append)

        captured[0].set_version("7.0.0").set_validate(validate_v3)

        assert flow.build().nodes[0].version == "7.0.0"


class TestVersionFlowBuild:
    """测试构建"""

    def test_build_returns_chain(self):
        chain = _person_flow().build()

        assert isinstance(chain, MigrationChain)
        assert len(chain) == 3

    def test_empty_flow_builds_empty_chain(self):
        assert len(VersionFlow().build()) == 0

    def test_nodes_sorted_by_semver_not_insertion(self):
        flow = VersionFlow().add(_v3_node).add(_v1_node).add(_v2_node)
        flow.add(lambda b: b.set_version("1.10.0").set_range("^1.10.0").set_validate(validate_v1))

        versions = [node.version for node in flow.build().nodes]

        assert versions == ["1.0.0", "1.10.0", "2.0.0", "3.0.0"]

    def test_build_rebuilds_fresh_chain(self):
        flow = _person_flow()

        assert flow.build() is not flow.build()

    def test_missing_validate_propagates(self):
        flow = _person_flow().add(lambda b: b.set_version("4.0.0"))

        with pytest.raises(FlowError) as exc_info:
            flow.build()

        assert exc_info.value.code is ErrorCode.NO_ASSERT_FUNCTION
        assert exc_info.value.data == {"version": "4.0.0"}

    def test_missing_validate_propagates_from_execute(self):
        flow = VersionFlow().add(lambda b: None).set_catch(lambda e: {"fallback": True})

        with pytest.raises(FlowError) as exc_info:
            flow.execute({"version": "1.0.0"})

        assert exc_info.value.data == {"version": "1.0.0"}

    def test_invalid_node_version_raises(self):
        flow = _person_flow().add(lambda b: b.set_version("latest").set_validate(validate_v1))

        with pytest.raises(InvalidVersion):
            flow.build()


class TestVersionFlowExecute:
    """测试执行迁移"""

    def test_full_upgrade(self):
        data = {"version": "1.0.0", "data": {"name": "John Doe", "age": 25}}

        ok, result = _person_flow().execute(data)

        assert ok is True
        assert result == {
            "version": "3.0.0",
            "data": {"name": "John Doe", "age": 25, "isAdult": True},
        }
        # 输入对象未被修改
        assert data == {"version": "1.0.0", "data": {"name": "John Doe", "age": 25}}

    def test_single_migration_step(self):
        flow = VersionFlow().add(_v1_node).add(
            lambda b: b.set_version("2.0.0").set_range("^2.0.0").set_validate(validate_v2)
        )

        ok, result = flow.execute({"version": "1.0.0", "data": {"name": "Jane Smith", "age": 30}})

        assert ok is True
        assert result == {
            "version": "2.0.0",
            "data": {"fullName": "Jane Smith", "birthYear": _CURRENT_YEAR - 30},
        }

    def test_latest_version_is_revalidated_only(self):
        data = {"version": "3.0.0", "data": {"name": "X", "age": 5, "isAdult": False}}

        ok, result = _person_flow().execute(data)

        assert ok is True
        assert result is data

    def test_execute_returns_flow_result(self):
        result = _person_flow().execute({"version": "3.0.0", "data": {"name": "X", "age": 5, "isAdult": False}})

        assert isinstance(result, FlowResult)
        assert result.ok is True
        assert result.error is None

    def test_unsupported_version(self):
        flow = VersionFlow().add(_v1_node)

        ok, error = flow.execute({"version": "3.0.0", "data": {}})

        assert ok is False
        assert error.code is ErrorCode.UNSUPPORTED_VERSION
        assert error.cause == {"code": ErrorCode.UNSUPPORTED_VERSION, "data": {"version": "3.0.0"}}

    def test_invalid_version_type(self):
        ok, error = _person_flow().execute({"version": 123, "data": {"name": "Invalid", "age": 25}})

        assert ok is False
        assert error.message == "Missing or invalid version in input object."
        assert error.data == {"version": 123}

    def test_no_nodes(self):
        ok, error = VersionFlow().execute({"version": "1.0.0"})

        assert ok is False
        assert error.code is ErrorCode.NODES_NOT_REGISTERED

    def test_validation_error_is_unknown(self):
        ok, error = _person_flow().execute({"version": "1.0.0", "data": {"name": 42, "age": 25}})

        assert ok is False
        assert error.code is ErrorCode.UNKNOWN
        assert error.data == "Data.name must be a string"

    def test_execute_is_idempotent(self):
        flow = _person_flow()
        data = {"version": "1.0.0", "data": {"name": "John Doe", "age": 25}}

        assert flow.execute(data) == flow.execute(data)

    def test_failure_is_idempotent(self):
        flow = _person_flow()
        data = {"version": "9.0.0"}

        first, second = flow.execute(data), flow.execute(data)

        assert first.ok is second.ok is False
        assert first.value.cause == second.value.cause

    def test_unwrap(self):
        ok_result = _person_flow().execute({"version": "3.0.0", "data": {"name": "X", "age": 5, "isAdult": False}})
        failed = VersionFlow().execute({"version": "1.0.0"})

        assert ok_result.unwrap()["version"] == "3.0.0"
        with pytest.raises(FlowError):
            failed.unwrap()

    def test_injected_logger_receives_failure(self, caplog):
        logger = logging.getLogger("tests.version_flow")
        flow = VersionFlow(logger=logger).add(_v1_node)

        with caplog.at_level(logging.WARNING, logger="tests.version_flow"):
            flow.execute({"version": "9.9.9"})

        assert "FLOW-0002" in caplog.text

    @pytest.mark.parametrize("version", ["1", "1.0", "1.0.0.0", "1.0.0.post1"])
    def test_non_semver_version_is_unsupported(self, version):
        """PEP 440 可解析但不是 MAJOR.MINOR.PATCH 的版本号不匹配任何节点"""
        ok, error = _person_flow().execute({"version": version, "data": {"name": "John Doe", "age": 25}})

        assert ok is False
        assert error.cause == {"code": ErrorCode.UNSUPPORTED_VERSION, "data": {"version": version}}


class TestVersionFlowCatch:
    """测试恢复回调"""

    def test_set_catch_returns_flow(self):
        flow = VersionFlow()

        assert flow.set_catch(lambda e: None) is flow

    def test_callback_receives_normalized_error(self):
        received = []
        flow = VersionFlow().set_catch(received.append).add(
            lambda b: b.set_validate(_failing_validate)
        )

        ok, error = flow.execute({"version": "1.0.0"})

        assert ok is False
        assert len(received) == 1
        assert received[0] is error
        assert error.cause == {"code": ErrorCode.UNKNOWN, "data": "Assertion failed"}

    def test_callback_called_for_unsupported_and_missing_version(self):
        received = []
        flow = VersionFlow().set_catch(received.append).add(_v1_node)

        flow.execute({"version": "2.0.0"})
        flow.execute({"version": 1})

        assert [e.code for e in received] == [ErrorCode.UNSUPPORTED_VERSION, ErrorCode.MISSING_VERSION]

    def test_callback_value_recovers(self):
        fallback = {"version": "1.0.0", "data": {"name": "Fallback", "age": 0}}
        flow = VersionFlow().set_catch(lambda e: fallback).add(
            lambda b: b.set_version("1.0.0").set_range("^1.0.0").set_validate(_failing_validate)
        )

        ok, result = flow.execute({"version": "1.0.0", "data": {"name": "John Doe", "age": 25}})

        assert ok is True
        assert result is fallback

    def test_callback_raising_replaces_error(self):
        def _raise(error):
            raise RuntimeError("Catch callback error")

        flow = VersionFlow().set_catch(_raise).add(lambda b: b.set_validate(_failing_validate))

        ok, error = flow.execute({"version": "1.0.0"})

        assert ok is False
        assert error.message == "Unknown error during validation."
        assert error.cause == {"code": ErrorCode.UNKNOWN, "data": "Catch callback error"}

    def test_callback_raising_flow_error_is_kept(self):
        replacement = FlowError(ErrorCode.UNSUPPORTED_VERSION, {"version": "legacy"})

        def _raise(error):
            raise replacement

        flow = VersionFlow().set_catch(_raise).add(lambda b: b.set_validate(_failing_validate))

        ok, error = flow.execute({"version": "1.0.0"})

        assert ok is False
        assert error is replacement

    def test_callback_returning_none_keeps_original_failure(self):
        flow = VersionFlow().set_catch(lambda e: None).add(lambda b: b.set_validate(_failing_validate))

        ok, error = flow.execute({"version": "1.0.0"})

        assert ok is False
        assert error.data == "Assertion failed"

    def test_callback_not_called_on_success(self):
        received = []
        flow = _person_flow().set_catch(received.append)

        ok, _ = flow.execute({"version": "1.0.0", "data": {"name": "John Doe", "age": 25}})

        assert ok is True
        assert received == []

    def test_last_callback_wins(self):
        flow = (
            VersionFlow()
            .set_catch(lambda e: {"from": "first"})
            .set_catch(lambda e: {"from": "second"})
            .add(lambda b: b.set_validate(_failing_validate))
        )

        ok, result = flow.execute({"version": "1.0.0"})

        assert ok is True
        assert result == {"from": "second"}

    def test_recovery_logged_by_default_logger(self, caplog):
        flow = VersionFlow().set_catch(lambda e: {"from": "fallback"}).add(
            lambda b: b.set_validate(_failing_validate)
        )

        with caplog.at_level(logging.INFO, logger="scheme_up.domain.domain_service.flow.version_flow"):
            ok, _ = flow.execute({"version": "1.0.0"})

        assert ok is True
        assert "FLOW-0005" in caplog.text
