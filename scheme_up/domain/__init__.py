"""
Domain Module

迁移引擎领域层:
- exceptions: 错误码与统一错误类型
- value_object/: 迁移节点、迁移结果、配置
- domain_service/flow/: 节点构建器、迁移链、流程编排
"""
