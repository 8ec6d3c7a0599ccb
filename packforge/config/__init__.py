"""配置和 Schema 模块

提供 YAML 构建配置的加载、验证和保存功能。
"""

from .schema import (
    PackConfig,
    HashAlgorithm,
    DirectoryBehavior,
    DEFAULT_DIRECTORY_TABLE,
)
from .loader import (
    ConfigLoader,
    ConfigValidationError,
    ConfigError,
    DEFAULT_CONFIG_NAME,
    load_config,
    validate_config,
    validate_config_with_result,
    save_config,
    find_config,
    config_loader
)

__all__ = [
    # 主要类
    "PackConfig",
    "HashAlgorithm",
    "DirectoryBehavior",
    "DEFAULT_DIRECTORY_TABLE",
    "ConfigLoader",

    # 异常类
    "ConfigError",
    "ConfigValidationError",

    # 便捷函数
    "DEFAULT_CONFIG_NAME",
    "load_config",
    "validate_config",
    "validate_config_with_result",
    "save_config",
    "find_config",

    # 单例
    "config_loader",
]
