from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from iot_rule_validator.core.rules import MAX_TRIGGER_DEPTH


class Settings(BaseSettings):
    """应用配置类。

    从环境变量或 .env 文件加载配置。

    Attributes:
        MAX_TRIGGER_DEPTH: 命令行校验时允许的触发器最大嵌套深度。
        RULES_FILE: 未指定参数时默认读取的规则文件路径。
        LOG_LEVEL: 日志级别。
    """

    # Validation
    MAX_TRIGGER_DEPTH: int = Field(default=MAX_TRIGGER_DEPTH, ge=0)

    # Input
    RULES_FILE: Path = Path("rules.json")

    # Logging
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


settings = Settings()
