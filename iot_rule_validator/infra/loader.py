from __future__ import annotations

from pathlib import Path
from typing import Any

import orjson

from iot_rule_validator.utils.logger import logger


class RuleFileError(ValueError):
    """规则文件无法解析。"""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"Failed to parse rules file {path}: {reason}")


def load_rules_file(path: str | Path) -> Any:
    """读取 JSON 规则文件。

    文件内容原样返回，可以是单条规则对象，也可以是规则列表，
    结构检查交给校验器完成。

    Args:
        path: 规则文件路径。

    Returns:
        Any: 解码后的 JSON 值。

    Raises:
        FileNotFoundError: 文件不存在。
        RuleFileError: 文件不是合法的 JSON。
    """
    path = Path(path)
    logger.info("Loading rules from {}...", path)
    raw = path.read_bytes()
    try:
        return orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        raise RuleFileError(path, str(e)) from e
