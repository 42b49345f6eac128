from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import orjson

from iot_rule_validator.config import settings
from iot_rule_validator.core.validator import validate_rule, validate_rules
from iot_rule_validator.infra.loader import RuleFileError, load_rules_file
from iot_rule_validator.utils.logger import init_logger, logger

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_UNREADABLE = 2


def run(path: Path, max_depth: int | None = None) -> int:
    """校验规则文件并向标准输出打印 JSON 报告。

    文件内容为列表时按批量校验处理，否则按单条规则处理。
    批量报告中的 errors 是 {"rule": 规则标识, "errors": [...]} 条目列表，
    单条报告中的 errors 是错误信息列表。

    Args:
        path: 规则文件路径。
        max_depth: 触发器最大嵌套深度，默认取配置项。

    Returns:
        int: 进程退出码。0 表示全部合法，1 表示存在错误，2 表示文件无法读取或解析。
    """
    depth = settings.MAX_TRIGGER_DEPTH if max_depth is None else max_depth

    try:
        data = load_rules_file(path)
    except (OSError, RuleFileError) as e:
        logger.error("Failed to load rules: {}", e)
        return EXIT_UNREADABLE

    if isinstance(data, list):
        result = validate_rules(data, max_depth=depth)
        logger.info("Validated {} rules from {}.", len(data), path)
    else:
        result = validate_rule(data, max_depth=depth)
        logger.info("Validated rule from {}.", path)

    if result.ok:
        print(orjson.dumps({"valid": True}).decode("utf-8"))
        return EXIT_OK

    logger.warning("Validation failed with {} error entries.", len(result.errors))
    report = {"valid": False, "errors": _report_errors(result.errors)}
    print(orjson.dumps(report, option=orjson.OPT_INDENT_2).decode("utf-8"))
    return EXIT_INVALID


def _report_errors(errors: list[str] | dict[Any, list[str]]) -> list[Any]:
    """批量结果转为条目列表，规则 id 保留原始 JSON 类型，1 与 "1" 不会合并。"""
    if isinstance(errors, dict):
        return [{"rule": key, "errors": errs} for key, errs in errors.items()]
    return errors


def main() -> None:
    """命令行入口。

    规则文件路径取第一个命令行参数，缺省时使用 RULES_FILE 配置。
    """
    init_logger(service_name="IoTRuleValidator", level=settings.LOG_LEVEL)

    path = Path(sys.argv[1]) if len(sys.argv) > 1 else settings.RULES_FILE
    sys.exit(run(path))


if __name__ == "__main__":
    main()
