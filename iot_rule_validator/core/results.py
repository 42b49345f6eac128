from __future__ import annotations

from collections.abc import Hashable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class RuleValidationError(ValueError):
    """规则未通过结构校验时抛出的异常。

    Attributes:
        errors: 单条规则的错误列表，或批量校验时规则标识到错误列表的映射。
    """

    def __init__(self, errors: list[str] | dict[Any, list[str]]) -> None:
        self.errors = errors
        super().__init__(_format_errors(errors))


def _format_errors(errors: list[str] | dict[Any, list[str]]) -> str:
    if isinstance(errors, dict):
        details = "; ".join(f"{key}: {', '.join(errs)}" for key, errs in errors.items())
        return f"{len(errors)} invalid rule(s): {details}"
    return f"invalid rule: {', '.join(errors)}"


class ValidationResult(BaseModel):
    """单条规则的校验结果。

    错误列表为空即表示校验通过。错误按发现顺序排列：先是必填字段，
    然后是触发器，最后是动作列表。

    Attributes:
        errors: 错误信息列表。
    """

    model_config = ConfigDict(frozen=True)

    errors: list[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def __bool__(self) -> bool:
        return self.ok

    def raise_for_errors(self) -> None:
        """校验未通过时抛出 RuleValidationError。"""
        if self.errors:
            raise RuleValidationError(self.errors)


class BatchValidationResult(BaseModel):
    """批量校验结果。

    只有至少包含一个错误的规则才会出现在映射中。

    Attributes:
        errors: 规则标识（规则 id，缺失时为 'rule_<index>'）到错误列表的映射。
    """

    model_config = ConfigDict(frozen=True)

    errors: dict[Hashable, list[str]] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    def __bool__(self) -> bool:
        return self.ok

    def raise_for_errors(self) -> None:
        """任意规则校验未通过时抛出 RuleValidationError。"""
        if self.errors:
            raise RuleValidationError(dict(self.errors))
