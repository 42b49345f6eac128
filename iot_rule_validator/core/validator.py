from __future__ import annotations

import functools
from collections.abc import Hashable, Mapping
from enum import StrEnum
from typing import Any, TypeVar

from pydantic import ValidationError

from iot_rule_validator.core.results import BatchValidationResult, ValidationResult
from iot_rule_validator.core.rules import (
    ACTION_MODELS,
    LEAF_TRIGGER_MODELS,
    MAX_TRIGGER_DEPTH,
    ActionKind,
    Rule,
    TriggerKind,
)
from iot_rule_validator.utils.logger import logger

REQUIRED_FIELDS = ("id", "thing_id", "trigger", "actions")

RULE_NOT_MAP = "rule must be a map"
ACTIONS_NOT_LIST = "actions must be a list"
INVALID_TRIGGER = "invalid trigger format"
INVALID_ACTION = "invalid action format"


class RuleValidator:
    """IoT 规则结构校验器。

    在规则提交给下游冲突检测引擎之前检查其结构。校验是只读的，
    不会修改输入，也不会在遇到第一个错误时停止，而是收集规则中的全部错误。
    """

    def __init__(self, max_depth: int = MAX_TRIGGER_DEPTH) -> None:
        """初始化校验器。

        Args:
            max_depth: 触发器 and/or/not 节点允许的最大嵌套深度。
        """
        if max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {max_depth}")
        self.max_depth = max_depth

    def validate_rule(self, rule: Any) -> ValidationResult:
        """校验单条规则。

        依次检查必填字段、触发器和动作列表，所有检查互不短路。

        Args:
            rule: 待校验的规则，应为映射类型。

        Returns:
            ValidationResult: 校验结果，错误按发现顺序排列。
        """
        if not isinstance(rule, Mapping):
            return ValidationResult(errors=[RULE_NOT_MAP])

        errors: list[str] = []
        for name in REQUIRED_FIELDS:
            if rule.get(name) is None:
                errors.append(f"missing required field: {name}")

        # 缺失的 trigger/actions 已在上面报告，这里不会重复报错
        self._validate_trigger(rule.get("trigger"), 0, errors)
        self._validate_actions(rule.get("actions"), errors)

        return ValidationResult(errors=errors)

    def validate_rules(self, rules: list[Any] | tuple[Any, ...]) -> BatchValidationResult:
        """批量校验规则。

        每条规则独立校验，互不影响。

        Args:
            rules: 规则列表，元素不要求一定是映射。

        Returns:
            BatchValidationResult: 以规则 id（缺失时为 'rule_<index>'）为键的错误映射。

        Raises:
            TypeError: rules 不是列表或元组。
        """
        if not isinstance(rules, list | tuple):
            raise TypeError(f"rules must be a list, got {type(rules).__name__}")

        failures: dict[Hashable, list[str]] = {}
        for index, rule in enumerate(rules):
            result = self.validate_rule(rule)
            if not result.ok:
                failures[_rule_key(rule, index)] = result.errors

        logger.debug("Validated {} rules, {} invalid.", len(rules), len(failures))
        return BatchValidationResult(errors=failures)

    def _validate_trigger(self, trigger: Any, depth: int, errors: list[str]) -> None:
        """递归校验触发器节点。

        深度检查先于一切分派，超限的节点只报告一次，不再向下展开。

        Args:
            trigger: 当前触发器节点。
            depth: 当前节点之上的逻辑节点数量。
            errors: 错误累加列表。
        """
        if depth > self.max_depth:
            errors.append(f"trigger nesting exceeds maximum depth of {self.max_depth}")
            return

        if trigger is None:
            return

        kind = _node_kind(trigger, TriggerKind)

        if kind in (TriggerKind.AND, TriggerKind.OR):
            if _has_fields(trigger, "left", "right"):
                self._validate_trigger(trigger["left"], depth + 1, errors)
                self._validate_trigger(trigger["right"], depth + 1, errors)
                return
        elif kind is TriggerKind.NOT:
            if _has_fields(trigger, "inner"):
                self._validate_trigger(trigger["inner"], depth + 1, errors)
                return
        elif kind is not None and _payload_matches(LEAF_TRIGGER_MODELS[kind], trigger, kind):
            return

        errors.append(INVALID_TRIGGER)

    def _validate_actions(self, actions: Any, errors: list[str]) -> None:
        if actions is None:
            return

        if not isinstance(actions, list | tuple):
            errors.append(ACTIONS_NOT_LIST)
            return

        for action in actions:
            kind = _node_kind(action, ActionKind)
            if kind is None or not _payload_matches(ACTION_MODELS[kind], action, kind):
                errors.append(INVALID_ACTION)


K = TypeVar("K", bound=StrEnum)


def _node_kind(node: Any, kinds: type[K]) -> K | None:
    """读取节点标签，未知标签或非映射节点返回 None。"""
    if not isinstance(node, Mapping):
        return None
    tag = node.get("tag")
    if not isinstance(tag, str):
        return None
    try:
        return kinds(tag)
    except ValueError:
        return None


def _has_fields(node: Mapping[Any, Any], *names: str) -> bool:
    return set(node.keys()) == {"tag", *names}


def _payload_matches(model: type[Any], node: Mapping[Any, Any], kind: StrEnum) -> bool:
    try:
        model.model_validate({**node, "tag": kind.value})
    except ValidationError:
        return False
    return True


def _rule_key(rule: Any, index: int) -> Hashable:
    """计算批量结果中规则的键。"""
    if isinstance(rule, Mapping):
        rule_id = rule.get("id")
        if rule_id is not None:
            try:
                hash(rule_id)
            except TypeError:
                pass
            else:
                return rule_id
    return f"rule_{index}"


@functools.lru_cache(maxsize=32)
def get_validator(max_depth: int = MAX_TRIGGER_DEPTH) -> RuleValidator:
    """获取指定深度限制的共享校验器实例。"""
    return RuleValidator(max_depth)


def validate_rule(rule: Any, *, max_depth: int = MAX_TRIGGER_DEPTH) -> ValidationResult:
    """使用共享校验器校验单条规则。"""
    return get_validator(max_depth).validate_rule(rule)


def validate_rules(rules: list[Any] | tuple[Any, ...], *, max_depth: int = MAX_TRIGGER_DEPTH) -> BatchValidationResult:
    """使用共享校验器批量校验规则。"""
    return get_validator(max_depth).validate_rules(rules)


def load_rule(raw: Any, *, max_depth: int = MAX_TRIGGER_DEPTH) -> Rule:
    """校验并构建类型化的规则实体。

    Args:
        raw: 原始规则映射，不会被修改。
        max_depth: 触发器最大嵌套深度。

    Returns:
        Rule: 类型化的规则实体，priority 缺省为 1。

    Raises:
        RuleValidationError: 规则未通过结构校验。
        pydantic.ValidationError: priority 不是整数。
    """
    validate_rule(raw, max_depth=max_depth).raise_for_errors()
    return Rule.model_validate(dict(raw))


def load_rules(raw_rules: list[Any] | tuple[Any, ...], *, max_depth: int = MAX_TRIGGER_DEPTH) -> list[Rule]:
    """批量校验并构建规则实体，任一规则不合法时抛出包含全部错误的 RuleValidationError。"""
    validate_rules(raw_rules, max_depth=max_depth).raise_for_errors()
    return [Rule.model_validate(dict(raw)) for raw in raw_rules]
