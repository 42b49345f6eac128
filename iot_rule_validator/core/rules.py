from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr, StringConstraints, field_validator

MAX_TRIGGER_DEPTH = 10
"""触发器中 and/or/not 节点允许的最大嵌套深度。"""

Number = StrictInt | StrictFloat
NonEmptyStr = Annotated[str, StringConstraints(strict=True, min_length=1)]


class TriggerKind(StrEnum):
    """触发器节点的全部合法标签。"""

    PROP_EQ = "prop_eq"
    PROP_GT = "prop_gt"
    PROP_LT = "prop_lt"
    PROP_GTE = "prop_gte"
    PROP_LTE = "prop_lte"
    ENV_EQ = "env_eq"
    ENV_GT = "env_gt"
    ENV_LT = "env_lt"
    ALWAYS = "always"
    AND = "and"
    OR = "or"
    NOT = "not"


class ActionKind(StrEnum):
    """动作节点的全部合法标签。"""

    SET_PROP = "set_prop"
    SET_ENV = "set_env"
    INVOKE = "invoke"


class _Node(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class PropEq(_Node):
    """设备属性等于某值。"""

    tag: Literal["prop_eq"]
    property: NonEmptyStr
    value: Any


class PropCompare(_Node):
    """设备属性与数值阈值比较。

    Attributes:
        tag: 比较方式，'prop_gt', 'prop_lt', 'prop_gte', 'prop_lte' 之一。
        property: 设备属性名。
        value: 数值阈值，不接受布尔值。
    """

    tag: Literal["prop_gt", "prop_lt", "prop_gte", "prop_lte"]
    property: StrictStr
    value: Number


class EnvEq(_Node):
    """环境变量等于某值。"""

    tag: Literal["env_eq"]
    property: StrictStr
    value: Any


class EnvCompare(_Node):
    """环境变量与数值阈值比较。"""

    tag: Literal["env_gt", "env_lt"]
    property: StrictStr
    value: Number


class Always(_Node):
    tag: Literal["always"]


class And(_Node):
    tag: Literal["and"]
    left: Trigger | None
    right: Trigger | None


class Or(_Node):
    tag: Literal["or"]
    left: Trigger | None
    right: Trigger | None


class Not(_Node):
    tag: Literal["not"]
    inner: Trigger | None


# 递归类型
Trigger = Annotated[
    PropEq | PropCompare | EnvEq | EnvCompare | Always | And | Or | Not,
    Field(discriminator="tag"),
]

for _model in (And, Or, Not):
    _model.model_rebuild()


class SetProp(_Node):
    """设置设备属性。"""

    tag: Literal["set_prop"]
    thing_id: StrictStr
    property: StrictStr
    value: Any


class SetEnv(_Node):
    """设置环境变量。"""

    tag: Literal["set_env"]
    property: StrictStr
    value: Any


class Invoke(_Node):
    """调用设备动作。"""

    tag: Literal["invoke"]
    thing_id: StrictStr
    action_name: StrictStr


Action = Annotated[SetProp | SetEnv | Invoke, Field(discriminator="tag")]

# 叶子触发器的载荷模型，逻辑节点由校验器递归处理
LEAF_TRIGGER_MODELS: dict[TriggerKind, type[_Node]] = {
    TriggerKind.PROP_EQ: PropEq,
    TriggerKind.PROP_GT: PropCompare,
    TriggerKind.PROP_LT: PropCompare,
    TriggerKind.PROP_GTE: PropCompare,
    TriggerKind.PROP_LTE: PropCompare,
    TriggerKind.ENV_EQ: EnvEq,
    TriggerKind.ENV_GT: EnvCompare,
    TriggerKind.ENV_LT: EnvCompare,
    TriggerKind.ALWAYS: Always,
}

ACTION_MODELS: dict[ActionKind, type[_Node]] = {
    ActionKind.SET_PROP: SetProp,
    ActionKind.SET_ENV: SetEnv,
    ActionKind.INVOKE: Invoke,
}


class Rule(BaseModel):
    """通过结构校验后的 IoT 自动化规则实体。

    Attributes:
        id: 规则标识，不透明值。
        thing_id: 目标设备标识，不透明值。
        trigger: 触发条件的逻辑树根节点。
        actions: 触发后执行的动作列表，可以为空。
        priority: 规则优先级，缺省或为 None 时取 1。
    """

    model_config = ConfigDict(frozen=True)

    id: Any
    thing_id: Any
    trigger: Trigger
    actions: list[Action]
    priority: StrictInt = 1

    @field_validator("priority", mode="before")
    @classmethod
    def _default_priority(cls, value: Any) -> Any:
        return 1 if value is None else value
