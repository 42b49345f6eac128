import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture
def valid_rule():
    return {
        "id": "r1",
        "thing_id": "d1",
        "trigger": {"tag": "prop_eq", "property": "state", "value": True},
        "actions": [{"tag": "set_prop", "thing_id": "d1", "property": "power", "value": "on"}],
    }


@pytest.fixture
def base_rule():
    # Rule without trigger, tests fill it in
    return {"id": "r", "thing_id": "d", "actions": []}


@pytest.fixture
def trigger_rule(base_rule):
    def build(trigger):
        return {**base_rule, "trigger": trigger}

    return build


@pytest.fixture
def action_rule():
    def build(*actions):
        return {"id": "r", "thing_id": "d", "trigger": {"tag": "always"}, "actions": list(actions)}

    return build


@pytest.fixture
def nest_not():
    def build(levels, leaf=None):
        trigger = leaf if leaf is not None else {"tag": "always"}
        for _ in range(levels):
            trigger = {"tag": "not", "inner": trigger}
        return trigger

    return build
