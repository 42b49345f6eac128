import pytest

from iot_rule_validator.infra.loader import RuleFileError, load_rules_file


def test_load_single_rule(tmp_path):
    path = tmp_path / "rule.json"
    path.write_text('{"id": "r1", "thing_id": "d1", "trigger": {"tag": "always"}, "actions": []}', encoding="utf-8")

    assert load_rules_file(path) == {"id": "r1", "thing_id": "d1", "trigger": {"tag": "always"}, "actions": []}


def test_load_rule_list(tmp_path):
    path = tmp_path / "rules.json"
    path.write_text('[{"id": "r1"}, null, "x"]', encoding="utf-8")

    assert load_rules_file(str(path)) == [{"id": "r1"}, None, "x"]


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_rules_file(tmp_path / "missing.json")


def test_load_malformed_file(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("[{", encoding="utf-8")

    with pytest.raises(RuleFileError) as exc_info:
        load_rules_file(path)

    assert exc_info.value.path == path
    assert "broken.json" in str(exc_info.value)
    assert isinstance(exc_info.value, ValueError)
