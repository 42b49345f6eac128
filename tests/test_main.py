import json

import pytest

import main


@pytest.fixture
def write_rules(tmp_path):
    def write(data):
        path = tmp_path / "rules.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return write


def test_run_valid_rule_list(write_rules, valid_rule, capsys):
    path = write_rules([valid_rule])

    assert main.run(path) == main.EXIT_OK
    assert json.loads(capsys.readouterr().out) == {"valid": True}


def test_run_invalid_rule_list(write_rules, valid_rule, capsys):
    path = write_rules([valid_rule, {"id": 3, "thing_id": "d", "trigger": {"tag": "bogus"}, "actions": []}, "x"])

    assert main.run(path) == main.EXIT_INVALID
    report = json.loads(capsys.readouterr().out)
    assert report["valid"] is False
    assert sorted(report["errors"], key=lambda entry: str(entry["rule"])) == [
        {"rule": 3, "errors": ["invalid trigger format"]},
        {"rule": "rule_2", "errors": ["rule must be a map"]},
    ]


def test_run_keeps_int_and_str_ids_apart(write_rules, base_rule, capsys):
    # Ids 1 and "1" must stay two separate report entries
    path = write_rules([{**base_rule, "id": 1}, {**base_rule, "id": "1"}])

    assert main.run(path) == main.EXIT_INVALID
    entries = json.loads(capsys.readouterr().out)["errors"]
    assert len(entries) == 2
    assert {type(entry["rule"]) for entry in entries} == {int, str}
    assert all(entry["errors"] == ["missing required field: trigger"] for entry in entries)


def test_run_single_rule(write_rules, capsys):
    path = write_rules({"thing_id": "d1"})

    assert main.run(path) == main.EXIT_INVALID
    report = json.loads(capsys.readouterr().out)
    assert report["errors"] == [
        "missing required field: id",
        "missing required field: trigger",
        "missing required field: actions",
    ]


def test_run_custom_depth(write_rules, base_rule, capsys):
    trigger = {"tag": "not", "inner": {"tag": "not", "inner": {"tag": "always"}}}
    path = write_rules({**base_rule, "trigger": trigger})

    assert main.run(path, max_depth=1) == main.EXIT_INVALID
    assert json.loads(capsys.readouterr().out)["errors"] == ["trigger nesting exceeds maximum depth of 1"]


def test_run_missing_file(tmp_path, capsys):
    assert main.run(tmp_path / "missing.json") == main.EXIT_UNREADABLE
    assert capsys.readouterr().out == ""


def test_run_malformed_file(tmp_path):
    path = tmp_path / "rules.json"
    path.write_text("{not json", encoding="utf-8")

    assert main.run(path) == main.EXIT_UNREADABLE


def test_main_uses_argv(write_rules, valid_rule, monkeypatch):
    path = write_rules(valid_rule)
    monkeypatch.setattr("sys.argv", ["main.py", str(path)])
    monkeypatch.setattr(main, "init_logger", lambda **kwargs: None)

    with pytest.raises(SystemExit) as exc_info:
        main.main()

    assert exc_info.value.code == main.EXIT_OK
