import json

import pytest

from cli_router import CLIRouter, main
from verdict.config import reset_config
from verdict.container import reset_container
from verdict_commands import COMMANDS, get_command, list_commands
from verdict_commands.analyze import parse_side_args

ALICE = "Alice=We agreed to split the rent evenly when we moved in."
BOB = "Bob=My room is half the size, so I should pay less."


@pytest.fixture
def cli_env(tmp_path, monkeypatch):
    monkeypatch.setenv("VERDICT_DATA_DIR", str(tmp_path / "data"))
    reset_config()
    reset_container()
    yield tmp_path
    reset_container()
    reset_config()


def run_json(capsys, argv):
    capsys.readouterr()
    assert main(argv) == 0
    return json.loads(capsys.readouterr().out)


def test_parse_side_args_labels_and_ids():
    sides = parse_side_args(["Alice = first point", "no label given"])

    assert [(side.id, side.label, side.content) for side in sides] == [
        ("side_1", "Alice", "first point"),
        ("side_2", "Side B", "no label given"),
    ]


def test_command_registry():
    assert set(COMMANDS) == {"analyze", "history", "data", "settings", "templates"}
    assert list_commands()["templates"] == "Manage analysis templates."
    with pytest.raises(ValueError):
        get_command("news")


def test_missing_subcommand_returns_error(cli_env):
    assert CLIRouter().route_command(["history"]) == 1


def test_unknown_command_is_argparse_error(cli_env):
    assert CLIRouter().route_command(["news", "fetch"]) == 2


def test_analyze_and_browse_history(cli_env, capsys):
    result = run_json(capsys, ["analyze", "run", "--side", ALICE, "--side", BOB, "--style", "coach", "--json"])

    assert result["version"] == 3
    assert result["tags"][-1] == "coach"
    assert [side["label"] for side in result["input"]["sides"]] == ["Alice", "Bob"]

    assert main(["history", "list"]) == 0
    assert result["id"] in capsys.readouterr().out

    assert main(["history", "rename", result["id"], "Rent split"]) == 0
    shown = run_json(capsys, ["history", "show", result["id"], "--json"])
    assert shown["verdictHeadline"] == "Rent split"

    assert main(["history", "takeaway", result["id"], "Talk about money early"]) == 0
    assert main(["history", "duplicate", result["id"]]) == 0
    assert main(["history", "delete", result["id"]]) == 0
    assert main(["history", "show", result["id"]]) == 1


def test_analyze_requires_two_sides(cli_env):
    assert main(["analyze", "run", "--side", ALICE]) == 22


def test_free_tier_side_limit_and_pro(cli_env, capsys):
    sides = ["--side", ALICE, "--side", BOB, "--side", "Carol=I just live here.", "--side", "Dan=Same."]

    assert main(["analyze", "run", *sides]) == 1
    assert "at most 3 sides" in capsys.readouterr().out

    assert main(["settings", "pro", "--on"]) == 0
    assert main(["analyze", "run", *sides]) == 0


def test_weekly_quota_is_enforced(cli_env, capsys):
    for _ in range(5):
        assert main(["analyze", "run", "--side", ALICE, "--side", BOB]) == 0

    capsys.readouterr()
    assert main(["analyze", "run", "--side", ALICE, "--side", BOB]) == 1
    assert "Weekly limit reached (5/5 analyses used)" in capsys.readouterr().out


def test_export_import_round_trip(cli_env, capsys):
    created = run_json(capsys, ["analyze", "run", "--side", ALICE, "--side", BOB, "--json"])
    export_path = cli_env / "backup.json"

    assert main(["data", "export", "-o", str(export_path)]) == 0
    document = json.loads(export_path.read_text(encoding="utf-8"))
    assert document["totalAnalyses"] == 1

    capsys.readouterr()
    assert main(["data", "import", str(export_path)]) == 0
    assert "Imported 0 analyses (1 skipped)" in capsys.readouterr().out

    assert main(["data", "clear", "--force"]) == 0
    assert main(["data", "import", str(export_path), "--mode", "replace", "--force"]) == 0
    exported = run_json(capsys, ["data", "export", "-o", "-"])
    assert [record["id"] for record in exported["analyses"]] == [created["id"]]


def test_import_of_invalid_file_fails(cli_env, capsys):
    bad_file = cli_env / "bad.json"
    bad_file.write_text("{not json", encoding="utf-8")

    assert main(["data", "import", str(bad_file)]) == 22
    assert "Invalid import file: not valid JSON" in capsys.readouterr().out


def test_import_of_missing_file(cli_env):
    assert main(["data", "import", str(cli_env / "nowhere.json")]) == 2


def test_settings_set_and_show(cli_env, capsys):
    assert main(["settings", "set", "--style", "lawyer", "--preset", "neo-glass", "--no-haptics"]) == 0
    capsys.readouterr()

    assert main(["settings", "show", "--verbose"]) == 0
    out = capsys.readouterr().out
    assert "Default style: lawyer" in out
    assert "Design preset: neo-glass" in out
    assert "Haptics: off" in out
    assert "quota_timezone: UTC" in out

    assert main(["settings", "set"]) == 22


def test_draft_flow(cli_env, capsys):
    assert main(["analyze", "draft", "--side", ALICE, "--side", "Bob=", "--style", "savage"]) == 0
    capsys.readouterr()

    assert main(["settings", "draft"]) == 0
    assert "Alice: We agreed" in capsys.readouterr().out

    assert main(["settings", "clear-draft"]) == 0
    assert main(["analyze", "run", "--from-draft"]) == 1

    assert main(["analyze", "draft", "--side", ALICE, "--side", BOB]) == 0
    result = run_json(capsys, ["analyze", "run", "--from-draft", "--json"])
    assert [side["label"] for side in result["input"]["sides"]] == ["Alice", "Bob"]
    capsys.readouterr()
    assert main(["settings", "draft"]) == 0
    assert "No saved draft" in capsys.readouterr().out


def test_templates_commands(cli_env, capsys):
    assert main(["templates", "create", "--title", "Roommates", "--side", "Tenant A"]) == 22
    assert main(["templates", "create", "--title", "Roommates", "--side", "Tenant A",
                 "--side", "Tenant B", "--style", "mediator"]) == 0
    created = capsys.readouterr().out
    template_id = created.split("Created template ")[1].split(":")[0]

    assert main(["templates", "use", template_id]) == 0
    assert '--side "Tenant A=..."' in capsys.readouterr().out

    assert main(["templates", "list"]) == 0
    listing = capsys.readouterr().out
    assert "Roommates (2 sides, mediator, used 1x)" in listing
    assert "Recently used: Roommates" in listing

    assert main(["templates", "delete", template_id]) == 0
    assert main(["templates", "delete", template_id]) == 1
