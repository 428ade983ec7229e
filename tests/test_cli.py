"""Tests for CLI argument parsing and subcommand exit codes."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from autoproxy import __version__
from autoproxy.cli import build_parser, main

STORE_DOCUMENT = """\
profiles:
  direct: {name: Direct Connection, mode: direct}
  corp: {name: Corporate Proxy, mode: manual, manual: {http: {host: proxy.corp, port: 3128}}}
rules:
  vpn-off:
    name: VPN Off
    priority: 10
    when: {manualFlag: {value: false}}
    then: {setActiveProfile: corp}
  fallback:
    name: Fallback
    priority: 20
    when: {manualFlag: {value: true}}
    then: {setActiveProfile: direct}
"""


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def store_path(tmp_path: Path) -> Path:
    path = tmp_path / "store.yaml"
    path.write_text(STORE_DOCUMENT, encoding="utf-8")
    return path


def test_evaluate_flags_parse() -> None:
    args = build_parser().parse_args(["evaluate", "-s", "store.yaml", "-S", "state.json", "-n", "--json"])

    assert args.command == "evaluate"
    assert args.store == Path("store.yaml")
    assert args.state == Path("state.json")
    assert args.no_cache is True
    assert args.json is True
    assert args.config is None


def test_store_is_required() -> None:
    with pytest.raises(SystemExit) as excinfo:
        build_parser().parse_args(["evaluate"])

    assert excinfo.value.code == 2


def test_version(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["--version"])

    assert excinfo.value.code == 0
    assert __version__ in capsys.readouterr().out


def test_init_creates_store_once(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "new.yaml"

    assert main(["init", "-s", str(path)]) == 0
    assert path.exists()
    assert main(["init", "-s", str(path)]) == 2
    assert "already exists" in capsys.readouterr().err


def test_validate_fresh_store(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "new.yaml"
    main(["init", "-s", str(path)])
    capsys.readouterr()

    assert main(["validate", "-s", str(path)]) == 0
    assert "Store OK: 3 profiles, 3 rules (0 enabled)" in capsys.readouterr().out


def test_validate_lists_enabled_rules_by_priority(store_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["validate", "-s", str(store_path)]) == 0

    out = capsys.readouterr().out
    assert out.index("vpn-off -> corp") < out.index("fallback -> direct")


def test_validate_reports_unknown_profile(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "store.yaml"
    path.write_text(
        "profiles: {}\nrules:\n  office: {when: {manualFlag: {value: true}}, then: {setActiveProfile: corp}}\n",
        encoding="utf-8",
    )

    assert main(["validate", "-s", str(path)]) == 1
    assert "rule 'office' targets unknown profile 'corp'" in capsys.readouterr().err


def test_evaluate_json(store_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["evaluate", "-s", str(store_path), "--json"]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["status"] == "matched"
    assert payload["reason"] == "manual"
    assert payload["result"]["profileId"] == "direct"
    assert payload["result"]["rule"]["id"] == "fallback"
    assert payload["result"]["results"]["vpn-off_manualFlag"]["success"] is False
    assert isinstance(payload["logs"], list)


def test_evaluate_text(store_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["evaluate", "-s", str(store_path), "--no-color"]) == 0

    out = capsys.readouterr().out
    assert out.startswith("Evaluation (manual): matched")
    assert "Rule: Fallback (fallback) -> profile direct" in out
    assert "FAIL vpn-off_manualFlag" in out


def test_evaluate_persists_state(store_path: Path, tmp_path: Path) -> None:
    state_path = tmp_path / "state.json"

    assert main(["evaluate", "-s", str(store_path), "-S", str(state_path), "--json"]) == 0

    state = json.loads(state_path.read_text(encoding="utf-8"))
    assert state["activeProfileId"] == "direct"
    assert state["lastRuleMatched"] == "fallback"
    assert isinstance(state["lastCheckTime"], int)


def test_evaluate_skips_when_auto_mode_off(store_path: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    state_path = tmp_path / "state.json"
    state_path.write_text('{"autoMode": false}', encoding="utf-8")

    assert main(["evaluate", "-s", str(store_path), "-S", str(state_path), "--json"]) == 0
    assert json.loads(capsys.readouterr().out)["status"] == "skipped"


def test_evaluate_failure_exit_code(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "store.yaml"
    path.write_text(
        "profiles: {}\nrules:\n  office: {when: {manualFlag: {value: true}}, then: {setActiveProfile: ghost}}\n",
        encoding="utf-8",
    )

    assert main(["evaluate", "-s", str(path), "--json"]) == 1

    payload = json.loads(capsys.readouterr().out)
    assert payload["status"] == "failed"
    assert payload["error"] == "Profile not found: ghost"
    assert any(entry["level"] == "ERROR" for entry in payload["logs"])


def test_missing_explicit_config(store_path: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["evaluate", "-s", str(store_path), "-c", str(tmp_path / "missing.yaml")])

    assert code == 2
    assert "Configuration error: Config file not found" in capsys.readouterr().err


def test_invalid_store(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "store.yaml"
    path.write_text("rules: 5\n", encoding="utf-8")

    assert main(["validate", "-s", str(path)]) == 2
    assert "Store error:" in capsys.readouterr().err


def test_validate_reports_invalid_rule(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "store.yaml"
    path.write_text(
        "profiles: {direct: {mode: direct}}\n"
        "rules:\n"
        "  broken: {priority: 1}\n"
        "  healthy: {when: {manualFlag: {value: true}}, then: {setActiveProfile: direct}}\n",
        encoding="utf-8",
    )

    assert main(["validate", "-s", str(path)]) == 1
    err = capsys.readouterr().err
    assert "rule 'broken' is invalid" in err
    assert "missing required key 'then'" in err
    assert "healthy" not in err


def test_evaluate_skips_invalid_rule(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "store.yaml"
    path.write_text(
        "profiles: {direct: {mode: direct}}\n"
        "rules:\n"
        "  broken: {priority: 1, when: {manualFlag: {value: 'yes'}}, then: {setActiveProfile: direct}}\n"
        "  healthy: {priority: 2, when: {manualFlag: {value: true}}, then: {setActiveProfile: direct}}\n",
        encoding="utf-8",
    )

    assert main(["evaluate", "-s", str(path), "--json"]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["status"] == "matched"
    assert payload["result"]["rule"]["id"] == "healthy"
    assert payload["result"]["results"]["broken_error"]["success"] is False


@pytest.mark.parametrize(
    ("rule_id", "expected_code"),
    [
        pytest.param("fallback", 0, id="matching"),
        pytest.param("vpn-off", 1, id="not-matching"),
        pytest.param("ghost", 2, id="unknown"),
    ],
)
def test_test_rule_exit_codes(store_path: Path, rule_id: str, expected_code: int) -> None:
    assert main(["test-rule", "-s", str(store_path), rule_id, "--no-color"]) == expected_code


def test_test_rule_json(store_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["test-rule", "-s", str(store_path), "vpn-off", "--json"]) == 1

    payload = json.loads(capsys.readouterr().out)
    assert payload["success"] is False
    assert list(payload["results"]) == ["vpn-off_manualFlag"]
