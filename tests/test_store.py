"""Tests for the in-memory and file-backed stores and profile activation."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from autoproxy.exceptions import ProfileActivationError, StoreError
from autoproxy.model import EngineState
from autoproxy.store import FileStore, InMemoryStore, StoreProfileActivator

from .conftest import make_rule

STORE_DOCUMENT = """\
profiles:
  direct:
    name: Direct Connection
    mode: direct
  corp:
    name: Corporate Proxy
    mode: manual
    manual:
      http: {host: proxy.corp, port: 3128}
rules:
  office:
    name: Office
    priority: 10
    when:
      dnsResolve: {hostname: intranet.corp, expectIPCIDR: [10.0.0.0/8]}
    then: {setActiveProfile: corp}
"""


def _write_store(tmp_path: Path, text: str = STORE_DOCUMENT) -> Path:
    path = tmp_path / "autoproxy-store.yaml"
    path.write_text(text, encoding="utf-8")
    return path


async def test_memory_store_defaults() -> None:
    store = InMemoryStore.with_defaults()

    rules = await store.get_rules()
    profiles = await store.get_profiles()

    assert set(profiles) == {"direct", "system", "work-proxy"}
    assert set(rules) == {"work-hours", "corporate-network", "home-network"}
    assert not any(rule.enabled for rule in rules.values())
    assert await store.get_state() == EngineState()


async def test_memory_store_rule_edits() -> None:
    store = InMemoryStore()
    store.put_rule(make_rule("office", {"manualFlag": {"value": True}}))

    assert set(await store.get_rules()) == {"office"}

    store.remove_rule("office")
    store.remove_rule("office")

    assert await store.get_rules() == {}


async def test_memory_store_state_updates_merge() -> None:
    store = InMemoryStore()

    await store.update_state(last_check_time=5)
    state = await store.update_state(last_rule_matched="office")

    assert state == EngineState(auto_mode=True, last_check_time=5, last_rule_matched="office")


async def test_file_store_reads_document(tmp_path: Path) -> None:
    store = FileStore(_write_store(tmp_path))

    rules = await store.get_rules()
    profile = await store.get_profile("corp")

    assert rules["office"].priority == 10
    assert rules["office"].then.set_active_profile == "corp"
    assert profile is not None
    assert profile.mode == "manual"
    assert profile.settings["manual"]["http"]["port"] == 3128
    assert await store.get_profile("ghost") is None


async def test_file_store_accepts_lists(tmp_path: Path) -> None:
    path = _write_store(
        tmp_path,
        "profiles:\n  - {id: direct, mode: direct}\nrules:\n"
        "  - {id: always, when: {manualFlag: {value: true}}, then: {setActiveProfile: direct}}\n",
    )

    rules = await FileStore(path).get_rules()

    assert list(rules) == ["always"]
    assert rules["always"].name == "always"


async def test_file_store_sees_edits_on_next_read(tmp_path: Path) -> None:
    path = _write_store(tmp_path)
    store = FileStore(path)
    assert set(await store.get_rules()) == {"office"}

    path.write_text("profiles: {}\nrules: {}\n", encoding="utf-8")

    assert await store.get_rules() == {}


async def test_file_store_empty_document(tmp_path: Path) -> None:
    store = FileStore(_write_store(tmp_path, ""))

    assert await store.get_rules() == {}
    assert await store.get_profiles() == {}


@pytest.mark.parametrize(
    ("text", "message"),
    [
        pytest.param("- just\n- a list\n", "must be a YAML mapping", id="not-a-mapping"),
        pytest.param("profiles: {}\nrulez: {}\n", "unknown keys ['rulez']", id="unknown-key"),
        pytest.param("rules: [unclosed\n", "Invalid YAML", id="bad-yaml"),
        pytest.param("rules: 5\n", "must be a mapping keyed by id or a list", id="rules-not-a-collection"),
        pytest.param(
            "rules:\n  - {id: twin, when: {}, then: {setActiveProfile: direct}}\n"
            "  - {id: twin, when: {}, then: {setActiveProfile: direct}}\n",
            "duplicate rule id 'twin'",
            id="duplicate-id",
        ),
    ],
)
async def test_file_store_rejects_bad_documents(tmp_path: Path, text: str, message: str) -> None:
    store = FileStore(_write_store(tmp_path, text))

    with pytest.raises(StoreError) as excinfo:
        await store.get_rules()

    assert message in str(excinfo.value)


async def test_file_store_keeps_invalid_rule_as_faulted(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    path = _write_store(
        tmp_path,
        "rules:\n"
        "  broken:\n"
        "    priority: 1\n"
        "    when: {manualFlag: {value: 'yes'}}\n"
        "    then: {setActiveProfile: direct}\n"
        "  missing-then:\n"
        "    enabled: false\n"
        "    when: {manualFlag: {value: true}}\n"
        "  healthy:\n"
        "    priority: 2\n"
        "    when: {manualFlag: {value: true}}\n"
        "    then: {setActiveProfile: direct}\n",
    )

    rules = await FileStore(path).get_rules()

    assert list(rules) == ["broken", "missing-then", "healthy"]
    assert rules["healthy"].fault is None
    broken = rules["broken"]
    assert broken.fault is not None and "rules.broken" in broken.fault
    assert (broken.priority, broken.enabled, broken.when) == (1, True, ())
    assert broken.then.set_active_profile == "direct"
    missing = rules["missing-then"]
    assert missing.fault is not None
    assert (missing.priority, missing.enabled, missing.then.set_active_profile) == (100, False, "")
    assert "Invalid rule broken" in caplog.text


async def test_file_store_missing_file(tmp_path: Path) -> None:
    store = FileStore(tmp_path / "absent.yaml")

    with pytest.raises(StoreError, match="Store file not found"):
        await store.get_profiles()


async def test_state_without_state_file_stays_in_memory(tmp_path: Path) -> None:
    store = FileStore(_write_store(tmp_path))

    await store.update_state(auto_mode=False)

    assert (await store.get_state()).auto_mode is False
    assert sorted(path.name for path in tmp_path.iterdir()) == ["autoproxy-store.yaml"]


async def test_state_is_persisted_and_reloaded(tmp_path: Path) -> None:
    path = _write_store(tmp_path)
    state_path = tmp_path / "state.json"

    await FileStore(path, state_path).update_state(last_check_time=1234, active_profile_id="corp")
    reloaded = await FileStore(path, state_path).get_state()

    assert json.loads(state_path.read_text(encoding="utf-8")) == {
        "autoMode": True,
        "lastCheckTime": 1234,
        "activeProfileId": "corp",
    }
    assert reloaded == EngineState(last_check_time=1234, active_profile_id="corp")
    assert sorted(path.name for path in tmp_path.iterdir()) == ["autoproxy-store.yaml", "state.json"]


async def test_state_file_is_reread_on_every_get(tmp_path: Path) -> None:
    state_path = tmp_path / "state.json"
    store = FileStore(_write_store(tmp_path), state_path)
    await store.update_state(active_profile_id="corp")

    state_path.write_text('{"autoMode": false, "activeProfileId": "direct"}', encoding="utf-8")

    assert await store.get_state() == EngineState(auto_mode=False, active_profile_id="direct")


async def test_state_file_ignores_unknown_keys(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    state_path = tmp_path / "state.json"
    state_path.write_text('{"autoMode": false, "theme": "dark"}', encoding="utf-8")

    state = await FileStore(_write_store(tmp_path), state_path).get_state()

    assert state == EngineState(auto_mode=False)
    assert "Ignoring unknown state key 'theme'" in caplog.text


@pytest.mark.parametrize(
    "content",
    [
        pytest.param("{not json", id="bad-json"),
        pytest.param("[1, 2]", id="not-an-object"),
        pytest.param('{"autoMode": "yes"}', id="wrong-type"),
    ],
)
async def test_invalid_state_file(tmp_path: Path, content: str) -> None:
    state_path = tmp_path / "state.json"
    state_path.write_text(content, encoding="utf-8")

    with pytest.raises(StoreError):
        await FileStore(_write_store(tmp_path), state_path).get_state()


async def test_create_writes_defaults(tmp_path: Path) -> None:
    path = tmp_path / "new-store.yaml"

    store = FileStore.create(path)

    document = yaml.safe_load(path.read_text(encoding="utf-8"))
    assert set(document) == {"profiles", "rules"}
    assert set(await store.get_profiles()) == {"direct", "system", "work-proxy"}
    assert len(await store.get_rules()) == 3


def test_create_refuses_existing_file(tmp_path: Path) -> None:
    path = _write_store(tmp_path)

    with pytest.raises(StoreError, match="already exists"):
        FileStore.create(path)

    assert path.read_text(encoding="utf-8") == STORE_DOCUMENT


async def test_activator_marks_profile_active(tmp_path: Path) -> None:
    store = FileStore(_write_store(tmp_path))
    activator = StoreProfileActivator(store, store)

    profile = await activator.set_active_profile("corp")

    assert profile.name == "Corporate Proxy"
    assert (await store.get_state()).active_profile_id == "corp"


async def test_activator_unknown_profile() -> None:
    store = InMemoryStore()
    activator = StoreProfileActivator(store, store)

    with pytest.raises(ProfileActivationError, match="Profile not found: ghost"):
        await activator.set_active_profile("ghost")

    assert (await store.get_state()).active_profile_id is None
