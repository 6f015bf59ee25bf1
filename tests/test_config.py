# tests/test_config.py

from qv_node.config import (
    get_bind_port,
    get_default_credits,
    get_fee_percent,
    get_treasury_address,
    load_config,
)


def test_defaults_without_file(tmp_path, monkeypatch):
    for name in ("PORT", "QV_FEE_PERCENT", "QV_DEFAULT_CREDITS", "QV_TREASURY_ADDRESS"):
        monkeypatch.delenv(name, raising=False)
    cfg = load_config(str(tmp_path))
    assert get_default_credits(cfg) == 100
    assert get_fee_percent(cfg) == 5
    assert get_bind_port(cfg) == 3000
    assert get_treasury_address(cfg).startswith("0x")


def test_yaml_then_env_override(tmp_path, monkeypatch):
    (tmp_path / "qv_config.yaml").write_text(
        "voting:\n  default_credits: 250\nserver:\n  port: 8080\n", encoding="utf-8"
    )
    monkeypatch.setenv("PORT", "9090")
    monkeypatch.delenv("QV_DEFAULT_CREDITS", raising=False)

    cfg = load_config(str(tmp_path))
    assert get_default_credits(cfg) == 250
    assert get_bind_port(cfg) == 9090
    # untouched defaults survive the merge
    assert cfg["whitelist"]["ttl_sec"] == 300


def test_bad_env_value_is_ignored(tmp_path, monkeypatch):
    monkeypatch.setenv("QV_FEE_PERCENT", "five")
    cfg = load_config(str(tmp_path))
    assert get_fee_percent(cfg) == 5


def test_broken_yaml_falls_back(tmp_path, monkeypatch):
    monkeypatch.delenv("QV_DEFAULT_CREDITS", raising=False)
    (tmp_path / "qv_config.yaml").write_text("voting: [unclosed\n", encoding="utf-8")
    cfg = load_config(str(tmp_path))
    assert get_default_credits(cfg) == 100
