# qv_node/config.py
import copy
import logging
import os
from typing import Any, Dict, List

import yaml

log = logging.getLogger(__name__)

CONFIG_FILE = "qv_config.yaml"

# -------- Defaults (non-secret) --------
_DEFAULT: Dict[str, Any] = {
    "voting": {"default_credits": 100},
    "distribution": {
        "fee_percent": 5,
        "treasury_address": "0xccD7200024A8B5708d381168ec2dB0DC587af83F",
        "receipt_timeout_sec": 120,
    },
    "whitelist": {
        "enabled": True,
        "url": "https://www.owockibot.xyz/api/whitelist",
        "ttl_sec": 300,
        "timeout_sec": 5.0,
        # Optional fixed allow-list; when non-empty the remote list is not fetched
        "static": [],
    },
    "chain": {
        "rpc_url": "https://sepolia.base.org",
        "network": "Base Sepolia",
    },
    "server": {"host": "0.0.0.0", "port": 3000},
    "cors": {"origins": ["*"]},
    "logging": {"level": "INFO"},
}


def _as_bool(raw: str) -> bool:
    return raw.strip().lower() in ("1", "true", "yes", "on")


# -------- ENV overrides (do NOT bake secrets in YAML) --------
_ENV_MAP = {
    ("voting", "default_credits"): ("QV_DEFAULT_CREDITS", int),
    ("distribution", "fee_percent"): ("QV_FEE_PERCENT", int),
    ("distribution", "treasury_address"): ("QV_TREASURY_ADDRESS", str),
    ("whitelist", "enabled"): ("QV_WHITELIST_ENABLED", _as_bool),
    ("whitelist", "url"): ("QV_WHITELIST_URL", str),
    ("whitelist", "ttl_sec"): ("QV_WHITELIST_TTL_SEC", int),
    ("whitelist", "timeout_sec"): ("QV_WHITELIST_TIMEOUT_SEC", float),
    ("chain", "rpc_url"): ("RPC_URL", str),
    ("server", "host"): ("QV_HOST", str),
    ("server", "port"): ("PORT", int),
    ("logging", "level"): ("QV_LOG_LEVEL", str),
}


def _deep_merge(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(base)
    for k, v in (overlay or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def _apply_env_overrides(cfg: Dict[str, Any]) -> Dict[str, Any]:
    for (section, key), (env_name, cast) in _ENV_MAP.items():
        val = os.getenv(env_name)
        if val is None:
            continue
        try:
            casted = cast(val)
        except ValueError:
            log.warning("Ignoring %s=%r: not a valid %s", env_name, val, getattr(cast, "__name__", cast))
            continue
        cfg.setdefault(section, {})
        cfg[section][key] = casted
    return cfg


def load_config(repo_root: str) -> Dict[str, Any]:
    """
    Loads the YAML config from repo_root/qv_config.yaml.
    Returns defaults if the file doesn't exist or can't be parsed.
    Also applies ENV overrides for certain keys.
    """
    path = os.path.join(repo_root, CONFIG_FILE)
    cfg = copy.deepcopy(_DEFAULT)

    if os.path.exists(path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            cfg = _deep_merge(cfg, data)
        except (OSError, yaml.YAMLError):
            log.warning("Failed reading %s; using defaults", path, exc_info=True)

    cfg = _apply_env_overrides(cfg)

    origins = cfg.get("cors", {}).get("origins")
    if isinstance(origins, str):
        cfg["cors"]["origins"] = [origins]

    return cfg


def default_config() -> Dict[str, Any]:
    return _apply_env_overrides(copy.deepcopy(_DEFAULT))


def configure_logging(cfg: Dict[str, Any]) -> None:
    level = str(cfg.get("logging", {}).get("level", "INFO")).upper()
    logging.basicConfig(level=level, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")


# -------- Small helpers used by the app --------
def get_default_credits(cfg: Dict[str, Any]) -> int:
    return int(cfg.get("voting", {}).get("default_credits", 100))


def get_fee_percent(cfg: Dict[str, Any]) -> int:
    return int(cfg.get("distribution", {}).get("fee_percent", 5))


def get_treasury_address(cfg: Dict[str, Any]) -> str:
    return str(cfg.get("distribution", {}).get("treasury_address", ""))


def get_bind_host(cfg: Dict[str, Any]) -> str:
    return str(cfg.get("server", {}).get("host", "0.0.0.0"))


def get_bind_port(cfg: Dict[str, Any]) -> int:
    return int(cfg.get("server", {}).get("port", 3000))


def get_cors_origins(cfg: Dict[str, Any]) -> List[str]:
    return list(cfg.get("cors", {}).get("origins", []))


def get_treasury_private_key() -> str:
    """
    TREASURY_PRIVATE_KEY is intentionally not read from YAML.
    An empty string means payouts are not configured.
    """
    return os.getenv("TREASURY_PRIVATE_KEY", "").strip()
