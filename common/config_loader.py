# common/config_loader.py
import os
import yaml
import logging
import hashlib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from dotenv import load_dotenv

_log = logging.getLogger("trades-matching")

ENV_FILES = ("cloud.secrets.env", ".env.local", "env.local", ".env")


def load_env_files(candidates: Iterable[str] = ENV_FILES) -> None:
    """Load env files from CWD and the project root without overriding platform values."""
    here = Path(__file__).resolve()
    roots = {Path.cwd(), here.parent.parent}
    for fname in candidates:
        for root in roots:
            p = root / fname
            if p.exists():
                load_dotenv(p, override=False)


def load_config() -> Dict[str, Any]:
    """Load YAML from CONFIG_PATH or ./config.yaml, with safe defaults."""
    config_path = Path(os.getenv("CONFIG_PATH", "config.yaml"))
    if not config_path.exists():
        _log.warning("Config file not found at %s. Using built-in defaults.", config_path)
        return {}
    try:
        with config_path.open("r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        _log.error("Failed to parse %s: %s. Using built-in defaults.", config_path, e)
        return {}


def cfg_get(d: Dict[str, Any], path: str, default=None):
    """Safely fetch a nested key via dotted path, e.g. cfg_get(cfg, 'openai.llm_model')."""
    cur = d
    for part in path.split("."):
        if not isinstance(cur, dict) or part not in cur:
            return default
        cur = cur[part]
    return cur


def mask_key(key: Optional[str]) -> str:
    if not key:
        return "<none>"
    digest = hashlib.sha256(key.encode()).hexdigest()
    return f"sha256:{digest[:8]}"


@dataclass(frozen=True)
class Settings:
    openai_api_key: Optional[str] = None
    oracle_model: str = "gpt-4o-mini"
    oracle_timeout_s: float = 30.0
    gate_min_confidence: float = 0.0
    pricing_max_concurrency: Optional[int] = None
    roster_path: Optional[str] = None
    database_url: str = "sqlite+aiosqlite:///./bookings.sqlite3"
    brand: str = "TradeMatch"
    trace_db_path: Optional[str] = None
    session_idle_ttl_s: Optional[float] = 1800.0


def load_settings(cfg: Optional[Dict[str, Any]] = None) -> Settings:
    """Resolve runtime settings: config.yaml first, environment for secrets and DB URL."""
    cfg = load_config() if cfg is None else cfg
    max_conc = cfg_get(cfg, "pricing.max_concurrency", None)
    idle_ttl = cfg_get(cfg, "sessions.idle_ttl_s", 1800)
    return Settings(
        openai_api_key=os.getenv("OPENAI_API_KEY") or cfg_get(cfg, "openai.api_key", None),
        oracle_model=cfg_get(cfg, "openai.llm_model", "gpt-4o-mini"),
        oracle_timeout_s=float(cfg_get(cfg, "oracle.timeout_s", 30.0)),
        gate_min_confidence=float(cfg_get(cfg, "gate.min_confidence", 0.0)),
        pricing_max_concurrency=int(max_conc) if max_conc else None,
        roster_path=cfg_get(cfg, "roster.path", None),
        database_url=os.getenv("DATABASE_URL") or cfg_get(cfg, "database.url", Settings.database_url),
        brand=cfg_get(cfg, "platform.brand", "TradeMatch"),
        trace_db_path=cfg_get(cfg, "tracing.db_path", None),
        session_idle_ttl_s=float(idle_ttl) if idle_ttl else None,
    )
