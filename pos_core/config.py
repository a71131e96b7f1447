from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

import streamlit as st

CONFIG_FILE_NAME = "settings.json"
ENV_DATA_DIR = "POS_DASH_DATA_DIR"
SESSION_DATA_DIR = "pos_dash_data_dir"

DEFAULT_RATE = 64.6116


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    db_path: Path
    log_dir: Path
    local_currency: str = "Bs"
    default_rate: float = DEFAULT_RATE
    operator: str = "System user"


def _default_data_dir() -> Path:
    return Path.home() / ".pos_dashboard"


def _load_persisted_settings(data_dir: Path) -> dict:
    cfg = data_dir / CONFIG_FILE_NAME
    if cfg.exists():
        try:
            return json.loads(cfg.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return {}
    return {}


def persist_data_dir(data_dir_str: str) -> None:
    data_dir = Path(data_dir_str).expanduser().resolve()
    data_dir.mkdir(parents=True, exist_ok=True)

    cfg = data_dir / CONFIG_FILE_NAME
    payload = _load_persisted_settings(data_dir)
    payload["data_dir"] = str(data_dir)
    cfg.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    st.session_state[SESSION_DATA_DIR] = str(data_dir)


def load_settings(data_dir: Path | str | None = None) -> Settings:
    """
    Build Settings without touching Streamlit state.

    Priority order when data_dir is not given:
      1) Environment variable
      2) Persisted settings in default folder
      3) Default folder
    """
    persisted: dict = {}
    if data_dir is not None:
        resolved = Path(data_dir).expanduser().resolve()
        persisted = _load_persisted_settings(resolved)
    elif os.getenv(ENV_DATA_DIR):
        resolved = Path(os.getenv(ENV_DATA_DIR, "")).expanduser().resolve()
        persisted = _load_persisted_settings(resolved)
    else:
        default_dir = _default_data_dir()
        persisted = _load_persisted_settings(default_dir)
        resolved = Path(persisted.get("data_dir", default_dir)).expanduser().resolve()

    resolved.mkdir(parents=True, exist_ok=True)
    log_dir = resolved / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)

    return Settings(
        data_dir=resolved,
        db_path=resolved / "pos.db",
        log_dir=log_dir,
        local_currency=str(persisted.get("local_currency", "Bs")),
        default_rate=float(persisted.get("default_rate", DEFAULT_RATE)),
        operator=str(persisted.get("operator", "System user")),
    )


@st.cache_resource
def get_settings() -> Settings:
    # Session state (set via Data Management page) wins over env/persisted.
    if SESSION_DATA_DIR in st.session_state:
        return load_settings(st.session_state[SESSION_DATA_DIR])
    return load_settings()
