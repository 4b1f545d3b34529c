"""Environment-driven settings for the draftwise CLI and host."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
import os
from pathlib import Path
from typing import Any

DEFAULT_GATEWAY = "file"
DEFAULT_DRAFTS_DIR = "./drafts"
DEFAULT_MAX_AGE_HOURS = 24.0
DEFAULT_LOG_LEVEL = "WARNING"


def load_dotenv(path: str = ".env") -> bool:
    env_path = Path(path)
    if not env_path.exists():
        return False
    try:
        text = env_path.read_text(encoding="utf-8")
    except OSError:
        return False

    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        key = key.strip()
        if key.startswith("export "):
            key = key[len("export ") :].strip()
        value = value.strip()
        if not key:
            continue
        if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
            value = value[1:-1]
        if value == "":
            continue
        if key not in os.environ:
            os.environ[key] = value
    return True


@dataclass(frozen=True)
class Settings:
    gateway: str = DEFAULT_GATEWAY
    drafts_dir: Path = Path(DEFAULT_DRAFTS_DIR)
    draft_max_age_hours: float = DEFAULT_MAX_AGE_HOURS
    api_url: str | None = None
    api_token: str | None = None
    user_id: str | None = None
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls, env: dict[str, str] | None = None) -> "Settings":
        source = os.environ if env is None else env
        raw_age = source.get("DRAFTWISE_DRAFT_MAX_AGE_HOURS")
        try:
            max_age = float(raw_age) if raw_age else DEFAULT_MAX_AGE_HOURS
        except ValueError:
            max_age = DEFAULT_MAX_AGE_HOURS
        return cls(
            gateway=(source.get("DRAFTWISE_GATEWAY") or DEFAULT_GATEWAY).strip().lower(),
            drafts_dir=Path(source.get("DRAFTWISE_DRAFTS_DIR") or DEFAULT_DRAFTS_DIR),
            draft_max_age_hours=max_age,
            api_url=source.get("DRAFTWISE_API_URL") or None,
            api_token=source.get("DRAFTWISE_API_TOKEN") or None,
            user_id=source.get("DRAFTWISE_USER_ID") or None,
            log_level=(source.get("DRAFTWISE_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
        )

    @property
    def draft_max_age(self) -> timedelta | None:
        if self.draft_max_age_hours <= 0:
            return None
        return timedelta(hours=self.draft_max_age_hours)

    def gateway_kwargs(self) -> dict[str, Any]:
        if self.gateway == "file":
            return {"base_dir": self.drafts_dir, "max_age": self.draft_max_age}
        if self.gateway == "http":
            return {"base_url": self.api_url, "api_token": self.api_token}
        return {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "gateway": self.gateway,
            "drafts_dir": str(self.drafts_dir),
            "draft_max_age_hours": self.draft_max_age_hours,
            "api_url": self.api_url,
            "api_token": "***" if self.api_token else None,
            "user_id": self.user_id,
            "log_level": self.log_level,
        }
