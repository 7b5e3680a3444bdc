from __future__ import annotations

import os
from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Mapping, Optional

BACKEND_URL_ENV = "ECLIPSE_PDF_BACKEND_URL"

_INT_FIELDS = (
    "request_timeout_s",
    "entitlement_timeout_s",
    "daily_limit_s",
    "day_cutoff_hour",
    "tick_interval_ms",
    "entitlement_check_interval_ms",
    "channel_pump_ms",
)


@dataclass
class SettingsConfig:
    """Typed runtime settings that persist via StorageLocal."""

    backend_url: str = ""
    request_timeout_s: int = 10
    entitlement_timeout_s: int = 8
    daily_limit_s: int = 3600
    day_cutoff_hour: int = 4
    tick_interval_ms: int = 10000
    entitlement_check_interval_ms: int = 60000
    channel_pump_ms: int = 100


class SettingsVM:
    """Settings state loaded from ``user_settings.json`` with coercion and validation."""

    def __init__(self, *, config: Optional[SettingsConfig] = None) -> None:
        self.config = config or SettingsConfig()
        self.api_key: str = ""
        self.debug_logging: bool = False

    def effective_backend_url(self, environ: Optional[Mapping[str, str]] = None) -> str:
        env = os.environ if environ is None else environ
        override = (env.get(BACKEND_URL_ENV) or "").strip()
        if override:
            return self._coerce_url(override)
        return self.config.backend_url

    # ------------------------------------------------------------------
    @staticmethod
    def is_valid(cfg: SettingsConfig) -> bool:
        if cfg.backend_url and not cfg.backend_url.startswith(("http://", "https://")):
            return False
        if not 0 <= cfg.day_cutoff_hour <= 23:
            return False
        return all(getattr(cfg, name) > 0 for name in _INT_FIELDS if name != "day_cutoff_hour")

    def apply_dict(self, payload: Mapping[str, Any]) -> None:
        """Apply persisted settings to the view-model."""

        if not isinstance(payload, Mapping):
            raise ValueError("Settings payload must be a mapping of flat keys.")

        allowed_flat_keys = {*SettingsConfig.__annotations__.keys(), "api_key", "debug_logging"}
        unknown = set(payload.keys()) - allowed_flat_keys
        if unknown:
            raise ValueError(f"Unsupported settings keys: {', '.join(sorted(str(key) for key in unknown))}")

        updates: Dict[str, Any] = {}
        for cfg_key in SettingsConfig.__annotations__.keys():
            if cfg_key in payload:
                updates[cfg_key] = self._coerce_config_value(cfg_key, payload[cfg_key])

        if updates:
            candidate = replace(self.config, **updates)
            if not self.is_valid(candidate):
                raise ValueError("Settings out of range (URL scheme or zero interval).")
            self.config = candidate

        if "api_key" in payload:
            self.api_key = self._coerce_optional_str(payload["api_key"])

        if "debug_logging" in payload:
            self.debug_logging = self._coerce_bool(payload["debug_logging"])

    def to_dict(self) -> dict:
        snapshot = asdict(self.config)
        snapshot.update({"api_key": self.api_key, "debug_logging": bool(self.debug_logging)})
        return snapshot

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _coerce_config_value(self, key: str, raw: Any) -> Any:
        if key == "backend_url":
            return self._coerce_url(raw)
        if key == "day_cutoff_hour":
            hour = self._coerce_int(key, raw)
            if not 0 <= hour <= 23:
                raise ValueError("day_cutoff_hour must be between 0 and 23.")
            return hour
        if key in _INT_FIELDS:
            return self._coerce_int(key, raw)
        raise ValueError(f"Unhandled config field: {key}")

    @staticmethod
    def _coerce_url(value: Any) -> str:
        if value is None:
            return ""
        if not isinstance(value, str):
            raise ValueError("backend_url must be a string.")
        return value.strip().rstrip("/")

    @staticmethod
    def _coerce_optional_str(value: Any) -> str:
        if value is None:
            return ""
        return str(value).strip()

    @staticmethod
    def _coerce_bool(value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return bool(value)
        if isinstance(value, str):
            return value.strip().lower() in {"1", "true", "yes", "on"}
        return bool(value)

    @staticmethod
    def _coerce_int(name: str, value: Any) -> int:
        if isinstance(value, bool):
            raise ValueError(f"{name} must be an integer.")
        if isinstance(value, (int, float)):
            coerced = int(value)
        elif isinstance(value, str):
            try:
                coerced = int(value.strip())
            except (TypeError, ValueError) as exc:
                raise ValueError(f"{name} must be an integer.") from exc
        else:
            raise ValueError(f"{name} must be an integer.")
        if coerced < 0:
            raise ValueError(f"{name} must be non-negative.")
        return coerced


__all__ = ["BACKEND_URL_ENV", "SettingsConfig", "SettingsVM"]
