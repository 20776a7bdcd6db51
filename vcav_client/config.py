from __future__ import annotations

import os
from typing import Optional

from pydantic import BaseModel, Field, field_validator

DEFAULT_MEDIA_TYPE = "application/vnd.vmware.h4-v4+json;charset=UTF-8"

_TRUTHY = {"1", "true", "yes"}


class VcavConfig(BaseModel):
    host: str = ""
    media_type: str = DEFAULT_MEDIA_TYPE
    verify_ssl: bool = True
    ca_bundle: Optional[str] = None
    default_timeout_s: float = 30.0
    max_pages: int = Field(default=10000, ge=1)

    @field_validator("host", mode="before")
    @classmethod
    def strip_host(cls, v):
        return (v or "").strip()


class VcdConfig(BaseModel):
    host: str = ""
    org: str = "system"
    user: str = ""
    password: str = ""
    api_version: str = "38.0"
    session_token: Optional[str] = None
    verify_ssl: bool = True
    timeout_s: float = 30.0

    @property
    def configured(self) -> bool:
        return bool(self.host)


class LoggingConfig(BaseModel):
    level: str = "WARNING"

    @field_validator("level", mode="before")
    @classmethod
    def upper_level(cls, v):
        return (v or "WARNING").strip().upper()


class AppConfig(BaseModel):
    vcav: VcavConfig
    vcd: VcdConfig
    logging: LoggingConfig


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in _TRUTHY


def load_config() -> AppConfig:
    insecure = _env_flag("INSECURE")
    return AppConfig(
        vcav=VcavConfig(
            host=os.getenv("VCAV_HOST", ""),
            media_type=os.getenv("VCAV_MEDIA_TYPE", DEFAULT_MEDIA_TYPE),
            verify_ssl=not insecure,
            ca_bundle=os.getenv("VCAV_CA_BUNDLE"),
            default_timeout_s=float(os.getenv("VCAV_TIMEOUT_S", "30")),
            max_pages=int(os.getenv("VCAV_MAX_PAGES", "10000")),
        ),
        vcd=VcdConfig(
            host=os.getenv("VCD_HOST", "").strip(),
            org=os.getenv("VCD_ORG", "system"),
            user=os.getenv("VCD_USER", ""),
            password=os.getenv("VCD_PASSWORD", ""),
            api_version=os.getenv("VCD_API_VERSION", "38.0"),
            session_token=os.getenv("VCD_SESSION_TOKEN") or None,
            verify_ssl=not insecure,
            timeout_s=float(os.getenv("VCD_TIMEOUT_S", "30")),
        ),
        logging=LoggingConfig(level=os.getenv("LOG_LEVEL", "WARNING")),
    )
