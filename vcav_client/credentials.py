"""
Credential sources: already-authenticated vCloud Director sessions whose
session cookie bootstraps a vCAV session without prompting for credentials.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import requests

from .config import VcdConfig
from .errors import (
    AmbiguousCredentialSource,
    CredentialSourceNotFound,
    NoCredentialSource,
    QueryFailed,
    TransportFailure,
    VcavError,
)
from .transport import build_session, safe_json

logger = logging.getLogger(__name__)

VCD_AUTH_HEADER = "x-vcloud-authorization"
VCD_ACCESS_TOKEN_HEADER = "X-VMWARE-VCLOUD-ACCESS-TOKEN"


@dataclass
class CredentialSource:
    host: str
    cookie: str = field(repr=False)
    name: str = ""
    # Set when this process opened the vCD session and should close it.
    owned: bool = False
    bearer: bool = False

    def __post_init__(self) -> None:
        if not self.host:
            raise ValueError("host is required")
        if not self.cookie:
            raise ValueError("cookie is required")
        if not self.name:
            self.name = self.host


class CredentialRegistry:
    """Directory of active vCD sessions, keyed by name (the vCD host by default)."""

    def __init__(self, sources: Optional[List[CredentialSource]] = None):
        self._sources: Dict[str, CredentialSource] = {}
        for source in sources or []:
            self.add(source)

    def add(self, source: CredentialSource) -> None:
        self._sources[source.name] = source

    def remove(self, name: str) -> None:
        self._sources.pop(name, None)

    def sources(self) -> List[CredentialSource]:
        return list(self._sources.values())

    def names(self) -> List[str]:
        return list(self._sources.keys())

    def get(self, name: str) -> CredentialSource:
        try:
            return self._sources[name]
        except KeyError:
            raise CredentialSourceNotFound(name) from None

    def resolve(self, name: Optional[str] = None) -> CredentialSource:
        """
        Pick the credential source for a new vCAV session.

        Args:
            name: Source to use. Required when more than one source exists.

        Raises:
            NoCredentialSource: If the registry is empty.
            CredentialSourceNotFound: If ``name`` is not registered.
            AmbiguousCredentialSource: If ``name`` is omitted and several sources exist.
        """
        if not self._sources:
            raise NoCredentialSource("No vCloud Director session available; connect to vCD first")
        if name:
            return self.get(name)
        if len(self._sources) > 1:
            raise AmbiguousCredentialSource(self.names())
        return next(iter(self._sources.values()))

    def __len__(self) -> int:
        return len(self._sources)

    def __contains__(self, name: object) -> bool:
        return name in self._sources


def connect_vcd(cfg: VcdConfig, session: Optional[requests.Session] = None) -> CredentialSource:
    """Log in to vCloud Director and return its session cookie as a credential source."""
    if not cfg.host:
        raise ValueError("vCD host is required")
    if not cfg.user or not cfg.password:
        raise ValueError("vCD user and password are required")

    http = session or build_session(cfg.verify_ssl)
    endpoint = "/cloudapi/1.0.0/sessions/provider" if cfg.org.lower() == "system" else "/cloudapi/1.0.0/sessions"
    url = f"https://{cfg.host}{endpoint}"
    headers = {"Accept": f"application/json;version={cfg.api_version}"}
    try:
        r = http.post(url, headers=headers, auth=(f"{cfg.user}@{cfg.org}", cfg.password), timeout=cfg.timeout_s)
    except requests.RequestException as e:
        raise TransportFailure(f"vCD login to {cfg.host} failed", e) from e
    finally:
        if session is None:
            http.close()
    if not r.ok:
        body = safe_json(r)
        raise QueryFailed(
            "vCD login failed",
            status_code=r.status_code,
            response_body=body if isinstance(body, dict) else None,
            method="POST",
            path=endpoint,
        )

    cookie = r.headers.get(VCD_AUTH_HEADER)
    bearer = False
    if not cookie:
        cookie = r.headers.get(VCD_ACCESS_TOKEN_HEADER)
        bearer = bool(cookie)
    if not cookie:
        raise QueryFailed("vCD login returned no session token", status_code=r.status_code,
                          method="POST", path=endpoint)
    logger.info("Connected to vCD %s as %s@%s", cfg.host, cfg.user, cfg.org)
    return CredentialSource(host=cfg.host, cookie=cookie, owned=True, bearer=bearer)


def disconnect_vcd(cfg: VcdConfig, source: CredentialSource, session: Optional[requests.Session] = None) -> None:
    """Delete the vCD session behind ``source``."""
    http = session or build_session(cfg.verify_ssl)
    endpoint = "/cloudapi/1.0.0/sessions/current"
    headers = {"Accept": f"application/json;version={cfg.api_version}"}
    if source.bearer:
        headers["Authorization"] = f"Bearer {source.cookie}"
    else:
        headers[VCD_AUTH_HEADER] = source.cookie
    try:
        r = http.delete(f"https://{source.host}{endpoint}", headers=headers, timeout=cfg.timeout_s)
    except requests.RequestException as e:
        raise TransportFailure(f"vCD logout from {source.host} failed", e) from e
    finally:
        if session is None:
            http.close()
    if not r.ok:
        body = safe_json(r)
        raise QueryFailed(
            "vCD logout failed",
            status_code=r.status_code,
            response_body=body if isinstance(body, dict) else None,
            method="DELETE",
            path=endpoint,
        )
    logger.info("Disconnected from vCD %s", source.host)


def release_owned(cfg: VcdConfig, registry: CredentialRegistry, session: Optional[requests.Session] = None) -> None:
    """Close every vCD session this process opened and drop it from ``registry``."""
    for source in registry.sources():
        if not source.owned:
            continue
        registry.remove(source.name)
        try:
            disconnect_vcd(cfg, source, session=session)
        except VcavError as e:
            logger.warning("vCD logout from %s failed: %s", source.host, e)


def registry_from_config(cfg: VcdConfig, session: Optional[requests.Session] = None) -> CredentialRegistry:
    registry = CredentialRegistry()
    if not cfg.configured:
        return registry
    if cfg.session_token:
        registry.add(CredentialSource(host=cfg.host, cookie=cfg.session_token))
        logger.debug("Using preset vCD session token for %s", cfg.host)
    elif cfg.user and cfg.password:
        registry.add(connect_vcd(cfg, session=session))
    return registry
