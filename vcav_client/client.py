from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar, Union

import requests
from pydantic import BaseModel, ValidationError
from requests.structures import CaseInsensitiveDict

from .config import VcavConfig
from .credentials import CredentialRegistry
from .errors import AlreadyConnected, NotConnected, QueryFailed, TransportFailure, UnexpectedResponse, VcavError
from .models import Site, VappReplication, VmReplication
from .pagination import PAGE_SIZE, fetch_all
from .store import SessionState, SessionStore
from .transport import build_session, is_json, safe_json
from .urls import append_filters, build_url

logger = logging.getLogger(__name__)

AUTH_HEADER = "X-VCAV-Auth"

Body = Union[Dict[str, Any], List[Any], str, bytes]

M = TypeVar("M", bound=BaseModel)


def _parse(model: Type[M], data: Any, path: str) -> M:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise UnexpectedResponse(f"Malformed {model.__name__} record", path=path, cause=e) from e


class VcavClient:
    """
    vCloud Availability REST API client.

    The client is the session handle: it owns the session store, so several
    clients may talk to different vCAV hosts side by side. Each call makes
    exactly one HTTP request; nothing is retried.
    """

    def __init__(
        self,
        cfg: Optional[VcavConfig] = None,
        credentials: Optional[CredentialRegistry] = None,
        session: Optional[requests.Session] = None,
    ):
        self._cfg = cfg or VcavConfig()
        self._credentials = credentials if credentials is not None else CredentialRegistry()
        self._session = session or build_session(self._cfg.verify_ssl, self._cfg.ca_bundle)
        self._timeout = self._cfg.default_timeout_s
        self._store = SessionStore()

    @property
    def credentials(self) -> CredentialRegistry:
        return self._credentials

    @property
    def state(self) -> SessionState:
        return self._store.get()

    @property
    def is_connected(self) -> bool:
        return self._store.connected

    @property
    def host(self) -> Optional[str]:
        return self._store.get().host

    def current_token(self) -> str:
        return self._store.get().token or ""

    # --- Session management ---

    def login(self, api_host: Optional[str] = None, credential_source: Optional[str] = None) -> SessionState:
        """
        Open a vCAV session using the cookie of a vCD credential source.

        Args:
            api_host: vCAV API host. Defaults to the configured host.
            credential_source: Name of the vCD session to use; required when
                more than one is registered.

        Raises:
            AlreadyConnected: If this client already holds a session.
            NoCredentialSource, AmbiguousCredentialSource, CredentialSourceNotFound:
                If no single credential source can be picked. No request is sent.
            TransportFailure, QueryFailed: If the session cannot be created.
        """
        current = self._store.get()
        if current.connected:
            raise AlreadyConnected(f"Already connected to {current.host}; log out first")
        host = (api_host or self._cfg.host or "").strip()
        if not host:
            raise ValueError("vCAV host is required")

        source = self._credentials.resolve(credential_source)
        body = {"type": "vcdCookie", "vcdCookie": source.cookie}
        headers = {"Accept": self._cfg.media_type, "Content-Type": "application/json"}
        r = self._send("POST", build_url(host, "sessions"), headers=headers, data=json.dumps(body))
        self._check_response(r, "POST", "/sessions", f"create session on {host}")

        token = r.headers.get(AUTH_HEADER)
        if not token:
            raise QueryFailed(f"Session creation on {host} returned no {AUTH_HEADER} token",
                              status_code=r.status_code, method="POST", path="/sessions")
        self._store.set(host, token)
        logger.info("Logged in to %s using vCD session %s", host, source.name)
        return self._store.get()

    def extend(self, site: str, credential_source: str) -> None:
        """Authorize the current session for another site, keeping the same token."""
        if not site:
            raise ValueError("site is required")
        if not self._store.connected:
            raise NotConnected("Not connected to vCAV; call login() first")
        source = self._credentials.get(credential_source)
        self.query(
            "sessions/extend",
            method="POST",
            body={"type": "cookie", "site": site, "cookie": source.cookie},
        )
        logger.info("Extended session on %s to site %s", self.host, site)

    def logout(self) -> None:
        """
        Delete the vCAV session.

        Local state is cleared before the request is sent, so a failed or hung
        delete never leaves the client claiming to be connected.
        """
        state = self._store.get()
        if not state.connected:
            logger.debug("Logout requested without an active session")
            return
        self._store.clear()
        headers = {"Accept": self._cfg.media_type, AUTH_HEADER: state.token}
        r = self._send("DELETE", build_url(state.host, "sessions"), headers=headers)
        self._check_response(r, "DELETE", "/sessions", f"delete session on {state.host}")
        logger.info("Logged out from %s", state.host)

    def reset(self) -> None:
        """Forget the local session without contacting the server (e.g. after token expiry)."""
        self._store.clear()

    def close(self) -> None:
        """Logout and close the underlying HTTP session."""
        try:
            self.logout()
        finally:
            self._session.close()

    # --- Queries ---

    def query(
        self,
        path: str,
        method: str = "GET",
        filters: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        content_type: Optional[str] = None,
        body: Optional[Body] = None,
    ) -> Any:
        """
        Send one authenticated request and return the decoded response.

        ``path`` is either a resource path such as ``vm-replications`` or a
        full ``https://`` URI. Caller headers win over the default ``Accept``
        and ``X-VCAV-Auth`` headers.
        """
        state = self._store.get()
        if not state.connected:
            raise NotConnected("Not connected to vCAV; call login() first")

        if path.lower().startswith(("https://", "http://")):
            url = append_filters(path, filters)
        else:
            url = build_url(state.host, path, filters)

        hdrs: CaseInsensitiveDict = CaseInsensitiveDict(headers or {})
        hdrs.setdefault("Accept", self._cfg.media_type)
        hdrs.setdefault(AUTH_HEADER, state.token)

        data: Optional[Union[str, bytes]] = None
        if body is not None:
            data = json.dumps(body) if isinstance(body, (dict, list)) else body
            hdrs.setdefault("Content-Type", content_type or "application/json")
        elif content_type:
            hdrs.setdefault("Content-Type", content_type)

        method = method.upper()
        r = self._send(method, url, headers=dict(hdrs), data=data)
        self._check_response(r, method, path, f"query {path}")
        return self._decode(r, method, path)

    def query_all(self, path: str, filters: Optional[Mapping[str, Any]] = None) -> List[Any]:
        """Fetch every item of a paginated list endpoint."""
        return fetch_all(self, path, filters, page_size=PAGE_SIZE, max_pages=self._cfg.max_pages)

    def list_sites(self) -> List[Site]:
        data = self.query("sites")
        if data is not None and not isinstance(data, list):
            raise UnexpectedResponse("Expected a list of sites", path="sites")
        return [_parse(Site, s, "sites") for s in data or []]

    def list_vm_replications(self, filters: Optional[Mapping[str, Any]] = None) -> List[VmReplication]:
        return [_parse(VmReplication, i, "vm-replications") for i in self.query_all("vm-replications", filters)]

    def list_vapp_replications(self, filters: Optional[Mapping[str, Any]] = None) -> List[VappReplication]:
        return [_parse(VappReplication, i, "vapp-replications")
                for i in self.query_all("vapp-replications", filters)]

    # --- HTTP plumbing ---

    def _send(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        logger.debug("%s %s", method, url)
        try:
            return self._session.request(method, url, timeout=self._timeout, **kwargs)
        except requests.RequestException as e:
            raise TransportFailure(f"{method} {url} failed", e) from e

    @staticmethod
    def _check_response(r: requests.Response, method: str, path: str, operation: str) -> None:
        if r.ok:
            return
        body = safe_json(r)
        raise QueryFailed(
            f"Failed to {operation}",
            status_code=r.status_code,
            response_body=body if isinstance(body, dict) else None,
            method=method,
            path=path,
        )

    @staticmethod
    def _decode(r: requests.Response, method: str, path: str) -> Any:
        if not r.content:
            return None
        if is_json(r):
            try:
                return r.json()
            except ValueError as e:
                raise TransportFailure(f"{method} {path} returned malformed JSON", e) from e
        return r.text

    def __enter__(self) -> "VcavClient":
        if not self.is_connected:
            self.login()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.logout()
            return False
        try:
            self.logout()
        except VcavError as e:
            logger.warning("Logout failed while handling %s: %s", exc_type.__name__, e)
        return False
