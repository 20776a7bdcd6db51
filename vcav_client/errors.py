from __future__ import annotations

from typing import Any, Dict, List, Optional


class VcavError(Exception):
    """Base class for every error raised by vcav_client."""


class AlreadyConnected(VcavError):
    pass


class NotConnected(VcavError):
    pass


class NoCredentialSource(VcavError):
    pass


class AmbiguousCredentialSource(VcavError):
    def __init__(self, names: List[str]):
        self.names = list(names)
        super().__init__(
            f"{len(self.names)} credential sources available ({', '.join(self.names)}); "
            "name the one to use"
        )


class CredentialSourceNotFound(VcavError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Credential source '{name}' not found")


class TransportFailure(VcavError):
    """Network-level failure; the underlying exception is kept in ``cause``."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class QueryFailed(VcavError):
    """Exception raised when the API answers with a non-success status."""

    def __init__(
        self,
        message: str,
        status_code: int,
        response_body: Optional[Dict[str, Any]] = None,
        method: Optional[str] = None,
        path: Optional[str] = None,
    ):
        self.status_code = status_code
        self.response_body = response_body or {}
        self.method = method
        self.path = path

        self.error_code = self._extract_error_code()
        self.error_messages = self._extract_error_messages()

        detail = f"HTTP {status_code}"
        if method and path:
            detail += f" on {method} {path}"
        elif path:
            detail += f" on {path}"
        if self.error_code:
            detail += f" [{self.error_code}]"
        if self.error_messages:
            detail += f": {'; '.join(self.error_messages)}"

        super().__init__(f"{message}: {detail}")

    def _extract_error_code(self) -> Optional[str]:
        # vCAV style: {"code": "AuthenticationRequired", "msg": "..."}
        code = self.response_body.get("code")
        if isinstance(code, str) and code:
            return code
        if "type" in self.response_body and isinstance(self.response_body["type"], str):
            return self.response_body["type"].split(".")[-1]
        return None

    def _extract_error_messages(self) -> List[str]:
        messages = []
        for key in ("msg", "message", "details"):
            value = self.response_body.get(key)
            if isinstance(value, str) and value:
                messages.append(value)
        for arg in self.response_body.get("args", []) or []:
            if isinstance(arg, str) and arg:
                messages.append(arg)
        return messages

    @property
    def is_unauthorized(self) -> bool:
        return self.status_code == 401

    @property
    def is_forbidden(self) -> bool:
        return self.status_code == 403

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


class UnexpectedResponse(VcavError):
    """A successful response whose body does not have the expected shape."""

    def __init__(self, message: str, path: Optional[str] = None, cause: Optional[BaseException] = None):
        self.path = path
        self.cause = cause
        if path:
            message = f"{message} from {path}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class PaginationInconsistency(VcavError):
    def __init__(self, message: str, path: str, offset: int, total: int):
        self.path = path
        self.offset = offset
        self.total = total
        super().__init__(f"{message} ({path}: offset={offset}, total={total})")


SessionAlreadyActive = AlreadyConnected
