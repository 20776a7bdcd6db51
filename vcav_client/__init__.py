"""
vcav-client: a session-oriented client for the VMware vCloud Availability REST API.

This package opens vCAV sessions from existing vCloud Director sessions, runs
authenticated and paginated queries, and builds replication reports.
"""

from .client import VcavClient
from .config import AppConfig, VcavConfig, VcdConfig, load_config
from .credentials import CredentialRegistry, CredentialSource, connect_vcd
from .errors import (
    AlreadyConnected,
    AmbiguousCredentialSource,
    CredentialSourceNotFound,
    NoCredentialSource,
    NotConnected,
    PaginationInconsistency,
    QueryFailed,
    SessionAlreadyActive,
    TransportFailure,
    UnexpectedResponse,
    VcavError,
)
from .pagination import PAGE_SIZE, Page, fetch_all
from .store import SessionState, SessionStore
from .urls import build_url

__version__ = "0.1.0"

__all__ = [
    # Client
    "VcavClient",
    "SessionState",
    "SessionStore",
    "build_url",
    "fetch_all",
    "Page",
    "PAGE_SIZE",
    # Credentials
    "CredentialRegistry",
    "CredentialSource",
    "connect_vcd",
    # Config
    "AppConfig",
    "VcavConfig",
    "VcdConfig",
    "load_config",
    # Errors
    "VcavError",
    "AlreadyConnected",
    "SessionAlreadyActive",
    "NotConnected",
    "NoCredentialSource",
    "AmbiguousCredentialSource",
    "CredentialSourceNotFound",
    "TransportFailure",
    "QueryFailed",
    "PaginationInconsistency",
    "UnexpectedResponse",
]
