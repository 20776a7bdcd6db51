from __future__ import annotations

from typing import Any, Optional, Union

import requests
import urllib3
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry


def build_session(verify_ssl: bool = True, ca_bundle: Optional[str] = None) -> requests.Session:
    """Return a requests session that makes exactly one attempt per request."""
    session = requests.Session()
    retry = Retry(total=0, connect=0, read=0, redirect=0, status=0, raise_on_status=False)
    session.mount("https://", HTTPAdapter(max_retries=retry))
    verify: Union[bool, str] = ca_bundle or verify_ssl
    session.verify = verify
    if verify is False:
        urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
    return session


def is_json(r: requests.Response) -> bool:
    content_type = r.headers.get("content-type", "").lower()
    return "json" in content_type.split(";")[0]


def safe_json(r: requests.Response) -> Optional[Any]:
    """Safely parse a JSON response, returning None on failure."""
    try:
        if is_json(r) and r.content:
            return r.json()
    except ValueError:
        pass
    return None
