from __future__ import annotations
from typing import Optional, Union
import requests

import app_protocol as ap

class HTTPSDemoClient:
    """Client for the demo HTTPS server.

    Pass ``ca_file`` (the issued ``<name>.pem``) to trust the self-signed
    certificate as a root; otherwise ``verify_tls`` decides whether the
    system trust store is used or verification is skipped.
    """

    def __init__(self, base_url: str, ca_file: Optional[str] = None, verify_tls: bool = True, timeout: float = 5):
        self.base_url = base_url.rstrip("/")
        self.verify: Union[str, bool] = ca_file if ca_file else verify_tls
        self.timeout = timeout

    def _get(self, path: str, params=None) -> requests.Response:
        return requests.get(self.base_url + path, params=params, verify=self.verify, timeout=self.timeout)

    def hello(self, name: str) -> str:
        r = self._get("/api/hello", params={"name": name})
        r.raise_for_status()
        return ap.decode(r.content)["message"]

    def healthz(self) -> int:
        return self._get("/healthz").status_code

    def readiness(self) -> int:
        return self._get("/readiness").status_code
