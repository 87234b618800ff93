import threading

import pytest
import requests
from werkzeug.serving import make_server

import certgen
import server_https
from https_client import HTTPSDemoClient

# serial-0 certificate, see test_certgen
pytestmark = pytest.mark.filterwarnings("ignore::cryptography.utils.CryptographyDeprecationWarning")

@pytest.fixture
def tls_server(tmp_path):
    """Serve the demo app over TLS on loopback with a freshly issued pair.

    The pair is issued for "localhost" so the SAN entry matches the URL host.
    """
    issued = certgen.issue("localhost")
    cert_path, key_path = certgen.write_pair(issued, "localhost", tmp_path)
    srv = make_server("127.0.0.1", 0, server_https.create_app(), ssl_context=(str(cert_path), str(key_path)))
    t = threading.Thread(target=srv.serve_forever, daemon=True)
    t.start()
    try:
        yield f"https://localhost:{srv.server_port}", cert_path
    finally:
        srv.shutdown()
        t.join(timeout=5)

def test_client_trusts_issued_certificate(tls_server):
    url, cert_path = tls_server
    client = HTTPSDemoClient(url, ca_file=str(cert_path))
    assert client.hello("Dana") == "Hello Dana"
    assert client.healthz() == 200
    assert client.readiness() == 200

def test_handshake_fails_without_the_certificate(tls_server, monkeypatch):
    monkeypatch.delenv("REQUESTS_CA_BUNDLE", raising=False)
    monkeypatch.delenv("CURL_CA_BUNDLE", raising=False)
    url, _ = tls_server
    with pytest.raises(requests.exceptions.SSLError):
        HTTPSDemoClient(url).healthz()
