from __future__ import annotations
import argparse, os, pathlib, sys
from typing import List, Optional, Tuple
from flask import Flask, request

import app_protocol as ap
import certgen
from health import HealthState

DEFAULT_NAME = "grpc-demo.go"
DEFAULT_SERVER_NAME = "grpc-demo"

def _json(msg, status: int = 200):
    return ap.encode(msg), status, {"Content-Type": "application/json"}

def create_app(health: HealthState | None = None, server_name: str = DEFAULT_SERVER_NAME) -> Flask:
    app = Flask(__name__)
    state = health if health is not None else HealthState()

    @app.get("/healthz")
    def healthz():
        return "", state.healthz_status()

    @app.route("/healthz/status", methods=["GET", "POST"])
    def toggle_healthz():
        state.toggle_healthz()
        return "", 200

    @app.get("/readiness")
    def readiness():
        return "", state.readiness_status()

    @app.route("/readiness/status", methods=["GET", "POST"])
    def toggle_readiness():
        state.toggle_readiness()
        return "", 200

    @app.get("/api/hello")
    def api_hello():
        name = request.args.get("name", "").strip()
        if not name:
            return _json(ap.error("name required"), 400)
        return _json(ap.hello_reply(name, server_name))

    @app.errorhandler(404)
    def not_found(_err):
        print(f"[HTTPS server] unmatched request: {request.method} {request.path}")
        return _json(ap.error("not found"), 404)

    return app

def ensure_pair(name: str, cert: Optional[str], key: Optional[str], generate: bool = False) -> Tuple[pathlib.Path, pathlib.Path]:
    """Resolve the certificate/key paths, issuing a new pair if asked to.

    Raises FileNotFoundError when a file is missing and ``generate`` is off.
    """
    cert_path = pathlib.Path(cert or f"{name}.pem")
    key_path = pathlib.Path(key or f"{name}.key")
    if cert_path.is_file() and key_path.is_file():
        return cert_path, key_path
    if not generate:
        missing = cert_path if not cert_path.is_file() else key_path
        raise FileNotFoundError(f"{missing} not found (run create-cert {name} or pass --generate)")

    print(f"[INFO] Creating self-signed certificate for {name}")
    issued = certgen.issue(name, on_step=lambda msg: print(f"[INFO] {msg}"))
    certgen.write_pem(key_path, issued.private_key_pem, private=True)
    certgen.write_pem(cert_path, issued.certificate_pem)
    return cert_path, key_path

def main(argv: Optional[List[str]] = None) -> None:
    apg = argparse.ArgumentParser(description="Demo HTTPS server with health endpoints")
    apg.add_argument("--host", default=os.environ.get("GRPCDEMO_HOST", "127.0.0.1"))
    apg.add_argument("--port", type=int, default=int(os.environ.get("GRPCDEMO_PORT", "10000")))
    apg.add_argument("--name", default=DEFAULT_NAME, help="Base name of the certificate files")
    apg.add_argument("--cert", default=None, help="Certificate file (default: <name>.pem)")
    apg.add_argument("--key", default=None, help="Key file (default: <name>.key)")
    apg.add_argument("--generate", action="store_true", help="Create the certificate and key if missing")
    args = apg.parse_args(argv)

    try:
        cert_path, key_path = ensure_pair(args.name, args.cert, args.key, generate=args.generate)
    except (ValueError, OSError) as e:
        print(f"[ERROR] Cannot load certificate: {e}", file=sys.stderr)
        sys.exit(1)

    health = HealthState()
    app = create_app(health)

    print(f"[HTTPS server] https://{args.host}:{args.port}")
    print(f"[INFO] cert={cert_path} key={key_path}")
    try:
        app.run(host=args.host, port=args.port, ssl_context=(str(cert_path), str(key_path)), threaded=True)
    finally:
        health.shutdown()
        print("[HTTPS server] stopped")

if __name__ == "__main__":
    main()
