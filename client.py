from __future__ import annotations
import argparse, os, sys
from typing import List, Optional

import requests
import urllib3

from https_client import HTTPSDemoClient

# Certificates are issued for *.<name> and <name>; point the name at
# 127.0.0.1 (e.g. /etc/hosts) so hostname checks pass against a local server.
DEFAULT_URL = "https://grpc-demo.go:10000"

COMMANDS = ("hello", "healthz", "readiness")

def main(argv: Optional[List[str]] = None) -> None:
    apg = argparse.ArgumentParser(description="Talk to the demo HTTPS server")
    apg.add_argument("command", choices=COMMANDS)
    apg.add_argument("--url", default=os.environ.get("GRPCDEMO_URL", DEFAULT_URL))
    apg.add_argument("--ca-file", default=os.environ.get("GRPCDEMO_CA_FILE"), help="Certificate file in PEM format")
    apg.add_argument("--insecure", action="store_true", help="Skip TLS verification")
    apg.add_argument("--name", default="world", help="Name to greet (hello)")
    args = apg.parse_args(argv)

    if args.insecure:
        urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
        client = HTTPSDemoClient(args.url, verify_tls=False)
    else:
        client = HTTPSDemoClient(args.url, ca_file=args.ca_file)

    try:
        if args.command == "hello":
            print(client.hello(args.name))
            return
        code = client.healthz() if args.command == "healthz" else client.readiness()
    except requests.RequestException as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        sys.exit(1)

    print(f"[Client] {args.command}: {code}")
    if code != 200:
        sys.exit(1)

if __name__ == "__main__":
    main()
