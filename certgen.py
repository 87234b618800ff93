from __future__ import annotations
import argparse, datetime, os, pathlib, sys
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Tuple

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.x509.oid import NameOID
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa

# Self-signed certificate + RSA key for local TLS development.
#
# Usage: create-cert grpc-demo.go
#   => grpc-demo.go.pem and grpc-demo.go.key

KEY_SIZE = 2048
PUBLIC_EXPONENT = 65537
VALID_DAYS = 10 * 365  # wall-clock days, leap days not counted
SERIAL = 0

COUNTRY = "DE"
LOCALITY = "Munich"
ORGANIZATION = "GrpcDemo"

DIGESTS = {
    "sha1": hashes.SHA1,
    "sha256": hashes.SHA256,
}
# SHA-1 signing is refused by current cryptography releases; opt in with digest="sha1"
DEFAULT_DIGEST = "sha256"

STEP_KEYS = "Generating public and private keys..."
STEP_SIGN = "Signing certificate..."

TRUST_HINT = (
    "Now run (something like) this on MacOS:\n"
    "sudo security add-trusted-cert -d -r trustRoot -k /Library/Keychains/System.keychain {path}"
)

@dataclass
class IssuedCertificate:
    certificate: x509.Certificate
    private_key: rsa.RSAPrivateKey
    certificate_pem: bytes
    private_key_pem: bytes

    def __iter__(self) -> Iterator[bytes]:
        # cert_pem, key_pem = issue(name)
        yield self.certificate_pem
        yield self.private_key_pem

def wildcard(name: str) -> str:
    return f"*.{name}"

def build_name(name: str) -> x509.Name:
    """Subject/issuer DN: C=DE, L=Munich, O=GrpcDemo, CN=*.<name>."""
    return x509.Name([
        x509.NameAttribute(NameOID.COUNTRY_NAME, COUNTRY),
        x509.NameAttribute(NameOID.LOCALITY_NAME, LOCALITY),
        x509.NameAttribute(NameOID.ORGANIZATION_NAME, ORGANIZATION),
        x509.NameAttribute(NameOID.COMMON_NAME, wildcard(name)),
    ])

def subject_alt_names(name: str) -> List[str]:
    return [wildcard(name), name]

def issue(
    name: str,
    digest: str = DEFAULT_DIGEST,
    days: int = VALID_DAYS,
    now: Optional[datetime.datetime] = None,
    on_step: Optional[Callable[[str], None]] = None,
) -> IssuedCertificate:
    """Create a fresh key pair and a self-signed v3 certificate for ``name``.

    The certificate is valid for ``*.<name>`` and ``<name>``, marked as a CA
    so it can be trusted directly as a root, and signed with ``digest``
    (SHA-256 unless asked otherwise). Nothing is cached: every call yields new
    key material.
    """
    if not name:
        raise ValueError("name must not be empty")
    if digest not in DIGESTS:
        raise ValueError(f"unsupported digest: {digest} (choose from {', '.join(sorted(DIGESTS))})")
    if days <= 0:
        raise ValueError("days must be positive")

    step = on_step or (lambda _msg: None)

    step(STEP_KEYS)
    key = rsa.generate_private_key(
        public_exponent=PUBLIC_EXPONENT,
        key_size=KEY_SIZE,
    )
    public_key = key.public_key()

    subject = issuer = build_name(name)

    # X.509 times carry whole seconds only
    not_before = (now or datetime.datetime.now(datetime.timezone.utc)).replace(microsecond=0)
    not_after = not_before + datetime.timedelta(days=days)

    ski = x509.SubjectKeyIdentifier.from_public_key(public_key)
    aki = x509.AuthorityKeyIdentifier(
        key_identifier=ski.digest,
        authority_cert_issuer=[x509.DirectoryName(issuer)],
        authority_cert_serial_number=SERIAL,
    )
    san = x509.SubjectAlternativeName([x509.DNSName(d) for d in subject_alt_names(name)])

    step(STEP_SIGN)
    # Serial 0 goes through the constructor; the serial_number() setter rejects it.
    cert = x509.CertificateBuilder(serial_number=SERIAL).subject_name(
        subject
    ).issuer_name(
        issuer
    ).public_key(
        public_key
    ).not_valid_before(
        not_before
    ).not_valid_after(
        not_after
    ).add_extension(
        x509.BasicConstraints(ca=True, path_length=None), critical=True,
    ).add_extension(
        ski, critical=False,
    ).add_extension(
        aki, critical=False,
    ).add_extension(
        san, critical=False,
    ).sign(key, DIGESTS[digest]())

    return IssuedCertificate(
        certificate=cert,
        private_key=key,
        certificate_pem=cert.public_bytes(serialization.Encoding.PEM),
        private_key_pem=key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.TraditionalOpenSSL,
            encryption_algorithm=serialization.NoEncryption(),
        ),
    )

def write_pem(path: os.PathLike | str, data: bytes, private: bool = False) -> pathlib.Path:
    """Write ``data`` to ``path``, replacing any previous file.

    Private material is created with mode 0600 where the OS honours it.
    """
    path = pathlib.Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if private:
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "wb") as f:
            f.write(data)
    else:
        with open(path, "wb") as f:
            f.write(data)
    return path

def write_pair(issued: IssuedCertificate, name: str, out_dir: os.PathLike | str = ".") -> Tuple[pathlib.Path, pathlib.Path]:
    """Write <name>.key, then <name>.pem, under ``out_dir``.

    The key goes first so a failed write never leaves a certificate without
    its key.
    """
    out = pathlib.Path(out_dir)
    key_path = write_pem(out / f"{name}.key", issued.private_key_pem, private=True)
    cert_path = write_pem(out / f"{name}.pem", issued.certificate_pem)
    return cert_path, key_path

def trust_hint(cert_path: os.PathLike | str) -> str:
    return TRUST_HINT.format(path=cert_path)

def main(argv: Optional[List[str]] = None) -> None:
    ap = argparse.ArgumentParser(description="Create a self-signed certificate and key for local TLS")
    ap.add_argument("name", help="Base name, e.g. grpc-demo.go")
    ap.add_argument("--out", default=os.environ.get("CERTGEN_OUT", "."), help="Output directory")
    ap.add_argument("--digest", choices=sorted(DIGESTS), default=os.environ.get("CERTGEN_DIGEST", DEFAULT_DIGEST),
                    help="Signature digest (default: sha256)")
    ap.add_argument("--days", type=int, default=VALID_DAYS, help="Validity days")
    args = ap.parse_args(argv)

    try:
        issued = issue(args.name, digest=args.digest, days=args.days, on_step=print)
        cert_path, _ = write_pair(issued, args.name, args.out)
    except (ValueError, OSError, UnsupportedAlgorithm) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)

    print(trust_hint(cert_path))

if __name__ == "__main__":
    main()
