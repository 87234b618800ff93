from __future__ import annotations
import json
from typing import Any, Dict

MSG_HELLO_REPLY = "HELLO_REPLY"
MSG_ERROR = "ERROR"

def encode(msg: Dict[str, Any]) -> bytes:
    return json.dumps(msg, separators=(",", ":"), ensure_ascii=False).encode("utf-8")

def decode(raw: bytes) -> Dict[str, Any]:
    return json.loads(raw.decode("utf-8"))

def hello_reply(name: str, server_name: str) -> Dict[str, Any]:
    return {"type": MSG_HELLO_REPLY, "message": f"Hello {name}", "server": server_name}

def error(reason: str) -> Dict[str, Any]:
    return {"type": MSG_ERROR, "reason": reason}
