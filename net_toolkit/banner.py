from __future__ import annotations

import re
import socket
from typing import Optional, Tuple

from . import config


_CONTROL = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

# First match wins, checked against the lower-cased banner.
_KEYWORDS: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("ssh",), "SSH"),
    (("ftp",), "FTP"),
    (("http", "html"), "HTTP"),
    (("smtp", "mail"), "SMTP"),
    (("mysql",), "MySQL"),
    (("redis",), "Redis"),
)


def _clean_text(s: str, max_len: int = config.VERSION_MAX_LEN) -> str:
    s = _CONTROL.sub("", s)
    s = s.strip()
    if len(s) > max_len:
        return s[:max_len - 3] + "..."
    return s


def _try_recv(sock: socket.socket, n: int, timeout: float) -> bytes:
    sock.settimeout(timeout)
    try:
        return sock.recv(n)
    except OSError:
        return b""


def read_banner(sock: socket.socket, timeout: float,
                n: int = config.BANNER_BUFFER_SIZE) -> Optional[str]:
    """
    Called only after connect() succeeds.
    Reads whatever the service sends unprompted within `timeout`.
    """
    data = _try_recv(sock, n=n, timeout=timeout)
    text = data.decode(errors="ignore").strip()
    return text or None


def extract_version(banner: str) -> str:
    """First line of the banner, capped at VERSION_MAX_LEN characters."""
    banner = banner.strip()
    if not banner:
        return ""
    return _clean_text(banner.splitlines()[0])


def identify_service(banner: str, current: str) -> str:
    lowered = banner.lower()
    for keywords, label in _KEYWORDS:
        if any(k in lowered for k in keywords):
            return label
    return current


def grab_banner(sock: socket.socket, timeout: float,
                service: str) -> Tuple[str, Optional[str], Optional[str]]:
    """
    Returns (service, banner, version).
    service falls back to the caller's port-based label when nothing is read
    or no keyword matches.
    """
    banner = read_banner(sock, timeout)
    if not banner:
        return service, None, None
    version = extract_version(banner) or None
    return identify_service(banner, service), banner, version
