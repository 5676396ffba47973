# tests/test_banner.py
import socket

import pytest

from net_toolkit.banner import extract_version, grab_banner, identify_service, read_banner


@pytest.fixture
def sock_pair():
    a, b = socket.socketpair()
    yield a, b
    a.close()
    b.close()


@pytest.mark.parametrize("banner,expected", [
    ("SSH-2.0-OpenSSH_8.9p1 Ubuntu-3ubuntu0.13", "SSH"),
    ("220 ProFTPD Server ready", "FTP"),
    ("HTTP/1.1 400 Bad Request", "HTTP"),
    ("<html><body>hi</body></html>", "HTTP"),
    ("220 mail.example.com ESMTP Postfix", "SMTP"),
    ("5.7.44-log mysql_native_password", "MySQL"),
    ("-ERR unknown command, redis", "Redis"),
])
def test_identify_service_keywords(banner, expected):
    assert identify_service(banner, "Unknown") == expected


def test_identify_service_falls_back_to_port_label():
    assert identify_service("+OK Dovecot ready.", "POP3") == "POP3"


def test_identify_service_first_keyword_wins():
    # "ssh" is checked before "http"
    assert identify_service("SSH-2.0 over http tunnel", "Unknown") == "SSH"


def test_extract_version_first_line():
    assert extract_version("SSH-2.0-OpenSSH_9.6\r\nextra line") == "SSH-2.0-OpenSSH_9.6"


def test_extract_version_truncates_long_lines():
    version = extract_version("X" * 80)
    assert len(version) == 60
    assert version.endswith("...")
    assert version.startswith("X" * 57)


def test_extract_version_strips_binary():
    assert extract_version("\x0a8.0.33\x00\x01abc") == "8.0.33abc"


def test_read_banner(sock_pair):
    server, client = sock_pair
    server.sendall(b"  220 smtp.example.org ESMTP\r\n")
    assert read_banner(client, timeout=1.0) == "220 smtp.example.org ESMTP"


def test_read_banner_silent_service(sock_pair):
    _server, client = sock_pair
    assert read_banner(client, timeout=0.05) is None


def test_grab_banner_refines_service(sock_pair):
    server, client = sock_pair
    server.sendall(b"SSH-2.0-OpenSSH_9.6\r\n")
    service, banner, version = grab_banner(client, 1.0, "Unknown")
    assert service == "SSH"
    assert banner == "SSH-2.0-OpenSSH_9.6"
    assert version == "SSH-2.0-OpenSSH_9.6"


def test_grab_banner_nothing_read_keeps_label(sock_pair):
    _server, client = sock_pair
    assert grab_banner(client, 0.05, "HTTP") == ("HTTP", None, None)


def test_extract_version_keeps_non_ascii_text():
    assert extract_version("220 Serveur FTP prêt\r\n") == "220 Serveur FTP prêt"
    assert extract_version("\x1b[0mcafé\x7f") == "[0mcafé"
