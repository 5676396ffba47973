# tests/test_listening.py
from types import SimpleNamespace
from unittest.mock import MagicMock

import psutil
import pytest

from net_toolkit.errors import IntrospectionError
from net_toolkit.listening import (
    is_port_listening,
    list_listening_ports,
    listening_port_count,
    process_for_port,
)


def conn(ip, port, status, pid):
    return SimpleNamespace(laddr=SimpleNamespace(ip=ip, port=port), raddr=(), status=status, pid=pid)


SAMPLE = [
    conn("0.0.0.0", 22, psutil.CONN_LISTEN, 101),
    conn("127.0.0.1", 5432, psutil.CONN_LISTEN, 202),
    conn("192.168.1.5", 51514, psutil.CONN_ESTABLISHED, 101),
    conn("::", 80, psutil.CONN_LISTEN, None),
]


@pytest.fixture
def fake_psutil(mocker):
    mocker.patch("net_toolkit.listening.psutil.net_connections", return_value=SAMPLE)

    def make_process(pid):
        if pid == 202:
            raise psutil.NoSuchProcess(pid)
        proc = MagicMock()
        proc.name.return_value = {101: "sshd"}.get(pid, "?")
        return proc

    return mocker.patch("net_toolkit.listening.psutil.Process", side_effect=make_process)


def test_list_listening_ports_filters_listen_state(fake_psutil):
    ports = list_listening_ports()
    assert [(p.address, p.port) for p in ports] == [("0.0.0.0", 22), ("127.0.0.1", 5432), ("::", 80)]
    assert all(p.state == psutil.CONN_LISTEN for p in ports)


def test_process_names_resolved_or_unknown(fake_psutil):
    by_port = {p.port: p for p in list_listening_ports()}
    assert by_port[22].process_name == "sshd"
    assert by_port[22].pid == 101
    assert by_port[5432].process_name == "Unknown"   # process exited
    assert by_port[80].process_name == "Unknown"     # pid hidden
    assert by_port[80].pid is None


def test_helpers(fake_psutil):
    assert listening_port_count() == 3
    assert is_port_listening(5432) is True
    assert is_port_listening(51514) is False
    assert process_for_port(22) == "sshd"
    assert process_for_port(8080) is None


def test_access_denied_raises(mocker):
    mocker.patch("net_toolkit.listening.psutil.net_connections", side_effect=psutil.AccessDenied())
    with pytest.raises(IntrospectionError):
        list_listening_ports()


def test_no_caching_between_calls(mocker):
    net_connections = mocker.patch("net_toolkit.listening.psutil.net_connections", return_value=[])
    list_listening_ports()
    list_listening_ports()
    assert net_connections.call_count == 2
