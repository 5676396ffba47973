# tests/test_ports.py
import pytest

from net_toolkit.ports import (
    COMMON_SERVICES,
    EXTRA_PORTS,
    common_port_ranges,
    parse_port_spec,
    service_for_port,
)


def test_range_selector():
    ports = parse_port_spec("1-1024")
    assert ports == list(range(1, 1025))
    assert len(ports) == 1024


def test_list_selector_keeps_input_order():
    assert parse_port_spec("80,443,8080") == [80, 443, 8080]
    assert parse_port_spec("8080, 22 ,80") == [8080, 22, 80]


def test_list_selector_drops_invalid_entries():
    assert parse_port_spec("80,99999") == [80]
    assert parse_port_spec("0,abc") == []
    assert parse_port_spec("22,abc,0,65535") == [22, 65535]


def test_list_selector_dedupes():
    assert parse_port_spec("22,80,22") == [22, 80]


@pytest.mark.parametrize("selector", ["", "all", " ALL ", None])
def test_default_selector(selector):
    ports = parse_port_spec(selector)
    assert ports == sorted(ports)
    assert set(COMMON_SERVICES) <= set(ports)
    assert set(EXTRA_PORTS) <= set(ports)
    assert len(ports) == len(set(ports))
    assert parse_port_spec(selector) == ports


@pytest.mark.parametrize("selector", ["100-1", "0-10", "1-65536", "a-b", "1-2-3", "5-"])
def test_invalid_ranges_yield_nothing(selector):
    assert parse_port_spec(selector) == []


def test_single_port():
    assert parse_port_spec("443") == [443]
    assert parse_port_spec("65536") == []
    assert parse_port_spec("http") == []


def test_service_table():
    assert service_for_port(22) == "SSH"
    assert service_for_port(6379) == "Redis"
    assert service_for_port(31337) == "Unknown"
    with pytest.raises(TypeError):
        COMMON_SERVICES[22] = "changed"


def test_common_port_ranges():
    assert common_port_ranges() == ["1-1024", "1025-49151", "49152-65535"]
    assert len(parse_port_spec(common_port_ranges()[0])) == 1024
