"""Shared fixtures.

DNS resolution inside the URL Safety Guard is replaced by a fake resolver so
no test touches the network.  Unknown hosts resolve to a public address;
tests register private or failing hosts on the ``dns`` fixture.
"""

from __future__ import annotations

import socket

import pytest

PUBLIC_IP = "93.184.216.34"


class FakeResolver:
    def __init__(self) -> None:
        self.records: dict[str, list[str]] = {}
        self.failing: set[str] = set()
        self.calls: list[str] = []

    def __call__(self, host, port, *args, **kwargs):
        self.calls.append(host)
        if host in self.failing:
            raise socket.gaierror(socket.EAI_NONAME, "Name or service not known")
        addresses = self.records.get(host, [PUBLIC_IP])
        infos = []
        for address in addresses:
            family = socket.AF_INET6 if ":" in address else socket.AF_INET
            sockaddr = (address, port or 0, 0, 0) if family == socket.AF_INET6 else (address, port or 0)
            infos.append((family, socket.SOCK_STREAM, socket.IPPROTO_TCP, "", sockaddr))
        return infos


@pytest.fixture(autouse=True)
def dns(monkeypatch) -> FakeResolver:
    resolver = FakeResolver()
    monkeypatch.setattr("speedreader.scraper.guard.socket.getaddrinfo", resolver)
    return resolver
