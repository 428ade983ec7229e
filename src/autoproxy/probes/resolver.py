"""Hostname resolution through the operating system resolver."""

from __future__ import annotations

import asyncio
import socket
from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class DnsAnswer:
    """Addresses a hostname resolved to, in resolver order without duplicates."""

    addresses: tuple[str, ...]
    canonical_name: str | None = None


class Resolver(Protocol):
    """Anything that can resolve a hostname asynchronously."""

    async def resolve(self, hostname: str) -> DnsAnswer: ...


class SystemResolver:
    """Resolve through ``getaddrinfo`` on the running event loop."""

    async def resolve(self, hostname: str) -> DnsAnswer:
        loop = asyncio.get_running_loop()
        infos = await loop.getaddrinfo(
            hostname,
            None,
            type=socket.SOCK_STREAM,
            flags=socket.AI_CANONNAME,
        )
        addresses: list[str] = []
        canonical_name: str | None = None
        for _family, _type, _proto, canonname, sockaddr in infos:
            if canonname and canonical_name is None:
                canonical_name = canonname
            address = str(sockaddr[0])
            if address not in addresses:
                addresses.append(address)
        return DnsAnswer(addresses=tuple(addresses), canonical_name=canonical_name)
