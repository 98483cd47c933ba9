"""Resolve the television's IP address from the host's ARP table."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import re
from typing import Optional, Sequence

LOGGER = logging.getLogger(__name__)

# Matches both BSD ("? (10.0.0.5) at 3c:f0:83:9e:6a:2c on en0") and Linux
# ("? (10.0.0.5) at 3c:f0:83:9e:6a:2c [ether] on eth0") output.
NEIGHBOR_PATTERN = re.compile(r"\(([^)]+)\) at ([0-9A-Fa-f:]+)")

DEFAULT_ARP_COMMAND = ("arp", "-an")


def normalize_mac(mac: str) -> Optional[str]:
    """Return ``mac`` as six lower-case, zero-padded octets, or None if malformed.

    BSD ``arp`` drops leading zeros (``0:1b:...``), so a plain string compare
    would miss some addresses.
    """

    parts = mac.strip().split(":")
    if len(parts) != 6:
        return None
    try:
        octets = [int(part, 16) for part in parts]
    except ValueError:
        return None
    if any(not 0 <= octet <= 0xFF for octet in octets):
        return None
    return ":".join(f"{octet:02x}" for octet in octets)


def find_address(table: str, mac: str) -> Optional[str]:
    """Return the IP mapped to ``mac`` in ``arp -an`` output, if any."""

    target = normalize_mac(mac)
    if target is None:
        return None

    for line in table.splitlines():
        match = NEIGHBOR_PATTERN.search(line)
        if match is None:
            continue
        if normalize_mac(match.group(2)) == target:
            return match.group(1)
    return None


class ArpAddressResolver:
    """Looks up a fixed MAC address in the neighbour table on demand."""

    def __init__(
        self,
        mac_address: str,
        *,
        command: Sequence[str] = DEFAULT_ARP_COMMAND,
        timeout: float = 5.0,
    ) -> None:
        self.mac_address = mac_address
        self._command = tuple(command)
        self._timeout = timeout

    async def resolve(self) -> Optional[str]:
        table = await self._read_table()
        if table is None:
            return None

        address = find_address(table, self.mac_address)
        if address is None:
            LOGGER.debug("No neighbour entry for %s", self.mac_address)
        return address

    async def _read_table(self) -> Optional[str]:
        try:
            proc = await asyncio.create_subprocess_exec(
                *self._command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except OSError as exc:
            LOGGER.debug("Unable to run %s: %s", self._command[0], exc)
            return None

        try:
            async with asyncio.timeout(self._timeout):
                stdout, _ = await proc.communicate()
        except asyncio.TimeoutError:
            LOGGER.warning(
                "%s timed out after %.1fs", " ".join(self._command), self._timeout
            )
            with contextlib.suppress(ProcessLookupError):
                proc.kill()
            await proc.wait()
            return None

        if proc.returncode != 0:
            LOGGER.debug("%s exited with status %s", self._command[0], proc.returncode)
            return None

        return stdout.decode("utf-8", errors="replace")
