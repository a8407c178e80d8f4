"""
Occupancy Prober — asks the game server how many players are online.

Behavioral Contract:
- One status query per call, bounded by the configured timeout
- No retries; the caller decides what a failure means
- Timeouts, connection errors and malformed responses all surface as ProbeError
"""

import asyncio

from mcstatus import JavaServer

from pdb_manager.models.occupancy import OccupancySample


class ProbeError(Exception):
    """Raised when the game server could not be queried."""
    pass


class OccupancyProber:
    """Queries a Minecraft Java Edition server through the status protocol."""

    def __init__(self, host: str, port: int, timeout: float = 10.0):
        self.host = host
        self.port = port
        self.timeout = timeout

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    async def probe(self) -> OccupancySample:
        """Run a single status query and return the player counts."""
        server = JavaServer(self.host, self.port, timeout=self.timeout)
        try:
            status = await asyncio.wait_for(
                server.async_status(tries=1), timeout=self.timeout
            )
        except asyncio.TimeoutError as exc:
            raise ProbeError(
                f"Status query to {self.address} timed out after {self.timeout}s"
            ) from exc
        except Exception as exc:
            raise ProbeError(f"Status query to {self.address} failed: {exc}") from exc

        try:
            return OccupancySample(
                online=status.players.online,
                max=status.players.max,
            )
        except (AttributeError, ValueError) as exc:
            raise ProbeError(
                f"Malformed status response from {self.address}: {exc}"
            ) from exc
