"""
Ledger - Interface to the external, eventually-consistent record store.

The ledger is keyed by (writer identity, room code). Each key holds a single
record: publish is an upsert (last write wins), never an append, which makes
retries safe.

Implementations:
- Ledger: abstract interface the replication layer talks to
- InMemoryLedger: process-local store, used by the API server and tests
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any
import asyncio
import hashlib
import logging

from ..exceptions import WriteError, ReadError
from .records import RoomState

logger = logging.getLogger(__name__)


def room_data_id(room_code: str) -> str:
    """Deterministic record id for a room."""
    return hashlib.sha256(f"room-{room_code}".encode("utf-8")).hexdigest()


class Ledger(ABC):
    """
    Abstract ledger client.

    A client may or may not hold a write credential; watchers typically
    don't. Both calls are async and may be slow or fail.
    """

    @property
    @abstractmethod
    def can_write(self) -> bool:
        """Whether publish() can succeed at all."""
        pass

    @abstractmethod
    async def publish(self, room_code: str, record: RoomState) -> str:
        """
        Replace the record for room_code under this client's identity.

        Returns an opaque write handle. Raises WriteError.
        """
        pass

    @abstractmethod
    async def fetch(self, room_code: str, host_identity: str) -> RoomState | None:
        """
        Latest record written by host_identity for room_code.

        Returns None when nothing was written yet. Raises ReadError, or
        RecordDecodeError when the stored record is malformed.
        """
        pass


@dataclass
class StoredRecord:
    writer: str
    data_id: str
    payload: dict[str, Any]
    handle: str


class InMemoryLedger(Ledger):
    """
    Process-local ledger.

    Records are stored in wire form and decoded on fetch, so readers go
    through the same decode step as against a real ledger. Clients created
    with for_identity() share one store.

    Usage:
        store = InMemoryLedger()
        host_client = store.for_identity("0xabc...")
        await host_client.publish("DIAMOND-1234", record)
        await store.fetch("DIAMOND-1234", "0xabc...")
    """

    def __init__(
        self,
        identity: str | None = None,
        records: dict[tuple[str, str], StoredRecord] | None = None,
        latency: float = 0.0,
    ):
        self.identity = identity
        self.latency = latency
        self._records = records if records is not None else {}
        self._write_count = 0

    @property
    def can_write(self) -> bool:
        return self.identity is not None

    @property
    def write_count(self) -> int:
        """Successful publishes made through this client."""
        return self._write_count

    def for_identity(self, identity: str | None) -> InMemoryLedger:
        """A client for another identity over the same store."""
        return InMemoryLedger(identity=identity, records=self._records, latency=self.latency)

    async def publish(self, room_code: str, record: RoomState) -> str:
        if not self.can_write:
            raise WriteError("No write credential")
        await self._simulate_latency()

        data_id = room_data_id(room_code)
        payload = record.encode()
        handle = hashlib.sha256(
            f"{self.identity}:{data_id}:{payload['timestamp']}:{self._write_count}".encode("utf-8")
        ).hexdigest()[:16]
        self._records[(self.identity.lower(), data_id)] = StoredRecord(
            writer=self.identity,
            data_id=data_id,
            payload=payload,
            handle=handle,
        )
        self._write_count += 1
        logger.debug("Stored record for %s under %s (handle=%s)", room_code, self.identity, handle)
        return handle

    async def fetch(self, room_code: str, host_identity: str) -> RoomState | None:
        if not host_identity:
            raise ReadError("Host identity required")
        await self._simulate_latency()

        stored = self._records.get((host_identity.lower(), room_data_id(room_code)))
        if stored is None:
            return None
        return RoomState.decode(stored.payload)

    def put_raw(self, room_code: str, writer: str, payload: Any):
        """Store an arbitrary payload, bypassing encoding."""
        data_id = room_data_id(room_code)
        self._records[(writer.lower(), data_id)] = StoredRecord(
            writer=writer,
            data_id=data_id,
            payload=payload,
            handle="raw",
        )

    async def _simulate_latency(self):
        if self.latency > 0:
            await asyncio.sleep(self.latency)
