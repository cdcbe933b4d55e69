"""
Sync engine for plumnote.

Push-pull replication between two installations. One exchange:

    initiator                         responder
    collect-out, save
    POST /sync  [dirty notes]  --->   merge-in, save
                                      collect-out, save
                <---  [dirty notes]
    merge-in, save

Merge-in is last-writer-wins by id. A note dirty on the initiator resolves
to the initiator's version; a note dirty only on the responder resolves to
the responder's version.
"""

import json
import logging
from dataclasses import dataclass

import httpx
from pydantic import ValidationError

from plumnote.errors import InvalidTransfer, NotConfigured, SyncUnreachable
from plumnote.models import BATCH_ADAPTER, Note, Notes, TransferNote
from plumnote.store import Store

logger = logging.getLogger(__name__)

SYNC_PATH = "/sync"


def collect_out(notes: Notes) -> list[TransferNote]:
    """Extract every dirty note for transfer and mark it synced."""
    batch = []
    for note_id in sorted(notes):
        note = notes[note_id]
        if not note.synced:
            batch.append(note.to_transfer())
            notes[note_id] = note.model_copy(update={"synced": True})
    return batch


def merge_in(notes: Notes, batch: list[TransferNote]) -> int:
    """Overwrite or insert every transferred note as synced. Returns the count."""
    for incoming in batch:
        notes[incoming.id] = Note.from_transfer(incoming, synced=True)
    return len(batch)


def encode_batch(batch: list[TransferNote]) -> bytes:
    return json.dumps([note.dump() for note in batch], indent=2, ensure_ascii=False).encode("utf-8")


def decode_batch(payload: bytes) -> list[TransferNote]:
    """Decode a JSON array of transfer notes."""
    try:
        return BATCH_ADAPTER.validate_json(payload)
    except ValidationError as e:
        raise InvalidTransfer(f"malformed sync payload: {e}") from e


def check_payload_size(content_length: int | None, max_payload_bytes: int) -> None:
    """Reject payloads of unknown or unreasonable declared length."""
    if content_length is None:
        raise InvalidTransfer("missing Content-Length")
    if content_length < 0:
        raise InvalidTransfer(f"invalid Content-Length: {content_length}")
    if content_length > max_payload_bytes:
        raise InvalidTransfer(
            f"payload of {content_length} bytes exceeds limit of {max_payload_bytes}"
        )


@dataclass(frozen=True)
class SyncResult:
    """Counts for one exchange, from the caller's side."""

    sent: int
    received: int


class SyncEngine:
    """Responder role: one exchange per inbound payload."""

    def __init__(self, store: Store, max_payload_bytes: int):
        self.store = store
        self.max_payload_bytes = max_payload_bytes

    def respond(self, payload: bytes) -> bytes:
        """
        Merge an inbound batch and return the local dirty batch.

        The whole exchange holds the store lock, and the merged collection is
        written only after it is fully built in memory.
        """
        if len(payload) > self.max_payload_bytes:
            raise InvalidTransfer(
                f"payload of {len(payload)} bytes exceeds limit of {self.max_payload_bytes}"
            )
        inbound = decode_batch(payload)

        with self.store.locked():
            notes = self.store.load()
            merge_in(notes, inbound)
            self.store.save(notes)

            outbound = collect_out(notes)
            self.store.save(notes)

        logger.info(f"Exchange: received {len(inbound)} notes, sent {len(outbound)}")
        return encode_batch(outbound)


def sync_url(address: str) -> str:
    """Build the endpoint URL from host:port or a base URL."""
    address = address.strip()
    if not address:
        raise NotConfigured("empty sync address")
    if "://" not in address:
        address = f"http://{address}"
    return address.rstrip("/") + SYNC_PATH


class SyncClient:
    """Initiator role: push local dirty notes, pull the peer's."""

    def __init__(
        self,
        store: Store,
        address: str,
        timeout: float = 30.0,
        client: httpx.Client | None = None,
    ):
        self.store = store
        self.url = sync_url(address)
        self.timeout = timeout
        self._client = client

    def _post(self, payload: bytes) -> httpx.Response:
        headers = {"Content-Type": "application/json"}
        if self._client is not None:
            return self._client.post(self.url, content=payload, headers=headers)
        with httpx.Client(timeout=self.timeout) as client:
            return client.post(self.url, content=payload, headers=headers)

    def sync(self) -> SyncResult:
        """
        Run one full exchange with the peer.

        If the peer cannot be reached the local notes stay marked synced,
        exactly as after collect-out.
        """
        with self.store.transaction() as notes:
            outbound = collect_out(notes)

        try:
            response = self._post(encode_batch(outbound))
        except httpx.HTTPError as e:
            raise SyncUnreachable(f"cannot reach {self.url}: {e}") from e

        if response.status_code != 200:
            raise SyncUnreachable(
                f"{self.url} answered {response.status_code}: {response.text.strip()}"
            )

        inbound = decode_batch(response.content)

        with self.store.transaction() as notes:
            merge_in(notes, inbound)

        logger.info(f"Synced with {self.url}: sent {len(outbound)}, received {len(inbound)}")
        return SyncResult(sent=len(outbound), received=len(inbound))
