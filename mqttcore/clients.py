"""Clients known to the broker and their per-connection state."""

from __future__ import annotations

import threading
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, BinaryIO

from mqttcore.fixedheader import FixedHeader, OversizedLengthError
from mqttcore.inflight import InflightMap, InflightMessage

DEFAULT_KEEPALIVE = 10
"""Keepalive in seconds used until a client identifies itself."""

_MAX_LENGTH_BYTES = 3


class ConnectionClosedError(ConnectionError):
    """Raised when operating on a closed connection, or stored as a stop cause."""

    def __init__(self, message: str = "Connection not open") -> None:
        super().__init__(message)


@dataclass
class LWT:
    """Last will and testament of a client connection."""

    message: bytes = b""
    topic: str = ""
    qos: int = 0
    retain: bool = False


@dataclass(frozen=True)
class ClientInfo:
    """Minimal description of a client for event reporting."""

    id: str
    remote: str
    listener: str
    username: bytes = b""
    clean_session: bool = False


def _format_address(address: Any) -> str:
    if isinstance(address, tuple) and len(address) >= 2:
        host, port = address[0], address[1]
        if ":" in str(host):
            return f"[{host}]:{port}"
        return f"{host}:{port}"
    if isinstance(address, bytes):
        address = address.decode("utf-8", errors="replace")
    return str(address) if address else ""


class Client:
    """A client connection known to the broker."""

    def __init__(
        self,
        conn: Any = None,
        *,
        client_id: str = "",
        listener: str = "",
        receive_maximum: int = 0,
    ) -> None:
        self.id = client_id
        self.listener = listener
        self.username = b""
        self.auth: Any = None
        self.clean_session = False
        self.protocol_version = 4
        self.keepalive = DEFAULT_KEEPALIVE
        self.lwt = LWT()
        self.inflight = InflightMap(receive_maximum)
        self.subscriptions: dict[str, Any] = {}
        self.topic_alias: dict[int, str] = {}
        self.bytes_received = 0
        self._conn = conn
        self._lock = threading.RLock()
        self._packet_id = 0
        self._done = threading.Event()
        self._stop_lock = threading.Lock()
        self._stop_cause: BaseException | None = None
        self._refresh_deadline(self.keepalive)

    @property
    def conn(self) -> Any:
        """The underlying connection, if any."""
        return self._conn

    @property
    def done(self) -> bool:
        """True once the client has been stopped."""
        return self._done.is_set()

    def _refresh_deadline(self, keepalive: int) -> None:
        settimeout = getattr(self._conn, "settimeout", None)
        if settimeout is None:
            return
        timeout = float(keepalive + keepalive // 2) if keepalive > 0 else None
        try:
            settimeout(timeout)
        except OSError:
            pass

    def identify(self, listener: str, packet: Any, auth: Any) -> None:
        """Set identification values from a CONNECT packet."""
        self.listener = listener
        self.auth = auth
        self.id = packet.client_identifier or uuid.uuid4().hex[:20]
        self.username = packet.username
        self.clean_session = packet.clean_session
        self.keepalive = packet.keepalive
        if packet.will_flag:
            self.lwt = LWT(
                message=packet.will_message,
                topic=packet.will_topic,
                qos=packet.will_qos,
                retain=packet.will_retain,
            )
        self._refresh_deadline(self.keepalive)

    def info(self) -> ClientInfo:
        """Return an event description of the client."""
        remote = "unknown"
        getpeername = getattr(self._conn, "getpeername", None)
        if getpeername is not None:
            try:
                remote = _format_address(getpeername()) or "unknown"
            except OSError:
                remote = "unknown"
        return ClientInfo(
            id=self.id,
            remote=remote,
            listener=self.listener,
            username=self.username,
            clean_session=self.clean_session,
        )

    def next_packet_id(self) -> int:
        """Return the next packet id, wrapping from 65535 back to 1."""
        with self._lock:
            if self._packet_id in (0, 0xFFFF):
                self._packet_id = 1
            else:
                self._packet_id += 1
            return self._packet_id

    def note_subscription(self, topic_filter: str, options: Any) -> None:
        """Remember a subscription filter and its options."""
        with self._lock:
            self.subscriptions[topic_filter] = options

    def forget_subscription(self, topic_filter: str) -> None:
        """Forget a subscription filter."""
        with self._lock:
            self.subscriptions.pop(topic_filter, None)

    def stop(self, cause: BaseException | None = None) -> None:
        """Close the connection once, recording why it was stopped."""
        if self._done.is_set():
            return
        with self._stop_lock:
            if self._done.is_set():
                return
            close = getattr(self._conn, "close", None)
            if close is not None:
                try:
                    close()
                except OSError:
                    pass
            self._stop_cause = cause if cause is not None else ConnectionClosedError()
            self._done.set()

    def stop_cause(self) -> BaseException | None:
        """Return the reason the client was stopped, if any."""
        return self._stop_cause

    def read_fixed_header(self, stream: BinaryIO) -> FixedHeader:
        """Read and decode the next packet's fixed header from ``stream``."""
        first = stream.read(1)
        if not first:
            raise EOFError("no header byte available")
        header = FixedHeader().decode(first[0])

        remaining = 0
        shift = 0
        consumed = 1
        for count in range(1, _MAX_LENGTH_BYTES + 1):
            digit = stream.read(1)
            if not digit:
                raise EOFError("remaining length truncated")
            consumed += 1
            value = digit[0]
            remaining |= (value & 0x7F) << shift
            if value < 0x80:
                break
            shift += 7
            if count == _MAX_LENGTH_BYTES:
                raise OversizedLengthError("remaining length indicator too long")

        header.remaining = remaining
        with self._lock:
            self.bytes_received += consumed
        return header

    def send_inflight(
        self, handler: Callable[[Client, InflightMessage, bool], Any]
    ) -> None:
        """Hand every in-flight message to ``handler`` for resending."""
        self.inflight.walk(self, handler)


def new_client_stub(receive_maximum: int) -> Client:
    """Return a stopped client, as used when restoring persisted sessions."""
    client = Client(receive_maximum=receive_maximum)
    client._done.set()
    return client


class Clients:
    """Thread-safe registry of clients keyed on client id."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._clients: dict[str, Client] = {}

    def add(self, client: Client) -> None:
        """Register a client under its id."""
        with self._lock:
            self._clients[client.id] = client

    def get(self, client_id: str) -> Client | None:
        """Return the client with ``client_id``, or None."""
        with self._lock:
            return self._clients.get(client_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._clients)

    def __contains__(self, client_id: object) -> bool:
        with self._lock:
            return client_id in self._clients

    def delete(self, client_id: str) -> None:
        """Remove a client if present."""
        with self._lock:
            self._clients.pop(client_id, None)

    def get_by_listener(self, listener_id: str) -> list[Client]:
        """Return running clients attached to a listener."""
        with self._lock:
            return [
                client
                for client in self._clients.values()
                if client.listener == listener_id and not client.done
            ]

    def get_all(self) -> dict[str, Client]:
        """Return a snapshot of all clients."""
        with self._lock:
            return dict(self._clients)