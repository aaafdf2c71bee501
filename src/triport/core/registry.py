"""
Operation Registry — the one piece of shared mutable state

Holds operations by unique name, in registration order, plus:
  version    monotonic counter, bumped by signal_changed()
  etag       cached content fingerprint of (version, ordered operations)
  listeners  change callbacks, notified by signal_changed()
  enricher   optional per-request projection applied by list_enriched()

Mutations are expected at startup or reconfiguration. They hold a lock;
reads work on snapshots and take none.
"""

import hashlib
import itertools
import threading
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from triport.core.errors import ConfigurationError
from triport.core.operation import Operation
from triport.logger import get_logger

log = get_logger("registry")


@dataclass(frozen=True)
class ListingContext:
    """Who is asking for the operation list."""

    transport: str
    session_id: Optional[str] = None


Enricher = Callable[[List[Operation], ListingContext], List[Operation]]
Listener = Callable[[], None]


class OperationRegistry:
    """In-memory registry of operations."""

    def __init__(self):
        self._operations: Dict[str, Operation] = {}
        self._listeners: Dict[int, Listener] = {}
        self._tokens = itertools.count()
        self._enricher: Optional[Enricher] = None
        self._version = 0
        self._etag: Optional[str] = None
        self._lock = threading.Lock()

    # -- registration --

    def register(self, operation: Operation) -> Operation:
        """Add an operation; a name collision raises and changes nothing."""
        if not isinstance(operation, Operation):
            raise ConfigurationError(
                "Only Operation instances can be registered (use make_operation)",
                {"received": type(operation).__name__},
            )
        with self._lock:
            if operation.name in self._operations:
                raise ConfigurationError(
                    f'Endpoint with name "{operation.name}" already registered',
                    {"endpointName": operation.name},
                )
            self._operations[operation.name] = operation
            self._etag = None
        log.info(f"Registered operation {operation.name}")
        return operation

    # -- lookup --

    def get(self, name: str) -> Optional[Operation]:
        return self._operations.get(name)

    def list(self) -> List[Operation]:
        """All operations in registration order. A fresh list each call."""
        return list(self._operations.values())

    def names(self) -> List[str]:
        return list(self._operations)

    def __len__(self) -> int:
        return len(self._operations)

    def __contains__(self, name: object) -> bool:
        return name in self._operations

    # -- change signalling --

    def signal_changed(self):
        """
        Bump the version, drop the cached etag and notify every listener once,
        in subscription order.

        A listener that raises is logged and skipped; the others still run.
        """
        with self._lock:
            self._version += 1
            self._etag = None
            listeners = list(self._listeners.values())

        log.info(f"Operation list changed (version={self._version}, listeners={len(listeners)})")
        for listener in listeners:
            try:
                listener()
            except Exception as exc:
                log.error(f"Change listener {listener!r} failed: {exc}", exc_info=True)

    def on_changed(self, listener: Listener) -> Callable[[], None]:
        """Subscribe to signal_changed(). Returns an idempotent unsubscribe function."""
        if not callable(listener):
            raise ConfigurationError("Change listener must be callable")
        with self._lock:
            token = next(self._tokens)
            self._listeners[token] = listener

        def unsubscribe():
            with self._lock:
                self._listeners.pop(token, None)

        return unsubscribe

    # -- enrichment --

    def set_enricher(self, enricher: Optional[Enricher]):
        """Replace the active enricher; None clears it."""
        if enricher is not None and not callable(enricher):
            raise ConfigurationError("Enricher must be callable or None")
        with self._lock:
            self._enricher = enricher

    def list_enriched(self, context: ListingContext) -> List[Operation]:
        snapshot = self.list()
        enricher = self._enricher
        if enricher is None:
            return snapshot
        return list(enricher(snapshot, context))

    # -- versioning --

    @property
    def version(self) -> int:
        return self._version

    @property
    def etag(self) -> str:
        etag = self._etag
        if etag is None:
            with self._lock:
                if self._etag is None:
                    self._etag = self._compute_etag()
                etag = self._etag
        return etag

    def _compute_etag(self) -> str:
        parts = [
            f"{op.name}:{op.summary or ''}:{op.description or ''}"
            for op in self._operations.values()
        ]
        payload = f"v{self._version}:{'|'.join(parts)}"
        digest = hashlib.sha256(payload.encode("utf-8")).hexdigest()[:16]
        return f'"{digest}"'
