from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple, Type

from google.api_core import exceptions as gexc
from google.auth import exceptions as auth_exc
from google.cloud import firestore, storage
from google.cloud.firestore import Client
from google.cloud.firestore_v1.base_query import FieldFilter

from storage.firestore_client import get_firestore_client
from storage.gcs_client import get_gcs_client, upload_bytes

log = logging.getLogger("primoboost.storage.gateway")

# (field, op, value) with Firestore operators: "==", ">=", "<=", ...
Filter = Tuple[str, str, Any]


class GatewayError(Exception):
    def __init__(self, message: str, collection: str = "", op: str = ""):
        super().__init__(message)
        self.collection = collection
        self.op = op


class ConnectivityError(GatewayError):
    """Store unreachable, credentials missing, or the call itself errored."""


class GatewayTimeout(ConnectivityError):
    pass


class RowNotFound(GatewayError):
    pass


class RelationNotFound(GatewayError):
    """Backing database / collection is missing (schema not provisioned)."""


class GatewayValidationError(GatewayError):
    """Payload rejected by the store."""


class FirestoreGateway:
    """
    Uniform access to the document store + blob storage.

    Single attempt per call, no caching. Every failure leaves this class as one
    of the GatewayError subclasses above; callers decide whether to absorb it.
    """

    def __init__(self, db: Optional[Client] = None, gcs: Optional[storage.Client] = None):
        self._db = db
        self._gcs = gcs

    @property
    def db(self) -> Client:
        if self._db is None:
            with self._translate("connect", ""):
                self._db = get_firestore_client()
        return self._db

    @contextmanager
    def _translate(self, op: str, collection: str, missing: Type[GatewayError] = RowNotFound) -> Iterator[None]:
        try:
            yield
        except GatewayError:
            raise
        except gexc.NotFound as e:
            raise missing(str(e), collection=collection, op=op) from e
        except gexc.DeadlineExceeded as e:
            self._log_failure(op, collection, e)
            raise GatewayTimeout(str(e), collection=collection, op=op) from e
        except (gexc.InvalidArgument, gexc.FailedPrecondition, gexc.AlreadyExists, ValueError, TypeError) as e:
            self._log_failure(op, collection, e)
            raise GatewayValidationError(str(e), collection=collection, op=op) from e
        except (gexc.GoogleAPICallError, gexc.RetryError, auth_exc.GoogleAuthError, OSError) as e:
            self._log_failure(op, collection, e)
            raise ConnectivityError(str(e), collection=collection, op=op) from e

    @staticmethod
    def _log_failure(op: str, collection: str, e: Exception) -> None:
        log.warning(
            "gateway_call_failed",
            extra={"extra": {"op": op, "collection": collection, "error_type": type(e).__name__, "error_message": str(e)}},
        )

    @staticmethod
    def _row(snap) -> Dict[str, Any]:
        d = snap.to_dict() or {}
        d["id"] = snap.id
        return d

    # -------- Rows --------
    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        with self._translate("query", collection, missing=RelationNotFound):
            q = self.db.collection(collection)
            for field, op, value in filters:
                q = q.where(filter=FieldFilter(field, op, value))
            if order_by:
                direction = firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
                q = q.order_by(order_by, direction=direction)
            if limit:
                q = q.limit(limit)
            return [self._row(snap) for snap in q.stream()]

    def get(self, collection: str, row_id: str) -> Dict[str, Any]:
        with self._translate("get", collection):
            snap = self.db.collection(collection).document(row_id).get()
        if not snap.exists:
            raise RowNotFound(f"{collection}/{row_id} not found", collection=collection, op="get")
        return self._row(snap)

    def insert(self, collection: str, payload: Dict[str, Any], row_id: Optional[str] = None) -> Dict[str, Any]:
        with self._translate("insert", collection):
            col = self.db.collection(collection)
            ref = col.document(row_id) if row_id else col.document()
            ref.create(payload)
        return {**payload, "id": ref.id}

    def update(self, collection: str, row_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        with self._translate("update", collection):
            ref = self.db.collection(collection).document(row_id)
            ref.update(payload)
        return self.get(collection, row_id)

    def upsert(self, collection: str, row_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        with self._translate("upsert", collection):
            self.db.collection(collection).document(row_id).set(payload, merge=True)
        return self.get(collection, row_id)

    def delete(self, collection: str, row_id: str) -> None:
        # Deleting a missing document is a no-op in Firestore.
        with self._translate("delete", collection):
            self.db.collection(collection).document(row_id).delete()

    def count(self, collection: str) -> int:
        with self._translate("count", collection, missing=RelationNotFound):
            results = self.db.collection(collection).count().get()
        return int(results[0][0].value) if results else 0

    # -------- Blobs --------
    def put_blob(self, bucket: str, path: str, content: bytes, content_type: str = "application/octet-stream") -> str:
        with self._translate("put_blob", bucket, missing=RelationNotFound):
            client = self._gcs or get_gcs_client()
            return upload_bytes(bucket, path, content, content_type=content_type, client=client)

    # -------- Health --------
    def ping(self, timeout_s: float = 0.20) -> Dict[str, Any]:
        """Read-only, bounded-time connectivity probe. Never raises."""
        t0 = time.time()
        try:
            with self._translate("ping", "system"):
                self.db.collection("system").document("healthz").get(timeout=timeout_s)
        except GatewayError as e:
            return {"ok": False, "error_type": type(e).__name__, "message": str(e)}
        return {"ok": True, "latency_ms": int((time.time() - t0) * 1000)}
