"""
Demand Repository — persistence collaborator for negotiation records.

update_demand() is the single outbound write: a full upsert of the record
guarded by an optimistic version check. Mock mode keeps deep-copied
snapshots in memory; otherwise records live in the `demands` collection.
"""

from __future__ import annotations

import logging
from copy import deepcopy
from typing import Any, Optional

from pricing_desk.models.enums import NegotiationStatus
from pricing_desk.models.errors import RecordNotFoundError, StaleRecordError
from pricing_desk.models.negotiation import NegotiationRecord
from pricing_desk.models.schemas import ClientInfo
from pricing_desk.persistence.mongo_client import MongoClient

logger = logging.getLogger(__name__)


class DemandRepository:
    """Load/save NegotiationRecords. Callers always receive fresh copies."""

    def __init__(self, mongo: Optional[MongoClient] = None):
        self._mongo = mongo or MongoClient()
        self._memory_store: dict[str, dict[str, Any]] = {}
        self._clients: dict[str, ClientInfo] = {}

    # ── Backend helpers ──────────────────────────────────

    def _collection(self, name: str) -> Any:
        db = self._mongo.get_database()
        return None if db is None else db[name]

    def _load_doc(self, record_id: str) -> Optional[dict[str, Any]]:
        demands = self._collection("demands")
        if demands is None:
            doc = self._memory_store.get(record_id)
            return deepcopy(doc) if doc is not None else None
        doc = demands.find_one({"id": record_id})
        if doc is not None:
            doc.pop("_id", None)
        return doc

    def _all_docs(self) -> list[dict[str, Any]]:
        demands = self._collection("demands")
        if demands is None:
            return [deepcopy(d) for d in self._memory_store.values()]
        docs = list(demands.find({}))
        for doc in docs:
            doc.pop("_id", None)
        return docs

    # ── Reads ────────────────────────────────────────────

    def get_demands(self, status: Optional[NegotiationStatus] = None) -> list[NegotiationRecord]:
        """All negotiation records, newest first, optionally filtered by status."""
        records = [NegotiationRecord(**doc) for doc in self._all_docs()]
        if status is not None:
            records = [r for r in records if r.status == status]
        return sorted(records, key=lambda r: r.date, reverse=True)

    def get_demand(self, record_id: str) -> NegotiationRecord:
        doc = self._load_doc(record_id)
        if doc is None:
            raise RecordNotFoundError(f"Negotiation {record_id} not found")
        return NegotiationRecord(**doc)

    def get_clients(self) -> list[ClientInfo]:
        clients = self._collection("clients")
        if clients is None:
            return list(self._clients.values())
        return [ClientInfo(id=d["id"], name=d["name"]) for d in clients.find({})]

    # ── Writes ───────────────────────────────────────────

    def add_demand(self, record: NegotiationRecord) -> NegotiationRecord:
        """Insert a new record (sales rep escalation). Fails if the id exists."""
        if self._load_doc(record.id) is not None:
            raise ValueError(f"Negotiation {record.id} already exists")
        return self.update_demand(record)

    def update_demand(self, record: NegotiationRecord) -> NegotiationRecord:
        """
        Upsert the full record. The record's version must match the stored
        one; on success the version is bumped on both sides.
        """
        expected = record.version
        new_version = expected + 1
        doc = record.model_dump(mode="json")
        doc["version"] = new_version

        demands = self._collection("demands")
        if demands is None:
            stored = self._memory_store.get(record.id)
            if stored is not None and stored["version"] != expected:
                raise StaleRecordError(record.id, expected, stored["version"])
            self._memory_store[record.id] = deepcopy(doc)
        else:
            result = demands.replace_one({"id": record.id, "version": expected}, doc)
            if result.matched_count == 0:
                existing = demands.find_one({"id": record.id}, {"version": 1})
                if existing is not None:
                    raise StaleRecordError(record.id, expected, existing.get("version", 0))
                demands.insert_one(deepcopy(doc))

        record.version = new_version
        logger.info(f"Saved {record.id} v{new_version} ({record.status.value})")
        return record

    def add_client(self, client: ClientInfo) -> None:
        clients = self._collection("clients")
        if clients is None:
            self._clients[client.id] = client
            return
        clients.update_one({"id": client.id}, {"$set": client.model_dump()}, upsert=True)
