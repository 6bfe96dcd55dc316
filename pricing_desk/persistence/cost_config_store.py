"""
Cost Config Store — loads/saves the per-plan cost tables.

Company-level setting: costs are configured by the pricing admin and
cached. Falls back to the standard cost table when nothing has been
saved yet (first run).
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from pricing_desk.models.enums import PlanType
from pricing_desk.models.schemas import CostConfig
from pricing_desk.persistence.mongo_client import MongoClient

logger = logging.getLogger(__name__)


class CostConfigStore:
    """
    One CostConfig per plan type. Read from MongoDB (collection
    `cost_config`) when connected, otherwise kept in memory.
    Cached after first load; saving invalidates the cache.
    """

    def __init__(self, mongo: Optional[MongoClient] = None):
        self._mongo = mongo or MongoClient()
        self._cache: dict[PlanType, CostConfig] = {}
        self._memory_store: dict[PlanType, dict[str, Any]] = {}

    def _collection(self) -> Any:
        db = self._mongo.get_database()
        return None if db is None else db.cost_config

    def get_cost_config(self, plan_type: PlanType = PlanType.FULL) -> CostConfig:
        if plan_type in self._cache:
            return self._cache[plan_type]

        collection = self._collection()
        if collection is None:
            doc = self._memory_store.get(plan_type)
        else:
            found = collection.find_one({"plan_type": plan_type.value})
            doc = found.get("config") if found else None

        config = CostConfig(**doc) if doc else CostConfig()
        self._cache[plan_type] = config
        return config

    def update_cost_config(
        self,
        plan_type: PlanType,
        values: dict[str, Any],
        updated_by: str,
    ) -> CostConfig:
        """Admin: replace the cost table for a plan. Validates before saving."""
        stamped = {
            **values,
            "last_updated": datetime.now(timezone.utc),
            "updated_by": updated_by,
        }
        config = CostConfig(**stamped)
        doc = config.model_dump(mode="json")

        collection = self._collection()
        if collection is None:
            self._memory_store[plan_type] = doc
        else:
            collection.update_one(
                {"plan_type": plan_type.value},
                {"$set": {"plan_type": plan_type.value, "config": doc}},
                upsert=True,
            )

        # Invalidate cache
        self._cache.pop(plan_type, None)
        logger.info(f"Updated {plan_type.value} cost config (by {updated_by})")
        return config
