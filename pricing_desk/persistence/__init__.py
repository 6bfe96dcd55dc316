"""Persistence — MongoClient, DemandRepository, CostConfigStore."""

from pricing_desk.persistence.mongo_client import MongoClient
from pricing_desk.persistence.demand_repository import DemandRepository
from pricing_desk.persistence.cost_config_store import CostConfigStore

__all__ = ["MongoClient", "DemandRepository", "CostConfigStore"]
