"""Services — PricingDeskService."""

from pricing_desk.services.desk_service import PricingDeskService

__all__ = ["PricingDeskService"]
