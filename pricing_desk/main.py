"""
Pricing Desk — Main Entry Point

Run a sample desk evaluation (CLI):
    python -m pricing_desk
    python -m pricing_desk 0.5          # with a target spread

Run as an API server:
    python -m pricing_desk --serve
    # or: uvicorn pricing_desk.api:app --reload --port 8000

Or import and run programmatically:
    from pricing_desk.main import run
    session = run(target_spread=0.85)
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from typing import Optional

from pricing_desk.config import get_settings
from pricing_desk.models.negotiation import NegotiationRecord
from pricing_desk.models.schemas import CompetitorRates, NegotiationContext
from pricing_desk.orchestration.session import NegotiationSession
from pricing_desk.services.desk_service import PricingDeskService
from pricing_desk.utils.logger import setup_logging


def sample_request() -> NegotiationRecord:
    """A typical Full-plan escalation: mid-size workshop quoted by Stone."""
    return NegotiationRecord(
        client_name="Auto Center Exemplo",
        client_id="12.345.678/0001-90",
        requester="Vendedor Demo",
        description="Venda Taxa Full - cliente com proposta da concorrência",
        context=NegotiationContext(potential_revenue=35000.0, min_agreed=30000.0, competitor="Stone"),
        competitor_rates=CompetitorRates(debit=1.81, credit1x=3.73, credit12x=17.74),
    )


def run(target_spread: Optional[float] = None) -> NegotiationSession:
    """Escalate the sample request, open it on the desk and print the analysis."""
    setup_logging(get_settings().log_level)
    logger = logging.getLogger(__name__)

    logger.info("=" * 60)
    logger.info("  MESA DE NEGOCIAÇÃO — PRICING DESK")
    logger.info(f"  Started: {datetime.now(timezone.utc).isoformat()}")
    logger.info("=" * 60)

    service = PricingDeskService()
    record = service.create_request(sample_request())
    session = service.open(record.id)
    if target_spread is not None:
        session = service.change_spread(record.id, target_spread)

    _print_summary(service, session)
    return session


def _print_summary(service: PricingDeskService, session: NegotiationSession) -> None:
    """Print a human-readable summary of the desk analysis."""
    logger = logging.getLogger(__name__)
    record = session.record
    competitor = session.comparison.competitor
    proposed = session.comparison.proposed

    logger.info("")
    logger.info("-" * 60)
    logger.info(f"  Client:         {record.client_name} ({record.client_id or 'N/A'})")
    logger.info(f"  Plan:           {session.plan_type.value}")
    logger.info(f"  TPV:            R$ {session.tpv:,.2f}")
    logger.info(f"  Target spread:  {session.target_spread:.2f}%")
    logger.info(f"  Tier:           {session.tier.value}")
    logger.info("-" * 60)
    logger.info(f"  {'Bucket':<8} {'Cost':>7} {'Conc.':>7} {'Floor':>7} {'Rate':>7}")
    for q in session.quotes:
        logger.info(f"  {q.bucket:<8} {q.cost:>7.2f} {q.competitor_estimate:>7.2f} {q.floor:>7.2f} {q.rate:>7.2f}")
    logger.info("-" * 60)
    logger.info(f"  {'':<14} {'Concorrente':>14} {'Proposta':>14}")
    logger.info(f"  {'Taxa média %':<14} {competitor.weighted_rate:>14.2f} {proposed.weighted_rate:>14.2f}")
    logger.info(f"  {'Take-rate R$':<14} {competitor.take_rate_value:>14,.2f} {proposed.take_rate_value:>14,.2f}")
    logger.info(f"  {'Spread %':<14} {competitor.spread_percent:>14.2f} {proposed.spread_percent:>14.2f}")
    logger.info(f"  {'MCF2 R$':<14} {competitor.margin_value:>14,.2f} {proposed.margin_value:>14,.2f}")
    logger.info(f"  Merchant saves R$ {session.comparison.merchant_savings:,.2f}/month")

    breaches = service.floor_breaches(record.id)
    if breaches:
        logger.info(f"  Below minimum margin: {', '.join(breaches)}")
    logger.info("-" * 60)


def serve(host: str = "0.0.0.0", port: int = 8000) -> None:
    """Start the FastAPI server."""
    import uvicorn

    setup_logging(get_settings().log_level)
    logger = logging.getLogger(__name__)
    logger.info(f"Starting API server on {host}:{port}")
    uvicorn.run("pricing_desk.api:app", host=host, port=port, reload=get_settings().debug)


if __name__ == "__main__":
    if "--serve" in sys.argv:
        serve()
    else:
        spread_arg = float(sys.argv[1]) if len(sys.argv) > 1 else None
        run(spread_arg)
