"""Pricing desk — rate negotiation and margin engine for the Mesa de Negociação."""

__version__ = "0.1.0"
