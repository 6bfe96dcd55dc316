"""
Reference Rate Ranges — published list-price tables by TPV band.

The desk shows the list card for the merchant's band next to the
negotiated proposal, so the operator can see how far the deal moves
away from standard pricing.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from pricing_desk.models.enums import PlanType


class TPVRange(BaseModel):
    min: float
    max: float
    label: str


class RangeRow(BaseModel):
    label: str
    values: list[float]


class RangeTable(BaseModel):
    headers: list[str]
    ranges: list[TPVRange]
    rows: list[RangeRow]


FULL_RANGE_TABLE = RangeTable(
    headers=["Parcelas", "5-10 k", "10-20 k", "20-50 k", "50-100 k", "100-150 k", ">150k"],
    ranges=[
        TPVRange(min=5000, max=10000, label="5-10k"),
        TPVRange(min=10001, max=20000, label="10-20k"),
        TPVRange(min=20001, max=50000, label="20-50k"),
        TPVRange(min=50001, max=100000, label="50-100k"),
        TPVRange(min=100001, max=150000, label="100-150k"),
        TPVRange(min=150001, max=999999999, label=">150k"),
    ],
    rows=[
        RangeRow(label="Débito", values=[2.01, 1.95, 1.81, 1.26, 1.16, 1.06]),
        RangeRow(label="1x", values=[5.08, 4.38, 3.73, 3.17, 3.09, 3.01]),
        RangeRow(label="2x", values=[6.39, 5.42, 4.78, 4.62, 4.53, 4.45]),
        RangeRow(label="3x", values=[8.52, 7.37, 6.07, 5.83, 5.75, 5.67]),
        RangeRow(label="4x", values=[9.80, 8.83, 7.29, 7.05, 6.97, 6.89]),
        RangeRow(label="5x", values=[11.07, 10.10, 8.75, 8.26, 8.18, 8.10]),
        RangeRow(label="6x", values=[11.72, 10.75, 9.80, 9.39, 9.31, 9.23]),
        RangeRow(label="7x", values=[12.22, 11.25, 10.85, 10.85, 10.77, 10.69]),
        RangeRow(label="8x", values=[13.39, 13.12, 12.72, 12.31, 12.23, 12.15]),
        RangeRow(label="9x", values=[14.58, 14.57, 13.77, 13.36, 13.28, 13.20]),
        RangeRow(label="10x", values=[15.77, 15.63, 14.83, 14.83, 14.75, 14.67]),
        RangeRow(label="11x", values=[16.96, 16.69, 16.69, 15.88, 15.80, 15.72]),
        RangeRow(label="12x", values=[18.14, 17.74, 17.74, 16.93, 16.85, 16.77]),
        RangeRow(label="13x", values=[19.51, 18.84, 18.84, 18.43, 18.35, 18.27]),
        RangeRow(label="14x", values=[20.92, 19.96, 19.96, 19.55, 19.47, 19.39]),
        RangeRow(label="15x", values=[22.34, 21.92, 21.11, 21.11, 21.03, 20.95]),
        RangeRow(label="16x", values=[23.79, 23.08, 22.27, 22.27, 22.19, 22.11]),
        RangeRow(label="17x", values=[25.25, 24.27, 24.27, 23.87, 23.79, 23.70]),
        RangeRow(label="18x", values=[26.61, 26.28, 25.47, 24.66, 24.58, 24.50]),
    ],
)

SIMPLES_RANGE_TABLE = RangeTable(
    headers=["Parcelas", "Até 10k", "10-30k", ">30k"],
    ranges=[
        TPVRange(min=0, max=10000, label="Até 10k"),
        TPVRange(min=10001, max=30000, label="10-30k"),
        TPVRange(min=30001, max=999999999, label=">30k"),
    ],
    rows=[
        RangeRow(label="Débito", values=[2.39, 2.19, 1.99]),
        RangeRow(label="Cred. A vista ou 1x", values=[5.59, 5.29, 4.99]),
        RangeRow(label="2x a 6x", values=[14.90, 14.50, 13.90]),
        RangeRow(label="7x a 12x", values=[21.90, 21.50, 20.90]),
        RangeRow(label="13x a 18x", values=[28.90, 28.50, 27.90]),
        RangeRow(label="Antecipação - % a.m", values=[4.99, 4.59, 3.99]),
    ],
)


def range_table_for(plan_type: PlanType) -> RangeTable:
    if plan_type == PlanType.SIMPLES:
        return SIMPLES_RANGE_TABLE
    return FULL_RANGE_TABLE


def select_range_index(table: RangeTable, tpv: float) -> Optional[int]:
    """Index of the band whose [min, max] contains the TPV, or None."""
    for idx, band in enumerate(table.ranges):
        if band.min <= tpv <= band.max:
            return idx
    return None


def reference_card(table: RangeTable, index: int) -> dict[str, float]:
    """Row label → list rate for one band."""
    if index < 0 or index >= len(table.ranges):
        raise IndexError(f"Band {index} out of range (0..{len(table.ranges) - 1})")
    return {row.label: row.values[index] for row in table.rows}
