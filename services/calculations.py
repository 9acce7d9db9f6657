"""
Loan arithmetic: EMI, total interest, LTV, processing fee and the
amortization schedule.

Amounts are binary floats rounded half-up to 2 decimals at the boundary.
"""
from __future__ import annotations

import calendar
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

_CENT = Decimal("0.01")

# 50 years; longer terms overflow the compounding factor
MAX_TENURE_MONTHS = 600


def round_money(value: float) -> float:
    """Round half-up to 2 decimals (str() first so 2.675 stays 2.675, not 2.67499...)."""
    return float(Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP))


def _validate_inputs(principal: float, annual_rate_percent: float, tenure_months: int) -> None:
    if principal is None or principal <= 0:
        raise ValueError(f"principal must be positive, got {principal}")
    if annual_rate_percent is None or annual_rate_percent < 0:
        raise ValueError(f"annual rate must be non-negative, got {annual_rate_percent}")
    if isinstance(tenure_months, bool) or not isinstance(tenure_months, int) or tenure_months < 1:
        raise ValueError(f"tenure must be a whole number of months >= 1, got {tenure_months}")
    if tenure_months > MAX_TENURE_MONTHS:
        raise ValueError(f"tenure cannot exceed {MAX_TENURE_MONTHS} months, got {tenure_months}")


def _raw_emi(principal: float, annual_rate_percent: float, tenure_months: int) -> float:
    r = annual_rate_percent / 12 / 100
    if r == 0:
        return principal / tenure_months
    growth = (1 + r) ** tenure_months
    return principal * r * growth / (growth - 1)


def calculate_emi(principal: float, annual_rate_percent: float, tenure_months: int) -> float:
    """
    Equal monthly installment that amortizes `principal` over `tenure_months`
    at `annual_rate_percent` nominal annual interest, compounded monthly.

    Raises ValueError for principal <= 0, negative rate, or tenure outside
    1..MAX_TENURE_MONTHS.
    """
    _validate_inputs(principal, annual_rate_percent, tenure_months)
    return round_money(_raw_emi(principal, annual_rate_percent, tenure_months))


def calculate_total_interest(principal: float, annual_rate_percent: float, tenure_months: int) -> float:
    emi = calculate_emi(principal, annual_rate_percent, tenure_months)
    return round_money(emi * tenure_months - principal)


def calculate_ltv(loan_amount: float, collateral_value: float) -> float:
    """Loan amount as a percentage of collateral value; 0 when there is no collateral."""
    if not collateral_value:
        return 0.0
    return round_money(loan_amount / collateral_value * 100)


def calculate_processing_fee(amount: float, fee_percentage: float | None) -> float:
    if not fee_percentage:
        return 0.0
    return round_money(amount * fee_percentage / 100)


def _add_months(start: date, months: int) -> date:
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def generate_emi_schedule(
    principal: float,
    annual_rate_percent: float,
    tenure_months: int,
    start_date: date,
) -> list[dict[str, Any]]:
    """
    Reducing-balance repayment schedule. The first installment falls due one
    month after `start_date`; the final installment absorbs the rounding
    residue so the closing balance is exactly zero.
    """
    emi = calculate_emi(principal, annual_rate_percent, tenure_months)
    r = annual_rate_percent / 12 / 100
    balance = round_money(principal)
    schedule: list[dict[str, Any]] = []
    for n in range(1, tenure_months + 1):
        interest = round_money(balance * r)
        if n == tenure_months:
            principal_part = balance
            payment = round_money(principal_part + interest)
        else:
            principal_part = round_money(emi - interest)
            payment = emi
        balance = round_money(balance - principal_part)
        schedule.append({
            "installmentNumber": n,
            "dueDate": _add_months(start_date, n).isoformat(),
            "emi": payment,
            "principal": principal_part,
            "interest": interest,
            "balance": balance,
        })
    return schedule
