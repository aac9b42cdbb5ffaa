"""
Report Models

Result shapes returned by the derived-value calculators. They are
computed on demand from the transaction log and never persisted.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from fintrack.models.entities import CreditCard, Transaction


class CategoryTotal(BaseModel):
    """One bar of a category breakdown."""
    model_config = ConfigDict(frozen=True)

    label: str
    value: Decimal


class PeriodSummary(BaseModel):
    """Income, expense and net flow of a set of transactions."""
    model_config = ConfigDict(frozen=True)

    income: Decimal = Decimal("0")
    expense: Decimal = Decimal("0")
    net_flow: Decimal = Decimal("0")


class MetricComparison(BaseModel):
    """One metric compared against the previous period."""
    model_config = ConfigDict(frozen=True)

    current: Decimal
    previous: Decimal
    delta: Decimal
    percentage_change: Decimal

    @property
    def has_changed(self) -> bool:
        return self.current != self.previous


class PeriodComparison(BaseModel):
    """A month compared with the month before it."""
    model_config = ConfigDict(frozen=True)

    year: int
    month: int = Field(..., ge=1, le=12)
    previous_year: int
    previous_month: int = Field(..., ge=1, le=12)

    current: PeriodSummary
    previous: PeriodSummary

    income: MetricComparison
    expense: MetricComparison
    net_flow: MetricComparison


class OpenInvoice(BaseModel):
    """An active card with charges still to be paid."""
    model_config = ConfigDict(frozen=True)

    card: CreditCard
    total_due: Decimal


class InvoiceReport(BaseModel):
    """Charges of one card in one month, split by paid status."""
    model_config = ConfigDict(frozen=True)

    card: CreditCard
    year: int
    month: int = Field(..., ge=1, le=12)
    transactions: tuple[Transaction, ...] = ()
    total: Decimal = Decimal("0")
    total_paid: Decimal = Decimal("0")
    total_unpaid: Decimal = Decimal("0")
    by_category: tuple[CategoryTotal, ...] = ()
