from pydantic import BaseModel, Field, field_validator, model_validator
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Optional
from decimal import Decimal, InvalidOperation, ROUND_HALF_EVEN


# Amounts are kept at four decimal places end to end
AMOUNT_QUANTUM = Decimal("0.0001")
ZERO = Decimal("0.0000")

# Caps a single amount so that an account's running sums, over every
# possible transaction id, stay within the default 28-digit context exactly
MAX_AMOUNT = Decimal("1000000000000")


def quantize_amount(value: Decimal) -> Decimal:
    try:
        return value.quantize(AMOUNT_QUANTUM, rounding=ROUND_HALF_EVEN)
    except InvalidOperation as e:
        raise ValueError(f'Amount {value} cannot be represented with four decimal places') from e


class TransactionType(str, Enum):
    deposit = "deposit"
    withdrawal = "withdrawal"
    dispute = "dispute"
    resolve = "resolve"
    chargeback = "chargeback"

    @property
    def carries_amount(self) -> bool:
        return self in (TransactionType.deposit, TransactionType.withdrawal)


class EntryKind(str, Enum):
    deposit = "deposit"
    withdraw = "withdraw"


class Outcome(str, Enum):
    """Result of applying one record to an account."""

    applied = "applied"
    pending = "pending"
    rejected = "rejected"
    ignored = "ignored"


@dataclass(frozen=True)
class LedgerEntry:
    kind: EntryKind
    amount: Decimal


@dataclass(frozen=True)
class RejectedWithdrawal:
    """A withdrawal blocked only by funds held under dispute.

    ``disputes_at_time`` is the set of disputes open when the withdrawal was
    rejected; resolving any one of them re-evaluates the withdrawal.
    """

    amount: Decimal
    disputes_at_time: FrozenSet[int]


class TransactionRecord(BaseModel):
    type: TransactionType = Field(..., description="Transaction type")
    client: int = Field(
        ...,
        ge=0,
        le=65535,
        description="Account identifier"
    )
    tx: int = Field(
        ...,
        ge=0,
        le=4294967295,
        description="Transaction identifier, unique per account"
    )
    amount: Optional[Decimal] = Field(
        None,
        ge=0,
        le=MAX_AMOUNT,
        description="Transaction amount, only meaningful for deposits and withdrawals"
    )

    @field_validator('type', mode='before')
    @classmethod
    def normalize_type(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator('amount', mode='before')
    @classmethod
    def blank_amount_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator('amount')
    @classmethod
    def round_amount(cls, v):
        if v is None:
            return v
        if not v.is_finite():
            raise ValueError('Amount must be a finite number')
        return quantize_amount(v)

    @model_validator(mode='after')
    def validate_amount_type_consistency(self):
        if self.type.carries_amount:
            if self.amount is None:
                raise ValueError(f'{self.type.value} records require an amount')
        else:
            self.amount = None
        return self


class AccountSnapshot(BaseModel):
    client: int = Field(..., description="Account identifier")
    available: Decimal = Field(..., description="Funds available for withdrawal")
    held: Decimal = Field(..., description="Funds held by open disputes")
    total: Decimal = Field(..., description="Available plus held")
    locked: bool = Field(..., description="Whether a chargeback locked the account")

    def to_row(self) -> Dict[str, str]:
        return {
            "client": str(self.client),
            "available": f"{quantize_amount(self.available):.4f}",
            "held": f"{quantize_amount(self.held):.4f}",
            "total": f"{quantize_amount(self.total):.4f}",
            "locked": "true" if self.locked else "false",
        }


class ProcessingSummary(BaseModel):
    records_processed: int = Field(0, description="Records handed to the router")
    accounts_count: int = Field(0, description="Accounts created during the run")
    outcomes: Dict[Outcome, int] = Field(
        default_factory=lambda: {outcome: 0 for outcome in Outcome},
        description="Record count per outcome"
    )

    def record(self, outcome: Outcome) -> None:
        self.records_processed += 1
        self.outcomes[outcome] += 1
