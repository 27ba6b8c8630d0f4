"""Statement record model produced by the parser and forwarded downstream.

Field aliases are the JSON keys the PDF renderer consumes, so records are
always dumped with ``by_alias=True``.
"""

from decimal import Decimal
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer

CREDIT_DESCRIPTION = "Payment Received"

# Amounts stay Decimal in Python and go over the wire as JSON numbers.
Amount = Annotated[
    Decimal, PlainSerializer(float, return_type=float, when_used="json")
]


class Transaction(BaseModel):
    """One line item of a statement."""

    model_config = ConfigDict(populate_by_name=True)

    date: Optional[str] = None
    post_date: Optional[str] = Field(default=None, alias="postDate")
    description: str = ""
    amount: Amount = Decimal("0.000")
    # amount in the card's settlement currency (BHD)
    settlement_amount: Amount = Field(default=Decimal("0.000"), alias="amountInBHD")
    currency: str = ""
    is_credit: bool = Field(default=False, alias="cr")

    @staticmethod
    def is_credit_description(description: str) -> bool:
        return description.strip() == CREDIT_DESCRIPTION


class StatementRecord(BaseModel):
    """A parsed statement: header, balances and transactions in source order."""

    model_config = ConfigDict(populate_by_name=True)

    org_id: Optional[str] = Field(default=None, alias="orgId")
    card_number: Optional[str] = Field(default=None, alias="cardNumber")
    statement_date: Optional[str] = Field(default=None, alias="statementDate")
    name: Optional[str] = None
    address: Optional[str] = None

    available_balance: Amount = Field(default=Decimal("0"), alias="availableBalance")
    opening_balance: Amount = Field(default=Decimal("0"), alias="openingBalance")
    current_balance: Amount = Field(default=Decimal("0"), alias="currentBalance")
    total_credits: Amount = Field(default=Decimal("0"), alias="totalCredits")
    # spelling is the renderer's key
    total_debits: Amount = Field(default=Decimal("0"), alias="toatalDepits")

    transactions: list[Transaction] = Field(default_factory=list)

    job_id: Optional[str] = None
    file_hash: Optional[str] = None

    def add_transaction(self, transaction: Transaction) -> None:
        self.transactions.append(transaction)

    def stamp(self, job_id: Optional[str], file_hash: Optional[str]) -> None:
        """Attach the pass-through correlation ids of the triggering message."""
        self.job_id = job_id
        self.file_hash = file_hash

    def to_message(self) -> dict:
        """JSON-safe payload for the outbound queue."""
        return self.model_dump(mode="json", by_alias=True)
