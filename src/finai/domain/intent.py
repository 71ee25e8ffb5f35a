"""Intent applier: turns oracle proposals into ledger calls.

The intent extraction oracle (an LLM) replies with free-text advice and,
optionally, a proposed action. Proposals are untrusted: they are parsed into
one of two validated shapes before anything touches the ledger.
"""

import json
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from typing import Any, Literal, Mapping, Optional, Sequence, Union

import structlog
from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError as PydanticValidationError,
    field_validator,
)

from finai.database.base import Database
from finai.domain.box import BoxService
from finai.domain.entities import Box, Projection, Transaction, TransactionDraft, TransactionKind
from finai.domain.errors import ValidationError
from finai.domain.ledger import LedgerService
from finai.utils.amount_parser import format_money

logger = structlog.get_logger(__name__)

INVESTMENT_CATEGORY = "Investment"
DEFAULT_CATEGORY = "Other"

CREATE_BOX = "createBox"

_KIND_ALIASES = {
    "createbox": CREATE_BOX,
    "create_box": CREATE_BOX,
    "criar_caixinha": CREATE_BOX,
    "income": "income",
    "receita": "income",
    "expense": "expense",
    "despesa": "expense",
}


class _Proposal(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True, frozen=True)

    @field_validator("*", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class CreateBoxProposal(_Proposal):
    """Proposal to open a new box."""

    kind: Literal["createBox"]
    box_name: str = Field(validation_alias=AliasChoices("boxName", "boxNome", "name", "nome"))
    goal_amount: Decimal = Field(gt=0, validation_alias=AliasChoices("goalAmount", "meta"))
    emoji: Optional[str] = None
    bank: Optional[str] = Field(default=None, validation_alias=AliasChoices("bank", "banco"))


class TransactionProposal(_Proposal):
    """Proposal to record income or an expense, possibly against a box."""

    kind: Literal["income", "expense"]
    amount: Decimal = Field(gt=0, validation_alias=AliasChoices("amount", "valor"))
    description: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("description", "descricao")
    )
    category: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("category", "categoria")
    )
    box_name: Optional[str] = Field(default=None, validation_alias=AliasChoices("boxName", "boxNome"))
    occurred_on: Optional[date] = Field(
        default=None, validation_alias=AliasChoices("occurredOn", "data", "date")
    )
    due_on: Optional[date] = Field(
        default=None, validation_alias=AliasChoices("dueOn", "dataVencimento")
    )


Proposal = Union[CreateBoxProposal, TransactionProposal]


def _describe(error: PydanticValidationError) -> str:
    parts = []
    for item in error.errors():
        field = ".".join(str(part) for part in item["loc"]) or "proposal"
        parts.append(f"{field}: {item['msg']}")
    return "Invalid proposed action (" + "; ".join(parts) + ")"


def parse_proposal(raw: Any) -> Proposal:
    """Validate an untrusted proposal mapping.

    Raises:
        ValidationError: If the kind is missing or unknown, or a required
            field is missing or invalid
    """
    if not isinstance(raw, Mapping):
        raise ValidationError("Proposed action must be a JSON object")

    kind_value = raw.get("kind", raw.get("tipo"))
    if kind_value is None:
        raise ValidationError("Proposed action is missing 'kind'")
    kind = _KIND_ALIASES.get(str(kind_value).strip().lower())
    if kind is None:
        raise ValidationError(f"Unknown action kind '{kind_value}'")

    data = {**raw, "kind": kind}
    try:
        if kind == CREATE_BOX:
            return CreateBoxProposal.model_validate(data)
        return TransactionProposal.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(_describe(e)) from e


@dataclass(frozen=True)
class OracleReply:
    """Oracle output split into advice text and an optional raw proposal."""

    advice: Optional[str]
    proposal: Optional[Any] = None


@dataclass(frozen=True)
class AppliedIntent:
    """Outcome of handling one oracle reply or proposal."""

    advice: Optional[str] = None
    transaction: Optional[Transaction] = None
    box: Optional[Box] = None

    @property
    def mutated(self) -> bool:
        return self.transaction is not None or self.box is not None


def parse_oracle_reply(text: str) -> OracleReply:
    """Extract advice and a proposal from raw oracle text.

    The JSON object is taken from the first '{' to the last '}'. Text with
    no parsable object is treated as pure advice.
    """
    text = (text or "").strip()
    start, end = text.find("{"), text.rfind("}")
    if start == -1 or end <= start:
        return OracleReply(advice=text or None)

    try:
        payload = json.loads(text[start : end + 1])
    except ValueError as e:
        logger.warning("oracle_reply_unparsable", error=str(e))
        return OracleReply(advice=text)
    if not isinstance(payload, dict):
        return OracleReply(advice=text)

    advice = payload.get("advice")
    proposal = payload.get("transaction", payload.get("action"))
    if proposal is None and ("kind" in payload or "tipo" in payload):
        proposal = payload
    return OracleReply(advice=advice if isinstance(advice, str) else None, proposal=proposal)


def build_oracle_context(projection: Projection, boxes: Sequence[Box], currency: str = "BRL") -> str:
    """Summarize free balance and box balances for the oracle prompt."""
    summary = f"Free balance: {format_money(projection.free_balance, currency)}."
    if not boxes:
        return f"{summary} Boxes: none."
    listed = ", ".join(
        f"{box.name}: {format_money(box.balance, currency)} of {format_money(box.goal_amount, currency)}"
        for box in boxes
    )
    return f"{summary} Boxes: {listed}."


class IntentApplier:
    """Apply one proposed action to the ledger."""

    def __init__(self, db: Database):
        """Initialize intent applier.

        Args:
            db: Database instance
        """
        self.ledger = LedgerService(db)
        self.boxes = BoxService(db)

    def apply(self, raw: Any) -> AppliedIntent:
        """Validate a raw proposal and perform exactly one mutation.

        A transaction naming an existing box (case-insensitive) becomes a box
        movement: expenses transfer into the box, income withdraws from it.

        Raises:
            ValidationError: If the proposal is malformed or rejected by the ledger
            QuotaExceededError: If a box creation hits the free-tier limit
        """
        proposal = parse_proposal(raw)

        if isinstance(proposal, CreateBoxProposal):
            box = self.boxes.create_box(
                name=proposal.box_name,
                goal_amount=proposal.goal_amount,
                emoji=proposal.emoji,
                bank=proposal.bank,
            )
            return AppliedIntent(box=box)

        box = self.boxes.find_box_by_name(proposal.box_name)
        if box is not None:
            kind = (
                TransactionKind.TRANSFER_TO_BOX
                if proposal.kind == "expense"
                else TransactionKind.WITHDRAW_FROM_BOX
            )
            category = INVESTMENT_CATEGORY
        else:
            if proposal.box_name:
                logger.info("proposal_box_unmatched", box_name=proposal.box_name)
            kind = TransactionKind(proposal.kind)
            category = proposal.category or DEFAULT_CATEGORY

        draft = TransactionDraft(
            kind=kind,
            amount=proposal.amount,
            category=category,
            occurred_on=proposal.occurred_on or date.today(),
            description=proposal.description or "",
            due_on=proposal.due_on,
            box_id=box.id if box is not None else None,
        )
        return AppliedIntent(transaction=self.ledger.add_transaction(draft))

    def apply_reply(self, text: str) -> AppliedIntent:
        """Parse raw oracle text and apply its proposal, if any."""
        reply = parse_oracle_reply(text)
        if reply.proposal is None:
            return AppliedIntent(advice=reply.advice)
        return replace(self.apply(reply.proposal), advice=reply.advice)
