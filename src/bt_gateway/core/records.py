"""
Typed records decoded from gateway documents.

Only the resources that travel inside webhook notifications and search
pages are modelled here. Every decoder expects a document that already
went through :func:`bt_gateway.core.documents.strip_nil_elements`, so a
missing child always means "no value".
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional
from xml.etree.ElementTree import Element

from .decimals import Decimal
from .documents import child_text
from .timestamps import parse_date, parse_timestamp

__all__ = [
    "Customer",
    "DailyReport",
    "Disbursement",
    "Dispute",
    "DisputeEvidence",
    "DisputeStatusEvent",
    "MerchantAccount",
    "PartnerMerchant",
    "Subscription",
    "Transaction",
]


def _text(element: Element, tag: str) -> Optional[str]:
    value = child_text(element, tag)
    return value.strip() if value is not None else None


def _bool(element: Element, tag: str) -> bool:
    return (_text(element, tag) or "").lower() == "true"


def _amount(element: Element, tag: str) -> Optional[Decimal]:
    value = _text(element, tag)
    return Decimal.parse(value) if value else None


def _date(element: Element, tag: str) -> Optional[date]:
    value = _text(element, tag)
    return parse_date(value) if value else None


def _timestamp(element: Element, tag: str) -> Optional[datetime]:
    value = _text(element, tag)
    return parse_timestamp(value) if value else None


def _items(element: Element, tag: str) -> List[str]:
    container = element.find(tag)
    if container is None:
        return []
    return [(item.text or "").strip() for item in container.findall("item")]


@dataclass(frozen=True)
class MerchantAccount:
    id: Optional[str] = None
    status: Optional[str] = None
    currency_iso_code: Optional[str] = None
    sub_merchant_account: bool = False
    master_merchant_account: Optional["MerchantAccount"] = None

    @classmethod
    def from_element(cls, element: Element) -> "MerchantAccount":
        master = element.find("master-merchant-account")
        return cls(
            id=_text(element, "id"),
            status=_text(element, "status"),
            currency_iso_code=_text(element, "currency-iso-code"),
            sub_merchant_account=_bool(element, "sub-merchant-account"),
            master_merchant_account=cls.from_element(master) if master is not None else None,
        )


@dataclass(frozen=True)
class Transaction:
    id: Optional[str] = None
    status: Optional[str] = None
    type: Optional[str] = None
    amount: Optional[Decimal] = None
    currency_iso_code: Optional[str] = None
    merchant_account_id: Optional[str] = None
    order_id: Optional[str] = None
    purchase_order_number: Optional[str] = None
    payment_instrument_type: Optional[str] = None
    created_at: Optional[datetime] = None
    disbursement_date: Optional[date] = None

    @classmethod
    def from_element(cls, element: Element) -> "Transaction":
        details = element.find("disbursement-details")
        return cls(
            id=_text(element, "id"),
            status=_text(element, "status"),
            type=_text(element, "type"),
            amount=_amount(element, "amount"),
            currency_iso_code=_text(element, "currency-iso-code"),
            merchant_account_id=_text(element, "merchant-account-id"),
            order_id=_text(element, "order-id"),
            purchase_order_number=_text(element, "purchase-order-number"),
            payment_instrument_type=_text(element, "payment-instrument-type"),
            created_at=_timestamp(element, "created-at"),
            disbursement_date=_date(details, "disbursement-date") if details is not None else None,
        )


@dataclass(frozen=True)
class Subscription:
    id: Optional[str] = None
    status: Optional[str] = None
    plan_id: Optional[str] = None
    merchant_account_id: Optional[str] = None
    payment_method_token: Optional[str] = None
    price: Optional[Decimal] = None
    balance: Optional[Decimal] = None
    next_billing_date: Optional[date] = None
    transactions: List[Transaction] = field(default_factory=list)

    @classmethod
    def from_element(cls, element: Element) -> "Subscription":
        container = element.find("transactions")
        transactions = (
            [Transaction.from_element(tx) for tx in container.findall("transaction")]
            if container is not None
            else []
        )
        return cls(
            id=_text(element, "id"),
            status=_text(element, "status"),
            plan_id=_text(element, "plan-id"),
            merchant_account_id=_text(element, "merchant-account-id"),
            payment_method_token=_text(element, "payment-method-token"),
            price=_amount(element, "price"),
            balance=_amount(element, "balance"),
            next_billing_date=_date(element, "next-billing-date"),
            transactions=transactions,
        )


@dataclass(frozen=True)
class Customer:
    id: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    company: Optional[str] = None
    email: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_element(cls, element: Element) -> "Customer":
        return cls(
            id=_text(element, "id"),
            first_name=_text(element, "first-name"),
            last_name=_text(element, "last-name"),
            company=_text(element, "company"),
            email=_text(element, "email"),
            created_at=_timestamp(element, "created-at"),
        )


# Disbursement exception messages
BANK_REJECTED = "bank_rejected"
INSUFFICIENT_FUNDS = "insuffient_funds"
ACCOUNT_NOT_AUTHORIZED = "account_not_authorized"

# Disbursement follow-up actions
CONTACT_US = "contact_us"
UPDATE_FUNDING_INFORMATION = "update_funding_information"
NO_ACTION = "none"


@dataclass(frozen=True)
class Disbursement:
    id: Optional[str] = None
    amount: Optional[Decimal] = None
    currency_iso_code: Optional[str] = None
    status: Optional[str] = None
    exception_message: Optional[str] = None
    follow_up_action: Optional[str] = None
    success: bool = False
    retry: bool = False
    sub_merchant_account: bool = False
    disbursement_date: Optional[date] = None
    transaction_ids: List[str] = field(default_factory=list)
    merchant_account: Optional[MerchantAccount] = None

    @classmethod
    def from_element(cls, element: Element) -> "Disbursement":
        account = element.find("merchant-account")
        return cls(
            id=_text(element, "id"),
            amount=_amount(element, "amount"),
            currency_iso_code=_text(element, "currency-iso-code"),
            status=_text(element, "status"),
            exception_message=_text(element, "exception-message"),
            follow_up_action=_text(element, "follow-up-action"),
            success=_bool(element, "success"),
            retry=_bool(element, "retry"),
            sub_merchant_account=_bool(element, "sub-merchant-account"),
            disbursement_date=_date(element, "disbursement-date"),
            transaction_ids=_items(element, "transaction-ids"),
            merchant_account=MerchantAccount.from_element(account) if account is not None else None,
        )


@dataclass(frozen=True)
class DisputeStatusEvent:
    status: Optional[str] = None
    timestamp: Optional[datetime] = None
    effective_date: Optional[date] = None

    @classmethod
    def from_element(cls, element: Element) -> "DisputeStatusEvent":
        return cls(
            status=_text(element, "status"),
            timestamp=_timestamp(element, "timestamp"),
            effective_date=_date(element, "effective-date"),
        )


@dataclass(frozen=True)
class DisputeEvidence:
    id: Optional[str] = None
    comment: Optional[str] = None
    url: Optional[str] = None
    category: Optional[str] = None
    sequence_number: Optional[str] = None
    created_at: Optional[datetime] = None
    sent_to_processor_at: Optional[date] = None

    @classmethod
    def from_element(cls, element: Element) -> "DisputeEvidence":
        return cls(
            id=_text(element, "id"),
            comment=_text(element, "comment"),
            url=_text(element, "url"),
            category=_text(element, "category"),
            sequence_number=_text(element, "sequence-number"),
            created_at=_timestamp(element, "created-at"),
            sent_to_processor_at=_date(element, "sent-to-processor-at"),
        )


@dataclass(frozen=True)
class Dispute:
    id: Optional[str] = None
    kind: Optional[str] = None
    status: Optional[str] = None
    reason: Optional[str] = None
    reason_code: Optional[str] = None
    case_number: Optional[str] = None
    currency_iso_code: Optional[str] = None
    merchant_account_id: Optional[str] = None
    amount: Optional[Decimal] = None
    amount_disputed: Optional[Decimal] = None
    amount_won: Optional[Decimal] = None
    received_date: Optional[date] = None
    reply_by_date: Optional[date] = None
    date_opened: Optional[date] = None
    date_won: Optional[date] = None
    status_history: List[DisputeStatusEvent] = field(default_factory=list)
    evidence: List[DisputeEvidence] = field(default_factory=list)
    transaction: Optional[Transaction] = None

    @classmethod
    def from_element(cls, element: Element) -> "Dispute":
        history = element.find("status-history")
        evidence = element.find("evidence")
        transaction = element.find("transaction")
        return cls(
            id=_text(element, "id"),
            kind=_text(element, "kind"),
            status=_text(element, "status"),
            reason=_text(element, "reason"),
            reason_code=_text(element, "reason-code"),
            case_number=_text(element, "case-number"),
            currency_iso_code=_text(element, "currency-iso-code"),
            merchant_account_id=_text(element, "merchant-account-id"),
            amount=_amount(element, "amount"),
            amount_disputed=_amount(element, "amount-disputed"),
            amount_won=_amount(element, "amount-won"),
            received_date=_date(element, "received-date"),
            reply_by_date=_date(element, "reply-by-date"),
            date_opened=_date(element, "date-opened"),
            date_won=_date(element, "date-won"),
            status_history=[
                DisputeStatusEvent.from_element(event)
                for event in (history.findall("status-history") if history is not None else [])
            ],
            evidence=[
                DisputeEvidence.from_element(item)
                for item in (evidence.findall("evidence") if evidence is not None else [])
            ],
            transaction=Transaction.from_element(transaction) if transaction is not None else None,
        )


@dataclass(frozen=True)
class DailyReport:
    report_date: Optional[date] = None
    report_url: Optional[str] = None

    @classmethod
    def from_element(cls, element: Element) -> "DailyReport":
        return cls(
            report_date=_date(element, "report-date"),
            report_url=_text(element, "report-url"),
        )


@dataclass(frozen=True)
class PartnerMerchant:
    partner_merchant_id: Optional[str] = None
    merchant_public_id: Optional[str] = None
    public_key: Optional[str] = None
    private_key: Optional[str] = None
    client_side_encryption_key: Optional[str] = None

    @classmethod
    def from_element(cls, element: Element) -> "PartnerMerchant":
        return cls(
            partner_merchant_id=_text(element, "partner-merchant-id"),
            merchant_public_id=_text(element, "merchant-public-id"),
            public_key=_text(element, "public-key"),
            private_key=_text(element, "private-key"),
            client_side_encryption_key=_text(element, "client-side-encryption-key"),
        )
