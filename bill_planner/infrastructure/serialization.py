"""Budget document codec used for storage snapshots, backups and export/import.

The document keeps the desktop app's camelCase JSON shape with dollar
amounts as plain numbers. Domain objects hold cents; conversion happens only
here.
"""

import json
from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, PlainSerializer, ValidationError
from pydantic.alias_generators import to_camel

from bill_planner.domain.exceptions import DomainException, InvalidBudgetDocumentError
from bill_planner.domain.models import (
    AdvancePayment,
    Bill,
    BudgetAggregate,
    Frequency,
    HistoryItem,
    PayFrequency,
    PayInfo,
    Theme,
)
from bill_planner.domain.money import parse_amount, to_major_units, to_minor_units
from bill_planner.utils.date_utils import current_month_key, parse_date, parse_month_key

CURRENT_VERSION = 2


def _json_number(value: Decimal) -> float:
    return float(value)


def _lenient_date(value: Any) -> Any:
    if isinstance(value, str) and value:
        return parse_date(value)
    if value is None or isinstance(value, (str, date)):
        return value
    raise ValueError("Dates must be ISO strings")


def _lenient_rate(value: Any) -> float:
    return float(parse_amount(value))


# Dollars: bad input becomes 0, JSON output is a number rather than a string
Money = Annotated[
    Decimal,
    BeforeValidator(parse_amount),
    PlainSerializer(_json_number, return_type=float, when_used="json"),
]
LenientDate = Annotated[date, BeforeValidator(_lenient_date)]
Rate = Annotated[float, BeforeValidator(_lenient_rate)]


class DocumentModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AdvancePaymentDocument(DocumentModel):
    paid_amount: Money
    paid_method: str
    paid_date: LenientDate


class BillDocument(DocumentModel):
    id: str
    name: str
    amount: Money = Decimal("0")
    due_date: LenientDate
    frequency: Optional[Frequency] = None
    is_recurring: Optional[bool] = None
    is_paid: bool = False
    paid_amount: Optional[Money] = None
    paid_method: Optional[str] = None
    paid_date: Optional[LenientDate] = None
    has_balance: bool = False
    balance: Optional[Money] = None
    monthly_payment: Optional[Money] = None
    interest_rate: Optional[Rate] = None
    is_credit_account: bool = False
    note: Optional[str] = None
    original_due_day: Optional[int] = None
    paid_months: Optional[Dict[str, AdvancePaymentDocument]] = None


class HistoryItemDocument(DocumentModel):
    id: str
    name: str
    paid_amount: Money = Decimal("0")
    paid_date: Optional[LenientDate] = None
    paid_method: Optional[str] = None
    archived_date: Optional[datetime] = None
    has_balance: Optional[bool] = None
    balance: Optional[Money] = None
    is_recurring: Optional[bool] = None
    original_due_date: Optional[LenientDate] = None
    amount: Optional[Money] = None


class PayInfoDocument(DocumentModel):
    id: str
    name: str
    last_pay_date: LenientDate
    frequency: PayFrequency


class BudgetDocument(DocumentModel):
    version: int = CURRENT_VERSION
    bills: List[BillDocument] = []
    paid_history: List[HistoryItemDocument] = []
    last_reset: Optional[datetime] = None
    is_first_time: bool = True
    theme: Theme = Theme.DARK
    pay_infos: List[PayInfoDocument] = []
    active_month: Optional[str] = None


def _money(cents: Optional[int]) -> Optional[Decimal]:
    return None if cents is None else to_major_units(cents)


def _cents(value: Optional[Decimal]) -> Optional[int]:
    return None if value is None else to_minor_units(value)


def bill_to_document(bill: Bill) -> BillDocument:
    return BillDocument(
        id=bill.id,
        name=bill.name,
        amount=to_major_units(bill.amount_cents),
        due_date=bill.due_date,
        frequency=bill.frequency,
        is_recurring=bill.is_recurring,
        is_paid=bill.is_paid,
        paid_amount=_money(bill.paid_amount_cents),
        paid_method=bill.paid_method,
        paid_date=bill.paid_date,
        has_balance=bill.has_balance,
        balance=_money(bill.balance_cents),
        monthly_payment=_money(bill.monthly_payment_cents),
        interest_rate=bill.interest_rate,
        is_credit_account=bill.is_credit_account,
        note=bill.note,
        original_due_day=bill.original_due_day,
        paid_months={
            month: AdvancePaymentDocument(
                paid_amount=to_major_units(payment.paid_amount_cents),
                paid_method=payment.paid_method,
                paid_date=payment.paid_date,
            )
            for month, payment in bill.paid_months.items()
        }
        or None,
    )


def bill_from_document(doc: BillDocument) -> Bill:
    if doc.frequency is not None:
        frequency = doc.frequency
    else:
        frequency = Frequency.MONTHLY if doc.is_recurring else Frequency.ONE_TIME

    return Bill(
        id=doc.id,
        name=doc.name,
        amount_cents=to_minor_units(doc.amount),
        due_date=doc.due_date,
        frequency=frequency,
        is_paid=doc.is_paid,
        paid_amount_cents=_cents(doc.paid_amount),
        paid_method=doc.paid_method,
        paid_date=doc.paid_date,
        has_balance=doc.has_balance,
        balance_cents=_cents(doc.balance),
        monthly_payment_cents=_cents(doc.monthly_payment),
        interest_rate=doc.interest_rate,
        is_credit_account=doc.is_credit_account,
        note=doc.note,
        original_due_day=doc.original_due_day,
        paid_months={
            month: AdvancePayment(
                paid_amount_cents=to_minor_units(payment.paid_amount),
                paid_method=payment.paid_method,
                paid_date=payment.paid_date,
            )
            for month, payment in (doc.paid_months or {}).items()
        },
    )


def history_to_document(item: HistoryItem) -> HistoryItemDocument:
    return HistoryItemDocument(
        id=item.id,
        name=item.name,
        paid_amount=to_major_units(item.paid_amount_cents),
        paid_date=item.paid_date,
        paid_method=item.paid_method,
        archived_date=item.archived_at,
        has_balance=item.has_balance,
        balance=_money(item.balance_cents),
        is_recurring=item.is_recurring,
        original_due_date=item.original_due_date,
        amount=to_major_units(item.amount_cents),
    )


def history_from_document(doc: HistoryItemDocument) -> HistoryItem:
    archived_at = doc.archived_date or datetime.combine(doc.paid_date or date.today(), datetime.min.time())
    return HistoryItem(
        id=doc.id,
        name=doc.name,
        paid_amount_cents=to_minor_units(doc.paid_amount),
        paid_method=doc.paid_method,
        paid_date=doc.paid_date,
        archived_at=archived_at,
        original_due_date=doc.original_due_date or doc.paid_date or archived_at.date(),
        amount_cents=to_minor_units(doc.amount) if doc.amount is not None else to_minor_units(doc.paid_amount),
        has_balance=bool(doc.has_balance),
        balance_cents=_cents(doc.balance),
        is_recurring=bool(doc.is_recurring),
    )


def aggregate_to_document(aggregate: BudgetAggregate) -> BudgetDocument:
    return BudgetDocument(
        version=aggregate.version,
        bills=[bill_to_document(b) for b in aggregate.bills],
        paid_history=[history_to_document(h) for h in aggregate.paid_history],
        last_reset=aggregate.last_reset,
        is_first_time=aggregate.is_first_time,
        theme=aggregate.theme,
        pay_infos=[
            PayInfoDocument(id=p.id, name=p.name, last_pay_date=p.last_pay_date, frequency=p.frequency)
            for p in aggregate.pay_infos
        ],
        active_month=aggregate.active_month,
    )


def aggregate_from_document(doc: BudgetDocument, today: Optional[date] = None) -> BudgetAggregate:
    active_month = doc.active_month or current_month_key(today)
    try:
        parse_month_key(active_month)
    except DomainException as e:
        raise InvalidBudgetDocumentError(str(e)) from e

    return BudgetAggregate(
        bills=[bill_from_document(b) for b in doc.bills],
        paid_history=[history_from_document(h) for h in doc.paid_history],
        last_reset=doc.last_reset or datetime.now(),
        is_first_time=doc.is_first_time,
        theme=doc.theme,
        pay_infos=[
            PayInfo(id=p.id, name=p.name, last_pay_date=p.last_pay_date, frequency=p.frequency)
            for p in doc.pay_infos
        ],
        active_month=active_month,
        version=CURRENT_VERSION,
    )


def upgrade_document(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Bring an older raw document up to CURRENT_VERSION.

    Version 1 (no "version" key) stored only isRecurring on bills and had no
    day-of-month anchor.
    """
    version = data.get("version") or 1
    if not isinstance(version, int) or isinstance(version, bool):
        raise InvalidBudgetDocumentError("Document version must be an integer")
    raw_bills = data.get("bills") or []
    if not isinstance(raw_bills, list) or not all(isinstance(raw, dict) for raw in raw_bills):
        raise InvalidBudgetDocumentError("Document bills must be a list of objects")
    if version >= CURRENT_VERSION:
        return data

    upgraded = dict(data)
    bills = []
    for raw in raw_bills:
        bill = dict(raw)
        if not bill.get("frequency"):
            bill["frequency"] = Frequency.MONTHLY.value if bill.get("isRecurring") else Frequency.ONE_TIME.value
        if not bill.get("originalDueDay") and bill.get("dueDate"):
            try:
                bill["originalDueDay"] = parse_date(bill["dueDate"]).day
            except ValueError:
                pass
        bills.append(bill)

    upgraded["bills"] = bills
    upgraded["version"] = CURRENT_VERSION
    return upgraded


def aggregate_to_dict(aggregate: BudgetAggregate) -> Dict[str, Any]:
    return aggregate_to_document(aggregate).model_dump(mode="json", by_alias=True, exclude_none=True)


def aggregate_from_dict(data: Any, today: Optional[date] = None) -> BudgetAggregate:
    """Validate a raw document (any version) into a BudgetAggregate"""
    if not isinstance(data, dict):
        raise InvalidBudgetDocumentError("Budget document must be a JSON object")
    try:
        doc = BudgetDocument.model_validate(upgrade_document(data))
        return aggregate_from_document(doc, today)
    except ValidationError as e:
        raise InvalidBudgetDocumentError(f"Invalid budget document: {e.error_count()} error(s)") from e
    except (TypeError, ValueError, AttributeError, ArithmeticError) as e:
        raise InvalidBudgetDocumentError(f"Invalid budget document: {e}") from e


def dumps_aggregate(aggregate: BudgetAggregate, indent: Optional[int] = 2) -> str:
    return json.dumps(aggregate_to_dict(aggregate), indent=indent)


def loads_aggregate(text: str, today: Optional[date] = None) -> BudgetAggregate:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise InvalidBudgetDocumentError(f"Budget document is not valid JSON: {e.msg}") from e
    return aggregate_from_dict(data, today)
