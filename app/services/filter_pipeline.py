"""
Search / filter / sort pipeline shared by every list surface.

Stages run in a fixed order, each on the survivors of the previous one:
1. Text search (case-insensitive substring over a fixed set of fields)
2. Categorical filter (status, method or budget bucket)
3. Date range (payments only, inclusive bounds)
4. Stable sort

Unknown filter or sort tokens never raise. They fall back to "all" and the
default sort for the item shape so a stale client cannot break a listing.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Callable, Dict, Generic, List, Optional, Sequence, Tuple, Type, TypeVar

from app.core.logging import get_logger
from app.models.payment import Payment, PaymentMethod, PaymentStatus
from app.models.summary import FinancialSummary, ReconciliationStatus
from app.schemas.criteria import ALL, BudgetBucket, FilterCriteria, FilterMode, SortKey

logger = get_logger(__name__)

T = TypeVar("T")
E = TypeVar("E", bound=Enum)

# A category matcher receives the item and the raw filter value. It returns
# None when the value is not recognised, so the caller can fall back to "all".
Matcher = Callable[[Any, str], Optional[bool]]


def _normalise(token: str) -> str:
    return token.casefold().replace("_", "").replace(" ", "")


def resolve_token(enum_cls: Type[E], token: Optional[str]) -> Optional[E]:
    """Match a token against enum values, names and display labels."""
    if not token:
        return None
    wanted = _normalise(token)
    for member in enum_cls:
        candidates = [member.value, member.name]
        label = getattr(member, "display_name", None)
        if label:
            candidates.append(label)
        if any(_normalise(c) == wanted for c in candidates):
            return member
    return None


@dataclass(frozen=True)
class ItemShape(Generic[T]):
    """Field accessors for one kind of listed item."""

    name: str
    search_fields: Tuple[Callable[[T], Optional[str]], ...]
    sort_keys: Dict[SortKey, Callable[[T], Any]]
    default_sort: SortKey
    matchers: Dict[FilterMode, Matcher] = field(default_factory=dict)
    item_date: Optional[Callable[[T], date]] = None


# ===== MATCHERS =====

def _match_payment_status(payment: Payment, value: str) -> Optional[bool]:
    status = resolve_token(PaymentStatus, value)
    return None if status is None else payment.status == status


def _match_payment_method(payment: Payment, value: str) -> Optional[bool]:
    method = resolve_token(PaymentMethod, value)
    return None if method is None else payment.method == method


def _match_summary_status(summary: FinancialSummary, value: str) -> Optional[bool]:
    status = resolve_token(ReconciliationStatus, value)
    return None if status is None else summary.status == status


def _match_summary_method(summary: FinancialSummary, value: str) -> Optional[bool]:
    method = resolve_token(PaymentMethod, value)
    if method is None:
        return None
    return any(p.method == method for p in summary.payments)


def _match_budget(summary: FinancialSummary, value: str) -> Optional[bool]:
    bucket = resolve_token(BudgetBucket, value)
    if bucket is None:
        return None
    paid, agreed = summary.total_paid, summary.agreed_amount
    if bucket == BudgetBucket.ONGOING:
        return paid < agreed
    if bucket == BudgetBucket.COMPLETED:
        return paid == agreed
    return paid > agreed


PAYMENT_SHAPE: ItemShape[Payment] = ItemShape(
    name="payment",
    search_fields=(
        lambda p: p.payment_id,
        lambda p: p.customer_event_id,
        lambda p: p.payer_name,
        lambda p: p.reference,
    ),
    sort_keys={
        SortKey.NAME: lambda p: p.payer_name.casefold(),
        SortKey.AMOUNT: lambda p: p.amount,
        SortKey.PAID: lambda p: p.amount,
        SortKey.DATE: lambda p: p.payment_date,
        SortKey.STATUS: lambda p: p.status.value,
        SortKey.METHOD: lambda p: p.method.value,
    },
    default_sort=SortKey.DATE,
    matchers={
        FilterMode.STATUS: _match_payment_status,
        FilterMode.METHOD: _match_payment_method,
    },
    item_date=lambda p: p.payment_date,
)

SUMMARY_SHAPE: ItemShape[FinancialSummary] = ItemShape(
    name="summary",
    search_fields=(
        lambda s: s.customer_event_id,
        lambda s: s.event_name,
        lambda s: s.customer_name,
    ),
    sort_keys={
        SortKey.NAME: lambda s: s.customer_name.casefold(),
        SortKey.AMOUNT: lambda s: s.agreed_amount,
        SortKey.PAID: lambda s: s.total_paid,
        SortKey.DATE: lambda s: s.last_payment_date,
        SortKey.STATUS: lambda s: s.status.value,
    },
    default_sort=SortKey.NAME,
    matchers={
        FilterMode.STATUS: _match_summary_status,
        FilterMode.METHOD: _match_summary_method,
        FilterMode.BUDGET: _match_budget,
    },
)


def shape_for(item: Any) -> ItemShape:
    if isinstance(item, Payment):
        return PAYMENT_SHAPE
    if isinstance(item, FinancialSummary):
        return SUMMARY_SHAPE
    raise TypeError(f"No list shape registered for {type(item).__name__}")


# ===== STAGES =====

def apply_search(items: Sequence[T], term: str, shape: ItemShape[T]) -> List[T]:
    needle = term.strip().casefold()
    if not needle:
        return list(items)
    return [
        item for item in items
        if any(needle in (accessor(item) or "").casefold() for accessor in shape.search_fields)
    ]


def apply_category(
    items: Sequence[T],
    mode: str,
    value: str,
    shape: ItemShape[T],
) -> List[T]:
    if not value or value.casefold() == ALL:
        return list(items)

    filter_mode = resolve_token(FilterMode, mode)
    matcher = shape.matchers.get(filter_mode) if filter_mode else None
    if matcher is None:
        logger.debug("filter_mode_fallback", shape=shape.name, filter_mode=mode)
        return list(items)

    kept = []
    for item in items:
        matched = matcher(item, value)
        if matched is None:
            logger.debug("filter_value_fallback", shape=shape.name, filter_value=value)
            return list(items)
        if matched:
            kept.append(item)
    return kept


def apply_date_range(
    items: Sequence[T],
    date_from: Optional[date],
    date_to: Optional[date],
    shape: ItemShape[T],
) -> List[T]:
    if shape.item_date is None or (date_from is None and date_to is None):
        return list(items)
    return [
        item for item in items
        if (date_from is None or shape.item_date(item) >= date_from)
        and (date_to is None or shape.item_date(item) <= date_to)
    ]


def apply_sort(
    items: Sequence[T],
    sort_key: Optional[str],
    ascending: bool,
    shape: ItemShape[T],
) -> List[T]:
    """
    Stable sort. Descending only flips comparison direction; equal keys keep
    their input order either way. Items without a value for the key go last.
    An unrecognised key falls back to the default key, ascending.
    """
    key = resolve_token(SortKey, sort_key)
    if key not in shape.sort_keys:
        if sort_key:
            logger.debug("sort_key_fallback", shape=shape.name, sort_key=sort_key)
            ascending = True
        key = shape.default_sort
    accessor = shape.sort_keys[key]

    present = [item for item in items if accessor(item) is not None]
    missing = [item for item in items if accessor(item) is None]
    present.sort(key=accessor, reverse=not ascending)
    return present + missing


def filter_and_sort(
    items: Sequence[T],
    criteria: Optional[FilterCriteria] = None,
    shape: Optional[ItemShape[T]] = None,
) -> List[T]:
    """
    Run the full pipeline over payments or summaries.

    The shape is inferred from the first item when not given. The input
    sequence is never modified.
    """
    if not items:
        return []
    criteria = criteria or FilterCriteria()
    shape = shape or shape_for(items[0])

    result = apply_search(items, criteria.search_term, shape)
    result = apply_category(result, criteria.filter_mode, criteria.filter_value, shape)
    result = apply_date_range(result, criteria.date_from, criteria.date_to, shape)
    return apply_sort(result, criteria.sort_key, criteria.sort_ascending, shape)
