from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel

ALL = "all"


class FilterMode(str, Enum):
    STATUS = "status"
    METHOD = "method"
    BUDGET = "budget"


class BudgetBucket(str, Enum):
    ONGOING = "ongoing"
    COMPLETED = "completed"
    OVER_BUDGET = "over_budget"


class SortKey(str, Enum):
    NAME = "name"
    AMOUNT = "amount"
    PAID = "paid"
    DATE = "date"
    STATUS = "status"
    METHOD = "method"


class FilterCriteria(BaseModel):
    """
    Search/filter/sort settings shared by every list surface.

    Tokens are kept as plain strings: a stale or unknown value is resolved
    to a default by the pipeline instead of failing validation here.
    """

    search_term: str = ""
    filter_mode: str = FilterMode.STATUS.value
    filter_value: str = ALL
    sort_key: Optional[str] = None
    sort_ascending: bool = True
    date_from: Optional[date] = None
    date_to: Optional[date] = None

    model_config = {"frozen": True}
