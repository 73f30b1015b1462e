"""schemas/display.py — Request bodies that carry list filtering and sorting.

Request models for list endpoints subclass Display to accept:

    {"filter": {"status": "open", "min_amount": 10}, "sort": {"by": "created_at", "order": "desc"}}

and read filters back with the typed accessors below.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, Field

M = TypeVar("M", bound=BaseModel)


class MissingFilterKeyError(KeyError):
    """The requested key is not present in Display.filter."""

    def __str__(self) -> str:
        return "missing filter key"


class InvalidFilterTypeError(TypeError):
    """The filter value exists but is not of the requested type."""

    def __init__(self, message: str = "invalid filter type"):
        super().__init__(message)


class Sorter(BaseModel):
    by: str = ""
    order: str = ""


class Display(BaseModel):
    filter: dict[str, Any] = Field(default_factory=dict)
    sort: Sorter = Field(default_factory=Sorter)

    def get_order(self) -> str:
        return self.sort.order

    def set_order(self, order: str) -> None:
        self.sort.order = order

    def _lookup(self, key: str) -> Any:
        if key not in self.filter:
            raise MissingFilterKeyError(key)
        return self.filter[key]

    def get_filter_string(self, key: str) -> str:
        val = self._lookup(key)
        if not isinstance(val, str):
            raise InvalidFilterTypeError()
        return val

    def get_filter_num(self, key: str) -> int | float:
        val = self._lookup(key)
        # bool is an int subclass but never a numeric filter
        if isinstance(val, bool) or not isinstance(val, (int, float)):
            raise InvalidFilterTypeError()
        return val

    def get_filter_boolean(self, key: str) -> bool:
        val = self._lookup(key)
        if not isinstance(val, bool):
            raise InvalidFilterTypeError()
        return val

    def get_filter_object(self, key: str, model: type[M]) -> M:
        """Validate the nested filter value into `model`.

        Raises:
            MissingFilterKeyError: key is absent.
            pydantic.ValidationError: the value does not fit `model`.
        """
        return model.model_validate(self._lookup(key))
