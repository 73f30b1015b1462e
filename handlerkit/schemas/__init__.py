from handlerkit.schemas.pagination import Links, PaginationQuery, PaginationResp, PaginationResult
from handlerkit.schemas.envelope import Envelope
from handlerkit.schemas.display import Display, InvalidFilterTypeError, MissingFilterKeyError, Sorter

__all__ = [
    "Links", "PaginationQuery", "PaginationResp", "PaginationResult",
    "Envelope",
    "Display", "Sorter", "MissingFilterKeyError", "InvalidFilterTypeError",
]
