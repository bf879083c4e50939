"""Paging parameters for list queries."""

from dataclasses import dataclass

from stock_kernel.exceptions import InvalidArgumentError


@dataclass
class PagingInfo:
    """
    Page request for a list query.

    page is 1-based.  When load_record_count is set, the selector fills in
    total_record_count with the number of rows matching the filter before
    paging is applied.
    """

    page: int = 1
    page_size: int = 0
    load_record_count: bool = False
    total_record_count: int | None = None

    def __post_init__(self) -> None:
        if self.page < 1:
            raise InvalidArgumentError("paging", f"page must be >= 1, got {self.page}")
        if self.page_size < 0:
            raise InvalidArgumentError("paging", f"page_size must be >= 0, got {self.page_size}")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size if self.page_size else 0

    @property
    def limit(self) -> int | None:
        """Row limit, or None when page_size is 0 (no paging)."""
        return self.page_size or None
