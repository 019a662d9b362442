# comments in English; reST docstrings strict
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class PageMeta:
    """
    Output pagination metadata.

    :param page: Current page (1-based).
    :type page: int
    :param limit: Page size.
    :type limit: int
    :param total: Size of the full filtered set.
    :type total: int
    :param has_prev: Whether a previous page exists.
    :type has_prev: bool
    :param has_next: Whether a next page exists.
    :type has_next: bool
    """

    page: int
    limit: int
    total: int
    has_prev: bool
    has_next: bool


@dataclass(frozen=True, slots=True)
class PageOut(Generic[T]):
    """
    A page of DTOs plus its metadata.

    :param items: DTOs on this page.
    :param meta: Pagination metadata.
    """

    items: Sequence[T]
    meta: PageMeta
