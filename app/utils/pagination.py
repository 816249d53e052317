import math
from dataclasses import dataclass
from typing import Callable, Generic, List, TypeVar

T = TypeVar("T")
R = TypeVar("R")

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


@dataclass
class Page(Generic[T]):
    """
    offset 기반 페이지 결과
    - page: 0부터 시작하는 페이지 번호
    """
    items: List[T]
    page: int
    size: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.size) if self.size else 0

    def map(self, fn: Callable[[T], R]) -> "Page[R]":
        return Page(items=[fn(i) for i in self.items], page=self.page, size=self.size, total=self.total)
