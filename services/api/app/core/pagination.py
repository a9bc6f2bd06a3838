import math
from dataclasses import dataclass

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100
# Anything past this would overflow the OFFSET column type
MAX_PAGE = 1_000_000


def _to_int(raw, default: int) -> int:
    if raw is None or raw == "":
        return default
    try:
        return int(str(raw).strip())
    except ValueError:
        return default


@dataclass(frozen=True)
class Page:
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @classmethod
    def parse(cls, page=None, limit=None, default_limit: int = DEFAULT_LIMIT) -> "Page":
        """Lenient parse: junk and absurd pages fall back to defaults, limit is clamped to [1, MAX_LIMIT]."""
        p = _to_int(page, DEFAULT_PAGE)
        if p > MAX_PAGE:
            p = DEFAULT_PAGE
        lim = _to_int(limit, default_limit)
        return cls(page=max(p, 1), limit=min(max(lim, 1), MAX_LIMIT))

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def meta(self, total: int) -> dict:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": total,
            "total_pages": math.ceil(total / self.limit) if total else 0,
        }
