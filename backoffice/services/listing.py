"""
Search, sort and pagination shared by the list endpoints.

Everything happens in memory over the records of one membership
list, which is how the key-value layout is meant to be read.
"""

from math import ceil

from backoffice.time_utils import parse_iso

# A limit at or above this returns every match unpaginated.
UNPAGINATED_LIMIT = 1000


def matches_search(record: dict, term: str, fields: tuple[str, ...]) -> bool:
    """Case-insensitive substring match over the given fields."""
    if not term:
        return True
    term = term.lower()
    for name in fields:
        value = record.get(name)
        if value is not None and term in str(value).lower():
            return True
    return False


def newest_first(records: list[dict], field: str) -> list[dict]:
    def key(record: dict) -> float:
        parsed = parse_iso(record.get(field))
        return parsed.timestamp() if parsed else 0.0

    return sorted(records, key=key, reverse=True)


def paginate(records: list, page: int, limit: int) -> tuple[list, dict]:
    page = max(page, 1)
    limit = max(limit, 1)
    total_count = len(records)
    total_pages = ceil(total_count / limit)

    if limit < UNPAGINATED_LIMIT:
        start = (page - 1) * limit
        records = records[start:start + limit]

    return records, {
        "page": page,
        "limit": limit,
        "totalCount": total_count,
        "totalPages": total_pages,
        "hasNextPage": page < total_pages,
        "hasPreviousPage": page > 1,
    }
