"""Offset pagination for SQLAlchemy queries."""

import math


def paginate(query, page, limit):
    """Return (items, pagination) for ``query``.

    ``pagination`` is the envelope list endpoints return to the dashboard.
    """
    page = max(int(page), 1)
    limit = max(int(limit), 1)
    offset = (page - 1) * limit

    total_count = query.order_by(None).count()
    items = query.offset(offset).limit(limit).all()

    return items, {
        "currentPage": page,
        "totalPages": math.ceil(total_count / limit) if total_count else 0,
        "totalCount": total_count,
        "hasNext": offset + len(items) < total_count,
        "hasPrev": page > 1,
    }
