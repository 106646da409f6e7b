from dataclasses import dataclass
from typing import Any

from sqlalchemy import func
from sqlmodel import Session, select


@dataclass
class Page:
    items: list[Any]
    total: int
    total_pages: int
    current_page: int
    page_size: int


def paginate(
    *,
    session: Session,
    query,
    page: int = 1,
    page_size: int = 10,
) -> Page:
    """
    Run `query` for one page (1-based) and count the full result set.
    Out-of-range page / page_size values fall back to 1 / 10.
    """
    if page < 1:
        page = 1

    if page_size < 1:
        page_size = 10

    offset = (page - 1) * page_size

    total = session.exec(
        select(func.count()).select_from(query.subquery())
    ).one()

    items = session.exec(
        query.offset(offset).limit(page_size)
    ).all()

    return Page(
        items=list(items),
        total=total,
        total_pages=(total + page_size - 1) // page_size,
        current_page=page,
        page_size=page_size,
    )
