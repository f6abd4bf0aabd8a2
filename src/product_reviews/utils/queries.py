"""Unbounded repository scans.

Repository queries are paged by the provider, so scans that must see every
matching record (rating recomputes, lifecycle cascades) walk the pages.
"""

from protean.utils.globals import current_domain

PAGE_SIZE = 500


def fetch_all(aggregate_cls, order_by: str = "id", **filters) -> list:
    repo = current_domain.repository_for(aggregate_cls)
    items: list = []
    offset = 0
    while True:
        page = repo._dao.query.filter(**filters).order_by(order_by).offset(offset).limit(PAGE_SIZE).all().items
        items.extend(page)
        if len(page) < PAGE_SIZE:
            return items
        offset += PAGE_SIZE
