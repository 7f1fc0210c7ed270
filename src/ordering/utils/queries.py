"""Read helpers over Protean querysets."""

PAGE_SIZE = 100


def iterate(queryset, page_size: int = PAGE_SIZE):
    """Yield every record of ``queryset``, fetching ``page_size`` at a time.

    Querysets come back limited to one page, so listing and reporting code
    that needs every matching record walks the pages explicitly.
    """
    offset = 0
    while True:
        page = queryset.offset(offset).limit(page_size).all()
        yield from page.items
        if len(page.items) < page_size:
            break
        offset += page_size


def count(queryset) -> int:
    return sum(1 for _ in iterate(queryset))
