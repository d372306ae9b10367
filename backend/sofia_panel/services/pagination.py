"""Recorrido secuencial de listados paginados con techo de páginas.

El recorrido se detiene ante una página vacía, una página incompleta (menos
de `page_size` elementos) o al alcanzar `max_pages`. Con los valores por
defecto se leen como máximo 20 x 25 = 500 elementos; lo que exceda ese techo
se trunca sin aviso.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import aclosing
from typing import Any

PAGE_SIZE = 25
MAX_PAGES = 20

PageFetcher = Callable[[int], Awaitable[list[dict[str, Any]]]]


async def iter_pages(
    fetch_page: PageFetcher,
    *,
    page_size: int = PAGE_SIZE,
    max_pages: int = MAX_PAGES,
) -> AsyncIterator[list[dict[str, Any]]]:
    """Produce páginas en orden a partir de la 1; cada página depende de la anterior."""
    for page in range(1, max_pages + 1):
        items = await fetch_page(page)
        if not items:
            return
        yield items
        if len(items) < page_size:
            return


async def collect_pages(
    fetch_page: PageFetcher,
    *,
    limit: int | None = None,
    page_size: int = PAGE_SIZE,
    max_pages: int = MAX_PAGES,
) -> list[dict[str, Any]]:
    """Acumula los elementos de todas las páginas en el orden del upstream.

    Con `limit` se deja de pedir páginas en cuanto se reúnen suficientes
    elementos y el resultado se recorta a ese tamaño. Cualquier error de
    `fetch_page` se propaga y descarta lo acumulado.
    """
    collected: list[dict[str, Any]] = []
    pages = iter_pages(fetch_page, page_size=page_size, max_pages=max_pages)
    async with aclosing(pages):
        async for items in pages:
            collected.extend(items)
            if limit is not None and len(collected) >= limit:
                break
    return collected if limit is None else collected[:limit]
