from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType

"""Product catalog: read-only product id -> product name lookup.

ProductCatalog is an immutable snapshot. ProductRepository owns the snapshot
currently in use and replaces it wholesale on reload; a lookup reads the
reference once, so it sees either the old or the new snapshot, never a mix.
"""

__all__ = [
    "ProductCatalog",
    "ProductRepository",
]

logger = logging.getLogger(__name__)


class ProductCatalog(Mapping[int, str]):
    """Immutable mapping of positive product id to non-empty product name.

    Safe for any number of concurrent readers: the underlying dict is a private
    copy exposed only through a MappingProxyType.
    """

    __slots__ = ("_products",)

    def __init__(self, products: Mapping[int, str] | None = None) -> None:
        self._products: Mapping[int, str] = MappingProxyType(dict(products or {}))

    @classmethod
    def from_rows(cls, rows: Iterable[tuple[int, str]]) -> ProductCatalog:
        """Build a catalog from (id, name) pairs.

        Rows with a non-positive id or an empty name are excluded, and for a
        duplicated id the first occurrence wins.
        """
        products: dict[int, str] = {}
        for product_id, name in rows:
            if not isinstance(product_id, int) or product_id <= 0:
                continue
            if name is None or not str(name).strip():
                continue
            products.setdefault(product_id, str(name).strip())
        return cls(products)

    def lookup(self, product_id: int) -> tuple[str | None, bool]:
        """Return (name, True) when the id is known, (None, False) otherwise.

        Never raises, also for non-positive or non-integer ids.
        """
        if not isinstance(product_id, int) or product_id <= 0:
            return None, False
        name = self._products.get(product_id)
        return name, name is not None

    def __getitem__(self, product_id: int) -> str:
        return self._products[product_id]

    def __iter__(self) -> Iterator[int]:
        return iter(self._products)

    def __len__(self) -> int:
        return len(self._products)

    def __repr__(self) -> str:  # pragma: no cover (trivial)
        return f"ProductCatalog(count={len(self)})"


class ProductRepository:
    """Holder of the catalog snapshot used by the enrichment service.

    Starts empty (is_loaded False). load() publishes a new snapshot with a
    single reference assignment; the previous snapshot is never mutated.
    """

    def __init__(self, catalog: ProductCatalog | None = None) -> None:
        self._catalog = catalog if catalog is not None else ProductCatalog()

    @property
    def catalog(self) -> ProductCatalog:
        return self._catalog

    @property
    def count(self) -> int:
        return len(self._catalog)

    @property
    def is_loaded(self) -> bool:
        return len(self._catalog) > 0

    def lookup(self, product_id: int) -> tuple[str | None, bool]:
        # 参照を一度だけ読む (reload と並行しても単一スナップショットを参照)
        catalog = self._catalog
        return catalog.lookup(product_id)

    def load(self, products: ProductCatalog | Mapping[int, str]) -> ProductCatalog:
        """Publish a new catalog snapshot and return it."""
        catalog = products if isinstance(products, ProductCatalog) else ProductCatalog(products)
        self._catalog = catalog
        logger.info(f"Loaded {len(catalog)} products into lookup service")
        return catalog
