from __future__ import annotations

from typing import Iterable

from sqlalchemy import select, update

from order_inventory.business.core.errors import ProductNotFoundError
from order_inventory.data.inventory.product import Product
from order_inventory.logger import get_logger

logger = get_logger("order_inventory.business.inventory.product_repository")


class ProductRepository:
    """
    Product access inside one unit of work.

    lock_for_update() is the only way stock rows are read for mutation. Locks
    are held until the enclosing transaction ends, so each row is locked at
    most once per unit of work; ``lock_order`` records acquisition order.
    """

    def __init__(self, session):
        self.session = session
        self._locked: dict[int, Product] = {}
        self.lock_order: list[int] = []

    def get(self, product_id: int) -> Product | None:
        return self.session.get(Product, product_id)

    def get_or_raise(self, product_id: int, field: str = "product_id") -> Product:
        product = self.get(product_id)
        if product is None:
            raise ProductNotFoundError(product_id, field=field)
        return product

    def add(self, product: Product) -> Product:
        self.session.add(product)
        return product

    def delete(self, product: Product) -> None:
        self._locked.pop(product.id, None)
        self.session.delete(product)

    def lock_for_update(self, product_id: int) -> Product:
        """SELECT ... FOR UPDATE the product row, refreshing any stale identity-map copy."""
        if product_id in self._locked:
            return self._locked[product_id]

        stmt = (
            select(Product)
            .where(Product.id == product_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        product = self.session.execute(stmt).scalar_one_or_none()
        if product is None:
            raise ProductNotFoundError(product_id)

        self._locked[product_id] = product
        self.lock_order.append(product_id)
        logger.debug(f"Locked product {product_id} for update")
        return product

    def lock_many(self, product_ids: Iterable[int]) -> dict[int, Product]:
        """Lock every distinct product in ascending id order."""
        return {product_id: self.lock_for_update(product_id) for product_id in sorted(set(product_ids))}

    def apply_stock_delta(self, product_id: int, delta: int) -> bool:
        """
        Add ``delta`` to stock in one guarded UPDATE so the new level is
        computed by the database, never from an earlier read. A decrease only
        matches while the row still holds enough stock.

        Returns:
            bool: False when the guard rejected the change; the product's
            stock_quantity is refreshed either way
        """
        stmt = update(Product).where(Product.id == product_id)
        if delta < 0:
            stmt = stmt.where(Product.stock_quantity >= -delta)
        stmt = (
            stmt.values(stock_quantity=Product.stock_quantity + delta)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)

        product = self._locked.get(product_id) or self.get_or_raise(product_id)
        self.session.refresh(product, attribute_names=['stock_quantity'])
        return result.rowcount == 1
