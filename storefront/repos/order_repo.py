# storefront/repos/order_repo.py
from typing import Any, Dict, List, Tuple

from sqlalchemy import select, update, func
from sqlalchemy.orm import Session, selectinload

from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def add_order(self, order: OrderModel) -> OrderModel:
        # flush only, the caller owns the transaction
        self.db.add(order)
        self.db.flush()
        return order

    def add_items(self, items: List[OrderItemModel]) -> None:
        self.db.add_all(items)
        self.db.flush()

    def get_order(self, order_id: str) -> OrderModel | None:
        return self.db.get(OrderModel, order_id)

    def get_order_with_items(self, order_id: str) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel)
            .options(selectinload(OrderModel.items))
            .where(OrderModel.id == order_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def update_order(
        self,
        order_id: str,
        values: Dict[str, Any],
        expected_version: int | None = None,
    ) -> int:
        """
        Applies a post-creation update (status / payment ids) and bumps the
        version. With expected_version the row is only touched when the
        version still matches. Returns rowcount, the caller commits.
        """
        stmt = update(OrderModel).where(OrderModel.id == order_id)
        if expected_version is not None:
            stmt = stmt.where(OrderModel.version == expected_version)
        stmt = stmt.values(**values, version=OrderModel.version + 1)
        result = self.db.execute(stmt.execution_options(synchronize_session=False))
        return result.rowcount

    def list_orders(
        self,
        user_id: str | None = None,
        status: str | None = None,
        page: int = 1,
        page_size: int = 10,
    ) -> Tuple[List[Tuple[OrderModel, int]], int]:
        """Returns ((order, items_count) rows, total_count), newest first."""
        filters = []
        if user_id is not None:
            filters.append(OrderModel.user_id == user_id)
        if status is not None:
            filters.append(OrderModel.status == status)

        total = self.db.execute(
            select(func.count(OrderModel.id)).where(*filters)
        ).scalar_one()

        items_count = (
            select(func.count(OrderItemModel.id))
            .where(OrderItemModel.order_id == OrderModel.id)
            .correlate(OrderModel)
            .scalar_subquery()
        )
        rows = self.db.execute(
            select(OrderModel, items_count)
            .where(*filters)
            .order_by(OrderModel.created_at.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        ).all()

        return [(order, count) for order, count in rows], total

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
