"""Order queries beyond load-by-id."""

from storefront.domain import storefront
from storefront.order.order import Order


@storefront.repository(part_of=Order)
class OrderRepository:
    def find_by_order_no(self, order_no: str) -> Order | None:
        orders = self._dao.query.filter(order_no=order_no).all().items
        return orders[0] if orders else None

    def find_for_user(self, order_id, user_id) -> Order | None:
        """Load an order only if ``user_id`` placed it."""
        orders = self._dao.query.filter(id=str(order_id), user_id=str(user_id)).all().items
        return orders[0] if orders else None

    def list_for_user(self, user_id, status=None, page: int = 1, page_size: int = 20):
        """Page through a user's orders, newest first. Returns (orders, total)."""
        filters = {"user_id": str(user_id)}
        if status:
            filters["status"] = status

        page = max(page, 1)
        result = (
            self._dao.query.filter(**filters)
            .order_by("-created_at")
            .offset((page - 1) * page_size)
            .limit(page_size)
            .all()
        )
        return result.items, result.total
