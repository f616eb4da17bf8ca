# app/services/cart_service.py
import logging
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.core import exceptions
from app.core.config import get_settings
from app.models.cart import CartItem
from app.models.product import Category, Product
from app.repositories.cart_repo import CartRepository
from app.repositories.product_repo import ProductRepository

settings = get_settings()
logger = logging.getLogger(__name__)


# ----- Cart view (derived, never persisted) -----


@dataclass(frozen=True)
class ResolvedEntry:
    """Line item whose product still exists in the catalog."""

    line_item: CartItem
    product: Product
    category: Category | None = None

    @property
    def subtotal(self) -> Decimal:
        return self.product.price * self.line_item.quantity


@dataclass(frozen=True)
class OrphanedEntry:
    """Line item whose product was deleted from the catalog."""

    line_item: CartItem

    @property
    def product_id(self) -> uuid.UUID:
        return self.line_item.product_id


CartEntry = ResolvedEntry | OrphanedEntry


@dataclass(frozen=True)
class CartSummary:
    total_items: int
    total_price: Decimal
    is_empty: bool
    orphaned_items: int = 0


@dataclass(frozen=True)
class CartView:
    entries: list[CartEntry] = field(default_factory=list)
    summary: CartSummary = field(
        default_factory=lambda: CartSummary(0, Decimal("0"), True)
    )


def summarize(entries: list[CartEntry]) -> CartSummary:
    """
    Totals for a list of entries.

      - total_items = sum of quantities over every line item
      - total_price = sum of quantity x current unit price over resolved lines
      - is_empty    = no line items at all
    """
    total_items = sum(e.line_item.quantity for e in entries)
    total_price = sum(
        (e.subtotal for e in entries if isinstance(e, ResolvedEntry)),
        Decimal("0"),
    )
    orphaned = sum(1 for e in entries if isinstance(e, OrphanedEntry))
    return CartSummary(
        total_items=total_items,
        total_price=total_price,
        is_empty=not entries,
        orphaned_items=orphaned,
    )


class CartService:
    """
    Cart aggregation engine.

    Responsibilities:
      - build the cart view from line items joined with live product data
      - enforce quantity >= 1 and product existence on add
      - enforce ownership on update/remove (other users' items are NotFound)
      - keep add (increments) and update (replaces) as distinct operations

    The caller passes the resolved user id into every method; the engine
    never authenticates and never reads request state.
    """

    def __init__(self, cart_repo: CartRepository, product_repo: ProductRepository):
        self.cart_repo = cart_repo
        self.product_repo = product_repo

    # ---- internal helpers ----

    @staticmethod
    @contextmanager
    def _storage(session: Session, action: str):
        try:
            yield
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception("Cart storage failure during %s", action)
            raise exceptions.StorageError() from exc

    @staticmethod
    def _validate_quantity(quantity: int) -> None:
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise exceptions.ValidationError("Quantity must be an integer of at least 1")
        if quantity > settings.MAX_CART_QUANTITY:
            raise exceptions.ValidationError(
                f"Quantity cannot exceed {settings.MAX_CART_QUANTITY}"
            )

    def _get_owned_item(
        self, session: Session, user_id: uuid.UUID, item_id: uuid.UUID
    ) -> CartItem:
        item = self.cart_repo.get_by_id(session, item_id)
        # Same error for "missing" and "someone else's" so non-owners
        # learn nothing about other carts.
        if item is None or item.user_id != user_id:
            raise exceptions.NotFoundError("Cart item not found")
        return item

    def _category_for(self, session: Session, product: Product) -> Category | None:
        if product.category_id is None:
            return None
        return self.product_repo.get_category(session, product.category_id)

    # ---- public operations ----

    def view(self, session: Session, user_id: uuid.UUID) -> CartView:
        """
        Current cart for the user.

        Lines whose product no longer exists are returned as OrphanedEntry
        and logged; they never break the view.
        """
        with self._storage(session, "view"):
            items = self.cart_repo.list_for_user(session, user_id)
            products = self.product_repo.get_many(
                session, list({it.product_id for it in items})
            )
            categories = self.product_repo.get_categories(
                session,
                list({p.category_id for p in products.values() if p.category_id}),
            )

        entries: list[CartEntry] = []
        for it in items:
            product = products.get(it.product_id)
            if product is None:
                logger.warning(
                    "Cart item %s of user %s references missing product %s",
                    it.id,
                    user_id,
                    it.product_id,
                )
                entries.append(OrphanedEntry(line_item=it))
                continue
            entries.append(
                ResolvedEntry(
                    line_item=it,
                    product=product,
                    category=categories.get(product.category_id),
                )
            )

        return CartView(entries=entries, summary=summarize(entries))

    def add_item(
        self,
        session: Session,
        user_id: uuid.UUID,
        product_id: uuid.UUID,
        quantity: int,
    ) -> ResolvedEntry:
        """
        Add `quantity` units of a product to the cart.

        - creates the line item on first add
        - otherwise increments the existing quantity (atomic upsert)

        Raises:
            ValidationError: quantity outside 1..MAX_CART_QUANTITY, or the
                line would exceed MAX_CART_QUANTITY after the increment
            NotFoundError: product does not exist
        """
        self._validate_quantity(quantity)

        with self._storage(session, "add_item"):
            product = self.product_repo.get_by_id(session, product_id)
            if product is None:
                raise exceptions.NotFoundError("Product not found")

            item = self.cart_repo.add_quantity(
                session,
                user_id=user_id,
                product_id=product_id,
                quantity=quantity,
                max_quantity=settings.MAX_CART_QUANTITY,
            )
            if item is None:
                raise exceptions.ValidationError(
                    f"A cart line cannot hold more than {settings.MAX_CART_QUANTITY} units"
                )
            category = self._category_for(session, product)

        logger.info(
            "User %s added %d x product %s (now %d)",
            user_id,
            quantity,
            product_id,
            item.quantity,
        )
        return ResolvedEntry(line_item=item, product=product, category=category)

    def update_quantity(
        self,
        session: Session,
        user_id: uuid.UUID,
        item_id: uuid.UUID,
        quantity: int,
    ) -> CartEntry:
        """
        Replace the quantity of one of the user's line items.

        Raises:
            ValidationError: quantity outside 1..MAX_CART_QUANTITY
            NotFoundError: item missing or owned by another user
        """
        self._validate_quantity(quantity)

        with self._storage(session, "update_quantity"):
            item = self._get_owned_item(session, user_id, item_id)
            item.quantity = quantity
            item = self.cart_repo.update(session, item)

            product = self.product_repo.get_by_id(session, item.product_id)
            if product is None:
                return OrphanedEntry(line_item=item)
            category = self._category_for(session, product)

        return ResolvedEntry(line_item=item, product=product, category=category)

    def remove_item(
        self,
        session: Session,
        user_id: uuid.UUID,
        item_id: uuid.UUID,
    ) -> None:
        """
        Delete one of the user's line items.

        A second call for the same id raises NotFoundError.
        """
        with self._storage(session, "remove_item"):
            item = self._get_owned_item(session, user_id, item_id)
            self.cart_repo.delete(session, item)
        logger.info("User %s removed cart item %s", user_id, item_id)

    def clear_cart(self, session: Session, user_id: uuid.UUID) -> int:
        """
        Remove every line item of the user. Returns the number removed (may be 0).
        """
        with self._storage(session, "clear_cart"):
            removed = self.cart_repo.clear_user_cart(session, user_id)
        logger.info("User %s cleared cart (%d items)", user_id, removed)
        return removed

    def item_count(self, session: Session, user_id: uuid.UUID) -> int:
        """Sum of quantities in the user's cart (0 when empty)."""
        with self._storage(session, "item_count"):
            return self.cart_repo.sum_quantity(session, user_id)
