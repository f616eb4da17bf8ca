# app/repositories/cart_repo.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import delete, func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.models.cart import CartItem

# Dialects that support INSERT ... ON CONFLICT DO UPDATE
_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class CartRepository:
    """
    Data access layer for CartItem.

    - Pure DB operations; ownership and quantity rules live in the service.
    - Mutations commit the caller's session (one request = one unit of work).
    """

    # Get items for a user
    def list_for_user(self, session: Session, user_id: uuid.UUID) -> list[CartItem]:
        stmt = (
            select(CartItem)
            .where(CartItem.user_id == user_id)
            .order_by(CartItem.created_at, CartItem.id)
        )
        return list(session.exec(stmt).all())

    def get_item(
        self, session: Session, user_id: uuid.UUID, product_id: uuid.UUID
    ) -> CartItem | None:
        stmt = select(CartItem).where(
            CartItem.user_id == user_id, CartItem.product_id == product_id
        )
        return session.exec(stmt).first()

    def get_by_id(self, session: Session, item_id: uuid.UUID) -> CartItem | None:
        return session.get(CartItem, item_id)

    def sum_quantity(self, session: Session, user_id: uuid.UUID) -> int:
        stmt = select(func.coalesce(func.sum(CartItem.quantity), 0)).where(
            CartItem.user_id == user_id
        )
        return int(session.exec(stmt).one())

    # CRUD
    def add_quantity(
        self,
        session: Session,
        *,
        user_id: uuid.UUID,
        product_id: uuid.UUID,
        quantity: int,
        max_quantity: int,
    ) -> CartItem | None:
        """
        Create the (user, product) row or increment its quantity, atomically.

        On PostgreSQL/SQLite this is a single
        INSERT ... ON CONFLICT (user_id, product_id) DO UPDATE, so two
        concurrent adds can never overwrite each other. Other dialects lock
        the existing row with SELECT ... FOR UPDATE before incrementing.

        Returns None, and writes nothing, when the resulting quantity
        would exceed `max_quantity`.
        """
        now = datetime.now(timezone.utc)
        dialect = session.get_bind().dialect.name
        insert = _UPSERT_INSERTS.get(dialect)

        if insert is not None:
            table = CartItem.__table__
            stmt = insert(table).values(
                id=uuid.uuid4(),
                user_id=user_id,
                product_id=product_id,
                quantity=quantity,
                created_at=now,
                updated_at=now,
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=[table.c.user_id, table.c.product_id],
                set_={
                    "quantity": table.c.quantity + stmt.excluded.quantity,
                    "updated_at": now,
                },
                where=table.c.quantity + stmt.excluded.quantity <= max_quantity,
            )
            result = session.execute(stmt)
            if result.rowcount == 0:
                session.rollback()
                return None
        elif not self._add_locked(
            session, user_id, product_id, quantity, max_quantity, now
        ):
            session.rollback()
            return None

        session.commit()
        return self.get_item(session, user_id, product_id)

    def _locked_item(
        self, session: Session, user_id: uuid.UUID, product_id: uuid.UUID
    ) -> CartItem | None:
        stmt = (
            select(CartItem)
            .where(CartItem.user_id == user_id, CartItem.product_id == product_id)
            .with_for_update()
        )
        return session.exec(stmt).first()

    def _add_locked(
        self,
        session: Session,
        user_id: uuid.UUID,
        product_id: uuid.UUID,
        quantity: int,
        max_quantity: int,
        now: datetime,
    ) -> bool:
        """
        Row-lock fallback for dialects without ON CONFLICT.

        A concurrent first add can insert the row between our SELECT and
        INSERT; the unique constraint then fails inside a savepoint and
        we re-read the (now existing) row under lock and increment it.
        """
        existing = self._locked_item(session, user_id, product_id)
        if existing is None:
            try:
                with session.begin_nested():
                    session.add(
                        CartItem(
                            user_id=user_id,
                            product_id=product_id,
                            quantity=quantity,
                            created_at=now,
                            updated_at=now,
                        )
                    )
                return True
            except IntegrityError:
                existing = self._locked_item(session, user_id, product_id)

        if existing.quantity + quantity > max_quantity:
            return False
        existing.quantity += quantity
        existing.updated_at = now
        session.add(existing)
        return True

    def update(self, session: Session, item: CartItem) -> CartItem:
        item.updated_at = datetime.now(timezone.utc)
        session.add(item)
        session.commit()
        session.refresh(item)
        return item

    def delete(self, session: Session, item: CartItem) -> None:
        session.delete(item)
        session.commit()

    def clear_user_cart(self, session: Session, user_id: uuid.UUID) -> int:
        """Delete every row of the user's cart; return how many were removed."""
        result = session.execute(delete(CartItem).where(CartItem.user_id == user_id))
        session.commit()
        return result.rowcount or 0
