# app/repositories/product_repo.py
import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import func, or_
from sqlmodel import Session, select

from app.models.product import Category, Product


class ProductRepository:
    """
    Data access layer for Product & Category.

    - Pure DB operations (CRUD + queries).
    - No FastAPI, no business logic.
    - Listing methods return (rows, total) so callers can paginate.
    """

    # ----- Products -----

    def get_by_id(self, session: Session, product_id: uuid.UUID) -> Product | None:
        return session.get(Product, product_id)

    def get_by_slug(self, session: Session, slug: str) -> Product | None:
        stmt = select(Product).where(Product.slug == slug)
        return session.exec(stmt).first()

    def get_many(
        self, session: Session, product_ids: list[uuid.UUID]
    ) -> dict[uuid.UUID, Product]:
        """Batch lookup keyed by id; missing ids are simply absent."""
        if not product_ids:
            return {}
        stmt = select(Product).where(Product.id.in_(product_ids))
        return {p.id: p for p in session.exec(stmt).all()}

    def _paginate(self, session: Session, stmt, offset: int, limit: int):
        total = session.exec(
            select(func.count()).select_from(stmt.order_by(None).subquery())
        ).one()
        rows = session.exec(stmt.offset(offset).limit(limit)).all()
        return list(rows), int(total)

    def list_products(
        self,
        session: Session,
        offset: int = 0,
        limit: int = 12,
        only_active: bool = True,
        category_id: uuid.UUID | None = None,
        featured_since: datetime | None = None,
    ) -> tuple[list[Product], int]:
        """
        Newest-first product listing.

        featured_since: when set, keep only products that are flagged
        featured OR were created after that moment.
        """
        stmt = select(Product)
        if only_active:
            stmt = stmt.where(Product.is_active == True)  # noqa: E712
        if category_id is not None:
            stmt = stmt.where(Product.category_id == category_id)
        if featured_since is not None:
            stmt = stmt.where(
                or_(Product.is_featured == True, Product.created_at >= featured_since)  # noqa: E712
            )
        stmt = stmt.order_by(Product.created_at.desc(), Product.id)
        return self._paginate(session, stmt, offset, limit)

    def search(
        self,
        session: Session,
        query: str | None = None,
        category_id: uuid.UUID | None = None,
        min_price: Decimal | None = None,
        max_price: Decimal | None = None,
        offset: int = 0,
        limit: int = 15,
    ) -> tuple[list[Product], int]:
        stmt = select(Product)
        if query:
            pattern = f"%{query}%"
            stmt = stmt.where(
                or_(Product.name.ilike(pattern), Product.description.ilike(pattern))
            )
        if category_id is not None:
            stmt = stmt.where(Product.category_id == category_id)
        if min_price is not None:
            stmt = stmt.where(Product.price >= min_price)
        if max_price is not None:
            stmt = stmt.where(Product.price <= max_price)
        stmt = stmt.order_by(Product.name, Product.id)
        return self._paginate(session, stmt, offset, limit)

    def create(self, session: Session, product: Product) -> Product:
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    def update(self, session: Session, product: Product) -> Product:
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    def delete(self, session: Session, product: Product) -> None:
        session.delete(product)
        session.commit()

    # ----- Categories -----

    def get_category(
        self, session: Session, category_id: uuid.UUID
    ) -> Category | None:
        return session.get(Category, category_id)

    def get_category_by_slug(self, session: Session, slug: str) -> Category | None:
        stmt = select(Category).where(Category.slug == slug)
        return session.exec(stmt).first()

    def get_categories(
        self, session: Session, category_ids: list[uuid.UUID]
    ) -> dict[uuid.UUID, Category]:
        if not category_ids:
            return {}
        stmt = select(Category).where(Category.id.in_(category_ids))
        return {c.id: c for c in session.exec(stmt).all()}

    def list_categories(
        self, session: Session, slugs: list[str] | None = None
    ) -> list[Category]:
        stmt = select(Category)
        if slugs is not None:
            stmt = stmt.where(Category.slug.in_(slugs))
        stmt = stmt.order_by(Category.name)
        return list(session.exec(stmt).all())

    def count_products_by_category(self, session: Session) -> dict[uuid.UUID, int]:
        stmt = (
            select(Product.category_id, func.count(Product.id))
            .where(Product.is_active == True)  # noqa: E712
            .group_by(Product.category_id)
        )
        return {cid: int(n) for cid, n in session.exec(stmt).all() if cid is not None}

    def category_stats(self, session: Session, category_id: uuid.UUID) -> dict:
        stmt = select(
            func.count(Product.id),
            func.coalesce(func.sum(Product.stock), 0),
            func.min(Product.price),
            func.max(Product.price),
            func.avg(Product.price),
        ).where(Product.category_id == category_id)
        total, stock, min_price, max_price, avg_price = session.exec(stmt).one()

        active_stmt = select(func.count(Product.id)).where(
            Product.category_id == category_id,
            Product.is_active == True,  # noqa: E712
        )
        active = session.exec(active_stmt).one()

        return {
            "total_products": int(total),
            "active_products": int(active),
            "total_stock": int(stock),
            "min_price": min_price,
            "max_price": max_price,
            "avg_price": avg_price,
        }

    def create_category(self, session: Session, category: Category) -> Category:
        session.add(category)
        session.commit()
        session.refresh(category)
        return category

    def update_category(self, session: Session, category: Category) -> Category:
        session.add(category)
        session.commit()
        session.refresh(category)
        return category

    def delete_category(self, session: Session, category: Category) -> None:
        """Delete a category; its products become uncategorized."""
        stmt = select(Product).where(Product.category_id == category.id)
        for product in session.exec(stmt).all():
            product.category_id = None
            session.add(product)
        session.delete(category)
        session.commit()
