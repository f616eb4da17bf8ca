# app/services/product_service.py
import logging
import re
import uuid
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session

from app.core import exceptions
from app.core.config import get_settings
from app.core.formatting import image_url, money_pair
from app.models.product import Category, Product
from app.repositories.product_repo import ProductRepository
from app.schemas.common import Pagination
from app.schemas.product import (
    CategoryCreate,
    CategoryHero,
    CategoryPage,
    CategoryRead,
    CategoryStats,
    CategoryUpdate,
    CategoryWithHero,
    ProductCreate,
    ProductDetailRead,
    ProductPage,
    ProductRead,
    ProductUpdate,
)
from app.services import presenters

settings = get_settings()
logger = logging.getLogger(__name__)

# Banner shown on top of the main category pages
CATEGORY_HEROES: dict[str, dict[str, str]] = {
    "men": {
        "img": "heroes/men.jpg",
        "title": "MEN'S WARDROBE",
        "subtitle": "Bold fits for every day.",
    },
    "women": {
        "img": "heroes/women.jpg",
        "title": "WOMEN'S WARDROBE",
        "subtitle": "Statement pieces & everyday essentials.",
    },
    "footwear": {
        "img": "heroes/sneakers.jpeg",
        "title": "FOOTWEAR",
        "subtitle": "Step into comfort and style.",
    },
    "accessories": {
        "img": "heroes/watch.jpg",
        "title": "ACCESSORIES",
        "subtitle": "Finish your look with the right detail.",
    },
}


class ProductService:
    """
    Business logic for the catalog (products & categories).

    Responsibilities:
      - slug generation & uniqueness
      - listing, filtering and pagination
      - shaping rows into read models
      - admin-only operations (enforced at router via require_admin)
    """

    def __init__(self, repo: ProductRepository):
        self.repo = repo

    # ----- Helpers -----

    @staticmethod
    def _slugify(raw: str) -> str:
        """
        Basic slugification:
          - lowercase
          - non-alphanumeric -> '-'
          - collapse multiple '-'
          - strip leading/trailing '-'
        """
        value = raw.strip().lower()
        value = re.sub(r"[^a-z0-9]+", "-", value)
        value = re.sub(r"-+", "-", value)
        value = value.strip("-")
        return value or "product"

    def _ensure_unique_slug(self, session: Session, base_slug: str, lookup) -> str:
        """
        Ensure slug is unique by appending -2, -3, ... if needed.
        """
        slug = base_slug
        i = 2
        while lookup(session, slug) is not None:
            slug = f"{base_slug}-{i}"
            i += 1
        return slug

    @staticmethod
    @contextmanager
    def _writing(session: Session):
        try:
            yield
        except IntegrityError as exc:
            session.rollback()
            raise exceptions.ConflictError("Slug already in use") from exc
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception("Catalog storage failure")
            raise exceptions.StorageError() from exc

    @staticmethod
    def _offset(page: int, per_page: int) -> int:
        return (page - 1) * per_page

    def _cards(self, session: Session, products: list[Product]) -> list[ProductRead]:
        categories = self.repo.get_categories(
            session, list({p.category_id for p in products if p.category_id})
        )
        return [
            presenters.product_card(p, categories.get(p.category_id)) for p in products
        ]

    def _page(
        self,
        session: Session,
        products: list[Product],
        total: int,
        page: int,
        per_page: int,
    ) -> ProductPage:
        return ProductPage(
            products=self._cards(session, products),
            pagination=Pagination.build(page, per_page, total, len(products)),
        )

    def _featured_since(self) -> datetime:
        return datetime.now(timezone.utc) - timedelta(days=settings.FEATURED_RECENT_DAYS)

    # ----- Products (public) -----

    def list_products(
        self,
        session: Session,
        page: int = 1,
        per_page: int = 12,
        category_slug: str | None = None,
        featured: bool = False,
    ) -> ProductPage:
        """
        Active products, newest first.

        - category_slug: unknown slugs are ignored (full listing).
        - featured: only featured products or those added in the last
          FEATURED_RECENT_DAYS days.
        """
        category_id = None
        if category_slug:
            category = self.repo.get_category_by_slug(session, category_slug)
            if category:
                category_id = category.id

        products, total = self.repo.list_products(
            session,
            offset=self._offset(page, per_page),
            limit=per_page,
            category_id=category_id,
            featured_since=self._featured_since() if featured else None,
        )
        return self._page(session, products, total, page, per_page)

    def search_products(
        self,
        session: Session,
        query: str | None = None,
        category_id: uuid.UUID | None = None,
        min_price: Decimal | None = None,
        max_price: Decimal | None = None,
        page: int = 1,
        per_page: int = 15,
    ) -> ProductPage:
        if min_price is not None and max_price is not None and min_price > max_price:
            raise exceptions.ValidationError("min_price cannot be greater than max_price")

        products, total = self.repo.search(
            session,
            query=query,
            category_id=category_id,
            min_price=min_price,
            max_price=max_price,
            offset=self._offset(page, per_page),
            limit=per_page,
        )
        return self._page(session, products, total, page, per_page)

    def featured_products(self, session: Session) -> list[ProductRead]:
        products, _ = self.repo.list_products(
            session,
            limit=settings.FEATURED_LIMIT,
            featured_since=self._featured_since(),
        )
        return self._cards(session, products)

    def find_product(self, session: Session, id_or_slug: str) -> Product:
        """
        Look a product up by UUID first, then by slug.

        Raises:
            NotFoundError: neither matches.
        """
        product = None
        try:
            product = self.repo.get_by_id(session, uuid.UUID(id_or_slug))
        except ValueError:
            pass
        if product is None:
            product = self.repo.get_by_slug(session, id_or_slug)
        if product is None:
            raise exceptions.NotFoundError(
                f"Product with ID or slug '{id_or_slug}' not found"
            )
        return product

    def get_product(self, session: Session, product_id: uuid.UUID) -> Product:
        product = self.repo.get_by_id(session, product_id)
        if not product:
            raise exceptions.NotFoundError("Product not found")
        return product

    def product_detail(self, session: Session, product: Product) -> ProductDetailRead:
        category = None
        if product.category_id:
            category = self.repo.get_category(session, product.category_id)
        return presenters.product_detail(product, category)

    # ----- Products (admin) -----

    def create_product(self, session: Session, payload: ProductCreate) -> Product:
        """
        Create a new product with a unique slug.

        - If slug is provided => slugify & ensure unique.
        - Else => slugify from name & ensure unique.
        """
        if payload.category_id is not None:
            self.get_category(session, payload.category_id)

        base_slug = self._slugify(payload.slug or payload.name)
        slug = self._ensure_unique_slug(session, base_slug, self.repo.get_by_slug)

        product = Product(
            name=payload.name,
            slug=slug,
            description=payload.description,
            price=payload.price,
            stock=payload.stock,
            image=payload.image,
            is_active=payload.is_active,
            is_featured=payload.is_featured,
            category_id=payload.category_id,
        )
        with self._writing(session):
            product = self.repo.create(session, product)
        logger.info("Created product %s (%s)", product.id, product.slug)
        return product

    def update_product(
        self,
        session: Session,
        product_id: uuid.UUID,
        payload: ProductUpdate,
    ) -> Product:
        """
        Partial update of a product.

        - Only fields present in the payload are touched.
        - If slug is changed, enforce uniqueness.
        - Price changes show up in every cart on its next view.
        """
        product = self.get_product(session, product_id)
        changes = payload.model_dump(exclude_unset=True)

        if "slug" in changes and changes["slug"] is not None:
            new_base_slug = self._slugify(changes.pop("slug"))
            if new_base_slug != product.slug:
                product.slug = self._ensure_unique_slug(
                    session, new_base_slug, self.repo.get_by_slug
                )
        changes.pop("slug", None)

        if changes.get("category_id") is not None:
            self.get_category(session, changes["category_id"])

        for key, value in changes.items():
            if value is None and key not in {"description", "image", "category_id"}:
                continue
            setattr(product, key, value)
        product.updated_at = datetime.now(timezone.utc)

        with self._writing(session):
            return self.repo.update(session, product)

    def delete_product(self, session: Session, product_id: uuid.UUID) -> None:
        """
        Delete a product.

        Cart lines pointing at it are left alone and show up as orphaned.
        """
        product = self.get_product(session, product_id)
        with self._writing(session):
            self.repo.delete(session, product)
        logger.info("Deleted product %s", product_id)

    # ----- Categories -----

    def get_category(self, session: Session, category_id: uuid.UUID) -> Category:
        category = self.repo.get_category(session, category_id)
        if not category:
            raise exceptions.NotFoundError("Category not found")
        return category

    def category_read(
        self, category: Category, product_count: int = 0
    ) -> CategoryRead:
        return CategoryRead(
            id=category.id,
            name=category.name,
            slug=category.slug,
            image=image_url(f"{category.slug}.jpg", folder="categories"),
            product_count=product_count,
        )

    def category_detail(self, session: Session, category_id: uuid.UUID) -> CategoryRead:
        category = self.get_category(session, category_id)
        counts = self.repo.count_products_by_category(session)
        return self.category_read(category, counts.get(category.id, 0))

    def list_categories(
        self, session: Session, slugs: list[str] | None = None
    ) -> list[CategoryRead]:
        counts = self.repo.count_products_by_category(session)
        return [
            self.category_read(c, counts.get(c.id, 0))
            for c in self.repo.list_categories(session, slugs)
        ]

    def category_products(
        self,
        session: Session,
        category_id: uuid.UUID,
        page: int = 1,
        per_page: int = 12,
    ) -> ProductPage:
        category = self.get_category(session, category_id)
        products, total = self.repo.list_products(
            session,
            offset=self._offset(page, per_page),
            limit=per_page,
            category_id=category.id,
        )
        return self._page(session, products, total, page, per_page)

    def category_page(
        self,
        session: Session,
        slug: str,
        page: int = 1,
        per_page: int = 12,
    ) -> CategoryPage:
        """
        Category landing page: banner + paginated active products.
        """
        category = self.repo.get_category_by_slug(session, slug)
        if not category:
            raise exceptions.NotFoundError(f"Category with slug '{slug}' not found")

        hero = CATEGORY_HEROES.get(slug) or {
            "img": "heroes/default.jpg",
            "title": category.name.upper(),
            "subtitle": "",
        }
        listing = self.category_products(session, category.id, page, per_page)

        return CategoryPage(
            category=CategoryWithHero(
                id=category.id,
                name=category.name,
                slug=category.slug,
                hero=CategoryHero(
                    img=image_url(hero["img"], folder="images"),
                    title=hero["title"],
                    subtitle=hero["subtitle"],
                ),
            ),
            products=listing.products,
            pagination=listing.pagination,
        )

    def category_stats(self, session: Session, category_id: uuid.UUID) -> CategoryStats:
        category = self.get_category(session, category_id)
        stats = self.repo.category_stats(session, category.id)

        def _raw(value) -> float | None:
            return None if value is None else money_pair(value)[0]

        formatted_avg = None
        if stats["avg_price"] is not None:
            formatted_avg = money_pair(stats["avg_price"])[1]

        return CategoryStats(
            category=presenters.category_brief(category),
            total_products=stats["total_products"],
            active_products=stats["active_products"],
            total_stock=stats["total_stock"],
            min_price=_raw(stats["min_price"]),
            max_price=_raw(stats["max_price"]),
            avg_price=_raw(stats["avg_price"]),
            formatted_avg_price=formatted_avg,
        )

    def create_category(self, session: Session, payload: CategoryCreate) -> Category:
        base_slug = self._slugify(payload.slug or payload.name)
        slug = self._ensure_unique_slug(
            session, base_slug, self.repo.get_category_by_slug
        )
        with self._writing(session):
            return self.repo.create_category(
                session, Category(name=payload.name, slug=slug)
            )

    def update_category(
        self,
        session: Session,
        category_id: uuid.UUID,
        payload: CategoryUpdate,
    ) -> Category:
        category = self.get_category(session, category_id)

        if payload.name is not None:
            name = payload.name.strip()
            if not name:
                raise exceptions.ValidationError("name cannot be empty")
            category.name = name

        if payload.slug is not None:
            new_base_slug = self._slugify(payload.slug)
            if new_base_slug != category.slug:
                category.slug = self._ensure_unique_slug(
                    session, new_base_slug, self.repo.get_category_by_slug
                )

        with self._writing(session):
            return self.repo.update_category(session, category)

    def delete_category(self, session: Session, category_id: uuid.UUID) -> None:
        """Delete a category; its products stay, uncategorized."""
        category = self.get_category(session, category_id)
        with self._writing(session):
            self.repo.delete_category(session, category)
