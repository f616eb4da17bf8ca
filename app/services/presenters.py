# app/services/presenters.py
"""
Response shaping: ORM rows and cart views -> read schemas.

Money always goes through `money_pair` so the raw number and the
display string come from the same rounded value.
"""
from app.core.formatting import image_url, money_pair, stock_status
from app.models.cart import CartItem
from app.models.product import Category, Product
from app.schemas.cart import (
    CartEntryRead,
    CartLineItemRead,
    CartProductRead,
    CartRead,
    CartSummaryRead,
)
from app.schemas.product import CategoryBrief, ProductDetailRead, ProductRead
from app.services.cart_service import CartEntry, CartView, ResolvedEntry


def category_brief(category: Category | None) -> CategoryBrief:
    if category is None:
        return CategoryBrief()
    return CategoryBrief(id=category.id, name=category.name, slug=category.slug)


def product_card(product: Product, category: Category | None) -> ProductRead:
    price, formatted_price = money_pair(product.price)
    return ProductRead(
        id=product.id,
        name=product.name,
        slug=product.slug,
        description=product.description or "",
        price=price,
        formatted_price=formatted_price,
        image=image_url(product.image),
        stock=product.stock or 0,
        stock_status=stock_status(product.stock),
        is_featured=bool(product.is_featured),
        category=category_brief(category),
    )


def product_detail(product: Product, category: Category | None) -> ProductDetailRead:
    card = product_card(product, category)
    return ProductDetailRead(
        **card.model_dump(),
        is_active=bool(product.is_active),
        created_at=product.created_at,
        updated_at=product.updated_at,
    )


def cart_product(product: Product, category: Category | None) -> CartProductRead:
    price, formatted_price = money_pair(product.price)
    return CartProductRead(
        id=product.id,
        name=product.name,
        slug=product.slug,
        price=price,
        formatted_price=formatted_price,
        image=image_url(product.image),
        stock=product.stock or 0,
        stock_status=stock_status(product.stock),
        category=category_brief(category),
    )


def cart_entry(entry: CartEntry) -> CartEntryRead:
    item = entry.line_item
    if not isinstance(entry, ResolvedEntry):
        return CartEntryRead(
            id=item.id,
            status="orphaned",
            product_id=item.product_id,
            quantity=item.quantity,
        )

    subtotal, formatted_subtotal = money_pair(entry.subtotal)
    return CartEntryRead(
        id=item.id,
        status="resolved",
        product_id=item.product_id,
        quantity=item.quantity,
        product=cart_product(entry.product, entry.category),
        subtotal=subtotal,
        formatted_subtotal=formatted_subtotal,
    )


def cart_read(view: CartView) -> CartRead:
    total_price, formatted_total = money_pair(view.summary.total_price)
    return CartRead(
        items=[cart_entry(e) for e in view.entries],
        summary=CartSummaryRead(
            total_items=view.summary.total_items,
            total_price=total_price,
            formatted_total=formatted_total,
            is_empty=view.summary.is_empty,
            orphaned_items=view.summary.orphaned_items,
        ),
    )


def line_item_read(entry: CartEntry) -> CartLineItemRead:
    item: CartItem = entry.line_item
    product = None
    if isinstance(entry, ResolvedEntry):
        product = cart_product(entry.product, entry.category)
    return CartLineItemRead(
        id=item.id,
        user_id=item.user_id,
        product_id=item.product_id,
        quantity=item.quantity,
        created_at=item.created_at,
        updated_at=item.updated_at,
        product=product,
    )
