# app/services/homepage_service.py
from sqlmodel import Session

from app.core.formatting import image_url
from app.services.product_service import ProductService

MAIN_CATEGORY_SLUGS = ["men", "women", "footwear", "accessories"]

CAROUSEL = [
    {
        "id": 1,
        "image": "Ares3.jpg",
        "alt": "Slide 1",
        "title": "ARES Collection",
        "subtitle": "Where power meets fashion",
    },
    {
        "id": 2,
        "image": "hero3.webp",
        "alt": "Slide 2",
        "title": "New Arrivals",
        "subtitle": "Discover the latest trends",
    },
    {
        "id": 3,
        "image": "hero2.jpg",
        "alt": "Slide 3",
        "title": "Style & Comfort",
        "subtitle": "Perfect for every occasion",
    },
]

WELCOME_MESSAGE = (
    "Where power meets fashion. Discover bold apparel, empowering accessories, "
    "and footwear designed to make you stand out."
)


class HomepageService:
    """
    Assembles the mobile app's home screen from catalog data.
    """

    def __init__(self, product_service: ProductService):
        self.product_service = product_service

    def homepage(self, session: Session) -> dict:
        categories = [
            {**c.model_dump(mode="json"), "route": f"/products/{c.slug}"}
            for c in self.product_service.list_categories(session, MAIN_CATEGORY_SLUGS)
        ]
        featured = [
            {**p.model_dump(mode="json"), "route": f"/product/{p.slug}"}
            for p in self.product_service.featured_products(session)
        ]
        carousel = [
            {**slide, "image": image_url(slide["image"], folder="images")}
            for slide in CAROUSEL
        ]

        return {
            "carousel": carousel,
            "categories": categories,
            "featured_products": featured,
            "app_info": {
                "title": "ARES",
                "welcome_message": WELCOME_MESSAGE,
            },
        }
