"""Core data models shared by the catalog worker."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True, slots=True)
class Coordinate:
    """A latitude/longitude pair in decimal degrees."""

    latitude: float
    longitude: float


@dataclass(frozen=True, slots=True)
class NormalizedProduct:
    """Fully-defaulted snapshot of a product returned by the storefront API."""

    id: str = "0"
    name: str = "Unnamed Product"
    slug: str = ""
    price: float = 0
    original_price: float = 0
    image: str = ""
    vendor: str = "Default Vendor"
    vendor_slug: str = "default-vendor"
    category: str = "Uncategorized"
    brand: str = "Unknown Brand"
    upc: str = ""
    description: str = ""
    tags: List[str] = field(default_factory=list)
    accepts_offers: bool = True
    is_new: bool = True
    is_trending: bool = True
    rating: float = 0
    review_count: int = 0
    stock: int = 0
    colors: List[str] = field(default_factory=lambda: ["#000000"])

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the camelCase keys the storefront front-end expects."""
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "price": self.price,
            "originalPrice": self.original_price,
            "image": self.image,
            "vendor": self.vendor,
            "vendorSlug": self.vendor_slug,
            "category": self.category,
            "brand": self.brand,
            "upc": self.upc,
            "description": self.description,
            "tags": list(self.tags),
            "acceptsOffers": self.accepts_offers,
            "isNew": self.is_new,
            "isTrending": self.is_trending,
            "rating": self.rating,
            "reviewCount": self.review_count,
            "stock": self.stock,
            "colors": list(self.colors),
        }


@dataclass(frozen=True, slots=True)
class NormalizedVendor:
    """Canonical view of a Dokan store."""

    id: str = ""
    name: str = ""
    slug: str = ""
    logo: str = ""
    banner: str = ""
    tagline: str = ""
    bio: str = ""
    location: str = ""
    specialty: str = ""
    rating: float = 4.5
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    distance: Optional[float] = None
    social_links: Dict[str, str] = field(default_factory=dict)
    policies: Dict[str, str] = field(default_factory=dict)

    @property
    def coordinate(self) -> Optional[Coordinate]:
        if self.latitude is None or self.longitude is None:
            return None
        return Coordinate(self.latitude, self.longitude)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "logo": self.logo,
            "banner": self.banner,
            "tagline": self.tagline,
            "bio": self.bio,
            "location": self.location,
            "specialty": self.specialty,
            "rating": self.rating,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "distance": self.distance,
            "socialLinks": dict(self.social_links),
            "policies": dict(self.policies),
        }
