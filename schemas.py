"""
Database Schemas for the store document

The whole store lives in one JSON document. Each Pydantic model below
describes one section of it: the singletons (settings, user, analytics) and
the item shape of each collection (categories, products, orders).

Keys are camelCase on disk and on the wire; models expose snake_case
attributes and dump with ``by_alias=True``.
"""
from typing import Annotated, List, Optional, Dict, Any, Union
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


PRICE_ON_REQUEST = "PRV"


def parse_price(value):
    """Numbers and numeric strings become floats; "PRV" marks price on request."""
    if isinstance(value, str):
        text = value.strip()
        if text.upper() == PRICE_ON_REQUEST:
            return PRICE_ON_REQUEST
        try:
            value = float(text)
        except ValueError:
            raise ValueError(f"price must be a number or '{PRICE_ON_REQUEST}'")
    if isinstance(value, (int, float)) and not isinstance(value, bool) and value < 0:
        raise ValueError("price must not be negative")
    return value


Price = Annotated[Union[float, str], BeforeValidator(parse_price)]


# Singletons

class Contact(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    phone: Optional[str] = None
    whatsapp: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    working_hours: Optional[str] = None
    working_days: Optional[str] = None


class Settings(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    store_name: str = "Accounts Store"
    hero_title: str = "Welcome to our store"
    hero_description: str = "A trusted broker for buying and selling social media and game accounts"
    currency: str = "DA"
    language: str = "ar"
    store_status: bool = True
    contact: Contact = Field(default_factory=Contact)
    social: Dict[str, str] = Field(default_factory=dict)
    logo: Optional[str] = None
    store_url: Optional[str] = None


class User(CamelModel):
    name: str = "Store Admin"
    role: str = "Store broker"
    avatar: Optional[str] = None
    password: str = Field(..., description="bcrypt hash, never returned by the API")
    last_password_change: Optional[str] = None


class Analytics(CamelModel):
    visitors: int = Field(0, ge=0)
    orders_count: int = Field(0, ge=0)
    revenue: float = Field(0, ge=0)


# Collections

class Category(CamelModel):
    id: int
    name: str
    description: str = ""
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class Product(CamelModel):
    id: int
    name: str
    description: str = ""
    price: Price
    currency: str = "DA"
    category: str = ""
    status: bool = True
    images: List[str] = Field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class OrderItem(CamelModel):
    """Snapshot of a product captured when the order was placed"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    id: Optional[int] = None
    name: Optional[str] = None
    price: Price
    quantity: int = Field(1, ge=1)


class Order(CamelModel):
    id: int
    items: List[OrderItem] = Field(default_factory=list)
    customer_name: str
    phone: str
    description: str = ""
    status: str = Field("pending", description="pending|completed|cancelled")
    total: float = Field(0, ge=0)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


SEED_CATEGORIES: List[Dict[str, Any]] = [
    {"id": 1, "name": "Facebook accounts", "description": "Assorted Facebook accounts"},
    {"id": 2, "name": "Instagram accounts", "description": "Assorted Instagram accounts"},
    {"id": 3, "name": "Free Fire accounts", "description": "Free Fire game accounts"},
    {"id": 4, "name": "Other game accounts", "description": "Accounts for various games"},
]
