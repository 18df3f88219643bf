"""
Database Schemas for Bar do Vaqueiro

Each Pydantic model maps to a table in the store (snake_case columns).
Request bodies keep the camelCase names the frontend sends.
"""

from pydantic import BaseModel, Field
from typing import Any, List, Optional


class Flavor(BaseModel):
    name: str = Field("No name", description="Flavor name, e.g. Long Neck")
    image: str = Field("https://via.placeholder.com/400x300", description="Image URL")
    quantity: int = Field(0, description="Units in stock")
    description: str = Field("", description="Short description")


class Product(BaseModel):
    title: Optional[str] = Field(None, description="Product name")
    category: Optional[str] = Field(None, description="Category id")
    price: Optional[float] = Field(None, description="Price")
    description: Optional[str] = None
    status: Optional[str] = Field(None, description="active, inactive")
    flavors: Optional[List[Flavor]] = Field(None, description="Purchasable variants")
    display_order: int = Field(0, description="Sort position on the menu")


class Category(BaseModel):
    id: str = Field(..., description="Stable key chosen by the admin")
    name: str = Field(..., description="Display name")
    description: str = Field("", description="Category description")


class Order(BaseModel):
    date: Optional[Any] = None
    time: Optional[Any] = None
    customer_name: Any = Field(..., description="Customer name")
    customer_phone: Optional[Any] = None
    items: List[Any] = Field(default_factory=list, description="Ordered items, kept as sent")
    total: float = Field(0, description="Order total")
    payment_method: Optional[Any] = Field(None, description="pix, card, cash")
    status: str = Field("pending", description="pending, preparing, delivered, cancelled")
    created_at: Optional[str] = None


class AdminCredential(BaseModel):
    username: str = Field(..., description="Login name")
    password: str = Field(..., description="Plain text password (demo)")
    encrypted_password: str = Field(..., description="Reversible encoding of the password")


# Request bodies. Required fields are optional here so handlers can answer
# 400 with their own message.

class OrderSubmit(BaseModel):
    orderData: Optional[dict] = None


class StatusUpdate(BaseModel):
    orderId: Optional[Any] = None
    status: Optional[str] = None


class LoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class ProductsSave(BaseModel):
    products: Any = None


class CategoriesSave(BaseModel):
    categories: Any = None


class CategoryAdd(BaseModel):
    category: Optional[dict] = None


class CategoryDelete(BaseModel):
    categoryId: Optional[str] = None
