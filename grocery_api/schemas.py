from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from .models import OrderStatus, Role


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


# --- USER ---
class UserRegister(BaseModel):
    email: EmailStr
    password: str = Field(min_length=3)
    name: str = Field(min_length=3)


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(min_length=3)


class UserOut(CamelModel):
    id: int
    email: str
    name: str
    role: Role


class RegisterResponse(BaseModel):
    message: str
    user: UserOut


class LoginResponse(BaseModel):
    message: str
    token: str


# --- GROCERY ---
class GroceryCreate(BaseModel):
    name: str = Field(min_length=3)
    description: str = Field(min_length=3)
    price: float = Field(ge=1)
    stock: Optional[int] = Field(default=None, ge=1)


class GroceryUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=3)
    description: Optional[str] = Field(default=None, min_length=3)
    price: Optional[float] = Field(default=None, ge=1)
    stock: Optional[int] = Field(default=None, ge=1)

    @field_validator("name", "description", "price", "stock")
    @classmethod
    def not_null(cls, value):
        # Omit a field to leave it unchanged; null is not a value for any of them
        if value is None:
            raise ValueError("field may be omitted but not null.")
        return value


class GroceryOut(CamelModel):
    id: int
    name: str
    description: str
    price: float
    stock: int


class GroceryResponse(BaseModel):
    message: str
    grocery: GroceryOut


class GroceryDetail(BaseModel):
    grocery: GroceryOut


class GroceryList(BaseModel):
    groceries: List[GroceryOut]


# --- ORDER ---
class OrderItemIn(CamelModel):
    grocery_id: int
    quantity: int = Field(ge=1)


class OrderCreate(CamelModel):
    order_items: List[OrderItemIn] = Field(min_length=1)

    @field_validator("order_items")
    @classmethod
    def grocery_ids_unique(cls, items: List[OrderItemIn]) -> List[OrderItemIn]:
        ids = [item.grocery_id for item in items]
        if len(set(ids)) != len(ids):
            raise ValueError("groceryId should be unique.")
        return items


class OrderItemOut(CamelModel):
    id: int
    grocery_id: int
    quantity: int
    price: float


class OrderOut(CamelModel):
    id: int
    user_id: int
    total_price: float
    order_status: OrderStatus
    created_at: datetime
    items: List[OrderItemOut]


class OrderResponse(BaseModel):
    message: str
    order: OrderOut
