from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, PositiveInt


class CartItemInput(BaseModel):
    # Extensions may read additional item keys from the source document
    model_config = ConfigDict(extra="allow")

    sku: str = Field(min_length=1)
    price: Decimal = Field(ge=0)
    qty: PositiveInt = 1


class CartInput(BaseModel):
    model_config = ConfigDict(extra="allow")

    items: list[CartItemInput] = Field(min_length=1)
    taxRate: Decimal = Field(Decimal("0"), ge=0)
    currency: str = "USD"
