"""Order payloads shared by the order endpoint and the checkout client."""

from pydantic import BaseModel, ConfigDict, Field


class OrderCreateRequest(BaseModel):
    """Payload accepted by `POST /create-order`."""

    amount: float = Field(gt=0, allow_inf_nan=False)
    currency: str = Field(default="INR", min_length=3, max_length=3)
    notes: dict[str, str] | None = None


class Order(BaseModel):
    """Gateway order merged with the publishable key id.

    Extra gateway fields (`entity`, `status`, `attempts`, ...) pass through.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    amount: int
    currency: str
    receipt: str
    key_id: str
