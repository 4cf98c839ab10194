from pydantic import BaseModel
from typing import Any, Dict, List, Optional
from decimal import Decimal


class SnipcartCustomField(BaseModel):
    name: str
    value: Optional[str] = None


class SnipcartItem(BaseModel):
    id: str
    name: Optional[str] = None
    price: Optional[Decimal] = None
    quantity: int = 1
    url: Optional[str] = None
    customFields: List[SnipcartCustomField] = []

    def custom_field(self, name: str) -> Optional[str]:
        for field in self.customFields:
            if field.name.lower() == name.lower():
                return field.value
        return None


class SnipcartAddress(BaseModel):
    fullName: Optional[str] = None
    name: Optional[str] = None
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    company: Optional[str] = None
    address1: Optional[str] = None
    address2: Optional[str] = None
    fullAddress: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    country: Optional[str] = None
    postalCode: Optional[str] = None
    phone: Optional[str] = None


class SnipcartOrderContent(BaseModel):
    invoiceNumber: Optional[str] = None
    email: Optional[str] = None
    shippingAddress: Optional[SnipcartAddress] = None
    items: List[SnipcartItem] = []
    shippingRateUserDefinedId: Optional[str] = None


class SnipcartWebhookRequest(BaseModel):
    eventName: str
    mode: Optional[str] = None
    createdOn: Optional[str] = None
    content: Dict[str, Any] = {}


class PrintfulOrderResult(BaseModel):
    id: int
    external_id: Optional[str] = None
    status: str
