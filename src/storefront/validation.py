"""Checkout form schema."""

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationError, field_validator

from .errors import CheckoutValidationError
from .models import ShippingAddress

EXPIRY_RE = re.compile(r"^(0[1-9]|1[0-2])/\d{2}$")

# Message shown for each field when it fails validation
FIELD_MESSAGES = {
    "email": "Invalid email address",
    "full_name": "Full name is required",
    "address": "Address is required",
    "city": "City is required",
    "postal_code": "Postal code is required",
    "country": "Country is required",
    "card_number": "Card number must be at least 16 digits",
    "expiry_date": "Invalid expiry date (MM/YY)",
    "cvv": "CVV must be at least 3 digits",
    "card_name": "Cardholder name is required",
}


class CheckoutForm(BaseModel):
    """Shipping and payment details collected at checkout."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore", frozen=True)

    email: EmailStr
    full_name: str = Field(min_length=2)
    address: str = Field(min_length=5)
    city: str = Field(min_length=2)
    postal_code: str = Field(min_length=3)
    country: str = Field(min_length=2)
    card_number: str
    expiry_date: str
    cvv: str
    card_name: str = Field(min_length=2)

    @field_validator("card_number")
    @classmethod
    def _check_card_number(cls, v: str) -> str:
        digits = re.sub(r"[\s-]", "", v)
        if not digits.isdigit() or len(digits) < 16:
            raise ValueError("card number too short")
        return digits

    @field_validator("expiry_date")
    @classmethod
    def _check_expiry(cls, v: str) -> str:
        if not EXPIRY_RE.match(v):
            raise ValueError("expiry must be MM/YY")
        return v

    @field_validator("cvv")
    @classmethod
    def _check_cvv(cls, v: str) -> str:
        if not v.isdigit() or len(v) < 3:
            raise ValueError("cvv too short")
        return v

    def shipping_address(self) -> ShippingAddress:
        return ShippingAddress(
            full_name=self.full_name,
            address=self.address,
            city=self.city,
            postal_code=self.postal_code,
            country=self.country,
        )

    @property
    def card_last4(self) -> str:
        return self.card_number[-4:]


def validate_checkout_form(data: dict[str, Any] | CheckoutForm) -> CheckoutForm:
    """
    Validate raw checkout input.

    Raises:
        CheckoutValidationError: With one message per failing field.
    """
    if isinstance(data, CheckoutForm):
        return data
    try:
        return CheckoutForm.model_validate(data)
    except ValidationError as e:
        field_errors: dict[str, str] = {}
        for err in e.errors():
            name = str(err["loc"][0]) if err["loc"] else "__root__"
            field_errors.setdefault(name, FIELD_MESSAGES.get(name, err["msg"]))
        raise CheckoutValidationError(field_errors) from e
