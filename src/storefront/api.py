"""FastAPI REST API for the storefront stores."""

from typing import Optional

from fastapi import FastAPI, Header, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from . import __version__
from .errors import (
    CatalogError,
    CheckoutCancelledError,
    CheckoutInProgressError,
    CheckoutValidationError,
    DuplicateOrderError,
    EmptyCartError,
    InvalidSchemaVersionError,
    InvalidStatusTransitionError,
    OrderNotFoundError,
    PaymentDeclinedError,
    PersistenceError,
    ProductNotFoundError,
    StorefrontError,
)
from .models import CartLine, Order, OrderStatus, Product, UserIdentity
from .services import StorefrontServices, build_services


# --- Pydantic Schemas ---


class RatingSchema(BaseModel):
    rate: str
    count: int


class ProductSchema(BaseModel):
    id: int
    title: str
    description: str
    price: str
    category: str
    image: str
    rating: RatingSchema


class CartLineSchema(ProductSchema):
    quantity: int
    line_total: str


class PricingSchema(BaseModel):
    subtotal: str
    shipping: str
    tax: str
    total: str


class CartResponse(BaseModel):
    items: list[CartLineSchema]
    total_items: int
    pricing: PricingSchema


class CartAddRequest(BaseModel):
    product_id: int
    quantity: int = Field(default=1, ge=1, description="How many to add")


class CartUpdateRequest(BaseModel):
    quantity: int = Field(..., description="New absolute quantity; 0 or less removes the line")


class UserSchema(BaseModel):
    id: str
    name: str
    email: str


class SessionResponse(BaseModel):
    user: Optional[UserSchema] = None
    is_authenticated: bool
    owner_id: str


class ShippingAddressSchema(BaseModel):
    full_name: str
    address: str
    city: str
    postal_code: str
    country: str


class OrderSchema(BaseModel):
    id: str
    user_id: str
    items: list[CartLineSchema]
    subtotal: str
    shipping: str
    tax: str
    total: str
    status: str
    created_at: str
    shipping_address: ShippingAddressSchema
    idempotency_key: Optional[str] = None
    payment_reference: Optional[str] = None


class OrderListResponse(BaseModel):
    orders: list[OrderSchema]
    count: int
    user_id: str
    total_spent: str


class OrderStatusRequest(BaseModel):
    status: OrderStatus


class CheckoutRequest(BaseModel):
    """Raw checkout form; field rules are applied by the checkout itself."""

    email: str = ""
    full_name: str = ""
    address: str = ""
    city: str = ""
    postal_code: str = ""
    country: str = ""
    card_number: str = ""
    expiry_date: str = ""
    cvv: str = ""
    card_name: str = ""


class ErrorResponse(BaseModel):
    detail: str
    error_type: str
    field_errors: Optional[dict[str, str]] = None


# --- Service Container ---

_services: StorefrontServices | None = None


def get_services() -> StorefrontServices:
    """Get the process-wide services, building them on first use."""
    global _services
    if _services is None:
        _services = build_services()
    return _services


def product_to_schema(product: Product) -> ProductSchema:
    return ProductSchema(**product.to_dict())


def line_to_schema(line: CartLine) -> CartLineSchema:
    return CartLineSchema(**line.to_dict(), line_total=str(line.line_total))


def order_to_schema(order: Order) -> OrderSchema:
    data = order.to_dict()
    data["items"] = [line_to_schema(line) for line in order.items]
    return OrderSchema(**data)


def cart_response(services: StorefrontServices) -> CartResponse:
    with services.cart.locked():
        lines = services.cart.items
        pricing = services.checkout.price()
        return CartResponse(
            items=[line_to_schema(line) for line in lines],
            total_items=services.cart.get_total_items(),
            pricing=PricingSchema(**pricing.to_dict()),
        )


def session_response(services: StorefrontServices) -> SessionResponse:
    user = services.session.user
    return SessionResponse(
        user=UserSchema(**user.to_dict()) if user else None,
        is_authenticated=user is not None,
        owner_id=services.session.owner_id,
    )


# --- App Setup ---

app = FastAPI(
    title="storefront API",
    description="Cart, session and order history for the storefront",
    version=__version__,
)


# --- Exception Handler ---

ERROR_STATUS_CODES: dict[type, int] = {
    CheckoutValidationError: 422,
    ProductNotFoundError: 404,
    OrderNotFoundError: 404,
    DuplicateOrderError: 409,
    InvalidStatusTransitionError: 409,
    EmptyCartError: 409,
    CheckoutInProgressError: 409,
    CheckoutCancelledError: 409,
    PaymentDeclinedError: 402,
    PersistenceError: 500,
    InvalidSchemaVersionError: 500,
    CatalogError: 502,
}


@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    """Map StorefrontError subclasses to appropriate HTTP responses."""
    status_code = ERROR_STATUS_CODES.get(type(exc), 500)
    content: dict = {"detail": str(exc), "error_type": type(exc).__name__}
    if isinstance(exc, CheckoutValidationError):
        content["field_errors"] = exc.field_errors
    return JSONResponse(status_code=status_code, content=content)


# --- Endpoints ---


@app.get("/api/health")
def health_check():
    """Report basic service status and store sizes."""
    services = get_services()
    try:
        return {
            "status": "ok",
            "cart_items": services.cart.get_total_items(),
            "order_count": len(services.orders.list_orders()),
            "is_authenticated": services.session.is_authenticated,
        }
    except StorefrontError as e:
        return {"status": "error", "detail": str(e)}


# --- Catalog Endpoints ---


@app.get("/api/products", response_model=list[ProductSchema])
def list_products(category: Optional[str] = Query(default=None)):
    """List catalog products, optionally for one category."""
    catalog = get_services().catalog
    if category:
        products = catalog.list_products_by_category(category)
    else:
        products = catalog.list_products()
    return [product_to_schema(p) for p in products]


@app.get("/api/products/{product_id}", response_model=ProductSchema)
def get_product(product_id: int):
    return product_to_schema(get_services().catalog.get_product(product_id))


@app.get("/api/products/{product_id}/related", response_model=list[ProductSchema])
def list_related_products(product_id: int, limit: int = Query(default=4, ge=0, le=20)):
    """Other products from the same category, at most ``limit``."""
    catalog = get_services().catalog
    product = catalog.get_product(product_id)
    return [product_to_schema(p) for p in catalog.related_products(product, limit)]


@app.get("/api/categories", response_model=list[str])
def list_categories():
    return get_services().catalog.list_categories()


# --- Cart Endpoints ---


@app.get("/api/cart", response_model=CartResponse)
def get_cart():
    """Current cart with derived totals."""
    return cart_response(get_services())


@app.post("/api/cart/items", response_model=CartResponse, status_code=201)
def add_cart_item(request: CartAddRequest):
    """Look up a product in the catalog and add it to the cart."""
    services = get_services()
    product = services.catalog.get_product(request.product_id)
    services.cart.add_item(product, request.quantity)
    return cart_response(services)


@app.patch("/api/cart/items/{product_id}", response_model=CartResponse)
def update_cart_item(product_id: int, request: CartUpdateRequest):
    services = get_services()
    services.cart.update_quantity(product_id, request.quantity)
    return cart_response(services)


@app.delete("/api/cart/items/{product_id}", response_model=CartResponse)
def remove_cart_item(product_id: int):
    services = get_services()
    services.cart.remove_item(product_id)
    return cart_response(services)


@app.delete("/api/cart", response_model=CartResponse)
def clear_cart():
    services = get_services()
    services.cart.clear_cart()
    return cart_response(services)


# --- Session Endpoints ---


@app.get("/api/session", response_model=SessionResponse)
def get_session():
    return session_response(get_services())


@app.post("/api/session/login", response_model=SessionResponse)
def login(request: UserSchema):
    """Assign the given identity. No credentials are checked."""
    services = get_services()
    services.session.login(UserIdentity(id=request.id, name=request.name, email=request.email))
    return session_response(services)


@app.post("/api/session/logout", response_model=SessionResponse)
def logout():
    """Clear the identity. Cart and orders are kept."""
    services = get_services()
    services.session.logout()
    return session_response(services)


# --- Order Endpoints ---


@app.get("/api/orders", response_model=OrderListResponse)
def list_orders(user_id: Optional[str] = Query(default=None)):
    """
    List orders for a user.

    Defaults to the logged-in user, or the guest owner when nobody is logged in.
    """
    services = get_services()
    owner = user_id or services.session.owner_id
    orders = services.orders.get_orders_by_user_id(owner)
    return OrderListResponse(
        orders=[order_to_schema(o) for o in orders],
        count=len(orders),
        user_id=owner,
        total_spent=str(services.orders.total_spent(owner)),
    )


@app.get("/api/orders/{order_id}", response_model=OrderSchema)
def get_order(order_id: str):
    return order_to_schema(get_services().orders.get_order(order_id))


@app.patch("/api/orders/{order_id}/status", response_model=OrderSchema)
def update_order_status(order_id: str, request: OrderStatusRequest):
    return order_to_schema(get_services().orders.update_status(order_id, request.status))


# --- Checkout Endpoints ---


@app.get("/api/checkout/pricing", response_model=PricingSchema)
def get_checkout_pricing():
    """Shipping, tax and total for the current cart."""
    return PricingSchema(**get_services().checkout.price().to_dict())


@app.post("/api/checkout", response_model=OrderSchema, status_code=201)
def checkout(
    request: CheckoutRequest,
    idempotency_key: Optional[str] = Header(default=None, alias="Idempotency-Key"),
):
    """
    Place an order from the current cart.

    Send the same Idempotency-Key again to get the original order back
    instead of placing a second one.
    """
    services = get_services()
    order = services.checkout.checkout(request.model_dump(), idempotency_key=idempotency_key)
    return order_to_schema(order)
