"""FastAPI routes for the cart, wishlist, suggestions and checkout."""

import structlog
from fastapi import APIRouter, Depends, Query

from storefront.api.schemas import (
    AddToCartRequest,
    AddToWishlistRequest,
    CartResponse,
    CheckoutResponse,
    LineItemSchema,
    MoveToCartRequest,
    NotificationSchema,
    OpenCheckoutRequest,
    OrderPlacedResponse,
    PaymentMethodRequest,
    ShippingSchema,
    SuggestionsResponse,
    TotalsSchema,
    UpdateQuantityRequest,
    WishlistResponse,
)
from storefront.cart.store import CartSnapshot, CartStore, get_cart_store
from storefront.checkout.pricing import OrderTotals
from storefront.checkout.session import CheckoutSession, get_checkout_session
from storefront.checkout.shipping import REQUIRED_FIELDS, validate_shipping
from storefront.config import get_settings
from storefront.notifications import Notification, NotificationFeed
from storefront.search import get_catalog
from storefront.search.port import ProductCatalog
from storefront.wishlist.store import WishlistStore, get_wishlist_store

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _collect(store: CartStore, action):
    """Run a cart action and gather the notifications its events produce."""
    feed = NotificationFeed()
    unsubscribe = store.subscribe(feed)
    try:
        result = action()
    finally:
        unsubscribe()
    return result, feed.drain()


def _notifications(notifications: list[Notification]) -> list[NotificationSchema]:
    return [NotificationSchema(**n.to_dict()) for n in notifications]


def _cart_response(snapshot: CartSnapshot, notifications=()) -> CartResponse:
    return CartResponse(
        items=[
            LineItemSchema(
                product_id=item.product_id,
                name=item.name,
                unit_price=item.unit_price,
                quantity=item.quantity,
                line_total=item.line_total,
                image_url=item.image_url,
                vendor_id=item.vendor_id,
                vendor_name=item.vendor_name,
                stock=item.stock,
            )
            for item in snapshot.items
        ],
        total=snapshot.total,
        count=snapshot.count,
        notifications=_notifications(list(notifications)),
    )


def _totals(totals: OrderTotals) -> TotalsSchema:
    return TotalsSchema(
        subtotal=totals.subtotal,
        shipping=totals.shipping,
        tax=totals.tax,
        total=totals.total,
        currency=totals.currency,
        free_shipping=totals.free_shipping,
    )


def _checkout_response(session: CheckoutSession) -> CheckoutResponse:
    shipping = None
    missing = []
    if session.shipping is not None:
        shipping = ShippingSchema(
            **{field: getattr(session.shipping, field) for field in (*REQUIRED_FIELDS, "postal_code")}
        )
        missing = validate_shipping(session.shipping)
    return CheckoutResponse(
        state=session.state.value,
        payment_method=session.payment_method.value,
        shipping=shipping,
        missing_fields=missing,
        totals=_totals(session.totals) if session.totals else None,
    )


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=CartResponse)
async def get_cart(store: CartStore = Depends(get_cart_store)) -> CartResponse:
    return _cart_response(store.snapshot())


@cart_router.post("/items", response_model=CartResponse)
async def add_cart_item(body: AddToCartRequest, store: CartStore = Depends(get_cart_store)) -> CartResponse:
    snapshot, notes = _collect(store, lambda: store.add_item(body.product, body.quantity))
    return _cart_response(snapshot, notes)


@cart_router.put("/items/{product_id}", response_model=CartResponse)
async def update_cart_item(
    product_id: str,
    body: UpdateQuantityRequest,
    store: CartStore = Depends(get_cart_store),
) -> CartResponse:
    snapshot, notes = _collect(store, lambda: store.update_quantity(product_id, body.quantity))
    return _cart_response(snapshot, notes)


@cart_router.delete("/items/{product_id}", response_model=CartResponse)
async def remove_cart_item(product_id: str, store: CartStore = Depends(get_cart_store)) -> CartResponse:
    snapshot, notes = _collect(store, lambda: store.remove_item(product_id))
    return _cart_response(snapshot, notes)


@cart_router.delete("", response_model=CartResponse)
async def clear_cart(store: CartStore = Depends(get_cart_store)) -> CartResponse:
    snapshot, notes = _collect(store, store.clear)
    return _cart_response(snapshot, notes)


# ---------------------------------------------------------------------------
# Wishlist Router
# ---------------------------------------------------------------------------
wishlist_router = APIRouter(prefix="/wishlist", tags=["wishlist"])


@wishlist_router.get("", response_model=WishlistResponse)
async def get_wishlist(wishlist: WishlistStore = Depends(get_wishlist_store)) -> WishlistResponse:
    return WishlistResponse(items=wishlist.items)


@wishlist_router.post("", response_model=WishlistResponse)
async def add_to_wishlist(
    body: AddToWishlistRequest,
    wishlist: WishlistStore = Depends(get_wishlist_store),
) -> WishlistResponse:
    notes = []
    if wishlist.add(body.product):
        name = body.product.get("name")
        notes.append(Notification("Added to wishlist", f"{name} has been added to your wishlist"))
    return WishlistResponse(items=wishlist.items, notifications=_notifications(notes))


@wishlist_router.delete("/{product_id}", response_model=WishlistResponse)
async def remove_from_wishlist(
    product_id: str,
    wishlist: WishlistStore = Depends(get_wishlist_store),
) -> WishlistResponse:
    saved = next((i for i in wishlist.items if i["id"] == product_id), None)
    notes = []
    if wishlist.remove(product_id) and saved:
        notes.append(Notification("Removed from wishlist", f"{saved['name']} has been removed from your wishlist"))
    return WishlistResponse(items=wishlist.items, notifications=_notifications(notes))


@wishlist_router.delete("", response_model=WishlistResponse)
async def clear_wishlist(wishlist: WishlistStore = Depends(get_wishlist_store)) -> WishlistResponse:
    wishlist.clear()
    notes = [Notification("Wishlist cleared", "All items have been removed from your wishlist")]
    return WishlistResponse(items=wishlist.items, notifications=_notifications(notes))


@wishlist_router.post("/{product_id}/move-to-cart", response_model=CartResponse)
async def move_to_cart(
    product_id: str,
    body: MoveToCartRequest,
    wishlist: WishlistStore = Depends(get_wishlist_store),
    store: CartStore = Depends(get_cart_store),
) -> CartResponse:
    snapshot, notes = _collect(store, lambda: wishlist.move_to_cart(product_id, store, body.quantity))
    return _cart_response(snapshot or store.snapshot(), notes)


# ---------------------------------------------------------------------------
# Suggestions Router
# ---------------------------------------------------------------------------
search_router = APIRouter(prefix="/suggestions", tags=["search"])


@search_router.get("", response_model=SuggestionsResponse)
async def suggest_products(
    q: str = Query(default=""),
    catalog: ProductCatalog = Depends(get_catalog),
) -> SuggestionsResponse:
    settings = get_settings()
    if len(q) < settings.suggestion_min_length:
        return SuggestionsResponse(query=q, suggestions=[])
    try:
        suggestions = await catalog.suggest(q, settings.suggestion_limit)
    except Exception as exc:
        logger.warning("Suggestion lookup failed", query=q, error=str(exc))
        suggestions = []
    return SuggestionsResponse(query=q, suggestions=suggestions)


# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(prefix="/checkout", tags=["checkout"])


@checkout_router.get("", response_model=CheckoutResponse)
async def get_checkout(session: CheckoutSession = Depends(get_checkout_session)) -> CheckoutResponse:
    return _checkout_response(session)


@checkout_router.post("/open", response_model=CheckoutResponse)
async def open_checkout(
    body: OpenCheckoutRequest,
    session: CheckoutSession = Depends(get_checkout_session),
) -> CheckoutResponse:
    session.open(user_email=body.user_email)
    return _checkout_response(session)


@checkout_router.put("/shipping", response_model=CheckoutResponse)
async def update_shipping(
    body: ShippingSchema,
    session: CheckoutSession = Depends(get_checkout_session),
) -> CheckoutResponse:
    session.update_shipping(**body.model_dump(exclude_unset=True))
    return _checkout_response(session)


@checkout_router.put("/payment-method", response_model=CheckoutResponse)
async def select_payment_method(
    body: PaymentMethodRequest,
    session: CheckoutSession = Depends(get_checkout_session),
) -> CheckoutResponse:
    session.select_payment_method(body.payment_method)
    return _checkout_response(session)


@checkout_router.post("/submit", response_model=OrderPlacedResponse)
async def submit_checkout(session: CheckoutSession = Depends(get_checkout_session)) -> OrderPlacedResponse:
    confirmation = await session.submit()
    notes = [Notification("Order placed successfully!", "You will receive a confirmation email shortly.")]
    return OrderPlacedResponse(
        order_reference=confirmation.order_reference,
        totals=_totals(confirmation.totals),
        payment_method=confirmation.payment_method.value,
        notifications=_notifications(notes),
    )


@checkout_router.delete("", response_model=CheckoutResponse)
async def close_checkout(session: CheckoutSession = Depends(get_checkout_session)) -> CheckoutResponse:
    session.close()
    return _checkout_response(session)
