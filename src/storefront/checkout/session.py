"""Checkout session — the state machine around a single checkout attempt.

    Idle → FormEntry → Validating → Submitting → Success → Idle (order leaves the cart)
                           ↓            ↓
                       FormEntry  ←  Failure

Nothing about a submission is persisted: if the process goes away while an
order is Submitting, the order counts as not placed and the cart is still
there. The ``submitting`` flag admits one submission at a time and is
released on every path out of ``submit()``. Totals are priced at ``open()``
and re-priced only when checkout is opened again.
"""

from enum import Enum

import structlog
from protean.exceptions import ValidationError

from storefront.cart.store import CartStore, get_cart_store
from storefront.checkout.gateway.port import OrderGateway
from storefront.checkout.placement import OrderConfirmation, PaymentMethod, submit_order
from storefront.checkout.pricing import OrderTotals, compute_totals
from storefront.checkout.shipping import ShippingDetails, validate_shipping
from storefront.config import StorefrontSettings
from storefront.exceptions import CartEmpty, SubmissionInProgress, ValidationIncomplete

logger = structlog.get_logger(__name__)


class CheckoutState(Enum):
    IDLE = "Idle"
    FORM_ENTRY = "FormEntry"
    VALIDATING = "Validating"
    SUBMITTING = "Submitting"
    SUCCESS = "Success"
    FAILURE = "Failure"


_VALID_TRANSITIONS = {
    CheckoutState.IDLE: {CheckoutState.FORM_ENTRY},
    CheckoutState.FORM_ENTRY: {CheckoutState.VALIDATING, CheckoutState.IDLE},
    CheckoutState.VALIDATING: {CheckoutState.SUBMITTING, CheckoutState.FORM_ENTRY, CheckoutState.IDLE},
    CheckoutState.SUBMITTING: {CheckoutState.SUCCESS, CheckoutState.FAILURE},
    CheckoutState.SUCCESS: {CheckoutState.IDLE},
    CheckoutState.FAILURE: {CheckoutState.FORM_ENTRY},
}


class CheckoutSession:
    """Form state, totals and submission gate for one customer's checkout."""

    def __init__(
        self,
        store: CartStore,
        gateway: OrderGateway | None = None,
        settings: StorefrontSettings | None = None,
    ) -> None:
        self.store = store
        self.gateway = gateway
        self.settings = settings
        self.state = CheckoutState.IDLE
        self.shipping: ShippingDetails | None = None
        self.payment_method = PaymentMethod.CARD
        self.totals: OrderTotals | None = None
        self.submitting = False
        self.last_confirmation: OrderConfirmation | None = None
        self._unsubscribe = None

    def _transition(self, target: CheckoutState) -> None:
        if target not in _VALID_TRANSITIONS[self.state]:
            raise ValidationError({"status": [f"Cannot transition from {self.state.value} to {target.value}"]})
        self.state = target

    def _require_form_entry(self) -> None:
        if self.state != CheckoutState.FORM_ENTRY:
            raise ValidationError({"status": [f"Checkout form is not open (state is {self.state.value})"]})

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def open(self, user_email=None) -> OrderTotals:
        """Enter the checkout form and price the cart.

        Raises ``CartEmpty`` (and stays Idle) when there is nothing to buy.
        """
        snapshot = self.store.snapshot()
        if snapshot.is_empty:
            self.close()
            raise CartEmpty()

        if self.state == CheckoutState.IDLE:
            self.shipping = ShippingDetails.blank(email=user_email)
            self.payment_method = PaymentMethod.CARD
            self._unsubscribe = self.store.subscribe(self._on_cart_changed)
            self._transition(CheckoutState.FORM_ENTRY)
        else:
            self._require_form_entry()

        self.totals = compute_totals(snapshot, self.settings)
        return self.totals

    def close(self) -> None:
        """Abandon the form. Shipping details are discarded; the cart is kept."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.shipping = None
        self.totals = None
        self.state = CheckoutState.IDLE

    def _on_cart_changed(self, snapshot, events) -> None:
        if self.state != CheckoutState.FORM_ENTRY:
            return
        if snapshot.is_empty:
            logger.info("Cart emptied during checkout; leaving checkout", cart_id=self.store.cart_id)
            self.close()

    # -------------------------------------------------------------------
    # Form entry
    # -------------------------------------------------------------------
    def update_shipping(self, **changes) -> ShippingDetails:
        self._require_form_entry()
        self.shipping = self.shipping.with_changes(**changes)
        return self.shipping

    def select_payment_method(self, method) -> PaymentMethod:
        self._require_form_entry()
        self.payment_method = PaymentMethod(method)
        return self.payment_method

    def missing_fields(self) -> list[str]:
        self._require_form_entry()
        return validate_shipping(self.shipping)

    # -------------------------------------------------------------------
    # Submission
    # -------------------------------------------------------------------
    async def submit(self) -> OrderConfirmation:
        """Validate the form and place the order.

        Raises ``SubmissionInProgress`` while another submission is
        outstanding, ``ValidationIncomplete`` for missing fields (back in
        FormEntry), and ``PaymentFailed`` when the order service declines
        (back in FormEntry with the cart intact).
        """
        if self.submitting:
            raise SubmissionInProgress()

        self._transition(CheckoutState.VALIDATING)
        missing = validate_shipping(self.shipping)
        if missing:
            self._transition(CheckoutState.FORM_ENTRY)
            raise ValidationIncomplete(missing)
        if self.store.snapshot().is_empty:
            self.close()
            raise CartEmpty()

        self.submitting = True
        self._transition(CheckoutState.SUBMITTING)
        try:
            confirmation = await submit_order(
                self.store,
                self.shipping,
                self.payment_method,
                gateway=self.gateway,
                settings=self.settings,
            )
        except Exception:
            self._transition(CheckoutState.FAILURE)
            self._transition(CheckoutState.FORM_ENTRY)
            raise
        finally:
            self.submitting = False

        self._transition(CheckoutState.SUCCESS)
        self.last_confirmation = confirmation
        self.close()
        return confirmation


# ---------------------------------------------------------------------------
# Process-wide instance
# ---------------------------------------------------------------------------
_current_session: CheckoutSession | None = None


def get_checkout_session() -> CheckoutSession:
    """Return the checkout session bound to the process-wide cart store."""
    global _current_session
    if _current_session is None:
        _current_session = CheckoutSession(get_cart_store())
    return _current_session


def reset_checkout_session() -> None:
    global _current_session
    if _current_session is not None:
        _current_session.close()
    _current_session = None
