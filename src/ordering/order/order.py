"""Order aggregate (CQRS): the durable record a checkout produces.

An order is created ``pending`` by checkout and moves through the lifecycle
in ``ordering.order.state_machine``. Every order carries two identifiers:
an internal 24-hex ``id`` and a customer-facing ``order_number``. It also
stores the checkout ``correlation_key`` so that a repeated submission finds
the order it already created instead of creating another one.
"""

import json
import secrets
import string
import time
from datetime import UTC, datetime, timedelta
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    ValueObject,
)

from ordering.domain import ordering
from ordering.order.events import (
    OrderCancelled,
    OrderConfirmed,
    OrderDelivered,
    OrderOutForDelivery,
    OrderPlaced,
    OrderProcessing,
    OrderShipped,
    PaymentFailed,
    PaymentRequested,
)
from ordering.order.state_machine import (
    OrderStatus,
    as_status,
    assert_can_transition,
)

ESTIMATED_DELIVERY_DAYS = 7
_BASE36 = string.digits + string.ascii_uppercase


class PaymentMethod(Enum):
    CARD = "card"
    UPI = "upi"
    COD = "cod"
    WALLET = "wallet"


class PaymentStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class CheckoutMode(Enum):
    CART = "cart"
    DIRECT = "direct"


class CancellationActor(Enum):
    CUSTOMER = "customer"
    SYSTEM = "system"
    ADMIN = "admin"


def new_order_id() -> str:
    """24 lowercase hex characters."""
    return secrets.token_hex(12)


def new_order_number() -> str:
    """Customer-facing reference: ``ORD-<epoch millis>-<9 base36 chars>``."""
    suffix = "".join(secrets.choice(_BASE36) for _ in range(9))
    return f"ORD-{int(time.time() * 1000)}-{suffix}"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object(part_of="Order")
class ShippingInfo:
    """Where and to whom the order ships.

    Captured at checkout and never updated afterwards.
    """

    first_name = String(required=True, max_length=100)
    last_name = String(required=True, max_length=100)
    email = String(required=True, max_length=255)
    phone = String(required=True, max_length=20)
    address = String(required=True, max_length=500)
    city = String(required=True, max_length=100)
    state = String(required=True, max_length=100)
    zip_code = String(required=True, max_length=10)
    country = String(required=True, max_length=100)

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"


@ordering.value_object(part_of="Order")
class OrderPricing:
    """Amounts locked at checkout time, in rupees."""

    subtotal = Float(default=0.0)
    shipping_fee = Float(default=0.0)
    tax = Float(default=0.0)
    coupon_code = String(max_length=50)
    coupon_discount = Float(default=0.0)
    points_applied = Integer(default=0)
    total = Float(default=0.0)
    effective_total = Float(default=0.0)
    currency = String(max_length=3, default="INR")


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderItem:
    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    vendor_label = String(max_length=255)
    category = String(max_length=100)
    image = String(max_length=500)

    @property
    def line_total(self):
        return self.unit_price * self.quantity


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    order_number = String(required=True, max_length=50, unique=True)
    correlation_key = String(required=True, max_length=255, unique=True)
    customer_id = Identifier(required=True)
    checkout_mode = String(choices=CheckoutMode, default=CheckoutMode.CART.value)
    cart_id = Identifier()
    items = HasMany(OrderItem)
    shipping = ValueObject(ShippingInfo)
    pricing = ValueObject(OrderPricing)
    payment_method = String(choices=PaymentMethod, required=True)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    payment_intent_id = String(max_length=255)
    payment_failure_reason = String(max_length=500)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    carrier = String(max_length=100)
    tracking_number = String(max_length=255)
    estimated_delivery = String(max_length=10)  # ISO date string
    cancellation_reason = String(max_length=500)
    cancelled_by = String(choices=CancellationActor)
    created_at = DateTime()
    updated_at = DateTime()
    confirmed_at = DateTime()
    delivered_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        correlation_key,
        customer_id,
        items_data,
        shipping,
        pricing,
        payment_method,
        checkout_mode=CheckoutMode.CART.value,
        cart_id=None,
    ):
        """Create a pending order from a priced checkout.

        Args:
            correlation_key: Stable key of the checkout attempt.
            customer_id: The customer placing the order.
            items_data: List of dicts with product_id, name, unit_price,
                        quantity and optional vendor_label, category, image.
            shipping: Dict of ShippingInfo fields.
            pricing: Dict of OrderPricing fields.
            payment_method: One of card, upi, cod, wallet.
        """
        if not items_data:
            raise ValidationError({"items": ["An order needs at least one item"]})

        now = datetime.now(UTC)
        order = cls(
            id=new_order_id(),
            order_number=new_order_number(),
            correlation_key=correlation_key,
            customer_id=customer_id,
            checkout_mode=checkout_mode,
            cart_id=cart_id,
            items=[OrderItem(**item) for item in items_data],
            shipping=ShippingInfo(**shipping),
            pricing=OrderPricing(**pricing),
            payment_method=payment_method,
            payment_status=PaymentStatus.PENDING.value,
            status=OrderStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=order.id,
                order_number=order.order_number,
                correlation_key=correlation_key,
                customer_id=str(customer_id),
                checkout_mode=checkout_mode,
                items=json.dumps(items_data),
                item_count=sum(item["quantity"] for item in items_data),
                payment_method=payment_method,
                subtotal=order.pricing.subtotal,
                shipping_fee=order.pricing.shipping_fee,
                tax=order.pricing.tax,
                coupon_code=order.pricing.coupon_code,
                coupon_discount=order.pricing.coupon_discount,
                points_applied=order.pricing.points_applied,
                total=order.pricing.total,
                effective_total=order.pricing.effective_total,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    @property
    def current_status(self) -> OrderStatus:
        return as_status(self.status)

    @property
    def is_cash_on_delivery(self):
        return self.payment_method == PaymentMethod.COD.value

    @property
    def amount_due(self):
        return self.pricing.effective_total if self.pricing else 0.0

    def _move_to(self, target: OrderStatus):
        assert_can_transition(self.status, target)
        self.status = target.value
        self.updated_at = datetime.now(UTC)
        return self.updated_at

    def _assert_pending(self):
        if self.current_status != OrderStatus.PENDING:
            raise ValidationError({"status": [f"Payment cannot change on a {self.status} order"]})

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    def record_payment_requested(self, payment_intent_id):
        self._assert_pending()
        now = datetime.now(UTC)
        self.payment_intent_id = payment_intent_id
        self.updated_at = now
        self.raise_(
            PaymentRequested(
                order_id=self.id,
                order_number=self.order_number,
                payment_intent_id=payment_intent_id,
                payment_method=self.payment_method,
                amount=self.amount_due,
                requested_at=now,
            )
        )

    def record_payment_failure(self, reason):
        """Note a refused confirmation. The order remains pending and can be retried."""
        self._assert_pending()
        now = datetime.now(UTC)
        self.payment_status = PaymentStatus.FAILED.value
        self.payment_failure_reason = reason
        self.updated_at = now
        self.raise_(
            PaymentFailed(
                order_id=self.id,
                order_number=self.order_number,
                payment_intent_id=self.payment_intent_id,
                reason=reason,
                failed_at=now,
            )
        )

    def confirm_payment(self, payment_intent_id=None):
        """Move a pending order to confirmed once the gateway accepted payment.

        Cash-on-delivery orders are confirmed with payment still pending;
        the cash is collected on delivery.
        """
        if payment_intent_id and self.payment_intent_id and payment_intent_id != self.payment_intent_id:
            raise ValidationError({"payment_intent_id": ["Payment intent does not belong to this order"]})

        now = self._move_to(OrderStatus.CONFIRMED)
        self.payment_intent_id = payment_intent_id or self.payment_intent_id
        self.payment_status = (
            PaymentStatus.PENDING.value if self.is_cash_on_delivery else PaymentStatus.COMPLETED.value
        )
        self.payment_failure_reason = None
        self.confirmed_at = now
        self.raise_(
            OrderConfirmed(
                order_id=self.id,
                order_number=self.order_number,
                customer_id=str(self.customer_id),
                payment_intent_id=self.payment_intent_id,
                payment_method=self.payment_method,
                payment_status=self.payment_status,
                amount=self.amount_due,
                confirmed_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Fulfilment
    # -------------------------------------------------------------------
    def start_processing(self):
        now = self._move_to(OrderStatus.PROCESSING)
        self.raise_(OrderProcessing(order_id=self.id, order_number=self.order_number, started_at=now))

    def ship(self, carrier, tracking_number, estimated_delivery=None):
        """Hand the order to a carrier. Delivery is estimated a week out unless given."""
        now = self._move_to(OrderStatus.SHIPPED)
        self.carrier = carrier
        self.tracking_number = tracking_number
        self.estimated_delivery = estimated_delivery or (now + timedelta(days=ESTIMATED_DELIVERY_DAYS)).date().isoformat()
        self.raise_(
            OrderShipped(
                order_id=self.id,
                order_number=self.order_number,
                carrier=carrier,
                tracking_number=tracking_number,
                estimated_delivery=self.estimated_delivery,
                shipped_at=now,
            )
        )

    def mark_out_for_delivery(self):
        now = self._move_to(OrderStatus.OUT_FOR_DELIVERY)
        self.raise_(OrderOutForDelivery(order_id=self.id, order_number=self.order_number, dispatched_at=now))

    def deliver(self):
        now = self._move_to(OrderStatus.DELIVERED)
        self.delivered_at = now
        if self.is_cash_on_delivery:
            self.payment_status = PaymentStatus.COMPLETED.value
        self.raise_(
            OrderDelivered(
                order_id=self.id,
                order_number=self.order_number,
                customer_id=str(self.customer_id),
                delivered_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Cancellation
    # -------------------------------------------------------------------
    def cancel(self, reason, cancelled_by=CancellationActor.CUSTOMER.value):
        """Cancel a pending or confirmed order."""
        previous_status = self.status
        now = self._move_to(OrderStatus.CANCELLED)
        self.cancellation_reason = reason
        self.cancelled_by = cancelled_by
        self.raise_(
            OrderCancelled(
                order_id=self.id,
                order_number=self.order_number,
                reason=reason,
                cancelled_by=cancelled_by,
                previous_status=previous_status,
                cancelled_at=now,
            )
        )
