"""Order fulfilment: commands and handler.

Moves confirmed orders through processing, shipment, out-for-delivery and
delivery. ``AdvanceOrderStatus`` is the generic entry point used by the
status endpoint; it dispatches to the specific transition. It never confirms
an order: only a successful checkout payment does that.
"""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.exceptions import InvalidTransition
from ordering.order.order import Order
from ordering.order.state_machine import OrderStatus, as_status, assert_can_transition


@ordering.command(part_of="Order")
class MarkProcessing:
    """The warehouse started picking and packing."""

    order_id = Identifier(required=True)


@ordering.command(part_of="Order")
class RecordShipment:
    order_id = Identifier(required=True)
    carrier = String(required=True, max_length=100)
    tracking_number = String(required=True, max_length=255)
    estimated_delivery = String(max_length=10)  # ISO date string


@ordering.command(part_of="Order")
class MarkOutForDelivery:
    order_id = Identifier(required=True)


@ordering.command(part_of="Order")
class RecordDelivery:
    order_id = Identifier(required=True)


@ordering.command(part_of="Order")
class AdvanceOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=20)
    carrier = String(max_length=100)
    tracking_number = String(max_length=255)
    reason = String(max_length=500)


@ordering.command_handler(part_of=Order)
class RecordFulfillmentHandler:
    @handle(MarkProcessing)
    def mark_processing(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.start_processing()
        repo.add(order)

    @handle(RecordShipment)
    def record_shipment(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.ship(
            carrier=command.carrier,
            tracking_number=command.tracking_number,
            estimated_delivery=command.estimated_delivery,
        )
        repo.add(order)

    @handle(MarkOutForDelivery)
    def mark_out_for_delivery(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.mark_out_for_delivery()
        repo.add(order)

    @handle(RecordDelivery)
    def record_delivery(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.deliver()
        repo.add(order)

    @handle(AdvanceOrderStatus)
    def advance_order_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        target = as_status(command.status)
        if target == OrderStatus.CONFIRMED:
            raise InvalidTransition({"status": ["Orders are confirmed by checkout once payment succeeds"]})
        assert_can_transition(order.status, target)

        if target == OrderStatus.PROCESSING:
            order.start_processing()
        elif target == OrderStatus.SHIPPED:
            if not command.carrier or not command.tracking_number:
                raise ValidationError({"tracking_number": ["Carrier and tracking number are required to ship"]})
            order.ship(carrier=command.carrier, tracking_number=command.tracking_number)
        elif target == OrderStatus.OUT_FOR_DELIVERY:
            order.mark_out_for_delivery()
        elif target == OrderStatus.DELIVERED:
            order.deliver()
        elif target == OrderStatus.CANCELLED:
            order.cancel(reason=command.reason or "Cancelled by admin", cancelled_by="admin")

        repo.add(order)
        return order.status
