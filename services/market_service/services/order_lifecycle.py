"""Order lifecycle rules.

Everything that decides whether an order may change, and what else changes
with it, lives here: the order and after-sale transition tables, the
logistics rules, the after-sale coupling rules and the authorization
capability check. Functions in this module mutate an already-loaded
``Order`` aggregate in memory and never touch the database; callers in
``order_ops`` load the order under a row lock, call in here, and commit.

Every status change goes through ``transition``. The dedicated cancel
operation is the same table lookup with an extra guard, so the two can
never disagree about which states are reachable.
"""

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from fastapi import status as http_status
from libs.auth.models import AuthUser
from libs.common.datetime_utils import utc_now
from libs.common.errors import (
    AFTER_SALE_NOT_ELIGIBLE,
    AFTER_SALE_NOT_FOUND,
    INVALID_AFTERSALE_TRANSITION,
    INVALID_STATE_FOR_CANCEL,
    INVALID_TRANSITION,
    LOGISTICS_NOT_SET,
    ORDER_CANCELLED,
    AppError,
    bad_request,
)
from libs.common.logging import get_logger
from services.market_service.models import (
    AfterSaleStatus,
    AfterSaleType,
    CheckpointKind,
    LogisticsCheckpoint,
    Order,
    OrderAfterSale,
    OrderLogistics,
    OrderStatus,
    OrderStatusHistory,
    RefundMethod,
)

logger = get_logger(__name__)

# ---------------------------------------------------------------------------
# Transition tables
# ---------------------------------------------------------------------------

ORDER_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.COMPLETED, OrderStatus.AFTER_SALE}),
    OrderStatus.COMPLETED: frozenset({OrderStatus.AFTER_SALE}),
    OrderStatus.CANCELLED: frozenset(),
    OrderStatus.AFTER_SALE: frozenset({OrderStatus.COMPLETED}),
}

AFTER_SALE_TRANSITIONS: dict[AfterSaleStatus, frozenset[AfterSaleStatus]] = {
    AfterSaleStatus.APPLIED: frozenset(
        {AfterSaleStatus.PROCESSING, AfterSaleStatus.RESOLVED, AfterSaleStatus.REJECTED}
    ),
    AfterSaleStatus.PROCESSING: frozenset(
        {AfterSaleStatus.RESOLVED, AfterSaleStatus.REJECTED}
    ),
    AfterSaleStatus.RESOLVED: frozenset(),
    AfterSaleStatus.REJECTED: frozenset(),
}

CANCELLABLE_STATES = frozenset({OrderStatus.PENDING, OrderStatus.PROCESSING})
AFTER_SALE_ELIGIBLE_STATES = frozenset({OrderStatus.SHIPPED, OrderStatus.COMPLETED})

# History / record notes
ORDER_CREATED_NOTE = "订单已创建"
DEFAULT_CANCEL_REASON = "用户取消订单"
DEFAULT_AFTER_SALE_RESOLUTION = "售后已完成"
DELIVERY_CONFIRMED_NOTE = "物流已签收，订单自动完成"

# Carrier label that means "signed for" when no explicit kind is sent.
DELIVERED_LABEL = "已签收"


@dataclass(frozen=True)
class TransitionGuard:
    """Extra precondition layered on top of the transition table."""

    allowed_from: frozenset
    code: str
    message: str


CANCEL_GUARD = TransitionGuard(
    allowed_from=CANCELLABLE_STATES,
    code=INVALID_STATE_FOR_CANCEL,
    message="当前订单状态不支持取消",
)


@dataclass(frozen=True)
class RefundInfo:
    amount_fen: int
    method: RefundMethod
    reference_id: Optional[str] = None
    completed_at: Optional[datetime] = None


def _clean(note: Optional[str]) -> Optional[str]:
    if note is None:
        return None
    note = note.strip()
    return note or None


def _touch(order: Order, now: datetime) -> None:
    order.version = (order.version or 0) + 1
    order.updated_at = now


def _append_history(
    order: Order, status: OrderStatus, note: Optional[str], now: datetime
) -> None:
    order.status_history.append(
        OrderStatusHistory(
            position=len(order.status_history),
            status=status,
            note=note,
            created_at=now,
        )
    )


# ---------------------------------------------------------------------------
# Order status
# ---------------------------------------------------------------------------


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in ORDER_TRANSITIONS.get(current, frozenset())


def seed_history(order: Order, now: Optional[datetime] = None) -> None:
    """Record the initial pending entry on a freshly built order."""
    order.status = OrderStatus.PENDING
    _append_history(order, OrderStatus.PENDING, ORDER_CREATED_NOTE, now or utc_now())


def transition(
    order: Order,
    target: OrderStatus,
    note: Optional[str] = None,
    *,
    guard: Optional[TransitionGuard] = None,
    now: Optional[datetime] = None,
) -> bool:
    """Move ``order`` to ``target`` and apply the side effects of entering it.

    Returns ``False`` (and changes nothing) when the order is already in
    ``target``. Raises ``AppError`` for transitions the table or ``guard``
    does not allow; the order is left untouched in that case.
    """
    current = order.status
    if guard is not None and current not in guard.allowed_from:
        raise AppError(http_status.HTTP_400_BAD_REQUEST, guard.code, guard.message)
    if target == current:
        return False
    if not can_transition(current, target):
        logger.warning(
            "Rejected transition for order %s: %s -> %s",
            order.id,
            current.value,
            target.value,
        )
        raise AppError(
            http_status.HTTP_400_BAD_REQUEST,
            INVALID_TRANSITION,
            f"无法从 {current.value} 流转到 {target.value}",
        )

    now = now or utc_now()
    note = _clean(note)

    order.status = target
    _append_history(order, target, note, now)

    if target is OrderStatus.CANCELLED:
        order.cancel_reason = note or DEFAULT_CANCEL_REASON
        order.cancelled_at = now

    after_sale = order.after_sale
    if target is OrderStatus.COMPLETED and after_sale is not None:
        after_sale.status = AfterSaleStatus.RESOLVED
        after_sale.resolution_note = (
            after_sale.resolution_note or note or DEFAULT_AFTER_SALE_RESOLUTION
        )
        after_sale.updated_at = now

    _touch(order, now)
    logger.info(
        "Order %s transitioned %s -> %s", order.id, current.value, target.value
    )
    return True


def cancel(
    order: Order, reason: Optional[str] = None, *, now: Optional[datetime] = None
) -> bool:
    return transition(
        order, OrderStatus.CANCELLED, reason, guard=CANCEL_GUARD, now=now
    )


# ---------------------------------------------------------------------------
# Logistics
# ---------------------------------------------------------------------------


def infer_checkpoint_kind(label: str) -> CheckpointKind:
    """Kind for clients that only send a display label."""
    if label.strip() == DELIVERED_LABEL:
        return CheckpointKind.DELIVERED
    return CheckpointKind.OTHER


def set_logistics(
    order: Order,
    *,
    carrier: str,
    tracking_number: str,
    contact_phone: Optional[str] = None,
    now: Optional[datetime] = None,
) -> OrderLogistics:
    """Create or replace the shipment record; existing checkpoints are kept."""
    if order.status is OrderStatus.CANCELLED:
        raise AppError(
            http_status.HTTP_400_BAD_REQUEST,
            ORDER_CANCELLED,
            "已取消的订单无法更新物流信息",
        )
    now = now or utc_now()

    logistics = order.logistics
    if logistics is None:
        logistics = OrderLogistics(checkpoints=[])
        order.logistics = logistics
    logistics.carrier = carrier
    logistics.tracking_number = tracking_number
    logistics.contact_phone = contact_phone
    logistics.updated_at = now

    _touch(order, now)
    return logistics


def append_checkpoint(
    order: Order,
    *,
    status: str,
    kind: Optional[CheckpointKind] = None,
    description: Optional[str] = None,
    location: Optional[str] = None,
    now: Optional[datetime] = None,
) -> LogisticsCheckpoint:
    logistics = order.logistics
    if logistics is None:
        raise AppError(
            http_status.HTTP_400_BAD_REQUEST,
            LOGISTICS_NOT_SET,
            "请先设置物流信息",
        )
    now = now or utc_now()
    kind = kind or infer_checkpoint_kind(status)

    checkpoint = LogisticsCheckpoint(
        position=len(logistics.checkpoints),
        status=status,
        kind=kind,
        description=description,
        location=location,
        created_at=now,
    )
    logistics.checkpoints.append(checkpoint)
    logistics.updated_at = now
    _touch(order, now)

    if kind is CheckpointKind.DELIVERED:
        _on_delivery_confirmed(order, now)
    return checkpoint


def _on_delivery_confirmed(order: Order, now: datetime) -> None:
    if order.status is OrderStatus.COMPLETED:
        return
    if not can_transition(order.status, OrderStatus.COMPLETED):
        logger.info(
            "Delivery confirmed for order %s in status %s; status left unchanged",
            order.id,
            order.status.value,
        )
        return
    transition(order, OrderStatus.COMPLETED, DELIVERY_CONFIRMED_NOTE, now=now)


# ---------------------------------------------------------------------------
# After-sale
# ---------------------------------------------------------------------------


def apply_after_sale(
    order: Order,
    *,
    after_sale_type: AfterSaleType,
    reason: str,
    description: Optional[str] = None,
    attachments: Optional[list[str]] = None,
    now: Optional[datetime] = None,
) -> OrderAfterSale:
    """Open (or reopen) an after-sale request and move the order into after-sale."""
    if order.status not in AFTER_SALE_ELIGIBLE_STATES:
        raise AppError(
            http_status.HTTP_400_BAD_REQUEST,
            AFTER_SALE_NOT_ELIGIBLE,
            "仅支持已发货或已完成的订单申请售后",
        )
    now = now or utc_now()

    record = order.after_sale
    if record is None:
        record = OrderAfterSale()
        order.after_sale = record
    record.type = after_sale_type
    record.reason = reason
    record.description = _clean(description)
    record.attachments = list(attachments or [])
    record.status = AfterSaleStatus.APPLIED
    record.resolution_note = None
    record.refund_amount_fen = None
    record.refund_method = None
    record.refund_reference_id = None
    record.refund_completed_at = None
    record.applied_at = now
    record.updated_at = now

    transition(order, OrderStatus.AFTER_SALE, f"申请售后：{reason}", now=now)
    return record


# Coupling rules between the after-sale record and the order. Each returns
# the order status to move to (and the history note) or None.
AfterSaleRule = Callable[
    [Order, OrderAfterSale, Optional[str]],
    Optional[tuple[OrderStatus, Optional[str]]],
]


def _refund_resolution_completes_order(order, record, resolution_note):
    if record.status is AfterSaleStatus.RESOLVED and record.type is AfterSaleType.REFUND:
        return OrderStatus.COMPLETED, resolution_note or DEFAULT_AFTER_SALE_RESOLUTION
    return None


def _rejection_restores_processing(order, record, resolution_note):
    if record.status is AfterSaleStatus.REJECTED and order.status in CANCELLABLE_STATES:
        return OrderStatus.PROCESSING, resolution_note
    return None


AFTER_SALE_RULES: tuple[AfterSaleRule, ...] = (
    _refund_resolution_completes_order,
    _rejection_restores_processing,
)


def update_after_sale(
    order: Order,
    *,
    status: AfterSaleStatus,
    resolution_note: Optional[str] = None,
    refund: Optional[RefundInfo] = None,
    now: Optional[datetime] = None,
) -> OrderAfterSale:
    record = order.after_sale
    if record is None:
        raise AppError(
            http_status.HTTP_400_BAD_REQUEST,
            AFTER_SALE_NOT_FOUND,
            "该订单尚未申请售后",
        )
    current = record.status
    if status not in AFTER_SALE_TRANSITIONS.get(current, frozenset()):
        raise AppError(
            http_status.HTTP_400_BAD_REQUEST,
            INVALID_AFTERSALE_TRANSITION,
            f"售后状态无法从 {current.value} 流转到 {status.value}",
        )
    if refund is not None:
        if status is not AfterSaleStatus.RESOLVED:
            raise bad_request("仅在售后处理完成时可登记退款信息")
        if refund.amount_fen <= 0:
            raise bad_request("退款金额必须大于 0")
        if refund.amount_fen > order.total_fen:
            raise bad_request("退款金额不能超过订单实付金额")

    now = now or utc_now()
    resolution_note = _clean(resolution_note)

    record.status = status
    if resolution_note:
        record.resolution_note = resolution_note
    if refund is not None:
        record.refund_amount_fen = refund.amount_fen
        record.refund_method = refund.method
        record.refund_reference_id = refund.reference_id
        record.refund_completed_at = refund.completed_at or now
    record.updated_at = now
    _touch(order, now)
    logger.info(
        "After-sale for order %s moved %s -> %s",
        order.id,
        current.value,
        status.value,
    )

    for rule in AFTER_SALE_RULES:
        outcome = rule(order, record, resolution_note)
        if outcome is not None:
            target, note = outcome
            transition(order, target, note, now=now)
            break
    return record


# ---------------------------------------------------------------------------
# Authorization
# ---------------------------------------------------------------------------


class OrderAction(str, enum.Enum):
    VIEW = "view"
    UPDATE_STATUS = "update_status"
    CANCEL = "cancel"
    SET_LOGISTICS = "set_logistics"
    APPEND_CHECKPOINT = "append_checkpoint"
    APPLY_AFTER_SALE = "apply_after_sale"
    UPDATE_AFTER_SALE = "update_after_sale"


CUSTOMER_ACTIONS = frozenset(OrderAction)
FARMER_ACTIONS = frozenset(
    {
        OrderAction.VIEW,
        OrderAction.UPDATE_STATUS,
        OrderAction.SET_LOGISTICS,
        OrderAction.APPEND_CHECKPOINT,
        OrderAction.UPDATE_AFTER_SALE,
    }
)


def can(actor: AuthUser, action: OrderAction, order: Order) -> bool:
    """Whether ``actor`` may perform ``action`` on ``order``."""
    if actor.is_admin:
        return True
    if str(order.customer_id) == actor.user_id and action in CUSTOMER_ACTIONS:
        return True
    return (
        actor.is_farmer
        and actor.farmer_profile_id is not None
        and str(order.farmer_id) == actor.farmer_profile_id
        and action in FARMER_ACTIONS
    )
