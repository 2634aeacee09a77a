"""Order assembly and persistence for the checkout flow."""
import hashlib
import logging
import re
import secrets
import string
from datetime import datetime
from decimal import Decimal, ROUND_DOWN
from typing import Callable, Dict, List, NamedTuple, Optional, Sequence, Tuple

from sqlalchemy.exc import SQLAlchemyError

from webshop.exceptions import (
    EmptyCartError, ValidationError, ExternalServiceError, InvariantViolation
)
from webshop.models import Order, OrderLine, PaymentStatus, FulfillmentStatus
from webshop.services.cart_service import CENT, to_money

logger = logging.getLogger(__name__)

DEFAULT_PAYMENT_METHODS = ('card', 'transfer', 'installments')
INSTALLMENTS_METHOD = 'installments'

EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')
REFERENCE_ALPHABET = string.ascii_uppercase + string.digits

REQUIRED_CUSTOMER_FIELDS = (
    ('first_name', 'Le prénom est obligatoire.'),
    ('last_name', 'Le nom est obligatoire.'),
    ('email', "L'adresse email est obligatoire."),
)
REQUIRED_BILLING_FIELDS = (
    ('address', "L'adresse est obligatoire."),
    ('postal_code', 'Le code postal est obligatoire.'),
    ('city', 'La ville est obligatoire.'),
    ('country', 'Le pays est obligatoire.'),
)


class CustomerInfo(NamedTuple):
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    company: Optional[str] = None


class BillingAddress(NamedTuple):
    address: str
    postal_code: str
    city: str
    country: str


class SubmissionLine(NamedTuple):
    """Line snapshot: the unit price is frozen at submission time."""
    product_id: str
    name: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal


class OrderSubmission(NamedTuple):
    """Immutable checkout snapshot handed to the order repository."""
    reference: str
    created_at: datetime
    customer: CustomerInfo
    billing: BillingAddress
    payment_method: str
    lines: Tuple[SubmissionLine, ...]
    promo_code: Optional[str]
    subtotal: Decimal
    discount: Decimal
    tax: Decimal
    total: Decimal
    installments: Tuple[Decimal, ...] = ()
    project_details: Optional[str] = None
    newsletter: bool = False

    def to_dict(self) -> dict:
        return {
            'reference': self.reference,
            'created_at': self.created_at.isoformat(),
            'payment_method': self.payment_method,
            'promo_code': self.promo_code,
            'items': [
                {
                    'product_id': line.product_id,
                    'name': line.name,
                    'quantity': line.quantity,
                    'unit_price': str(line.unit_price),
                    'line_total': str(line.line_total),
                }
                for line in self.lines
            ],
            'subtotal': str(self.subtotal),
            'discount': str(self.discount),
            'tax': str(self.tax),
            'total': str(self.total),
            'installments': [str(amount) for amount in self.installments],
        }


def generate_order_reference(now: Optional[datetime] = None, prefix: str = 'WS') -> str:
    """
    Build a shareable reference such as "WS-2026-K7Q2".

    Four random characters give 36**4 combinations per year: collisions are
    unlikely at shop volumes but not impossible. The unique constraint on
    orders.order_reference turns one into a retryable error.
    """
    now = now or datetime.now()
    suffix = ''.join(secrets.choice(REFERENCE_ALPHABET) for _ in range(4))
    return f"{prefix}-{now.year}-{suffix}"


def compute_installments(total: Decimal, count: int = 3) -> List[Decimal]:
    """
    Split a total into `count` installments that sum exactly to the total.

    Every installment is total / count rounded down to the cent; the remainder
    goes to the last one (10.00 -> 3.33, 3.33, 3.34).
    """
    if count < 1:
        raise ValueError(f"Installment count must be positive, got {count}")

    total = to_money(total)
    base = (total / count).quantize(CENT, rounding=ROUND_DOWN)
    installments = [base] * (count - 1)
    installments.append(total - base * (count - 1))

    if sum(installments, Decimal('0.00')) != total:
        raise InvariantViolation(f"Installments {installments} do not add up to {total}")
    return installments


def _clean(value) -> str:
    return str(value).strip() if value is not None else ''


def _validate_customer(fields: Dict[str, str]) -> CustomerInfo:
    if not isinstance(fields, dict):
        raise ValidationError('customer', 'Coordonnées invalides.')
    for name, message in REQUIRED_CUSTOMER_FIELDS:
        if not _clean(fields.get(name)):
            raise ValidationError(name, message)

    email = _clean(fields['email'])
    if not EMAIL_PATTERN.match(email):
        raise ValidationError('email', "L'adresse email n'est pas valide.")

    return CustomerInfo(
        first_name=_clean(fields['first_name']),
        last_name=_clean(fields['last_name']),
        email=email.lower(),
        phone=_clean(fields.get('phone')) or None,
        company=_clean(fields.get('company')) or None,
    )


def _validate_billing(fields: Dict[str, str]) -> BillingAddress:
    if not isinstance(fields, dict):
        raise ValidationError('billing', 'Adresse de facturation invalide.')
    for name, message in REQUIRED_BILLING_FIELDS:
        if not _clean(fields.get(name)):
            raise ValidationError(name, message)

    return BillingAddress(
        address=_clean(fields['address']),
        postal_code=_clean(fields['postal_code']),
        city=_clean(fields['city']),
        country=_clean(fields['country']),
    )


def build_submission(
    cart,
    customer_fields: Dict[str, str],
    billing_fields: Dict[str, str],
    payment_method: str,
    payment_methods: Sequence[str] = DEFAULT_PAYMENT_METHODS,
    installments_count: int = 3,
    reference_prefix: str = 'WS',
    project_details: Optional[str] = None,
    newsletter: bool = False,
    now: Optional[Callable[[], datetime]] = None
) -> OrderSubmission:
    """
    Snapshot a cart and the checkout form into an OrderSubmission.

    Raises:
        EmptyCartError: the cart has no lines
        ValidationError: a customer/billing field or the payment method is invalid
    """
    if cart.is_empty():
        raise EmptyCartError()

    customer = _validate_customer(customer_fields or {})
    billing = _validate_billing(billing_fields or {})

    if payment_method not in payment_methods:
        raise ValidationError('payment_method', 'Moyen de paiement invalide.')

    lines = []
    for line in cart.lines:
        product = cart.catalog.get_product(line.product_id)
        unit_price = to_money(product.price)
        lines.append(SubmissionLine(
            product_id=line.product_id,
            name=product.name,
            quantity=line.quantity,
            unit_price=unit_price,
            line_total=unit_price * line.quantity,
        ))

    total = cart.get_total()
    installments = ()
    if payment_method == INSTALLMENTS_METHOD:
        installments = tuple(compute_installments(total, installments_count))

    created_at = now() if now else datetime.now()
    return OrderSubmission(
        reference=generate_order_reference(created_at, reference_prefix),
        created_at=created_at,
        customer=customer,
        billing=billing,
        payment_method=payment_method,
        lines=tuple(lines),
        promo_code=cart.promo_code if cart.get_discount() > 0 else None,
        subtotal=cart.get_subtotal(),
        discount=cart.get_discount(),
        tax=cart.get_tax(),
        total=total,
        installments=installments,
        project_details=_clean(project_details) or None,
        newsletter=bool(newsletter),
    )


class OrderRepository:
    """Order persistence backed by the SQLAlchemy session."""

    def __init__(self, session):
        self.session = session

    def find_by_idempotency_key(self, idempotency_key: str) -> Optional[Order]:
        return self.session.query(Order).filter(
            Order.idempotency_key == idempotency_key
        ).first()

    def get_by_reference(self, reference: str) -> Optional[Order]:
        return self.session.query(Order).filter(Order.order_reference == reference).first()

    def create_order(self, submission: OrderSubmission, idempotency_key: Optional[str] = None) -> Order:
        """
        Persist a submission as a pending order with its line snapshots.

        A key that was already used returns the existing order instead of a
        duplicate.

        Raises:
            ExternalServiceError: the database rejected or could not store the order
        """
        try:
            if idempotency_key:
                existing = self.find_by_idempotency_key(idempotency_key)
                if existing:
                    logger.info(f"[CHECKOUT] Idempotent replay for {existing.order_reference}")
                    return existing

            order = Order(
                order_reference=submission.reference,
                idempotency_key=idempotency_key,
                customer_email=submission.customer.email,
                customer_first_name=submission.customer.first_name,
                customer_last_name=submission.customer.last_name,
                customer_phone=submission.customer.phone,
                customer_company=submission.customer.company,
                billing_address=submission.billing.address,
                billing_postal_code=submission.billing.postal_code,
                billing_city=submission.billing.city,
                billing_country=submission.billing.country,
                payment_method=submission.payment_method,
                promo_code=submission.promo_code,
                subtotal=submission.subtotal,
                discount_amount=submission.discount,
                tax_amount=submission.tax,
                total_amount=submission.total,
                payment_status=PaymentStatus.PENDING.value,
                fulfillment_status=FulfillmentStatus.PENDING.value,
                project_details=submission.project_details,
                newsletter=submission.newsletter,
            )
            for line in submission.lines:
                order.lines.append(OrderLine(
                    product_id=line.product_id,
                    product_name_snapshot=line.name,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    line_total=line.line_total,
                ))

            self.session.add(order)
            self.session.commit()
            logger.info(f"[CHECKOUT] Order {order.order_reference} stored (id={order.id}, total={order.total_amount})")
            return order
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"[CHECKOUT] Could not store order {submission.reference}: {e}")
            raise ExternalServiceError(
                "La commande n'a pas pu être enregistrée, veuillez réessayer."
            ) from e


def scoped_idempotency_key(owner: str, key: str) -> str:
    """
    Stored form of a client Idempotency-Key, namespaced by its owner so two
    customers sending the same key never share an order.
    """
    raw = f"{owner.strip().lower()}:{key}"
    return hashlib.sha256(raw.encode()).hexdigest()


def checkout(cart, repository: OrderRepository, idempotency_key: Optional[str] = None, **submission_kwargs):
    """
    Build, persist, then clear the cart.

    A key that already produced an order returns that order untouched, before
    the cart is looked at (it was emptied by the first call). Otherwise the
    cart is only cleared once the repository confirmed the order; any failure
    leaves the cart lines and promo code as they were.

    Returns:
        tuple: (Order, created) where created is False for a replay
    """
    if idempotency_key:
        existing = repository.find_by_idempotency_key(idempotency_key)
        if existing:
            logger.info(f"[CHECKOUT] Replay of {existing.order_reference}")
            return existing, False

    submission = build_submission(cart, **submission_kwargs)
    order = repository.create_order(submission, idempotency_key=idempotency_key)
    cart.clear_cart()
    return order, True
