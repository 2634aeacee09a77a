"""
Cart and pricing engine.

A `Cart` owns its lines and at most one promotion code. Totals are recomputed
after every mutation and cached, so `get_total()` always equals
`get_subtotal() - get_discount() + get_tax()`. All amounts are `Decimal`
values rounded half-up to the cent.
"""
import logging
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, List, NamedTuple, Optional, Tuple

from webshop.exceptions import InvalidQuantityError, UnknownProductError, InvariantViolation
from webshop.models import PromotionKind
from webshop.utils.formatters import money_fr

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')
ZERO = Decimal('0.00')

# PromoResult kinds
PROMO_APPLIED = 'applied'
PROMO_CODE_NOT_FOUND = 'code_not_found'
PROMO_BELOW_MINIMUM = 'below_minimum_subtotal'
PROMO_EXPIRED = 'code_expired'


def to_money(value) -> Decimal:
    """Round any numeric value to the cent, half-up."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def format_price(amount, symbol: str = '€') -> str:
    """Render an amount as a French currency string, e.g. "1 234,56 €"."""
    return money_fr(amount, symbol)


class CartLine(NamedTuple):
    product_id: str
    quantity: int


class PromoResult(NamedTuple):
    """Outcome of applying a promotion code, rendered inline by the UI."""
    success: bool
    kind: str
    message: str
    description: Optional[str] = None

    def to_dict(self):
        return {
            'success': self.success,
            'kind': self.kind,
            'message': self.message,
            'description': self.description,
        }


class _Totals(NamedTuple):
    subtotal: Decimal
    discount: Decimal
    tax: Decimal
    total: Decimal


def _validate_quantity(quantity, allow_zero=False) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidQuantityError(quantity)
    if quantity < 0 or (quantity == 0 and not allow_zero):
        raise InvalidQuantityError(quantity)
    return quantity


class Cart:
    """Shopping cart owned by a single client session."""

    def __init__(
        self,
        catalog,
        promotions,
        tax_rate: Decimal = Decimal('0.20'),
        currency_symbol: str = '€',
        today: Callable[[], date] = date.today
    ):
        self.catalog = catalog
        self.promotions = promotions
        self.tax_rate = Decimal(str(tax_rate))
        self.currency_symbol = currency_symbol
        self._today = today
        self._lines: List[CartLine] = []
        self.promo_code: Optional[str] = None
        self._totals = _Totals(ZERO, ZERO, ZERO, ZERO)

    # ------------------------------------------------------------------
    # Lines
    # ------------------------------------------------------------------

    @property
    def lines(self) -> Tuple[CartLine, ...]:
        return tuple(self._lines)

    def is_empty(self) -> bool:
        return not self._lines

    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines)

    def _index_of(self, product_id: str) -> Optional[int]:
        for index, line in enumerate(self._lines):
            if line.product_id == product_id:
                return index
        return None

    def add_item(self, product_id: str, quantity: int = 1) -> CartLine:
        """Add a product, incrementing the existing line if there is one."""
        if not isinstance(product_id, str) or self.catalog.get_product(product_id) is None:
            raise UnknownProductError(product_id)
        quantity = _validate_quantity(quantity)

        index = self._index_of(product_id)
        if index is None:
            line = CartLine(product_id, quantity)
            self._lines.append(line)
        else:
            line = CartLine(product_id, self._lines[index].quantity + quantity)
            self._lines[index] = line

        self._recalculate()
        return line

    def remove_item(self, product_id: str) -> None:
        """Remove a line. Unknown product ids are ignored."""
        index = self._index_of(product_id)
        if index is None:
            return
        del self._lines[index]
        self._recalculate()

    def set_quantity(self, product_id: str, quantity: int) -> None:
        """Set a line quantity; 0 removes the line. Unknown product ids are ignored."""
        quantity = _validate_quantity(quantity, allow_zero=True)
        index = self._index_of(product_id)
        if index is None:
            return
        if quantity == 0:
            del self._lines[index]
        else:
            self._lines[index] = CartLine(product_id, quantity)
        self._recalculate()

    def clear_cart(self) -> None:
        self._lines = []
        self.promo_code = None
        self._recalculate()

    # ------------------------------------------------------------------
    # Promotion
    # ------------------------------------------------------------------

    def apply_promo_code(self, code: str) -> PromoResult:
        """
        Apply a promotion code (exact, case-sensitive match).

        Failures are returned, not raised, and leave the current code in place.
        """
        promotion = self.promotions.get_promotion(code) if code and isinstance(code, str) else None
        if promotion is None:
            return PromoResult(False, PROMO_CODE_NOT_FOUND, 'Code promo invalide')

        if promotion.is_expired(self._today()):
            return PromoResult(False, PROMO_EXPIRED, 'Ce code promo a expiré')

        subtotal = self.get_subtotal()
        if promotion.minimum_subtotal is not None and subtotal < promotion.minimum_subtotal:
            minimum = format_price(promotion.minimum_subtotal, self.currency_symbol)
            return PromoResult(
                False, PROMO_BELOW_MINIMUM,
                f'Ce code nécessite un montant minimum de {minimum}'
            )

        self.promo_code = promotion.code
        self._recalculate()
        logger.info(f"[CART] Promo code {promotion.code} applied")
        return PromoResult(True, PROMO_APPLIED, f'{promotion.description} appliquée !', promotion.description)

    def remove_promo_code(self) -> None:
        self.promo_code = None
        self._recalculate()

    # ------------------------------------------------------------------
    # Totals
    # ------------------------------------------------------------------

    def get_subtotal(self) -> Decimal:
        return self._totals.subtotal

    def get_discount(self) -> Decimal:
        return self._totals.discount

    def get_tax(self) -> Decimal:
        return self._totals.tax

    def get_total(self) -> Decimal:
        return self._totals.total

    def unit_price(self, product_id: str) -> Decimal:
        product = self.catalog.get_product(product_id)
        if product is None:
            raise UnknownProductError(product_id)
        return to_money(product.price)

    def _compute_discount(self, subtotal: Decimal) -> Decimal:
        if not self.promo_code:
            return ZERO
        promotion = self.promotions.get_promotion(self.promo_code)
        if promotion is None:
            return ZERO
        # Code stays attached but inactive while the cart is under the minimum
        if promotion.minimum_subtotal is not None and subtotal < promotion.minimum_subtotal:
            return ZERO

        value = Decimal(str(promotion.value))
        if promotion.kind == PromotionKind.PERCENTAGE.value:
            discount = to_money(subtotal * value / Decimal(100))
        else:
            discount = to_money(value)
        return min(discount, subtotal)

    def _recalculate(self) -> None:
        subtotal = sum(
            (self.unit_price(line.product_id) * line.quantity for line in self._lines),
            ZERO
        )
        discount = self._compute_discount(subtotal)
        tax = to_money((subtotal - discount) * self.tax_rate)
        total = subtotal - discount + tax

        if discount < 0 or discount > subtotal or total < 0:
            raise InvariantViolation(
                f"Inconsistent cart totals: subtotal={subtotal} discount={discount} tax={tax} total={total}"
            )
        self._totals = _Totals(subtotal, discount, tax, total)

    # ------------------------------------------------------------------
    # Presentation and storage
    # ------------------------------------------------------------------

    def format_price(self, amount) -> str:
        return format_price(amount, self.currency_symbol)

    def summary(self) -> dict:
        """JSON-ready view of the cart with formatted amounts."""
        lines = []
        for line in self._lines:
            product = self.catalog.get_product(line.product_id)
            unit_price = to_money(product.price)
            line_total = unit_price * line.quantity
            lines.append({
                'product_id': line.product_id,
                'name': product.name,
                'icon': product.icon,
                'quantity': line.quantity,
                'unit_price': str(unit_price),
                'line_total': str(line_total),
                'line_total_display': self.format_price(line_total),
            })

        return {
            'items': lines,
            'item_count': self.item_count(),
            'promo_code': self.promo_code,
            'subtotal': str(self.get_subtotal()),
            'discount': str(self.get_discount()),
            'tax': str(self.get_tax()),
            'total': str(self.get_total()),
            'display': {
                'subtotal': self.format_price(self.get_subtotal()),
                'discount': self.format_price(self.get_discount()),
                'tax': self.format_price(self.get_tax()),
                'total': self.format_price(self.get_total()),
            },
        }

    def to_dict(self) -> dict:
        """Serializable state for the Flask session."""
        return {
            'items': [{'id': line.product_id, 'quantity': line.quantity} for line in self._lines],
            'promo_code': self.promo_code,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict], catalog, promotions, **kwargs) -> 'Cart':
        """Rebuild a cart from session data, dropping lines that no longer resolve."""
        cart = cls(catalog, promotions, **kwargs)
        data = data or {}

        for item in data.get('items', []):
            product_id = item.get('id')
            quantity = item.get('quantity')
            if catalog.get_product(product_id) is None:
                logger.warning(f"[CART] Dropping stale line for unknown product {product_id}")
                continue
            if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
                logger.warning(f"[CART] Dropping line {product_id} with invalid quantity {quantity!r}")
                continue
            index = cart._index_of(product_id)
            if index is None:
                cart._lines.append(CartLine(product_id, quantity))
            else:
                cart._lines[index] = CartLine(product_id, cart._lines[index].quantity + quantity)

        promo_code = data.get('promo_code')
        if promo_code and promotions.get_promotion(promo_code) is not None:
            cart.promo_code = promo_code

        cart._recalculate()
        return cart
