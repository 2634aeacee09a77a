"""Custom exceptions for the web shop application."""


class ShopError(Exception):
    """Base exception for all application errors."""
    kind = 'error'

    def __init__(self, message="An internal error occurred", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['message'] = self.message
        rv['kind'] = self.kind
        rv['status'] = 'error'
        return rv


class UserInputError(ShopError):
    """Invalid input coming from the customer (rendered inline, never fatal)."""
    kind = 'user_input_error'

    def __init__(self, message, status_code=400, payload=None):
        super().__init__(message, status_code, payload)


class ValidationError(UserInputError):
    """A form field is missing or malformed."""
    kind = 'validation_error'

    def __init__(self, field, message):
        super().__init__(message, payload={'field': field})
        self.field = field


class InvalidQuantityError(UserInputError):
    """Raised when a cart quantity is not a positive integer."""
    kind = 'invalid_quantity'

    def __init__(self, quantity):
        super().__init__(f'Quantité invalide : {quantity}', payload={'quantity': str(quantity)})
        self.quantity = quantity


class InvalidStatusError(UserInputError):
    """Raised when a payment status is outside the allowed vocabulary."""
    kind = 'invalid_status'

    def __init__(self, status):
        super().__init__('Statut invalide', payload={'value': str(status)})
        self.value = status


class EmptyCartError(UserInputError):
    """Raised when checking out a cart without lines."""
    kind = 'empty_cart'

    def __init__(self, message='Votre panier est vide.'):
        super().__init__(message)


class NotFoundError(ShopError):
    """Exception raised when a resource is not found."""
    kind = 'not_found'

    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, payload)


class UnknownProductError(NotFoundError):
    """Raised when a product id does not resolve in the catalog."""
    kind = 'unknown_product'

    def __init__(self, product_id):
        super().__init__(f'Produit inconnu : {product_id}', payload={'product_id': str(product_id)})
        self.product_id = product_id


class OrderNotFoundError(NotFoundError):
    """Raised when no persisted order matches the given id."""
    kind = 'order_not_found'

    def __init__(self, order_id, message='Client non trouvé'):
        super().__init__(message)
        self.order_id = order_id


class ExternalServiceError(ShopError):
    """A collaborator (database, text generation) is unreachable. Safe to retry."""
    kind = 'external_service_error'
    retryable = True

    def __init__(self, message='Service momentanément indisponible, veuillez réessayer.', payload=None):
        super().__init__(message, 503, payload)

    def to_dict(self):
        rv = super().to_dict()
        rv['retryable'] = self.retryable
        return rv


class InvariantViolation(RuntimeError):
    """Programming defect: a computed value broke a pricing invariant."""
