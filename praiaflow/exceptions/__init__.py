"""Custom exceptions for the PraiaFlow ordering flow."""


class PraiaFlowError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message="An internal error occurred", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['message'] = self.message
        rv['status'] = 'error'
        return rv


class ValidationError(PraiaFlowError):
    """Local validation failure. Never reaches the store; the cart is preserved."""
    reason = 'validation'

    def __init__(self, message, payload=None):
        payload = dict(payload or ())
        payload.setdefault('reason', self.reason)
        super().__init__(message, 400, payload)


class MissingIdentityError(ValidationError):
    """Raised when the customer name (comanda) or the location is empty."""
    reason = 'missing_identity'

    def __init__(self, missing_fields):
        self.missing_fields = list(missing_fields)
        super().__init__(
            'Preencha seu nome e o local (ex: Guarda-sol 12)',
            payload={'fields': self.missing_fields}
        )


class MissingOptionError(ValidationError):
    """Raised on submit when an optioned product has no option selected."""
    reason = 'missing_option'

    def __init__(self, product_names):
        self.product_names = list(product_names)
        super().__init__(
            f'Escolha uma opção para: {", ".join(self.product_names)}',
            payload={'products': self.product_names}
        )


class EmptyCartError(ValidationError):
    """Raised on submit when no line has a positive quantity."""
    reason = 'empty_cart'

    def __init__(self, message='O carrinho está vazio.'):
        super().__init__(message)


class StallNotConfiguredError(ValidationError):
    """Raised when no stall identifier is known."""
    reason = 'stall_not_configured'

    def __init__(self, message='Barraca não identificada.'):
        super().__init__(message)


class OptionRequiredError(PraiaFlowError):
    """Signal raised when quantity is added before choosing an option."""
    def __init__(self, product_name):
        self.product_name = product_name
        super().__init__(
            f'Escolha uma opção para "{product_name}" antes de adicionar.',
            409,
            {'reason': 'option_required'}
        )


class CartLockedError(PraiaFlowError):
    """Raised when the cart is mutated while a submission is in flight."""
    def __init__(self, message='Pedido em envio, aguarde.'):
        super().__init__(message, 409, {'reason': 'submitting'})


class NotFoundError(PraiaFlowError):
    """Exception raised when a resource is not found."""
    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, payload)


class CatalogLoadError(PraiaFlowError):
    """The store could not return the catalog for a stall."""
    def __init__(self, message='Erro ao carregar o cardápio.', payload=None):
        super().__init__(message, 502, payload)


class OrderHeaderCreateError(PraiaFlowError):
    """The order header was not created; nothing was written."""
    def __init__(self, message='Erro ao enviar pedido', payload=None):
        super().__init__(message, 502, payload)


class OrderLinesCreateError(PraiaFlowError):
    """The order lines were not created after the header was written.

    ``compensated`` tells whether the header was deleted again. When it is
    False the header identified by ``order_id`` is orphaned in the store.
    """
    def __init__(self, order_id, compensated, message='Erro ao enviar pedido'):
        self.order_id = order_id
        self.compensated = compensated
        super().__init__(message, 502, {'compensated': compensated})
