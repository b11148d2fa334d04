"""Custom exceptions for the Huastex backend."""

class HuastexError(Exception):
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

class BusinessLogicError(HuastexError):
    """Exception raised for business logic violations."""
    def __init__(self, message, status_code=400, payload=None):
        super().__init__(message, status_code, payload)

class ValidationError(BusinessLogicError):
    """Raised when request data cannot be parsed into the expected shape."""
    def __init__(self, message, field=None):
        payload = {'field': field} if field else None
        super().__init__(message, status_code=422, payload=payload)

class NotFoundError(HuastexError):
    """Exception raised when a resource is not found."""
    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, payload)

class FormulaError(BusinessLogicError):
    """Base class for pricing formula problems."""

class InvalidFormulaResult(FormulaError):
    """The formula produced a non-finite value (e.g. division by zero)."""
    def __init__(self, expression, reason='resultado no finito'):
        self.expression = expression
        super().__init__(f'La fórmula "{expression}" no produce un valor válido: {reason}',
                         payload={'expression': expression})

class MalformedFormulaToken(FormulaError):
    """Raised in strict mode when part of the expression is not a valid token."""
    def __init__(self, expression, token):
        self.expression = expression
        self.token = token
        super().__init__(f'Token inválido "{token}" en la fórmula "{expression}"',
                         payload={'expression': expression, 'token': token})
