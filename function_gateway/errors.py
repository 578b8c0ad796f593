"""Error taxonomy for the registry and the invocation gateway.

Every error carries a stable ``kind`` string that ends up in HTTP error
bodies, so clients can branch on it without parsing messages.
"""

from __future__ import annotations


class GatewayError(Exception):
    """Base class for all registry and gateway errors."""

    kind = "gateway_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class SchemaError(GatewayError):
    """A function or object schema is malformed."""

    kind = "schema_error"


class UnknownCategoryError(GatewayError):
    """One or more builtin categories are not recognised."""

    kind = "unknown_category"

    def __init__(self, categories: list[str]):
        self.categories = categories
        super().__init__(f"Unknown builtin categories: {', '.join(categories)}")


class FunctionNotFoundError(GatewayError):
    kind = "not_found"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Function {name} is not registered")


class ArgumentValidationError(GatewayError):
    """An argument does not match the declared schema."""

    kind = "argument_validation_error"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid argument '{field}': {reason}")


class ExecutionError(GatewayError):
    """The implementation raised. The cause is chained, never returned."""

    kind = "execution_error"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Function {name} failed to execute")


class FunctionInactiveError(GatewayError):
    """The function is registered but switched off by an operator."""

    kind = "function_inactive"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Function {name} is not active")


class InvocationTimeoutError(GatewayError):
    kind = "timeout"

    def __init__(self, name: str, timeout: float):
        self.name = name
        self.timeout = timeout
        super().__init__(f"Function {name} did not complete within {timeout:g}s")


class AuthError(GatewayError):
    kind = "auth_error"

    def __init__(self, message: str = "invalid signature"):
        super().__init__(message)


class ConfigStoreError(GatewayError):
    """The key/value config store could not be reached."""

    kind = "config_store_error"

    def __init__(self, message: str = "config store unavailable"):
        super().__init__(message)
