class UntisException(Exception):
    """Base exception class for WebUntis API errors."""
    pass

class UntisConfigurationError(UntisException):
    """Indicates a required setting (host, school, ...) is missing."""
    pass

class UntisAuthenticationError(UntisException):
    """Indicates an error during the authentication process."""
    pass

class UntisParsingError(UntisException):
    """Indicates a response from WebUntis could not be parsed into the expected shape."""
    pass

class UntisRpcError(UntisException):
    """Indicates the JSON-RPC endpoint answered with an error envelope."""

    def __init__(self, code: int | None, message: str, method: str | None = None):
        self.code = code
        self.message = message
        self.method = method
        super().__init__(f"JSON-RPC call {method!r} failed with code {code}: {message}")
