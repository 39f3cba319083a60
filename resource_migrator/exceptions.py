class RequestError(RuntimeError):
    def __init__(self, message=None, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(RequestError):
    def __init__(self, message=None):
        super().__init__(message, status_code=404)


class EnumerationError(RuntimeError):
    def __init__(self, message=None):
        super().__init__(message)


class TransformError(RuntimeError):
    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class FatalMigrationError(RuntimeError):
    def __init__(self, message=None, ledger=None):
        super().__init__(message)
        # Partial ledger computed before the failure
        self.ledger = ledger
