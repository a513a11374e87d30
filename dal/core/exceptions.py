"""Data-access exceptions."""


class DalException(Exception):
    """Base data-access exception."""

    def __init__(self, message: str, code: str = "DAL_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)

class PropertyResolutionError(DalException):
    """A segment of a dotted ordering path does not name a mapped attribute."""

    def __init__(
        self,
        entity: str,
        path: str,
        segment: str,
        resolved: str = "",
        reason: str = "no such attribute",
    ):
        self.entity = entity
        self.path = path
        self.segment = segment
        self.resolved = resolved
        self.reason = reason
        where = f"{entity}.{resolved}" if resolved else entity
        super().__init__(
            f"Cannot resolve '{segment}' on {where} (path '{path}'): {reason}",
            code="PROPERTY_RESOLUTION_ERROR",
        )

class QueryBuildError(DalException):
    """An include path or predicate cannot be turned into a statement."""

    def __init__(self, message: str):
        super().__init__(message, code="QUERY_BUILD_ERROR")

class InvalidOrderDirectionError(DalException):
    def __init__(self, direction: str):
        self.direction = direction
        super().__init__(
            f"Order direction must be 'asc' or 'desc', got '{direction}'",
            code="INVALID_ORDER_DIRECTION",
        )
