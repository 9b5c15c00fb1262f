from .format import FormatDescriptor
from .request import FragmentsRequest, ResolveRequest
from .response import ErrorResponse, FragmentsResponse, ResolveResponse

__all__ = [
    "ErrorResponse",
    "FormatDescriptor",
    "FragmentsRequest",
    "FragmentsResponse",
    "ResolveRequest",
    "ResolveResponse",
]
