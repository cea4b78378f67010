from school_erp.api.client import ApiClient, build_query_params, encode_multipart
from school_erp.api.envelope import ApiResponse
from school_erp.api.service import ResourceService, TokenSource

__all__ = [
    "ApiClient",
    "ApiResponse",
    "ResourceService",
    "TokenSource",
    "build_query_params",
    "encode_multipart",
]
