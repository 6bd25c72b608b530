"""
anyinfer - KServe v2 gRPC inference client.

Tensor codec, RPC session and the health/metadata/infer run sequence.
"""

from .codec import (
    decode_int32_batch,
    decode_string_batch,
    encode_int32_batch,
    encode_string_batch,
)
from .config import ClientConfig
from .errors import (
    DeadlineExceeded,
    InferenceClientError,
    MalformedResponse,
    TransportError,
)
from .kserve import (
    InferenceRequest,
    InferenceResponse,
    ModelMetadata,
    Tensor,
    TensorMetadata,
)
from .orchestrator import InferenceResult, build_request, run_inference
from .session import InferenceSession, open_session

__version__ = "0.1.0"

__all__ = [
    # Codec
    "encode_string_batch", "decode_string_batch",
    "encode_int32_batch", "decode_int32_batch",
    # Messages
    "Tensor", "TensorMetadata", "ModelMetadata",
    "InferenceRequest", "InferenceResponse",
    # Session and run
    "InferenceSession", "open_session",
    "InferenceResult", "build_request", "run_inference",
    "ClientConfig",
    # Errors
    "InferenceClientError", "TransportError", "DeadlineExceeded", "MalformedResponse",
]
