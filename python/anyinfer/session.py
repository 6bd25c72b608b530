"""
RPC session against a KServe v2 gRPC endpoint.

An InferenceSession wraps one channel and issues the four calls the client
needs. Each call carries its own deadline; nothing is retried here.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

import grpc

from ._proto import grpc_predict_v2_pb2, grpc_predict_v2_pb2_grpc
from .errors import DeadlineExceeded, TransportError
from .kserve import (
    InferenceRequest,
    InferenceResponse,
    ModelMetadata,
    metadata_from_proto,
    request_to_proto,
    response_from_proto,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


def parse_server_address(address: str) -> str:
    """Strip http:// or https:// prefix from server address for gRPC."""
    if address.startswith("http://"):
        return address[7:]
    elif address.startswith("https://"):
        return address[8:]
    return address


class InferenceSession:
    """
    Client session for a KServe v2 (Triton-compatible) inference server.

    The session does not own the channel unless it was created through
    open_session(); callers that pass their own channel close it themselves.

    Args:
        channel: An open grpc.Channel. May be None when a stub is supplied.
        timeout: Deadline in seconds applied independently to every call.
        stub: Optional pre-built GRPCInferenceServiceStub (or a fake with the
              same methods).
    """

    def __init__(
        self,
        channel: Optional[grpc.Channel] = None,
        timeout: float = DEFAULT_TIMEOUT,
        stub=None,
    ):
        if channel is None and stub is None:
            raise ValueError("Must specify either 'channel' or 'stub'")
        if timeout <= 0:
            raise ValueError(f"timeout must be positive, got {timeout}")

        self._channel = channel
        self._stub = stub or grpc_predict_v2_pb2_grpc.GRPCInferenceServiceStub(channel)
        self.timeout = timeout

    def _call(self, name: str, request):
        """Issue one unary call under its own deadline."""
        logger.debug("Calling %s (timeout=%.1fs)", name, self.timeout)
        method = getattr(self._stub, name)
        try:
            return method(request, timeout=self.timeout)
        except grpc.RpcError as e:
            code = e.code() if callable(getattr(e, "code", None)) else None
            details = e.details() if callable(getattr(e, "details", None)) else None
            cause = f"{code.name if code else 'UNKNOWN'}: {details or e}"
            if code == grpc.StatusCode.DEADLINE_EXCEEDED:
                raise DeadlineExceeded(name, cause) from e
            raise TransportError(name, cause) from e

    def server_live(self) -> bool:
        """Check whether the server is live."""
        response = self._call("ServerLive", grpc_predict_v2_pb2.ServerLiveRequest())
        return response.live

    def server_ready(self) -> bool:
        """Check whether the server is ready for inferencing."""
        response = self._call("ServerReady", grpc_predict_v2_pb2.ServerReadyRequest())
        return response.ready

    def model_metadata(self, model_name: str, model_version: str = "") -> ModelMetadata:
        """
        Fetch metadata for a model.

        Args:
            model_name: Name of the model.
            model_version: Model version; empty selects the latest.
        """
        request = grpc_predict_v2_pb2.ModelMetadataRequest(
            name=model_name, version=model_version
        )
        response = self._call("ModelMetadata", request)
        return metadata_from_proto(response)

    def model_infer(self, request: InferenceRequest) -> InferenceResponse:
        """
        Run inference.

        Returns:
            InferenceResponse holding one raw buffer per requested output,
            in request order.

        Raises:
            TransportError, DeadlineExceeded: The call failed.
            MalformedResponse: The number of raw buffers does not match the
                requested outputs.
        """
        proto_req = request_to_proto(request, grpc_predict_v2_pb2)
        proto_resp = self._call("ModelInfer", proto_req)
        return response_from_proto(proto_resp, request.output_names, call="ModelInfer")

    def close(self) -> None:
        """Close the gRPC channel."""
        if self._channel is not None:
            self._channel.close()
            self._channel = None


@contextmanager
def open_session(url: str, timeout: float = DEFAULT_TIMEOUT) -> Iterator[InferenceSession]:
    """
    Open an insecure channel to url and yield a session over it.

    The channel is closed when the block exits, whether or not it raised.
    """
    target = parse_server_address(url)
    logger.debug("Opening channel to %s", target)
    channel = grpc.insecure_channel(target)
    try:
        yield InferenceSession(channel, timeout=timeout)
    finally:
        channel.close()
