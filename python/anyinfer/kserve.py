"""
KServe v2 message wrappers for anyinfer.

This module provides plain Python values for the tensors, requests and
responses the client exchanges with an inference server, plus the helpers
that convert them to and from the generated protobuf messages.

Tensor data always travels in the raw_input_contents / raw_output_contents
fields, positionally aligned with the declared tensors.
"""

from dataclasses import dataclass, field
from typing import Any as PyAny, Dict, List, Sequence

from google.protobuf import json_format

from .codec import INT32_WIDTH, encode_int32_batch, encode_string_batch, decode_string_batch
from .errors import MalformedResponse

BYTES = "BYTES"
INT32 = "INT32"
SUPPORTED_DATATYPES = (BYTES, INT32)


# =============================================================================
# Python Wrappers for KServe Protocol Messages
# =============================================================================

@dataclass
class Tensor:
    """A named, typed, shaped tensor carrying a raw little-endian payload."""
    name: str
    datatype: str
    shape: List[int]
    payload: bytes = b""

    @classmethod
    def from_strings(cls, name: str, strings: Sequence) -> "Tensor":
        """Build a BYTES tensor of shape [len(strings), 1]."""
        batch_size = len(strings)
        return cls(
            name=name,
            datatype=BYTES,
            shape=[batch_size, 1],
            payload=encode_string_batch(strings, batch_size),
        )

    @classmethod
    def from_int32(cls, name: str, values: Sequence[int], shape: List[int]) -> "Tensor":
        """Build an INT32 tensor with the given shape."""
        tensor = cls(name=name, datatype=INT32, shape=list(shape), payload=encode_int32_batch(values))
        tensor.validate()
        return tensor

    @property
    def element_count(self) -> int:
        count = 1
        for dim in self.shape:
            count *= dim
        return count

    def validate(self) -> None:
        """Check that the payload matches the datatype and shape."""
        if self.datatype not in SUPPORTED_DATATYPES:
            raise ValueError(f"Unsupported datatype '{self.datatype}' for tensor '{self.name}'")
        if any(dim < 0 for dim in self.shape):
            raise ValueError(f"Tensor '{self.name}' has a negative dimension: {self.shape}")

        if self.datatype == INT32:
            expected = self.element_count * INT32_WIDTH
            if len(self.payload) != expected:
                raise ValueError(
                    f"Tensor '{self.name}' expects {expected} bytes for shape {self.shape}, "
                    f"payload has {len(self.payload)}"
                )
        else:
            try:
                decode_string_batch(self.payload, self.element_count)
            except MalformedResponse as e:
                raise ValueError(f"Tensor '{self.name}' payload is invalid: {e}") from e


@dataclass
class TensorMetadata:
    """Declared input or output slot of a model."""
    name: str
    datatype: str
    shape: List[int] = field(default_factory=list)


@dataclass
class ModelMetadata:
    """Metadata about a model, as reported by the server."""
    name: str
    platform: str = ""
    versions: List[str] = field(default_factory=list)
    inputs: List[TensorMetadata] = field(default_factory=list)
    outputs: List[TensorMetadata] = field(default_factory=list)
    document: Dict[str, PyAny] = field(default_factory=dict)

    def as_dict(self) -> Dict[str, PyAny]:
        """The metadata document in protobuf JSON form."""
        return dict(self.document)


@dataclass
class InferenceRequest:
    """Inference request for one batch."""
    model_name: str
    batch_size: int
    model_version: str = ""
    inputs: List[Tensor] = field(default_factory=list)
    output_names: List[str] = field(default_factory=list)
    id: str = ""

    def add_input(self, tensor: Tensor) -> Tensor:
        """Append an input tensor; its first dimension must be the batch size."""
        if not tensor.shape or tensor.shape[0] != self.batch_size:
            raise ValueError(
                f"Input '{tensor.name}' has shape {tensor.shape}, "
                f"expected first dimension {self.batch_size}"
            )
        self.inputs.append(tensor)
        return tensor

    def add_output(self, name: str) -> None:
        """Request an output by name."""
        self.output_names.append(name)


@dataclass
class InferenceResponse:
    """Raw output buffers, aligned with the requested output names."""
    model_name: str = ""
    model_version: str = ""
    id: str = ""
    output_names: List[str] = field(default_factory=list)
    raw_outputs: List[bytes] = field(default_factory=list)

    def get_output(self, name: str) -> bytes:
        """Get a raw output buffer by name."""
        for output_name, raw in zip(self.output_names, self.raw_outputs):
            if output_name == name:
                return raw
        raise KeyError(f"No output named '{name}'")


# =============================================================================
# Protobuf Conversion Helpers
# =============================================================================

def request_to_proto(request: InferenceRequest, pb2):
    """Convert an InferenceRequest into a ModelInferRequest message."""
    proto_req = pb2.ModelInferRequest(
        model_name=request.model_name,
        model_version=request.model_version,
        id=request.id,
    )

    for tensor in request.inputs:
        proto_input = proto_req.inputs.add()
        proto_input.name = tensor.name
        proto_input.datatype = tensor.datatype
        proto_input.shape.extend(tensor.shape)
        proto_req.raw_input_contents.append(tensor.payload)

    for name in request.output_names:
        proto_output = proto_req.outputs.add()
        proto_output.name = name

    return proto_req


def response_from_proto(proto_resp, output_names: Sequence[str], call: str = "ModelInfer") -> InferenceResponse:
    """
    Convert a ModelInferResponse message into an InferenceResponse.

    The server must return exactly one raw buffer per requested output.
    """
    raw_outputs = list(proto_resp.raw_output_contents)
    if len(raw_outputs) != len(output_names):
        raise MalformedResponse(
            call,
            f"requested {len(output_names)} outputs, received {len(raw_outputs)} raw buffers",
        )

    # raw_output_contents follows the declared outputs; when the server
    # declares them, put the buffers back in request order.
    declared = [output.name for output in proto_resp.outputs]
    if declared:
        if sorted(declared) != sorted(output_names):
            raise MalformedResponse(
                call, f"outputs {declared} do not match requested {list(output_names)}"
            )
        by_name = dict(zip(declared, raw_outputs))
        raw_outputs = [by_name[name] for name in output_names]

    return InferenceResponse(
        model_name=proto_resp.model_name,
        model_version=proto_resp.model_version,
        id=proto_resp.id,
        output_names=list(output_names),
        raw_outputs=raw_outputs,
    )


def metadata_from_proto(proto_resp) -> ModelMetadata:
    """Convert a ModelMetadataResponse message into ModelMetadata."""
    return ModelMetadata(
        name=proto_resp.name,
        platform=proto_resp.platform,
        versions=list(proto_resp.versions),
        inputs=[
            TensorMetadata(name=t.name, datatype=t.datatype, shape=list(t.shape))
            for t in proto_resp.inputs
        ],
        outputs=[
            TensorMetadata(name=t.name, datatype=t.datatype, shape=list(t.shape))
            for t in proto_resp.outputs
        ],
        document=json_format.MessageToDict(proto_resp, preserving_proto_field_name=True),
    )
