"""
Pytest configuration and fixtures for anyinfer tests.
"""

import os
import struct
import sys

import grpc
import pytest

# Add python directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'python'))


class FakeRpcError(grpc.RpcError):
    """grpc.RpcError carrying a status code, like the errors real stubs raise."""

    def __init__(self, code, details=""):
        super().__init__(details)
        self._code = code
        self._details = details

    def code(self):
        return self._code

    def details(self):
        return self._details


class FakeStub:
    """
    Stand-in for GRPCInferenceServiceStub.

    Each method records (name, request, timeout) and returns the configured
    response, or raises it when it is an exception.
    """

    def __init__(self, responses=None):
        self.responses = responses or {}
        self.calls = []

    def _respond(self, name, request, timeout):
        self.calls.append((name, request, timeout))
        response = self.responses[name]
        if isinstance(response, Exception):
            raise response
        return response

    def ServerLive(self, request, timeout=None):
        return self._respond("ServerLive", request, timeout)

    def ServerReady(self, request, timeout=None):
        return self._respond("ServerReady", request, timeout)

    def ModelMetadata(self, request, timeout=None):
        return self._respond("ModelMetadata", request, timeout)

    def ModelInfer(self, request, timeout=None):
        return self._respond("ModelInfer", request, timeout)


def int32_pattern(count, start=0, step=1):
    """A list of int32 values and its little-endian encoding."""
    values = [start + i * step for i in range(count)]
    return values, struct.pack(f"<{count}i", *values)


@pytest.fixture
def pb2():
    """Generated protocol message module."""
    from anyinfer._proto import grpc_predict_v2_pb2
    return grpc_predict_v2_pb2


@pytest.fixture
def simple_metadata(pb2):
    """Metadata response for the 'simple' string model."""
    response = pb2.ModelMetadataResponse(name="simple", versions=["1"], platform="ensemble")
    response.inputs.add(name="INPUT0", datatype="BYTES", shape=[-1, 1])
    response.outputs.add(name="OUTPUT0", datatype="INT32", shape=[-1, 16])
    response.outputs.add(name="OUTPUT1", datatype="INT32", shape=[-1, 16])
    return response


@pytest.fixture
def fake_stub(pb2, simple_metadata):
    """FakeStub answering all four calls for a batch of 2."""
    _, out0 = int32_pattern(32)
    _, out1 = int32_pattern(32, start=-16, step=-3)
    return FakeStub({
        "ServerLive": pb2.ServerLiveResponse(live=True),
        "ServerReady": pb2.ServerReadyResponse(ready=True),
        "ModelMetadata": simple_metadata,
        "ModelInfer": pb2.ModelInferResponse(
            model_name="simple",
            model_version="1",
            raw_output_contents=[out0, out1],
        ),
    })


@pytest.fixture
def client_config():
    """ClientConfig for a batch of two 'test' strings."""
    from anyinfer.config import ClientConfig
    return ClientConfig(batch_size=2, inputs=["test", "test"])


# Pytest markers
def pytest_configure(config):
    config.addinivalue_line("markers", "p0: Priority 0 (critical) tests")
    config.addinivalue_line("markers", "p1: Priority 1 (high) tests")
    config.addinivalue_line("markers", "p2: Priority 2 (medium) tests")
    config.addinivalue_line("markers", "integration: Integration tests")
