"""
Unit tests for the inference run sequence.
"""

import grpc
import pytest
from anyinfer.config import ClientConfig
from anyinfer.errors import DeadlineExceeded, MalformedResponse, TransportError
from anyinfer.kserve import InferenceResponse, ModelMetadata
from anyinfer.orchestrator import build_request, run_inference
from anyinfer.session import InferenceSession

from conftest import FakeRpcError, int32_pattern


class RecordingSession:
    """Session double that records the order of calls."""

    def __init__(self, live=True, ready=True, raw_outputs=None, fail_on=None):
        self.calls = []
        self.live = live
        self.ready = ready
        self.raw_outputs = raw_outputs
        self.fail_on = fail_on
        self.infer_request = None

    def _record(self, name):
        self.calls.append(name)
        if name == self.fail_on:
            raise TransportError(name, "UNAVAILABLE: connection refused")

    def server_live(self):
        self._record("server_live")
        return self.live

    def server_ready(self):
        self._record("server_ready")
        return self.ready

    def model_metadata(self, model_name, model_version=""):
        self._record("model_metadata")
        self.metadata_args = (model_name, model_version)
        return ModelMetadata(name=model_name)

    def model_infer(self, request):
        self._record("model_infer")
        self.infer_request = request
        raw = self.raw_outputs
        if raw is None:
            count = request.batch_size * 16
            raw = [int32_pattern(count)[1] for _ in request.output_names]
        return InferenceResponse(output_names=list(request.output_names), raw_outputs=raw)


class TestCallOrder:
    """Tests for call ordering and gating."""

    @pytest.mark.p0
    def test_order(self, client_config):
        """Test live, ready, metadata and infer run in that order."""
        session = RecordingSession()
        run_inference(session, client_config)
        assert session.calls == ["server_live", "server_ready", "model_metadata", "model_infer"]

    @pytest.mark.p0
    def test_not_live_or_ready_does_not_gate(self, client_config):
        """Test an unhealthy server is reported but inference still runs."""
        session = RecordingSession(live=False, ready=False)

        result = run_inference(session, client_config)

        assert result.live is False
        assert result.ready is False
        assert session.calls[-1] == "model_infer"

    @pytest.mark.p0
    def test_metadata_uses_latest_version(self):
        """Test metadata is fetched for the latest version even when a version is pinned."""
        config = ClientConfig(model_name="simple", model_version="3")
        session = RecordingSession()

        run_inference(session, config)

        assert session.metadata_args == ("simple", "")
        assert session.infer_request.model_version == "3"

    @pytest.mark.p0
    @pytest.mark.parametrize("failing", ["server_live", "server_ready", "model_metadata", "model_infer"])
    def test_first_failure_stops_the_run(self, client_config, failing):
        """Test no call is attempted after a failing one."""
        session = RecordingSession(fail_on=failing)

        with pytest.raises(TransportError):
            run_inference(session, client_config)

        assert session.calls[-1] == failing


class TestEndToEnd:
    """Tests for the full run through a real session over a fake stub."""

    @pytest.mark.p0
    def test_two_test_strings(self, fake_stub, client_config):
        """Test the documented scenario: batch 2, width 16, two 128-byte outputs."""
        session = InferenceSession(stub=fake_stub)

        result = run_inference(session, client_config)

        assert result.input_payload == b"\x04\x00\x00\x00test\x04\x00\x00\x00test"
        assert list(result.outputs) == ["OUTPUT0", "OUTPUT1"]
        assert result.outputs["OUTPUT0"] == int32_pattern(32)[0]
        assert result.outputs["OUTPUT1"] == int32_pattern(32, start=-16, step=-3)[0]
        assert result.metadata.name == "simple"

        _, infer_request, _ = fake_stub.calls[-1]
        assert list(infer_request.inputs[0].shape) == [2, 1]
        assert infer_request.inputs[0].datatype == "BYTES"
        assert [o.name for o in infer_request.outputs] == ["OUTPUT0", "OUTPUT1"]

    @pytest.mark.p0
    def test_short_output_buffer(self, fake_stub, client_config, pb2):
        """Test an output shorter than batch * width * 4 fails the run."""
        _, short = int32_pattern(31)
        fake_stub.responses["ModelInfer"] = pb2.ModelInferResponse(
            raw_output_contents=[short, short]
        )
        session = InferenceSession(stub=fake_stub)

        with pytest.raises(MalformedResponse, match="expected 128 bytes"):
            run_inference(session, client_config)

    @pytest.mark.p1
    def test_deadline_on_metadata(self, fake_stub, client_config):
        """Test a metadata deadline ends the run before inference."""
        fake_stub.responses["ModelMetadata"] = FakeRpcError(grpc.StatusCode.DEADLINE_EXCEEDED)
        session = InferenceSession(stub=fake_stub)

        with pytest.raises(DeadlineExceeded, match="ModelMetadata failed"):
            run_inference(session, client_config)

        assert [c[0] for c in fake_stub.calls] == ["ServerLive", "ServerReady", "ModelMetadata"]

    @pytest.mark.p1
    def test_fake_session_missing_buffer(self, client_config):
        """Test fewer raw outputs than requested is malformed."""
        session = RecordingSession(raw_outputs=[b"\x00" * 128])
        with pytest.raises(MalformedResponse, match="requested 2 outputs"):
            run_inference(session, client_config)


class TestBuildRequest:
    """Tests for build_request()"""

    @pytest.mark.p1
    def test_default_inputs(self):
        """Test the default config sends one 'test' string."""
        request = build_request(ClientConfig())

        assert request.model_name == "simple"
        assert request.batch_size == 1
        assert request.inputs[0].name == "INPUT0"
        assert request.inputs[0].shape == [1, 1]
        assert request.output_names == ["OUTPUT0", "OUTPUT1"]

    @pytest.mark.p1
    def test_custom_slots(self):
        """Test configured slot names are used."""
        config = ClientConfig(input_name="TEXT", output_names=["IDS"], batch_size=3)
        request = build_request(config)

        assert request.inputs[0].name == "TEXT"
        assert request.inputs[0].shape == [3, 1]
        assert request.output_names == ["IDS"]
