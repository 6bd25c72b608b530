"""
Single inference run: health, readiness, metadata, then inference.

The steps run one at a time in that order. Liveness and readiness are
reported but never gate the later calls. Any error raised by the session or
the codec ends the run; nothing is returned for the remaining steps.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .codec import decode_int32_batch
from .config import ClientConfig
from .errors import MalformedResponse
from .kserve import InferenceRequest, ModelMetadata, Tensor

logger = logging.getLogger(__name__)


@dataclass
class InferenceResult:
    """Everything a run produced."""
    live: bool
    ready: bool
    metadata: ModelMetadata
    input_payload: bytes
    outputs: Dict[str, List[int]] = field(default_factory=dict)


def build_request(config: ClientConfig, strings: Optional[List[str]] = None) -> InferenceRequest:
    """Build the request: one BYTES input of shape [batch, 1], payload-free outputs."""
    strings = config.resolved_inputs() if strings is None else strings
    request = InferenceRequest(
        model_name=config.model_name,
        model_version=config.model_version,
        batch_size=len(strings),
    )
    request.add_input(Tensor.from_strings(config.input_name, strings))
    for name in config.output_names:
        request.add_output(name)
    return request


def run_inference(session, config: ClientConfig) -> InferenceResult:
    """
    Run the full sequence against an open session.

    Args:
        session: InferenceSession (or anything with the same four methods).
        config: Validated ClientConfig.

    Returns:
        InferenceResult with decoded INT32 outputs keyed by output name, in
        request order.
    """
    live = session.server_live()
    logger.info("Server live: %s", live)
    if not live:
        logger.warning("Server at %s reports not live, continuing", config.url)

    ready = session.server_ready()
    logger.info("Server ready: %s", ready)
    if not ready:
        logger.warning("Server at %s reports not ready, continuing", config.url)

    # Metadata is always fetched for the latest version.
    metadata = session.model_metadata(config.model_name, "")
    logger.info("Fetched metadata for model '%s'", metadata.name or config.model_name)

    request = build_request(config)
    payload = request.inputs[0].payload
    logger.info(
        "Submitting inference: model=%s version=%s batch=%d payload=%d bytes",
        request.model_name,
        request.model_version or "latest",
        request.batch_size,
        len(payload),
    )
    response = session.model_infer(request)

    if len(response.raw_outputs) != len(request.output_names):
        raise MalformedResponse(
            "ModelInfer",
            f"requested {len(request.output_names)} outputs, received {len(response.raw_outputs)}",
        )

    element_count = request.batch_size * config.output_width
    outputs: Dict[str, List[int]] = {}
    for name, raw in zip(request.output_names, response.raw_outputs):
        outputs[name] = decode_int32_batch(raw, element_count, call="ModelInfer")

    return InferenceResult(
        live=live,
        ready=ready,
        metadata=metadata,
        input_payload=payload,
        outputs=outputs,
    )
