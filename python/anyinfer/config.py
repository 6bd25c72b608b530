"""
anyinfer client configuration.
"""

from dataclasses import dataclass, field, fields
from typing import List

DEFAULT_URL = "localhost:8001"


@dataclass
class ClientConfig:
    """Settings for one inference run."""

    # Endpoint (host:port)
    url: str = DEFAULT_URL

    # Model selection; empty version means latest
    model_name: str = "simple"
    model_version: str = ""

    # Batch and input strings; empty inputs means ["test"] * batch_size
    batch_size: int = 1
    inputs: List[str] = field(default_factory=list)

    # Model slots
    input_name: str = "INPUT0"
    output_names: List[str] = field(default_factory=lambda: ["OUTPUT0", "OUTPUT1"])
    output_width: int = 16

    # Per-call deadline in seconds
    timeout: float = 10.0

    @classmethod
    def from_yaml(cls, path: str) -> "ClientConfig":
        """Load configuration from a YAML file."""
        import yaml
        with open(path) as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Config file {path} is not valid YAML: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown config keys in {path}: {', '.join(unknown)}")
        return cls(**data)

    def resolved_inputs(self) -> List[str]:
        """Input strings for the run."""
        if self.inputs:
            return list(self.inputs)
        return ["test"] * self.batch_size

    def _check_types(self) -> None:
        for name in ("url", "model_name", "model_version", "input_name"):
            value = getattr(self, name)
            if not isinstance(value, str):
                raise ValueError(f"{name} must be a string, got {value!r}")
        for name in ("batch_size", "output_width"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer, got {value!r}")
        if isinstance(self.timeout, bool) or not isinstance(self.timeout, (int, float)):
            raise ValueError(f"timeout must be a number, got {self.timeout!r}")
        for name in ("inputs", "output_names"):
            value = getattr(self, name)
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ValueError(f"{name} must be a list of strings, got {value!r}")

    def validate(self) -> None:
        """Validate configuration."""
        self._check_types()
        if not self.url:
            raise ValueError("url is required")
        if not self.model_name:
            raise ValueError("model_name is required")
        if self.batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        if self.inputs and len(self.inputs) != self.batch_size:
            raise ValueError(
                f"batch_size is {self.batch_size} but {len(self.inputs)} inputs were given"
            )
        if not self.input_name:
            raise ValueError("input_name is required")
        if not self.output_names:
            raise ValueError("at least one output name is required")
        if self.output_width < 1:
            raise ValueError("output_width must be positive")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
