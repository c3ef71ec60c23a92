"""Pipeline package: wires client, poller, extractor and writer together."""

from bridge.pipeline.orchestrator import Orchestrator, PipelineResult
from bridge.pipeline.status import Severity, StatusSink

__all__ = ["Orchestrator", "PipelineResult", "StatusSink", "Severity"]
