"""
Generated gRPC stubs for the evaluation service.

Run `make build-protos` to regenerate these files from the proto definitions.
"""

from .evaluation_pb2 import (
    BestMove,
    EvaluateRequest,
    EvaluateResponse,
    HealthCheckRequest,
    HealthCheckResponse,
    PvLine,
)
from .evaluation_pb2_grpc import (
    EvaluationServiceServicer,
    EvaluationServiceStub,
    add_EvaluationServiceServicer_to_server,
)

__all__ = [
    "BestMove",
    "EvaluateRequest",
    "EvaluateResponse",
    "HealthCheckRequest",
    "HealthCheckResponse",
    "PvLine",
    "EvaluationServiceServicer",
    "EvaluationServiceStub",
    "add_EvaluationServiceServicer_to_server",
]
