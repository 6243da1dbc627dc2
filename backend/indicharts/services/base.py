"""
Base Service Interface

Indicator and alert services share this contract so the API layer can
drive them the same way.
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")


class BaseService(ABC, Generic[InputT, OutputT]):
    """
    Base class for engine services.

    Each service:
    - Takes one validated request model and returns one response model
    - Keeps no per-request state (everything carried comes in the request)
    - Reports its health
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Service name for logging and error reports."""
        pass

    @abstractmethod
    async def execute(self, input_data: InputT) -> OutputT:
        """
        Run the service for one request.

        Args:
            input_data: Request model, already validated by pydantic

        Returns:
            Response model

        Raises:
            ServiceError: For invalid parameters or unsupported operations
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if service can process requests."""
        pass


class ServiceError(Exception):
    """Base exception for service errors."""

    def __init__(self, service_name: str, message: str, details: dict = None):
        self.service_name = service_name
        self.message = message
        self.details = details or {}
        super().__init__(f"[{service_name}] {message}")

    def to_dict(self) -> dict[str, Any]:
        """Body for HTTP error responses."""
        return {"service": self.service_name, "message": self.message, **self.details}


class ValidationError(ServiceError):
    """Invalid indicator parameters or alert rule configuration."""
    pass


class UnsupportedOperationError(ServiceError):
    """
    Operation not supported for this indicator kind.

    Only raised on request (see IncrementalResult.raise_for_status); the
    facade itself reports unsupported calls through ComputeStatus.
    """
    pass
