from typing import Dict, Optional


class SceneRAGException(Exception):
    """Base exception for the scene retrieval framework."""

    def __init__(self, message: str, error_code: str = None, details: Dict = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_code
        self.details = details or {}

    default_code = "SCENERAG_ERROR"


class ProviderException(SceneRAGException):
    """Raised when external provider fails."""

    default_code = "PROVIDER_ERROR"


class StoreError(ProviderException):
    """Raised when the document store is unreachable or rejects an operation."""

    default_code = "STORE_UNAVAILABLE"


class ConfigurationException(SceneRAGException):
    """Raised when configuration is invalid."""

    default_code = "CONFIGURATION_ERROR"


class ValidationException(SceneRAGException):
    """Raised when input validation fails."""

    default_code = "VALIDATION_ERROR"


class ResourceNotFoundException(SceneRAGException):
    """Raised when requested resource is not found."""

    default_code = "NOT_FOUND"
    resource = "resource"

    def __init__(self, resource_id: str, message: Optional[str] = None, **kwargs):
        super().__init__(
            message or f"{self.resource.capitalize()} {resource_id} not found",
            details={"resource": self.resource, "id": resource_id},
            **kwargs,
        )
        self.resource_id = resource_id


class SceneNotFoundError(ResourceNotFoundException):
    resource = "scene"


class VideoNotFoundError(ResourceNotFoundException):
    resource = "video"


class CampaignNotFoundError(ResourceNotFoundException):
    resource = "campaign"


class ConversationNotFoundError(ResourceNotFoundException):
    resource = "conversation"


class DataIntegrityError(SceneRAGException):
    """Raised when persisted or computed data violates an invariant."""

    default_code = "DATA_INTEGRITY"


class DimensionMismatchError(DataIntegrityError):
    """Raised when two vectors of different length are compared or stored."""

    default_code = "DIMENSION_MISMATCH"

    def __init__(self, expected: int, actual: int, message: Optional[str] = None):
        super().__init__(
            message or f"Vector dimension mismatch: expected {expected}, got {actual}",
            details={"expected": expected, "actual": actual},
        )
        self.expected = expected
        self.actual = actual


class MalformedVectorError(DataIntegrityError):
    """Raised when a vector is not a sequence of finite numbers."""

    default_code = "MALFORMED_VECTOR"


class RetrievalError(SceneRAGException):
    """Raised when scene retrieval cannot reach its backing store."""

    default_code = "RETRIEVAL_FAILED"


class GenerationError(SceneRAGException):
    """Raised when the language model returns an unusable response."""

    default_code = "GENERATION_FAILED"


class ChatTurnError(SceneRAGException):
    """Base class for errors that abort a single chat turn."""

    default_code = "CHAT_TURN_FAILED"


class MaxIterationsExceeded(ChatTurnError):
    """Raised when the model keeps requesting functions past the loop bound."""

    default_code = "MAX_ITERATIONS_EXCEEDED"

    def __init__(self, max_iterations: int):
        super().__init__(
            f"Maximum function call iterations reached ({max_iterations})",
            details={"max_iterations": max_iterations},
        )
        self.max_iterations = max_iterations


class UnknownFunctionError(ChatTurnError):
    """Raised when the model requests a tool that is not declared."""

    default_code = "UNKNOWN_FUNCTION"

    def __init__(self, function_name: str):
        super().__init__(f"Unknown function: {function_name}", details={"function": function_name})
        self.function_name = function_name


class ConversationConflictError(ChatTurnError):
    """Raised when a conversation changed underneath an in-flight turn."""

    default_code = "CONVERSATION_CONFLICT"


class InvalidTurnTransition(ChatTurnError):
    """Raised when the turn state machine is driven out of order."""

    default_code = "INVALID_TURN_TRANSITION"
