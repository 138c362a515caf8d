"""
Remix Studio Custom Exceptions

Exception taxonomy for the workspace graph, the orchestration pipeline and the
generative model collaborator. Every error carries a ``user_message`` that is
safe to show in the UI.
"""


class RemixStudioError(Exception):
    """Base exception for all Remix Studio errors."""

    default_user_message = "Something went wrong. Please try again."

    def __init__(self, message: str, details: dict = None, user_message: str = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.user_message = user_message or self.default_user_message

    def __str__(self):
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================

class ConfigurationError(RemixStudioError):
    """Raised when there's an issue with configuration."""
    default_user_message = "The studio is not configured correctly."


class MissingConfigError(ConfigurationError):
    """Raised when a required configuration (e.g. an API key) is missing."""
    pass


class InvalidConfigError(ConfigurationError):
    """Raised when a configuration value is invalid."""
    pass


# =============================================================================
# GRAPH ERRORS
# =============================================================================

class GraphError(RemixStudioError):
    """Base exception for workspace graph errors."""
    default_user_message = "The workspace could not be updated."


class BoardNotFoundError(GraphError):
    """Raised when a board is not found in the workspace."""

    def __init__(self, board_id: str):
        super().__init__(
            f"Board not found in workspace: '{board_id}'",
            {"board_id": board_id},
            user_message="That board no longer exists.",
        )


class DuplicateBoardError(GraphError):
    """Raised when a board id is added twice."""

    def __init__(self, board_id: str):
        super().__init__(f"Board already exists: '{board_id}'", {"board_id": board_id})


class InvalidConnectorError(GraphError):
    """Raised when a connector cannot be created between two boards."""

    def __init__(self, from_board: str, to_board: str, reason: str):
        super().__init__(
            f"Cannot connect '{from_board}' -> '{to_board}': {reason}",
            {"from_board": from_board, "to_board": to_board, "reason": reason},
            user_message=f"Those boards cannot be connected: {reason}.",
        )


# =============================================================================
# ORCHESTRATION ERRORS
# =============================================================================

class OrchestrationError(RemixStudioError):
    """Base exception for planning/execution errors."""
    default_user_message = "Failed to remix content."


class MissingPromptError(OrchestrationError):
    """Raised when a remix is requested without a prompt."""
    default_user_message = "Please enter a prompt to generate a remix."


class EmptyRemixContextError(OrchestrationError):
    """Raised when a remix board has no contributing boards."""
    default_user_message = (
        "Connect at least one board with assets to your Remix board "
        "before generating a remix."
    )


class PlannerFailure(OrchestrationError):
    """Raised when the planning phase yields no usable plan."""
    default_user_message = (
        "The Creative Director AI did not provide any final image briefs. "
        "Please try a different prompt."
    )


class AssemblyFailure(OrchestrationError):
    """Raised when an execution-phase task yields zero images."""
    default_user_message = (
        "The AI did not return any remixed images. This can happen due to "
        "safety filters. Please adjust your prompt."
    )


class BoardBusyError(OrchestrationError):
    """Raised when an operation is already running against a board."""

    def __init__(self, board_id: str):
        super().__init__(
            f"Board is busy: '{board_id}'",
            {"board_id": board_id},
            user_message="This board is already generating. Wait for it to finish.",
        )


class OperationCancelledError(OrchestrationError):
    """Raised when a cancellation token fires during an operation."""
    default_user_message = "The operation was cancelled."


# =============================================================================
# GENERATIVE MODEL ERRORS
# =============================================================================

class GenerationError(RemixStudioError):
    """Base exception for generative model service errors."""
    default_user_message = "The generative model request failed."

    def __init__(self, message: str, details: dict = None, user_message: str = None,
                 status_code: int = None):
        super().__init__(message, details, user_message)
        self.status_code = status_code


class SafetyBlock(GenerationError):
    """Raised when the model refuses a request on safety grounds."""
    default_user_message = "Generation was blocked for safety reasons. Please try a different prompt."


class RateLimit(GenerationError):
    """Raised when the model service reports quota exhaustion."""
    default_user_message = "API rate limit exceeded. Please wait a moment and try again."


class ModelServiceError(GenerationError):
    """Raised for transport failures and unexpected service responses."""
    pass


class MalformedResponseError(ModelServiceError):
    """Raised when a structured response is empty or not valid JSON."""
    pass


class VideoGenerationFailure(GenerationError):
    """Raised when a long-running video operation finishes with an error."""
    default_user_message = "Failed to generate video."


class AnalysisFailure(RemixStudioError):
    """Raised by a single asset analysis call; always recovered locally."""
    pass


# =============================================================================
# PERSISTENCE ERRORS
# =============================================================================

class PersistenceError(RemixStudioError):
    """Raised when the workspace store cannot be read or written."""
    default_user_message = "Failed to save the workspace."
