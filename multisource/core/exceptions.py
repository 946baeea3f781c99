"""Custom exception hierarchy for the multi-source agent."""


class AgentError(Exception):
    """Base exception for agent-level issues."""


class ConfigurationError(AgentError):
    """Raised when configuration is invalid or missing."""


class ExternalServiceError(AgentError):
    """Raised when an external dependency responds with an error."""


class ToolRegistryError(AgentError):
    """Raised for invalid registry usage."""


class DuplicateToolError(ToolRegistryError):
    """Raised when a tool name is registered twice."""


class UnknownToolError(ToolRegistryError):
    """Raised when a tool name is not registered."""


class ToolExecutionError(AgentError):
    """Raised when a tool invocation fails.

    The message is fed back to the LLM as the observation for that step.
    """


class InvalidToolInputError(ToolExecutionError):
    """Raised when tool arguments do not match the tool's input schema."""


class SourceNotFoundError(ToolExecutionError):
    """Raised when a structured data source does not exist."""


class DocumentNotFoundError(ToolExecutionError):
    """Raised when a document does not exist."""


class DocumentReadError(ToolExecutionError):
    """Raised when a document exists but cannot be read as UTF-8 text."""


class QueryExecutionError(ToolExecutionError):
    """Raised when the database engine rejects a statement."""


class CommandExecutionError(ToolExecutionError):
    """Raised when a shell command times out or exits non-zero."""


class CapabilityDisabledError(ToolExecutionError):
    """Raised when a gated capability is switched off."""


class UnsafeCommandError(ToolExecutionError):
    """Raised when a command matches the deny-list."""


class HistoryError(AgentError):
    """Base exception for history store issues."""


class PersistenceError(HistoryError):
    """Raised when the history snapshot cannot be written."""


class ExportError(HistoryError):
    """Raised when a history export cannot be completed."""
