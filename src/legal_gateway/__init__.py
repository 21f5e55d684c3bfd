from .assistant import AssistantReply, LegalAssistant, ReplyKind
from .bootstrap import Application, create_application
from .classifier import Classification, KeywordClassifier, QueryClassifier
from .config import GatewaySettings
from .contracts import (
    CompletionBackend,
    CompletionOptions,
    CompletionOutcome,
    CompletionResult,
    GatewayStatus,
    LegalCompletionBackend,
    Message,
    Usage,
)
from .dialects import Dialect
from .errors import (
    ConfigurationError,
    ConnectionFailureError,
    ErrorKind,
    GatewayError,
    InvalidResponseFormatError,
    NotConfiguredError,
    ProviderError,
    RequestTimeoutError,
)
from .gateway import CompletionGateway
from .local import LocalModelGateway
from .registry import ProviderDescriptor, ProviderRegistry
from .selector import ProviderSelector, select_initial

__all__ = [
    "Application",
    "AssistantReply",
    "Classification",
    "CompletionBackend",
    "CompletionGateway",
    "CompletionOptions",
    "CompletionOutcome",
    "CompletionResult",
    "ConfigurationError",
    "ConnectionFailureError",
    "Dialect",
    "ErrorKind",
    "GatewayError",
    "GatewaySettings",
    "GatewayStatus",
    "InvalidResponseFormatError",
    "KeywordClassifier",
    "LegalCompletionBackend",
    "LegalAssistant",
    "LocalModelGateway",
    "Message",
    "NotConfiguredError",
    "ProviderDescriptor",
    "ProviderError",
    "ProviderRegistry",
    "ProviderSelector",
    "QueryClassifier",
    "ReplyKind",
    "RequestTimeoutError",
    "Usage",
    "create_application",
    "select_initial",
]
