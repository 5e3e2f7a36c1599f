"""Exception hierarchy for ThesisLens."""


class LLMException(Exception):
    """Base error raised by the LLM gateway's transport layer."""

    error_tag = "llm_error"


class LLMConnectionError(LLMException):
    """The model endpoint could not be reached."""

    error_tag = "connection"


class LLMTimeoutError(LLMException):
    """The model endpoint did not answer in time."""

    error_tag = "timeout"


class LLMAPIError(LLMException):
    """The endpoint answered with a non-2xx status or an SDK-level error."""

    error_tag = "api_error"


class LLMResponseError(LLMException):
    """The endpoint answered, but the answer is empty or cannot be parsed."""

    error_tag = "parse_error"


class EmptyResponseError(LLMResponseError):
    error_tag = "empty_response"


class WorkspaceError(Exception):
    """Base error for invalid operations on the workspace."""


class ArticleNotFoundError(WorkspaceError):
    def __init__(self, article_id: str):
        super().__init__(f"Article {article_id} not found")
        self.article_id = article_id


class QuoteNotFoundError(WorkspaceError):
    def __init__(self, article_id: str, index: int):
        super().__init__(f"Article {article_id} has no quote at index {index}")
        self.article_id = article_id
        self.index = index


class FeatureBusyError(WorkspaceError):
    """A request for the same feature is still in flight."""

    def __init__(self, feature: str):
        super().__init__(f"'{feature}' is already running")
        self.feature = feature


class PipelineStateError(WorkspaceError):
    """The operation is not allowed in the current pipeline state."""


class WorkspaceValidationError(WorkspaceError):
    """User input rejected before any work starts."""


class InvalidWorkspaceError(WorkspaceError):
    """A workspace file could not be loaded."""
