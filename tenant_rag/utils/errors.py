"""Custom exception hierarchy for tenant-rag.

All application exceptions inherit from :class:`RagPipelineError`, which
carries an optional ``provider_name`` (the external service that failed,
e.g. "ollama", "pinecone", "chromadb") plus the ``tenant_id`` and pipeline
``stage`` the failure happened in, so a single log line is enough to
diagnose it.

The hierarchy is organized by where the failure originates:

    RagPipelineError  (base -- catch-all for any tenant-rag error)
    +-- TransportError          (HTTP / network failure talking to a service)
    +-- InvalidResponseFormat   (service answered, payload is malformed)
    +-- DimensionMismatch       (embedding size != index dimension)
    +-- IndexNotFoundError      (describe on an index that does not exist)
    +-- IndexNotReadyError      (readiness polling exhausted)
    +-- NamespaceNotFound       (store distinguishes absent namespaces)
    +-- ValidationError         (missing / malformed caller input)
    +-- ProcessingError         (PDF / text extraction failed)
    +-- ConfigurationError      (startup / missing credentials)

Callers decide at exactly the right level -- the API maps each class to an
HTTP status, the CLI prints it, and only ConfigurationError aborts startup.
"""


class RagPipelineError(Exception):
    """Base exception for all tenant-rag errors.

    Every subclass carries a human-readable ``message`` and optional
    ``provider_name``, ``tenant_id`` and ``stage`` context.  ``__str__``
    prefixes the provider name in brackets and appends the context, e.g.
    ``[ollama] Embedding request failed (tenant=acme, stage=embed)``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
        tenant_id: str | None = None,
        stage: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        self._tenant_id = tenant_id
        self._stage = stage
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    @property
    def tenant_id(self) -> str | None:
        return self._tenant_id

    @property
    def stage(self) -> str | None:
        return self._stage

    def with_context(
        self, *, tenant_id: str | None = None, stage: str | None = None
    ) -> "RagPipelineError":
        """Fill in tenant/stage context that is not already set, in place."""
        if self._tenant_id is None:
            self._tenant_id = tenant_id
        if self._stage is None:
            self._stage = stage
        return self

    def __str__(self) -> str:
        text = self._message
        if self._provider_name:
            text = f"[{self._provider_name}] {text}"
        context = []
        if self._tenant_id:
            context.append(f"tenant={self._tenant_id}")
        if self._stage:
            context.append(f"stage={self._stage}")
        if context:
            text = f"{text} ({', '.join(context)})"
        return text


# ---------------------------------------------------------------------------
# External service errors
# ---------------------------------------------------------------------------

class TransportError(RagPipelineError):
    """Raised on non-success HTTP status or connection failure to a service."""

    def __init__(self, message: str = "External service request failed", **kwargs) -> None:
        super().__init__(message=message, **kwargs)


class InvalidResponseFormat(RagPipelineError):
    """Raised when an embedding/generation payload lacks the expected field."""

    def __init__(self, message: str = "Malformed response from external service", **kwargs) -> None:
        super().__init__(message=message, **kwargs)


# ---------------------------------------------------------------------------
# Vector store / index errors
# ---------------------------------------------------------------------------

class DimensionMismatch(RagPipelineError):
    """Raised when a vector's length differs from the index's configured dimension."""

    def __init__(
        self,
        expected: int,
        actual: int,
        message: str | None = None,
        **kwargs,
    ) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            message=message or f"Vector dimension {actual} does not match index dimension {expected}",
            **kwargs,
        )


class IndexNotFoundError(RagPipelineError):
    """Raised by describe_index when the named index does not exist."""

    def __init__(self, index_name: str, message: str | None = None, **kwargs) -> None:
        self.index_name = index_name
        super().__init__(message=message or f"Index '{index_name}' does not exist", **kwargs)


class IndexNotReadyError(RagPipelineError):
    """Raised when readiness polling is exhausted before the index reports ready."""

    def __init__(self, index_name: str, attempts: int, message: str | None = None, **kwargs) -> None:
        self.index_name = index_name
        self.attempts = attempts
        super().__init__(
            message=message or f"Index '{index_name}' not ready after {attempts} attempts",
            **kwargs,
        )


class NamespaceNotFound(RagPipelineError):
    """Raised only by stores that distinguish absent namespaces from empty ones."""

    def __init__(self, namespace: str, message: str | None = None, **kwargs) -> None:
        self.namespace = namespace
        super().__init__(message=message or f"Namespace '{namespace}' does not exist", **kwargs)


# ---------------------------------------------------------------------------
# Caller input / document processing errors
# ---------------------------------------------------------------------------

class ValidationError(RagPipelineError):
    """Raised when required input is missing or malformed (tenant id, documents...)."""

    def __init__(self, message: str = "Invalid input", **kwargs) -> None:
        super().__init__(message=message, **kwargs)


class ProcessingError(RagPipelineError):
    """Raised when upstream text extraction fails (unparseable PDF, bad encoding)."""

    def __init__(self, message: str = "Failed to process document", **kwargs) -> None:
        super().__init__(message=message, **kwargs)


class ConfigurationError(RagPipelineError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(self, message: str = "Invalid or missing configuration", **kwargs) -> None:
        super().__init__(message=message, **kwargs)
