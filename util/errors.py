# util/errors.py


class FactCheckError(Exception):
    """
    Base for every failure the validation core reports.
    - `kind` is machine-readable and stable; `message` is for humans.
    """

    kind: str = "factcheck_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"


class ProviderError(FactCheckError):
    kind = "provider_error"

    def __init__(self, message: str, *, transient: bool = False) -> None:
        super().__init__(message)
        self.transient = transient


class StoreError(FactCheckError):
    kind = "store_error"


class DimensionMismatchError(StoreError):
    kind = "dimension_mismatch"

    def __init__(self, version: str, query_dim: int, corpus_dim: int) -> None:
        super().__init__(
            f"query embedding has {query_dim} dimensions but corpus "
            f"'{version}' stores {corpus_dim}; check the configured embedding model"
        )
        self.query_dim = query_dim
        self.corpus_dim = corpus_dim


class InvalidVersionError(FactCheckError):
    kind = "invalid_version"

    def __init__(self, version: str, known: list[str]) -> None:
        super().__init__(
            f"invalid spec version: {version} (known: {', '.join(known)})"
        )
        self.version = version
        self.known = list(known)


class EmptyInputError(FactCheckError):
    kind = "empty_input"


class DeadlineExceededError(FactCheckError):
    kind = "deadline_exceeded"


class AggregationError(FactCheckError):
    """Raised when every chunk of a submission failed; `outcomes` keeps the per-chunk errors."""

    kind = "all_chunks_failed"

    def __init__(self, message: str, outcomes: list | None = None) -> None:
        super().__init__(message)
        self.outcomes = outcomes or []
