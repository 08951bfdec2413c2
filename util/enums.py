# util/enums.py
from enum import Enum
from typing import NamedTuple
from fastapi import status


class Color(str, Enum):
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    BOLD = "\033[1m"

    def __str__(self):
        return self.value


class Environment(str, Enum):
    DEV = "dev"
    PROD = "prod"


class EmbeddingBackend(str, Enum):
    OPENAI = "openai"
    LOCAL = "local"


class ChunkKind(str, Enum):
    TEXT = "text"
    SECTION = "section"
    PARAGRAPH = "paragraph"
    CODE_BLOCK = "code_block"
    LIST = "list"


class ErrorInfo(NamedTuple):
    kind: str
    http_status: int


class ErrorMessage(Enum):
    """HTTP status for each machine-readable error kind raised by the core."""

    INVALID_VERSION = ErrorInfo("invalid_version", status.HTTP_400_BAD_REQUEST)
    EMPTY_INPUT = ErrorInfo("empty_input", status.HTTP_400_BAD_REQUEST)
    PROVIDER_ERROR = ErrorInfo("provider_error", status.HTTP_502_BAD_GATEWAY)
    ALL_CHUNKS_FAILED = ErrorInfo("all_chunks_failed", status.HTTP_502_BAD_GATEWAY)
    DEADLINE_EXCEEDED = ErrorInfo("deadline_exceeded", status.HTTP_504_GATEWAY_TIMEOUT)
    STORE_ERROR = ErrorInfo("store_error", status.HTTP_500_INTERNAL_SERVER_ERROR)
    DIMENSION_MISMATCH = ErrorInfo(
        "dimension_mismatch", status.HTTP_500_INTERNAL_SERVER_ERROR
    )
    INTERNAL_ERROR = ErrorInfo("factcheck_error", status.HTTP_500_INTERNAL_SERVER_ERROR)

    @classmethod
    def status_for(cls, kind: str) -> int:
        for member in cls:
            if member.value.kind == kind:
                return member.value.http_status
        return cls.INTERNAL_ERROR.value.http_status
