class InternalURIs:
    API = "/api"
    V1 = API + "/v1"
    VALIDATE_CONTENT = V1 + "/validate-content"
    VALIDATE_CODE = V1 + "/validate-code"
    SEARCH_SPEC = V1 + "/search-spec"
    SPEC_VERSIONS = V1 + "/spec-versions"


class SearchLimits:
    # top-k per operation; chunk searches stay narrow to keep fan-out cheap
    SINGLE_TOP_K = 5
    CHUNK_TOP_K = 3
    CODE_TOP_K = 8
    DEFAULT_TOP_K = 5
    MAX_TOP_K = 20


class SummaryLimits:
    SINGLE_MATCHES = 3
    SINGLE_CHARS = 200
    CHUNK_MATCHES = 2
    CHUNK_CHARS = 150
    CODE_MATCHES = 3
    CODE_CHARS = 150
    TOPIC_CHARS = 50
