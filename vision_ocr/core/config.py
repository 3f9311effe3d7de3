"""Protocol constants for the Computer Vision Read service."""

# =============================================================================
# Endpoints
# =============================================================================

DEFAULT_ANALYZE_URL = (
    "https://westcentralus.api.cognitive.microsoft.com"
    "/vision/v2.0/read/core/asyncBatchAnalyze"
)
SERVICE_NAME = "vision"

# =============================================================================
# Headers and media types
# =============================================================================

SUBSCRIPTION_KEY_HEADER = "Ocp-Apim-Subscription-Key"
OPERATION_LOCATION_HEADER = "Operation-Location"
OCTET_STREAM = "application/octet-stream"
APPLICATION_JSON = "application/json"

# =============================================================================
# Job lifecycle
# =============================================================================

HTTP_ACCEPTED = 202
RUNNING_STATUS = "Running"
STATUS_FIELD = "status"
SUCCEEDED_STATUS = "Succeeded"

# =============================================================================
# Timeouts and polling (seconds)
# =============================================================================

OCR_CLIENT_TIMEOUT_SECONDS = 60  # HTTP client timeout per request
POLL_INITIAL_DELAY_SECONDS = 0.05  # First wait between status checks
POLL_MAX_DELAY_SECONDS = 2.0  # Cap for the backoff delay
POLL_BACKOFF_MULTIPLIER = 1.5
POLL_DEADLINE_SECONDS = 300  # Total time allowed for one job (5 min)

# =============================================================================
# Streaming and error handling
# =============================================================================

STREAM_CHUNK_SIZE = 64 * 1024  # Bytes read per upload chunk
ERROR_BODY_MAX_CHARS = 200  # Maximum chars from error response bodies
