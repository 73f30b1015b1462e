# request.state attribute holding the re-serialized JSON body, read back when logging failures
REQ_BODY_LABEL = "request_body"

# Pagination query defaults (strings, as they would arrive on the query string)
DEFAULT_START = "0"
DEFAULT_LIMIT = "10"
MAX_PAGE_LIMIT = 1000

# Envelope codes
SUCCESS_CODE = 200
DEFAULT_ERROR_CODE = 300
DEFAULT_ERROR_MSG = "request error"
