"""Defaults for generated queries and connection files.

Values can be overridden through environment variables.
"""

import os

DEFAULT_CONTENT_TYPE = "application/json"

# Pagination
DEFAULT_TOKEN_PATH = os.getenv("POSTMAN_ODC_TOKEN_PATH", "paging.next.after")
DEFAULT_TOKEN_PARAM = os.getenv("POSTMAN_ODC_TOKEN_PARAM", "after")
DEFAULT_RESULTS_FIELD = os.getenv("POSTMAN_ODC_RESULTS_FIELD", "results")

# Connection file
DEFAULT_EXTENSION = os.getenv("POSTMAN_ODC_EXTENSION", "odc")
MASHUP_CLIENT = "EXCEL"
MASHUP_VERSION = "2.116.622.0"
MASHUP_MIN_VERSION = "2.21.0.0"
MASHUP_CULTURE = os.getenv("POSTMAN_ODC_CULTURE", "en-US")
