"""Python client for the Simons CMAP oceanographic database."""

from cmap_client.data_api.api_cmap import CMAP, MAX_DATASET_ROWS
from cmap_client.data_api.api_rest import RestAPI, query
from cmap_client.data_api.credentials import Credentials, get_api_key, set_api_key
from cmap_client.data_api.errors import (
    AmbiguousNameError,
    AuthenticationError,
    CMAPError,
    CredentialsError,
    DatasetTooLargeError,
    InvalidIntervalError,
    InvalidNameError,
    NetworkError,
    RequestError,
    ResponseParseError,
    ServiceError,
    StatementError,
    ToleranceMismatchError,
    UnsupportedBinningError,
)

__version__ = "0.1.0"
