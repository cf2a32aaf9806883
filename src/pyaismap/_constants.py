"""Internal constants shared across the library."""

from importlib.metadata import PackageNotFoundError, version

try:
    VERSION = version("pyaismap")
except PackageNotFoundError:
    VERSION = "0+local"

BASE_URL = "http://localhost:5000"
REQUEST_PATH = "/api/Ship/Data/DoRequest"
USER_AGENT = f"pyaismap/{VERSION}"

LIST_PROCEDURE = "Proc_Tau_Search"
ROUTE_PROCEDURE = "Proc_HanhTrinh_Search"

# Body keys of the stored-procedure request envelope.
PROCEDURE_KEY = "procedureName"
PARAMS_KEY = "thamSo"

# Route request parameter names.
ROUTE_MMSI_PARAM = "MMSI"
ROUTE_HOURS_PARAM = "Hours"

# Reserved keys the backend serializer emits instead of repeating an object graph.
REFERENCE_MARKERS: frozenset[str] = frozenset({"$ref", "$id"})

# Wrapper emitted around collections when reference preservation is on.
REFERENCE_VALUES_KEY = "$values"

# Named collection fields observed around record lists.
COLLECTION_KEYS: tuple[str, ...] = ("data", "Data", "result", "Result", "items", "Items")

DEFAULT_POLL_INTERVAL = 30.0
DEFAULT_ROUTE_HOURS = 6
DEFAULT_REQUEST_TIMEOUT = 15.0
