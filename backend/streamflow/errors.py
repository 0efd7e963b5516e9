"""Error taxonomy shared by the store, the aggregator and the API layer"""


class StreamFlowError(Exception):
    """Base class for all application errors"""


class NotFound(StreamFlowError):
    """A referenced key is absent from its collection"""

    def __init__(self, collection: str, key):
        self.collection = collection
        self.key = key
        super().__init__(f"{collection} '{key}' not found")


class StoreUnavailable(StreamFlowError):
    """Durable storage could not be opened or a transaction failed"""


class ProviderError(StreamFlowError):
    """A single source failed to answer (network, HTTP status or parsing)"""

    def __init__(self, source: str, message: str):
        self.source = source
        super().__init__(f"{source}: {message}")


class UnknownSource(StreamFlowError):
    """A track is tagged with a source that has no registered provider"""

    def __init__(self, source: str):
        self.source = source
        super().__init__(f"Unknown source '{source}'")


class ConsistencyViolation(StreamFlowError):
    """Two records that must exist together were found apart"""


class WriteConflict(StoreUnavailable):
    """A row changed under a read-modify-write; the caller may retry"""
