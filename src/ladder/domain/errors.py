"""Error taxonomy for the scheduling engine."""


class LadderError(Exception):
    """Base class for all engine errors."""


class InvalidInput(LadderError):
    """A caller-supplied value is outside its domain. Detected before any I/O."""


class InvalidQuality(InvalidInput):
    def __init__(self, quality: object):
        super().__init__(f"Quality must be between 0 and 3, got {quality!r}")
        self.quality = quality


class NotFound(LadderError):
    """A referenced record does not exist in the store."""


class ItemNotFound(NotFound):
    def __init__(self, item_id: str):
        super().__init__(f"Item not found: {item_id}")
        self.item_id = item_id


class StoreUnavailable(LadderError):
    """The persistence collaborator failed. Callers own retry policy."""


class SessionError(LadderError):
    """A session operation was called in a state that does not allow it."""
