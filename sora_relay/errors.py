class RelayError(Exception):
    """Base class for failures raised inside a relay operation."""


class EnvelopeValidationError(RelayError):
    def __init__(self, required: tuple[str, ...]):
        self.required = required
        super().__init__(f"Missing required fields: {', '.join(required)}")


class DecodingError(RelayError):
    pass


class UpstreamNetworkError(RelayError):
    pass
