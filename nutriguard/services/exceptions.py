"""Errors raised by the inference boundary and the response mapper."""


class InferenceError(Exception):
    """Base class for failures talking to the generative-inference service."""

    pass


class MissingCredentialError(InferenceError):
    """No API key is configured, so no request can be made."""

    pass


class ServiceUnavailableError(InferenceError):
    """AI service is temporarily unavailable."""

    pass


class RateLimitError(InferenceError):
    """Rate limit exceeded."""

    pass


class EmptyResponseError(InferenceError):
    """The service answered without any text payload."""

    pass


class MalformedResponseError(InferenceError):
    """Payload is not JSON or does not match the expected schema."""

    pass
