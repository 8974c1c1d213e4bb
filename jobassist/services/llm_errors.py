# jobassist/services/llm_errors.py


class GenerationError(Exception):
    """The generation service could not produce a reply (network, auth, rate limit, empty reply)."""


class GenerationParseError(GenerationError):
    """The cleaned reply is not valid JSON of the expected top-level type."""


class GenerationSchemaError(GenerationParseError):
    """The reply is valid JSON but does not describe what the caller must persist."""
