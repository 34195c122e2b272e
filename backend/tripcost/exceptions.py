"""Error taxonomy for the cost estimation pipeline.

Only ResolutionError reaches callers of the estimator; the rest are absorbed
by a fallback tier and logged.
"""


class TripCostError(Exception):
    """Base class for pipeline errors."""


class ResolutionError(TripCostError):
    """No coordinates could be found for a city by any tier."""


class RoutingError(TripCostError):
    """Routing service failed or returned no route."""


class AuthError(TripCostError):
    """Flight provider token exchange was refused or unreachable."""


class PricingUnavailable(TripCostError):
    """External hotel/meal pricing API failed or is not configured."""


class AiParseError(TripCostError):
    """LLM output did not contain a usable JSON payload."""


class LLMUnavailable(TripCostError):
    """No LLM provider is configured or every provider failed."""


class ChainExhausted(TripCostError):
    """Every strategy in a fallback chain failed."""
