"""BlueGreen routing core: classification, sticky decisions, splitting and proxying."""

from .classifier import RequestClassifier
from .context import CORRELATION_ID_HEADER, LOOP_GUARD_HEADER, RequestContext
from .orchestrator import RESERVED_RC_PATH, RoutingOrchestrator
from .proxy_fetcher import ProxyFetcher
from .response_merger import ResponseMerger
from .splitter import FixedRandomSource, RandomSource, TrafficSplitter, UniformRandomSource
from .sticky import (
    STICKY_COOKIE_NAME,
    STICKY_MAX_AGE,
    CookieDirective,
    StickyState,
    read_sticky_decision,
    write_sticky_decision,
)
from .target_resolver import TargetResolver, normalize_target
from .types import DecisionOrigin, OutcomeKind, ProxyResult, RoutingDecision, RoutingOutcome

__all__ = [
    "RequestClassifier",
    "CORRELATION_ID_HEADER",
    "LOOP_GUARD_HEADER",
    "RequestContext",
    "RESERVED_RC_PATH",
    "RoutingOrchestrator",
    "ProxyFetcher",
    "ResponseMerger",
    "FixedRandomSource",
    "RandomSource",
    "TrafficSplitter",
    "UniformRandomSource",
    "STICKY_COOKIE_NAME",
    "STICKY_MAX_AGE",
    "CookieDirective",
    "StickyState",
    "read_sticky_decision",
    "write_sticky_decision",
    "TargetResolver",
    "normalize_target",
    "DecisionOrigin",
    "OutcomeKind",
    "ProxyResult",
    "RoutingDecision",
    "RoutingOutcome",
]
