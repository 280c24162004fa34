"""
Matching subpackage for the Trips domain.

Public API:
- prefilter_trips, filter_by_seats, is_within_bounding_box
- match_route, find_matching_trips
- generate_valid_orderings, StopPair
- check_detour_feasible, evaluate_detour, recompute_optimal_duration
- search_trips, browse_trips, SearchResult
- MatchingPolicy
"""

from .engine import SearchResult, browse_trips, search_trips
from .feasibility import (
    DetourResult,
    TooManyRidersError,
    check_detour_feasible,
    evaluate_detour,
    recompute_optimal_duration,
)
from .ordering import StopPair, generate_valid_orderings, iter_valid_orderings
from .policy import MatchingPolicy, default_policy, relaxed_policy, strict_policy
from .prefilter import filter_by_seats, is_within_bounding_box, prefilter_trips
from .route_match import find_matching_trips, match_route

__all__ = [
    "SearchResult",
    "browse_trips",
    "search_trips",
    "DetourResult",
    "TooManyRidersError",
    "check_detour_feasible",
    "evaluate_detour",
    "recompute_optimal_duration",
    "StopPair",
    "generate_valid_orderings",
    "iter_valid_orderings",
    "MatchingPolicy",
    "default_policy",
    "relaxed_policy",
    "strict_policy",
    "filter_by_seats",
    "is_within_bounding_box",
    "prefilter_trips",
    "find_matching_trips",
    "match_route",
]
