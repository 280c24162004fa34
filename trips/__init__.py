"""
Purpose: Package entry + stable exports.
What it does:

Marks trips as a Python package and re-exports the public API so other
modules can do:

from trips import Trip, RiderSegment, search_trips

Should not contain business logic.

Public API:
- Domain models: Trip, RiderSegment, Stop, StopType
- Lifecycle: create_trip, request_to_join, accept_request, reject_request, leave_trip
- Matching entry points: search_trips, browse_trips

"""
from .models import RiderSegment, Stop, StopType, Trip
from .lifecycle import (
    RiderNotFoundError,
    TripStateError,
    accept_request,
    create_trip,
    leave_trip,
    reject_request,
    request_to_join,
)
from .matching import SearchResult, browse_trips, search_trips

__all__ = ["Trip",
           "RiderSegment",
             "Stop",
               "StopType",
               "create_trip",
               "request_to_join",
               "accept_request",
               "reject_request",
               "leave_trip",
               "TripStateError",
               "RiderNotFoundError",
               "SearchResult",
               "browse_trips",
               "search_trips",
               ]
