"""Constants for the Entur API adapter.

Journey planner: https://developer.entur.org/pages-journeyplanner-journeyplanner
Geocoder: https://developer.entur.org/pages-geocoder-intro

Entur asks every client to identify itself with the ET-Client-Name header
("<company>-<application>").
"""

JOURNEY_PLANNER_URL = "https://api.entur.io/journey-planner/v3/graphql"
GEOCODER_SEARCH_URL = "https://api.entur.io/geocoder/v1/search"

CLIENT_NAME_HEADER = "ET-Client-Name"

DEFAULT_HEADERS = {
    "Accept": "application/json",
}

# Geocoder categories that denote a stop place
STOP_CATEGORIES = frozenset(
    {
        "onstreetBus",
        "onstreetTram",
        "metroStation",
        "railStation",
        "ferryStop",
    }
)
STOP_PLACE_ID_PREFIX = "NSR:StopPlace:"

ESTIMATED_CALLS_QUERY = """
query EstimatedCalls($stopId: String!, $numberOfDepartures: Int!) {
  stopPlace(id: $stopId) {
    id
    name
    estimatedCalls(numberOfDepartures: $numberOfDepartures) {
      expectedDepartureTime
      date
      destinationDisplay {
        frontText
      }
      serviceJourney {
        id
        line {
          publicCode
          name
          transportMode
        }
      }
    }
  }
}
"""
