# Cluster REST API endpoints used by caphistory; update if the API changes.

DEFAULT_PORT = 8000

ANALYTICS = {
    "capacity_history": {
        "method": "GET",
        "path": "/v1/analytics/capacity-history/",
    },
}
