# Package initializer for the room availability service.

"""
The `room_availability` package contains all modules for the room availability backend.

Modules:

- ``config``: application settings loaded from environment variables.
- ``errors``: exception types for feed and clock failures.
- ``models``: Pydantic data models for API responses.
- ``intervals``: pure busy/free interval computations.
- ``catalog``: the lock-protected, process-wide room catalog.
- ``feed_client``: helpers for fetching and parsing iCalendar feeds.
- ``refresh``: the periodic refresh coordinator.
- ``queries``: read-only availability queries over the catalog.
- ``main``: the FastAPI application definition.

"""
