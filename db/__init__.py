from .notion import (
    NotionEventStore,
    candidate_filter,
)  # noqa: F401
