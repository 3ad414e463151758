"""
Catalog package for the train catalogue API.

This package contains the read-only train dataset, the search filter,
the per-train image gallery state and the route definitions that expose
them to a browser front-end. Card views returned by the API carry
everything needed to render a train card: the record itself, the image
currently shown, the "i / n" counter and whether a fetch is in flight.
"""

from .router import router as catalog_router  # noqa: F401
