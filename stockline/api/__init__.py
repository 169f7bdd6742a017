"""HTTP interface: read-only report routes and the zone-completion event endpoint."""

from stockline.api.server import create_app

__all__ = ["create_app"]
