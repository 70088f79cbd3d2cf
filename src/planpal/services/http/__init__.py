"""HTTP surface for PlanPal."""

from .server import caller_id, create_app, run_local_server

__all__ = ["caller_id", "create_app", "run_local_server"]
