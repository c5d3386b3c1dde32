"""FastAPI transport for the mistake tracker."""
