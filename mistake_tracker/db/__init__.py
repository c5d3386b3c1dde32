"""SQLAlchemy persistence for mistakes and retests."""
