"""REST API for scopekeeper."""
