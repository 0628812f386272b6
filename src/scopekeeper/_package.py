"""Package metadata and naming constants."""

PACKAGE_NAME = "scopekeeper"
__version__ = "0.1.0"
DESCRIPTION = "Per-project AWS network scopes with pull-request and deployment workload lifecycles"

# Environment variable prefix used for configuration overrides
ENV_PREFIX = "SCOPEKEEPER"

# Tag namespace shared by every provider-side object this package creates
TAG_NAMESPACE = PACKAGE_NAME
