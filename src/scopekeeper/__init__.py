"""scopekeeper - Root Package.

This package provisions and tears down per-project network scopes (subnet,
network ACL, route table association) inside a shared AWS VPC, and runs
pull-request previews and named deployments inside those scopes on ECS.

State lives only in AWS: every object created here carries an ownership tag,
and discovery always queries the provider by that tag.

Key Components:
    - domain: Value objects, tag conventions, security rules, app definitions
    - application: Project orchestrator, pull request and deployment lifecycles
    - providers: AWS implementations of the sub-resource managers
    - config: Typed configuration loading
    - api: Webhook and REST surface
    - cli: Command line interface
"""

from ._package import PACKAGE_NAME, __version__

__author__ = "scopekeeper maintainers"
__package_name__ = PACKAGE_NAME
