"""
Main CLI module with argument parsing and command execution.

Commands follow a resource-action structure, e.g. ``scopekeeper project
create acme`` or ``scopekeeper deployment update acme prod <sha> --app-def
app.json``.
"""
import argparse
import asyncio
import os
import sys
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

from scopekeeper._package import __version__
from scopekeeper.bootstrap import Application
from scopekeeper.cli.formatters import format_output
from scopekeeper.config.manager import ConfigurationManager
from scopekeeper.domain.core.exceptions import DomainException
from scopekeeper.domain.deployment import AppDefinition
from scopekeeper.domain.project.value_objects import parse_ports
from scopekeeper.helpers.logger import get_logger
from scopekeeper.infrastructure.exceptions import InfrastructureError

FORMATS = ['json', 'yaml', 'table']


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    """Parse command line arguments with resource-action structure."""

    # Main parser with global options
    parser = argparse.ArgumentParser(
        prog=os.path.basename(sys.argv[0]),
        description="scopekeeper - per-project AWS network scopes, pull request and deployment workloads",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s project create acme                          # Provision a project scope
  %(prog)s project describe acme --format table         # Live workloads of a project
  %(prog)s pr create acme 42 --app-def app.json         # Launch a pull request preview
  %(prog)s deployment create acme prod 1a2b3c --app-def app.json
  %(prog)s appdef generate acme -p 80:8080/tcp          # Print a starter app definition
        """
    )

    # Global options
    parser.add_argument('--config', help='Configuration file path')
    parser.add_argument('--log-level', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        help='Override the configured logging level')
    parser.add_argument('--format', choices=FORMATS, default='json', help='Output format')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    subparsers = parser.add_subparsers(dest='resource', help='Available resources')

    # Project resource
    project_parser = subparsers.add_parser('project', help='Manage project network scopes')
    project_subparsers = project_parser.add_subparsers(dest='action', help='Project actions')
    project_create = project_subparsers.add_parser('create', help='Create a project scope')
    project_create.add_argument('project_id', help='Project ID')
    project_destroy = project_subparsers.add_parser('destroy', help='Destroy a project scope')
    project_destroy.add_argument('project_id', help='Project ID')
    project_describe = project_subparsers.add_parser('describe', help='Show scope and live workloads')
    project_describe.add_argument('project_id', help='Project ID')
    project_subparsers.add_parser('list', help='List projects')

    # Pull request resource
    pr_parser = subparsers.add_parser('pr', help='Manage pull request workloads')
    pr_subparsers = pr_parser.add_subparsers(dest='action', help='Pull request actions')
    pr_create = pr_subparsers.add_parser('create', help='Launch a pull request workload')
    pr_create.add_argument('project_id', help='Project ID')
    pr_create.add_argument('pr_number', type=int, help='Pull request number')
    pr_create.add_argument('--app-def', required=True, help='App definition JSON file')
    pr_destroy = pr_subparsers.add_parser('destroy', help='Terminate a pull request workload')
    pr_destroy.add_argument('project_id', help='Project ID')
    pr_destroy.add_argument('pr_number', type=int, help='Pull request number')

    # Deployment resource
    deployment_parser = subparsers.add_parser('deployment', help='Manage deployments')
    deployment_subparsers = deployment_parser.add_subparsers(dest='action', help='Deployment actions')
    for action, help_text in (('create', 'Launch a deployment'),
                              ('update', 'Roll a deployment onto a new sha')):
        sub = deployment_subparsers.add_parser(action, help=help_text)
        sub.add_argument('project_id', help='Project ID')
        sub.add_argument('name', help='Deployment name')
        sub.add_argument('sha', help='Commit sha')
        sub.add_argument('--app-def', required=True, help='App definition JSON file')
    deployment_destroy = deployment_subparsers.add_parser('destroy', help='Terminate a deployment')
    deployment_destroy.add_argument('project_id', help='Project ID')
    deployment_destroy.add_argument('name', help='Deployment name')
    deployment_destroy.add_argument('sha', help='Commit sha the deployment must be running')

    # App definition resource
    appdef_parser = subparsers.add_parser('appdef', help='App definition helpers')
    appdef_subparsers = appdef_parser.add_subparsers(dest='action', help='App definition actions')
    appdef_generate = appdef_subparsers.add_parser('generate', help='Print a starter app definition')
    appdef_generate.add_argument('project_id', help='Project ID')
    appdef_generate.add_argument('-p', '--port', action='append', dest='ports',
                                 help='Port as external[:internal][/protocol], repeatable')
    appdef_generate.add_argument('--image', help='Container image')

    # Server
    serve_parser = subparsers.add_parser('serve', help='Run the REST API server')
    serve_parser.add_argument('--host', help='Override the configured host')
    serve_parser.add_argument('--port', type=int, help='Override the configured port')

    return parser.parse_args(argv)


def _read_app_definition(path: str) -> AppDefinition:
    with open(path, 'r', encoding='utf-8') as f:
        return AppDefinition.parse(f.read())


async def project_create(app: Application, args) -> Dict[str, Any]:
    subnet = await app.orchestrator.create(args.project_id)
    return {"project_id": args.project_id, "subnet_id": subnet['SubnetId'],
            "cidr_block": subnet.get('CidrBlock')}


async def project_destroy(app: Application, args) -> Dict[str, Any]:
    await app.orchestrator.destroy(args.project_id)
    return {"project_id": args.project_id, "destroyed": True}


async def project_describe(app: Application, args) -> Dict[str, Any]:
    scope = await app.orchestrator.scope(args.project_id)
    workloads = await app.orchestrator.describe_project(args.project_id)
    return {"scope": scope.to_dict(), "workloads": [w.to_dict() for w in workloads]}


async def project_list(app: Application, args) -> Dict[str, Any]:
    return {"projects": await app.orchestrator.list_projects()}


async def pr_create(app: Application, args) -> Dict[str, Any]:
    workload = await app.pull_requests.create(
        args.project_id, args.pr_number, _read_app_definition(args.app_def)
    )
    return workload.to_dict()


async def pr_destroy(app: Application, args) -> Dict[str, Any]:
    await app.pull_requests.destroy(args.project_id, args.pr_number)
    return {"project_id": args.project_id, "pr_number": args.pr_number, "destroyed": True}


async def deployment_create(app: Application, args) -> Dict[str, Any]:
    endpoint = await app.deployments.create(
        args.project_id, args.name, args.sha, _read_app_definition(args.app_def)
    )
    return endpoint.to_dict()


async def deployment_update(app: Application, args) -> Dict[str, Any]:
    workload = await app.deployments.update(
        args.project_id, args.name, args.sha, _read_app_definition(args.app_def)
    )
    return workload.to_dict()


async def deployment_destroy(app: Application, args) -> Dict[str, Any]:
    await app.deployments.destroy(args.project_id, args.name, args.sha)
    return {"project_id": args.project_id, "name": args.name, "sha": args.sha, "destroyed": True}


Handler = Callable[[Application, argparse.Namespace], Awaitable[Dict[str, Any]]]

# Command handler mapping
COMMAND_HANDLERS: Dict[Tuple[str, str], Handler] = {
    ('project', 'create'): project_create,
    ('project', 'destroy'): project_destroy,
    ('project', 'describe'): project_describe,
    ('project', 'list'): project_list,
    ('pr', 'create'): pr_create,
    ('pr', 'destroy'): pr_destroy,
    ('deployment', 'create'): deployment_create,
    ('deployment', 'update'): deployment_update,
    ('deployment', 'destroy'): deployment_destroy,
}


async def execute_command(app: Application, args: argparse.Namespace) -> Dict[str, Any]:
    """Initialize the orchestrator, then run the handler for the command."""
    handler = COMMAND_HANDLERS.get((args.resource, args.action))
    if handler is None:
        raise ValueError(f"Unknown command: {args.resource} {args.action}")
    await app.initialize()
    return await handler(app, args)


def generate_app_definition(args: argparse.Namespace) -> Dict[str, Any]:
    return AppDefinition.skeleton(args.project_id, parse_ports(args.ports), image=args.image).to_dict()


def serve(app: Application, args: argparse.Namespace) -> None:
    import uvicorn

    from scopekeeper.api.server import create_fastapi_app

    server_config = app.config_manager.get_server_config()
    uvicorn.run(
        create_fastapi_app(server_config, app),
        host=args.host or server_config.host,
        port=args.port or server_config.port,
        log_level=server_config.log_level,
        access_log=server_config.access_log,
    )


def main(argv: Optional[list] = None) -> int:
    """Main CLI entry point."""
    args = parse_args(argv)

    if not args.resource:
        print("Error: No resource specified. Use --help for usage information.", file=sys.stderr)
        return 1
    if args.resource != 'serve' and not args.action:
        print(f"Error: No action specified for {args.resource}. Use --help for usage information.",
              file=sys.stderr)
        return 1

    operation = f"{args.resource} {getattr(args, 'action', '') or ''}".strip()
    logger = get_logger(__name__)
    try:
        if args.resource == 'appdef':
            print(format_output(generate_app_definition(args), args.format))
            return 0

        overrides = {"logging": {"level": args.log_level}} if args.log_level else None
        app = Application(config_manager=ConfigurationManager(args.config, overrides=overrides))
        app.configure_logging()

        if args.resource == 'serve':
            serve(app, args)
            return 0

        result = asyncio.run(execute_command(app, args))
        print(format_output(result, args.format))
        return 0
    except (DomainException, InfrastructureError, OSError, ValueError) as e:
        logger.error("Command failed", operation=operation, error=str(e))
        print(f"{operation} failed: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
