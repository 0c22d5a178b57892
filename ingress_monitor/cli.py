"""Command-line interface for ingress-monitor-controller."""

import argparse
import sys
from pathlib import Path

from .logging_config import bind_controller_context, get_logger, setup_logging

logger = get_logger(__name__)


def build_options(args: argparse.Namespace):
    """Build controller options from command line arguments and the provider config file."""
    from .config import Options, ProviderConfig, read_provider_config

    provider_config = ProviderConfig()
    if args.provider_config:
        logger.debug("Loading provider config", config_file=args.provider_config)
        provider_config = read_provider_config(args.provider_config)

    options = Options(
        provider_name=args.provider,
        provider_config_file=args.provider_config,
        provider_config=provider_config,
        name_template=args.name_template,
        no_delete=args.no_delete,
        creation_delay=args.creation_delay,
    )
    options.validate_options()

    return options


def run_command(args: argparse.Namespace) -> None:
    """Start the controller together with the health and metrics server."""
    # Import heavy dependencies only when needed
    import uvicorn
    from .api import app, initialize_controller
    from .controller import IngressController, load_kubernetes_config
    from .errors import IngressMonitorError
    from .reconciler import IngressReconciler
    from .service import MonitorService

    setup_logging(args.debug)

    try:
        options = build_options(args)
        service = MonitorService.from_options(options)
    except (OSError, IngressMonitorError) as e:
        logger.error("Invalid configuration", error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    logger.info("Configuration loaded",
                provider=options.provider_name,
                name_template=options.name_template,
                no_delete=options.no_delete,
                creation_delay=options.creation_delay)

    bind_controller_context(provider=options.provider_name)

    networking_api = load_kubernetes_config(args.kubeconfig, args.context)
    reconciler = IngressReconciler(networking_api, service, options)
    initialize_controller(IngressController(reconciler, namespace=args.namespace))

    logger.info("Starting server", host=args.host, port=args.port)
    uvicorn.run(
        app,
        host=args.host,
        port=args.port,
        log_level="debug" if args.debug else "info",
        # uvicorn logs through the handlers installed by setup_logging
        log_config=None,
    )


def init_config_command(args: argparse.Namespace) -> None:
    """Generate a sample provider configuration file."""
    import yaml

    sample_config = {
        "site24x7": {
            "clientID": "",
            "clientSecret": "",
            "refreshToken": "",
            "monitorDefaults": {
                "autoLocationProfile": True,
                "autoNotificationProfile": True,
                "autoThresholdProfile": True,
                "autoMonitorGroup": True,
                "autoUserGroup": True,
                "checkFrequency": "1",
                "httpMethod": "G",
                "timeout": 10,
                "useNameServer": True,
                "customHeaders": [
                    {"name": "Cache-Control", "value": "no-cache"},
                ],
                "actions": [],
            },
        },
    }

    config_yaml = yaml.dump(sample_config, default_flow_style=False, sort_keys=False)

    if args.output:
        output_path = Path(args.output)
        output_path.write_text(config_yaml)
        print(f"Sample configuration written to {output_path}")
    else:
        print("Sample configuration:\n")
        print(config_yaml)


def validate_config_command(args: argparse.Namespace) -> None:
    """Validate a provider configuration file."""
    from .config import read_provider_config
    from .errors import ConfigError

    config_path = Path(args.config)

    try:
        provider_config = read_provider_config(config_path)
    except (OSError, ConfigError) as e:
        print(f"✗ Configuration file {config_path} is invalid: {e}", file=sys.stderr)
        sys.exit(1)

    defaults = provider_config.site24x7.monitor_defaults
    print(f"✓ Configuration file {config_path} is valid")

    print(f"\nSite24x7 monitor defaults:")
    print(f"  Check frequency: {defaults.check_frequency}")
    print(f"  HTTP method: {defaults.http_method}")
    print(f"  Timeout: {defaults.timeout}s")
    print(f"  Location profile: {defaults.location_profile_id or ('auto' if defaults.auto_location_profile else 'None')}")
    print(f"  Notification profile: {defaults.notification_profile_id or ('auto' if defaults.auto_notification_profile else 'None')}")
    print(f"  Threshold profile: {defaults.threshold_profile_id or ('auto' if defaults.auto_threshold_profile else 'None')}")
    print(f"  Custom headers: {len(defaults.custom_headers)}")
    print(f"  Actions: {len(defaults.actions)}")


def version_command(args: argparse.Namespace) -> None:
    """Show version information."""
    from . import __version__
    print(f"ingress-monitor-controller {__version__}")


def main() -> None:
    """Main CLI entry point."""
    from .config import DEFAULT_NAME_TEMPLATE, PROVIDER_SITE24X7, SUPPORTED_PROVIDERS

    parser = argparse.ArgumentParser(
        description="ingress-monitor-controller: website monitors for Kubernetes ingresses",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument(
        "--debug", "--verbose", "-v",
        dest="debug",
        action="store_true",
        help="Enable debug logging with console output"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Run command
    run_parser = subparsers.add_parser("run", help="Run the controller")
    run_parser.add_argument(
        "--provider",
        choices=SUPPORTED_PROVIDERS,
        default=PROVIDER_SITE24X7,
        help=f"Monitor provider (default: {PROVIDER_SITE24X7})"
    )
    run_parser.add_argument(
        "--provider-config",
        help="Provider configuration file path"
    )
    run_parser.add_argument(
        "--name-template",
        default=DEFAULT_NAME_TEMPLATE,
        help="Template for monitor names, fields: {namespace}, {ingress_name} (default: %(default)s)"
    )
    run_parser.add_argument(
        "--no-delete",
        action="store_true",
        help="Never delete monitors"
    )
    run_parser.add_argument(
        "--creation-delay",
        type=float,
        default=0.0,
        help="Seconds to wait after ingress creation before creating its monitor (default: 0)"
    )
    run_parser.add_argument(
        "--kubeconfig",
        help="Kubeconfig file path (default: in-cluster config)"
    )
    run_parser.add_argument(
        "--context",
        help="Kubeconfig context"
    )
    run_parser.add_argument(
        "--namespace", "-n",
        help="Only watch ingresses in this namespace"
    )
    run_parser.add_argument(
        "--host",
        default="0.0.0.0",
        help="Host to bind the health and metrics server to (default: 0.0.0.0)"
    )
    run_parser.add_argument(
        "--port",
        type=int,
        default=8080,
        help="Port of the health and metrics server (default: 8080)"
    )
    run_parser.set_defaults(func=run_command)

    # Init-config command
    init_parser = subparsers.add_parser("init-config", help="Generate a sample provider configuration file")
    init_parser.add_argument(
        "--output", "-o",
        help="Output file path (default: stdout)"
    )
    init_parser.set_defaults(func=init_config_command)

    # Validate-config command
    validate_parser = subparsers.add_parser("validate-config", help="Validate a provider configuration file")
    validate_parser.add_argument(
        "--config", "-c",
        required=True,
        help="Configuration file path"
    )
    validate_parser.set_defaults(func=validate_config_command)

    # Version command
    version_parser = subparsers.add_parser("version", help="Show version information")
    version_parser.set_defaults(func=version_command)

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    args.func(args)


if __name__ == "__main__":
    main()
