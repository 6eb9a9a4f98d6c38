"""Command line entry point: ``python -m membership_service`` or ``membership-service``."""

import argparse
import os
import sys
from typing import Optional

import uvicorn

from membership_service.config import Config, ConfigurationError
from membership_service.models import ServiceConfig


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="membership-service",
        description="Membership Service - subscription lifecycle and admin API",
    )
    parser.add_argument("--host", default=os.getenv("HOST", "0.0.0.0"), help="Bind address (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=int(os.getenv("PORT", "8080")), help="Bind port (default: 8080)")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=os.getenv("LOG_LEVEL", "INFO"),
    )
    parser.add_argument("--log-format", choices=["json", "console"], default=os.getenv("LOG_FORMAT", "json"))
    parser.add_argument(
        "--config",
        default=os.getenv("CONFIG_PATH"),
        help="Path to membership.yaml (default: config/membership.yaml)",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        default=os.getenv("RELOAD", "false").lower() == "true",
        help="Restart on code changes (development only)",
    )
    parser.add_argument(
        "--check-config",
        action="store_true",
        help="Validate the configuration, print a summary and exit",
    )
    return parser


def describe_settings(settings: ServiceConfig) -> list[str]:
    """One "label: value" line per configured backend."""
    storage = settings.storage.backend
    if settings.storage.backend == "firestore":
        storage += f" (project {settings.storage.project_id or 'default'})"

    email = settings.email
    if email.is_configured:
        mode = "ssl" if email.use_ssl else "starttls" if email.use_tls else "plain"
        email_line = f"smtp {email.host}:{email.port} ({mode})"
    else:
        email_line = "log only"

    pubsub = settings.pubsub
    pubsub_line = f"{pubsub.project_id}/{pubsub.topic}" if pubsub.enabled else "disabled"

    active_plans = sum(1 for plan in settings.seed_plans if plan.is_active)
    return [
        f"Storage: {storage}",
        f"Email: {email_line}",
        f"Pub/Sub: {pubsub_line}",
        f"Seed plans: {len(settings.seed_plans)} ({active_plans} active)",
        f"Seed users: {len(settings.seed_users)}",
    ]


def check_config(config_path: Optional[str]) -> int:
    """Load and validate the configuration; returns the process exit code."""
    try:
        config = Config(config_path)
    except ConfigurationError as e:
        print(f"Configuration invalid: {e}", file=sys.stderr)
        return 1

    print(f"Configuration OK: {config.config_path}")
    for line in describe_settings(config.settings):
        print(f"  {line}")
    return 0


def _print_banner(args: argparse.Namespace) -> None:
    print("=" * 60)
    print("Membership Service")
    print("=" * 60)
    print(f"Listening: {args.host}:{args.port}")
    print(f"Log level: {args.log_level}")
    try:
        config = Config(args.config)
    except ConfigurationError as e:
        # uvicorn reports the failure again when the app loads
        print(f"Config: invalid ({e})")
    else:
        print(f"Config: {config.config_path}")
        for line in describe_settings(config.settings):
            print(line)
    print("=" * 60)


def main(argv: Optional[list[str]] = None) -> None:
    args = build_parser().parse_args(argv)

    if args.check_config:
        sys.exit(check_config(args.config))

    # The app module is imported by uvicorn and configures itself from these
    os.environ["LOG_LEVEL"] = args.log_level
    os.environ["LOG_FORMAT"] = args.log_format
    if args.config:
        os.environ["CONFIG_PATH"] = args.config

    if args.log_format == "console":
        _print_banner(args)

    try:
        uvicorn.run(
            "membership_service.main:app",
            host=args.host,
            port=args.port,
            log_level=args.log_level.lower(),
            reload=args.reload,
            access_log=False,  # RequestLoggingMiddleware logs requests
        )
    except KeyboardInterrupt:
        print("\nShutting down gracefully...")
        sys.exit(0)
    except Exception as e:
        print(f"Failed to start service: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
