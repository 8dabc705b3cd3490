import argparse
import getpass
import logging
import sys

from letterbox.adapters.auth.crypto import Argon2CredentialVerifier
from letterbox.adapters.sqlite.migrator import SQLiteMigrator
from letterbox.adapters.sqlite.repos import SQLiteUserRepo
from letterbox.app_shell.config import Settings, load_settings
from letterbox.app_shell.logging_setup import configure_logging
from letterbox.services.bootstrap import create_operator

logger = logging.getLogger("letterbox.cli")


def get_settings() -> Settings:
    try:
        return load_settings()
    except (FileNotFoundError, ValueError) as e:
        print(f"CRITICAL: Configuration load failed: {e}", file=sys.stderr)
        sys.exit(1)


def handle_serve(settings: Settings, args: argparse.Namespace) -> None:
    import uvicorn

    from letterbox.api.main import create_app

    app = create_app(settings)
    uvicorn.run(
        app,
        host=args.host or settings.application.host,
        port=args.port or settings.application.port,
        log_config=None,
    )


def handle_migrate(settings: Settings, args: argparse.Namespace) -> None:
    applied = SQLiteMigrator(settings.database.path).run_migrations()
    if applied:
        print(f"Applied {len(applied)} migrations: {', '.join(applied)}")
    else:
        print("Database is up to date.")


def handle_create_user(settings: Settings, args: argparse.Namespace) -> None:
    password = args.password
    if password is None:
        password = getpass.getpass("Password: ")
        if password != getpass.getpass("Repeat password: "):
            logger.error("Passwords do not match.")
            sys.exit(1)

    SQLiteMigrator(settings.database.path).run_migrations()
    hashing = settings.password_hashing
    verifier = Argon2CredentialVerifier(
        time_cost=hashing.time_cost,
        memory_cost=hashing.memory_cost,
        parallelism=hashing.parallelism,
    )
    try:
        user = create_operator(
            SQLiteUserRepo(settings.database.path), verifier, args.username, password
        )
    except ValueError as e:
        logger.error("%s", e)
        sys.exit(1)
    print(f"Created user '{user.username}' ({user.user_id}).")


def handle_check_config(settings: Settings, args: argparse.Namespace) -> None:
    print("Configuration Validated.")
    print(f"  base_url:       {settings.application.base_url}")
    print(f"  database:       {settings.database.path}")
    print(f"  email enabled:  {settings.email_client.enabled}")
    print(f"  session store:  {settings.session.backend}")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Letterbox CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # serve
    serve_parser = subparsers.add_parser("serve", help="Run the web application")
    serve_parser.add_argument("--host", help="Override application.host")
    serve_parser.add_argument("--port", type=int, help="Override application.port")

    # migrate
    subparsers.add_parser("migrate", help="Apply pending database migrations")

    # create-user
    user_parser = subparsers.add_parser("create-user", help="Create an operator account")
    user_parser.add_argument("username", help="Login name")
    user_parser.add_argument("--password", help="Password (prompted when omitted)")

    # check-config
    subparsers.add_parser("check-config", help="Load and validate configuration")

    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings.log_level)

    if args.command == "serve":
        handle_serve(settings, args)
    elif args.command == "migrate":
        handle_migrate(settings, args)
    elif args.command == "create-user":
        handle_create_user(settings, args)
    elif args.command == "check-config":
        handle_check_config(settings, args)


if __name__ == "__main__":
    main()
