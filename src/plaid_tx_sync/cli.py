import argparse
import json
import logging

from . import __version__
from .config import load_settings
from .core.errors import SyncError
from .logging_setup import setup_logging


def mask(value: str | None, show: int = 4) -> str:
    if not value:
        return "None"
    if len(value) <= show:
        return "*" * len(value)
    return value[:show] + "*" * (len(value) - show)


def main() -> int:
    parser = argparse.ArgumentParser(prog="plaid-tx-sync")
    parser.add_argument("--version", action="store_true", help="Print version and exit")
    parser.add_argument(
        "command",
        nargs="?",
        default="health",
        choices=["health", "status-env", "range", "sync", "range-get", "exchange", "serve"],
        help="Command to run",
    )

    parser.add_argument(
        "--days",
        type=int,
        default=None,
        help="Window size in days (used with range / sync / range-get). Default: SYNC_DEFAULT_DAYS",
    )
    parser.add_argument(
        "--public-token",
        type=str,
        default=None,
        help="Plaid Link public token to exchange (used with exchange).",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=10,
        help="How many transactions to print (used with sync / range-get).",
    )

    args = parser.parse_args()

    if args.version:
        print(__version__)
        return 0

    settings = load_settings()
    setup_logging(settings.log_level)

    logger = logging.getLogger(__name__)
    days = settings.sync_default_days if args.days is None else args.days

    if args.command == "health":
        logger.info("Application started successfully.")
        print("ok")
        return 0

    if args.command == "status-env":
        print("PLAID_CLIENT_ID =", mask(settings.plaid_client_id))
        print("PLAID_SECRET =", mask(settings.plaid_secret))
        print("PLAID_ENV =", settings.plaid_env)
        print("PLAID_ACCESS_TOKEN =", mask(settings.plaid_access_token))
        print("SYNC_RETRY_DELAY_SECONDS =", settings.sync_retry_delay_seconds)
        print("SYNC_MAX_NOT_READY_ATTEMPTS =", settings.sync_max_not_ready_attempts)
        print("SYNC_TIMEOUT_SECONDS =", settings.sync_timeout_seconds)
        print("SYNC_TIMEZONE =", settings.sync_timezone or "local")
        print("LOG_LEVEL =", settings.log_level)
        return 0

    if args.command == "range":
        from .core.time_ranges import today_in, window_last_days

        window = window_last_days(days, today=today_in(settings.sync_timezone))
        print("days =", days)
        print("start_date =", window.start.isoformat())
        print("end_date   =", window.end.isoformat())
        return 0

    if args.command == "serve":
        import uvicorn

        from .api import create_app
        from .service import TransactionsService

        app = create_app(TransactionsService.from_settings(settings), default_days=settings.sync_default_days)
        uvicorn.run(app, host=settings.app_host, port=settings.app_port, log_level=settings.log_level.lower())
        return 0

    from .service import TransactionsService

    service = TransactionsService.from_settings(settings)
    try:
        if args.command == "exchange":
            if not args.public_token:
                print("--public-token is required")
                return 2
            item_id = service.exchange_public_token(args.public_token)
            access_token, _ = service.session.snapshot()
            print("item_id =", item_id)
            print("access_token =", mask(access_token))
            return 0

        if args.command == "sync":
            result = service.sync_recent(days)
        else:
            result = service.query_recent(days)
    except SyncError as e:
        logger.error("%s failed: %s", args.command, e)
        print("error =", e)
        return 1
    finally:
        service.close()

    payload = result.to_payload()
    print("date_range =", json.dumps(payload["date_range"]))
    print("count =", payload["count"])
    if "total_transactions" in payload:
        print("total_transactions =", payload["total_transactions"])

    for tx in result.records[: args.limit]:
        name = str(tx.extra_fields.get("name") or "").replace("\n", " ").strip()
        if len(name) > 60:
            name = name[:57] + "..."
        print("tx:", tx.date, "amount=", tx.amount, tx.currency or "", "name=", name)

    if result.count > args.limit:
        print(f"... and {result.count - args.limit} more transactions")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
