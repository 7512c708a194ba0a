import argparse
import logging
import sys
from collections.abc import Sequence

from cms.adapters.clock import SystemClock
from cms.adapters.sqlite.migrator import SQLiteMigrator
from cms.adapters.sqlite.repos import SQLiteActivityRepo, SQLiteContentRepo, SQLiteUserRepo
from cms.api.auth_utils import create_access_token
from cms.api.deps import Settings
from cms.components.scheduler import SweepInput, run_sweep
from cms.domain.entities import User
from cms.rules.loader import load_rules

logger = logging.getLogger("cli")


def handle_migrate(settings: Settings, args: argparse.Namespace) -> int:
    migrator = SQLiteMigrator(settings.db_path)
    if args.status:
        for name in migrator.applied():
            print(f"applied  {name}")
        pending = migrator.pending()
        for name in pending:
            print(f"pending  {name}")
        return 1 if pending else 0

    applied = migrator.run_migrations()
    print(f"Applied {len(applied)} migration(s) to {settings.db_path}.")
    return 0


def handle_sweep(settings: Settings, args: argparse.Namespace) -> int:
    rules = load_rules(settings.rules_path)
    SQLiteMigrator(settings.db_path).run_migrations()

    result = run_sweep(
        SweepInput(limit=rules.scheduler.batch_limit),
        repo=SQLiteContentRepo(settings.db_path),
        activity=SQLiteActivityRepo(settings.db_path),
        time=SystemClock(),
    )
    print(f"Published {result.published} items.")
    for failure in result.failures:
        print(f"Failed {failure.item_id}: {failure.message}", file=sys.stderr)
    return 0 if result.success else 1


def handle_seed_user(settings: Settings, args: argparse.Namespace) -> int:
    SQLiteMigrator(settings.db_path).run_migrations()

    user = User(email=args.email, name=args.name, role=args.role)
    SQLiteUserRepo(settings.db_path).save(user)
    print(f"Created {user.role} {user.email} ({user.id})")
    print(f"Token: {create_access_token(user.id)}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO)

    parser = argparse.ArgumentParser(description="Intercept CMS CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # migrate
    migrate_parser = subparsers.add_parser("migrate", help="Apply pending database migrations")
    migrate_parser.add_argument(
        "--status",
        action="store_true",
        help="List applied and pending migrations; exit 1 if any are pending",
    )

    # sweep
    subparsers.add_parser("sweep", help="Publish scheduled items that are due")

    # seed-user
    seed_parser = subparsers.add_parser("seed-user", help="Create a user and print a token")
    seed_parser.add_argument("--email", required=True)
    seed_parser.add_argument("--name", required=True)
    seed_parser.add_argument("--role", choices=["user", "admin"], default="admin")

    args = parser.parse_args(argv)
    settings = Settings()

    handlers = {
        "migrate": handle_migrate,
        "sweep": handle_sweep,
        "seed-user": handle_seed_user,
    }
    return handlers[args.command](settings, args)


if __name__ == "__main__":
    sys.exit(main())
