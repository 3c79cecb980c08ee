"""
sqlmigrate Command-Line Interface

Usage:
    sqlmigrate migrate
    sqlmigrate pending
    sqlmigrate status
    sqlmigrate forget sql/000003_seed.sql
    sqlmigrate snapshots
"""

import sys
import argparse
import logging

from sqlmigrate.config import ConfigLoader, DEFAULT_CONFIG_PATH, MigrateConfig
from sqlmigrate.db.base_database import DatabaseError
from sqlmigrate.db.sqlite_database import SQLiteDatabase
from sqlmigrate.migration import MigrationManager, MigrationError, SQLiteBackupManager

logger = logging.getLogger(__name__)


def _load_config(args) -> MigrateConfig:
    config = ConfigLoader(args.config).load()
    return config.with_overrides(
        database=args.database,
        site_path=args.site_path,
        scripts_path=args.scripts_path,
        temp_path=args.temp_path,
        table=args.table
    )


def _open(config: MigrateConfig):
    db = SQLiteDatabase.open(config.database)
    try:
        manager = MigrationManager(
            db,
            SQLiteBackupManager(db),
            site_path=config.site_path,
            temp_path=config.temp_path,
            table=config.table,
            executable_extensions=config.executable_extensions
        )
    except MigrationError:
        db.close()
        raise
    return db, manager


def cmd_migrate(args, config: MigrateConfig) -> int:
    """Apply all pending migrations."""
    db, manager = _open(config)
    try:
        applied = manager.migrate(config.scripts_root)
    finally:
        db.close()

    if not applied:
        print("✓ Database is up to date")
        return 0

    print(f"✓ Applied {len(applied)} migrations:")
    for key in applied:
        print(f"  - {key}")
    return 0


def cmd_pending(args, config: MigrateConfig) -> int:
    """Exit 1 when migrations are pending, 0 otherwise."""
    db, manager = _open(config)
    try:
        pending = manager.is_pending(config.scripts_root)
    finally:
        db.close()

    print("Migrations pending" if pending else "No pending migrations")
    return 1 if pending else 0


def cmd_status(args, config: MigrateConfig) -> int:
    """Show applied and pending migrations."""
    db, manager = _open(config)
    try:
        status = manager.get_migration_status(config.scripts_root)
    finally:
        db.close()

    print("Migration Status")
    print("=" * 60)
    print(f"Database: {config.database} ({status['driver']})")
    print(f"Ledger table: {status['table']}")
    print(f"Scripts: {status['root']}")
    print(f"  Applied: {status['applied_count']}")
    print(f"  Pending: {status['pending_count']}")

    if status['pending_migrations']:
        print("  Pending migrations:")
        for key in status['pending_migrations']:
            marker = " (unreadable)" if key in status['unreadable_migrations'] else ""
            print(f"    - {key}{marker}")
    return 0


def cmd_forget(args, config: MigrateConfig) -> int:
    """Remove a script from the ledger so it runs again."""
    db, manager = _open(config)
    try:
        removed = manager.forget(args.key)
    finally:
        db.close()

    if removed:
        print(f"✓ Removed {args.key} from the ledger")
        return 0
    print(f"✗ {args.key} is not in the ledger")
    return 1


def cmd_snapshots(args, config: MigrateConfig) -> int:
    """List snapshots left behind by failed restores."""
    db = SQLiteDatabase.open(config.database)
    try:
        backups = SQLiteBackupManager(db).list_backups(config.temp_path)
    finally:
        db.close()

    if not backups:
        print(f"No snapshots in {config.temp_path}")
        return 0

    print(f"Snapshots in {config.temp_path}:")
    for backup in backups:
        print(f"  {backup['created']:%Y-%m-%d %H:%M:%S}  {backup['size']:>12,}  {backup['path']}")
    return 0


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="sqlmigrate",
        description="Apply ordered SQL and Python migration scripts exactly once",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  sqlmigrate migrate                          # Apply pending scripts under ./sql
  sqlmigrate --database app.db migrate        # Target a specific database file
  sqlmigrate pending                          # Exit code 1 if anything is pending
  sqlmigrate status                           # List applied and pending scripts
  sqlmigrate forget sql/000003_seed.sql       # Let a script run again
  sqlmigrate snapshots                        # Show snapshots kept after failed restores
        """
    )

    parser.add_argument('--version', action='version', version='sqlmigrate 1.0.0')
    parser.add_argument('--config', default=DEFAULT_CONFIG_PATH,
                        help=f'Config file (default: {DEFAULT_CONFIG_PATH})')
    parser.add_argument('--database', help='SQLite database file')
    parser.add_argument('--site-path', help='Root directory ledger keys are relative to')
    parser.add_argument('--scripts-path', help='Scripts directory (relative to site path)')
    parser.add_argument('--temp-path', help='Directory for batch snapshots')
    parser.add_argument('--table', help='Ledger table name')
    parser.add_argument('--verbose', '-v', action='store_true', help='Verbose output')

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    migrate_parser = subparsers.add_parser('migrate', help='Apply pending migrations')
    migrate_parser.set_defaults(func=cmd_migrate)

    pending_parser = subparsers.add_parser('pending', help='Check for pending migrations')
    pending_parser.set_defaults(func=cmd_pending)

    status_parser = subparsers.add_parser('status', help='Show migration status')
    status_parser.set_defaults(func=cmd_status)

    forget_parser = subparsers.add_parser('forget', help='Remove a script from the ledger')
    forget_parser.add_argument('key', help='Ledger key, e.g. sql/000003_seed.sql')
    forget_parser.set_defaults(func=cmd_forget)

    snapshots_parser = subparsers.add_parser('snapshots', help='List leftover snapshots')
    snapshots_parser.set_defaults(func=cmd_snapshots)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        config = _load_config(args)
        return args.func(args, config)
    except KeyboardInterrupt:
        print("\n\n⚠️  Interrupted by user")
        return 130
    except (MigrationError, DatabaseError) as e:
        logger.error(f"Migration failed: {e}")
        print(f"\n❌ Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
