"""
CLI utility for collection cache management.

Usage:
    pos-cache --stats
    pos-cache --ledger
    pos-cache --invalidate products
    pos-cache --purge collections,timestamps
    pos-cache --purge all
"""

import argparse
import sys
from datetime import datetime
from pathlib import Path

from pos_inventory.config import Settings
from pos_inventory.errors import UnknownCollectionError
from pos_inventory.persist import CacheStore, CollectionLedger, KVStore
from pos_inventory.persist.sqlite_store import TABLES
from pos_inventory.services import REGISTRY, get_collection


def format_bytes(bytes_val: float) -> str:
    """Format bytes as human-readable string."""
    for unit in ["B", "KB", "MB", "GB"]:
        if bytes_val < 1024:
            return f"{bytes_val:.1f} {unit}"
        bytes_val /= 1024
    return f"{bytes_val:.1f} TB"


def format_time(ts: float) -> str:
    """Format unix timestamp as human-readable string."""
    if ts == 0:
        return "never"
    return datetime.fromtimestamp(ts).strftime("%Y-%m-%d %H:%M:%S")


def show_stats(db_path: Path) -> int:
    """
    Display KV table statistics.

    Args:
        db_path: Path to the cache database
    """
    if not db_path.exists():
        print(f"❌ Cache database not found: {db_path}")
        return 1

    print(f"📊 Cache Statistics: {db_path}\n")

    with KVStore(db_path) as kv:
        print(f"{'Table':<15} {'Count':>10} {'Size':>12} {'Oldest':>20} {'Newest':>20}")
        print("=" * 80)

        total_count = 0
        total_bytes = 0

        for table in TABLES:
            stats = kv.stats(table)
            total_count += stats["count"]
            total_bytes += stats["total_bytes"]

            print(
                f"{table:<15} {stats['count']:>10,} {format_bytes(stats['total_bytes']):>12} "
                f"{format_time(stats['oldest_ts']):>20} {format_time(stats['newest_ts']):>20}"
            )

        print("=" * 80)
        print(f"{'TOTAL':<15} {total_count:>10,} {format_bytes(total_bytes):>12}")
        print()

    return 0


def show_ledger(db_path: Path) -> int:
    """
    Display fetch/update instants, last cache change and cache validity per
    collection.

    Args:
        db_path: Path to the cache database
    """
    if not db_path.exists():
        print(f"❌ Cache database not found: {db_path}")
        return 1

    print(f"📒 Collection Ledger: {db_path}\n")

    with KVStore(db_path) as kv:
        ledger = CollectionLedger(kv)
        cache = CacheStore(kv)

        print(
            f"{'Collection':<12} {'Last fetch':>20} {'Last update':>20} "
            f"{'Cache changed':>20} {'Fresh':>7} {'Cached':>7}"
        )
        print("=" * 91)

        for name in sorted(REGISTRY):
            cd = REGISTRY[name]
            stamps = ledger.get_collection_timestamps(cd.collection_key)
            fresh = "yes" if stamps.snapshot_is_fresh else "no"
            cached = "yes" if cache.is_cache_valid(cd.cache_key) else "no"
            changed = cache.get_last_modified_time(cd.cache_key)
            print(
                f"{name:<12} {format_time(stamps.last_fetch_time):>20} "
                f"{format_time(stamps.last_update_time):>20} {format_time(changed):>20} "
                f"{fresh:>7} {cached:>7}"
            )
        print()

    return 0


def invalidate_collection(db_path: Path, name: str) -> int:
    """
    Drop the cached list and ledger entries of one collection.

    Args:
        db_path: Path to the cache database
        name: Collection name (e.g. products)
    """
    try:
        cd = get_collection(name)
    except UnknownCollectionError as e:
        print(f"❌ {e}")
        print(f"   Valid collections: {', '.join(sorted(REGISTRY))}")
        return 1

    if not db_path.exists():
        print(f"❌ Cache database not found: {db_path}")
        return 1

    with KVStore(db_path) as kv:
        removed = CacheStore(kv).clear_cache(cd.cache_key)
        CollectionLedger(kv).clear(cd.collection_key)

    state = "cache entry removed" if removed else "no cache entry"
    print(f"✅ Invalidated {cd.collection} ({state})")
    return 0


def purge_cache(db_path: Path, tables: list[str]) -> int:
    """
    Purge KV tables.

    Args:
        db_path: Path to the cache database
        tables: List of table names to purge (or ["all"])
    """
    if not db_path.exists():
        print(f"❌ Cache database not found: {db_path}")
        return 1

    valid_tables = list(TABLES)

    if "all" in tables:
        tables = valid_tables

    invalid = set(tables) - set(valid_tables)
    if invalid:
        print(f"❌ Invalid table names: {invalid}")
        print(f"   Valid tables: {', '.join(valid_tables)}, all")
        return 1

    print(f"🗑️  Purging cache tables: {', '.join(tables)}\n")

    with KVStore(db_path) as kv:
        total_purged = 0

        for table in tables:
            count = kv.purge_table(table)
            total_purged += count
            print(f"   {table:<15} {count:>10,} entries purged")

        print(f"\n   TOTAL:          {total_purged:>10,} entries purged")

        print("\n🔧 Vacuuming database...")
        kv.vacuum()
        print("   ✓ Done")

    print("\n✅ Cache purge complete")
    return 0


def main(argv: list[str] | None = None):
    """CLI entrypoint."""
    parser = argparse.ArgumentParser(
        description="Manage the POS collection cache (stats, ledger, invalidation, purge)"
    )
    parser.add_argument(
        "--stats",
        action="store_true",
        help="Show cache table statistics",
    )
    parser.add_argument(
        "--ledger",
        action="store_true",
        help="Show fetch/update times per collection",
    )
    parser.add_argument(
        "--invalidate",
        type=str,
        metavar="COLLECTION",
        help="Drop the cached list and ledger entries of one collection",
    )
    parser.add_argument(
        "--purge",
        type=str,
        help="Purge cache tables (comma-separated: collections,timestamps or 'all')",
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="Cache database (default: POS_CACHE_DB or data/cache/pos_cache.db)",
    )

    args = parser.parse_args(argv)
    db_path = args.db or Path(Settings.from_env().paths.cache_db)

    if not (args.stats or args.ledger or args.invalidate or args.purge):
        parser.print_help()
        print("\n❌ Error: Must specify --stats, --ledger, --invalidate or --purge")
        sys.exit(1)

    if args.stats:
        exit_code = show_stats(db_path)
        if exit_code != 0:
            sys.exit(exit_code)

    if args.ledger:
        exit_code = show_ledger(db_path)
        if exit_code != 0:
            sys.exit(exit_code)

    if args.invalidate:
        exit_code = invalidate_collection(db_path, args.invalidate)
        if exit_code != 0:
            sys.exit(exit_code)

    if args.purge:
        tables = [t.strip() for t in args.purge.split(",")]
        exit_code = purge_cache(db_path, tables)
        sys.exit(exit_code)

    sys.exit(0)


if __name__ == "__main__":
    main()
