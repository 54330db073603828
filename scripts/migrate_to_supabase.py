"""
Migrate local attendance counters and classes-held totals to Supabase

Reads the local stats file (STATS_DB_PATH) and upserts every record.
Run once when switching STORE_BACKEND from 'local' to 'supabase'.
"""
import argparse
import logging

from config.logging_config import setup_logging
from core.errors import StoreError
from database.stats_db import ClassesHeldDB, StatsDB
from database.supabase_db import SupabaseClassesHeld, SupabaseStats, init_supabase

logger = logging.getLogger(__name__)


def migrate_attendance_stats(local, remote):
    migrated = errors = 0
    for name, subjects in local.all().items():
        for subject, counters in subjects.items():
            try:
                remote.put(name, subject, counters)
                migrated += 1
            except StoreError as e:
                logger.error("Error migrating stats for %s/%s: %s", name, subject, e)
                errors += 1

    logger.info("Migrated %d attendance stat records, %d errors", migrated, errors)
    return {'migrated': migrated, 'errors': errors}


def migrate_classes_held(local, remote):
    migrated = errors = 0
    for subject, total in local.all().items():
        try:
            remote.put(subject, total or 0)
            migrated += 1
        except StoreError as e:
            logger.error("Error migrating classes held for %s: %s", subject, e)
            errors += 1

    logger.info("Migrated %d classes held records, %d errors", migrated, errors)
    return {'migrated': migrated, 'errors': errors}


def migrate(stats_path=None, client=None):
    client = client or init_supabase()
    return {
        'attendance_stats': migrate_attendance_stats(StatsDB(stats_path), SupabaseStats(client)),
        'classes_held': migrate_classes_held(ClassesHeldDB(stats_path), SupabaseClassesHeld(client)),
    }


def main():
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument('--stats-path', help='Local stats JSON (defaults to STATS_DB_PATH)')
    parser.add_argument('--clear', action='store_true',
                        help='Clear the local data when the migration had no errors')
    args = parser.parse_args()

    setup_logging()
    results = migrate(args.stats_path)

    total_migrated = sum(r['migrated'] for r in results.values())
    total_errors = sum(r['errors'] for r in results.values())
    print(f"Migration complete! Total records migrated: {total_migrated}, errors: {total_errors}")

    if args.clear:
        if total_errors:
            print("Errors occurred, local data kept.")
        else:
            StatsDB(args.stats_path).clear()
            ClassesHeldDB(args.stats_path).clear()
            print("Cleared local stats data.")

    return 1 if total_errors else 0


if __name__ == '__main__':
    raise SystemExit(main())
