import argparse

from campus_badges.database.db_manager import DBManager


def up(db_manager: DBManager):
    # Recent-badges lookups order by earned_at per user
    db_manager.execute(
        'CREATE INDEX IF NOT EXISTS idx_user_badges_user_earned '
        'ON user_badges(user_id, earned_at DESC)'
    )


def down(db_manager: DBManager):
    db_manager.execute('DROP INDEX IF EXISTS idx_user_badges_user_earned')
    db_manager.execute(
        'DELETE FROM migrations WHERE filename = %s',
        ('20251104_181502_index_user_badges_recent.py',),
    )


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument('command', choices=['up', 'down'])
    args = parser.parse_args()

    if args.command == 'up':
        with DBManager() as _db:
            up(_db)
    elif args.command == 'down':
        with DBManager() as _db:
            down(_db)


if __name__ == '__main__':
    main()
