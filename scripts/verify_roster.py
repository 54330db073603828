"""Print the enrolled roster from the configured store backend."""
import argparse
import time
from collections import Counter

from config import settings
from core.errors import StoreError
from database import open_stores


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument('--backend', choices=['supabase', 'local'], default=None,
                        help=f"Store backend (default: {settings.STORE_BACKEND})")
    parser.add_argument('--insert-dummy', action='store_true',
                        help='Insert a dummy 128-float sample to check write access')
    args = parser.parse_args()

    roster = open_stores(args.backend).roster

    if args.insert_dummy:
        name = f"Test Student {int(time.time() * 1000)}"
        print(f"Attempting to insert dummy student {name!r}...")
        try:
            roster.add_embedding(name, [0.1] * settings.EMBEDDING_SIZE)
        except StoreError as e:
            print(f"Insert failed: {e}")
            return 1
        print("Insert successful.")

    try:
        pairs = roster.list_embeddings()
    except StoreError as e:
        print(f"Error: {e}")
        return 1

    counts = Counter(name for name, _ in pairs)
    print(f"Found {len(counts)} student(s), {len(pairs)} sample(s):")
    for name, n in counts.items():
        print(f"  {name:<30} {n} sample(s)")
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
