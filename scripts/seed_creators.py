#!/usr/bin/env python3
"""
Seed local creator data for trying the dashboard API.

Loads a dozen travel/lifestyle creators through the import pipeline, then
adds a few near-duplicates so the duplicate scanner has something to find:
  1. Case-variant username (same account imported twice with different casing)
  2. Renamed account (new username, same Instagram pk)

Usage:
    python scripts/seed_creators.py          # seed
    python scripts/seed_creators.py --clear  # wipe seeded rows first

Requires: DATABASE_URL set (or defaults to sqlite:///local.db).
"""
import sys
import os
import argparse

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from creator_scout import create_app
from creator_scout.database import engine, Base
from creator_scout.importer.pipeline import import_records
from creator_scout.store import SqlCreatorStore, DuplicateUsernameError


SEED_SOURCE = 'seed'

# Import rows deliberately use mixed field spellings
CREATORS = [
    {'username': 'wanderlust_jane',    'name': 'Jane Morrison',    'followers': '82000',  'category': 'Travel',    'pk': '1001', 'bio': 'Slow travel #travel #europe'},
    {'username': 'trail_blazer_mik',   'fullName': 'Mik Andersen', 'followerCount': 45000, 'category': 'Travel',   'pk': '1002', 'bio': 'Hiking everywhere #hiking'},
    {'Username': 'nomad.sophie',       'Name': 'Sophie Laurent',   'followers': 120000,   'category': 'Travel',    'pk': '1003', 'verified': 'true'},
    {'username': 'adventurecalling',   'full_name': 'Carlos Reyes', 'follower_count': 34000, 'category': 'Travel', 'pk': '1004'},
    {'username': 'explore_with_priya', 'name': 'Priya Sharma',     'followers': 67000,    'category': 'Travel',    'pk': '1005', 'engagementRate': 4.1},
    {'username': 'thebackpackdiaries', 'name': "Liam O'Brien",     'followers': 29000,    'category': 'Travel',    'pk': '1006'},
    {'username': 'travelwithtam',      'name': 'Tamara Johansson', 'followers': 51000,    'category': 'Travel',    'pk': '1007', 'business': 'yes'},
    {'username': 'sunsetseeker_',      'name': 'Aisha Mohammed',   'followers': 15000,    'category': 'Lifestyle', 'pk': '1008'},
    {'username': 'roam.and.rest',      'name': 'Emma Chen',        'followers': 22000,    'category': 'Wellness',  'pk': '1009', 'bio': 'Rest is productive @calm #wellness'},
    {'username': 'passportpages',      'name': 'Derek Williams',   'followers': 8000,     'category': 'Travel',    'pk': '1010'},
    {'username': 'coastal_vibes_co',   'name': 'Natalia Torres',   'followers': 95000,    'category': 'Travel',    'pk': '1011'},
    {'username': 'hike.eat.repeat',    'name': 'Jonas Müller',     'followers': 41000,    'category': 'Fitness',   'pk': '1012'},
]

DUPLICATES = [
    {'username': 'Wanderlust_Jane', 'full_name': 'Jane Morrison', 'follower_count': 79000, 'pk': '1001'},
    {'username': 'coastalvibes.co', 'full_name': 'Natalia Torres', 'follower_count': 96500, 'pk': '1011'},
]


def seed(store):
    rows = [{**row, 'source': SEED_SOURCE} for row in CREATORS]
    result = import_records(store, rows, on_progress=lambda pct: print(f'  {pct}%'))
    print(result.summary())

    for row in DUPLICATES:
        try:
            store.create({**row, 'source_keyword': SEED_SOURCE})
        except DuplicateUsernameError:
            print(f"  {row['username']} already present, skipping")


def clear_seeded_data(store):
    seeded = [c['id'] for c in store.query() if c['source_keyword'] == SEED_SOURCE]
    removed = store.delete_by_ids(seeded)
    print(f'Cleared {removed} seeded creators.')


def main():
    parser = argparse.ArgumentParser(description='Seed creator data for local testing')
    parser.add_argument('--clear', action='store_true', help='Clear seeded creators before seeding')
    parser.add_argument('--clear-only', action='store_true', help='Only clear, do not re-seed')
    args = parser.parse_args()

    app = create_app()
    with app.app_context():
        # Ensure tables exist (for SQLite local dev)
        Base.metadata.create_all(engine)
        store = SqlCreatorStore()

        if args.clear or args.clear_only:
            clear_seeded_data(store)
            if args.clear_only:
                return

        print('Seeding creators...')
        seed(store)
        print('\nDone! Try GET /api/duplicates to see the seeded duplicate groups.')


if __name__ == '__main__':
    main()
