"""CLI script to fill the local database with demo users, items, bids and questions.
Usage: python scripts/seed_demo.py [--password PASSWORD]
"""
import sys
import argparse
import pathlib
# Ensure `backend/` is on sys.path so `auction` package imports work when running this script directly
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
from sqlmodel import Session
from auction.database import engine, create_db_and_tables
from auction.errors import AuctionError
from auction import repositories, services

DEMO_USERS = [
    ('Ada', 'Seller', 'seller@example.com'),
    ('Bob', 'Buyer', 'buyer@example.com'),
    ('Cy', 'Bidder', 'bidder@example.com'),
]

DEMO_ITEMS = [
    ('Vintage camera', 'Working 35mm film camera with leather case', 50, 3 * 24 * 3600),
    ('Oak desk', 'Solid oak writing desk, minor scratches', 120, 7 * 24 * 3600),
]


def main(password: str):
    """Create the demo rows through the services, skipping users that already exist.

    Progress is printed to stdout for a quick CLI feedback loop.
    """
    create_db_and_tables()
    with Session(engine) as session:
        auth = services.AuthService(session)
        user_repo = repositories.UserRepository(session)
        users = []
        for first, last, email in DEMO_USERS:
            existing = user_repo.get_by_email(email)
            if existing:
                print(f'User exists: {email} (id {existing.user_id})')
                users.append(existing)
                continue
            u = auth.register(first, last, email, password)
            print(f'Created user {email} (id {u.user_id})')
            users.append(u)
        seller, buyer, bidder = users
        items_svc = services.ItemService(session)
        bids_svc = services.BidService(session)
        questions_svc = services.QuestionService(session)
        now = services.now_ts()
        for name, description, starting_bid, duration in DEMO_ITEMS:
            item = items_svc.create_item(seller, name, description, starting_bid, now + duration)
            print(f'Listed {name!r} (id {item.item_id})')
            try:
                bids_svc.place_bid(buyer, item.item_id, starting_bid + 10)
                bids_svc.place_bid(bidder, item.item_id, starting_bid + 25)
            except AuctionError as e:
                print(f'Bid rejected on item {item.item_id}: {e.message}')
            q = questions_svc.ask(buyer, item.item_id, f'Is the {name.lower()} still available for pickup?')
            questions_svc.answer(seller, q.question_id, 'Yes, pickup any weekday.')
        print(f'Demo data ready; log in with any demo email and password {password!r}')


if __name__ == '__main__':
    parser = argparse.ArgumentParser()
    parser.add_argument('--password', default='demo-password', help='Password given to every demo user')
    args = parser.parse_args()
    main(password=args.password)
