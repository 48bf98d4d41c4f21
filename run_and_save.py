"""Scrape Zillow listing URLs from the command line and store them.

    python run_and_save.py [--search | --update] https://www.zillow.com/homedetails/... [URL ...]
"""
import argparse
from dotenv import load_dotenv

# Load environment variables from .env
load_dotenv()


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("urls", nargs="+", help="Zillow listing or search result URLs")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--search", action="store_true", help="treat URLs as search result pages")
    mode.add_argument("--update", action="store_true", help="re-scrape listings that are already saved")
    args = parser.parse_args(argv)

    # imported after the environment is prepared; homescore.db reads DATABASE_URL on import
    from homescore import services
    from homescore.db import Base, SessionLocal, engine
    from homescore.scrape import ScrapeError

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    failures = 0
    try:
        for url in args.urls:
            try:
                if args.search:
                    result = services.import_search_results(db, url)
                    print(f"{url}: added {result['added']} of {result['found']}")
                elif args.update:
                    row = services.ingest_listing(db, services.scrape_listing(url))
                    print(f"{url}: updated listing {row.id} ({row.address})")
                else:
                    row = services.add_listing_from_url(db, url)
                    print(f"{url}: saved as listing {row.id} ({row.address})")
            except services.DuplicateListingError:
                print(f"{url}: already saved")
            except (ScrapeError, ValueError) as e:
                failures += 1
                print(f"{url}: failed ({e})")
    finally:
        db.close()
    return 1 if failures else 0


if __name__ == "__main__":
    raise SystemExit(main())
