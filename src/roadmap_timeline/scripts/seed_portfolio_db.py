"""
Seed the app DB with the sample roadmap portfolio.

Usage (from repo root):
  PYTHONPATH=src python -m roadmap_timeline.scripts.seed_portfolio_db

Or via API (after starting backend):
  curl -X POST "http://localhost:8010/api/v1/timeline/seed"

After seeding, the project list and task listing are served from the DB.
"""

import logging
import sys

from roadmap_timeline.services.portfolio_service import seed_sample_portfolio

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main() -> int:
    logger.info("Seeding sample portfolio")
    result = seed_sample_portfolio()
    logger.info("Upserted %d projects and %d tasks", result["projects_seeded"], result["tasks_seeded"])
    return 0


if __name__ == "__main__":
    sys.exit(main())
