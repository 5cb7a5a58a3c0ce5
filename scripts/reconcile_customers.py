"""Re-derive every customer's last_purchase from their embedded sales.

Usage:
    python scripts/reconcile_customers.py
"""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from bookkeeper.core.database import session_scope
from bookkeeper.services.customer_service import reconcile_all_customers
from bookkeeper.logger_config import logger


def main() -> int:
    logger.info("Reconciling customer last purchase dates...")
    with session_scope() as db:
        corrected = reconcile_all_customers(db)
    logger.info(f"Done. {corrected} customers corrected.")
    return corrected


if __name__ == "__main__":
    main()
