import structlog

from cowork_booking.logging_config import setup_logging
from cowork_booking.network.client import ApiClient
from cowork_booking.notifications import Notifier
from cowork_booking.services.reconciliation import ReconciliationView
from cowork_booking.session import SessionContext

# Setup logging
setup_logging()
logger = structlog.get_logger(__name__)


def main() -> int:
    """Load the reconciliation view with the persisted session and log its summary."""
    session = SessionContext()
    session.init()
    if not session.is_logged_in():
        logger.error("not_signed_in", path=str(session.path))
        return 1

    view = ReconciliationView(ApiClient(session), Notifier())
    if not view.load():
        logger.error("reconciliation_unavailable", error=view.error)
        return 1

    logger.info(
        "reconciliation_summary",
        pending_payments=len(view.pending_payments()),
        validated_payments=len(view.validated_payments()),
        unpaid_reservations=len(view.unpaid_reservations()),
        invoices=len(view.invoices),
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
