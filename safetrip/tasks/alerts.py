from safetrip.core.celery_app import celery_app
from safetrip.core.exceptions import FetchError
from safetrip.core.logging import get_logger
from safetrip.services.session import build_feed_aggregator

logger = get_logger(__name__)


@celery_app.task
def warm_alert_feeds(location: str):
    """Celery task to prefetch every alert source for a location into the feed cache."""
    aggregator = build_feed_aggregator()
    try:
        alerts = aggregator.collect(location)
    except FetchError:
        logger.warning("No alert source answered", extra={"location": location})
        return {"location": location, "alerts": 0, "failed_sources": aggregator.failed_sources}

    return {"location": location, "alerts": len(alerts), "failed_sources": aggregator.failed_sources}
