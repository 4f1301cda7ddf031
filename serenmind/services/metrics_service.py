import asyncio
import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Set

from pymongo.errors import PyMongoError

from serenmind import config
from serenmind.db.database import get_metrics_collection
from serenmind.models.metrics import (
    MentalMetric, MentalMetricCreate, MoodTrendPoint, WellnessMetrics, round_half_up
)

logger = logging.getLogger(__name__)

DISTRESS_TOPICS = ("stress", "anxiety", "depression")
TOP_TOPIC_COUNT = 4


def aggregate_metrics(records: Iterable[dict]) -> WellnessMetrics:
    """Tally topic labels across metric records into per-topic percentages.

    A record only counts toward ``total_entries`` when its ``topics`` is a
    list, and a label is counted once per record. Percentages are computed
    independently per topic, so their sum can exceed 100.
    """
    counts: Dict[str, int] = {}
    total_entries = 0
    trend: List[MoodTrendPoint] = []

    for record in records:
        topics = record.get("topics")
        if not isinstance(topics, list):
            continue
        total_entries += 1
        for topic in dict.fromkeys(topics):
            counts[topic] = counts.get(topic, 0) + 1

        if record.get("timestamp") is not None and record.get("mood_score") is not None:
            trend.append(MoodTrendPoint(timestamp=record["timestamp"], mood_score=record["mood_score"]))

    if total_entries == 0:
        return WellnessMetrics()

    percentages = {
        topic: round_half_up(count / total_entries * 100)
        for topic, count in counts.items()
    }
    top_topics = [
        topic for topic, _ in sorted(percentages.items(), key=lambda kv: (-kv[1], kv[0]))
    ][:TOP_TOPIC_COUNT]
    trend.sort(key=lambda p: p.timestamp)

    return WellnessMetrics(
        topics=counts,
        percentages=percentages,
        total_entries=total_entries,
        top_topics=top_topics,
        wellness_score=wellness_score(percentages, total_entries),
        mood_trend=trend,
    )


def wellness_score(percentages: Dict[str, int], total_entries: int) -> int:
    if total_entries == 0:
        return 0
    distress = [percentages[t] for t in DISTRESS_TOPICS if t in percentages]
    if not distress:
        return 100
    return max(0, min(100, round_half_up(100 - sum(distress) / len(distress))))


def save_mental_metric(user_id: str, data: MentalMetricCreate) -> MentalMetric:
    """Append one metric record. Score clamping and the topic sentinel are
    applied by ``MentalMetricCreate`` before anything is written."""
    doc = {
        "user_id": user_id,
        "mood_score": data.mood_score,
        "sentiment": data.sentiment,
        "topics": data.topics,
        "timestamp": datetime.now(timezone.utc).replace(tzinfo=None),
    }
    result = get_metrics_collection().insert_one(doc)
    doc["_id"] = result.inserted_id
    logger.info("Saved mental metric %s for user %s", result.inserted_id, user_id)
    return MentalMetric(**doc)


def fetch_metrics(user_id: str) -> List[dict]:
    cursor = get_metrics_collection().find({"user_id": user_id}).sort("timestamp", 1)
    return list(cursor)


def get_wellness_metrics(user_id: str) -> WellnessMetrics:
    return aggregate_metrics(fetch_metrics(user_id))


class MetricsSubscription:
    """Async iterator of aggregate snapshots for one user, owned by the auth
    session (jti) that opened it.

    Polls the metrics collection and yields a snapshot whenever the aggregate
    changes; the first snapshot is always yielded. Query failures are yielded
    as ``{"error": ...}`` snapshots. Iteration ends once ``close()`` is called.
    """

    def __init__(self, user_id: str, session_id: Optional[str] = None, poll_seconds: Optional[float] = None):
        self.user_id = user_id
        self.session_id = session_id
        self.poll_seconds = config.METRICS_POLL_SECONDS if poll_seconds is None else poll_seconds
        self._closed = asyncio.Event()
        self._last: Optional[dict] = None
        self._started = False

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def close(self) -> None:
        if not self._closed.is_set():
            self._closed.set()
            _unregister(self)

    def __aiter__(self):
        return self

    async def __anext__(self) -> dict:
        while True:
            if self._closed.is_set():
                raise StopAsyncIteration
            if self._started:
                try:
                    await asyncio.wait_for(self._closed.wait(), timeout=self.poll_seconds)
                    raise StopAsyncIteration
                except asyncio.TimeoutError:
                    pass
            self._started = True

            snapshot = self._snapshot()
            if snapshot != self._last:
                self._last = snapshot
                return snapshot

    def _snapshot(self) -> dict:
        try:
            return get_wellness_metrics(self.user_id).model_dump(mode="json")
        except PyMongoError as e:
            logger.warning("Metrics subscription for %s failed: %s", self.user_id, e)
            return {"error": str(e)}


# Open streams keyed by the auth session (jti) that owns them
_subscriptions: Dict[str, Set[MetricsSubscription]] = {}


def open_subscription(user_id: str, session_id: str, poll_seconds: Optional[float] = None) -> MetricsSubscription:
    subscription = MetricsSubscription(user_id, session_id, poll_seconds)
    _subscriptions.setdefault(session_id, set()).add(subscription)
    return subscription


def _unregister(subscription: MetricsSubscription) -> None:
    subs = _subscriptions.get(subscription.session_id)
    if subs is None:
        return
    subs.discard(subscription)
    if not subs:
        _subscriptions.pop(subscription.session_id, None)


def close_session_subscriptions(session_id: str) -> int:
    subs = list(_subscriptions.get(session_id, ()))
    for subscription in subs:
        subscription.close()
    return len(subs)
