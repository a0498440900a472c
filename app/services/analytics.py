"""Marketplace health snapshot for the admin dashboard.

Everything is aggregated in memory from the raw rows of the requested window;
there is no aggregation pushdown. Source fetches are blocking calls, so each one
runs in a worker thread and the fetches of one step overlap. Trend points are
produced with one count query per entity per day, which is fine for windows of
at most 365 days but should become a single group-by-day query on a store that
supports it.
"""

import asyncio
import math
from collections import Counter
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, Iterable, List, Optional

from app.core.config import settings
from app.core.exceptions import StorageError, ValidationError
from app.core.logging import get_logger
from app.models.base import utcnow

logger = get_logger(__name__)

PERIOD_DAYS = {"7d": 7, "30d": 30, "90d": 90, "1y": 365}
PERIODS = tuple(PERIOD_DAYS) + ("all",)

# "all" is bounded to a year of daily points
TREND_DAYS = dict(PERIOD_DAYS, all=365)

TREND_ENTITIES = ("users", "properties", "inquiries")

HEALTH_WEIGHTS = {
    "user_engagement_rate": 0.3,
    "property_verification_rate": 0.3,
    "marketplace_efficiency": 0.2,
    "admin_workload": 0.2,
}


def ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator else 0.0


def percent(numerator: float, denominator: float) -> float:
    return round(ratio(numerator, denominator) * 100, 2)


def distribution(values: Iterable[Optional[str]]) -> Dict[str, int]:
    return dict(Counter(v for v in values if v is not None))


def health_score(health: Dict[str, float]) -> float:
    """Weighted 0-100 score; higher admin workload lowers it."""
    scores = {
        "user_engagement_rate": min(health["user_engagement_rate"] / 10, 100),
        "property_verification_rate": min(health["property_verification_rate"], 100),
        "marketplace_efficiency": min(health["marketplace_efficiency"] * 10, 100),
        "admin_workload": max(0.0, 100 - health["admin_workload"] * 10),
    }
    return round(sum(scores[k] * w for k, w in HEALTH_WEIGHTS.items()), 2)


class AnalyticsAggregator:
    def __init__(self, source, launch_date: Optional[date] = None):
        self.source = source
        self.launch_date = launch_date or settings.PLATFORM_LAUNCH_DATE

    def window_start(self, period: str, now: datetime) -> datetime:
        if period == "all":
            return datetime.combine(self.launch_date, time.min)
        return now - timedelta(days=PERIOD_DAYS[period])

    async def overview(
        self,
        period: str = "30d",
        include_trends: bool = True,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        if period not in PERIODS:
            raise ValidationError(
                "Invalid query parameters",
                [{"field": "period", "message": f"period must be one of {', '.join(PERIODS)}"}],
            )
        now = now or utcnow()
        start = self.window_start(period, now)
        days = max(1, math.ceil((now - start).total_seconds() / 86400))

        try:
            users, properties, inquiries, actions = await asyncio.gather(
                asyncio.to_thread(self.source.fetch_users, start),
                asyncio.to_thread(self.source.fetch_properties, start),
                asyncio.to_thread(self.source.fetch_inquiries, start),
                asyncio.to_thread(self.source.fetch_admin_actions, start),
            )
            trends = await self.trends(period, now) if include_trends else None
            week_ago = now - timedelta(days=7)
            recent_users, recent_properties, recent_inquiries = await asyncio.gather(
                *(self._count(entity, since=week_ago) for entity in TREND_ENTITIES)
            )
        except StorageError:
            logger.error("Analytics overview for period %s aborted: data fetch failed", period)
            raise

        user_metrics = {
            "total_users": len(users),
            "new_users": len(users),
            "user_type_distribution": distribution(u.user_type for u in users),
            # Rough monthly estimate from the window's daily average
            "user_growth_rate": round(ratio(len(users), days) * 30, 2),
        }

        live = sum(1 for p in properties if p.status == "live")
        verified = sum(1 for p in properties if p.verification_status == "verified")
        property_metrics = {
            "total_properties": len(properties),
            "live_properties": live,
            "pending_properties": sum(1 for p in properties if p.status == "pending_verification"),
            "rejected_properties": sum(1 for p in properties if p.status == "rejected"),
            "verified_properties": verified,
            "property_type_distribution": distribution(p.property_type for p in properties),
            "state_distribution": distribution(p.state for p in properties),
            "average_property_price": round(ratio(sum(p.price for p in properties), len(properties)), 2),
            "property_success_rate": percent(live, len(properties)),
        }

        answered = sum(1 for i in inquiries if i.status in ("responded", "closed"))
        on_live = sum(1 for i in inquiries if i.property_status == "live")
        inquiry_metrics = {
            "total_inquiries": len(inquiries),
            "responded_inquiries": sum(1 for i in inquiries if i.status == "responded"),
            "closed_inquiries": sum(1 for i in inquiries if i.status == "closed"),
            "inquiry_response_rate": percent(answered, len(inquiries)),
            "inquiries_on_live_properties": on_live,
        }

        admin_metrics = {
            "total_admin_actions": len(actions),
            "action_type_distribution": distribution(a.action_type for a in actions),
            "admin_productivity": round(ratio(len(actions), days), 2),
        }

        platform_health = {
            "user_engagement_rate": percent(len(inquiries), len(users)),
            "property_verification_rate": percent(verified, len(properties)),
            "marketplace_efficiency": round(ratio(on_live, live), 2),
            "admin_workload": round(len(actions) / max(1, property_metrics["pending_properties"]), 2),
        }

        top_states = sorted(
            property_metrics["state_distribution"].items(),
            key=lambda item: (-item[1], item[0]),
        )[:5]

        return {
            "period": {
                "start_date": start.isoformat(),
                "end_date": now.isoformat(),
                "period_type": period,
            },
            "metrics": {
                "users": user_metrics,
                "properties": property_metrics,
                "inquiries": inquiry_metrics,
                "admin": admin_metrics,
                "platform_health": platform_health,
            },
            "trends": trends,
            "summary": {
                "total_active_users": user_metrics["total_users"],
                "total_live_properties": live,
                "total_inquiries": len(inquiries),
                "platform_health_score": health_score(platform_health),
                "top_performing_states": [{"state": s, "count": c} for s, c in top_states],
                "recent_growth": {
                    "users_last_7_days": recent_users,
                    "properties_last_7_days": recent_properties,
                    "inquiries_last_7_days": recent_inquiries,
                },
            },
        }

    async def trends(self, period: str, now: datetime) -> List[Dict[str, Any]]:
        """Cumulative totals at the end of each day, oldest day first."""
        points = []
        today = now.date()
        for offset in range(TREND_DAYS[period] - 1, -1, -1):
            day = today - timedelta(days=offset)
            until = datetime.combine(day + timedelta(days=1), time.min)
            users, properties, inquiries = await asyncio.gather(
                *(self._count(entity, until=until) for entity in TREND_ENTITIES)
            )
            points.append({
                "date": day.isoformat(),
                "users": users,
                "properties": properties,
                "inquiries": inquiries,
            })
        return points

    def _count(self, entity: str, since: Optional[datetime] = None, until: Optional[datetime] = None):
        return asyncio.to_thread(self.source.count_created, entity, since=since, until=until)
