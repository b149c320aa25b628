"""Billable rate resolution by scope specificity.
Also carries the rate administration operations.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from app.domain.models.base import utcnow, as_utc, new_id
from app.domain.models.billable_rate import BillableRate
from app.domain.models.settings import TimeTrackingSettings
from app.domain.repositories.billable_rate_repository import BillableRateRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScopeRule:
    """One precedence tier: the exact set of scope fields a rate must carry."""

    tier: int
    user: bool
    project: bool
    task_type: bool

    def applies_to(self, rate: BillableRate) -> bool:
        return (
            (rate.user_id is not None) == self.user
            and (rate.project_id is not None) == self.project
            and (rate.task_type_id is not None) == self.task_type
        )


# Most specific first.
PRECEDENCE: Tuple[ScopeRule, ...] = (
    ScopeRule(1, user=True, project=True, task_type=True),
    ScopeRule(2, user=True, project=True, task_type=False),
    ScopeRule(3, user=True, project=False, task_type=True),
    ScopeRule(4, user=False, project=True, task_type=True),
    ScopeRule(5, user=True, project=False, task_type=False),
    ScopeRule(6, user=False, project=True, task_type=False),
    ScopeRule(7, user=False, project=False, task_type=True),
)


def rate_tier(rate: BillableRate) -> Optional[int]:
    for rule in PRECEDENCE:
        if rule.applies_to(rate):
            return rule.tier
    return None


def pick_rate(
    candidates: List[BillableRate],
    user_id: Optional[str],
    project_id: Optional[str],
    task_type_id: Optional[str],
    moment: datetime,
) -> Optional[BillableRate]:
    """
    Choose the single applicable rate. Within a tier the latest
    effective_from wins, then the highest id.
    """
    ranked = []
    for rate in candidates:
        if not rate.matches(user_id, project_id, task_type_id):
            continue
        if not rate.is_effective_at(moment):
            continue
        tier = rate_tier(rate)
        if tier is None:
            continue
        ranked.append((tier, rate))

    if not ranked:
        return None

    best_tier = min(tier for tier, _ in ranked)
    in_tier = [rate for tier, rate in ranked if tier == best_tier]
    return max(in_tier, key=lambda r: (as_utc(r.effective_from), r.id or ""))


class RateResolver:
    """
    Resolves the hourly rate applicable to a (user, project, task type)
    combination at the current moment.
    """

    def __init__(
        self,
        rate_repository: BillableRateRepository,
        clock: Callable[[], datetime] = utcnow,
        default_currency: str = "USD",
    ):
        self.rate_repository = rate_repository
        self.clock = clock
        self.default_currency = default_currency

    async def resolve(
        self,
        user_id: Optional[str],
        project_id: Optional[str],
        task_type_id: Optional[str] = None,
    ) -> Optional[BillableRate]:
        candidates = await self.rate_repository.find_candidates(user_id, project_id, task_type_id)
        rate = pick_rate(candidates, user_id, project_id, task_type_id, self.clock())
        if rate is None:
            logger.debug(
                f"No billable rate for user={user_id} project={project_id} task_type={task_type_id}"
            )
        return rate

    async def resolve_hourly_rate(
        self,
        user_id: str,
        project_id: Optional[str],
        task_type_id: Optional[str],
        settings: TimeTrackingSettings,
    ) -> Optional[float]:
        """Resolved rate, else the user's positive default rate, else None."""
        rate = await self.resolve(user_id, project_id, task_type_id)
        if rate is not None:
            return rate.hourly_rate
        if settings.default_billable_rate and settings.default_billable_rate > 0:
            return settings.default_billable_rate
        return None

    async def list_rates(
        self,
        user_id: Optional[str] = None,
        project_id: Optional[str] = None,
        task_type_id: Optional[str] = None,
    ) -> List[BillableRate]:
        return await self.rate_repository.list_rates(user_id, project_id, task_type_id)

    async def create_rate(
        self,
        hourly_rate: float,
        effective_from: Optional[datetime] = None,
        effective_to: Optional[datetime] = None,
        currency: Optional[str] = None,
        user_id: Optional[str] = None,
        project_id: Optional[str] = None,
        task_type_id: Optional[str] = None,
    ) -> BillableRate:
        now = self.clock()
        rate = BillableRate(
            id=new_id(),
            hourly_rate=hourly_rate,
            currency=(currency or self.default_currency).upper(),
            effective_from=as_utc(effective_from) or now,
            effective_to=as_utc(effective_to),
            user_id=user_id,
            project_id=project_id,
            task_type_id=task_type_id,
            created_at=now,
            updated_at=now,
        )
        rate.validate()

        saved = await self.rate_repository.add(rate)
        logger.info(
            f"Created billable rate {saved.id} tier={rate_tier(saved)} "
            f"{saved.hourly_rate} {saved.currency}"
        )
        return saved
