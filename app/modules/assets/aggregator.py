import logging
import uuid
from sqlalchemy.ext.asyncio import AsyncSession
from app.modules.assets.repository import AssetRepository, AssetGroupRepository

log = logging.getLogger(__name__)

class GroupSizeAggregator:
    """Keeps AssetGroup.total_size equal to the sum of its members' sizes.

    Every refresh re-reads the full member set, so duplicated or reordered
    triggers converge on the right total.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.assets = AssetRepository(session)
        self.groups = AssetGroupRepository(session)

    async def recompute(self, group_id: uuid.UUID) -> int:
        total = await self.assets.sum_sizes(group_id)
        await self.groups.set_total_size(group_id, total)
        return total

    async def refresh(self, *group_ids: uuid.UUID | None) -> dict[uuid.UUID, int]:
        """Recompute and commit each distinct non-null group.

        Runs after the triggering mutation has committed; a failure is logged
        and rolled back without touching that mutation.
        """
        done: dict[uuid.UUID, int] = {}
        for group_id in dict.fromkeys(g for g in group_ids if g is not None):
            try:
                done[group_id] = await self.recompute(group_id)
                await self.session.commit()
            except Exception:
                log.exception("Failed to recompute total size for asset group %s", group_id)
                await self.session.rollback()
        return done

    async def reconcile(self, user_id: uuid.UUID | None = None) -> dict[uuid.UUID, int]:
        """Recompute every group (optionally one user's); the recovery path for missed refreshes."""
        group_ids = await self.groups.ids(user_id)
        totals = await self.refresh(*group_ids)
        log.info("Reconciled %s/%s asset group sizes", len(totals), len(group_ids))
        return totals
