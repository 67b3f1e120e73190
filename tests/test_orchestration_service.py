"""
Tests for the insight pipeline: persistence, cooldown and the action lifecycle.
"""
from datetime import timedelta

import pytest
from fastapi import HTTPException

from zeno_backend.db.enums import ActionImpact, ActionStatus
from zeno_backend.models import Action, Insight
from zeno_backend.services.orchestration_service import InsightOrchestrationService

from conftest import seed_typical_user


@pytest.fixture
async def seeded_user(db_session, user, now):
    await seed_typical_user(db_session, user.id, now)
    return user


@pytest.fixture
def service(db_session, session_factory, seeded_user):
    return InsightOrchestrationService(db_session, seeded_user.id, session_factory)


class TestGenerateAndSaveInsight:

    async def test_persists_insight_actions_and_snapshot(self, service, db_session, seeded_user, now):
        insight = await service.generate_and_save_insight(now=now)
        await db_session.commit()

        assert insight.id is not None
        assert insight.user_id == seeded_user.id
        assert insight.created_at == now
        assert insight.confidence == 0.90
        assert insight.summary.startswith("Your net worth is $1,950, which is a solid foundation.")
        assert insight.watch_outs == [
            "1 bill(s) totaling $120 due within 5 days.",
            "Consider building an emergency fund to cover unexpected expenses.",
        ]
        assert [item["day"] for item in insight.week_plan][0] == "Monday"
        assert len(insight.week_plan) == 7

        assert insight.data_snapshot["net_worth"] == pytest.approx(1950.05)
        assert insight.data_snapshot["upcoming_bills"][0]["name"] == "Electric"

        assert [a.priority for a in insight.actions] == [1, 2, 3]
        assert all(a.status == ActionStatus.PENDING for a in insight.actions)
        assert all(a.completed_at is None and a.dismissed_at is None for a in insight.actions)
        assert all(a.insight_id == insight.id for a in insight.actions)
        assert insight.actions[0].estimated_impact == ActionImpact.HIGH

    async def test_reloaded_from_a_fresh_session(self, service, db_session, session_factory, seeded_user, now):
        insight = await service.generate_and_save_insight(now=now)
        await db_session.commit()

        async with session_factory() as fresh:
            reloaded = await InsightOrchestrationService(fresh, seeded_user.id).get_insight(insight.id)

            assert reloaded.summary == insight.summary
            assert reloaded.data_snapshot == insight.data_snapshot
            assert [a.title for a in reloaded.actions] == [a.title for a in insight.actions]

    async def test_cooldown(self, service, db_session, now):
        await service.generate_and_save_insight(now=now)
        await db_session.commit()

        with pytest.raises(HTTPException) as exc_info:
            await service.generate_and_save_insight(now=now + timedelta(minutes=30))

        assert exc_info.value.status_code == 429
        assert exc_info.value.detail == "Please wait before generating a new insight"

        later = await service.generate_and_save_insight(now=now + timedelta(minutes=61))
        await db_session.commit()

        assert later.id is not None

    async def test_cooldown_is_per_user(self, service, db_session, other_user, now):
        await service.generate_and_save_insight(now=now)
        await db_session.commit()

        other = await InsightOrchestrationService(db_session, other_user.id).generate_and_save_insight(now=now)

        assert other.user_id == other_user.id
        # No records at all: emergency fund goal plus savings automation (0% rate)
        assert [a.priority for a in other.actions] == [3, 5]

    async def test_custom_cooldown(self, db_session, seeded_user, now):
        service = InsightOrchestrationService(db_session, seeded_user.id, cooldown=timedelta(0))

        await service.generate_and_save_insight(now=now)
        await service.generate_and_save_insight(now=now + timedelta(seconds=1))

        assert len(await service.list_insights()) == 2


class TestInsightReads:

    async def test_list_newest_first_with_limit(self, service, db_session, now):
        for hours in range(3):
            await service.generate_and_save_insight(now=now + timedelta(hours=hours))
            await db_session.commit()

        insights = await service.list_insights(limit=2)

        assert [i.created_at for i in insights] == [now + timedelta(hours=2), now + timedelta(hours=1)]
        assert all(len(i.actions) == 3 for i in insights)

    async def test_get_other_users_insight_is_not_found(self, service, db_session, other_user, now):
        insight = await service.generate_and_save_insight(now=now)
        await db_session.commit()

        with pytest.raises(HTTPException) as exc_info:
            await InsightOrchestrationService(db_session, other_user.id).get_insight(insight.id)

        assert exc_info.value.status_code == 404
        assert exc_info.value.detail == "Insight not found"

    async def test_get_missing_insight(self, service):
        with pytest.raises(HTTPException) as exc_info:
            await service.get_insight(9999)

        assert exc_info.value.status_code == 404


class TestActionLifecycle:

    async def _first_action(self, service, db_session, now) -> Action:
        insight: Insight = await service.generate_and_save_insight(now=now)
        await db_session.commit()
        return insight.actions[0]

    async def test_complete_stamps_once(self, service, db_session, now):
        action = await self._first_action(service, db_session, now)

        updated = await service.update_action(action.id, ActionStatus.COMPLETED, now=now + timedelta(hours=1))
        assert updated.status == ActionStatus.COMPLETED
        assert updated.completed_at == now + timedelta(hours=1)
        assert updated.dismissed_at is None

        again = await service.update_action(action.id, ActionStatus.COMPLETED, now=now + timedelta(hours=5))
        assert again.completed_at == now + timedelta(hours=1)

    async def test_dismiss(self, service, db_session, now):
        action = await self._first_action(service, db_session, now)

        updated = await service.update_action(action.id, ActionStatus.DISMISSED, now=now + timedelta(minutes=5))

        assert updated.status == ActionStatus.DISMISSED
        assert updated.dismissed_at == now + timedelta(minutes=5)
        assert updated.completed_at is None

    async def test_in_progress_sets_no_stamp(self, service, db_session, now):
        action = await self._first_action(service, db_session, now)

        updated = await service.update_action(action.id, ActionStatus.IN_PROGRESS, now=now)

        assert updated.status == ActionStatus.IN_PROGRESS
        assert updated.completed_at is None
        assert updated.dismissed_at is None

    async def test_update_other_users_action_is_not_found(self, service, db_session, other_user, now):
        action = await self._first_action(service, db_session, now)

        with pytest.raises(HTTPException) as exc_info:
            await InsightOrchestrationService(db_session, other_user.id).update_action(action.id, ActionStatus.COMPLETED)

        assert exc_info.value.status_code == 404
        assert exc_info.value.detail == "Action not found"

    async def test_list_actions_with_counts_and_filter(self, service, db_session, now):
        action = await self._first_action(service, db_session, now)
        await service.update_action(action.id, ActionStatus.COMPLETED, now=now)
        await db_session.commit()

        everything = await service.list_actions()
        assert [a.priority for a in everything["actions"]] == [1, 2, 3]
        assert everything["counts"] == {"PENDING": 2, "COMPLETED": 1}

        pending = await service.list_actions(action_status=ActionStatus.PENDING)
        assert [a.priority for a in pending["actions"]] == [2, 3]
        # Counts always cover every status
        assert pending["counts"] == everything["counts"]

        limited = await service.list_actions(limit=1)
        assert len(limited["actions"]) == 1
