"""Tests for LifecycleObserver."""
import pytest
from datetime import date, datetime, timezone


@pytest.mark.asyncio
class TestLifecycleSweep:
    """Tests for phase and status transitions."""

    async def _binding(self, assignments, catalog, user):
        goal = await catalog.get_goal("wake_6")
        return await assignments.assign_goal(user, goal, date(2024, 3, 1))

    async def test_activate_then_fail(self, db, clock, assignments, catalog, user):
        """Test a never-completed binding activates then fails."""
        from daygoals.models.user_goal import Phase, Status
        from daygoals.services.lifecycle_service import LifecycleObserver

        user_goal = await self._binding(assignments, catalog, user)
        observer = LifecycleObserver(db, clock=clock)

        clock.now = datetime(2024, 3, 1, 1, 30, tzinfo=timezone.utc)
        assert await observer.sweep() == {"activated": 1, "finished": 0}
        current = await assignments.get(user_goal.id)
        assert current.phase == Phase.ACTIVE
        assert current.status == Status.IN_PROGRESS

        clock.now = datetime(2024, 3, 2, 1, 0, tzinfo=timezone.utc)
        assert await observer.sweep() == {"activated": 0, "finished": 1}
        current = await assignments.get(user_goal.id)
        assert current.phase == Phase.FINISHED
        assert current.status == Status.FAILED

    async def test_not_started_stays_planning(self, db, clock, assignments, catalog, user):
        """Test a binding is untouched before its window opens."""
        from daygoals.models.user_goal import Phase
        from daygoals.services.lifecycle_service import LifecycleObserver

        user_goal = await self._binding(assignments, catalog, user)
        clock.now = datetime(2024, 3, 1, 0, 59, 59, tzinfo=timezone.utc)

        await LifecycleObserver(db, clock=clock).sweep()

        assert (await assignments.get(user_goal.id)).phase == Phase.PLANNING

    async def test_activates_exactly_at_start(self, db, clock, assignments, catalog, user):
        """Test the window start itself counts as started."""
        from daygoals.models.user_goal import Phase
        from daygoals.services.lifecycle_service import LifecycleObserver

        user_goal = await self._binding(assignments, catalog, user)
        clock.now = datetime(2024, 3, 1, 1, 0, tzinfo=timezone.utc)

        await LifecycleObserver(db, clock=clock).sweep()

        assert (await assignments.get(user_goal.id)).phase == Phase.ACTIVE

    async def test_complete_binding_stays_complete(self, db, clock, assignments, catalog, user):
        """Test finishing keeps a completed status."""
        from daygoals.models.user_goal import Phase, Status
        from daygoals.services.lifecycle_service import LifecycleObserver

        user_goal = await self._binding(assignments, catalog, user)
        observer = LifecycleObserver(db, clock=clock)

        clock.now = datetime(2024, 3, 1, 1, 30, tzinfo=timezone.utc)
        await observer.sweep()
        await assignments.set_status(user, date(2024, 3, 1), 1)

        clock.now = datetime(2024, 3, 2, 1, 0, tzinfo=timezone.utc)
        await observer.sweep()

        current = await assignments.get(user_goal.id)
        assert current.phase == Phase.FINISHED
        assert current.status == Status.COMPLETE

    async def test_sweep_idempotent(self, db, clock, assignments, catalog, user):
        """Test a second sweep at the same time changes nothing."""
        from daygoals.services.lifecycle_service import LifecycleObserver

        await self._binding(assignments, catalog, user)
        observer = LifecycleObserver(db, clock=clock)
        clock.now = datetime(2024, 3, 2, 1, 0, tzinfo=timezone.utc)

        # Activation and finishing happen in one sweep when both are due
        assert await observer.sweep() == {"activated": 1, "finished": 1}
        after_first = [dict(doc) for doc in db["user_goals"].docs]

        assert await observer.sweep() == {"activated": 0, "finished": 0}
        assert db["user_goals"].docs == after_first

    async def test_row_failure_does_not_stop_sweep(self, db, clock, assignments, catalog, user, rater):
        """Test one failing update is logged and the rest proceed."""
        from daygoals.models.user_goal import Phase
        from daygoals.services.lifecycle_service import LifecycleObserver

        first = await self._binding(assignments, catalog, user)
        second = await self._binding(assignments, catalog, rater)
        clock.now = datetime(2024, 3, 1, 6, 0, tzinfo=timezone.utc)

        collection = db["user_goals"]
        real_update = collection.update_one
        calls = []

        async def flaky_update(*args, **kwargs):
            calls.append(args)
            if len(calls) == 1:
                raise RuntimeError("write failed")
            return await real_update(*args, **kwargs)

        collection.update_one = flaky_update

        observer = LifecycleObserver(db, clock=clock)
        result = await observer.sweep()

        assert result["activated"] == 1
        phases = {(await assignments.get(ug.id)).phase for ug in (first, second)}
        assert phases == {Phase.PLANNING, Phase.ACTIVE}

    async def test_run_once_sweeps(self, db, clock, assignments, catalog, user):
        """Test the periodic entry point runs one sweep."""
        from daygoals.models.user_goal import Phase
        from daygoals.services.lifecycle_service import LifecycleObserver

        user_goal = await self._binding(assignments, catalog, user)
        clock.now = datetime(2024, 3, 1, 1, 30, tzinfo=timezone.utc)

        await LifecycleObserver(db, clock=clock).run_once()

        assert (await assignments.get(user_goal.id)).phase == Phase.ACTIVE

