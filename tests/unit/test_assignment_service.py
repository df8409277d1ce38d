"""Tests for AssignmentService."""
import pytest
from datetime import date, datetime, timezone


DAY = date(2024, 3, 1)


@pytest.mark.asyncio
class TestAssignGoal:
    """Tests for assigning goals."""

    async def test_assign_creates_planning_binding(self, assignments, catalog, user):
        """Test a first assignment creates a planning binding for the day."""
        from daygoals.models.user_goal import Phase, Status

        goal = await catalog.get_goal("wake_6")
        user_goal = await assignments.assign_goal(user, goal, DAY)

        assert user_goal.phase == Phase.PLANNING
        assert user_goal.status == Status.SOON
        assert user_goal.goal_id == "wake_6"
        assert user_goal.starts_at == datetime(2024, 3, 1, 1, 0, tzinfo=timezone.utc)
        assert user_goal.ends_at == datetime(2024, 3, 2, 0, 59, 59, tzinfo=timezone.utc)

    async def test_assign_free_text_persists_goal(self, assignments, catalog, user, db):
        """Test a goal without id is created before binding."""
        from daygoals.models.goal import Goal

        user_goal = await assignments.assign_goal(
            user, Goal(type=2, description="Swim 1km"), DAY
        )

        goal = await catalog.get_goal(user_goal.goal_id)
        assert goal.description == "Swim 1km"
        assert len(db["goals"].docs) == 4

    async def test_reassign_updates_in_place(self, assignments, catalog, user, db):
        """Test repeated assignment for a day keeps exactly one binding."""
        wake_6 = await catalog.get_goal("wake_6")
        wake_10 = await catalog.get_goal("wake_10")

        first = await assignments.assign_goal(user, wake_6, DAY)
        # An instant late in the same local day
        second = await assignments.assign_goal(
            user, wake_10, datetime(2024, 3, 2, 0, 30, tzinfo=timezone.utc)
        )

        assert second.id == first.id
        assert second.goal_id == "wake_10"
        assert len(db["user_goals"].docs) == 1
        assert db["user_goals"].docs[0]["goal_id"] == "wake_10"

    async def test_reassign_keeps_progress(self, assignments, catalog, user, db):
        """Test replacing the goal doesn't reset phase or status."""
        from daygoals.models.goal import Goal
        from daygoals.models.user_goal import Phase, Status

        first = await assignments.assign_goal(user, Goal(type=2, description="Run"), DAY)
        db["user_goals"].docs[0].update({"phase": "active", "status": "complete"})

        second = await assignments.assign_goal(user, Goal(type=2, description="Walk"), DAY)

        assert second.id == first.id
        assert second.phase == Phase.ACTIVE
        assert second.status == Status.COMPLETE

    async def test_no_duplicates_across_many_assignments(self, assignments, user, db):
        """Test any sequence of assignments leaves one binding per type and day."""
        from daygoals.models.goal import Goal

        for i in range(5):
            for type_id in (2, 3):
                await assignments.assign_goal(
                    user, Goal(type=type_id, description=f"goal {i}"), DAY
                )
        await assignments.assign_goal(user, Goal(type=2, description="tomorrow"), date(2024, 3, 2))

        today = await assignments.user_goals_for_day(user, DAY)
        assert sorted(ug.type for ug in today) == [2, 3]
        assert {ug.goal_id for ug in today} == {
            doc["goal_id"] for doc in db["user_goals"].docs if doc["starts_at"].day == 1
        }
        assert len(db["user_goals"].docs) == 3

    async def test_days_are_separate(self, assignments, catalog, user):
        """Test bindings of adjacent days don't overlap."""
        goal = await catalog.get_goal("wake_8")
        await assignments.assign_goal(user, goal, DAY)
        await assignments.assign_goal(user, goal, date(2024, 3, 2))

        assert len(await assignments.user_goals_for_day(user, DAY)) == 1
        assert await assignments.count_for_day(user, date(2024, 3, 2)) == 1
        assert await assignments.count_for_day(user, date(2024, 3, 3)) == 0

    async def test_days_separate_across_spring_forward(self, assignments, users, db):
        """Test a 23-hour local day doesn't absorb the next day's binding."""
        from daygoals.models.goal import Goal
        from daygoals.models.user import UserCreate

        berlin = await users.register_user(
            UserCreate(id=303, first_name="Jonas", city="Berlin", timezone="Europe/Berlin")
        )

        saturday = await assignments.assign_goal(
            berlin, Goal(type=2, description="run"), date(2024, 3, 30)
        )
        sunday = await assignments.assign_goal(
            berlin, Goal(type=2, description="swim"), date(2024, 3, 31)
        )

        assert sunday.id != saturday.id
        assert sunday.starts_at == datetime(2024, 3, 31, 4, 0, tzinfo=timezone.utc)
        assert len(db["user_goals"].docs) == 2
        assert (await assignments.get_by_type(berlin, date(2024, 3, 30), 2)).goal_id == saturday.goal_id
        assert await assignments.count_for_day(berlin, date(2024, 3, 31)) == 1
        assert await assignments.count_for_day(berlin, date(2024, 4, 1)) == 0


@pytest.mark.asyncio
class TestSetStatus:
    """Tests for toggling completion."""

    async def test_toggle_complete_and_back(self, assignments, catalog, user):
        """Test status toggles between complete and in progress."""
        from daygoals.models.user_goal import Status

        await assignments.assign_goal(user, await catalog.get_goal("wake_6"), DAY)

        await assignments.set_status(user, DAY, 1)
        assert (await assignments.get_by_type(user, DAY, 1)).status == Status.COMPLETE

        await assignments.set_status(user, DAY, 1)
        assert (await assignments.get_by_type(user, DAY, 1)).status == Status.IN_PROGRESS

    async def test_toggle_other_type_untouched(self, assignments, catalog, user):
        """Test only the requested category changes."""
        from daygoals.models.goal import Goal
        from daygoals.models.user_goal import Status

        await assignments.assign_goal(user, await catalog.get_goal("wake_6"), DAY)
        await assignments.assign_goal(user, Goal(type=2, description="Run"), DAY)

        await assignments.set_status(user, DAY, 2)

        assert (await assignments.get_by_type(user, DAY, 1)).status == Status.SOON
        assert (await assignments.get_by_type(user, DAY, 2)).status == Status.COMPLETE


@pytest.mark.asyncio
class TestRejectAndLookup:
    """Tests for deletion and read accessors."""

    async def test_reject_goal(self, assignments, catalog, user):
        """Test rejecting hard deletes the binding."""
        user_goal = await assignments.assign_goal(user, await catalog.get_goal("wake_6"), DAY)

        result = await assignments.reject_goal(user_goal.id)

        assert result == {"deleted_count": 1}
        assert await assignments.get(user_goal.id) is None

    async def test_reject_invalid_id(self, assignments):
        """Test malformed ids raise ValueError."""
        with pytest.raises(ValueError, match="Invalid user goal ID"):
            await assignments.reject_goal("not-an-id")

    async def test_get_invalid_id(self, assignments):
        """Test malformed ids read as absent."""
        assert await assignments.get("not-an-id") is None

    async def test_get_by_type_missing(self, assignments, user):
        """Test no binding reads as None."""
        assert await assignments.get_by_type(user, DAY, 1) is None


@pytest.mark.asyncio
class TestCheckDate:
    """Tests for day completeness."""

    async def test_partial_day_incomplete(self, assignments, catalog, user):
        """Test a day covering only some types is not complete."""
        from daygoals.models.goal import Goal

        await assignments.assign_goal(user, await catalog.get_goal("wake_6"), DAY)
        await assignments.assign_goal(user, Goal(type=2, description="Run"), DAY)

        assert await assignments.check_date(user, DAY) is False

    async def test_full_day_complete(self, assignments, catalog, user):
        """Test a day covering every type is complete."""
        from daygoals.models.goal import Goal

        await assignments.assign_goal(user, await catalog.get_goal("wake_6"), DAY)
        await assignments.assign_goal(user, Goal(type=2, description="Run"), DAY)
        await assignments.assign_goal(user, Goal(type=3, description="Read"), DAY)

        assert await assignments.check_date(user, DAY) is True
