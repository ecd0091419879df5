"""End-to-end tests through the FastAPI app with an in-memory database."""

import uuid
from datetime import date

from chorecycle.core.exceptions import DatabaseError
from chorecycle.crud.completion import crud_completion
from chorecycle.models import Completion, CompletionStatus, ScheduleEntry

from conftest import auth_headers, make_activity, schedule

DAY = "2025-01-20"


def daily(client, user, **params):
    params.setdefault("date", DAY)
    return client.get("/daily-tasks", params=params, headers=auth_headers(user))


# ---------------------------------------------------------------------------
# Auth and health
# ---------------------------------------------------------------------------


class TestAuth:
    def test_health_is_public(self, client):
        assert client.get("/health").json() == {"status": "healthy"}

    def test_missing_token(self, client, alice):
        response = client.get("/daily-tasks", params={"date": DAY})
        assert response.status_code in (401, 403)

    def test_bad_token(self, client, alice):
        response = client.get(
            "/daily-tasks",
            params={"date": DAY},
            headers={"Authorization": "Bearer not-a-token"},
        )
        assert response.status_code == 401

    def test_me(self, client, alice):
        response = client.get("/users/me", headers=auth_headers(alice))
        assert response.status_code == 200
        assert response.json()["display_name"] == "Alice"


# ---------------------------------------------------------------------------
# GET /daily-tasks
# ---------------------------------------------------------------------------


class TestDailyTasksEndpoint:
    def test_missing_date(self, client, alice):
        response = client.get("/daily-tasks", headers=auth_headers(alice))
        assert response.status_code == 400
        assert "date" in response.json()["detail"]

    def test_malformed_date(self, client, alice):
        assert daily(client, alice, date="20-01-2025").status_code == 400

    def test_envelope_and_order(self, client, db, alice, family):
        for name, category in [("Zeta", "Downtime"), ("Apple", "Brain"), ("Banana", "Home")]:
            schedule(db, make_activity(db, name, category, user_id=alice.id), 1, 0, user=alice)

        body = daily(client, alice).json()

        assert body["date"] == DAY
        assert body["week_of_cycle"] == 3
        assert body["day_of_week"] == 0
        assert [t["activity"]["name"] for t in body["tasks"]] == ["Banana", "Apple", "Zeta"]
        assert all(t["completion"] is None for t in body["tasks"])
        assert all(t["user"]["id"] == str(alice.id) for t in body["tasks"])

    def test_family_member_can_view(self, client, alice, bob, family):
        assert daily(client, alice, user_id=str(bob.id)).status_code == 200

    def test_no_shared_family(self, client, alice, carol, family):
        assert daily(client, alice, user_id=str(carol.id)).status_code == 403

    def test_unknown_user(self, client, alice):
        assert daily(client, alice, user_id=str(uuid.uuid4())).status_code == 404

    def test_store_failure(self, client, alice, family, monkeypatch):
        def fail(*args, **kwargs):
            raise DatabaseError("connection lost")

        monkeypatch.setattr(crud_completion, "list_for_date", fail)
        response = daily(client, alice)
        assert response.status_code == 500
        assert response.json() == {"detail": "Internal server error"}


# ---------------------------------------------------------------------------
# Completions
# ---------------------------------------------------------------------------


class TestCompletionUpsert:
    def test_insert_then_update(self, client, db, alice):
        dishes = make_activity(db, "Dishes", user_id=alice.id)
        payload = {"activity_id": str(dishes.id), "date": DAY, "status": "done"}

        first = client.post("/completions", json=payload, headers=auth_headers(alice))
        assert first.status_code == 201

        payload["status"] = "skipped"
        second = client.post("/completions", json=payload, headers=auth_headers(alice))
        assert second.status_code == 200
        assert second.json()["id"] == first.json()["id"]
        assert second.json()["status"] == "skipped"
        assert db.query(Completion).count() == 1

    def test_started_requires_started_at(self, client, db, alice):
        dishes = make_activity(db, "Dishes", user_id=alice.id)
        response = client.post(
            "/completions",
            json={"activity_id": str(dishes.id), "date": DAY, "status": "started"},
            headers=auth_headers(alice),
        )
        assert response.status_code == 400

    def test_deferred_completion_picked_up(self, client, db, alice):
        read = make_activity(db, "Read", "Brain", user_id=alice.id)
        deferred = client.post(
            "/completions",
            json={
                "activity_id": str(read.id),
                "date": "2025-01-19",
                "status": "deferred",
                "deferred_to": DAY,
            },
            headers=auth_headers(alice),
        )
        assert deferred.status_code == 201

        done = client.post(
            "/completions",
            json={"activity_id": str(read.id), "date": DAY, "status": "done"},
            headers=auth_headers(alice),
        )
        assert done.status_code == 200
        body = done.json()
        assert body["id"] == deferred.json()["id"]
        assert body["date"] == DAY
        assert body["deferred_to"] is None

    def test_for_family_member(self, client, db, alice, bob, family):
        dishes = make_activity(db, "Dishes", user_id=bob.id)
        response = client.post(
            "/completions",
            json={
                "activity_id": str(dishes.id),
                "user_id": str(bob.id),
                "date": DAY,
                "status": "done",
            },
            headers=auth_headers(alice),
        )
        assert response.status_code == 201
        assert response.json()["user_id"] == str(bob.id)

    def test_unknown_activity(self, client, alice):
        response = client.post(
            "/completions",
            json={"activity_id": str(uuid.uuid4()), "date": DAY, "status": "done"},
            headers=auth_headers(alice),
        )
        assert response.status_code == 404

    def test_insert_race_updates_existing_row(self, client, db, alice, monkeypatch):
        dishes = make_activity(db, "Dishes", user_id=alice.id)
        payload = {"activity_id": str(dishes.id), "date": DAY, "status": "skipped"}
        first = client.post("/completions", json=payload, headers=auth_headers(alice))

        # The next lookup misses the row, as if another request inserted it
        # between our read and our insert.
        real_get_for_day = crud_completion.get_for_day
        calls = []

        def stale_first_read(db, **kwargs):
            calls.append(kwargs)
            if len(calls) == 1:
                return None
            return real_get_for_day(db, **kwargs)

        monkeypatch.setattr(crud_completion, "get_for_day", stale_first_read)

        payload["status"] = "done"
        second = client.post("/completions", json=payload, headers=auth_headers(alice))
        assert second.status_code == 200
        assert second.json()["id"] == first.json()["id"]
        assert second.json()["status"] == "done"
        assert len(calls) == 2
        assert db.query(Completion).count() == 1


class TestCompletionTransition:
    def _act(self, client, user, activity, action, **extra):
        return client.post(
            "/completions/transition",
            json={"activity_id": str(activity.id), "date": DAY, "action": action, **extra},
            headers=auth_headers(user),
        )

    def test_timer_flow(self, client, db, clock, alice):
        dishes = make_activity(db, "Dishes", user_id=alice.id)

        started = self._act(client, alice, dishes, "start")
        assert started.status_code == 200
        assert started.json()["status"] == "started"
        assert started.json()["started_at"] is not None

        clock.advance(seconds=90)
        stopped = self._act(client, alice, dishes, "stop").json()
        assert stopped["elapsed_ms"] == 90_000
        assert stopped["started_at"] is None

        clock.advance(seconds=210)
        self._act(client, alice, dishes, "start")
        clock.advance(seconds=60)
        done = self._act(client, alice, dishes, "done").json()

        assert done["status"] == "done"
        assert done["elapsed_ms"] == 150_000
        assert done["completed_at"] is not None
        assert db.query(Completion).count() == 1

    def test_invalid_transition(self, client, db, alice):
        dishes = make_activity(db, "Dishes", user_id=alice.id)
        response = self._act(client, alice, dishes, "stop")
        assert response.status_code == 400
        assert "Cannot stop" in response.json()["detail"]

    def test_done_with_override(self, client, db, alice):
        dishes = make_activity(db, "Dishes", user_id=alice.id)
        response = self._act(client, alice, dishes, "done", duration_minutes=25)
        assert response.json()["elapsed_ms"] == 25 * 60_000

    def test_defer_needs_later_date(self, client, db, alice):
        dishes = make_activity(db, "Dishes", user_id=alice.id)
        response = self._act(client, alice, dishes, "defer", deferred_to=DAY)
        assert response.status_code == 400

    def test_defer_then_start_next_day(self, client, db, alice):
        dishes = make_activity(db, "Dishes", user_id=alice.id)
        deferred = self._act(client, alice, dishes, "defer", deferred_to="2025-01-21").json()

        response = client.post(
            "/completions/transition",
            json={"activity_id": str(dishes.id), "date": "2025-01-21", "action": "start"},
            headers=auth_headers(alice),
        )
        body = response.json()
        assert body["id"] == deferred["id"]
        assert body["date"] == "2025-01-21"
        assert body["status"] == "started"
        assert body["deferred_to"] is None

    def test_concurrent_first_start_is_last_writer_wins(
        self, client, db, clock, alice, monkeypatch
    ):
        dishes = make_activity(db, "Dishes", user_id=alice.id)
        first = self._act(client, alice, dishes, "start")
        assert first.status_code == 200

        # Second device read "no row yet" before the first insert landed.
        real_get_for_day = crud_completion.get_for_day
        calls = []

        def stale_first_read(db, **kwargs):
            calls.append(kwargs)
            if len(calls) == 1:
                return None
            return real_get_for_day(db, **kwargs)

        monkeypatch.setattr(crud_completion, "get_for_day", stale_first_read)

        clock.advance(seconds=60)
        second = self._act(client, alice, dishes, "start")
        assert second.status_code == 200
        body = second.json()
        assert body["id"] == first.json()["id"]
        assert body["status"] == "started"
        assert body["started_at"] != first.json()["started_at"]
        assert db.query(Completion).count() == 1


class TestCompletionUndo:
    def test_undo_returns_task_to_unstarted(self, client, db, alice, family):
        dishes = make_activity(db, "Dishes", user_id=alice.id)
        schedule(db, dishes, 1, 0, user=alice)
        created = client.post(
            "/completions",
            json={"activity_id": str(dishes.id), "date": DAY, "status": "done"},
            headers=auth_headers(alice),
        ).json()
        assert daily(client, alice).json()["tasks"][0]["completion"]["id"] == created["id"]

        response = client.delete(f"/completions/{created['id']}", headers=auth_headers(alice))
        assert response.status_code == 200
        assert response.json()["success"] is True

        tasks = daily(client, alice).json()["tasks"]
        assert len(tasks) == 1
        assert tasks[0]["completion"] is None

    def test_unknown_completion(self, client, alice):
        response = client.delete(f"/completions/{uuid.uuid4()}", headers=auth_headers(alice))
        assert response.status_code == 404

    def test_other_family(self, client, db, alice, carol, family):
        dishes = make_activity(db, "Dishes", user_id=alice.id)
        completion = Completion(
            activity_id=dishes.id,
            user_id=alice.id,
            date=date(2025, 1, 20),
            status=CompletionStatus.done,
        )
        db.add(completion)
        db.commit()

        response = client.delete(f"/completions/{completion.id}", headers=auth_headers(carol))
        assert response.status_code == 403


# ---------------------------------------------------------------------------
# Activities and schedule
# ---------------------------------------------------------------------------


class TestActivities:
    def test_owner_required(self, client, alice):
        response = client.post(
            "/activities", json={"name": "Dishes"}, headers=auth_headers(alice)
        )
        assert response.status_code == 400

    def test_single_owner(self, client, alice, family):
        response = client.post(
            "/activities",
            json={"name": "Dishes", "user_id": str(alice.id), "family_id": str(family.id)},
            headers=auth_headers(alice),
        )
        assert response.status_code == 400

    def test_create_personal(self, client, alice):
        response = client.post(
            "/activities",
            json={"name": "Dishes", "category": "Home", "user_id": str(alice.id)},
            headers=auth_headers(alice),
        )
        assert response.status_code == 201
        assert response.json()["owner_type"] == "personal"

    def test_non_member_cannot_add_to_family(self, client, carol, family):
        response = client.post(
            "/activities",
            json={"name": "Bins", "family_id": str(family.id)},
            headers=auth_headers(carol),
        )
        assert response.status_code == 403

    def test_update_and_soft_delete(self, client, db, alice):
        dishes = make_activity(db, "Dishes", user_id=alice.id)
        schedule(db, dishes, 1, 0, user=alice)

        renamed = client.patch(
            f"/activities/{dishes.id}", json={"name": "Wash up"}, headers=auth_headers(alice)
        )
        assert renamed.json()["name"] == "Wash up"

        deleted = client.delete(f"/activities/{dishes.id}", headers=auth_headers(alice))
        assert deleted.status_code == 200

        listed = client.get("/activities", headers=auth_headers(alice)).json()
        assert listed == []
        assert db.query(ScheduleEntry).count() == 0


class TestSchedule:
    def _set(self, client, user, activity, **extra):
        return client.put(
            "/schedule/set",
            json={"activity_id": str(activity.id), "week_of_cycle": 3, "day_of_week": 0, **extra},
            headers=auth_headers(user),
        )

    def test_set_assign_everyone_and_clear(self, client, db, alice, bob, family):
        vacuum = make_activity(db, "Vacuum", family_id=family.id)

        assigned = self._set(client, alice, vacuum, user_id=str(bob.id)).json()
        assert assigned["schedule"]["user_id"] == str(bob.id)

        everyone = self._set(client, alice, vacuum, user_id=None).json()
        assert everyone["cleared"] is False
        assert everyone["schedule"]["user_id"] is None
        assert db.query(ScheduleEntry).count() == 1

        cleared = self._set(client, alice, vacuum).json()
        assert cleared == {"cleared": True, "schedule": None}
        assert db.query(ScheduleEntry).count() == 0

    def test_personal_activity_cannot_go_to_everyone(self, client, db, alice, family):
        dishes = make_activity(db, "Dishes", user_id=alice.id)
        assert self._set(client, alice, dishes, user_id=None).status_code == 400

    def test_toggle(self, client, db, alice, family):
        dishes = make_activity(db, "Dishes", user_id=alice.id)
        payload = {
            "activity_id": str(dishes.id),
            "user_id": str(alice.id),
            "week_of_cycle": 1,
            "day_of_week": 0,
        }

        on = client.post("/schedule/toggle", json=payload, headers=auth_headers(alice)).json()
        assert on["toggled"] is True
        assert len(daily(client, alice).json()["tasks"]) == 1

        off = client.post("/schedule/toggle", json=payload, headers=auth_headers(alice)).json()
        assert off == {"toggled": False, "schedule": None}
        assert daily(client, alice).json()["tasks"] == []

    def test_slot_out_of_range(self, client, db, alice):
        dishes = make_activity(db, "Dishes", user_id=alice.id)
        response = client.put(
            "/schedule/set",
            json={"activity_id": str(dishes.id), "week_of_cycle": 9, "day_of_week": 0},
            headers=auth_headers(alice),
        )
        assert response.status_code == 400


# ---------------------------------------------------------------------------
# Families, users and stats
# ---------------------------------------------------------------------------


class TestFamilies:
    def test_list(self, client, alice, family):
        body = client.get("/families", headers=auth_headers(alice)).json()
        assert [f["name"] for f in body["families"]] == ["Smiths"]
        assert len(body["families"][0]["members"]) == 2

    def test_rota_change_moves_the_week(self, client, alice, family):
        response = client.patch(
            f"/families/{family.id}",
            json={"rota_cycle_weeks": 2},
            headers=auth_headers(alice),
        )
        assert response.status_code == 200
        assert daily(client, alice).json()["week_of_cycle"] == 1

    def test_cycle_length_bounds(self, client, alice, family):
        response = client.patch(
            f"/families/{family.id}",
            json={"rota_cycle_weeks": 9},
            headers=auth_headers(alice),
        )
        assert response.status_code == 400

    def test_members_only(self, client, carol, family):
        response = client.patch(
            f"/families/{family.id}", json={"name": "Ours"}, headers=auth_headers(carol)
        )
        assert response.status_code == 403


class TestUserCycle:
    def test_update_personal_cycle(self, client, carol):
        response = client.patch(
            "/users/me/cycle",
            json={"cycle_weeks": 2, "cycle_start_date": "2025-01-13"},
            headers=auth_headers(carol),
        )
        assert response.status_code == 200
        assert response.json()["cycle_weeks"] == 2
        # 2025-01-20 is one week after the new start
        assert daily(client, carol).json()["week_of_cycle"] == 2

    def test_empty_update(self, client, carol):
        response = client.patch("/users/me/cycle", json={}, headers=auth_headers(carol))
        assert response.status_code == 400


class TestHoursStats:
    def test_hours_per_category(self, client, db, alice, family):
        dishes = make_activity(db, "Dishes", "Home", user_id=alice.id)
        reading = make_activity(db, "Reading", "Brain", default_minutes=30, user_id=alice.id)
        db.add_all(
            [
                Completion(
                    activity_id=dishes.id,
                    user_id=alice.id,
                    date=date(2025, 1, 20),
                    status=CompletionStatus.done,
                    elapsed_ms=90 * 60_000,
                ),
                Completion(
                    activity_id=reading.id,
                    user_id=alice.id,
                    date=date(2025, 1, 21),
                    status=CompletionStatus.done,
                ),
                Completion(
                    activity_id=reading.id,
                    user_id=alice.id,
                    date=date(2025, 1, 22),
                    status=CompletionStatus.skipped,
                ),
            ]
        )
        db.commit()

        body = client.get(
            "/stats/hours",
            params={"start_date": "2025-01-20", "end_date": "2025-01-26"},
            headers=auth_headers(alice),
        ).json()

        assert body["days"] == 7
        by_user = {u["display_name"]: u for u in body["breakdown"]}
        assert set(by_user) == {"Alice", "Bob"}

        mine = by_user["Alice"]
        assert mine["done"] == 2
        assert mine["total_hours"] == 2.0
        assert mine["hours_per_day"] == 0.3
        categories = {c["category"]: c for c in mine["by_category"]}
        assert categories["Home"]["hours"] == 1.5
        assert categories["Home"]["percentage"] == 75
        assert categories["Brain"]["percentage"] == 25
        assert by_user["Bob"]["total_hours"] == 0

    def test_range_must_be_ordered(self, client, alice):
        response = client.get(
            "/stats/hours",
            params={"start_date": "2025-01-26", "end_date": "2025-01-20"},
            headers=auth_headers(alice),
        )
        assert response.status_code == 400

    def test_range_required(self, client, alice):
        response = client.get("/stats/hours", headers=auth_headers(alice))
        assert response.status_code == 400


class TestLeaderboard:
    def _seed(self, db, alice, bob, family):
        dishes = make_activity(db, "Dishes", user_id=alice.id)
        schedule(db, dishes, 1, 0, user=alice)  # Mondays 6, 13, 20
        schedule(db, dishes, 1, 1, user=alice)  # Tuesdays 7, 14; the 21st is after today
        bins = make_activity(db, "Bins", family_id=family.id, is_rota=True)
        schedule(db, bins, 3, 0, user=alice)  # Monday 20
        schedule(db, bins, 2, 0, user=bob)  # Monday 13

        def done(activity, user, day, status=CompletionStatus.done):
            return Completion(activity_id=activity.id, user_id=user.id, date=day, status=status)

        db.add_all(
            [
                done(dishes, alice, date(2025, 1, 6)),
                done(dishes, alice, date(2025, 1, 13)),
                done(bins, alice, date(2025, 1, 20)),
                done(dishes, alice, date(2025, 1, 7), CompletionStatus.skipped),
                done(dishes, alice, date(2025, 2, 3)),
                done(bins, bob, date(2025, 1, 13)),
            ]
        )
        db.commit()

    def test_ratios_sorted_best_first(self, client, db, alice, bob, family):
        self._seed(db, alice, bob, family)

        body = client.get(
            "/stats/leaderboard", params={"month": "2025-01"}, headers=auth_headers(alice)
        ).json()

        assert body["month"] == "2025-01"
        assert [s["display_name"] for s in body["stats"]] == ["Bob", "Alice"]
        bob_stats, alice_stats = body["stats"]
        assert (bob_stats["done"], bob_stats["total"], bob_stats["ratio"]) == (1, 1, 1.0)
        assert (alice_stats["done"], alice_stats["total"], alice_stats["ratio"]) == (3, 6, 0.5)

    def test_future_month_has_nothing_scheduled(self, client, db, alice, bob, family):
        self._seed(db, alice, bob, family)

        body = client.get(
            "/stats/leaderboard",
            params={"month": "2025-03", "family_id": str(family.id)},
            headers=auth_headers(alice),
        ).json()

        assert {s["display_name"] for s in body["stats"]} == {"Alice", "Bob"}
        assert all(s["total"] == 0 and s["ratio"] == 0 for s in body["stats"])

    def test_without_family_only_self(self, client, carol):
        body = client.get(
            "/stats/leaderboard", params={"month": "2025-01"}, headers=auth_headers(carol)
        ).json()
        assert [s["display_name"] for s in body["stats"]] == ["Carol"]

    def test_month_required(self, client, alice):
        response = client.get("/stats/leaderboard", headers=auth_headers(alice))
        assert response.status_code == 400
        assert "month" in response.json()["detail"]

    def test_malformed_month(self, client, alice):
        response = client.get(
            "/stats/leaderboard", params={"month": "Jan-2025"}, headers=auth_headers(alice)
        )
        assert response.status_code == 400

    def test_other_family(self, client, carol, family):
        response = client.get(
            "/stats/leaderboard",
            params={"month": "2025-01", "family_id": str(family.id)},
            headers=auth_headers(carol),
        )
        assert response.status_code == 403
