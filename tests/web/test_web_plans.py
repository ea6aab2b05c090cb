"""Tests for plan endpoints."""


class TestGeneratePlan:
    """Tests for POST /plan/generate."""

    def test_generate_creates_profile_with_plan(self, client, store, alex_data):
        response = client.post("/plan/generate", json=alex_data)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        plan = body["data"]
        assert plan["source"] == "fallback"
        assert plan["studentName"] == "Alex"
        assert len(plan["dailyPlans"]) == 7
        assert len(plan["resources"]) == 3

        record = store.get(plan["studentId"])
        assert record["latestPlan"]["studentName"] == "Alex"
        assert len(record["progressData"]["weeklyProgress"]) == 7

    def test_missing_age(self, client, alex_data):
        alex_data.pop("age")

        response = client.post("/plan/generate", json=alex_data)

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Name and age are required"}

    def test_missing_name(self, client):
        response = client.post("/plan/generate", json={"age": 9})
        assert response.status_code == 400

    def test_body_with_id_updates_that_profile(self, client, store, alex_data):
        response = client.post("/plan/generate", json={**alex_data, "id": "student-1"})

        assert response.json()["data"]["studentId"] == "student-1"
        assert store.get("student-1")["latestPlan"]["source"] == "fallback"
        assert len(store) == 1

    def test_existing_progress_kept(self, client, store, alex_data):
        progress = {"weeklyProgress": {}, "whatWorked": "Timers", "overallRating": 4}

        response = client.post("/plan/generate", json={**alex_data, "progressData": progress})

        record = store.get(response.json()["data"]["studentId"])
        assert record["progressData"]["whatWorked"] == "Timers"

    def test_unknown_fields_preserved(self, client, store, alex_data):
        response = client.post("/plan/generate", json={**alex_data, "homeLanguage": "Spanish"})
        assert store.get(response.json()["data"]["studentId"])["homeLanguage"] == "Spanish"

    def test_plan_from_llm(self, llm_app_client, llm_client, alex_data):
        response = llm_app_client.post("/plan/generate", json=alex_data)

        plan = response.json()["data"]
        assert plan["source"] == "llm"
        assert plan["dailyPlans"][0]["title"] == "Day 1 - Monday"
        assert plan["accommodations"][0] == "Visual schedule on the desk"
        llm_client.simple_chat.assert_called_once()

    def test_llm_failure_still_returns_plan(self, llm_app_client, llm_client, alex_data):
        from learnplan.llm.client import LLMTimeoutError

        llm_client.simple_chat.side_effect = LLMTimeoutError("timed out")

        response = llm_app_client.post("/plan/generate", json=alex_data)

        assert response.status_code == 200
        assert response.json()["data"]["source"] == "fallback"


class TestAdaptPlan:
    """Tests for POST /plan/adapt/{student_id}."""

    def test_adapt_with_progress_in_body(self, client, store, student_id):
        progress = {
            "weeklyProgress": {"day1": [{"completed": True, "rating": 5}]},
            "whatWorked": "Dinosaur math",
            "overallRating": 4,
        }

        response = client.post(f"/plan/adapt/{student_id}", json=progress)

        assert response.status_code == 200
        assert response.json()["data"]["studentId"] == student_id
        stored = store.get(student_id)["progressData"]
        assert stored["whatWorked"] == "Dinosaur math"
        assert stored["weeklyProgress"]["day1"]["block1"]["rating"] == 5

    def test_adapt_uses_stored_progress(self, llm_app_client, llm_client, store, alex_data):
        store.update(
            "student-7",
            {**alex_data, "progressData": {"whatWorked": "Short reading bursts"}},
        )

        response = llm_app_client.post("/plan/adapt/student-7", json={})

        assert response.status_code == 200
        prompt = llm_client.simple_chat.call_args.args[1]
        assert "Short reading bursts" in prompt
        assert store.get("student-7")["latestPlan"]["source"] == "llm"

    def test_unknown_student(self, client):
        response = client.post("/plan/adapt/missing", json={"whatWorked": "x"})

        assert response.status_code == 404
        assert response.json()["message"] == "Student profile not found"

    def test_unknown_student_with_profile_in_body(self, client, store, alex_data):
        response = client.post("/plan/adapt/temp-1", json=alex_data)

        assert response.status_code == 200
        assert response.json()["data"]["studentName"] == "Alex"
        assert store.get("temp-1") is None

    def test_invalid_progress(self, client, student_id):
        response = client.post(f"/plan/adapt/{student_id}", json={"weeklyProgress": "lots"})
        assert response.status_code == 400


class TestGetLatestPlan:
    """Tests for GET /plan/{student_id}."""

    def test_returns_stored_plan(self, client, student_id):
        response = client.get(f"/plan/{student_id}")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["studentId"] == student_id
        assert len(data["dailyPlans"]) == 7

    def test_student_without_plan(self, client, store):
        store.update("student-2", {"name": "Sam"})
        assert client.get("/plan/student-2").status_code == 404

    def test_unknown_student(self, client):
        assert client.get("/plan/missing").status_code == 404
