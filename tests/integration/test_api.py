"""
Integration Tests - REST API
"""
import pytest
from openpyxl import load_workbook
from io import BytesIO

DAY = "2024-05-10"
BASE = "/api/v1"


@pytest.fixture
async def configured_day(client):
    """Goal 100000 over 9-10 weighted 60/40; Beto is off at 10:00"""
    await client.put(f"{BASE}/sessions/{DAY}/goal", json={"total_daily_goal": 100000})
    await client.put(f"{BASE}/sessions/{DAY}/hours", json={"start_hour": 9, "end_hour": 10})
    await client.put(f"{BASE}/sessions/{DAY}/weights", json={"weights": [
        {"hour_start": 9, "percentage": 60},
        {"hour_start": 10, "percentage": 40},
    ]})
    ana = (await client.post(f"{BASE}/sessions/{DAY}/advisors", json={"name": "Ana"})).json()
    beto = (await client.post(f"{BASE}/sessions/{DAY}/advisors", json={"name": "Beto"})).json()
    await client.put(f"{BASE}/sessions/{DAY}/availability", json={"changes": [
        {"advisor_id": beto["id"], "hour_start": 10, "is_active": False},
    ]})
    return {"ana": ana, "beto": beto}


class TestHealthEndpoints:
    """Tests for health and info endpoints"""

    async def test_liveness(self, client):
        """Test liveness probe"""
        response = await client.get(f"{BASE}/health/live")

        assert response.status_code == 200
        assert response.json() == {"status": "alive"}

    async def test_info(self, client):
        """Test info endpoint exposes currency and timezone"""
        body = (await client.get(f"{BASE}/info")).json()

        assert body["currency"] == "CRC"
        assert body["timezone"] == "America/Costa_Rica"

    async def test_response_headers(self, client):
        """Test request id and security headers on every response"""
        response = await client.get(f"{BASE}/health/live")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert "X-Request-ID" in response.headers


class TestSessionEndpoints:
    """Tests for session configuration endpoints"""

    async def test_get_creates_unconfigured_session(self, client):
        """Test a first read creates the day with the default hours in effect"""
        response = await client.get(f"{BASE}/sessions/{DAY}")

        assert response.status_code == 200
        body = response.json()
        assert body["date"] == DAY
        assert body["total_daily_goal"] == 0
        assert body["start_hour"] is None
        assert body["effective_start_hour"] == 9
        assert body["effective_end_hour"] == 21
        assert len(body["hours"]) == 13

    async def test_today(self, client):
        """Test today's session is available without a date"""
        response = await client.get(f"{BASE}/sessions/today")

        assert response.status_code == 200
        assert response.json()["total_daily_goal"] == 0

    async def test_update_goal_and_hours(self, client):
        """Test goal and business hours updates"""
        await client.put(f"{BASE}/sessions/{DAY}/goal", json={"total_daily_goal": 250000})
        response = await client.put(f"{BASE}/sessions/{DAY}/hours", json={"start_hour": 10, "end_hour": 18})

        body = response.json()
        assert body["total_daily_goal"] == 250000
        assert body["hours"] == list(range(10, 19))

    async def test_invalid_values(self, client):
        """Test negative goals and inverted hours are rejected"""
        goal = await client.put(f"{BASE}/sessions/{DAY}/goal", json={"total_daily_goal": -5})
        hours = await client.put(f"{BASE}/sessions/{DAY}/hours", json={"start_hour": 18, "end_hour": 9})

        assert goal.status_code == 422
        assert hours.status_code == 422

    async def test_weights_sum_warning(self, client):
        """Test weights off 100% are stored but cannot be saved cleanly"""
        await client.put(f"{BASE}/sessions/{DAY}/hours", json={"start_hour": 9, "end_hour": 10})
        response = await client.put(f"{BASE}/sessions/{DAY}/weights", json={"weights": [
            {"hour_start": 9, "percentage": 50},
        ]})

        body = response.json()
        assert response.status_code == 200
        assert body["total_percentage"] == 50
        assert body["can_save"] is False
        assert [w["code"] for w in body["warnings"]] == ["weights_sum"]
        assert body["weights"] == [
            {"hour_start": 9, "percentage": 50},
            {"hour_start": 10, "percentage": 0},
        ]

    async def test_board(self, client, configured_day):
        """Test personal goals on the admin board"""
        body = (await client.get(f"{BASE}/sessions/{DAY}/board")).json()

        goals = {item["name"]: item["goal"] for item in body["advisors"]}
        assert goals == {"Ana": pytest.approx(70000), "Beto": pytest.approx(30000)}
        assert body["total_goal"] == pytest.approx(100000)
        assert body["curve"][-1]["cumulative_goal"] == pytest.approx(100000)
        assert body["warnings"] == []

    async def test_board_preview_does_not_persist(self, client, configured_day):
        """Test unsaved weight edits change the preview only"""
        preview = await client.post(f"{BASE}/sessions/{DAY}/board/preview", json={
            "weights": [{"hour_start": 9, "percentage": 50}, {"hour_start": 10, "percentage": 50}],
        })
        goals = {item["name"]: item["goal"] for item in preview.json()["advisors"]}
        assert goals["Ana"] == pytest.approx(75000)

        stored = (await client.get(f"{BASE}/sessions/{DAY}/weights")).json()
        assert stored["weights"][0] == {"hour_start": 9, "percentage": 60}

    async def test_availability(self, client, configured_day):
        """Test only explicit overrides are listed"""
        body = (await client.get(f"{BASE}/sessions/{DAY}/availability")).json()

        assert body["overrides"] == [{
            "advisor_id": configured_day["beto"]["id"],
            "hour_start": 10,
            "is_active": False,
        }]

    async def test_availability_for_unknown_advisor(self, client, configured_day):
        """Test availability changes for advisors of another roster are rejected"""
        response = await client.put(f"{BASE}/sessions/{DAY}/availability", json={"changes": [
            {"advisor_id": "00000000-0000-0000-0000-000000000000", "hour_start": 9, "is_active": False},
        ]})

        assert response.status_code == 404


class TestAdvisorEndpoints:
    """Tests for roster endpoints"""

    async def test_create_returns_link(self, client):
        """Test a created advisor carries a private link"""
        response = await client.post(f"{BASE}/sessions/{DAY}/advisors", json={"name": "Ana"})

        assert response.status_code == 201
        body = response.json()
        assert body["link"].endswith(f"/advisor/{body['access_token']}")
        assert body["total_sales"] == 0

    async def test_duplicate_name_conflict(self, client):
        """Test case-insensitive duplicates return 409"""
        await client.post(f"{BASE}/sessions/{DAY}/advisors", json={"name": "Ana"})
        response = await client.post(f"{BASE}/sessions/{DAY}/advisors", json={"name": " ana"})

        assert response.status_code == 409
        assert "already exists" in response.json()["detail"]

    async def test_list(self, client, configured_day):
        """Test the roster is listed in creation order"""
        body = (await client.get(f"{BASE}/sessions/{DAY}/advisors")).json()

        assert [item["name"] for item in body] == ["Ana", "Beto"]

    async def test_breakdown(self, client, configured_day):
        """Test the hour-by-hour split of one advisor"""
        advisor_id = configured_day["beto"]["id"]
        body = (await client.get(f"{BASE}/advisors/{advisor_id}/breakdown")).json()

        assert body["progress"]["goal"] == pytest.approx(30000)
        assert [hour["is_active"] for hour in body["hours"]] == [True, False]

    async def test_delete(self, client, configured_day):
        """Test deleting an advisor invalidates its link"""
        beto = configured_day["beto"]
        response = await client.delete(f"{BASE}/advisors/{beto['id']}")
        assert response.status_code == 204

        portal = await client.get(f"{BASE}/portal/{beto['access_token']}")
        assert portal.status_code == 404

        board = (await client.get(f"{BASE}/sessions/{DAY}/board")).json()
        assert [item["goal"] for item in board["advisors"]] == [pytest.approx(100000)]


class TestPortalEndpoints:
    """Tests for the advisor self-service view"""

    async def test_portal_view(self, client, configured_day):
        """Test the advisor sees their own goal and hourly split"""
        token = configured_day["ana"]["access_token"]
        body = (await client.get(f"{BASE}/portal/{token}")).json()

        assert body["advisor_name"] == "Ana"
        assert body["progress"]["goal"] == pytest.approx(70000)
        assert len(body["hours"]) == 2
        assert body["refresh_interval_seconds"] == 30

    async def test_report_sales(self, client, configured_day):
        """Test reported sales update progress and the admin board"""
        token = configured_day["ana"]["access_token"]
        response = await client.put(f"{BASE}/portal/{token}/sales", json={"total_sales": 35000, "tickets_count": 7})

        progress = response.json()["progress"]
        assert progress["compliance"] == pytest.approx(50)
        assert progress["remaining"] == pytest.approx(35000)
        assert progress["average_ticket"] == pytest.approx(5000)

        board = (await client.get(f"{BASE}/sessions/{DAY}/board")).json()
        assert board["total_sales"] == pytest.approx(35000)

    async def test_negative_sales(self, client, configured_day):
        """Test negative figures are rejected"""
        token = configured_day["ana"]["access_token"]
        response = await client.put(f"{BASE}/portal/{token}/sales", json={"total_sales": -1, "tickets_count": 0})

        assert response.status_code == 422

    async def test_unknown_token(self, client):
        """Test unknown links get a generic not found"""
        response = await client.get(f"{BASE}/portal/not-a-real-token")

        assert response.status_code == 404
        assert response.json() == {"detail": "Invalid or expired link"}

    async def test_personal_report(self, client, configured_day):
        """Test the advisor can download their own report"""
        token = configured_day["ana"]["access_token"]
        response = await client.get(f"{BASE}/portal/{token}/report.pdf")

        assert response.status_code == 200
        assert response.content.startswith(b"%PDF")

    @pytest.mark.parametrize("fmt", ["xlsx", "pdf"])
    async def test_personal_report_for_non_latin_name(self, client, fmt):
        """Test names outside Latin-1 still download with an ASCII filename"""
        advisor = (await client.post(f"{BASE}/sessions/{DAY}/advisors", json={"name": "Đức"})).json()
        response = await client.get(f"{BASE}/portal/{advisor['access_token']}/report.{fmt}")

        assert response.status_code == 200
        assert response.headers["content-disposition"] == f'attachment; filename="goal-uc-{DAY}.{fmt}"'

    async def test_personal_report_name_with_quotes(self, client):
        """Test quotes in a name do not break the download header"""
        advisor = (await client.post(f"{BASE}/sessions/{DAY}/advisors", json={"name": 'Ana "La Jefa"'})).json()
        response = await client.get(f"{BASE}/portal/{advisor['access_token']}/report.xlsx")

        assert response.status_code == 200
        assert response.headers["content-disposition"] == f'attachment; filename="goal-ana-la-jefa-{DAY}.xlsx"'


class TestStoreMetricsEndpoints:
    """Tests for store metrics endpoints"""

    async def test_save_and_read(self, client, configured_day):
        """Test metrics rows and totals against advisor sales"""
        await client.put(f"{BASE}/portal/{configured_day['ana']['access_token']}/sales",
                         json={"total_sales": 30000, "tickets_count": 6})
        response = await client.put(f"{BASE}/sessions/{DAY}/store-metrics", json={"metrics": [
            {"hour": 9, "traffic": 100, "tickets": 25, "last_year_sales": 40000, "current_sales": 50000},
        ]})

        body = response.json()
        assert [row["hour"] for row in body["rows"]] == [9, 10]
        assert body["rows"][0]["conversion_rate"] == pytest.approx(25)
        assert body["rows"][0]["store_goal"] == pytest.approx(60000)
        assert body["totals"]["difference"] == pytest.approx(20000)
        assert body["totals"]["growth"] == pytest.approx(25)

    async def test_preview(self, client, configured_day):
        """Test cell edits are previewed without being stored"""
        await client.put(f"{BASE}/sessions/{DAY}/store-metrics", json={"metrics": [
            {"hour": 9, "traffic": 100, "tickets": 25},
        ]})
        preview = await client.post(f"{BASE}/sessions/{DAY}/store-metrics/preview", json={"edits": [
            {"hour": 9, "field": "tickets", "value": 50},
        ]})
        assert preview.json()["rows"][0]["conversion_rate"] == pytest.approx(50)

        stored = (await client.get(f"{BASE}/sessions/{DAY}/store-metrics")).json()
        assert stored["rows"][0]["tickets"] == 25


class TestTemplateEndpoints:
    """Tests for template endpoints"""

    async def test_create_and_apply(self, client, configured_day):
        """Test applying a template replaces the target day's configuration"""
        created = await client.post(f"{BASE}/templates", json={"name": "Short day", "source_date": DAY})
        assert created.status_code == 201
        template = created.json()
        assert template["weights"] == [
            {"hour_start": 9, "percentage": 60},
            {"hour_start": 10, "percentage": 40},
        ]

        target = "2024-05-20"
        await client.put(f"{BASE}/sessions/{target}/weights", json={"weights": [{"hour_start": 15, "percentage": 100}]})
        applied = await client.post(f"{BASE}/templates/{template['id']}/apply/{target}")

        assert applied.json()["hours"] == [9, 10]
        weights = (await client.get(f"{BASE}/sessions/{target}/weights")).json()
        assert weights["total_percentage"] == pytest.approx(100)
        assert weights["warnings"] == []

    async def test_duplicate_and_delete(self, client):
        """Test duplicate names conflict and deleted templates disappear"""
        first = (await client.post(f"{BASE}/templates", json={"name": "Weekday", "source_date": DAY})).json()
        duplicate = await client.post(f"{BASE}/templates", json={"name": "WEEKDAY", "source_date": DAY})
        assert duplicate.status_code == 409

        assert (await client.delete(f"{BASE}/templates/{first['id']}")).status_code == 204
        assert (await client.get(f"{BASE}/templates")).json() == []

    async def test_apply_unknown_template(self, client):
        """Test applying a missing template returns 404"""
        response = await client.post(f"{BASE}/templates/00000000-0000-0000-0000-000000000000/apply/{DAY}")

        assert response.status_code == 404


class TestReportEndpoints:
    """Tests for report downloads"""

    async def test_admin_excel(self, client, configured_day):
        """Test the admin workbook download"""
        response = await client.get(f"{BASE}/reports/{DAY}/admin.xlsx")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith(
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )
        assert f"goals-{DAY}.xlsx" in response.headers["content-disposition"]
        workbook = load_workbook(BytesIO(response.content))
        values = [cell for row in workbook.active.iter_rows(values_only=True) for cell in row]
        assert "Beto" in values

    async def test_store_metrics_pdf(self, client, configured_day):
        """Test the store metrics PDF download"""
        response = await client.get(f"{BASE}/reports/{DAY}/store-metrics.pdf")

        assert response.status_code == 200
        assert response.content.startswith(b"%PDF")

    async def test_unknown_format(self, client):
        """Test unsupported formats are rejected"""
        response = await client.get(f"{BASE}/reports/{DAY}/admin.csv")

        assert response.status_code == 422


class TestMatrixEndpoints:
    """Tests for the goal matrix calculator"""

    async def test_new(self, client):
        """Test a blank grid with the default hours"""
        body = (await client.get(f"{BASE}/matrix/new")).json()

        assert body["sheet"]["start_hour"] == 9
        assert body["sheet"]["end_hour"] == 18
        assert len(body["sheet"]["rows"]) == 5
        assert body["grand_total"] == 0

    async def test_totals_with_manual_override(self, client):
        """Test a pinned sales total wins over cell sales"""
        response = await client.post(f"{BASE}/matrix/totals", json={
            "start_hour": 9,
            "end_hour": 10,
            "rows": [
                {"id": "r1", "name": "Ana", "values": {"9": 100, "10": 100}, "sales": {"9": 80}, "manual_total_sale": 500},
                {"id": "r2", "name": "Beto", "values": {"9": 50}, "breaks": [9]},
            ],
        })

        body = response.json()
        assert body["grand_total"] == 200
        assert body["grand_sales"] == 500
        assert body["col_sales"]["9"] == 80
        assert body["rows"][0]["manual"] is True

    async def test_column_break(self, client):
        """Test toggling a column break on every row"""
        payload = {"start_hour": 9, "end_hour": 10, "rows": [
            {"id": "r1", "values": {"9": 100}},
            {"id": "r2", "values": {"9": 50}, "breaks": [9]},
        ]}
        body = (await client.post(f"{BASE}/matrix/column-break/9", json=payload)).json()

        assert [row["breaks"] for row in body["sheet"]["rows"]] == [[9], [9]]
        assert body["col_totals"]["9"] == 0

    async def test_report(self, client):
        """Test the matrix export"""
        response = await client.post(f"{BASE}/matrix/report.xlsx", json={"start_hour": 9, "end_hour": 11})

        assert response.status_code == 200
        assert "goal-matrix.xlsx" in response.headers["content-disposition"]
