# tests/test_api_tickets.py
"""
Tests for the ticket API routes.

Tests:
- List scoping, search and pagination envelope
- Detail visibility and not-found handling
- Admin-only edit, reassign and delete
- Multipart submission with screenshots
"""

import json

import pytest


def ticket_form(**overrides):
    data = {
        "wrong_input_date": "2025-03-10",
        "issue_type": "wrong_value",
        "branch_id": "branch-jkt",
        "feature_id": "feature-invoice",
        "inputter_name": "Budi",
        "description": "Invoice total is wrong",
        "priority": "1",
        "wrong_lines": json.dumps([{"item_name": "Total", "value": "10"}]),
        "correct_lines": json.dumps([{"item_name": "Total", "value": "12"}]),
    }
    data.update(overrides)
    return data


# =============================================================================
# LIST / STATS
# =============================================================================

class TestListTickets:
    """Tests for GET /api/tickets."""

    def test_admin_sees_all(self, client, admin_headers, assert_response_success):
        body = assert_response_success(client.get("/api/tickets", headers=admin_headers))
        assert [t["id"] for t in body["data"]] == ["ticket-3", "ticket-2", "ticket-1"]
        assert body["pagination"]["total_items"] == 3

    def test_requester_sees_own(self, client, requester_headers, assert_response_success):
        body = assert_response_success(client.get("/api/tickets", headers=requester_headers))
        assert {t["id"] for t in body["data"]} == {"ticket-1", "ticket-2"}

    def test_search_and_status(self, client, admin_headers, assert_response_success):
        body = assert_response_success(client.get("/api/tickets?q=payroll", headers=admin_headers))
        assert [t["id"] for t in body["data"]] == ["ticket-3"]

        body = assert_response_success(client.get("/api/tickets?status=in_progress", headers=admin_headers))
        assert [t["id"] for t in body["data"]] == ["ticket-2"]

    def test_invalid_status(self, client, admin_headers, assert_response_error):
        assert_response_error(client.get("/api/tickets?status=done", headers=admin_headers), 422, "VALIDATION_ERROR")

    def test_backend_failure(self, client, seeded_supabase, admin_headers, assert_response_error):
        seeded_supabase.fail_on("datafix_tickets", "select")
        assert_response_error(client.get("/api/tickets", headers=admin_headers), 502, "EXTERNAL_SERVICE_ERROR")


class TestTicketStats:
    def test_admin_uses_backend_counts(self, client, seeded_supabase, admin_headers, assert_response_success):
        seeded_supabase.set_rpc_result("get_ticket_stats", [{"pending_tickets": 5, "resolved_tickets": 5}])
        body = assert_response_success(client.get("/api/tickets/stats", headers=admin_headers))
        assert body["data"]["total_tickets"] == 10

    def test_requester_counts_own(self, client, requester_headers, assert_response_success):
        body = assert_response_success(client.get("/api/tickets/stats", headers=requester_headers))
        assert body["data"]["total_tickets"] == 2


# =============================================================================
# DETAIL / EDIT
# =============================================================================

class TestTicketDetail:
    """Tests for GET/PATCH /api/tickets/{id}."""

    def test_get(self, client, admin_headers, assert_response_success):
        body = assert_response_success(client.get("/api/tickets/ticket-2", headers=admin_headers))
        assert body["data"]["ticket"]["status"] == "in_progress"
        assert body["data"]["can_edit"] is True

    def test_missing(self, client, admin_headers, assert_response_error):
        assert_response_error(client.get("/api/tickets/nope", headers=admin_headers), 404, "NOT_FOUND")

    def test_requester_cannot_see_others(self, client, requester_headers, assert_response_error):
        assert_response_error(client.get("/api/tickets/ticket-3", headers=requester_headers), 404, "NOT_FOUND")

    def test_admin_updates_status_and_fix(self, client, admin_headers, assert_response_success):
        response = client.patch(
            "/api/tickets/ticket-1",
            json={"status": "resolved", "fix_description": "Corrected total"},
            headers=admin_headers,
        )
        body = assert_response_success(response)
        assert body["data"]["ticket"]["status"] == "resolved"
        assert body["data"]["ticket"]["fix_description"] == "Corrected total"

    def test_requester_cannot_update(self, client, requester_headers, assert_response_error):
        response = client.patch("/api/tickets/ticket-1", json={"status": "resolved"}, headers=requester_headers)
        assert_response_error(response, 403, "PERMISSION_DENIED")

    def test_unknown_field_rejected(self, client, admin_headers):
        response = client.patch("/api/tickets/ticket-1", json={"priority": 1}, headers=admin_headers)
        assert response.status_code == 422

    def test_invalid_status(self, client, admin_headers, assert_response_error):
        response = client.patch("/api/tickets/ticket-1", json={"status": "done"}, headers=admin_headers)
        assert_response_error(response, 422, "VALIDATION_ERROR")


class TestAssignAndDelete:
    def test_admin_reassigns(self, client, seeded_supabase, admin_headers, assert_response_success):
        response = client.put("/api/tickets/ticket-1/assignee", json={"assigned_to": "user-admin"},
                              headers=admin_headers)
        body = assert_response_success(response)
        assert body["data"]["assignee"] == "Ana Admin"
        row = next(r for r in seeded_supabase.rows("datafix_tickets") if r["id"] == "ticket-1")
        assert row["assigned_to"] == "user-admin"

    def test_unknown_assignee(self, client, seeded_supabase, admin_headers, assert_response_error):
        response = client.put("/api/tickets/ticket-1/assignee", json={"assigned_to": "nobody"},
                              headers=admin_headers)
        assert_response_error(response, 404, "NOT_FOUND")
        assert ("datafix_tickets", "update") not in seeded_supabase.calls

    def test_requester_cannot_reassign(self, client, requester_headers, assert_response_error):
        response = client.put("/api/tickets/ticket-1/assignee", json={"assigned_to": "user-requester"},
                              headers=requester_headers)
        assert_response_error(response, 403, "PERMISSION_DENIED")

    def test_admin_deletes(self, client, seeded_supabase, admin_headers, assert_response_success):
        assert_response_success(client.delete("/api/tickets/ticket-1", headers=admin_headers))
        assert "ticket-1" not in {r["id"] for r in seeded_supabase.rows("datafix_tickets")}

    def test_requester_cannot_delete(self, client, requester_headers, assert_response_error):
        assert_response_error(client.delete("/api/tickets/ticket-1", headers=requester_headers), 403)


# =============================================================================
# SUBMISSION
# =============================================================================

class TestSubmitTicket:
    """Tests for POST /api/tickets."""

    @pytest.fixture
    def screenshot(self, png_bytes):
        return ("screenshots", ("wrong.png", png_bytes, "image/png"))

    def test_created(self, client, seeded_supabase, requester_headers, screenshot, assert_response_success):
        response = client.post("/api/tickets", data=ticket_form(), files=[screenshot], headers=requester_headers)
        body = assert_response_success(response, 201)

        assert body["data"]["complete"] is True
        assert body["data"]["redirect_to"] == "/tickets"
        assert body["data"]["ticket"]["status"] == "open"
        assert body["data"]["ticket"]["reporter_user_id"] == "user-requester"
        assert len(body["data"]["detail_lines"]) == 2
        assert len(seeded_supabase.storage.files) == 1

    def test_no_screenshots(self, client, seeded_supabase, requester_headers, assert_response_error):
        response = client.post("/api/tickets", data=ticket_form(), headers=requester_headers)
        body = assert_response_error(response, 422, "VALIDATION_ERROR")
        assert body["error"]["field_errors"][0]["field"] == "screenshots"
        assert ("datafix_tickets", "insert") not in seeded_supabase.calls

    def test_malformed_lines(self, client, requester_headers, screenshot, assert_response_error):
        response = client.post("/api/tickets", data=ticket_form(wrong_lines="{not json"), files=[screenshot],
                               headers=requester_headers)
        body = assert_response_error(response, 422, "VALIDATION_ERROR")
        assert body["error"]["field_errors"][0]["field"] == "wrong_lines"

    def test_partial_upload_failure(self, client, seeded_supabase, requester_headers, png_bytes,
                                    assert_response_success):
        seeded_supabase.storage.failing_uploads = {1}
        files = [
            ("screenshots", ("a.png", png_bytes, "image/png")),
            ("screenshots", ("b.png", png_bytes, "image/png")),
        ]
        body = assert_response_success(
            client.post("/api/tickets", data=ticket_form(), files=files, headers=requester_headers), 201
        )
        assert body["data"]["complete"] is False
        assert body["data"]["failed_uploads"] == ["a.png"]
