"""Unit tests for invitation emails, reminder digests and SendGrid delivery."""

from datetime import datetime, timezone
from unittest.mock import MagicMock, patch
from uuid import UUID, uuid4

import pytest
from conftest import HR_USER_ID, chainable_table_mock

OTHER_HR_USER_ID = UUID("0b9d4e21-8f3a-4a7c-b2d6-5e1f9c3a7d44")


def _interview(hr_user_id: UUID = HR_USER_ID, email: str | None = "ana@example.com",
               name: str = "Ana Souza", hour: int = 14):
    from hr_assistant.models.interview import Interview

    applicant_id = uuid4()
    applicants = None
    if email is not None:
        applicants = {"id": applicant_id, "name": name, "email": email}
    return Interview(
        id=uuid4(),
        applicant_id=applicant_id,
        hr_user_id=hr_user_id,
        scheduled_at=datetime(2026, 10, 19, hour, 30, tzinfo=timezone.utc),
        applicants=applicants,
    )


def _delivery(to: str) -> dict:
    return {"status_code": 202, "message_id": "msg-1", "to": to}


# ---------------------------------------------------------------------------
# SendGrid delivery
# ---------------------------------------------------------------------------


class TestSendEmail:
    """send_email through the SendGrid API client."""

    def _patched_client(self, mock_client_cls: MagicMock) -> MagicMock:
        post = mock_client_cls.return_value.client.mail.send.post
        post.return_value = MagicMock(status_code=202, headers={"X-Message-Id": "abc123"})
        return post

    @patch("hr_assistant.services.email.settings")
    @patch("hr_assistant.services.email.SendGridAPIClient")
    def test_send_success(self, mock_client_cls: MagicMock, mock_settings: MagicMock) -> None:
        from hr_assistant.services.email import send_email

        mock_settings.SENDGRID_FROM_EMAIL = "hr@example.com"
        mock_settings.SENDGRID_API_KEY = "SG.key"
        post = self._patched_client(mock_client_cls)

        result = send_email("ana@example.com", "Hello", "<p>Hi <b>Ana</b></p>")

        assert result == {"status_code": 202, "message_id": "abc123", "to": "ana@example.com"}
        mock_client_cls.assert_called_once_with(api_key="SG.key")
        body = post.call_args.kwargs["request_body"]
        assert body["from"]["email"] == "hr@example.com"
        assert body["subject"] == "Hello"
        assert body["personalizations"][0]["to"][0]["email"] == "ana@example.com"
        assert {"type": "text/plain", "value": "Hi Ana"} in body["content"]
        assert {"type": "text/html", "value": "<p>Hi <b>Ana</b></p>"} in body["content"]

    @patch("hr_assistant.services.email.settings")
    @patch("hr_assistant.services.email.SendGridAPIClient")
    def test_sendgrid_rejection_raises(
        self, mock_client_cls: MagicMock, mock_settings: MagicMock
    ) -> None:
        from python_http_client.exceptions import HTTPError

        from hr_assistant.core.exceptions import EmailDeliveryError
        from hr_assistant.services.email import send_email

        mock_settings.SENDGRID_FROM_EMAIL = "hr@example.com"
        mock_settings.SENDGRID_API_KEY = "SG.bad"
        post = self._patched_client(mock_client_cls)
        post.side_effect = HTTPError(
            401,
            "Unauthorized",
            b'{"errors": [{"message": "The provided authorization grant is invalid"}]}',
            {},
        )

        with pytest.raises(EmailDeliveryError) as exc_info:
            send_email("ana@example.com", "Hello", "<p>Hi</p>")

        assert "401" in exc_info.value.message
        assert "authorization grant is invalid" in exc_info.value.message
        assert exc_info.value.details == {"status_code": 401}

    @patch("hr_assistant.services.email.settings")
    @patch("hr_assistant.services.email.SendGridAPIClient")
    def test_transport_error_raises(
        self, mock_client_cls: MagicMock, mock_settings: MagicMock
    ) -> None:
        from urllib.error import URLError

        from hr_assistant.core.exceptions import EmailDeliveryError
        from hr_assistant.services.email import send_email

        mock_settings.SENDGRID_FROM_EMAIL = "hr@example.com"
        mock_settings.SENDGRID_API_KEY = "SG.key"
        post = self._patched_client(mock_client_cls)
        post.side_effect = URLError("connection refused")

        with pytest.raises(EmailDeliveryError, match="Failed to reach SendGrid"):
            send_email("ana@example.com", "Hello", "<p>Hi</p>")

    @patch("hr_assistant.services.email.settings")
    def test_missing_sender_raises(self, mock_settings: MagicMock) -> None:
        from hr_assistant.core.exceptions import EmailDeliveryError
        from hr_assistant.services.email import send_email

        mock_settings.SENDGRID_FROM_EMAIL = ""

        with pytest.raises(EmailDeliveryError, match="Sender email is required"):
            send_email("ana@example.com", "Hello", "<p>Hi</p>")

    def test_missing_recipient_raises(self) -> None:
        from hr_assistant.core.exceptions import EmailDeliveryError
        from hr_assistant.services.email import send_email

        with pytest.raises(EmailDeliveryError, match="Recipient email is required"):
            send_email("", "Hello", "<p>Hi</p>", from_email="hr@example.com")


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


class TestRendering:
    """Invitation and reminder message content."""

    def test_format_slot_uses_scheduling_timezone(self) -> None:
        from hr_assistant.services.notifications import format_slot

        moment = datetime(2026, 10, 19, 14, 30, tzinfo=timezone.utc)

        assert format_slot(moment, "UTC") == ("Monday, October 19, 2026", "02:30 PM")
        assert format_slot(moment, "America/New_York") == (
            "Monday, October 19, 2026", "10:30 AM",
        )

    def test_render_invitation(self) -> None:
        from hr_assistant.services.notifications import render_invitation

        subject, html, text = render_invitation(
            _interview(), "Ana <Souza>", location="Room 4"
        )

        assert subject == "Interview Invitation - Ana <Souza>"
        assert "Ana &lt;Souza&gt;" in html
        assert "Room 4" in html
        assert "Monday, October 19, 2026" in text
        assert "Location: Room 4" in text

    def test_render_reminder_digest(self, hr_user) -> None:
        from hr_assistant.services.notifications import render_reminder_digest

        interviews = [_interview(name="Ana Souza", hour=9), _interview(email=None, hour=10)]

        subject, html, text = render_reminder_digest(hr_user, interviews)

        assert subject == "Interview Reminder - 2 Interview(s) Tomorrow"
        assert "Dear Dana Recruiter" in text
        assert "1. Ana Souza - Monday, October 19, 2026 at 09:30 AM" in text
        assert "2. Unknown Applicant" in text
        assert "<strong>2</strong>" in html


# ---------------------------------------------------------------------------
# Invitation batches
# ---------------------------------------------------------------------------


class TestSendInterviewInvitations:
    """Per-interview best-effort invitation sending."""

    @patch("hr_assistant.services.notifications.send_email")
    @patch("hr_assistant.services.notifications.get_interviews_by_hr")
    def test_sends_for_all_interviews(
        self, mock_list: MagicMock, mock_send: MagicMock
    ) -> None:
        from hr_assistant.services.notifications import send_interview_invitations

        first, second = _interview(hour=9), _interview(email="bo@example.com", hour=10)
        mock_list.return_value = [first, second]
        mock_send.side_effect = lambda to, *a, **kw: _delivery(to)

        results = send_interview_invitations(HR_USER_ID)

        assert results["processed"] == 2
        assert results["failed"] == 0
        assert results["total"] == 2
        assert [s["email"] for s in results["sent"]] == ["ana@example.com", "bo@example.com"]
        assert results["sent"][0]["email_status"] == 202
        assert mock_send.call_args_list[0].args[1] == "Interview Invitation - Ana Souza"

    @patch("hr_assistant.services.notifications.send_email")
    @patch("hr_assistant.services.notifications.get_interviews_by_hr")
    def test_failures_do_not_stop_batch(
        self, mock_list: MagicMock, mock_send: MagicMock
    ) -> None:
        from hr_assistant.core.exceptions import EmailDeliveryError
        from hr_assistant.services.notifications import send_interview_invitations

        no_email = _interview(email=None)
        rejected = _interview(email="bad@example.com")
        ok = _interview(email="ok@example.com")
        mock_list.return_value = [no_email, rejected, ok]

        def send(to, *args, **kwargs):
            if to == "bad@example.com":
                raise EmailDeliveryError("SendGrid API error (400): invalid")
            return _delivery(to)

        mock_send.side_effect = send

        results = send_interview_invitations(HR_USER_ID)

        assert results["processed"] == 1
        assert results["failed"] == 2
        assert results["total"] == 3
        assert results["errors"][0]["error"] == "Applicant data not found"
        assert results["errors"][1]["interview_id"] == str(rejected.id)

    @patch("hr_assistant.services.notifications.send_email")
    @patch("hr_assistant.services.notifications.get_interview_by_id")
    def test_selected_ids_with_unknown_interview(
        self, mock_get: MagicMock, mock_send: MagicMock
    ) -> None:
        from hr_assistant.core.exceptions import InterviewNotFoundError
        from hr_assistant.services.notifications import send_interview_invitations

        found = _interview()
        mock_get.side_effect = [found, InterviewNotFoundError("Interview not found")]
        mock_send.side_effect = lambda to, *a, **kw: _delivery(to)

        results = send_interview_invitations(HR_USER_ID, [str(found.id), "missing"])

        assert results["processed"] == 1
        assert results["failed"] == 1
        assert results["total"] == 2
        assert results["errors"] == [{"interview_id": "missing", "error": "Interview not found"}]
        mock_get.assert_any_call("missing", HR_USER_ID)


# ---------------------------------------------------------------------------
# Tomorrow's interviews
# ---------------------------------------------------------------------------


class TestTomorrowInterviews:
    """Calendar-day bounds and the reminder query."""

    def test_tomorrow_bounds_utc(self) -> None:
        from hr_assistant.services.interviews import tomorrow_bounds

        start, end = tomorrow_bounds(
            datetime(2026, 10, 18, 23, 30, tzinfo=timezone.utc), "UTC"
        )

        assert start == datetime(2026, 10, 19, tzinfo=timezone.utc)
        assert end == datetime(2026, 10, 20, tzinfo=timezone.utc)

    def test_tomorrow_bounds_local_zone(self) -> None:
        from hr_assistant.services.interviews import tomorrow_bounds

        # 02:00 UTC on the 19th is still the 18th in New York (EDT, UTC-4)
        start, end = tomorrow_bounds(
            datetime(2026, 10, 19, 2, 0, tzinfo=timezone.utc), "America/New_York"
        )

        assert start == datetime(2026, 10, 19, 4, 0, tzinfo=timezone.utc)
        assert end == datetime(2026, 10, 20, 4, 0, tzinfo=timezone.utc)

    @patch("hr_assistant.services.interviews.get_supabase")
    def test_query_filters_unsent_reminders(self, mock_get_supabase: MagicMock) -> None:
        from hr_assistant.services.interviews import get_tomorrow_interviews

        table = chainable_table_mock()
        table.execute.return_value = MagicMock(data=[{
            "id": str(uuid4()),
            "applicant_id": str(uuid4()),
            "hr_user_id": str(HR_USER_ID),
            "scheduled_at": "2026-10-19T09:00:00+00:00",
            "reminder_sent": False,
            "applicants": [{"id": str(uuid4()), "name": "Ana", "email": "a@x.io"}],
        }])
        client = MagicMock()
        client.table.return_value = table
        mock_get_supabase.return_value = client

        with patch("hr_assistant.services.interviews.settings") as mock_settings:
            mock_settings.SCHEDULING_TIMEZONE = "UTC"
            result = get_tomorrow_interviews(
                now=datetime(2026, 10, 18, 8, 0, tzinfo=timezone.utc)
            )

        assert len(result) == 1
        assert result[0].applicants is not None
        assert result[0].applicants.name == "Ana"
        table.gte.assert_called_once_with("scheduled_at", "2026-10-19T00:00:00+00:00")
        table.lt.assert_called_once_with("scheduled_at", "2026-10-20T00:00:00+00:00")
        table.eq.assert_called_once_with("reminder_sent", False)

    @patch("hr_assistant.services.interviews.get_supabase")
    def test_get_interview_by_id_not_found(self, mock_get_supabase: MagicMock) -> None:
        from hr_assistant.core.exceptions import InterviewNotFoundError
        from hr_assistant.services.interviews import get_interview_by_id

        table = chainable_table_mock()
        table.execute.return_value = MagicMock(data=[])
        client = MagicMock()
        client.table.return_value = table
        mock_get_supabase.return_value = client

        with pytest.raises(InterviewNotFoundError):
            get_interview_by_id(str(uuid4()), HR_USER_ID)


# ---------------------------------------------------------------------------
# Reminder run
# ---------------------------------------------------------------------------


class TestSendInterviewReminders:
    """Daily reminder digest per HR user."""

    @patch("hr_assistant.services.reminders.mark_reminder_sent")
    @patch("hr_assistant.services.reminders.send_email")
    @patch("hr_assistant.services.reminders._get_hr_user")
    @patch("hr_assistant.services.reminders.get_tomorrow_interviews")
    def test_one_digest_per_hr_user(
        self,
        mock_tomorrow: MagicMock,
        mock_get_hr: MagicMock,
        mock_send: MagicMock,
        mock_mark: MagicMock,
    ) -> None:
        from hr_assistant.models.users import HRUser
        from hr_assistant.services.reminders import send_interview_reminders

        mine = [_interview(hour=9), _interview(hour=10)]
        theirs = [_interview(hr_user_id=OTHER_HR_USER_ID)]
        mock_tomorrow.return_value = [mine[0], theirs[0], mine[1]]
        mock_get_hr.side_effect = lambda hr_id: HRUser(
            id=hr_id, name="HR", email=f"{hr_id}@example.com"
        )
        mock_send.side_effect = lambda to, *a, **kw: _delivery(to)

        summary = send_interview_reminders()

        assert summary["status"] == "success"
        assert summary["interviews_found"] == 3
        assert summary["hr_users_notified"] == 2
        assert summary["reminders_marked"] == 3
        assert mock_send.call_count == 2
        subjects = sorted(c.args[1] for c in mock_send.call_args_list)
        assert subjects == [
            "Interview Reminder - 1 Interview(s) Tomorrow",
            "Interview Reminder - 2 Interview(s) Tomorrow",
        ]
        assert {c.args[0] for c in mock_mark.call_args_list} == {
            i.id for i in mine + theirs
        }

    @patch("hr_assistant.services.reminders.mark_reminder_sent")
    @patch("hr_assistant.services.reminders.send_email")
    @patch("hr_assistant.services.reminders._get_hr_user")
    @patch("hr_assistant.services.reminders.get_tomorrow_interviews")
    def test_failed_hr_user_is_not_marked(
        self,
        mock_tomorrow: MagicMock,
        mock_get_hr: MagicMock,
        mock_send: MagicMock,
        mock_mark: MagicMock,
    ) -> None:
        from hr_assistant.models.users import HRUser
        from hr_assistant.services.reminders import send_interview_reminders

        mine = _interview()
        theirs = _interview(hr_user_id=OTHER_HR_USER_ID)
        mock_tomorrow.return_value = [mine, theirs]
        mock_get_hr.side_effect = lambda hr_id: HRUser(
            id=hr_id, name="HR", email=None if hr_id == OTHER_HR_USER_ID else "hr@example.com"
        )
        mock_send.side_effect = lambda to, *a, **kw: _delivery(to)

        summary = send_interview_reminders()

        assert summary["status"] == "partial"
        assert summary["hr_users_notified"] == 1
        assert summary["failed"] == 1
        mock_mark.assert_called_once_with(mine.id)

    @patch("hr_assistant.services.reminders.get_tomorrow_interviews", return_value=[])
    def test_nothing_tomorrow(self, mock_tomorrow: MagicMock) -> None:
        from hr_assistant.services.reminders import send_interview_reminders

        summary = send_interview_reminders()

        assert summary["status"] == "success"
        assert summary["interviews_found"] == 0
        assert summary["hr_users_notified"] == 0

    @patch("hr_assistant.services.reminders.get_tomorrow_interviews")
    def test_overlapping_run_is_skipped(self, mock_tomorrow: MagicMock) -> None:
        from hr_assistant.scheduler.lock import acquire_reminder_lock, release_reminder_lock
        from hr_assistant.services.reminders import send_interview_reminders

        try:
            assert acquire_reminder_lock() is True
            summary = send_interview_reminders()
        finally:
            release_reminder_lock()

        assert summary == {"status": "skipped", "reason": "reminder_run_in_progress"}
        mock_tomorrow.assert_not_called()

    @patch("hr_assistant.services.reminders.get_tomorrow_interviews")
    def test_lock_released_after_run(self, mock_tomorrow: MagicMock) -> None:
        from hr_assistant.scheduler.lock import acquire_reminder_lock, release_reminder_lock
        from hr_assistant.services.reminders import send_interview_reminders

        mock_tomorrow.return_value = []
        send_interview_reminders()

        assert acquire_reminder_lock() is True
        release_reminder_lock()
