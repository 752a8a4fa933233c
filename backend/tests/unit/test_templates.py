"""Unit tests for notification templates"""

import pytest

from domain.notifications import NotificationMessage, RecordingNotifier, templates


class TestTemplates:

    def test_new_upload_includes_link(self):
        message = templates.new_upload(
            ["bob@example.com"], "contract.pdf", "alice", "https://files.test/contract.pdf"
        )

        assert message.subject == "New Document Uploaded for Review"
        assert 'href="https://files.test/contract.pdf"' in message.html
        assert "https://files.test/contract.pdf" in message.text
        assert message.template == templates.NEW_UPLOAD

    def test_user_values_are_escaped_in_html(self):
        message = templates.approved_for_uploader(
            ["alice@example.com"], "<script>x</script>.pdf", "alice"
        )

        assert "<script>" not in message.html
        assert "&lt;script&gt;" in message.html
        assert "<script>x</script>.pdf" in message.text

    def test_status_update_names_status(self):
        message = templates.status_update(["alice@example.com"], "a.pdf", "alice", "Unapproved")

        assert message.subject == 'Document "a.pdf" Status: Unapproved'
        assert "Unapproved" in message.text

    @pytest.mark.parametrize("status,subject", [
        ("Approved", "Document Reviewed & Approved"),
        ("Rejected", "Document Reviewed & Rejected"),
    ])
    def test_review_decision_subject(self, status, subject):
        message = templates.review_decision(
            ["alice@example.com"], "alice", "carol", status, ["a.pdf", "b.pdf"]
        )

        assert message.subject == subject
        assert "<li>a.pdf</li><li>b.pdf</li>" in message.html
        assert "- b.pdf" in message.text

    def test_otp_code_expiry_in_minutes(self):
        message = templates.otp_code("dave@example.com", "123456", 300)

        assert message.recipients == ["dave@example.com"]
        assert "123456" in message.text
        assert "5 minutes" in message.text


class TestNotificationMessage:

    def test_payload_round_trip_preserves_template(self):
        message = templates.ready_for_review(["carol@example.com"], "a.pdf", "alice")
        restored = NotificationMessage.from_payload(message.to_payload())

        assert restored == message

    def test_validate_requires_recipients(self):
        message = NotificationMessage(recipients=[], subject="s", html="", text="")

        with pytest.raises(ValueError, match="recipient"):
            message.validate()

    def test_recording_notifier_rejects_invalid_message(self):
        notifier = RecordingNotifier()

        with pytest.raises(ValueError):
            notifier.send(NotificationMessage(recipients=["a@example.com"], subject="", html="", text=""))
        assert notifier.sent == []
