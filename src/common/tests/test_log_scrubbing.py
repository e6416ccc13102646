from eventify.settings.observability import add_app_context, scrub_pii


def test_redacts_secrets_at_any_depth() -> None:
    event = {
        "event": "payment_intent_created",
        "client_secret": "pi_123_secret_abc",
        "payload": {"Authorization": "Bearer abc", "tier_id": "t1"},
    }

    scrubbed = scrub_pii(None, "info", event)

    assert scrubbed["client_secret"] == "[REDACTED]"
    assert scrubbed["payload"] == {"Authorization": "[REDACTED]", "tier_id": "t1"}


def test_masks_emails_in_free_text_only() -> None:
    event = {"event": "delivery failed for ada@example.com", "email": "ada@example.com"}

    scrubbed = scrub_pii(None, "warning", event)

    assert scrubbed["event"] == "delivery failed for [EMAIL]"
    assert scrubbed["email"] == "ada@example.com"


def test_app_context() -> None:
    event = add_app_context(None, "info", {"event": "x"})

    assert event["service"] == "eventify"
    assert set(event) == {"event", "service", "version", "environment"}
