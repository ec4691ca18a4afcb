"""Shared fixtures for webhook tests."""

import json

import pytest


@pytest.fixture
def sample_secret():
    """Sample webhook secret."""
    return "whsec_test_secret_key"


@pytest.fixture
def sample_event_dict():
    """A BOT_MENTIONED event as delivered by the platform."""
    return {
        "event": "BOT_MENTIONED",
        "eventId": "evt_123",
        "timestamp": "2024-01-01T00:00:00.000Z",
        "apiVersion": "1",
        "community": {"id": "com_1", "name": "Builders", "url": "https://app.commonground.cg/c/builders"},
        "channel": {"id": "ch_1", "name": "general", "type": "text", "url": "https://app.commonground.cg/c/builders/general"},
        "message": {
            "id": "msg_1",
            "body": {
                "version": "1",
                "content": [
                    {"type": "botMention", "botId": "bot_1", "alias": "helper"},
                    {"type": "text", "value": " what's the weather?"},
                ],
            },
            "attachments": [],
            "createdAt": "2024-01-01T00:00:00.000Z",
            "replyToMessageId": None,
            "mentionIndex": 0,
        },
        "sender": {
            "id": "usr_1",
            "displayName": "Ada",
            "username": "ada",
            "avatarUrl": None,
        },
        "mentionedBot": {"id": "bot_1", "name": "helper"},
    }


@pytest.fixture
def sample_payload(sample_event_dict):
    """Raw body bytes of the sample event, as received on the wire."""
    return json.dumps(sample_event_dict).encode("utf-8")
