from datetime import datetime, timezone

from therapist_relay.api.converters import to_chat_request, to_chat_response_body, to_turn
from therapist_relay.api.schemas import ChatRequestBody, HistoryItem
from therapist_relay.core.context import ChatResponse


RECEIVED_AT = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def test_history_types_map_to_roles():
    assert to_turn(HistoryItem(content="a", type="user"), RECEIVED_AT).role == "user"
    assert to_turn(HistoryItem(content="b", type="ai"), RECEIVED_AT).role == "assistant"
    assert to_turn(HistoryItem(content="c", type="assistant"), RECEIVED_AT).role == "assistant"


def test_display_time_falls_back_to_receipt_time():
    turn = to_turn(HistoryItem(content="a", type="user", timestamp="14:05"), RECEIVED_AT)
    assert turn.timestamp == RECEIVED_AT


def test_iso_timestamp_is_parsed():
    turn = to_turn(
        HistoryItem(content="a", type="user", timestamp="2024-04-30T08:30:00Z"), RECEIVED_AT
    )
    assert turn.timestamp == datetime(2024, 4, 30, 8, 30, tzinfo=timezone.utc)


def test_chat_request_keeps_full_history():
    body = ChatRequestBody(
        message="hello",
        history=[HistoryItem(content=str(index), type="user") for index in range(8)],
    )
    request = to_chat_request(body)
    assert request.message == "hello"
    assert [turn.content for turn in request.history.turns] == [str(index) for index in range(8)]


def test_response_body():
    body = to_chat_response_body(ChatResponse(reply="I hear you.", timestamp=RECEIVED_AT))
    assert body.response == "I hear you."
    assert body.timestamp == RECEIVED_AT
