from unittest.mock import patch

import pytest

from use_cases.queue_flow import QUEUE_STATUS_MESSAGES, BookingQueue


@pytest.fixture
def queue(user_client):
    return BookingQueue(user_client, schedule_id=5)


def test_start_registers_once(queue, response):
    body = {"data": {"queueId": 31, "status": "WAITING", "aheadCount": 4, "myRank": 5}}

    with patch("requests.request", return_value=response(200, body)) as mock_request:
        assert queue.start() is True
        assert queue.start() is True

    assert mock_request.call_count == 1
    assert mock_request.call_args.args == ("POST", "http://api.test/queues/start-booking/5")
    assert queue.queue_id == 31
    assert queue.should_poll is True
    assert queue.position.ahead_count == 4


def test_poll_until_enterable_then_booking_path_carries_queue(queue, response):
    with patch("requests.request", return_value=response(200, {"data": {"queueId": 31, "status": "WAITING"}})):
        queue.start()

    positions = iter([
        response(200, {"data": {"queueId": 31, "status": "WAITING", "aheadCount": 1}}),
        response(200, {"data": {"queueId": 31, "status": "ENTERABLE", "aheadCount": 0}}),
    ])
    with patch("requests.request", side_effect=lambda *a, **kw: next(positions)) as mock_request:
        queue.poll()
        assert queue.is_enterable is False
        queue.poll()

    assert mock_request.call_args.args == ("GET", "http://api.test/queues/31/position")
    assert queue.poll_count == 2
    assert queue.is_enterable is True
    assert queue.should_poll is False
    assert queue.booking_path == "/booking?scheduleId=5&queueId=31"


def test_expired_position_stops_polling(queue, response):
    with patch("requests.request", return_value=response(200, {"data": {"queueId": 31, "status": "WAITING"}})):
        queue.start()

    with patch("requests.request", return_value=response(200, {"data": {"queueId": 31, "status": "EXPIRED"}})):
        queue.poll()

    assert queue.error == QUEUE_STATUS_MESSAGES["EXPIRED"]
    assert queue.should_poll is False


def test_start_failure_is_shown_and_retryable(queue, response):
    with patch("requests.request", return_value=response(404, {"message": "대기열을 찾을 수 없습니다"})):
        assert queue.start() is False
    assert queue.error == "대기열에 등록되지 않았습니다."

    with patch("requests.request", return_value=response(200, {"data": {"queueId": 31, "status": "ENTERABLE"}})):
        assert queue.start() is True
    assert queue.is_enterable is True


def test_exit_posts_once_and_swallows_failure(queue, response):
    with patch("requests.request", return_value=response(200, {"data": {"queueId": 31, "status": "WAITING"}})):
        queue.start()

    with patch("requests.request", return_value=response(500, {"message": "down"})) as mock_request:
        queue.exit()
        queue.exit()

    assert mock_request.call_count == 1
    assert mock_request.call_args.args == ("POST", "http://api.test/queues/31/exit")


def test_exit_before_start_makes_no_call(queue):
    with patch("requests.request") as mock_request:
        queue.exit()
    mock_request.assert_not_called()
