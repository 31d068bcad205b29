"""Tests for the Response value type."""

import pytest

from laser_marker_mcp.models.response import Response, describe_error


def test_success_responses_with_same_message_are_equal():
    assert Response(True, "RX,OK") == Response(True, "RX,OK")
    assert hash(Response(True, "RX,OK")) == hash(Response(True, "RX,OK"))


def test_success_responses_with_different_messages_differ():
    assert Response(True, "RX,OK,0") != Response(True, "RX,OK,1")


def test_failure_responses_are_never_equal():
    """Two failure instances do not compare equal, even with equal text."""
    assert Response(False, "WX,NG,22") != Response(False, "WX,NG,22")
    assert Response(True, "WX,OK") != Response(False, "WX,OK")


def test_response_equals_itself():
    response = Response(False, "WX,NG")
    assert response == response


def test_response_not_equal_to_other_types():
    assert Response(True, "RX,OK") != "RX,OK"


def test_error_forces_failure():
    with pytest.raises(ValueError):
        Response(True, "", ConnectionError("reset"))


def test_message_defaults_to_empty():
    assert Response(False).message == ""
    assert Response(False, None).message == ""


def test_response_is_immutable():
    response = Response(True, "RX,OK")
    with pytest.raises(AttributeError):
        response.success = False


def test_failure_detail_includes_cause():
    try:
        try:
            raise OSError("connection reset by peer")
        except OSError as e:
            raise ConnectionError("send failed") from e
    except ConnectionError as e:
        error = e
    assert describe_error(error) == (
        "Exception: send failed. Inner exception: connection reset by peer."
    )


def test_failure_detail_empty_without_error():
    assert Response(False, "WX,NG").failure_detail == ""
    assert describe_error(None) == ""


def test_str_success():
    assert str(Response(True, "RX,OK,0\r\n")) == (
        "Response result: success. Response message: RX,OK,0 ."
    )


def test_str_failure_with_error():
    response = Response(False, "", ConnectionError("no route"))
    assert str(response) == (
        "Response result: failure. Response message: . Exception: no route."
    )


def test_to_dict():
    assert Response(True, "WX,OK").to_dict() == {
        "success": True,
        "message": "WX,OK",
        "error": None,
    }
    assert Response(False, "", TimeoutError("timed out")).to_dict()["error"] == (
        "Exception: timed out."
    )
