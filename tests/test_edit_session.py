"""EditSession unit tests."""

from __future__ import annotations

from modules.services.edit_session import EditSession, SessionSnapshot


def test_new_session_is_empty():
    session = EditSession()

    assert session.snapshot() == SessionSnapshot(original=None, modified=None, busy=False, error=None)


def test_upload_clears_result_and_error():
    session = EditSession(original="a.png", modified="a_edit.png", error="quota exceeded")

    session.upload("b.png")

    assert session.original == "b.png"
    assert session.modified is None
    assert session.error is None
    assert session.busy is False


def test_begin_generate_sets_busy_and_clears_error():
    session = EditSession(original="a.png", error="old failure")

    session.begin_generate()

    assert session.busy is True
    assert session.error is None


def test_complete_generate_stores_result():
    session = EditSession(original="a.png", busy=True)

    session.complete_generate("a_edit.png")

    assert session.modified == "a_edit.png"
    assert session.busy is False


def test_fail_generate_keeps_previous_result():
    session = EditSession(original="a.png", modified="a_edit.png", busy=True)

    session.fail_generate("quota exceeded")

    assert session.busy is False
    assert session.error == "quota exceeded"
    assert session.modified == "a_edit.png"


def test_adopt_overwrites_payloads_and_clears_flags():
    session = EditSession(original="a.png", busy=True, error="boom")

    session.adopt("b.png", "b_edit.png")

    assert session.snapshot() == SessionSnapshot(
        original="b.png", modified="b_edit.png", busy=False, error=None
    )


def test_reset_returns_to_initial_state():
    session = EditSession(original="a.png", modified="a_edit.png", busy=True, error="boom")

    session.reset()

    assert session.snapshot() == EditSession().snapshot()
