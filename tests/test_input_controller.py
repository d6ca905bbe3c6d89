"""Unit tests for the draft buffer."""
from grandpa_chat.core.input_controller import InputController


def test_blank_draft_cannot_submit():
    controller = InputController()
    assert not controller.can_submit(busy=False)
    controller.set_draft("   \n\t")
    assert not controller.can_submit(busy=False)


def test_busy_blocks_submit():
    controller = InputController("Hello")
    assert controller.can_submit(busy=False)
    assert not controller.can_submit(busy=True)


def test_take_strips_and_clears():
    controller = InputController("  Hello there  ")
    assert controller.take() == "Hello there"
    assert controller.draft == ""


def test_replace_draft_overwrites():
    controller = InputController("typed so far")
    controller.replace_draft("spoken words")
    assert controller.draft == "spoken words"


def test_set_draft_none_clears():
    controller = InputController("x")
    controller.set_draft(None)
    assert controller.draft == ""
