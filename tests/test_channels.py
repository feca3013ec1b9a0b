import pytest

from ringterm.core.channels import ChannelList
from ringterm.core.models import Channel, ChannelType


def make_list(n: int) -> ChannelList:
    items = [Channel.control()] + [
        Channel(id=f"c{i}", channel_type=ChannelType.group()) for i in range(1, n)
    ]
    return ChannelList(items)


@pytest.mark.parametrize("n", [1, 2, 3, 6])
def test_bubble_up_keeps_anchor_first(n):
    for index in range(n):
        for sel in range(n):
            cl = make_list(n)
            cl.select(sel)
            cl.bubble_up(index)
            assert cl.at(0).is_control()
            assert len(cl) == n


@pytest.mark.parametrize("n", [2, 3, 5, 7])
def test_bubble_up_selection_follows_channel(n):
    for index in range(n):
        for sel in range(n):
            cl = make_list(n)
            cl.select(sel)
            before = cl.selected_channel()
            bubbled = cl.at(index)
            cl.bubble_up(index)
            if sel == index and index != 0:
                assert cl.selected == 1
                assert cl.selected_channel() is bubbled
            else:
                assert cl.selected_channel() is before


def test_bubble_up_moves_target_to_position_one():
    cl = make_list(5)
    cl.bubble_up(3)
    assert cl.ids() == ["", "c3", "c1", "c2", "c4"]


def test_bubble_up_index_zero_is_noop():
    cl = make_list(4)
    cl.select(0)
    cl.bubble_up(0)
    assert cl.ids() == ["", "c1", "c2", "c3"]
    assert cl.selected == 0


def test_bubble_up_out_of_range_ignored():
    cl = make_list(3)
    cl.select(2)
    cl.bubble_up(7)
    assert cl.ids() == ["", "c1", "c2"]
    assert cl.selected == 2


def test_insert_and_bubble():
    cl = make_list(3)
    cl.select(2)
    idx = cl.insert_and_bubble(Channel(id="new", channel_type=ChannelType.invite()))
    assert idx == 1
    assert cl.ids() == ["", "new", "c1", "c2"]
    assert cl.selected_channel().id == "c2"


def test_insert_into_empty_list_selects_it():
    cl = ChannelList()
    assert cl.selected is None
    cl.insert_and_bubble(Channel.control())
    assert cl.selected == 0


def test_remove_by_id_before_selection_shifts_it():
    cl = make_list(4)
    cl.select(3)
    assert cl.remove_by_id("c1")
    assert cl.selected_channel().id == "c3"


def test_remove_selected_falls_back_to_anchor():
    cl = make_list(4)
    cl.select(2)
    cl.remove_by_id("c2")
    assert cl.selected == 0
    assert cl.ids() == ["", "c1", "c3"]


def test_remove_unknown_and_control_are_noops():
    cl = make_list(3)
    cl.select(1)
    assert not cl.remove_by_id("nope")
    assert not cl.remove_by_id("")
    assert cl.ids() == ["", "c1", "c2"]
    assert cl.selected == 1


def test_next_and_previous_wrap():
    cl = make_list(3)
    cl.previous()
    assert cl.selected == 2
    cl.next()
    assert cl.selected == 0
    cl.next()
    assert cl.selected == 1


def test_replace_resets_selection():
    cl = make_list(3)
    cl.select(2)
    cl.replace([Channel.control()])
    assert cl.selected == 0
    cl.replace([])
    assert cl.selected is None
