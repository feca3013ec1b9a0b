from ringterm.core.pending import FollowUp, PendingLookup, PendingTable, split_username


def test_take_returns_oldest_match_first():
    t = PendingTable("invite")
    first = PendingLookup("acc1", "room1", "eve", FollowUp.INVITE_TO_CONVERSATION)
    other = PendingLookup("acc1", "room1", "bob", FollowUp.INVITE_TO_CONVERSATION)
    second = PendingLookup("acc1", "room2", "eve", FollowUp.INVITE_TO_CONVERSATION)
    for e in (first, other, second):
        t.enqueue(e)
    assert t.take("acc1", "eve") is first
    assert t.take("acc1", "eve") is second
    assert t.take("acc1", "eve") is None
    assert list(t) == [other]


def test_take_matches_account():
    t = PendingTable()
    t.enqueue(PendingLookup("acc1", None, "eve", FollowUp.INVITE_CONTACT))
    assert t.take("acc2", "eve") is None
    assert len(t) == 1
    t.clear()
    assert len(t) == 0


def test_split_username():
    assert split_username("bob@ns.example.com") == ("bob", "ns.example.com")
    assert split_username("bob") == ("bob", "")
    assert split_username("bob@") == ("bob", "")
