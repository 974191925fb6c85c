"""
Unit tests for nips.nip02 module.

Tests:
- build_contact_list() tags, de-duplication, key validation
- latest_contact_list() author and kind filtering
- followed_pubkeys() extraction
"""

import pytest

from nostrmarket.models import Event
from nostrmarket.nips.nip02 import build_contact_list, followed_pubkeys, latest_contact_list
from tests.conftest import OTHER_PUBKEY, PUBKEY, THIRD_PUBKEY, make_contact_list, make_listing


class TestBuildContactList:
    def test_single_follow(self):
        draft = build_contact_list([OTHER_PUBKEY], created_at=5)
        assert draft.kind == 3
        assert draft.content == ""
        assert draft.created_at == 5
        assert draft.tags == (("p", OTHER_PUBKEY),)

    def test_deduplicated_in_order(self):
        draft = build_contact_list([THIRD_PUBKEY, OTHER_PUBKEY, THIRD_PUBKEY])
        assert draft.tag_values("p") == [THIRD_PUBKEY, OTHER_PUBKEY]

    def test_empty(self):
        assert build_contact_list([]).tags == ()

    @pytest.mark.parametrize("key", ["npub1abc", "A" * 64, "a" * 63])
    def test_invalid_key(self, key):
        with pytest.raises(ValueError, match="Invalid public key"):
            build_contact_list([key])


class TestLatestContactList:
    def test_newest_of_author(self):
        old = Event.from_dict(make_contact_list([OTHER_PUBKEY], created_at=100))
        new = Event.from_dict(make_contact_list([THIRD_PUBKEY], created_at=200))
        assert latest_contact_list([old, new], PUBKEY) == new

    def test_other_authors_ignored(self):
        theirs = Event.from_dict(make_contact_list([THIRD_PUBKEY], pubkey=OTHER_PUBKEY, created_at=999))
        mine = Event.from_dict(make_contact_list([OTHER_PUBKEY], created_at=1))
        assert latest_contact_list([theirs, mine], PUBKEY) == mine

    def test_other_kinds_ignored(self):
        assert latest_contact_list([Event.from_dict(make_listing())], PUBKEY) is None

    def test_none(self):
        assert latest_contact_list([], PUBKEY) is None


class TestFollowedPubkeys:
    def test_none_event(self):
        assert followed_pubkeys(None) == []

    def test_extracts_valid_p_tags(self):
        event = Event.from_dict(
            make_contact_list([OTHER_PUBKEY, "not-a-key", OTHER_PUBKEY, THIRD_PUBKEY])
        )
        assert followed_pubkeys(event) == [OTHER_PUBKEY, THIRD_PUBKEY]
