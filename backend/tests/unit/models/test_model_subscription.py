"""Tests for Subscription edges and the watch-history entries."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError
from tests.factories.user import UserFactory
from tests.factories.video import SubscriptionFactory, VideoFactory, WatchHistoryEntryFactory
from vidtube.models import Subscription


class TestSubscription:
    def test_edge_is_unique_per_pair(self, session):
        sub = SubscriptionFactory()
        session.add(Subscription(subscriber_id=sub.subscriber_id, channel_id=sub.channel_id))
        with pytest.raises(IntegrityError):
            session.commit()
        session.rollback()

    def test_reverse_edge_is_a_different_pair(self, session):
        sub = SubscriptionFactory()
        session.add(Subscription(subscriber_id=sub.channel_id, channel_id=sub.subscriber_id))
        session.commit()
        assert session.query(Subscription).count() == 2

    def test_self_subscription_rejected(self, session):
        user = UserFactory()
        session.add(Subscription(subscriber_id=user.id, channel_id=user.id))
        with pytest.raises(IntegrityError):
            session.commit()
        session.rollback()


class TestWatchHistory:
    def test_entries_allow_duplicates_in_stored_order(self, session):
        user = UserFactory()
        video = VideoFactory()
        first = WatchHistoryEntryFactory(user=user, video=video)
        second = WatchHistoryEntryFactory(user=user, video=video)
        session.refresh(user)
        assert [e.id for e in user.watch_history] == [first.id, second.id]
        assert first.watched_at is not None
