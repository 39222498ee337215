import pytest
from app.database import DatabaseManager
from app.models import Notification, ReviewHelpfulVote, User
from app.models.notification import NotificationKind
from app.models.user import UserRole
from app.utils.errors import NotFoundError, ForbiddenError, InvalidArgumentError


@pytest.fixture
def review(marketplace, review_service):
    """Client's review of the freelancer"""
    return review_service.submit_review(
        marketplace['job'].id,
        marketplace['client'].id,
        'client',
        marketplace['freelancer'].id,
        {'rating': 1, 'comment': 'Never delivered the final files.'}
    )


@pytest.fixture
def reported_review(marketplace, review_service, review):
    """The same review after the freelancer reported it"""
    return review_service.report_review(review.id, marketplace['freelancer'].id, 'false-information')


def system_notifications(user):
    return DatabaseManager(Notification).filter(recipient_id=user.id, kind=NotificationKind.SYSTEM)


class TestReportReview:
    """Test reporting"""

    def test_recipient_reports(self, marketplace, reported_review):
        assert reported_review.is_reported is True
        assert reported_review.report_reason == 'false-information'
        assert reported_review.reported_by_id == marketplace['freelancer'].id
        assert reported_review.reported_at is not None

    def test_admins_notified(self, marketplace, reported_review):
        notifications = DatabaseManager(Notification).filter(
            recipient_id=marketplace['admin'].id, kind=NotificationKind.REVIEW_REPORTED
        )
        assert len(notifications) == 1
        assert 'false-information' in notifications[0].message

    def test_inactive_admins_skipped(self, marketplace, review_service, review):
        DatabaseManager(User).update(marketplace['admin'].id, is_active=False)

        review_service.report_review(review.id, marketplace['freelancer'].id, 'spam')

        assert DatabaseManager(Notification).count(recipient_id=marketplace['admin'].id) == 0

    @pytest.mark.parametrize('reporter', ['client', 'outsider', 'admin'])
    def test_only_recipient_reports(self, marketplace, review_service, review, reporter):
        """Test the author and third parties are rejected"""
        with pytest.raises(ForbiddenError):
            review_service.report_review(review.id, marketplace[reporter].id, 'harassment')

    @pytest.mark.parametrize('reason', ['', '   ', None])
    def test_reason_required(self, marketplace, review_service, review, reason):
        with pytest.raises(InvalidArgumentError):
            review_service.report_review(review.id, marketplace['freelancer'].id, reason)

    def test_missing_review(self, marketplace, review_service):
        with pytest.raises(NotFoundError):
            review_service.report_review(9999, marketplace['freelancer'].id, 'spam')

    def test_second_report_overwrites(self, marketplace, review_service, reported_review):
        updated = review_service.report_review(reported_review.id, marketplace['freelancer'].id, 'harassment')

        assert updated.is_reported is True
        assert updated.report_reason == 'harassment'
        assert updated.reported_at >= reported_review.reported_at

    def test_list_reported(self, marketplace, review_service, review, reported_review):
        other = review_service.submit_review(
            marketplace['job'].id, marketplace['freelancer'].id, 'freelancer', marketplace['client'].id,
            {'rating': 4, 'comment': 'Paid on time, clear brief.'}
        )

        reported = review_service.list_reported()

        assert [r.id for r in reported] == [reported_review.id]
        assert other.id not in [r.id for r in reported]


class TestModerateReportedReview:
    """Test admin moderation"""

    def test_invalid_action(self, review_service, reported_review):
        with pytest.raises(InvalidArgumentError):
            review_service.moderate_reported_review(reported_review.id, 'ban')

    def test_invalid_action_checked_first(self, review_service):
        with pytest.raises(InvalidArgumentError):
            review_service.moderate_reported_review(9999, 'ban')

    def test_missing_review(self, review_service, marketplace):
        with pytest.raises(NotFoundError):
            review_service.moderate_reported_review(9999, 'approve')

    def test_unreported_review(self, review_service, review):
        with pytest.raises(NotFoundError):
            review_service.moderate_reported_review(review.id, 'approve')

    def test_delete(self, marketplace, review_service, reported_review):
        result = review_service.moderate_reported_review(
            reported_review.id, 'delete', admin_id=marketplace['admin'].id
        )

        assert result is None
        with pytest.raises(NotFoundError):
            review_service.get_review(reported_review.id)

        for party in ('client', 'freelancer'):
            titles = [n.title for n in system_notifications(marketplace[party])]
            assert titles == ['Review Removed']

    def test_approve_keeps_review(self, marketplace, review_service, reported_review):
        """Test approving rejects the report, the review stands"""
        result = review_service.moderate_reported_review(reported_review.id, 'approve', 'Fair criticism')

        assert result.is_reported is False
        assert result.is_public is True
        assert result.is_hidden is False
        assert result.admin_notes == 'Fair criticism'

        stored = review_service.get_review(reported_review.id)
        assert stored.is_reported is False

        reviewer_titles = [n.title for n in system_notifications(marketplace['client'])]
        reporter_titles = [n.title for n in system_notifications(marketplace['freelancer'])]
        assert reviewer_titles == ['Review Report Resolved']
        assert reporter_titles == ['Review Report Resolved']

    def test_approve_default_notes(self, review_service, reported_review):
        result = review_service.moderate_reported_review(reported_review.id, 'approve')

        assert result.admin_notes == 'Report reviewed and approved by admin'

    def test_reject_hides_review(self, marketplace, review_service, reported_review):
        result = review_service.moderate_reported_review(reported_review.id, 'reject', 'Contains false claims')

        assert result.is_public is False
        assert result.is_hidden is True
        assert result.is_reported is False
        assert result.admin_notes == 'Contains false claims'
        assert result.moderation_reason == 'Contains false claims'

        # Still retrievable, but gone from public listings
        assert review_service.get_review(reported_review.id).id == reported_review.id
        public = review_service.get_reviews_for_user(marketplace['freelancer'].id)
        assert public['reviews'] == []

        assert [n.title for n in system_notifications(marketplace['client'])] == ['Review Hidden']

    def test_moderated_review_needs_new_report(self, review_service, reported_review):
        review_service.moderate_reported_review(reported_review.id, 'approve')

        with pytest.raises(NotFoundError):
            review_service.moderate_reported_review(reported_review.id, 'delete')

    def test_moderation_emails_sent(self, marketplace, review_service, email_client, reported_review):
        review_service.moderate_reported_review(reported_review.id, 'reject')

        recipients = [c.args[0] for c in email_client.send_moderation_notice.call_args_list]
        assert sorted(recipients) == ['client@test.com', 'freelancer@test.com']


class TestHelpfulVotes:
    """Test helpful vote toggling"""

    def test_toggle_twice_restores(self, marketplace, review_service, review):
        user = marketplace['outsider']

        first = review_service.toggle_helpful_vote(review.id, user.id)
        assert first == {'helpful_count': 1, 'marked': True}

        second = review_service.toggle_helpful_vote(review.id, user.id)
        assert second == {'helpful_count': 0, 'marked': False}

    def test_votes_are_per_user(self, marketplace, review_service, review):
        for party in ('outsider', 'admin', 'freelancer'):
            review_service.toggle_helpful_vote(review.id, marketplace[party].id)

        result = review_service.toggle_helpful_vote(review.id, marketplace['admin'].id)

        assert result['helpful_count'] == 2
        assert len(review_service.get_review(review.id).helpful_votes) == 2

    def test_missing_review(self, marketplace, review_service):
        with pytest.raises(NotFoundError):
            review_service.toggle_helpful_vote(9999, marketplace['outsider'].id)

    def test_votes_removed_with_review(self, marketplace, review_service, review):
        review_service.toggle_helpful_vote(review.id, marketplace['outsider'].id)

        review_service.delete_review(review.id, marketplace['admin'].id, UserRole.ADMIN)

        assert DatabaseManager(ReviewHelpfulVote).count(review_id=review.id) == 0
