import pytest
from unittest.mock import patch
from app.main import create_app
from app.routes import reviews as review_routes
from app.routes import admin as admin_routes
from app.utils.security import generate_user_token


@pytest.fixture
def client(marketplace, review_service):
    """Flask test client wired to the inline review service"""
    app = create_app('testing')
    with patch.object(review_routes, 'review_service', review_service), \
            patch.object(admin_routes, 'review_service', review_service):
        yield app.test_client()


def auth(user):
    return {'Authorization': f'Bearer {generate_user_token(user)}'}


def post_review(client, marketplace, reviewer='client', recipient='freelancer', **body):
    body.setdefault('job_id', marketplace['job'].id)
    body.setdefault('recipient_id', marketplace[recipient].id)
    body.setdefault('rating', 5)
    body.setdefault('comment', 'Great work, thanks!')
    return client.post('/api/reviews', json=body, headers=auth(marketplace[reviewer]))


def test_blueprints_share_review_service():
    """Test both blueprints dispatch through one notification scheduler"""
    assert admin_routes.review_service is review_routes.review_service


class TestReviewRoutes:
    """Test the review HTTP endpoints"""

    def test_health(self, client):
        response = client.get('/health')
        assert response.status_code == 200

    def test_create_review(self, client, marketplace):
        response = post_review(client, marketplace)

        assert response.status_code == 201
        review = response.get_json()['review']
        assert review['type'] == 'client-to-freelancer'
        assert review['categories'] == {
            'communication': 5,
            'quality_of_work': 5,
            'value_for_money': 5,
            'expertise': 5,
            'professionalism': 5
        }
        assert review['helpful_count'] == 0

    def test_duplicate_review(self, client, marketplace):
        post_review(client, marketplace)
        response = post_review(client, marketplace)

        assert response.status_code == 409
        assert response.get_json()['error'] == 'You have already submitted a review for this job'

    def test_requires_token(self, client, marketplace):
        response = client.post('/api/reviews', json={'job_id': marketplace['job'].id})
        assert response.status_code == 401

    def test_invalid_token(self, client):
        response = client.post('/api/reviews', json={}, headers={'Authorization': 'Bearer nope'})
        assert response.status_code == 401

    def test_missing_fields(self, client, marketplace):
        response = client.post('/api/reviews', json={'rating': 5}, headers=auth(marketplace['client']))
        assert response.status_code == 400
        assert response.get_json()['error'] == 'job_id is required'

    def test_error_mapping(self, client, marketplace):
        assert post_review(client, marketplace, job_id=9999).status_code == 404
        assert post_review(client, marketplace, rating=8).status_code == 400
        assert post_review(client, marketplace, reviewer='admin').status_code == 403

    def test_user_reviews_and_stats(self, client, marketplace):
        post_review(client, marketplace, rating=4)
        freelancer_id = marketplace['freelancer'].id

        response = client.get(f'/api/reviews/user/{freelancer_id}')
        assert response.status_code == 200
        body = response.get_json()
        assert len(body['reviews']) == 1
        assert body['stats']['average_rating'] == 4.0

        stats = client.get(f'/api/reviews/user/{freelancer_id}/stats').get_json()
        assert stats['total_reviews'] == 1
        assert stats['rating_distribution']['4'] == 1

    def test_private_review_visible_to_recipient(self, client, marketplace):
        post_review(client, marketplace, is_public=False)
        url = f"/api/reviews/user/{marketplace['freelancer'].id}"

        assert client.get(url).get_json()['reviews'] == []
        own = client.get(url, headers=auth(marketplace['freelancer'])).get_json()
        assert len(own['reviews']) == 1

    def test_job_reviews(self, client, marketplace):
        post_review(client, marketplace)

        body = client.get(f"/api/reviews/job/{marketplace['job'].id}").get_json()

        assert body['client_review']['reviewer_id'] == marketplace['client'].id
        assert body['freelancer_review'] is None

    def test_update_and_delete(self, client, marketplace):
        review_id = post_review(client, marketplace).get_json()['review']['id']

        response = client.put(f'/api/reviews/{review_id}', json={'rating': 2},
                              headers=auth(marketplace['client']))
        assert response.status_code == 200
        assert response.get_json()['review']['rating'] == 2

        response = client.delete(f'/api/reviews/{review_id}', headers=auth(marketplace['freelancer']))
        assert response.status_code == 403

        response = client.delete(f'/api/reviews/{review_id}', headers=auth(marketplace['client']))
        assert response.status_code == 200

    def test_helpful_toggle(self, client, marketplace):
        review_id = post_review(client, marketplace).get_json()['review']['id']
        url = f'/api/reviews/{review_id}/helpful'

        assert client.post(url, headers=auth(marketplace['outsider'])).get_json()['helpful_count'] == 1
        assert client.post(url, headers=auth(marketplace['outsider'])).get_json()['helpful_count'] == 0


class TestAdminRoutes:
    """Test the moderation endpoints"""

    def report(self, client, marketplace):
        review_id = post_review(client, marketplace).get_json()['review']['id']
        response = client.post(f'/api/reviews/{review_id}/report', json={'reason': 'spam'},
                               headers=auth(marketplace['freelancer']))
        assert response.status_code == 200
        return review_id

    def test_report_forbidden_for_author(self, client, marketplace):
        review_id = post_review(client, marketplace).get_json()['review']['id']

        response = client.post(f'/api/reviews/{review_id}/report', json={'reason': 'spam'},
                               headers=auth(marketplace['client']))

        assert response.status_code == 403

    def test_admin_only(self, client, marketplace):
        for path in ('/api/admin/reviews/reported', '/api/admin/reviews/stats'):
            assert client.get(path, headers=auth(marketplace['client'])).status_code == 403

    def test_reported_listing(self, client, marketplace):
        review_id = self.report(client, marketplace)

        body = client.get('/api/admin/reviews/reported', headers=auth(marketplace['admin'])).get_json()

        assert body['total_reported'] == 1
        assert body['reported_reviews'][0]['id'] == review_id

    def test_moderate_reject(self, client, marketplace):
        review_id = self.report(client, marketplace)

        response = client.put(f'/api/admin/reviews/{review_id}/report',
                              json={'action': 'reject', 'admin_notes': 'Abusive'},
                              headers=auth(marketplace['admin']))

        assert response.status_code == 200
        assert response.get_json()['review']['is_public'] is False

    def test_moderate_delete(self, client, marketplace):
        review_id = self.report(client, marketplace)

        response = client.put(f'/api/admin/reviews/{review_id}/report', json={'action': 'delete'},
                              headers=auth(marketplace['admin']))

        assert response.status_code == 200
        assert response.get_json()['review'] is None

    def test_moderate_invalid_action(self, client, marketplace):
        review_id = self.report(client, marketplace)

        response = client.put(f'/api/admin/reviews/{review_id}/report', json={'action': 'ban'},
                              headers=auth(marketplace['admin']))

        assert response.status_code == 400

    def test_global_stats(self, client, marketplace):
        post_review(client, marketplace, rating=3)

        stats = client.get('/api/admin/reviews/stats', headers=auth(marketplace['admin'])).get_json()

        assert stats['total_reviews'] == 1
        assert stats['average_rating'] == 3.0
