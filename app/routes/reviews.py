from flask import Blueprint, request, jsonify
from app.services.review_service import ReviewService, serialize_review
from app.middleware.auth import require_auth, optional_auth
from app.utils.errors import ReviewError
from app.utils.logger import get_logger

bp = Blueprint('reviews', __name__)
logger = get_logger(__name__)
review_service = ReviewService()


@bp.route('', methods=['POST'])
@require_auth
def create_review(current_user):
    """Submit a review for a completed job"""
    try:
        data = request.get_json(silent=True) or {}

        # Validate required fields
        for field in ['job_id', 'recipient_id']:
            if data.get(field) is None:
                return jsonify({'error': f'{field} is required'}), 400

        review = review_service.submit_review(
            data['job_id'],
            current_user['user_id'],
            current_user.get('role'),
            data['recipient_id'],
            data
        )

        return jsonify({
            'message': 'Review submitted successfully',
            'review': serialize_review(review)
        }), 201

    except ReviewError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logger.error(f"Error creating review: {str(e)}")
        return jsonify({'error': 'Failed to submit review'}), 500


@bp.route('/user/<int:user_id>', methods=['GET'])
@optional_auth
def get_user_reviews(user_id, current_user):
    """Get reviews a user has received"""
    try:
        viewer_id = current_user['user_id'] if current_user else None
        result = review_service.get_reviews_for_user(user_id, viewer_id)

        return jsonify({
            'reviews': [serialize_review(r) for r in result['reviews']],
            'stats': result['stats']
        }), 200

    except ReviewError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logger.error(f"Error getting user reviews: {str(e)}")
        return jsonify({'error': 'Failed to get reviews'}), 500


@bp.route('/user/<int:user_id>/stats', methods=['GET'])
def get_user_stats(user_id):
    """Get rating statistics for a user"""
    try:
        return jsonify(review_service.get_stats_for_user(user_id)), 200

    except Exception as e:
        logger.error(f"Error getting review stats: {str(e)}")
        return jsonify({'error': 'Failed to get review statistics'}), 500


@bp.route('/job/<int:job_id>', methods=['GET'])
def get_job_reviews(job_id):
    """Get the client and freelancer reviews for a job"""
    try:
        result = review_service.get_reviews_for_job(job_id)

        return jsonify({
            key: serialize_review(review) if review else None
            for key, review in result.items()
        }), 200

    except ReviewError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logger.error(f"Error getting job reviews: {str(e)}")
        return jsonify({'error': 'Failed to get job reviews'}), 500


@bp.route('/<int:review_id>', methods=['PUT'])
@require_auth
def update_review(review_id, current_user):
    """Update your own review"""
    try:
        data = request.get_json(silent=True) or {}
        review = review_service.update_review(review_id, current_user['user_id'], data)

        return jsonify({
            'message': 'Review updated successfully',
            'review': serialize_review(review)
        }), 200

    except ReviewError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logger.error(f"Error updating review: {str(e)}")
        return jsonify({'error': 'Failed to update review'}), 500


@bp.route('/<int:review_id>', methods=['DELETE'])
@require_auth
def delete_review(review_id, current_user):
    """Delete your own review (admins may delete any)"""
    try:
        review_service.delete_review(review_id, current_user['user_id'], current_user.get('role'))
        return jsonify({'message': 'Review deleted successfully'}), 200

    except ReviewError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logger.error(f"Error deleting review: {str(e)}")
        return jsonify({'error': 'Failed to delete review'}), 500


@bp.route('/<int:review_id>/report', methods=['POST'])
@require_auth
def report_review(review_id, current_user):
    """Report a review you received"""
    try:
        data = request.get_json(silent=True) or {}
        review_service.report_review(review_id, current_user['user_id'], data.get('reason'))

        return jsonify({
            'message': 'Review reported successfully. Our team will review it shortly.'
        }), 200

    except ReviewError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logger.error(f"Error reporting review: {str(e)}")
        return jsonify({'error': 'Failed to report review'}), 500


@bp.route('/<int:review_id>/helpful', methods=['POST'])
@require_auth
def toggle_helpful(review_id, current_user):
    """Mark or unmark a review as helpful"""
    try:
        result = review_service.toggle_helpful_vote(review_id, current_user['user_id'])

        return jsonify({
            'message': 'Marked review as helpful' if result['marked'] else 'Removed helpful mark from review',
            'helpful_count': result['helpful_count']
        }), 200

    except ReviewError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logger.error(f"Error toggling helpful vote: {str(e)}")
        return jsonify({'error': 'Failed to update helpful vote'}), 500
