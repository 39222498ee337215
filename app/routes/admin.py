from flask import Blueprint, request, jsonify
from app.middleware.auth import require_auth, require_admin
from app.services.review_service import serialize_review
from app.routes.reviews import review_service
from app.utils.errors import ReviewError
from app.utils.logger import get_logger

bp = Blueprint('admin', __name__)
logger = get_logger(__name__)


@bp.route('/reviews/reported', methods=['GET'])
@require_auth
@require_admin
def reported_reviews(current_user):
    """Get reviews with an active report"""
    try:
        reviews = review_service.list_reported()

        return jsonify({
            'reported_reviews': [serialize_review(r) for r in reviews],
            'total_reported': len(reviews)
        }), 200

    except Exception as e:
        logger.error(f"Error getting reported reviews: {str(e)}")
        return jsonify({'error': 'Failed to get reported reviews'}), 500


@bp.route('/reviews/stats', methods=['GET'])
@require_auth
@require_admin
def review_stats(current_user):
    """Get platform-wide review statistics"""
    try:
        return jsonify(review_service.get_global_stats()), 200

    except Exception as e:
        logger.error(f"Error getting review statistics: {str(e)}")
        return jsonify({'error': 'Failed to get review statistics'}), 500


@bp.route('/reviews/<int:review_id>/report', methods=['PUT'])
@require_auth
@require_admin
def handle_reported_review(review_id, current_user):
    """Approve, hide or delete a reported review"""
    try:
        data = request.get_json(silent=True) or {}
        action = data.get('action')

        review = review_service.moderate_reported_review(
            review_id,
            action,
            data.get('admin_notes'),
            admin_id=current_user['user_id']
        )

        messages = {
            'delete': 'Reported review has been deleted',
            'approve': 'Review report has been approved (rejected)',
            'reject': 'Review has been hidden and report resolved'
        }

        return jsonify({
            'message': messages[action],
            'review': serialize_review(review) if review else None
        }), 200

    except ReviewError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logger.error(f"Error handling reported review: {str(e)}")
        return jsonify({'error': 'Failed to handle reported review'}), 500
