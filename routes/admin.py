"""
Admin routes: bulk upload, catalog management, upload ledger, review moderation
"""

import logging
from flask import Blueprint, request, jsonify, current_app
from flask_login import current_user
from routes.ideas import json_payload, page_args
from utils.category_service import CategoryService
from utils.dashboard_service import DashboardService
from utils.error_handling import ValidationError
from utils.file_utils import format_file_size
from utils.idea_service import IdeaService, IdeaFilters
from utils.permissions import require_admin_session
from utils.review_service import ReviewService

logger = logging.getLogger(__name__)

admin_bp = Blueprint('admin', __name__)


@admin_bp.before_request
def require_admin():
    """Every admin route needs a live admin session"""
    if request.method != 'OPTIONS':
        require_admin_session()


def upload_service():
    return current_app.extensions['bulk_upload_service']


def history_service():
    return current_app.extensions['upload_history_service']


# Bulk upload

@admin_bp.route('/upload-ideas', methods=['POST'])
def upload_ideas():
    """Ingest a CSV, Excel or JSON file of ideas"""
    upload = request.files.get('file')
    if upload is None or not upload.filename:
        raise ValidationError('Please select a file to upload')

    file_bytes = upload.read()
    result = upload_service().ingest(file_bytes, upload.filename, current_user.username,
                                     content_type=upload.mimetype)
    logger.info(f"Admin {current_user.username} uploaded {upload.filename} ({format_file_size(len(file_bytes))})")

    message = f"Successfully uploaded {result.success_count} ideas"
    if result.failure_count:
        message += f" ({result.failure_count} rows failed)"
    return jsonify({
        'success': True,
        'message': message,
        'batchId': result.batch_id,
        'count': result.success_count,
        'successCount': result.success_count,
        'failureCount': result.failure_count,
    })


# Catalog management

@admin_bp.route('/ideas', methods=['GET'])
def list_ideas():
    """All ideas, active or not, with the full filter set"""
    return jsonify(IdeaService.list_ideas(IdeaFilters.from_args(request.args), active_only=False, **page_args()))


@admin_bp.route('/ideas/<int:idea_id>', methods=['GET'])
def get_idea(idea_id):
    return jsonify(IdeaService.get_idea(idea_id).to_dict())


@admin_bp.route('/ideas/<int:idea_id>', methods=['PUT'])
def update_idea(idea_id):
    idea = IdeaService.update_idea(idea_id, json_payload())
    return jsonify({'success': True, 'message': 'Idea updated successfully', 'idea': idea.to_dict()})


@admin_bp.route('/ideas/<int:idea_id>', methods=['DELETE'])
def delete_idea(idea_id):
    IdeaService.delete_idea(idea_id)
    return jsonify({'success': True, 'message': 'Idea deleted successfully'})


@admin_bp.route('/ideas/<int:idea_id>/toggle-status', methods=['PUT'])
def toggle_idea_status(idea_id):
    idea = IdeaService.toggle_status(idea_id)
    status = 'activated' if idea.active else 'deactivated'
    return jsonify({'success': True, 'message': f'Idea {status} successfully', 'idea': idea.to_dict()})


@admin_bp.route('/filter-options', methods=['GET'])
def filter_options():
    return jsonify(IdeaService.get_filter_options(active_only=False))


@admin_bp.route('/dashboard/stats', methods=['GET'])
def dashboard_stats():
    return jsonify(IdeaService.get_dashboard_stats())


@admin_bp.route('/categories', methods=['POST'])
def add_category():
    category = CategoryService.add_category(json_payload())
    return jsonify({'success': True, 'message': 'Category added successfully', 'category': category.to_dict()}), 201


# Upload ledger

@admin_bp.route('/upload-history', methods=['GET'])
def upload_history():
    return jsonify([upload.to_dict() for upload in history_service().get_all_upload_history()])


@admin_bp.route('/upload-history/stats', methods=['GET'])
def upload_history_stats():
    return jsonify(history_service().get_upload_stats())


@admin_bp.route('/upload-history/<batch_id>', methods=['GET'])
def upload_batch(batch_id):
    return jsonify(history_service().get_upload_by_batch_id(batch_id).to_dict())


@admin_bp.route('/upload-history/<batch_id>', methods=['DELETE'])
def delete_upload_batch(batch_id):
    deleted, filename = history_service().delete_upload_batch(batch_id)
    return jsonify({
        'success': True,
        'message': f"Deleted upload '{filename}' and {deleted} ideas",
        'deletedIdeasCount': deleted,
        'filename': filename,
    })


# Review moderation

@admin_bp.route('/reviews/pending', methods=['GET'])
def pending_reviews():
    return jsonify([review.to_dict() for review in ReviewService.get_pending_reviews()])


@admin_bp.route('/reviews/<int:review_id>/approve', methods=['POST'])
def approve_review(review_id):
    review = ReviewService.approve_review(review_id)
    return jsonify({'success': True, 'message': 'Review approved', 'review': review.to_dict()})


@admin_bp.route('/reviews/<int:review_id>/reject', methods=['POST'])
def reject_review(review_id):
    ReviewService.reject_review(review_id)
    return jsonify({'success': True, 'message': 'Review rejected'})


@admin_bp.route('/reviews/<int:review_id>', methods=['DELETE'])
def delete_review(review_id):
    ReviewService.delete_review(review_id)
    return jsonify({'success': True, 'message': 'Review deleted'})


# Proposed ideas

@admin_bp.route('/proposals', methods=['GET'])
def proposals():
    proposals = DashboardService.get_proposals(status=request.args.get('status'))
    return jsonify([proposal.to_dict() for proposal in proposals])


@admin_bp.route('/proposals/<int:proposal_id>/review', methods=['POST'])
def review_proposal(proposal_id):
    payload = json_payload()
    proposal = DashboardService.review_proposal(proposal_id, payload.get('status'),
                                                payload.get('adminNotes'), current_user.username)
    return jsonify({'success': True, 'message': f'Proposal {proposal.status.lower()}', 'proposal': proposal.to_dict()})
