"""
Idea detail routes: SWOT factors, investments, schemes, bank loans, reviews and ratings
"""

from flask import Blueprint, request, jsonify
from routes.ideas import json_payload
from utils.idea_detail_service import IdeaDetailService
from utils.permissions import admin_required
from utils.review_service import ReviewService

idea_details_bp = Blueprint('idea_details', __name__)


@idea_details_bp.route('/<int:idea_id>/complete', methods=['GET'])
def complete_details(idea_id):
    return jsonify(IdeaDetailService.get_complete_details(idea_id))


# Internal factors

@idea_details_bp.route('/<int:idea_id>/internal-factors', methods=['GET'])
def internal_factors(idea_id):
    return jsonify([item.to_dict() for item in IdeaDetailService.get_internal_factors(idea_id)])


@idea_details_bp.route('/<int:idea_id>/internal-factors', methods=['POST'])
@admin_required
def add_internal_factors(idea_id):
    record = IdeaDetailService.add_internal_factors(idea_id, json_payload())
    return jsonify(record.to_dict()), 201


@idea_details_bp.route('/internal-factors/<int:record_id>', methods=['DELETE'])
@admin_required
def delete_internal_factors(record_id):
    IdeaDetailService.delete_internal_factors(record_id)
    return jsonify({'success': True, 'message': 'Internal factors deleted'})


# Investments

@idea_details_bp.route('/<int:idea_id>/investments', methods=['GET'])
def investments(idea_id):
    return jsonify(IdeaDetailService.investment_summary(idea_id))


@idea_details_bp.route('/<int:idea_id>/investments', methods=['POST'])
@admin_required
def add_investment(idea_id):
    record = IdeaDetailService.add_investment(idea_id, json_payload())
    return jsonify(record.to_dict()), 201


@idea_details_bp.route('/investments/<int:record_id>', methods=['DELETE'])
@admin_required
def delete_investment(record_id):
    IdeaDetailService.delete_investment(record_id)
    return jsonify({'success': True, 'message': 'Investment deleted'})


# Government schemes

@idea_details_bp.route('/<int:idea_id>/schemes', methods=['GET'])
def schemes(idea_id):
    return jsonify([item.to_dict() for item in IdeaDetailService.get_schemes(idea_id)])


@idea_details_bp.route('/<int:idea_id>/schemes/<scheme_type>', methods=['GET'])
def schemes_by_type(idea_id, scheme_type):
    return jsonify([item.to_dict() for item in IdeaDetailService.get_schemes(idea_id, scheme_type)])


@idea_details_bp.route('/<int:idea_id>/schemes', methods=['POST'])
@admin_required
def add_scheme(idea_id):
    record = IdeaDetailService.add_scheme(idea_id, json_payload())
    return jsonify(record.to_dict()), 201


@idea_details_bp.route('/schemes/<int:record_id>', methods=['DELETE'])
@admin_required
def delete_scheme(record_id):
    IdeaDetailService.delete_scheme(record_id)
    return jsonify({'success': True, 'message': 'Scheme deleted'})


# Bank loans

@idea_details_bp.route('/<int:idea_id>/bank-loans', methods=['GET'])
def bank_loans(idea_id):
    return jsonify([item.to_dict() for item in IdeaDetailService.get_bank_loans(idea_id)])


@idea_details_bp.route('/<int:idea_id>/bank-loans/<loan_type>', methods=['GET'])
def bank_loans_by_type(idea_id, loan_type):
    return jsonify([item.to_dict() for item in IdeaDetailService.get_bank_loans(idea_id, loan_type)])


@idea_details_bp.route('/<int:idea_id>/bank-loans', methods=['POST'])
@admin_required
def add_bank_loan(idea_id):
    record = IdeaDetailService.add_bank_loan(idea_id, json_payload())
    return jsonify(record.to_dict()), 201


@idea_details_bp.route('/bank-loans/<int:record_id>', methods=['DELETE'])
@admin_required
def delete_bank_loan(record_id):
    IdeaDetailService.delete_bank_loan(record_id)
    return jsonify({'success': True, 'message': 'Bank loan deleted'})


# Reviews

@idea_details_bp.route('/<int:idea_id>/reviews', methods=['GET'])
def reviews(idea_id):
    return jsonify([review.to_dict() for review in ReviewService.get_approved_reviews(idea_id)])


@idea_details_bp.route('/<int:idea_id>/rating-summary', methods=['GET'])
def rating_summary(idea_id):
    return jsonify(ReviewService.rating_summary(idea_id))


@idea_details_bp.route('/<int:idea_id>/reviews', methods=['POST'])
def submit_review(idea_id):
    review = ReviewService.submit_review(idea_id, json_payload())
    return jsonify({
        'success': True,
        'message': 'Review submitted successfully and is awaiting approval',
        'review': review.to_dict(),
    }), 201


@idea_details_bp.route('/reviews/<int:review_id>/vote', methods=['POST'])
def vote(review_id):
    helpful = request.args.get('isHelpful', 'true').lower() in ('true', '1', 'yes')
    review = ReviewService.vote(review_id, helpful)
    return jsonify({'success': True, 'message': 'Vote recorded', 'review': review.to_dict()})
