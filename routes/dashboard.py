"""
User dashboard routes: profile, saved ideas, proposed ideas and rewards
"""

from flask import Blueprint, request, jsonify, current_app
from flask_login import login_required, current_user
from routes.ideas import json_payload
from utils.dashboard_service import DashboardService

dashboard_bp = Blueprint('dashboard', __name__)


@dashboard_bp.route('/', methods=['GET'])
@login_required
def index():
    """Dashboard overview for the current user"""
    return jsonify({
        'user': current_user.to_dict(),
        'stats': DashboardService.get_stats(current_user.id),
    })


@dashboard_bp.route('/profile', methods=['GET'])
@login_required
def profile():
    return jsonify(current_user.to_dict())


@dashboard_bp.route('/profile', methods=['PUT'])
@login_required
def update_profile():
    user = current_app.extensions['user_service'].update_profile(current_user.id, json_payload())
    return jsonify({'success': True, 'message': 'Profile updated successfully', 'user': user.to_dict()})


@dashboard_bp.route('/saved-ideas', methods=['GET'])
@login_required
def saved_ideas():
    return jsonify([saved.to_dict() for saved in DashboardService.get_saved_ideas(current_user.id)])


@dashboard_bp.route('/saved-ideas/<int:idea_id>', methods=['POST'])
@login_required
def save_idea(idea_id):
    notes = (request.get_json(silent=True) or {}).get('notes')
    saved = DashboardService.save_idea(current_user.id, idea_id, notes)
    return jsonify({'success': True, 'message': 'Idea saved', 'savedIdea': saved.to_dict()}), 201


@dashboard_bp.route('/saved-ideas/<int:idea_id>', methods=['DELETE'])
@login_required
def unsave_idea(idea_id):
    DashboardService.unsave_idea(current_user.id, idea_id)
    return jsonify({'success': True, 'message': 'Idea removed from saved list'})


@dashboard_bp.route('/proposals', methods=['GET'])
@login_required
def proposals():
    return jsonify([proposal.to_dict() for proposal in DashboardService.get_proposals(user_id=current_user.id)])


@dashboard_bp.route('/proposals', methods=['POST'])
@login_required
def propose_idea():
    proposal = DashboardService.propose_idea(current_user.id, json_payload())
    return jsonify({'success': True, 'message': 'Idea submitted for review', 'proposal': proposal.to_dict()}), 201


@dashboard_bp.route('/rewards', methods=['GET'])
@login_required
def rewards():
    return jsonify([reward.to_dict() for reward in DashboardService.get_rewards(current_user.id)])
