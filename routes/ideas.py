"""
Public catalog routes: ideas, categories and distinct filter values
"""

from flask import Blueprint, request, jsonify
from utils.category_service import CategoryService
from utils.error_handling import ValidationError
from utils.idea_service import IdeaService, IdeaFilters, DEFAULT_PAGE_SIZE
from utils.permissions import admin_required

ideas_bp = Blueprint('ideas', __name__)


def page_args():
    return {
        'page': request.args.get('page', 0, type=int),
        'size': request.args.get('size', DEFAULT_PAGE_SIZE, type=int),
        'sort_by': request.args.get('sortBy', 'id'),
        'sort_dir': request.args.get('sortDir', 'desc'),
    }


def json_payload():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationError('Request body must be a JSON object')
    return payload


@ideas_bp.route('/ideas', methods=['GET'])
def list_ideas():
    """Active ideas; a page when paging or filter parameters are given"""
    filters = IdeaFilters.from_args(request.args)
    if 'page' in request.args or 'size' in request.args or not filters.is_empty():
        return jsonify(IdeaService.list_ideas(filters, active_only=True, **page_args()))
    ideas = IdeaService.find_ideas(active_only=True)
    return jsonify([idea.to_dict() for idea in ideas])


@ideas_bp.route('/ideas/paginated', methods=['GET'])
def paginated_ideas():
    return jsonify(IdeaService.list_ideas(IdeaFilters.from_args(request.args), active_only=True, **page_args()))


@ideas_bp.route('/ideas/filter', methods=['GET'])
def filter_ideas():
    ideas = IdeaService.find_ideas(IdeaFilters.from_args(request.args),
                                   sort_by=request.args.get('sortBy', 'id'),
                                   sort_dir=request.args.get('sortDir', 'desc'),
                                   active_only=True)
    return jsonify([idea.to_dict() for idea in ideas])


@ideas_bp.route('/ideas/<int:idea_id>', methods=['GET'])
def get_idea(idea_id):
    return jsonify(IdeaService.get_idea(idea_id, active_only=True).to_dict())


@ideas_bp.route('/ideas', methods=['POST'])
@admin_required
def create_idea():
    idea = IdeaService.create_idea(json_payload())
    return jsonify({'success': True, 'message': 'Idea created successfully', 'idea': idea.to_dict()}), 201


@ideas_bp.route('/ideas/<int:idea_id>', methods=['PUT'])
@admin_required
def update_idea(idea_id):
    idea = IdeaService.update_idea(idea_id, json_payload())
    return jsonify({'success': True, 'message': 'Idea updated successfully', 'idea': idea.to_dict()})


@ideas_bp.route('/ideas/<int:idea_id>', methods=['DELETE'])
@admin_required
def delete_idea(idea_id):
    IdeaService.delete_idea(idea_id)
    return jsonify({'success': True, 'message': 'Idea deleted successfully'})


@ideas_bp.route('/sectors', methods=['GET'])
def sectors():
    return jsonify(IdeaService.distinct_values('sector'))


@ideas_bp.route('/difficulty-levels', methods=['GET'])
def difficulty_levels():
    return jsonify(IdeaService.distinct_values('difficultyLevel'))


@ideas_bp.route('/locations', methods=['GET'])
def locations():
    return jsonify(IdeaService.distinct_values('location'))


@ideas_bp.route('/categories', methods=['GET'])
def categories():
    return jsonify([category.to_dict() for category in CategoryService.all_categories()])


@ideas_bp.route('/main-categories', methods=['GET'])
def main_categories():
    return jsonify(CategoryService.main_categories())


@ideas_bp.route('/sub-categories', methods=['GET'])
def sub_categories():
    main_category = (request.args.get('mainCategory') or '').strip()
    if not main_category:
        raise ValidationError('mainCategory is required')
    return jsonify(CategoryService.sub_categories(main_category))


@ideas_bp.route('/category-hierarchy', methods=['GET'])
def category_hierarchy():
    return jsonify(CategoryService.hierarchy())
