"""
Idea catalog service: CRUD, filtered and paginated listings, distinct filter values
"""

import logging
from decimal import Decimal, InvalidOperation
from sqlalchemy.exc import SQLAlchemyError
from models import (db, Idea, IdeaTargetAudience, IdeaSpecialAdvantage, IdeaReview, IdeaInvestment,
                    IdeaScheme, IdeaBankLoan, IdeaInternalFactor, SavedIdea, Category, UploadHistory, User)
from forms import IdeaForm, validate_form
from utils.caching import cache_manager, cache_ttl, invalidate_filter_cache
from utils.error_handling import NotFound, ValidationError, InternalError

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

SORT_FIELDS = {
    'id': Idea.id,
    'title': Idea.title,
    'category': Idea.category,
    'sector': Idea.sector,
    'investmentNeeded': Idea.investment_needed,
    'difficultyLevel': Idea.difficulty_level,
    'location': Idea.location,
    'timeToMarket': Idea.time_to_market,
    'createdAt': Idea.created_at,
}

# Child tables keyed by idea_id, removed before their parent idea
IDEA_CHILD_MODELS = (IdeaTargetAudience, IdeaSpecialAdvantage, IdeaReview, IdeaInvestment,
                     IdeaScheme, IdeaBankLoan, IdeaInternalFactor, SavedIdea)

TEXT_FIELDS = {
    'title': 'title',
    'description': 'description',
    'category': 'category',
    'sector': 'sector',
    'expertiseNeeded': 'expertise_needed',
    'trainingNeeded': 'training_needed',
    'resources': 'resources',
    'successExamples': 'success_examples',
    'videoUrl': 'video_url',
    'governmentSubsidies': 'government_subsidies',
    'fundingOptions': 'funding_options',
    'bankAssistance': 'bank_assistance',
    'difficultyLevel': 'difficulty_level',
    'timeToMarket': 'time_to_market',
    'location': 'location',
    'imageUrl': 'image_url',
}


def split_list_value(value):
    """Comma-split a text value; lists pass through"""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v).strip() for v in value if v is not None and str(v).strip()]
    return [part.strip() for part in str(value).split(',') if part.strip()]


def delete_idea_rows(idea_ids, chunk_size=500):
    """Delete ideas and every dependent row, children first. Caller commits."""
    idea_ids = list(idea_ids)
    deleted = 0
    for start in range(0, len(idea_ids), chunk_size):
        chunk = idea_ids[start:start + chunk_size]
        for model in IDEA_CHILD_MODELS:
            model.query.filter(model.idea_id.in_(chunk)).delete(synchronize_session=False)
        deleted += Idea.query.filter(Idea.id.in_(chunk)).delete(synchronize_session=False)
    return deleted


class IdeaFilters:
    """Optional, conjunctive listing predicates; None means no filter"""

    FIELDS = ('search', 'category', 'sector', 'difficulty_level', 'location',
              'max_investment', 'target_audience', 'special_advantage')

    QUERY_NAMES = {
        'search': 'search',
        'category': 'category',
        'sector': 'sector',
        'difficulty_level': 'difficultyLevel',
        'location': 'location',
        'max_investment': 'maxInvestment',
        'target_audience': 'targetAudience',
        'special_advantage': 'specialAdvantage',
    }

    def __init__(self, **kwargs):
        for field in self.FIELDS:
            value = kwargs.pop(field, None)
            if isinstance(value, str):
                value = value.strip() or None
            setattr(self, field, value)
        if kwargs:
            raise TypeError(f"Unknown filters: {', '.join(kwargs)}")
        if self.max_investment is not None and not isinstance(self.max_investment, Decimal):
            self.max_investment = self._parse_amount(self.max_investment)

    @staticmethod
    def _parse_amount(value):
        try:
            amount = Decimal(str(value))
        except (InvalidOperation, ValueError):
            raise ValidationError(f"maxInvestment must be a number, got '{value}'")
        if not amount.is_finite():
            raise ValidationError(f"maxInvestment must be a number, got '{value}'")
        return amount

    @classmethod
    def from_args(cls, args):
        return cls(**{field: args.get(name) for field, name in cls.QUERY_NAMES.items()})

    def is_empty(self):
        return all(getattr(self, field) is None for field in self.FIELDS)

    def apply(self, query):
        if self.search:
            escaped = self.search.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')
            pattern = f"%{escaped}%"
            query = query.filter(db.or_(Idea.title.ilike(pattern, escape='\\'),
                                        Idea.description.ilike(pattern, escape='\\')))
        if self.category:
            query = query.filter(Idea.category == self.category)
        if self.sector:
            query = query.filter(Idea.sector == self.sector)
        if self.difficulty_level:
            query = query.filter(Idea.difficulty_level == self.difficulty_level)
        if self.location:
            query = query.filter(Idea.location == self.location)
        if self.max_investment is not None:
            query = query.filter(Idea.investment_needed <= self.max_investment)
        if self.target_audience:
            query = query.filter(Idea.target_audience_tags.any(IdeaTargetAudience.value == self.target_audience))
        if self.special_advantage:
            query = query.filter(Idea.special_advantage_tags.any(IdeaSpecialAdvantage.value == self.special_advantage))
        return query


def page_response(pagination, page, size, content):
    """Zero-based page envelope"""
    total_pages = pagination.pages or 0
    return {
        'content': content,
        'totalElements': pagination.total or 0,
        'totalPages': total_pages,
        'number': page,
        'size': size,
        'numberOfElements': len(content),
        'first': page == 0,
        'last': page >= total_pages - 1,
    }


class IdeaService:
    """Service class for catalog operations"""

    @staticmethod
    def get_idea(idea_id, active_only=False):
        idea = db.session.get(Idea, idea_id)
        if not idea or (active_only and not idea.active):
            raise NotFound(f"Idea not found with id: {idea_id}")
        return idea

    @staticmethod
    def _query(filters=None, active_only=True):
        query = Idea.query
        if active_only:
            query = query.filter(Idea.active.is_(True))
        if filters is not None:
            query = filters.apply(query)
        return query

    @staticmethod
    def _order(query, sort_by='id', sort_dir='desc'):
        column = SORT_FIELDS.get(sort_by or 'id', Idea.id)
        if (sort_dir or 'desc').lower() == 'asc':
            return query.order_by(column.asc(), Idea.id.asc())
        return query.order_by(column.desc(), Idea.id.desc())

    @staticmethod
    def list_ideas(filters=None, page=0, size=DEFAULT_PAGE_SIZE, sort_by='id', sort_dir='desc', active_only=True):
        """Filtered, sorted page of ideas"""
        page = max(page or 0, 0)
        size = min(max(size or DEFAULT_PAGE_SIZE, 1), MAX_PAGE_SIZE)

        query = IdeaService._order(IdeaService._query(filters, active_only), sort_by, sort_dir)
        pagination = query.paginate(page=page + 1, per_page=size, error_out=False)
        return page_response(pagination, page, size, [idea.to_dict() for idea in pagination.items])

    @staticmethod
    def find_ideas(filters=None, sort_by='id', sort_dir='desc', active_only=True):
        """Unpaginated filtered list"""
        query = IdeaService._order(IdeaService._query(filters, active_only), sort_by, sort_dir)
        return query.all()

    @staticmethod
    def _apply_payload(idea, payload, form):
        for key, attribute in TEXT_FIELDS.items():
            value = payload.get(key)
            if isinstance(value, str):
                value = value.strip()
            setattr(idea, attribute, value if value not in ('', None) else None)
        idea.investment_needed = form.investmentNeeded.data
        idea.set_target_audience(split_list_value(payload.get('targetAudience')))
        idea.set_special_advantages(split_list_value(payload.get('specialAdvantages')))

    @staticmethod
    def create_idea(payload):
        form = validate_form(IdeaForm, payload)
        idea = Idea(active=bool(payload.get('active', True)), upload_batch_id=None)
        IdeaService._apply_payload(idea, payload, form)
        db.session.add(idea)
        db.session.commit()
        invalidate_filter_cache()
        logger.info(f"Created idea {idea.id}: {idea.title}")
        return idea

    @staticmethod
    def update_idea(idea_id, payload):
        """Full replacement of every mutable field; id and batch id are kept"""
        idea = IdeaService.get_idea(idea_id)
        form = validate_form(IdeaForm, payload)
        IdeaService._apply_payload(idea, payload, form)
        if 'active' in payload:
            idea.active = bool(payload.get('active'))
        db.session.commit()
        invalidate_filter_cache()
        logger.info(f"Updated idea {idea.id}")
        return idea

    @staticmethod
    def toggle_status(idea_id):
        idea = IdeaService.get_idea(idea_id)
        idea.active = not idea.active
        db.session.commit()
        invalidate_filter_cache()
        logger.info(f"Idea {idea.id} is now {'active' if idea.active else 'inactive'}")
        return idea

    @staticmethod
    def delete_idea(idea_id):
        IdeaService.get_idea(idea_id)
        try:
            delete_idea_rows([idea_id])
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise InternalError(f"Failed to delete idea {idea_id}: {str(e)}")
        invalidate_filter_cache()
        logger.info(f"Deleted idea {idea_id}")

    @staticmethod
    def _distinct(column, active_only):
        query = db.session.query(column).distinct()
        if active_only:
            query = query.filter(Idea.active.is_(True))
        query = query.filter(column.isnot(None), column != '')
        return sorted(row[0] for row in query.all())

    @staticmethod
    def _distinct_tags(model, active_only):
        query = db.session.query(model.value).distinct()
        if active_only:
            query = query.join(Idea, Idea.id == model.idea_id).filter(Idea.active.is_(True))
        return sorted(row[0] for row in query.all())

    @staticmethod
    def distinct_values(field, active_only=True):
        """Sorted distinct values of a filterable field"""
        columns = {
            'category': Idea.category,
            'sector': Idea.sector,
            'difficultyLevel': Idea.difficulty_level,
            'location': Idea.location,
        }
        tags = {
            'targetAudience': IdeaTargetAudience,
            'specialAdvantage': IdeaSpecialAdvantage,
        }

        def load():
            if field in columns:
                return IdeaService._distinct(columns[field], active_only)
            return IdeaService._distinct_tags(tags[field], active_only)

        return cache_manager.get_or_set(f"filters:{field}:{active_only}", load, cache_ttl())

    @staticmethod
    def get_filter_options(active_only=False):
        return {
            'categories': IdeaService.distinct_values('category', active_only),
            'sectors': IdeaService.distinct_values('sector', active_only),
            'difficultyLevels': IdeaService.distinct_values('difficultyLevel', active_only),
            'locations': IdeaService.distinct_values('location', active_only),
            'targetAudiences': IdeaService.distinct_values('targetAudience', active_only),
            'specialAdvantages': IdeaService.distinct_values('specialAdvantage', active_only),
        }

    @staticmethod
    def get_dashboard_stats():
        total_ideas = Idea.query.count()
        active_ideas = Idea.query.filter(Idea.active.is_(True)).count()
        return {
            'totalIdeas': total_ideas,
            'activeIdeas': active_ideas,
            'inactiveIdeas': total_ideas - active_ideas,
            'totalCategories': db.session.query(Category.main_category).filter(Category.active.is_(True)).distinct().count(),
            'totalUploads': UploadHistory.query.count(),
            'pendingReviews': IdeaReview.query.filter(IdeaReview.is_approved.is_(False)).count(),
            'totalUsers': User.query.count(),
        }
