"""
Category directory: two-level main/sub taxonomy
"""

import logging
from models import db, Category
from forms import CategoryForm, validate_form
from utils.caching import cache_manager, cache_ttl, invalidate_category_cache
from utils.error_handling import Conflict

logger = logging.getLogger(__name__)


class CategoryService:
    """Service class for the category taxonomy (reads are cached)"""

    @staticmethod
    def all_categories():
        return Category.query.filter(Category.active.is_(True)).order_by(
            Category.main_category, Category.sub_category
        ).all()

    @staticmethod
    def main_categories():
        def load():
            rows = db.session.query(Category.main_category).filter(Category.active.is_(True)).distinct().all()
            return sorted(row[0] for row in rows)
        return cache_manager.get_or_set("categories:main", load, cache_ttl())

    @staticmethod
    def sub_categories(main_category):
        def load():
            rows = db.session.query(Category.sub_category).filter(
                Category.active.is_(True),
                Category.main_category == main_category
            ).distinct().all()
            return sorted(row[0] for row in rows)
        return cache_manager.get_or_set(f"categories:sub:{main_category}", load, cache_ttl())

    @staticmethod
    def hierarchy():
        """Map of main category to its sorted sub categories"""
        def load():
            tree = {}
            for category in CategoryService.all_categories():
                subs = tree.setdefault(category.main_category, [])
                if category.sub_category not in subs:
                    subs.append(category.sub_category)
            return {main: sorted(subs) for main, subs in sorted(tree.items())}
        return cache_manager.get_or_set("categories:hierarchy", load, cache_ttl())

    @staticmethod
    def is_valid_combination(main_category, sub_category):
        return Category.query.filter_by(
            main_category=main_category, sub_category=sub_category, active=True
        ).first() is not None

    @staticmethod
    def add_category(payload):
        form = validate_form(CategoryForm, payload)
        main_category = form.mainCategory.data.strip()
        sub_category = form.subCategory.data.strip()
        if CategoryService.is_valid_combination(main_category, sub_category):
            raise Conflict(f"Category {main_category} / {sub_category} already exists")

        category = Category(main_category=main_category, sub_category=sub_category, active=True)
        db.session.add(category)
        db.session.commit()
        invalidate_category_cache()
        logger.info(f"Added category {category.main_category} / {category.sub_category}")
        return category
