"""
Database Initialization Script for the Idea Factory backend

Creates all tables, seeds the category directory and sample ideas,
and provisions the default admin. Safe to run repeatedly.

Usage:
    python init_db.py
"""

from app import create_app
from models import Category, Idea, User
from utils.data_initializer import initialize_database


def init_database(app=None):
    """Initialize the database with all tables and reference data"""
    app = app or create_app()
    with app.app_context():
        print("Creating database tables...")
        initialize_database()

        print("✓ Database ready!")
        print(f"- Categories: {Category.query.count()}")
        print(f"- Ideas: {Idea.query.count()}")
        print(f"- Admin users: {User.query.filter_by(role='ADMIN').count()}")


if __name__ == '__main__':
    print("Idea Factory Database Initialization")
    print("=" * 50)

    init_database()
