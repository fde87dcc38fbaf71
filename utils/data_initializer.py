"""
Startup data: category directory, sample ideas and the default admin
"""

import logging
from flask import current_app
from models import db, Category, Idea
from utils.caching import invalidate_category_cache
from utils.idea_service import IdeaService
from utils.user_service import UserService

logger = logging.getLogger(__name__)

CATEGORY_TREE = {
    'For Women': [
        'Beauty', 'Fashion', 'Event Planning', 'Eco-Friendly Products', 'Home Decor',
        'Fitness', 'Creative Arts', 'Personal Development', 'Social Impact', 'Childcare',
        'Health', 'Online Retail', 'Education', 'Coaching/Mentoring', 'Others',
    ],
    'Technology': [
        'Software', 'E-commerce', 'Mobile Apps', 'Cybersecurity', 'Artificial Intelligence (AI)',
        'Data Analytics', 'Robotics', 'Blockchain', 'Digital Marketing', 'Edtech', 'Fintech', 'Saas',
    ],
    'Agriculture': [
        'Organic Farming', 'Precision Agriculture', 'Agri-Tourism', 'Agri-Tech Solutions',
        'Livestock Farming', 'Data Analytics', 'Agricultural Consulting', 'Equipment Manufacturing',
        'Agroforestry', 'Agricultural Education and Training',
    ],
    'Fashion': [
        'Clothing & Accessories', 'Ethical Fashion', 'Sustainable Fashion', 'Fashion Consulting',
        'Blogging', 'Fashion Styling', 'Event Management', 'Fashion label/studio',
    ],
    'Manufacturing': [
        'Electronics', 'Textile', 'Automotive', 'Food Processing', 'Pharmaceutical', 'Furniture',
        'Chemical', 'Metal Fabrication', 'Printing and Publishing', 'Consumer goods',
        'Renewable energy', 'Construction materials', 'Jewelry', 'Others',
    ],
    'Food & Beverage': [
        'Restaurant', 'Food Truck', 'Craft Brewery', 'Ice cream parlour', 'Catering services',
        'Gourmet Food products',
    ],
    'Startup Ideas': [
        'Tech Startups', 'Social Impact Startups', 'Green Startups', 'FinTech Startups',
        'HealthTech Startups', 'EdTech Startups', 'E-commerce Startups', 'AI/ML Startups',
        'Food Tech Startups', 'Travel Tech Startups',
    ],
    'Sports': [
        'Fitness Training', 'Sports Equipment', 'Athletic Coaching', 'Sports Analytics',
        'Sports Medicine', 'Event Management', 'Sports Marketing', 'Youth Sports Programs',
        'Professional Sports Services', 'Sports Nutrition',
    ],
    'Entertainment & Media': [
        'Content Creation', 'Video Production', 'Music Industry', 'Gaming', 'Event Planning',
        'Social Media Management', 'Podcasting', 'Streaming Services', 'Digital Art',
        'Photography Services',
    ],
    'Travel & Tourism': [
        'Tour Operations', 'Travel Planning', 'Hospitality Services', 'Adventure Tourism',
        'Cultural Tourism', 'Eco-Tourism', 'Travel Technology', 'Accommodation Services',
        'Transportation Services', 'Travel Consulting',
    ],
    'Professional Services': [
        'Consulting', 'Legal Services', 'Accounting & Finance', 'Marketing Services',
        'HR Services', 'Business Coaching', 'Project Management', 'Real Estate Services',
        'Insurance Services', 'Training & Development',
    ],
    'Education': [
        'Online Learning', 'Tutoring Services', 'Educational Technology', 'Language Learning',
        'Skill Development', 'Professional Training', 'Educational Content', 'Learning Management',
        'Educational Consulting', 'Special Education Services',
    ],
}

SAMPLE_IDEAS = [
    {
        'title': 'Organic Vegetable Farming',
        'description': 'Start an organic vegetable farming business using sustainable practices. Focus on high-demand vegetables like tomatoes, cucumbers, and leafy greens.',
        'category': 'Agriculture',
        'sector': 'Organic Farming',
        'investmentNeeded': 50000,
        'expertiseNeeded': 'Basic farming knowledge, organic farming techniques',
        'trainingNeeded': 'Organic farming certification, soil management',
        'resources': 'Land (1-2 acres), seeds, organic fertilizers, irrigation system',
        'governmentSubsidies': 'PM-KISAN scheme, organic farming subsidies up to 50%',
        'fundingOptions': 'NABARD loans, Kisan Credit Card, cooperative bank loans',
        'targetAudience': ['Rural', 'Lower Middle Class'],
        'specialAdvantages': ['Low initial investment', 'Government support', 'Growing market demand'],
        'difficultyLevel': 'Easy',
        'timeToMarket': '3-6 months',
        'location': 'Rural',
    },
    {
        'title': 'Digital Marketing Agency',
        'description': 'Start a digital marketing agency offering services like social media management, SEO, and content creation for small businesses.',
        'category': 'Technology',
        'sector': 'Digital Marketing',
        'investmentNeeded': 100000,
        'expertiseNeeded': 'Digital marketing skills, social media management, basic design',
        'trainingNeeded': 'Digital marketing courses, Google Ads certification',
        'resources': 'Computer, internet, design software, marketing tools',
        'fundingOptions': 'Personal savings, small business loans, angel investors',
        'targetAudience': ['Women', 'Middle Class', 'Urban'],
        'specialAdvantages': ['Work from home', 'Flexible hours', 'High earning potential'],
        'difficultyLevel': 'Medium',
        'timeToMarket': '1-3 months',
        'location': 'Urban',
    },
    {
        'title': 'Eco-Friendly Products Manufacturing',
        'description': 'Manufacture eco-friendly products like bamboo toothbrushes, cloth bags, and biodegradable packaging.',
        'category': 'Manufacturing',
        'sector': 'Consumer goods',
        'investmentNeeded': 200000,
        'expertiseNeeded': 'Product design, manufacturing processes, eco-friendly materials',
        'resources': 'Small manufacturing unit, raw materials, packaging equipment',
        'fundingOptions': 'Green business loans, venture capital, crowdfunding',
        'targetAudience': ['Environment conscious', 'Middle Class'],
        'specialAdvantages': ['Growing market', 'Government incentives', 'Social impact'],
        'difficultyLevel': 'Hard',
        'timeToMarket': '6-12 months',
        'location': 'Both',
    },
]


def seed_categories():
    if Category.query.first():
        return 0
    count = 0
    for main_category, sub_categories in CATEGORY_TREE.items():
        for sub_category in sub_categories:
            db.session.add(Category(main_category=main_category, sub_category=sub_category, active=True))
            count += 1
    db.session.commit()
    invalidate_category_cache()
    logger.info(f"Seeded {count} categories")
    return count


def seed_sample_ideas():
    if Idea.query.first():
        return 0
    for payload in SAMPLE_IDEAS:
        IdeaService.create_idea(payload)
    logger.info(f"Seeded {len(SAMPLE_IDEAS)} sample ideas")
    return len(SAMPLE_IDEAS)


def initialize_database():
    """Create tables and seed reference data; safe to run on every start"""
    db.create_all()
    seed_categories()
    if current_app.config.get('SEED_SAMPLE_DATA', True):
        seed_sample_ideas()
    UserService.ensure_default_admin()
