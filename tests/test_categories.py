from models import db, Category
from utils.category_service import CategoryService
from utils.data_initializer import CATEGORY_TREE, seed_categories


def test_main_categories_are_sorted_and_distinct(client):
    mains = client.get('/api/main-categories').get_json()
    assert mains == sorted(CATEGORY_TREE)
    assert len(mains) == len(set(mains))


def test_sub_categories(client):
    main = sorted(CATEGORY_TREE)[0]
    subs = client.get('/api/sub-categories', query_string={'mainCategory': main}).get_json()
    assert subs == sorted(CATEGORY_TREE[main])

    assert client.get('/api/sub-categories').status_code == 400
    assert client.get('/api/sub-categories?mainCategory=Nothing').get_json() == []


def test_hierarchy_matches_directory(client):
    hierarchy = client.get('/api/category-hierarchy').get_json()
    assert set(hierarchy) == set(CATEGORY_TREE)
    for main, subs in hierarchy.items():
        assert subs == sorted(CATEGORY_TREE[main])


def test_inactive_categories_are_hidden(client, app):
    with app.app_context():
        db.session.add(Category(main_category='Retired', sub_category='Old', active=False))
        db.session.commit()

    assert 'Retired' not in client.get('/api/main-categories').get_json()
    assert all(c['mainCategory'] != 'Retired' for c in client.get('/api/categories').get_json())


def test_adding_category_refreshes_cached_reads(client, admin_headers):
    assert 'Space' not in client.get('/api/main-categories').get_json()

    response = client.post('/admin/categories', json={'mainCategory': 'Space', 'subCategory': 'Satellites'},
                           headers=admin_headers)
    assert response.status_code == 201

    assert 'Space' in client.get('/api/main-categories').get_json()
    assert client.get('/api/category-hierarchy').get_json()['Space'] == ['Satellites']


def test_add_category_requires_admin(client, user_headers):
    response = client.post('/admin/categories', json={'mainCategory': 'Space', 'subCategory': 'Satellites'},
                           headers=user_headers)
    assert response.status_code == 403


def test_seeding_is_idempotent(app_ctx):
    before = Category.query.count()
    seed_categories()
    assert Category.query.count() == before


def test_is_valid_combination(app_ctx):
    main = sorted(CATEGORY_TREE)[0]
    assert CategoryService.is_valid_combination(main, CATEGORY_TREE[main][0])
    assert not CategoryService.is_valid_combination(main, 'Not a sub category')


def test_duplicate_category_conflicts(client, admin_headers):
    main = sorted(CATEGORY_TREE)[0]
    response = client.post('/admin/categories', json={'mainCategory': main, 'subCategory': CATEGORY_TREE[main][0]},
                           headers=admin_headers)
    assert response.status_code == 409
