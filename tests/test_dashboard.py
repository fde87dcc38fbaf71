import pytest

from models import db, User, UserReward


@pytest.fixture
def idea(create_idea):
    return create_idea()


def test_save_and_unsave_idea(client, user_headers, idea):
    response = client.post(f"/api/dashboard/saved-ideas/{idea['id']}", json={'notes': 'Call supplier'},
                           headers=user_headers)
    assert response.status_code == 201
    assert response.get_json()['savedIdea']['idea']['id'] == idea['id']

    duplicate = client.post(f"/api/dashboard/saved-ideas/{idea['id']}", headers=user_headers)
    assert duplicate.status_code == 409

    saved = client.get('/api/dashboard/saved-ideas', headers=user_headers).get_json()
    assert [item['notes'] for item in saved] == ['Call supplier']

    assert client.delete(f"/api/dashboard/saved-ideas/{idea['id']}", headers=user_headers).status_code == 200
    assert client.delete(f"/api/dashboard/saved-ideas/{idea['id']}", headers=user_headers).status_code == 404


def test_cannot_save_inactive_idea(client, user_headers, admin_headers, idea):
    client.put(f"/admin/ideas/{idea['id']}/toggle-status", headers=admin_headers)
    response = client.post(f"/api/dashboard/saved-ideas/{idea['id']}", headers=user_headers)
    assert response.status_code == 404


def test_proposal_lifecycle(client, user_headers, admin_headers):
    response = client.post('/api/dashboard/proposals', headers=user_headers, json={
        'title': 'Neighbourhood tool library',
        'description': 'Rent tools by the day instead of buying them',
        'investmentNeeded': 15000,
    })
    assert response.status_code == 201
    proposal = response.get_json()['proposal']
    assert proposal['status'] == 'PENDING'

    pending = client.get('/admin/proposals?status=pending', headers=admin_headers).get_json()
    assert [p['id'] for p in pending] == [proposal['id']]

    reviewed = client.post(f"/admin/proposals/{proposal['id']}/review", headers=admin_headers,
                           json={'status': 'approved', 'adminNotes': 'Good fit'})
    assert reviewed.status_code == 200
    assert reviewed.get_json()['proposal']['status'] == 'APPROVED'

    invalid = client.post(f"/admin/proposals/{proposal['id']}/review", headers=admin_headers,
                          json={'status': 'MAYBE'})
    assert invalid.status_code == 400

    mine = client.get('/api/dashboard/proposals', headers=user_headers).get_json()
    assert mine[0]['status'] == 'APPROVED'


def test_proposal_description_limit(client, user_headers):
    response = client.post('/api/dashboard/proposals', headers=user_headers,
                           json={'title': 'Too long', 'description': 'x' * 2001})
    assert response.status_code == 400


def test_profile_update(client, user_headers):
    response = client.put('/api/dashboard/profile', headers=user_headers,
                          json={'bio': 'Serial founder', 'location': 'Pune'})
    assert response.status_code == 200
    profile = client.get('/api/dashboard/profile', headers=user_headers).get_json()
    assert profile['bio'] == 'Serial founder'
    assert profile['location'] == 'Pune'
    assert profile['fullName'] == 'Jane Doe'


def test_dashboard_stats_and_rewards(client, app, user_headers, idea):
    with app.app_context():
        user = User.query.filter_by(email='jane@example.com').one()
        db.session.add(UserReward(user_id=user.id, reward_name='First save', reward_type='BADGE', points_value=10))
        db.session.commit()

    client.post(f"/api/dashboard/saved-ideas/{idea['id']}", headers=user_headers)

    overview = client.get('/api/dashboard/', headers=user_headers).get_json()
    assert overview['user']['email'] == 'jane@example.com'
    assert overview['stats'] == {'savedIdeas': 1, 'proposedIdeas': 0, 'totalRewards': 1, 'totalPoints': 10}

    rewards = client.get('/api/dashboard/rewards', headers=user_headers).get_json()
    assert [reward['rewardName'] for reward in rewards] == ['First save']
