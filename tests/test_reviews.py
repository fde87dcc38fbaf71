import pytest

from models import IdeaReview
from utils.error_handling import NotFound
from utils.review_service import ReviewService


def review_payload(**overrides):
    payload = {
        'reviewerName': 'Priya',
        'reviewerEmail': 'priya@example.com',
        'comment': 'Clear plan and realistic numbers',
        'rating': 4,
        'isRecommended': True,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def idea(create_idea):
    return create_idea()


def submit(client, headers, idea_id, **overrides):
    return client.post(f'/api/idea-details/{idea_id}/reviews', json=review_payload(**overrides), headers=headers)


def test_review_submission_is_pending_until_approved(client, user_headers, admin_headers, idea):
    response = submit(client, user_headers, idea['id'])
    assert response.status_code == 201
    review = response.get_json()['review']
    assert review['isApproved'] is False
    assert review['isRecommended'] is True

    assert client.get(f"/api/idea-details/{idea['id']}/reviews").get_json() == []
    pending = client.get('/admin/reviews/pending', headers=admin_headers).get_json()
    assert [r['id'] for r in pending] == [review['id']]

    client.post(f"/admin/reviews/{review['id']}/approve", headers=admin_headers)
    approved = client.get(f"/api/idea-details/{idea['id']}/reviews").get_json()
    assert [r['id'] for r in approved] == [review['id']]


@pytest.mark.parametrize('overrides', [
    {'rating': 6},
    {'rating': 0},
    {'comment': 'x' * 501},
    {'reviewerName': ''},
    {'reviewerEmail': 'not-an-email'},
])
def test_invalid_review_is_rejected_without_writing(client, user_headers, app, idea, overrides):
    response = submit(client, user_headers, idea['id'], **overrides)
    assert response.status_code == 400
    with app.app_context():
        assert IdeaReview.query.count() == 0


def test_review_for_missing_idea(client, user_headers):
    assert submit(client, user_headers, 999).status_code == 404


def test_review_submission_requires_login(client, idea):
    assert submit(client, {}, idea['id']).status_code == 401


def test_rating_summary_counts_only_approved(client, user_headers, admin_headers, idea):
    review_ids = []
    for rating in (5, 4, 4, 2):
        review_ids.append(submit(client, user_headers, idea['id'], rating=rating).get_json()['review']['id'])
    for review_id in review_ids[:3]:
        client.post(f'/admin/reviews/{review_id}/approve', headers=admin_headers)

    summary = client.get(f"/api/idea-details/{idea['id']}/rating-summary").get_json()
    assert summary['totalReviews'] == 3
    assert summary['averageRating'] == 4.33
    assert summary['ratingDistribution'] == {'1': 0, '2': 0, '3': 0, '4': 2, '5': 1}
    assert sum(summary['ratingDistribution'].values()) == summary['totalReviews']


def test_rating_summary_without_reviews(client, idea):
    summary = client.get(f"/api/idea-details/{idea['id']}/rating-summary").get_json()
    assert summary == {
        'averageRating': 0.0,
        'totalReviews': 0,
        'ratingDistribution': {'1': 0, '2': 0, '3': 0, '4': 0, '5': 0},
    }


def test_reject_and_delete_remove_reviews(client, user_headers, admin_headers, app, idea):
    first = submit(client, user_headers, idea['id']).get_json()['review']['id']
    second = submit(client, user_headers, idea['id']).get_json()['review']['id']

    assert client.post(f'/admin/reviews/{first}/reject', headers=admin_headers).status_code == 200
    assert client.delete(f'/admin/reviews/{second}', headers=admin_headers).status_code == 200
    assert client.delete(f'/admin/reviews/{second}', headers=admin_headers).status_code == 404

    with app.app_context():
        assert IdeaReview.query.count() == 0


def test_votes_increment_counters(client, user_headers, idea):
    review_id = submit(client, user_headers, idea['id']).get_json()['review']['id']

    client.post(f'/api/idea-details/reviews/{review_id}/vote?isHelpful=true', headers=user_headers)
    client.post(f'/api/idea-details/reviews/{review_id}/vote?isHelpful=true', headers=user_headers)
    response = client.post(f'/api/idea-details/reviews/{review_id}/vote?isHelpful=false', headers=user_headers)

    review = response.get_json()['review']
    assert review['helpfulVotes'] == 2
    assert review['unhelpfulVotes'] == 1


def test_vote_on_missing_review(client, user_headers):
    response = client.post('/api/idea-details/reviews/404/vote', headers=user_headers)
    assert response.status_code == 404


def test_approve_missing_review(app_ctx):
    with pytest.raises(NotFound):
        ReviewService.approve_review(12345)
