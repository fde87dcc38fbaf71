import pytest


@pytest.fixture
def idea(create_idea):
    return create_idea()


def base(idea):
    return f"/api/idea-details/{idea['id']}"


def test_investment_breakdown_sorted_by_amount(client, admin_headers, idea):
    for category, amount in (('Equipment', 15000), ('Licenses', 2000), ('Lease deposit', 30000)):
        response = client.post(f'{base(idea)}/investments', headers=admin_headers,
                               json={'investmentCategory': category, 'amount': amount, 'priorityLevel': 'HIGH'})
        assert response.status_code == 201

    summary = client.get(f'{base(idea)}/investments').get_json()
    assert [item['investmentCategory'] for item in summary['investments']] == ['Lease deposit', 'Equipment', 'Licenses']
    assert summary['totalInvestment'] == 47000.0
    assert summary['investmentCount'] == 3


def test_investment_validation(client, admin_headers, idea):
    response = client.post(f'{base(idea)}/investments', headers=admin_headers,
                           json={'investmentCategory': 'Equipment', 'amount': -1})
    assert response.status_code == 400


def test_schemes_filter_by_type(client, admin_headers, idea):
    client.post(f'{base(idea)}/schemes', headers=admin_headers,
                json={'schemeName': 'PMEGP', 'schemeType': 'central', 'maximumAmount': 2500000})
    client.post(f'{base(idea)}/schemes', headers=admin_headers,
                json={'schemeName': 'State Startup Grant', 'schemeType': 'STATE'})

    assert len(client.get(f'{base(idea)}/schemes').get_json()) == 2
    central = client.get(f'{base(idea)}/schemes/central').get_json()
    assert [scheme['schemeName'] for scheme in central] == ['PMEGP']
    assert central[0]['schemeType'] == 'CENTRAL'
    assert central[0]['maximumAmount'] == 2500000.0


def test_bank_loans(client, admin_headers, idea):
    response = client.post(f'{base(idea)}/bank-loans', headers=admin_headers, json={
        'bankName': 'State Bank', 'loanType': 'MSME', 'interestRateMin': '8.5', 'interestRateMax': 11,
        'tenureMin': 12, 'tenureMax': 84,
    })
    assert response.status_code == 201
    loan = response.get_json()
    assert loan['interestRateMin'] == 8.5
    assert loan['tenureMax'] == 84

    assert len(client.get(f'{base(idea)}/bank-loans/MSME').get_json()) == 1
    assert client.get(f'{base(idea)}/bank-loans/Mudra').get_json() == []

    assert client.delete(f"/api/idea-details/bank-loans/{loan['id']}", headers=admin_headers).status_code == 200
    assert client.get(f'{base(idea)}/bank-loans').get_json() == []


def test_internal_factors(client, admin_headers, idea):
    response = client.post(f'{base(idea)}/internal-factors', headers=admin_headers,
                           json={'factorType': 'STRENGTHS', 'factors': ['Low cost', 'High margin']})
    assert response.status_code == 201
    assert response.get_json()['factors'] == ['Low cost', 'High margin']

    bad = client.post(f'{base(idea)}/internal-factors', headers=admin_headers,
                      json={'factorType': 'RUMOURS', 'factors': ['x']})
    assert bad.status_code == 400


def test_detail_writes_require_admin(client, user_headers, idea):
    response = client.post(f'{base(idea)}/investments', headers=user_headers,
                           json={'investmentCategory': 'Equipment', 'amount': 100})
    assert response.status_code == 403


def test_complete_details(client, admin_headers, idea):
    client.post(f'{base(idea)}/investments', headers=admin_headers,
                json={'investmentCategory': 'Equipment', 'amount': 100})
    details = client.get(f'{base(idea)}/complete').get_json()
    assert details['idea']['id'] == idea['id']
    assert details['investments']['investmentCount'] == 1
    assert details['ratingSummary']['totalReviews'] == 0
    assert details['schemes'] == []
    assert details['reviews'] == []


def test_details_for_missing_idea(client, admin_headers):
    assert client.get('/api/idea-details/999/complete').status_code == 404
    response = client.post('/api/idea-details/999/investments', headers=admin_headers,
                           json={'investmentCategory': 'Equipment', 'amount': 100})
    assert response.status_code == 404
