import time


def _ids(resp):
    return [i['item_id'] for i in resp.json()]


def test_search_by_text_and_pagination(client, make_user, make_item):
    _, seller = make_user('seller@example.com', first_name='Sally')
    red = make_item(seller, name='Red bike', description='Road bike')
    blue = make_item(seller, name='Blue bike', description='Mountain bike')
    lamp = make_item(seller, name='Lamp', description='Brass desk lamp')

    everything = client.get('/api/search')
    assert everything.status_code == 200
    assert _ids(everything) == [red, blue, lamp]
    assert everything.json()[0]['first_name'] == 'Sally'

    assert _ids(client.get('/api/search', params={'q': 'bike'})) == [red, blue]
    assert _ids(client.get('/api/search', params={'q': 'brass'})) == [lamp]
    assert _ids(client.get('/api/search', params={'limit': 1, 'offset': 1})) == [blue]
    assert client.get('/api/search', params={'q': '100%'}).json() == []


def test_search_parameter_validation(client, make_user):
    _, headers = make_user('searcher@example.com')
    assert client.get('/api/search', params={'limit': 0}).status_code == 400
    assert client.get('/api/search', params={'limit': 101}).status_code == 400
    assert client.get('/api/search', params={'offset': -1}).status_code == 400
    assert client.get('/api/search', params={'status': 'SOLD'}, headers=headers).status_code == 400


def test_status_filter_requires_session(client):
    r = client.get('/api/search', params={'status': 'OPEN'})
    assert r.status_code == 400
    assert r.json()['error_message'] == 'Authentication required to search for items'
    bad_token = client.get('/api/search', headers={'X-Authorization': 'garbage'})
    assert bad_token.status_code == 401


def test_status_filters(client, make_user, make_item, monkeypatch):
    _, seller = make_user('seller@example.com')
    _, buyer = make_user('buyer@example.com')
    short = make_item(seller, name='Short auction', lifetime=600)
    long = make_item(seller, name='Long auction', lifetime=10 * 24 * 3600)
    assert client.post(f'/api/item/{short}/bid', json={'amount': 500}, headers=buyer).status_code == 201

    assert _ids(client.get('/api/search', params={'status': 'BID'}, headers=buyer)) == [short]
    assert _ids(client.get('/api/search', params={'status': 'BID'}, headers=seller)) == []
    assert _ids(client.get('/api/search', params={'status': 'OPEN'}, headers=seller)) == [short, long]
    assert _ids(client.get('/api/search', params={'status': 'OPEN'}, headers=buyer)) == []
    assert _ids(client.get('/api/search', params={'status': 'ARCHIVE'}, headers=seller)) == []

    monkeypatch.setattr("auction.services.now_ts", lambda: int(time.time()) + 3600)
    assert _ids(client.get('/api/search', params={'status': 'OPEN'}, headers=seller)) == [long]
    assert _ids(client.get('/api/search', params={'status': 'ARCHIVE'}, headers=seller)) == [short]


def test_profile_lists(client, make_user, make_item, monkeypatch):
    seller_id, seller = make_user('seller@example.com', first_name='Sally', last_name='Seller')
    buyer_id, buyer = make_user('buyer@example.com')
    short = make_item(seller, name='Short auction', lifetime=600)
    long = make_item(seller, name='Long auction', lifetime=10 * 24 * 3600)
    assert client.post(f'/api/item/{short}/bid', json={'amount': 200}, headers=buyer).status_code == 201
    assert client.post(f'/api/item/{short}/bid', json={'amount': 300}, headers=buyer).status_code == 201

    profile = client.get(f'/api/users/{seller_id}')
    assert profile.status_code == 200
    body = profile.json()
    assert (body['first_name'], body['last_name']) == ('Sally', 'Seller')
    assert [i['item_id'] for i in body['selling']] == [short, long]
    assert body['bidding_on'] == []
    assert body['auctions_ended'] == []

    buyer_profile = client.get(f'/api/users/{buyer_id}').json()
    assert [i['item_id'] for i in buyer_profile['bidding_on']] == [short]
    assert buyer_profile['selling'] == []

    monkeypatch.setattr("auction.services.now_ts", lambda: int(time.time()) + 3600)
    body = client.get(f'/api/users/{seller_id}').json()
    assert [i['item_id'] for i in body['selling']] == [long]
    assert [i['item_id'] for i in body['auctions_ended']] == [short]
    assert client.get(f'/api/users/{buyer_id}').json()['bidding_on'] == []


def test_profile_not_found(client):
    r = client.get('/api/users/12345')
    assert r.status_code == 404
    assert r.json()['error_message'] == 'User not found'


def test_search_with_session_but_no_status(client, make_user, make_item):
    _, seller = make_user('seller@example.com')
    _, buyer = make_user('buyer@example.com')
    mine = make_item(buyer, name='Buyer lamp')
    theirs = make_item(seller, name='Seller lamp')
    r = client.get('/api/search', params={'q': 'lamp'}, headers=buyer)
    assert r.status_code == 200
    assert _ids(r) == [mine, theirs]
