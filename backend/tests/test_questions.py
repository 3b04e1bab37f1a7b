def test_ask_and_answer_flow(client, make_user, make_item):
    _, seller = make_user('seller@example.com')
    _, buyer = make_user('buyer@example.com')
    item_id = make_item(seller)

    asked = client.post(f'/api/item/{item_id}/question', json={'question_text': 'Does it still work?'}, headers=buyer)
    assert asked.status_code == 200
    question_id = asked.json()['question_id']

    listed = client.get(f'/api/item/{item_id}/question').json()
    assert listed == [{'question_id': question_id, 'question_text': 'Does it still work?', 'answer_text': None}]

    answered = client.post(f'/api/question/{question_id}', json={'answer_text': 'Yes, fully.'}, headers=seller)
    assert answered.status_code == 200
    listed = client.get(f'/api/item/{item_id}/question').json()
    assert listed[0]['answer_text'] == 'Yes, fully.'


def test_seller_cannot_ask_about_own_item(client, make_user, make_item):
    _, seller = make_user('seller@example.com')
    item_id = make_item(seller)
    r = client.post(f'/api/item/{item_id}/question', json={'question_text': 'Anyone?'}, headers=seller)
    assert r.status_code == 403


def test_only_seller_can_answer(client, make_user, make_item):
    _, seller = make_user('seller@example.com')
    _, buyer = make_user('buyer@example.com')
    _, other = make_user('other@example.com')
    item_id = make_item(seller)
    question_id = client.post(f'/api/item/{item_id}/question', json={'question_text': 'Colour?'}, headers=buyer).json()['question_id']
    r = client.post(f'/api/question/{question_id}', json={'answer_text': 'Red'}, headers=other)
    assert r.status_code == 403
    assert r.json()['error_message'] == 'Only the seller can answer questions on their items'


def test_questions_listed_newest_first(client, make_user, make_item):
    _, seller = make_user('seller@example.com')
    _, buyer = make_user('buyer@example.com')
    item_id = make_item(seller)
    for text in ('first?', 'second?', 'third?'):
        assert client.post(f'/api/item/{item_id}/question', json={'question_text': text}, headers=buyer).status_code == 200
    texts = [q['question_text'] for q in client.get(f'/api/item/{item_id}/question').json()]
    assert texts == ['third?', 'second?', 'first?']


def test_question_errors(client, make_user, make_item):
    _, seller = make_user('seller@example.com')
    _, buyer = make_user('buyer@example.com')
    item_id = make_item(seller)
    assert client.post('/api/item/777/question', json={'question_text': 'hi?'}, headers=buyer).status_code == 404
    assert client.get('/api/item/777/question').status_code == 404
    assert client.post('/api/question/777', json={'answer_text': 'no'}, headers=seller).status_code == 404
    too_long = client.post(f'/api/item/{item_id}/question', json={'question_text': 'q' * 501}, headers=buyer)
    assert too_long.status_code == 400
    anonymous = client.post(f'/api/item/{item_id}/question', json={'question_text': 'hi?'})
    assert anonymous.status_code == 401


def test_answer_can_be_replaced(client, make_user, make_item):
    _, seller = make_user('seller@example.com')
    _, buyer = make_user('buyer@example.com')
    item_id = make_item(seller)
    question_id = client.post(f'/api/item/{item_id}/question', json={'question_text': 'Size?'}, headers=buyer).json()['question_id']
    assert client.post(f'/api/question/{question_id}', json={'answer_text': 'Small'}, headers=seller).status_code == 200
    assert client.post(f'/api/question/{question_id}', json={'answer_text': 'Medium, sorry'}, headers=seller).status_code == 200
    listed = client.get(f'/api/item/{item_id}/question').json()
    assert len(listed) == 1
    assert listed[0]['answer_text'] == 'Medium, sorry'
