"""Integration tests for search and autocomplete."""

API = "/api/v1/search"


def test_search_all_categories(client, test_post, test_topic, test_location):
    response = client.get(API, params={"q": "pothole"})

    assert response.status_code == 200
    body = response.json()
    assert set(body) == {"issues", "people", "topics", "locations"}
    assert body["issues"][0]["title"] == "Pothole on Elm Street"
    assert body["issues"][0]["status"] == "Open"
    assert body["issues"][0]["author_username"] == "testuser"
    assert body["topics"][0]["name"] == "Road Maintenance"
    assert body["topics"][0]["count"] == 3
    assert body["people"] == []
    assert body["locations"] == []


def test_search_single_type(client, test_post, test_location):
    response = client.get(API, params={"q": "park", "type": "locations"})

    body = response.json()
    assert body["issues"] == []
    assert body["topics"] == []
    assert body["locations"] == [
        {"id": test_location.id, "name": "Central Park", "count": 2, "type": "Park"}
    ]


def test_search_people(client, test_user, other_user):
    response = client.get(API, params={"q": "otheruser", "type": "people"})

    people = response.json()["people"]
    assert [p["username"] for p in people] == ["otheruser"]
    assert people[0]["bio"] == "User profile for Other User"
    assert people[0]["avatar"].startswith("https://ui-avatars.com/api/?name=Other%20User")


def test_unmatched_topic_query_offers_new_topic(client):
    response = client.get(API, params={"q": "skatepark", "type": "topics"})

    topics = response.json()["topics"]
    assert len(topics) == 1
    assert topics[0]["is_new_suggestion"] is True
    assert topics[0]["name"] == "skatepark"


def test_blank_query_rejected(client):
    response = client.get(API, params={"q": "   "})

    assert response.status_code == 400
    assert response.json()["detail"] == "Search query is required"


def test_unknown_type_rejected(client):
    assert client.get(API, params={"q": "x", "type": "everything"}).status_code == 400


def test_suggestions(client, test_post, test_user, test_topic, test_location):
    response = client.get(f"{API}/suggestions", params={"q": "pot"})

    assert response.status_code == 200
    assert response.json() == [
        {"type": "issue", "text": "Pothole on Elm Street", "id": test_post.id},
        {"type": "topic", "text": "Road Maintenance", "id": test_topic.id},
    ]


def test_short_suggestion_query_skips_topics(client, test_user, test_topic):
    response = client.get(f"{API}/suggestions", params={"q": "te"})

    assert response.json() == [
        {
            "type": "user",
            "text": "Test User (@testuser)",
            "id": test_user.id,
            "username": "testuser",
        }
    ]


def test_empty_suggestion_query(client):
    assert client.get(f"{API}/suggestions").json() == []
