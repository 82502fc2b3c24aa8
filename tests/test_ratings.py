"""Tests for story ratings and the rating aggregate."""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy.orm import sessionmaker

from reading_api.errors import ForbiddenError, NotFoundError, ValidationError
from reading_api.models import Story
from reading_api.services.locks import StoryLockRegistry
from reading_api.services.rating_service import (
    RatingService,
    build_distribution,
    validate_rating_value,
)


def rate(client, headers, story_id, value, comment=None):
    body = {"rating": value}
    if comment is not None:
        body["comment"] = comment
    return client.post(f"/api/v1/stories/{story_id}/rating", headers=headers, json=body)


def test_rate_story(client, auth_headers, story):
    response = rate(client, auth_headers, story.id, 5, "Lovely")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["rating"]["rating"] == 5
    assert data["rating"]["comment"] == "Lovely"
    assert data["aggregate"] == {"story_id": story.id, "average_rating": 5.0, "rating_count": 1}


def test_aggregate_follows_every_mutation(client, auth_headers, other_headers, story, db):
    """5 then 3 averages 4.0; withdrawing the 5 leaves 3.0."""
    rate(client, auth_headers, story.id, 5)
    response = rate(client, other_headers, story.id, 3)
    assert response.json()["data"]["aggregate"]["average_rating"] == 4.0
    assert response.json()["data"]["aggregate"]["rating_count"] == 2

    response = client.delete(f"/api/v1/stories/{story.id}/rating", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["data"] == {"story_id": story.id, "average_rating": 3.0, "rating_count": 1}

    db.expire_all()
    stored = db.get(Story, story.id)
    assert stored.average_rating == 3.0
    assert stored.rating_count == 1


def test_rerating_replaces_previous_value(client, auth_headers, story):
    rate(client, auth_headers, story.id, 2)
    response = rate(client, auth_headers, story.id, 4)
    aggregate = response.json()["data"]["aggregate"]
    assert aggregate["rating_count"] == 1
    assert aggregate["average_rating"] == 4.0


def test_resubmitting_same_rating_is_idempotent(client, auth_headers, story):
    first = rate(client, auth_headers, story.id, 4).json()["data"]["aggregate"]
    second = rate(client, auth_headers, story.id, 4).json()["data"]["aggregate"]
    assert first == second


def test_last_rating_removed_clears_average(client, auth_headers, story):
    rate(client, auth_headers, story.id, 4)
    response = client.delete(f"/api/v1/stories/{story.id}/rating", headers=auth_headers)
    assert response.json()["data"] == {"story_id": story.id, "average_rating": None, "rating_count": 0}


def test_fractional_rating(client, auth_headers, story):
    response = rate(client, auth_headers, story.id, 4.5)
    assert response.status_code == 200
    assert response.json()["data"]["aggregate"]["average_rating"] == 4.5


@pytest.mark.parametrize("value", [0, 6, -1, 5.5])
def test_out_of_range_rating_is_rejected(client, auth_headers, story, value):
    response = rate(client, auth_headers, story.id, value)
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_rating_unpublished_story_is_forbidden(client, auth_headers, draft_story):
    response = rate(client, auth_headers, draft_story.id, 4)
    assert response.status_code == 403
    assert response.json()["error"]["message"] == "Cannot rate unpublished stories"


def test_rating_missing_story(client, auth_headers):
    response = rate(client, auth_headers, 987654, 4)
    assert response.status_code == 404
    assert response.json()["error"]["message"] == "Story not found"


def test_get_my_rating(client, auth_headers, story):
    response = client.get(f"/api/v1/stories/{story.id}/rating", headers=auth_headers)
    assert response.json()["data"] is None

    rate(client, auth_headers, story.id, 3, "Fine")
    response = client.get(f"/api/v1/stories/{story.id}/rating", headers=auth_headers)
    assert response.json()["data"]["rating"] == 3
    assert response.json()["data"]["comment"] == "Fine"


def test_delete_missing_rating(client, auth_headers, story):
    response = client.delete(f"/api/v1/stories/{story.id}/rating", headers=auth_headers)
    assert response.status_code == 404
    assert response.json()["error"]["message"] == "Rating not found"


def test_list_story_ratings_is_public(client, auth_headers, other_headers, story):
    rate(client, auth_headers, story.id, 5)
    rate(client, other_headers, story.id, 2)

    response = client.get(f"/api/v1/stories/{story.id}/ratings")
    assert response.status_code == 200
    data = response.json()["data"]
    assert len(data["ratings"]) == 2
    assert {r["user"]["username"] for r in data["ratings"]} == {"reader", "other"}
    assert data["statistics"]["average_rating"] == 3.5
    assert data["statistics"]["total_count"] == 2


def test_distribution_covers_all_ratings_not_just_page(client, auth_headers, other_headers, story):
    """Statistics are computed over every rating regardless of pagination."""
    rate(client, auth_headers, story.id, 5)
    rate(client, other_headers, story.id, 2.5)

    response = client.get(f"/api/v1/stories/{story.id}/ratings?limit=1")
    data = response.json()["data"]
    assert len(data["ratings"]) == 1
    assert data["pagination"]["pages"] == 2
    counts = {bucket["stars"]: bucket["count"] for bucket in data["statistics"]["distribution"]}
    assert counts == {1: 0, 2: 1, 3: 0, 4: 0, 5: 1}


def test_list_story_ratings_sorting(client, auth_headers, other_headers, story):
    rate(client, auth_headers, story.id, 1)
    rate(client, other_headers, story.id, 4)

    highest = client.get(f"/api/v1/stories/{story.id}/ratings?sort=highest").json()["data"]
    lowest = client.get(f"/api/v1/stories/{story.id}/ratings?sort=lowest").json()["data"]
    newest = client.get(f"/api/v1/stories/{story.id}/ratings?sort=newest").json()["data"]
    assert [r["rating"] for r in highest["ratings"]] == [4, 1]
    assert [r["rating"] for r in lowest["ratings"]] == [1, 4]
    assert newest["ratings"][0]["user_id"] == other_headers.user_id


def test_list_story_ratings_unknown_sort(client, story):
    response = client.get(f"/api/v1/stories/{story.id}/ratings?sort=random")
    assert response.status_code == 400


def test_list_user_ratings(client, auth_headers, make_story):
    first, second = make_story(), make_story()
    rate(client, auth_headers, first.id, 5)
    rate(client, auth_headers, second.id, 2)

    response = client.get("/api/v1/users/ratings", headers=auth_headers)
    data = response.json()["data"]
    assert data["summary"]["total"] == 2
    assert data["summary"]["average_rating"] == 3.5
    assert {r["story"]["id"] for r in data["ratings"]} == {first.id, second.id}


def test_validate_rating_value():
    assert validate_rating_value(3) == 3.0
    with pytest.raises(ValidationError):
        validate_rating_value(0.5)
    with pytest.raises(ValidationError):
        validate_rating_value(True)
    with pytest.raises(ValidationError):
        validate_rating_value("4")


def test_build_distribution_buckets_by_whole_star():
    distribution = build_distribution([(1.0, 2), (1.5, 1), (4.9, 3), (5.0, 1)])
    assert distribution == [
        {"stars": 1, "count": 3},
        {"stars": 2, "count": 0},
        {"stars": 3, "count": 0},
        {"stars": 4, "count": 3},
        {"stars": 5, "count": 1},
    ]


def test_service_submit_on_draft_raises_forbidden(db, reader, draft_story):
    with pytest.raises(ForbiddenError):
        RatingService(db).submit_rating(reader.id, draft_story.id, 4)


def test_service_delete_missing_raises_not_found(db, reader, story):
    with pytest.raises(NotFoundError):
        RatingService(db).delete_rating(reader.id, story.id)


def test_recompute_aggregate_repairs_drift(db, reader, story):
    service = RatingService(db)
    service.submit_rating(reader.id, story.id, 4)
    db.query(Story).filter(Story.id == story.id).update({Story.average_rating: 1.0})
    db.commit()

    aggregate = service.recompute_aggregate(story.id)
    assert aggregate.average_rating == 4.0
    assert aggregate.rating_count == 1


def test_lock_registry_returns_same_lock_per_story():
    registry = StoryLockRegistry()
    assert registry.lock_for(1) is registry.lock_for(1)
    assert registry.lock_for(1) is not registry.lock_for(2)


def test_lock_registry_serializes_holders():
    registry = StoryLockRegistry()
    inside = []
    overlaps = []
    guard = threading.Lock()

    def work():
        with registry.hold(7):
            with guard:
                if inside:
                    overlaps.append(True)
                inside.append(True)
            with guard:
                inside.pop()

    with ThreadPoolExecutor(max_workers=8) as pool:
        for _ in range(50):
            pool.submit(work)
    assert overlaps == []


def test_concurrent_submissions_keep_aggregate_consistent(db, story, make_user):
    """Parallel raters on one story leave count and mean matching the ratings."""
    users = [make_user(f"rater{i}@example.com", f"rater{i}") for i in range(6)]
    values = [1, 2, 3, 4, 5, 5]
    user_ids = [user.id for user in users]
    story_id = story.id
    Session = sessionmaker(autocommit=False, autoflush=False, bind=db.get_bind())

    def submit(user_id, value):
        session = Session()
        try:
            RatingService(session).submit_rating(user_id, story_id, value)
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=6) as pool:
        for future in [pool.submit(submit, u, v) for u, v in zip(user_ids, values, strict=True)]:
            future.result()

    db.expire_all()
    stored = db.get(Story, story_id)
    assert stored.rating_count == 6
    assert stored.average_rating == pytest.approx(sum(values) / 6)
