"""Tests for dashboards and analytics."""

from datetime import UTC, datetime, timedelta

from reading_api.models import ReadingProgress
from reading_api.services.analytics_service import AnalyticsService


def read(client, headers, story_id, **fields):
    return client.post("/api/v1/progress", headers=headers, json={"storyId": story_id, **fields})


def test_dashboard_for_new_reader(client, auth_headers):
    response = client.get("/api/v1/analytics/dashboard", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["data"] == {
        "recent_progress": [],
        "monthly_stats": {"stories_completed": 0, "total_reading_minutes": 0},
        "favorite_categories": [],
        "current_streak": 0,
    }


def test_dashboard(client, auth_headers, story, make_story):
    read(client, auth_headers, story.id, status="COMPLETED", readingTimeSeconds=600)
    read(client, auth_headers, make_story().id, readingTimeSeconds=120)

    data = client.get("/api/v1/analytics/dashboard", headers=auth_headers).json()["data"]
    assert len(data["recent_progress"]) == 2
    assert data["monthly_stats"] == {"stories_completed": 1, "total_reading_minutes": 12}
    assert data["favorite_categories"] == [{"name": "Folk Tales", "count": 1}]
    assert data["current_streak"] == 1


def test_user_analytics(client, auth_headers, story, make_story):
    read(client, auth_headers, story.id, status="COMPLETED", readingTimeSeconds=300, language="en")
    read(client, auth_headers, make_story().id, wordsRead=150, language="tr")
    client.post(
        f"/api/v1/stories/{story.id}/rating", headers=auth_headers, json={"rating": 4}
    )
    client.post("/api/v1/bookmarks/toggle", headers=auth_headers, json={"storyId": story.id})

    response = client.get("/api/v1/analytics/user?period=7", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()["data"]
    summary = data["summary"]
    assert data["period"] == 7
    assert summary["total_stories_started"] == 2
    assert summary["total_stories_completed"] == 1
    assert summary["completion_rate"] == 50.0
    assert summary["total_reading_time_minutes"] == 5
    assert summary["total_words_read"] == 150
    assert summary["bookmarks_count"] == 1
    assert summary["ratings_count"] == 1
    assert summary["current_streak"] == 1
    assert data["language_preferences"] == {"en": 1, "tr": 1}
    assert len(data["recent_activity"]) == 2
    assert len(data["progress_by_day"]) == 7
    assert data["progress_by_day"][-1]["stories_read"] == 2


def test_user_analytics_rejects_bad_period(client, auth_headers):
    response = client.get("/api/v1/analytics/user?period=0", headers=auth_headers)
    assert response.status_code == 400


def test_story_analytics(client, auth_headers, other_headers, story):
    read(client, auth_headers, story.id, status="COMPLETED", language="en")
    read(client, other_headers, story.id, completionPercentage=50, language="en")
    client.post(f"/api/v1/stories/{story.id}/rating", headers=auth_headers, json={"rating": 5})

    response = client.get(f"/api/v1/analytics/stories/{story.id}", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["story"]["id"] == story.id
    assert data["ratings"]["average"] == 5.0
    assert data["ratings"]["total"] == 1
    assert data["reading"]["total_readers"] == 2
    assert data["reading"]["completed_readers"] == 1
    assert data["reading"]["completion_rate"] == 50.0
    assert data["reading"]["average_completion_percentage"] == 75.0
    assert data["reading"]["popular_language"] == "en"
    assert data["recent_readers"] == 2


def test_story_analytics_missing_story(client, auth_headers):
    response = client.get("/api/v1/analytics/stories/31337", headers=auth_headers)
    assert response.status_code == 404


def test_platform_analytics_requires_admin(client, auth_headers):
    response = client.get("/api/v1/analytics/platform", headers=auth_headers)
    assert response.status_code == 403
    assert response.json()["error"]["code"] == "FORBIDDEN"


def test_platform_analytics(client, admin_headers, auth_headers, story, draft_story):
    read(client, auth_headers, story.id, status="COMPLETED")
    client.post(f"/api/v1/stories/{story.id}/rating", headers=auth_headers, json={"rating": 4})

    response = client.get("/api/v1/analytics/platform", headers=admin_headers)
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["period_days"] == 7
    assert data["content"] == {"total_stories": 2, "published_stories": 1, "draft_stories": 1}
    assert data["users"] == {"total_users": 2, "active_readers": 1}
    assert data["engagement"]["total_ratings"] == 1
    assert data["engagement"]["average_rating"] == 4.0
    assert data["engagement"]["completion_rate"] == 100.0
    assert [s["id"] for s in data["top_rated"]] == [story.id]
    assert [(m["story"]["id"], m["reader_count"]) for m in data["most_read"]] == [(story.id, 1)]


def test_progress_by_day_buckets_activity(db, reader, make_story):
    now = datetime(2026, 5, 10, 15, tzinfo=UTC)
    for days_ago, seconds in ((0, 120), (2, 600), (2, 60)):
        moment = now - timedelta(days=days_ago)
        db.add(
            ReadingProgress(
                user_id=reader.id,
                story_id=make_story().id,
                reading_time_seconds=seconds,
                started_at=moment,
                last_read_at=moment,
            )
        )
    db.commit()

    days = AnalyticsService(db).user_analytics(reader.id, period_days=3, now=now)["progress_by_day"]
    assert [d["date"].isoformat() for d in days] == ["2026-05-08", "2026-05-09", "2026-05-10"]
    assert [d["stories_read"] for d in days] == [2, 0, 1]
    assert [d["reading_time_minutes"] for d in days] == [11, 0, 2]


def test_user_stats_are_lifetime_totals(client, auth_headers, story, make_story, db):
    """Stats count every record, including ones started long ago."""
    old_story = make_story()
    read(client, auth_headers, story.id, status="COMPLETED")
    read(client, auth_headers, old_story.id, lastParagraph=3)
    client.post(f"/api/v1/stories/{story.id}/rating", headers=auth_headers, json={"rating": 4})
    client.post(f"/api/v1/stories/{old_story.id}/rating", headers=auth_headers, json={"rating": 5})

    long_ago = datetime.now(UTC) - timedelta(days=400)
    record = db.query(ReadingProgress).filter_by(story_id=old_story.id).one()
    record.started_at = long_ago
    record.last_read_at = long_ago
    db.commit()

    response = client.get("/api/v1/users/stats", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["total_stories_started"] == 2
    assert data["total_stories_completed"] == 1
    assert data["completion_rate"] == 50.0
    assert data["total_ratings"] == 2
    assert data["average_rating"] == 4.5
    assert [p["story_id"] for p in data["recent_progress"]] == [story.id, old_story.id]


def test_user_stats_for_new_reader(client, auth_headers):
    response = client.get("/api/v1/users/stats", headers=auth_headers)
    assert response.json()["data"] == {
        "total_stories_started": 0,
        "total_stories_completed": 0,
        "completion_rate": 0.0,
        "total_ratings": 0,
        "average_rating": 0.0,
        "recent_progress": [],
    }
