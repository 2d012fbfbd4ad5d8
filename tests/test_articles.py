"""Article endpoints: public reads, counters and admin writes."""

from __future__ import annotations

import pytest
from sqlalchemy import func, select

from folio.constants import MAX_RECORD_ID
from folio.models.blog import Article, article_tags


def _article_count(db_session) -> int:
    return db_session.scalar(select(func.count()).select_from(Article))


def _create(client, auth_headers, **fields):
    body = {"title": "Post", "content": "Body", "status": "published", **fields}
    return client.post("/api/admin/article", json=body, headers=auth_headers)


# ── Public listing ──────────────────────────────────────────────


class TestPublicList:
    def test_only_published(self, client, make_article):
        make_article("Visible")
        make_article("Hidden", status="draft")

        data = client.get("/api/articles").json()["data"]

        assert data["total"] == 1
        assert [a["title"] for a in data["data"]] == ["Visible"]

    def test_pinned_first_then_newest(self, client, make_article):
        make_article("Oldest", is_pinned=True)
        make_article("Middle")
        make_article("Newest")

        titles = [a["title"] for a in client.get("/api/articles").json()["data"]["data"]]

        assert titles == ["Oldest", "Newest", "Middle"]

    def test_pagination(self, client, make_article):
        for n in range(5):
            make_article(f"Post {n}")

        first = client.get("/api/articles?page=1&pageSize=2").json()["data"]
        last = client.get("/api/articles?page=3&pageSize=2").json()["data"]

        assert first["total"] == 5
        assert first["page"] == 1
        assert first["pageSize"] == 2
        assert len(first["data"]) == 2
        assert len(last["data"]) == 1

    @pytest.mark.parametrize(
        "query, page, page_size",
        [
            ("page=0&pageSize=0", 1, 1),
            ("page=-4&pageSize=500", 1, 100),
            ("", 1, 10),
        ],
    )
    def test_paging_is_clamped(self, client, make_article, query, page, page_size):
        make_article()
        data = client.get(f"/api/articles?{query}").json()["data"]
        assert data["page"] == page
        assert data["pageSize"] == page_size
        assert len(data["data"]) <= page_size

    def test_huge_page_is_empty(self, client, make_article):
        make_article()

        resp = client.get("/api/articles?page=100000000000000000000")

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["data"] == []
        assert data["total"] == 1
        assert (data["page"] - 1) * data["pageSize"] <= MAX_RECORD_ID

    @pytest.mark.parametrize("param", ["categoryId", "tagId"])
    def test_filter_id_past_64_bits(self, client, param):
        resp = client.get(f"/api/articles?{param}=99999999999999999999")
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_filter_by_category_and_tag(
        self, client, make_article, make_category, make_tag
    ):
        category = make_category()
        tag = make_tag()
        make_article("In category", category_id=category.id)
        make_article("Tagged", tags=[tag])
        make_article("Neither")

        by_category = client.get(f"/api/articles?categoryId={category.id}").json()
        by_tag = client.get(f"/api/articles?tagId={tag.id}").json()

        assert [a["title"] for a in by_category["data"]["data"]] == ["In category"]
        assert [a["title"] for a in by_tag["data"]["data"]] == ["Tagged"]
        assert by_tag["data"]["total"] == 1

    def test_items_embed_category_and_tags(
        self, client, make_article, make_category, make_tag
    ):
        category = make_category()
        tag = make_tag()
        make_article(category_id=category.id, tags=[tag])

        item = client.get("/api/articles").json()["data"]["data"][0]

        assert item["category"]["slug"] == "python"
        assert [t["slug"] for t in item["tags"]] == ["fastapi"]


# ── Public detail ───────────────────────────────────────────────


class TestPublicDetail:
    def test_each_fetch_counts_a_view(self, client, make_article):
        article = make_article()

        first = client.get(f"/api/article/{article.id}").json()["data"]
        second = client.get(f"/api/article/{article.id}").json()["data"]

        assert first["view_count"] == 1
        assert second["view_count"] == 2

    def test_draft_is_not_found_and_not_counted(
        self, client, make_article, db_session
    ):
        article = make_article(status="draft")

        resp = client.get(f"/api/article/{article.id}")

        assert resp.status_code == 404
        assert resp.json()["error"]["message"] == "Article not found"
        view_count = db_session.scalar(
            select(Article.view_count).where(Article.id == article.id)
        )
        assert view_count == 0

    def test_missing_is_not_found(self, client, db_session):
        assert client.get("/api/article/123456").status_code == 404

    def test_id_past_64_bits_is_not_found(self, client):
        resp = client.get("/api/article/99999999999999999999")
        assert resp.status_code == 404
        assert resp.json()["error"]["message"] == "Endpoint not found"

    def test_related_articles(self, client, make_article, make_category, make_tag):
        category = make_category()
        tag = make_tag()
        article = make_article("Main", category_id=category.id, tags=[tag])
        make_article("Same category", category_id=category.id)
        make_article("Same tag", tags=[tag], view_count=10)
        make_article("Draft sibling", category_id=category.id, status="draft")
        make_article("Unrelated")

        data = client.get(f"/api/article/{article.id}").json()["data"]

        related = [a["title"] for a in data["relatedArticles"]]
        assert related == ["Same tag", "Same category"]

    def test_related_articles_capped_at_four(
        self, client, make_article, make_category
    ):
        category = make_category()
        article = make_article("Main", category_id=category.id)
        for n in range(6):
            make_article(f"Sibling {n}", category_id=category.id)

        data = client.get(f"/api/article/{article.id}").json()["data"]

        assert len(data["relatedArticles"]) == 4


# ── Likes ───────────────────────────────────────────────────────


class TestLikes:
    def test_like_increments_every_time(self, client, make_article):
        article = make_article()

        client.post(f"/api/article/{article.id}/like", json={"action": "like"})
        resp = client.post(f"/api/article/{article.id}/like")

        assert resp.status_code == 200
        assert resp.json()["data"] == {"liked": True, "like_count": 2}

    def test_unlike_floors_at_zero(self, client, make_article):
        article = make_article(like_count=1)

        for _ in range(3):
            resp = client.post(
                f"/api/article/{article.id}/like", json={"action": "unlike"}
            )

        assert resp.json()["data"] == {"liked": False, "like_count": 0}

    def test_unknown_action_counts_as_like(self, client, make_article):
        article = make_article()
        resp = client.post(f"/api/article/{article.id}/like", json={"action": "love"})
        assert resp.status_code == 200
        assert resp.json()["data"] == {"liked": True, "like_count": 1}

    def test_malformed_body_counts_as_like(self, client, make_article):
        article = make_article(like_count=4)
        resp = client.post(
            f"/api/article/{article.id}/like",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert resp.status_code == 200
        assert resp.json()["data"] == {"liked": True, "like_count": 5}

    def test_draft_cannot_be_liked(self, client, make_article):
        article = make_article(status="draft")
        assert client.post(f"/api/article/{article.id}/like").status_code == 404


# ── Admin ───────────────────────────────────────────────────────


class TestAdminArticles:
    def test_create_then_fetch_round_trip(
        self, client, make_category, make_tag, auth_headers
    ):
        category = make_category()
        tags = [make_tag(), make_tag("SQL", "sql")]
        title = "  Leading and trailing spaces  "
        content = "# Heading\n\nParagraph with  double  spaces.\n"

        created = _create(
            client,
            auth_headers,
            title=title,
            content=content,
            category_id=category.id,
            tag_ids=[t.id for t in tags],
            keywords="python, api",
        )

        assert created.status_code == 201
        data = created.json()["data"]
        assert data["category"]["id"] == category.id
        assert sorted(t["id"] for t in data["tags"]) == sorted(t.id for t in tags)

        fetched = client.get(f"/api/article/{data['id']}").json()["data"]
        assert fetched["title"] == title
        assert fetched["content"] == content
        assert fetched["keywords"] == "python, api"

    def test_create_requires_title(self, client, db_session, auth_headers):
        resp = _create(client, auth_headers, title="   ")
        assert resp.status_code == 400
        assert resp.json()["error"]["message"] == "Title is required"
        assert _article_count(db_session) == 0

    def test_create_rejects_bad_status(self, client, db_session, auth_headers):
        resp = _create(client, auth_headers, status="archived")
        assert resp.status_code == 400
        assert "status" in resp.json()["error"]["details"]

    def test_unknown_tag_rolls_back_whole_create(
        self, client, db_session, auth_headers
    ):
        resp = _create(client, auth_headers, tag_ids=[9999])

        assert resp.status_code == 409
        assert resp.json()["error"]["code"] == "CONFLICT"
        assert _article_count(db_session) == 0

    def test_unknown_category_conflicts(self, client, db_session, auth_headers):
        resp = _create(client, auth_headers, category_id=9999)
        assert resp.status_code == 409
        assert _article_count(db_session) == 0

    def test_admin_get_sees_drafts_without_counting(
        self, client, make_article, auth_headers
    ):
        article = make_article(status="draft")

        resp = client.get(f"/api/admin/article/{article.id}", headers=auth_headers)

        assert resp.status_code == 200
        assert resp.json()["data"]["status"] == "draft"
        assert resp.json()["data"]["view_count"] == 0

    def test_admin_list_includes_drafts_and_filters(
        self, client, make_article, auth_headers
    ):
        make_article("Live")
        make_article("Wip", status="draft")

        everything = client.get("/api/admin/articles", headers=auth_headers).json()
        drafts = client.get(
            "/api/admin/articles?status=draft", headers=auth_headers
        ).json()

        assert everything["data"]["total"] == 2
        assert [a["title"] for a in drafts["data"]["data"]] == ["Wip"]

    def test_update_replaces_fields_and_tags(
        self, client, make_article, make_tag, db_session, auth_headers
    ):
        old_tag, new_tag = make_tag(), make_tag("SQL", "sql")
        article = make_article("Before", tags=[old_tag], cover="/uploads/a.png")

        resp = client.put(
            f"/api/admin/article/{article.id}",
            json={
                "title": "After",
                "content": "New body",
                "status": "draft",
                "tag_ids": [new_tag.id],
            },
            headers=auth_headers,
        )

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["title"] == "After"
        assert data["status"] == "draft"
        assert data["cover"] is None
        assert [t["slug"] for t in data["tags"]] == ["sql"]
        assert data["updated_at"]

    def test_failed_update_leaves_article_untouched(
        self, client, make_article, make_tag, db_session, auth_headers
    ):
        tag = make_tag()
        article = make_article("Before", tags=[tag])

        resp = client.put(
            f"/api/admin/article/{article.id}",
            json={
                "title": "After",
                "content": "x",
                "status": "published",
                "tag_ids": [tag.id, 9999],
            },
            headers=auth_headers,
        )

        assert resp.status_code == 409
        title = db_session.scalar(select(Article.title).where(Article.id == article.id))
        tag_rows = db_session.scalar(
            select(func.count())
            .select_from(article_tags)
            .where(article_tags.c.article_id == article.id)
        )
        assert title == "Before"
        assert tag_rows == 1

    def test_update_missing(self, client, db_session, auth_headers):
        resp = client.put(
            "/api/admin/article/5555",
            json={"title": "T", "content": "C", "status": "draft"},
            headers=auth_headers,
        )
        assert resp.status_code == 404

    def test_delete_then_fetch_is_not_found(
        self, client, make_article, make_tag, db_session, auth_headers
    ):
        tag = make_tag()
        article = make_article(tags=[tag])

        resp = client.delete(f"/api/admin/article/{article.id}", headers=auth_headers)

        assert resp.status_code == 200
        assert resp.json()["data"] == {"deleted": True}
        assert client.get(f"/api/article/{article.id}").status_code == 404
        assert db_session.scalar(select(func.count()).select_from(article_tags)) == 0

    def test_delete_missing(self, client, db_session, auth_headers):
        resp = client.delete("/api/admin/article/8080", headers=auth_headers)
        assert resp.status_code == 404

    def test_pin_toggles(self, client, make_article, auth_headers):
        article = make_article()

        pinned = client.post(
            f"/api/admin/article/{article.id}/pin", headers=auth_headers
        ).json()["data"]
        unpinned = client.post(
            f"/api/admin/article/{article.id}/pin", headers=auth_headers
        ).json()["data"]

        assert pinned == {"pinned": True, "message": "Article pinned"}
        assert unpinned == {"pinned": False, "message": "Article unpinned"}

    def test_pin_missing(self, client, db_session, auth_headers):
        resp = client.post("/api/admin/article/31/pin", headers=auth_headers)
        assert resp.status_code == 404

    def test_id_past_64_bits(self, client, auth_headers):
        path = "/api/admin/article/99999999999999999999"

        assert client.get(path).status_code == 401
        resp = client.get(path, headers=auth_headers)
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "NOT_FOUND"

    def test_category_id_past_64_bits_rejected(self, client, db_session, auth_headers):
        resp = _create(client, auth_headers, category_id=2**63)

        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "VALIDATION_ERROR"
        assert "category_id" in resp.json()["error"]["details"]
        assert _article_count(db_session) == 0
