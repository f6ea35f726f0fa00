import pytest
from sqlalchemy.exc import OperationalError

from app.core import product as product_service
from app.core import review as review_service
from app.core.errors import DB_ERROR_MESSAGE, AuthenticationError, ForbiddenError, NotFoundError, ServerError
from app.models.user import User


@pytest.fixture
def author(db):
    user = User(email="author@x.com", name="Author", password="hash")
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def review(db, author, product):
    return review_service.create_review(
        db, author_id=author.id, product_id=product.id, title="Good", description="Solid", rating=4
    )


def test_create_review_for_unknown_product(db, author):
    with pytest.raises(NotFoundError, match="Product not found"):
        review_service.create_review(db, author_id=author.id, product_id=999, title="t", description="", rating=3)


def test_author_may_mutate(db, author, review):
    assert review_service.authorize_review_mutation(db, review.id, author.id).id == review.id


def test_other_user_is_forbidden(db, author, review):
    with pytest.raises(ForbiddenError, match="Forbidden"):
        review_service.authorize_review_mutation(db, review.id, author.id + 1)


def test_missing_review_wins_over_identity(db):
    # No caller and no review: the 404 comes first
    with pytest.raises(NotFoundError, match="Review not found"):
        review_service.authorize_review_mutation(db, 12345, None)


def test_missing_caller(db, review):
    with pytest.raises(AuthenticationError, match="User not authenticated"):
        review_service.authorize_review_mutation(db, review.id, None)


def test_update_ignores_author_and_product(db, author, review, product):
    updated = review_service.update_review(
        db, review, {"title": "Changed", "author_id": 999, "product_id": 999, "rating": None}
    )

    assert updated.title == "Changed"
    assert updated.rating == 4
    assert updated.author_id == author.id
    assert updated.product_id == product.id


def test_delete_returns_view(db, review):
    deleted = review_service.delete_review(db, review)

    assert deleted["title"] == "Good"
    assert review_service.get_review(db, deleted["id"]) is None


def broken_commit():
    raise OperationalError("COMMIT", {}, Exception("database is locked"))


def test_create_review_wraps_database_errors(db, author, product, monkeypatch):
    monkeypatch.setattr(db, "commit", broken_commit)

    with pytest.raises(ServerError) as exc:
        review_service.create_review(db, author_id=author.id, product_id=product.id, title="t", description="", rating=3)

    assert exc.value.message == DB_ERROR_MESSAGE


def test_update_review_wraps_database_errors(db, review, monkeypatch):
    monkeypatch.setattr(db, "commit", broken_commit)

    with pytest.raises(ServerError, match=DB_ERROR_MESSAGE):
        review_service.update_review(db, review, {"title": "Changed"})


def test_delete_review_wraps_database_errors(db, review, monkeypatch):
    monkeypatch.setattr(db, "commit", broken_commit)

    with pytest.raises(ServerError, match=DB_ERROR_MESSAGE):
        review_service.delete_review(db, review)

    monkeypatch.undo()
    assert review_service.get_review(db, review.id) is not None


def test_create_product_wraps_database_errors(db, monkeypatch):
    monkeypatch.setattr(db, "commit", broken_commit)

    with pytest.raises(ServerError, match=DB_ERROR_MESSAGE):
        product_service.create_product(db, "Mouse", 100)
