# Overview: Pytest coverage for reviews, moderation visibility and rating aggregates.

import pytest

from myhouz.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from myhouz.models import Review, User
from myhouz.services import review_service
from myhouz.services.pagination import PageRequest


def _payload(entity_id, **overrides):
    payload = {
        "reviewed_entity_id": entity_id,
        "entity_type": "professional",
        "rating": {"overall": 4, "quality": 5},
        "title": "Great kitchen job",
        "comment": "Clean work, on time and on budget. Would hire again.",
        "project_context": {"project_type": "kitchen", "budget": 15000, "duration": 30},
    }
    payload.update(overrides)
    return payload


def _approve(db_session, review):
    review.status = "approved"
    db_session.commit()
    review_service.refresh_entity_rating(review.entity_type, review.reviewed_entity_id)
    db_session.commit()


class TestCreateReview:

    def test_created_pending(self, db_session, customer, seller):
        review = review_service.create_review(customer.id, _payload(seller.id))

        assert review.status == "pending"
        assert review.rating_overall == 4
        assert review.rating_quality == 5
        assert review.rating_value is None
        assert review.images == []
        assert review.project_context == {"project_type": "kitchen", "budget": 15000, "duration": 30}

    def test_pending_review_not_counted(self, db_session, customer, seller):
        review_service.create_review(customer.id, _payload(seller.id))

        professional = db_session.get(User, seller.id)
        assert professional.rating_count == 0
        assert professional.rating_average is None

    def test_duplicate_conflicts(self, db_session, customer, seller):
        review_service.create_review(customer.id, _payload(seller.id))

        with pytest.raises(ConflictError):
            review_service.create_review(customer.id, _payload(seller.id, title="Second opinion"))

    def test_same_id_as_product_is_a_different_entity(self, db_session, customer, seller):
        review_service.create_review(customer.id, _payload(seller.id))
        product_review = review_service.create_review(customer.id, _payload(seller.id, entity_type="product"))

        assert product_review.entity_type == "product"

    @pytest.mark.parametrize("rating", [
        None,
        {},
        {"overall": 0},
        {"overall": 6},
        {"overall": 4.5},
        {"overall": 4, "quality": 9},
        {"overall": 4, "style": 3},
    ])
    def test_invalid_rating(self, db_session, customer, seller, rating):
        with pytest.raises(ValidationError):
            review_service.create_review(customer.id, _payload(seller.id, rating=rating))

    @pytest.mark.parametrize("field,value", [
        ("title", "Meh"),
        ("title", "x" * 201),
        ("comment", "Too short"),
        ("comment", "x" * 1001),
        ("entity_type", "article"),
        ("images", ["not-a-url"]),
        ("project_context", {"budget": -1}),
        ("project_context", {"duration": "long"}),
    ])
    def test_invalid_fields(self, db_session, customer, seller, field, value):
        with pytest.raises(ValidationError):
            review_service.create_review(customer.id, _payload(seller.id, **{field: value}))

    def test_cannot_review_yourself(self, db_session, seller):
        with pytest.raises(ValidationError):
            review_service.create_review(seller.id, _payload(seller.id))

    def test_reviewed_user_must_be_professional(self, db_session, customer, friend):
        with pytest.raises(NotFoundError):
            review_service.create_review(customer.id, _payload(friend.id))


class TestRatingAggregate:

    def test_approved_reviews_feed_professional_rating(self, db_session, customer, friend, seller):
        first = review_service.create_review(customer.id, _payload(seller.id, rating={"overall": 5}))
        second = review_service.create_review(friend.id, _payload(seller.id, rating={"overall": 4}))
        _approve(db_session, first)
        _approve(db_session, second)

        professional = db_session.get(User, seller.id)
        assert professional.rating_count == 2
        assert professional.rating_average == 4.5

    def test_update_refreshes_rating(self, db_session, customer, seller):
        review = review_service.create_review(customer.id, _payload(seller.id, rating={"overall": 5}))
        _approve(db_session, review)

        review_service.update_review(customer.id, review.id, {"rating": {"overall": 2}})

        assert db_session.get(User, seller.id).rating_average == 2.0

    def test_delete_refreshes_rating(self, db_session, customer, seller):
        review = review_service.create_review(customer.id, _payload(seller.id))
        _approve(db_session, review)

        review_service.delete_review(customer.id, review.id)

        professional = db_session.get(User, seller.id)
        assert professional.rating_count == 0
        assert professional.rating_average is None


class TestListEntityReviews:

    def test_only_approved_with_stats(self, db_session, customer, friend, other_seller, seller):
        approved = review_service.create_review(customer.id, _payload(seller.id, rating={"overall": 5}))
        review_service.create_review(friend.id, _payload(seller.id, rating={"overall": 1}))
        rated_three = review_service.create_review(other_seller.id, _payload(seller.id, rating={"overall": 3}))
        _approve(db_session, approved)
        _approve(db_session, rated_three)

        page, stats = review_service.list_entity_reviews("professional", seller.id, PageRequest())

        assert {r.id for r in page.items} == {approved.id, rated_three.id}
        assert stats["total_reviews"] == 2
        assert stats["average_rating"] == 4.0
        assert stats["distribution"] == {"1": 0, "2": 0, "3": 1, "4": 0, "5": 1}

    def test_sort_by_rating(self, db_session, customer, friend, seller):
        high = review_service.create_review(customer.id, _payload(seller.id, rating={"overall": 5}))
        low = review_service.create_review(friend.id, _payload(seller.id, rating={"overall": 2}))
        _approve(db_session, high)
        _approve(db_session, low)

        desc, _ = review_service.list_entity_reviews("professional", seller.id, PageRequest(), sort="rating-desc")
        asc, _ = review_service.list_entity_reviews("professional", seller.id, PageRequest(), sort="rating-asc")

        assert [r.id for r in desc.items] == [high.id, low.id]
        assert [r.id for r in asc.items] == [low.id, high.id]

    def test_sort_by_helpful(self, db_session, customer, friend, seller):
        plain = review_service.create_review(customer.id, _payload(seller.id))
        useful = review_service.create_review(friend.id, _payload(seller.id))
        _approve(db_session, plain)
        _approve(db_session, useful)
        review_service.mark_helpful(useful.id, True)

        page, _ = review_service.list_entity_reviews("professional", seller.id, PageRequest(), sort="helpful")

        assert page.items[0].id == useful.id

    def test_empty_stats(self, db_session, seller):
        page, stats = review_service.list_entity_reviews("product", 12345, PageRequest())

        assert page.items == []
        assert stats["total_reviews"] == 0
        assert stats["average_rating"] == 0

    def test_unknown_sort_rejected(self, db_session, seller):
        with pytest.raises(ValidationError):
            review_service.list_entity_reviews("professional", seller.id, PageRequest(), sort="random")


class TestEditAndDelete:

    def test_only_reviewer_can_update(self, db_session, customer, friend, seller):
        review = review_service.create_review(customer.id, _payload(seller.id))

        with pytest.raises(NotFoundError):
            review_service.update_review(friend.id, review.id, {"title": "Hijacked title"})

    def test_status_is_not_editable(self, db_session, customer, seller):
        review = review_service.create_review(customer.id, _payload(seller.id))

        with pytest.raises(ValidationError, match="Field not allowed"):
            review_service.update_review(customer.id, review.id, {"status": "approved"})

    def test_partial_update(self, db_session, customer, seller):
        review = review_service.create_review(customer.id, _payload(seller.id))

        review = review_service.update_review(customer.id, review.id, {"title": "Updated title"})

        assert review.title == "Updated title"
        assert review.rating_overall == 4
        assert review.status == "pending"

    def test_only_reviewer_can_delete(self, db_session, customer, friend, seller):
        review = review_service.create_review(customer.id, _payload(seller.id))

        with pytest.raises(NotFoundError):
            review_service.delete_review(friend.id, review.id)

        review_service.delete_review(customer.id, review.id)
        assert db_session.query(Review).count() == 0


class TestHelpfulAndResponse:

    def test_mark_helpful_counts(self, db_session, customer, seller):
        review = review_service.create_review(customer.id, _payload(seller.id))

        review_service.mark_helpful(review.id, True)
        review_service.mark_helpful(review.id, True)
        review = review_service.mark_helpful(review.id, False)

        assert review.helpful_yes == 2
        assert review.helpful_no == 1

    def test_mark_helpful_requires_boolean(self, db_session, customer, seller):
        review = review_service.create_review(customer.id, _payload(seller.id))

        with pytest.raises(ValidationError):
            review_service.mark_helpful(review.id, "yes")

    def test_mark_helpful_missing_review(self, db_session):
        with pytest.raises(NotFoundError):
            review_service.mark_helpful(999, True)

    def test_reviewed_professional_can_respond(self, db_session, customer, seller):
        review = review_service.create_review(customer.id, _payload(seller.id))

        review = review_service.add_response(seller, review.id, "Thank you for your trust!")

        assert review.response_text == "Thank you for your trust!"
        assert review.responded_at is not None
        assert review.to_dict()["response"]["text"] == "Thank you for your trust!"

    def test_individual_cannot_respond(self, db_session, customer, friend, seller):
        review = review_service.create_review(customer.id, _payload(seller.id))

        with pytest.raises(ForbiddenError):
            review_service.add_response(friend, review.id, "Not mine to answer")

    def test_other_professional_cannot_respond(self, db_session, customer, seller, other_seller):
        review = review_service.create_review(customer.id, _payload(seller.id))

        with pytest.raises(ForbiddenError):
            review_service.add_response(other_seller, review.id, "Hello from a competitor")

    def test_any_professional_can_respond_to_product_review(self, db_session, customer, seller):
        review = review_service.create_review(customer.id, _payload(77, entity_type="product"))

        review = review_service.add_response(seller, review.id, "We stock the replacement part.")

        assert review.response_text == "We stock the replacement part."
