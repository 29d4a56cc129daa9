from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from carshop.base_microservice import BaseMicroservice
from carshop.database.deps import get_collection
from carshop.database.store import Collection
from carshop.exceptions import ServiceError, StoreFailure
from carshop.reviews.service import REVIEWS_COLLECTION, ReviewCreate, ReviewService

router = APIRouter(tags=["reviews"])
review_service = BaseMicroservice("reviews")

get_reviews = get_collection(REVIEWS_COLLECTION)


@router.get("")
async def list_reviews(
    limit: Optional[int] = Query(None, ge=0),
    reviews: Collection = Depends(get_reviews),
):
    """Get all reviews, or the first ``limit`` of them."""
    try:
        items = await ReviewService.list_reviews(reviews, limit=limit)
        return review_service.mcp_response(
            message="Reviews retrieved successfully",
            data=items
        )
    except ServiceError:
        raise
    except Exception as e:
        review_service.log_error(e, context="List reviews")
        raise StoreFailure("Failed to retrieve reviews: " + str(e))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_review(review_data: ReviewCreate, reviews: Collection = Depends(get_reviews)):
    """Post a review with a rating and a comment."""
    try:
        ack = await ReviewService.create_review(review_data, reviews)

        review_service.log_event("review.created", {"id": ack.inserted_id, "rating": review_data.rating})

        return review_service.mcp_response(
            message="Review created successfully",
            data=ack,
            status_code=status.HTTP_201_CREATED
        )
    except ServiceError:
        raise
    except Exception as e:
        review_service.log_error(e, context="Create review")
        raise StoreFailure("Failed to create review: " + str(e))
