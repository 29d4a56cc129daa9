from typing import List, Optional

from pydantic import BaseModel, Field

from carshop.database.store import Collection

REVIEWS_COLLECTION = "reviews"


class ReviewCreate(BaseModel):
    """Model for posting a review."""
    rating: float = Field(..., ge=0, le=5)
    comment: str


class ReviewOut(BaseModel):
    id: str
    rating: Optional[float] = None
    comment: Optional[str] = None


class InsertAck(BaseModel):
    """Acknowledgement of a stored document."""
    acknowledged: bool = True
    inserted_id: str


class ReviewService:
    @staticmethod
    async def list_reviews(reviews: Collection, limit: Optional[int] = None) -> List[ReviewOut]:
        documents = await reviews.find(limit=limit)
        return [ReviewOut.model_validate(d) for d in documents]

    @staticmethod
    async def create_review(review_data: ReviewCreate, reviews: Collection) -> InsertAck:
        review_id = await reviews.insert_one(review_data.model_dump())
        return InsertAck(inserted_id=review_id)
