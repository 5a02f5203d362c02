# store/models.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class BookIn(BaseModel):
    """Request body for creating or fully replacing a book."""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    author_id: Optional[int] = Field(None, alias="authorId")
    rating: Optional[float] = None
    rating_count: Optional[int] = Field(None, alias="ratingCount")
    review_count: Optional[int] = Field(None, alias="reviewCount")
    description: Optional[str] = None
    pages: Optional[int] = None
    date_of_publication: Optional[str] = Field(None, alias="dateOfPublication")
    edition_language: Optional[str] = Field(None, alias="editionLanguage")
    price: Optional[float] = None
    online_stores: Optional[str] = Field(None, alias="onlineStores")

    def as_params(self):
        """Column values in the order used by the INSERT and UPDATE statements."""
        return (
            self.title,
            self.author_id,
            self.rating,
            self.rating_count,
            self.review_count,
            self.description,
            self.pages,
            self.date_of_publication,
            self.edition_language,
            self.price,
            self.online_stores,
        )


class Book(BookIn):
    book_id: int = Field(..., alias="bookId", description="Store-assigned id")


class BookCreated(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    book_id: int = Field(..., alias="bookId")
