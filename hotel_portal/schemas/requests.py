from pydantic import BaseModel


class Credentials(BaseModel):
    username: str = ""
    password: str = ""


class ReviewForm(BaseModel):
    hotel_id: str
    title: str = ""
    text: str = ""
    rating: float = 0.0
    is_recommended: bool = False


class ReviewEditForm(ReviewForm):
    review_id: str
