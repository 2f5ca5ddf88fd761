from pydantic import BaseModel


class PlaceResult(BaseModel):
    id: str | None = None
    place_id: str | None = None
    name: str = ""
    rating: float | None = None
    formatted_address: str | None = None


class TextSearchResponse(BaseModel):
    results: list[PlaceResult] = []
    status: str | None = None
    error_message: str | None = None
