class MalformedCatalog(Exception):
    def __init__(self, message: str, path: str | None = None):
        self.message = message
        self.path = path
        super().__init__(message)


class MalformedReviewFile(Exception):
    def __init__(self, message: str, path: str | None = None):
        self.message = message
        self.path = path
        super().__init__(message)


class ReviewError(Exception):
    """A single review record was rejected."""

    kind = "ReviewError"

    def __init__(self, message: str, review_id: str | None = None):
        self.message = message
        self.review_id = review_id
        super().__init__(message)


class InvalidRating(ReviewError):
    kind = "InvalidRating"


class InvalidDate(ReviewError):
    kind = "InvalidDate"


class MalformedReview(ReviewError):
    kind = "MalformedReview"


class FetchFailed(Exception):
    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class MissingApiKey(Exception):
    def __init__(self, message: str = "API key missing in config file"):
        self.message = message
        super().__init__(message)


class LoginRequired(Exception):
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Login required for {path}")
