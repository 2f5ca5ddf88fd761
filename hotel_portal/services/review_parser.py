import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from hotel_portal.exceptions.custom import MalformedReview, MalformedReviewFile, ReviewError
from hotel_portal.services.hotel_index import ReviewSet, build_review

logger = logging.getLogger(__name__)

_REQUIRED = (
    "hotelId",
    "reviewId",
    "ratingOverall",
    "title",
    "reviewText",
    "reviewSubmissionTime",
)


@dataclass
class RecordError:
    review_id: str | None
    kind: str
    message: str


@dataclass
class ReviewFileResult:
    path: str
    reviews: ReviewSet = field(default_factory=ReviewSet)
    errors: list[RecordError] = field(default_factory=list)

    @property
    def hotel_id(self) -> str | None:
        return self.reviews.hotel_id


def _as_bool(value: object) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


def _as_rating(value: object, review_id: str) -> int:
    if isinstance(value, bool):
        raise MalformedReview(f"Rating {value!r} is not a number", review_id)
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise MalformedReview(f"Rating {value!r} is not an integer", review_id)


def _review_records(document: object) -> list:
    try:
        records = document["reviewDetails"]["reviewCollection"]["review"]
    except (KeyError, TypeError) as exc:
        raise MalformedReviewFile("Missing reviewDetails.reviewCollection.review") from exc
    if not isinstance(records, list):
        raise MalformedReviewFile("reviewDetails.reviewCollection.review is not an array")
    return records


def parse_review_file(path: str | Path) -> ReviewFileResult:
    """Parse one review file into a locally ordered review set.

    Bad records are collected in ``errors`` and skipped; a file that cannot
    be read or does not have the review collection shape raises
    MalformedReviewFile.
    """
    path = Path(path)
    try:
        with path.open(encoding="utf-8") as fh:
            document = json.load(fh)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise MalformedReviewFile(f"Unable to parse {path}: {exc}", str(path)) from exc

    try:
        records = _review_records(document)
    except MalformedReviewFile as exc:
        exc.path = str(path)
        raise

    result = ReviewFileResult(path=str(path))
    for record in records:
        raw_id = record.get("reviewId") if isinstance(record, dict) else None
        review_id = str(raw_id) if raw_id is not None else None
        try:
            if not isinstance(record, dict):
                raise MalformedReview("Review record is not an object")
            missing = [key for key in _REQUIRED if record.get(key) is None]
            if missing:
                raise MalformedReview(f"Missing {', '.join(missing)}", review_id)

            review = build_review(
                hotel_id=str(record["hotelId"]),
                review_id=str(record["reviewId"]),
                rating=_as_rating(record["ratingOverall"], str(record["reviewId"])),
                title=str(record["title"]),
                text=str(record["reviewText"]),
                is_recommended=_as_bool(record.get("isRecommended", False)),
                submitted=str(record["reviewSubmissionTime"]),
                user=str(record.get("userNickname") or ""),
            )
        except ReviewError as exc:
            logger.debug("%s in %s: %s", exc.kind, path, exc.message)
            result.errors.append(RecordError(review_id, exc.kind, exc.message))
            continue

        if not result.reviews.add(review):
            result.errors.append(
                RecordError(review.review_id, "DuplicateReview", "Duplicate review id in file")
            )

    return result
