from enum import Enum


class Status(Enum):
    """Outcome codes shared by the index, the fetchers and the stores.

    Ordinals follow declaration order and are what the web layer passes
    around in ``?error=`` query parameters.
    """

    OK = "No errors occurred."
    ERROR = "Unknown error occurred."
    MISSING_CONFIG = "Unable to find configuration file."
    MISSING_VALUES = "Missing values in configuration file."
    CONNECTION_FAILED = "Failed to establish a database connection."
    CREATE_FAILED = "Failed to create necessary tables."
    INVALID_LOGIN = "Invalid username and/or password."
    INVALID_USER = "User does not exist."
    DUPLICATE_USER = "User with that username already exists."
    SQL_EXCEPTION = "Unable to execute SQL statement."
    INVALID_HOTEL = "Invalid hotel id and/or name."
    DUPLICATE_HOTEL = "Hotel with that id already exists."
    DUPLICATE_SAVEHOTEL = "Hotel is already saved."
    INVALID_LINK = "Invalid user name/hotel id."
    DUPLICATE_LINK = "Link was visited before."
    INVALID_REVIEW = "Invalid review/hotel id."
    INVALID_SAVEHOTEL = "Invalid hotel or user."
    DUPLICATE_REVIEW = "Review with that id already exists."
    INVALID_PASSWORD = (
        "Password must contain at least one number, letter and special character {@#$%}"
    )
    INVALID_PASSWORD_LENGTH = "Password must be at least 5 and not more than 10 characters long"

    @property
    def message(self) -> str:
        return self.value

    @property
    def ordinal(self) -> int:
        return _ORDINALS[self]

    @classmethod
    def from_ordinal(cls, ordinal: int) -> "Status":
        members = list(cls)
        if 0 <= ordinal < len(members):
            return members[ordinal]
        return cls.ERROR

    def __str__(self) -> str:
        return self.value


_ORDINALS = {status: i for i, status in enumerate(Status)}
