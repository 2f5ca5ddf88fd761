import logging

from fastapi import APIRouter, Request
from fastapi.responses import RedirectResponse

from hotel_portal.dependencies import CurrentUser, ErrorMessage, HotelStoreDep, UserStoreDep
from hotel_portal.schemas.requests import Credentials
from hotel_portal.schemas.responses import FormResponse, HomeResponse, WelcomeResponse
from hotel_portal.status import Status

logger = logging.getLogger(__name__)

router = APIRouter()


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=302)


@router.get("/home", response_model=HomeResponse)
def home(request: Request, hotels: HotelStoreDep) -> HomeResponse:
    return HomeResponse(
        username=request.session.get("username"),
        hotels=hotels.list_all_hotels(),
    )


@router.get("/login", response_model=FormResponse)
def login_page(error: ErrorMessage) -> FormResponse:
    return FormResponse(error=error)


@router.post("/login")
def login(request: Request, credentials: Credentials, users: UserStoreDep) -> RedirectResponse:
    status = users.authenticate_user(credentials.username, credentials.password)
    if status is not Status.OK:
        logger.info("Failed login for %s: %s", credentials.username, status.name)
        return _redirect(f"/login?error={status.ordinal}")

    users.update_last_login(credentials.username)
    request.session["username"] = credentials.username
    return _redirect("/welcome")


@router.get("/register", response_model=FormResponse)
def register_page(error: ErrorMessage) -> FormResponse:
    return FormResponse(error=error)


@router.post("/register")
def register(credentials: Credentials, users: UserStoreDep) -> RedirectResponse:
    status = users.register_user(credentials.username, credentials.password)
    if status is not Status.OK:
        return _redirect(f"/register?error={status.ordinal}")
    return _redirect("/login")


@router.get("/welcome", response_model=WelcomeResponse)
def welcome(username: CurrentUser, users: UserStoreDep) -> WelcomeResponse:
    return WelcomeResponse(username=username, last_login=users.get_last_login(username) or "")


@router.get("/logout")
def logout(request: Request) -> RedirectResponse:
    request.session.clear()
    return _redirect("/login")


@router.api_route("/{path:path}", methods=["GET", "POST"], include_in_schema=False)
def fallback(request: Request, path: str) -> RedirectResponse:
    if request.session.get("username"):
        return _redirect("/welcome")
    return _redirect("/login")
