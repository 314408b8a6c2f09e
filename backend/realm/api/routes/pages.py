"""
Page routes served through the render-mode protocol
"""
from typing import Any, Callable, Dict

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from realm.core.context import RealmContext, get_realm_context
from realm.core.errors import form_error, form_errors_on_invalid, not_found_on_error
from realm.core.page import Page
from realm.core.request_config import RequestConfig

router = APIRouter(tags=["pages"])

MAX_NAME_LENGTH = 40


class HomePage(BaseModel, Page):
    """Landing page"""
    title: str
    asset_version: str

    def realm_id(self) -> str:
        return "home"


class GreetingPage(BaseModel, Page):
    """Greets the `name` given in the request"""
    name: str
    excited: bool = False

    def realm_id(self) -> str:
        return "greeting"

    @property
    def message(self) -> str:
        return f"Hello, {self.name}{'!' if self.excited else '.'}"

    def realm_json(self) -> Any:
        return {"message": self.message}


def home_page(config: RequestConfig, realm: RealmContext) -> Page:
    return HomePage(title=realm.settings.app_name, asset_version=realm.assets.get().latest_version)


def greeting_page(config: RequestConfig, realm: RealmContext) -> Page:
    name = config.required("name").strip()
    if len(name) > MAX_NAME_LENGTH:
        form_error("name", f"Name must be at most {MAX_NAME_LENGTH} characters")
    with form_errors_on_invalid():
        return GreetingPage(name=name, excited=config.flag("excited"))


PAGES: Dict[str, Callable[[RequestConfig, RealmContext], Page]] = {
    "home": home_page,
    "greeting": greeting_page,
}


def get_page_factory(realm_id: str) -> Callable[[RequestConfig, RealmContext], Page]:
    try:
        return PAGES[realm_id]
    except KeyError:
        raise LookupError(f"No page registered as '{realm_id}'") from None


@router.get("/")
async def index(request: Request, realm: RealmContext = Depends(get_realm_context)):
    """Landing page"""
    page = home_page(RequestConfig(), realm)
    return page.page(request, realm.html.with_title(realm.settings.app_name))


@router.api_route("/pages/{realm_id}", methods=["GET", "POST"])
async def show_page(realm_id: str, request: Request, realm: RealmContext = Depends(get_realm_context)):
    """Any registered page, in the mode the request negotiates"""
    with not_found_on_error():
        factory = get_page_factory(realm_id)
    config = await RequestConfig.from_request(request)
    return factory(config, realm).page(request, realm.html)
