"""L2 Component Tests: LinkedInToolkit end-to-end against a fake browser.

每个工具调用都必须落在 Success / NeedsHuman / Error 三者之一，且不向外抛异常。
"""

import random
from pathlib import Path

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from linkedin_mcp.detector.types import ProblemReason
from linkedin_mcp.tools import TOOLS, Error, LinkedInToolkit, NeedsHuman, Success, parse_outcome, to_json
from tests.fixtures.fake_page import FakeBrowser, FakeClock, FakeElement, FakePage, make_settings

PROFILE_URL = "https://www.linkedin.com/in/jan-kowalski/"
AUTHWALL_URL = "https://www.linkedin.com/authwall?sessionRedirect=x"

VALID_ARGS = {
    "linkedin_search": {"query": "python developer"},
    "linkedin_get_profile": {"profile_url": PROFILE_URL},
    "linkedin_scroll_results": {},
    "linkedin_send_connection": {"profile_url": PROFILE_URL},
    "linkedin_navigate": {"url": "https://www.linkedin.com/feed/"},
    "linkedin_click": {"selector": "button.nothing"},
    "linkedin_type": {"selector": "input.nothing", "text": "hi"},
    "linkedin_screenshot": {},
    "linkedin_debug_dom": {},
}


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_toolkit(tmp_path, clock):
    def factory(*pages, error=None, **overrides):
        browser = FakeBrowser(*(pages or (FakePage(),)), error=error)
        toolkit = LinkedInToolkit(
            make_settings(tmp_path, **overrides),
            launcher=browser,
            rng=random.Random(5),
            clock=clock,
            sleep=clock.sleep,
        )
        return toolkit, browser
    return factory


def logged_in(page):
    page.add(".global-nav")
    return page


def profile_page(page, url):
    """已登录、未建立联系的个人主页"""
    page.clear()
    logged_in(page)
    page.add("h1.text-heading-xlarge", FakeElement(text="Jan Kowalski"))
    page.add(".text-body-medium.break-words", FakeElement(text="Backend Engineer at Acme"))


def result_card(name, href):
    children = {
        '.entity-result__title-text a span[aria-hidden="true"]': [FakeElement(text=name)],
        ".entity-result__primary-subtitle": [FakeElement(text="Python Developer")],
        ".entity-result__secondary-subtitle": [FakeElement(text="Warsaw, Poland")],
        ".entity-result__badge-text": [FakeElement(text="2nd")],
    }
    if href:
        children[".entity-result__title-text a"] = [FakeElement(text=name, attrs={"href": href})]
    return FakeElement(children=children)


class TestValidation:
    async def test_unknown_tool(self, make_toolkit):
        toolkit, browser = make_toolkit()
        outcome = await toolkit.call("linkedin_teleport", {})
        assert isinstance(outcome, Error)
        assert browser.launches == 0

    async def test_over_long_note_rejected_before_browser(self, make_toolkit):
        toolkit, browser = make_toolkit()

        outcome = await toolkit.call(
            "linkedin_send_connection", {"profile_url": PROFILE_URL, "message": "x" * 301}
        )

        assert isinstance(outcome, Error)
        assert "message" in outcome.message
        assert browser.launches == 0

    async def test_search_limit_over_max_rejected(self, make_toolkit):
        toolkit, browser = make_toolkit()
        outcome = await toolkit.call("linkedin_search", {"query": "x", "limit": 50})
        assert isinstance(outcome, Error)
        assert browser.launches == 0

    async def test_missing_selectors_file_is_error(self, make_toolkit, tmp_path):
        toolkit, browser = make_toolkit(selectors_file=tmp_path / "missing.yaml")

        outcome = await toolkit.call("linkedin_navigate", {"url": "https://www.linkedin.com/feed/"})

        assert isinstance(outcome, Error)
        assert "missing.yaml" in outcome.message
        assert browser.launches == 0

    async def test_browser_unavailable(self, make_toolkit):
        toolkit, _ = make_toolkit(error=RuntimeError("chromium missing"))
        outcome = await toolkit.call("linkedin_navigate", {"url": "https://www.linkedin.com/feed/"})
        assert isinstance(outcome, Error)
        assert "chromium missing" in outcome.message


class TestSearch:
    async def test_empty_results_are_success(self, make_toolkit):
        page = FakePage()
        page.on_goto = lambda p, url: (logged_in(p), p.add(".reusable-search__entity-result-list", FakeElement(visible=False)))
        toolkit, _ = make_toolkit(page)

        outcome = await toolkit.call("linkedin_search", {"query": "nobody at all"})

        assert isinstance(outcome, Success)
        assert outcome.data == {"results": [], "total_results": 0, "has_more": False}

    async def test_no_results_marker(self, make_toolkit):
        page = FakePage()
        page.on_goto = lambda p, url: (logged_in(p), p.add(".search-no-results"))
        toolkit, _ = make_toolkit(page)

        outcome = await toolkit.call("linkedin_search", {"query": "zzz"})

        assert isinstance(outcome, Success)
        assert outcome.data["total_results"] == 0

    async def test_hidden_no_results_marker_does_not_hide_results(self, make_toolkit):
        def setup(p, url):
            logged_in(p)
            p.add(".search-no-results", FakeElement(visible=False))
            p.add(".reusable-search__entity-result-list")
            p.add(".entity-result", result_card("Jan Kowalski", "/in/jan-kowalski"))

        page = FakePage()
        page.on_goto = setup
        toolkit, _ = make_toolkit(page)

        outcome = await toolkit.call("linkedin_search", {"query": "python"})

        assert isinstance(outcome, Success)
        assert outcome.data["total_results"] == 1
        assert outcome.data["results"][0]["name"] == "Jan Kowalski"

    async def test_parses_result_cards(self, make_toolkit):
        def setup(p, url):
            logged_in(p)
            p.add(".reusable-search__entity-result-list")
            p.add(".entity-result", result_card("Jan Kowalski", "/in/jan-kowalski?miniProfileUrn=1"))
            p.add(".entity-result", result_card("No Link", None))
            p.add(".entity-result", result_card("Anna Nowak", "https://www.linkedin.com/in/anna/"))

        page = FakePage()
        page.on_goto = setup
        toolkit, _ = make_toolkit(page)

        outcome = await toolkit.call("linkedin_search", {"query": "python", "location": "Warsaw", "limit": 2})

        assert isinstance(outcome, Success)
        results = outcome.data["results"]
        assert [r["name"] for r in results] == ["Jan Kowalski", "Anna Nowak"]
        assert results[0]["profile_url"] == "https://www.linkedin.com/in/jan-kowalski"
        assert results[0]["connection_degree"] == "2nd"
        assert outcome.data["has_more"] is True
        assert "Warsaw" in page.visits[0]

    async def test_missing_results_container_is_unexpected_ui(self, make_toolkit):
        page = FakePage()
        page.on_goto = lambda p, url: logged_in(p)
        toolkit, _ = make_toolkit(page)

        outcome = await toolkit.call("linkedin_search", {"query": "python"})

        assert isinstance(outcome, NeedsHuman)
        assert outcome.reason == ProblemReason.UNEXPECTED_UI
        assert Path(outcome.screenshot_path).exists()

    async def test_login_wall_on_navigation(self, make_toolkit):
        page = FakePage()

        def redirect(p, url):
            p.url = AUTHWALL_URL
            p.body_text = "Join LinkedIn to see the full results"

        page.on_goto = redirect
        toolkit, _ = make_toolkit(page)

        outcome = await toolkit.call("linkedin_search", {"query": "python"})

        assert isinstance(outcome, NeedsHuman)
        assert outcome.reason == ProblemReason.LOGIN_REQUIRED
        assert outcome.current_url == AUTHWALL_URL
        assert Path(outcome.screenshot_path).exists()


class TestScroll:
    async def test_returns_only_new_results(self, make_toolkit):
        page = logged_in(FakePage("https://www.linkedin.com/search/results/people/?keywords=python"))
        page.add(".entity-result", result_card("Jan Kowalski", "/in/jan"))

        def load_more(p):
            p.add(".entity-result", result_card("Anna Nowak", "/in/anna"))
            p.remove("button.scaffold-finite-scroll__load-button")

        page.add("button.scaffold-finite-scroll__load-button", FakeElement(on_click=load_more))
        toolkit, _ = make_toolkit(page)

        outcome = await toolkit.call("linkedin_scroll_results", {"amount": 2})

        assert isinstance(outcome, Success)
        assert [r["name"] for r in outcome.data["new_results"]] == ["Anna Nowak"]
        assert outcome.data["total_loaded"] == 2
        assert len(page.mouse.wheel_steps) >= 10


class TestProfile:
    async def test_reads_profile_and_contact_info(self, make_toolkit):
        def open_contact(p):
            p.add(".pv-contact-info")
            p.add(".pv-contact-info__contact-type.ci-email a", FakeElement(text=" jan@example.com "))
            p.add('button[aria-label="Dismiss"]', FakeElement(on_click=lambda q: q.remove(".pv-contact-info")))

        def setup(p, url):
            profile_page(p, url)
            p.add(".text-body-small.inline.t-black--light.break-words", FakeElement(text="Warsaw, Poland"))
            p.add(".dist-value", FakeElement(text="2nd"))
            p.add("#top-card-text-details-contact-info", FakeElement(on_click=open_contact))
            p.experience = [
                {"title": "Backend Engineer", "company": "Acme", "duration": "2021 - Present", "is_current": True},
                {"title": "Developer", "company": "Initech", "duration": "2018 - 2021", "is_current": False},
            ]

        page = FakePage()
        page.on_goto = setup
        toolkit, _ = make_toolkit(page)

        outcome = await toolkit.call("linkedin_get_profile", {"profile_url": PROFILE_URL})

        assert isinstance(outcome, Success)
        data = outcome.data
        assert (data["first_name"], data["last_name"]) == ("Jan", "Kowalski")
        assert data["current_company"] == "Acme"
        assert data["current_position"] == "Backend Engineer"
        assert data["location"] == "Warsaw, Poland"
        assert data["email"] == "jan@example.com"
        assert data["phone"] is None
        assert len(data["experience"]) == 2
        assert page.clicked('button[aria-label="Dismiss"]') == 1

    async def test_company_falls_back_to_headline(self, make_toolkit):
        page = FakePage()
        page.on_goto = profile_page
        toolkit, _ = make_toolkit(page)

        outcome = await toolkit.call("linkedin_get_profile", {"profile_url": PROFILE_URL})

        assert isinstance(outcome, Success)
        assert outcome.data["current_company"] == "Acme"
        assert outcome.data["email"] is None

    async def test_missing_name_is_unexpected_ui(self, make_toolkit, clock):
        page = FakePage()
        page.on_goto = lambda p, url: logged_in(p)
        toolkit, _ = make_toolkit(page)

        outcome = await toolkit.call("linkedin_get_profile", {"profile_url": PROFILE_URL})

        assert isinstance(outcome, NeedsHuman)
        assert outcome.reason == ProblemReason.UNEXPECTED_UI
        assert "profile name" in outcome.hint


class TestConnection:
    async def test_rate_limit_after_connect_stops_before_send(self, make_toolkit):
        def hit_limit(p):
            p.add(".ip-fuse-limit-alert")
            p.body_text = "You've reached the weekly invitation limit"

        def setup(p, url):
            profile_page(p, url)
            p.add('button[aria-label*="Invite"][aria-label*="to connect"]', FakeElement(on_click=hit_limit))
            p.add('button[aria-label="Send invitation"]')

        page = FakePage()
        page.on_goto = setup
        toolkit, _ = make_toolkit(page)

        outcome = await toolkit.call("linkedin_send_connection", {"profile_url": PROFILE_URL})

        assert isinstance(outcome, NeedsHuman)
        assert outcome.reason == ProblemReason.RATE_LIMITED
        assert "invitation limit" in outcome.hint
        assert Path(outcome.screenshot_path).exists()
        assert page.clicked('button[aria-label*="Invite"][aria-label*="to connect"]') == 1
        assert page.clicked('button[aria-label="Send invitation"]') == 0

    async def test_sends_with_note(self, make_toolkit):
        def setup(p, url):
            profile_page(p, url)
            p.add('button[aria-label*="Invite"][aria-label*="to connect"]')
            p.add('button[aria-label="Add a note"]')
            p.add('textarea[name="message"]')
            p.add('button[aria-label="Send invitation"]')

        page = FakePage()
        page.on_goto = setup
        toolkit, _ = make_toolkit(page)

        outcome = await toolkit.call(
            "linkedin_send_connection", {"profile_url": PROFILE_URL, "message": "Hi Jan!"}
        )

        assert isinstance(outcome, Success)
        assert outcome.data["status"] == "success"
        assert page.keyboard.text == "Hi Jan!"
        assert page.clicked('button[aria-label="Send invitation"]') == 1

    async def test_connect_through_more_menu(self, make_toolkit):
        def setup(p, url):
            profile_page(p, url)
            p.add('button[aria-label="More actions"]')
            p.add('div[aria-label*="Invite"][role="button"]')
            p.add('button[aria-label="Send invitation"]')

        page = FakePage()
        page.on_goto = setup
        toolkit, _ = make_toolkit(page)

        outcome = await toolkit.call("linkedin_send_connection", {"profile_url": PROFILE_URL})

        assert isinstance(outcome, Success)
        assert page.clicked('div[aria-label*="Invite"][role="button"]') == 1

    async def test_already_connected_clicks_nothing(self, make_toolkit):
        def setup(p, url):
            profile_page(p, url)
            p.add('button[aria-label*="Message"]')

        page = FakePage()
        page.on_goto = setup
        toolkit, _ = make_toolkit(page)

        outcome = await toolkit.call("linkedin_send_connection", {"profile_url": PROFILE_URL})

        assert isinstance(outcome, Success)
        assert outcome.data["status"] == "already_connected"
        assert page.mouse.clicks == []

    async def test_pending(self, make_toolkit):
        def setup(p, url):
            profile_page(p, url)
            p.add('button[aria-label*="Pending"]')

        page = FakePage()
        page.on_goto = setup
        toolkit, _ = make_toolkit(page)

        outcome = await toolkit.call("linkedin_send_connection", {"profile_url": PROFILE_URL})
        assert outcome.data["status"] == "pending"

    async def test_error_banner_after_send(self, make_toolkit):
        def show_error(p):
            p.add(".artdeco-modal")
            p.add(".artdeco-inline-feedback--error", FakeElement(text="Something went wrong"))

        def setup(p, url):
            profile_page(p, url)
            p.add('button[aria-label*="Invite"][aria-label*="to connect"]')
            p.add('button[aria-label="Send invitation"]', FakeElement(on_click=show_error))

        page = FakePage()
        page.on_goto = setup
        toolkit, _ = make_toolkit(page)

        outcome = await toolkit.call("linkedin_send_connection", {"profile_url": PROFILE_URL})

        assert isinstance(outcome, NeedsHuman)
        assert outcome.reason == ProblemReason.UNEXPECTED_UI
        assert "Something went wrong" in outcome.hint

    async def test_no_connect_button(self, make_toolkit):
        page = FakePage()
        page.on_goto = profile_page
        toolkit, _ = make_toolkit(page)

        outcome = await toolkit.call("linkedin_send_connection", {"profile_url": PROFILE_URL})

        assert isinstance(outcome, NeedsHuman)
        assert outcome.reason == ProblemReason.ELEMENT_NOT_FOUND


class TestNavigationFailures:
    async def test_network_error(self, make_toolkit):
        page = FakePage()
        page.goto_error = PlaywrightError("net::ERR_INTERNET_DISCONNECTED at https://www.linkedin.com/feed/")
        toolkit, _ = make_toolkit(page)

        outcome = await toolkit.call("linkedin_navigate", {"url": "https://www.linkedin.com/feed/"})

        assert isinstance(outcome, NeedsHuman)
        assert outcome.reason == ProblemReason.NETWORK_ERROR

    async def test_timeout(self, make_toolkit):
        page = FakePage()
        page.goto_error = PlaywrightTimeoutError("Timeout 30000ms exceeded.")
        toolkit, _ = make_toolkit(page)

        outcome = await toolkit.call("linkedin_navigate", {"url": "https://www.linkedin.com/feed/"})

        assert isinstance(outcome, NeedsHuman)
        assert outcome.reason == ProblemReason.TIMEOUT

    async def test_driver_error_gets_its_own_hint(self, make_toolkit, monkeypatch):
        page = FakePage()
        toolkit, _ = make_toolkit(page)

        async def closed(*args, **kwargs):
            raise PlaywrightError("Target page, context or browser has been closed")

        monkeypatch.setattr(page, "wait_for_load_state", closed)

        outcome = await toolkit.call("linkedin_navigate", {"url": "https://www.linkedin.com/feed/"})

        assert isinstance(outcome, NeedsHuman)
        assert outcome.reason == ProblemReason.UNEXPECTED_UI
        assert "Target page, context or browser has been closed" in outcome.hint
        assert "Expected element not found" not in outcome.hint

    async def test_unexpected_exception_is_error(self, make_toolkit):
        page = FakePage()
        page.goto_error = RuntimeError("kaboom")
        toolkit, _ = make_toolkit(page)

        outcome = await toolkit.call("linkedin_navigate", {"url": "https://www.linkedin.com/feed/"})

        assert isinstance(outcome, Error)
        assert "kaboom" in outcome.message

    async def test_failed_screenshot_keeps_needs_human(self, make_toolkit, monkeypatch):
        page = FakePage()
        page.on_goto = lambda p, url: setattr(p, "url", AUTHWALL_URL)
        toolkit, _ = make_toolkit(page)

        async def broken_capture(*args, **kwargs):
            raise OSError("disk full")

        monkeypatch.setattr(toolkit.evidence, "capture", broken_capture)

        outcome = await toolkit.call("linkedin_navigate", {"url": "https://www.linkedin.com/feed/"})

        assert isinstance(outcome, NeedsHuman)
        assert outcome.reason == ProblemReason.LOGIN_REQUIRED
        assert outcome.screenshot_path is None


class TestOperatorTools:
    async def test_click_by_text_brings_element_into_view(self, make_toolkit):
        page = logged_in(FakePage("https://www.linkedin.com/feed/"))
        target = page.add('text="Show all"', FakeElement(visible=False))
        toolkit, _ = make_toolkit(page)

        outcome = await toolkit.call("linkedin_click", {"text": "Show all"})

        assert isinstance(outcome, Success)
        assert outcome.data["selector"] == 'text="Show all"'
        assert target.clicks == 1

    async def test_click_missing_element(self, make_toolkit):
        toolkit, _ = make_toolkit(logged_in(FakePage("https://www.linkedin.com/feed/")))

        outcome = await toolkit.call("linkedin_click", {"selector": "button.gone"})

        assert isinstance(outcome, NeedsHuman)
        assert outcome.reason == ProblemReason.ELEMENT_NOT_FOUND

    async def test_click_that_triggers_captcha(self, make_toolkit):
        page = logged_in(FakePage("https://www.linkedin.com/feed/"))
        page.add("button.next", FakeElement(on_click=lambda p: p.add(".g-recaptcha")))
        toolkit, _ = make_toolkit(page)

        outcome = await toolkit.call("linkedin_click", {"selector": "button.next"})

        assert isinstance(outcome, NeedsHuman)
        assert outcome.reason == ProblemReason.CAPTCHA_DETECTED

    async def test_type(self, make_toolkit):
        page = logged_in(FakePage("https://www.linkedin.com/feed/"))
        page.add("input.search")
        toolkit, _ = make_toolkit(page)

        outcome = await toolkit.call("linkedin_type", {"selector": "input.search", "text": "abc", "clear_first": True})

        assert isinstance(outcome, Success)
        assert outcome.data["characters"] == 3
        assert page.keyboard.text == "abc"

    async def test_screenshot(self, make_toolkit):
        toolkit, _ = make_toolkit(logged_in(FakePage("https://www.linkedin.com/feed/")))

        outcome = await toolkit.call("linkedin_screenshot", {"full_page": True})

        assert isinstance(outcome, Success)
        assert Path(outcome.data["screenshot_path"]).read_bytes().startswith(b"\x89PNG")

    async def test_screenshot_missing_element(self, make_toolkit):
        toolkit, _ = make_toolkit(logged_in(FakePage("https://www.linkedin.com/feed/")))
        outcome = await toolkit.call("linkedin_screenshot", {"element": "#nope"})
        assert isinstance(outcome, NeedsHuman)
        assert outcome.reason == ProblemReason.ELEMENT_NOT_FOUND

    async def test_debug_report(self, make_toolkit):
        toolkit, _ = make_toolkit(logged_in(FakePage("https://www.linkedin.com/feed/")))

        outcome = await toolkit.call("linkedin_debug_dom", {"selector": ".global-nav"})

        assert isinstance(outcome, Success)
        data = outcome.data
        assert data["page_state"] == "clear"
        assert data["roles"]["navigation.nav_bar"]["matched"] is True
        assert "profile.name" in data["unmatched_roles"]
        assert data["selector_analysis"]["count"] == 1

    async def test_debug_reports_problem_instead_of_stopping(self, make_toolkit):
        toolkit, _ = make_toolkit(FakePage(AUTHWALL_URL))
        outcome = await toolkit.call("linkedin_debug_dom", {})
        assert isinstance(outcome, Success)
        assert outcome.data["page_state"] == "login_required"


class TestLifecycle:
    async def test_closed_browser_recreated_between_calls(self, make_toolkit):
        first, second = FakePage(), FakePage()
        for page in (first, second):
            page.on_goto = lambda p, url: logged_in(p)
        toolkit, browser = make_toolkit(first, second)

        assert isinstance(await toolkit.call("linkedin_navigate", {"url": "linkedin.com/feed/"}), Success)
        first.closed = True
        outcome = await toolkit.call("linkedin_navigate", {"url": "linkedin.com/feed/"})

        assert isinstance(outcome, Success)
        assert browser.launches == 2
        assert second.visits == ["https://linkedin.com/feed/"]

    async def test_close(self, make_toolkit):
        toolkit, browser = make_toolkit(logged_in(FakePage()))
        await toolkit.call("linkedin_screenshot", {})
        await toolkit.close()
        assert browser.contexts[0].closed


class TestExhaustiveness:
    def test_every_tool_has_arguments(self):
        assert set(VALID_ARGS) == set(TOOLS)

    @pytest.mark.parametrize("state", ["clear", "login_wall", "browser_down"])
    @pytest.mark.parametrize("tool", sorted(VALID_ARGS))
    async def test_every_call_yields_one_outcome(self, make_toolkit, tool, state):
        if state == "browser_down":
            toolkit, _ = make_toolkit(error=RuntimeError("no browser"))
        elif state == "login_wall":
            page = FakePage(AUTHWALL_URL)
            page.on_goto = lambda p, url: setattr(p, "url", AUTHWALL_URL)
            toolkit, _ = make_toolkit(page)
        else:
            page = logged_in(FakePage("https://www.linkedin.com/feed/"))
            toolkit, _ = make_toolkit(page)

        outcome = await toolkit.call(tool, VALID_ARGS[tool])

        assert isinstance(outcome, (Success, NeedsHuman, Error))
        assert parse_outcome(to_json(outcome)).status == outcome.status
        if state == "browser_down":
            assert isinstance(outcome, Error)
