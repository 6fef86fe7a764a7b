"""
人工介入提示文本

英文为主，浏览器语言区域有对应译文时附在后面。
"""

HINTS: dict[str, dict[str, str]] = {
    "login": {
        "en": "Session expired or login required. Please log in to LinkedIn manually "
              "in the browser, then try again.",
        "pl": "Sesja wygasła lub wymagane jest logowanie. Zaloguj się ręcznie do LinkedIn "
              "w przeglądarce i spróbuj ponownie.",
    },
    "captcha.recaptcha": {
        "en": "Google reCAPTCHA detected - click the checkbox or solve the image puzzle.",
        "pl": "Wykryto Google reCAPTCHA - zaznacz pole wyboru lub rozwiąż zagadkę obrazkową.",
    },
    "captcha.challenge": {
        "en": "LinkedIn security challenge - follow the on-screen instructions.",
        "pl": "Weryfikacja bezpieczeństwa LinkedIn - postępuj zgodnie z instrukcjami na ekranie.",
    },
    "captcha.generic": {
        "en": "Security verification required - please solve it manually.",
        "pl": "Wymagana weryfikacja bezpieczeństwa - rozwiąż ją ręcznie.",
    },
    "rate_limit.invitation": {
        "en": "Weekly invitation limit reached (~100/week). Wait until next week or use InMail.",
        "pl": "Osiągnięto tygodniowy limit zaproszeń (~100/tydzień). Poczekaj do przyszłego tygodnia.",
    },
    "rate_limit.search": {
        "en": "Search limit reached. Try again in a few hours or use different search terms.",
        "pl": "Osiągnięto limit wyszukiwań. Spróbuj za kilka godzin.",
    },
    "rate_limit.commercial": {
        "en": "Commercial use limit reached. This may require LinkedIn Premium.",
        "pl": "Osiągnięto limit użytku komercyjnego. Może być wymagane LinkedIn Premium.",
    },
    "rate_limit.generic": {
        "en": "Rate limit reached. Take a break and try again later (recommended: 1-2 hours).",
        "pl": "Osiągnięto limit. Zrób przerwę i spróbuj ponownie później (zalecane: 1-2 godziny).",
    },
    "unexpected_ui": {
        "en": "Expected element not found: {target}. LinkedIn UI may have changed - check the "
              "screenshot and update the selector table.",
    },
    "send_rejected": {
        "en": "LinkedIn showed an error after sending the invitation: {detail}. Check the "
              "screenshot before retrying; the invitation may not have been sent.",
        "pl": "LinkedIn pokazał błąd po wysłaniu zaproszenia: {detail}. Sprawdź zrzut ekranu "
              "przed ponowną próbą.",
    },
    "driver_error": {
        "en": "The browser reported an error while working on the page ({detail}). Check the "
              "screenshot and retry.",
        "pl": "Przeglądarka zgłosiła błąd podczas pracy na stronie ({detail}). Sprawdź zrzut "
              "ekranu i spróbuj ponownie.",
    },
    "element_not_found": {
        "en": "Could not find {target} on the page. Check the screenshot; the element may be "
              "hidden behind a dialog or the selector table may be outdated.",
    },
    "timeout": {
        "en": "The page did not reach the expected state in time ({detail}). Check the "
              "screenshot and retry once the page has loaded.",
    },
    "navigation_failed": {
        "en": "Navigation failed ({detail}). Check the screenshot and the URL, then retry.",
    },
    "network_error": {
        "en": "Network error while loading the page ({detail}). Check the connection and retry.",
    },
}


def render_hint(key: str, locale: str = "en", **values: str) -> str:
    entry = HINTS[key]
    text = entry["en"].format(**values)
    lang = locale.split("-")[0].lower()
    if lang != "en" and lang in entry:
        text = f"{text} / {entry[lang].format(**values)}"
    return text
