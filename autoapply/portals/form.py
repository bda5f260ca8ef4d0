"""Probe-then-fill helpers shared by every apply adapter.

All helpers take a Playwright page (or locator) and never raise for a missing
element: absent fields are skipped and reported through the return value.
"""
from __future__ import annotations

from pathlib import Path
from typing import Iterable

from autoapply.log import get_logger
from autoapply.models import ApplicantProfile
from autoapply.portals.questions import Answer, answer_for, is_yes_no_question

log = get_logger(__name__)

DEFAULT_TIMEOUT_MS = 2000


def quoted(text: str) -> str:
    """Double-quoted selector string with backslashes and quotes escaped."""
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def visible(locator, timeout: int = DEFAULT_TIMEOUT_MS) -> bool:
    """Safe visibility check that never throws."""
    try:
        return locator.count() > 0 and locator.first.is_visible(timeout=timeout)
    except Exception:
        return False


def present(page, selectors: str | Iterable[str]) -> bool:
    """True if any selector matches at least one element (visible or not)."""
    if isinstance(selectors, str):
        selectors = (selectors,)
    for sel in selectors:
        try:
            if page.locator(sel).count() > 0:
                return True
        except Exception:
            continue
    return False


def click_first_visible(page, selectors: Iterable[str], *, timeout: int = DEFAULT_TIMEOUT_MS) -> bool:
    """Try clicking the first visible element matching any selector."""
    for sel in selectors:
        try:
            loc = page.locator(sel).first
            if loc.is_visible(timeout=timeout):
                loc.click()
                return True
        except Exception:
            continue
    return False


def fill_first(page, selectors: Iterable[str], value: str | None) -> bool:
    """Fill the first visible match; no value or no match leaves the form untouched."""
    if not value:
        return False
    for sel in selectors:
        loc = page.locator(sel)
        if visible(loc):
            loc.first.fill(str(value))
            return True
    return False


def upload_first(page, selectors: Iterable[str], path: str | None) -> bool:
    """Attach a file to the first matching input; file inputs are often hidden."""
    if not path:
        return False
    if not Path(path).is_file():
        log.warning("Resume %s not found; skipping upload", path)
        return False
    for sel in selectors:
        loc = page.locator(sel)
        try:
            if loc.count() > 0:
                loc.first.set_input_files(str(path))
                return True
        except Exception as exc:
            log.debug("Upload via %s failed: %s", sel, exc)
    return False


def label_text(container, selectors: Iterable[str]) -> str:
    for sel in selectors:
        loc = container.locator(sel)
        try:
            if loc.count() > 0:
                return (loc.first.inner_text() or "").strip()
        except Exception:
            continue
    return ""


def _choose_option(options, answer: Answer, label: str) -> bool:
    """Click the radio/checkbox that matches the answer; returns True if one was clicked."""
    count = options.count()
    if count == 0:
        return False
    wanted = answer.yes
    if wanted is None and answer.text:
        for i in range(count):
            option = options.nth(i)
            if (option.get_attribute("value") or "").strip().lower() == answer.text.lower():
                option.check()
                return True
        wanted = True if is_yes_no_question(label) else None
    if wanted is None:
        return False
    target = "yes" if wanted else "no"
    for i in range(count):
        option = options.nth(i)
        if (option.get_attribute("value") or "").strip().lower() == target:
            option.check()
            return True
    # Unlabelled yes/no pairs are conventionally ordered Yes, No
    index = 0 if wanted else 1
    if index < count:
        options.nth(index).check()
        return True
    return False


def _select(select, answer: Answer) -> bool:
    candidates = [answer.text] if answer.text else []
    if answer.yes is not None:
        candidates.append("Yes" if answer.yes else "No")
    for candidate in candidates:
        for kwargs in ({"label": candidate}, {"value": candidate}):
            try:
                select.select_option(**kwargs, timeout=DEFAULT_TIMEOUT_MS)
                return True
            except Exception:
                continue
    return False


def apply_answer(container, answer: Answer, label: str) -> bool:
    """Put an answer into whatever control the question container holds."""
    radios = container.locator('input[type="radio"]')
    if radios.count() > 0:
        return _choose_option(radios, answer, label)

    select = container.locator("select")
    if select.count() > 0:
        return _select(select.first, answer)

    text = answer.text if answer.text is not None else ("Yes" if answer.yes else "No" if answer.yes is False else None)
    for sel in ('input[type="text"]', 'input[type="number"]', "textarea", "input:not([type])"):
        field = container.locator(sel)
        if field.count() > 0:
            if text is None:
                return False
            field.first.fill(text)
            return True

    checkboxes = container.locator('input[type="checkbox"]')
    if checkboxes.count() > 0 and answer.yes:
        checkboxes.first.check()
        return True
    return False


def answer_questions(
    page,
    container_selector: str,
    label_selectors: Iterable[str],
    profile: ApplicantProfile,
) -> int:
    """Answer every question block on the page; returns how many were filled."""
    label_selectors = tuple(label_selectors)
    answered = 0
    for container in page.locator(container_selector).all():
        label = label_text(container, label_selectors)
        if not label:
            continue
        answer = answer_for(label, profile)
        if answer is None:
            continue
        try:
            if apply_answer(container, answer, label):
                answered += 1
        except Exception as exc:
            log.debug("Could not answer %r: %s", label[:60], exc)
    return answered
