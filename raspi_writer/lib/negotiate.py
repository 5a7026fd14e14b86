from __future__ import annotations

import logging

from .errors import InvalidUserURL, UserDeclinedPrompt
from .prompt import Operator
from .releases import ResolutionResult, Resolved, Skipped, UserProvided

logger = logging.getLogger(__name__)

CHOICE_CUSTOM = "custom"
CHOICE_FALLBACK = "fallback"
CHOICE_SKIP = "skip"

# One retry after the first bad URL, then the entry is skipped.
URL_PROMPT_TRIES = 2


def validate_url(url: str) -> str:
    u = (url or "").strip()
    if not (u.startswith("http://") or u.startswith("https://")) or u in {"http://", "https://"}:
        raise InvalidUserURL(f"not an http(s) URL: {url!r}")
    return u


def _ask_custom_url(operator: Operator, software_name: str) -> str:
    for attempt in range(1, URL_PROMPT_TRIES + 1):
        raw = operator.input_text(f"Enter the download URL for {software_name} (http:// or https://)")
        if raw is None:
            raise UserDeclinedPrompt("custom URL prompt cancelled")
        try:
            return validate_url(raw)
        except InvalidUserURL as e:
            logger.warning("Rejected URL for %s (try %d/%d): %s", software_name, attempt, URL_PROMPT_TRIES, e)
            if attempt < URL_PROMPT_TRIES:
                operator.message("Invalid URL. It must start with http:// or https://. Try again.")
            else:
                operator.message(f"Invalid URL again. Skipping {software_name}.")
    raise InvalidUserURL(f"no valid URL given for {software_name}")


def negotiate_fallback(
    operator: Operator,
    software_name: str,
    source_description: str,
    fallback_url: str,
    reason: str = "",
) -> ResolutionResult:
    """Ask the operator how to proceed after automatic resolution failed.

    The fallback URL is only ever used when the operator picks it.
    """

    text = f"Could not determine the latest download for {software_name} from {source_description}."
    if reason:
        text += f"\nReason: {reason}."
    text += "\n\nHow do you want to continue?"

    items = [(CHOICE_CUSTOM, "Enter a download URL")]
    if fallback_url:
        items.append((CHOICE_FALLBACK, f"Use {fallback_url}"))
    items.append((CHOICE_SKIP, f"Skip {software_name}"))

    choice = operator.menu(f"{software_name}: download not found", text, items)
    logger.info("Fallback choice for %s: %s", software_name, choice or "cancelled")

    if choice == CHOICE_FALLBACK and fallback_url:
        return Resolved(url=fallback_url)

    if choice == CHOICE_CUSTOM:
        try:
            return UserProvided(url=_ask_custom_url(operator, software_name))
        except UserDeclinedPrompt:
            return Skipped(reason="operator cancelled URL entry")
        except InvalidUserURL:
            return Skipped(reason="invalid URL")

    if choice is None:
        return Skipped(reason="operator cancelled")
    return Skipped(reason="operator chose skip")
