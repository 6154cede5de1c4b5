"""Tiny terminal UI helpers (prompt_toolkit-based).

These prompts collect the fields of an entry draft when they were not given
on the command line. They are kept separate from the CLI so they can be
tested in isolation with a pipe input.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Sequence

from prompt_toolkit import PromptSession
from prompt_toolkit.auto_suggest import AutoSuggest, Suggestion
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.styles import Style
from prompt_toolkit.validation import ValidationError, Validator

from .errors import EntryValidationError
from .ledger import parse_input_amount
from .models import CATEGORIES, EntryDraft

_STYLE = Style.from_dict({"auto-suggestion": "fg:#888888"})


def _session(session: PromptSession | None, **kwargs) -> PromptSession:
    if session is None:
        return PromptSession(**kwargs)
    return PromptSession(
        input=getattr(session, "input", None),
        output=getattr(session, "output", None),
        **kwargs,
    )


def resolve_category(text: str, categories: Sequence[str] = CATEGORIES) -> str | None:
    """Map typed text to a category: exact match first, then the first prefix match.

    Matching ignores case. Returns ``None`` when nothing matches.
    """

    lower = text.strip().lower()
    if not lower:
        return None
    for c in categories:
        if c.lower() == lower:
            return c
    for c in categories:
        if c.lower().startswith(lower):
            return c
    return None


class _PrefixSuggest(AutoSuggest):
    def __init__(self, vocab: Sequence[str]) -> None:
        self._vocab = list(vocab)

    def get_suggestion(self, buffer, document):
        text = document.text
        match = resolve_category(text, self._vocab)
        if match is None or match.lower() == text.lower():
            return None
        return Suggestion(match[len(text) :])


def select_category(
    categories: Sequence[str] = CATEGORIES,
    *,
    default: str = "",
    message: str = "Category: ",
    session: PromptSession | None = None,
) -> str:
    """Prompt for one of ``categories`` with completion and prefix matching.

    Typing a prefix is enough ("sal" selects "Sales"); Tab opens the menu.
    """

    words = list(categories)
    kb = KeyBindings()
    menu_opened = False

    @kb.add("tab", eager=True)
    def _(event) -> None:  # pragma: no cover - integration path
        nonlocal menu_opened
        b = event.app.current_buffer
        match = resolve_category(b.document.text, words)
        if match is not None and len(match) > len(b.document.text):
            b.insert_text(match[len(b.document.text) :])
        elif b.complete_state is None:
            b.start_completion(select_first=True)
            menu_opened = True
        else:
            b.complete_next()

    @kb.add("enter", eager=True)
    def _(event) -> None:  # pragma: no cover - integration path
        b = event.app.current_buffer
        cs = b.complete_state
        if cs is not None and cs.current_completion is not None:
            b.apply_completion(cs.current_completion)
        elif menu_opened and not b.document.text:
            # Completions load asynchronously; commit the first item headlessly.
            b.insert_text(words[0])
        b.validate_and_handle()

    class _CategoryValidator(Validator):
        def validate(self, document) -> None:
            if not document.text.strip() and default:
                return
            if resolve_category(document.text, words) is None:
                raise ValidationError(message=f"Choose one of: {', '.join(words)}")

    result = _session(session, key_bindings=kb).prompt(
        message,
        default=default,
        completer=WordCompleter(words, ignore_case=True, match_middle=True),
        auto_suggest=_PrefixSuggest(words),
        validator=_CategoryValidator(),
        validate_while_typing=False,
        style=_STYLE,
    )
    if not result.strip():
        return default
    return resolve_category(result, words) or default


def prompt_required_text(
    message: str,
    *,
    default: str = "",
    session: PromptSession | None = None,
) -> str:
    class _NonEmpty(Validator):
        def validate(self, document) -> None:
            if not document.text.strip():
                raise ValidationError(message="This field is required")

    return _session(session).prompt(
        message, default=default, validator=_NonEmpty(), validate_while_typing=False
    )


def prompt_amount(
    field: str,
    *,
    default: str = "",
    session: PromptSession | None = None,
) -> str:
    """Prompt for a credit/debit amount; blank means "not set"."""

    class _AmountValidator(Validator):
        def validate(self, document) -> None:
            try:
                parse_input_amount(field, document.text)
            except EntryValidationError as e:
                raise ValidationError(message=str(e)) from None

    return _session(session).prompt(
        f"{field.capitalize()} (blank for none): ",
        default=default,
        validator=_AmountValidator(),
        validate_while_typing=False,
    ).strip()


def _is_blank(v: object) -> bool:
    return v is None or (isinstance(v, str) and not v.strip())


def complete_draft(draft: EntryDraft, *, session: PromptSession | None = None) -> EntryDraft:
    """Prompt for whatever ``draft`` is missing and return the completed draft.

    Company and category are always required. Amounts are prompted only when
    neither is set: credit first, then debit if credit was left blank.
    """

    changes: dict[str, object] = {}
    if not draft.company_name.strip():
        changes["company_name"] = prompt_required_text("Company name: ", session=session)
    if not draft.category.strip():
        changes["category"] = select_category(session=session)
    if _is_blank(draft.credit) and _is_blank(draft.debit):
        credit = prompt_amount("credit", session=session)
        changes["credit"] = credit or None
        if not credit:
            changes["debit"] = prompt_amount("debit", session=session) or None
    return dataclasses.replace(draft, **changes) if changes else draft


__all__ = [
    "complete_draft",
    "prompt_amount",
    "prompt_required_text",
    "resolve_category",
    "select_category",
]
