"""Negotiation script completion.

The mapping always carries a ``default`` script and exactly one script per
distinct debt account name. Model-supplied scripts are kept field by field;
anything missing falls back to the default script, and accounts the model
skipped get a short synthesized script naming the account.
"""

from __future__ import annotations

from typing import Any, Iterable

from .coercion import FieldSpec, as_mapping, coerce_fields, coerce_text
from .contracts import MAX_FOLLOW_UP_DAYS, Debt, NegotiationScript
from .repair import ACCOUNT_NAME_MAX_CHARS

DEFAULT_KEY = "default"

DEFAULT_GOAL = "Acknowledge the account calmly and agree a realistic next step in writing."
DEFAULT_SCRIPT_TEXT = "\n".join(
    (
        "Hello, thank you for contacting me about this account.",
        "I want to resolve it and I am reviewing my budget this week.",
        "Please send the current balance and the options available to me in writing.",
    )
)
DEFAULT_WHAT_NOT_TO_SAY: tuple[str, ...] = (
    "I will pay the full balance by tomorrow.",
    "I am refusing to pay.",
    "I have no income at all.",
    "I will borrow money to pay you.",
    "You can take whatever you need from my account.",
)
DEFAULT_FOLLOW_UP_DAYS = 7

DEFAULT_SCRIPT = NegotiationScript(
    goal=DEFAULT_GOAL,
    script=DEFAULT_SCRIPT_TEXT,
    what_not_to_say=DEFAULT_WHAT_NOT_TO_SAY,
    follow_up_window_days=DEFAULT_FOLLOW_UP_DAYS,
)

SCRIPT_FIELDS: dict[str, FieldSpec] = {
    "goal": FieldSpec("text", max_len=300),
    "script": FieldSpec("text", max_len=2000),
    "what_not_to_say": FieldSpec("text_list", max_len=200, max_items=10),
    "follow_up_window_days": FieldSpec("integer", minimum=1, maximum=MAX_FOLLOW_UP_DAYS),
}


def build_script(raw: Any, fallback: NegotiationScript) -> NegotiationScript:
    """Coerce *raw* into a script, taking each missing field from *fallback*."""
    fields = coerce_fields(raw, SCRIPT_FIELDS)
    return NegotiationScript(
        goal=fields["goal"] or fallback.goal,
        script=fields["script"] or fallback.script,
        what_not_to_say=fields["what_not_to_say"] or fallback.what_not_to_say,
        follow_up_window_days=fields["follow_up_window_days"] or fallback.follow_up_window_days,
    )


def synthesize_account_script(debt: Debt, default: NegotiationScript) -> NegotiationScript:
    name = debt.account_name
    if debt.minimum_due is not None:
        middle = (
            f"I can see a minimum due of {debt.minimum_due:,.2f} and I want to agree "
            "a payment I can keep up."
        )
    else:
        middle = "Please confirm the minimum amount due and the date it is needed."
    return NegotiationScript(
        goal=f"Agree a manageable arrangement for {name}.",
        script="\n".join(
            (
                f"Hello, I am contacting you about my {name} account.",
                middle,
                "Please send the details and any options to me in writing.",
            )
        ),
        what_not_to_say=default.what_not_to_say,
        follow_up_window_days=default.follow_up_window_days,
    )


def complete_scripts(raw_scripts: Any, debts: Iterable[Debt]) -> dict[str, NegotiationScript]:
    source: dict[str, Any] = {}
    # Keys are matched the way account names are coerced; an exact key wins.
    for key, value in as_mapping(raw_scripts).items():
        name = coerce_text(key, max_len=ACCOUNT_NAME_MAX_CHARS)
        if name is not None:
            if name not in source or key == name:
                source[name] = value
    default = build_script(source.get(DEFAULT_KEY), DEFAULT_SCRIPT)

    scripts: dict[str, NegotiationScript] = {DEFAULT_KEY: default}
    for debt in debts:
        name = debt.account_name
        if name in scripts:
            continue
        supplied = source.get(name)
        if isinstance(supplied, dict):
            scripts[name] = build_script(supplied, default)
        else:
            scripts[name] = synthesize_account_script(debt, default)
    return scripts
