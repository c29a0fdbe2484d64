"""Prompts sent to the translation model."""

from typing import Mapping, Optional

QUOTE_PLACEHOLDER = '@@QUOTE@@'

_SYSTEM_PROMPT = """\
# LANGFY TRANSLATION AGENT

You are an expert multilingual translator specializing in business, technical and \
software localization. Deliver contextually precise translations that preserve \
meaning, formatting and professional standards.

## CONTEXT
{context_block}

## RULES
- Preserve ALL formatting: HTML tags, Markdown syntax, placeholders such as `{{variable}}`, `%s`, `:attribute`.
- Tokens shaped like `__PH0__` are placeholders. Copy them unchanged.
- Keep code elements, number formats, dates and technical identifiers unchanged.
- Preserve line breaks and structural spacing.
- Use natural, consistent terminology in the target language.

## OUTPUT FORMAT
Reply with a single JSON object. Its keys are exactly the keys you were given and \
its values are the translations. No explanations.
"""

_WITH_CONTEXT = """\
SYSTEM CONTEXT PROVIDED:

<context>
{context}
</context>

Identify the domain, target audience and formality level before translating."""

_WITHOUT_CONTEXT = (
    "NO SYSTEM CONTEXT PROVIDED. Apply standard business formality and technical "
    "precision, inferring context from the strings themselves."
)


def system_prompt(context: Optional[str] = None) -> str:
    """Build the system prompt, embedding the project ``context`` when given."""
    if context and context.strip():
        block = _WITH_CONTEXT.format(context=context.strip())
    else:
        block = _WITHOUT_CONTEXT
    return _SYSTEM_PROMPT.format(context_block=block)


def user_prompt(strings: Mapping[str, str], source: str, target: str) -> str:
    """List the strings to translate, one ``key: "value"`` per line."""
    lines = '\n'.join(f'{key}: "{value}"' for key, value in strings.items())
    return (
        f"Translate the following strings from {source} to {target}. "
        f"Keep the original format and preserve any HTML or placeholders. "
        f"Note: {QUOTE_PLACEHOLDER} represents double quotes in the original text.\n\n"
        f"{lines}"
    )
