"""
SCRIPTORIUM - Prompt Templates

Named system/user prompt pairs with ``{placeholder}`` variables, plus the
builders that assemble the commentary and cross-reference requests.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Mapping, Optional, Sequence

from pydantic import BaseModel

from data.schemas import Commentary, CrossReference, OriginalText, payload_markdown


class PromptTemplate(BaseModel):
    """A reusable prompt pair."""

    id: str
    system_prompt: str
    user_prompt: str
    description: Optional[str] = None


class HydratedPrompt(BaseModel):
    """A prompt pair with every placeholder filled in."""

    system_prompt: str
    user_prompt: str


def hydrate_prompt(template: PromptTemplate, variables: Mapping[str, str]) -> HydratedPrompt:
    """Replace every ``{key}`` occurrence in both prompts with its value."""
    system_prompt = template.system_prompt
    user_prompt = template.user_prompt

    for key, value in variables.items():
        placeholder = "{" + key + "}"
        system_prompt = system_prompt.replace(placeholder, value)
        user_prompt = user_prompt.replace(placeholder, value)

    return HydratedPrompt(system_prompt=system_prompt, user_prompt=user_prompt)


DEFAULT_PROMPT = PromptTemplate(
    id="DEFAULT",
    system_prompt="You are a helpful AI assistant.",
    user_prompt="{userInput}",
    description="Default conversation prompt",
)

APOLOGETICS_PROMPT = PromptTemplate(
    id="APOLOGETICS",
    system_prompt=(
        "You are a Reformed Presuppositional Apologetics expert, trained to engage in "
        "theological and philosophical discussions from a Reformed Christian perspective. "
        "Your responses should be grounded in biblical truth and Reformed theology."
    ),
    user_prompt="{userInput}",
    description="Reformed Presuppositional Apologetics expert",
)

BUILTIN_PROMPTS: Mapping[str, PromptTemplate] = MappingProxyType({
    DEFAULT_PROMPT.id: DEFAULT_PROMPT,
    APOLOGETICS_PROMPT.id: APOLOGETICS_PROMPT,
})


COMMENTARY_SYSTEM_PROMPT = """You are a biblical scholar and commentator with expertise in biblical languages, theology, and hermeneutics.

Your commentary should be:
- Precise and concise, no more than 2-3 sentences per section
- Rich in theological insight
- Grounded in original languages
- Connected to the broader biblical narrative
- Driven by bullet points and lists
- Free of cross-reference listings; the reader already sees them. Only explain how the cross references illumine the verse.

Format your response in markdown:
- Use ## for main sections and ### for subsections when needed
- Use **bold** for key theological terms and crucial observations
- Use *italics* for Greek/Hebrew terms (transliteration and original script)
- Use > blockquotes for quotations of verses or prior commentaries
- Use - bullet points for lists and applications
- Keep paragraphs short, with line breaks between sections

<output-format>
## {{section title}}
A concise explanation of the verse's immediate meaning and context.

## Word Studies & Language
ONLY the key terms in the original language with their significance, where a
pastor mentioning them from the pulpit would help the congregation.

.... further sections as needed ....
</output-format>

"Word Studies & Language" is the only required section."""


CROSS_REFERENCE_SYSTEM_PROMPT = """<instructions>
    You will be provided with a Bible verse.
    Provide cross references for the provided Bible verse.
    Provide at most {maxResults} cross reference verses, so ensure they are relevant to the verse and high impact.
</instructions>
<output-format>
    {{book name in english}} {{chapter}}:{{verse}},{{verse}};  // specific verses in a chapter
    OR
    {{book name in english}} {{chapter}}:{{verse}}-{{verse}};  // a range of verses in a chapter
    OR
    a combination of the above separated by semicolons
</output-format>
<output-example>
## Example 1
John 3:16,17; 1 John 3:16-19,22

## Example 2
Genesis 1:1-3; Leviticus 6:1,5,7; Exodus 15:18,21-22
</output-example>"""

CROSS_REFERENCE_PROMPT = PromptTemplate(
    id="CROSS_REFERENCES",
    system_prompt=CROSS_REFERENCE_SYSTEM_PROMPT,
    user_prompt="<verse-reference>{reference}</verse-reference>\n<verse-text>{text}</verse-text>",
    description="Cross reference discovery for a single verse",
)


def build_commentary_prompt(
    verse_ref: str,
    verse_text: str,
    original_text: Optional[OriginalText] = None,
    cross_references: Sequence[CrossReference] = (),
    previous_commentaries: Sequence[Commentary] = (),
    previous_original_texts: Optional[Dict[str, OriginalText]] = None,
    original_query: Optional[str] = None,
) -> str:
    """
    Assemble the user prompt for one verse's commentary.

    Previous commentaries are quoted in the order given so the model can build
    on them instead of repeating them.
    """
    prompt = f'Analyze {verse_ref}: "{verse_text}"'

    if original_text:
        prompt += f'\n\n**Original Language:** {original_text.language_label}\n"{original_text.text}"'

    prompt += " and provide a structured commentary."

    if cross_references:
        prompt += "\n\n**Relevant cross-references:**\n"
        for ref in cross_references:
            prompt += f'\n{ref.reference}: "{ref.text or ""}"'
            if ref.original_text:
                prompt += f'\n{ref.original_text.language_label}: "{ref.original_text.text}"'

    if previous_commentaries:
        originals = previous_original_texts or {}
        prompt += "\n\n**Build upon these previous commentaries and their original language texts:**\n"
        for previous in previous_commentaries:
            prompt += f"\n{previous.verse_ref}:\n{payload_markdown(previous.commentary)}"
            earlier = originals.get(previous.verse_ref)
            if earlier:
                prompt += f'\n{earlier.language_label}: "{earlier.text}"'

    if original_query:
        prompt += (
            f'\n\n**This is part of a study on**: "{original_query}", '
            "and make sure that the commentary is specifically tailored to this query."
        )

    return prompt
