"""System instructions and user messages sent to the remote model.

Every client operation is a pair of texts: a system instruction describing the
role and the exact reply format, and a user message carrying the data.  They
are built here as plain functions so the client stays a thin transport layer
and the wording can be tested without HTTP.

All generated prompt text is requested in ``language`` (see
:attr:`~promptforge.core.config.PromptForgeConfig.output_language`).
"""

from __future__ import annotations

import json

from .models import StructuredPrompt, prompt_to_json

# Field keys requested by the initial generation, in display order.
DEFAULT_FIELDS: tuple[str, ...] = ("subject", "style", "lighting", "composition", "details")

DEFAULT_LABELS: dict[str, str] = {
    "subject": "Subject",
    "style": "Style",
    "lighting": "Lighting",
    "composition": "Composition",
    "details": "Details",
}

_VOCABULARY_EXAMPLES = (
    '"chiaroscuro lighting", "anodized gradients", "volumetric haze", '
    '"retrofuturistic reflections", "subsurface scattering"'
)

_SEGMENT_FORMAT = (
    '- "value": a string in {language} that forms one segment of the prompt.\n'
    '- "alternatives": an array of 4 other strings in {language}, varied and '
    "creative suggestions for this segment."
)

_JSON_ONLY = "Reply ONLY with the complete JSON object. No text before or after it, no ```json markdown."


def field_label(key: str) -> str:
    """Human-readable label of a field key (``"camera_angle"`` -> ``"Camera angle"``)."""
    label = DEFAULT_LABELS.get(key, key.replace("_", " "))
    return label[:1].upper() + label[1:]


def initial_system_instruction(language: str) -> str:
    """Instruction for the first structured prompt built from an idea or image."""
    keys = ", ".join(f'"{key}"' for key in DEFAULT_FIELDS)
    segment_format = _SEGMENT_FORMAT.format(language=language)
    return f"""You are a world-renowned expert in writing prompts for AI image generators (Midjourney, DALL-E, etc.). Your goal is to turn the user's idea, given as text, an image, or both, into an extremely rich, precise and visually evocative prompt, using rarely employed vocabulary.

**IF AN IMAGE IS PROVIDED:**
- Analyse its visual content (subject, style, lighting, composition, mood).
- If text is also provided, use it as an instruction guiding or refining your interpretation of the image.
- Your output MUST be based on the analysis of the image.

**KEY REQUIREMENTS:**
1.  **Output structure:** Reply ONLY with a JSON object. Do NOT return any text outside of this JSON object.
2.  **JSON format:** The object must contain the keys: {keys}.
3.  **Key contents:** For each key, the value must be a JSON object with two keys:
{segment_format}
4.  **Content quality:**
    - **Vocabulary:** Use rich, technical visual terminology (e.g. {_VOCABULARY_EXAMPLES}).
    - **Photographic style:** When the idea lends itself to it, be very specific about the style (e.g. "Editorial photography", "Cinematic shot", "Product photography", "Documentary style").
    - **Mockups:** If the user asks for a mockup (e.g. a t-shirt), use the wording "Full blank [object]" in the subject value. NEVER use the word "mockup".
    - **Completeness:** Make sure the parts cover the subject, the setting, the angle, the colour palette, the lighting and the textures."""


def initial_user_text(user_text: str, has_image: bool) -> str:
    """Text part of the initial request; wording depends on what was supplied."""
    idea = user_text.strip()
    if has_image:
        if idea:
            return (
                "Based on the provided image, generate a structured prompt that "
                f'incorporates the following idea: "{idea}".'
            )
        return "Analyse the provided image and generate a detailed structured prompt that captures its essence."
    return f'Develop this simple idea into a structured prompt for an image generator: "{idea}"'


def alternatives_system_instruction(language: str) -> str:
    return (
        "You are a creative assistant, expert in visual vocabulary for generative AI. "
        "Based on the category and value provided, generate 4 creative and technically "
        "precise alternatives. Use rich, evocative vocabulary (e.g. "
        '"chiaroscuro lighting", "volumetric haze", "cinematic style"). '
        'Reply ONLY with a JSON object containing the key "alternatives", which is an '
        f"array of 4 strings in {language}. Do not provide any extra text or formatting."
    )


def alternatives_user_message(category: str, current_value: str) -> str:
    return f'Category: "{category}", Current value: "{current_value}"'


def custom_alternatives_system_instruction(language: str) -> str:
    return (
        "You are a creative assistant, expert in visual vocabulary for generative AI. "
        'Reply ONLY with a JSON object containing the key "alternatives", which is an '
        f"array of 4 strings in {language}. Do not provide any extra text or formatting."
    )


def custom_alternatives_user_message(
    category: str, user_query: str, existing_alternatives: list[str]
) -> str:
    existing = json.dumps(existing_alternatives, ensure_ascii=False)
    return (
        f'For the prompt category "{category}", generate 4 new alternative suggestions '
        f'based on the following user request: "{user_query}". Use rich, evocative '
        f"vocabulary. Avoid repeating the following existing suggestions: {existing}."
    )


def improve_system_instruction(language: str) -> str:
    """Instruction for rewriting every field while keeping the key set."""
    return f"""You are an expert in art and prompt writing. Your task is to rewrite and enrich the JSON prompt provided.
1.  **Keep the structure:** The output JSON must have exactly the same keys as the input JSON.
2.  **Keep the sub-structures:** Each key must point to an object with "value" (string) and "alternatives" (array of 4 strings).
3.  **Improve the content:** Replace the "value" strings with more evocative versions, written in {language}. Generate 4 new "alternatives" for each category, related to the new "value".
4.  **Output format:** {_JSON_ONLY}
5.  **KEY ORDER:** The output JSON must keep the SAME key order as the input JSON."""


def improve_user_message(current_prompt: StructuredPrompt) -> str:
    return (
        "Here is a structured prompt for an image generator. Improve it by making it more "
        "creative, detailed and poetic, while strictly respecting its original JSON "
        f"structure. Current prompt: {prompt_to_json(current_prompt)}"
    )


def edit_system_instruction(language: str) -> str:
    """Instruction for applying a user request to the whole prompt."""
    return f"""You are an expert in prompt writing. Modify the JSON prompt provided by following the user's instruction.
1.  **Apply the change:** Apply the instruction consistently to every relevant part of the prompt.
2.  **Keep the structure:** The output JSON must have exactly the same keys as the input JSON.
3.  **Update the content:** Change the "value" strings, written in {language}, to reflect the request. Generate 4 new relevant "alternatives" for each modified category.
4.  **Output format:** {_JSON_ONLY}
5.  **KEY ORDER:** The output JSON must keep the SAME key order as the input JSON."""


def edit_user_message(current_prompt: StructuredPrompt, instruction: str) -> str:
    return (
        f'User instruction: "{instruction}". '
        f"JSON prompt to modify: {prompt_to_json(current_prompt)}"
    )


def translate_system_instruction(source_language: str) -> str:
    return (
        f"You are an expert translator. Translate the given text from {source_language} "
        "to English. Reply ONLY with the English translation, nothing else."
    )


def new_field_system_instruction(language: str) -> str:
    """Instruction for creating one segment for a field the user adds."""
    segment_format = _SEGMENT_FORMAT.format(language=language)
    return f"""You are an expert in prompt writing. Your task is to create a prompt segment for a new category.
1.  **Analyse the existing prompt** to understand the overall context.
2.  **Generate relevant content** for the requested new category.
3.  **Output structure:** Reply ONLY with a JSON object. Do NOT return any text outside of this object.
4.  **JSON format:** The object must contain two keys:
{segment_format}
5.  **No Markdown:** The JSON must not be wrapped in ```json code blocks."""


def new_field_user_message(current_prompt: StructuredPrompt, field_name: str) -> str:
    return (
        f"Current structured prompt: {prompt_to_json(current_prompt)}.\n"
        f'The user wants to add a new category named: "{field_name}".\n'
        "Generate a relevant value and 4 alternatives for this new category, "
        "consistent with the rest of the prompt."
    )
