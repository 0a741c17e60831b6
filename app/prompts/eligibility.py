"""
Prompt template for eligibility extraction.

One system prompt (what to extract, what never to infer) and a user
prompt carrying source metadata plus the source text.
"""

from __future__ import annotations

ELIGIBILITY_SYSTEM_PROMPT = (
    "You are an expert case manager who extracts structured eligibility rules "
    "from program documents related to homeless-services and housing assistance. "
    "Given the raw document text, identify only directly-stated eligibility "
    "information. If any field is not explicitly mentioned, return null for "
    "single values or [] for arrays. For genderRestriction, use \"any\" when no "
    "restriction is stated. Do not infer details beyond what is present in the "
    "text. Provide the exact excerpt that states eligibility in rawEligibilityText.\n\n"
    "Output ONLY valid JSON with this schema:\n"
    "{\n"
    '  "programName": "string or null",\n'
    '  "rawEligibilityText": "verbatim excerpt",\n'
    '  "population": ["single_adults|families|youth|veterans|seniors|any", ...],\n'
    '  "genderRestriction": "any|women_only|men_only|non_male|non_female",\n'
    '  "requirements": ["sober|id_required|background_check|income_limit|'
    'must_be_resident|must_be_veteran|must_have_child", ...],\n'
    '  "locationConstraints": ["e.g. Dallas County, TX", ...],\n'
    '  "maxStayDays": integer or null,\n'
    '  "ageRange": {"min": integer or null, "max": integer or null},\n'
    '  "notes": "string"\n'
    "}\n"
)


def format_source_metadata(
    source_type: str,
    file_name: str | None = None,
    title: str | None = None,
    url: str | None = None,
) -> str:
    parts = [f"Source type: {'PDF' if source_type == 'pdf' else 'Web page'}."]
    if file_name:
        parts.append(f"File name: {file_name}")
    if title:
        parts.append(f"Title: {title}")
    if url:
        parts.append(f"URL: {url}")
    return "\n".join(parts)


def build_eligibility_prompt(
    text: str,
    source_type: str,
    *,
    file_name: str | None = None,
    title: str | None = None,
    url: str | None = None,
) -> tuple[str, str]:
    """
    Build the system and user prompts for one extraction call.

    ``text`` must already be truncated to the source cap.

    Returns:
        (system_prompt, user_prompt)
    """
    source_label = "a PDF document" if source_type == "pdf" else "a website page"
    metadata = format_source_metadata(source_type, file_name, title, url)

    user_prompt = (
        f"You are given text extracted from {source_label} describing a program "
        "for homeless-services or housing support.\n\n"
        f"Metadata:\n{metadata}\n\n"
        "Return a JSON object that matches the provided schema. If a field is "
        "missing from the document, set it to null (for single values) or [] "
        "(for arrays). The rawEligibilityText should be the exact excerpt from "
        "the material that contains the eligibility rules.\n\n"
        f'SOURCE_TEXT:\n"""\n{text}\n"""'
    )
    return ELIGIBILITY_SYSTEM_PROMPT, user_prompt
