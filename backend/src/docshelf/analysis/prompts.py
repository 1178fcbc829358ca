"""Prompt templates for document classification."""

CLASSIFIER_INSTRUCTIONS = """You are a document analyzer that examines uploaded documents and provides:

1. A suggested title (concise, descriptive, max 100 characters)
2. A short description (1-2 sentences summarizing the content)
3. Relevant tags (up to 5 tags for categorization)
4. A brief summary (2-3 paragraphs capturing key points)
5. A sensitivity classification:
   - "safe": No sensitive information detected
   - "maybe_sensitive": Contains potentially sensitive information (personal data, financial info, etc.)
   - "sensitive": Contains highly sensitive information (passwords, medical records, confidential business data, etc.)

For sensitivity, err on the side of caution: if in doubt, classify as "maybe_sensitive".

If the document is an image, describe what you see and classify accordingly.
If the document content cannot be extracted or is empty, provide reasonable defaults based on the filename.

Return ONLY a JSON object with exactly these keys:
{
  "title": string,
  "description": string,
  "tags": [string],
  "summary": string,
  "sensitivity": "safe" | "maybe_sensitive" | "sensitive"
}
No markdown. No explanations."""

TEXT_ANALYSIS_USER = """Analyze the following document content. Here is some context:

- Original filename: {{original_name}}
- File type: {{mime_type}}
- File size: {{formatted_size}}

Document content:
---
{{content}}
---

Please provide:
1. A suggested title
2. A short description
3. Relevant tags (up to 5)
4. A brief summary
5. A sensitivity classification (safe, maybe_sensitive, or sensitive)"""

ATTACHMENT_ANALYSIS_USER = """Analyze the attached document. Here is some context:

- Original filename: {{original_name}}
- File type: {{mime_type}}
- File size: {{formatted_size}}

Please provide:
1. A suggested title
2. A short description
3. Relevant tags (up to 5)
4. A brief summary
5. A sensitivity classification (safe, maybe_sensitive, or sensitive)"""


def build_text_analysis_prompt(
    original_name: str,
    mime_type: str,
    formatted_size: str,
    content: str,
) -> str:
    """Build the prompt for a text document with its (truncated) content inlined.

    Args:
        original_name: Filename as uploaded
        mime_type: Declared media type
        formatted_size: Human readable size (e.g. '1.5 KB')
        content: Document text, already truncated to the character budget

    Returns:
        User prompt string
    """
    prompt = TEXT_ANALYSIS_USER.replace("{{original_name}}", original_name)
    prompt = prompt.replace("{{mime_type}}", mime_type)
    prompt = prompt.replace("{{formatted_size}}", formatted_size)
    # content last so placeholders inside the document text stay untouched
    return prompt.replace("{{content}}", content)


def build_attachment_analysis_prompt(
    original_name: str,
    mime_type: str,
    formatted_size: str,
) -> str:
    """Build the context prompt sent alongside a binary attachment."""
    prompt = ATTACHMENT_ANALYSIS_USER.replace("{{original_name}}", original_name)
    prompt = prompt.replace("{{mime_type}}", mime_type)
    return prompt.replace("{{formatted_size}}", formatted_size)
