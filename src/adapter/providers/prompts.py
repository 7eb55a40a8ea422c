"""Prompt templates shared by the LLM-backed content providers"""

from src.domain.generation_config import ArticleLength, GenerationConfig

SECTION_WORDS = {
    ArticleLength.SHORT: "150-250",
    ArticleLength.MEDIUM: "300-400",
    ArticleLength.LONG: "500-600",
}

SECTION_MAX_TOKENS = {
    ArticleLength.SHORT: 800,
    ArticleLength.MEDIUM: 1200,
    ArticleLength.LONG: 1800,
}

OUTLINE_MAX_TOKENS = 1000
TITLE_IDEAS_MAX_TOKENS = 1000
FAQ_MAX_TOKENS = 2000
FAQ_CONTENT_CHARS = 2000

TITLE_IDEAS_TEMPERATURE = 0.8
DEFAULT_TEMPERATURE = 0.7


def title_ideas_prompt(topic: str, count: int) -> str:
    return (
        f'Generate {count} unique and engaging blog post title ideas about "{topic}".\n'
        "The titles should be SEO-friendly, descriptive, and attract readers.\n"
        "Each title should be at least 5 words long and no more than 15 words.\n"
        "Provide each title on a new line without numbering."
    )


def outline_prompt(title: str, config: GenerationConfig) -> str:
    lines = [
        f'Create a detailed outline for an article titled "{title}".',
        f'The article style is "{config.style}" and the tone is "{config.tone}".',
        "Include an introduction, main sections, and a conclusion.",
        f"For a {config.length.value} article, provide an appropriate level of detail.",
        "Return the outline as a list of main section headings, one per line, with no additional explanation.",
    ]
    if config.language.lower() != "english":
        lines.append(f"Write the headings in {config.language}.")
    return "\n".join(lines)


def section_prompt(title: str, section: str, config: GenerationConfig) -> str:
    lines = [
        f'Write content for the section "{section}" of an article titled "{title}".',
        f'The article style is "{config.style}" and the tone is "{config.tone}".',
        f"Write in {config.point_of_view.value} person perspective.",
    ]
    if config.bold_text:
        lines.append("Use markdown **bold** format for important points and key phrases.")
    if config.seo_fix:
        lines.append(
            f'Keep a good keyword density for "{title}" and related terms, without keyword stuffing.'
        )
    if config.language.lower() != "english":
        lines.append(f"Write in {config.language}.")
    lines += [
        "The content should be detailed, informative, and engaging.",
        f"Write approximately {SECTION_WORDS[config.length]} words for this section.",
        "Do not repeat the section heading. Do not mention that you are an AI.",
    ]
    return "\n".join(lines)


def faq_prompt(title: str, content: str, count: int, json_key: str = None) -> str:
    summary = content if len(content) <= FAQ_CONTENT_CHARS else f"{content[:FAQ_CONTENT_CHARS]}..."
    if json_key:
        output = f"Format the response as a JSON object with a '{json_key}' array of objects with 'question' and 'answer' fields."
    else:
        output = "Format the response as a JSON array with 'question' and 'answer' fields."
    return (
        f'Based on the article titled "{title}" with the following content summary:\n\n'
        f"{summary}\n\n"
        f"Generate {count} frequently asked questions (FAQs) with detailed answers that readers might have about this topic.\n"
        "Each question should be specific and directly related to the content.\n"
        "Each answer should be 2-3 sentences long and provide valuable information.\n\n"
        f"{output}"
    )
