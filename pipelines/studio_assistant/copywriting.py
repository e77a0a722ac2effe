"""Short marketing copy generated by the LLM.

Plain-text helpers used by the owner tools: a one-sentence service
description and a social media post. Image generation is not done here.
"""

from core.llm_client import LLMClient
from core.logger import get_logger

logger = get_logger(__name__)

COPYWRITER_PROMPT = "You write concise, friendly marketing copy for wellness and fitness businesses."


def generate_description(llm_client: LLMClient, service_name: str, business_type: str) -> str:
    """
    One-sentence description for a service.

    Returns:
        The description, or "" if generation failed (the form stays usable).
    """
    prompt = (
        f'Write a brief, appealing one-sentence description for a service called '
        f'"{service_name}" at a {business_type}.'
    )
    try:
        return llm_client.generate(
            prompt=prompt,
            system_prompt=COPYWRITER_PROMPT,
            temperature=0.7,
            max_tokens=120,
            metadata={"task": "service_description"},
        ).strip()
    except Exception as e:
        logger.error(f"Error generating description for '{service_name}': {e}")
        return ""


def generate_post_text(
    llm_client: LLMClient,
    business_type: str,
    platform: str,
    tone: str,
) -> str:
    """
    Social media post text with hashtags.

    Args:
        llm_client: LLM client.
        business_type: e.g. "Yoga Studio".
        platform: "Instagram", "Facebook" or "Twitter".
        tone: "Promotional", "Informative" or "Engaging".

    Returns:
        Post text.

    Raises:
        RuntimeError: If generation fails.
    """
    prompt = (
        f"Create a short, engaging social media post for a {business_type} to be "
        f"published on {platform}. The tone should be {tone}. Include relevant hashtags."
    )
    try:
        text = llm_client.generate(
            prompt=prompt,
            system_prompt=COPYWRITER_PROMPT,
            temperature=0.8,
            max_tokens=300,
            metadata={"task": "marketing_post", "platform": platform},
        )
    except Exception as e:
        logger.exception("Error generating marketing post")
        raise RuntimeError("Failed to generate marketing post. Please try again later.") from e
    return text.strip()
