"""Tests for LLM-generated marketing copy."""

import pytest

from pipelines.studio_assistant.copywriting import (
    COPYWRITER_PROMPT,
    generate_description,
    generate_post_text,
)


class TestGenerateDescription:

    def test_returns_stripped_text(self, llm_client, fake_provider):
        fake_provider.replies.append("  A calming class for every level.\n")

        text = generate_description(llm_client, "Hatha Yoga", "Yoga Studio")

        assert text == "A calming class for every level."
        call = fake_provider.calls[0]
        assert '"Hatha Yoga"' in call["prompt"]
        assert "Yoga Studio" in call["prompt"]
        assert call["system_prompt"] == COPYWRITER_PROMPT
        assert call["json_mode"] is False

    def test_failure_returns_empty_string(self, llm_client, fake_provider, caplog):
        fake_provider.replies.append(TimeoutError("slow"))
        assert generate_description(llm_client, "Hatha Yoga", "Yoga Studio") == ""
        assert "Hatha Yoga" in caplog.text


class TestGeneratePostText:

    def test_prompt_carries_platform_and_tone(self, llm_client, fake_provider):
        fake_provider.replies.append("New classes this week! #yoga")

        text = generate_post_text(llm_client, "Gym Center", "Instagram", "Promotional")

        assert text == "New classes this week! #yoga"
        prompt = fake_provider.calls[0]["prompt"]
        assert "Gym Center" in prompt
        assert "Instagram" in prompt
        assert "Promotional" in prompt
        assert fake_provider.calls[0]["metadata"] == {"task": "marketing_post", "platform": "Instagram"}

    def test_failure_raises_descriptive_error(self, llm_client, fake_provider):
        fake_provider.replies.append(RuntimeError("quota"))
        with pytest.raises(RuntimeError, match="Failed to generate marketing post"):
            generate_post_text(llm_client, "Gym Center", "Twitter", "Engaging")
