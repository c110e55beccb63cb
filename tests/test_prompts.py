"""
Prompt Builder and Response Schema Tests

Builders are pure: parameters appear verbatim in the prompt and each use
case carries its own model preset.
"""

import pytest
from pydantic import ValidationError

from nichelab.integrations.openrouter import MODELS
from nichelab.prompts import (
    CONTENT_LENGTHS,
    build_competitive_analysis,
    build_competitor_discovery,
    build_content_gaps,
    build_content_generation,
    build_content_ideas,
    build_keyword_expansion,
    build_niche_research,
    build_reddit_pain_points,
    resolve_word_count,
)
from nichelab.prompts.schemas import (
    ContentIdeasResponse,
    GeneratedArticle,
    KeywordSuggestion,
    NicheResearchResponse,
)


# =============================================================================
# BUILDERS
# =============================================================================

class TestBuilders:
    """Prompt text, shape and options per use case."""

    def test_niche_research(self):
        request = build_niche_research("urban beekeeping")

        assert '"urban beekeeping"' in request.prompt
        assert request.schema is NicheResearchResponse
        assert set(request.shape) == {"niche", "keywords", "opportunities", "painPoints", "contentIdeas"}
        assert request.options.model == MODELS["RESEARCH"]
        assert request.options.temperature == 0.3
        assert request.options.max_tokens == 1500

    def test_competitive_analysis_with_competitors(self):
        request = build_competitive_analysis("urban beekeeping", ["beeculture.com", "honeybeesuite.com"])

        assert "beeculture.com, honeybeesuite.com" in request.prompt

    def test_competitive_analysis_without_competitors(self):
        request = build_competitive_analysis("urban beekeeping")

        assert "Identify and analyze the main competitors" in request.prompt

    def test_competitor_discovery_count(self):
        request = build_competitor_discovery("urban beekeeping", 7)

        assert "top 7 competitors" in request.prompt

    def test_content_gaps_lists_competitors(self):
        request = build_content_gaps("urban beekeeping", ["beeculture.com"])

        assert "beeculture.com" in request.prompt

    def test_keyword_expansion(self):
        request = build_keyword_expansion("raw honey", 15)

        assert 'Generate 15 related keywords' in request.prompt
        assert '"raw honey"' in request.prompt

    def test_keyword_expansion_rejects_non_positive_count(self):
        with pytest.raises(ValueError):
            build_keyword_expansion("raw honey", 0)

    def test_content_generation(self):
        request = build_content_generation(
            "How to Harvest Honey", "urban beekeeping",
            length="long", tone="friendly", content_type="guide", keywords=["honey extractor"],
        )

        assert "How to Harvest Honey" in request.prompt
        assert "urban beekeeping" in request.prompt
        assert "2000 words" in request.prompt
        assert "Tone: friendly" in request.prompt
        assert "honey extractor" in request.prompt
        assert request.schema is GeneratedArticle
        assert request.options.model == MODELS["BALANCED"]
        assert request.options.max_tokens == 2000

    def test_content_ideas(self):
        request = build_content_ideas("urban beekeeping", "video", 24)

        assert "Generate 24 content ideas" in request.prompt
        assert "Content type focus: video" in request.prompt
        assert request.schema is ContentIdeasResponse
        assert request.options.model == MODELS["CREATIVE"]

    def test_reddit_pain_points(self):
        request = build_reddit_pain_points("urban beekeeping")

        assert '"urban beekeeping"' in request.prompt
        assert "painPoints" in request.shape


class TestWordCount:
    """Named and numeric content lengths."""

    @pytest.mark.parametrize("length", sorted(CONTENT_LENGTHS))
    def test_named_lengths(self, length):
        assert resolve_word_count(length) == CONTENT_LENGTHS[length]

    def test_case_insensitive(self):
        assert resolve_word_count(" Short ") == 500

    def test_numeric(self):
        assert resolve_word_count(1500) == 1500
        assert resolve_word_count("750") == 750

    def test_unknown_length(self):
        with pytest.raises(ValueError, match="Unknown content length"):
            resolve_word_count("epic")

    def test_zero_length(self):
        with pytest.raises(ValueError):
            resolve_word_count(0)


# =============================================================================
# SCHEMAS
# =============================================================================

class TestSchemas:
    """Validation of parsed model output."""

    def test_competition_level_is_normalized(self):
        keyword = KeywordSuggestion.model_validate(
            {"name": "raw honey", "searchVolume": 900, "competitionLevel": "LOW"}
        )

        assert keyword.competition_level == "low"
        assert keyword.cpc_value == 0.0

    def test_unknown_competition_level(self):
        with pytest.raises(ValidationError):
            KeywordSuggestion.model_validate(
                {"name": "raw honey", "searchVolume": 900, "competitionLevel": "extreme"}
            )

    def test_negative_search_volume(self):
        with pytest.raises(ValidationError):
            KeywordSuggestion.model_validate(
                {"name": "raw honey", "searchVolume": -1, "competitionLevel": "low"}
            )

    def test_dump_uses_wire_names(self, research_payload):
        model = NicheResearchResponse.model_validate(research_payload)
        dumped = model.model_dump(by_alias=True)

        assert dumped["niche"]["monetizationPotential"] == 72
        assert dumped["keywords"][2]["cpcValue"] == 2.5
        assert "pain_points" not in dumped

    def test_optional_lists_default_empty(self, research_payload):
        for key in ("opportunities", "painPoints", "contentIdeas"):
            del research_payload[key]

        dumped = NicheResearchResponse.model_validate(research_payload).model_dump(by_alias=True)

        assert dumped["opportunities"] == []
        assert dumped["painPoints"] == []
        assert dumped["contentIdeas"] == []

    def test_idea_difficulty_lowercased(self):
        response = ContentIdeasResponse.model_validate(
            {"contentIdeas": [{"title": "Beginner hive setup", "difficulty": "Hard"}]}
        )

        assert response.content_ideas[0].difficulty == "hard"
