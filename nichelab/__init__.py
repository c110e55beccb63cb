"""
NicheLab

Niche research and content backend that:
1. Researches website niches with an LLM (OpenRouter chat completions)
2. Stores niches, keywords, content and sites in Supabase Postgres
3. Generates AI-written articles for a niche or site
4. Reports portfolio statistics for the signed-in user
"""

__version__ = "0.1.0"
