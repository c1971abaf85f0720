# odesa/service/story_service.py
import logging
import re
from typing import List, Optional, Tuple

import openai
from openai import AsyncOpenAI
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from odesa.core.config import Settings
from odesa.models.generated import StoryPreferences

logger = logging.getLogger(__name__)

LANDMARK_CONTEXT = {
    "Potemkin Steps": {
        "keywords": ["iconic stairs", "historic steps", "panoramic view", "architectural marvel"],
        "moods": {"romantic": "sunset views", "adventurous": "climbing challenge",
                  "cultural": "historical significance"},
    },
    "Opera House": {
        "keywords": ["baroque architecture", "cultural palace", "elegant evening", "artistic heritage"],
        "moods": {"romantic": "elegant date night", "cultural": "opera performance",
                  "sophisticated": "architectural beauty"},
    },
    "Deribasovskaya Street": {
        "keywords": ["pedestrian boulevard", "street performers", "cafes", "shopping", "vibrant atmosphere"],
        "moods": {"casual": "strolling and people watching", "social": "street cafe culture",
                  "energetic": "bustling street life"},
    },
    "Arcadia Beach": {
        "keywords": ["Black Sea coastline", "beach clubs", "summer vibes", "seaside restaurants"],
        "moods": {"relaxed": "beach day", "party": "nightclub scene", "romantic": "seaside sunset"},
    },
    "City Garden": {
        "keywords": ["green oasis", "peaceful walks", "historic park", "fountains"],
        "moods": {"peaceful": "quiet reflection", "romantic": "garden stroll", "family": "picnic spot"},
    },
}

MOOD_PROMPTS = {
    "happy": "Create an upbeat, joyful story that captures the excitement and happiness of discovering this location",
    "adventurous": "Write an exciting, adventurous story that emphasizes exploration, discovery, and the thrill of travel",
    "romantic": "Craft a romantic, intimate story that highlights the beauty and charm perfect for couples",
    "cultural": "Develop a culturally rich story that showcases the history, traditions, and local culture",
    "peaceful": "Write a serene, contemplative story that emphasizes tranquility and personal reflection",
    "energetic": "Create a vibrant, dynamic story that captures the energy and liveliness of the location",
}

STYLE_PROMPTS = {
    "casual": "Write in a friendly, conversational tone as if talking to a close friend",
    "poetic": "Use beautiful, lyrical language with metaphors and imagery",
    "humorous": "Include light humor and witty observations while staying respectful",
    "inspirational": "Create an uplifting, motivational tone that inspires others to travel",
}

FALLBACK_STORIES = {
    "happy": "Just spent the most amazing day exploring {location} in beautiful Odesa! This coastal city "
             "never fails to surprise me with its stunning architecture and warm hospitality.",
    "romantic": "{location} in Odesa provided the perfect romantic backdrop today. There's something magical "
                "about this Black Sea coastal city that makes every moment feel special.",
    "adventurous": "Adventure called, and {location} in Odesa answered! Exploring this historic Ukrainian "
                   "port city is always an adventure filled with discoveries.",
    "cultural": "Immersing myself in the rich cultural heritage at {location} today. Odesa's multicultural "
                "history comes alive in every corner of this magnificent city.",
}

BASE_HASHTAGS = ["odesa", "ukraine", "travel", "blacksea", "explore", "wanderlust"]
MOOD_HASHTAGS = {
    "happy": ["happiness", "joy", "amazing", "beautiful"],
    "romantic": ["romantic", "love", "sunset", "beautiful"],
    "adventurous": ["adventure", "explore", "discovery", "exciting"],
    "cultural": ["culture", "history", "heritage", "architecture"],
}


class StoryPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str = Field(..., min_length=1, max_length=120)
    story: str = Field(..., min_length=1)
    instagram_caption: str = Field(..., min_length=1)
    hashtags: List[str] = Field(..., min_length=1)


def fallback_hashtags(location: str, mood: str, limit: int = 10) -> List[str]:
    tags = BASE_HASHTAGS + [re.sub(r"[^a-z0-9]", "", location.lower())]
    tags += MOOD_HASHTAGS.get(mood, ["travel", "amazing"])
    unique = list(dict.fromkeys(t for t in tags if t))
    return unique[:limit]


def fallback_story(location: str, mood: str, style: str, limit: int = 10) -> dict:
    template = FALLBACK_STORIES.get(mood, "Exploring the beauty of {location} in Odesa, Ukraine.")
    return {
        "title": f"Discovering {location}",
        "story": template.format(location=location),
        "instagramCaption": f"Another amazing day in Odesa! {location} was absolutely incredible. #OdesaLife #Ukraine",
        "hashtags": fallback_hashtags(location, mood, limit),
        "mood": mood,
        "style": style,
    }


def build_prompt(
    location: str, mood: str, style: str, user_context: Optional[str], prefs: StoryPreferences
) -> str:
    context = LANDMARK_CONTEXT.get(location, {"keywords": [location], "moods": {mood: f"exploring {location}"}})
    lines = [
        f"Create a personalized travel story for Instagram about visiting {location} in Odesa, Ukraine.",
        "",
        f"LOCATION CONTEXT: {location}",
        f"Keywords to include: {', '.join(context['keywords'])}",
        f"Specific mood context: {context['moods'].get(mood, 'exploring this beautiful location')}",
        "",
        f"MOOD: {mood} - {MOOD_PROMPTS.get(mood, 'Create an engaging story')}",
        f"STYLE: {style} - {STYLE_PROMPTS.get(style, 'Use a natural, engaging tone')}",
    ]
    if user_context:
        lines.append(f"PERSONAL CONTEXT: Include these personal details naturally: {user_context}")
    lines += [
        "",
        "HASHTAG REQUIREMENTS:",
        f"- Generate {prefs.maxHashtags} relevant hashtags",
        f"- Style: {prefs.preferredHashtagStyle} (trendy = current popular tags, "
        "classic = timeless travel tags, niche = specific location tags)",
        "- Include location-specific tags for Odesa and Ukraine",
        "",
        "Return a JSON object with: title (max 60 chars), story (200-400 words), "
        "instagram_caption (max 150 words), hashtags (array of strings without #).",
    ]
    return "\n".join(lines)


class StoryService:
    """Travel story generation. Never fails: anything unusable becomes the fallback story."""

    def __init__(self, client: Optional[AsyncOpenAI] = None, model: str = "gpt-4o"):
        self.client = client
        self.model = model

    @classmethod
    def from_settings(cls, settings: Settings) -> "StoryService":
        client = AsyncOpenAI(api_key=settings.OPENAI_API_KEY) if settings.ai_enabled else None
        return cls(client, settings.OPENAI_MODEL)

    async def generate(
        self,
        location: str,
        mood: Optional[str] = None,
        style: Optional[str] = None,
        user_context: Optional[str] = None,
        prefs: Optional[StoryPreferences] = None,
    ) -> Tuple[dict, bool]:
        """Returns (story, generated); generated is False for the fallback story."""
        prefs = prefs or StoryPreferences(userId="")
        mood = mood or prefs.defaultMood
        style = style or prefs.defaultStyle
        limit = prefs.maxHashtags

        if self.client is None:
            return fallback_story(location, mood, style, limit), False

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {
                        "role": "system",
                        "content": "You are a creative travel storyteller specializing in Odesa, Ukraine. "
                                   "You create engaging, authentic travel stories that capture the essence "
                                   "of this Black Sea coastal city.",
                    },
                    {"role": "user", "content": build_prompt(location, mood, style, user_context, prefs)},
                ],
                response_format={"type": "json_object"},
                max_tokens=1000,
            )
            payload = StoryPayload.model_validate_json(response.choices[0].message.content or "")
        except (openai.OpenAIError, ValidationError) as e:
            logger.warning("Story generation for %s fell back: %s", location, e)
            return fallback_story(location, mood, style, limit), False

        hashtags = [h.lstrip("#") for h in payload.hashtags if h.strip("#")]
        return {
            "title": payload.title,
            "story": payload.story,
            "instagramCaption": payload.instagram_caption,
            "hashtags": hashtags[:limit] or fallback_hashtags(location, mood, limit),
            "mood": mood,
            "style": style,
        }, True
