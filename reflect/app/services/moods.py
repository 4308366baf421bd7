from __future__ import annotations

from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class Mood:
    id: str
    label: str
    emoji: str
    score: int
    color: str
    prompt: str
    image_query: str

    def as_dict(self) -> dict[str, object]:
        return asdict(self)


MOODS: dict[str, Mood] = {
    "HAPPY": Mood("happy", "Happy", "😊", 8, "amber", "What's making you smile today?", "amber joy"),
    "GRATEFUL": Mood(
        "grateful", "Grateful", "🙏", 9, "rose", "What are you thankful for?", "rose gratitude"
    ),
    "EXCITED": Mood(
        "excited", "Excited", "🤩", 9, "orange", "What are you looking forward to?", "orange celebration"
    ),
    "PEACEFUL": Mood(
        "peaceful", "Peaceful", "😌", 8, "teal", "What brought you peace today?", "teal calm nature"
    ),
    "CALM": Mood("calm", "Calm", "🧘", 7, "sky", "How did you find stillness?", "sky meditation"),
    "CONTENT": Mood(
        "content", "Content", "🙂", 7, "green", "What felt just right today?", "green meadow"
    ),
    "HOPEFUL": Mood(
        "hopeful", "Hopeful", "🌅", 8, "yellow", "What gives you hope?", "yellow sunrise"
    ),
    "NEUTRAL": Mood("neutral", "Neutral", "😐", 5, "gray", "How is your day going?", "gray minimal"),
    "TIRED": Mood("tired", "Tired", "😴", 4, "slate", "What drained your energy?", "slate rest"),
    "CONFUSED": Mood(
        "confused", "Confused", "😕", 4, "violet", "What's on your mind?", "violet question"
    ),
    "SAD": Mood("sad", "Sad", "😢", 3, "indigo", "What's troubling you?", "indigo rain"),
    "ANXIOUS": Mood(
        "anxious", "Anxious", "😰", 3, "purple", "What's causing your worry?", "purple storm"
    ),
    "FRUSTRATED": Mood(
        "frustrated", "Frustrated", "😤", 3, "red", "What's blocking your progress?", "red obstacle"
    ),
    "LONELY": Mood(
        "lonely", "Lonely", "🥺", 2, "blue", "Who would you like to reach out to?", "blue solitude"
    ),
    "ANGRY": Mood("angry", "Angry", "😠", 2, "red", "What's making you upset?", "red fire"),
    "OVERWHELMED": Mood(
        "overwhelmed", "Overwhelmed", "😩", 2, "zinc", "What's weighing on you?", "zinc chaos"
    ),
}


def find_mood(key: str | None) -> Mood | None:
    """Look a mood up by catalogue key, case-insensitively."""

    if not key:
        return None
    return MOODS.get(key.strip().upper())


def get_mood_by_id(mood_id: str | None) -> Mood | None:
    if not mood_id:
        return None
    for mood in MOODS.values():
        if mood.id == mood_id:
            return mood
    return None


__all__ = ["MOODS", "Mood", "find_mood", "get_mood_by_id"]
