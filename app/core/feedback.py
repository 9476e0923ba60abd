"""
Motivational feedback shown on the progress dashboard.

Selection is a pure function of the month's metrics (or their absence), the
number of months with a progress photo, and the selected month/year.
"""
from typing import Any, Mapping

from app.core.parsing import fixed1, float_or_zero

# Index = number of photos; the last entry covers 12 or more.
PHOTO_COUNT_FEEDBACK = (
    "📸 Start your journey! Upload your first progress photo to follow your physical evolution.",
    "🎯 Great start! You took the first step. Keep sending monthly photos to see your transformation!",
    "💪 Congratulations on your consistency! Two photos already show your commitment. Keep it up!",
    "🔥 You're on the right track! Three months of records show your dedication. The transformation is happening!",
    "⭐ Incredible! Four months of recorded progress. Your discipline is inspiring!",
    "🚀 Five months of evolution! You're building a solid history. Stay focused!",
    "🎊 Half a year of documented progress! Your transformation is more visible every month!",
    "💎 Seven months of dedication! You're proving that consistency brings results!",
    "🌟 Eight months into the journey! Your evolution is remarkable. Keep recording every win!",
    "🏆 Nine months of transformation! You're close to completing a full year of progress!",
    "✨ Ten months of evolution! Your dedication is exemplary. Keep going!",
    "🎯 Eleven months of progress! You're one step away from a whole year of transformation!",
    "👑 A full year of evolution! You are an example of discipline and dedication. Your transformation is inspiring!",
)

# Placeholders: weight, fat, muscle (one decimal, absolute) and the count-aware nouns.
PERSONALIZED_FEEDBACK = (
    "🎉 Incredible! You lost {weight}kg and reduced {fat}% body fat. With {count} {photos} recorded, your dedication is paying off!",
    "💪 Congratulations! You gained {muscle}kg of muscle mass. Your {count} {photos} show the evolution. Keep up the strength training!",
    "🔥 Excellent progress! With {count} {months} of records, you are {weight}kg lighter and stronger!",
    "⭐ Fantastic! You reduced {fat}% body fat. Your {count} {photos} show your muscle definition improving!",
    "🚀 You're crushing it! {weight}kg lost, {muscle}kg of muscle gained and {count} progress {photos}!",
    "🎯 Goal reached! With {count} {records}, your evolution this month was exceptional. Keep it up!",
    "💎 Incredible transformation! Your numbers and your {count} {photos} show dedication and consistency!",
    "🌟 Consistent progress! You lost {weight}kg while keeping your muscle mass. {count} {photos} of evolution!",
    "🏆 Impressive results! Your body fat dropped {fat}% and you gained {muscle}kg of muscle in {count} {months}!",
    "✨ Remarkable evolution! With {count} {photos} recorded, you are {weight}kg lighter and your definition improved a lot!",
    "🎊 Congratulations on your consistency! {count} {months} of progress show you're on the right path!",
    "💯 Excellent work! You reduced {fat}% body fat and gained strength. {count} {photos} of evolution!",
)

# Below this many photos the early-journey messages win over personalized ones.
PERSONALIZED_MIN_PHOTOS = 3


def _plural(count: int, singular: str, plural: str) -> str:
    return singular if count == 1 else plural


def photo_count_feedback(photo_count: int) -> str:
    index = max(0, min(photo_count, len(PHOTO_COUNT_FEEDBACK) - 1))
    return PHOTO_COUNT_FEEDBACK[index]


def personalized_index(month: int, year: int, photo_count: int) -> int:
    return (month + year + photo_count) % len(PERSONALIZED_FEEDBACK)


def select_feedback(
    metrics: Mapping[str, Any] | None,
    photo_count: int,
    month: int,
    year: int,
) -> str:
    if metrics is None or photo_count < PERSONALIZED_MIN_PHOTOS:
        return photo_count_feedback(photo_count)

    template = PERSONALIZED_FEEDBACK[personalized_index(month, year, photo_count)]
    return template.format(
        weight=fixed1(abs(float_or_zero(metrics.get("weight_lost")))),
        fat=fixed1(abs(float_or_zero(metrics.get("body_fat_reduced")))),
        muscle=fixed1(abs(float_or_zero(metrics.get("muscle_gained")))),
        count=photo_count,
        photos=_plural(photo_count, "photo", "photos"),
        months=_plural(photo_count, "month", "months"),
        records=_plural(photo_count, "record", "records"),
    )
